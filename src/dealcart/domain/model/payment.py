"""Payment session: the short-lived record of one checkout's settlement."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs, urlsplit


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING

    @classmethod
    def parse(cls, raw: object) -> PaymentStatus:
        """Read a status from the service; anything unrecognised is still pending."""
        if isinstance(raw, str):
            for member in cls:
                if member.value == raw.strip().lower():
                    return member
        return cls.PENDING


@dataclass
class PaymentSession:
    """Created when checkout returns a payment identifier.

    Not persisted: it lives as long as the poller observing it.
    """

    payment_id: str | None
    payment_url: str | None = None
    status: PaymentStatus = PaymentStatus.PENDING

    @property
    def can_poll(self) -> bool:
        return bool(self.payment_id)


RETURN_URL_MARKER = "cart-payment"


def is_payment_return_url(url: str | None) -> bool:
    """True when the payment page has redirected back to the storefront."""
    if not url:
        return False
    return RETURN_URL_MARKER in url


def payment_id_from_return_url(url: str | None) -> str | None:
    if not url or not isinstance(url, str):
        return None
    query = parse_qs(urlsplit(url).query)
    for key, values in query.items():
        if key.lower() == "payment_id" and values and values[0]:
            return values[0]
    return None
