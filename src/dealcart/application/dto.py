"""Results and views handed from the use cases to a front end.

None of these hold domain objects except the payment session, which the
front end passes back to the poller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from dealcart.domain.model.cart import CartSession
from dealcart.domain.model.payment import PaymentSession

# --- Cart mutations -----------------------------------------------------------

NOT_LOGGED_IN = "not_logged_in"
DIFFERENT_RESTAURANT = "different_restaurant"
INVALID_DEAL = "invalid_deal"
INVALID_QUANTITY = "invalid_quantity"
SERVICE_ERROR = "service_error"


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a cart mutation.

    ``different_restaurant`` is not a failure of the call: it asks the
    caller to confirm clearing the cart before retrying.
    """

    ok: bool
    reason: str | None = None

    @staticmethod
    def success() -> MutationResult:
        return MutationResult(ok=True)

    @staticmethod
    def rejected(reason: str) -> MutationResult:
        return MutationResult(ok=False, reason=reason)


# --- Checkout -----------------------------------------------------------------


@dataclass(frozen=True)
class CheckoutRequest:
    """Input to the checkout endpoint, already mapped to the wire vocabulary."""

    customer_id: str
    service_type: str | None
    preferred_datetime: datetime | None

    @property
    def preferred_datetime_iso(self) -> str | None:
        """UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
        if self.preferred_datetime is None:
            return None
        utc = self.preferred_datetime.astimezone(timezone.utc)
        return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CheckoutOutcomeKind(Enum):
    REJECTED = "rejected"  # a local precondition failed
    FAILED = "failed"  # the service refused or could not be reached
    REDIRECT = "redirect"  # external payment page must be opened
    POLL = "poll"  # settle by polling the payment status


@dataclass(frozen=True)
class CheckoutOutcome:
    kind: CheckoutOutcomeKind
    payment: PaymentSession | None = None
    reason: str | None = None
    message: str | None = None


# --- Display ------------------------------------------------------------------


@dataclass(frozen=True)
class CartLineView:
    deal_id: str
    deal_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "RM15.00"
    line_total: str


@dataclass(frozen=True)
class CartView:
    """Output: the cart as displayed to the user."""

    business_id: str | None
    business_name: str
    items: list[CartLineView]
    total: str
    original: str
    savings: str

    @staticmethod
    def of(session: CartSession) -> CartView:
        totals = session.totals()
        return CartView(
            business_id=session.business_id,
            business_name=session.business_name,
            items=[
                CartLineView(
                    deal_id=item.id,
                    deal_name=item.deal_name,
                    quantity=item.quantity,
                    unit_price=str(item.deal_total),
                    line_total=str(item.line_total),
                )
                for item in session.items
            ],
            total=str(totals.total),
            original=str(totals.original),
            savings=str(totals.savings),
        )
