"""The authenticated customer, as seen by the cart."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Customer:
    id: str
    phone: str | None = None
    name: str | None = None

    @property
    def has_phone(self) -> bool:
        return bool(self.phone and self.phone.strip())
