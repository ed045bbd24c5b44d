"""Abstract client for the remote cart and checkout service.

Defined in the domain layer so the domain never depends on
infrastructure.  The HTTP implementation lives in the infrastructure
layer; tests use an in-memory fake.

Responses are returned as decoded JSON mappings.  The service does not
guarantee its envelope shape (payloads may sit at the top level, under
``data`` or under ``data.data``), so callers unwrap them explicitly.
Every method raises ``CartServiceError`` on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class CartService(ABC):

    @abstractmethod
    async def get_cart(self, customer_id: str | None) -> dict[str, Any]:
        """Return the customer's cart: ``{items|deals: [...], cart: {business_id}}``."""

    @abstractmethod
    async def add(self, customer_id: str, deal_id: str) -> dict[str, Any]:
        """Add one unit of a deal to the cart."""

    @abstractmethod
    async def remove(self, customer_id: str, deal_id: str) -> dict[str, Any]:
        """Remove a deal line from the cart."""

    @abstractmethod
    async def update_quantity(
        self, customer_id: str, deal_id: str, quantity: int
    ) -> dict[str, Any]:
        """Set a line's quantity; zero removes it."""

    @abstractmethod
    async def clear(self, customer_id: str) -> dict[str, Any]:
        """Empty the cart."""

    @abstractmethod
    async def checkout(
        self,
        customer_id: str,
        service_type: str | None,
        preferred_datetime: str | None,
    ) -> dict[str, Any]:
        """Start payment: ``{success, payment_url?, payment_id?, message?}``."""

    @abstractmethod
    async def payment_status(self, payment_id: str | None) -> dict[str, Any]:
        """Return ``{status: pending|paid|failed|cancelled}`` for a payment."""
