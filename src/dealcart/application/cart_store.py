"""Application service: the Cart Store.

Owns the local CartSession, the client-side mirror of the server cart,
and every operation that mutates it.  Nothing outside this class writes
to the session; readers get immutable snapshots.

Mutation discipline:
- add, remove and quantity updates are pessimistic: the server
  acknowledges first, then the local session changes.
- clear is optimistic: the session empties immediately and a failed
  server call is repaired by reloading from the server.

Every load and mutation holds one lock, so at most one call per cart is
in flight and responses are applied in the order the customer acted.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from dealcart.application.dto import (
    DIFFERENT_RESTAURANT,
    INVALID_DEAL,
    INVALID_QUANTITY,
    NOT_LOGGED_IN,
    SERVICE_ERROR,
    CartView,
    MutationResult,
)
from dealcart.application.envelope import unwrap
from dealcart.application.ports import Notifier
from dealcart.domain.exceptions import CartServiceError, DomainException, ValidationError
from dealcart.domain.model.cart import CartItem, CartSession, CartTotals
from dealcart.domain.model.deal import normalize_deal, parse_cart_payload
from dealcart.domain.repository.cart_service import CartService
from dealcart.domain.repository.session_provider import SessionProvider

logger = logging.getLogger(__name__)

ERROR_TITLE = "Error"


class CartStore:

    def __init__(
        self,
        cart_service: CartService,
        session: SessionProvider,
        notifier: Notifier,
    ) -> None:
        self._cart_service = cart_service
        self._session = session
        self._notifier = notifier
        self._cart = CartSession()
        self._lock = asyncio.Lock()
        self._loading = False
        # Bumped by reset(); a server answer from an older generation is not applied.
        self._generation = 0

    # --- Read access ----------------------------------------------------------

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._cart.items)

    @property
    def business_id(self) -> str | None:
        return self._cart.business_id

    @property
    def business_name(self) -> str:
        return self._cart.business_name

    @property
    def is_empty(self) -> bool:
        return self._cart.is_empty

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def busy(self) -> bool:
        """True while a server call for this cart is outstanding."""
        return self._lock.locked()

    def totals(self) -> CartTotals:
        return self._cart.totals()

    def view(self) -> CartView:
        return CartView.of(self._cart)

    # --- Loading --------------------------------------------------------------

    async def load(self, customer_id: str | None) -> None:
        """Replace the session with the server cart for *customer_id*.

        Guests have no cart: without an id the session is emptied and the
        server is not called.
        """
        async with self._lock:
            await self._load_locked(customer_id)

    async def reload(self) -> None:
        await self.load(self._customer_id())

    def reset(self) -> None:
        """Forget the local cart (logout).  The server cart is untouched."""
        self._generation += 1
        self._cart.clear()

    # --- Mutations ------------------------------------------------------------

    async def add_item(
        self,
        deal: Mapping[str, Any] | CartItem,
        skip_business_check: bool = False,
    ) -> MutationResult:
        """Add one unit of *deal*.

        Returns ``different_restaurant`` without touching anything when the
        deal belongs to another business; the caller may confirm with the
        customer, clear the cart and retry with ``skip_business_check``.
        """
        try:
            item = deal.with_quantity(1) if isinstance(deal, CartItem) else normalize_deal(deal)
        except ValidationError as exc:
            logger.warning("Rejected un-normalisable deal: %s", exc)
            self._notifier.error(ERROR_TITLE, "Unable to add this deal right now.")
            return MutationResult.rejected(INVALID_DEAL)

        customer_id = self._customer_id()
        if not customer_id:
            return MutationResult.rejected(NOT_LOGGED_IN)

        async with self._lock:
            if not skip_business_check and self._cart.conflicts_with(item.business_id):
                return MutationResult.rejected(DIFFERENT_RESTAURANT)

            generation = self._generation
            try:
                await self._cart_service.add(customer_id, item.id)
            except CartServiceError as exc:
                self._surface(exc, "Unable to add this deal right now.")
                return MutationResult.rejected(SERVICE_ERROR)
            if self._stale(generation):
                return MutationResult.rejected(NOT_LOGGED_IN)

            if self._cart.conflicts_with(item.business_id):
                # Server accepted a deal from another business (skip path
                # without a prior clear): it replaced its cart, so resync.
                await self._load_locked(customer_id)
            else:
                self._cart.merge_added(item)
            return MutationResult.success()

    async def replace_cart_with(self, deal: Mapping[str, Any] | CartItem) -> MutationResult:
        """The confirmed "clear and retry" path after ``different_restaurant``."""
        cleared = await self.clear_cart()
        if not cleared.ok and cleared.reason == NOT_LOGGED_IN:
            return cleared
        return await self.add_item(deal, skip_business_check=True)

    async def remove_item(self, deal_id: str) -> MutationResult:
        customer_id = self._customer_id()
        if not customer_id:
            return MutationResult.rejected(NOT_LOGGED_IN)

        async with self._lock:
            generation = self._generation
            try:
                await self._cart_service.remove(customer_id, deal_id)
            except CartServiceError as exc:
                self._surface(exc, "Unable to remove this deal.")
                return MutationResult.rejected(SERVICE_ERROR)
            if self._stale(generation):
                return MutationResult.rejected(NOT_LOGGED_IN)

            self._cart.remove(deal_id)
            return MutationResult.success()

    async def update_quantity(self, deal_id: str, quantity: Any) -> MutationResult:
        """Set a line's quantity once the server confirms it.

        The quantity is floored; zero or less removes the line.  Values
        that are not finite numbers never reach the server.
        """
        customer_id = self._customer_id()
        if not customer_id:
            return MutationResult.rejected(NOT_LOGGED_IN)

        next_qty = _floor_quantity(quantity)
        if next_qty is None:
            self._notifier.error(ERROR_TITLE, "Invalid quantity.")
            return MutationResult.rejected(INVALID_QUANTITY)

        async with self._lock:
            generation = self._generation
            try:
                await self._cart_service.update_quantity(
                    customer_id, deal_id, max(next_qty, 0)
                )
            except CartServiceError as exc:
                self._surface(exc, "Unable to update the quantity.")
                return MutationResult.rejected(SERVICE_ERROR)
            if self._stale(generation):
                return MutationResult.rejected(NOT_LOGGED_IN)

            if next_qty <= 0:
                self._cart.remove(deal_id)
            elif self._cart.find(deal_id) is not None:
                self._cart.set_quantity(deal_id, next_qty)
            else:
                logger.warning("Quantity update for deal %s not in local cart", deal_id)
                await self._load_locked(customer_id)
            return MutationResult.success()

    async def clear_cart(self) -> MutationResult:
        customer_id = self._customer_id()
        if not customer_id:
            return MutationResult.rejected(NOT_LOGGED_IN)

        async with self._lock:
            self._cart.clear()
            try:
                await self._cart_service.clear(customer_id)
            except CartServiceError as exc:
                self._surface(exc, "Unable to clear cart.")
                await self._load_locked(customer_id)
                return MutationResult.rejected(SERVICE_ERROR)
            return MutationResult.success()

    # --- Internal helpers -----------------------------------------------------

    def _customer_id(self) -> str | None:
        customer = self._session.current_customer()
        return customer.id if customer else None

    async def _load_locked(self, customer_id: str | None) -> None:
        if not customer_id:
            self._cart.clear()
            return

        generation = self._generation
        self._loading = True
        try:
            response = await self._cart_service.get_cart(customer_id)
            if self._stale(generation):
                return
            items, business_id = parse_cart_payload(unwrap(response))
            self._cart.replace(items, business_id)
        except DomainException as exc:
            logger.error("Failed to load cart for customer %s: %s", customer_id, exc)
        finally:
            self._loading = False

    def _stale(self, generation: int) -> bool:
        if generation == self._generation:
            return False
        logger.info("Discarding a cart answer that arrived after logout")
        return True

    def _surface(self, exc: CartServiceError, fallback: str) -> None:
        logger.warning("Cart service call failed (%s): %s", exc.code, exc.message)
        self._notifier.error(ERROR_TITLE, exc.user_message or fallback)


def _floor_quantity(value: Any) -> int | None:
    """Floor *value* to an int, or None when it is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.floor(value) if math.isfinite(value) else None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return math.floor(number)
