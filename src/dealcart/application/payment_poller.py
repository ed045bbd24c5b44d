"""Application service: Payment Settlement Poller.

Bridges an external payment back into the app by asking the cart service
for the payment status until it settles.

States: ``pending`` (initial) -> ``paid`` | ``failed`` | ``cancelled``
(terminal).  Two independent triggers end polling and converge on the
same cleanup: observing a terminal status, and the consumer calling
``stop()``.  Reaching ``paid`` clears the cart and invalidates the claim
history exactly once per poller.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from dealcart.application.cart_store import CartStore
from dealcart.application.dto import NOT_LOGGED_IN
from dealcart.application.envelope import lookup
from dealcart.application.ports import ClaimHistoryCache, ScheduledHandle, Scheduler
from dealcart.domain.exceptions import CartServiceError
from dealcart.domain.model.payment import PaymentSession, PaymentStatus
from dealcart.domain.repository.cart_service import CartService

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 3.0


class ExitDestination(Enum):
    MY_DEALS = "my_deals"
    HOME = "home"


class PaymentPoller:

    def __init__(
        self,
        payment: PaymentSession,
        cart_service: CartService,
        cart_store: CartStore,
        claim_history: ClaimHistoryCache,
        scheduler: Scheduler,
        interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self._payment = payment
        self._cart_service = cart_service
        self._cart_store = cart_store
        self._claim_history = claim_history
        self._scheduler = scheduler
        self._interval = interval
        self._handle: ScheduledHandle | None = None
        self._started = False
        self._stopped = False
        self._settled = False
        self._loading = True
        self._query_count = 0
        self._done = asyncio.Event()

    # --- State ----------------------------------------------------------------

    @property
    def status(self) -> PaymentStatus:
        return self._payment.status

    @property
    def is_terminal(self) -> bool:
        return self._payment.status.is_terminal

    @property
    def is_polling(self) -> bool:
        return self._handle is not None

    @property
    def loading(self) -> bool:
        """True until the first status answer (or until there is nothing to poll)."""
        return self._loading

    @property
    def query_count(self) -> int:
        return self._query_count

    @property
    def redirect_url(self) -> str | None:
        return self._payment.payment_url

    # --- Lifecycle ------------------------------------------------------------

    async def start(self) -> None:
        """Query once immediately, then every interval until settled.

        Without a payment id there is nothing to ask about: the poller
        stays pending and only the manual redirect is offered.
        """
        if self._started:
            return
        self._started = True

        if not self._payment.can_poll:
            logger.info("No payment id; waiting on manual redirect only")
            self._loading = False
            return

        await self._tick()
        if not self.is_terminal and not self._stopped:
            self._handle = self._scheduler.every(self._interval, self._tick)

    def stop(self) -> None:
        """Consumer teardown: no polling continues past this point."""
        self._stopped = True
        self._cancel_interval()
        self._done.set()

    async def wait_settled(self) -> PaymentStatus:
        """Block until a terminal status is observed or the poller is stopped."""
        await self._done.wait()
        return self.status

    # --- Customer actions -----------------------------------------------------

    async def view_my_deals(self) -> ExitDestination:
        await self._exit()
        return ExitDestination.MY_DEALS

    async def back_to_deals(self) -> ExitDestination:
        await self._exit()
        return ExitDestination.HOME

    def retry_payment(self) -> str | None:
        """The payment page to reopen, if checkout supplied one."""
        return self._payment.payment_url

    # --- Internal helpers -----------------------------------------------------

    async def _tick(self) -> None:
        if self._stopped or self.is_terminal:
            return

        self._query_count += 1
        try:
            response = await self._cart_service.payment_status(self._payment.payment_id)
        except CartServiceError as exc:
            logger.warning(
                "Failed to get payment status for %s: %s", self._payment.payment_id, exc
            )
            return
        finally:
            self._loading = False

        if self._stopped:
            # Answer arrived after the consumer left; nobody observes it.
            return

        status = PaymentStatus.parse(lookup(response, "status"))
        self._payment.status = status
        if status.is_terminal:
            logger.info("Payment %s settled: %s", self._payment.payment_id, status.value)
            self._cancel_interval()
            try:
                await self._on_terminal(status)
            finally:
                self._done.set()

    async def _on_terminal(self, status: PaymentStatus) -> None:
        if status is PaymentStatus.PAID:
            if self._settled:
                return
            self._settled = True
            await self._clear_and_invalidate()
        else:
            await self._cart_store.reload()

    async def _exit(self) -> None:
        # Exits from a successful payment always clear, even after the
        # automatic settlement already did: clearing an empty cart is safe.
        self.stop()
        if self.status is PaymentStatus.PAID:
            await self._clear_and_invalidate()

    async def _clear_and_invalidate(self) -> None:
        cleared = await self._cart_store.clear_cart()
        if cleared.reason == NOT_LOGGED_IN:
            # Signed out while paying; still drop the local copy.
            self._cart_store.reset()
        self._claim_history.invalidate()

    def _cancel_interval(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
