"""Application service: Checkout Orchestrator.

Validates checkout preconditions locally, submits the cart for payment,
and routes the service's answer: to the external payment page, straight
to the settlement poller, or back to the customer as a failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo

from dealcart.application.cart_store import CartStore
from dealcart.application.dto import (
    CheckoutOutcome,
    CheckoutOutcomeKind,
    CheckoutRequest,
)
from dealcart.application.envelope import is_success, lookup
from dealcart.application.ports import CheckoutNavigator, Notifier
from dealcart.domain.exceptions import CartServiceError, CheckoutRejected
from dealcart.domain.model.cart import ConsumptionType
from dealcart.domain.model.payment import (
    PaymentSession,
    is_payment_return_url,
    payment_id_from_return_url,
)
from dealcart.domain.repository.cart_service import CartService
from dealcart.domain.repository.session_provider import SessionProvider
from dealcart.domain.service.service_types import (
    available_service_types,
    requires_schedule,
    to_wire,
)

logger = logging.getLogger(__name__)

START_PAYMENT_FAILED = "Failed to start payment"


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class CheckoutForm:
    """What the customer picked on the cart screen."""

    service_type: ConsumptionType | None = None
    preferred_date: date | None = None
    preferred_time: time | None = None

    def select_service_type(self, service_type: ConsumptionType | None) -> None:
        # Delivery is not scheduled; drop any date/time picked before.
        self.service_type = service_type
        if service_type is ConsumptionType.DELIVERY:
            self.preferred_date = None
            self.preferred_time = None

    def preferred_datetime(self, tz: tzinfo | None) -> datetime | None:
        if self.preferred_date is None or self.preferred_time is None:
            return None
        return datetime.combine(
            self.preferred_date,
            time(self.preferred_time.hour, self.preferred_time.minute),
            tzinfo=tz,
        )


class CheckoutOrchestrator:

    def __init__(
        self,
        cart_store: CartStore,
        cart_service: CartService,
        session: SessionProvider,
        notifier: Notifier,
        navigator: CheckoutNavigator,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._cart_store = cart_store
        self._cart_service = cart_service
        self._session = session
        self._notifier = notifier
        self._navigator = navigator
        self._clock = clock

    def available_service_types(self) -> list[ConsumptionType]:
        return available_service_types(self._cart_store.items)

    def validate(self, form: CheckoutForm) -> CheckoutRequest:
        """Check the preconditions in order; the first failure wins.

        Raises CheckoutRejected.  Nothing here touches the network.
        """
        if self._cart_store.is_empty:
            raise CheckoutRejected("empty_cart", "Your cart is empty.")

        customer = self._session.current_customer()
        if customer is None:
            raise CheckoutRejected("not_logged_in", "Please sign in to check out.")

        if not customer.has_phone:
            raise CheckoutRejected(
                "phone_required", "Please enter your phone number before checking out."
            )

        offered = self.available_service_types()
        if offered and form.service_type is None:
            raise CheckoutRejected("service_type_required", "Service type is required")
        if offered and form.service_type not in offered:
            raise CheckoutRejected(
                "service_type_unavailable",
                "The deals in your cart are not available for this service type",
            )

        preferred: datetime | None = None
        if requires_schedule(form.service_type):
            now = self._clock()
            preferred = form.preferred_datetime(now.tzinfo)
            if preferred is None:
                raise CheckoutRejected("schedule_required", "Date and time are required")
            if preferred < now.replace(second=0, microsecond=0):
                raise CheckoutRejected(
                    "schedule_in_past", "Preferred date and time cannot be in the past"
                )

        return CheckoutRequest(
            customer_id=customer.id,
            service_type=to_wire(form.service_type),
            preferred_datetime=preferred,
        )

    async def submit(self, form: CheckoutForm) -> CheckoutOutcome:
        try:
            request = self.validate(form)
        except CheckoutRejected as exc:
            return self._reject(exc)

        try:
            response = await self._cart_service.checkout(
                request.customer_id,
                request.service_type,
                request.preferred_datetime_iso,
            )
        except CartServiceError as exc:
            logger.warning("Checkout failed (%s): %s", exc.code, exc.message)
            return await self._fail(exc.user_message)

        if not is_success(response):
            return await self._fail(lookup(response, "message"))

        payment_url = lookup(response, "payment_url")
        payment_id = lookup(response, "payment_id")
        payment = PaymentSession(
            payment_id=str(payment_id) if payment_id else None,
            payment_url=payment_url or None,
        )

        if payment_url:
            logger.info("Checkout %s redirects to external payment", payment.payment_id)
            self._navigator.open_payment_redirect(payment)
            return CheckoutOutcome(CheckoutOutcomeKind.REDIRECT, payment=payment)

        if payment_id:
            logger.info("Checkout %s settles by polling", payment.payment_id)
            self._navigator.open_payment_status(payment)
            return CheckoutOutcome(CheckoutOutcomeKind.POLL, payment=payment)

        self._notifier.error("Error", START_PAYMENT_FAILED)
        return CheckoutOutcome(
            CheckoutOutcomeKind.FAILED, reason="no_payment", message=START_PAYMENT_FAILED
        )

    def resume_from_redirect(
        self, url: str | None, payment: PaymentSession
    ) -> PaymentSession | None:
        """Follow the payment page's redirect back into the storefront.

        Returns the session handed to the status screen, or None while the
        customer is still on the payment provider's pages.
        """
        if not is_payment_return_url(url):
            return None
        payment_id = payment_id_from_return_url(url) or payment.payment_id
        if not payment_id:
            return None
        resumed = PaymentSession(payment_id=payment_id, payment_url=payment.payment_url)
        self._navigator.open_payment_status(resumed)
        return resumed

    # --- Internal helpers -----------------------------------------------------

    def _reject(self, exc: CheckoutRejected) -> CheckoutOutcome:
        if exc.reason == "not_logged_in":
            self._notifier.info("Login", exc.message)
        elif exc.reason == "phone_required":
            self._notifier.error("Phone number required", exc.message)
            self._navigator.open_profile_completion()
        else:
            self._notifier.error("Error", exc.message)
        return CheckoutOutcome(
            CheckoutOutcomeKind.REJECTED, reason=exc.reason, message=exc.message
        )

    async def _fail(self, message: str | None) -> CheckoutOutcome:
        # A refused checkout may still have changed the server cart
        # (expired deals, partial holds): resync.
        text = message or START_PAYMENT_FAILED
        self._notifier.error("Error", text)
        await self._cart_store.reload()
        return CheckoutOutcome(CheckoutOutcomeKind.FAILED, reason="service", message=text)
