"""CLI commands for checkout and payment settlement."""

from __future__ import annotations

import asyncio
from datetime import datetime

import click

from dealcart.application.checkout import CheckoutForm
from dealcart.application.dto import CheckoutOutcome, CheckoutOutcomeKind
from dealcart.application.envelope import lookup
from dealcart.domain.exceptions import DomainException
from dealcart.domain.model.cart import ConsumptionType
from dealcart.domain.model.payment import PaymentSession, PaymentStatus
from dealcart.domain.service.service_types import DELIVERY_NOTE
from dealcart.infrastructure.bootstrap import CartApp
from dealcart.infrastructure.cli.runtime import run

SERVICE_TYPE_CHOICES = [t.value for t in ConsumptionType]

_STATUS_MESSAGES = {
    PaymentStatus.PENDING: "Payment processing. We're confirming your payment.",
    PaymentStatus.PAID: "Payment successful. Your deals are ready.",
    PaymentStatus.FAILED: "Payment failed. Payment was not completed, please try again.",
    PaymentStatus.CANCELLED: "Payment cancelled. Payment was not completed, please try again.",
}


async def _watch(app: CartApp, payment: PaymentSession, timeout: float) -> PaymentStatus:
    """Poll until the payment settles or *timeout* seconds pass."""
    poller = app.payment_poller(payment)
    try:
        await poller.start()
        if not payment.can_poll:
            return poller.status
        await asyncio.wait_for(poller.wait_settled(), timeout=timeout)
    except asyncio.TimeoutError:
        pass
    finally:
        poller.stop()
    return poller.status


def _report(status: PaymentStatus, payment: PaymentSession) -> None:
    click.echo(_STATUS_MESSAGES[status])
    if not status.is_terminal or status is PaymentStatus.PAID:
        return
    if payment.payment_url:
        click.echo(f"Try again at: {payment.payment_url}")


@click.command("checkout")
@click.option(
    "--service-type",
    type=click.Choice(SERVICE_TYPE_CHOICES),
    default=None,
    help="How the deals will be consumed.",
)
@click.option("--date", "preferred_date", type=click.DateTime(["%Y-%m-%d"]), default=None,
              help="Preferred date (not needed for delivery).")
@click.option("--time", "preferred_time", type=click.DateTime(["%H:%M"]), default=None,
              help="Preferred time, 24h clock.")
@click.option("--wait/--no-wait", default=True, help="Wait for the payment to settle.")
@click.option("--timeout", type=float, default=600.0, show_default=True,
              help="Seconds to wait for settlement.")
def checkout(
    service_type: str | None,
    preferred_date: datetime | None,
    preferred_time: datetime | None,
    wait: bool,
    timeout: float,
) -> None:
    """Check out the cart and start payment."""
    form = CheckoutForm()
    form.select_service_type(ConsumptionType(service_type) if service_type else None)
    if form.service_type is not ConsumptionType.DELIVERY:
        form.preferred_date = preferred_date.date() if preferred_date else None
        form.preferred_time = preferred_time.time() if preferred_time else None
    else:
        click.echo(DELIVERY_NOTE)

    async def work(app: CartApp) -> tuple[CheckoutOutcome, PaymentStatus | None]:
        await app.cart_store.reload()
        outcome = await app.checkout.submit(form)
        if not wait or outcome.payment is None or not outcome.payment.can_poll:
            return outcome, None
        return outcome, await _watch(app, outcome.payment, timeout)

    outcome, status = run(work)
    if outcome.kind in (CheckoutOutcomeKind.REJECTED, CheckoutOutcomeKind.FAILED):
        # The notifier has already printed why.
        raise SystemExit(1)
    if status is not None and outcome.payment is not None:
        _report(status, outcome.payment)


@click.command("status")
@click.option("--payment-id", required=True, help="Payment to look up.")
def payment_status(payment_id: str) -> None:
    """Ask once for a payment's status."""

    async def work(app: CartApp) -> PaymentStatus:
        response = await app.cart_service.payment_status(payment_id)
        return PaymentStatus.parse(lookup(response, "status"))

    try:
        status = run(work)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Payment {payment_id}: {status.value}")


@click.command("watch")
@click.option("--payment-id", default=None, help="Payment to follow.")
@click.option("--payment-url", default=None, help="Payment page, offered again on failure.")
@click.option("--timeout", type=float, default=600.0, show_default=True,
              help="Seconds to wait for settlement.")
def payment_watch(payment_id: str | None, payment_url: str | None, timeout: float) -> None:
    """Poll a payment until it settles; a paid payment clears the cart."""
    payment = PaymentSession(payment_id=payment_id, payment_url=payment_url)
    if not payment.can_poll:
        if not payment_url:
            raise click.UsageError("Pass --payment-id or --payment-url.")
        click.echo(f"Open the payment page to continue: {payment_url}")
        return

    async def work(app: CartApp) -> PaymentStatus:
        await app.cart_store.reload()
        return await _watch(app, payment, timeout)

    _report(run(work), payment)
