"""Console adapters for the application ports."""

from __future__ import annotations

import logging

import click

from dealcart.application.ports import ClaimHistoryCache, CheckoutNavigator, Notifier
from dealcart.domain.model.payment import PaymentSession

logger = logging.getLogger(__name__)


class ConsoleNotifier(Notifier):

    def error(self, title: str, message: str) -> None:
        click.secho(f"{title}: {message}", fg="red", err=True)

    def info(self, title: str, message: str) -> None:
        click.secho(f"{title}: {message}", fg="cyan", err=True)

    def success(self, title: str, message: str) -> None:
        click.secho(f"{title}: {message}", fg="green", err=True)


class ConsoleNavigator(CheckoutNavigator):
    """Prints where a graphical front end would navigate."""

    def open_payment_redirect(self, payment: PaymentSession) -> None:
        click.echo(f"Complete your payment at: {payment.payment_url}")

    def open_payment_status(self, payment: PaymentSession) -> None:
        click.echo(f"Waiting for payment {payment.payment_id} to settle...")

    def open_profile_completion(self) -> None:
        click.echo("Add a phone number with 'dealcart session login --phone ...'.")


class LoggingClaimHistoryCache(ClaimHistoryCache):
    """The console keeps no claim history, so invalidation is only recorded."""

    def invalidate(self) -> None:
        logger.info("Claim history invalidated")
