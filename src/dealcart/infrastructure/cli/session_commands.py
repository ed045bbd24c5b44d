"""CLI commands for the signed-in customer."""

from __future__ import annotations

import click

from dealcart.domain.model.customer import Customer
from dealcart.infrastructure import bootstrap


@click.command("login")
@click.option("--customer-id", required=True, help="Customer ID issued by the storefront.")
@click.option("--phone", default=None, help="Phone number on file (required to check out).")
@click.option("--name", default=None, help="Display name.")
def session_login(customer_id: str, phone: str | None, name: str | None) -> None:
    """Remember the customer this machine acts for."""
    repo = bootstrap.session_repository()
    repo.save(Customer(id=customer_id, phone=phone, name=name))
    click.echo(f"Signed in as {name or customer_id}.")


@click.command("logout")
def session_logout() -> None:
    """Forget the signed-in customer; the local cart goes with them."""
    bootstrap.session_repository().clear()
    click.echo("Signed out.")


@click.command("whoami")
def session_whoami() -> None:
    """Show the signed-in customer."""
    customer = bootstrap.session_repository().current_customer()
    if customer is None:
        click.echo("Not signed in.")
        return
    click.echo(f"Customer: {customer.id}")
    if customer.name:
        click.echo(f"Name:     {customer.name}")
    click.echo(f"Phone:    {customer.phone or '(none)'}")
