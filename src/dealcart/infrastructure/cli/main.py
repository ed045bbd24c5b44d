import logging

import click

from dealcart.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from dealcart.infrastructure.cli.checkout_commands import (
    checkout,
    payment_status,
    payment_watch,
)
from dealcart.infrastructure.cli.session_commands import (
    session_login,
    session_logout,
    session_whoami,
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log HTTP and settlement activity.")
def cli(verbose: bool) -> None:
    """dealcart: restaurant deal cart and checkout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def session() -> None:
    """Manage the signed-in customer."""


@cli.group()
def cart() -> None:
    """Manage the cart."""


@cli.group()
def payment() -> None:
    """Follow payment settlement."""


# Register subcommands
session.add_command(session_login)
session.add_command(session_logout)
session.add_command(session_whoami)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
payment.add_command(payment_status)
payment.add_command(payment_watch)
cli.add_command(checkout)
