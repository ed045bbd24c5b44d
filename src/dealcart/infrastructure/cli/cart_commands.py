"""CLI commands for the cart."""

from __future__ import annotations

import json
from pathlib import Path

import click

from dealcart.application.dto import (
    DIFFERENT_RESTAURANT,
    NOT_LOGGED_IN,
    CartView,
    MutationResult,
)
from dealcart.infrastructure.bootstrap import CartApp
from dealcart.infrastructure.cli.runtime import run


def _display_cart(view: CartView) -> None:
    """Shared formatting for displaying the cart."""
    if not view.items:
        click.echo("Your cart is empty.")
        return

    if view.business_name:
        click.echo(f"Restaurant: {view.business_name}")
        click.echo()
    click.echo(f"  {'Deal':<28} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*55}")
    for item in view.items:
        click.echo(
            f"  {item.deal_name[:28]:<28} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*55}")
    click.echo(f"  {'Cart Total':<35} {view.total:>20}")
    if view.savings != "RM0.00":
        click.echo(f"  {'You save':<35} {view.savings:>20}")


def _check(result: MutationResult) -> None:
    if result.ok:
        return
    if result.reason == NOT_LOGGED_IN:
        raise click.ClickException("Please sign in first: dealcart session login --customer-id ...")
    raise click.ClickException("Cart was not updated.")


def _read_deal(deal: str | None, deal_file: Path | None) -> dict:
    if bool(deal) == bool(deal_file):
        raise click.UsageError("Pass exactly one of --deal or --deal-file.")
    raw = deal_file.read_text(encoding="utf-8") if deal_file is not None else deal
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Deal is not valid JSON: {exc}")
    if not isinstance(parsed, dict):
        raise click.BadParameter("Deal must be a JSON object.")
    return parsed


@click.command("show")
def cart_show() -> None:
    """Show the signed-in customer's cart."""

    async def work(app: CartApp) -> CartView:
        await app.cart_store.reload()
        return app.cart_store.view()

    _display_cart(run(work))


@click.command("add")
@click.option("--deal", default=None, help="Deal as a JSON object.")
@click.option(
    "--deal-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File holding the deal JSON.",
)
@click.option(
    "--replace", is_flag=True, default=False,
    help="Clear a cart from another restaurant without asking.",
)
def cart_add(deal: str | None, deal_file: Path | None, replace: bool) -> None:
    """Add one unit of a deal to the cart."""
    payload = _read_deal(deal, deal_file)

    async def work(app: CartApp) -> tuple[MutationResult, CartView]:
        await app.cart_store.reload()
        result = await app.cart_store.add_item(payload)
        if result.reason == DIFFERENT_RESTAURANT:
            confirmed = replace or click.confirm(
                "Your cart can only include deals from one restaurant. "
                "Clear current cart and add this deal?"
            )
            if confirmed:
                result = await app.cart_store.replace_cart_with(payload)
        return result, app.cart_store.view()

    result, view = run(work)
    if result.reason == DIFFERENT_RESTAURANT:
        click.echo("Cart left unchanged.")
        return
    _check(result)
    click.echo("Added to cart.")
    _display_cart(view)


@click.command("remove")
@click.option("--deal-id", required=True, help="Deal to remove.")
def cart_remove(deal_id: str) -> None:
    """Remove a deal from the cart."""

    async def work(app: CartApp) -> tuple[MutationResult, CartView]:
        await app.cart_store.reload()
        result = await app.cart_store.remove_item(deal_id)
        return result, app.cart_store.view()

    result, view = run(work)
    _check(result)
    click.echo(f"Deal {deal_id} removed.")
    _display_cart(view)


@click.command("update")
@click.option("--deal-id", required=True, help="Deal to change.")
@click.option("--quantity", required=True, help="New quantity; 0 removes the deal.")
def cart_update(deal_id: str, quantity: str) -> None:
    """Change how many units of a deal are in the cart."""

    async def work(app: CartApp) -> tuple[MutationResult, CartView]:
        await app.cart_store.reload()
        result = await app.cart_store.update_quantity(deal_id, quantity)
        return result, app.cart_store.view()

    result, view = run(work)
    _check(result)
    _display_cart(view)


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""

    async def work(app: CartApp) -> MutationResult:
        return await app.cart_store.clear_cart()

    _check(run(work))
    click.echo("Cart cleared.")
