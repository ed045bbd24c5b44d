"""Normalisation of deal payloads into cart items.

Deals reach the cart from several places (deal lists, deal detail, the
cart endpoint itself) and those payloads do not agree on field names.
Everything funnels through ``normalize_deal`` so the rest of the domain
sees a single shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dealcart.domain.exceptions import ValidationError
from dealcart.domain.model.cart import CartItem, ConsumptionType, DealType
from dealcart.domain.model.value_objects import Money


def normalize_deal(
    raw: Mapping[str, Any],
    quantity: int | None = 1,
    default_business_id: str | None = None,
) -> CartItem:
    """Build a CartItem from a deal payload.

    ``default_business_id`` fills in the owner for cart lines that do not
    repeat it (the cart endpoint reports it once at cart level).
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Deal payload must be an object, got {type(raw).__name__}")

    deal_id = _first(raw, "_id", "deal_id", "id")
    if not deal_id:
        raise ValidationError("Deal has no identifier")

    business = raw.get("business_id")
    if isinstance(business, Mapping):
        business_id = business.get("_id") or business.get("id")
        business_name = business.get("company_name") or raw.get("business_name") or ""
    else:
        business_id = business or raw.get("businessId")
        business_name = raw.get("business_name") or ""

    business_id = business_id or default_business_id
    if not business_id:
        raise ValidationError(f"Deal '{deal_id}' has no owning business")

    return CartItem(
        id=str(deal_id),
        deal_name=raw.get("deal_name") or "",
        deal_total=Money.of(raw.get("deal_total")),
        original_total=Money.of(raw.get("original_total")),
        business_id=str(business_id),
        business_name=str(business_name),
        deal_type=DealType.parse(raw.get("deal_type")),
        consumption_types=_consumption_types(raw),
        quantity=_quantity(quantity),
        deal_image=raw.get("deal_image"),
        start_date=raw.get("start_date") or raw.get("deal_start_date"),
        end_date=raw.get("end_date") or raw.get("deal_end_date"),
    )


def parse_cart_payload(payload: Mapping[str, Any]) -> tuple[list[CartItem], str | None]:
    """Turn an unwrapped get-cart payload into items plus the cart's business.

    Lines may arrive under ``items`` or ``deals``; ``items`` wins when it
    is non-empty.
    """
    items = payload.get("items") or []
    deals = payload.get("deals") or []
    lines = items if items else deals
    if not isinstance(lines, list):
        raise ValidationError("Cart payload lines must be a list")

    cart = payload.get("cart") or {}
    business = cart.get("business_id") if isinstance(cart, Mapping) else None
    if isinstance(business, Mapping):
        business = business.get("_id")
    business_id = str(business) if business else None

    normalized = [
        normalize_deal(line, line.get("quantity") if isinstance(line, Mapping) else 1,
                       default_business_id=business_id)
        for line in lines
        if line
    ]
    return normalized, business_id


# --- Internal helpers ---------------------------------------------------------


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def _consumption_types(raw: Mapping[str, Any]) -> tuple[ConsumptionType, ...]:
    values = raw.get("consumptionType")
    if not isinstance(values, list):
        values = raw.get("consumption_type")
    if not isinstance(values, list):
        return ()
    result: list[ConsumptionType] = []
    for value in values:
        parsed = ConsumptionType.parse(value)
        if parsed is not None and parsed not in result:
            result.append(parsed)
    return tuple(result)


def _quantity(value: Any) -> int:
    """Server lines carry a quantity; a missing or zero one means a single unit."""
    if value is None or value == "" or value == 0:
        return 1
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationError(f"Invalid quantity: {value!r}") from exc
