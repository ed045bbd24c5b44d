"""Domain service: the service types a whole cart can be checked out with.

Each deal lists how it can be consumed (delivery, dine-in, self pickup).
A checkout picks one service type for the entire cart, so the offered
vocabulary is what every item supports.  When the items share nothing,
the union is offered instead so checkout degrades rather than blocks.
"""

from __future__ import annotations

from collections.abc import Iterable

from dealcart.domain.model.cart import CartItem, ConsumptionType

# Internal label -> checkout endpoint vocabulary.
WIRE_SERVICE_TYPES: dict[ConsumptionType, str] = {
    ConsumptionType.DELIVERY: "delivery",
    ConsumptionType.DINE_IN: "dine_in",
    ConsumptionType.SELF_PICKUP: "pickup",
}

DELIVERY_NOTE = "Contact the restaurant for delivery charges and details."


def available_service_types(items: Iterable[CartItem]) -> list[ConsumptionType]:
    """Intersection of the items' consumption types, falling back to the union.

    Order follows the first item (intersection) or first appearance (union).
    """
    per_item = [list(item.consumption_types) for item in items]
    if not per_item:
        return []

    intersection = [
        value for value in per_item[0]
        if all(value in other for other in per_item[1:])
    ]
    if intersection:
        return intersection

    union: list[ConsumptionType] = []
    for values in per_item:
        for value in values:
            if value not in union:
                union.append(value)
    return union


def to_wire(service_type: ConsumptionType | None) -> str | None:
    if service_type is None:
        return None
    return WIRE_SERVICE_TYPES[service_type]


def requires_schedule(service_type: ConsumptionType | None) -> bool:
    """Everything except delivery needs a preferred date and time."""
    return service_type is not ConsumptionType.DELIVERY
