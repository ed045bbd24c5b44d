"""CartSession aggregate: the customer's pending, unpaid selection of deals.

The session owns its items.  The single-merchant rule is enforced here:
every item belongs to the same business, and the session carries a
business only while it has items.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from dealcart.domain.exceptions import EntityNotFoundError, ValidationError
from dealcart.domain.model.value_objects import Money, Quantity


class DealType(Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    COMBO = "combo"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: object) -> DealType:
        if isinstance(raw, str):
            for member in cls:
                if member.value == raw.strip().lower():
                    return member
        return cls.OTHER


class ConsumptionType(Enum):
    """How the customer consumes a deal.  Values are the app's internal labels."""

    DELIVERY = "delivery"
    DINE_IN = "dine-in"
    SELF_PICKUP = "self_pickup"

    @classmethod
    def parse(cls, raw: object) -> ConsumptionType | None:
        if not isinstance(raw, str):
            return None
        return _CONSUMPTION_ALIASES.get(raw.strip().lower())


_CONSUMPTION_ALIASES = {
    "delivery": ConsumptionType.DELIVERY,
    "dine-in": ConsumptionType.DINE_IN,
    "dine_in": ConsumptionType.DINE_IN,
    "self_pickup": ConsumptionType.SELF_PICKUP,
    "self-pickup": ConsumptionType.SELF_PICKUP,
    "pickup": ConsumptionType.SELF_PICKUP,
}


@dataclass(frozen=True)
class CartItem:
    """One claimed-but-unpaid deal line.

    Immutable: the session swaps in a new instance when the quantity
    changes, so snapshots handed out to readers never move under them.
    """

    id: str
    deal_name: str
    deal_total: Money
    original_total: Money
    business_id: str
    business_name: str = ""
    deal_type: DealType = DealType.OTHER
    consumption_types: tuple[ConsumptionType, ...] = ()
    quantity: int = 1
    deal_image: str | None = None
    start_date: str | None = None
    end_date: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Cart item id is required")
        Quantity(self.quantity)

    @property
    def line_total(self) -> Money:
        return self.deal_total * self.quantity

    @property
    def line_original_total(self) -> Money:
        return self.original_total * self.quantity

    def with_quantity(self, quantity: int) -> CartItem:
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class CartTotals:
    total: Money
    original: Money

    @property
    def savings(self) -> Money:
        if self.original <= self.total:
            return Money.zero()
        return self.original - self.total


@dataclass
class CartSession:
    """Aggregate root for the local mirror of the server cart.

    Invariants:
    - ``items`` is empty if and only if ``business_id`` is unset
    - every item's ``business_id`` equals the session ``business_id``
    - item ids are unique
    """

    items: list[CartItem] = field(default_factory=list)
    business_id: str | None = None
    business_name: str = ""

    # --- Mutations ------------------------------------------------------------

    def replace(self, items: list[CartItem], business_id: str | None = None) -> None:
        """Swap in a whole new item set (used by loads from the server).

        Validates the candidate state first so a bad payload never
        overwrites the current one.
        """
        items = list(items)
        if items:
            business_id = business_id or items[0].business_id
            business_name = next(
                (item.business_name for item in items if item.business_name), ""
            )
        else:
            business_id, business_name = None, ""

        self._check(items, business_id)
        self.items = items
        self.business_id = business_id
        self.business_name = business_name

    def merge_added(self, item: CartItem) -> None:
        """Apply an acknowledged add: bump an existing line or append."""
        if self.conflicts_with(item.business_id):
            raise ValidationError(
                f"Cart holds deals from business '{self.business_id}', "
                f"cannot add a deal from '{item.business_id}'"
            )

        existing = self._index_of(item.id)
        if existing is not None:
            current = self.items[existing]
            self.items[existing] = current.with_quantity(current.quantity + 1)
            return

        if not self.items:
            self.business_id = item.business_id
            self.business_name = item.business_name
        self.items.append(item.with_quantity(1))

    def remove(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]
        if not self.items:
            self.clear()

    def set_quantity(self, item_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove(item_id)
            return
        index = self._index_of(item_id)
        if index is None:
            raise EntityNotFoundError(f"Deal '{item_id}' is not in the cart")
        self.items[index] = self.items[index].with_quantity(quantity)

    def clear(self) -> None:
        self.items = []
        self.business_id = None
        self.business_name = ""

    # --- Queries --------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find(self, item_id: str) -> CartItem | None:
        index = self._index_of(item_id)
        return None if index is None else self.items[index]

    def conflicts_with(self, business_id: str | None) -> bool:
        """True when adding a deal from *business_id* would mix merchants."""
        if not self.items or not self.business_id or not business_id:
            return False
        return str(self.business_id) != str(business_id)

    def totals(self) -> CartTotals:
        total = Money.zero()
        original = Money.zero()
        for item in self.items:
            total = total + item.line_total
            original = original + item.line_original_total
        return CartTotals(total=total, original=original)

    # --- Internal helpers -----------------------------------------------------

    def _index_of(self, item_id: str) -> int | None:
        for i, item in enumerate(self.items):
            if item.id == item_id:
                return i
        return None

    @staticmethod
    def _check(items: list[CartItem], business_id: str | None) -> None:
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                raise ValidationError(f"Duplicate deal '{item.id}' in cart")
            seen.add(item.id)
            if str(item.business_id) != str(business_id):
                raise ValidationError(
                    f"Deal '{item.id}' belongs to business '{item.business_id}', "
                    f"cart belongs to '{business_id}'"
                )
