"""Unit tests for deal payload normalisation."""

import pytest

from dealcart.domain.exceptions import ValidationError
from dealcart.domain.model.cart import ConsumptionType, DealType
from dealcart.domain.model.deal import normalize_deal, parse_cart_payload
from dealcart.domain.model.value_objects import Money
from tests.fakes import make_deal


class TestNormalizeDeal:

    def test_deal_list_shape(self):
        item = normalize_deal(make_deal("d1", deal_total="15", original_total="20"))
        assert item.id == "d1"
        assert item.deal_name == "Deal d1"
        assert item.business_id == "b1"
        assert item.business_name == "Restaurant b1"
        assert item.deal_total == Money.of("15")
        assert item.original_total == Money.of("20")
        assert item.deal_type is DealType.FIXED_AMOUNT
        assert item.consumption_types == (ConsumptionType.DELIVERY, ConsumptionType.DINE_IN)
        assert item.quantity == 1

    def test_id_aliases(self):
        assert normalize_deal({"deal_id": "x", "business_id": "b1"}).id == "x"
        assert normalize_deal({"id": 42, "business_id": "b1"}).id == "42"

    def test_missing_id_rejected(self):
        with pytest.raises(ValidationError, match="no identifier"):
            normalize_deal({"business_id": "b1"})

    def test_plain_business_id_and_camel_case_fallback(self):
        assert normalize_deal({"_id": "d", "business_id": "b7"}).business_id == "b7"
        assert normalize_deal({"_id": "d", "businessId": "b8"}).business_id == "b8"

    def test_default_business_fills_gap(self):
        item = normalize_deal({"_id": "d"}, default_business_id="b9")
        assert item.business_id == "b9"

    def test_missing_business_rejected(self):
        with pytest.raises(ValidationError, match="no owning business"):
            normalize_deal({"_id": "d"})

    def test_missing_prices_are_zero(self):
        item = normalize_deal({"_id": "d", "business_id": "b1"})
        assert item.deal_total == Money.zero()
        assert item.original_total == Money.zero()

    def test_bad_price_rejected(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            normalize_deal({"_id": "d", "business_id": "b1", "deal_total": "free"})

    def test_snake_case_consumption_and_unknown_values(self):
        item = normalize_deal(
            {"_id": "d", "business_id": "b1", "consumption_type": ["pickup", "zeppelin", "self_pickup"]}
        )
        assert item.consumption_types == (ConsumptionType.SELF_PICKUP,)

    def test_date_aliases(self):
        item = normalize_deal(
            {"_id": "d", "business_id": "b1", "deal_start_date": "2024-01-01", "end_date": "2024-02-01"}
        )
        assert item.start_date == "2024-01-01"
        assert item.end_date == "2024-02-01"

    @pytest.mark.parametrize("quantity", [None, "", 0])
    def test_absent_quantity_means_one(self, quantity):
        assert normalize_deal(make_deal("d1"), quantity).quantity == 1

    def test_explicit_quantity(self):
        assert normalize_deal(make_deal("d1"), 3).quantity == 3

    @pytest.mark.parametrize("quantity", [float("inf"), float("nan"), "two"])
    def test_unusable_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError, match="Invalid quantity"):
            normalize_deal(make_deal("d1"), quantity)

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError, match="must be an object"):
            normalize_deal(["d1"])


class TestParseCartPayload:

    def test_items_preferred_over_deals(self):
        payload = {
            "items": [{**make_deal("d1"), "quantity": 2}],
            "deals": [make_deal("d2")],
            "cart": {"business_id": "b1"},
        }
        items, business_id = parse_cart_payload(payload)
        assert [i.id for i in items] == ["d1"]
        assert items[0].quantity == 2
        assert business_id == "b1"

    def test_falls_back_to_deals_when_items_empty(self):
        items, _ = parse_cart_payload({"items": [], "deals": [make_deal("d2")]})
        assert [i.id for i in items] == ["d2"]

    def test_lines_inherit_cart_business(self):
        payload = {
            "items": [{"_id": "d1", "deal_total": "5"}],
            "cart": {"business_id": {"_id": "b3"}},
        }
        items, business_id = parse_cart_payload(payload)
        assert business_id == "b3"
        assert items[0].business_id == "b3"

    def test_empty_payload(self):
        assert parse_cart_payload({}) == ([], None)
