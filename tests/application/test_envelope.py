"""Unit tests for reading the cart service's response envelope."""

import pytest

from dealcart.application.envelope import is_success, lookup, unwrap


class TestUnwrap:

    def test_innermost_level_wins(self):
        response = {"success": True, "data": {"data": {"status": "paid"}}}
        assert unwrap(response) == {"status": "paid"}

    def test_single_wrapper(self):
        assert unwrap({"data": {"items": []}}) == {"items": []}

    def test_top_level_payload(self):
        assert unwrap({"items": [1]}) == {"items": [1]}

    def test_empty_inner_levels_are_skipped(self):
        assert unwrap({"success": True, "data": {}}) == {"success": True, "data": {}}

    @pytest.mark.parametrize("response", [None, [], "text"])
    def test_non_mapping(self, response):
        assert unwrap(response) == {}


class TestIsSuccess:

    @pytest.mark.parametrize(
        "response",
        [
            {"success": True},
            {"data": {"success": True}},
            {"data": {"data": {"success": True}}},
        ],
    )
    def test_any_level(self, response):
        assert is_success(response)

    @pytest.mark.parametrize("response", [{}, {"success": "true"}, {"success": 1}, None])
    def test_only_literal_true_counts(self, response):
        assert not is_success(response)


class TestLookup:

    def test_prefers_inner_value(self):
        response = {"message": "outer", "data": {"message": "inner"}}
        assert lookup(response, "message") == "inner"

    def test_falls_back_to_outer_value(self):
        response = {"success": False, "message": "Deal expired", "data": {"cart": {}}}
        assert lookup(response, "message") == "Deal expired"

    def test_missing(self):
        assert lookup({"data": {}}, "payment_id") is None
