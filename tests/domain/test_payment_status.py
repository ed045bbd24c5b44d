"""Unit tests for payment sessions and return URLs."""

import pytest

from dealcart.domain.model.payment import (
    PaymentSession,
    PaymentStatus,
    is_payment_return_url,
    payment_id_from_return_url,
)


class TestPaymentStatus:

    @pytest.mark.parametrize("raw", ["paid", "PAID", " paid "])
    def test_parse_paid(self, raw):
        assert PaymentStatus.parse(raw) is PaymentStatus.PAID

    @pytest.mark.parametrize("raw", [None, "", "processing", 3])
    def test_unknown_is_pending(self, raw):
        assert PaymentStatus.parse(raw) is PaymentStatus.PENDING

    def test_terminal(self):
        assert not PaymentStatus.PENDING.is_terminal
        assert PaymentStatus.PAID.is_terminal
        assert PaymentStatus.FAILED.is_terminal
        assert PaymentStatus.CANCELLED.is_terminal


class TestPaymentSession:

    def test_defaults_to_pending(self):
        assert PaymentSession("p1").status is PaymentStatus.PENDING

    def test_can_poll_needs_id(self):
        assert PaymentSession("p1").can_poll
        assert not PaymentSession(None, payment_url="https://pay").can_poll


class TestReturnUrl:

    def test_recognises_return_url(self):
        assert is_payment_return_url("https://shop.example/cart-payment?payment_id=p1")
        assert not is_payment_return_url("https://gateway.example/pay")
        assert not is_payment_return_url(None)

    def test_extracts_payment_id(self):
        url = "https://shop.example/cart-payment?status=ok&payment_id=p42"
        assert payment_id_from_return_url(url) == "p42"

    def test_payment_id_key_is_case_insensitive(self):
        assert payment_id_from_return_url("https://x/cart-payment?Payment_ID=p7") == "p7"

    def test_missing_payment_id(self):
        assert payment_id_from_return_url("https://x/cart-payment") is None
        assert payment_id_from_return_url(None) is None
