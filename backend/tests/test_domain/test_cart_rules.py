"""
Unit tests for cart pricing rules

Author: Tawabil Engineering
Date: 2026-01-20
"""
import pytest
from decimal import Decimal
from pydantic import ValidationError

from app.domain.cart import CartItem, CartRequest, delivery_charge_for, summarize


class TestDeliveryCharge:

    @pytest.mark.parametrize("subtotal,expected", [
        ("499", "40"),
        ("500", "0"),
        ("1200", "0"),
        ("200", "40"),
    ])
    def test_threshold(self, subtotal, expected):
        assert delivery_charge_for(Decimal(subtotal)) == Decimal(expected)

    def test_empty_cart_charged_by_default(self):
        assert delivery_charge_for(Decimal("0")) == Decimal("40")

    def test_empty_cart_free_when_requested(self):
        assert delivery_charge_for(Decimal("0"), charge_empty_cart=False) == Decimal("0")


class TestSummarize:

    def test_below_free_delivery(self):
        summary = summarize(Decimal("360"), 2)

        assert summary.delivery_charge == Decimal("40")
        assert summary.total == Decimal("400")
        assert summary.is_free_delivery is False
        assert summary.meets_min_order is True
        assert summary.free_delivery_remaining == Decimal("140")

    def test_free_delivery(self):
        summary = summarize(Decimal("680"), 4)

        assert summary.is_free_delivery is True
        assert summary.total == Decimal("680")
        assert summary.free_delivery_remaining == Decimal("0")

    def test_below_minimum_order(self):
        assert summarize(Decimal("180"), 1).meets_min_order is False

    def test_zero_subtotal_without_empty_cart_charge(self):
        summary = summarize(Decimal("0"), 0, charge_empty_cart=False)

        assert summary.delivery_charge == Decimal("0")
        assert summary.total == Decimal("0")
        assert summary.is_free_delivery is False

    def test_to_dict_uses_floats(self):
        data = summarize(Decimal("360"), 2).to_dict()

        assert data["subtotal"] == 360.0
        assert data["min_order_amount"] == 200.0
        assert isinstance(data["total"], float)


class TestCartItem:

    @pytest.mark.parametrize("quantity", [0, -1, 101])
    def test_quantity_bounds(self, quantity):
        with pytest.raises(ValidationError):
            CartItem(product_id="cloves", pack_size="50g", quantity=quantity)

    def test_max_quantity_allowed(self):
        assert CartItem(product_id="cloves", pack_size="50g", quantity=100).quantity == 100

    def test_strings_sanitized(self):
        item = CartItem(product_id=" <cloves> ", pack_size="50g", quantity=1)
        assert item.product_id == "cloves"

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError):
            CartRequest(items=[])
