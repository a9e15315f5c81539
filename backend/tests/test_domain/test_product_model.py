"""
Unit tests for the Product domain model

Author: Tawabil Engineering
Date: 2026-01-20
"""
import pytest
from decimal import Decimal

from app.domain.product import Product, ProductVariant, category_from_name


class TestCategoryFromName:

    @pytest.mark.parametrize("name,expected", [
        ("Green Cardamom", "whole-spices"),
        ("Elaichi Pods", "whole-spices"),
        ("Turmeric Powder", "ground-spices"),
        ("Ground Coriander", "ground-spices"),
        ("Cumin Powder", "whole-spices"),
        ("Saffron", "whole-spices"),
    ])
    def test_category(self, name, expected):
        assert category_from_name(name) == expected

    def test_explicit_category_wins(self):
        product = Product(product_id="mix", name="Cardamom Gift Box", category="gift-packs")
        assert product.resolved_category == "gift-packs"


class TestProductPricing:

    def test_get_price(self, cardamom):
        assert cardamom.get_price("100g") == Decimal("340")

    def test_unknown_pack_size(self, cardamom):
        assert cardamom.get_price("1kg") is None
        assert cardamom.is_pack_size_available("1kg") is False

    def test_inactive_product_has_no_price(self, cardamom):
        cardamom.is_active = False

        assert cardamom.get_price("50g") is None
        assert cardamom.in_stock is False

    def test_min_price(self, cardamom):
        assert cardamom.min_price == Decimal("180")

    def test_min_price_without_variants(self):
        assert Product(product_id="x", name="X").min_price is None


class TestProductStock:

    def test_untracked_stock_is_available(self, cardamom):
        assert cardamom.has_stock("50g", 100) is True

    def test_tracked_stock(self, cardamom):
        assert cardamom.has_stock("100g", 5) is True
        assert cardamom.has_stock("100g", 6) is False

    def test_out_of_stock_pack(self, cardamom):
        assert cardamom.has_stock("250g", 1) is False

    def test_in_stock_when_any_pack_available(self):
        product = Product(
            product_id="cloves",
            name="Whole Cloves",
            variants=[ProductVariant(pack_size="50g", price=Decimal("120"), stock=0)],
        )
        assert product.in_stock is False


class TestProductToDict:

    def test_to_dict(self, cardamom):
        data = cardamom.to_dict()

        assert data["product_id"] == "green-cardamom"
        assert data["category"] == "whole-spices"
        assert data["pack_sizes"] == ["50g", "100g", "250g"]
        assert data["prices"] == {"50g": 180.0, "100g": 340.0, "250g": 799.0}
        assert data["min_price"] == 180.0
        assert data["badge"] == "Premium"
        assert data["in_stock"] is True
        assert "id" not in data
