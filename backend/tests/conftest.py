"""
Pytest fixtures and configuration for Tawabil backend tests

This file provides shared fixtures that can be used across all test modules.
Unit tests never touch a database: repositories are mocked at the
connection factory, services and API tests mock the repositories.

Author: Tawabil Engineering
Date: 2026-01-20
"""
import os

# Settings are read at import time; keep unit tests independent of a local .env
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from contextlib import contextmanager
from dotenv import load_dotenv

from app.core.config import settings
from app.domain.product import Product, ProductVariant
from app.domain.order import Order, OrderItem, CustomerInfo, Address, DeliverySlot, PaymentMethod

# Load environment variables for integration tests
load_dotenv()


@pytest.fixture(scope="session")
def database_url():
    """
    Provides the database URL for integration tests

    Scope: session (created once per test session)
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not configured")
    return url


@pytest.fixture
def demo_gateway(monkeypatch):
    """Razorpay not configured (demo mode)"""
    monkeypatch.setattr(settings, "RAZORPAY_KEY_ID", "")
    monkeypatch.setattr(settings, "RAZORPAY_KEY_SECRET", "")
    monkeypatch.setattr(settings, "RAZORPAY_WEBHOOK_SECRET", "")


@pytest.fixture
def live_gateway(monkeypatch):
    """Razorpay configured with test credentials"""
    monkeypatch.setattr(settings, "RAZORPAY_KEY_ID", "rzp_test_key")
    monkeypatch.setattr(settings, "RAZORPAY_KEY_SECRET", "test_key_secret")
    monkeypatch.setattr(settings, "RAZORPAY_WEBHOOK_SECRET", "test_webhook_secret")
    return {
        "key_id": "rzp_test_key",
        "key_secret": "test_key_secret",
        "webhook_secret": "test_webhook_secret",
    }


@pytest.fixture
def mock_transaction():
    """
    Replacement for app.core.database.transaction

    Yields a MagicMock connection and records commit/rollback the same way.
    """
    conn = MagicMock(name="conn")

    @contextmanager
    def _transaction():
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    _transaction.conn = conn
    return _transaction


@pytest.fixture
def cardamom():
    """Provides a product with three pack sizes"""
    return Product(
        id=1,
        product_id="green-cardamom",
        name="Green Cardamom",
        name_hindi="हरी इलायची",
        origin="Idukki, Kerala",
        badge="Premium",
        culinary_uses=["Chai", "Biryani"],
        rating=4.8,
        review_count=132,
        variants=[
            ProductVariant(pack_size="50g", price=Decimal("180")),
            ProductVariant(pack_size="100g", price=Decimal("340"), stock=5),
            ProductVariant(pack_size="250g", price=Decimal("799"), stock=0),
        ],
    )


@pytest.fixture
def pepper():
    """Provides a product without stock tracking"""
    return Product(
        id=2,
        product_id="black-pepper",
        name="Tellicherry Black Pepper",
        variants=[
            ProductVariant(pack_size="50g", price=Decimal("90")),
            ProductVariant(pack_size="100g", price=Decimal("170")),
        ],
    )


@pytest.fixture
def customer_info():
    return CustomerInfo(name="Asha Rao", phone="9876543210", email="Asha@Example.com")


@pytest.fixture
def address():
    return Address(house_no="12", street="5th Cross", area="Indiranagar", pincode="560038")


@pytest.fixture
def make_order(customer_info, address):
    """
    Factory for orders in their initial state

    Usage:
        order = make_order(payment_method="online")
    """
    def _make(payment_method="online", quantity=2, price="180", delivery_charge="40", order_id="TW-260120-ABCDEF"):
        item = OrderItem(
            product_id="green-cardamom",
            name="Green Cardamom",
            pack_size="50g",
            quantity=quantity,
            price=Decimal(price),
            total=Decimal(price) * quantity,
        )
        return Order.place(
            customer=customer_info,
            address=address,
            items=[item],
            delivery_charge=Decimal(delivery_charge),
            payment_method=PaymentMethod(payment_method),
            delivery_slot=DeliverySlot(date="2026-01-21", display_date="Wed, 21 Jan", day="Wednesday"),
            order_id=order_id,
        )

    return _make


@pytest.fixture
def order_payload():
    """Provides a valid POST /api/orders body"""
    return {
        "customer": {"name": "Asha Rao", "phone": "9876543210", "email": "asha@example.com"},
        "address": {
            "house_no": "12",
            "street": "5th Cross",
            "area": "Indiranagar",
            "landmark": "Near metro",
            "pincode": "560038",
        },
        "items": [
            {"product_id": "green-cardamom", "pack_size": "100g", "quantity": 1, "price": 340},
        ],
        "delivery_slot": {"date": "2026-01-21", "display_date": "Wed, 21 Jan", "day": "Wednesday"},
        "payment_method": "cod",
    }


@pytest.fixture
def client():
    """FastAPI test client"""
    from fastapi.testclient import TestClient
    from app.main import app

    return TestClient(app)


@pytest.fixture
def lenient_client():
    """Client that returns 500 responses instead of re-raising server errors"""
    from fastapi.testclient import TestClient
    from app.main import app

    return TestClient(app, raise_server_exceptions=False)
