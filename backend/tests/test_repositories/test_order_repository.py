"""
Unit tests for OrderRepository

Author: Tawabil Engineering
Date: 2026-01-20
"""
import pytest
from unittest.mock import patch, MagicMock
from datetime import datetime, timezone
from decimal import Decimal
from psycopg2.extras import Json

from app.repositories.order_repository import OrderRepository
from app.domain.order import Order, OrderStatus, PaymentMethod


def order_row(**overrides):
    row = {
        'id': 10,
        'order_id': 'TW-260120-ABCDEF',
        'customer_id': 3,
        'customer_name': 'Asha Rao',
        'customer_phone': '9876543210',
        'customer_email': 'asha@example.com',
        'address': {
            'house_no': '12', 'street': '5th Cross', 'area': 'Indiranagar',
            'landmark': None, 'pincode': '560038', 'city': 'Bengaluru', 'notes': None
        },
        'items': [{
            'product_id': 'green-cardamom', 'name': 'Green Cardamom', 'pack_size': '50g',
            'quantity': 2, 'price': 180.0, 'total': 360.0
        }],
        'delivery_slot': {'date': '2026-01-21', 'display_date': None, 'day': None, 'time': '10 AM - 6 PM'},
        'subtotal': Decimal('360.00'),
        'delivery_charge': Decimal('40.00'),
        'total': Decimal('400.00'),
        'payment_method': 'online',
        'payment_status': 'pending',
        'status': 'pending',
        'status_history': [{'status': 'pending', 'timestamp': '2026-01-20T10:00:00+00:00', 'note': None}],
        'razorpay_order_id': None,
        'razorpay_payment_id': None,
        'razorpay_signature': None,
        'notes': None,
        'created_at': datetime(2026, 1, 20, 10, 0, tzinfo=timezone.utc),
        'updated_at': datetime(2026, 1, 20, 10, 0, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db():
    with patch('app.repositories.order_repository.get_db_connection_dict') as mock_get_conn:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        yield mock_conn, mock_cursor


class TestOrderRepository:
    """Test OrderRepository methods"""

    def test_find_by_order_id_maps_jsonb_columns(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = order_row()

        order = OrderRepository().find_by_order_id('TW-260120-ABCDEF')

        assert isinstance(order, Order)
        assert order.customer.phone == '9876543210'
        assert order.address.pincode == '560038'
        assert order.items[0].total == Decimal('360')
        assert order.status == OrderStatus.PENDING
        assert order.payment_method == PaymentMethod.ONLINE
        assert order.status_history[0].timestamp.year == 2026
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    def test_find_by_order_id_not_found(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert OrderRepository().find_by_order_id('TW-000000-XXXXXX') is None

    def test_find_by_razorpay_order_id_queries_gateway_column(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = order_row(razorpay_order_id='order_abc')

        order = OrderRepository().find_by_razorpay_order_id('order_abc')

        sql, params = mock_cursor.execute.call_args[0]
        assert "WHERE razorpay_order_id = %s" in sql
        assert params == ('order_abc',)
        assert order.razorpay_order_id == 'order_abc'

    def test_find_by_customer_id_newest_first(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchall.return_value = [order_row(), order_row(id=11, order_id='TW-260119-QWERTY')]

        orders = OrderRepository().find_by_customer_id(3)

        assert [o.order_id for o in orders] == ['TW-260120-ABCDEF', 'TW-260119-QWERTY']
        sql = mock_cursor.execute.call_args[0][0]
        assert "ORDER BY created_at DESC" in sql

    def test_create_serializes_snapshots(self, mock_db, make_order):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = order_row()
        order = make_order()

        stored = OrderRepository().create(order)

        sql, params = mock_cursor.execute.call_args[0]
        assert "ON CONFLICT (order_id) DO NOTHING" in sql
        assert params[0] == 'TW-260120-ABCDEF'
        assert isinstance(params[5], Json)
        assert params[6].adapted[0]['price'] == 180.0
        assert params[13] == 'pending'
        assert stored.id == 10
        mock_conn.commit.assert_called_once()
        mock_conn.close.assert_called_once()

    def test_create_returns_none_on_duplicate_order_id(self, make_order):
        conn = MagicMock()
        cursor = MagicMock()
        conn.cursor.return_value = cursor
        cursor.fetchone.return_value = None

        assert OrderRepository().create(make_order(), conn=conn) is None
        conn.commit.assert_not_called()
        conn.close.assert_not_called()

    def test_update_state(self, mock_db, make_order):
        mock_conn, mock_cursor = mock_db
        updated_at = datetime(2026, 1, 20, 11, 0, tzinfo=timezone.utc)
        mock_cursor.fetchone.return_value = {'updated_at': updated_at}
        order = make_order()
        order.mark_paid('pay_123', 'sig')

        result = OrderRepository().update_state(order)

        sql, params = mock_cursor.execute.call_args[0]
        assert sql.strip().startswith("UPDATE orders")
        assert params[0] == 'confirmed'
        assert params[1] == 'paid'
        assert len(params[2].adapted) == 2
        assert params[4] == 'pay_123'
        assert params[-1] == 'TW-260120-ABCDEF'
        assert result.updated_at == updated_at
        mock_conn.commit.assert_called_once()
