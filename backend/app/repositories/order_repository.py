"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and returns Order domain models.
Items, address, delivery slot and status history live in JSONB columns.

Author: Tawabil Engineering
Date: 2026-01-20
"""
from typing import List, Optional
from psycopg2.extras import Json

from app.domain.order import Order, CustomerInfo
from app.core.database import get_db_connection_dict


ORDER_COLUMNS = """
    id, order_id, customer_id, customer_name, customer_phone, customer_email,
    address, items, delivery_slot, subtotal, delivery_charge, total,
    payment_method, payment_status, status, status_history,
    razorpay_order_id, razorpay_payment_id, razorpay_signature,
    notes, created_at, updated_at
"""


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    """

    @staticmethod
    def _map_row_to_order(row: dict) -> Order:
        """Map an orders row (JSONB columns already decoded by psycopg2) to an Order"""
        return Order(
            id=row['id'],
            order_id=row['order_id'],
            customer_id=row.get('customer_id'),
            customer=CustomerInfo(
                name=row['customer_name'],
                phone=row['customer_phone'],
                email=row.get('customer_email'),
            ),
            address=row['address'],
            items=row['items'],
            delivery_slot=row.get('delivery_slot'),
            subtotal=row['subtotal'],
            delivery_charge=row['delivery_charge'],
            total=row['total'],
            payment_method=row['payment_method'],
            payment_status=row['payment_status'],
            status=row['status'],
            status_history=row.get('status_history') or [],
            razorpay_order_id=row.get('razorpay_order_id'),
            razorpay_payment_id=row.get('razorpay_payment_id'),
            razorpay_signature=row.get('razorpay_signature'),
            notes=row.get('notes'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    def _find_one(self, column: str, value: str) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE {column} = %s
            """, (value,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_order(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_order_id(self, order_id: str) -> Optional[Order]:
        """
        Find order by its public id

        Args:
            order_id: Public order ID (TW-YYMMDD-XXXXXX)

        Returns:
            Order or None if not found
        """
        return self._find_one("order_id", order_id)

    def find_by_razorpay_order_id(self, razorpay_order_id: str) -> Optional[Order]:
        """Find the order a Razorpay order was created for"""
        return self._find_one("razorpay_order_id", razorpay_order_id)

    def find_by_razorpay_payment_id(self, razorpay_payment_id: str) -> Optional[Order]:
        """Find the order a Razorpay payment was captured for"""
        return self._find_one("razorpay_payment_id", razorpay_payment_id)

    def find_by_customer_id(self, customer_id: int, limit: int = 50) -> List[Order]:
        """
        Find a customer's orders, newest first

        Args:
            customer_id: Internal customer ID
            limit: Maximum results to return

        Returns:
            List of orders
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE customer_id = %s
                ORDER BY created_at DESC
                LIMIT %s
            """, (customer_id, limit))

            return [self._map_row_to_order(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def create(self, order: Order, conn=None) -> Optional[Order]:
        """
        Insert a new order

        Args:
            order: Order built by Order.place (id and timestamps unset)
            conn: Database connection (optional, will create and commit if not provided)

        Returns:
            The stored order with id and timestamps, or None when the
            order_id is already taken (caller should retry with a new id)
        """
        should_close = conn is None
        if conn is None:
            conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO orders (
                    order_id, customer_id, customer_name, customer_phone, customer_email,
                    address, items, delivery_slot, subtotal, delivery_charge, total,
                    payment_method, payment_status, status, status_history, notes
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s
                )
                ON CONFLICT (order_id) DO NOTHING
                RETURNING {ORDER_COLUMNS}
            """, (
                order.order_id,
                order.customer_id,
                order.customer.name,
                order.customer.phone,
                order.customer.email,
                Json(order.address.model_dump()),
                Json([item.to_dict() for item in order.items]),
                Json(order.delivery_slot.model_dump()) if order.delivery_slot else None,
                order.subtotal,
                order.delivery_charge,
                order.total,
                order.payment_method.value,
                order.payment_status.value,
                order.status.value,
                Json([entry.to_dict() for entry in order.status_history]),
                order.notes,
            ))

            row = cursor.fetchone()
            if should_close:
                conn.commit()

            if not row:
                return None
            return self._map_row_to_order(row)

        finally:
            cursor.close()
            if should_close:
                conn.close()

    def update_state(self, order: Order, conn=None) -> Order:
        """
        Persist status, payment status, gateway references and history

        Args:
            order: Order whose state was changed through its domain methods
            conn: Database connection (optional)

        Returns:
            The order with its new updated_at
        """
        should_close = conn is None
        if conn is None:
            conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE orders
                SET status = %s,
                    payment_status = %s,
                    status_history = %s,
                    razorpay_order_id = %s,
                    razorpay_payment_id = %s,
                    razorpay_signature = %s,
                    updated_at = NOW()
                WHERE order_id = %s
                RETURNING updated_at
            """, (
                order.status.value,
                order.payment_status.value,
                Json([entry.to_dict() for entry in order.status_history]),
                order.razorpay_order_id,
                order.razorpay_payment_id,
                order.razorpay_signature,
                order.order_id,
            ))

            row = cursor.fetchone()
            if should_close:
                conn.commit()

            if row:
                order.updated_at = row['updated_at']
            return order

        finally:
            cursor.close()
            if should_close:
                conn.close()
