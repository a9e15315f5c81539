"""
Customer Repository - Data Access Layer for Customers

Author: Tawabil Engineering
Date: 2026-01-20
"""
from typing import Optional
from decimal import Decimal
from app.domain.customer import Customer
from app.core.database import get_db_connection_dict


CUSTOMER_COLUMNS = """
    id, phone, name, email, total_orders, total_spent, last_order_date,
    is_active, created_at, updated_at
"""


class CustomerRepository:
    """
    Repository for Customer data access

    Customers are keyed by phone number. Write methods accept an optional
    connection so they can join the caller's transaction.
    """

    def find_by_phone(self, phone: str) -> Optional[Customer]:
        """
        Find customer by phone number

        Args:
            phone: 10-digit mobile number

        Returns:
            Customer or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {CUSTOMER_COLUMNS}
                FROM customers
                WHERE phone = %s
            """, (phone,))

            row = cursor.fetchone()
            if not row:
                return None

            return Customer(**row)

        finally:
            cursor.close()
            conn.close()

    def find_or_create(self, phone: str, name: str, email: Optional[str] = None, conn=None) -> Customer:
        """
        Find customer by phone or create a new one

        An existing customer's name is replaced with the latest one given,
        and their email is replaced when a new one is provided.

        Args:
            phone: 10-digit mobile number
            name: Customer name from checkout
            email: Customer email (optional)
            conn: Database connection (optional, will create and commit if not provided)

        Returns:
            The stored Customer
        """
        should_close = conn is None
        if conn is None:
            conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO customers (phone, name, email, total_orders, total_spent, is_active)
                VALUES (%s, %s, %s, 0, 0, true)
                ON CONFLICT (phone) DO UPDATE SET
                    name = EXCLUDED.name,
                    email = COALESCE(EXCLUDED.email, customers.email),
                    updated_at = NOW()
                RETURNING {CUSTOMER_COLUMNS}
            """, (phone, name, email))

            row = cursor.fetchone()
            if should_close:
                conn.commit()
            return Customer(**row)

        finally:
            cursor.close()
            if should_close:
                conn.close()

    def record_order(self, customer_id: int, order_total: Decimal, conn=None) -> None:
        """
        Update a customer's order stats after an order is placed

        Args:
            customer_id: Internal customer ID
            order_total: Total of the new order (INR)
            conn: Database connection (optional)
        """
        should_close = conn is None
        if conn is None:
            conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE customers
                SET total_orders = total_orders + 1,
                    total_spent = total_spent + %s,
                    last_order_date = NOW(),
                    updated_at = NOW()
                WHERE id = %s
            """, (order_total, customer_id))

            if should_close:
                conn.commit()

        finally:
            cursor.close()
            if should_close:
                conn.close()
