"""
Order Service
Places orders and moves them through their lifecycle

Handles:
- Server-side re-pricing of the submitted cart
- Stock and minimum order checks
- Customer find-or-create and order persistence in one transaction
- Customer cancellation and operator status updates

Author: Tawabil Engineering
Date: 2026-01-20
"""
import logging
from collections import defaultdict
from typing import List, Optional
from decimal import Decimal

from app.core.config import settings
from app.core.database import transaction
from app.domain.cart import delivery_charge_for
from app.domain.order import (
    Order,
    OrderCreate,
    OrderItem,
    OrderStatus,
    PHONE_PATTERN,
    generate_order_id,
)
from app.repositories.customer_repository import CustomerRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.product_repository import ProductRepository
from app.services.exceptions import OrderNotFoundError, OrderValidationError

logger = logging.getLogger(__name__)

# Attempts at finding a free order id before giving up
MAX_ORDER_ID_ATTEMPTS = 3


class OrderService:
    """Service for order placement and lifecycle"""

    def __init__(
        self,
        product_repo: Optional[ProductRepository] = None,
        customer_repo: Optional[CustomerRepository] = None,
        order_repo: Optional[OrderRepository] = None
    ):
        self.product_repo = product_repo or ProductRepository()
        self.customer_repo = customer_repo or CustomerRepository()
        self.order_repo = order_repo or OrderRepository()

    def price_order_items(self, request: OrderCreate) -> List[OrderItem]:
        """
        Build order lines from catalog prices

        Raises:
            OrderValidationError: unknown product/pack size or not enough stock
        """
        products = self.product_repo.find_by_product_ids([item.product_id for item in request.items])
        order_items = []

        # Stock applies to the whole order, so repeated lines of a pack add up
        requested = defaultdict(int)
        for item in request.items:
            requested[(item.product_id, item.pack_size)] += item.quantity

        for item in request.items:
            product = products.get(item.product_id)
            price = product.get_price(item.pack_size) if product else None

            if price is None:
                raise OrderValidationError(f"Invalid product: {item.product_id} ({item.pack_size})")

            if not product.has_stock(item.pack_size, requested[(item.product_id, item.pack_size)]):
                raise OrderValidationError(f"Insufficient stock: {product.name} ({item.pack_size})")

            order_items.append(OrderItem(
                product_id=item.product_id,
                name=product.name,
                pack_size=item.pack_size,
                quantity=item.quantity,
                price=price,
                total=price * item.quantity,
            ))

        return order_items

    def place_order(self, request: OrderCreate) -> Order:
        """
        Place a new order

        Args:
            request: Validated order request

        Returns:
            The stored order

        Raises:
            OrderValidationError: pricing, stock or minimum order failure
        """
        items = self.price_order_items(request)
        subtotal = sum((item.total for item in items), Decimal('0'))

        if subtotal < settings.MIN_ORDER_AMOUNT:
            raise OrderValidationError(
                f"Minimum order amount is {settings.MIN_ORDER_AMOUNT} {settings.CURRENCY}"
            )

        order = Order.place(
            customer=request.customer,
            address=request.address,
            items=items,
            delivery_charge=delivery_charge_for(subtotal),
            payment_method=request.payment_method,
            delivery_slot=request.delivery_slot,
        )
        order.notes = request.notes

        with transaction() as conn:
            customer = self.customer_repo.find_or_create(
                phone=request.customer.phone,
                name=request.customer.name,
                email=request.customer.email,
                conn=conn
            )
            order.customer_id = customer.id

            stored = None
            for attempt in range(1, MAX_ORDER_ID_ATTEMPTS + 1):
                stored = self.order_repo.create(order, conn=conn)
                if stored is not None:
                    break
                logger.warning(f"Order id {order.order_id} already taken (attempt {attempt}/{MAX_ORDER_ID_ATTEMPTS})")
                order.order_id = generate_order_id()

            if stored is None:
                raise Exception("Could not allocate a unique order id")

            self.customer_repo.record_order(customer.id, stored.total, conn=conn)

        logger.info(
            f"Order {stored.order_id} placed: {stored.item_count} items, "
            f"total {stored.total} {settings.CURRENCY}, {stored.payment_method.value}"
        )
        return stored

    def get_order(self, order_id: str) -> Order:
        order = self.order_repo.find_by_order_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def get_orders_for_phone(self, phone: str) -> List[Order]:
        """
        Order history for a phone number, newest first

        Unknown phone numbers have no history rather than being an error.
        """
        if not PHONE_PATTERN.match(phone or ''):
            raise OrderValidationError("Invalid phone number")

        customer = self.customer_repo.find_by_phone(phone)
        if customer is None:
            return []

        return self.order_repo.find_by_customer_id(customer.id)

    def cancel_order(self, order_id: str, reason: Optional[str] = None) -> Order:
        """
        Customer cancellation

        Raises:
            OrderNotFoundError
            InvalidStatusTransitionError: order is past the cancellable stage
        """
        order = self.get_order(order_id)

        if order.cancel(reason):
            self.order_repo.update_state(order)
            logger.info(f"Order {order_id} cancelled: {reason or 'no reason given'}")

        return order

    def update_status(self, order_id: str, status: OrderStatus, note: Optional[str] = None) -> Order:
        """
        Operator status change along the fulfilment state machine

        Raises:
            OrderNotFoundError
            InvalidStatusTransitionError
        """
        order = self.get_order(order_id)
        previous = order.status

        if order.transition_to(status, note):
            self.order_repo.update_state(order)
            logger.info(f"Order {order_id} status {previous.value} -> {order.status.value}")

        return order
