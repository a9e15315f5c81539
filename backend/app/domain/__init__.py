"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.

Author: Tawabil Engineering
Date: 2026-01-20
"""
from app.domain.product import Product, ProductVariant
from app.domain.customer import Customer
from app.domain.order import Order, OrderItem, OrderStatus, PaymentStatus, PaymentMethod

__all__ = [
    'Product', 'ProductVariant', 'Customer',
    'Order', 'OrderItem', 'OrderStatus', 'PaymentStatus', 'PaymentMethod',
]
