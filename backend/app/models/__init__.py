"""
Database table models (schema source for init_db)
"""
from .order import Order
from .customer import Customer
from .product import Product, ProductVariant

__all__ = [
    "Order",
    "Customer",
    "Product",
    "ProductVariant",
]
