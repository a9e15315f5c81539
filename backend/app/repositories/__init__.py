"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.

Author: Tawabil Engineering
Date: 2026-01-20
"""
from app.repositories.product_repository import ProductRepository
from app.repositories.customer_repository import CustomerRepository
from app.repositories.order_repository import OrderRepository

__all__ = [
    'ProductRepository',
    'CustomerRepository',
    'OrderRepository'
]
