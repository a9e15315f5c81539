"""
Customer Domain Model

Customers are identified by their 10-digit mobile number; name and email
follow the most recent checkout.

Author: Tawabil Engineering
Date: 2026-01-20
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Customer(BaseModel):
    """
    Customer domain model

    Fields:
        id: Internal customer ID
        phone: 10-digit mobile number (unique)
        name: Customer name
        email: Customer email (lower-cased)
        total_orders: Number of orders placed
        total_spent: Sum of order totals (INR)
        last_order_date: When the latest order was placed
    """

    id: int = Field(..., description="Customer ID")
    phone: str = Field(..., description="10-digit mobile number")
    name: str = Field(..., description="Customer name")
    email: Optional[str] = Field(None, description="Customer email")

    total_orders: int = Field(0, ge=0)
    total_spent: Decimal = Field(Decimal('0'), ge=0)
    last_order_date: Optional[datetime] = None

    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
