"""
Cart Domain Models

Cart lines as sent by the storefront, and the pricing rules shared by
cart calculation and order placement (delivery charge, free-delivery
threshold, minimum order).

Author: Tawabil Engineering
Date: 2026-01-20
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from decimal import Decimal

from app.core.config import settings
from app.core.sanitize import sanitize


class CartItem(BaseModel):
    """
    A cart line as submitted by the client

    `price` is what the client believes the price is; it is never trusted
    and only used to report price changes.
    """

    product_id: str = Field(..., min_length=1, description="Product slug")
    pack_size: str = Field(..., min_length=1, description="Pack size label")
    quantity: int = Field(..., description="Number of packs")
    price: Optional[Decimal] = Field(None, description="Client-side price (informational)")
    name: Optional[str] = Field(None, description="Client-side product name (informational)")

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data):
        return sanitize(data)

    @field_validator("quantity")
    @classmethod
    def _check_quantity(cls, value: int) -> int:
        if value < 1 or value > settings.MAX_ITEM_QUANTITY:
            raise ValueError(f"Quantity must be between 1 and {settings.MAX_ITEM_QUANTITY}")
        return value


class CartRequest(BaseModel):
    """Body of /api/cart/validate and /api/cart/calculate"""
    items: List[CartItem] = Field(..., min_length=1, description="Cart lines")


class CartSummary(BaseModel):
    """Totals for a priced cart"""

    item_count: int = 0
    subtotal: Decimal = Decimal("0")
    delivery_charge: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    is_free_delivery: bool = False
    meets_min_order: bool = False
    free_delivery_remaining: Decimal = Decimal("0")
    min_order_amount: Decimal = Decimal("0")

    def to_dict(self) -> dict:
        data = self.model_dump()
        for field in ['subtotal', 'delivery_charge', 'total', 'free_delivery_remaining', 'min_order_amount']:
            data[field] = float(data[field])
        return data


def delivery_charge_for(subtotal: Decimal, charge_empty_cart: bool = True) -> Decimal:
    """
    Delivery charge for a subtotal

    Orders at or above FREE_DELIVERY_ABOVE ship free. With
    charge_empty_cart=False an empty subtotal costs nothing to deliver.
    """
    if subtotal >= settings.FREE_DELIVERY_ABOVE:
        return Decimal("0")
    if subtotal <= 0 and not charge_empty_cart:
        return Decimal("0")
    return Decimal(settings.DELIVERY_CHARGE)


def summarize(subtotal: Decimal, item_count: int, charge_empty_cart: bool = True) -> CartSummary:
    """Build the cart summary for an already-priced subtotal"""
    delivery_charge = delivery_charge_for(subtotal, charge_empty_cart)
    free_threshold = Decimal(settings.FREE_DELIVERY_ABOVE)

    if charge_empty_cart:
        is_free_delivery = delivery_charge == 0
    else:
        is_free_delivery = delivery_charge == 0 and subtotal > 0

    return CartSummary(
        item_count=item_count,
        subtotal=subtotal,
        delivery_charge=delivery_charge,
        total=subtotal + delivery_charge,
        is_free_delivery=is_free_delivery,
        meets_min_order=subtotal >= settings.MIN_ORDER_AMOUNT,
        free_delivery_remaining=max(Decimal("0"), free_threshold - subtotal),
        min_order_amount=Decimal(settings.MIN_ORDER_AMOUNT),
    )
