"""
Order Domain Models

Represents storefront orders and the rules for moving them between
statuses. These are the single source of truth for order data structure.

Author: Tawabil Engineering
Date: 2026-01-20
"""
import re
import secrets
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from app.core.config import settings
from app.core.sanitize import sanitize
from app.domain.cart import CartItem


PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# No 0/O or 1/I so ids can be read out over the phone
ORDER_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ORDER_ID_PREFIX = "TW"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    COD = "cod"
    ONLINE = "online"


# Fulfilment state machine
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.DISPATCHED},
    OrderStatus.DISPATCHED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

CANCELLABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}


class InvalidStatusTransitionError(ValueError):
    """Raised when an order cannot move from its current status to the requested one"""

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot change order status from {current} to {requested}")


def generate_order_id(now: Optional[datetime] = None) -> str:
    """
    Generate a public order id: TW-YYMMDD-XXXXXX

    The date part is the UTC day the order was placed; the random part has
    32^6 combinations per day. Uniqueness is still enforced by the database.
    """
    now = now or datetime.now(timezone.utc)
    random_part = "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(6))
    return f"{ORDER_ID_PREFIX}-{now:%y%m%d}-{random_part}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Value objects (embedded in the order)
# ============================================================================

class CustomerInfo(BaseModel):
    """Customer contact details as given at checkout"""

    name: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., description="10-digit mobile number")
    email: Optional[str] = Field(None)

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data):
        return sanitize(data)

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        if not PHONE_PATTERN.match(value):
            raise ValueError("Phone number must be 10 digits")
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email address")
        return value.lower()


class Address(BaseModel):
    """Delivery address - must be inside the delivery city"""

    house_no: str = Field(..., min_length=1, max_length=200)
    street: str = Field(..., min_length=1, max_length=200)
    area: str = Field(..., min_length=1, max_length=100)
    landmark: Optional[str] = Field(None, max_length=200)
    pincode: str = Field(...)
    city: Optional[str] = Field(None, validate_default=True)
    notes: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data):
        return sanitize(data)

    @field_validator("pincode")
    @classmethod
    def _check_pincode(cls, value: str) -> str:
        if not re.match(settings.PINCODE_PATTERN, value):
            raise ValueError(f"We only deliver within {settings.DELIVERY_CITY} (560xxx pincodes)")
        return value

    @field_validator("city")
    @classmethod
    def _check_city(cls, value: Optional[str]) -> str:
        if not value:
            return settings.DELIVERY_CITY
        if value.strip().lower() != settings.DELIVERY_CITY.lower():
            raise ValueError(f"We only deliver within {settings.DELIVERY_CITY}")
        return settings.DELIVERY_CITY


class DeliverySlot(BaseModel):
    """Requested delivery day and window"""

    date: str = Field(..., min_length=1, description="Delivery date (YYYY-MM-DD)")
    display_date: Optional[str] = None
    day: Optional[str] = None
    time: Optional[str] = Field(None, validate_default=True)

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data):
        return sanitize(data)

    @field_validator("time")
    @classmethod
    def _default_time(cls, value: Optional[str]) -> str:
        return value or settings.DEFAULT_DELIVERY_WINDOW


class OrderItem(BaseModel):
    """
    Order line - a snapshot of the catalog price at order time

    Fields:
        product_id: Product slug
        name: Product name at order time
        pack_size: Pack size label
        quantity: Number of packs
        price: Server-side price per pack
        total: price * quantity
    """

    product_id: str
    name: str
    pack_size: str
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    total: Decimal = Field(..., ge=0)

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['price'] = float(data['price'])
        data['total'] = float(data['total'])
        return data


class StatusHistoryEntry(BaseModel):
    status: str
    timestamp: datetime
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'status': self.status,
            'timestamp': self.timestamp.isoformat(),
            'note': self.note,
        }


# ============================================================================
# Order aggregate
# ============================================================================

class Order(BaseModel):
    """
    Order domain model - represents a customer order

    Status changes go through the methods below so every change is checked
    against ALLOWED_TRANSITIONS and recorded in status_history. All of them
    return True when they changed the order and False when the order was
    already in the requested state, which makes repeated gateway callbacks
    harmless.
    """

    # Primary identification
    id: Optional[int] = Field(None, description="Internal order ID")
    order_id: str = Field(..., description="Public order ID (TW-YYMMDD-XXXXXX)")

    # Customer
    customer_id: Optional[int] = Field(None, description="Customer ID")
    customer: CustomerInfo

    # Snapshots
    address: Address
    items: List[OrderItem] = Field(..., min_length=1)
    delivery_slot: Optional[DeliverySlot] = None

    # Financial information (INR)
    subtotal: Decimal = Field(..., ge=0)
    delivery_charge: Decimal = Field(Decimal('0'), ge=0)
    total: Decimal = Field(..., ge=0)

    # Status tracking
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = OrderStatus.PENDING
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)

    # Payment gateway references
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None

    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    @classmethod
    def place(
        cls,
        customer: CustomerInfo,
        address: Address,
        items: List[OrderItem],
        delivery_charge: Decimal,
        payment_method: PaymentMethod,
        delivery_slot: Optional[DeliverySlot] = None,
        order_id: Optional[str] = None,
    ) -> "Order":
        """
        Build a new order from server-priced items

        COD orders are confirmed straight away; online orders wait for the
        payment callback.
        """
        payment_method = PaymentMethod(payment_method)
        subtotal = sum((item.total for item in items), Decimal('0'))
        initial_status = OrderStatus.CONFIRMED if payment_method == PaymentMethod.COD else OrderStatus.PENDING

        return cls(
            order_id=order_id or generate_order_id(),
            customer=customer,
            address=address,
            items=items,
            delivery_slot=delivery_slot,
            subtotal=subtotal,
            delivery_charge=delivery_charge,
            total=subtotal + delivery_charge,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING,
            status=initial_status,
            status_history=[StatusHistoryEntry(status=initial_status.value, timestamp=_utcnow())],
        )

    # Computed properties
    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def amount_in_paise(self) -> int:
        return int((self.total * 100).to_integral_value())

    # Status transitions
    def _set_status(self, new_status: OrderStatus, note: Optional[str] = None):
        self.status = new_status
        self.status_history = self.status_history + [
            StatusHistoryEntry(status=new_status.value, timestamp=_utcnow(), note=note)
        ]

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return OrderStatus(new_status) in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, new_status: OrderStatus, note: Optional[str] = None) -> bool:
        """Move along the fulfilment state machine; same status is a no-op"""
        new_status = OrderStatus(new_status)
        if self.status == new_status:
            return False
        if not self.can_transition_to(new_status):
            raise InvalidStatusTransitionError(self.status.value, new_status.value)
        self._set_status(new_status, note)
        return True

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Customer cancellation, only before the order is being processed"""
        if self.status == OrderStatus.CANCELLED:
            return False
        if self.status not in CANCELLABLE_STATUSES:
            raise InvalidStatusTransitionError(
                self.status.value,
                OrderStatus.CANCELLED.value,
                f"Cannot cancel order with status: {self.status.value}",
            )
        self._set_status(OrderStatus.CANCELLED, reason or "Cancelled by customer")
        return True

    def mark_paid(self, payment_id: Optional[str], signature: Optional[str] = None) -> bool:
        """Record a successful payment; a pending order becomes confirmed"""
        if self.payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            return False

        self.payment_status = PaymentStatus.PAID
        self.razorpay_payment_id = payment_id
        if signature:
            self.razorpay_signature = signature

        if self.status == OrderStatus.PENDING:
            self._set_status(OrderStatus.CONFIRMED, "Payment received")
        return True

    def mark_payment_failed(self) -> bool:
        """A paid or refunded payment is never downgraded"""
        if self.payment_status != PaymentStatus.PENDING:
            return False
        self.payment_status = PaymentStatus.FAILED
        return True

    def mark_refunded(self, note: str = "Refund processed") -> bool:
        if self.payment_status == PaymentStatus.REFUNDED:
            return False
        self.payment_status = PaymentStatus.REFUNDED
        if self.status not in (OrderStatus.CANCELLED, OrderStatus.DELIVERED):
            self._set_status(OrderStatus.CANCELLED, note)
        return True

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump(mode='json', exclude={'id', 'items', 'status_history'})

        data['items'] = [item.to_dict() for item in self.items]
        data['status_history'] = [entry.to_dict() for entry in self.status_history]
        data['item_count'] = self.item_count
        data['is_paid'] = self.is_paid

        # Convert Decimal to float for JSON compatibility
        for field in ['subtotal', 'delivery_charge', 'total']:
            data[field] = float(getattr(self, field))

        return data

    def to_summary(self) -> dict:
        """Lightweight view used for order history listings"""
        return {
            'order_id': self.order_id,
            'status': self.status.value,
            'payment_status': self.payment_status.value,
            'total': float(self.total),
            'item_count': self.item_count,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'delivery_slot': self.delivery_slot.model_dump() if self.delivery_slot else None,
        }


# ============================================================================
# Request schemas
# ============================================================================

class OrderCreate(BaseModel):
    """Schema for placing a new order"""
    customer: CustomerInfo
    address: Address
    items: List[CartItem] = Field(..., min_length=1)
    delivery_slot: DeliverySlot
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data):
        return sanitize(data)


class OrderCancel(BaseModel):
    """Schema for a customer cancellation"""
    reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data):
        return sanitize(data)


class OrderStatusUpdate(BaseModel):
    """Schema for an operator status change"""
    status: OrderStatus
    note: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data):
        return sanitize(data)
