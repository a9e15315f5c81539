"""
Order table definition
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, DECIMAL, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Order(Base):
    """
    Orders placed through the storefront

    Items, address and delivery slot are stored as JSONB snapshots so an
    order keeps the prices and address it was placed with.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    # Identification
    order_id = Column(String(32), nullable=False, unique=True, index=True)

    # Customer (reference + snapshot at order time)
    customer_id = Column(Integer, ForeignKey("customers.id"), index=True)
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(10), nullable=False, index=True)
    customer_email = Column(String(255))

    # Snapshots
    address = Column(JSONB, nullable=False)
    items = Column(JSONB, nullable=False)
    delivery_slot = Column(JSONB)

    # Amounts (INR)
    subtotal = Column(DECIMAL(12, 2), nullable=False)
    delivery_charge = Column(DECIMAL(12, 2), nullable=False, default=0)
    total = Column(DECIMAL(12, 2), nullable=False)

    # States
    payment_method = Column(String(10), nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    status_history = Column(JSONB, nullable=False, default=list)

    # Payment gateway references
    razorpay_order_id = Column(String(64), index=True)
    razorpay_payment_id = Column(String(64), index=True)
    razorpay_signature = Column(String(128))

    notes = Column(Text)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="orders")
