"""
Customer table definition
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, DECIMAL
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Customer(Base):
    """
    Customers, identified by their 10-digit phone number
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)

    phone = Column(String(10), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255))

    # Order stats
    total_orders = Column(Integer, nullable=False, default=0)
    total_spent = Column(DECIMAL(12, 2), nullable=False, default=0)
    last_order_date = Column(DateTime(timezone=True))

    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    orders = relationship("Order", back_populates="customer")
