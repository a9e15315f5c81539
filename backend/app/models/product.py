"""
Product catalog table definitions
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, DECIMAL, Float, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Product(Base):
    """
    Spices sold in the storefront
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)

    # Identification
    product_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    name_hindi = Column(String(255))

    # Details
    description = Column(Text)
    origin = Column(String(255))
    badge = Column(String(50))
    category = Column(String(50), index=True)
    image = Column(String(500))
    culinary_uses = Column(ARRAY(Text), nullable=False, default=list)
    health_benefits = Column(ARRAY(Text), nullable=False, default=list)
    storage_tips = Column(Text)
    purity_indicators = Column(ARRAY(Text), nullable=False, default=list)

    # Reviews
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)

    # Metadata
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    variants = relationship("ProductVariant", back_populates="product", cascade="all, delete-orphan")


class ProductVariant(Base):
    """
    Pack sizes of a product, each with its own price and (optional) stock
    """
    __tablename__ = "product_variants"
    __table_args__ = (UniqueConstraint("product_id", "pack_size", name="uq_product_pack_size"),)

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)

    pack_size = Column(String(20), nullable=False)
    price = Column(DECIMAL(12, 2), nullable=False)
    # NULL = stock not tracked
    stock = Column(Integer)
    sort_order = Column(Integer, nullable=False, default=0)

    # Relationships
    product = relationship("Product", back_populates="variants")
