"""
Product Domain Model

Represents a spice in the Tawabil catalog together with its pack sizes.
This is the single source of truth for product data structure.

Author: Tawabil Engineering
Date: 2026-01-20
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal
from enum import Enum


class Badge(str, Enum):
    PREMIUM = "Premium"
    ORGANIC = "Organic"
    CEYLON = "Ceylon"
    FRESHEST = "Freshest"
    BEST_SELLER = "Best Seller"


# Category id -> display name (order is the order shown in the storefront)
CATEGORIES = {
    "whole-spices": "Whole Spices",
    "ground-spices": "Ground Spices",
    "dry-fruits": "Dry Fruits",
    "gift-packs": "Gift Packs",
}

WHOLE_SPICE_KEYWORDS = ("cardamom", "pepper", "cloves", "cinnamon", "cumin", "elaichi")
GROUND_SPICE_KEYWORDS = ("powder", "ground")


def category_from_name(name: str) -> str:
    """
    Derive a category for products that were loaded without one

    Whole-spice keywords win over ground-spice keywords, and anything
    unrecognised falls back to whole-spices.
    """
    lowered = name.lower()
    if any(keyword in lowered for keyword in WHOLE_SPICE_KEYWORDS):
        return "whole-spices"
    if any(keyword in lowered for keyword in GROUND_SPICE_KEYWORDS):
        return "ground-spices"
    return "whole-spices"


class ProductVariant(BaseModel):
    """
    A purchasable pack size of a product

    Fields:
        pack_size: Pack label (e.g., "50g", "100g")
        price: Price in INR for one pack
        stock: Packs in stock, None when stock is not tracked
    """

    pack_size: str = Field(..., description="Pack size label")
    price: Decimal = Field(..., description="Price per pack (INR)", ge=0)
    stock: Optional[int] = Field(None, description="Packs in stock (None = not tracked)")

    model_config = ConfigDict(from_attributes=True)


class Product(BaseModel):
    """
    Product domain model - represents a spice in our catalog

    Fields:
        id: Internal product ID (primary key)
        product_id: Public slug used by the storefront and carts (e.g., "cardamom")
        name: Product name
        name_hindi: Hindi name shown next to the English one
        description, origin, badge, image: Catalog presentation
        category: One of CATEGORIES
        culinary_uses, health_benefits, purity_indicators: Lists of short phrases
        storage_tips: Free text
        rating, review_count: Review summary
        variants: Pack sizes with price and stock
        is_active: Whether the product is sold
    """

    # Primary identification
    id: Optional[int] = Field(None, description="Internal product ID")
    product_id: str = Field(..., description="Public product slug")
    name: str = Field(..., description="Product name")
    name_hindi: Optional[str] = Field(None, description="Hindi name")

    # Details
    description: Optional[str] = Field(None, description="Product description")
    origin: Optional[str] = Field(None, description="Growing region")
    badge: Optional[Badge] = Field(None, description="Marketing badge")
    category: Optional[str] = Field(None, description="Catalog category")
    image: Optional[str] = Field(None, description="Image path or URL")
    culinary_uses: List[str] = Field(default_factory=list)
    health_benefits: List[str] = Field(default_factory=list)
    storage_tips: Optional[str] = Field(None)
    purity_indicators: List[str] = Field(default_factory=list)

    # Reviews
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)

    # Pack sizes
    variants: List[ProductVariant] = Field(default_factory=list)

    # Metadata
    is_active: bool = Field(True, description="Whether product is active")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    # Computed properties
    @property
    def resolved_category(self) -> str:
        return self.category or category_from_name(self.name)

    @property
    def pack_sizes(self) -> List[str]:
        return [variant.pack_size for variant in self.variants]

    @property
    def prices(self) -> Dict[str, Decimal]:
        """Pack size -> price"""
        return {variant.pack_size: variant.price for variant in self.variants}

    @property
    def min_price(self) -> Optional[Decimal]:
        if not self.variants:
            return None
        return min(variant.price for variant in self.variants)

    @property
    def in_stock(self) -> bool:
        """True when at least one pack size can be bought"""
        return self.is_active and any(self.has_stock(v.pack_size, 1) for v in self.variants)

    def get_variant(self, pack_size: str) -> Optional[ProductVariant]:
        for variant in self.variants:
            if variant.pack_size == pack_size:
                return variant
        return None

    def is_pack_size_available(self, pack_size: str) -> bool:
        return self.is_active and self.get_variant(pack_size) is not None

    def get_price(self, pack_size: str) -> Optional[Decimal]:
        """Current price for a pack size, None if the product cannot be sold in that size"""
        if not self.is_pack_size_available(pack_size):
            return None
        return self.get_variant(pack_size).price

    def has_stock(self, pack_size: str, quantity: int) -> bool:
        variant = self.get_variant(pack_size)
        if variant is None:
            return False
        # If stock is not tracked, assume available
        if variant.stock is None:
            return True
        return variant.stock >= quantity

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump(exclude={'id'})

        data['category'] = self.resolved_category
        data['pack_sizes'] = self.pack_sizes
        data['prices'] = {size: float(price) for size, price in self.prices.items()}
        data['min_price'] = float(self.min_price) if self.min_price is not None else None
        data['in_stock'] = self.in_stock

        # Convert Decimal to float for JSON compatibility
        for variant in data['variants']:
            variant['price'] = float(variant['price'])

        if data.get('created_at'):
            data['created_at'] = data['created_at'].isoformat()
        if data.get('updated_at'):
            data['updated_at'] = data['updated_at'].isoformat()

        return data
