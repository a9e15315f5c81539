"""
Catalog Loader
Loads the product catalog from app/data/products.json into the database

Author: Tawabil Engineering
Date: 2026-01-20
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from app.core.database import transaction
from app.domain.product import Product
from app.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

CATALOG_FILE = Path(__file__).parent.parent / 'data' / 'products.json'


def load_catalog(path: Optional[Path] = None) -> List[Product]:
    """
    Read and validate the catalog file

    Args:
        path: JSON file with a top-level "products" list (defaults to the bundled catalog)

    Returns:
        List of Product models (category derived from the name when missing)
    """
    path = Path(path or CATALOG_FILE)
    with path.open(encoding='utf-8') as f:
        data = json.load(f)

    products = [Product(**entry) for entry in data.get('products', [])]
    for product in products:
        product.category = product.resolved_category
    return products


def seed_catalog(products: List[Product], repo: Optional[ProductRepository] = None) -> int:
    """
    Upsert products and their pack sizes in a single transaction

    Returns:
        Number of products written
    """
    repo = repo or ProductRepository()

    with transaction() as conn:
        for product in products:
            repo.upsert(product, conn=conn)

    logger.info(f"Seeded {len(products)} products")
    return len(products)
