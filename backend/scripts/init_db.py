"""
Create the database schema and load the product catalog

Tables are created from the SQLAlchemy models in app.models (existing
tables are left untouched), then app/data/products.json is upserted.

Usage:
    python3 scripts/init_db.py [--catalog PATH] [--schema-only]

Author: Tawabil Engineering
Date: 2026-01-20
"""
import os
import sys
import logging

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from app.core.database import init_db
from app.services.catalog_loader import load_catalog, seed_catalog


def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description='Create tables and load the product catalog'
    )
    parser.add_argument(
        '--catalog',
        default=None,
        help='Catalog JSON file (default: app/data/products.json)'
    )
    parser.add_argument(
        '--schema-only',
        action='store_true',
        help='Create tables without loading products'
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    init_db()
    print("✅ Schema ready")

    if args.schema_only:
        return

    products = load_catalog(args.catalog)
    count = seed_catalog(products)
    print(f"✅ Loaded {count} products")


if __name__ == "__main__":
    main()
