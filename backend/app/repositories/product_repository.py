"""
Product Repository - Data Access Layer for Products

Handles all database queries for the catalog and returns Product domain
models with their pack-size variants attached.

Author: Tawabil Engineering
Date: 2026-01-20
"""
from typing import List, Optional, Dict
from app.domain.product import Product, ProductVariant
from app.core.database import get_db_connection_dict


PRODUCT_COLUMNS = """
    p.id, p.product_id, p.name, p.name_hindi, p.description, p.origin,
    p.badge, p.category, p.image, p.culinary_uses, p.health_benefits,
    p.storage_tips, p.purity_indicators, p.rating, p.review_count,
    p.is_active, p.created_at, p.updated_at
"""

MIN_PRICE_SQL = "(SELECT MIN(v.price) FROM product_variants v WHERE v.product_id = p.id)"

SORT_ORDERS = {
    'price-asc': f"{MIN_PRICE_SQL} ASC NULLS LAST, p.name ASC",
    'price-desc': f"{MIN_PRICE_SQL} DESC NULLS LAST, p.name ASC",
    'name-asc': "p.name ASC",
    'name-desc': "p.name DESC",
    'rating': "p.rating DESC, p.review_count DESC, p.name ASC",
}

# Catalog order (as loaded) when no sort is requested
DEFAULT_ORDER = "p.id ASC"


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict, variants: List[ProductVariant]) -> Product:
        """Map a products row plus its variant rows to a Product domain model"""
        return Product(
            id=row['id'],
            product_id=row['product_id'],
            name=row['name'],
            name_hindi=row.get('name_hindi'),
            description=row.get('description'),
            origin=row.get('origin'),
            badge=row.get('badge'),
            category=row.get('category'),
            image=row.get('image'),
            culinary_uses=row.get('culinary_uses') or [],
            health_benefits=row.get('health_benefits') or [],
            storage_tips=row.get('storage_tips'),
            purity_indicators=row.get('purity_indicators') or [],
            rating=row.get('rating') or 0,
            review_count=row.get('review_count') or 0,
            variants=variants,
            is_active=row['is_active'],
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    def _attach_variants(self, cursor, rows: List[dict]) -> List[Product]:
        """
        Load variants for all rows in ONE query and build Product models

        Keeps list endpoints at two queries regardless of page size.
        """
        if not rows:
            return []

        ids = [row['id'] for row in rows]
        cursor.execute("""
            SELECT product_id, pack_size, price, stock
            FROM product_variants
            WHERE product_id = ANY(%s)
            ORDER BY product_id, sort_order, id
        """, (ids,))

        variants_by_product: Dict[int, List[ProductVariant]] = {}
        for variant in cursor.fetchall():
            variants_by_product.setdefault(variant['product_id'], []).append(
                ProductVariant(
                    pack_size=variant['pack_size'],
                    price=variant['price'],
                    stock=variant['stock'],
                )
            )

        return [self._map_row_to_product(row, variants_by_product.get(row['id'], [])) for row in rows]

    def find_by_product_id(self, product_id: str, active_only: bool = True) -> Optional[Product]:
        """
        Find product by its public slug

        Args:
            product_id: Product slug (e.g., "cardamom")
            active_only: Ignore products that are no longer sold

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            active_clause = "AND p.is_active = true" if active_only else ""
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE p.product_id = %s {active_clause}
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._attach_variants(cursor, [row])[0]

        finally:
            cursor.close()
            conn.close()

    def find_by_product_ids(self, product_ids: List[str]) -> Dict[str, Product]:
        """
        Find several products at once (used to price a cart)

        Inactive products are included; callers decide whether they can be sold.

        Returns:
            Dict of product slug -> Product for the slugs that exist
        """
        if not product_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE p.product_id = ANY(%s)
            """, (list(set(product_ids)),))

            products = self._attach_variants(cursor, cursor.fetchall())
            return {product.product_id: product for product in products}

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
        search_culinary_uses: bool = False
    ) -> List[Product]:
        """
        Find active products with filters

        Args:
            category: Filter by category ("all" or None = every category)
            search: Case-insensitive match on name, Hindi name, description or origin
            sort: One of SORT_ORDERS keys; unknown values keep catalog order
            limit: Maximum results to return
            search_culinary_uses: Also match the search term against culinary uses

        Returns:
            List of products
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            # Build WHERE clause
            conditions = ["p.is_active = true"]
            params = []

            if category and category != 'all':
                conditions.append("p.category = %s")
                params.append(category)

            if search:
                search_term = f"%{search}%"
                search_conditions = [
                    "p.name ILIKE %s",
                    "p.name_hindi ILIKE %s",
                    "p.description ILIKE %s",
                    "p.origin ILIKE %s",
                ]
                params.extend([search_term] * 4)

                if search_culinary_uses:
                    search_conditions.append(
                        "EXISTS (SELECT 1 FROM unnest(p.culinary_uses) AS u(culinary_use) WHERE u.culinary_use ILIKE %s)"
                    )
                    params.append(search_term)

                conditions.append("(" + " OR ".join(search_conditions) + ")")

            where_clause = " AND ".join(conditions)
            order_clause = SORT_ORDERS.get(sort, DEFAULT_ORDER)

            query = f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE {where_clause}
                ORDER BY {order_clause}
            """
            if limit is not None:
                query += " LIMIT %s"
                params.append(limit)

            cursor.execute(query, params)
            return self._attach_variants(cursor, cursor.fetchall())

        finally:
            cursor.close()
            conn.close()

    def count_by_category(self) -> Dict[str, int]:
        """
        Count active products per category

        Returns:
            Dict of category -> number of active products
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT category, COUNT(*) as count
                FROM products
                WHERE is_active = true
                GROUP BY category
            """)
            return {row['category']: row['count'] for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    def upsert(self, product: Product, conn=None) -> int:
        """
        Insert or update a product and replace its variants

        Used by the catalog loader; matching is by product slug.

        Args:
            product: Product to store
            conn: Database connection (optional, will create and commit if not provided)

        Returns:
            Internal product ID
        """
        should_close = conn is None
        if conn is None:
            conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO products (
                    product_id, name, name_hindi, description, origin, badge,
                    category, image, culinary_uses, health_benefits,
                    storage_tips, purity_indicators, rating, review_count, is_active
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s
                )
                ON CONFLICT (product_id) DO UPDATE SET
                    name = EXCLUDED.name,
                    name_hindi = EXCLUDED.name_hindi,
                    description = EXCLUDED.description,
                    origin = EXCLUDED.origin,
                    badge = EXCLUDED.badge,
                    category = EXCLUDED.category,
                    image = EXCLUDED.image,
                    culinary_uses = EXCLUDED.culinary_uses,
                    health_benefits = EXCLUDED.health_benefits,
                    storage_tips = EXCLUDED.storage_tips,
                    purity_indicators = EXCLUDED.purity_indicators,
                    rating = EXCLUDED.rating,
                    review_count = EXCLUDED.review_count,
                    is_active = EXCLUDED.is_active,
                    updated_at = NOW()
                RETURNING id
            """, (
                product.product_id,
                product.name,
                product.name_hindi,
                product.description,
                product.origin,
                product.badge,
                product.resolved_category,
                product.image,
                product.culinary_uses,
                product.health_benefits,
                product.storage_tips,
                product.purity_indicators,
                product.rating,
                product.review_count,
                product.is_active,
            ))
            internal_id = cursor.fetchone()['id']

            cursor.execute("DELETE FROM product_variants WHERE product_id = %s", (internal_id,))
            for position, variant in enumerate(product.variants):
                cursor.execute("""
                    INSERT INTO product_variants (product_id, pack_size, price, stock, sort_order)
                    VALUES (%s, %s, %s, %s, %s)
                """, (internal_id, variant.pack_size, variant.price, variant.stock, position))

            if should_close:
                conn.commit()
            return internal_id

        finally:
            cursor.close()
            if should_close:
                conn.close()
