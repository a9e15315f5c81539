"""
Cart Service
Re-prices cart lines against the catalog and computes totals

Client prices are never trusted: every line is priced from the products
table, and the client price is only echoed back so the storefront can tell
the shopper a price changed.

Author: Tawabil Engineering
Date: 2026-01-20
"""
from typing import Dict, List, Optional, Tuple
from decimal import Decimal

from app.domain.cart import CartItem, summarize
from app.domain.product import Product
from app.repositories.product_repository import ProductRepository


class CartService:
    """
    Service for cart validation and totals

    Handles:
    - Server-side pricing of cart lines
    - Delivery charge / free delivery / minimum order rules
    """

    def __init__(self, product_repo: Optional[ProductRepository] = None):
        self.product_repo = product_repo or ProductRepository()

    def load_products(self, items: List[CartItem]) -> Dict[str, Product]:
        """Fetch every product referenced by the cart in one call"""
        return self.product_repo.find_by_product_ids([item.product_id for item in items])

    @staticmethod
    def price_for(products: Dict[str, Product], item: CartItem) -> Optional[Decimal]:
        """Current price of a cart line's pack, or None if it cannot be sold"""
        product = products.get(item.product_id)
        if product is None:
            return None
        return product.get_price(item.pack_size)

    def price_items(self, items: List[CartItem]) -> Tuple[List[dict], List[dict]]:
        """
        Price cart lines from the catalog

        Returns:
            (priced lines, errors) - unknown products or pack sizes end up in
            errors and are left out of the priced lines
        """
        products = self.load_products(items)
        priced = []
        errors = []

        for item in items:
            price = self.price_for(products, item)

            if price is None:
                errors.append({
                    'product_id': item.product_id,
                    'pack_size': item.pack_size,
                    'error': 'Product or pack size not found'
                })
                continue

            product = products[item.product_id]
            priced.append({
                'product_id': item.product_id,
                'name': product.name,
                'pack_size': item.pack_size,
                'quantity': item.quantity,
                'price': price,
                'original_price': item.price,
                'price_changed': item.price != price,
                'total': price * item.quantity,
            })

        return priced, errors

    def validate_cart(self, items: List[CartItem]) -> dict:
        """
        Validate a cart and report per-line problems

        Delivery is charged whenever the subtotal is below the free delivery
        threshold, even if no line could be priced.
        """
        priced, errors = self.price_items(items)

        subtotal = sum((line['total'] for line in priced), Decimal('0'))
        item_count = sum(line['quantity'] for line in priced)
        summary = summarize(subtotal, item_count, charge_empty_cart=True).to_dict()
        summary.pop('min_order_amount')

        # Convert Decimal to float for JSON compatibility
        for line in priced:
            line['price'] = float(line['price'])
            line['total'] = float(line['total'])
            if line['original_price'] is not None:
                line['original_price'] = float(line['original_price'])

        return {
            'valid': len(errors) == 0,
            'items': priced,
            'errors': errors,
            'summary': summary,
        }

    def calculate_totals(self, items: List[CartItem]) -> dict:
        """
        Totals only; lines that cannot be priced are skipped

        An empty subtotal has no delivery charge.
        """
        products = self.load_products(items)
        subtotal = Decimal('0')
        item_count = 0

        for item in items:
            price = self.price_for(products, item)
            if price is not None:
                subtotal += price * item.quantity
                item_count += item.quantity

        return summarize(subtotal, item_count, charge_empty_cart=False).to_dict()
