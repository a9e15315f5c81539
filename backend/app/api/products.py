"""
Products API Endpoints
Public catalog: listing, search, categories and product detail

Author: Tawabil Engineering
Date: 2026-01-20
"""
from fastapi import APIRouter, HTTPException, Query
from typing import Optional

from app.domain.product import CATEGORIES
from app.repositories.product_repository import ProductRepository, SORT_ORDERS

router = APIRouter()


@router.get("")
async def get_products(
    category: Optional[str] = Query(None, description="Filter by category ('all' for every category)"),
    sort: Optional[str] = Query(None, description=f"One of: {', '.join(SORT_ORDERS)}"),
    search: Optional[str] = Query(None, description="Search by name, Hindi name, description or origin"),
    limit: Optional[int] = Query(None, ge=1, le=500)
):
    """
    Get active products with optional filters

    Returns products with pack sizes, prices and stock flags included
    """
    try:
        repo = ProductRepository()

        products = repo.find_all(
            category=category,
            search=search.strip() if search else None,
            sort=sort,
            limit=limit
        )

        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/search")
async def search_products(
    q: Optional[str] = Query(None, description="Search term"),
    limit: int = Query(10, ge=1, le=100)
):
    """
    Search products (also matches culinary uses, e.g. "biryani")
    """
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query is required")

    try:
        repo = ProductRepository()
        products = repo.find_all(search=q.strip(), limit=limit, search_culinary_uses=True)

        return {
            "status": "success",
            "query": q,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error searching products: {str(e)}")


@router.get("/categories")
async def get_categories():
    """
    Get the category list with active product counts
    """
    try:
        counts = ProductRepository().count_by_category()

        categories = [{"id": "all", "name": "All Products", "count": sum(counts.values())}]
        categories.extend(
            {"id": category_id, "name": name, "count": counts.get(category_id, 0)}
            for category_id, name in CATEGORIES.items()
        )

        return {
            "status": "success",
            "data": categories
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching categories: {str(e)}")


@router.get("/{product_id}")
async def get_product(product_id: str):
    """
    Get a single product by slug
    """
    try:
        product = ProductRepository().find_by_product_id(product_id)

        if not product:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

        return {
            "status": "success",
            "data": product.to_dict()
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")
