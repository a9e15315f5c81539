"""
Cart API Endpoints
Server-side cart validation and totals

Author: Tawabil Engineering
Date: 2026-01-20
"""
from fastapi import APIRouter, HTTPException

from app.domain.cart import CartRequest
from app.services.cart_service import CartService

router = APIRouter()


@router.post("/validate")
async def validate_cart(request: CartRequest):
    """
    Re-price every cart line from the catalog

    Lines that cannot be priced are reported in `errors`; `valid` is False
    when there is at least one.
    """
    try:
        result = CartService().validate_cart(request.items)

        return {
            "status": "success",
            **result
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error validating cart: {str(e)}")


@router.post("/calculate")
async def calculate_totals(request: CartRequest):
    """
    Cart totals only (unknown lines are skipped)
    """
    try:
        summary = CartService().calculate_totals(request.items)

        return {
            "status": "success",
            "summary": summary
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error calculating totals: {str(e)}")
