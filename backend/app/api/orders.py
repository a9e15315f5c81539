"""
Orders API Endpoints
Order placement, lookup, cancellation and operator status updates

Endpoints:
- POST  /api/orders                   - Place an order
- GET   /api/orders/{order_id}        - Order details
- GET   /api/orders/phone/{phone}     - Order history for a phone number
- POST  /api/orders/{order_id}/cancel - Customer cancellation
- PATCH /api/orders/{order_id}/status - Operator status change (requires X-Admin-Key)

Author: Tawabil Engineering
Date: 2026-01-20
"""
from fastapi import APIRouter, HTTPException, Header, Depends, Body
from typing import Optional
from psycopg2.errors import UniqueViolation
import logging

from app.core.config import settings
from app.domain.order import OrderCreate, OrderCancel, OrderStatusUpdate, InvalidStatusTransitionError
from app.services.exceptions import OrderNotFoundError, OrderValidationError
from app.services.order_service import OrderService

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# Security - Admin Key Verification
# ============================================================================

async def verify_admin_key(x_admin_key: str = Header(None, alias="X-Admin-Key")):
    """
    Verify the operator API key from X-Admin-Key header.

    Outside production an unset ADMIN_API_KEY leaves the endpoint open
    (local development). In production it must be configured.
    """
    if not settings.ADMIN_API_KEY:
        if settings.is_production:
            logger.error("ADMIN_API_KEY not configured - rejecting operator request")
            raise HTTPException(status_code=401, detail="Admin access is not configured")
        logger.warning("ADMIN_API_KEY not configured - operator endpoints are unprotected!")
        return

    if not x_admin_key:
        logger.warning("Operator request without X-Admin-Key header")
        raise HTTPException(
            status_code=401,
            detail="Missing X-Admin-Key header. Authentication required."
        )

    if x_admin_key != settings.ADMIN_API_KEY:
        logger.warning("Invalid admin key attempt")
        raise HTTPException(status_code=401, detail="Invalid API key")


# ============================================================================
# Endpoints
# ============================================================================

@router.post("", status_code=201)
async def create_order(request: OrderCreate):
    """
    Place a new order

    Prices are taken from the catalog, never from the request. COD orders
    are confirmed immediately; online orders wait for payment.
    """
    try:
        order = OrderService().place_order(request)

        return {
            "status": "success",
            "message": "Order created successfully",
            "order_id": order.order_id,
            "data": {
                "order_id": order.order_id,
                "status": order.status.value,
                "payment_status": order.payment_status.value,
                "total": float(order.total),
                "delivery_slot": order.delivery_slot.model_dump() if order.delivery_slot else None
            }
        }

    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (HTTPException, UniqueViolation):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating order: {str(e)}")


@router.get("/phone/{phone}")
async def get_orders_by_phone(phone: str):
    """
    Order history for a customer, newest first
    """
    try:
        orders = OrderService().get_orders_for_phone(phone)

        return {
            "status": "success",
            "count": len(orders),
            "data": [order.to_summary() for order in orders]
        }

    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/{order_id}")
async def get_order(order_id: str):
    """
    Get full order details including customer and status history
    """
    try:
        order = OrderService().get_order(order_id)

        return {
            "status": "success",
            "data": order.to_dict()
        }

    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.post("/{order_id}/cancel")
async def cancel_order(order_id: str, request: Optional[OrderCancel] = Body(None)):
    """
    Cancel an order (only while pending or confirmed)
    """
    try:
        reason = request.reason if request else None
        order = OrderService().cancel_order(order_id, reason)

        return {
            "status": "success",
            "message": "Order cancelled successfully",
            "data": {
                "order_id": order.order_id,
                "status": order.status.value
            }
        }

    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error cancelling order: {str(e)}")


@router.patch("/{order_id}/status", dependencies=[Depends(verify_admin_key)])
async def update_order_status(order_id: str, request: OrderStatusUpdate):
    """
    Move an order along the fulfilment flow (confirmed -> processing -> dispatched -> delivered)
    """
    try:
        order = OrderService().update_status(order_id, request.status, request.note)

        return {
            "status": "success",
            "message": f"Order status is {order.status.value}",
            "data": {
                "order_id": order.order_id,
                "status": order.status.value,
                "payment_status": order.payment_status.value,
                "status_history": [entry.to_dict() for entry in order.status_history]
            }
        }

    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating order status: {str(e)}")
