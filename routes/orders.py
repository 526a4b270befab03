"""
Order API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.order import OrderListResponse
from services.order_service import get_order_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred"
        }
    )


@router.get("", response_model=OrderListResponse)
def list_orders(
    tienda: Optional[str] = Query(None, description="Store name substring"),
    limit: Optional[int] = Query(None, ge=1, description="Max orders; omit to fetch everything")
):
    """
    List pre-confirmation orders, newest first.
    """
    try:
        orders = get_order_service().get_orders(tienda=tienda, limit=limit)
        return OrderListResponse(data=orders, count=len(orders))

    except Exception as e:
        return handle_error(e)
