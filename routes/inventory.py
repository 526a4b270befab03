"""
Inventory API routes.

Reads come from Supabase; create/edit/delete are forwarded to the
inventory webhook. Handlers that reach Supabase or the webhook are plain
def so they run in the threadpool instead of on the event loop.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from config import settings
from models.inventory import (
    InventoryFilters,
    MovementFilters,
    InventoryListResponse,
    MovementListResponse,
    InventorySummaryResponse,
    StockStatus,
)
from models.operations import InventoryOperationRequest, WebhookRelayResponse
from services.inventory_service import get_inventory_service, summarize_by_store
from services.webhook_proxy_service import get_webhook_proxy_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred"
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=InventoryListResponse)
def list_inventory(
    tienda: Optional[str] = Query(None, description="Store name substring"),
    search: Optional[str] = Query(None, description="Product name substring"),
    limit: Optional[int] = Query(None, description="Max rows; omit to fetch everything")
):
    """
    List inventory products ordered by name.

    Used by the dashboard and by n8n workflows.
    """
    try:
        filters = InventoryFilters(tienda=tienda, search=search, limit=limit)
        products = get_inventory_service().get_inventory(filters)

        return InventoryListResponse(
            data=products,
            count=len(products),
            filters={
                "tienda": tienda or None,
                "search": search or None,
                "limit": limit or None,
            }
        )

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=WebhookRelayResponse, response_model_exclude_none=True)
def submit_inventory_operation(data: InventoryOperationRequest):
    """
    Create, edit or delete an inventory product through the webhook.

    Upstream rejections come back as 200 with success false so the
    dashboard can show the message inline. A webhook timeout is a 504.
    """
    logger.info("inventory_operation_requested", tipo_operacion=data.tipo_operacion.value)

    try:
        return get_webhook_proxy_service().submit_operation(data)

    except Exception as e:
        return handle_error(e)


@router.get("/control", response_model=MovementListResponse)
def list_movements(
    producto: Optional[str] = Query(None, description="Product name substring"),
    tienda: Optional[str] = Query(None, description="Store name substring"),
    fecha_desde: Optional[str] = Query(None, description="created_at lower bound (ISO-8601)"),
    fecha_hasta: Optional[str] = Query(None, description="created_at upper bound (ISO-8601)"),
    limit: Optional[int] = Query(None, description="Max rows; omit to fetch everything")
):
    """
    List inventory movements, newest first.

    Movement columns vary between deployments; the response lists the
    columns of the first row.
    """
    try:
        filters = MovementFilters(
            producto=producto,
            tienda=tienda,
            fecha_desde=fecha_desde,
            fecha_hasta=fecha_hasta,
            limit=limit,
        )
        movements = get_inventory_service().get_movements(filters)

        return MovementListResponse(
            data=movements,
            count=len(movements),
            columns=list(movements[0].keys()) if movements else [],
            filters=filters.model_dump()
        )

    except Exception as e:
        return handle_error(e)


@router.get("/summary", response_model=InventorySummaryResponse)
def get_inventory_summary(
    tienda: Optional[str] = Query(None, description="Store name substring"),
    minimum: Optional[int] = Query(None, ge=0, description="Low-stock threshold"),
    maximum: Optional[int] = Query(None, ge=1, description="Over-stock threshold")
):
    """
    Inventory grouped by store and stock status.
    """
    try:
        minimum = settings.default_minimum_stock if minimum is None else minimum
        maximum = settings.default_maximum_stock if maximum is None else maximum

        products = get_inventory_service().get_inventory(InventoryFilters(tienda=tienda))
        stores = summarize_by_store(products, minimum, maximum)

        status_counts = {status: 0 for status in StockStatus}
        for store in stores:
            for status, count in store.status_counts.items():
                status_counts[status] += count

        return InventorySummaryResponse(
            stores=stores,
            status_counts=status_counts,
            total_products=len(products),
            minimum_stock=minimum,
            maximum_stock=maximum
        )

    except Exception as e:
        return handle_error(e)
