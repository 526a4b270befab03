"""
Unmapped product reconciliation API routes.

Saving a mapping or combo commits it to the local mapping store first;
the dictionary mirror is then scheduled as a background task and its
outcome never changes the response.
"""

from fastapi import APIRouter, BackgroundTasks, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.inventory import InventoryFilters
from models.reconciliation import (
    UnmappedComputeRequest,
    MappingCreateRequest,
    ComboCreateRequest,
    StockCheckRequest,
    UnmappedListResponse,
    MappingResponse,
    MappingListResponse,
    ComboResponse,
    ComboListResponse,
    ProductNamesResponse,
    QuantitySuggestionResponse,
    StockCheckResponse,
)
from services.inventory_service import get_inventory_service
from services.order_service import get_order_service
from services.reconciliation_service import (
    get_reconciliation_service,
    available_products,
    check_order_stock,
)
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
# UNMAPPED PRODUCTS
# ===================

@router.get("/unmapped", response_model=UnmappedListResponse)
def list_unmapped_products(
    tienda: Optional[str] = Query(None, description="Store name substring"),
    search: Optional[str] = Query(None, description="Filter by name (accent/case insensitive)")
):
    """
    Unmapped order entries grouped by normalized name.

    Orders are read from pedidos_preconfirmacion. Names with a saved
    mapping are excluded.
    """
    try:
        orders = get_order_service().get_orders(tienda=tienda)
        aggregates = get_reconciliation_service().compute_unmapped(orders, search)

        return UnmappedListResponse(
            data=aggregates,
            count=len(aggregates),
            orders_scanned=len(orders)
        )

    except Exception as e:
        return handle_error(e)


@router.post("/unmapped", response_model=UnmappedListResponse)
def compute_unmapped_products(data: UnmappedComputeRequest):
    """
    Same as GET /unmapped for orders supplied in the body.
    """
    try:
        aggregates = get_reconciliation_service().compute_unmapped(data.orders, data.search)

        return UnmappedListResponse(
            data=aggregates,
            count=len(aggregates),
            orders_scanned=len(data.orders)
        )

    except Exception as e:
        return handle_error(e)


# ===================
# MAPPINGS
# ===================

@router.get("/mappings", response_model=MappingListResponse, response_model_by_alias=False)
def list_mappings():
    """All saved mappings."""
    try:
        mappings = get_reconciliation_service().list_mappings()
        return MappingListResponse(data=mappings, count=len(mappings))

    except Exception as e:
        return handle_error(e)


@router.get("/mappings/suggestion", response_model=QuantitySuggestionResponse)
def suggest_mapping_quantity(
    unmapped_name: str = Query(..., min_length=1, description="Raw unmapped name")
):
    """Default units to offer when mapping this name."""
    try:
        quantity = get_reconciliation_service().suggest_quantity(unmapped_name)
        return QuantitySuggestionResponse(unmapped_name=unmapped_name, suggested_quantity=quantity)

    except Exception as e:
        return handle_error(e)


@router.post("/mappings", response_model=MappingResponse, response_model_by_alias=False, status_code=201)
def create_mapping(data: MappingCreateRequest, background_tasks: BackgroundTasks):
    """
    Map an unmapped name to an inventory product.

    Replaces any mapping with the same normalized name, then mirrors the
    entry to the dictionary webhook in the background.
    """
    try:
        service = get_reconciliation_service()
        mapping = service.save_mapping(data.unmapped_name, data.mapped_product_name, data.quantity)

        background_tasks.add_task(
            service.mirror.notify_mapping,
            mapping.unmapped_name,
            mapping.mapped_product_name
        )

        return MappingResponse(
            message="Mapeo guardado exitosamente",
            data=mapping,
            mirror_scheduled=True
        )

    except Exception as e:
        return handle_error(e)


# ===================
# COMBOS
# ===================

@router.get("/combos", response_model=ComboListResponse, response_model_by_alias=False)
def list_combos():
    """All saved combos."""
    try:
        combos = get_reconciliation_service().list_combos()
        return ComboListResponse(data=combos, count=len(combos))

    except Exception as e:
        return handle_error(e)


@router.post("/combos", response_model=ComboResponse, response_model_by_alias=False, status_code=201)
def create_combo(data: ComboCreateRequest, background_tasks: BackgroundTasks):
    """
    Create a combo and map the unmapped name to it.

    Repeated products are merged. The combo is mirrored to the combo
    dictionary webhook in the background.
    """
    try:
        service = get_reconciliation_service()
        combo, mapping = service.create_combo(data.unmapped_name, data.items, data.name)

        background_tasks.add_task(
            service.mirror.notify_combo,
            data.unmapped_name,
            combo.items
        )

        return ComboResponse(
            message=f"Combo creado con {len(combo.items)} productos",
            data=combo,
            mapping=mapping,
            mirror_scheduled=True
        )

    except Exception as e:
        return handle_error(e)


@router.delete("/combos/{combo_id}", status_code=204)
def delete_combo(combo_id: str):
    """
    Delete a combo and every mapping that points to it.
    """
    try:
        get_reconciliation_service().delete_combo(combo_id)
        return None

    except Exception as e:
        return handle_error(e)


# ===================
# INVENTORY LOOKUPS
# ===================

@router.get("/products", response_model=ProductNamesResponse)
def list_available_products(
    tienda: Optional[str] = Query(None, description="Store name substring"),
    search: Optional[str] = Query(None, description="Filter by name (accent/case insensitive)")
):
    """
    Unique inventory product names for mapping and combo selectors.
    """
    try:
        inventory = get_inventory_service().get_inventory(InventoryFilters(tienda=tienda))
        names = available_products(inventory, search)

        return ProductNamesResponse(data=names, count=len(names))

    except Exception as e:
        return handle_error(e)


@router.post("/stock-check", response_model=StockCheckResponse)
def check_stock(data: StockCheckRequest):
    """
    Stock available for each mapped entry of an order's product list.
    """
    try:
        inventory = get_inventory_service().get_inventory(InventoryFilters(tienda=data.tienda))
        items = check_order_stock(data.productos, inventory)

        return StockCheckResponse(data=items, count=len(items))

    except Exception as e:
        return handle_error(e)
