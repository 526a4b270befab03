"""
Dictionary API routes.

Forward dictionary entries (product aliases and combos) to the n8n
dictionary webhooks. A non-2xx answer is relayed with the upstream
status code.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.operations import (
    DictionaryProductRequest,
    DictionaryComboRequest,
    DictionaryProductResponse,
    DictionaryComboResponse,
)
from services.webhook_proxy_service import get_webhook_proxy_service
from exceptions import AppError, WebhookError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, WebhookError):
        return JSONResponse(
            status_code=e.upstream_status,
            content={
                "success": False,
                "error": e.message,
                "details": e.body,
                "status": e.upstream_status,
                "timestamp": e.timestamp
            }
        )
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
# PRODUCTS
# ===================

@router.get("")
async def dictionary_info():
    """Describe the product dictionary endpoint."""
    return {
        "success": True,
        "message": "Endpoint de diccionario de inventario",
        "endpoint": "/api/inventory/dictionary",
        "method": "POST",
        "description": "Agrega productos existentes al diccionario",
        "required_fields": ["producto_existente"],
        "example": {
            "producto_existente": "Collar Orion Talla M",
        },
    }


@router.post("", response_model=DictionaryProductResponse, response_model_exclude_none=True)
def add_product_to_dictionary(data: DictionaryProductRequest):
    """
    Add an existing inventory product to the dictionary.

    The product must already exist upstream; producto_nuevo optionally
    names the alias that should resolve to it.
    """
    try:
        result = get_webhook_proxy_service().add_product_to_dictionary(data)

        return DictionaryProductResponse(
            message="Producto agregado al diccionario exitosamente",
            data=result,
            producto=data.producto_existente
        )

    except Exception as e:
        return handle_error(e)


# ===================
# COMBOS
# ===================

@router.get("/combos")
async def dictionary_combos_info():
    """Describe the combo dictionary endpoint."""
    return {
        "success": True,
        "message": "Endpoint de combos del diccionario de inventario",
        "endpoint": "/api/inventory/dictionary/combos",
        "method": "POST",
        "description": "Agrega combos existentes al diccionario con sus productos asociados",
        "required_fields": ["combo_existente", "combo_nuevo"],
        "example": {
            "combo_existente": "Combo Estrella",
            "combo_nuevo": ["Collar Orion Talla M", "Anillo Luna Talla S"],
        },
    }


@router.post("/combos", response_model=DictionaryComboResponse, response_model_exclude_none=True)
def add_combo_to_dictionary(data: DictionaryComboRequest):
    """
    Add a combo and its member products to the dictionary.
    """
    try:
        result = get_webhook_proxy_service().add_combo_to_dictionary(data)

        return DictionaryComboResponse(
            message="Combo agregado al diccionario exitosamente",
            data=result,
            combo_existente=data.combo_existente,
            productos_count=len(data.combo_nuevo)
        )

    except Exception as e:
        return handle_error(e)
