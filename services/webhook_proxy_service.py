"""
Proxy for inventory mutations and dictionary entries handled by n8n.

Inventory create/edit/delete and dictionary additions are not written
to Supabase here; they are forwarded to the configured webhooks, which
own the business rules.
"""

import json
from typing import Optional
import structlog

from config import settings
from exceptions import ExternalServiceError, WebhookError, WebhookNotConfiguredError
from integrations.webhook import post_json
from models.operations import (
    DictionaryComboRequest,
    DictionaryProductRequest,
    InventoryOperationRequest,
    OperationType,
    WebhookRelayResponse,
)

logger = structlog.get_logger(__name__)

NOT_FOUND_SENTINEL = "No item to return was found"
DEFAULT_WEBHOOK_ERROR = "Error al procesar en webhook"
PLAIN_TEXT_MESSAGE_MAX = 200


def build_mutation_payload(request: InventoryOperationRequest) -> dict:
    """
    Webhook body for an inventory operation.

    Deletes forward producto exactly as received so the webhook can match
    the stored name; create/edit send trimmed names.
    """
    if request.tipo_operacion == OperationType.ELIMINAR:
        return {
            "producto": request.producto,
            "tipo_operacion": request.tipo_operacion.value,
            "usuario": request.usuario,
        }

    return {
        "producto": request.producto.strip(),
        "cantidad": request.cantidad,
        "tienda": request.tienda.strip(),
        "stock_minimo": request.stock_minimo,
        "stock_maximo": request.stock_maximo,
        "tipo_operacion": request.tipo_operacion.value,
        "usuario": request.usuario,
    }


def friendly_error_message(producto: str, body: str) -> str:
    """
    Human-readable message for a rejected inventory operation.

    - "No item to return was found" anywhere in the body → not found text
    - JSON body → its "message" (or "error") field
    - short plain text → the text itself
    """
    if NOT_FOUND_SENTINEL in body:
        return (
            f'El producto "{producto}" no se encontró en el inventario. '
            "Puede que ya haya sido eliminado o que el nombre no coincida exactamente."
        )

    try:
        parsed = json.loads(body)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        message = parsed.get("message") or parsed.get("error")
        if isinstance(message, str) and message:
            return message
    elif parsed is None and body and len(body) < PLAIN_TEXT_MESSAGE_MAX:
        return body

    return DEFAULT_WEBHOOK_ERROR


class WebhookProxyService:
    """
    Forwards validated requests to the n8n webhooks.

    Inventory operations always resolve to a WebhookRelayResponse (except
    timeouts); dictionary additions raise WebhookError on non-2xx so the
    route can relay the upstream status.
    """

    def __init__(
        self,
        inventory_url: Optional[str] = None,
        dictionary_url: Optional[str] = None,
        combos_url: Optional[str] = None,
    ):
        self.inventory_url = inventory_url or settings.inventory_webhook_url
        self.dictionary_url = dictionary_url or settings.dictionary_webhook_url
        self.combos_url = combos_url or settings.dictionary_combos_webhook_url

    # ===================
    # INVENTORY OPERATIONS
    # ===================

    def submit_operation(self, request: InventoryOperationRequest) -> WebhookRelayResponse:
        """
        Create, edit or delete an inventory product through the webhook.

        Args:
            request: Validated operation

        Returns:
            WebhookRelayResponse with success False on any upstream failure

        Raises:
            WebhookNotConfiguredError: If INVENTORY_WEBHOOK_URL is unset
            WebhookTimeoutError: If the webhook does not answer in time
        """
        if not self.inventory_url:
            raise WebhookNotConfiguredError("INVENTORY_WEBHOOK_URL")

        operation = request.tipo_operacion
        payload = build_mutation_payload(request)

        logger.info("inventory_operation_started", tipo_operacion=operation.value)

        try:
            result = post_json(self.inventory_url, payload)
        except ExternalServiceError as e:
            logger.error("inventory_operation_failed", tipo_operacion=operation.value, error=e.message)
            return WebhookRelayResponse(
                success=False,
                error="Error al procesar la operación de inventario",
                message=e.message,
            )

        if not result.ok:
            logger.warning(
                "inventory_operation_rejected",
                tipo_operacion=operation.value,
                status=result.status_code
            )
            return WebhookRelayResponse(
                success=False,
                error=DEFAULT_WEBHOOK_ERROR,
                message=friendly_error_message(request.producto, result.text),
                details=result.text,
                status=result.status_code,
            )

        logger.info("inventory_operation_completed", tipo_operacion=operation.value)

        return WebhookRelayResponse(
            success=True,
            message=f"Inventario {operation.past_participle} exitosamente",
            data=result.json_or_message(),
        )

    # ===================
    # DICTIONARY
    # ===================

    def _forward(self, url: Optional[str], setting_name: str, payload: dict):
        if not url:
            raise WebhookNotConfiguredError(setting_name)

        result = post_json(url, payload)
        if not result.ok:
            raise WebhookError(result.status_code, result.text)
        return result.json_or_message()

    def add_product_to_dictionary(self, request: DictionaryProductRequest):
        """
        Add a product (and optional alias) to the dictionary.

        Returns:
            Parsed webhook answer

        Raises:
            WebhookError: On a non-2xx answer
        """
        payload = {"producto_existente": request.producto_existente}
        if request.producto_nuevo:
            payload["producto_nuevo"] = request.producto_nuevo

        logger.info("dictionary_product_forwarded", has_alias=bool(request.producto_nuevo))

        return self._forward(self.dictionary_url, "DICTIONARY_WEBHOOK_URL", payload)

    def add_combo_to_dictionary(self, request: DictionaryComboRequest):
        """
        Add a combo and its member products to the dictionary.

        Raises:
            WebhookError: On a non-2xx answer
        """
        payload = {
            "combo_existente": request.combo_existente,
            "combo_nuevo": request.combo_nuevo,
        }

        logger.info("dictionary_combo_forwarded", productos_count=len(request.combo_nuevo))

        return self._forward(self.combos_url, "DICTIONARY_COMBOS_WEBHOOK_URL", payload)


# Singleton instance for convenience
_webhook_proxy_service: Optional[WebhookProxyService] = None


def get_webhook_proxy_service() -> WebhookProxyService:
    """Get or create WebhookProxyService instance."""
    global _webhook_proxy_service
    if _webhook_proxy_service is None:
        _webhook_proxy_service = WebhookProxyService()
    return _webhook_proxy_service
