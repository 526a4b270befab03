"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, StoredRecord, Envelope
from models.inventory import (
    StockStatus,
    InventoryProduct,
    InventoryFilters,
    MovementFilters,
    InventoryListResponse,
    MovementListResponse,
    StoreSummary,
    InventorySummaryResponse,
)
from models.order import (
    OrderStatus,
    PaymentMethod,
    DeliveryMethod,
    OrderRecord,
    OrderListResponse,
)
from models.operations import (
    OperationType,
    InventoryOperationRequest,
    DictionaryProductRequest,
    DictionaryComboRequest,
    WebhookRelayResponse,
)
from models.reconciliation import (
    OrderProductToken,
    UnmappedProductAggregate,
    ProductMapping,
    ComboItem,
    ProductCombo,
)

__all__ = [
    # Base
    "BaseSchema",
    "StoredRecord",
    "Envelope",
    # Inventory
    "StockStatus",
    "InventoryProduct",
    "InventoryFilters",
    "MovementFilters",
    "InventoryListResponse",
    "MovementListResponse",
    "StoreSummary",
    "InventorySummaryResponse",
    # Orders
    "OrderStatus",
    "PaymentMethod",
    "DeliveryMethod",
    "OrderRecord",
    "OrderListResponse",
    # Webhook proxy
    "OperationType",
    "InventoryOperationRequest",
    "DictionaryProductRequest",
    "DictionaryComboRequest",
    "WebhookRelayResponse",
    # Reconciliation
    "OrderProductToken",
    "UnmappedProductAggregate",
    "ProductMapping",
    "ComboItem",
    "ProductCombo",
]
