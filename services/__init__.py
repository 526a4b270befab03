"""
Business logic services.

Each service handles one domain area.
"""

from services.inventory_service import InventoryService, get_inventory_service
from services.order_service import OrderService, get_order_service
from services.mapping_store import MappingStore, JsonMappingStore, get_mapping_store
from services.dictionary_mirror import DictionaryMirror, MirrorResult, get_dictionary_mirror
from services.reconciliation_service import ReconciliationService, get_reconciliation_service
from services.webhook_proxy_service import WebhookProxyService, get_webhook_proxy_service

__all__ = [
    "InventoryService",
    "get_inventory_service",
    "OrderService",
    "get_order_service",
    "MappingStore",
    "JsonMappingStore",
    "get_mapping_store",
    "DictionaryMirror",
    "MirrorResult",
    "get_dictionary_mirror",
    "ReconciliationService",
    "get_reconciliation_service",
    "WebhookProxyService",
    "get_webhook_proxy_service",
]
