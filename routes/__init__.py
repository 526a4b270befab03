"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.inventory import router as inventory_router
from routes.dictionary import router as dictionary_router
from routes.orders import router as orders_router
from routes.reconciliation import router as reconciliation_router

__all__ = [
    "inventory_router",
    "dictionary_router",
    "orders_router",
    "reconciliation_router",
]
