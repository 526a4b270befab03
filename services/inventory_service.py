"""
Inventory service: reads from the Inventario and inventario_control tables.

Mutations never go through here; they are proxied to the inventory
webhook by WebhookProxyService.
"""

from typing import Any, Callable, Optional
from datetime import datetime, timezone
import structlog
from postgrest.exceptions import APIError

from config import get_supabase_client, settings
from models.inventory import (
    InventoryProduct,
    InventoryFilters,
    MovementFilters,
    StockStatus,
    StoreSummary,
)
from models.order import parse_timestamp
from exceptions import DatabaseError
from utils.query_utils import build_like, fetch_all_pages
from utils.text_utils import normalize_store_name

logger = structlog.get_logger(__name__)

# Tried in order until the table accepts one; None means unordered
MOVEMENT_ORDER_CANDIDATES = ("created_at", "fecha", "timestamp", "fecha_movimiento", "fecha_creacion", "id", None)

TIMESTAMP_KEY_HINTS = ("fecha", "date", "created", "timestamp")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def classify_stock(
    quantity: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> StockStatus:
    """
    Classify a stock level.

    Args:
        quantity: Units in stock
        minimum: Low-stock threshold (inclusive), defaults to settings
        maximum: Over-stock threshold (exclusive), defaults to settings

    Returns:
        StockStatus
    """
    minimum = settings.default_minimum_stock if minimum is None else minimum
    maximum = settings.default_maximum_stock if maximum is None else maximum

    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= minimum:
        return StockStatus.LOW_STOCK
    if quantity > maximum:
        return StockStatus.OVERSTOCK
    return StockStatus.IN_STOCK


def summarize_by_store(
    products: list[InventoryProduct],
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> list[StoreSummary]:
    """
    Group inventory rows by normalized store name.

    Blank store names are grouped under "Sin tienda".

    Returns:
        StoreSummary list ordered by store name
    """
    grouped: dict[str, StoreSummary] = {}

    for product in products:
        store = normalize_store_name(product.tienda)
        summary = grouped.get(store)
        if summary is None:
            summary = StoreSummary(
                tienda=store,
                products=0,
                units=0,
                status_counts={status: 0 for status in StockStatus},
            )
            grouped[store] = summary

        summary.products += 1
        summary.units += product.cantidad
        summary.status_counts[classify_stock(product.cantidad, minimum, maximum)] += 1

    return [grouped[store] for store in sorted(grouped)]


def find_timestamp_key(row: dict) -> Optional[str]:
    """First key of row that looks like a date/timestamp column."""
    for key in row:
        lowered = key.lower()
        if any(hint in lowered for hint in TIMESTAMP_KEY_HINTS):
            return key
    return None


def sort_by_timestamp_desc(rows: list[dict]) -> list[dict]:
    """
    Sort rows newest first by the first timestamp-like key of the first row.

    Rows with a missing or unparseable value sort last. Rows are returned
    unchanged when no such key exists.
    """
    if not rows:
        return rows

    key = find_timestamp_key(rows[0])
    if key is None:
        return rows

    def sort_key(row: dict) -> datetime:
        return parse_timestamp(row.get(key)) or _EPOCH

    return sorted(rows, key=sort_key, reverse=True)


class InventoryService:
    """
    Inventory read queries.

    Handles filtered reads of products and movements with unbounded
    pagination when no limit is given.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "Inventario"
        self.movements_table = "inventario_control"
        self.page_size = settings.inventory_page_size

    # ===================
    # PRODUCTS
    # ===================

    def _inventory_query(self, filters: InventoryFilters):
        query = self.db.table(self.table).select("*")

        tienda_like = build_like(filters.tienda)
        if tienda_like:
            query = query.ilike("tienda", tienda_like)

        search_like = build_like(filters.search)
        if search_like:
            query = query.ilike("producto", search_like)

        return query.order("producto")

    def get_inventory(self, filters: Optional[InventoryFilters] = None) -> list[InventoryProduct]:
        """
        Get inventory products ordered by name.

        Args:
            filters: Store substring, name substring and optional limit

        Returns:
            List of InventoryProduct (idx falls back to result position)
        """
        filters = filters or InventoryFilters()

        logger.info(
            "getting_inventory",
            tienda=filters.tienda,
            has_search=bool(filters.search),
            limit=filters.limit
        )

        try:
            if filters.limit and filters.limit > 0:
                rows = self._inventory_query(filters).limit(filters.limit).execute().data or []
            else:
                rows = fetch_all_pages(
                    lambda start, end: self._inventory_query(filters).range(start, end).execute().data or [],
                    self.page_size,
                )

            products = [InventoryProduct.from_row(row, index) for index, row in enumerate(rows)]

            logger.info("inventory_retrieved", count=len(products))

            return products

        except Exception as e:
            logger.error("get_inventory_failed", error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # MOVEMENTS
    # ===================

    def _movements_query(self, filters: MovementFilters, order_column: Optional[str]):
        query = self.db.table(self.movements_table).select("*")

        producto_like = build_like(filters.producto)
        if producto_like:
            query = query.ilike("producto", producto_like)

        tienda_like = build_like(filters.tienda)
        if tienda_like:
            query = query.ilike("tienda", tienda_like)

        if filters.fecha_desde:
            query = query.gte("created_at", filters.fecha_desde)
        if filters.fecha_hasta:
            query = query.lte("created_at", filters.fecha_hasta)

        if order_column:
            query = query.order(order_column, desc=True)

        return query

    def _first_accepted_order(
        self,
        run: Callable[[Optional[str]], list[dict]],
    ) -> tuple[list[dict], Optional[str]]:
        """Run with each candidate order column until the table accepts one."""
        for column in MOVEMENT_ORDER_CANDIDATES:
            try:
                return run(column), column
            except APIError as e:
                if column is None:
                    raise
                logger.warning(
                    "movements_order_column_rejected",
                    column=column,
                    error=e.message
                )
        return [], None

    def get_movements(self, filters: Optional[MovementFilters] = None) -> list[dict[str, Any]]:
        """
        Get inventory movements, newest first.

        A limit in (0, movements_direct_limit_max] is served by one query;
        anything else reads every page.

        Args:
            filters: Product/store substrings, created_at range, limit

        Returns:
            Raw movement rows (columns vary by deployment)
        """
        filters = filters or MovementFilters()

        logger.info(
            "getting_movements",
            tienda=filters.tienda,
            has_producto=bool(filters.producto),
            fecha_desde=filters.fecha_desde,
            fecha_hasta=filters.fecha_hasta,
            limit=filters.limit
        )

        try:
            if filters.limit and 0 < filters.limit <= settings.movements_direct_limit_max:
                rows, order_column = self._first_accepted_order(
                    lambda column: self._movements_query(filters, column)
                    .limit(filters.limit).execute().data or []
                )
            else:
                first_page, order_column = self._first_accepted_order(
                    lambda column: self._movements_query(filters, column)
                    .range(0, self.page_size - 1).execute().data or []
                )
                rows = first_page
                if len(first_page) == self.page_size:
                    rows = first_page + fetch_all_pages(
                        lambda start, end: self._movements_query(filters, order_column)
                        .range(start + self.page_size, end + self.page_size).execute().data or [],
                        self.page_size,
                    )

            rows = sort_by_timestamp_desc(rows)

            if not rows:
                logger.warning("movements_empty", tienda=filters.tienda)

            logger.info(
                "movements_retrieved",
                count=len(rows),
                order_column=order_column,
                columns=list(rows[0].keys()) if rows else []
            )

            return rows

        except Exception as e:
            logger.error("get_movements_failed", error=str(e))
            raise DatabaseError("select", str(e))


# Singleton instance for convenience
_inventory_service: Optional[InventoryService] = None


def get_inventory_service() -> InventoryService:
    """Get or create InventoryService instance."""
    global _inventory_service
    if _inventory_service is None:
        _inventory_service = InventoryService()
    return _inventory_service
