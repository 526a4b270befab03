"""
Order service: reads orders from pedidos_preconfirmacion.

Orders feed the unmapped-product reconciliation and the order listing.
"""

from typing import Optional
import structlog
from pydantic import ValidationError as PydanticValidationError

from config import get_supabase_client, settings
from models.order import OrderRecord
from exceptions import DatabaseError
from utils.query_utils import build_like, fetch_all_pages

logger = structlog.get_logger(__name__)


class OrderService:
    """Read-only access to pre-confirmation orders."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "pedidos_preconfirmacion"
        self.page_size = settings.inventory_page_size

    def _query(self, tienda: Optional[str]):
        query = self.db.table(self.table).select("*")

        tienda_like = build_like(tienda)
        if tienda_like:
            query = query.ilike("tienda", tienda_like)

        return query.order("fecha_creacion", desc=True)

    def get_orders(
        self,
        tienda: Optional[str] = None,
        limit: Optional[int] = None
    ) -> list[OrderRecord]:
        """
        Get orders, newest first.

        Rows without id_pedido are skipped.

        Args:
            tienda: Store name substring
            limit: Result cap; unset fetches every page

        Returns:
            List of OrderRecord
        """
        logger.info("getting_orders", tienda=tienda, limit=limit)

        try:
            if limit and limit > 0:
                rows = self._query(tienda).limit(limit).execute().data or []
            else:
                rows = fetch_all_pages(
                    lambda start, end: self._query(tienda).range(start, end).execute().data or [],
                    self.page_size,
                )
        except Exception as e:
            logger.error("get_orders_failed", error=str(e))
            raise DatabaseError("select", str(e))

        orders = []
        skipped = 0
        for row in rows:
            if row.get("id_pedido") in (None, ""):
                skipped += 1
                continue
            try:
                orders.append(OrderRecord.from_row(row))
            except PydanticValidationError:
                skipped += 1

        if skipped:
            logger.warning("orders_skipped", count=skipped)

        logger.info("orders_retrieved", count=len(orders))

        return orders


# Singleton instance for convenience
_order_service: Optional[OrderService] = None


def get_order_service() -> OrderService:
    """Get or create OrderService instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service
