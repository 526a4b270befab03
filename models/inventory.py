"""
Inventory and movement schemas for validation and serialization.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from enum import Enum

from models.base import BaseSchema, Envelope


class StockStatus(str, Enum):
    """Stock level classification for a single inventory row."""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    OVERSTOCK = "overstock"

    @property
    def label(self) -> str:
        return STOCK_STATUS_LABELS[self]


STOCK_STATUS_LABELS = {
    StockStatus.IN_STOCK: "En stock",
    StockStatus.LOW_STOCK: "Stock bajo",
    StockStatus.OUT_OF_STOCK: "Agotado",
    StockStatus.OVERSTOCK: "Sobre stock",
}


def _to_int(value: Any) -> int:
    """Coerce a quantity cell to int, treating junk as 0."""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


class InventoryProduct(BaseModel):
    """
    One row of the Inventario table.

    Identity upstream is (store, exact product name); idx is only a
    per-query fallback id.
    """

    idx: int = Field(..., description="Row id, or position in the result when absent")
    producto: str = Field(default="", description="Product name exactly as stored")
    cantidad: int = Field(default=0, description="Units in stock")
    tienda: str = Field(default="", description="Store name")

    @classmethod
    def from_row(cls, row: dict, index: int) -> "InventoryProduct":
        """Build from a Supabase row, falling back to the row index for idx."""
        idx = row.get("idx")
        return cls(
            idx=idx if isinstance(idx, int) and not isinstance(idx, bool) else index,
            producto=row.get("producto") or "",
            cantidad=_to_int(row.get("cantidad")),
            tienda=row.get("tienda") or "",
        )


class InventoryFilters(BaseSchema):
    """Filters for the inventory read query."""

    tienda: Optional[str] = Field(None, description="Store name substring")
    search: Optional[str] = Field(None, description="Product name substring")
    limit: Optional[int] = Field(None, description="Result cap; unset fetches everything")


class MovementFilters(BaseSchema):
    """Filters for the inventario_control read query."""

    producto: Optional[str] = Field(None, description="Product name substring")
    tienda: Optional[str] = Field(None, description="Store name substring")
    fecha_desde: Optional[str] = Field(None, description="Lower bound (ISO-8601)")
    fecha_hasta: Optional[str] = Field(None, description="Upper bound (ISO-8601)")
    limit: Optional[int] = Field(None, description="Result cap; unset fetches everything")


class InventoryListResponse(Envelope):
    """Inventory rows with the filters that produced them."""

    data: list[InventoryProduct]
    count: int
    filters: dict[str, Any]


class MovementListResponse(Envelope):
    """Movement rows; columns come from the first row."""

    data: list[dict[str, Any]]
    count: int
    columns: list[str]
    filters: dict[str, Any]


class StoreSummary(BaseModel):
    """Per-store totals for the admin dashboard."""

    tienda: str
    products: int
    units: int
    status_counts: dict[StockStatus, int]


class InventorySummaryResponse(Envelope):
    """Inventory grouped by store and stock status."""

    stores: list[StoreSummary]
    status_counts: dict[StockStatus, int]
    total_products: int
    minimum_stock: int
    maximum_stock: int
