"""
Reconciliation schemas: parsed order tokens, unmapped aggregates,
saved mappings and combos.

ProductMapping, ComboItem and ProductCombo are persisted by the mapping
store; their aliases are the camelCase keys found in the stored JSON.
"""

from pydantic import BaseModel, Field, computed_field
from typing import Optional
from datetime import datetime, timezone

from models.base import BaseSchema, StoredRecord, Envelope
from models.order import OrderRecord
from utils.text_utils import clean_name_for_display

COMBO_MAPPING_PREFIX = "COMBO:"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ===================
# PARSED TOKENS & AGGREGATES
# ===================

class OrderProductToken(BaseModel):
    """One entry of an order's free-text product field."""

    raw_text: str = Field(..., description="Substring the token was read from")
    name: str = Field(..., description="Name without quantity; unmapped names keep their parentheses")
    quantity: Optional[int] = Field(None, description="Quantity prefix, if any")
    is_unmapped: bool = Field(..., description="True when the entry was parenthesized")

    @property
    def effective_quantity(self) -> int:
        return self.quantity if self.quantity is not None else 1


class UnmappedProductAggregate(BaseModel):
    """All occurrences of one unmapped name across orders."""

    id: str
    name: str = Field(..., description="First raw name seen, with parentheses")
    order_ids: list[str] = Field(default_factory=list)
    occurrences: int = 0
    last_seen: Optional[datetime] = None

    @computed_field
    @property
    def display_name(self) -> str:
        return clean_name_for_display(self.name)


# ===================
# STORED RECORDS
# ===================

class ProductMapping(StoredRecord):
    """Resolution of an unmapped name to an inventory product or combo."""

    unmapped_name: str = Field(..., alias="unmappedName")
    mapped_product_name: str = Field(..., alias="mappedProductName")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    is_combo: bool = Field(default=False, alias="isCombo")
    combo_id: Optional[str] = Field(None, alias="comboId")
    quantity: Optional[int] = Field(None, ge=1)


class ComboItem(StoredRecord):
    """A product and how many units of it a combo contains."""

    product_name: str = Field(..., min_length=1, alias="productName")
    quantity: int = Field(default=1, ge=1)


class ProductCombo(StoredRecord):
    """A named bundle of inventory products."""

    id: str
    name: str
    items: list[ComboItem]
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")

    def products_string(self) -> str:
        """Join items as "1 X PRODUCTO1, 3 X PRODUCTO2" for the dictionary."""
        return ", ".join(f"{item.quantity} X {item.product_name}" for item in self.items)


# ===================
# REQUESTS
# ===================

class UnmappedComputeRequest(BaseModel):
    """Orders supplied by the caller instead of read from Supabase."""

    orders: list[OrderRecord]
    search: Optional[str] = None


class MappingCreateRequest(BaseSchema):
    """Map an unmapped name to one inventory product."""

    unmapped_name: str = Field(..., min_length=1, examples=["(1 X TURKESTERONE)"])
    mapped_product_name: str = Field(..., min_length=1, examples=["TURKESTERONE 60 CAPS"])
    quantity: Optional[int] = Field(None, ge=1)


class ComboItemInput(BaseSchema):
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)


class ComboCreateRequest(BaseSchema):
    """Map an unmapped name to a new combo of inventory products."""

    unmapped_name: str = Field(..., min_length=1, examples=["(1 X COMBO ESTRELLA)"])
    name: Optional[str] = Field(None, description="Combo name; defaults to the unmapped name")
    items: list[ComboItemInput] = Field(default_factory=list)


class StockCheckRequest(BaseSchema):
    """Product string whose mapped entries should be checked against stock."""

    productos: str
    tienda: Optional[str] = None


# ===================
# RESPONSES
# ===================

class UnmappedListResponse(Envelope):
    data: list[UnmappedProductAggregate]
    count: int
    orders_scanned: int


class MappingResponse(Envelope):
    data: ProductMapping
    mirror_scheduled: bool


class MappingListResponse(Envelope):
    data: list[ProductMapping]
    count: int


class ComboResponse(Envelope):
    data: ProductCombo
    mapping: ProductMapping
    mirror_scheduled: bool


class ComboListResponse(Envelope):
    data: list[ProductCombo]
    count: int


class QuantitySuggestionResponse(Envelope):
    unmapped_name: str
    suggested_quantity: int


class ProductNamesResponse(Envelope):
    data: list[str]
    count: int


class StockCheckItem(BaseModel):
    nombre: str
    cantidad: int
    stock: int

    @computed_field
    @property
    def sufficient(self) -> bool:
        return self.stock >= self.cantidad


class StockCheckResponse(Envelope):
    data: list[StockCheckItem]
    count: int
