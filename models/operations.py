"""
Request and response schemas for the webhook proxy endpoints.

InventoryOperationRequest deliberately does not strip strings: a delete
must forward the product name exactly as it is stored upstream.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Optional
from enum import Enum

from models.base import BaseSchema, Envelope


class OperationType(str, Enum):
    """Inventory mutation kinds understood by the webhook."""
    NUEVO = "nuevo"
    EDITAR = "editar"
    ELIMINAR = "eliminar"

    @property
    def past_participle(self) -> str:
        return OPERATION_RESULT_WORDS[self]


OPERATION_RESULT_WORDS = {
    OperationType.NUEVO: "creado",
    OperationType.EDITAR: "actualizado",
    OperationType.ELIMINAR: "eliminado",
}


class InventoryOperationRequest(BaseModel):
    """
    Create, edit or delete an inventory product.

    Required for every operation: producto, tipo_operacion, usuario.
    Required for nuevo/editar: cantidad, tienda, stock_minimo, stock_maximo.
    """
    model_config = ConfigDict(str_strip_whitespace=False)

    producto: str = Field(..., description="Product name (kept verbatim for deletes)")
    tipo_operacion: OperationType
    usuario: str = Field(..., description="Name or email of the acting user")
    cantidad: Optional[int] = Field(None, description="Units in stock")
    tienda: Optional[str] = Field(None, description="Store name")
    stock_minimo: Optional[int] = Field(None, ge=0)
    stock_maximo: Optional[int] = Field(None, ge=0)

    @field_validator("producto", "usuario")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Blank values are rejected but never trimmed here."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @model_validator(mode="after")
    def upsert_fields_present(self) -> "InventoryOperationRequest":
        """nuevo/editar need the full product definition."""
        if self.tipo_operacion == OperationType.ELIMINAR:
            return self
        missing = [
            name for name in ("cantidad", "stock_minimo", "stock_maximo")
            if getattr(self, name) is None
        ]
        if not self.tienda or not self.tienda.strip():
            missing.append("tienda")
        if missing:
            raise ValueError(
                f"Campos requeridos faltantes para operación {self.tipo_operacion.value}: "
                + ", ".join(missing)
            )
        return self


class DictionaryProductRequest(BaseSchema):
    """Add an existing inventory product to the dictionary."""

    producto_existente: str = Field(..., min_length=1, examples=["Collar Orion Talla M"])
    producto_nuevo: Optional[str] = Field(None, description="Alias that should resolve to producto_existente")


class DictionaryComboRequest(BaseSchema):
    """Add a combo and its member products to the dictionary."""

    combo_existente: str = Field(..., min_length=1, examples=["Combo Estrella"])
    combo_nuevo: list[str] = Field(
        ...,
        min_length=1,
        examples=[["Collar Orion Talla M", "Anillo Luna Talla S"]]
    )

    @field_validator("combo_nuevo")
    @classmethod
    def members_not_blank(cls, v: list[str]) -> list[str]:
        """Every member must be a non-empty string."""
        cleaned = [member.strip() for member in v]
        invalid = sum(1 for member in cleaned if not member)
        if invalid:
            raise ValueError(f"{invalid} productos vacíos en combo_nuevo")
        return cleaned


class WebhookRelayResponse(Envelope):
    """Webhook outcome relayed to the caller."""

    data: Optional[Any] = None
    error: Optional[str] = None
    details: Optional[Any] = None
    status: Optional[int] = None


class DictionaryProductResponse(WebhookRelayResponse):
    producto: Optional[str] = None


class DictionaryComboResponse(WebhookRelayResponse):
    combo_existente: Optional[str] = None
    productos_count: Optional[int] = None
