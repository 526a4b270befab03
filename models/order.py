"""
Order schemas.

Orders are read from pedidos_preconfirmacion; only the fields used by
reconciliation and order listings are modelled.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from enum import Enum
from datetime import datetime, timezone

from models.base import Envelope


class OrderStatus(str, Enum):
    """Order lifecycle status (estado_pedido)."""
    PENDIENTE = "pendiente"
    CONFIRMADO = "confirmado"
    EN_RUTA = "en_ruta"
    ENTREGADO = "entregado"
    DEVOLUCION = "devolucion"
    REAGENDADO = "reagendado"

    @property
    def label(self) -> str:
        return ORDER_STATUS_LABELS[self]


class PaymentMethod(str, Enum):
    """Payment method (metodo_pago)."""
    EFECTIVO = "efectivo"
    SINPE = "sinpe"
    TARJETA = "tarjeta"
    DOS_PAGOS = "2pagos"

    @property
    def label(self) -> str:
        return PAYMENT_METHOD_LABELS[self]


class DeliveryMethod(str, Enum):
    """Courier used for delivery."""
    MENSAJERIA_PROPIA = "mensajeria_propia"
    RED_LOGISTIC = "red_logistic"
    CORREOS_COSTA_RICA = "correos_costa_rica"

    @property
    def label(self) -> str:
        return DELIVERY_METHOD_LABELS[self]


ORDER_STATUS_LABELS = {
    OrderStatus.PENDIENTE: "Pendiente",
    OrderStatus.CONFIRMADO: "Confirmado",
    OrderStatus.EN_RUTA: "En Ruta",
    OrderStatus.ENTREGADO: "Entregado",
    OrderStatus.DEVOLUCION: "Devolución",
    OrderStatus.REAGENDADO: "Reagendado",
}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.EFECTIVO: "Efectivo",
    PaymentMethod.SINPE: "SINPE",
    PaymentMethod.TARJETA: "Tarjeta",
    PaymentMethod.DOS_PAGOS: "2 Pagos",
}

DELIVERY_METHOD_LABELS = {
    DeliveryMethod.MENSAJERIA_PROPIA: "Mensajería Propia",
    DeliveryMethod.RED_LOGISTIC: "Red Logística",
    DeliveryMethod.CORREOS_COSTA_RICA: "Correos de Costa Rica",
}


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp or date into an aware UTC datetime.

    Returns None for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class OrderRecord(BaseModel):
    """
    An order as seen by reconciliation.

    productos is the free-text product field, e.g.
    "1X GEL PYTHON, (1 X EVIL GOODS! | SEBO DE RES)".
    """

    id: str = Field(..., min_length=1, description="Order identifier")
    productos: Optional[str] = Field(None, description="Free-text product list")
    created_at: Optional[datetime] = Field(None, description="Order creation time")
    status: OrderStatus = Field(default=OrderStatus.PENDIENTE)
    payment_method: PaymentMethod = Field(default=PaymentMethod.EFECTIVO)
    tienda: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v):
        """Numeric order ids arrive as ints from Supabase."""
        return str(v) if v is not None else v

    @field_validator("created_at", mode="before")
    @classmethod
    def lenient_timestamp(cls, v):
        """Unparseable timestamps become None instead of rejecting the order."""
        return parse_timestamp(v)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        """Blank or unknown statuses read as pendiente."""
        try:
            return OrderStatus(v)
        except ValueError:
            return OrderStatus.PENDIENTE

    @field_validator("payment_method", mode="before")
    @classmethod
    def default_payment(cls, v):
        """Blank or unknown payment methods read as efectivo."""
        try:
            return PaymentMethod(v)
        except ValueError:
            return PaymentMethod.EFECTIVO

    @classmethod
    def from_row(cls, row: dict) -> "OrderRecord":
        """Build from a pedidos_preconfirmacion row."""
        return cls(
            id=row.get("id_pedido"),
            productos=row.get("productos"),
            created_at=row.get("fecha_creacion"),
            status=row.get("estado_pedido"),
            payment_method=row.get("metodo_pago"),
            tienda=row.get("tienda"),
        )


class OrderListResponse(Envelope):
    """Orders with their count."""

    data: list[OrderRecord]
    count: int
