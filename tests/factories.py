"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from models.order import OrderRecord


class OrderRowFactory:
    """
    Factory for pedidos_preconfirmacion rows.

    Usage:
        # Create with defaults
        row = OrderRowFactory.create()

        # Create with overrides
        row = OrderRowFactory.create(productos="1X GEL PYTHON, (1 X FOO)")

        # As OrderRecord for reconciliation
        order = OrderRowFactory.record(productos="(1 X FOO)")
    """

    _counter = 0
    _base_time = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id_pedido: Optional[str] = None,
        productos: Optional[str] = None,
        fecha_creacion: Optional[str] = None,
        estado_pedido: str = "pendiente",
        metodo_pago: str = "efectivo",
        tienda: str = "ALL STARS"
    ) -> dict:
        """
        Create a single order row.

        Args:
            id_pedido: Order id (auto-generated if not provided)
            productos: Free-text product list
            fecha_creacion: ISO timestamp (one hour after the previous order if not provided)
            estado_pedido: Order status value
            metodo_pago: Payment method value
            tienda: Store name

        Returns:
            Order dict matching the table schema
        """
        counter = cls._next_counter()
        created = cls._base_time + timedelta(hours=counter)

        return {
            "id_pedido": id_pedido or f"PED-{counter:05d}",
            "productos": productos if productos is not None else "1X GEL PYTHON",
            "fecha_creacion": fecha_creacion or created.isoformat(),
            "estado_pedido": estado_pedido,
            "metodo_pago": metodo_pago,
            "tienda": tienda,
        }

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list:
        """Create multiple order rows sharing the overrides."""
        return [cls.create(**overrides) for _ in range(count)]

    @classmethod
    def record(cls, **overrides) -> OrderRecord:
        """Create an OrderRecord."""
        return OrderRecord.from_row(cls.create(**overrides))


class InventoryRowFactory:
    """
    Factory for Inventario rows.

    Usage:
        rows = InventoryRowFactory.create_batch(3, tienda="NATURAL")
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        idx: Optional[int] = None,
        producto: Optional[str] = None,
        cantidad: int = 10,
        tienda: str = "ALL STARS"
    ) -> dict:
        counter = cls._next_counter()
        return {
            "idx": idx if idx is not None else counter,
            "producto": producto or f"PRODUCTO {counter:04d}",
            "cantidad": cantidad,
            "tienda": tienda,
        }

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list:
        return [cls.create(**overrides) for _ in range(count)]
