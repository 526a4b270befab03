"""
Unmapped product reconciliation.

Orders list their products as free text. Entries the order pipeline
could not match are parenthesized; this module groups them across
orders by normalized name and resolves them to inventory products or
combos through the mapping store.

The aggregation and lookup helpers are pure functions. ReconciliationService
wires them to the mapping store and the dictionary mirror.
"""

import time
import uuid
from typing import Optional, Iterable
import structlog

from exceptions import ComboNotFoundError, InvalidComboError
from models.inventory import InventoryProduct
from models.order import OrderRecord
from models.reconciliation import (
    COMBO_MAPPING_PREFIX,
    ComboItem,
    ComboItemInput,
    ProductCombo,
    ProductMapping,
    StockCheckItem,
    UnmappedProductAggregate,
    utc_now,
)
from parsers.product_string_parser import parse_product_string
from services.dictionary_mirror import DictionaryMirror, get_dictionary_mirror
from services.mapping_store import MappingStore, get_mapping_store
from utils.text_utils import (
    extract_quantity_prefix,
    normalize_product_name,
    strip_for_dictionary,
)

logger = structlog.get_logger(__name__)


# ===================
# AGGREGATION
# ===================

def aggregate_unmapped(
    orders: Iterable[OrderRecord],
    mappings: dict[str, str],
) -> list[UnmappedProductAggregate]:
    """
    Group unmapped order entries by normalized name.

    Entries whose normalized key already has a mapping are skipped, so a
    key is present in the result exactly when it is still unresolved.

    Args:
        orders: Orders with their free-text product field
        mappings: normalized name → mapped product (see MappingStore.load_mappings)

    Returns:
        Aggregates sorted by occurrences, highest first. Equal counts keep
        the order in which their key was first seen.
    """
    aggregates: dict[str, UnmappedProductAggregate] = {}

    for order in orders:
        for token in parse_product_string(order.productos):
            if not token.is_unmapped:
                continue

            key = normalize_product_name(token.name)
            if key in mappings:
                continue

            aggregate = aggregates.get(key)
            if aggregate is None:
                aggregate = UnmappedProductAggregate(id=f"unmapped-{key}", name=token.name)
                aggregates[key] = aggregate

            aggregate.occurrences += 1
            if order.id not in aggregate.order_ids:
                aggregate.order_ids.append(order.id)
            if order.created_at and (aggregate.last_seen is None or order.created_at > aggregate.last_seen):
                aggregate.last_seen = order.created_at

    return sorted(aggregates.values(), key=lambda a: a.occurrences, reverse=True)


def filter_unmapped(
    aggregates: list[UnmappedProductAggregate],
    search: Optional[str] = None,
) -> list[UnmappedProductAggregate]:
    """Keep aggregates whose normalized name contains the normalized search."""
    if not search or not search.strip():
        return aggregates
    needle = normalize_product_name(search)
    return [a for a in aggregates if needle in normalize_product_name(a.name)]


# ===================
# INVENTORY LOOKUPS
# ===================

def available_products(
    inventory: Iterable[InventoryProduct],
    search: Optional[str] = None,
) -> list[str]:
    """
    Inventory product names for mapping selectors.

    One name per normalized key (the last one seen wins), sorted.
    An optional search keeps names containing it after normalization.
    """
    unique: dict[str, str] = {}
    for product in inventory:
        if product.producto:
            unique[normalize_product_name(product.producto)] = product.producto

    names = sorted(unique.values())

    if search and search.strip():
        needle = normalize_product_name(search)
        names = [name for name in names if needle in normalize_product_name(name)]

    return names


def suggested_quantity(unmapped_name: str, existing: Optional[ProductMapping] = None) -> int:
    """
    Default units for a new mapping.

    The stored mapping's quantity wins, then the quantity prefix inside
    the unmapped name, then 1.
    """
    if existing is not None and existing.quantity:
        return existing.quantity
    return extract_quantity_prefix(unmapped_name) or 1


def check_order_stock(
    productos: Optional[str],
    inventory: Iterable[InventoryProduct],
) -> list[StockCheckItem]:
    """
    Stock available for each mapped entry of an order.

    Products match on trimmed, lowercased name; unmatched entries report
    0 stock. Unmapped (parenthesized) entries are skipped.
    """
    stock_by_name: dict[str, int] = {}
    for product in inventory:
        stock_by_name.setdefault(product.producto.strip().lower(), product.cantidad)

    return [
        StockCheckItem(
            nombre=token.name,
            cantidad=token.effective_quantity,
            stock=stock_by_name.get(token.name.strip().lower(), 0),
        )
        for token in parse_product_string(productos)
        if not token.is_unmapped
    ]


# ===================
# COMBOS
# ===================

def build_combo_items(items: Iterable[ComboItemInput]) -> list[ComboItem]:
    """
    Validate combo items and merge repeats.

    Items whose names normalize to the same key are merged into the first
    one, summing quantities.

    Raises:
        InvalidComboError: If there are no items, or any item has an empty
            name or a quantity below 1
    """
    items = list(items)
    if not items:
        raise InvalidComboError("El combo debe tener al menos un producto")

    invalid = [
        position for position, item in enumerate(items)
        if not item.product_name.strip() or item.quantity < 1
    ]
    if invalid:
        raise InvalidComboError(
            "Todos los productos del combo deben tener nombre y cantidad válida",
            details={"invalid_items": invalid}
        )

    merged: dict[str, ComboItem] = {}
    for item in items:
        key = normalize_product_name(item.product_name)
        if key in merged:
            merged[key].quantity += item.quantity
        else:
            merged[key] = ComboItem(product_name=item.product_name.strip(), quantity=item.quantity)

    return list(merged.values())


def new_combo_id() -> str:
    return f"combo-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class ReconciliationService:
    """
    Saves mappings and combos and exposes the mirror used after each save.

    Routes schedule mirror calls as background tasks once the local save
    has returned.
    """

    def __init__(
        self,
        store: Optional[MappingStore] = None,
        mirror: Optional[DictionaryMirror] = None,
    ):
        self.store = store or get_mapping_store()
        self.mirror = mirror or get_dictionary_mirror()

    def compute_unmapped(
        self,
        orders: Iterable[OrderRecord],
        search: Optional[str] = None,
    ) -> list[UnmappedProductAggregate]:
        """Unresolved entries across orders against the stored mappings."""
        orders = list(orders)
        aggregates = filter_unmapped(aggregate_unmapped(orders, self.store.load_mappings()), search)

        logger.info(
            "unmapped_computed",
            orders=len(orders),
            aggregates=len(aggregates),
            has_search=bool(search)
        )

        return aggregates

    def list_mappings(self) -> list[ProductMapping]:
        return self.store.load_mapping_records()

    def list_combos(self) -> list[ProductCombo]:
        return self.store.load_combos()

    def suggest_quantity(self, unmapped_name: str) -> int:
        """Default units for mapping this name, from its stored mapping or its prefix."""
        return suggested_quantity(unmapped_name, self.store.get_mapping(unmapped_name))

    def save_mapping(
        self,
        unmapped_name: str,
        mapped_product_name: str,
        quantity: Optional[int] = None,
    ) -> ProductMapping:
        """
        Map an unmapped name to one inventory product.

        Only an explicit quantity is stored; see suggest_quantity for the
        default offered to the user.
        """
        return self.store.save_mapping(
            unmapped_name,
            mapped_product_name.strip(),
            quantity=quantity,
        )

    def create_combo(
        self,
        unmapped_name: str,
        items: Iterable[ComboItemInput],
        name: Optional[str] = None,
    ) -> tuple[ProductCombo, ProductMapping]:
        """
        Create a combo and map the unmapped name to it.

        Args:
            unmapped_name: Raw unmapped name the combo resolves
            items: Combo products (merged by normalized name)
            name: Combo name; defaults to the unmapped name without
                parentheses or quantity

        Returns:
            (combo, mapping); the mapping value is "COMBO:<combo name>"

        Raises:
            InvalidComboError: On an empty name or invalid items
        """
        combo_name = (name or strip_for_dictionary(unmapped_name)).strip()
        if not combo_name:
            raise InvalidComboError("El nombre del combo es requerido")

        combo = ProductCombo(
            id=new_combo_id(),
            name=combo_name,
            items=build_combo_items(items),
            created_at=utc_now(),
        )
        self.store.save_combo(combo)

        mapping = self.store.save_mapping(
            unmapped_name,
            f"{COMBO_MAPPING_PREFIX}{combo.name}",
            is_combo=True,
            combo_id=combo.id,
        )

        logger.info("combo_created", combo_id=combo.id, items=len(combo.items))

        return combo, mapping

    def delete_combo(self, combo_id: str) -> None:
        """
        Delete a combo and the mappings pointing to it.

        Raises:
            ComboNotFoundError: If neither a combo nor a mapping had that id
        """
        if not self.store.delete_combo(combo_id):
            raise ComboNotFoundError(combo_id)


# Singleton instance for convenience
_reconciliation_service: Optional[ReconciliationService] = None


def get_reconciliation_service() -> ReconciliationService:
    """Get or create ReconciliationService instance."""
    global _reconciliation_service
    if _reconciliation_service is None:
        _reconciliation_service = ReconciliationService()
    return _reconciliation_service
