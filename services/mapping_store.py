"""
Persistence for product mappings and combos.

MappingStore is the repository interface used by the reconciliation
service. JsonMappingStore keeps each collection as one JSON array in a
file named after its key (product_mappings.json, product_combos.json).

Storage problems never reach callers: unreadable data reads as empty
and failed writes are logged and dropped.
"""

import contextlib
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from models.reconciliation import ProductMapping, ProductCombo, utc_now
from utils.text_utils import normalize_product_name

logger = structlog.get_logger(__name__)

MAPPINGS_KEY = "product_mappings"
COMBOS_KEY = "product_combos"


class MappingStore(ABC):
    """Repository of mapping and combo records."""

    @abstractmethod
    def load_mapping_records(self) -> list[ProductMapping]:
        ...

    @abstractmethod
    def write_mapping_records(self, records: list[ProductMapping]) -> None:
        ...

    @abstractmethod
    def load_combos(self) -> list[ProductCombo]:
        ...

    @abstractmethod
    def write_combos(self, combos: list[ProductCombo]) -> None:
        ...

    # ===================
    # MAPPINGS
    # ===================

    def load_mappings(self) -> dict[str, str]:
        """
        Lookup table of normalized unmapped name → mapped product name.

        Later records win when two share a key.
        """
        table: dict[str, str] = {}
        for record in self.load_mapping_records():
            table[normalize_product_name(record.unmapped_name)] = record.mapped_product_name
        return table

    def get_mapping(self, unmapped_name: str) -> Optional[ProductMapping]:
        """Latest mapping record for the name's normalized key, if any."""
        key = normalize_product_name(unmapped_name)
        found = None
        for record in self.load_mapping_records():
            if normalize_product_name(record.unmapped_name) == key:
                found = record
        return found

    def save_mapping(
        self,
        unmapped_name: str,
        mapped_product_name: str,
        is_combo: bool = False,
        combo_id: Optional[str] = None,
        quantity: Optional[int] = None,
    ) -> ProductMapping:
        """
        Save a mapping, replacing any existing one with the same key.

        Args:
            unmapped_name: Raw unmapped name as it appears in orders
            mapped_product_name: Inventory product name, or "COMBO:<name>"
            is_combo: Whether the mapping points to a combo
            combo_id: Combo id when is_combo is set
            quantity: Units per order entry; only kept when > 1

        Returns:
            The new ProductMapping
        """
        key = normalize_product_name(unmapped_name)

        mapping = ProductMapping(
            unmapped_name=unmapped_name,
            mapped_product_name=mapped_product_name,
            created_at=utc_now(),
            is_combo=is_combo,
            combo_id=combo_id,
            quantity=quantity if quantity and quantity > 1 else None,
        )

        records = [
            record for record in self.load_mapping_records()
            if normalize_product_name(record.unmapped_name) != key
        ]
        records.append(mapping)
        self.write_mapping_records(records)

        logger.info(
            "mapping_saved",
            key=key,
            is_combo=is_combo,
            combo_id=combo_id,
            total=len(records)
        )

        return mapping

    # ===================
    # COMBOS
    # ===================

    def save_combo(self, combo: ProductCombo) -> ProductCombo:
        """Insert the combo, or replace the stored one with the same id."""
        combos = self.load_combos()

        for position, existing in enumerate(combos):
            if existing.id == combo.id:
                combos[position] = combo
                break
        else:
            combos.append(combo)

        self.write_combos(combos)

        logger.info("combo_saved", combo_id=combo.id, items=len(combo.items))

        return combo

    def delete_combo(self, combo_id: str) -> bool:
        """
        Delete a combo and every mapping that points to it.

        Returns:
            True if a combo or a referencing mapping was removed
        """
        combos = self.load_combos()
        remaining_combos = [combo for combo in combos if combo.id != combo_id]

        records = self.load_mapping_records()
        remaining_records = [record for record in records if record.combo_id != combo_id]

        removed_combos = len(combos) - len(remaining_combos)
        removed_mappings = len(records) - len(remaining_records)

        if removed_combos:
            self.write_combos(remaining_combos)
        if removed_mappings:
            self.write_mapping_records(remaining_records)

        logger.info(
            "combo_deleted",
            combo_id=combo_id,
            removed_combos=removed_combos,
            removed_mappings=removed_mappings
        )

        return bool(removed_combos or removed_mappings)


class JsonMappingStore(MappingStore):
    """
    MappingStore backed by JSON files in one directory.

    Writes replace the whole collection through a temporary file and
    os.replace. There is no locking: a single writer is assumed.
    """

    def __init__(self, directory: Optional[str] = None):
        self.directory = Path(directory or settings.mapping_store_dir)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> list:
        path = self._path(key)
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("mapping_store_read_failed", key=key, error=str(e))
            return []

        if not isinstance(data, list):
            logger.warning("mapping_store_unexpected_shape", key=key, type=type(data).__name__)
            return []

        return data

    def _write(self, key: str, items: list[dict]) -> None:
        path = self._path(key)
        tmp_name = None

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.directory,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False
            ) as f:
                tmp_name = f.name
                json.dump(items, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)

        except (OSError, TypeError, ValueError) as e:
            logger.error("mapping_store_write_failed", key=key, error=str(e))
            if tmp_name:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)

    def load_mapping_records(self) -> list[ProductMapping]:
        records = []
        for item in self._read(MAPPINGS_KEY):
            try:
                records.append(ProductMapping.model_validate(item))
            except PydanticValidationError as e:
                logger.warning("mapping_record_skipped", error_count=e.error_count())
        return records

    def write_mapping_records(self, records: list[ProductMapping]) -> None:
        self._write(MAPPINGS_KEY, [record.to_storage() for record in records])

    def load_combos(self) -> list[ProductCombo]:
        combos = []
        for item in self._read(COMBOS_KEY):
            try:
                combos.append(ProductCombo.model_validate(item))
            except PydanticValidationError as e:
                logger.warning("combo_record_skipped", error_count=e.error_count())
        return combos

    def write_combos(self, combos: list[ProductCombo]) -> None:
        self._write(COMBOS_KEY, [combo.to_storage() for combo in combos])


# Singleton instance for convenience
_mapping_store: Optional[MappingStore] = None


def get_mapping_store() -> MappingStore:
    """Get or create the JSON-backed MappingStore."""
    global _mapping_store
    if _mapping_store is None:
        _mapping_store = JsonMappingStore()
    return _mapping_store
