"""
Unit tests for the JSON mapping store.

Tests overwrite semantics, combo upsert, cascade delete and tolerance
of unreadable files.
"""

import json
from unittest.mock import patch

from services.mapping_store import JsonMappingStore, MAPPINGS_KEY, COMBOS_KEY
from models.reconciliation import ProductCombo, ComboItem


def _combo(combo_id="c1", name="COMBO ESTRELLA"):
    return ProductCombo(
        id=combo_id,
        name=name,
        items=[ComboItem(product_name="GEL PYTHON", quantity=2)],
    )


# ===================
# MAPPINGS
# ===================

class TestSaveMapping:
    """Tests for save_mapping and load_mappings."""

    def test_save_then_load(self, mapping_store):
        """Saved mapping is returned under its normalized key."""
        mapping_store.save_mapping("(1 X Foo)", "Foo Product")

        assert mapping_store.load_mappings() == {"foo": "Foo Product"}

    def test_overwrite_same_key(self, mapping_store):
        """Saving twice for one key keeps only the latest."""
        mapping_store.save_mapping("X", "A")
        mapping_store.save_mapping("X", "B")

        records = mapping_store.load_mapping_records()
        assert len(records) == 1
        assert records[0].mapped_product_name == "B"
        assert mapping_store.load_mappings() == {"x": "B"}

    def test_overwrite_across_raw_forms(self, mapping_store):
        """'(2 X Café)' and 'cafe' are the same key."""
        mapping_store.save_mapping("(2 X Café)", "A")
        mapping_store.save_mapping("cafe", "B")

        assert mapping_store.load_mappings() == {"cafe": "B"}
        assert len(mapping_store.load_mapping_records()) == 1

    def test_quantity_only_kept_above_one(self, mapping_store):
        """quantity 1 is not stored."""
        single = mapping_store.save_mapping("A", "Product A", quantity=1)
        double = mapping_store.save_mapping("B", "Product B", quantity=2)

        assert single.quantity is None
        assert double.quantity == 2

    def test_stored_json_uses_camel_case(self, mapping_store):
        """Persisted keys match the stored record format."""
        mapping_store.save_mapping("(1 X Foo)", "Foo Product", quantity=3)

        with open(mapping_store.directory / f"{MAPPINGS_KEY}.json", encoding="utf-8") as f:
            stored = json.load(f)

        assert stored[0]["unmappedName"] == "(1 X Foo)"
        assert stored[0]["mappedProductName"] == "Foo Product"
        assert stored[0]["isCombo"] is False
        assert stored[0]["quantity"] == 3
        assert "createdAt" in stored[0]
        assert "comboId" not in stored[0]

    def test_get_mapping(self, mapping_store):
        """get_mapping looks up by normalized key."""
        mapping_store.save_mapping("(1 X Foo)", "Foo Product")

        assert mapping_store.get_mapping("foo").mapped_product_name == "Foo Product"
        assert mapping_store.get_mapping("bar") is None


# ===================
# COMBOS
# ===================

class TestCombos:
    """Tests for save_combo and delete_combo."""

    def test_save_combo_inserts(self, mapping_store):
        mapping_store.save_combo(_combo("c1"))
        mapping_store.save_combo(_combo("c2"))

        assert [c.id for c in mapping_store.load_combos()] == ["c1", "c2"]

    def test_save_combo_replaces_same_id(self, mapping_store):
        """Upsert by id."""
        mapping_store.save_combo(_combo("c1", name="OLD"))
        mapping_store.save_combo(_combo("c1", name="NEW"))

        combos = mapping_store.load_combos()
        assert len(combos) == 1
        assert combos[0].name == "NEW"

    def test_delete_combo_cascades_to_mappings(self, mapping_store):
        """Deleting a combo removes mappings pointing to it."""
        mapping_store.save_combo(_combo("c1"))
        mapping_store.save_mapping("X", "COMBO:c1", True, "c1")
        mapping_store.save_mapping("Y", "Other Product")

        assert mapping_store.delete_combo("c1") is True

        assert mapping_store.load_combos() == []
        assert mapping_store.load_mappings() == {"y": "Other Product"}

    def test_delete_unknown_combo(self, mapping_store):
        """Returns False when nothing referenced the id."""
        mapping_store.save_combo(_combo("c1"))

        assert mapping_store.delete_combo("missing") is False
        assert len(mapping_store.load_combos()) == 1


# ===================
# RESILIENCE
# ===================

class TestStorageResilience:
    """Unreadable storage reads as empty, failed writes are swallowed."""

    def test_missing_directory_reads_empty(self, tmp_path):
        store = JsonMappingStore(str(tmp_path / "does-not-exist"))

        assert store.load_mappings() == {}
        assert store.load_combos() == []

    def test_invalid_json_reads_empty(self, mapping_store):
        """Corrupt mapping file gives an empty table."""
        mapping_store.save_mapping("X", "A")
        (mapping_store.directory / f"{MAPPINGS_KEY}.json").write_text("{not json", encoding="utf-8")

        assert mapping_store.load_mappings() == {}

    def test_wrong_shape_reads_empty(self, mapping_store):
        """A JSON object instead of an array is ignored."""
        mapping_store.directory.mkdir(parents=True, exist_ok=True)
        (mapping_store.directory / f"{COMBOS_KEY}.json").write_text('{"id": "c1"}', encoding="utf-8")

        assert mapping_store.load_combos() == []

    def test_invalid_records_skipped(self, mapping_store):
        """Records missing required fields are dropped, others kept."""
        mapping_store.directory.mkdir(parents=True, exist_ok=True)
        (mapping_store.directory / f"{MAPPINGS_KEY}.json").write_text(json.dumps([
            {"unmappedName": "Foo"},
            "garbage",
            {"unmappedName": "Bar", "mappedProductName": "Bar Product", "createdAt": "2025-01-01T00:00:00Z"},
        ]), encoding="utf-8")

        assert mapping_store.load_mappings() == {"bar": "Bar Product"}

    def test_save_after_corruption_recovers(self, mapping_store):
        """A write over a corrupt file starts a fresh collection."""
        mapping_store.directory.mkdir(parents=True, exist_ok=True)
        (mapping_store.directory / f"{MAPPINGS_KEY}.json").write_text("][", encoding="utf-8")

        mapping_store.save_mapping("X", "A")

        assert mapping_store.load_mappings() == {"x": "A"}

    def test_write_failure_is_swallowed(self, mapping_store):
        """OSError on write is logged, not raised."""
        with patch("services.mapping_store.os.replace", side_effect=OSError("disk full")):
            mapping = mapping_store.save_mapping("X", "A")

        assert mapping.mapped_product_name == "A"
        assert mapping_store.load_mappings() == {}
        assert list(mapping_store.directory.glob("*.tmp")) == []

    def test_cleanup_failure_is_swallowed(self, mapping_store):
        """A temp file that cannot be removed does not escape the store."""
        with patch("services.mapping_store.os.replace", side_effect=OSError("disk full")), \
                patch("services.mapping_store.os.unlink", side_effect=OSError("busy")):
            mapping = mapping_store.save_mapping("X", "A")

        assert mapping.mapped_product_name == "A"
        assert mapping_store.load_mappings() == {}
