"""
Unit tests for the dictionary mirror.
"""

from unittest.mock import patch
import pytest

from services.dictionary_mirror import DictionaryMirror, mapping_payload, combo_payload
from integrations.webhook import WebhookResult
from models.reconciliation import ComboItem
from exceptions import ExternalServiceError, WebhookTimeoutError


@pytest.fixture
def mirror():
    return DictionaryMirror(
        mapping_url="https://n8n.example.com/diccionario",
        combo_url="https://n8n.example.com/combos",
    )


class TestPayloads:
    """Tests for mirror payloads."""

    def test_mapping_payload_strips_name(self):
        assert mapping_payload("(2 X Turkesterone)", "TURKESTERONE 60 CAPS") == {
            "producto_existente": "TURKESTERONE 60 CAPS",
            "producto_nuevo": "Turkesterone",
        }

    def test_combo_payload_joins_items(self):
        items = [
            ComboItem(product_name="PRODUCTO1", quantity=1),
            ComboItem(product_name="PRODUCTO2", quantity=3),
        ]

        assert combo_payload("(1 X Combo Estrella)", items) == {
            "nombre_combo": "Combo Estrella",
            "productos_combo": "1 X PRODUCTO1, 3 X PRODUCTO2",
        }


class TestNotify:
    """Failures are reported, never raised."""

    @patch("services.dictionary_mirror.post_json")
    def test_delivered(self, mock_post, mirror):
        mock_post.return_value = WebhookResult(200, "{}")

        result = mirror.notify_mapping("(Foo)", "Foo Product")

        assert result.delivered is True
        mock_post.assert_called_once_with(
            "https://n8n.example.com/diccionario",
            {"producto_existente": "Foo Product", "producto_nuevo": "Foo"},
        )

    @patch("services.dictionary_mirror.post_json")
    def test_rejected(self, mock_post, mirror):
        mock_post.return_value = WebhookResult(500, "boom")

        result = mirror.notify_combo("(Pack)", [ComboItem(product_name="GEL", quantity=1)])

        assert result.delivered is False
        assert result.status == 500

    @patch("services.dictionary_mirror.post_json")
    def test_timeout(self, mock_post, mirror):
        mock_post.side_effect = WebhookTimeoutError("https://n8n.example.com/diccionario", 30)

        result = mirror.notify_mapping("(Foo)", "Foo Product")

        assert result.delivered is False

    @patch("services.dictionary_mirror.post_json")
    def test_network_error(self, mock_post, mirror):
        mock_post.side_effect = ExternalServiceError("webhook", "refused")

        result = mirror.notify_mapping("(Foo)", "Foo Product")

        assert result.delivered is False
        assert result.error == "refused"

    @patch("services.dictionary_mirror.post_json")
    def test_not_configured_skips_call(self, mock_post):
        mirror = DictionaryMirror()
        mirror.mapping_url = None

        result = mirror.notify_mapping("(Foo)", "Foo Product")

        assert result.delivered is False
        mock_post.assert_not_called()
