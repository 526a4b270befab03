"""
Best-effort mirror of saved mappings to the external dictionary webhooks.

The local mapping is already committed when these run. Failures are
logged and reported through MirrorResult; nothing is raised and nothing
is retried.
"""

from dataclasses import dataclass
from typing import Optional
import structlog

from config import settings
from exceptions import AppError
from integrations.webhook import post_json
from models.reconciliation import ComboItem
from utils.text_utils import strip_for_dictionary

logger = structlog.get_logger(__name__)


@dataclass
class MirrorResult:
    """Outcome of one mirror attempt."""
    delivered: bool
    status: Optional[int] = None
    error: Optional[str] = None


def mapping_payload(unmapped_name: str, mapped_product_name: str) -> dict:
    return {
        "producto_existente": mapped_product_name,
        "producto_nuevo": strip_for_dictionary(unmapped_name),
    }


def combo_payload(unmapped_name: str, items: list[ComboItem]) -> dict:
    return {
        "nombre_combo": strip_for_dictionary(unmapped_name),
        "productos_combo": ", ".join(f"{item.quantity} X {item.product_name}" for item in items),
    }


class DictionaryMirror:
    """Sends saved mappings and combos to the dictionary webhooks."""

    def __init__(
        self,
        mapping_url: Optional[str] = None,
        combo_url: Optional[str] = None,
    ):
        self.mapping_url = mapping_url or settings.dictionary_webhook_url
        self.combo_url = combo_url or settings.dictionary_combos_webhook_url

    def _send(self, kind: str, url: Optional[str], payload: dict) -> MirrorResult:
        if not url:
            logger.warning("dictionary_mirror_skipped", kind=kind, reason="url_not_configured")
            return MirrorResult(delivered=False, error="not_configured")

        try:
            result = post_json(url, payload)
        except AppError as e:
            logger.warning("dictionary_mirror_failed", kind=kind, error=e.code)
            return MirrorResult(delivered=False, error=e.message)

        if not result.ok:
            logger.warning("dictionary_mirror_rejected", kind=kind, status=result.status_code)
            return MirrorResult(delivered=False, status=result.status_code, error=result.text[:200])

        logger.info("dictionary_mirror_delivered", kind=kind, status=result.status_code)
        return MirrorResult(delivered=True, status=result.status_code)

    def notify_mapping(self, unmapped_name: str, mapped_product_name: str) -> MirrorResult:
        """Mirror a simple mapping as {producto_existente, producto_nuevo}."""
        return self._send("mapping", self.mapping_url, mapping_payload(unmapped_name, mapped_product_name))

    def notify_combo(self, unmapped_name: str, items: list[ComboItem]) -> MirrorResult:
        """Mirror a combo as {nombre_combo, productos_combo}."""
        return self._send("combo", self.combo_url, combo_payload(unmapped_name, items))


# Singleton instance for convenience
_dictionary_mirror: Optional[DictionaryMirror] = None


def get_dictionary_mirror() -> DictionaryMirror:
    """Get or create DictionaryMirror instance."""
    global _dictionary_mirror
    if _dictionary_mirror is None:
        _dictionary_mirror = DictionaryMirror()
    return _dictionary_mirror
