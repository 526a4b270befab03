"""
Text utilities for handling Spanish product names with accents.

Used for product name normalization and comparison across orders,
inventory and saved mappings.
"""

import re
import unicodedata
from typing import Optional

QUANTITY_PREFIX = re.compile(r"^\d+\s*[xX]\s*")
WHITESPACE_RUN = re.compile(r"\s+")

NO_STORE_LABEL = "Sin tienda"


def _strip_accents(text: str) -> str:
    """Drop combining diacritical marks (U+0300..U+036F) after NFD."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(c for c in decomposed if not "\u0300" <= c <= "\u036f")


def strip_parentheses(name: str) -> str:
    """
    Remove one pair of outer parentheses.

    - "(1 X EVIL GOODS!)" → "1 X EVIL GOODS!"
    - "GEL PYTHON" → "GEL PYTHON"
    """
    if name.startswith("(") and name.endswith(")"):
        return name[1:-1].strip()
    return name


def strip_quantity_prefix(name: str) -> str:
    """Remove a leading "<digits> X " quantity expression."""
    return QUANTITY_PREFIX.sub("", name).strip()


def extract_quantity_prefix(name: str) -> Optional[int]:
    """
    Read the quantity prefix of a (possibly parenthesized) name.

    "(2 X TURKESTERONE)" → 2, "TURKESTERONE" → None
    """
    match = re.match(r"^(\d+)\s*[xX]\s*", strip_parentheses(name))
    if not match:
        return None
    return int(match.group(1))


def _normalize_once(name: str) -> str:
    without_parens = strip_parentheses(name)
    without_quantity = strip_quantity_prefix(without_parens)

    lowered = without_quantity.lower().strip()
    collapsed = WHITESPACE_RUN.sub(" ", lowered)

    return _strip_accents(collapsed)


def normalize_product_name(name: Optional[str]) -> str:
    """
    Normalize product name for grouping, mapping keys and combo dedup.

    Handles parentheses, quantity prefixes and Spanish accents:
    - "(2 x Widget)" → "widget"
    - "1 X Café" → "cafe"
    - "  NUTRICIÓN   INTENSA " → "nutricion intensa"

    Punctuation is kept, so "EVIL GOODS!" and "EVIL GOODS" stay distinct.

    The steps are repeated until the result stops changing, so nested
    wrappers like "(1 X (2 X A))" and marks stranded next to spaces
    still give a fixed point.

    Args:
        name: Raw product name (may be parenthesized, mixed case)

    Returns:
        Canonical lowercase string ("" for empty input)
    """
    if not name:
        return ""

    current = _normalize_once(name)
    while True:
        following = _normalize_once(current)
        if following == current:
            return current
        current = following


def clean_name_for_display(name: str) -> str:
    """
    Remove the quantity from a parenthesized name, keeping the parentheses.

    Display only: never feed the result into normalize_product_name keys.
    - "(1 X OIL OREGANO)" → "(OIL OREGANO)"
    - "GEL PYTHON" → "GEL PYTHON"
    """
    if not name.startswith("(") or not name.endswith(")"):
        return name

    content = name[1:-1].strip()
    return f"({strip_quantity_prefix(content)})"


def strip_for_dictionary(name: str) -> str:
    """
    Name sent to the dictionary webhook: no parentheses, no quantity.

    Case and accents are preserved.
    "(1 X TURKESTERONE)" → "TURKESTERONE"
    """
    return strip_quantity_prefix(strip_parentheses(name))


def normalize_store_name(store: Optional[str]) -> str:
    """
    Trim a store name, falling back to "Sin tienda" when blank.

    Args:
        store: Raw store value from the inventory table

    Returns:
        Trimmed store name or the no-store label
    """
    if store is None:
        return NO_STORE_LABEL

    trimmed = store.strip()
    return trimmed if trimmed else NO_STORE_LABEL
