"""
Parser for the free-text product field of orders.

Entries are comma separated. Parenthesized runs are products the order
pipeline could not match against the inventory ("unmapped"):

    "1X GEL PYTHON, (1 X EVIL GOODS! | SEBO DE RES)"
      → GEL PYTHON (qty 1, mapped)
      → (1 X EVIL GOODS! | SEBO DE RES) (qty 1, unmapped)

Malformed input never raises; anything that does not fit the format is
read as a plain name.
"""

import re
from typing import Optional

from models.reconciliation import OrderProductToken

UNMAPPED_PATTERN = re.compile(r"\([^)]+\)")
QUANTITY_ENTRY = re.compile(r"^(\d+)\s*[xX]\s*(.+)$")
DOUBLE_COMMA = re.compile(r",\s*,")


def split_quantity(entry: str) -> tuple[Optional[int], str]:
    """
    Split "<digits> X <name>" into (quantity, name).

    Returns (None, entry) when there is no quantity prefix.
    """
    match = QUANTITY_ENTRY.match(entry)
    if not match:
        return None, entry
    return int(match.group(1)), match.group(2).strip()


def _parse_unmapped(text: str) -> list[OrderProductToken]:
    tokens = []
    for match in UNMAPPED_PATTERN.finditer(text):
        interior = match.group(0)[1:-1].strip()
        if not interior:
            continue
        quantity, _ = split_quantity(interior)
        tokens.append(OrderProductToken(
            raw_text=match.group(0),
            name=f"({interior})",
            quantity=quantity,
            is_unmapped=True,
        ))
    return tokens


def _parse_mapped(text: str) -> list[OrderProductToken]:
    remainder = UNMAPPED_PATTERN.sub("", text).strip()
    remainder = DOUBLE_COMMA.sub(",", remainder).strip()
    if not remainder:
        return []

    tokens = []
    for piece in remainder.split(","):
        entry = piece.strip()
        if not entry:
            continue
        quantity, name = split_quantity(entry)
        tokens.append(OrderProductToken(
            raw_text=entry,
            name=name,
            quantity=quantity,
            is_unmapped=False,
        ))
    return tokens


def parse_product_string(text: Optional[str]) -> list[OrderProductToken]:
    """
    Parse an order's product field into tokens.

    Unmapped tokens come first, then mapped ones in source order.
    Consumers filter on is_unmapped, so the order carries no meaning.

    Args:
        text: Raw product field (may be None or empty)

    Returns:
        List of OrderProductToken
    """
    if not text:
        return []

    return _parse_unmapped(text) + _parse_mapped(text)
