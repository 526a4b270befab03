"""
Order product string parser.
"""

from parsers.product_string_parser import (
    parse_product_string,
    split_quantity,
)

__all__ = [
    "parse_product_string",
    "split_quantity",
]
