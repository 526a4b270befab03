"""
Helpers for Supabase (PostgREST) read queries.
"""

from typing import Callable, Optional


def build_like(value: Optional[str]) -> Optional[str]:
    """
    Turn a substring filter into an ilike pattern.

    - "  all stars " → "%all stars%"
    - "50%" → "%50%"   (user-supplied % is dropped)
    - "" / None → None (no filter)
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return f"%{trimmed.replace('%', '')}%"


def fetch_all_pages(
    fetch_page: Callable[[int, int], list[dict]],
    page_size: int,
) -> list[dict]:
    """
    Read every row by walking inclusive ranges until a short page.

    Args:
        fetch_page: Called with (start, end) row offsets, returns the rows
        page_size: Rows requested per page

    Returns:
        All rows in fetch order
    """
    rows: list[dict] = []
    start = 0

    while True:
        page = fetch_page(start, start + page_size - 1)
        rows.extend(page)
        if len(page) < page_size:
            return rows
        start += page_size
