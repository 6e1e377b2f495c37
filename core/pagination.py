# FILE: medvanta/backend/core/pagination.py

"""
PAGINATION HELPERS

Page-number pagination shared by the list services.
"""

from dataclasses import dataclass, field
from typing import Any, List


@dataclass
class PaginatedResult:
    """One page of results"""
    data: List[Any] = field(default_factory=list)
    page: int = 1
    page_size: int = 20
    total: int = 0
    has_more: bool = False


def clamp_page(page, page_size, default_size=20, max_size=100):
    """Coerce page/page_size to sane positive integers."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = default_size
    page = max(page, 1)
    page_size = min(max(page_size, 1), max_size)
    return page, page_size


def paginate(items, page: int, page_size: int) -> PaginatedResult:
    """
    Slice a queryset or list into one page.

    Args:
        items: QuerySet or list, already filtered and ordered
        page: 1-indexed page number
        page_size: Rows per page

    Returns:
        PaginatedResult with has_more set when rows remain after this page
    """
    total = items.count() if hasattr(items, "count") and not isinstance(items, list) else len(items)
    offset = (page - 1) * page_size
    data = list(items[offset:offset + page_size])
    return PaginatedResult(
        data=data,
        page=page,
        page_size=page_size,
        total=total,
        has_more=offset + len(data) < total,
    )
