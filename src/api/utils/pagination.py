"""
RoMod - Pagination Utilities
============================

Builds list responses for the case endpoints.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, List, Optional

from src.api.models.base import PaginatedResponse, PaginationMeta
from src.api.dependencies import PaginationParams


def page_meta(total: int, params: PaginationParams) -> PaginationMeta:
    """Metadata for one page of a result set of `total` rows."""
    total_pages = max(1, -(-total // params.per_page))
    return PaginationMeta(
        page=params.page,
        per_page=params.per_page,
        total=total,
        total_pages=total_pages,
        has_next=params.page < total_pages,
        has_prev=params.page > 1,
    )


def create_paginated_response(
    items: List[Any],
    total: Optional[int],
    params: PaginationParams,
) -> PaginatedResponse:
    """
    Wrap one page of case records.

    Appeal, ticket, shift and report listings do not count their rows.
    For those the total is inferred from the page: a full page implies
    at least one more item, so has_next stays true until a short page.
    """
    if total is None:
        total = params.offset + len(items)
        if len(items) == params.per_page:
            total += 1

    return PaginatedResponse(
        success=True,
        data=items,
        pagination=page_meta(total, params),
    )


__all__ = ["page_meta", "create_paginated_response"]
