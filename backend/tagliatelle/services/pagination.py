"""Page-window metadata for list-producing endpoints."""
from pydantic import BaseModel


class Pagination(BaseModel):
    """Page-window metadata."""

    current_page: int
    total_pages: int
    has_prev: bool
    has_next: bool
    prev_page: int
    next_page: int
    per_page: int


def paginate(page: int, total: int, per_page: int) -> Pagination:
    """Calculate page-window metadata.

    A requested page beyond the last one is not clamped: it simply
    reports has_next=False and the caller gets an empty slice.

    Args:
        page: Requested 1-based page number
        total: Total number of items
        per_page: Page size, must be at least 1

    Returns:
        Pagination metadata
    """
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")

    total_pages = (total + per_page - 1) // per_page
    if total_pages < 1:
        total_pages = 1

    return Pagination(
        current_page=page,
        total_pages=total_pages,
        has_prev=page > 1,
        has_next=page < total_pages,
        prev_page=page - 1,
        next_page=page + 1,
        per_page=per_page,
    )


def page_offset(page: int, per_page: int) -> int:
    """Row offset of the first item on a page."""
    return (max(page, 1) - 1) * per_page
