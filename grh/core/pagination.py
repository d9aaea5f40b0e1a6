"""Pagination utilities.

Two styles are used across the API:
- page-based: page (default 1), limit (default 10, max 100)
- offset-based: skip (default 0), limit (default 10, max 100), used by
  training lists
"""

from dataclasses import dataclass

from fastapi import Query

from grh.core.responses import PaginationMeta

MAX_PAGE_SIZE = 100


@dataclass
class PaginationParams:
    """Pagination query parameters.

    Attributes:
        page: Current page number (1-indexed).
        limit: Number of items per page.
    """

    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        """Calculate SQL OFFSET for database queries.

        Returns:
            Number of items to skip (0 for page 1).
        """
        return (self.page - 1) * self.limit

    def meta(self, *, total: int, count: int) -> PaginationMeta:
        """Build page-based pagination metadata for a response."""
        return PaginationMeta(total=total, count=count, limit=self.limit, page=self.page)


@dataclass
class OffsetParams:
    """Offset-based query parameters (skip/limit)."""

    skip: int = 0
    limit: int = 10

    @property
    def offset(self) -> int:
        return self.skip

    def meta(self, *, total: int, count: int) -> PaginationMeta:
        """Build offset-based pagination metadata for a response."""
        return PaginationMeta(total=total, count=count, limit=self.limit, skip=self.skip)


def pagination_params(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        default=10,
        ge=1,
        le=MAX_PAGE_SIZE,
        description=f"Items per page (max {MAX_PAGE_SIZE})",
    ),
) -> PaginationParams:
    """FastAPI dependency for page-based pagination query parameters.

    Args:
        page: Page number (default 1, must be >= 1).
        limit: Items per page (default 10, between 1 and 100).

    Returns:
        PaginationParams with validated page and limit.
    """
    return PaginationParams(page=page, limit=limit)


def offset_params(
    skip: int = Query(default=0, ge=0, description="Number of items to skip"),
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
) -> OffsetParams:
    """FastAPI dependency for offset-based pagination query parameters."""
    return OffsetParams(skip=skip, limit=limit)
