"""Response envelope models.

Consistent response format for all API endpoints:
- success: ``{"success": true, "message"?: str, "data": ...}``
- lists: ``{"success": true, "data": [...], "pagination": {...}}``
- errors: ``{"success": false, "error": {"code", "message", "details"?}}``
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, computed_field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination metadata for collections.

    Page-based lists set ``page``; offset-based lists (trainings) set ``skip``.

    Attributes:
        total: Total number of items matching the query.
        count: Number of items in this response.
        limit: Maximum number of items per response.
        page: Current page number (1-indexed), for page-based lists.
        skip: Number of skipped items, for offset-based lists.
    """

    total: int
    count: int
    limit: int
    page: int | None = None
    skip: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        """Calculate total number of pages.

        Returns:
            Number of pages needed to display all items.
            Returns 0 if total is 0.
        """
        if self.total == 0 or self.limit == 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_more(self) -> bool:
        """Whether items remain after this response."""
        if self.skip is not None:
            offset = self.skip
        else:
            offset = ((self.page or 1) - 1) * self.limit
        return offset + self.count < self.total


class DataResponse(BaseModel, Generic[T]):
    """Standard response envelope for single resources.

    Usage:
        @router.get("/missions/{id}")
        async def get_mission(id: UUID) -> DataResponse[dict]:
            mission = await service.get(actor, id)
            return DataResponse(data=_mission_to_dict(mission))
    """

    success: bool = True
    message: str | None = None
    data: T


class ListResponse(BaseModel, Generic[T]):
    """Standard response envelope for collections.

    Usage:
        @router.get("/postings/search")
        async def search(pagination: Pagination) -> ListResponse[dict]:
            postings, total = await service.search(filters, pagination)
            return ListResponse(
                data=[_posting_to_dict(p) for p in postings],
                pagination=pagination.meta(total=total, count=len(postings)),
            )
    """

    success: bool = True
    message: str | None = None
    data: list[T]
    pagination: PaginationMeta


class ErrorDetail(BaseModel):
    """Error detail for response body.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        details: Optional list of field-level errors (for validation).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=ErrorDetail(code=exc.code, message=exc.message)
            ).model_dump(),
        )
    """

    success: bool = False
    error: ErrorDetail


def single_page(items: list[T]) -> ListResponse[T]:
    """Wrap an unpaginated collection as one page holding every item."""
    return ListResponse(
        data=items,
        pagination=PaginationMeta(total=len(items), count=len(items), limit=len(items), page=1),
    )
