"""Tests for the response envelope, pagination and filtering helpers."""

import pytest

from grh.core.errors import (
    APIError,
    ConflictError,
    DependencyFailure,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from grh.core.filtering import SortSpec, parse_filter_value, parse_sort
from grh.core.pagination import OffsetParams, PaginationParams, pagination_params
from grh.core.responses import (
    DataResponse,
    ErrorDetail,
    ErrorResponse,
    PaginationMeta,
    single_page,
)

# =============================================================================
# Errors
# =============================================================================


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "error,status,code",
        [
            (ValidationError("bad"), 400, "VALIDATION_ERROR"),
            (UnauthorizedError(), 401, "UNAUTHORIZED"),
            (ForbiddenError(), 403, "FORBIDDEN"),
            (NotFoundError("Mission"), 404, "NOT_FOUND"),
            (ConflictError("nope"), 400, "CONFLICT"),
            (DependencyFailure(), 500, "DEPENDENCY_FAILURE"),
        ],
    )
    def test_status_and_code(self, error, status, code):
        """Each error class should map to its status code and error code."""
        assert isinstance(error, APIError)
        assert error.status_code == status
        assert error.code == code

    def test_not_found_message_with_id(self):
        """NotFoundError should mention the resource and id."""
        assert NotFoundError("Mission", "abc").message == "Mission with id 'abc' not found"

    def test_not_found_message_without_id(self):
        """NotFoundError without id should name the resource only."""
        assert NotFoundError("Mission report").message == "Mission report not found"

    def test_conflict_custom_code(self):
        """ConflictError should accept a specific code."""
        error = ConflictError("Posting is already validated", code="ALREADY_VALIDATED")
        assert error.code == "ALREADY_VALIDATED"
        assert str(error) == "Posting is already validated"


# =============================================================================
# Envelopes
# =============================================================================


class TestEnvelopes:
    def test_data_response(self):
        """DataResponse should default success to true."""
        body = DataResponse(data={"id": 1}).model_dump()
        assert body == {"success": True, "message": None, "data": {"id": 1}}

    def test_error_response(self):
        """ErrorResponse should default success to false."""
        body = ErrorResponse(error=ErrorDetail(code="NOT_FOUND", message="gone")).model_dump()
        assert body == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "gone", "details": None},
        }

    def test_single_page(self):
        """single_page should describe one page holding every item."""
        response = single_page(["a", "b"])
        assert response.pagination.total == 2
        assert response.pagination.total_pages == 1
        assert response.pagination.has_more is False

    def test_single_page_empty(self):
        """An empty collection should have zero pages."""
        assert single_page([]).pagination.total_pages == 0


class TestPaginationMeta:
    def test_page_based_has_more(self):
        """Page 1 of 25 items by 10 should have more."""
        meta = PaginationMeta(total=25, count=10, limit=10, page=1)
        assert meta.total_pages == 3
        assert meta.has_more is True

    def test_last_page(self):
        """The last page should not have more."""
        meta = PaginationMeta(total=25, count=5, limit=10, page=3)
        assert meta.has_more is False

    def test_offset_based(self):
        """Offset metadata should compute has_more from skip."""
        assert PaginationMeta(total=12, count=10, limit=10, skip=0).has_more is True
        assert PaginationMeta(total=12, count=2, limit=10, skip=10).has_more is False

    def test_computed_fields_serialized(self):
        """total_pages and has_more should appear in the dump."""
        dumped = PaginationMeta(total=5, count=5, limit=10, page=1).model_dump()
        assert dumped["total_pages"] == 1
        assert dumped["has_more"] is False


class TestPaginationParams:
    def test_offset(self):
        """Offset should be (page - 1) * limit."""
        assert PaginationParams(page=5, limit=10).offset == 40

    def test_meta(self):
        """meta() should carry the page."""
        meta = PaginationParams(page=2, limit=20).meta(total=30, count=10)
        assert (meta.page, meta.limit, meta.skip) == (2, 20, None)

    def test_offset_params(self):
        """OffsetParams should use skip directly."""
        params = OffsetParams(skip=30, limit=10)
        assert params.offset == 30
        assert params.meta(total=35, count=5).skip == 30

    def test_dependency(self):
        """pagination_params should build PaginationParams."""
        assert pagination_params(page=3, limit=25) == PaginationParams(page=3, limit=25)


# =============================================================================
# Filtering
# =============================================================================

FIELDS = frozenset({"title", "start_date"})


class TestParseSort:
    def test_default(self):
        """Empty parameter should return the default."""
        assert parse_sort(None, FIELDS, ("start_date", "desc")) == ("start_date", "desc")

    def test_explicit(self):
        """field:direction should be parsed."""
        assert parse_sort("title:DESC", FIELDS, ("start_date", "desc")) == ("title", "desc")

    def test_direction_defaults_to_asc(self):
        """A bare field should sort ascending."""
        assert parse_sort("title", FIELDS, ("start_date", "desc")) == ("title", "asc")

    @pytest.mark.parametrize("param", ["salary:asc", "title:sideways"])
    def test_invalid(self, param):
        """Unknown fields or directions should raise ValidationError."""
        with pytest.raises(ValidationError, match="Invalid sort parameter"):
            parse_sort(param, FIELDS, ("start_date", "desc"))


class TestParseFilterValue:
    def test_comma_separated(self):
        """Comma-separated values should be split and trimmed."""
        assert parse_filter_value("todo, in-progress,") == ["todo", "in-progress"]

    def test_empty(self):
        """None should give no values."""
        assert parse_filter_value(None) == []

    def test_sort_spec(self):
        """SortSpec should expose descending."""
        assert SortSpec("title", "desc").descending is True
        assert SortSpec("title").descending is False
