"""Filtering and sorting utilities for API endpoints.

Sorting:
    - `?sort_by=start_date:asc` - Ascending by field
    - `?sort_by=title:desc` - Descending

Filtering:
    - `?status=todo` - Exact match
    - `?status=todo,in-progress` - Match any (OR)
"""

from dataclasses import dataclass

from grh.core.errors import ValidationError

_DIRECTIONS = frozenset({"asc", "desc"})


def parse_sort(
    sort_param: str | None,
    allowed_fields: frozenset[str],
    default: tuple[str, str],
) -> tuple[str, str]:
    """Parse a ``field:direction`` sort parameter.

    Args:
        sort_param: Raw sort query string (e.g., "start_date:desc").
        allowed_fields: Field names the caller may sort on.
        default: (field, direction) used when sort_param is empty.

    Returns:
        (field_name, direction) tuple; direction is "asc" or "desc".

    Raises:
        ValidationError: If the field or direction is not allowed.

    Examples:
        >>> parse_sort("title:asc", frozenset({"title"}), ("title", "desc"))
        ("title", "asc")
    """
    if not sort_param:
        return default

    field_name, _, direction = sort_param.partition(":")
    field_name = field_name.strip()
    direction = (direction.strip() or "asc").lower()

    if field_name not in allowed_fields or direction not in _DIRECTIONS:
        raise ValidationError(
            message="Invalid sort parameter",
            details=[
                {
                    "field": "sort_by",
                    "message": (
                        f"Expected one of {sorted(allowed_fields)} "
                        "followed by ':asc' or ':desc'"
                    ),
                }
            ],
        )
    return field_name, direction


def parse_filter_value(value: str | None) -> list[str]:
    """Parse filter value into list of values (for OR matching).

    Args:
        value: Raw filter value (e.g., "todo,in-progress").

    Returns:
        List of individual values, trimmed.

    Examples:
        >>> parse_filter_value("todo,in-progress")
        ["todo", "in-progress"]
    """
    if not value:
        return []

    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class SortSpec:
    """Parsed sort for a repository query."""

    field: str
    direction: str = "asc"

    @property
    def descending(self) -> bool:
        return self.direction == "desc"
