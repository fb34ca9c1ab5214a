from __future__ import annotations

from typing import Any

from sales_insights.core.exceptions import InvalidPaginationError


def coerce_positive_int(value: Any, name: str, default: int) -> int:
    """Coerce a page-like parameter to an int >= 1.

    None and empty strings fall back to `default`. Numeric strings ("2") and
    integral floats are accepted.

    Raises:
        InvalidPaginationError: For non-numeric or non-positive values.
    """
    if value is None or value == "":
        return default

    if isinstance(value, bool):
        number = None
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float):
        number = int(value) if value.is_integer() else None
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            number = None

    if number is None:
        raise InvalidPaginationError(
            f"{name} must be an integer, got {value!r}.",
            details={name: str(value)},
        )
    if number < 1:
        raise InvalidPaginationError(
            f"{name} must be at least 1, got {number}.",
            details={name: number},
        )
    return number


def resolve_pagination(
    page: Any,
    per_page: Any,
    default_per_page: int = 10,
    max_per_page: int = 100,
) -> tuple[int, int]:
    """Return a validated (page, perPage) pair, perPage clamped to `max_per_page`."""
    page_number = coerce_positive_int(page, "page", 1)
    size = coerce_positive_int(per_page, "perPage", default_per_page)
    return page_number, min(size, max_per_page)


def page_offset(page: int, per_page: int) -> int:
    return (page - 1) * per_page
