"""Calendar month resolution for month-of-year filters."""

from __future__ import annotations

from typing import Any

from sales_insights.core.exceptions import InvalidMonthError

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MONTH_ORDINALS: dict[str, int] = {name: idx for idx, name in enumerate(MONTH_NAMES, start=1)}


def resolve_month(name: Any) -> int:
    """Map a full English month name to its ordinal (1-12).

    Matching is exact and case-sensitive; the year plays no part.

    Raises:
        InvalidMonthError: If the name is not one of the twelve month names.
    """
    if not isinstance(name, str) or name not in MONTH_ORDINALS:
        raise InvalidMonthError(
            f"Unknown month: {name!r}. Expected one of {', '.join(MONTH_NAMES)}.",
            details={"month": name},
        )
    return MONTH_ORDINALS[name]
