"""Custom exceptions for the Sales Insights application."""

from __future__ import annotations


class SalesInsightsError(Exception):
    """Base exception for all Sales Insights errors."""

    kind = "error"

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class QueryValidationError(SalesInsightsError):
    """Base exception for bad query input, detected before any store access."""

    kind = "invalid_query"


class InvalidMonthError(QueryValidationError):
    """Raised when a month name does not resolve to a calendar month."""

    kind = "invalid_month"


class InvalidPaginationError(QueryValidationError):
    """Raised when page or perPage is non-numeric or below 1."""

    kind = "invalid_pagination"


class InvalidSearchError(QueryValidationError):
    """Reserved for malformed search syntax. Free-text search never raises it."""

    kind = "invalid_search"


class StoreUnavailableError(SalesInsightsError):
    """Raised when the record store cannot be read or written."""

    kind = "store_unavailable"


class FeedError(SalesInsightsError):
    """Raised when the seed feed cannot be fetched or has an unexpected shape."""

    kind = "feed_error"
