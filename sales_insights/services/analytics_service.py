from __future__ import annotations

from typing import Any, Optional

import anyio

from sales_insights.analytics.aggregations import (
    CATEGORY_PIPELINE,
    HISTOGRAM_PIPELINE,
    STATISTICS_PIPELINE,
    categories_from_rows,
    histogram_from_rows,
    statistics_from_rows,
)
from sales_insights.analytics.months import resolve_month
from sales_insights.analytics.pagination import page_offset, resolve_pagination
from sales_insights.analytics.predicates import Predicate, build_filter
from sales_insights.core.logging import LogContext, get_logger
from sales_insights.repositories.base import TransactionStore
from sales_insights.schemas.models import (
    CategoryCount,
    CombinedResult,
    PagedResult,
    PriceBucket,
    Statistics,
    Transaction,
)

logger = get_logger("sales_insights.services.analytics")


class AnalyticsService:
    """Month/search analytics over a transaction store.

    The store is supplied by the caller, which owns its lifecycle. Every
    operation validates its input before touching the store.
    """

    def __init__(
        self,
        repository: TransactionStore,
        default_per_page: int = 10,
        max_per_page: int = 100,
    ) -> None:
        self.repository = repository
        self.default_per_page = default_per_page
        self.max_per_page = max_per_page

    def build_predicate(self, month: Any, search: Optional[str] = None) -> Predicate:
        return build_filter(resolve_month(month), search)

    def list_transactions(
        self,
        month: Any,
        search: Optional[str] = None,
        page: Any = None,
        per_page: Any = None,
    ) -> PagedResult:
        """Return one page of the transactions matching month and search.

        Args:
            month: Full English month name, e.g. "March"
            search: Optional text (title/description) or exact price
            page: 1-based page number (default 1)
            per_page: Page size (default 10, clamped to max_per_page)
        """
        predicate = self.build_predicate(month, search)
        page_number, size = self._pagination(page, per_page)
        return self._paginate(predicate, page_number, size)

    def get_statistics(self, month: Any, search: Optional[str] = None) -> Statistics:
        return self._statistics(self.build_predicate(month, search))

    def get_histogram(self, month: Any, search: Optional[str] = None) -> list[PriceBucket]:
        return self._histogram(self.build_predicate(month, search))

    def get_category_breakdown(self, month: Any, search: Optional[str] = None) -> list[CategoryCount]:
        return self._categories(self.build_predicate(month, search))

    async def get_combined_view(
        self,
        month: Any,
        search: Optional[str] = None,
        page: Any = None,
        per_page: Any = None,
    ) -> CombinedResult:
        """Page, statistics, histogram and categories for one month/search filter.

        All four sections share the same month+search predicate. The four store
        reads run concurrently; the first failure cancels the others and is
        raised as-is, so callers never see a partially merged result.

        Each read takes its own store snapshot. Sections agree while the store
        is not being reseeded; a seed running at the same moment can leave them
        describing different record sets.
        """
        predicate = self.build_predicate(month, search)
        page_number, size = self._pagination(page, per_page)

        results: dict[str, Any] = {}

        async def run(section: str, func: Any, *args: Any) -> None:
            results[section] = await anyio.to_thread.run_sync(func, *args, abandon_on_cancel=True)

        with LogContext(logger, "combined view", month=month, search=search, page=page_number):
            try:
                async with anyio.create_task_group() as tg:
                    tg.start_soon(run, "transactions", self._paginate, predicate, page_number, size)
                    tg.start_soon(run, "statistics", self._statistics, predicate)
                    tg.start_soon(run, "bar_chart", self._histogram, predicate)
                    tg.start_soon(run, "pie_chart", self._categories, predicate)
            except BaseExceptionGroup as group:
                raise _first_error(group) from None

        return CombinedResult(**results)

    def _pagination(self, page: Any, per_page: Any) -> tuple[int, int]:
        return resolve_pagination(
            page,
            per_page,
            default_per_page=self.default_per_page,
            max_per_page=self.max_per_page,
        )

    def _paginate(self, predicate: Predicate, page: int, per_page: int) -> PagedResult:
        total = self.repository.count(predicate)
        skip = page_offset(page, per_page)
        records = self.repository.query(predicate, skip=skip, limit=per_page) if skip < total else []
        logger.debug(f"Page {page} ({per_page}/page): {len(records)} of {total} matches")
        return PagedResult(
            transactions=[Transaction.model_validate(record) for record in records],
            total=total,
            page=page,
            per_page=per_page,
        )

    def _statistics(self, predicate: Predicate) -> Statistics:
        return statistics_from_rows(self.repository.aggregate(predicate, STATISTICS_PIPELINE))

    def _histogram(self, predicate: Predicate) -> list[PriceBucket]:
        return histogram_from_rows(self.repository.aggregate(predicate, HISTOGRAM_PIPELINE))

    def _categories(self, predicate: Predicate) -> list[CategoryCount]:
        return categories_from_rows(self.repository.aggregate(predicate, CATEGORY_PIPELINE))


def _first_error(group: BaseExceptionGroup) -> BaseException:
    first = group.exceptions[0]
    if isinstance(first, BaseExceptionGroup):
        return _first_error(first)
    return first
