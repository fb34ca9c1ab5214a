from typing import Optional

from fastapi import APIRouter, Query

from sales_insights.core.config import get_settings
from sales_insights.repositories.base import TransactionStore
from sales_insights.repositories.factory import create_store
from sales_insights.schemas.models import (
    CategoryCount,
    CombinedResult,
    PagedResult,
    PriceBucket,
    SeedResponse,
    Statistics,
)
from sales_insights.services.analytics_service import AnalyticsService
from sales_insights.services.seed_service import SeedService

router = APIRouter()

# Lazy initialization so importing the app never touches the store (keeps tests offline)
_repo: TransactionStore | None = None
_service: AnalyticsService | None = None
_seed_service: SeedService | None = None


def get_repo() -> TransactionStore:
    global _repo
    if _repo is None:
        _repo = create_store(get_settings())
    return _repo


def get_service() -> AnalyticsService:
    global _service
    if _service is None:
        settings = get_settings()
        _service = AnalyticsService(
            get_repo(),
            default_per_page=settings.default_per_page,
            max_per_page=settings.max_per_page,
        )
    return _service


def get_seed_service() -> SeedService:
    global _seed_service
    if _seed_service is None:
        _seed_service = SeedService(get_repo(), timeout=get_settings().seed_timeout)
    return _seed_service


# Month and pagination arrive as raw strings; the service validates them so
# bad input is reported with its own error kind instead of a generic 422.

@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/initialize-db", response_model=SeedResponse)
@router.get("/initialize-db", response_model=SeedResponse)
def initialize_db() -> SeedResponse:
    """Replace the store contents with the configured product transaction feed.

    GET is kept for existing clients that seed from a browser link.
    """
    count = get_seed_service().seed_from_url(get_settings().seed_feed_url)
    return SeedResponse(message="Database initialized successfully", count=count)


@router.get("/transactions", response_model=PagedResult)
def list_transactions(
    month: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    per_page: Optional[str] = Query(None, alias="perPage"),
) -> PagedResult:
    """List transactions for a month, optionally filtered by title/description/price."""
    return get_service().list_transactions(month, search=search, page=page, per_page=per_page)


@router.get("/statistics", response_model=Statistics)
def get_statistics(month: Optional[str] = None, search: Optional[str] = None) -> Statistics:
    """Total sale amount and sold/unsold counts for a month."""
    return get_service().get_statistics(month, search=search)


@router.get("/bar-chart", response_model=list[PriceBucket])
def get_bar_chart(month: Optional[str] = None, search: Optional[str] = None) -> list[PriceBucket]:
    """Price-range histogram for a month: always ten buckets in fixed order."""
    return get_service().get_histogram(month, search=search)


@router.get("/pie-chart", response_model=list[CategoryCount])
def get_pie_chart(month: Optional[str] = None, search: Optional[str] = None) -> list[CategoryCount]:
    """Number of transactions per category for a month."""
    return get_service().get_category_breakdown(month, search=search)


@router.get("/combined-data", response_model=CombinedResult)
async def get_combined_data(
    month: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    per_page: Optional[str] = Query(None, alias="perPage"),
) -> CombinedResult:
    """Transactions page, statistics, bar chart and pie chart in one response."""
    return await get_service().get_combined_view(month, search=search, page=page, per_page=per_page)
