"""
Aggregations

Pipelines for the three derived views (statistics, price histogram, category
breakdown) and the functions that shape store rows into response models.
"""

from __future__ import annotations

from typing import Any, Optional

from sales_insights.analytics.pipeline import Bucket, Count, CountIf, Group, Pipeline, Sort, Sum
from sales_insights.schemas.models import CategoryCount, PriceBucket, Statistics

# (lower, upper) as shown to users; None means unbounded above.
PRICE_RANGES: tuple[tuple[int, Optional[int]], ...] = (
    (0, 100),
    (101, 200),
    (201, 300),
    (301, 400),
    (401, 500),
    (501, 600),
    (601, 700),
    (701, 800),
    (801, 900),
    (901, None),
)

# Upper-inclusive edges: bucket i holds prices in (upper[i-1], upper[i]].
HISTOGRAM_BOUNDARIES: tuple[float, ...] = tuple(
    float(upper) for _, upper in PRICE_RANGES if upper is not None
)

STATISTICS_PIPELINE: Pipeline = [
    Group(
        by=None,
        accumulators={
            "totalSaleAmount": Sum("price"),
            "soldItems": CountIf("sold", True),
            "notSoldItems": CountIf("sold", False),
        },
    ),
]

HISTOGRAM_PIPELINE: Pipeline = [
    Bucket(field="price", boundaries=HISTOGRAM_BOUNDARIES, output="count"),
]

CATEGORY_PIPELINE: Pipeline = [
    Group(by="category", accumulators={"count": Count()}),
    Sort(keys=("-count", "_id")),
]


def range_label(lower: int, upper: Optional[int]) -> str:
    return f"{lower}-{upper if upper is not None else 'above'}"


def statistics_from_rows(rows: list[dict[str, Any]]) -> Statistics:
    """An empty aggregate means zero matches, reported as zeros."""
    if not rows:
        return Statistics(total_sale_amount=0, sold_items=0, not_sold_items=0)
    row = rows[0]
    return Statistics(
        total_sale_amount=row.get("totalSaleAmount") or 0,
        sold_items=row.get("soldItems") or 0,
        not_sold_items=row.get("notSoldItems") or 0,
    )


def histogram_from_rows(rows: list[dict[str, Any]]) -> list[PriceBucket]:
    """Always one entry per price range, in range order; missing buckets count 0."""
    counts = {int(row["_id"]): int(row.get("count", 0)) for row in rows}
    return [
        PriceBucket(range=range_label(lower, upper), count=counts.get(index, 0))
        for index, (lower, upper) in enumerate(PRICE_RANGES)
    ]


def categories_from_rows(rows: list[dict[str, Any]]) -> list[CategoryCount]:
    return [
        CategoryCount(
            category="" if row["_id"] is None else str(row["_id"]),
            count=int(row["count"]),
        )
        for row in rows
    ]
