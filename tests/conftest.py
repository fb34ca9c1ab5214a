"""Pytest fixtures and configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest

# Set environment variables before importing app modules
os.environ["STORE_BACKEND"] = "local"
os.environ["ENVIRONMENT"] = "development"


def make_record(
    record_id: int,
    price: float,
    category: str = "Electronics",
    sold: bool | None = True,
    date_of_sale: str = "2021-03-15T10:00:00+00:00",
    title: str = "",
    description: str = "",
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": record_id,
        "title": title or f"Product {record_id}",
        "description": description or f"Description of product {record_id}",
        "price": price,
        "category": category,
        "dateOfSale": date_of_sale,
    }
    if sold is not None:
        record["sold"] = sold
    return record


@pytest.fixture
def march_records() -> list[dict[str, Any]]:
    """Four March sales across different years plus records from other months."""
    return [
        make_record(1, 50, "Electronics", True, "2021-03-02T08:00:00+00:00",
                    title="Wireless Headphones", description="Noise cancelling over-ear"),
        make_record(2, 150, "Electronics", False, "2022-03-10T12:30:00+00:00",
                    title="Smart Watch", description="Tracks steps and sleep"),
        make_record(3, 999, "Toys", True, "2021-03-20T18:45:00+00:00",
                    title="Remote Control Car", description="Off-road racer"),
        make_record(4, 50, "Electronics", True, "2020-03-28T09:15:00+00:00",
                    title="USB Cable", description="Braided charging cable"),
        make_record(5, 0, "Furniture", False, "2021-04-05T10:00:00+00:00",
                    title="Office Chair", description="Ergonomic mesh chair"),
        make_record(6, 329.95, "Furniture", True, "2021-11-11T10:00:00+00:00",
                    title="Wooden Chair", description="Solid oak"),
    ]


@pytest.fixture
def local_repo(tmp_path: Path, march_records):
    """LocalRepository seeded with `march_records`."""
    from sales_insights.repositories.local_repo import LocalRepository

    repo = LocalRepository(tmp_path)
    repo.replace_all(march_records)
    return repo


@pytest.fixture
def analytics_service(local_repo):
    from sales_insights.services.analytics_service import AnalyticsService

    return AnalyticsService(local_repo, default_per_page=10, max_per_page=100)
