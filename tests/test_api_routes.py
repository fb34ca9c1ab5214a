"""Integration tests for API routes."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from sales_insights.core.exceptions import FeedError, StoreUnavailableError


@pytest.fixture
def client(analytics_service) -> TestClient:
    """Test client backed by a real service over a seeded local store."""
    from sales_insights.main import app

    with patch("sales_insights.api.routes.get_service", return_value=analytics_service):
        yield TestClient(app)


@pytest.fixture
def failing_client() -> TestClient:
    """Test client whose store is unreachable."""
    from sales_insights.main import app
    from sales_insights.services.analytics_service import AnalyticsService

    store = MagicMock()
    store.count.side_effect = StoreUnavailableError("store offline", details={"host": "db"})
    store.aggregate.side_effect = StoreUnavailableError("store offline", details={"host": "db"})

    with patch("sales_insights.api.routes.get_service", return_value=AnalyticsService(store)):
        yield TestClient(app)


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestTransactionsEndpoint:
    """Tests for GET /api/transactions."""

    def test_lists_month(self, client):
        response = client.get("/api/transactions", params={"month": "March"})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert data["page"] == 1
        assert data["perPage"] == 10
        assert [tx["id"] for tx in data["transactions"]] == [1, 2, 3, 4]
        assert "dateOfSale" in data["transactions"][0]

    def test_paginates(self, client):
        response = client.get("/api/transactions", params={"month": "March", "page": 2, "perPage": 3})
        data = response.json()
        assert [tx["id"] for tx in data["transactions"]] == [4]
        assert data["perPage"] == 3

    def test_search(self, client):
        response = client.get("/api/transactions", params={"month": "March", "search": "150"})
        assert [tx["id"] for tx in response.json()["transactions"]] == [2]

    def test_invalid_month_is_400(self, client):
        response = client.get("/api/transactions", params={"month": "Marchh"})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_month"

    def test_missing_month_is_400(self, client):
        response = client.get("/api/transactions")
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_month"

    def test_invalid_page_is_400(self, client):
        response = client.get("/api/transactions", params={"month": "March", "page": "two"})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_pagination"


class TestAggregateEndpoints:
    """Tests for statistics, bar chart and pie chart."""

    def test_statistics(self, client):
        response = client.get("/api/statistics", params={"month": "March"})
        assert response.status_code == 200
        assert response.json() == {"totalSaleAmount": 1249, "soldItems": 3, "notSoldItems": 1}

    def test_bar_chart(self, client):
        response = client.get("/api/bar-chart", params={"month": "March"})
        data = response.json()
        assert len(data) == 10
        assert data[0] == {"range": "0-100", "count": 2}
        assert data[1] == {"range": "101-200", "count": 1}
        assert data[-1] == {"range": "901-above", "count": 1}

    def test_pie_chart(self, client):
        response = client.get("/api/pie-chart", params={"month": "March"})
        assert response.json() == [
            {"category": "Electronics", "count": 3},
            {"category": "Toys", "count": 1},
        ]

    def test_statistics_store_failure_is_503(self, failing_client):
        response = failing_client.get("/api/statistics", params={"month": "March"})
        assert response.status_code == 503
        assert response.json() == {
            "error": "store_unavailable",
            "message": "store offline",
            "details": {"host": "db"},
        }


class TestCombinedEndpoint:
    """Tests for GET /api/combined-data."""

    def test_combined_data(self, client):
        response = client.get("/api/combined-data", params={"month": "March"})
        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"transactions", "statistics", "barChart", "pieChart"}
        assert data["transactions"]["total"] == 4
        assert data["statistics"]["totalSaleAmount"] == 1249
        assert len(data["barChart"]) == 10

    def test_combined_data_with_search(self, client):
        response = client.get("/api/combined-data", params={"month": "March", "search": "watch"})
        data = response.json()
        assert data["transactions"]["total"] == 1
        assert data["pieChart"] == [{"category": "Electronics", "count": 1}]

    def test_combined_store_failure_has_no_partial_result(self, failing_client):
        response = failing_client.get("/api/combined-data", params={"month": "March"})
        assert response.status_code == 503
        assert response.json()["error"] == "store_unavailable"
        assert "statistics" not in response.json()


class TestInitializeDbEndpoint:
    """Tests for /api/initialize-db."""

    def test_seeds_from_configured_feed(self):
        from sales_insights.main import app

        seed_service = MagicMock()
        seed_service.seed_from_url.return_value = 60
        with patch("sales_insights.api.routes.get_seed_service", return_value=seed_service):
            response = TestClient(app).post("/api/initialize-db")

        assert response.status_code == 200
        assert response.json() == {"message": "Database initialized successfully", "count": 60}
        seed_service.seed_from_url.assert_called_once()

    def test_feed_failure_is_502(self):
        from sales_insights.main import app

        seed_service = MagicMock()
        seed_service.seed_from_url.side_effect = FeedError("feed down")
        with patch("sales_insights.api.routes.get_seed_service", return_value=seed_service):
            response = TestClient(app).post("/api/initialize-db")

        assert response.status_code == 502
        assert response.json()["error"] == "feed_error"

    def test_get_is_accepted_for_existing_clients(self):
        from sales_insights.main import app

        seed_service = MagicMock()
        seed_service.seed_from_url.return_value = 60
        with patch("sales_insights.api.routes.get_seed_service", return_value=seed_service):
            response = TestClient(app).get("/api/initialize-db")

        assert response.status_code == 200
        assert response.json()["count"] == 60
