"""
Integration Tests - Reports HTTP API
"""
import pytest
from httpx import ASGITransport, AsyncClient

from pos_reporting.config import Settings
from pos_reporting.config.settings import SecuritySettings
from pos_reporting.main import create_app


class TestEnvelope:
    """Tests for successful responses"""

    async def test_store_sales(self, client):
        response = await client.get(
            "/reports/store-sales", params={"start_date": "2024-03-01", "end_date": "2024-03-15"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 4
        assert "truncated" not in body
        assert body["data"][0] == {
            "store_id": 1,
            "store_name": "Downtown",
            "business_date": "2024-03-14",
            "net_sales": 1000.0,
            "gross_sales": 1100.0,
            "check_count": 50,
            "guest_count": 70,
        }

    async def test_unknown_store_returns_empty_success(self, client):
        response = await client.get(
            "/reports/store-sales",
            params={"start_date": "2024-03-01", "end_date": "2024-03-15", "store_id": "999999"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 0, "data": []}

    async def test_null_store_means_all_stores(self, client):
        response = await client.get(
            "/reports/simple-sales", params={"date": "2024-03-15", "store_id": "null"}
        )

        assert response.status_code == 200
        assert {row["store_id"] for row in response.json()["data"]} == {1, 2, 3}

    async def test_hourly_rows(self, client):
        response = await client.get(
            "/reports/item-sales-by-hour",
            params={"start_date": "2024-03-15", "end_date": "2024-03-15", "store_id": "2"},
        )

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["hour"] == 10
        assert data[0]["hour_label"] == "10:00"
        assert data[0]["item_name"] == "Large Soda"

    async def test_truncated_range_is_flagged(self, client):
        response = await client.get(
            "/reports/item-sales", params={"start_date": "2023-01-01", "end_date": "2024-03-15"}
        )

        assert response.status_code == 200
        assert response.json()["truncated"] is True

    async def test_category_sales(self, client):
        response = await client.get(
            "/reports/category-sales", params={"start_date": "2024-03-15", "end_date": "2024-03-15"}
        )

        data = response.json()["data"]
        assert [row["percentage"] for row in data] == [64, 24, 12]
        assert data[2]["category_id"] is None

    async def test_void_transactions(self, client):
        response = await client.get(
            "/reports/void-transactions",
            params={"start_date": "2024-03-14", "end_date": "2024-03-15", "store_id": "2"},
        )

        data = response.json()["data"]
        assert [row["check_id"] for row in data] == [800]
        assert data[0]["manager_id"] is None

    async def test_transaction_items(self, client):
        response = await client.get(
            "/reports/transaction-items",
            params={"start_date": "2024-03-15", "end_date": "2024-03-15"},
        )

        assert response.json()["count"] == 5

    async def test_sales_summary_camel_case(self, client):
        response = await client.get("/reports/sales-summary", params={"date": "2024-03-15"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["date"] == "2024-03-15"
        assert data["todaySales"] == 41.97
        assert data["salesTrend"] == 200.0
        assert data["activeOrders"] == 2
        assert data["customers"] == 6

    async def test_stores(self, client):
        response = await client.get(
            "/reports/stores", params={"start_date": "2024-03-01", "end_date": "2024-03-15"}
        )

        data = response.json()["data"]
        assert [row["store_id"] for row in data] == [1, 2, 3]
        assert data[1]["latest_net_sales"] == 800.5

    async def test_menu_stats(self, client):
        response = await client.get("/reports/menu-stats")

        assert response.json() == {"success": True, "data": {"menuItemCount": 2}}


class TestInvalidParameters:
    """Tests for 400 responses"""

    async def test_end_before_start(self, client):
        response = await client.get(
            "/reports/store-sales", params={"start_date": "2024-03-10", "end_date": "2024-03-01"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "InvalidParameter"
        assert body["field"] == "start_date"

    @pytest.mark.parametrize("path,params,field", [
        ("/reports/item-sales", {"store_id": "abc"}, "store_id"),
        ("/reports/item-sales-by-hour", {"item_id": "x1"}, "item_id"),
        ("/reports/void-transactions", {"start_date": "15/03/2024"}, "start_date"),
        ("/reports/sales-summary", {"date": "2024-02-30"}, "date"),
        ("/reports/sales-summary", {"date": "2024-W01-1"}, "date"),
        ("/reports/store-sales", {"end_date": "0001-01-05"}, "end_date"),
        ("/reports/transaction-items", {"start_date": "9999-12-20"}, "start_date"),
    ])
    async def test_malformed_values(self, client, path, params, field):
        response = await client.get(path, params=params)

        assert response.status_code == 400
        assert response.json()["field"] == field


class TestQueryFailures:
    """Tests for 500 responses"""

    async def test_store_failure_envelope(self, app, client, broken_service):
        app.state.report_service = broken_service

        response = await client.get("/reports/category-sales")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Error retrieving category sales data"
        assert "OperationalError" in body["error"]
        assert body["retryable"] is True

    async def test_service_not_initialized(self, app, client):
        del app.state.report_service

        response = await client.get("/reports/menu-stats")

        assert response.status_code == 500
        assert response.json()["retryable"] is True


class TestOperationalEndpoints:
    """Tests for health, info and middleware"""

    async def test_liveness(self, client):
        response = await client.get("/health/live")

        assert response.json() == {"status": "alive"}

    async def test_health_reports_cache(self, client):
        await client.get("/reports/sales-summary", params={"date": "2024-03-15"})

        response = await client.get("/health")

        checks = response.json()["checks"]
        assert checks["summary_cache"] == {"enabled": True, "entries": 1}

    async def test_readiness_without_pool(self, client):
        response = await client.get("/health/ready")

        assert response.status_code == 503

    async def test_info(self, client):
        response = await client.get("/info")

        assert response.json()["name"] == "POS Reporting API"
        assert response.json()["service"] == "pos-reporting"

    async def test_response_headers(self, client):
        response = await client.get("/health/live", headers={"X-Request-ID": "req-1"})

        assert response.headers["X-Request-ID"] == "req-1"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Response-Time" in response.headers

    async def test_api_prefix(self, report_service):
        application = create_app(Settings(API_PREFIX="api/v1"), rate_limit=False)
        application.state.report_service = report_service

        async with AsyncClient(transport=ASGITransport(app=application), base_url="http://test") as http:
            response = await http.get("/api/v1/reports/menu-stats")

        assert response.status_code == 200

    async def test_rate_limit(self, report_service):
        settings = Settings(security=SecuritySettings(RATE_LIMIT_REQUESTS=2, RATE_LIMIT_WINDOW_SECONDS=60))
        application = create_app(settings)
        application.state.report_service = report_service

        async with AsyncClient(transport=ASGITransport(app=application), base_url="http://test") as http:
            statuses = [(await http.get("/health/live")).status_code for _ in range(3)]
            limited = await http.get("/health/live")

        assert statuses == [200, 200, 429]
        assert limited.json()["error"] == "RateLimitExceeded"
