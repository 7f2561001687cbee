"""
Integration Tests - Reports Client
"""
from datetime import date

import httpx
import pytest

from pos_reporting.client import ReportsClient
from pos_reporting.reporting.errors import InvalidParameter, QueryFailed


@pytest.fixture
async def reports_client(app):
    async with ReportsClient("http://test", transport=httpx.ASGITransport(app=app)) as client:
        yield client


class TestReportsClient:
    """Tests for the async API client"""

    async def test_returns_envelope_data(self, reports_client):
        rows = await reports_client.store_sales(
            start_date=date(2024, 3, 1), end_date=date(2024, 3, 15), store_id=2
        )

        assert [row["store_id"] for row in rows] == [2]

    async def test_empty_result_is_empty_list(self, reports_client):
        rows = await reports_client.item_sales_by_hour(start_date="2024-03-16", end_date="2024-03-16")

        assert rows == []

    async def test_summary_and_menu(self, reports_client):
        summary = await reports_client.sales_summary(on_date=date(2024, 3, 15), store_id=1)
        stats = await reports_client.menu_stats()

        assert summary["todaySales"] == 34.47
        assert stats == {"menuItemCount": 2}

    async def test_invalid_parameter_raised(self, reports_client):
        with pytest.raises(InvalidParameter) as exc_info:
            await reports_client.void_transactions(start_date="2024-03-10", end_date="2024-03-01")

        assert exc_info.value.field == "start_date"

    async def test_server_failure_raised(self, app, reports_client, broken_service):
        app.state.report_service = broken_service

        with pytest.raises(QueryFailed) as exc_info:
            await reports_client.category_sales()

        assert exc_info.value.report == "category-sales"
        assert "OperationalError" in exc_info.value.detail

    async def test_timeout_raised(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        async with ReportsClient("http://test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(QueryFailed) as exc_info:
                await client.stores()

        assert exc_info.value.timed_out is True

    async def test_unset_filters_not_sent(self):
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json={"success": True, "count": 0, "data": []})

        async with ReportsClient("http://test/", transport=httpx.MockTransport(handler)) as client:
            await client.item_sales(start_date=date(2024, 3, 1), item_id=0)

        assert seen[0].path == "/reports/item-sales"
        assert dict(seen[0].params) == {"start_date": "2024-03-01", "item_id": "0"}
