"""
Reports API Client

Async wrapper around the /reports endpoints for dashboards and scripts.
Responses are unwrapped to their `data`; failures surface as the same
exceptions the server raises:

- 400 -> InvalidParameter (fix the input, do not retry)
- 5xx, timeouts, connection errors -> QueryFailed (safe to retry)
"""

from datetime import date
from typing import Any, Dict, List, Optional, Union

import httpx
import structlog

from pos_reporting.reporting.errors import InvalidParameter, QueryFailed

logger = structlog.get_logger(__name__)

DateLike = Union[date, str]


def _query(**params: Any) -> Dict[str, str]:
    """Drop unset filters and render dates as ISO strings"""
    query = {}
    for key, value in params.items():
        if value is None:
            continue
        query[key] = value.isoformat() if isinstance(value, date) else str(value)
    return query


class ReportsClient:
    """
    Client for the reporting API.

    Example:
        async with ReportsClient("http://localhost:5000") as client:
            rows = await client.store_sales(start_date="2024-01-01", store_id=7)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ReportsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, report: str, params: Dict[str, str]) -> Any:
        try:
            response = await self._client.get(f"/reports/{report}", params=params)
        except httpx.TimeoutException as e:
            logger.warning("Report request timed out", report=report, params=params)
            raise QueryFailed(report, f"request timed out: {e}", timed_out=True, params=params) from e
        except httpx.TransportError as e:
            logger.warning("Report request failed", report=report, error=str(e))
            raise QueryFailed(report, f"{type(e).__name__}: {e}", params=params) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code == 400:
            raise InvalidParameter(
                body.get("field", "query"),
                body.get("message", response.text),
            )
        if response.status_code >= 500:
            raise QueryFailed(
                report,
                body.get("error") or f"HTTP {response.status_code}",
                timed_out=bool(body.get("timeout")),
                params=params,
            )
        response.raise_for_status()
        return body.get("data")

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    async def store_sales(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get(
            "store-sales", _query(start_date=start_date, end_date=end_date, store_id=store_id)
        )

    async def simple_sales(
        self,
        on_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get("simple-sales", _query(date=on_date, store_id=store_id))

    async def item_sales(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
        item_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get(
            "item-sales",
            _query(start_date=start_date, end_date=end_date, store_id=store_id, item_id=item_id),
        )

    async def item_sales_by_hour(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
        item_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get(
            "item-sales-by-hour",
            _query(start_date=start_date, end_date=end_date, store_id=store_id, item_id=item_id),
        )

    async def transaction_items(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get(
            "transaction-items", _query(start_date=start_date, end_date=end_date, store_id=store_id)
        )

    async def void_transactions(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get(
            "void-transactions", _query(start_date=start_date, end_date=end_date, store_id=store_id)
        )

    async def category_sales(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get(
            "category-sales", _query(start_date=start_date, end_date=end_date, store_id=store_id)
        )

    async def sales_summary(
        self,
        on_date: Optional[DateLike] = None,
        store_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self._get("sales-summary", _query(date=on_date, store_id=store_id))

    async def stores(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> List[Dict[str, Any]]:
        return await self._get("stores", _query(start_date=start_date, end_date=end_date))

    async def menu_stats(self) -> Dict[str, Any]:
        return await self._get("menu-stats", {})
