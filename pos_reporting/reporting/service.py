"""
Report Service

Runs report queries against the shared connection pool and returns
normalized records. Store failures and timeouts become QueryFailed; an
empty result is returned as an empty list.
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

import structlog
from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pos_reporting.serving.cache import ResultCache
from . import queries
from .errors import QueryFailed
from .normalizers import (
    to_category_sales,
    to_hourly_item_sale,
    to_item_sale,
    to_money,
    to_sales_period,
    to_simple_sales,
    to_store_descriptor,
    to_transaction_line,
    to_void,
)
from .params import ReportKind, ReportParams
from .schemas import (
    CategorySalesRecord,
    HourlyItemSaleRecord,
    ItemSaleRecord,
    MenuStats,
    SalesPeriodRecord,
    SalesSummary,
    SimpleSalesRecord,
    StoreDescriptor,
    TransactionLineRecord,
    VoidRecord,
)
from .summary import (
    active_windows,
    compute_trend,
    estimate_customers,
    previous_day,
    reference_hour,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ReportService:
    """
    Read-only report queries over the point-of-sale store.

    Owns the sales-summary cache; one instance serves the whole process.

    Example:
        service = ReportService(get_session_factory(), ResultCache("sales-summary"))
        records = await service.store_sales(params)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        summary_cache: Optional[ResultCache] = None,
        query_timeout: float = 60.0,
        customers_per_check: float = 1.5,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.session_factory = session_factory
        self.summary_cache = summary_cache
        self.query_timeout = query_timeout
        self.customers_per_check = customers_per_check
        self._now = now or datetime.now

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def _run(
        self,
        report: str,
        work: Callable[[AsyncSession], Awaitable[T]],
        context: Optional[dict] = None,
    ) -> T:
        """Run `work` in a session under the request timeout."""
        context = context or {"report": report}

        async def in_session() -> T:
            async with self.session_factory() as session:
                try:
                    return await work(session)
                finally:
                    await session.rollback()

        try:
            return await asyncio.wait_for(in_session(), timeout=self.query_timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Report query timed out",
                timeout_seconds=self.query_timeout,
                requested_at=self._now().isoformat(),
                **context,
            )
            raise QueryFailed(
                report,
                f"query exceeded {self.query_timeout:g}s timeout",
                timed_out=True,
                params=context,
            )
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Report query failed",
                error=str(e),
                error_type=type(e).__name__,
                requested_at=self._now().isoformat(),
                **context,
            )
            raise QueryFailed(report, f"{type(e).__name__}: {e}", params=context) from e

    async def _fetch_rows(self, params: ReportParams, statement: Select) -> Sequence[Any]:
        async def work(session: AsyncSession) -> Sequence[Any]:
            result = await session.execute(statement)
            return result.all()

        rows = await self._run(params.kind.value, work, params.log_context())
        logger.debug("Report rows fetched", rows=len(rows), **params.log_context())
        return rows

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    async def store_sales(self, params: ReportParams) -> List[SalesPeriodRecord]:
        rows = await self._fetch_rows(params, queries.store_sales_query(params))
        return [to_sales_period(row) for row in rows]

    async def simple_sales(self, params: ReportParams) -> List[SimpleSalesRecord]:
        rows = await self._fetch_rows(params, queries.simple_sales_query(params))
        return [to_simple_sales(row) for row in rows]

    async def item_sales(self, params: ReportParams) -> List[ItemSaleRecord]:
        rows = await self._fetch_rows(params, queries.item_sales_query(params))
        return [to_item_sale(row) for row in rows]

    async def item_sales_by_hour(self, params: ReportParams) -> List[HourlyItemSaleRecord]:
        rows = await self._fetch_rows(params, queries.item_sales_by_hour_query(params))
        return [to_hourly_item_sale(row) for row in rows]

    async def transaction_items(self, params: ReportParams) -> List[TransactionLineRecord]:
        rows = await self._fetch_rows(params, queries.transaction_items_query(params))
        return [to_transaction_line(row) for row in rows]

    async def void_transactions(self, params: ReportParams) -> List[VoidRecord]:
        rows = await self._fetch_rows(params, queries.void_transactions_query(params))
        return [to_void(row) for row in rows]

    async def category_sales(self, params: ReportParams) -> List[CategorySalesRecord]:
        rows = await self._fetch_rows(params, queries.category_sales_query(params))
        return to_category_sales(rows)

    async def stores(self, params: ReportParams) -> List[StoreDescriptor]:
        """Stores with sales in the window, with their latest day"""
        rows = await self._fetch_rows(params, queries.store_directory_query(params))
        return [to_store_descriptor(row) for row in rows]

    async def menu_stats(self) -> MenuStats:
        async def work(session: AsyncSession) -> int:
            result = await session.execute(queries.menu_item_count_query())
            return result.scalar_one() or 0

        count = await self._run(ReportKind.MENU_STATS.value, work)
        return MenuStats(menu_item_count=count)

    # -------------------------------------------------------------------------
    # Sales summary
    # -------------------------------------------------------------------------

    async def sales_summary(self, params: ReportParams) -> SalesSummary:
        """
        Summary for params.end_date, memoized per (date, store scope).

        A fresh cached value is returned without touching the store.
        """
        if self.summary_cache is None:
            return await self._compute_summary(params)

        key = (ReportKind.SALES_SUMMARY.value, params.end_date.isoformat(), params.store_scope)
        return await self.summary_cache.get_or_set(key, lambda: self._compute_summary(params))

    async def _compute_summary(self, params: ReportParams) -> SalesSummary:
        target = params.end_date
        store_id = params.store_id
        previous = previous_day(target)
        current_hours, previous_hours = active_windows(reference_hour(target, self._now()))

        async def work(session: AsyncSession) -> dict:
            async def scalar(statement: Select) -> Any:
                result = await session.execute(statement)
                return result.scalar_one()

            totals = {
                "today_sales": await scalar(queries.day_sales_query(target, store_id)),
                "previous_sales": await scalar(queries.day_sales_query(previous, store_id)),
                "today_checks": await scalar(queries.check_count_query(target, store_id)),
                "previous_checks": await scalar(queries.check_count_query(previous, store_id)),
                "active_orders": await scalar(
                    queries.check_count_query(target, store_id, *current_hours)
                ),
                "previous_orders": 0,
            }
            if previous_hours[1] >= 0:
                totals["previous_orders"] = await scalar(
                    queries.check_count_query(target, store_id, *previous_hours)
                )
            return totals

        totals = await self._run(ReportKind.SALES_SUMMARY.value, work, params.log_context())

        today_sales = to_money(totals["today_sales"])
        previous_sales = to_money(totals["previous_sales"])
        today_customers = estimate_customers(totals["today_checks"], self.customers_per_check)
        previous_customers = estimate_customers(totals["previous_checks"], self.customers_per_check)

        summary = SalesSummary(
            target_date=target,
            store_id=store_id,
            today_sales=today_sales,
            previous_sales=previous_sales,
            sales_trend=compute_trend(today_sales, previous_sales),
            check_count=totals["today_checks"],
            active_orders=totals["active_orders"],
            orders_trend=compute_trend(totals["active_orders"], totals["previous_orders"]),
            customers=today_customers,
            customers_trend=compute_trend(today_customers, previous_customers),
        )
        logger.info(
            "Sales summary computed",
            target_date=target.isoformat(),
            store_id=params.store_scope,
            today_sales=today_sales,
            active_orders=summary.active_orders,
        )
        return summary
