"""
Report API Endpoints

Filterable, read-only sales reports. Every endpoint answers with the same
envelope:

    {"success": bool, "count"?: int, "data": [...] | {...},
     "message"?: str, "error"?: str, "truncated"?: true}

Filters arrive as raw strings so empty and null-like values from the
browser can be normalized instead of rejected.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from pos_reporting.config.logging import bind_report_context
from pos_reporting.reporting import ReportKind, ReportService, parse_report_params
from pos_reporting.reporting.normalizers import envelope
from pos_reporting.serving.api.dependencies import get_report_service

router = APIRouter()

START_DATE = Query(None, description="First business date, YYYY-MM-DD")
END_DATE = Query(None, description="Last business date (inclusive), YYYY-MM-DD")
SINGLE_DATE = Query(None, description="Business date, YYYY-MM-DD")
STORE_ID = Query(None, description="Store id; omit for all stores")
ITEM_ID = Query(None, description="Item id; omit for all items")


@router.get("/store-sales")
async def get_store_sales(
    start_date: Optional[str] = START_DATE,
    end_date: Optional[str] = END_DATE,
    store_id: Optional[str] = STORE_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Daily sales per store, oldest day first.

    Defaults to the last 30 days.
    """
    params = parse_report_params(ReportKind.STORE_SALES, start_date, end_date, store_id=store_id)
    bind_report_context(params)
    records = await service.store_sales(params)
    return envelope(records, truncated=params.truncated)


@router.get("/simple-sales")
async def get_simple_sales(
    date: Optional[str] = SINGLE_DATE,
    store_id: Optional[str] = STORE_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Daily sales totals without store names, newest first.

    A single `date` selects that day; without it, the last 30 days.
    """
    params = parse_report_params(ReportKind.SIMPLE_SALES, date_value=date, store_id=store_id)
    bind_report_context(params)
    records = await service.simple_sales(params)
    return envelope(records, truncated=params.truncated)


@router.get("/item-sales")
async def get_item_sales(
    start_date: Optional[str] = START_DATE,
    end_date: Optional[str] = END_DATE,
    store_id: Optional[str] = STORE_ID,
    item_id: Optional[str] = ITEM_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Quantity and sales per item per store per day, newest day first.

    Defaults to the last 30 days.
    """
    params = parse_report_params(
        ReportKind.ITEM_SALES, start_date, end_date, store_id=store_id, item_id=item_id
    )
    bind_report_context(params)
    records = await service.item_sales(params)
    return envelope(records, truncated=params.truncated)


@router.get("/item-sales-by-hour")
async def get_item_sales_by_hour(
    start_date: Optional[str] = START_DATE,
    end_date: Optional[str] = END_DATE,
    store_id: Optional[str] = STORE_ID,
    item_id: Optional[str] = ITEM_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Item sales bucketed by hour of day, ascending by date and hour.

    Defaults to today.
    """
    params = parse_report_params(
        ReportKind.ITEM_SALES_BY_HOUR, start_date, end_date, store_id=store_id, item_id=item_id
    )
    bind_report_context(params)
    records = await service.item_sales_by_hour(params)
    return envelope(records, truncated=params.truncated)


@router.get("/transaction-items")
async def get_transaction_items(
    start_date: Optional[str] = START_DATE,
    end_date: Optional[str] = END_DATE,
    store_id: Optional[str] = STORE_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Most recent check lines, at most 100.

    Defaults to the last 10 days.
    """
    params = parse_report_params(ReportKind.TRANSACTION_ITEMS, start_date, end_date, store_id=store_id)
    bind_report_context(params)
    records = await service.transaction_items(params)
    return envelope(records, truncated=params.truncated)


@router.get("/void-transactions")
async def get_void_transactions(
    start_date: Optional[str] = START_DATE,
    end_date: Optional[str] = END_DATE,
    store_id: Optional[str] = STORE_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Voided lines, newest first.

    Defaults to the last 30 days.
    """
    params = parse_report_params(ReportKind.VOID_TRANSACTIONS, start_date, end_date, store_id=store_id)
    bind_report_context(params)
    records = await service.void_transactions(params)
    return envelope(records, truncated=params.truncated)


@router.get("/category-sales")
async def get_category_sales(
    start_date: Optional[str] = START_DATE,
    end_date: Optional[str] = END_DATE,
    store_id: Optional[str] = STORE_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Sales by category with percentage of total, largest first.

    Defaults to the last 30 days.
    """
    params = parse_report_params(ReportKind.CATEGORY_SALES, start_date, end_date, store_id=store_id)
    bind_report_context(params)
    records = await service.category_sales(params)
    return envelope(records, truncated=params.truncated)


@router.get("/sales-summary")
async def get_sales_summary(
    date: Optional[str] = SINGLE_DATE,
    store_id: Optional[str] = STORE_ID,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Sales, active orders and customers for a day against the day before.

    Defaults to today. Cached per (date, store) for a short TTL.
    """
    params = parse_report_params(ReportKind.SALES_SUMMARY, date_value=date, store_id=store_id)
    bind_report_context(params)
    summary = await service.sales_summary(params)
    return envelope(summary)


@router.get("/stores")
async def get_stores(
    start_date: Optional[str] = START_DATE,
    end_date: Optional[str] = END_DATE,
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """Stores with sales in the window, each with its latest day's snapshot."""
    params = parse_report_params(ReportKind.STORES, start_date, end_date)
    bind_report_context(params)
    records = await service.stores(params)
    return envelope(records, truncated=params.truncated)


@router.get("/menu-stats")
async def get_menu_stats(
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """Number of active menu items."""
    stats = await service.menu_stats()
    return envelope(stats)
