"""
Report Query Builder

One SQLAlchemy statement per report kind. Every filter value is a bound
parameter; nothing from the request is interpolated into SQL text.

Dimension tables are outer-joined so fact rows whose store, item or category
is missing from its dimension are still returned (and labelled by the
normalizers) instead of silently dropped.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import Select, and_, distinct, func, select
from sqlalchemy.sql.elements import ColumnElement

from pos_reporting.database.models import (
    Category,
    Item,
    SalesTotal,
    Store,
    TransactionLine,
    VoidLine,
)
from .params import ReportParams


def _scope(date_column, store_column, params: ReportParams) -> List[ColumnElement]:
    """Date-range and optional store conditions"""
    conditions = [date_column.between(params.start_date, params.end_date)]
    if params.store_id is not None:
        conditions.append(store_column == params.store_id)
    return conditions


def _line_amount() -> ColumnElement:
    return TransactionLine.price * TransactionLine.quantity


# =============================================================================
# DAILY SALES
# =============================================================================

def store_sales_query(params: ReportParams) -> Select:
    """Daily totals joined to store names, ascending by business date"""
    return (
        select(
            SalesTotal.store_id,
            Store.name.label("store_name"),
            SalesTotal.business_date,
            SalesTotal.net_sales,
            SalesTotal.gross_sales,
            SalesTotal.check_count,
            SalesTotal.guest_count,
        )
        .select_from(SalesTotal)
        .outerjoin(Store, Store.store_id == SalesTotal.store_id)
        .where(and_(*_scope(SalesTotal.business_date, SalesTotal.store_id, params)))
        .order_by(SalesTotal.business_date.asc(), SalesTotal.store_id.asc(), SalesTotal.id.asc())
        .limit(params.row_limit)
    )


def simple_sales_query(params: ReportParams) -> Select:
    """Daily totals without joins (legacy endpoint)"""
    return (
        select(
            SalesTotal.store_id,
            SalesTotal.business_date,
            SalesTotal.net_sales,
            SalesTotal.gross_sales,
            SalesTotal.check_count,
            SalesTotal.guest_count,
        )
        .where(and_(*_scope(SalesTotal.business_date, SalesTotal.store_id, params)))
        .order_by(SalesTotal.business_date.desc(), SalesTotal.store_id.asc(), SalesTotal.id.asc())
        .limit(params.row_limit)
    )


def store_directory_query(params: ReportParams) -> Select:
    """
    One row per store with sales in the window: its latest business date
    and the net sales recorded on that date.

    Grouped per store, so the row limit caps stores rather than days.
    """
    latest = (
        select(
            SalesTotal.store_id,
            func.max(SalesTotal.business_date).label("latest_business_date"),
        )
        .where(and_(*_scope(SalesTotal.business_date, SalesTotal.store_id, params)))
        .group_by(SalesTotal.store_id)
        .subquery("latest")
    )
    return (
        select(
            latest.c.store_id,
            Store.name.label("store_name"),
            latest.c.latest_business_date,
            func.sum(SalesTotal.net_sales).label("latest_net_sales"),
        )
        .select_from(latest)
        .join(
            SalesTotal,
            and_(
                SalesTotal.store_id == latest.c.store_id,
                SalesTotal.business_date == latest.c.latest_business_date,
            ),
        )
        .outerjoin(Store, Store.store_id == latest.c.store_id)
        .group_by(latest.c.store_id, Store.name, latest.c.latest_business_date)
        .order_by(latest.c.store_id.asc())
        .limit(params.row_limit)
    )


# =============================================================================
# ITEM SALES
# =============================================================================

def item_sales_query(params: ReportParams) -> Select:
    """Quantity and amount per item per store per day, newest day first"""
    quantity_sold = func.coalesce(func.sum(TransactionLine.quantity), 0).label("quantity_sold")
    sales_amount = func.coalesce(func.sum(_line_amount()), 0).label("sales_amount")

    conditions = _scope(TransactionLine.business_date, TransactionLine.store_id, params)
    if params.item_id is not None:
        conditions.append(TransactionLine.item_id == params.item_id)

    return (
        select(
            TransactionLine.item_id,
            Item.long_name.label("item_name"),
            TransactionLine.store_id,
            Store.name.label("store_name"),
            TransactionLine.business_date,
            quantity_sold,
            sales_amount,
        )
        .select_from(TransactionLine)
        .outerjoin(Item, Item.item_id == TransactionLine.item_id)
        .outerjoin(Store, Store.store_id == TransactionLine.store_id)
        .where(and_(*conditions))
        .group_by(
            TransactionLine.item_id,
            Item.long_name,
            TransactionLine.store_id,
            Store.name,
            TransactionLine.business_date,
        )
        .order_by(
            TransactionLine.business_date.desc(),
            sales_amount.desc(),
            TransactionLine.item_id.asc(),
            TransactionLine.store_id.asc(),
        )
        .limit(params.row_limit)
    )


def item_sales_by_hour_query(params: ReportParams) -> Select:
    """
    Item sales bucketed by hour of day in SQL.

    Ascending by business date then hour so the client can chart rows as-is.
    """
    quantity_sold = func.coalesce(func.sum(TransactionLine.quantity), 0).label("quantity_sold")
    sales_amount = func.coalesce(func.sum(_line_amount()), 0).label("sales_amount")

    conditions = _scope(TransactionLine.business_date, TransactionLine.store_id, params)
    if params.item_id is not None:
        conditions.append(TransactionLine.item_id == params.item_id)

    return (
        select(
            TransactionLine.item_id,
            Item.long_name.label("item_name"),
            TransactionLine.store_id,
            Store.name.label("store_name"),
            TransactionLine.business_date,
            TransactionLine.hour,
            quantity_sold,
            sales_amount,
        )
        .select_from(TransactionLine)
        .outerjoin(Item, Item.item_id == TransactionLine.item_id)
        .outerjoin(Store, Store.store_id == TransactionLine.store_id)
        .where(and_(*conditions))
        .group_by(
            TransactionLine.business_date,
            TransactionLine.hour,
            TransactionLine.store_id,
            Store.name,
            TransactionLine.item_id,
            Item.long_name,
        )
        .order_by(
            TransactionLine.business_date.asc(),
            TransactionLine.hour.asc(),
            TransactionLine.store_id.asc(),
            TransactionLine.item_id.asc(),
        )
        .limit(params.row_limit)
    )


# =============================================================================
# RAW LINES
# =============================================================================

def transaction_items_query(params: ReportParams) -> Select:
    """Raw check lines, newest first, capped at a small page"""
    return (
        select(
            TransactionLine.item_id,
            TransactionLine.check_number,
            TransactionLine.business_date,
            TransactionLine.price,
            TransactionLine.quantity,
            TransactionLine.record_type,
            TransactionLine.category_id,
            TransactionLine.order_mode_id,
            TransactionLine.store_id,
            TransactionLine.employee_id,
        )
        .where(and_(*_scope(TransactionLine.business_date, TransactionLine.store_id, params)))
        .order_by(
            TransactionLine.business_date.desc(),
            TransactionLine.check_number.desc(),
            TransactionLine.id.desc(),
        )
        .limit(params.row_limit)
    )


def void_transactions_query(params: ReportParams) -> Select:
    """Voided lines, newest first"""
    return (
        select(
            VoidLine.check_number.label("check_id"),
            VoidLine.item_id,
            VoidLine.price,
            VoidLine.business_date,
            VoidLine.hour,
            VoidLine.minute,
            VoidLine.void_reason_id,
            VoidLine.employee_id,
            VoidLine.manager_id,
            VoidLine.store_id,
        )
        .where(and_(*_scope(VoidLine.business_date, VoidLine.store_id, params)))
        .order_by(
            VoidLine.business_date.desc(),
            VoidLine.hour.desc(),
            VoidLine.minute.desc(),
            VoidLine.check_number.desc(),
            VoidLine.id.desc(),
        )
        .limit(params.row_limit)
    )


# =============================================================================
# CATEGORY SALES
# =============================================================================

def category_sales_query(params: ReportParams) -> Select:
    """Sales per category, largest first"""
    sales_amount = func.coalesce(func.sum(_line_amount()), 0).label("sales_amount")
    return (
        select(
            TransactionLine.category_id,
            Category.name.label("category_name"),
            sales_amount,
        )
        .select_from(TransactionLine)
        .outerjoin(Category, Category.category_id == TransactionLine.category_id)
        .where(and_(*_scope(TransactionLine.business_date, TransactionLine.store_id, params)))
        .group_by(TransactionLine.category_id, Category.name)
        .order_by(sales_amount.desc(), TransactionLine.category_id.asc())
        .limit(params.row_limit)
    )


# =============================================================================
# SALES SUMMARY
# =============================================================================

def _day_conditions(business_date: date, store_id: Optional[int]) -> List[ColumnElement]:
    conditions = [TransactionLine.business_date == business_date]
    if store_id is not None:
        conditions.append(TransactionLine.store_id == store_id)
    return conditions


def day_sales_query(business_date: date, store_id: Optional[int]) -> Select:
    """Total line amount for one business day"""
    return select(
        func.coalesce(func.sum(_line_amount()), 0).label("sales"),
    ).where(and_(*_day_conditions(business_date, store_id)))


def check_count_query(
    business_date: date,
    store_id: Optional[int],
    first_hour: Optional[int] = None,
    last_hour: Optional[int] = None,
) -> Select:
    """
    Distinct checks for one business day, optionally within an hour range.

    Check numbers repeat across stores, so a check is (store_id, check_number).
    """
    conditions = _day_conditions(business_date, store_id)
    if first_hour is not None:
        conditions.append(TransactionLine.hour >= first_hour)
    if last_hour is not None:
        conditions.append(TransactionLine.hour <= last_hour)

    checks = (
        select(TransactionLine.store_id, TransactionLine.check_number)
        .where(and_(*conditions))
        .distinct()
        .subquery()
    )
    return select(func.count().label("checks")).select_from(checks)


# =============================================================================
# MENU
# =============================================================================

def menu_item_count_query() -> Select:
    """Number of active menu items"""
    return select(func.count(distinct(Item.item_id)).label("item_count")).where(
        Item.is_active.is_(True)
    )
