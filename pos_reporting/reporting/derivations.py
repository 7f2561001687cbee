"""
Dashboard Derivations

Display-ready aggregates computed from report records on the consumer side:
- Chart series bucketed by hour, weekday, day of month or month
- First-half versus second-half trends over a filtered range
- Period totals and averages
- Free-text store search
- Store list from a sales listing
- Popular items and check summaries

The service returns complete, correctly scoped rows; everything here is a
pure function of those rows. Records may be pydantic models or the JSON
dicts found in an envelope's `data`.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

import polars as pl
from pydantic import BaseModel

from .normalizers import percentage_of_total, round_half_up

TIME_RANGES = ("day", "week", "month", "year")

# Heuristic placeholder until items carry a real category: first match wins
CATEGORY_KEYWORDS = [
    ("Combo", ("combo",)),
    ("Chicken", ("chicken",)),
    ("Sandwich", ("sandwich",)),
    ("Salad", ("salad",)),
    ("Beverage", ("drink", "soda", "pepsi")),
    ("Side", ("fries", "side")),
    ("Dessert", ("dessert", "cake")),
]
DEFAULT_CATEGORY = "Main Course"


def _rows(records: Iterable[Any]) -> List[Dict[str, Any]]:
    return [
        record.model_dump(mode="json") if isinstance(record, BaseModel) else dict(record)
        for record in records
    ]


def _frame(records: Iterable[Any]) -> pl.DataFrame:
    """Records as a DataFrame with business_date parsed to pl.Date"""
    df = pl.DataFrame(_rows(records), infer_schema_length=None)
    if "business_date" in df.columns:
        df = df.with_columns(
            pl.col("business_date").cast(pl.Utf8).str.slice(0, 10).str.to_date("%Y-%m-%d")
        )
    return df


def _percent_change(first: float, second: float) -> float:
    if first <= 0:
        return 0.0
    return round_half_up((second - first) / first * 100, 1)


def bucket_sales_series(
    records: Sequence[Any],
    time_range: str,
    sales_field: str = "net_sales",
) -> List[Dict[str, Any]]:
    """
    Sum sales, orders and customers into chart buckets.

    Buckets: day → "HH:00" (from `hour`, 0 for daily rows), week → "Mon",
    month → day of month "1".."31", year → "Jan". Buckets appear in the
    order first reached chronologically.
    """
    if time_range not in TIME_RANGES:
        raise ValueError(f"time_range must be one of: {TIME_RANGES}")
    if not records:
        return []

    df = _frame(records)
    if "hour" not in df.columns:
        df = df.with_columns(pl.lit(0).alias("hour"))

    date_col = pl.col("business_date")
    bucket = {
        "day": pl.col("hour").cast(pl.Utf8).str.zfill(2) + pl.lit(":00"),
        "week": date_col.dt.strftime("%a"),
        "month": date_col.dt.day().cast(pl.Utf8),
        "year": date_col.dt.strftime("%b"),
    }[time_range]

    series = (
        df.sort(["business_date", "hour"])
        .with_columns(bucket.alias("name"))
        .group_by("name", maintain_order=True)
        .agg(
            pl.col(sales_field).sum().alias("sales"),
            pl.col("check_count").sum().alias("orders"),
            pl.col("guest_count").sum().alias("customers"),
        )
    )
    return [
        {
            "name": row["name"],
            "sales": round_half_up(row["sales"], 2),
            "orders": int(row["orders"]),
            "customers": int(row["customers"]),
        }
        for row in series.iter_rows(named=True)
    ]


def half_period_trends(
    records: Sequence[Any],
    sales_field: str = "net_sales",
) -> Dict[str, float]:
    """
    Percent change from the first half of a date-sorted range to the second.

    Fewer than two records, or a non-positive first half, give 0.
    """
    trends = {"sales_trend": 0.0, "orders_trend": 0.0, "customers_trend": 0.0}
    if len(records) < 2:
        return trends

    df = _frame(records).sort("business_date", maintain_order=True)
    mid = df.height // 2
    first, second = df.head(mid), df.slice(mid)

    for key, column in (
        ("sales_trend", sales_field),
        ("orders_trend", "check_count"),
        ("customers_trend", "guest_count"),
    ):
        trends[key] = _percent_change(float(first[column].sum()), float(second[column].sum()))
    return trends


def period_totals(records: Sequence[Any], sales_field: str = "net_sales") -> Dict[str, float]:
    """Totals and per-day / per-order averages over a listing"""
    rows = _rows(records)
    total_sales = sum(row[sales_field] or 0 for row in rows)
    total_orders = sum(row["check_count"] or 0 for row in rows)
    total_customers = sum(row["guest_count"] or 0 for row in rows)
    return {
        "total_sales": round_half_up(total_sales, 2),
        "total_orders": total_orders,
        "total_customers": total_customers,
        "avg_daily_sales": round_half_up(total_sales / max(len(rows), 1), 2),
        "avg_order_value": round_half_up(total_sales / max(total_orders, 1), 2),
        "avg_customers_per_day": round_half_up(total_customers / max(len(rows), 1), 1),
    }


def filter_by_search(records: Sequence[Any], term: Optional[str]) -> List[Dict[str, Any]]:
    """Case-insensitive match of the term in store_name or store_id; blank terms match everything."""
    rows = _rows(records)
    if not term or not term.strip():
        return rows
    needle = term.strip().lower()
    return [
        row for row in rows
        if needle in (row.get("store_name") or "").lower() or needle in str(row.get("store_id", ""))
    ]


def derive_stores(records: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Store descriptors from a sales listing.

    The first record seen per store_id supplies the name and snapshot, so a
    listing ordered newest-first yields each store's latest day.
    """
    stores: Dict[int, Dict[str, Any]] = {}
    for row in _rows(records):
        store_id = row["store_id"]
        if store_id in stores:
            continue
        stores[store_id] = {
            "store_id": store_id,
            "store_name": row.get("store_name") or f"Store {store_id}",
            "latest_business_date": row.get("business_date"),
            "latest_net_sales": row.get("net_sales"),
        }
    return list(stores.values())


def guess_category(item_name: str) -> str:
    """Keyword guess of an item's category from its name"""
    lowered = (item_name or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def top_items(records: Sequence[Any], limit: int = 10) -> List[Dict[str, Any]]:
    """
    Best-selling items across stores and days.

    Popularity is a 0-100 score by rank; price is the average unit price.
    """
    if not records:
        return []

    ranked = (
        _frame(records)
        .group_by("item_id", maintain_order=True)
        .agg(
            pl.col("item_name").first(),
            pl.col("sales_amount").sum(),
            pl.col("quantity_sold").sum(),
        )
        .sort(["sales_amount", "item_id"], descending=[True, False])
        .head(limit)
    )

    count = ranked.height
    items = []
    for index, row in enumerate(ranked.iter_rows(named=True)):
        quantity = row["quantity_sold"] or 0
        items.append({
            "id": str(row["item_id"]),
            "name": row["item_name"],
            "category": guess_category(row["item_name"]),
            "popularity": int(round_half_up(100 - index * (100 / count))),
            "sales": int(quantity),
            "price": round_half_up(row["sales_amount"] / quantity, 2) if quantity else 0.0,
        })
    return items


def category_breakdown(records: Sequence[Any], limit: int = 5) -> List[Dict[str, Any]]:
    """Item sales grouped by guessed category, top categories with their share"""
    totals: Dict[str, float] = {}
    for row in _rows(records):
        category = guess_category(row["item_name"])
        totals[category] = totals.get(category, 0.0) + (row["sales_amount"] or 0)

    ordered = sorted(totals.items(), key=lambda pair: pair[1], reverse=True)
    shares = percentage_of_total([value for _, value in ordered])
    return [
        {"name": name, "value": round_half_up(value, 2), "percentage": share}
        for (name, value), share in list(zip(ordered, shares))[:limit]
    ]


def summarize_checks(lines: Sequence[Any], limit: int = 5) -> List[Dict[str, Any]]:
    """
    Group transaction lines into checks, most recent business day first.

    A check is identified by (store_id, business_date, check_number).
    """
    if not lines:
        return []

    checks = (
        _frame(lines)
        .with_columns((pl.col("price") * pl.col("quantity")).alias("amount"))
        .group_by(["store_id", "business_date", "check_number"], maintain_order=True)
        .agg(
            pl.col("quantity").sum().alias("items"),
            pl.col("amount").sum().alias("total"),
            pl.col("employee_id").first(),
        )
        .sort(["business_date", "check_number"], descending=[True, True])
        .head(limit)
    )
    return [
        {
            "check_number": row["check_number"],
            "store_id": row["store_id"],
            "business_date": row["business_date"].isoformat(),
            "items": int(row["items"]),
            "total": round_half_up(row["total"], 2),
            "employee_id": row["employee_id"],
        }
        for row in checks.iter_rows(named=True)
    ]
