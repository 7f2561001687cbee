"""
Response Normalization

Turns result rows into report records and wraps them in the uniform envelope:

    {"success": true, "count": 3, "data": [...], "truncated": true}

Rows whose dimension join found nothing keep a synthesized label so totals
and counts stay complete.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel

from .schemas import (
    CategorySalesRecord,
    HourlyItemSaleRecord,
    ItemSaleRecord,
    SalesPeriodRecord,
    SimpleSalesRecord,
    StoreDescriptor,
    TransactionLineRecord,
    VoidRecord,
)

# Category chart palette, assigned by rank
CATEGORY_COLORS = [
    "#3f51b5", "#2196f3", "#00bcd4", "#4caf50", "#ff9800",
    "#f44336", "#9c27b0", "#673ab7", "#009688", "#ffc107",
]


def round_half_up(value: Union[float, Decimal, int], digits: int = 0) -> float:
    """Round with halves away from zero, unlike round()'s banker's rounding."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def to_money(value: Any) -> float:
    """Decimal or float amount as a float with cents precision"""
    if value is None:
        return 0.0
    return round_half_up(value, 2)


def store_label(store_id: int, name: Optional[str]) -> str:
    return name if name else f"Store {store_id}"


def item_label(item_id: int, name: Optional[str]) -> str:
    return name if name else f"Item #{item_id}"


def category_label(category_id: Optional[int], name: Optional[str]) -> str:
    if name:
        return name
    if category_id is None:
        return "Uncategorized"
    return f"Category {category_id}"


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def percentage_of_total(values: Sequence[float]) -> List[int]:
    """
    Share of each value in the total, each rounded to a whole percent.

    Independent rounding means the shares sum to 100 within n-1 points.
    A zero or negative total yields all zeros.
    """
    total = sum(values)
    if total <= 0:
        return [0 for _ in values]
    return [int(round_half_up(value / total * 100)) for value in values]


# =============================================================================
# ROW CONVERTERS
# =============================================================================

def to_sales_period(row: Any) -> SalesPeriodRecord:
    return SalesPeriodRecord(
        store_id=row.store_id,
        store_name=store_label(row.store_id, row.store_name),
        business_date=row.business_date,
        net_sales=to_money(row.net_sales),
        gross_sales=to_money(row.gross_sales),
        check_count=row.check_count or 0,
        guest_count=row.guest_count or 0,
    )


def to_store_descriptor(row: Any) -> StoreDescriptor:
    return StoreDescriptor(
        store_id=row.store_id,
        store_name=store_label(row.store_id, row.store_name),
        latest_business_date=row.latest_business_date,
        latest_net_sales=to_money(row.latest_net_sales),
    )


def to_simple_sales(row: Any) -> SimpleSalesRecord:
    return SimpleSalesRecord(
        store_id=row.store_id,
        business_date=row.business_date,
        net_sales=to_money(row.net_sales),
        gross_sales=to_money(row.gross_sales),
        check_count=row.check_count or 0,
        guest_count=row.guest_count or 0,
    )


def to_item_sale(row: Any) -> ItemSaleRecord:
    return ItemSaleRecord(
        item_id=row.item_id,
        item_name=item_label(row.item_id, row.item_name),
        store_id=row.store_id,
        store_name=store_label(row.store_id, row.store_name),
        business_date=row.business_date,
        quantity_sold=int(row.quantity_sold or 0),
        sales_amount=to_money(row.sales_amount),
    )


def to_hourly_item_sale(row: Any) -> HourlyItemSaleRecord:
    hour = int(row.hour)
    return HourlyItemSaleRecord(
        item_id=row.item_id,
        item_name=item_label(row.item_id, row.item_name),
        store_id=row.store_id,
        store_name=store_label(row.store_id, row.store_name),
        business_date=row.business_date,
        hour=hour,
        hour_label=hour_label(hour),
        quantity_sold=int(row.quantity_sold or 0),
        sales_amount=to_money(row.sales_amount),
    )


def to_transaction_line(row: Any) -> TransactionLineRecord:
    return TransactionLineRecord(
        item_id=row.item_id,
        check_number=row.check_number,
        business_date=row.business_date,
        price=to_money(row.price),
        quantity=row.quantity or 0,
        record_type=row.record_type or 0,
        category_id=row.category_id,
        order_mode_id=row.order_mode_id,
        store_id=row.store_id,
        employee_id=row.employee_id,
    )


def to_void(row: Any) -> VoidRecord:
    return VoidRecord(
        check_id=row.check_id,
        item_id=row.item_id,
        price=to_money(row.price),
        business_date=row.business_date,
        hour=row.hour,
        minute=row.minute,
        void_reason_id=row.void_reason_id,
        employee_id=row.employee_id,
        manager_id=row.manager_id,
        store_id=row.store_id,
    )


def to_category_sales(rows: Sequence[Any]) -> List[CategorySalesRecord]:
    """Category rows with percentage of total and a rank color"""
    amounts = [to_money(row.sales_amount) for row in rows]
    percentages = percentage_of_total(amounts)
    return [
        CategorySalesRecord(
            category_id=row.category_id,
            category_name=category_label(row.category_id, row.category_name),
            sales_amount=amount,
            percentage=percentage,
            color=CATEGORY_COLORS[index % len(CATEGORY_COLORS)],
        )
        for index, (row, amount, percentage) in enumerate(zip(rows, amounts, percentages))
    ]


# =============================================================================
# ENVELOPE
# =============================================================================

def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return value


def envelope(
    data: Union[Iterable[Any], BaseModel, Dict[str, Any]],
    truncated: bool = False,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """Successful response; `count` accompanies list data."""
    body: Dict[str, Any] = {"success": True}
    if isinstance(data, (BaseModel, dict)):
        body["data"] = _dump(data)
    else:
        items = [_dump(item) for item in data]
        body["count"] = len(items)
        body["data"] = items
    if message:
        body["message"] = message
    if truncated:
        body["truncated"] = True
    return body


def error_envelope(message: str, error: str, **extra: Any) -> Dict[str, Any]:
    """Failure response; always paired with a non-2xx status."""
    body: Dict[str, Any] = {"success": False, "message": message, "error": error}
    body.update(extra)
    return body
