"""
Report Query Parameters

Validation and normalization of the filter parameters shared by every
report endpoint:

- start_date / end_date: ISO calendar dates, inclusive
- date: single-day form used by the legacy and summary endpoints
- store_id: a store id, or absent for "all stores combined"
- item_id: an item id, or absent for "all items" (item reports only)

Each report kind has a default window, applied identically on first load
and on a filter reset, and a maximum lookback window. Ranges wider than the
maximum are narrowed from the start and flagged as truncated.
"""

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import structlog

from .errors import InvalidParameter

logger = structlog.get_logger(__name__)


class ReportKind(str, Enum):
    """Report endpoints"""
    STORE_SALES = "store-sales"
    SIMPLE_SALES = "simple-sales"
    ITEM_SALES = "item-sales"
    ITEM_SALES_BY_HOUR = "item-sales-by-hour"
    TRANSACTION_ITEMS = "transaction-items"
    VOID_TRANSACTIONS = "void-transactions"
    CATEGORY_SALES = "category-sales"
    SALES_SUMMARY = "sales-summary"
    STORES = "stores"
    MENU_STATS = "menu-stats"


@dataclass(frozen=True)
class ReportPolicy:
    """Per-kind window and size limits"""
    default_days: int
    max_days: int
    row_limit: Optional[int] = None
    accepts_item: bool = False
    single_date: bool = False


POLICIES: Dict[ReportKind, ReportPolicy] = {
    ReportKind.STORE_SALES: ReportPolicy(default_days=30, max_days=366, row_limit=500),
    ReportKind.SIMPLE_SALES: ReportPolicy(default_days=30, max_days=366, row_limit=500, single_date=True),
    ReportKind.ITEM_SALES: ReportPolicy(default_days=30, max_days=92, row_limit=500, accepts_item=True),
    ReportKind.ITEM_SALES_BY_HOUR: ReportPolicy(default_days=1, max_days=31, row_limit=1000, accepts_item=True),
    ReportKind.TRANSACTION_ITEMS: ReportPolicy(default_days=10, max_days=31, row_limit=100),
    ReportKind.VOID_TRANSACTIONS: ReportPolicy(default_days=30, max_days=92, row_limit=200),
    ReportKind.CATEGORY_SALES: ReportPolicy(default_days=30, max_days=366, row_limit=100),
    ReportKind.SALES_SUMMARY: ReportPolicy(default_days=1, max_days=1, single_date=True),
    ReportKind.STORES: ReportPolicy(default_days=30, max_days=366, row_limit=500),
    ReportKind.MENU_STATS: ReportPolicy(default_days=1, max_days=1),
}

# Values a browser client sends for an unselected filter
ABSENT_VALUES = frozenset({"", "null", "undefined", "none"})

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Window arithmetic and the previous-day comparison stay inside date.min..date.max
EARLIEST_DATE = date(1900, 1, 1)
LATEST_DATE = date(9998, 12, 31)


@dataclass(frozen=True)
class ReportParams:
    """Validated, normalized report scope"""
    kind: ReportKind
    start_date: date
    end_date: date
    store_id: Optional[int] = None
    item_id: Optional[int] = None
    truncated: bool = False
    requested_start: Optional[date] = field(default=None, compare=False)

    @property
    def policy(self) -> ReportPolicy:
        return POLICIES[self.kind]

    @property
    def row_limit(self) -> Optional[int]:
        return self.policy.row_limit

    @property
    def store_scope(self) -> str:
        """Store id as text, or 'all' when unscoped"""
        return "all" if self.store_id is None else str(self.store_id)

    def log_context(self) -> Dict[str, Any]:
        return {
            "report": self.kind.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "store_id": self.store_scope,
            "item_id": self.item_id,
            "truncated": self.truncated,
        }


def default_window(kind: ReportKind, today: Optional[date] = None) -> Tuple[date, date]:
    """
    Default [start, end] for a report kind: the last N days ending today.

    Used for both the initial load and a filter reset.
    """
    today = today or date.today()
    days = POLICIES[kind].default_days
    return today - timedelta(days=days - 1), today


def parse_date(field_name: str, value: Any) -> Optional[date]:
    """Parse an ISO YYYY-MM-DD value; absent values return None."""
    if value is None:
        return None
    if isinstance(value, date):
        parsed = value
    else:
        text = str(value).strip()
        if text.lower() in ABSENT_VALUES:
            return None
        # Calendar date only: a timestamp would make the day ambiguous across time zones
        if not DATE_PATTERN.match(text):
            raise InvalidParameter(field_name, f"{field_name} must be a date in YYYY-MM-DD format")
        try:
            parsed = date.fromisoformat(text)
        except ValueError:
            raise InvalidParameter(field_name, f"{field_name} must be a date in YYYY-MM-DD format")

    if not EARLIEST_DATE <= parsed <= LATEST_DATE:
        raise InvalidParameter(
            field_name,
            f"{field_name} must be between {EARLIEST_DATE.isoformat()} and {LATEST_DATE.isoformat()}",
        )
    return parsed


def parse_id(field_name: str, value: Any) -> Optional[int]:
    """
    Parse a store or item id.

    Absent, empty and null-like values mean "all", never id 0.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidParameter(field_name, f"{field_name} must be a non-negative integer")
    if isinstance(value, int):
        parsed = value
    else:
        text = str(value).strip()
        if text.lower() in ABSENT_VALUES:
            return None
        try:
            parsed = int(text)
        except ValueError:
            raise InvalidParameter(field_name, f"{field_name} must be a non-negative integer")
    if parsed < 0:
        raise InvalidParameter(field_name, f"{field_name} must be a non-negative integer")
    return parsed


def parse_report_params(
    kind: ReportKind,
    start_date: Any = None,
    end_date: Any = None,
    date_value: Any = None,
    store_id: Any = None,
    item_id: Any = None,
    today: Optional[date] = None,
) -> ReportParams:
    """
    Validate raw request parameters for a report kind.

    Raises:
        InvalidParameter: malformed dates or ids, or start after end
    """
    policy = POLICIES[kind]
    today = today or date.today()

    start = parse_date("start_date", start_date)
    end = parse_date("end_date", end_date)

    if policy.single_date:
        single = parse_date("date", date_value)
        if single is not None:
            start = end = single

    span = timedelta(days=policy.default_days - 1)
    if start is None and end is None:
        start, end = default_window(kind, today)
    elif start is None:
        start = end - span
    elif end is None:
        end = start + span

    if start > end:
        raise InvalidParameter("start_date", "start_date must not be later than end_date")

    store = parse_id("store_id", store_id)
    item = parse_id("item_id", item_id) if policy.accepts_item else None

    requested_start = start
    truncated = False
    if (end - start).days + 1 > policy.max_days:
        start = end - timedelta(days=policy.max_days - 1)
        truncated = True
        logger.info(
            "Date range narrowed to lookback window",
            report=kind.value,
            requested_start=requested_start.isoformat(),
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            max_days=policy.max_days,
        )

    return ReportParams(
        kind=kind,
        start_date=start,
        end_date=end,
        store_id=store,
        item_id=item,
        truncated=truncated,
        requested_start=requested_start,
    )
