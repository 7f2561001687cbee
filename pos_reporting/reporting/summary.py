"""
Sales Summary

Target day against the previous day: sales, active orders and an estimated
customer count, each with a trend percentage.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from .normalizers import round_half_up

TREND_FLOOR = -99.0
TREND_CEILING = 999.0

# Hours counted as "active" ending at the reference hour
ACTIVE_WINDOW_HOURS = 2


def compute_trend(current: float, previous: float) -> float:
    """
    Percent change from previous to current.

    Zero when either side is non-positive, so a missing day does not read as
    a -100% collapse. Clamped to [-99, 999] and rounded to one decimal.
    """
    if previous is None or current is None or previous <= 0 or current <= 0:
        return 0.0
    change = (current - previous) / previous * 100
    change = max(TREND_FLOOR, min(TREND_CEILING, change))
    return round_half_up(change, 1)


def estimate_customers(check_count: int, customers_per_check: float = 1.5) -> int:
    """
    Estimated customers for a number of checks.

    A fixed multiplier heuristic, not a guest count; replace it once a real
    guest dimension is available for check-level data.
    """
    return int(round_half_up(check_count * customers_per_check))


def reference_hour(target_date: date, now: Optional[datetime] = None) -> int:
    """Current hour for today, end of day for any other date."""
    now = now or datetime.now()
    return now.hour if target_date == now.date() else 23


def active_windows(ref_hour: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Hour ranges (inclusive) for current and previous active-order windows.

    Ranges starting before midnight are cut at hour 0.
    """
    current = (ref_hour - ACTIVE_WINDOW_HOURS + 1, ref_hour)
    previous = (current[0] - ACTIVE_WINDOW_HOURS, current[0] - 1)
    return (
        (max(0, current[0]), current[1]),
        (max(0, previous[0]), previous[1]),
    )


def previous_day(target_date: date) -> date:
    return target_date - timedelta(days=1)
