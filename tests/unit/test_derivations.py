"""
Unit Tests - Dashboard Derivations
"""
import pytest

from pos_reporting.reporting.derivations import (
    bucket_sales_series,
    category_breakdown,
    derive_stores,
    filter_by_search,
    guess_category,
    half_period_trends,
    period_totals,
    summarize_checks,
    top_items,
)


@pytest.fixture
def sales_rows():
    """Daily sales listing, oldest first"""
    return [
        {"store_id": 1, "store_name": "Downtown", "business_date": "2024-03-11",
         "net_sales": 100.0, "gross_sales": 110.0, "check_count": 10, "guest_count": 12},
        {"store_id": 2, "store_name": "Airport", "business_date": "2024-03-11",
         "net_sales": 50.0, "gross_sales": 55.0, "check_count": 5, "guest_count": 6},
        {"store_id": 1, "store_name": "Downtown", "business_date": "2024-03-12",
         "net_sales": 200.0, "gross_sales": 220.0, "check_count": 20, "guest_count": 24},
        {"store_id": 2, "store_name": "Airport", "business_date": "2024-03-12",
         "net_sales": 100.0, "gross_sales": 110.0, "check_count": 10, "guest_count": 12},
    ]


@pytest.fixture
def item_rows():
    return [
        {"item_id": 100, "item_name": "Chicken Sandwich", "store_id": 1, "store_name": "Downtown",
         "business_date": "2024-03-12", "quantity_sold": 10, "sales_amount": 89.90},
        {"item_id": 101, "item_name": "Large Soda", "store_id": 1, "store_name": "Downtown",
         "business_date": "2024-03-12", "quantity_sold": 20, "sales_amount": 50.00},
        {"item_id": 100, "item_name": "Chicken Sandwich", "store_id": 2, "store_name": "Airport",
         "business_date": "2024-03-12", "quantity_sold": 5, "sales_amount": 44.95},
        {"item_id": 102, "item_name": "Fries", "store_id": 2, "store_name": "Airport",
         "business_date": "2024-03-12", "quantity_sold": 4, "sales_amount": 10.00},
    ]


class TestBucketSalesSeries:
    """Tests for chart buckets"""

    def test_week_buckets_by_weekday(self, sales_rows):
        series = bucket_sales_series(sales_rows, "week")

        # 2024-03-11 is a Monday
        assert [point["name"] for point in series] == ["Mon", "Tue"]
        assert series[0] == {"name": "Mon", "sales": 150.0, "orders": 15, "customers": 18}
        assert series[1]["sales"] == 300.0

    def test_month_buckets_by_day(self, sales_rows):
        series = bucket_sales_series(sales_rows, "month")

        assert [point["name"] for point in series] == ["11", "12"]

    def test_year_buckets_by_month(self, sales_rows):
        series = bucket_sales_series(sales_rows, "year")

        assert series == [{"name": "Mar", "sales": 450.0, "orders": 45, "customers": 54}]

    def test_day_buckets_by_hour(self):
        rows = [
            {"business_date": "2024-03-12", "hour": 14, "net_sales": 5.0, "check_count": 1, "guest_count": 1},
            {"business_date": "2024-03-12", "hour": 9, "net_sales": 3.0, "check_count": 1, "guest_count": 2},
        ]

        series = bucket_sales_series(rows, "day")

        assert [point["name"] for point in series] == ["09:00", "14:00"]

    def test_empty_records(self):
        assert bucket_sales_series([], "week") == []

    def test_unknown_range(self, sales_rows):
        with pytest.raises(ValueError):
            bucket_sales_series(sales_rows, "quarter")


class TestHalfPeriodTrends:
    """Tests for first-half versus second-half trends"""

    def test_growth(self, sales_rows):
        trends = half_period_trends(sales_rows)

        assert trends["sales_trend"] == 100.0
        assert trends["orders_trend"] == 100.0
        assert trends["customers_trend"] == 100.0

    def test_single_record(self, sales_rows):
        assert half_period_trends(sales_rows[:1]) == {
            "sales_trend": 0.0,
            "orders_trend": 0.0,
            "customers_trend": 0.0,
        }

    def test_zero_first_half(self, sales_rows):
        rows = [dict(row, net_sales=0.0) if row["business_date"] == "2024-03-11" else row for row in sales_rows]

        assert half_period_trends(rows)["sales_trend"] == 0.0


class TestListingHelpers:
    """Tests for totals, search and store derivation"""

    def test_period_totals(self, sales_rows):
        totals = period_totals(sales_rows)

        assert totals["total_sales"] == 450.0
        assert totals["total_orders"] == 45
        assert totals["avg_order_value"] == 10.0

    def test_search_is_case_insensitive(self, sales_rows):
        rows = filter_by_search(sales_rows, "AIR")

        assert {row["store_id"] for row in rows} == {2}

    def test_search_matches_store_id(self, sales_rows):
        rows = filter_by_search(sales_rows, "1")

        assert {row["store_id"] for row in rows} == {1}

    def test_blank_search_matches_all(self, sales_rows):
        assert len(filter_by_search(sales_rows, "  ")) == 4

    def test_derive_stores_first_seen(self, sales_rows):
        newest_first = list(reversed(sales_rows))

        stores = derive_stores(newest_first)

        assert [store["store_id"] for store in stores] == [2, 1]
        assert stores[1]["latest_business_date"] == "2024-03-12"
        assert stores[1]["latest_net_sales"] == 200.0


class TestItemHelpers:
    """Tests for item and check summaries"""

    @pytest.mark.parametrize("name,category", [
        ("Spicy Chicken Combo", "Combo"),
        ("Chicken Tenders", "Chicken"),
        ("Large Pepsi", "Beverage"),
        ("Cajun Fries", "Side"),
        ("Biscuit", "Main Course"),
    ])
    def test_guess_category(self, name, category):
        assert guess_category(name) == category

    def test_top_items(self, item_rows):
        items = top_items(item_rows, limit=2)

        assert [item["id"] for item in items] == ["100", "101"]
        assert items[0]["sales"] == 15
        assert items[0]["price"] == 8.99
        assert items[0]["popularity"] == 100
        assert items[1]["popularity"] == 50

    def test_category_breakdown(self, item_rows):
        breakdown = category_breakdown(item_rows)

        assert breakdown[0]["name"] == "Chicken"
        assert breakdown[0]["value"] == 134.85
        assert sum(entry["percentage"] for entry in breakdown) == 100

    def test_summarize_checks(self):
        lines = [
            {"store_id": 1, "business_date": "2024-03-12", "check_number": 5, "item_id": 100,
             "price": 8.99, "quantity": 2, "employee_id": 7},
            {"store_id": 1, "business_date": "2024-03-12", "check_number": 5, "item_id": 101,
             "price": 2.50, "quantity": 1, "employee_id": 7},
            {"store_id": 1, "business_date": "2024-03-12", "check_number": 6, "item_id": 101,
             "price": 2.50, "quantity": 1, "employee_id": 8},
        ]

        checks = summarize_checks(lines)

        assert [check["check_number"] for check in checks] == [6, 5]
        assert checks[1]["items"] == 3
        assert checks[1]["total"] == 20.48
