"""
Report Record Schemas

Response shapes for each report kind. Field names are stable: the dashboard
client derives its charts from them without renaming.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SalesPeriodRecord(BaseModel):
    """Daily totals for one store"""
    store_id: int
    store_name: str
    business_date: date
    net_sales: float
    gross_sales: float
    check_count: int
    guest_count: int


class SimpleSalesRecord(BaseModel):
    """Daily totals without the store dimension (legacy)"""
    store_id: int
    business_date: date
    net_sales: float
    gross_sales: float
    check_count: int
    guest_count: int


class ItemSaleRecord(BaseModel):
    """Item sales per store per day"""
    item_id: int
    item_name: str
    store_id: int
    store_name: str
    business_date: date
    quantity_sold: int
    sales_amount: float


class HourlyItemSaleRecord(ItemSaleRecord):
    """Item sales per store per day per hour"""
    hour: int
    hour_label: str


class TransactionLineRecord(BaseModel):
    """One line item of a check"""
    item_id: int
    check_number: int
    business_date: date
    price: float
    quantity: int
    record_type: int
    category_id: Optional[int]
    order_mode_id: Optional[int]
    store_id: int
    employee_id: Optional[int]


class VoidRecord(BaseModel):
    """A voided line item"""
    check_id: int
    item_id: int
    price: float
    business_date: date
    hour: int
    minute: int
    void_reason_id: Optional[int]
    employee_id: Optional[int]
    manager_id: Optional[int]
    store_id: int


class CategorySalesRecord(BaseModel):
    """Sales for one category with its share of the total"""
    category_id: Optional[int]
    category_name: str
    sales_amount: float
    percentage: int
    color: str


class StoreDescriptor(BaseModel):
    """A store seen in the sales listing, with its latest snapshot"""
    store_id: int
    store_name: str
    latest_business_date: Optional[date] = None
    latest_net_sales: Optional[float] = None


class SalesSummary(BaseModel):
    """
    Target day versus previous day.

    Serialized in camelCase (todaySales, salesTrend, ...) for dashboard
    compatibility.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    target_date: date = Field(alias="date")
    store_id: Optional[int]
    today_sales: float
    previous_sales: float
    sales_trend: float
    check_count: int
    active_orders: int
    orders_trend: float
    customers: int
    customers_trend: float


class MenuStats(BaseModel):
    """Menu size"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    menu_item_count: int
