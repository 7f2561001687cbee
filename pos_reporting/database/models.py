"""
Database Models - Point-of-Sale Store

Read-only mappings of the upstream point-of-sale schema. The upstream system
is the system of record; this service never writes to these tables.

Fact Tables:
- SalesTotal: one row per store per business day
- TransactionLine: one row per line item per check
- VoidLine: voided line items with reason codes

Dimension Tables:
- Store, Item, Category

Fact rows are not constrained to existing dimension rows. Report queries
outer-join the dimensions and label missing members explicitly.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class Store(Base):
    """Restaurant location"""
    __tablename__ = "stores"

    store_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Category(Base):
    """Menu category (Chicken, Sides, Beverages, ...)"""
    __tablename__ = "categories"

    category_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Item(Base):
    """Menu item"""
    __tablename__ = "items"

    item_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    long_name: Mapped[str] = mapped_column(String(200), nullable=False)
    short_name: Mapped[Optional[str]] = mapped_column(String(50))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


# =============================================================================
# FACT TABLES
# =============================================================================

class SalesTotal(Base):
    """
    Daily sales totals per store.

    Written once per business day by the upstream system.
    """
    __tablename__ = "sales_totals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(Integer, nullable=False)
    business_date: Mapped[date] = mapped_column(Date, nullable=False)
    net_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    gross_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    check_count: Mapped[int] = mapped_column(Integer, default=0)
    guest_count: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index("idx_sales_totals_store_date", "store_id", "business_date"),
        Index("idx_sales_totals_date", "business_date"),
    )


class TransactionLine(Base):
    """
    Line item of a check.

    Lines sharing a check_number (per store and business day) form one order.
    Reversal record types carry negative price.
    """
    __tablename__ = "transaction_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(Integer, nullable=False)
    business_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_number: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    category_id: Mapped[Optional[int]] = mapped_column(Integer)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    record_type: Mapped[int] = mapped_column(Integer, default=0)
    order_mode_id: Mapped[Optional[int]] = mapped_column(Integer)
    employee_id: Mapped[Optional[int]] = mapped_column(Integer)
    hour: Mapped[int] = mapped_column(Integer, default=0)  # 0-23
    minute: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index("idx_transaction_lines_store_date", "store_id", "business_date"),
        Index("idx_transaction_lines_date_check", "business_date", "check_number"),
        Index("idx_transaction_lines_item", "item_id"),
    )


class VoidLine(Base):
    """Voided line item"""
    __tablename__ = "void_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(Integer, nullable=False)
    business_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_number: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    hour: Mapped[int] = mapped_column(Integer, default=0)
    minute: Mapped[int] = mapped_column(Integer, default=0)
    void_reason_id: Mapped[Optional[int]] = mapped_column(Integer)
    employee_id: Mapped[Optional[int]] = mapped_column(Integer)
    manager_id: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        Index("idx_void_lines_store_date", "store_id", "business_date"),
    )
