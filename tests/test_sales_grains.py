"""Tests for sales item lines, ticket/daily marts and get_sales()."""

from datetime import datetime

import pandas as pd
import pytest

from colmado_core.exceptions import DataQualityError
from colmado_core.sales import get_sales
from colmado_core.sales.core import ITEM_LINE_COLUMNS, to_item_lines
from colmado_core.sales.marts import DAILY_COLUMNS, TICKET_COLUMNS, daily_revenue, to_tickets
from colmado_core.sales.records import SaleItem, SaleRecord


def _sales() -> list:
    def sale(when, *items):
        return SaleRecord(
            date=when,
            items=[SaleItem(description=d, amount=a, value=a, unit_price=a) for d, a in items],
            total=sum(a for _, a in items),
            payment_method="cash",
        )

    return [
        sale(datetime(2025, 1, 6, 8, 15), ("Pan Sobao", 25.0), ("Leche", 70.0)),  # Monday
        sale(datetime(2025, 1, 6, 19, 40), ("Cerveza Presidente", 150.0)),
        sale(datetime(2025, 1, 7, 12, 5), ("Arroz Selecto", 95.0), ("Pollo", 210.0)),  # Tuesday
    ]


def test_to_item_lines_has_categories() -> None:
    """Test that item lines carry one row per item with a category."""
    lines = to_item_lines(_sales())

    assert list(lines.columns) == ITEM_LINE_COLUMNS
    assert len(lines) == 5
    assert lines["category"].tolist() == ["bakery_dairy", "bakery_dairy", "alcohol", "staples", "protein"]
    assert lines["sale_key"].tolist() == [0, 0, 1, 2, 2]


def test_to_tickets_calendar_columns() -> None:
    """Test ticket mart helper columns (Monday=0)."""
    tickets = to_tickets(_sales())

    assert list(tickets.columns) == TICKET_COLUMNS
    assert tickets["day_of_week"].tolist() == [0, 0, 1]
    assert tickets["hour"].tolist() == [8, 19, 12]
    assert tickets["item_count"].tolist() == [2, 1, 2]
    assert tickets["operating_date"].iloc[0] == pd.Timestamp("2025-01-06")


def test_daily_revenue_aggregates_by_date() -> None:
    """Test daily mart revenue and ticket counts."""
    daily = daily_revenue(to_tickets(_sales()))

    assert list(daily.columns) == DAILY_COLUMNS
    assert daily["revenue"].tolist() == [245.0, 305.0]
    assert daily["num_tickets"].tolist() == [2, 1]


def test_daily_revenue_missing_columns() -> None:
    """Test that daily_revenue validates its input."""
    with pytest.raises(DataQualityError):
        daily_revenue(pd.DataFrame({"total": [1.0]}))


def test_empty_marts_keep_columns() -> None:
    """Test that empty inputs produce empty frames with the right columns."""
    assert list(to_tickets([]).columns) == TICKET_COLUMNS
    assert list(to_item_lines([]).columns) == ITEM_LINE_COLUMNS
    assert daily_revenue(to_tickets([])).empty


def test_get_sales_date_bounds_inclusive() -> None:
    """Test that start and end dates are inclusive."""
    sales = _sales()

    assert len(get_sales(sales, "2025-01-06", "2025-01-06")) == 2
    assert len(get_sales(sales, "2025-01-07")) == 1
    assert len(get_sales(sales, end_date="2025-01-06", grain="item")) == 3
    assert len(get_sales(sales, grain="daily")) == 2
    assert get_sales(None).empty


def test_get_sales_invalid_grain() -> None:
    """Test that an unknown grain raises ValueError."""
    with pytest.raises(ValueError):
        get_sales([], grain="group")
