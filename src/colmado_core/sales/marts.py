"""Sales marts (aggregated tables).

- ticket: one row per sale with calendar helper columns
- daily: one row per operating date with revenue and ticket counts

Day of week follows pandas/Python: Monday=0 ... Sunday=6.
"""

from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from colmado_core.exceptions import DataQualityError
from colmado_core.sales.records import SaleRecord

logger = logging.getLogger(__name__)

TICKET_COLUMNS = [
    "sale_key",
    "sale_id",
    "date",
    "operating_date",
    "hour",
    "day_of_week",
    "day_of_month",
    "subtotal",
    "discount",
    "itbis_total",
    "total",
    "items_total",
    "item_count",
    "payment_method",
    "cashier_id",
    "shift_id",
]

DAILY_COLUMNS = ["operating_date", "day_of_week", "day_of_month", "revenue", "num_tickets"]


def to_tickets(sales: Sequence[SaleRecord]) -> pd.DataFrame:
    """Build the ticket mart (one row per sale).

    Args:
        sales: Sale records.

    Returns:
        DataFrame with TICKET_COLUMNS. ``operating_date`` is a datetime64 at
        midnight so it groups cleanly.
    """
    rows = [
        {
            "sale_key": sale_key,
            "sale_id": sale.id,
            "date": sale.date,
            "subtotal": sale.subtotal,
            "discount": sale.discount,
            "itbis_total": sale.itbis_total,
            "total": sale.total,
            "items_total": sale.items_total,
            "item_count": len(sale.items),
            "payment_method": sale.payment_method,
            "cashier_id": sale.cashier_id,
            "shift_id": sale.shift_id,
        }
        for sale_key, sale in enumerate(sales)
    ]

    if not rows:
        return pd.DataFrame(columns=TICKET_COLUMNS)

    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"])
    df["operating_date"] = df["date"].dt.normalize()
    df["hour"] = df["date"].dt.hour
    df["day_of_week"] = df["date"].dt.dayofweek
    df["day_of_month"] = df["date"].dt.day
    return df[TICKET_COLUMNS]


def daily_revenue(tickets: pd.DataFrame) -> pd.DataFrame:
    """Aggregate the ticket mart to one row per operating date.

    Only dates with at least one sale appear; closed days are not filled.

    Args:
        tickets: Output of to_tickets().

    Returns:
        DataFrame with DAILY_COLUMNS sorted by date.

    Raises:
        DataQualityError: If required columns are missing.
    """
    required = ["operating_date", "total"]
    missing = [col for col in required if col not in tickets.columns]
    if missing:
        raise DataQualityError(f"Missing required columns in tickets: {missing}")

    if tickets.empty:
        return pd.DataFrame(columns=DAILY_COLUMNS)

    daily = (
        tickets.groupby("operating_date")
        .agg(revenue=("total", "sum"), num_tickets=("total", "size"))
        .reset_index()
        .sort_values("operating_date")
    )
    daily["day_of_week"] = daily["operating_date"].dt.dayofweek
    daily["day_of_month"] = daily["operating_date"].dt.day
    return daily[DAILY_COLUMNS].reset_index(drop=True)
