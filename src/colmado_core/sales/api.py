"""Public API for loading sales at a chosen grain."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

from colmado_core.sales.core import to_item_lines
from colmado_core.sales.marts import daily_revenue, to_tickets
from colmado_core.sales.store import SalesSource, load_sales

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime]

GRAINS = ("ticket", "item", "daily")


def get_sales(
    source: SalesSource,
    start_date: Optional[DateLike] = None,
    end_date: Optional[DateLike] = None,
    grain: str = "ticket",
) -> pd.DataFrame:
    """Load sales as a DataFrame at the requested grain.

    Args:
        source: SalesStore, sequence of SaleRecord, or None.
        start_date: Inclusive start date (YYYY-MM-DD or date). None means no lower bound.
        end_date: Inclusive end date (YYYY-MM-DD or date). None means no upper bound.
        grain: "ticket" (one row per sale), "item" (one row per line item) or
            "daily" (one row per operating date).

    Returns:
        DataFrame at the requested grain.

    Raises:
        ValueError: If grain is not one of GRAINS.
        StoreError: If the store cannot be read.

    Examples:
        >>> store = SalesStore.from_paths(StorePaths.from_root("data"))
        >>> tickets = get_sales(store, "2025-01-01", "2025-01-31")
        >>> daily = get_sales(store, "2025-01-01", "2025-01-31", grain="daily")
    """
    if grain not in GRAINS:
        raise ValueError(f"Invalid grain '{grain}'. Must be one of {GRAINS}.")

    sales = load_sales(source)

    if start_date is not None:
        start = pd.Timestamp(start_date).normalize()
        sales = [s for s in sales if pd.Timestamp(s.date) >= start]
    if end_date is not None:
        end = pd.Timestamp(end_date).normalize() + pd.Timedelta(days=1)
        sales = [s for s in sales if pd.Timestamp(s.date) < end]

    logger.info("Loaded %d sales for %s to %s (grain=%s)", len(sales), start_date, end_date, grain)

    if grain == "item":
        return to_item_lines(sales)
    tickets = to_tickets(sales)
    if grain == "daily":
        return daily_revenue(tickets)
    return tickets
