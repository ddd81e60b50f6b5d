"""Core fact: sales at item-line grain.

One row per line item on a sale. This is the atomic grain used for
category statistics.
"""

from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from colmado_core.sales.categories import categorize_product
from colmado_core.sales.records import SaleRecord

logger = logging.getLogger(__name__)

ITEM_LINE_COLUMNS = [
    "sale_key",
    "sale_id",
    "date",
    "line_no",
    "description",
    "quantity",
    "unit_price",
    "value",
    "itbis",
    "amount",
    "category",
]


def to_item_lines(sales: Sequence[SaleRecord]) -> pd.DataFrame:
    """Flatten sales into the item-line fact.

    Args:
        sales: Sale records. ``sale_key`` is the position of the sale in this
            sequence and joins with the ticket mart.

    Returns:
        DataFrame with ITEM_LINE_COLUMNS, one row per item.
    """
    rows = []
    for sale_key, sale in enumerate(sales):
        for line_no, item in enumerate(sale.items):
            rows.append(
                {
                    "sale_key": sale_key,
                    "sale_id": sale.id,
                    "date": sale.date,
                    "line_no": line_no,
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "value": item.value,
                    "itbis": item.itbis,
                    "amount": item.amount,
                    "category": categorize_product(item.description),
                }
            )

    if not rows:
        return pd.DataFrame(columns=ITEM_LINE_COLUMNS)

    df = pd.DataFrame(rows, columns=ITEM_LINE_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    logger.debug("Built %d item lines from %d sales", len(df), len(sales))
    return df
