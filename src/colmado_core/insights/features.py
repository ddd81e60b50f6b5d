"""Transaction feature extraction.

Maps each sale into temporal, basket-composition and behavioural features.
A batch of features is a DataFrame with one row per sale (FEATURE_COLUMNS);
clustering and AI analysis operate on that frame.

Day of week follows Python: Monday=0 ... Sunday=6.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

import pandas as pd

from colmado_core.insights.config import (
    FEATURE_LOOKBACK_DAYS,
    LARGE_BASKET_THRESHOLD,
    PAYROLL_DAYS,
    SMALL_BASKET_THRESHOLD,
)
from colmado_core.sales.categories import categorize_product
from colmado_core.sales.records import SaleItem, SaleRecord

FEATURE_COLUMNS = [
    "timestamp",
    "hour_of_day",
    "day_of_week",
    "week_of_month",
    "is_weekend",
    "is_payroll_day",
    "total_value",
    "item_count",
    "categories",
    "category_weights",
    "has_alcohol",
    "has_fresh_produce",
    "has_household_items",
    "has_snacks",
    "has_beverages",
    "avg_item_price",
    "payment_method",
    "is_large_basket",
    "is_small_basket",
    "cashier_id",
    "shift_id",
]


@dataclass
class TransactionFeatures:
    """Features derived from a single sale."""

    timestamp: datetime
    hour_of_day: int
    day_of_week: int
    week_of_month: int
    is_weekend: bool
    is_payroll_day: bool

    total_value: float
    item_count: int
    categories: list[str]
    category_weights: dict[str, float]

    has_alcohol: bool
    has_fresh_produce: bool
    has_household_items: bool
    has_snacks: bool
    has_beverages: bool

    avg_item_price: float
    payment_method: str
    is_large_basket: bool
    is_small_basket: bool

    cashier_id: Optional[int] = None
    shift_id: Optional[int] = None


def _temporal_features(timestamp: datetime) -> dict:
    day_of_week = timestamp.weekday()
    return {
        "hour_of_day": timestamp.hour,
        "day_of_week": day_of_week,
        "week_of_month": math.ceil(timestamp.day / 7),
        "is_weekend": day_of_week >= 5,
        "is_payroll_day": timestamp.day in PAYROLL_DAYS,
    }


def _basket_features(items: Sequence[SaleItem], fallback_total: float) -> dict:
    categories = [categorize_product(item.description) for item in items]
    item_count = len(items)
    # Imported history rows carry totals only
    total_value = float(sum(item.amount for item in items)) if items else float(fallback_total)

    counts: dict[str, int] = {}
    for category in categories:
        counts[category] = counts.get(category, 0) + 1
    unique_categories = list(counts)

    return {
        "total_value": total_value,
        "item_count": item_count,
        "categories": unique_categories,
        "category_weights": {cat: n / item_count for cat, n in counts.items()},
        "avg_item_price": total_value / item_count if item_count > 0 else 0.0,
        "has_alcohol": "alcohol" in counts,
        "has_fresh_produce": "fresh" in counts,
        "has_household_items": "household" in counts,
        "has_snacks": "snacks" in counts,
        "has_beverages": "beverages" in counts,
        "is_large_basket": total_value > LARGE_BASKET_THRESHOLD,
        "is_small_basket": total_value < SMALL_BASKET_THRESHOLD,
    }


def extract_transaction_features(sale: SaleRecord) -> TransactionFeatures:
    """Extract the complete feature set for one sale.

    Args:
        sale: Sale record.

    Returns:
        TransactionFeatures for the sale.
    """
    return TransactionFeatures(
        timestamp=sale.date,
        payment_method=sale.payment_method,
        cashier_id=sale.cashier_id,
        shift_id=sale.shift_id,
        **_temporal_features(sale.date),
        **_basket_features(sale.items, sale.total),
    )


def features_to_frame(features: Sequence[TransactionFeatures]) -> pd.DataFrame:
    """Convert feature objects into the features DataFrame."""
    if not features:
        return pd.DataFrame(columns=FEATURE_COLUMNS)
    df = pd.DataFrame([asdict(f) for f in features], columns=FEATURE_COLUMNS)
    df["timestamp"] = pd.to_datetime(df["timestamp"])
    return df


def batch_extract_features(
    sales: Sequence[SaleRecord],
    days: int = FEATURE_LOOKBACK_DAYS,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """Extract features for every sale within the last ``days`` days.

    Args:
        sales: Sale records.
        days: Lookback window in days (default 30).
        now: Reference time. Defaults to datetime.now().

    Returns:
        Features DataFrame (FEATURE_COLUMNS), one row per retained sale.
    """
    now = now or datetime.now()
    cutoff = now - timedelta(days=days)
    return features_to_frame([extract_transaction_features(s) for s in sales if s.date >= cutoff])


def get_category_distribution(features: pd.DataFrame) -> dict[str, float]:
    """Share of each category across all (sale, category) pairs."""
    exploded = features["categories"].explode().dropna()
    if exploded.empty:
        return {}
    return {str(k): float(v) for k, v in exploded.value_counts(normalize=True).items()}


def get_hourly_distribution(features: pd.DataFrame) -> dict[int, int]:
    """Transaction count per hour of day; every hour 0-23 is present."""
    counts = features["hour_of_day"].astype(int).value_counts().reindex(range(24), fill_value=0)
    return {int(h): int(n) for h, n in counts.items()}


def get_day_of_week_distribution(features: pd.DataFrame) -> dict[int, int]:
    """Transaction count per day of week; every day 0-6 is present."""
    counts = features["day_of_week"].astype(int).value_counts().reindex(range(7), fill_value=0)
    return {int(d): int(n) for d, n in counts.items()}


def calculate_average_basket_value(features: pd.DataFrame) -> float:
    """Mean basket value, 0 for no transactions."""
    if features.empty:
        return 0.0
    return float(features["total_value"].mean())


def calculate_average_item_count(features: pd.DataFrame) -> float:
    """Mean items per basket, 0 for no transactions."""
    if features.empty:
        return 0.0
    return float(features["item_count"].mean())
