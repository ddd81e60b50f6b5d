"""Rule-based customer segmentation.

Transactions (rows of the features DataFrame) are grouped three ways:

- temporal: fixed time-of-day buckets
- basket_value: fixed RD$ value bands
- product_preference: basket-composition predicates; a sale may land in
  several of these

Segments without transactions are omitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

import pandas as pd

from colmado_core.insights.config import (
    SEGMENT_CONFIDENCE_MAX,
    SEGMENT_CONFIDENCE_STEPS,
    TOP_CATEGORIES,
    TOP_PEAK_DAYS,
    TOP_PEAK_HOURS,
)

logger = logging.getLogger(__name__)

SEGMENT_TYPES = ("temporal", "basket_value", "product_preference")

# (name, hours, description)
TIME_BUCKETS = [
    ("Morning Commute", [6, 7, 8, 9], "Early morning quick purchases - coffee, breakfast items"),
    ("Mid-Morning", [10, 11], "Late morning shoppers - household errands"),
    ("Lunch Rush", [12, 13, 14], "Midday meal and refreshment buyers"),
    ("Afternoon", [15, 16], "Afternoon shoppers - school pickup, snacks"),
    ("After Work", [17, 18, 19, 20], "Evening shoppers buying dinner items and household needs"),
    ("Late Night", [21, 22, 23, 0, 1, 2], "Night owls buying snacks, drinks, and convenience items"),
]

# (name, min inclusive, max exclusive, description)
VALUE_BANDS = [
    ("Quick Picks", None, 200.0, "Small, impulse purchases - water, cigarettes, single items"),
    ("Regular Shoppers", 200.0, 500.0, "Daily household needs - groceries for cooking"),
    ("Big Shoppers", 500.0, 1000.0, "Weekly family shopping - larger baskets"),
    ("Bulk Buyers", 1000.0, None, "Large purchases, events, or business customers"),
]

# (name, row mask, description)
PREFERENCE_RULES: list[tuple[str, Callable[[pd.DataFrame], pd.Series], str]] = [
    (
        "Beer & Snacks",
        lambda df: df["has_alcohol"].astype(bool) & df["has_snacks"].astype(bool),
        "Social buyers - beer and snacks for gatherings",
    ),
    (
        "Household Essentials",
        lambda df: df["has_household_items"].astype(bool),
        "Household managers - cleaning and maintenance items",
    ),
    (
        "Fresh Food Shoppers",
        lambda df: df["has_fresh_produce"].astype(bool),
        "Fresh food buyers - cooking from scratch",
    ),
    (
        "Convenience Buyers",
        lambda df: df["has_beverages"].astype(bool) & df["is_small_basket"].astype(bool),
        "Quick convenience purchases - drinks and small items",
    ),
    (
        "Family Providers",
        lambda df: df["is_large_basket"].astype(bool) & (df["categories"].map(len) >= 4),
        "Large family shopping - diverse basket composition",
    ),
]


@dataclass
class CustomerSegment:
    """A group of transactions sharing a time, value or basket pattern.

    Attributes:
        segment_id: Stable id, e.g. ``time_lunch_rush``.
        segment_name: Display name.
        segment_type: One of SEGMENT_TYPES.
        transaction_count: Number of transactions in the segment.
        avg_basket_value: Mean basket value (RD$).
        avg_items_per_basket: Mean item count.
        peak_hours: Busiest hours (bucket hours for temporal segments).
        peak_days: Busiest days of week (Monday=0).
        confidence_score: 0.3-0.9 depending on transaction count.
        top_categories: Up to five most frequent categories.
        payment_preferences: Share of transactions per payment method.
        frequency_pattern: ``daily``, ``weekly`` or ``occasional``.
        persona_description: Narrative text, filled by AI analysis.
        marketing_recommendations: Filled by AI analysis.
        operational_insights: Filled by AI analysis.
        last_updated: When the segment was computed.
    """

    segment_id: str
    segment_name: str
    segment_type: str
    transaction_count: int
    avg_basket_value: float
    avg_items_per_basket: float
    peak_hours: list[int]
    peak_days: list[int]
    confidence_score: float
    top_categories: list[str]
    payment_preferences: dict[str, float]
    frequency_pattern: str
    persona_description: str = ""
    marketing_recommendations: list[str] = field(default_factory=list)
    operational_insights: list[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=datetime.now)


@dataclass
class ClusteringResult:
    """Output of run_all_clustering()."""

    temporal_segments: list[CustomerSegment]
    value_segments: list[CustomerSegment]
    preference_segments: list[CustomerSegment]
    total_transactions: int
    analysis_date: datetime

    @property
    def all_segments(self) -> list[CustomerSegment]:
        return self.temporal_segments + self.value_segments + self.preference_segments


def _segment_id(prefix: str, name: str) -> str:
    return f"{prefix}_{'_'.join(name.lower().split())}"


def _top_keys(values: pd.Series, n: int) -> list:
    """Most frequent values, ties kept in first-seen/ascending key order."""
    if values.empty:
        return []
    counts = values.groupby(values, sort=False).size()
    return counts.sort_values(ascending=False, kind="stable").head(n).index.tolist()


def calculate_confidence(transaction_count: int) -> float:
    """Confidence that a segment is stable, from its transaction count."""
    for upper, confidence in SEGMENT_CONFIDENCE_STEPS:
        if transaction_count < upper:
            return confidence
    return SEGMENT_CONFIDENCE_MAX


def determine_frequency(subset: pd.DataFrame) -> str:
    """Classify a segment as daily, weekly or occasional.

    The ratio of distinct calendar dates to transactions: > 0.7 daily,
    > 0.3 weekly, otherwise occasional.
    """
    if subset.empty:
        return "occasional"
    unique_days = pd.to_datetime(subset["timestamp"]).dt.normalize().nunique()
    frequency = unique_days / len(subset)
    if frequency > 0.7:
        return "daily"
    if frequency > 0.3:
        return "weekly"
    return "occasional"


def find_peak_hours(subset: pd.DataFrame, top_n: int = TOP_PEAK_HOURS) -> list[int]:
    hours = subset["hour_of_day"].astype(int).sort_values(kind="stable")
    return [int(h) for h in _top_keys(hours, top_n)]


def find_peak_days(subset: pd.DataFrame, top_n: int = TOP_PEAK_DAYS) -> list[int]:
    days = subset["day_of_week"].astype(int).sort_values(kind="stable")
    return [int(d) for d in _top_keys(days, top_n)]


def calculate_payment_preferences(subset: pd.DataFrame) -> dict[str, float]:
    if subset.empty:
        return {}
    shares = subset["payment_method"].value_counts(normalize=True)
    return {str(method): float(share) for method, share in shares.items()}


def _top_categories(subset: pd.DataFrame) -> list[str]:
    exploded = subset["categories"].explode().dropna()
    return [str(c) for c in _top_keys(exploded, TOP_CATEGORIES)]


def _build_segment(
    subset: pd.DataFrame,
    prefix: str,
    name: str,
    segment_type: str,
    peak_hours: Optional[list[int]] = None,
) -> CustomerSegment:
    count = len(subset)
    return CustomerSegment(
        segment_id=_segment_id(prefix, name),
        segment_name=name,
        segment_type=segment_type,
        transaction_count=count,
        avg_basket_value=float(subset["total_value"].sum()) / count,
        avg_items_per_basket=float(subset["item_count"].sum()) / count,
        peak_hours=list(peak_hours) if peak_hours is not None else find_peak_hours(subset),
        peak_days=find_peak_days(subset),
        confidence_score=calculate_confidence(count),
        top_categories=_top_categories(subset),
        payment_preferences=calculate_payment_preferences(subset),
        frequency_pattern=determine_frequency(subset),
    )


def cluster_by_time_of_day(features: pd.DataFrame) -> list[CustomerSegment]:
    """Segment transactions into fixed time-of-day buckets.

    Args:
        features: Features DataFrame from batch_extract_features().

    Returns:
        One temporal segment per non-empty bucket, in bucket order.
    """
    segments = []
    for name, hours, _description in TIME_BUCKETS:
        subset = features[features["hour_of_day"].isin(hours)]
        if subset.empty:
            continue
        segments.append(_build_segment(subset, "time", name, "temporal", peak_hours=hours))
    return segments


def cluster_by_basket_value(features: pd.DataFrame) -> list[CustomerSegment]:
    """Segment transactions into RD$ basket value bands.

    Lower bounds are inclusive and upper bounds exclusive, so every
    non-negative basket falls into exactly one band.
    """
    segments = []
    values = features["total_value"].astype(float)
    for name, low, high, _description in VALUE_BANDS:
        mask = pd.Series(True, index=features.index)
        if low is not None:
            mask &= values >= low
        if high is not None:
            mask &= values < high
        subset = features[mask]
        if subset.empty:
            continue
        segments.append(_build_segment(subset, "value", name, "basket_value"))
    return segments


def cluster_by_product_preference(features: pd.DataFrame) -> list[CustomerSegment]:
    """Segment transactions by basket composition. Segments may overlap."""
    if features.empty:
        return []
    segments = []
    for name, rule, _description in PREFERENCE_RULES:
        subset = features[rule(features)]
        if subset.empty:
            continue
        segments.append(_build_segment(subset, "pref", name, "product_preference"))
    return segments


def run_all_clustering(
    features: pd.DataFrame,
    now: Optional[datetime] = None,
) -> ClusteringResult:
    """Run the three segmentations over one features frame.

    Args:
        features: Features DataFrame from batch_extract_features().
        now: Analysis timestamp. Defaults to datetime.now().

    Returns:
        ClusteringResult with temporal, value and preference segments.

    Examples:
        >>> features = batch_extract_features(store.all())
        >>> result = run_all_clustering(features)
        >>> [s.segment_name for s in result.temporal_segments]
        ['Lunch Rush', 'After Work']
    """
    result = ClusteringResult(
        temporal_segments=cluster_by_time_of_day(features),
        value_segments=cluster_by_basket_value(features),
        preference_segments=cluster_by_product_preference(features),
        total_transactions=len(features),
        analysis_date=now or datetime.now(),
    )
    logger.info(
        "Clustered %d transactions into %d temporal, %d value, %d preference segments",
        result.total_transactions,
        len(result.temporal_segments),
        len(result.value_segments),
        len(result.preference_segments),
    )
    return result


def get_segment_summary(segments: list[CustomerSegment]) -> dict:
    """Summary statistics over a list of segments.

    Returns:
        Dictionary with total_segments, total_transactions, avg_confidence
        (0 for an empty list), top_segments_by_volume and
        top_segments_by_value (five each).
    """
    total_transactions = sum(s.transaction_count for s in segments)
    avg_confidence = (
        sum(s.confidence_score for s in segments) / len(segments) if segments else 0.0
    )
    return {
        "total_segments": len(segments),
        "total_transactions": total_transactions,
        "avg_confidence": avg_confidence,
        "top_segments_by_volume": sorted(segments, key=lambda s: -s.transaction_count)[:5],
        "top_segments_by_value": sorted(segments, key=lambda s: -s.avg_basket_value)[:5],
    }
