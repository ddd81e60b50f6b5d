"""Demand and revenue prediction from historical averages.

Every prediction is a plain historical average over a lookback window, so
these functions need no fitted model. They accept any sales source (a
SalesStore, a sequence of SaleRecord, or None). A failed store read or
computation is logged and a zeroed default result is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

import pandas as pd

from colmado_core.insights.config import (
    HISTORICAL_LOOKBACK_DAYS,
    SEASONAL_LOOKBACK_DAYS,
    SEASONAL_PAYROLL_DAYS,
    TOP_CATEGORIES,
    WEEKLY_LOOKBACK_WEEKS,
)
from colmado_core.insights.date_formatters import ENGLISH_DAYS
from colmado_core.sales.core import to_item_lines
from colmado_core.sales.marts import daily_revenue, to_tickets
from colmado_core.sales.records import SaleRecord
from colmado_core.sales.store import SalesSource, load_sales

logger = logging.getLogger(__name__)

HOURLY_PATTERN_COLUMNS = ["hour", "expected_revenue", "expected_transactions"]

# (minimum unique dates, confidence)
DEMAND_CONFIDENCE_STEPS = [(12, 0.95), (8, 0.85), (4, 0.7)]
DAILY_REVENUE_CONFIDENCE_STEPS = [(6, 0.95), (4, 0.85), (2, 0.7)]
BASE_CONFIDENCE = 0.5


@dataclass
class DemandPrediction:
    """Expected activity for one hour of one weekday."""

    expected_transactions: int = 0
    expected_revenue: float = 0.0
    confidence: float = 0.0
    top_categories: list[str] = field(default_factory=list)


@dataclass
class RevenuePrediction:
    """Expected revenue for one weekday, with the observed range."""

    expected_revenue: float = 0.0
    min_revenue: float = 0.0
    max_revenue: float = 0.0
    confidence: float = 0.0


@dataclass
class DayPattern:
    day: int
    day_name: str
    expected_revenue: float
    expected_transactions: float
    peak_hours: list[int]


@dataclass
class WeeklyPattern:
    """Per-weekday averages plus best and worst day by revenue."""

    day_patterns: list[DayPattern] = field(default_factory=list)
    best_day: int = 0
    worst_day: int = 0


@dataclass
class SeasonalPatterns:
    """Revenue multipliers relative to the average day (1.0 = no effect)."""

    payroll_day_multiplier: float = 1.0
    weekend_multiplier: float = 1.0
    month_start_multiplier: float = 1.0
    month_end_multiplier: float = 1.0


def _confidence(n: int, steps: list[tuple[int, float]]) -> float:
    for minimum, confidence in steps:
        if n >= minimum:
            return confidence
    return BASE_CONFIDENCE


def _sales_since(source: SalesSource, cutoff: datetime) -> list[SaleRecord]:
    return [s for s in load_sales(source) if s.date >= cutoff]


def predict_demand(
    source: SalesSource,
    hour: int,
    day: int,
    lookback_days: int = HISTORICAL_LOOKBACK_DAYS,
    now: Optional[datetime] = None,
) -> DemandPrediction:
    """Predict transactions, revenue and categories for an hour of a weekday.

    Averages are taken per distinct date on which that hour/weekday saw
    sales, so closed days do not drag the average down.

    Args:
        source: Sales source.
        hour: Hour of day (0-23).
        day: Day of week (Monday=0).
        lookback_days: Days of history to use (default 30).
        now: Reference time. Defaults to datetime.now().

    Returns:
        DemandPrediction. All zeros when there is no matching history.
    """
    now = now or datetime.now()
    try:
        sales = [
            s
            for s in _sales_since(source, now - timedelta(days=lookback_days))
            if s.date.hour == hour and s.date.weekday() == day
        ]
        if not sales:
            return DemandPrediction()

        tickets = to_tickets(sales)
        num_days = tickets["operating_date"].nunique()

        categories = to_item_lines(sales)["category"]
        top_categories = (
            categories.groupby(categories, sort=False)
            .size()
            .sort_values(ascending=False, kind="stable")
            .head(TOP_CATEGORIES)
            .index.tolist()
        )

        return DemandPrediction(
            expected_transactions=int(round(len(tickets) / num_days)),
            expected_revenue=float(tickets["total"].sum()) / num_days,
            confidence=_confidence(num_days, DEMAND_CONFIDENCE_STEPS),
            top_categories=[str(c) for c in top_categories],
        )
    except Exception as e:
        logger.warning("Error predicting demand for day=%s hour=%s: %s", day, hour, e)
        return DemandPrediction()


def predict_daily_revenue(
    source: SalesSource,
    day: int,
    lookback_weeks: int = WEEKLY_LOOKBACK_WEEKS,
    now: Optional[datetime] = None,
) -> RevenuePrediction:
    """Predict total revenue for a weekday from the same weekday in past weeks.

    Args:
        source: Sales source.
        day: Day of week (Monday=0).
        lookback_weeks: Weeks of history to use (default 4).
        now: Reference time. Defaults to datetime.now().

    Returns:
        RevenuePrediction with mean, min and max of the daily totals.
    """
    now = now or datetime.now()
    try:
        sales = [
            s
            for s in _sales_since(source, now - timedelta(weeks=lookback_weeks))
            if s.date.weekday() == day
        ]
        if not sales:
            return RevenuePrediction()

        revenues = daily_revenue(to_tickets(sales))["revenue"].astype(float)
        return RevenuePrediction(
            expected_revenue=float(revenues.mean()),
            min_revenue=float(revenues.min()),
            max_revenue=float(revenues.max()),
            confidence=_confidence(len(revenues), DAILY_REVENUE_CONFIDENCE_STEPS),
        )
    except Exception as e:
        logger.warning("Error predicting daily revenue for day=%s: %s", day, e)
        return RevenuePrediction()


def predict_weekly_pattern(
    source: SalesSource,
    lookback_weeks: int = WEEKLY_LOOKBACK_WEEKS,
    now: Optional[datetime] = None,
) -> WeeklyPattern:
    """Average revenue and traffic for each day of the week.

    Totals are divided by the number of distinct calendar weeks (weeks start
    on Monday) present in the window, minimum 1.

    Returns:
        WeeklyPattern with seven DayPattern entries (Monday first). A tie
        for best day goes to the earlier weekday, for worst day to the later.
    """
    now = now or datetime.now()
    try:
        tickets = to_tickets(_sales_since(source, now - timedelta(weeks=lookback_weeks)))

        if tickets.empty:
            num_weeks = 1
        else:
            week_start = tickets["operating_date"] - pd.to_timedelta(tickets["day_of_week"], unit="D")
            num_weeks = max(week_start.nunique(), 1)

        patterns = []
        for day in range(7):
            day_tickets = tickets[tickets["day_of_week"] == day]
            hours = day_tickets["hour"].astype(int).sort_values(kind="stable")
            peak_hours = (
                hours.groupby(hours, sort=False).size().sort_values(ascending=False, kind="stable").head(3)
            )
            patterns.append(
                DayPattern(
                    day=day,
                    day_name=ENGLISH_DAYS[day],
                    expected_revenue=float(day_tickets["total"].sum()) / num_weeks,
                    expected_transactions=len(day_tickets) / num_weeks,
                    peak_hours=[int(h) for h in peak_hours.index],
                )
            )

        by_revenue = sorted(patterns, key=lambda p: -p.expected_revenue)
        return WeeklyPattern(
            day_patterns=patterns,
            best_day=by_revenue[0].day,
            worst_day=by_revenue[-1].day,
        )
    except Exception as e:
        logger.warning("Error predicting weekly pattern: %s", e)
        return WeeklyPattern()


def predict_hourly_pattern(
    source: SalesSource,
    day: int,
    lookback_weeks: int = WEEKLY_LOOKBACK_WEEKS,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """Expected revenue and transactions for each hour of a weekday.

    Returns:
        DataFrame with HOURLY_PATTERN_COLUMNS and 24 rows (hours 0-23),
        averaged over distinct dates (minimum 1). Empty on error.
    """
    now = now or datetime.now()
    try:
        sales = [
            s
            for s in _sales_since(source, now - timedelta(weeks=lookback_weeks))
            if s.date.weekday() == day
        ]
        tickets = to_tickets(sales)
        num_days = max(tickets["operating_date"].nunique(), 1)

        hourly = (
            tickets.assign(total=tickets["total"].astype(float))
            .groupby(tickets["hour"].astype(int))
            .agg(revenue=("total", "sum"), count=("total", "size"))
            .reindex(range(24), fill_value=0)
        )
        return pd.DataFrame(
            {
                "hour": list(range(24)),
                "expected_revenue": (hourly["revenue"] / num_days).astype(float).tolist(),
                "expected_transactions": (hourly["count"] / num_days).astype(float).tolist(),
            },
            columns=HOURLY_PATTERN_COLUMNS,
        )
    except Exception as e:
        logger.warning("Error predicting hourly pattern for day=%s: %s", day, e)
        return pd.DataFrame(columns=HOURLY_PATTERN_COLUMNS)


def detect_seasonal_patterns(
    source: SalesSource,
    lookback_days: int = SEASONAL_LOOKBACK_DAYS,
    now: Optional[datetime] = None,
) -> SeasonalPatterns:
    """Revenue multipliers for payroll days, weekends and month edges.

    Each multiplier is the mean revenue of matching days over the mean
    revenue of all trading days. A subset with no days, or a zero average,
    yields 1.0.
    """
    now = now or datetime.now()
    try:
        daily = daily_revenue(to_tickets(_sales_since(source, now - timedelta(days=lookback_days))))
        if daily.empty:
            return SeasonalPatterns()

        revenue = daily["revenue"].astype(float)
        avg_revenue = revenue.mean()

        def multiplier(mask: pd.Series) -> float:
            subset = revenue[mask]
            if subset.empty or avg_revenue <= 0:
                return 1.0
            return float(subset.mean() / avg_revenue)

        return SeasonalPatterns(
            payroll_day_multiplier=multiplier(daily["day_of_month"].isin(SEASONAL_PAYROLL_DAYS)),
            weekend_multiplier=multiplier(daily["day_of_week"] >= 5),
            month_start_multiplier=multiplier(daily["day_of_month"] <= 5),
            month_end_multiplier=multiplier(daily["day_of_month"] >= 25),
        )
    except Exception as e:
        logger.warning("Error detecting seasonal patterns: %s", e)
        return SeasonalPatterns()
