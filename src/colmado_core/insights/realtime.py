"""Real-time insights from the current hour's activity.

Recent sales are compared with the same hour and weekday over the last 30
days to flag busy/slow traffic, high revenue potential and unusual basket
sizes. Active segments whose peak hours include the current hour produce
product-demand alerts, and payroll days produce an operational alert.

Every insight carries a confidence and an expiry time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Sequence

from colmado_core.insights.clustering import CustomerSegment
from colmado_core.insights.config import (
    BUSY_MULTIPLIER,
    HIGH_REVENUE_MULTIPLIER,
    HISTORICAL_LOOKBACK_DAYS,
    HISTORICAL_WEIGHT,
    LARGE_BASKET_MULTIPLIER,
    PAYROLL_DAYS,
    RECENT_TREND_DAYS,
    RECENT_WEIGHT,
    SLOW_MULTIPLIER,
    TOP_CATEGORIES,
)
from colmado_core.sales.categories import categorize_product
from colmado_core.sales.records import SaleRecord
from colmado_core.sales.store import SalesSource, load_sales

logger = logging.getLogger(__name__)

INSIGHT_TYPES = ("traffic", "product_demand", "revenue", "operational")


@dataclass
class TrafficAnalysis:
    current_traffic: int = 0
    avg_traffic: float = 0.0
    percentage_change: float = 0.0
    is_busy: bool = False
    is_slow: bool = False


@dataclass
class RevenueForecast:
    predicted_revenue: float = 0.0
    avg_revenue: float = 0.0
    percentage_change: float = 0.0
    is_high_potential: bool = False


@dataclass
class BasketAnalysis:
    avg_basket_size: float = 0.0
    historical_avg_basket: float = 0.0
    percentage_change: float = 0.0
    is_larger_than_usual: bool = False


@dataclass
class RealTimeInsight:
    """A time-limited alert for the shop floor.

    Attributes:
        insight_type: One of INSIGHT_TYPES.
        message: Human-readable alert.
        confidence: 0-1.
        action_items: Suggested actions.
        expires_at: After this time the insight is stale.
        created_at: When the insight was generated.
    """

    insight_type: str
    message: str
    confidence: float
    action_items: list[str]
    expires_at: datetime
    created_at: datetime = field(default_factory=datetime.now)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at > (now or datetime.now())


@dataclass
class DailySummary:
    total_sales: int = 0
    total_revenue: float = 0.0
    avg_basket_size: float = 0.0
    peak_hour: int = 0
    top_categories: list[str] = field(default_factory=list)


def _historical_sales(
    source: SalesSource,
    hour: int,
    day: int,
    now: datetime,
    days: int = HISTORICAL_LOOKBACK_DAYS,
) -> list[SaleRecord]:
    """Sales from the last ``days`` days at the given hour and weekday."""
    cutoff = now - timedelta(days=days)
    return [
        s
        for s in load_sales(source)
        if s.date >= cutoff and s.date.hour == hour and s.date.weekday() == day
    ]


def _percentage_change(current: float, reference: float) -> float:
    return (current - reference) / reference * 100 if reference > 0 else 0.0


def get_historical_average_traffic(
    source: SalesSource,
    hour: int,
    day: int,
    now: Optional[datetime] = None,
) -> float:
    """Average transactions per date at this hour/weekday over 30 days."""
    now = now or datetime.now()
    try:
        sales = _historical_sales(source, hour, day, now)
    except Exception as e:
        logger.warning("Error getting historical traffic for day=%s hour=%s: %s", day, hour, e)
        return 0.0
    dates = {s.date.date() for s in sales}
    return len(sales) / max(len(dates), 1)


def get_historical_basket_size(
    source: SalesSource,
    hour: int,
    day: int,
    now: Optional[datetime] = None,
) -> float:
    """Average ticket total at this hour/weekday over 30 days (0 when none)."""
    now = now or datetime.now()
    try:
        sales = _historical_sales(source, hour, day, now)
    except Exception as e:
        logger.warning("Error getting historical basket size for day=%s hour=%s: %s", day, hour, e)
        return 0.0
    if not sales:
        return 0.0
    return sum(s.total for s in sales) / len(sales)


def analyze_traffic(
    recent: Sequence[SaleRecord],
    source: SalesSource,
    hour: int,
    day: int,
    now: Optional[datetime] = None,
) -> TrafficAnalysis:
    """Compare the number of recent sales with the historical average.

    Args:
        recent: Sales in the current window (typically the last hour).
        source: Sales source for history.
        hour: Current hour (0-23).
        day: Current day of week (Monday=0).
        now: Reference time. Defaults to datetime.now().

    Returns:
        TrafficAnalysis. Busy when current > 1.5x average, slow when
        current < 0.5x average.
    """
    current = len(recent)
    avg_traffic = get_historical_average_traffic(source, hour, day, now)
    return TrafficAnalysis(
        current_traffic=current,
        avg_traffic=avg_traffic,
        percentage_change=_percentage_change(current, avg_traffic),
        is_busy=current > avg_traffic * BUSY_MULTIPLIER,
        is_slow=current < avg_traffic * SLOW_MULTIPLIER,
    )


def forecast_revenue(
    source: SalesSource,
    hour: int,
    day: int,
    now: Optional[datetime] = None,
) -> RevenueForecast:
    """Forecast the average ticket for this hour, weighting the last week.

    prediction = 0.7 * (last 7 days average) + 0.3 * (30-day average). When
    the last week has no matching sales, the 30-day average stands in.
    """
    now = now or datetime.now()
    try:
        historical = _historical_sales(source, hour, day, now)
        if not historical:
            return RevenueForecast()

        avg_revenue = sum(s.total for s in historical) / len(historical)
        recent_cutoff = now - timedelta(days=RECENT_TREND_DAYS)
        recent_week = [s for s in historical if s.date >= recent_cutoff]
        recent_avg = (
            sum(s.total for s in recent_week) / len(recent_week) if recent_week else avg_revenue
        )

        predicted = recent_avg * RECENT_WEIGHT + avg_revenue * HISTORICAL_WEIGHT
        return RevenueForecast(
            predicted_revenue=predicted,
            avg_revenue=avg_revenue,
            percentage_change=_percentage_change(predicted, avg_revenue),
            is_high_potential=predicted > avg_revenue * HIGH_REVENUE_MULTIPLIER,
        )
    except Exception as e:
        logger.warning("Error forecasting revenue for day=%s hour=%s: %s", day, hour, e)
        return RevenueForecast()


def analyze_basket_sizes(
    recent: Sequence[SaleRecord],
    source: SalesSource,
    hour: int,
    day: int,
    now: Optional[datetime] = None,
) -> BasketAnalysis:
    """Compare the recent average ticket with the historical one."""
    if not recent:
        return BasketAnalysis()
    avg_basket = sum(s.total for s in recent) / len(recent)
    historical = get_historical_basket_size(source, hour, day, now)
    return BasketAnalysis(
        avg_basket_size=avg_basket,
        historical_avg_basket=historical,
        percentage_change=_percentage_change(avg_basket, historical),
        is_larger_than_usual=avg_basket > historical * LARGE_BASKET_MULTIPLIER,
    )


def generate_real_time_insights(
    recent: Sequence[SaleRecord],
    segments: Sequence[CustomerSegment],
    hour: int,
    day: int,
    source: SalesSource = None,
    now: Optional[datetime] = None,
) -> list[RealTimeInsight]:
    """Build the current list of real-time insights.

    Args:
        recent: Sales in the current window.
        segments: Active customer segments.
        hour: Current hour (0-23).
        day: Current day of week (Monday=0).
        source: Sales source for history. None gives no history.
        now: Reference time for expiry and payroll checks.

    Returns:
        Insights in order: traffic, product demand, revenue, basket, payroll.
    """
    now = now or datetime.now()
    insights: list[RealTimeInsight] = []

    def add(insight_type: str, message: str, confidence: float, actions: list[str], ttl: timedelta) -> None:
        insights.append(
            RealTimeInsight(
                insight_type=insight_type,
                message=message,
                confidence=confidence,
                action_items=actions,
                expires_at=now + ttl,
                created_at=now,
            )
        )

    traffic = analyze_traffic(recent, source, hour, day, now)
    if traffic.is_busy:
        add(
            "traffic",
            f"Busy period! {round(traffic.percentage_change)}% more customers than usual",
            0.9,
            [
                "Consider opening additional checkout lane",
                "Stock up on popular items",
                "Prepare for increased cash handling",
            ],
            timedelta(minutes=30),
        )
    elif traffic.is_slow:
        add(
            "traffic",
            f"Slow period - {round(abs(traffic.percentage_change))}% fewer customers than usual",
            0.8,
            [
                "Good time for inventory counting",
                "Consider cleaning and restocking",
                "Prepare for upcoming busy period",
            ],
            timedelta(hours=1),
        )

    for segment in segments:
        if hour not in segment.peak_hours:
            continue
        top_products = segment.top_categories[:3]
        first = top_products[0] if top_products else "popular items"
        add(
            "product_demand",
            f"{segment.segment_name} customers arriving - expect high demand for "
            f"{', '.join(top_products) or 'popular items'}",
            segment.confidence_score,
            [
                f"Ensure {first} is well-stocked",
                "Consider quick checkout for small baskets",
                "Prepare personalized recommendations",
            ],
            timedelta(hours=2),
        )

    revenue = forecast_revenue(source, hour, day, now)
    if revenue.is_high_potential:
        add(
            "revenue",
            f"High revenue potential: RD${revenue.predicted_revenue:,.0f} expected vs "
            f"RD${revenue.avg_revenue:,.0f} average",
            0.8,
            [
                "Maximize upselling opportunities",
                "Ensure all staff are available",
                "Consider extending store hours if applicable",
            ],
            timedelta(hours=4),
        )

    if recent:
        basket = analyze_basket_sizes(recent, source, hour, day, now)
        if basket.is_larger_than_usual:
            add(
                "operational",
                f"Larger baskets than usual (RD${basket.avg_basket_size:.0f} vs "
                f"RD${basket.historical_avg_basket:.0f})",
                0.7,
                [
                    "Focus on upselling complementary items",
                    "Ensure adequate bagging supplies",
                    "Consider family bundle promotions",
                ],
                timedelta(hours=2),
            )

    if now.day in PAYROLL_DAYS:
        add(
            "operational",
            "Payroll day! Expect increased traffic and larger purchases",
            0.95,
            [
                "Ensure adequate cash on hand for change",
                "Stock up on bulk items and staples",
                "Prepare for longer checkout lines",
            ],
            timedelta(hours=12),
        )

    logger.debug("Generated %d real-time insight(s) for day=%s hour=%s", len(insights), day, hour)
    return insights


def get_recent_sales(
    source: SalesSource,
    minutes: int = 60,
    now: Optional[datetime] = None,
) -> list[SaleRecord]:
    """Sales from the last ``minutes`` minutes. Empty on store errors."""
    now = now or datetime.now()
    cutoff = now - timedelta(minutes=minutes)
    try:
        return [s for s in load_sales(source) if s.date >= cutoff]
    except Exception as e:
        logger.warning("Error getting recent sales: %s", e)
        return []


def get_today_sales(source: SalesSource, now: Optional[datetime] = None) -> list[SaleRecord]:
    """Sales since local midnight. Empty on store errors."""
    now = now or datetime.now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        return [s for s in load_sales(source) if s.date >= midnight]
    except Exception as e:
        logger.warning("Error getting today's sales: %s", e)
        return []


def get_daily_summary(source: SalesSource, now: Optional[datetime] = None) -> DailySummary:
    """Today's sales count, revenue, average basket, peak hour and top categories.

    Ties for the peak hour go to the earliest hour.
    """
    sales = get_today_sales(source, now)
    if not sales:
        return DailySummary()

    total_revenue = sum(s.total for s in sales)

    hour_counts: dict[int, int] = {}
    for sale in sorted(sales, key=lambda s: s.date.hour):
        hour_counts[sale.date.hour] = hour_counts.get(sale.date.hour, 0) + 1
    peak_hour = max(hour_counts, key=hour_counts.get)

    category_counts: dict[str, int] = {}
    for sale in sales:
        for item in sale.items:
            category = categorize_product(item.description)
            category_counts[category] = category_counts.get(category, 0) + 1
    top_categories = sorted(category_counts, key=lambda c: -category_counts[c])[:TOP_CATEGORIES]

    return DailySummary(
        total_sales=len(sales),
        total_revenue=total_revenue,
        avg_basket_size=total_revenue / len(sales),
        peak_hour=peak_hour,
        top_categories=top_categories,
    )
