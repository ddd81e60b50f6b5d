"""Display helpers for insight dashboards and reports.

Locale arguments accept "es" (default) or "en". Day numbers are Monday=0.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from colmado_core.insights.clustering import CustomerSegment
from colmado_core.insights.config import PAYROLL_DAYS
from colmado_core.insights.date_formatters import (
    ENGLISH_DAY_ABBREVIATIONS,
    ENGLISH_DAYS,
    SPANISH_DAY_ABBREVIATIONS,
    SPANISH_DAYS,
)
from colmado_core.insights.realtime import RealTimeInsight

_DAY_NAMES = {"es": SPANISH_DAYS, "en": ENGLISH_DAYS}
_SHORT_DAY_NAMES = {"es": SPANISH_DAY_ABBREVIATIONS, "en": ENGLISH_DAY_ABBREVIATIONS}

CATEGORY_DISPLAY_NAMES = {
    "alcohol": {"en": "Alcohol", "es": "Bebidas Alcohólicas"},
    "staples": {"en": "Staples", "es": "Básicos"},
    "bakery_dairy": {"en": "Bakery & Dairy", "es": "Panadería y Lácteos"},
    "household": {"en": "Household", "es": "Hogar"},
    "snacks": {"en": "Snacks", "es": "Snacks"},
    "beverages": {"en": "Beverages", "es": "Bebidas"},
    "fresh": {"en": "Fresh Produce", "es": "Productos Frescos"},
    "protein": {"en": "Meat & Protein", "es": "Carnes y Proteínas"},
    "tobacco": {"en": "Tobacco", "es": "Tabaco"},
    "personal_care": {"en": "Personal Care", "es": "Cuidado Personal"},
    "other": {"en": "Other", "es": "Otros"},
}

SEGMENT_TYPE_DISPLAY_NAMES = {
    "temporal": {"en": "Time-based", "es": "Por Horario"},
    "basket_value": {"en": "By Basket Value", "es": "Por Valor de Compra"},
    "product_preference": {"en": "By Product Preference", "es": "Por Preferencia de Producto"},
}

# (minimum confidence, Spanish label, English label)
CONFIDENCE_LABELS = [
    (0.9, "Muy Alta", "Very High"),
    (0.7, "Alta", "High"),
    (0.5, "Media", "Medium"),
]


@dataclass
class SegmentGrowth:
    growth: float
    is_growing: bool
    label: str


def format_currency(amount: float) -> str:
    """Format an amount in Dominican pesos without decimals.

    Examples:
        >>> format_currency(1234.56)
        'RD$1,235'
    """
    return f"RD${amount:,.0f}"


def format_percentage(value: float) -> str:
    """Format a 0-1 share as a percentage with one decimal ('12.5%')."""
    return f"{value * 100:.1f}%"


def get_day_name(day: int, locale: str = "es") -> str:
    """Full day name for Monday=0 ... Sunday=6; '' when out of range."""
    names = _DAY_NAMES.get(locale, SPANISH_DAYS)
    return names[day] if 0 <= day < len(names) else ""


def get_short_day_name(day: int, locale: str = "es") -> str:
    names = _SHORT_DAY_NAMES.get(locale, SPANISH_DAY_ABBREVIATIONS)
    return names[day] if 0 <= day < len(names) else ""


def format_hour(hour: int) -> str:
    """12-hour clock label.

    Examples:
        >>> format_hour(0), format_hour(12), format_hour(15)
        ('12 AM', '12 PM', '3 PM')
    """
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    if hour < 12:
        return f"{hour} AM"
    return f"{hour - 12} PM"


def get_category_display_name(category: str, locale: str = "es") -> str:
    return CATEGORY_DISPLAY_NAMES.get(category, {}).get(locale, category)


def get_segment_type_display_name(segment_type: str, locale: str = "es") -> str:
    return SEGMENT_TYPE_DISPLAY_NAMES.get(segment_type, {}).get(locale, segment_type)


def get_confidence_label(confidence: float, locale: str = "es") -> str:
    for minimum, spanish, english in CONFIDENCE_LABELS:
        if confidence >= minimum:
            return spanish if locale == "es" else english
    return "Baja" if locale == "es" else "Low"


def sort_segments_by_relevance(
    segments: Sequence[CustomerSegment],
    hour: int,
    day: Optional[int] = None,
) -> list[CustomerSegment]:
    """Order segments for display at the given hour.

    Segments active this hour come first, then higher confidence, then more
    transactions. ``day`` is accepted for symmetry with other helpers and
    does not affect the order.
    """
    return sorted(
        segments,
        key=lambda s: (hour not in s.peak_hours, -s.confidence_score, -s.transaction_count),
    )


def filter_active_insights(
    insights: Sequence[RealTimeInsight],
    now: Optional[datetime] = None,
) -> list[RealTimeInsight]:
    """Drop insights whose expiry time has passed."""
    now = now or datetime.now()
    return [i for i in insights if i.expires_at is None or i.expires_at > now]


def group_insights_by_type(insights: Sequence[RealTimeInsight]) -> dict[str, list[RealTimeInsight]]:
    grouped: dict[str, list[RealTimeInsight]] = {}
    for insight in insights:
        grouped.setdefault(insight.insight_type, []).append(insight)
    return grouped


def get_time_until_next_peak(segment: CustomerSegment, hour: int) -> int:
    """Hours until the segment's next peak hour, wrapping past midnight.

    Returns 0 when the segment has no peak hours.
    """
    hours = sorted(segment.peak_hours)
    for peak in hours:
        if peak > hour:
            return peak - hour
    if hours:
        return 24 - hour + hours[0]
    return 0


def generate_segment_summary(segment: CustomerSegment, locale: str = "es") -> str:
    """One-line description of a segment's basket, hours and categories."""
    avg_basket = format_currency(segment.avg_basket_value)
    peak_hours = ", ".join(format_hour(h) for h in segment.peak_hours)
    top = ", ".join(get_category_display_name(c, locale) for c in segment.top_categories[:3])
    if locale == "es":
        return f"Promedio de compra {avg_basket}, más activo a las {peak_hours}. Categorías principales: {top}."
    return f"Average basket {avg_basket}, most active at {peak_hours}. Top categories: {top}."


def is_payroll_day(when: Optional[datetime] = None) -> bool:
    """True on the 15th and 30th (Dominican quincena)."""
    return (when or datetime.now()).day in PAYROLL_DAYS


def is_during_peak_hours(segment: CustomerSegment, hour: Optional[int] = None) -> bool:
    if hour is None:
        hour = datetime.now().hour
    return hour in segment.peak_hours


def calculate_segment_growth(current_count: int, previous_count: int) -> SegmentGrowth:
    """Percentage growth of a segment against the previous period.

    A segment with no previous transactions is labelled "New".
    """
    if previous_count == 0:
        return SegmentGrowth(growth=0.0, is_growing=True, label="New")
    growth = (current_count - previous_count) / previous_count * 100
    label = f"+{growth:.1f}%" if growth > 0 else f"{growth:.1f}%"
    return SegmentGrowth(growth=growth, is_growing=growth > 0, label=label)
