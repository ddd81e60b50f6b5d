"""Tests for display and formatting helpers."""

from datetime import date, datetime, timedelta

import pytest

from colmado_core.insights.clustering import CustomerSegment
from colmado_core.insights.date_formatters import format_date_spanish
from colmado_core.insights.display import (
    calculate_segment_growth,
    filter_active_insights,
    format_currency,
    format_hour,
    format_percentage,
    generate_segment_summary,
    get_category_display_name,
    get_confidence_label,
    get_day_name,
    get_segment_type_display_name,
    get_short_day_name,
    get_time_until_next_peak,
    group_insights_by_type,
    is_during_peak_hours,
    is_payroll_day,
    sort_segments_by_relevance,
)
from colmado_core.insights.realtime import RealTimeInsight

NOW = datetime(2025, 3, 31, 19, 0)


def _segment(name: str, peak_hours: list, confidence: float = 0.6, count: int = 20) -> CustomerSegment:
    return CustomerSegment(
        segment_id=name.lower(),
        segment_name=name,
        segment_type="temporal",
        transaction_count=count,
        avg_basket_value=1234.5,
        avg_items_per_basket=2.0,
        peak_hours=peak_hours,
        peak_days=[0],
        confidence_score=confidence,
        top_categories=["alcohol", "snacks", "beverages", "fresh"],
        payment_preferences={},
        frequency_pattern="daily",
    )


def _insight(insight_type: str, expires_in: timedelta) -> RealTimeInsight:
    return RealTimeInsight(
        insight_type=insight_type,
        message="x",
        confidence=0.5,
        action_items=[],
        expires_at=NOW + expires_in,
        created_at=NOW,
    )


def test_format_currency_and_percentage() -> None:
    """Test peso and percentage formatting."""
    assert format_currency(1234.56) == "RD$1,235"
    assert format_currency(0) == "RD$0"
    assert format_percentage(0.125) == "12.5%"


@pytest.mark.parametrize(
    "hour,expected",
    [(0, "12 AM"), (9, "9 AM"), (12, "12 PM"), (13, "1 PM"), (23, "11 PM")],
)
def test_format_hour(hour: int, expected: str) -> None:
    """Test 12-hour clock labels."""
    assert format_hour(hour) == expected


def test_day_names_monday_first() -> None:
    """Test localized day names (Monday=0)."""
    assert get_day_name(0) == "Lunes"
    assert get_day_name(6, "en") == "Sunday"
    assert get_short_day_name(2) == "Mié"
    assert get_short_day_name(5, "en") == "Sat"
    assert get_day_name(7) == ""


def test_format_date_spanish() -> None:
    """Test the long Spanish date format."""
    assert format_date_spanish(date(2025, 11, 20)) == "Jueves 20 de Noviembre"


def test_display_names() -> None:
    """Test category, segment type and confidence labels."""
    assert get_category_display_name("bakery_dairy") == "Panadería y Lácteos"
    assert get_category_display_name("protein", "en") == "Meat & Protein"
    assert get_category_display_name("unknown") == "unknown"
    assert get_segment_type_display_name("basket_value") == "Por Valor de Compra"
    assert get_confidence_label(0.95) == "Muy Alta"
    assert get_confidence_label(0.7, "en") == "High"
    assert get_confidence_label(0.6) == "Media"
    assert get_confidence_label(0.3, "en") == "Low"


def test_sort_segments_by_relevance() -> None:
    """Test that active segments come first, then confidence, then volume."""
    morning = _segment("Morning", [6, 7, 8, 9], confidence=0.9)
    evening_small = _segment("EveningSmall", [18, 19], confidence=0.6, count=15)
    evening_big = _segment("EveningBig", [19, 20], confidence=0.6, count=60)

    ordered = sort_segments_by_relevance([morning, evening_small, evening_big], hour=19)

    assert [s.segment_name for s in ordered] == ["EveningBig", "EveningSmall", "Morning"]


def test_filter_and_group_insights() -> None:
    """Test expiry filtering and grouping by type."""
    insights = [
        _insight("traffic", timedelta(minutes=30)),
        _insight("traffic", timedelta(minutes=-5)),
        _insight("operational", timedelta(hours=2)),
    ]

    active = filter_active_insights(insights, now=NOW)
    grouped = group_insights_by_type(active)

    assert len(active) == 2
    assert {k: len(v) for k, v in grouped.items()} == {"traffic": 1, "operational": 1}


def test_get_time_until_next_peak_wraps_midnight() -> None:
    """Test hours until the next peak, including wrap-around."""
    segment = _segment("Late", [21, 22, 23, 0, 1, 2])

    assert get_time_until_next_peak(segment, 19) == 2
    assert get_time_until_next_peak(segment, 23) == 1  # 24 - 23 + 0
    assert get_time_until_next_peak(_segment("None", []), 10) == 0


def test_generate_segment_summary() -> None:
    """Test the one-line segment description."""
    segment = _segment("Evening", [18, 19])

    assert generate_segment_summary(segment, "en") == (
        "Average basket RD$1,234, most active at 6 PM, 7 PM. "
        "Top categories: Alcohol, Snacks, Beverages."
    )
    assert generate_segment_summary(segment).startswith("Promedio de compra RD$1,234")


def test_payroll_and_peak_checks() -> None:
    """Test payroll-day and peak-hour predicates."""
    assert is_payroll_day(datetime(2025, 3, 15))
    assert is_payroll_day(datetime(2025, 4, 30))
    assert not is_payroll_day(datetime(2025, 3, 31))
    assert is_during_peak_hours(_segment("Evening", [18, 19]), 19)
    assert not is_during_peak_hours(_segment("Evening", [18, 19]), 8)


def test_calculate_segment_growth() -> None:
    """Test growth percentages and labels."""
    assert calculate_segment_growth(15, 10).label == "+50.0%"
    shrink = calculate_segment_growth(5, 10)
    assert shrink.growth == -50.0
    assert not shrink.is_growing
    assert shrink.label == "-50.0%"
    new = calculate_segment_growth(7, 0)
    assert new.is_growing and new.label == "New"
