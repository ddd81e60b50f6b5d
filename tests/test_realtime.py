"""Tests for real-time insights and daily summaries."""

from datetime import datetime, timedelta

import pytest

from colmado_core.insights.clustering import CustomerSegment
from colmado_core.insights.realtime import (
    DailySummary,
    analyze_basket_sizes,
    analyze_traffic,
    forecast_revenue,
    generate_real_time_insights,
    get_daily_summary,
    get_historical_average_traffic,
    get_recent_sales,
    get_today_sales,
)
from colmado_core.sales.records import SaleItem, SaleRecord
from colmado_core.sales.store import SalesStore

# Monday evening, not a payroll day
NOW = datetime(2025, 3, 31, 19, 30)


def _sale(when: datetime, *items: tuple) -> SaleRecord:
    return SaleRecord(
        date=when,
        items=[SaleItem(description=d, amount=a, value=a) for d, a in items],
        total=sum(a for _, a in items),
    )


def _segment(name: str, peak_hours: list, top_categories: list) -> CustomerSegment:
    return CustomerSegment(
        segment_id=f"time_{name.lower()}",
        segment_name=name,
        segment_type="temporal",
        transaction_count=40,
        avg_basket_value=250.0,
        avg_items_per_basket=2.0,
        peak_hours=peak_hours,
        peak_days=[0],
        confidence_score=0.6,
        top_categories=top_categories,
        payment_preferences={"cash": 1.0},
        frequency_pattern="daily",
    )


@pytest.fixture
def history() -> list:
    # Four Monday 19:00 sales over three dates, RD$540 in total
    return [
        _sale(datetime(2025, 3, 10, 19, 5), ("Cerveza Presidente", 150.0)),
        _sale(datetime(2025, 3, 10, 19, 30), ("Doritos", 60.0)),
        _sale(datetime(2025, 3, 17, 19, 10), ("Cerveza Bohemia", 300.0)),
        _sale(datetime(2025, 3, 24, 19, 20), ("Pan Sobao", 30.0)),
    ]


@pytest.fixture
def recent() -> list:
    return [
        _sale(datetime(2025, 3, 31, 19, 0), ("Cerveza Presidente", 400.0)),
        _sale(datetime(2025, 3, 31, 19, 10), ("Ron Brugal", 350.0)),
        _sale(datetime(2025, 3, 31, 19, 25), ("Arroz Selecto", 300.0)),
    ]


def test_historical_average_traffic(history: list) -> None:
    """Test transactions per matching date."""
    assert get_historical_average_traffic(history, 19, 0, now=NOW) == pytest.approx(4 / 3)
    assert get_historical_average_traffic(history, 8, 0, now=NOW) == 0.0


def test_analyze_traffic_busy_and_slow(history: list, recent: list) -> None:
    """Test busy and slow thresholds against the historical average."""
    busy = analyze_traffic(recent, history, 19, 0, now=NOW)
    assert busy.current_traffic == 3
    assert busy.is_busy and not busy.is_slow
    assert busy.percentage_change == pytest.approx(125.0)

    quiet = analyze_traffic([], history, 19, 0, now=NOW)
    assert quiet.is_slow
    assert quiet.percentage_change == pytest.approx(-100.0)


def test_analyze_traffic_without_history() -> None:
    """Test that any traffic counts as busy when there is no history."""
    traffic = analyze_traffic([_sale(NOW, ("Agua", 20.0))], None, 19, 0, now=NOW)

    assert traffic.avg_traffic == 0.0
    assert traffic.percentage_change == 0.0
    assert traffic.is_busy


def test_forecast_revenue_weights_last_week() -> None:
    """Test the 70/30 blend of last-week and 30-day averages."""
    history = [
        _sale(datetime(2025, 3, 10, 19, 0), ("Arroz", 100.0)),
        _sale(datetime(2025, 3, 17, 19, 0), ("Arroz", 100.0)),
        _sale(datetime(2025, 3, 24, 19, 40), ("Arroz", 400.0)),
    ]

    forecast = forecast_revenue(history, 19, 0, now=NOW)

    assert forecast.avg_revenue == pytest.approx(200.0)
    assert forecast.predicted_revenue == pytest.approx(0.7 * 400.0 + 0.3 * 200.0)
    assert forecast.percentage_change == pytest.approx(70.0)
    assert forecast.is_high_potential


def test_forecast_revenue_falls_back_to_average(history: list) -> None:
    """Test that an empty last week uses the 30-day average."""
    forecast = forecast_revenue(history, 19, 0, now=NOW)

    assert forecast.predicted_revenue == pytest.approx(135.0)
    assert not forecast.is_high_potential


def test_analyze_basket_sizes(history: list, recent: list) -> None:
    """Test recent basket average against history."""
    basket = analyze_basket_sizes(recent, history, 19, 0, now=NOW)

    assert basket.avg_basket_size == pytest.approx(350.0)
    assert basket.historical_avg_basket == pytest.approx(135.0)
    assert basket.is_larger_than_usual
    assert analyze_basket_sizes([], history, 19, 0, now=NOW).avg_basket_size == 0.0


def test_generate_real_time_insights(history: list, recent: list) -> None:
    """Test insight ordering, messages and expiry."""
    segments = [
        _segment("After Work", [17, 18, 19, 20], ["alcohol", "snacks"]),
        _segment("Morning", [6, 7, 8, 9], ["bakery_dairy"]),
    ]

    insights = generate_real_time_insights(recent, segments, 19, 0, source=history, now=NOW)

    assert [i.insight_type for i in insights] == ["traffic", "product_demand", "operational"]
    traffic, demand, basket = insights
    assert traffic.message == "Busy period! 125% more customers than usual"
    assert traffic.expires_at == NOW + timedelta(minutes=30)
    assert "alcohol, snacks" in demand.message
    assert demand.action_items[0] == "Ensure alcohol is well-stocked"
    assert demand.confidence == 0.6
    assert basket.message == "Larger baskets than usual (RD$350 vs RD$135)"
    assert all(i.is_active(NOW) for i in insights)
    assert not traffic.is_active(NOW + timedelta(hours=1))


def test_generate_real_time_insights_slow_period() -> None:
    """Test the slow-traffic insight."""
    history = [_sale(datetime(2025, 3, 24, 19, m), ("Agua", 20.0)) for m in (0, 10, 20, 40)]
    recent = [_sale(datetime(2025, 3, 31, 19, 5), ("Agua", 20.0))]

    insights = generate_real_time_insights(recent, [], 19, 0, source=history, now=NOW)

    assert insights[0].insight_type == "traffic"
    assert insights[0].message == "Slow period - 75% fewer customers than usual"
    assert insights[0].expires_at == NOW + timedelta(hours=1)


def test_generate_real_time_insights_payroll_day() -> None:
    """Test that payroll days add an operational alert."""
    now = datetime(2025, 3, 15, 10, 0)

    insights = generate_real_time_insights([], [], 10, 5, now=now)

    assert len(insights) == 1
    assert insights[0].insight_type == "operational"
    assert insights[0].message.startswith("Payroll day!")
    assert insights[0].confidence == 0.95
    assert insights[0].expires_at == now + timedelta(hours=12)


def test_recent_and_today_sales() -> None:
    """Test the recent and today windows."""
    sales = [
        _sale(datetime(2025, 3, 30, 21, 0), ("Cerveza", 150.0)),
        _sale(datetime(2025, 3, 31, 8, 10), ("Pan", 25.0), ("Leche", 70.0)),
        _sale(datetime(2025, 3, 31, 19, 0), ("Cerveza", 150.0)),
        _sale(datetime(2025, 3, 31, 19, 20), ("Cerveza", 300.0), ("Doritos", 60.0)),
    ]

    assert len(get_recent_sales(sales, minutes=60, now=NOW)) == 2
    assert len(get_today_sales(sales, now=NOW)) == 3

    summary = get_daily_summary(sales, now=NOW)
    assert summary.total_sales == 3
    assert summary.total_revenue == pytest.approx(605.0)
    assert summary.avg_basket_size == pytest.approx(605.0 / 3)
    assert summary.peak_hour == 19
    assert summary.top_categories == ["bakery_dairy", "alcohol", "snacks"]


def test_store_errors_are_logged_not_raised(tmp_path) -> None:
    """Test that an unreadable store gives empty windows."""
    path = tmp_path / "sales.json"
    path.write_text("[{]", encoding="utf-8")
    store = SalesStore(path)

    assert get_recent_sales(store, now=NOW) == []
    assert get_today_sales(store, now=NOW) == []
    assert get_daily_summary(store, now=NOW) == DailySummary()
