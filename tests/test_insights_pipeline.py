"""End-to-end tests for the insights API, console report and CLI."""

import json
from datetime import datetime, timedelta

import pytest

from colmado_core.insights import InsightsConfig, run_customer_insights
from colmado_core.insights.formatters import format_insights_for_console, sanitize_for_console
from colmado_core.insights.pipeline import build_parser, main
from colmado_core.llm import ChatClient
from colmado_core.qa import run_sales_qa
from colmado_core.sales import get_sales
from colmado_core.sales.records import SaleItem, SaleRecord
from colmado_core.sales.store import SalesStore

# Monday 19:30
NOW = datetime(2025, 3, 31, 19, 30)


def _sale(when: datetime, *items: tuple) -> SaleRecord:
    return SaleRecord(
        date=when,
        items=[SaleItem(description=d, amount=a, value=a, unit_price=a) for d, a in items],
        total=sum(a for _, a in items),
    )


@pytest.fixture
def sales() -> list:
    out = []
    for week in range(4):
        monday = datetime(2025, 3, 3) + timedelta(weeks=week)
        out.append(_sale(monday.replace(hour=8, minute=10), ("Pan Sobao", 25.0), ("Leche", 70.0)))
        out.append(_sale(monday.replace(hour=19, minute=15), ("Cerveza Presidente", 300.0), ("Doritos", 60.0)))
        out.append(_sale((monday + timedelta(days=5)).replace(hour=12), ("Arroz", 95.0), ("Pollo", 320.0),
                         ("Aceite", 180.0), ("Platano", 40.0)))
    out.append(_sale(NOW - timedelta(minutes=20), ("Cerveza Presidente", 450.0)))
    return out


def test_run_customer_insights(sales: list) -> None:
    """Test that one call produces every insight component."""
    result = run_customer_insights(sales, now=NOW)

    assert result.metadata["total_sales"] == 13
    assert result.metadata["recent_sales"] == 1
    assert result.metadata["hour"] == 19 and result.metadata["day"] == 0
    assert not result.metadata["ai_enabled"]
    assert len(result.features) == 13

    names = [s.segment_name for s in result.clustering.temporal_segments]
    assert names == ["Morning Commute", "Lunch Rush", "After Work"]
    assert result.demand.expected_transactions == 1
    assert result.daily_revenue.expected_revenue > 0
    assert len(result.weekly_pattern.day_patterns) == 7
    assert len(result.hourly_pattern) == 24
    assert result.daily_summary.total_sales == 1
    assert any(i.insight_type == "product_demand" for i in result.realtime_insights)
    assert all(s.persona_description == "" for s in result.clustering.all_segments)


def test_run_customer_insights_with_fallback_ai(sales: list) -> None:
    """Test that AI mode without a key fills segments with fallback text."""
    config = InsightsConfig(use_ai=True)

    result = run_customer_insights(sales, config=config, client=ChatClient(None), now=NOW)

    assert not result.metadata["ai_enabled"]
    assert all(s.persona_description for s in result.clustering.all_segments)


def test_format_insights_for_console(sales: list) -> None:
    """Test the Spanish report sections."""
    result = run_customer_insights(sales, now=NOW)
    qa = run_sales_qa(get_sales(sales, grain="ticket"))

    report = format_insights_for_console(result, qa)

    assert report.startswith("Insights de Clientes - Lunes 31 de Marzo, 7 PM")
    for section in ("Calidad de Datos", "Hoy", "Segmentos", "Predicciones", "Alertas en Tiempo Real"):
        assert section in report
    assert "After Work" in report


def test_format_insights_for_console_empty() -> None:
    """Test the report for a store without sales."""
    result = run_customer_insights([], now=NOW)
    assert format_insights_for_console(result) == "No hay ventas en el periodo analizado."


def test_format_insights_for_console_empty_keeps_qa() -> None:
    """Test that the QA block is still shown when there are no sales."""
    result = run_customer_insights([], now=NOW)
    qa = run_sales_qa(get_sales([], grain="ticket"))

    report = format_insights_for_console(result, qa)

    assert report.startswith("Calidad de Datos")
    assert "  Tickets: 0" in report
    assert report.endswith("\n\nNo hay ventas en el periodo analizado.")


def test_sanitize_for_console() -> None:
    """Test emoji and HTML stripping with accents kept."""
    assert sanitize_for_console("<b>Día de quincena</b> 💰") == "Día de quincena "


def test_build_parser_defaults() -> None:
    """Test CLI defaults."""
    args = build_parser().parse_args([])
    assert args.lookback == 30
    assert not args.ai and not args.skip_qa and not args.output
    assert args.import_file is None


def test_main_empty_store(tmp_path, capsys, monkeypatch) -> None:
    """Test the CLI against an empty data root."""
    monkeypatch.delenv("XAI_API_KEY", raising=False)

    main(["--data-root", str(tmp_path)])

    out = capsys.readouterr().out
    assert "[1/4] Loading sales..." in out
    assert "[OK] Loaded 0 sales" in out
    assert "No hay ventas en el periodo analizado." in out
    assert "[OK] Pipeline completed successfully" in out


def test_main_imports_and_writes_report(tmp_path, capsys, monkeypatch) -> None:
    """Test import, QA and report writing through the CLI."""
    monkeypatch.delenv("XAI_API_KEY", raising=False)
    now = datetime.now()
    rows = ["Fecha,Total,Forma de Pago"]
    for days_ago in range(1, 6):
        when = now - timedelta(days=days_ago)
        rows.append(f"{when:%Y-%m-%d} 10:00,{150 + days_ago * 10:.2f},Efectivo")
    csv_path = tmp_path / "ventas.csv"
    csv_path.write_text("\n".join(rows) + "\n", encoding="utf-8")

    main(["--data-root", str(tmp_path), "--import", str(csv_path), "--output", "--ai"])

    out = capsys.readouterr().out
    assert "[OK] Imported 5 rows (0 skipped)" in out
    assert "[OK] Loaded 5 sales" in out
    assert "XAI_API_KEY not set" in out
    assert "Insights de Clientes" in out
    assert len(SalesStore(tmp_path / "sales.json").all()) == 5
    reports = list((tmp_path / "reports").glob("insights_*.txt"))
    assert len(reports) == 1


def test_main_reports_errors(tmp_path, capsys, monkeypatch) -> None:
    """Test that failures are printed and re-raised."""
    monkeypatch.delenv("XAI_API_KEY", raising=False)
    (tmp_path / "sales.json").write_text(json.dumps({"not": "a list"}), encoding="utf-8")

    with pytest.raises(Exception):
        main(["--data-root", str(tmp_path)])

    assert "[ERROR] Pipeline failed" in capsys.readouterr().out
