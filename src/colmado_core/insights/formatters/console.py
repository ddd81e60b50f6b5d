"""Console output formatting utilities."""

from __future__ import annotations

import re
from typing import Optional

from colmado_core.insights.api import InsightsResult
from colmado_core.insights.date_formatters import SPANISH_DAYS, format_date_spanish
from colmado_core.insights.display import (
    format_currency,
    format_hour,
    format_percentage,
    generate_segment_summary,
    get_category_display_name,
    get_confidence_label,
    get_segment_type_display_name,
    sort_segments_by_relevance,
)
from colmado_core.qa.api import SalesQAResult

EMPTY_REPORT = "No hay ventas en el periodo analizado."


def sanitize_for_console(text: str) -> str:
    """Sanitize text for console output by removing emojis and HTML tags.

    Characters outside Latin-1 are dropped so Windows consoles (cp1252) do
    not raise UnicodeEncodeError; Spanish accents are kept.

    Args:
        text: Text that may contain emojis and HTML tags

    Returns:
        Sanitized text safe for console output
    """
    text = re.sub(r"[^\x00-\xFF]+", "", text)
    text = re.sub(r"<[^>]+>", "", text)
    return text


def format_qa_for_console(result: SalesQAResult) -> str:
    s = result.summary
    lines = [
        "Calidad de Datos",
        "-" * 60,
        f"  Tickets: {s['total_tickets']}  Ingresos: {format_currency(s['total_revenue'])}",
        f"  Totales inconsistentes: {s['total_mismatches_count']}",
        f"  Totales negativos: {s['negative_totals_count']}",
        f"  IDs duplicados: {s['duplicate_ids_count']}",
        f"  Dias sin ventas: {s['missing_days_count']}",
        f"  Anomalias (z-score): {s['zscore_anomalies_count']}",
    ]
    return "\n".join(lines)


def format_insights_for_console(
    result: InsightsResult,
    qa: Optional[SalesQAResult] = None,
) -> str:
    """Build a human-readable Spanish report of an insights run.

    Args:
        result: InsightsResult from run_customer_insights().
        qa: Optional QA result to prepend.

    Returns:
        Human-readable text string for console output
    """
    if result.features.empty:
        if qa is None:
            return EMPTY_REPORT
        return f"{format_qa_for_console(qa)}\n\n{EMPTY_REPORT}"

    now = result.metadata["now"]
    hour = result.metadata["hour"]
    day = result.metadata["day"]

    lines = []
    lines.append(f"Insights de Clientes - {format_date_spanish(now.date())}, {format_hour(hour)}")
    lines.append("=" * 60)
    lines.append(f"Ventas analizadas: {len(result.features)} (ultimos {result.metadata['lookback_days']} dias)")
    lines.append("")

    if qa is not None:
        lines.append(format_qa_for_console(qa))
        lines.append("")

    # Today
    summary = result.daily_summary
    lines.append("Hoy")
    lines.append("-" * 60)
    lines.append(f"  Ventas: {summary.total_sales}  Ingresos: {format_currency(summary.total_revenue)}")
    lines.append(f"  Ticket promedio: {format_currency(summary.avg_basket_size)}")
    if summary.total_sales:
        lines.append(f"  Hora pico: {format_hour(summary.peak_hour)}")
        cats = ", ".join(get_category_display_name(c) for c in summary.top_categories)
        lines.append(f"  Categorias principales: {cats}")
    lines.append("")

    # Segments
    lines.append("Segmentos")
    lines.append("-" * 60)
    for segment in sort_segments_by_relevance(result.clustering.all_segments, hour, day):
        confidence = get_confidence_label(segment.confidence_score)
        lines.append(
            f"  {segment.segment_name} ({get_segment_type_display_name(segment.segment_type)}) - "
            f"{segment.transaction_count} ventas, confianza {confidence}"
        )
        lines.append(f"    {generate_segment_summary(segment)}")
        if segment.persona_description:
            lines.append(f"    {segment.persona_description}")
        for rec in segment.marketing_recommendations:
            lines.append(f"    * {rec}")
    lines.append("")

    # Predictions
    demand = result.demand
    revenue = result.daily_revenue
    lines.append("Predicciones")
    lines.append("-" * 60)
    lines.append(
        f"  Esta hora: {demand.expected_transactions} ventas, {format_currency(demand.expected_revenue)} "
        f"(confianza {get_confidence_label(demand.confidence)})"
    )
    lines.append(
        f"  {SPANISH_DAYS[day]}: {format_currency(revenue.expected_revenue)} "
        f"({format_currency(revenue.min_revenue)} - {format_currency(revenue.max_revenue)})"
    )
    weekly = result.weekly_pattern
    if weekly.day_patterns:
        lines.append(f"  Mejor dia: {SPANISH_DAYS[weekly.best_day]}  Peor dia: {SPANISH_DAYS[weekly.worst_day]}")
    seasonal = result.seasonal
    lines.append(
        f"  Quincena x{seasonal.payroll_day_multiplier:.2f}  Fin de semana x{seasonal.weekend_multiplier:.2f}  "
        f"Inicio de mes x{seasonal.month_start_multiplier:.2f}  Fin de mes x{seasonal.month_end_multiplier:.2f}"
    )
    lines.append("")

    # Real-time
    lines.append("Alertas en Tiempo Real")
    lines.append("-" * 60)
    if not result.realtime_insights:
        lines.append("  Sin alertas")
    for insight in result.realtime_insights:
        lines.append(f"  [{insight.insight_type}] {insight.message} ({format_percentage(insight.confidence)})")
        for action in insight.action_items:
            lines.append(f"    - {action}")

    return "\n".join(lines)
