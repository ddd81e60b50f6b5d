"""Example: Customer insights for a colmado

This example shows how to load sales from the JSON store (optionally
importing a CSV/Excel history first), check data quality, and run the
customer insights pipeline.

Prerequisites:
- A data directory with sales.json, or a history file to import
- XAI_API_KEY set in the environment to get LLM persona text (optional)
"""

from pathlib import Path

from colmado_core import InsightsSettings, StorePaths
from colmado_core.insights import InsightsConfig, run_customer_insights
from colmado_core.insights.display import format_currency, get_day_name
from colmado_core.llm import ChatClient
from colmado_core.qa import run_sales_qa
from colmado_core.sales import SalesStore, get_sales, import_sales

paths = StorePaths.from_root("data")
store = SalesStore.from_paths(paths)

# Example 1: Import a sales history exported from a spreadsheet
history_file = Path("data/imports/ventas_2024.xlsx")

print("=" * 80)
print("Example 1: Import sales history")
print("=" * 80)

if history_file.exists():
    result = import_sales(history_file, store)
    print(f"Imported {result.imported} rows, skipped {result.skipped}")
    for warning in result.warnings:
        print(f"  Warning: {warning}")
else:
    print(f"History file not found: {history_file} (skipping import)")

# Example 2: Data quality on the ticket grain
print("\n" + "=" * 80)
print("Example 2: Data quality checks")
print("=" * 80)

tickets = get_sales(store, grain="ticket")
qa = run_sales_qa(tickets)
print(qa.summary)
if qa.total_mismatches is not None:
    print("\nTickets whose items do not add up:")
    print(qa.total_mismatches[["sale_id", "date", "total", "items_total", "difference"]])

# Example 3: Segments, predictions and real-time alerts
print("\n" + "=" * 80)
print("Example 3: Customer insights")
print("=" * 80)

settings = InsightsSettings.from_env()
client = ChatClient.from_settings(settings)
config = InsightsConfig(lookback_days=30, use_ai=client.enabled)

insights = run_customer_insights(store, config=config, client=client)

for segment in insights.clustering.all_segments:
    print(
        f"{segment.segment_name:<22} {segment.transaction_count:>5} ventas  "
        f"{format_currency(segment.avg_basket_value):>10}  {segment.frequency_pattern}"
    )
    if segment.persona_description:
        print(f"    {segment.persona_description}")

weekly = insights.weekly_pattern
if weekly.day_patterns:
    print(f"\nBest day: {get_day_name(weekly.best_day)}  Worst day: {get_day_name(weekly.worst_day)}")

print("\nHourly pattern for today:")
print(insights.hourly_pattern[insights.hourly_pattern["expected_transactions"] > 0])

for alert in insights.realtime_insights:
    print(f"[{alert.insight_type}] {alert.message}")
