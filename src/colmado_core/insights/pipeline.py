"""CLI wrapper for the customer insights pipeline.

This module provides the ``colmado-insights`` command-line interface.
All core insight logic is in colmado_core.insights.api.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from colmado_core.config import InsightsSettings, StorePaths
from colmado_core.insights.api import InsightsConfig, run_customer_insights
from colmado_core.insights.formatters.console import (
    format_insights_for_console,
    sanitize_for_console,
)
from colmado_core.llm.client import ChatClient
from colmado_core.qa.api import run_sales_qa
from colmado_core.sales.api import get_sales
from colmado_core.sales.history_import import import_sales
from colmado_core.sales.store import SalesStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run colmado customer insights.")
    parser.add_argument(
        "--data-root",
        type=str,
        help="Data directory holding sales.json. Defaults to COLMADO_DATA_ROOT or ./data.",
    )
    parser.add_argument(
        "--import",
        dest="import_file",
        type=str,
        help="CSV/Excel history file to import into the store before analysis.",
    )
    parser.add_argument(
        "--lookback",
        type=int,
        default=30,
        help="Days of sales used for segments (default: 30)",
    )
    parser.add_argument(
        "--ai",
        action="store_true",
        help="Enrich segments with LLM persona text (requires XAI_API_KEY)",
    )
    parser.add_argument(
        "--skip-qa",
        action="store_true",
        help="Skip data quality checks",
    )
    parser.add_argument(
        "--output",
        action="store_true",
        help="Also write the report to <data-root>/reports/",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point for the insights pipeline.

    Parses command-line arguments, optionally imports a history file, runs
    QA and the insights pipeline, and prints a Spanish report.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = InsightsSettings.from_env()
    paths = StorePaths.from_root(args.data_root or settings.data_root)
    store = SalesStore.from_paths(paths)

    print("=" * 60)
    print("Colmado Customer Insights")
    print("=" * 60)

    try:
        print("\n[1/4] Loading sales...")
        if args.import_file:
            import_path = Path(args.import_file)
            print(f"  Importing from: {import_path}")
            imported = import_sales(import_path, store)
            print(f"[OK] Imported {imported.imported} rows ({imported.skipped} skipped)")
            for error in imported.errors[:10]:
                print(f"  [WARNING] Row {error.row}: {error.field} - {error.message} ({error.value!r})")
        sales = store.all()
        print(f"[OK] Loaded {len(sales)} sales from {store.path}")

        qa = None
        if not args.skip_qa:
            print("\n[2/4] Running data quality checks...")
            qa = run_sales_qa(get_sales(sales, grain="ticket"))
            print(f"[OK] QA {'found issues' if qa.has_issues else 'passed'}")
        else:
            print("\n[2/4] Skipping data quality checks")

        print("\n[3/4] Generating insights...")
        client = None
        if args.ai:
            client = ChatClient.from_settings(settings)
            if not client.enabled:
                print("Warning: XAI_API_KEY not set; using rule-based segment descriptions")
        config = InsightsConfig(lookback_days=args.lookback, use_ai=args.ai)
        result = run_customer_insights(sales, config=config, client=client, now=datetime.now())
        print(f"[OK] {len(result.clustering.all_segments)} segments, {len(result.realtime_insights)} alerts")

        print("\n[4/4] Formatting results...")
        report = format_insights_for_console(result, qa)
        print("\n" + "=" * 60)
        print(sanitize_for_console(report))
        print("=" * 60)

        if args.output:
            paths.ensure_dirs()
            out_path = paths.reports / f"insights_{datetime.now():%Y%m%d_%H%M}.txt"
            out_path.write_text(report, encoding="utf-8")
            print(f"\n[OK] Report written to {out_path}")

        print("\n[OK] Pipeline completed successfully")

    except Exception as e:
        print(f"\n[ERROR] Pipeline failed: {e}")
        raise


if __name__ == "__main__":
    main()
