"""Public API for sales QA.

Runs the checks from qa/checks.py in memory on a ticket mart, without
reading or writing files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from colmado_core.exceptions import DataQualityError
from colmado_core.qa.checks import (
    REQUIRED_COLUMNS,
    detect_duplicate_ids,
    detect_missing_days,
    detect_negative_totals,
    detect_total_mismatches,
    detect_zscore_anomalies,
    prepare_tickets_df,
)
from colmado_core.sales.marts import daily_revenue

logger = logging.getLogger(__name__)


@dataclass
class SalesQAResult:
    """Result of the sales QA pipeline.

    Attributes:
        summary: Dictionary with summary statistics and counts.
        total_mismatches: Tickets whose items do not sum to the total, or None.
        negative_totals: Tickets with a negative total, or None.
        duplicate_ids: Tickets sharing an id, or None.
        missing_days: Calendar days without sales, or None.
        zscore_anomalies: Days with anomalous revenue, or None.
    """

    summary: dict
    total_mismatches: pd.DataFrame | None
    negative_totals: pd.DataFrame | None
    duplicate_ids: pd.DataFrame | None
    missing_days: pd.DataFrame | None
    zscore_anomalies: pd.DataFrame | None

    @property
    def has_issues(self) -> bool:
        return any(
            df is not None
            for df in (
                self.total_mismatches,
                self.negative_totals,
                self.duplicate_ids,
                self.missing_days,
                self.zscore_anomalies,
            )
        )


def _count(df: Optional[pd.DataFrame]) -> int:
    return len(df) if df is not None else 0


def run_sales_qa(tickets_df: pd.DataFrame, level: int = 4) -> SalesQAResult:
    """Run the sales QA checks in memory.

    Args:
        tickets_df: Ticket mart, typically ``get_sales(source, grain="ticket")``.
        level: QA level to run (default: 4):
            - Level 0: totals consistency, negative totals, duplicate ids (always run)
            - Level 3: Missing days
            - Level 4: Statistical anomalies (z-score on daily revenue)

    Returns:
        SalesQAResult with a summary and one DataFrame (or None) per check.

    Raises:
        DataQualityError: If required columns are missing.
    """
    df = prepare_tickets_df(tickets_df.copy())

    missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_cols:
        raise DataQualityError(
            f"Missing required columns in tickets_df: {missing_cols}. Required: {REQUIRED_COLUMNS}"
        )

    logger.info("Running sales QA at level %d for %d tickets", level, len(df))

    total_mismatches = detect_total_mismatches(df)
    negative_totals = detect_negative_totals(df)
    duplicate_ids = detect_duplicate_ids(df)

    missing_days: Optional[pd.DataFrame] = None
    zscore_anomalies: Optional[pd.DataFrame] = None

    if level >= 3:
        logger.debug("Running Level 3 checks: missing days")
        missing_days = detect_missing_days(df)

    if level >= 4:
        logger.debug("Running Level 4 checks: z-score anomalies")
        zscore_anomalies = detect_zscore_anomalies(daily_revenue(df))

    summary = {
        "total_tickets": len(df),
        "total_revenue": float(df["total"].sum()) if not df.empty else 0.0,
        "min_date": df["operating_date"].min().isoformat() if not df.empty else None,
        "max_date": df["operating_date"].max().isoformat() if not df.empty else None,
        "total_mismatches_count": _count(total_mismatches),
        "negative_totals_count": _count(negative_totals),
        "duplicate_ids_count": _count(duplicate_ids),
        "missing_days_count": _count(missing_days),
        "zscore_anomalies_count": _count(zscore_anomalies),
    }

    logger.info(
        "QA complete: %d total mismatches, %d negative totals, %d duplicate ids, "
        "%d missing days, %d z-score anomalies",
        summary["total_mismatches_count"],
        summary["negative_totals_count"],
        summary["duplicate_ids_count"],
        summary["missing_days_count"],
        summary["zscore_anomalies_count"],
    )

    return SalesQAResult(
        summary=summary,
        total_mismatches=total_mismatches,
        negative_totals=negative_totals,
        duplicate_ids=duplicate_ids,
        missing_days=missing_days,
        zscore_anomalies=zscore_anomalies,
    )
