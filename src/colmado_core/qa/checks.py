"""QA checks for the sales ticket mart.

Each ``detect_*`` helper takes the ticket mart (``to_tickets()`` output) or
the daily mart and returns a DataFrame of offending rows, or None when the
data is clean.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from colmado_core.sales.records import MONEY_TOLERANCE

REQUIRED_COLUMNS = ["sale_id", "date", "operating_date", "total", "items_total", "item_count"]


def prepare_tickets_df(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce ticket mart dtypes for QA.

    Parses ``date``/``operating_date`` when they arrive as strings (e.g. a
    ticket mart read back from CSV) and forces money columns to numeric.
    """
    for col in ["date", "operating_date"]:
        if col in df.columns and not pd.api.types.is_datetime64_any_dtype(df[col]):
            df[col] = pd.to_datetime(df[col], errors="coerce")

    for col in ["total", "items_total", "item_count"]:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    return df


def detect_total_mismatches(
    df: pd.DataFrame, tolerance: float = MONEY_TOLERANCE
) -> pd.DataFrame | None:
    """Detect tickets whose line items do not add up to the ticket total.

    Tickets without items (imported history rows) are not checked.

    Args:
        df: Ticket mart.
        tolerance: Allowed absolute difference in RD$.

    Returns:
        Offending tickets with an added ``difference`` column, or None.

    Examples:
        >>> df = pd.DataFrame({
        ...     'total': [100.0, 50.0],
        ...     'items_total': [100.0, 40.0],
        ...     'item_count': [2, 1],
        ... })
        >>> len(detect_total_mismatches(df))
        1
    """
    if df.empty:
        return None

    difference = df["items_total"] - df["total"]
    mask = (df["item_count"] > 0) & (difference.abs() > tolerance)
    if not mask.any():
        return None

    flagged = df[mask].copy()
    flagged["difference"] = difference[mask]
    return flagged


def detect_negative_totals(df: pd.DataFrame) -> pd.DataFrame | None:
    """Detect tickets with a negative total."""
    if df.empty:
        return None
    mask = df["total"] < -1e-6
    if not mask.any():
        return None
    return df[mask].copy()


def detect_duplicate_ids(df: pd.DataFrame) -> pd.DataFrame | None:
    """Detect tickets sharing a sale id. Tickets without an id are ignored."""
    if df.empty:
        return None
    with_id = df[df["sale_id"].notna()]
    dup_mask = with_id.duplicated(subset=["sale_id"], keep=False)
    if not dup_mask.any():
        return None
    return with_id[dup_mask].copy()


def detect_missing_days(df: pd.DataFrame) -> pd.DataFrame | None:
    """Detect calendar days without any sale between the first and last sale.

    A colmado normally trades every day, so gaps usually mean lost data or a
    closed shop worth confirming.

    Returns:
        DataFrame with columns: operating_date, day_of_week; or None.

    Examples:
        >>> df = pd.DataFrame({
        ...     'operating_date': pd.to_datetime(['2025-01-01', '2025-01-03', '2025-01-05'])
        ... })
        >>> len(detect_missing_days(df))
        2
    """
    if df.empty or "operating_date" not in df.columns:
        return None

    dates = df["operating_date"].dropna()
    if dates.empty:
        return None

    date_range = pd.date_range(start=dates.min(), end=dates.max(), freq="D")
    existing = set(dates.dt.normalize())
    missing = [d for d in date_range if d not in existing]
    if not missing:
        return None

    out = pd.DataFrame({"operating_date": missing})
    out["day_of_week"] = out["operating_date"].dt.dayofweek
    return out


def detect_zscore_anomalies(
    daily: pd.DataFrame, window: int = 28, threshold: float = 3.0
) -> pd.DataFrame | None:
    """Detect days whose revenue is far from the rolling mean.

    Computes a rolling mean and std of daily revenue over ``window`` trading
    days and flags days with |z_score| >= threshold.

    Args:
        daily: Daily mart with 'operating_date' and 'revenue'.
        window: Rolling window size in trading days (default: 28).
        threshold: Z-score threshold for flagging anomalies (default: 3.0).

    Returns:
        DataFrame with columns: operating_date, revenue, z_score; or None.
    """
    if daily.empty:
        return None

    daily = daily.sort_values("operating_date").reset_index(drop=True)
    values = daily["revenue"].astype(float).values

    rolling_mean = pd.Series(values).rolling(window=window, min_periods=1).mean()
    rolling_std = pd.Series(values).rolling(window=window, min_periods=1).std()

    rolling_std_safe = rolling_std.replace(0, np.nan)
    z_scores = ((values - rolling_mean) / rolling_std_safe).values

    valid_mask = ~np.isnan(z_scores)
    anomaly_indices = np.where(valid_mask & (np.abs(z_scores) >= threshold))[0]
    if len(anomaly_indices) == 0:
        return None

    return pd.DataFrame(
        {
            "operating_date": daily["operating_date"].iloc[anomaly_indices].values,
            "revenue": values[anomaly_indices],
            "z_score": z_scores[anomaly_indices],
        }
    )
