"""Public API for the customer insights pipeline.

Runs feature extraction, segmentation, optional AI enrichment, predictions
and real-time insights over a sales source in one call, returning every
intermediate result. Nothing is printed or written to disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pandas as pd

from colmado_core.insights.ai_analysis import batch_analyze_segments
from colmado_core.insights.clustering import ClusteringResult, run_all_clustering
from colmado_core.insights.config import FEATURE_LOOKBACK_DAYS
from colmado_core.insights.features import batch_extract_features
from colmado_core.insights.prediction import (
    DemandPrediction,
    RevenuePrediction,
    SeasonalPatterns,
    WeeklyPattern,
    detect_seasonal_patterns,
    predict_daily_revenue,
    predict_demand,
    predict_hourly_pattern,
    predict_weekly_pattern,
)
from colmado_core.insights.realtime import (
    DailySummary,
    RealTimeInsight,
    generate_real_time_insights,
    get_daily_summary,
    get_recent_sales,
)
from colmado_core.llm.client import ChatClient
from colmado_core.sales.store import SalesSource, load_sales

logger = logging.getLogger(__name__)


@dataclass
class InsightsConfig:
    """Configuration for a customer insights run.

    Attributes:
        lookback_days: Days of sales used for features and segments (default: 30).
        recent_minutes: Window of "current" sales for real-time insights (default: 60).
        use_ai: Enrich segments with LLM persona text when a client is given.
    """

    lookback_days: int = FEATURE_LOOKBACK_DAYS
    recent_minutes: int = 60
    use_ai: bool = False


@dataclass
class InsightsResult:
    """Result of the customer insights pipeline.

    Attributes:
        features: Features DataFrame, one row per sale in the lookback window.
        clustering: Segments (enriched with persona text when AI ran).
        demand: Demand prediction for the current hour and weekday.
        daily_revenue: Revenue prediction for the current weekday.
        weekly_pattern: Per-weekday averages.
        hourly_pattern: Per-hour averages for the current weekday.
        seasonal: Payroll/weekend/month-edge multipliers.
        realtime_insights: Alerts for the current hour.
        daily_summary: Today's totals.
        metadata: Run parameters (now, hour, day, sales counts).
    """

    features: pd.DataFrame
    clustering: ClusteringResult
    demand: DemandPrediction
    daily_revenue: RevenuePrediction
    weekly_pattern: WeeklyPattern
    hourly_pattern: pd.DataFrame
    seasonal: SeasonalPatterns
    realtime_insights: list[RealTimeInsight]
    daily_summary: DailySummary
    metadata: dict[str, object] = field(default_factory=dict)


def run_customer_insights(
    source: SalesSource,
    config: Optional[InsightsConfig] = None,
    client: Optional[ChatClient] = None,
    now: Optional[datetime] = None,
) -> InsightsResult:
    """Run the customer insights pipeline in memory.

    Args:
        source: SalesStore, sequence of SaleRecord, or None.
        config: Run configuration. Defaults to InsightsConfig().
        client: Chat client used when ``config.use_ai`` is True.
        now: Reference time. Defaults to datetime.now().

    Returns:
        InsightsResult.

    Raises:
        StoreError: If the store cannot be read.

    Examples:
        >>> store = SalesStore.from_paths(StorePaths.from_root("data"))
        >>> result = run_customer_insights(store)
        >>> [s.segment_name for s in result.clustering.all_segments]
    """
    config = config or InsightsConfig()
    now = now or datetime.now()
    hour, day = now.hour, now.weekday()

    # Materialize once so every step sees the same snapshot
    sales = load_sales(source)
    logger.info("Running customer insights on %d sales (now=%s)", len(sales), now.isoformat())

    features = batch_extract_features(sales, days=config.lookback_days, now=now)
    clustering = run_all_clustering(features, now=now)

    if config.use_ai:
        cache: dict = {}
        clustering.temporal_segments = batch_analyze_segments(
            clustering.temporal_segments, features, client, cache
        )
        clustering.value_segments = batch_analyze_segments(clustering.value_segments, features, client, cache)
        clustering.preference_segments = batch_analyze_segments(
            clustering.preference_segments, features, client, cache
        )

    recent = get_recent_sales(sales, minutes=config.recent_minutes, now=now)
    realtime_insights = generate_real_time_insights(
        recent, clustering.all_segments, hour, day, source=sales, now=now
    )

    return InsightsResult(
        features=features,
        clustering=clustering,
        demand=predict_demand(sales, hour, day, now=now),
        daily_revenue=predict_daily_revenue(sales, day, now=now),
        weekly_pattern=predict_weekly_pattern(sales, now=now),
        hourly_pattern=predict_hourly_pattern(sales, day, now=now),
        seasonal=detect_seasonal_patterns(sales, now=now),
        realtime_insights=realtime_insights,
        daily_summary=get_daily_summary(sales, now=now),
        metadata={
            "now": now,
            "hour": hour,
            "day": day,
            "total_sales": len(sales),
            "recent_sales": len(recent),
            "lookback_days": config.lookback_days,
            "ai_enabled": bool(config.use_ai and client is not None and client.enabled),
        },
    )
