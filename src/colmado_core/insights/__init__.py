"""Customer insights module.

Segments colmado transactions by time of day, basket value and product
preference, predicts demand from historical averages, and raises real-time
alerts for the shop floor.

Example:
    >>> from colmado_core import StorePaths
    >>> from colmado_core.sales import SalesStore
    >>> from colmado_core.insights import run_customer_insights
    >>>
    >>> store = SalesStore.from_paths(StorePaths.from_root("data"))
    >>> result = run_customer_insights(store)
    >>>
    >>> for segment in result.clustering.all_segments:
    ...     print(segment.segment_name, segment.transaction_count)
    >>> for insight in result.realtime_insights:
    ...     print(insight.message)

"""

from colmado_core.insights.api import InsightsConfig, InsightsResult, run_customer_insights
from colmado_core.insights.clustering import ClusteringResult, CustomerSegment, run_all_clustering
from colmado_core.insights.features import TransactionFeatures, batch_extract_features
from colmado_core.insights.realtime import RealTimeInsight

__all__ = [
    "ClusteringResult",
    "CustomerSegment",
    "InsightsConfig",
    "InsightsResult",
    "RealTimeInsight",
    "TransactionFeatures",
    "batch_extract_features",
    "run_all_clustering",
    "run_customer_insights",
]
