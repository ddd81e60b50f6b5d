"""Colmado Core - sales storage, customer insights and QA for Dominican colmados.

This package provides a small, domain-oriented API for a neighbourhood
mini-market's point-of-sale data:

Module Structure:
    colmado_core.sales: Sales records, JSON store, history import, tabular grains
    colmado_core.insights: Features, segmentation, predictions, real-time alerts
    colmado_core.qa: Data quality assurance
    colmado_core.llm: Chat-completions client for narrative segment analysis
    colmado_core.config: StorePaths and InsightsSettings

Quick Start:
    >>> from colmado_core import StorePaths
    >>> from colmado_core.sales import SalesStore, get_sales
    >>> from colmado_core.insights import run_customer_insights
    >>> from colmado_core.qa import run_sales_qa
    >>>
    >>> store = SalesStore.from_paths(StorePaths.from_root("data"))
    >>>
    >>> # QA on the ticket mart
    >>> qa = run_sales_qa(get_sales(store, grain="ticket"))
    >>>
    >>> # Segments, predictions and alerts
    >>> result = run_customer_insights(store)
    >>> print(result.daily_summary)

Grain Reference:
    Sales:
        - item: one row per line item
        - ticket: one row per sale
        - daily: one row per operating date
"""

__version__ = "0.1.0"

from colmado_core.config import InsightsSettings, StorePaths
from colmado_core.exceptions import (
    AIAnalysisError,
    ColmadoError,
    ConfigError,
    DataQualityError,
    StoreError,
)

__all__ = [
    "AIAnalysisError",
    "ColmadoError",
    "ConfigError",
    "DataQualityError",
    "InsightsSettings",
    "StoreError",
    "StorePaths",
    "__version__",
]
