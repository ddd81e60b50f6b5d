"""Sales domain module.

This module stores sales and loads them at different grains:

- **item lines** (grain="item"): one row per line item with its product category.
- **tickets** (grain="ticket"): one row per sale with calendar helper columns.
- **daily** (grain="daily"): one row per operating date with revenue and ticket count.

Example:
    >>> from colmado_core import StorePaths
    >>> from colmado_core.sales import SalesStore, get_sales, import_sales
    >>>
    >>> store = SalesStore.from_paths(StorePaths.from_root("data"))
    >>> import_sales("ventas_2024.xlsx", store)
    >>>
    >>> tickets = get_sales(store, "2025-01-01", "2025-01-31")
    >>> daily = get_sales(store, "2025-01-01", "2025-01-31", grain="daily")
"""

from colmado_core.sales.api import get_sales
from colmado_core.sales.categories import categorize_product
from colmado_core.sales.history_import import ImportResult, import_sales, suggest_column_mappings
from colmado_core.sales.records import SaleItem, SaleRecord
from colmado_core.sales.store import SalesSource, SalesStore, load_sales

__all__ = [
    "ImportResult",
    "SaleItem",
    "SaleRecord",
    "SalesSource",
    "SalesStore",
    "categorize_product",
    "get_sales",
    "import_sales",
    "load_sales",
    "suggest_column_mappings",
]
