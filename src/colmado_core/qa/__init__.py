"""QA module for sales data quality.

Example:
    >>> from colmado_core import StorePaths
    >>> from colmado_core.sales import SalesStore, get_sales
    >>> from colmado_core.qa import run_sales_qa
    >>>
    >>> store = SalesStore.from_paths(StorePaths.from_root("data"))
    >>> tickets = get_sales(store, "2025-01-01", "2025-01-31")
    >>>
    >>> result = run_sales_qa(tickets)
    >>> print(result.summary)
    >>> if result.total_mismatches is not None:
    ...     print(result.total_mismatches)

"""

from colmado_core.qa.api import SalesQAResult, run_sales_qa

__all__ = ["SalesQAResult", "run_sales_qa"]
