"""Output formatters for insight reports."""

from colmado_core.insights.formatters.console import format_insights_for_console, sanitize_for_console

__all__ = ["format_insights_for_console", "sanitize_for_console"]
