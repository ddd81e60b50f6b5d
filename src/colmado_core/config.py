"""Unified configuration for colmado_core.

This module provides the filesystem layout used by the sales store and
the settings read from environment variables (LLM credentials, timeouts).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from colmado_core.exceptions import ConfigError

DEFAULT_LLM_URL = "https://api.x.ai/v1/chat/completions"
DEFAULT_LLM_MODEL = "grok-3-fast"


@dataclass
class StorePaths:
    """All filesystem paths used by the sales store.

    Attributes:
        data_root: Root directory for the colmado data.

    Directory Structure:
        data_root/
        ├── sales.json       # sales collection (one JSON document per sale)
        ├── imports/         # history files waiting to be imported
        └── reports/         # console/CSV reports written by the CLI
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> StorePaths:
        """Create StorePaths from a root directory.

        Args:
            data_root: Root directory for colmado data.

        Returns:
            StorePaths instance.

        Examples:
            >>> paths = StorePaths.from_root("data")
            >>> paths.sales_collection
            PosixPath('data/sales.json')
        """
        if isinstance(data_root, str):
            data_root = Path(data_root)
        return cls(data_root=data_root)

    @property
    def sales_collection(self) -> Path:
        """JSON document collection holding every sale."""
        return self.data_root / "sales.json"

    @property
    def imports(self) -> Path:
        """Directory for CSV/Excel history files."""
        return self.data_root / "imports"

    @property
    def reports(self) -> Path:
        """Directory for generated reports."""
        return self.data_root / "reports"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [self.data_root, self.imports, self.reports]:
            path.mkdir(parents=True, exist_ok=True)


@dataclass
class InsightsSettings:
    """Runtime settings read from the environment.

    Attributes:
        api_key: xAI API key used for segment persona generation. None disables
            LLM calls (fallback text is used instead).
        llm_url: Chat-completions endpoint.
        llm_model: Model name sent with each request.
        llm_timeout: Request timeout in seconds.
        llm_retries: Retry attempts on 429/5xx responses.
        data_root: Default data root for the CLI.
    """

    api_key: str | None = None
    llm_url: str = DEFAULT_LLM_URL
    llm_model: str = DEFAULT_LLM_MODEL
    llm_timeout: float = 30.0
    llm_retries: int = 2
    data_root: Path = Path("data")

    @classmethod
    def from_env(cls) -> InsightsSettings:
        """Build settings from environment variables.

        Reads XAI_API_KEY, COLMADO_LLM_URL, COLMADO_LLM_MODEL, COLMADO_LLM_TIMEOUT,
        COLMADO_LLM_RETRIES and COLMADO_DATA_ROOT.

        Raises:
            ConfigError: If a numeric variable cannot be parsed.
        """
        try:
            timeout = float(os.environ.get("COLMADO_LLM_TIMEOUT", "30"))
            retries = int(os.environ.get("COLMADO_LLM_RETRIES", "2"))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric LLM setting: {e}") from e

        return cls(
            api_key=os.environ.get("XAI_API_KEY") or None,
            llm_url=os.environ.get("COLMADO_LLM_URL", DEFAULT_LLM_URL),
            llm_model=os.environ.get("COLMADO_LLM_MODEL", DEFAULT_LLM_MODEL),
            llm_timeout=timeout,
            llm_retries=retries,
            data_root=Path(os.environ.get("COLMADO_DATA_ROOT", "data")),
        )
