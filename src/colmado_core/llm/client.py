"""Chat-completions HTTP client.

Talks to an OpenAI-compatible ``/chat/completions`` endpoint (xAI by
default) with a bearer key. Transient failures (429 and 5xx) are retried by
the session's urllib3 Retry adapter; anything left over is raised as
AIAnalysisError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from colmado_core.config import DEFAULT_LLM_MODEL, DEFAULT_LLM_URL, InsightsSettings
from colmado_core.exceptions import AIAnalysisError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 2


def make_session(
    timeout: float = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES
) -> requests.Session:
    """Create a requests Session with retry logic and default timeout.

    Configures the session with:
    - Retry adapter for HTTP/HTTPS with exponential backoff
    - Default timeout for all requests
    - Retries on 429, 500, 502, 503, 504 status codes

    Args:
        timeout: Default timeout in seconds for all requests.
        retries: Number of retry attempts.

    Returns:
        Configured requests.Session object.
    """
    s = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,  # 0.8, 1.6, 3.2, ...
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"POST"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    # Default timeouts via a wrapper
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


class ChatClient:
    """Minimal chat-completions client.

    Example:
        >>> client = ChatClient.from_settings(InsightsSettings.from_env())
        >>> client.complete([{"role": "user", "content": "Hola"}])
    """

    def __init__(
        self,
        api_key: Optional[str],
        url: str = DEFAULT_LLM_URL,
        model: str = DEFAULT_LLM_MODEL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.model = model
        self.session = session or make_session(timeout=timeout, retries=retries)

    @classmethod
    def from_settings(cls, settings: InsightsSettings) -> ChatClient:
        return cls(
            api_key=settings.api_key,
            url=settings.llm_url,
            model=settings.llm_model,
            timeout=settings.llm_timeout,
            retries=settings.llm_retries,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Send a chat request and return the first choice's content.

        Args:
            messages: Chat messages (``role``/``content`` dicts).
            temperature: Sampling temperature.
            max_tokens: Optional completion token cap.

        Returns:
            The assistant message content.

        Raises:
            AIAnalysisError: If no API key is configured, the request fails,
                the endpoint returns an error status or the body has no content.
        """
        if not self.enabled:
            raise AIAnalysisError("No API key configured for the LLM client")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        logger.debug("POST %s (model=%s, %d message(s))", self.url, self.model, len(messages))
        try:
            response = self.session.post(self.url, json=payload, headers=headers)
        except requests.RequestException as e:
            raise AIAnalysisError(f"LLM request failed: {e}") from e

        if response.status_code >= 400:
            raise AIAnalysisError(f"LLM API error: {response.status_code} {response.text[:200]}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AIAnalysisError(f"Invalid response format from LLM: {e}") from e

        if not content:
            raise AIAnalysisError("No response content")
        return content
