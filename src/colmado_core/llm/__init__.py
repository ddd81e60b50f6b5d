"""LLM client for narrative segment analysis."""

from colmado_core.llm.client import ChatClient, make_session

__all__ = ["ChatClient", "make_session"]
