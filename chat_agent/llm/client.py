"""
LLM client factory

Creates the chat model and the raw OpenAI client from provider configuration.
"""

from typing import Optional

from loguru import logger
from openai import OpenAI

from chat_agent.config.settings import settings


def log_llm_configuration() -> None:
    """Log which provider/model the service will talk to (called on startup)."""
    if settings.llm_provider != "openai":
        logger.warning(f"Unknown LLM provider: {settings.llm_provider}. Supported: 'openai'")
        return
    if settings.openai_api_key:
        key = settings.openai_api_key
        masked_key = key[:8] + "..." + key[-4:] if len(key) > 12 else "***"
        logger.info(f"LLM Provider: OpenAI | Model: {settings.openai_model} | API key loaded: {masked_key}")
    else:
        logger.warning("LLM Provider: OpenAI but OPENAI_API_KEY not set - API calls will fail!")


def _require_api_key() -> str:
    if settings.llm_provider.lower() != "openai":
        raise ValueError(f"Unsupported LLM provider: {settings.llm_provider}. Supported: 'openai'")
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER=openai")
    return settings.openai_api_key


def create_llm(
    temperature: Optional[float] = None,
    max_completion_tokens: Optional[int] = None,
    model: Optional[str] = None,
    timeout: Optional[float] = None,
):
    """
    Factory function to create the chat model used by the agents.

    Args:
        temperature: Generation temperature (defaults to settings.openai_temperature)
        max_completion_tokens: Max tokens for completion (defaults to settings.max_output_tokens)
        model: Model name (defaults to settings.openai_model)
        timeout: Per-request wall-clock timeout in seconds

    Returns:
        LangChain ChatOpenAI instance
    """
    from langchain_openai import ChatOpenAI

    api_key = _require_api_key()

    # No automatic retries: failures become fail-soft replies instead
    return ChatOpenAI(
        model=model or settings.openai_model,
        api_key=api_key,
        temperature=temperature if temperature is not None else settings.openai_temperature,
        max_completion_tokens=max_completion_tokens or settings.max_output_tokens,
        timeout=timeout if timeout is not None else settings.llm_timeout_seconds,
        max_retries=0,
    )


def create_openai_client(timeout: Optional[float] = None) -> OpenAI:
    """Raw OpenAI client for embeddings and audio endpoints."""
    return OpenAI(
        api_key=_require_api_key(),
        timeout=timeout if timeout is not None else settings.llm_timeout_seconds,
        max_retries=0,
    )
