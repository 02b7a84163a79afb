"""
LLM Provider Factory.

This module provides factory functions for creating and managing LLM providers.
It handles provider selection based on environment configuration and caches
one provider instance per provider name.
"""

import os
import logging
from typing import Dict, Optional

from .gemini import GeminiProvider, DEFAULT_GEMINI_MODEL
from .openai_provider import OpenAIProvider, DEFAULT_OPENAI_MODEL
from ..utils.llm import BaseLLMClient, DEFAULT_TEMPERATURE
from ..utils.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("gemini", "openai")

_providers: Dict[str, BaseLLMClient] = {}


def create_provider(provider_name: Optional[str] = None, **kwargs) -> BaseLLMClient:
    """
    Create an LLM provider instance.

    Args:
        provider_name: 'gemini' or 'openai' (None reads LLM_PROVIDER, default gemini)
        **kwargs: Provider-specific configuration (api_key, model_name, temperature)

    Returns:
        BaseLLMClient instance

    Raises:
        ValueError: If provider_name is invalid or provider cannot be created
    """
    if provider_name is None:
        provider_name = os.getenv("LLM_PROVIDER", "gemini")
    provider_name = provider_name.lower()
    temperature = kwargs.get("temperature", float(os.getenv("LLM_TEMPERATURE", str(DEFAULT_TEMPERATURE))))

    if provider_name == "gemini":
        return GeminiProvider(
            api_key=kwargs.get("api_key"),
            model_name=kwargs.get("model_name", os.getenv("LLM_MODEL", DEFAULT_GEMINI_MODEL)),
            temperature=temperature
        )
    elif provider_name == "openai":
        return OpenAIProvider(
            api_key=kwargs.get("api_key"),
            model_name=kwargs.get("model_name", os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL)),
            temperature=temperature
        )
    else:
        raise ValueError(
            f"Unknown LLM provider: {provider_name}. "
            f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
        )


def get_provider(provider_name: str) -> BaseLLMClient:
    """
    Get or create the cached provider for a name.

    Args:
        provider_name: 'gemini' or 'openai'

    Returns:
        BaseLLMClient instance

    Raises:
        ServiceUnavailableError: If the provider is unknown or not configured
    """
    key = provider_name.lower()
    if key not in _providers:
        try:
            _providers[key] = create_provider(key)
        except ValueError as e:
            logger.warning(f"LLM provider '{key}' unavailable: {e}")
            raise ServiceUnavailableError(key, f"AI provider '{key}' is not configured: {e}")
        logger.info(f"Created LLM provider: {type(_providers[key]).__name__}")
    return _providers[key]


def get_default_provider() -> BaseLLMClient:
    """
    Get or create the default LLM provider.

    Uses environment variables for configuration:
    - LLM_PROVIDER: Provider name (default: 'gemini')
    - GOOGLE_API_KEY / OPENAI_API_KEY: API key for the chosen provider
    - LLM_MODEL / OPENAI_MODEL: Model name
    - LLM_TEMPERATURE: Temperature (default: 0.7)

    Returns:
        BaseLLMClient instance
    """
    return get_provider(os.getenv("LLM_PROVIDER", "gemini"))


def reset_providers() -> None:
    """
    Drop all cached provider instances.

    This is useful for testing or when configuration changes.
    """
    _providers.clear()
    logger.info("Reset LLM providers")
