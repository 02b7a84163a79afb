"""
LLM Provider implementations.

This module provides concrete implementations of LLM providers:
Google Gemini (GeminiProvider) and OpenAI (OpenAIProvider).
"""

from .gemini import GeminiProvider
from .openai_provider import OpenAIProvider
from .factory import create_provider, get_provider, get_default_provider, reset_providers

__all__ = [
    "GeminiProvider",
    "OpenAIProvider",
    "create_provider",
    "get_provider",
    "get_default_provider",
    "reset_providers",
]
