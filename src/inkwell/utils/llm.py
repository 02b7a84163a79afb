"""
Provider-agnostic LLM client interface.

Concrete providers live in ``src.inkwell.providers``. Each one turns its
SDK's failures into AIServiceError so routes can report a consistent
category (auth, quota, safety, network, response, general).
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .errors import AIServiceError

DEFAULT_TEMPERATURE = 0.7

_JSON_FENCE_PATTERN = re.compile(r'^```(?:json)?\s*(.*?)\s*```$', re.DOTALL | re.IGNORECASE)
_SURROUNDING_QUOTES_PATTERN = re.compile(r'^["\']|["\']$')


class BaseLLMClient(ABC):
    """Interface every LLM provider implements."""

    provider_name = "llm"

    @property
    @abstractmethod
    def model_name(self) -> str:
        pass

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_response: bool = False,
    ) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: User prompt
            system_prompt: Optional system instructions
            temperature: Overrides the provider's default temperature
            max_tokens: Maximum output tokens
            json_response: Ask the model for a JSON object

        Returns:
            Generated text

        Raises:
            AIServiceError: If the provider call fails
        """
        pass

    @abstractmethod
    def check_availability(self) -> bool:
        """Return True if the configured model can be reached."""
        pass


def classify_error_message(message: str) -> str:
    """
    Guess an AI error category from an SDK error message.

    Args:
        message: Exception text

    Returns:
        One of the AIServiceError categories
    """
    text = (message or "").lower()
    if "api key" in text or "api_key" in text or "unauthenticated" in text or "permission" in text:
        return "auth"
    if "quota" in text or "rate limit" in text or "resource exhausted" in text or "429" in text:
        return "quota"
    if "safety" in text or "blocked" in text:
        return "safety"
    if "timeout" in text or "timed out" in text or "connection" in text or "network" in text:
        return "network"
    return "general"


def clean_rewrite_output(text: str) -> str:
    """Strip a single pair of surrounding quotes and whitespace from model output."""
    return _SURROUNDING_QUOTES_PATTERN.sub('', (text or "").strip()).strip()


def parse_json_response(text: str, provider: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse a model's JSON answer, tolerating a Markdown code fence around it.

    Raises:
        AIServiceError: If the text is not a JSON object
    """
    candidate = (text or "").strip()
    fenced = _JSON_FENCE_PATTERN.match(candidate)
    if fenced:
        candidate = fenced.group(1)
    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        raise AIServiceError("response", "The AI service returned invalid JSON.", provider=provider)
    if not isinstance(parsed, dict):
        raise AIServiceError("response", "The AI service returned an unexpected JSON shape.", provider=provider)
    return parsed
