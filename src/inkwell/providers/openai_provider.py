"""
OpenAI LLM Provider implementation.

Uses the official ``openai`` SDK's chat completions endpoint. Literary
analysis asks for ``json_object`` output.
"""

import os
import logging
import time
from typing import Optional, List, Dict

import openai

from ..utils.llm import BaseLLMClient, DEFAULT_TEMPERATURE
from ..utils.errors import AIServiceError

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 2000
REQUEST_TIMEOUT_SECONDS = 60.0


class OpenAIProvider(BaseLLMClient):
    """Provider for the OpenAI chat completions API."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_OPENAI_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client: Optional[openai.OpenAI] = None
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (if None, uses OPENAI_API_KEY env var)
            model_name: Chat model name
            temperature: Generation temperature
            client: Pre-built SDK client (used by tests)

        Raises:
            ValueError: If no API key is configured
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key and client is None:
            raise ValueError("OPENAI_API_KEY environment variable is required")

        self._client = client or openai.OpenAI(api_key=self.api_key, timeout=REQUEST_TIMEOUT_SECONDS)
        self._model_name = model_name
        self.temperature = temperature

        logger.info(f"Initialized OpenAIProvider with model: {self._model_name}")

    @property
    def model_name(self) -> str:
        return self._model_name

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_response: bool = False,
    ) -> str:
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": self._model_name,
            "messages": messages,
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
        }
        if json_response:
            kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()
        try:
            completion = self._client.chat.completions.create(**kwargs)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"OpenAI rejected credentials: {e}")
            raise AIServiceError("auth", provider=self.provider_name)
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI rate limit or quota hit: {e}")
            raise AIServiceError("quota", provider=self.provider_name)
        except (openai.APITimeoutError, openai.APIConnectionError) as e:
            logger.error(f"OpenAI network failure: {e}")
            raise AIServiceError("network", provider=self.provider_name)
        except openai.BadRequestError as e:
            if "content_policy" in str(e) or "safety" in str(e).lower():
                raise AIServiceError("safety", provider=self.provider_name)
            logger.error(f"OpenAI rejected request: {e}")
            raise AIServiceError("general", provider=self.provider_name)
        except openai.OpenAIError as e:
            logger.error(f"OpenAI generation failed: {e}", exc_info=True)
            raise AIServiceError("general", provider=self.provider_name)

        if not completion.choices:
            raise AIServiceError("response", "The AI service returned no choices.", provider=self.provider_name)

        choice = completion.choices[0]
        if getattr(choice, "finish_reason", None) == "content_filter":
            raise AIServiceError("safety", provider=self.provider_name)

        text = choice.message.content or ""
        if not text.strip():
            raise AIServiceError("response", "The AI service returned an empty response.", provider=self.provider_name)

        logger.debug(f"OpenAI generation took {time.time() - start_time:.2f}s")
        return text.strip()

    def check_availability(self) -> bool:
        try:
            self._client.models.retrieve(self._model_name)
            return True
        except openai.OpenAIError as e:
            logger.warning(f"OpenAI model '{self._model_name}' not available: {e}")
            return False
