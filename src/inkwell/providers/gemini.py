"""
Google Gemini LLM Provider implementation.

This module provides the GeminiProvider class for interacting with
Google's Generative AI models. All Gemini-specific code is isolated here.
"""

import os
import logging
import time
from typing import Optional, List, Dict

import google.generativeai as genai  # type: ignore[import-untyped]
from google.api_core import exceptions as google_exceptions  # type: ignore[import-untyped]

from ..utils.llm import BaseLLMClient, DEFAULT_TEMPERATURE, classify_error_message
from ..utils.errors import AIServiceError

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_TOP_K = 40
DEFAULT_TOP_P = 0.95
DEFAULT_MAX_OUTPUT_TOKENS = 1024

SAFETY_CATEGORIES: List[str] = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]

# Fiction routinely depicts conflict and violence; only block high-probability harm
SAFETY_SETTINGS: List[Dict[str, str]] = [
    {"category": category, "threshold": "BLOCK_ONLY_HIGH"} for category in SAFETY_CATEGORIES
]


def _normalize_model_name(model_name: str) -> str:
    base_name = model_name.replace("models/", "")
    if not base_name:
        raise ValueError("Gemini model name must not be empty")
    return base_name


class GeminiProvider(BaseLLMClient):
    """
    Provider for interacting with Google Gemini API.

    Implements the BaseLLMClient interface on top of
    ``google.generativeai``. SDK exceptions are mapped to AIServiceError
    categories so callers never see Google-specific types.
    """

    provider_name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        temperature: float = DEFAULT_TEMPERATURE
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Google API key (if None, uses GOOGLE_API_KEY env var)
            model_name: Model name (default: gemini-1.5-flash)
            temperature: Generation temperature (default: 0.7)

        Raises:
            ValueError: If no API key is configured or the model name is empty
        """
        self.api_key = api_key or os.getenv("GOOGLE_API_KEY")
        if not self.api_key:
            raise ValueError("GOOGLE_API_KEY environment variable is required")

        genai.configure(api_key=self.api_key)
        self._model_name = _normalize_model_name(model_name)
        self.temperature = temperature

        logger.info(f"Initialized GeminiProvider with model: {self._model_name}")

    @property
    def model_name(self) -> str:
        """Get the model name being used by this provider."""
        return self._model_name

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_response: bool = False,
    ) -> str:
        """
        Generate text using the configured Gemini model.

        Args:
            prompt: User prompt
            system_prompt: Optional system instruction
            temperature: Generation temperature (overrides instance default)
            max_tokens: Maximum output tokens (default: 1024)
            json_response: Request ``application/json`` output

        Returns:
            Generated text

        Raises:
            AIServiceError: If generation fails or the response is blocked
        """
        start_time = time.time()
        generation_config = genai.GenerationConfig(
            temperature=temperature if temperature is not None else self.temperature,
            top_k=DEFAULT_TOP_K,
            top_p=DEFAULT_TOP_P,
            max_output_tokens=max_tokens or DEFAULT_MAX_OUTPUT_TOKENS,
            response_mime_type="application/json" if json_response else None,
        )

        try:
            model = genai.GenerativeModel(
                self._model_name,
                system_instruction=system_prompt,
                safety_settings=SAFETY_SETTINGS,
            )
            response = model.generate_content(prompt, generation_config=generation_config)
        except (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied) as e:
            logger.error(f"Gemini rejected credentials: {e}")
            raise AIServiceError("auth", provider=self.provider_name)
        except google_exceptions.ResourceExhausted as e:
            logger.warning(f"Gemini quota exhausted: {e}")
            raise AIServiceError("quota", provider=self.provider_name)
        except (google_exceptions.DeadlineExceeded, google_exceptions.ServiceUnavailable,
                ConnectionError, TimeoutError) as e:
            logger.error(f"Gemini network failure: {e}")
            raise AIServiceError("network", provider=self.provider_name)
        except Exception as e:
            # InvalidArgument covers "API key not valid" as well as bad requests
            category = classify_error_message(str(e))
            logger.error(f"Gemini generation failed ({category}): {e}", exc_info=True)
            raise AIServiceError(category, provider=self.provider_name)

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            logger.warning(f"Gemini blocked prompt: {feedback.block_reason}")
            raise AIServiceError("safety", provider=self.provider_name)

        try:
            text = response.text
        except ValueError as e:
            # Raised by the SDK when the only candidate was stopped for safety
            logger.warning(f"Gemini returned no text: {e}")
            raise AIServiceError("safety", provider=self.provider_name)

        if not text or not text.strip():
            raise AIServiceError("response", "The AI service returned an empty response.", provider=self.provider_name)

        logger.debug(f"Gemini generation took {time.time() - start_time:.2f}s")
        return text.strip()

    def check_availability(self) -> bool:
        """
        Check if the configured model is available.

        Returns:
            True if the model can be looked up with the current API key
        """
        try:
            genai.get_model(f"models/{self._model_name}")
            return True
        except Exception as e:
            logger.warning(f"Gemini model '{self._model_name}' not available: {e}")
            return False
