"""
AI service for rewriting passages and literary analysis.

Calls go straight to the configured provider: no retries, batching or
caching. Rewrites default to Gemini and analysis to OpenAI; both are
configurable per app.
"""

import logging
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .document_service import DocumentService
    from .story_service import StoryService

from src.inkwell.models import AnalyzeSceneRequest, AnalyzeStoryRequest, RewriteRequest
from src.inkwell.moods import describe_mood
from src.inkwell.providers import factory as provider_factory
from src.inkwell.utils.html_text import html_to_text
from src.inkwell.utils.llm import BaseLLMClient, clean_rewrite_output, parse_json_response
from src.inkwell.utils.prompt_builder import (
    ANALYSIS_SYSTEM_PROMPT,
    SCENE_ANALYSIS_SYSTEM_PROMPT,
    RewriteParams,
    build_rewrite_prompt,
    build_scene_analysis_prompt,
    build_story_analysis_prompt,
)

logger = logging.getLogger(__name__)

REWRITE_TEMPERATURE = 0.7
REWRITE_MAX_TOKENS = 1024
STORY_ANALYSIS_MAX_TOKENS = 2000
SCENE_ANALYSIS_MAX_TOKENS = 1000


class AIService:
    """Service for AI rewriting and analysis."""

    def __init__(
        self,
        document_service: 'DocumentService',
        story_service: 'StoryService',
        rewrite_provider: str = "gemini",
        analysis_provider: str = "openai",
        provider_lookup: Optional[Callable[[str], BaseLLMClient]] = None
    ):
        """
        Initialize AI service.

        Args:
            document_service: Used to check access when a documentId is given
            story_service: Supplies the story mood for rewrites
            rewrite_provider: Provider name for rewrites
            analysis_provider: Provider name for analysis
            provider_lookup: Callable returning a provider by name (defaults to the factory cache)
        """
        self.document_service = document_service
        self.story_service = story_service
        self.rewrite_provider = rewrite_provider
        self.analysis_provider = analysis_provider
        self._provider_lookup = provider_lookup

    def _provider(self, name: str) -> BaseLLMClient:
        lookup = self._provider_lookup or provider_factory.get_provider
        return lookup(name)

    def rewrite(self, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Rewrite a selected passage with the requested tone, style and pacing.

        Args:
            uid: Caller uid
            data: Body with ``text`` (10..1000 chars), ``options`` and optional ``documentId``

        Returns:
            Dictionary with rewritten ``text``, the ``original`` and the applied ``options``

        Raises:
            AIServiceError: If the provider fails
            ServiceUnavailableError: If the provider is not configured
        """
        request = RewriteRequest.model_validate(data)
        options = request.options.to_record()

        mood = None
        if request.document_id:
            self.document_service.require_readable(request.document_id, uid)
            mood = describe_mood(self.story_service.find_story(request.document_id).get("mood"))

        prompt = build_rewrite_prompt(RewriteParams.from_options(request.text, options, mood=mood))
        provider = self._provider(self.rewrite_provider)
        logger.info(
            f"Rewriting {len(request.text)} chars with {provider.provider_name} "
            f"(tone={options['tone']}, style={options['style']}, preview={options['isPreview']})"
        )
        output = provider.generate(prompt, temperature=REWRITE_TEMPERATURE, max_tokens=REWRITE_MAX_TOKENS)

        return {
            "text": clean_rewrite_output(output),
            "original": request.text,
            "options": options,
        }

    def analyze_story(self, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Analyze a whole story and its scenes.

        Returns:
            Analysis JSON (summary, themes, characterAnalysis, plotStructure,
            settingAnalysis, scenes)
        """
        request = AnalyzeStoryRequest.model_validate(data)
        if request.document_id:
            self.document_service.require_readable(request.document_id, uid)

        scenes = [scene.to_record() for scene in request.scenes]
        prompt = build_story_analysis_prompt(html_to_text(request.content), scenes)
        provider = self._provider(self.analysis_provider)
        logger.info(f"Analyzing story ({len(request.content)} chars, {len(scenes)} scenes) with {provider.provider_name}")
        output = provider.generate(
            prompt,
            system_prompt=ANALYSIS_SYSTEM_PROMPT,
            max_tokens=STORY_ANALYSIS_MAX_TOKENS,
            json_response=True,
        )
        return parse_json_response(output, provider=provider.provider_name)

    def analyze_scene(self, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Analyze a single scene.

        Returns:
            Analysis JSON (summary, keyEvents, characterDevelopment,
            thematicElements, settingImpact)
        """
        request = AnalyzeSceneRequest.model_validate(data)
        if request.document_id:
            self.document_service.require_readable(request.document_id, uid)

        prompt = build_scene_analysis_prompt(request.scene.to_record(), html_to_text(request.content))
        provider = self._provider(self.analysis_provider)
        output = provider.generate(
            prompt,
            system_prompt=SCENE_ANALYSIS_SYSTEM_PROMPT,
            max_tokens=SCENE_ANALYSIS_MAX_TOKENS,
            json_response=True,
        )
        return parse_json_response(output, provider=provider.provider_name)
