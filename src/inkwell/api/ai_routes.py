"""
AI rewriting and analysis routes.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flask import Flask
    from flask_limiter import Limiter

from flask import jsonify, current_app

from src.inkwell.auth import require_auth, current_uid
from .helpers import get_service, get_json_body

logger = logging.getLogger(__name__)


def register_ai_routes(flask_app: 'Flask', limiter_instance: 'Limiter') -> None:
    """
    Register AI routes.

    Args:
        flask_app: Flask application instance
        limiter_instance: Limiter instance for rate limiting
    """

    @flask_app.route('/api/ai/rewrite', methods=['POST'])
    @limiter_instance.limit(lambda: current_app.config["AI_REWRITE_RATE_LIMIT"])
    @require_auth
    def rewrite_text():
        """
        Rewrite a selected passage.

        Request Body (JSON):
            - text (str, required): 10-1000 characters
            - options (dict, optional):
                - tone: whimsical, serious, mysterious, humorous, dramatic, adventurous, neutral
                - style: narrative, descriptive, dialogue-heavy, action-focused, emotional,
                  minimalist, poetic
                - audience (str), pacing (int 0-100), keepContext (bool), isPreview (bool)
            - documentId (str, optional): Use this document's mood as context

        Returns:
            JSON response ``{"text", "original", "options"}``

        Raises:
            ValidationError: If text or options are invalid
            AIServiceError: If the provider call fails
            ServiceUnavailableError: If no provider is configured
        """
        return jsonify(get_service("ai").rewrite(current_uid(), get_json_body()))

    @flask_app.route('/api/ai/analyze-story', methods=['POST'])
    @limiter_instance.limit(lambda: current_app.config["AI_ANALYSIS_RATE_LIMIT"])
    @require_auth
    def analyze_story():
        """
        Literary analysis of a whole story.

        Request Body (JSON):
            - content (str, required): Story HTML or text
            - scenes (list, optional): Scene objects
            - documentId (str, optional)
        """
        return jsonify(get_service("ai").analyze_story(current_uid(), get_json_body()))

    @flask_app.route('/api/ai/analyze-scene', methods=['POST'])
    @limiter_instance.limit(lambda: current_app.config["AI_ANALYSIS_RATE_LIMIT"])
    @require_auth
    def analyze_scene():
        """
        Analysis of a single scene.

        Request Body (JSON):
            - scene (dict, required)
            - content (str, optional): Surrounding story text
            - documentId (str, optional)
        """
        return jsonify(get_service("ai").analyze_scene(current_uid(), get_json_body()))
