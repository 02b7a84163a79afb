"""
Flask route handlers for the Inkwell API.

Documents, stories and characters live here; the per-document toolbox
records and AI endpoints are registered from their own modules.
"""

import logging
import time
from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flask import Flask
    from flask_limiter import Limiter

from flask import jsonify, current_app, request

from src.inkwell.auth import require_auth, current_uid
from src.inkwell.exports import export_document
from src.inkwell.models import TrackingToggle
from src.inkwell.services.document_service import DEFAULT_PER_PAGE
from src.inkwell.utils.repository import utc_now
from .helpers import get_service, get_json_body, get_pagination_args
from .toolbox_routes import register_toolbox_routes
from .ai_routes import register_ai_routes

logger = logging.getLogger(__name__)


def register_routes(flask_app: 'Flask', limiter_instance: 'Limiter') -> None:
    """
    Register all application routes.

    Args:
        flask_app: Flask application instance
        limiter_instance: Limiter instance for rate limiting
    """
    register_health_routes(flask_app, limiter_instance)
    register_document_routes(flask_app, limiter_instance)
    register_story_routes(flask_app, limiter_instance)
    register_character_routes(flask_app, limiter_instance)
    register_toolbox_routes(flask_app, limiter_instance)
    register_ai_routes(flask_app, limiter_instance)


def register_health_routes(flask_app: 'Flask', limiter_instance: 'Limiter') -> None:

    @flask_app.route('/api/health')
    @limiter_instance.exempt
    def health():
        """
        Health check endpoint.

        Returns:
            JSON response with status "ok", the server time and uptime in seconds
        """
        started_at = current_app.extensions["inkwell"]["started_at"]
        return jsonify({
            "status": "ok",
            "timestamp": utc_now(),
            "uptime": round(time.time() - started_at, 3),
        })

    @flask_app.route('/api/routes')
    def list_routes():
        """List registered API paths grouped by resource."""
        grouped = defaultdict(lambda: defaultdict(set))
        for rule in flask_app.url_map.iter_rules():
            if not rule.rule.startswith('/api/'):
                continue
            resource = rule.rule.split('/')[2]
            grouped[resource][rule.rule].update(m for m in rule.methods if m not in ('HEAD', 'OPTIONS'))
        return jsonify({"routes": {
            resource: [{"path": path, "methods": sorted(methods)} for path, methods in sorted(paths.items())]
            for resource, paths in sorted(grouped.items())
        }})


def register_document_routes(flask_app: 'Flask', limiter_instance: 'Limiter') -> None:

    @flask_app.route('/api/documents', methods=['GET'])
    @require_auth
    def list_documents():
        """
        List documents with pagination.

        Query Parameters:
            - mode: 'public' (default) or 'private' (the caller's own documents)
            - page: Page number (default: 1)
            - per_page: Items per page (default: 20, max: 100)

        Returns:
            JSON response with 'documents' and 'pagination'
        """
        mode = request.args.get('mode', 'public', type=str)
        result = get_service("documents").list_documents(
            current_uid(), mode=mode, **get_pagination_args(DEFAULT_PER_PAGE)
        )
        return jsonify(result)

    @flask_app.route('/api/documents/<document_id>', methods=['GET'])
    @require_auth
    def get_document(document_id: str):
        """
        Get a document by ID.

        Returns:
            JSON document with ``wordCount``

        Raises:
            NotFoundError: If the document doesn't exist
            AuthorizationError: If the caller is neither owner nor the document is public
        """
        return jsonify(get_service("documents").get_for_reader(document_id, current_uid()))

    @flask_app.route('/api/documents', methods=['POST'])
    @limiter_instance.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
    @require_auth
    def create_document():
        """
        Create a document owned by the caller.

        Request Body (JSON):
            - title (str, required)
            - content (str, optional): Editor HTML
            - visibility (str, optional): 'private' (default) or 'public'
        """
        document = get_service("documents").create_document(current_uid(), get_json_body())
        return jsonify(document), 201

    @flask_app.route('/api/documents/<document_id>', methods=['PUT'])
    @limiter_instance.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
    @require_auth
    def update_document(document_id: str):
        """Partially update a document (autosave). Owner only."""
        document = get_service("documents").update_document(document_id, current_uid(), get_json_body())
        return jsonify(document)

    @flask_app.route('/api/documents/<document_id>', methods=['DELETE'])
    @require_auth
    def delete_document(document_id: str):
        """Delete a document and its toolbox records. Owner only."""
        get_service("documents").delete_document(document_id, current_uid())
        return jsonify({"message": "Document deleted"})

    @flask_app.route('/api/documents/<document_id>/export/<format_type>', methods=['GET'])
    @limiter_instance.limit(lambda: current_app.config["EXPORT_RATE_LIMIT"])
    @require_auth
    def export_document_file(document_id: str, format_type: str):
        """
        Export a readable document as a file download.

        Args:
            format_type: pdf, markdown, txt, docx or epub
        """
        document = get_service("documents").require_readable(document_id, current_uid())
        return export_document(document, format_type)


def register_story_routes(flask_app: 'Flask', limiter_instance: 'Limiter') -> None:

    @flask_app.route('/api/stories/document/<document_id>', methods=['GET'])
    @require_auth
    def get_story(document_id: str):
        """Get the story (mode and mood) for a document, creating it if missing."""
        get_service("documents").require_readable(document_id, current_uid())
        return jsonify(get_service("stories").ensure_story(document_id))

    @flask_app.route('/api/stories/document/<document_id>/mode', methods=['PUT'])
    @limiter_instance.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
    @require_auth
    def update_story_mode(document_id: str):
        """
        Set the narrative/dialogue balance.

        Request Body (JSON):
            - narrative (int, 0-100)
            - dialogue (int, 0-100)
        """
        get_service("documents").require_owner(document_id, current_uid())
        return jsonify(get_service("stories").update_mode(document_id, get_json_body()))

    @flask_app.route('/api/stories/document/<document_id>/mood', methods=['PUT'])
    @limiter_instance.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
    @require_auth
    def update_story_mood(document_id: str):
        """
        Set the story mood.

        Request Body (JSON):
            - mood: preset name, ``{"type": "custom", "custom": "..."}`` or null
        """
        get_service("documents").require_owner(document_id, current_uid())
        return jsonify(get_service("stories").update_mood(document_id, get_json_body()))


def register_character_routes(flask_app: 'Flask', limiter_instance: 'Limiter') -> None:

    @flask_app.route('/api/characters/document/<document_id>', methods=['GET'])
    @require_auth
    def list_characters(document_id: str):
        """Characters of a document, sorted by name."""
        return jsonify(get_service("characters").list_for_document(document_id, current_uid()))

    @flask_app.route('/api/characters/document/<document_id>/tracking', methods=['PUT'])
    @require_auth
    def set_character_tracking(document_id: str):
        """Toggle character tracking for a document. Body: ``{"enabled": bool}``."""
        toggle = TrackingToggle.model_validate(get_json_body())
        document = get_service("documents").set_character_tracking(document_id, current_uid(), toggle.enabled)
        return jsonify(document)

    @flask_app.route('/api/characters/<character_id>', methods=['GET'])
    @require_auth
    def get_character(character_id: str):
        return jsonify(get_service("characters").get_character(character_id, current_uid()))

    @flask_app.route('/api/characters', methods=['POST'])
    @limiter_instance.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
    @require_auth
    def create_character():
        """
        Create a character.

        Request Body (JSON):
            - name (str, required): Unique within the document
            - document (str, required): Owning document ID
            - description, traits, relationships, backstory, notes, appearances, metadata

        Raises:
            ConflictError: If the name is already used in the document
        """
        character = get_service("characters").create_character(current_uid(), get_json_body())
        return jsonify(character), 201

    @flask_app.route('/api/characters/<character_id>', methods=['PUT'])
    @limiter_instance.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
    @require_auth
    def update_character(character_id: str):
        character = get_service("characters").update_character(character_id, current_uid(), get_json_body())
        return jsonify(character)

    @flask_app.route('/api/characters/<character_id>', methods=['DELETE'])
    @require_auth
    def delete_character(character_id: str):
        get_service("characters").delete_character(character_id, current_uid())
        return jsonify({"message": "Character deleted"})

    @flask_app.route('/api/characters/<character_id>/relationships', methods=['POST'])
    @limiter_instance.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
    @require_auth
    def add_relationship(character_id: str):
        """
        Add a relationship to another character in the same document.

        Request Body (JSON):
            - character (str, required): Related character ID
            - relationshipType (str, required)
            - description (str, optional)
        """
        character = get_service("characters").add_relationship(character_id, current_uid(), get_json_body())
        return jsonify(character), 201

    @flask_app.route('/api/characters/<character_id>/relationships/<relationship_id>', methods=['DELETE'])
    @require_auth
    def remove_relationship(character_id: str, relationship_id: str):
        character = get_service("characters").remove_relationship(character_id, relationship_id, current_uid())
        return jsonify(character)
