"""
Story service: writing mode and mood for a document.

Every document has exactly one story record. It is created with the
document and recreated on demand if it is ever missing.
"""

import logging
from typing import Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from src.inkwell.utils.repository import Database

from src.inkwell.models import StoryMode
from src.inkwell.moods import normalize_mood
from src.inkwell.utils.errors import ValidationError

logger = logging.getLogger(__name__)


def default_story(document_id: str) -> Dict[str, Any]:
    return {
        "document": document_id,
        "mode": StoryMode().to_record(),
        "mood": None,
    }


class StoryService:
    """Service for story mode and mood."""

    def __init__(self, database: 'Database'):
        self.stories = database["stories"]

    def ensure_story(self, document_id: str) -> Dict[str, Any]:
        """
        Get the story for a document, creating the default one if missing.

        Args:
            document_id: Owning document id (caller has checked access)

        Returns:
            Story record
        """
        story = self.stories.find_one({"document": document_id})
        if story is None:
            story = self.stories.insert(default_story(document_id))
            logger.info(f"Created story {story['_id']} for document {document_id}")
        return story

    def find_story(self, document_id: str) -> Dict[str, Any]:
        """Get the story for a document without creating it; defaults if missing."""
        return self.stories.find_one({"document": document_id}) or default_story(document_id)

    def update_mode(self, document_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Set the narrative/dialogue balance.

        Args:
            document_id: Owning document id
            data: Body with ``narrative`` and ``dialogue`` integers in 0..100

        Returns:
            Updated story record
        """
        mode = StoryMode.model_validate(data).to_record()
        story = self.ensure_story(document_id)
        story["mode"] = mode
        return self.stories.replace(story["_id"], story) or story

    def update_mood(self, document_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Set or clear the story mood.

        Args:
            document_id: Owning document id
            data: Body with ``mood`` as a preset name, a mood object or null

        Returns:
            Updated story record

        Raises:
            ValidationError: If the body has no mood key or the mood is invalid
        """
        if "mood" not in data:
            raise ValidationError("Mood is required", details={"field": "mood"})
        mood = normalize_mood(data["mood"])
        story = self.ensure_story(document_id)
        story["mood"] = mood
        return self.stories.replace(story["_id"], story) or story
