"""
Character service.

Characters belong to one document and are readable by anyone who can read
that document. Names are unique within a document. Deleting a character
also removes every relationship and plot reference that points at it.
"""

import logging
from typing import Dict, Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from src.inkwell.utils.repository import Database
    from .document_service import DocumentService

from src.inkwell.models import CharacterCreate, CharacterUpdate, Relationship
from src.inkwell.utils.errors import ConflictError, NotFoundError, ValidationError
from src.inkwell.utils.repository import ASCENDING, validate_id
from .embedded import find_item, stamp_nested

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "A character with this name already exists in this document"


class CharacterService:
    """Service for character CRUD and relationships."""

    def __init__(self, database: 'Database', document_service: 'DocumentService'):
        self.database = database
        self.characters = database["characters"]
        self.document_service = document_service

    def _load(self, character_id: str) -> Dict[str, Any]:
        validate_id(character_id)
        character = self.characters.get(character_id)
        if not character:
            raise NotFoundError("Character", character_id)
        return character

    def _check_unique_name(self, document_id: str, name: str, exclude_id: Optional[str] = None) -> None:
        existing = self.characters.find_one({"document": document_id, "name": name})
        if existing and existing["_id"] != exclude_id:
            raise ConflictError(DUPLICATE_NAME_MESSAGE, details={"name": name})

    def _check_relationships(self, character_id: Optional[str], document_id: str, relationships: List[Dict[str, Any]]) -> None:
        for relationship in relationships:
            target_id = relationship["character"]
            if target_id == character_id:
                raise ValidationError("A character cannot have a relationship with itself")
            target = self.characters.get(target_id)
            if not target or target.get("document") != document_id:
                raise ValidationError(
                    "Related character must belong to the same document",
                    details={"character": target_id}
                )

    def list_for_document(self, document_id: str, uid: str) -> List[Dict[str, Any]]:
        """All characters of a readable document, sorted by name."""
        self.document_service.require_readable(document_id, uid)
        return self.characters.find({"document": document_id}, sort=[("name", ASCENDING)])

    def get_character(self, character_id: str, uid: str) -> Dict[str, Any]:
        character = self._load(character_id)
        self.document_service.require_readable(character["document"], uid)
        return character

    def create_character(self, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a character in a document the caller owns.

        Raises:
            ConflictError: If the document already has a character with that name
        """
        payload = CharacterCreate.model_validate(data).to_record()
        document_id = payload["document"]
        self.document_service.require_owner(document_id, uid)
        self._check_unique_name(document_id, payload["name"])
        self._check_relationships(None, document_id, payload["relationships"])
        payload["relationships"] = [stamp_nested(r) for r in payload["relationships"]]

        character = self.characters.insert(payload)
        logger.info(f"Created character {character['_id']} in document {document_id}")
        return character

    def update_character(self, character_id: str, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update to a character."""
        character = self._load(character_id)
        document_id = character["document"]
        self.document_service.require_owner(document_id, uid)

        updates = CharacterUpdate.model_validate(data).to_record(partial=True)
        if "name" in updates and updates["name"] != character.get("name"):
            self._check_unique_name(document_id, updates["name"], exclude_id=character_id)
        if "relationships" in updates:
            self._check_relationships(character_id, document_id, updates["relationships"])
            updates["relationships"] = [stamp_nested(dict(r, _id=r.get("_id"))) for r in updates["relationships"]]

        character.update(updates)
        return self.characters.replace(character_id, character) or character

    def delete_character(self, character_id: str, uid: str) -> None:
        """Delete a character and every reference to it within its document."""
        character = self._load(character_id)
        document_id = character["document"]
        self.document_service.require_owner(document_id, uid)

        self.characters.delete(character_id)
        self._remove_references(document_id, character_id)
        logger.info(f"Deleted character {character_id} from document {document_id}")

    def _remove_references(self, document_id: str, character_id: str) -> None:
        for other in self.characters.find({"document": document_id}):
            relationships = other.get("relationships", [])
            kept = [r for r in relationships if r.get("character") != character_id]
            if len(kept) != len(relationships):
                other["relationships"] = kept
                self.characters.replace(other["_id"], other)

        plots = self.database["plots"]
        plot = plots.find_one({"document": document_id})
        if plot is None:
            return
        changed = False
        conflict = plot.get("mainConflictCharacters", [])
        if character_id in conflict:
            plot["mainConflictCharacters"] = [c for c in conflict if c != character_id]
            changed = True
        for point in plot.get("plotPoints", []):
            involved = point.get("involvedCharacters", [])
            if character_id in involved:
                point["involvedCharacters"] = [c for c in involved if c != character_id]
                changed = True
        if changed:
            plots.replace(plot["_id"], plot)

    def add_relationship(self, character_id: str, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Add a relationship from one character to another in the same document.

        Returns:
            Updated character
        """
        character = self._load(character_id)
        document_id = character["document"]
        self.document_service.require_owner(document_id, uid)

        relationship = Relationship.model_validate(data).to_record()
        relationship["_id"] = None
        self._check_relationships(character_id, document_id, [relationship])
        relationship = stamp_nested(relationship)

        character.setdefault("relationships", []).append(relationship)
        return self.characters.replace(character_id, character) or character

    def remove_relationship(self, character_id: str, relationship_id: str, uid: str) -> Dict[str, Any]:
        """Remove one relationship from a character."""
        character = self._load(character_id)
        self.document_service.require_owner(character["document"], uid)

        relationships = character.get("relationships", [])
        index, _ = find_item(relationships, relationship_id, "Relationship")
        del relationships[index]
        return self.characters.replace(character_id, character) or character
