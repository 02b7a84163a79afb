"""
Document service for CRUD operations and access control.

Documents are private to their owner unless marked public. Anyone signed in
may read a public document; only the owner may change or delete it.
"""

import logging
import math
from typing import Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from src.inkwell.utils.repository import Database

from src.inkwell.models import DocumentCreate, DocumentUpdate
from src.inkwell.utils.errors import ValidationError, NotFoundError, AuthorizationError
from src.inkwell.utils.html_text import count_words
from src.inkwell.utils.repository import DESCENDING, validate_id

logger = logging.getLogger(__name__)

LIST_MODES = ("public", "private")
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100

# Collections holding per-document toolbox records, removed with the document
DEPENDENT_COLLECTIONS = ("stories", "characters", "plots", "settings", "themes")


def is_owner(document: Dict[str, Any], uid: str) -> bool:
    return document.get("userId") == uid


def is_accessible_by(document: Dict[str, Any], uid: str) -> bool:
    """A document is readable by its owner, and by everyone when public."""
    return is_owner(document, uid) or document.get("visibility") == "public"


def with_word_count(document: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(document)
    result["wordCount"] = count_words(document.get("content", ""))
    return result


class DocumentService:
    """Service for document CRUD operations."""

    def __init__(self, database: 'Database', story_service=None):
        """
        Initialize document service.

        Args:
            database: Database holding the documents collection
            story_service: StoryService used to create a document's story record
        """
        self.database = database
        self.documents = database["documents"]
        self.story_service = story_service

    def get_document(self, document_id: str) -> Dict[str, Any]:
        """
        Load a document without access checks.

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If no such document exists
        """
        validate_id(document_id)
        document = self.documents.get(document_id)
        if not document:
            raise NotFoundError("Document", document_id)
        return document

    def require_readable(self, document_id: str, uid: str) -> Dict[str, Any]:
        """Load a document the caller may read, or raise 404/403."""
        document = self.get_document(document_id)
        if not is_accessible_by(document, uid):
            raise AuthorizationError("Not authorized to access this document")
        return document

    def require_owner(self, document_id: str, uid: str) -> Dict[str, Any]:
        """Load a document the caller owns, or raise 404/403."""
        document = self.get_document(document_id)
        if not is_owner(document, uid):
            raise AuthorizationError("Not authorized to modify this document")
        return document

    def list_documents(
        self,
        uid: str,
        mode: str = "public",
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE
    ) -> Dict[str, Any]:
        """
        List documents visible in a mode, most recently updated first.

        Args:
            uid: Caller uid
            mode: 'public' for all public documents, 'private' for the caller's own
            page: Page number (1-indexed)
            per_page: Items per page (clamped to 1..100)

        Returns:
            Dictionary with 'documents' list and 'pagination' metadata
        """
        if mode not in LIST_MODES:
            raise ValidationError(
                f"Invalid mode '{mode}'. Must be one of: {', '.join(LIST_MODES)}",
                details={"mode": mode}
            )
        per_page = min(max(1, per_page), MAX_PER_PAGE)
        page = max(1, page)

        filters = {"visibility": "public"} if mode == "public" else {"userId": uid}
        total = self.documents.count(filters)
        documents = self.documents.find(
            filters,
            sort=[("updatedAt", DESCENDING)],
            skip=(page - 1) * per_page,
            limit=per_page
        )
        total_pages = math.ceil(total / per_page) if total else 0

        return {
            "documents": [with_word_count(doc) for doc in documents],
            "pagination": {
                "page": page,
                "per_page": per_page,
                "total": total,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1,
            },
        }

    def get_for_reader(self, document_id: str, uid: str) -> Dict[str, Any]:
        """Document with its current word count, if the caller may read it."""
        return with_word_count(self.require_readable(document_id, uid))

    def create_document(self, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a document owned by the caller, plus its story record.

        Args:
            uid: Owner uid
            data: Request body (title required)

        Returns:
            Stored document with word count
        """
        payload = DocumentCreate.model_validate(data).to_record()
        payload["userId"] = uid
        document = self.documents.insert(payload)
        logger.info(f"Created document {document['_id']} for user {uid}")

        if self.story_service is not None:
            self.story_service.ensure_story(document["_id"])
        return with_word_count(document)

    def update_document(self, document_id: str, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update (autosave) to a document the caller owns.

        Returns:
            Updated document with word count
        """
        document = self.require_owner(document_id, uid)
        updates = DocumentUpdate.model_validate(data).to_record(partial=True)
        document.update(updates)
        stored = self.documents.replace(document_id, document)
        if stored is None:
            raise NotFoundError("Document", document_id)
        logger.debug(f"Updated document {document_id}: {sorted(updates)}")
        return with_word_count(stored)

    def set_character_tracking(self, document_id: str, uid: str, enabled: bool) -> Dict[str, Any]:
        """Turn character tracking on or off for a document the caller owns."""
        document = self.require_owner(document_id, uid)
        document["enableCharacterTracking"] = bool(enabled)
        stored = self.documents.replace(document_id, document)
        return with_word_count(stored or document)

    def delete_document(self, document_id: str, uid: str) -> Dict[str, int]:
        """
        Delete a document the caller owns, with all of its toolbox records.

        Returns:
            Number of records removed per dependent collection
        """
        self.require_owner(document_id, uid)
        removed = {}
        for name in DEPENDENT_COLLECTIONS:
            removed[name] = self.database[name].delete_many({"document": document_id})
        self.documents.delete(document_id)
        logger.info(f"Deleted document {document_id} and dependents {removed}")
        return removed
