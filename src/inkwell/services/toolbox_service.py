"""
Base service for per-document toolbox records (plot, setting, themes).

Each document has at most one record per toolbox collection. The record is
created with defaults the first time it is read or saved. Embedded item
endpoints (add/update/remove/reorder) require the record to exist already.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from src.inkwell.utils.repository import Database
    from .document_service import DocumentService

from src.inkwell.models import ApiModel, ReorderRequest
from src.inkwell.utils.errors import NotFoundError, ValidationError
from . import embedded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemList:
    """Describes one embedded list on a toolbox record."""
    field: str
    label: str
    create_model: Type[ApiModel]
    update_model: Type[ApiModel]
    ordered: bool = False


class ToolboxService:
    """Get-or-create, partial update and embedded item editing for one collection."""

    collection_name = ""
    label = ""
    update_model: Type[ApiModel] = ApiModel
    item_lists: Dict[str, ItemList] = {}

    def __init__(self, database: 'Database', document_service: 'DocumentService'):
        self.database = database
        self.records = database[self.collection_name]
        self.document_service = document_service

    def default_record(self, document_id: str) -> Dict[str, Any]:
        raise NotImplementedError

    def validate_references(self, document_id: str, record: Dict[str, Any]) -> None:
        """Hook for subclasses to check ids that point at other records."""

    def present(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Record as returned to clients, ordered lists sorted by ``order``."""
        result = dict(record)
        for item_list in self.item_lists.values():
            if item_list.ordered:
                result[item_list.field] = embedded.sort_by_order(result.get(item_list.field, []))
        return result

    def _get_list(self, key: str) -> ItemList:
        if key not in self.item_lists:
            raise NotFoundError("Resource", key)
        return self.item_lists[key]

    def _find(self, document_id: str) -> Dict[str, Any]:
        record = self.records.find_one({"document": document_id})
        if record is None:
            raise NotFoundError(self.label, document_id)
        return record

    def _get_or_create(self, document_id: str) -> Dict[str, Any]:
        record = self.records.find_one({"document": document_id})
        if record is None:
            record = self.records.insert(self.default_record(document_id))
            logger.info(f"Created {self.label.lower()} {record['_id']} for document {document_id}")
        return record

    def _save(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = self.records.replace(record["_id"], record)
        if stored is None:
            raise NotFoundError(self.label, record["_id"])
        return self.present(stored)

    def get(self, document_id: str, uid: str) -> Dict[str, Any]:
        """
        Get the record for a readable document, creating defaults if needed.

        Args:
            document_id: Owning document id
            uid: Caller uid

        Returns:
            Toolbox record
        """
        self.document_service.require_readable(document_id, uid)
        return self.present(self._get_or_create(document_id))

    def update(self, document_id: str, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partially update (upsert) the record for a document the caller owns.

        Lists sent in the body replace the stored lists; for ordered lists
        the list position becomes the new ``order``.
        """
        self.document_service.require_owner(document_id, uid)
        updates = self.update_model.model_validate(data).to_record(partial=True)
        for item_list in self.item_lists.values():
            if item_list.field in updates:
                updates[item_list.field] = embedded.normalize_items(updates[item_list.field], item_list.ordered)

        existing = self.records.find_one({"document": document_id})
        record = dict(existing) if existing else self.default_record(document_id)
        record.update(updates)
        self.validate_references(document_id, record)
        if existing is None:
            created = self.records.insert(record)
            logger.info(f"Created {self.label.lower()} {created['_id']} for document {document_id}")
            return self.present(created)
        return self._save(record)

    def add_item(self, document_id: str, uid: str, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append an item to one of the record's embedded lists.

        Returns:
            The updated record
        """
        item_list = self._get_list(key)
        self.document_service.require_owner(document_id, uid)
        item = item_list.create_model.model_validate(data).to_record()

        record = self._find(document_id)
        items = record.setdefault(item_list.field, [])
        embedded.add_item(items, item, ordered=item_list.ordered)
        self.validate_references(document_id, record)
        return self._save(record)

    def update_item(self, document_id: str, uid: str, key: str, item_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        item_list = self._get_list(key)
        self.document_service.require_owner(document_id, uid)
        updates = item_list.update_model.model_validate(data).to_record(partial=True)

        record = self._find(document_id)
        embedded.update_item(record.setdefault(item_list.field, []), item_id, updates,
                             item_list.label, ordered=item_list.ordered)
        self.validate_references(document_id, record)
        return self._save(record)

    def remove_item(self, document_id: str, uid: str, key: str, item_id: str) -> Dict[str, Any]:
        item_list = self._get_list(key)
        self.document_service.require_owner(document_id, uid)

        record = self._find(document_id)
        embedded.remove_item(record.setdefault(item_list.field, []), item_id,
                             item_list.label, ordered=item_list.ordered)
        return self._save(record)

    def reorder(self, document_id: str, uid: str, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Reorder an ordered list by a complete list of item ids.

        Raises:
            ValidationError: If the list is not ordered or the ids don't match
        """
        item_list = self._get_list(key)
        if not item_list.ordered:
            raise ValidationError(f"{item_list.label} items cannot be reordered")
        self.document_service.require_owner(document_id, uid)
        order = ReorderRequest.model_validate(data).order

        record = self._find(document_id)
        items: List[Dict[str, Any]] = embedded.sort_by_order(record.get(item_list.field, []))
        embedded.reorder_items(items, order, item_list.label)
        record[item_list.field] = items
        return self._save(record)
