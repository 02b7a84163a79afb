"""
Collection repository abstraction layer.

Provides a unified interface for document storage, abstracting away the
differences between MongoDB and the local SQLite store. Services talk to
named collections of JSON-like records and never see the backend.

Records are plain dictionaries keyed by ``_id`` (a 24-character hex object
id). Repositories stamp ``createdAt`` on insert and ``updatedAt`` on every
write; ``createdAt`` is preserved across replaces.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional, Any, List, Tuple
import logging

from bson import ObjectId
from bson.errors import InvalidId

from .errors import InvalidIdError

logger = logging.getLogger(__name__)

ASCENDING = 1
DESCENDING = -1

SortSpec = List[Tuple[str, int]]


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    """Generate a fresh object id string."""
    return str(ObjectId())


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


def validate_id(value: Any) -> str:
    """
    Validate an identifier coming from a URL or request body.

    Args:
        value: Candidate identifier

    Returns:
        The identifier, unchanged

    Raises:
        InvalidIdError: If the value is not a valid object id
    """
    if not is_valid_id(value):
        raise InvalidIdError(value)
    return value


def stamp_new(record: Dict[str, Any]) -> Dict[str, Any]:
    """Assign an id and timestamps to a record about to be inserted."""
    now = utc_now()
    stamped = dict(record)
    stamped.setdefault("_id", new_id())
    stamped.setdefault("createdAt", now)
    stamped["updatedAt"] = now
    return stamped


class CollectionRepository(ABC):
    """
    Abstract interface for one named collection of records.

    Filters are equality matches on top-level fields; ``sort`` is a list of
    ``(field, ASCENDING | DESCENDING)`` pairs, as with pymongo.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a record.

        Args:
            record: Record to insert (``_id`` is generated when absent)

        Returns:
            The stored record including ``_id`` and timestamps
        """
        pass

    @abstractmethod
    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record by id, or None."""
        pass

    @abstractmethod
    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0
    ) -> List[Dict[str, Any]]:
        """
        Find records matching all filters.

        Args:
            filters: Field/value equality filters
            sort: List of (field, direction) pairs
            skip: Number of matching records to skip
            limit: Maximum records to return (0 for no limit)

        Returns:
            List of records
        """
        pass

    @abstractmethod
    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count records matching all filters."""
        pass

    @abstractmethod
    def replace(self, record_id: str, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Replace a stored record, keeping its id and creation time.

        Returns:
            The stored record, or None if no record has that id
        """
        pass

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Delete a record by id. Returns True if something was deleted."""
        pass

    @abstractmethod
    def delete_many(self, filters: Dict[str, Any]) -> int:
        """Delete every record matching the filters. Returns the number deleted."""
        pass

    def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        results = self.find(filters, limit=1)
        return results[0] if results else None

    def update(self, record_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Merge top-level fields into a stored record.

        Returns:
            The updated record, or None if no record has that id
        """
        current = self.get(record_id)
        if current is None:
            return None
        current.update(updates)
        return self.replace(record_id, current)


class Database(ABC):
    """A set of named collections backed by one storage engine."""

    @abstractmethod
    def collection(self, name: str) -> CollectionRepository:
        pass

    @abstractmethod
    def ping(self) -> bool:
        """Check that the storage backend is reachable."""
        pass

    def init_indexes(self) -> None:
        """Create backend indexes. No-op unless the backend needs them."""

    def close(self) -> None:
        pass

    @property
    def backend(self) -> str:
        return type(self).__name__

    def __getitem__(self, name: str) -> CollectionRepository:
        return self.collection(name)


def create_database(config: Dict[str, Any]) -> Database:
    """
    Create the database configured for this application.

    Uses MongoDB when ``USE_MONGO_STORAGE`` is set and ``MONGODB_URI`` is
    present, otherwise the SQLite document store at ``SQLITE_PATH``.

    Args:
        config: Flask config mapping

    Returns:
        Database instance
    """
    if config.get("USE_MONGO_STORAGE") and config.get("MONGODB_URI"):
        from .mongo_storage import MongoDatabase
        logger.info("Using MongoDB storage")
        database: Database = MongoDatabase(config["MONGODB_URI"], config.get("MONGODB_DB", "inkwell"))
    else:
        from .db_storage import SQLiteDatabase
        logger.info(f"Using SQLite storage at {config.get('SQLITE_PATH')}")
        database = SQLiteDatabase(config["SQLITE_PATH"])

    database.init_indexes()
    return database


def to_object_id(value: str) -> ObjectId:
    """Convert an id string to a bson ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdError(value)
