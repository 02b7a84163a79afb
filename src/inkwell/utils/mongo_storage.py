"""
MongoDB-backed document storage using pymongo.
"""

import logging
from typing import Dict, Optional, Any, List

from pymongo import MongoClient, ASCENDING as MONGO_ASC, DESCENDING as MONGO_DESC
from pymongo.errors import DuplicateKeyError, PyMongoError

from .repository import (
    CollectionRepository,
    Database,
    SortSpec,
    stamp_new,
    utc_now,
    to_object_id,
)
from .errors import ConflictError

logger = logging.getLogger(__name__)

SERVER_SELECTION_TIMEOUT_MS = 5000
SOCKET_TIMEOUT_MS = 45000

# (collection, keys, unique)
INDEXES = [
    ("documents", [("userId", MONGO_ASC), ("updatedAt", MONGO_DESC)], False),
    ("documents", [("visibility", MONGO_ASC), ("updatedAt", MONGO_DESC)], False),
    ("characters", [("document", MONGO_ASC), ("name", MONGO_ASC)], True),
    ("stories", [("document", MONGO_ASC)], True),
    ("plots", [("document", MONGO_ASC)], True),
    ("settings", [("document", MONGO_ASC)], True),
    ("themes", [("document", MONGO_ASC)], True),
]


class MongoDatabase(Database):
    """Collections stored in one MongoDB database."""

    def __init__(self, uri: str, db_name: str = "inkwell", client: Optional[MongoClient] = None):
        """
        Connect to MongoDB.

        Args:
            uri: MongoDB connection string
            db_name: Database name
            client: Pre-built client (used by tests)
        """
        self.client = client or MongoClient(
            uri,
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
            socketTimeoutMS=SOCKET_TIMEOUT_MS,
        )
        self.db = self.client[db_name]
        self._collections: Dict[str, MongoCollectionRepository] = {}

    def collection(self, name: str) -> 'MongoCollectionRepository':
        if name not in self._collections:
            self._collections[name] = MongoCollectionRepository(self.db[name], name)
        return self._collections[name]

    def init_indexes(self) -> None:
        for name, keys, unique in INDEXES:
            try:
                self.db[name].create_index(keys, unique=unique)
            except PyMongoError as e:
                logger.warning(f"Could not create index on {name}: {e}")

    def ping(self) -> bool:
        try:
            self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error(f"MongoDB ping failed: {e}")
            return False

    def close(self) -> None:
        self.client.close()


class MongoCollectionRepository(CollectionRepository):
    """Adapter from the repository interface to a pymongo collection."""

    def __init__(self, collection, name: str):
        super().__init__(name)
        self._collection = collection

    @staticmethod
    def _to_mongo_filter(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        query = dict(filters or {})
        if "_id" in query:
            query["_id"] = to_object_id(query["_id"])
        return query

    @staticmethod
    def _from_mongo(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if doc is None:
            return None
        record = dict(doc)
        record["_id"] = str(record["_id"])
        return record

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = stamp_new(record)
        doc = dict(stored)
        doc["_id"] = to_object_id(stored["_id"])
        try:
            self._collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate {self.name} record", details={"key": str(e.details)})
        return stored

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self._from_mongo(self._collection.find_one({"_id": to_object_id(record_id)}))

    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0
    ) -> List[Dict[str, Any]]:
        cursor = self._collection.find(self._to_mongo_filter(filters))
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [self._from_mongo(doc) for doc in cursor]

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return self._collection.count_documents(self._to_mongo_filter(filters))

    def replace(self, record_id: str, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = to_object_id(record_id)
        existing = self._collection.find_one({"_id": oid}, {"createdAt": 1})
        if existing is None:
            return None
        stored = dict(record)
        stored["_id"] = record_id
        stored["createdAt"] = existing.get("createdAt", stored.get("createdAt"))
        stored["updatedAt"] = utc_now()
        doc = {k: v for k, v in stored.items() if k != "_id"}
        try:
            self._collection.replace_one({"_id": oid}, doc)
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate {self.name} record", details={"key": str(e.details)})
        return stored

    def delete(self, record_id: str) -> bool:
        result = self._collection.delete_one({"_id": to_object_id(record_id)})
        return result.deleted_count > 0

    def delete_many(self, filters: Dict[str, Any]) -> int:
        result = self._collection.delete_many(self._to_mongo_filter(filters))
        return result.deleted_count
