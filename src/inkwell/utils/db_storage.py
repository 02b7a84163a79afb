"""
SQLite-backed document storage.

Stores every collection in a single ``records`` table, one JSON document per
row. Queries filter and sort with ``json_extract`` so the same equality
filters the MongoDB backend accepts work here unchanged.
"""

import json
import re
import sqlite3
from pathlib import Path
from typing import Dict, Optional, Any, List
from contextlib import contextmanager
import logging

from .repository import (
    CollectionRepository,
    Database,
    SortSpec,
    DESCENDING,
    stamp_new,
    utc_now,
)
from .errors import ValidationError

logger = logging.getLogger(__name__)

_FIELD_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def _json_path(field: str) -> str:
    if not _FIELD_PATTERN.match(field):
        raise ValidationError(f"Invalid field name '{field}'")
    return f"$.{field}"


class SQLiteDatabase(Database):
    """
    Database-backed record storage using SQLite.

    A new connection is opened for each transaction, so instances are safe to
    share between request threads.
    """

    def __init__(self, db_path: str):
        """
        Initialize the store and create the schema.

        Args:
            db_path: Path of the SQLite file (parent directory is created)
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._collections: Dict[str, SQLiteCollectionRepository] = {}
        self.init_database()

    def get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row  # Enable column access by name
        return conn

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise e
        finally:
            conn.close()

    def init_database(self) -> None:
        """Initialize the database schema."""
        with self.transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT,
                    updated_at TEXT,
                    PRIMARY KEY (collection, id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_records_updated_at
                ON records(collection, updated_at DESC)
            """)

    def collection(self, name: str) -> 'SQLiteCollectionRepository':
        if name not in self._collections:
            self._collections[name] = SQLiteCollectionRepository(self, name)
        return self._collections[name]

    def ping(self) -> bool:
        try:
            with self.transaction() as conn:
                conn.execute("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.error(f"SQLite ping failed: {e}")
            return False


class SQLiteCollectionRepository(CollectionRepository):
    """One collection stored as rows of the shared ``records`` table."""

    def __init__(self, database: SQLiteDatabase, name: str):
        super().__init__(name)
        self.database = database

    def _serialize(self, record: Dict[str, Any]) -> str:
        data = {k: v for k, v in record.items() if k != "_id"}
        return json.dumps(data)

    def _deserialize(self, row: sqlite3.Row) -> Dict[str, Any]:
        record = {"_id": row["id"]}
        record.update(json.loads(row["data"]))
        return record

    def _where(self, filters: Optional[Dict[str, Any]]) -> tuple:
        clauses = ["collection = ?"]
        params: List[Any] = [self.name]
        for field, value in (filters or {}).items():
            if field == "_id":
                clauses.append("id = ?")
                params.append(value)
            elif value is None:
                clauses.append("json_extract(data, ?) IS NULL")
                params.append(_json_path(field))
            else:
                clauses.append("json_extract(data, ?) = ?")
                params.extend([_json_path(field), value])
        return " AND ".join(clauses), params

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = stamp_new(record)
        with self.database.transaction() as conn:
            conn.execute(
                "INSERT INTO records (collection, id, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (self.name, stored["_id"], self._serialize(stored), stored["createdAt"], stored["updatedAt"])
            )
        logger.debug(f"Inserted {self.name}/{stored['_id']}")
        return stored

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT id, data FROM records WHERE collection = ? AND id = ?",
                (self.name, record_id)
            ).fetchone()
        return self._deserialize(row) if row else None

    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0
    ) -> List[Dict[str, Any]]:
        where, params = self._where(filters)
        query = f"SELECT id, data FROM records WHERE {where}"

        order_terms = []
        for field, direction in sort or []:
            if field == "_id":
                order_terms.append("id DESC" if direction == DESCENDING else "id ASC")
            else:
                order_terms.append("json_extract(data, ?) DESC" if direction == DESCENDING
                                   else "json_extract(data, ?) ASC")
                params.append(_json_path(field))
        order_terms.append("rowid ASC")
        query += " ORDER BY " + ", ".join(order_terms)

        if limit or skip:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit if limit else -1, skip])

        with self.database.transaction() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._deserialize(row) for row in rows]

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        where, params = self._where(filters)
        with self.database.transaction() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS total FROM records WHERE {where}", params).fetchone()
        return row["total"] if row else 0

    def replace(self, record_id: str, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT created_at FROM records WHERE collection = ? AND id = ?",
                (self.name, record_id)
            ).fetchone()
            if row is None:
                return None
            stored = dict(record)
            stored["_id"] = record_id
            stored["createdAt"] = row["created_at"]
            stored["updatedAt"] = utc_now()
            conn.execute(
                "UPDATE records SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
                (self._serialize(stored), stored["updatedAt"], self.name, record_id)
            )
        return stored

    def delete(self, record_id: str) -> bool:
        with self.database.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM records WHERE collection = ? AND id = ?",
                (self.name, record_id)
            )
        return cursor.rowcount > 0

    def delete_many(self, filters: Dict[str, Any]) -> int:
        where, params = self._where(filters)
        with self.database.transaction() as conn:
            cursor = conn.execute(f"DELETE FROM records WHERE {where}", params)
        return cursor.rowcount
