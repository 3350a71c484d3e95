"""
Record store - indexed object stores persisted in SQLite.

Each object store is a table holding the JSON record plus one column per
secondary index, so lookups by owner, email or token hit a real index.
"""

import json
import sqlite3
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from services.exceptions import StorageError, StorageNotInitializedError
from utils.logging_config import get_logger


@dataclass(frozen=True)
class ObjectStoreSchema:
    """Key path and secondary indexes of one object store"""
    name: str
    key_path: str
    indexes: Tuple[Tuple[str, bool], ...]  # (field, unique)

    def index_names(self) -> List[str]:
        return [name for name, _ in self.indexes]


DEFAULT_SCHEMA: Dict[str, ObjectStoreSchema] = {
    "users": ObjectStoreSchema("users", "id", (("email", True), ("username", False))),
    "products": ObjectStoreSchema("products", "id", (("user_id", False), ("name", False), ("category", False))),
    "sessions": ObjectStoreSchema("sessions", "id", (("user_id", False), ("token", True))),
}


class RecordStore:
    """
    SQLite-backed indexed record storage.

    The connection is opened by initialize(); every read or write before
    that raises StorageNotInitializedError.
    """

    def __init__(self, db_path: str = ":memory:", db_name: str = "ProductAppDB",
                 version: int = 1, schema: Optional[Dict[str, ObjectStoreSchema]] = None):
        """
        Initialize record store

        Args:
            db_path: SQLite database file, or ":memory:"
            db_name: Logical database name recorded in the metadata table
            version: Schema version recorded in the metadata table
            schema: Object store definitions (defaults to users/products/sessions)
        """
        self.logger = get_logger(__name__)
        self.db_path = db_path
        self.db_name = db_name
        self.version = version
        self.schema = schema or DEFAULT_SCHEMA
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self._conn is not None

    def initialize(self) -> bool:
        """Open the database and create any missing object stores"""
        with self._lock:
            if self._conn is not None:
                return True

            try:
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                cursor = conn.cursor()

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS _metadata (
                        name TEXT PRIMARY KEY,
                        version INTEGER NOT NULL
                    )
                """)
                cursor.execute(
                    "INSERT OR IGNORE INTO _metadata (name, version) VALUES (?, ?)",
                    (self.db_name, self.version)
                )

                for store in self.schema.values():
                    index_columns = "".join(f", {name} TEXT" for name in store.index_names())
                    cursor.execute(f"""
                        CREATE TABLE IF NOT EXISTS {store.name} (
                            key TEXT PRIMARY KEY,
                            data TEXT NOT NULL{index_columns}
                        )
                    """)
                    for index_name, unique in store.indexes:
                        cursor.execute(
                            f"CREATE {'UNIQUE ' if unique else ''}INDEX IF NOT EXISTS "
                            f"idx_{store.name}_{index_name} ON {store.name} ({index_name})"
                        )

                conn.commit()
            except sqlite3.Error as e:
                self.logger.error(f"Failed to open database {self.db_path}: {e}")
                raise StorageError("Failed to open database") from e

            self._conn = conn
            self.logger.info(f"Record store initialized: {self.db_name} v{self.version} at {self.db_path}")
            return True

    def close(self):
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _store(self, store_name: str) -> ObjectStoreSchema:
        if store_name not in self.schema:
            raise ValueError(f"Unknown object store: {store_name}")
        return self.schema[store_name]

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageNotInitializedError()
        return self._conn

    def _index(self, store: ObjectStoreSchema, index_name: str) -> str:
        if index_name not in store.index_names():
            raise ValueError(f"Unknown index '{index_name}' on {store.name}")
        return index_name

    def put(self, store_name: str, record: Dict[str, Any]) -> str:
        """
        Insert or replace a record

        Args:
            store_name: Object store name
            record: Record containing the store's key path

        Returns:
            The record key
        """
        store = self._store(store_name)
        key = record.get(store.key_path)
        if not key:
            raise ValueError(f"Record for {store_name} is missing '{store.key_path}'")

        columns = ["key", "data"] + store.index_names()
        values = [key, json.dumps(record, default=str)] + [
            None if record.get(name) is None else str(record.get(name))
            for name in store.index_names()
        ]
        placeholders = ", ".join("?" for _ in columns)
        # Upsert on the key only; a clash on a unique index must fail, not replace
        assignments = ", ".join(f"{name} = excluded.{name}" for name in columns[1:])

        with self._lock:
            conn = self._connection()
            try:
                conn.execute(
                    f"INSERT INTO {store.name} ({', '.join(columns)}) VALUES ({placeholders}) "
                    f"ON CONFLICT(key) DO UPDATE SET {assignments}",
                    values
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                self.logger.warning(f"Constraint violation writing {store_name}/{key}: {e}")
                raise StorageError(f"Failed to save record to {store_name}: {e}") from e
            except sqlite3.Error as e:
                conn.rollback()
                self.logger.error(f"Error writing {store_name}/{key}: {e}")
                raise StorageError(f"Failed to save record to {store_name}") from e

        return key

    def _fetch(self, sql: str, params: tuple) -> List[Dict[str, Any]]:
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                self.logger.error(f"Error reading records: {e}")
                raise StorageError("Failed to read records") from e
        return [json.loads(row[0]) for row in rows]

    def get(self, store_name: str, key: str) -> Optional[Dict[str, Any]]:
        store = self._store(store_name)
        rows = self._fetch(f"SELECT data FROM {store.name} WHERE key = ?", (key,))
        return rows[0] if rows else None

    def get_by_index(self, store_name: str, index_name: str, value: Any) -> Optional[Dict[str, Any]]:
        store = self._store(store_name)
        column = self._index(store, index_name)
        rows = self._fetch(
            f"SELECT data FROM {store.name} WHERE {column} = ? ORDER BY rowid LIMIT 1", (str(value),)
        )
        return rows[0] if rows else None

    def get_all_by_index(self, store_name: str, index_name: str, value: Any) -> List[Dict[str, Any]]:
        store = self._store(store_name)
        column = self._index(store, index_name)
        return self._fetch(f"SELECT data FROM {store.name} WHERE {column} = ? ORDER BY rowid", (str(value),))

    def get_all(self, store_name: str) -> List[Dict[str, Any]]:
        store = self._store(store_name)
        return self._fetch(f"SELECT data FROM {store.name} ORDER BY rowid", ())

    def delete(self, store_name: str, key: str) -> bool:
        """Delete a record; returns True when a row was removed"""
        store = self._store(store_name)
        with self._lock:
            conn = self._connection()
            try:
                cursor = conn.execute(f"DELETE FROM {store.name} WHERE key = ?", (key,))
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                self.logger.error(f"Error deleting {store_name}/{key}: {e}")
                raise StorageError(f"Failed to delete record from {store_name}") from e
        return cursor.rowcount > 0

    def clear(self, store_name: str):
        store = self._store(store_name)
        with self._lock:
            conn = self._connection()
            try:
                conn.execute(f"DELETE FROM {store.name}")
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(f"Failed to clear {store_name} store") from e
