"""
Key-value stores - string maps in the shape of browser localStorage.
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional

from services.exceptions import StorageError
from utils.logging_config import get_logger


class KeyValueStore:
    """
    Synchronous string map. Subclasses implement _load and _save; every
    mutation rewrites the whole map, like localStorage does per origin.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, str]:
        raise NotImplementedError

    def _save(self, data: Dict[str, str]):
        raise NotImplementedError

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str):
        if not isinstance(value, str):
            raise TypeError(f"Values must be strings, got {type(value).__name__}")
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove_item(self, key: str):
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    def clear(self):
        with self._lock:
            self._save({})

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._load().keys())


class MemoryKeyValueStore(KeyValueStore):
    """In-process store; contents are lost when the process exits"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__()
        self._data: Dict[str, str] = dict(initial or {})

    def _load(self) -> Dict[str, str]:
        return dict(self._data)

    def _save(self, data: Dict[str, str]):
        self._data = dict(data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Store persisted as a single JSON object on disk.
    """

    def __init__(self, path: str):
        """
        Initialize file-backed store

        Args:
            path: JSON file location (created on first write)
        """
        super().__init__()
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Unreadable key-value file {self.path}, treating as empty: {e}")
            return {}

        if not isinstance(data, dict):
            self.logger.error(f"Key-value file {self.path} does not hold an object, treating as empty")
            return {}

        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            self.logger.error(f"Failed to write key-value file {self.path}: {e}")
            raise StorageError(f"Failed to write storage: {e}") from e


def create_key_value_store(backend: str, path: Optional[str] = None) -> KeyValueStore:
    """Build the key-value store named by configuration"""
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "json_file":
        if not path:
            raise ValueError("json_file key-value store requires a path")
        return JsonFileKeyValueStore(path)
    raise ValueError(f"Unknown key-value backend: {backend}")
