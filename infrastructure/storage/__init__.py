"""
Storage infrastructure - key-value store, indexed record store and the storage facade.
"""

from .key_value_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
    create_key_value_store
)
from .record_store import RecordStore, ObjectStoreSchema, DEFAULT_SCHEMA
from .user_store import UserStore, KeyValueUserStore, RecordUserStore, MirroredUserStore
from .storage_service import StorageService, SESSION_KEY

__all__ = [
    'KeyValueStore',
    'MemoryKeyValueStore',
    'JsonFileKeyValueStore',
    'create_key_value_store',
    'RecordStore',
    'ObjectStoreSchema',
    'DEFAULT_SCHEMA',
    'UserStore',
    'KeyValueUserStore',
    'RecordUserStore',
    'MirroredUserStore',
    'StorageService',
    'SESSION_KEY'
]
