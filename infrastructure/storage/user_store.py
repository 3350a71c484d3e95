"""
User record persistence strategies.

Users live in the key-value store under the "users" key and, once the
record store is open, in its "users" object store as well. The mirrored
strategy keeps both copies written and reads whichever has the record.
"""

import json
from typing import Dict, Optional

from infrastructure.storage.key_value_store import KeyValueStore
from infrastructure.storage.record_store import RecordStore
from services.auth_service.models import User
from utils.logging_config import get_logger

USERS_KEY = "users"


class UserStore:
    """Interface shared by the user persistence strategies"""

    def save(self, user: User) -> str:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError


class KeyValueUserStore(UserStore):
    """Users kept as a JSON map of email -> record under one key"""

    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store
        self.logger = get_logger(__name__)

    def _load(self) -> Dict[str, dict]:
        raw = self.kv_store.get_item(USERS_KEY)
        if not raw:
            return {}
        try:
            users = json.loads(raw)
        except ValueError:
            self.logger.error("Stored users map is corrupt, ignoring it")
            return {}
        return users if isinstance(users, dict) else {}

    def save(self, user: User) -> str:
        users = self._load()
        users[user.email] = user.to_dict()
        self.kv_store.set_item(USERS_KEY, json.dumps(users))
        return user.email

    def get_by_email(self, email: str) -> Optional[User]:
        record = self._load().get(email)
        return User.from_dict(record) if record else None

    def clear(self):
        self.kv_store.remove_item(USERS_KEY)


class RecordUserStore(UserStore):
    """Users kept in the record store with a unique email index"""

    def __init__(self, record_store: RecordStore):
        self.record_store = record_store

    def save(self, user: User) -> str:
        return self.record_store.put("users", user.to_dict())

    def get_by_email(self, email: str) -> Optional[User]:
        record = self.record_store.get_by_index("users", "email", email)
        return User.from_dict(record) if record else None

    def clear(self):
        self.record_store.clear("users")


class MirroredUserStore(UserStore):
    """
    Dual-write / dual-read over two stores.

    Writes go to both; reads try the primary and fall back to the
    secondary when the primary has no record or cannot be read.
    """

    def __init__(self, primary: UserStore, secondary: UserStore):
        self.primary = primary
        self.secondary = secondary
        self.logger = get_logger(__name__)

    def save(self, user: User) -> str:
        # Secondary enforces the unique indexes, so it is written first
        key = self.secondary.save(user)
        self.primary.save(user)
        return key

    def get_by_email(self, email: str) -> Optional[User]:
        try:
            user = self.primary.get_by_email(email)
            if user:
                return user
        except Exception as e:
            self.logger.warning(f"Primary user store read failed, trying secondary: {e}")
        return self.secondary.get_by_email(email)

    def clear(self):
        self.primary.clear()
        self.secondary.clear()
