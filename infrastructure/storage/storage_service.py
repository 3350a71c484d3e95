"""
Storage service - facade over the key-value store and the record store.
Holds users, products and the single active session.
"""

import json
import uuid
from typing import Any, Dict, List, Optional

from config.app_config import StorageConfig
from infrastructure.storage.key_value_store import KeyValueStore, MemoryKeyValueStore, create_key_value_store
from infrastructure.storage.record_store import RecordStore
from infrastructure.storage.user_store import (
    KeyValueUserStore,
    MirroredUserStore,
    RecordUserStore,
    UserStore,
)
from services.auth_service.models import Session, User, utc_now
from services.exceptions import NotFoundError, StorageError
from services.product_service.models import Product
from utils.logging_config import get_logger

SESSION_KEY = "session"


class StorageService:
    """
    Persistence for users, products and sessions.

    Users live in the key-value store and products in the record store.
    User writes are mirrored into the record store once it has been
    initialized. The session lives in its own store, which defaults to the
    key-value store; the app passes one store per browser session so a
    login never leaks to another visitor.
    """

    def __init__(self, kv_store: Optional[KeyValueStore] = None,
                 record_store: Optional[RecordStore] = None,
                 session_store: Optional[KeyValueStore] = None):
        self.logger = get_logger(__name__)
        self.kv_store = kv_store if kv_store is not None else MemoryKeyValueStore()
        self.record_store = record_store if record_store is not None else RecordStore()
        self.session_store = session_store if session_store is not None else self.kv_store
        self.users: UserStore = self._select_user_store()

    @classmethod
    def from_config(cls, config: StorageConfig,
                    session_store: Optional[KeyValueStore] = None) -> 'StorageService':
        """Build a storage service from configuration (record store left closed)"""
        kv_store = create_key_value_store(config.key_value_backend, config.key_value_path)
        record_store = RecordStore(db_path=config.db_path, db_name=config.db_name, version=config.db_version)
        return cls(kv_store=kv_store, record_store=record_store, session_store=session_store)

    def _select_user_store(self) -> UserStore:
        kv_users = KeyValueUserStore(self.kv_store)
        if self.record_store.is_initialized:
            return MirroredUserStore(kv_users, RecordUserStore(self.record_store))
        return kv_users

    @property
    def is_database_initialized(self) -> bool:
        return self.record_store.is_initialized

    def initialize_database(self) -> bool:
        """Open the record store and switch users to the mirrored strategy"""
        self.record_store.initialize()
        self.users = self._select_user_store()
        return True

    def close(self):
        self.record_store.close()
        self.users = self._select_user_store()

    # Users

    def save_user(self, user: User) -> str:
        """
        Save (insert or replace) a user

        Args:
            user: User record, email already lowercased

        Returns:
            Identifier the record was stored under
        """
        if user is None or not user.email:
            raise ValueError("Missing required user data")

        user.email = user.email.lower()
        return self.users.save(user)

    def get_user(self, email: str) -> Optional[User]:
        """Look up a user by email through the active user store"""
        if not email:
            return None
        return self.users.get_by_email(email.lower())

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user in the record store only"""
        if not email or not self.record_store.is_initialized:
            return None
        record = self.record_store.get_by_index("users", "email", email.lower())
        return User.from_dict(record) if record else None

    def user_exists(self, email: str) -> bool:
        if not email:
            return False
        return self.get_user(email) is not None

    # Products

    def save_product(self, product: Product) -> Product:
        """
        Save (insert or replace) a product

        Args:
            product: Product to persist; id and created_at are assigned if missing

        Returns:
            The stored product
        """
        if product is None or not product.name or product.price is None:
            raise ValueError("Missing required product data")

        try:
            price = float(product.price)
        except (TypeError, ValueError):
            raise ValueError("Invalid price")
        if price != price or price < 0:
            raise ValueError("Invalid price")

        now = utc_now().isoformat()
        product.id = product.id or f"product_{uuid.uuid4().hex}"
        product.created_at = product.created_at or now
        product.updated_at = now

        self.record_store.put("products", product.to_dict())
        return product

    def get_product(self, product_id: str, user_id: Optional[str]) -> Optional[Product]:
        """
        Get a product by id, filtered by owner

        Returns:
            The product when it exists and belongs to user_id, otherwise None
        """
        if not product_id:
            return None

        record = self.record_store.get("products", product_id)
        if not record or record.get("user_id") != user_id:
            return None
        return Product.from_dict(record)

    def get_products(self, user_id: str) -> List[Product]:
        """All products owned by user_id, in insertion order"""
        if not user_id:
            return []
        return [Product.from_dict(record)
                for record in self.record_store.get_all_by_index("products", "user_id", user_id)]

    def update_product(self, product_id: str, updates: Dict[str, Any], user_id: str) -> Product:
        """Apply raw updates to an owned product; id and owner are preserved"""
        if not product_id or not updates or not user_id:
            raise ValueError("Missing required parameters")

        existing = self.get_product(product_id, user_id)
        if existing is None:
            raise NotFoundError("Product not found or access denied")

        record = existing.to_dict()
        record.update({k: v for k, v in updates.items() if k in Product.field_names()})
        record["id"] = existing.id
        record["user_id"] = existing.user_id
        record["created_at"] = existing.created_at
        return self.save_product(Product.from_dict(record))

    def delete_product(self, product_id: str, user_id: Optional[str] = None) -> bool:
        """Delete a product; when user_id is given the owner must match"""
        if not product_id:
            raise ValueError("Missing required parameters")

        if user_id is not None and self.get_product(product_id, user_id) is None:
            raise NotFoundError("Product not found or access denied")

        return self.record_store.delete("products", product_id)

    def clear_products(self, user_id: str) -> int:
        """Delete every product owned by user_id and return how many were removed"""
        products = self.get_products(user_id)
        for product in products:
            self.record_store.delete("products", product.id)
        return len(products)

    # Session

    def save_session(self, session: Session):
        if session is None:
            raise ValueError("Missing session data")
        self.session_store.set_item(SESSION_KEY, json.dumps(session.to_dict()))

    def get_session(self) -> Optional[Session]:
        """Current persisted session, or None when absent or unreadable"""
        try:
            raw = self.session_store.get_item(SESSION_KEY)
            if not raw:
                return None
            return Session.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            self.logger.warning(f"Discarding unreadable session data: {e}")
            return None
        except StorageError as e:
            self.logger.error(f"Failed to read session: {e}")
            return None

    def clear_session(self):
        self.session_store.remove_item(SESSION_KEY)

    def clear_all_data(self):
        """Wipe the key-value store and every object store"""
        self.kv_store.clear()
        if self.session_store is not self.kv_store:
            self.session_store.clear()

        if self.record_store.is_initialized:
            for store_name in self.record_store.schema:
                self.record_store.clear(store_name)

        self.logger.info("All stored data cleared")
