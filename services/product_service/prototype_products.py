"""
Prototype product service - fake product management for UI demos.
Every write succeeds; products belong to the shared demo user.
"""

import json
import uuid
from typing import Any, Dict, List, Optional

from config.app_config import AppConfig
from services.auth_service.models import utc_now
from services.product_service.models import Product
from services.product_service.product_manager import ProductService
from services.result import ErrorKind, Result
from utils.logging_config import get_logger

DEMO_USER_ID = "demo_user"


def _sample_products() -> List[Product]:
    return [
        Product(id="product_1", user_id=DEMO_USER_ID, name="Sample iPhone 15",
                description="Latest iPhone with amazing features", price=999.99, category="Electronics"),
        Product(id="product_2", user_id=DEMO_USER_ID, name="Sample MacBook Pro",
                description="Powerful laptop for professionals", price=1999.99, category="Computers"),
    ]


class PrototypeProductService:
    """In-memory product list mirrored into the key-value store"""

    PRODUCTS_KEY = "prototypeProducts"

    def __init__(self, kv_store):
        self.kv_store = kv_store
        self.logger = get_logger(__name__)
        self.products: List[Product] = []
        self.initialized = False

    def init(self):
        """Load saved products, seeding sample data on first run"""
        if self.initialized:
            return

        saved = self.kv_store.get_item(self.PRODUCTS_KEY)
        if saved:
            try:
                self.products = [Product.from_dict(item) for item in json.loads(saved)]
            except (ValueError, TypeError, KeyError) as e:
                self.logger.warning(f"Discarding unreadable prototype products: {e}")
                self.products = _sample_products()
        else:
            self.products = _sample_products()
            self._save()

        self.initialized = True

    def _save(self):
        self.kv_store.set_item(self.PRODUCTS_KEY, json.dumps([p.to_dict() for p in self.products]))

    def _index_of(self, product_id: str) -> Optional[int]:
        for i, product in enumerate(self.products):
            if product.id == product_id:
                return i
        return None

    def create_product(self, product_data: Dict[str, Any]) -> Result:
        self.init()

        product = Product(
            id=f"product_{uuid.uuid4().hex[:12]}",
            user_id=DEMO_USER_ID,
            name=product_data.get("name") or "Sample Product",
            description=product_data.get("description") or "Sample description",
            price=product_data.get("price") or 19.99,
            category=product_data.get("category") or "General"
        )
        self.products.append(product)
        self._save()
        return Result.ok(product=product)

    def get_products(self) -> List[Product]:
        self.init()
        return list(self.products)

    def get_product(self, product_id: str) -> Optional[Product]:
        self.init()
        index = self._index_of(product_id)
        return self.products[index] if index is not None else None

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Result:
        self.init()

        index = self._index_of(product_id)
        if index is None:
            return Result.fail("Product not found", ErrorKind.NOT_FOUND)

        record = self.products[index].to_dict()
        record.update(updates)
        record["updated_at"] = utc_now().isoformat()
        self.products[index] = Product.from_dict(record)
        self._save()
        return Result.ok(product=self.products[index])

    def delete_product(self, product_id: str) -> Result:
        self.init()

        index = self._index_of(product_id)
        if index is None:
            return Result.fail("Product not found", ErrorKind.NOT_FOUND)

        del self.products[index]
        self._save()
        return Result.ok()

    def search_products(self, query: Optional[str]) -> List[Product]:
        """Name/description search; empty query returns everything"""
        self.init()

        if not query:
            return list(self.products)

        needle = query.lower()
        return [p for p in self.products
                if needle in p.name.lower() or needle in (p.description or "").lower()]

    def add_sample_products(self) -> List[Product]:
        self.init()

        samples = [
            Product(id="sample_1", user_id=DEMO_USER_ID, name="Wireless Headphones",
                    description="High-quality noise-canceling headphones", price=199.99, category="Audio"),
            Product(id="sample_2", user_id=DEMO_USER_ID, name="Smart Watch",
                    description="Fitness tracking smartwatch with GPS", price=299.99, category="Wearables"),
        ]
        self.products.extend(samples)
        self._save()
        return samples

    def clear_all_data(self):
        self.products = []
        self.kv_store.remove_item(self.PRODUCTS_KEY)


def create_product_service(config: AppConfig, auth, storage):
    """
    Build the product backend named by config.products.backend

    Args:
        config: Application configuration
        auth: AuthProvider supplying the current user
        storage: StorageService holding product records
    """
    backend = config.products.backend
    if backend == "storage":
        return ProductService(auth, storage, config=config.products)
    if backend == "prototype":
        return PrototypeProductService(storage.kv_store)
    raise ValueError(f"Unknown product backend: {backend}")
