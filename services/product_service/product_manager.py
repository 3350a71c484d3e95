"""
Product service - ownership-scoped product CRUD, search and statistics.
"""

import uuid
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from config.app_config import ProductConfig
from services.auth_service.models import utc_now
from services.auth_service.provider import AuthProvider
from services.exceptions import NotAuthenticatedError, NotFoundError, ProductAppError, StorageError
from services.product_service.models import Product, ProductStats
from services.product_service.validation import ProductValidation, validate_product_data
from services.result import ErrorKind, Result
from utils.logging_config import get_logger, log_product_event

# Fields callers may never set through update_product
IMMUTABLE_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})
SEARCH_FIELDS = ("name", "description", "category", "sku")


class ProductService:
    """
    Product CRUD for the signed-in user.

    Every operation requires an authenticated user and only ever sees that
    user's products. Mutations report failures as Result objects; reads
    raise.
    """

    def __init__(self, auth: AuthProvider, storage, config: Optional[ProductConfig] = None):
        """
        Initialize product service

        Args:
            auth: Auth backend providing the current user
            storage: StorageService holding product records
            config: Validation limits and defaults
        """
        self.auth = auth
        self.storage = storage
        self.config = config or ProductConfig()
        self.logger = get_logger(__name__)

    def _ensure_storage(self):
        if not self.storage.is_database_initialized:
            self.storage.initialize_database()

    def _require_auth(self) -> Dict[str, Any]:
        if not self.auth.is_authenticated():
            raise NotAuthenticatedError()
        user = self.auth.get_current_user()
        if not user:
            raise NotAuthenticatedError()
        return user

    def validate_product_data(self, data: Dict[str, Any]) -> ProductValidation:
        return validate_product_data(data, self.config)

    def _failure(self, error: Exception, fallback: str) -> Result:
        if isinstance(error, NotAuthenticatedError):
            kind = ErrorKind.NOT_AUTHENTICATED
        elif isinstance(error, NotFoundError):
            kind = ErrorKind.NOT_FOUND
        elif isinstance(error, ValueError):
            kind = ErrorKind.VALIDATION
        else:
            kind = ErrorKind.STORAGE
        if not isinstance(error, (ProductAppError, ValueError)):
            self.logger.error(f"{fallback}: {error}", exc_info=True)
        return Result.fail(str(error) or fallback, kind)

    def create_product(self, product_data: Dict[str, Any]) -> Result:
        """
        Create a product owned by the current user

        Args:
            product_data: name and price required; description, category,
                image_url, sku and stock optional

        Returns:
            Result with the stored product, or the first validation error
        """
        try:
            self._ensure_storage()
            current_user = self._require_auth()

            if not isinstance(product_data, Mapping):
                return Result.fail("Product data is required")

            validation = self.validate_product_data(product_data)
            if not validation.is_valid:
                return Result.fail(validation.first_error)

            product = Product(
                id=f"product_{uuid.uuid4().hex}",
                user_id=current_user["id"],
                name=product_data["name"].strip(),
                description=(product_data.get("description") or "").strip(),
                price=product_data["price"],
                category=product_data.get("category") or self.config.default_category,
                image_url=product_data.get("image_url") or "",
                sku=product_data.get("sku") or "",
                stock=int(product_data.get("stock") or 0)
            )

            saved = self.storage.save_product(product)

            log_product_event(self.logger, "created", saved.id, current_user["id"])
            return Result.ok(product=saved)

        except Exception as e:
            return self._failure(e, "Failed to create product")

    def get_products(self) -> List[Product]:
        """
        All products of the current user

        Raises:
            NotAuthenticatedError: no signed-in user
            StorageError: the product store could not be read
        """
        self._ensure_storage()
        current_user = self._require_auth()

        try:
            return self.storage.get_products(current_user["id"])
        except StorageError as e:
            raise StorageError(f"Failed to retrieve products: {e}") from e

    def get_product(self, product_id: str) -> Optional[Product]:
        """
        Get one of the current user's products

        Returns:
            The product, or None when missing or owned by someone else
        """
        self._ensure_storage()
        current_user = self._require_auth()

        if not product_id:
            raise ValueError("Product ID is required")

        try:
            return self.storage.get_product(product_id, current_user["id"])
        except StorageError as e:
            raise StorageError(f"Failed to retrieve product: {e}") from e

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Result:
        """
        Update an owned product. id, user_id and created_at are kept;
        validation runs on the merged record.
        """
        try:
            self._ensure_storage()
            current_user = self._require_auth()

            if not product_id:
                return Result.fail("Product ID is required")

            if not isinstance(updates, Mapping):
                return Result.fail("Updates object is required")

            existing = self.storage.get_product(product_id, current_user["id"])
            if existing is None:
                return Result.fail("Product not found", ErrorKind.NOT_FOUND)

            allowed = Product.field_names() - IMMUTABLE_FIELDS
            ignored = sorted(set(updates) - allowed)
            if ignored:
                self.logger.debug(f"Ignoring fields in product update: {', '.join(ignored)}")

            merged = existing.to_dict()
            merged.update({key: value for key, value in updates.items() if key in allowed})

            validation = self.validate_product_data(merged)
            if not validation.is_valid:
                return Result.fail(validation.first_error)

            merged["name"] = merged["name"].strip()
            merged["description"] = (merged.get("description") or "").strip()
            merged["category"] = merged.get("category") or self.config.default_category
            merged["image_url"] = merged.get("image_url") or ""
            merged["sku"] = merged.get("sku") or ""
            merged["stock"] = int(merged.get("stock") or 0)
            merged["updated_at"] = utc_now().isoformat()

            saved = self.storage.save_product(Product.from_dict(merged))

            log_product_event(self.logger, "updated", saved.id, current_user["id"],
                              fields=sorted(set(updates) & allowed))
            return Result.ok(product=saved)

        except Exception as e:
            return self._failure(e, "Failed to update product")

    def delete_product(self, product_id: str) -> Result:
        try:
            self._ensure_storage()
            current_user = self._require_auth()

            if not product_id:
                return Result.fail("Product ID is required")

            if self.storage.get_product(product_id, current_user["id"]) is None:
                return Result.fail("Product not found", ErrorKind.NOT_FOUND)

            self.storage.delete_product(product_id, current_user["id"])

            log_product_event(self.logger, "deleted", product_id, current_user["id"])
            return Result.ok()

        except Exception as e:
            return self._failure(e, "Failed to delete product")

    def search_products(self, query: Optional[str]) -> List[Product]:
        """
        Case-insensitive substring search over name, description, category and SKU

        Args:
            query: Search text; blank returns every product

        Raises:
            ValueError: query is None
        """
        self._ensure_storage()
        current_user = self._require_auth()

        if query is None:
            raise ValueError("Search query cannot be None")

        search = str(query).strip().lower()

        try:
            products = self.storage.get_products(current_user["id"])
        except StorageError as e:
            raise StorageError(f"Failed to search products: {e}") from e

        if not search:
            return products

        return [
            product for product in products
            if any(search in (getattr(product, name) or "").lower() for name in SEARCH_FIELDS)
        ]

    def get_product_stats(self) -> ProductStats:
        """Count, inventory value, category histogram and average price"""
        self._ensure_storage()
        current_user = self._require_auth()

        try:
            products = self.storage.get_products(current_user["id"])
        except StorageError as e:
            raise StorageError(f"Failed to get product statistics: {e}") from e

        stats = ProductStats()
        if not products:
            return stats

        total_price = 0.0
        for product in products:
            price = product.price or 0
            stats.total_value += price * (product.stock or 0)
            total_price += price
            category = product.category or self.config.default_category
            stats.categories[category] = stats.categories.get(category, 0) + 1

        stats.total_products = len(products)
        stats.total_value = round(stats.total_value, 2)
        stats.average_price = total_price / stats.total_products
        return stats

    def clear_all_products(self) -> Result:
        """Delete every product of the current user"""
        try:
            self._ensure_storage()
            current_user = self._require_auth()

            deleted = self.storage.clear_products(current_user["id"])

            log_product_event(self.logger, "cleared", None, current_user["id"], deleted_count=deleted)
            return Result.ok(deleted_count=deleted)

        except Exception as e:
            return self._failure(e, "Failed to clear products")
