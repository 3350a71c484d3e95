"""
Tests for product validation and the ownership-scoped product service
"""

from unittest.mock import patch

import pytest
from config.app_config import ProductConfig
from infrastructure.storage import StorageService
from services.auth_service import AuthService
from services.exceptions import NotAuthenticatedError, StorageError
from services.product_service import ProductService, decimal_places, validate_product_data
from services.result import ErrorKind

STRONG_PASSWORD = "Secret123!"


class TestDecimalPlaces:
    """Test decimal place counting on float prices"""

    @pytest.mark.parametrize("value,expected", [
        (10, 0), (9.9, 1), (9.99, 2), (9.999, 3), (0.1, 1), (1e-05, 5), (1999.99, 2),
    ])
    def test_decimal_places(self, value, expected):
        assert decimal_places(value) == expected


class TestValidateProductData:
    """Test product field rules"""

    def test_valid_product(self):
        result = validate_product_data({"name": "Lamp", "price": 19.99, "stock": 3, "category": "Home"})

        assert result.is_valid is True
        assert result.first_error is None

    @pytest.mark.parametrize("data,error", [
        ({"price": 1}, "Product name is required"),
        ({"name": "   ", "price": 1}, "Product name cannot be empty"),
        ({"name": "x" * 101, "price": 1}, "Product name must be 100 characters or less"),
        ({"name": "Lamp", "price": 1, "description": "d" * 501}, "Product description must be 500 characters or less"),
        ({"name": "Lamp"}, "Product price is required"),
        ({"name": "Lamp", "price": "12"}, "Product price must be a valid number"),
        ({"name": "Lamp", "price": True}, "Product price must be a valid number"),
        ({"name": "Lamp", "price": float("nan")}, "Product price must be a valid number"),
        ({"name": "Lamp", "price": 0}, "Product price must be greater than 0"),
        ({"name": "Lamp", "price": -5}, "Product price must be greater than 0"),
        ({"name": "Lamp", "price": 1000000}, "Product price must be less than $999,999.99"),
        ({"name": "Lamp", "price": 9.999}, "Product price cannot have more than 2 decimal places"),
        ({"name": "Lamp", "price": 1, "category": 5}, "Product category must be a string"),
        ({"name": "Lamp", "price": 1, "image_url": ["x"]}, "Product image URL must be a string"),
        ({"name": "Lamp", "price": 1, "sku": 123}, "Product SKU must be a string"),
        ({"name": "Lamp", "price": 1, "stock": -1}, "Product stock must be a non-negative integer"),
        ({"name": "Lamp", "price": 1, "stock": 1.5}, "Product stock must be a non-negative integer"),
        ({"name": "Lamp", "price": 1, "stock": True}, "Product stock must be a non-negative integer"),
        ({"name": "Lamp", "price": 1, "is_active": "nope"}, "Product active flag must be true or false"),
    ])
    def test_first_error(self, data, error):
        result = validate_product_data(data)

        assert result.is_valid is False
        assert result.first_error == error

    def test_whole_number_float_stock_accepted(self):
        assert validate_product_data({"name": "Lamp", "price": 1, "stock": 5.0}).is_valid

    def test_boundaries_accepted(self):
        assert validate_product_data({"name": "x" * 100, "price": 999999.99}).is_valid
        assert validate_product_data({"name": "Lamp", "price": 0.01, "description": "d" * 500}).is_valid

    def test_errors_in_rule_order(self):
        result = validate_product_data({"name": "", "price": -1, "stock": -1})

        assert result.errors == [
            "Product name is required",
            "Product price must be greater than 0",
            "Product stock must be a non-negative integer",
        ]

    def test_custom_limits(self):
        config = ProductConfig(name_max_length=5, max_price=100.0)

        assert validate_product_data({"name": "Lampshade", "price": 1}, config).first_error == \
            "Product name must be 5 characters or less"
        assert validate_product_data({"name": "Lamp", "price": 150}, config).first_error == \
            "Product price must be less than $100.00"


class TestProductServiceAuth:
    """Every operation requires a signed-in user"""

    def test_reads_raise_when_signed_out(self, products):
        with pytest.raises(NotAuthenticatedError):
            products.get_products()
        with pytest.raises(NotAuthenticatedError):
            products.search_products("")
        with pytest.raises(NotAuthenticatedError):
            products.get_product_stats()

    def test_mutations_fail_when_signed_out(self, products):
        result = products.create_product({"name": "Lamp", "price": 10})

        assert result.success is False
        assert result.error == "User not authenticated"
        assert result.kind == ErrorKind.NOT_AUTHENTICATED
        assert products.clear_all_products().kind == ErrorKind.NOT_AUTHENTICATED


class TestProductCrud:
    """Test create, read, update and delete for the signed-in user"""

    def test_create_product(self, signed_in, products):
        result = products.create_product({"name": "  Lamp  ", "price": 19.99, "description": " Bright "})

        assert result.success is True
        product = result.product
        assert product.id.startswith("product_")
        assert product.user_id == signed_in.get_current_user()["id"]
        assert product.name == "Lamp"
        assert product.description == "Bright"
        assert product.category == "General"
        assert product.stock == 0

    def test_create_rejects_three_decimals(self, signed_in, products):
        assert products.create_product({"name": "Lamp", "price": 9.999}).error == \
            "Product price cannot have more than 2 decimal places"
        assert products.create_product({"name": "Lamp", "price": 9.99}).success is True

    def test_create_requires_data(self, signed_in, products):
        assert products.create_product(None).error == "Product data is required"

    def test_create_storage_failure(self, signed_in, products, storage):
        with patch.object(storage, "save_product", side_effect=StorageError("quota exceeded")):
            result = products.create_product({"name": "Lamp", "price": 10})

        assert result.success is False
        assert result.kind == ErrorKind.STORAGE
        assert "quota exceeded" in result.error

    def test_auto_initializes_database(self, auth_config):
        storage = StorageService()
        service = ProductService(AuthService(storage, config=auth_config), storage)
        service.auth.signup("zoe@example.com", STRONG_PASSWORD)

        assert service.create_product({"name": "Lamp", "price": 10}).success is True
        assert storage.is_database_initialized is True

    def test_get_products_and_product(self, signed_in, products):
        created = products.create_product({"name": "Lamp", "price": 10}).product
        products.create_product({"name": "Desk", "price": 120})

        assert [p.name for p in products.get_products()] == ["Lamp", "Desk"]
        assert products.get_product(created.id).name == "Lamp"
        assert products.get_product("product_missing") is None

    def test_get_product_requires_id(self, signed_in, products):
        with pytest.raises(ValueError, match="Product ID is required"):
            products.get_product("")

    def test_get_products_surfaces_storage_errors(self, signed_in, products, storage):
        with patch.object(storage, "get_products", side_effect=StorageError("unavailable")):
            with pytest.raises(StorageError, match="Failed to retrieve products"):
                products.get_products()

    def test_update_product(self, signed_in, products):
        created = products.create_product({"name": "Lamp", "price": 10}).product

        result = products.update_product(created.id, {
            "price": 12.5, "id": "hijack", "user_id": "someone", "created_at": "1999-01-01", "color": "red"
        })

        assert result.success is True
        assert result.product.id == created.id
        assert result.product.user_id == created.user_id
        assert result.product.created_at == created.created_at
        assert result.product.price == 12.5
        assert products.get_product(created.id).price == 12.5

    def test_update_validates_merged_record(self, signed_in, products):
        created = products.create_product({"name": "Lamp", "price": 10}).product

        assert products.update_product(created.id, {"name": ""}).error == "Product name is required"
        assert products.update_product(created.id, {"price": 1.005}).error == \
            "Product price cannot have more than 2 decimal places"
        assert products.get_product(created.id).name == "Lamp"

    @pytest.mark.parametrize("updates,error", [
        ({"price": 0}, "Product price must be greater than 0"),
        ({"price": -1}, "Product price must be greater than 0"),
        ({"name": "x" * 101}, "Product name must be 100 characters or less"),
        ({"is_active": "nope"}, "Product active flag must be true or false"),
    ])
    def test_update_rejects_invalid_fields(self, signed_in, products, updates, error):
        created = products.create_product({"name": "Lamp", "price": 10}).product

        result = products.update_product(created.id, updates)

        assert result.success is False
        assert result.error == error
        assert products.get_product(created.id) == created

    def test_update_ignores_caller_timestamp(self, signed_in, products):
        created = products.create_product({"name": "Lamp", "price": 10}).product

        result = products.update_product(created.id, {"updated_at": "1999-01-01T00:00:00+00:00"})

        assert result.success is True
        assert result.product.updated_at != "1999-01-01T00:00:00+00:00"

    def test_whole_number_float_stock_stored_as_int(self, signed_in, products):
        created = products.create_product({"name": "Lamp", "price": 10, "stock": 5.0}).product
        assert created.stock == 5
        assert isinstance(created.stock, int)

        updated = products.update_product(created.id, {"stock": 7.0}).product
        assert updated.stock == 7
        assert isinstance(updated.stock, int)

    def test_update_failures(self, signed_in, products):
        created = products.create_product({"name": "Lamp", "price": 10}).product

        assert products.update_product("product_missing", {"name": "X"}).kind == ErrorKind.NOT_FOUND
        assert products.update_product(created.id, None).error == "Updates object is required"
        assert products.update_product("", {"name": "X"}).error == "Product ID is required"

    def test_delete_product(self, signed_in, products):
        created = products.create_product({"name": "Lamp", "price": 10}).product

        assert products.delete_product(created.id).success is True
        assert products.get_product(created.id) is None

        again = products.delete_product(created.id)
        assert again.success is False
        assert again.error == "Product not found"

    def test_clear_all_products(self, signed_in, products):
        for name in ("A", "B", "C"):
            products.create_product({"name": name, "price": 1})

        result = products.clear_all_products()

        assert result.deleted_count == 3
        assert products.get_products() == []


class TestOwnershipIsolation:
    """Users never see or modify each other's products"""

    def test_products_are_scoped_to_owner(self, auth, products):
        auth.signup("alice@example.com", STRONG_PASSWORD)
        alice_product = products.create_product({"name": "Alice lamp", "price": 10}).product
        auth.logout()

        auth.signup("bob@example.com", STRONG_PASSWORD)
        products.create_product({"name": "Bob desk", "price": 50})

        assert [p.name for p in products.get_products()] == ["Bob desk"]
        assert products.get_product(alice_product.id) is None
        assert products.update_product(alice_product.id, {"name": "Stolen"}).kind == ErrorKind.NOT_FOUND
        assert products.delete_product(alice_product.id).success is False
        assert products.clear_all_products().deleted_count == 1

        auth.logout()
        auth.login("alice@example.com", STRONG_PASSWORD)
        assert [p.name for p in products.get_products()] == ["Alice lamp"]


class TestSearchAndStats:
    """Test search and statistics"""

    @pytest.fixture(autouse=True)
    def catalogue(self, signed_in, products):
        products.create_product({"name": "iPhone 15", "price": 999.99, "category": "Electronics", "stock": 2})
        products.create_product({"name": "MacBook Pro", "price": 1999.99, "category": "Computers",
                                 "description": "Laptop for professionals", "sku": "MBP-16"})
        products.create_product({"name": "USB cable", "price": 9.99, "category": "Electronics", "stock": 10})

    def test_search_is_case_insensitive(self, products):
        assert [p.name for p in products.search_products("IPHONE")] == ["iPhone 15"]

    @pytest.mark.parametrize("query,names", [
        ("laptop", ["MacBook Pro"]),
        ("electronics", ["iPhone 15", "USB cable"]),
        ("mbp-16", ["MacBook Pro"]),
        ("nothing matches", []),
    ])
    def test_search_fields(self, products, query, names):
        assert [p.name for p in products.search_products(query)] == names

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query_returns_everything(self, products, query):
        assert len(products.search_products(query)) == 3

    def test_none_query_raises(self, products):
        with pytest.raises(ValueError, match="Search query cannot be None"):
            products.search_products(None)

    def test_stats(self, products):
        stats = products.get_product_stats()

        assert stats.total_products == 3
        assert stats.total_value == round(999.99 * 2 + 9.99 * 10, 2)
        assert stats.categories == {"Electronics": 2, "Computers": 1}
        assert stats.average_price == pytest.approx((999.99 + 1999.99 + 9.99) / 3)

    def test_stats_empty(self, products):
        products.clear_all_products()

        stats = products.get_product_stats()

        assert stats.total_products == 0
        assert stats.total_value == 0
        assert stats.categories == {}
        assert stats.average_price == 0


class TestScenarios:
    """End-to-end product flows"""

    def test_decimal_places_scenario(self, signed_in, products):
        rejected = products.create_product({"name": "Widget", "price": 9.999})
        accepted = products.create_product({"name": "Widget", "price": 9.99})

        assert rejected.success is False
        assert "decimal places" in rejected.error
        assert accepted.success is True
        assert products.get_product(accepted.product.id).price == 9.99

    def test_price_round_trips_unchanged(self, signed_in, products):
        created = products.create_product({"name": "Widget", "price": 29.99}).product

        assert products.get_product(created.id).price == 29.99

    def test_search_scenario(self, signed_in, products):
        for name in ("Widget", "Gadget", "Doohickey"):
            products.create_product({"name": name, "price": 1})

        assert len(products.search_products("")) == 3
        assert products.search_products("zzz-no-match") == []

    def test_other_users_products_never_found_by_search(self, auth, products):
        auth.signup("a@x.com", STRONG_PASSWORD)
        products.create_product({"name": "Private widget", "price": 5})
        auth.logout()

        auth.signup("b@x.com", STRONG_PASSWORD)

        assert products.search_products("widget") == []
        assert products.search_products("") == []
