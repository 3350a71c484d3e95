"""
Tests for data models and the Result type
"""

from datetime import timezone

from services.auth_service.models import User, parse_timestamp
from services.product_service.models import Product, ProductStats
from services.result import ErrorKind, Result


class TestUser:

    def test_public_dict_hides_credentials(self):
        user = User(id="user_1", username="alice", email="alice@example.com",
                    password_hash="ab" * 32, salt="cd" * 16)

        public = user.to_public_dict()

        assert "password_hash" not in public
        assert "salt" not in public
        assert public["email"] == "alice@example.com"

    def test_from_dict_fills_username(self):
        user = User.from_dict({"id": "user_1", "email": "bob@example.com"})

        assert user.username == "bob"
        assert user.is_active is True

    def test_naive_timestamps_are_utc(self):
        assert parse_timestamp("2024-01-01T00:00:00").tzinfo == timezone.utc


class TestProduct:

    def test_from_dict_ignores_unknown_fields(self):
        product = Product.from_dict({"id": "p1", "user_id": "u1", "name": "Lamp", "price": 5, "color": "red"})

        assert product.name == "Lamp"
        assert product.category == "General"
        assert not hasattr(product, "color")

    def test_stats_to_dict(self):
        assert ProductStats().to_dict() == {
            "total_products": 0, "total_value": 0.0, "categories": {}, "average_price": 0.0
        }


class TestResult:

    def test_ok_is_truthy(self):
        result = Result.ok(token="abc")

        assert result
        assert result.to_dict() == {"success": True, "token": "abc"}

    def test_fail_is_falsy(self):
        result = Result.fail("Product not found", ErrorKind.NOT_FOUND)

        assert not result
        assert result.to_dict() == {"success": False, "error": "Product not found", "kind": "not_found"}

    def test_product_payload_serialized(self):
        product = Product(id="p1", user_id="u1", name="Lamp", price=5)

        assert Result.ok(product=product).to_dict()["product"]["name"] == "Lamp"
