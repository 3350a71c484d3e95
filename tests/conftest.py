"""
Shared fixtures: in-memory stores and services with fast password hashing
"""

import pytest

from config.app_config import AppConfig, AuthConfig
from infrastructure.storage import MemoryKeyValueStore, RecordStore, StorageService
from services.auth_service import AuthService
from services.product_service import ProductService

STRONG_PASSWORD = "Secret123!"
TEST_ITERATIONS = 1_000


@pytest.fixture
def auth_config():
    return AuthConfig(pbkdf2_iterations=TEST_ITERATIONS)


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def record_store():
    store = RecordStore(db_path=":memory:")
    store.initialize()
    yield store
    store.close()


@pytest.fixture
def storage(kv_store, record_store):
    return StorageService(kv_store=kv_store, record_store=record_store)


@pytest.fixture
def auth(storage, auth_config):
    return AuthService(storage, config=auth_config)


@pytest.fixture
def products(auth, storage):
    return ProductService(auth, storage)


@pytest.fixture
def signed_in(auth):
    """Auth service with alice@example.com signed in"""
    result = auth.signup("alice@example.com", STRONG_PASSWORD, "alice")
    assert result.success
    return auth


@pytest.fixture
def app_config(tmp_path):
    config = AppConfig()
    config.auth.pbkdf2_iterations = TEST_ITERATIONS
    config.storage.key_value_backend = "memory"
    config.storage.db_path = ":memory:"
    config.logging.enable_file_logging = False
    config.logging.log_file = str(tmp_path / "app.log")
    return config
