"""
Unified Configuration System for Product Manager

This module provides a centralized configuration system that consolidates all application settings,
supports environment-based overrides, and provides type-safe configuration access.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
import streamlit as st
import os
from pathlib import Path


def _read_setting(key: str, default: str) -> str:
    """Read a setting from Streamlit secrets, falling back to the environment"""
    # In test environment, prefer environment variables
    if os.getenv("PYTEST_CURRENT_TEST") is not None:
        return os.getenv(key, default)

    try:
        return str(st.secrets.get(key, os.getenv(key, default)))
    except Exception:
        # Secrets file missing or unreadable
        return os.getenv(key, default)


@dataclass
class AuthConfig:
    """Authentication and session configuration"""
    backend: str = "pbkdf2"  # pbkdf2, simple, prototype
    pbkdf2_iterations: int = 100_000
    salt_bytes: int = 16
    key_length: int = 32
    token_bytes: int = 32
    session_timeout_hours: int = 24
    remember_me_days: int = 30
    password_min_length: int = 8
    password_symbols: str = '!@#$%^&*(),.?":{}|<>'

    @classmethod
    def from_secrets(cls) -> 'AuthConfig':
        """Load auth backend selection from Streamlit secrets or environment"""
        return cls(backend=_read_setting("PRODUCT_APP_AUTH_BACKEND", "pbkdf2").lower())


@dataclass
class StorageConfig:
    """Persistent store configuration"""
    key_value_backend: str = "json_file"  # json_file, memory
    key_value_path: str = "data/local_storage.json"
    db_name: str = "ProductAppDB"
    db_version: int = 1
    db_path: str = "data/product_app.db"
    enable_record_store: bool = True

    @classmethod
    def from_secrets(cls) -> 'StorageConfig':
        """Load storage locations from Streamlit secrets or environment"""
        return cls(
            key_value_backend=_read_setting("PRODUCT_APP_KV_BACKEND", "json_file").lower(),
            key_value_path=_read_setting("PRODUCT_APP_KV_PATH", "data/local_storage.json"),
            db_path=_read_setting("PRODUCT_APP_DB_PATH", "data/product_app.db"),
            enable_record_store=_read_setting("PRODUCT_APP_ENABLE_DB", "true").lower() == "true",
        )


@dataclass
class ProductConfig:
    """Product validation and backend configuration"""
    backend: str = "storage"  # storage, prototype
    name_max_length: int = 100
    description_max_length: int = 500
    max_price: float = 999999.99
    max_price_decimals: int = 2
    default_category: str = "General"

    @classmethod
    def from_secrets(cls) -> 'ProductConfig':
        """Load product backend selection from Streamlit secrets or environment"""
        return cls(backend=_read_setting("PRODUCT_APP_PRODUCT_BACKEND", "storage").lower())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "name_max_length": self.name_max_length,
            "description_max_length": self.description_max_length,
            "max_price": self.max_price,
            "max_price_decimals": self.max_price_decimals,
            "default_category": self.default_category,
        }


@dataclass
class UIConfig:
    """User interface configuration"""
    app_title: str = "Product Manager"
    tagline: str = "Manage your product catalogue"
    currency: str = "USD"
    currency_symbol: str = "$"
    date_format: str = "%b %d, %Y"
    categories: List[str] = field(default_factory=lambda: [
        "General", "Electronics", "Computers", "Audio", "Wearables", "Home", "Clothing"
    ])


@dataclass
class LoggingConfig:
    """Logging and monitoring configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_file_logging: bool = True
    log_file: str = "logs/app.log"


@dataclass
class AppConfig:
    """Main application configuration"""
    auth: AuthConfig = field(default_factory=AuthConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    products: ProductConfig = field(default_factory=ProductConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Environment settings
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    @classmethod
    def load(cls) -> 'AppConfig':
        """Load configuration with environment overrides"""
        config = cls()

        config.auth = AuthConfig.from_secrets()
        config.storage = StorageConfig.from_secrets()
        config.products = ProductConfig.from_secrets()

        # Apply environment-specific overrides
        if config.environment == "production":
            config.debug = False
            config.logging.level = "WARNING"
            # Demo backends are never served in production
            config.auth.backend = "pbkdf2"
            config.products.backend = "storage"
        elif config.environment == "development":
            config.debug = True
            config.logging.level = "DEBUG"

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if self.auth.backend not in ("pbkdf2", "simple", "prototype"):
            errors.append(f"Unknown auth backend '{self.auth.backend}'")

        if self.products.backend not in ("storage", "prototype"):
            errors.append(f"Unknown product backend '{self.products.backend}'")

        if self.storage.key_value_backend not in ("json_file", "memory"):
            errors.append(f"Unknown key-value backend '{self.storage.key_value_backend}'")

        if self.auth.pbkdf2_iterations < 1:
            errors.append("PBKDF2 iterations must be positive")

        if self.products.max_price <= 0:
            errors.append("Maximum product price must be positive")

        # Check file paths exist
        if self.storage.key_value_backend == "json_file":
            Path(self.storage.key_value_path).parent.mkdir(parents=True, exist_ok=True)

        if self.storage.enable_record_store and self.storage.db_path != ":memory:":
            Path(self.storage.db_path).parent.mkdir(parents=True, exist_ok=True)

        if self.logging.enable_file_logging:
            log_dir = Path(self.logging.log_file).parent
            if not log_dir.exists():
                log_dir.mkdir(parents=True, exist_ok=True)

        return errors


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = AppConfig.load()

        # Validate configuration
        errors = _config.validate()
        if errors:
            import warnings
            for error in errors:
                warnings.warn(f"Configuration error: {error}")

    return _config


def reload_config() -> AppConfig:
    """Reload configuration (useful for testing)"""
    global _config
    _config = None
    return get_config()
