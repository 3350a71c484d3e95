"""
Environment-specific configurations
"""

import os
from typing import Callable, Dict

from config.app_config import AppConfig
from .development import get_development_config
from .production import get_production_config

ENVIRONMENTS: Dict[str, Callable[[], AppConfig]] = {
    "development": get_development_config,
    "production": get_production_config,
}


def get_environment_config() -> AppConfig:
    """
    Configuration for the environment named by APP_ENV

    development (the default) and production have dedicated overrides;
    any other name gets the base configuration loaded from secrets.
    """
    env = os.getenv("APP_ENV", "development").lower()
    factory = ENVIRONMENTS.get(env)
    return factory() if factory else AppConfig.load()
