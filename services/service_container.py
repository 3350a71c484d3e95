"""
Service wiring - builds storage, auth and product services from configuration.
"""

from dataclasses import dataclass
from typing import Optional, Union

from config.app_config import AppConfig, get_config
from infrastructure.storage import KeyValueStore, StorageService
from services.auth_service import AuthProvider, create_auth_service
from services.product_service import ProductService, PrototypeProductService, create_product_service
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Services sharing one storage backend"""
    config: AppConfig
    storage: StorageService
    auth: AuthProvider
    products: Union[ProductService, PrototypeProductService]

    def close(self):
        self.storage.close()


def build_services(config: Optional[AppConfig] = None,
                   session_store: Optional[KeyValueStore] = None) -> ServiceContainer:
    """
    Create the service graph for one application instance

    Args:
        config: Application configuration (process-wide config when omitted)
        session_store: Store for the signed-in session (the shared
            key-value store when omitted)

    Returns:
        ServiceContainer with storage, auth and product services
    """
    config = config or get_config()

    storage = StorageService.from_config(config.storage, session_store=session_store)
    if config.storage.enable_record_store:
        storage.initialize_database()

    auth = create_auth_service(config, storage)
    products = create_product_service(config, auth, storage)

    logger.info(f"Services ready (auth={config.auth.backend}, products={config.products.backend})")
    return ServiceContainer(config=config, storage=storage, auth=auth, products=products)
