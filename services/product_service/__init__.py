"""
Product service - validation, ownership-scoped CRUD, search and statistics.
"""

from .models import Product, ProductStats
from .validation import ProductValidation, validate_product_data, decimal_places
from .product_manager import ProductService
from .prototype_products import PrototypeProductService, DEMO_USER_ID, create_product_service

__all__ = [
    'Product',
    'ProductStats',
    'ProductValidation',
    'validate_product_data',
    'decimal_places',
    'ProductService',
    'PrototypeProductService',
    'DEMO_USER_ID',
    'create_product_service'
]
