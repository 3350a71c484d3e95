"""
Product data models.
"""

from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict

from services.auth_service.models import utc_now


@dataclass
class Product:
    """Product owned by a single user"""
    id: str
    user_id: str
    name: str
    price: float
    description: str = ""
    category: str = "General"
    image_url: str = ""
    sku: str = ""
    stock: int = 0
    is_active: bool = True
    created_at: str = field(default_factory=lambda: utc_now().isoformat())
    updated_at: str = field(default_factory=lambda: utc_now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        known = cls.field_names()
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass
class ProductStats:
    """Aggregates derived from a user's products"""
    total_products: int = 0
    total_value: float = 0.0
    categories: Dict[str, int] = field(default_factory=dict)
    average_price: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
