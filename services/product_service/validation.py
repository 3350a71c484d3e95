"""
Product field validation.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

from config.app_config import ProductConfig


@dataclass
class ProductValidation:
    """Outcome of product validation; errors are in rule order"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    @property
    def first_error(self) -> Optional[str]:
        return self.errors[0] if self.errors else None


def is_number(value: Any) -> bool:
    """Real int/float, excluding bool and NaN"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def decimal_places(value: float) -> int:
    """Digits after the decimal point in the shortest repr of value"""
    try:
        exponent = Decimal(repr(value)).as_tuple().exponent
    except InvalidOperation:
        return 0
    return max(0, -exponent) if isinstance(exponent, int) else 0


def _optional_string_error(data: Mapping[str, Any], key: str, label: str) -> Optional[str]:
    value = data.get(key)
    if value and not isinstance(value, str):
        return f"Product {label} must be a string"
    return None


def validate_product_data(data: Mapping[str, Any], config: Optional[ProductConfig] = None) -> ProductValidation:
    """
    Validate product fields

    Args:
        data: Product fields (name, description, price, category, image_url, sku, stock)
        config: Limits to apply (defaults when omitted)

    Returns:
        ProductValidation listing every failed rule
    """
    config = config or ProductConfig()
    errors = []

    name = data.get("name")
    if not name or not isinstance(name, str):
        errors.append("Product name is required")
    elif not name.strip():
        errors.append("Product name cannot be empty")
    elif len(name) > config.name_max_length:
        errors.append(f"Product name must be {config.name_max_length} characters or less")

    description = data.get("description")
    if description and not isinstance(description, str):
        errors.append("Product description must be a string")
    elif description and len(description) > config.description_max_length:
        errors.append(f"Product description must be {config.description_max_length} characters or less")

    price = data.get("price")
    if price is None:
        errors.append("Product price is required")
    elif not is_number(price):
        errors.append("Product price must be a valid number")
    elif price <= 0:
        errors.append("Product price must be greater than 0")
    elif price > config.max_price:
        errors.append(f"Product price must be less than ${config.max_price:,.2f}")
    elif decimal_places(price) > config.max_price_decimals:
        errors.append(f"Product price cannot have more than {config.max_price_decimals} decimal places")

    for key, label in (("category", "category"), ("image_url", "image URL"), ("sku", "SKU")):
        error = _optional_string_error(data, key, label)
        if error:
            errors.append(error)

    stock = data.get("stock")
    if stock is not None:
        if not is_number(stock) or not float(stock).is_integer() or stock < 0:
            errors.append("Product stock must be a non-negative integer")

    is_active = data.get("is_active")
    if is_active is not None and not isinstance(is_active, bool):
        errors.append("Product active flag must be true or false")

    return ProductValidation(is_valid=not errors, errors=errors)
