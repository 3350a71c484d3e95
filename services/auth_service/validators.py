"""
Email and password validation rules.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_PASSWORD_SYMBOLS = '!@#$%^&*(),.?":{}|<>'
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class PasswordValidation:
    """Outcome of a password strength check"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def validate_email_format(email) -> Optional[str]:
    """
    Apply the signup email rules

    Returns:
        Error message, or None when the email is acceptable
    """
    invalid = "Invalid email format"

    if not email or not isinstance(email, str):
        return invalid

    if email.startswith("@") or email.endswith("@") or ".." in email:
        return invalid

    parts = email.split("@")
    if len(parts) != 2:
        return invalid

    local_part, domain = parts
    if not local_part or not domain or "." not in domain:
        return invalid

    return None


def validate_email(email) -> bool:
    """General email shape check used by forms"""
    if not email or not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def _has_symbol(password: str, symbols: str) -> bool:
    return any(ch in symbols for ch in password)


def validate_password(password, min_length: int = 8,
                      symbols: str = DEFAULT_PASSWORD_SYMBOLS) -> PasswordValidation:
    """Check every password rule and report all failures"""
    if not password or not isinstance(password, str):
        return PasswordValidation(is_valid=False, errors=["Password is required"])

    errors = []

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters long")

    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")

    if not _has_symbol(password, symbols):
        errors.append("Password must contain at least one special character")

    return PasswordValidation(is_valid=not errors, errors=errors)


def check_password_strength(password: str, min_length: int = 8,
                            symbols: str = DEFAULT_PASSWORD_SYMBOLS) -> Optional[str]:
    """Signup password rule: first failure only, with a combined character-class message"""
    if len(password) < min_length:
        return f"Password must be at least {min_length} characters long"

    has_lower = re.search(r"[a-z]", password) is not None
    has_upper = re.search(r"[A-Z]", password) is not None
    has_digit = re.search(r"\d", password) is not None

    if not (has_lower and has_upper and has_digit and _has_symbol(password, symbols)):
        return "Password must contain uppercase, lowercase, numbers, and symbols"

    return None
