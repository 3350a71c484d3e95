"""
Auth service - password hashing, validation and session lifecycle.
"""

from .models import User, Session, utc_now, parse_timestamp
from .password_hasher import PasswordHasher
from .validators import (
    PasswordValidation,
    validate_email,
    validate_email_format,
    validate_password,
    check_password_strength
)
from .provider import AuthProvider
from .auth_manager import AuthService, GENERIC_LOGIN_ERROR
from .alternate_auth import SimpleAuthService, PrototypeAuthService, create_auth_service

__all__ = [
    'User',
    'Session',
    'utc_now',
    'parse_timestamp',
    'PasswordHasher',
    'PasswordValidation',
    'validate_email',
    'validate_email_format',
    'validate_password',
    'check_password_strength',
    'AuthProvider',
    'AuthService',
    'GENERIC_LOGIN_ERROR',
    'SimpleAuthService',
    'PrototypeAuthService',
    'create_auth_service'
]
