"""
Authentication service - PBKDF2 password hashing and session lifecycle.
"""

import uuid
from datetime import timedelta
from typing import Any, Dict, Optional

from config.app_config import AuthConfig
from services.auth_service.models import Session, User, utc_now
from services.auth_service.password_hasher import PasswordHasher
from services.auth_service.provider import AuthProvider
from services.auth_service.validators import (
    PasswordValidation,
    check_password_strength,
    validate_email as _validate_email,
    validate_email_format,
    validate_password as _validate_password,
)
from services.exceptions import AuthenticationError, NotAuthenticatedError
from services.result import ErrorKind, Result
from utils.logging_config import get_logger, log_auth_event

GENERIC_LOGIN_ERROR = "Invalid email or password"


class AuthService(AuthProvider):
    """
    Main authentication service.
    Handles registration, login, logout and session validation against
    the storage service it is given.
    """

    name = "pbkdf2"

    def __init__(self, storage, hasher: Optional[PasswordHasher] = None,
                 config: Optional[AuthConfig] = None):
        """
        Initialize auth service

        Args:
            storage: StorageService holding users and the active session
            hasher: Password hasher (built from config when omitted)
            config: Auth configuration (defaults when omitted)
        """
        self.config = config or AuthConfig()
        self.storage = storage
        self.hasher = hasher or PasswordHasher(
            iterations=self.config.pbkdf2_iterations,
            salt_bytes=self.config.salt_bytes,
            key_length=self.config.key_length,
            token_bytes=self.config.token_bytes
        )
        self.logger = get_logger(__name__)
        self._reset()

    def _reset(self):
        """Clear in-memory authentication state"""
        self.current_user: Optional[Dict[str, Any]] = None
        self.session_token: Optional[str] = None

    @property
    def session_lifetime(self) -> timedelta:
        return timedelta(hours=self.config.session_timeout_hours)

    @property
    def remember_me_lifetime(self) -> timedelta:
        return timedelta(days=self.config.remember_me_days)

    def _start_session(self, user: User, remember_me: bool = False) -> Session:
        """Issue a token, persist it as the active session and adopt it in memory"""
        now = utc_now()
        lifetime = self.remember_me_lifetime if remember_me else self.session_lifetime

        session = Session(
            user_id=user.id,
            email=user.email,
            username=user.username,
            token=self.hasher.generate_session_token(),
            expires_at=(now + lifetime).isoformat(),
            created_at=now.isoformat(),
            remember_me=remember_me
        )
        self.storage.save_session(session)

        self.current_user = user.to_public_dict()
        self.session_token = session.token
        return session

    def _discard_session(self):
        """Reset state and drop the persisted session, ignoring storage failures"""
        self._reset()
        try:
            self.storage.clear_session()
        except Exception as e:
            self.logger.warning(f"Could not remove stale session: {e}")

    def signup(self, email: str, password: str, username: Optional[str] = None) -> Result:
        """
        Register a new user and sign them in

        Args:
            email: Email address
            password: Plain text password
            username: Optional username (defaults to the email local part)

        Returns:
            Result with user and token, or the first validation error
        """
        try:
            if not password:
                return Result.fail("Email and password are required")

            email_error = validate_email_format(email)
            if email_error:
                return Result.fail(email_error)

            password_error = check_password_strength(
                password, self.config.password_min_length, self.config.password_symbols
            )
            if password_error:
                return Result.fail(password_error)

            email = email.lower()
            if self.storage.get_user(email):
                self.logger.warning(f"Signup for existing email: {email}")
                return Result.fail("User with this email already exists", ErrorKind.CONFLICT)

            salt = self.hasher.generate_salt()
            password_hash = self.hasher.hash_password(password, salt)

            user = User(
                id=f"user_{uuid.uuid4().hex}",
                username=(username or "").strip() or email.split("@")[0],
                email=email,
                password_hash=password_hash.hex(),
                salt=salt.hex()
            )
            self.storage.save_user(user)

            session = self._start_session(user)

            log_auth_event(self.logger, "signup", email=user.email, user_id=user.id)
            return Result.ok(user=dict(self.current_user), token=session.token)

        except Exception as e:
            self.logger.error(f"Error during signup: {e}")
            return Result.fail(str(e) or "Registration failed", ErrorKind.STORAGE)

    def login(self, email: str, password: str, remember_me: bool = False) -> Result:
        """
        Authenticate user and create session

        Args:
            email: User email (matched case-insensitively)
            password: Plain text password
            remember_me: Extend the session to the remember-me lifetime

        Returns:
            Result with user and token on success
        """
        try:
            if not email or not password:
                return Result.fail("Email and password are required")

            user = self.storage.get_user(email.lower())

            if user is None or not user.is_active:
                log_auth_event(self.logger, "login_failed", email=email.lower(),
                               reason="unknown" if user is None else "inactive")
                return Result.fail(GENERIC_LOGIN_ERROR, ErrorKind.AUTHENTICATION)

            try:
                salt = bytes.fromhex(user.salt)
                stored_hash = bytes.fromhex(user.password_hash)
            except ValueError:
                self.logger.error(f"Stored credentials for {user.email} are not valid hex")
                return Result.fail(GENERIC_LOGIN_ERROR, ErrorKind.AUTHENTICATION)

            if not self.hasher.verify_password(password, salt, stored_hash):
                log_auth_event(self.logger, "login_failed", email=user.email, reason="password")
                return Result.fail(GENERIC_LOGIN_ERROR, ErrorKind.AUTHENTICATION)

            user.last_login_at = utc_now().isoformat()
            self.storage.save_user(user)

            session = self._start_session(user, remember_me)

            log_auth_event(self.logger, "login", email=user.email, remember_me=remember_me)
            return Result.ok(user=dict(self.current_user), token=session.token)

        except Exception as e:
            self.logger.error(f"Error during login: {e}")
            return Result.fail(str(e) or "Login failed", ErrorKind.STORAGE)

    def logout(self) -> Result:
        """
        Logout current user. In-memory state is always cleared, even when
        the persisted session cannot be removed.
        """
        email = self.current_user.get("email") if self.current_user else None
        try:
            self.storage.clear_session()
        except Exception as e:
            self._reset()
            self.logger.warning(f"Session removal failed during logout: {e}")
            return Result.fail(str(e) or "Logout failed", ErrorKind.STORAGE)

        self._reset()
        log_auth_event(self.logger, "logout", email=email)
        return Result.ok()

    def is_authenticated(self) -> bool:
        """
        True only when in-memory state matches an unexpired persisted session.
        Any disagreement resets to signed out; never raises.
        """
        if not self.current_user or not self.session_token:
            return False

        try:
            session = self.storage.get_session()

            if session is None:
                self._discard_session()
                return False

            if session.token != self.session_token or session.user_id != self.current_user.get("id"):
                self.logger.info("Persisted session no longer matches in-memory state")
                self._discard_session()
                return False

            if session.is_expired():
                self.logger.info(f"Session expired for {session.email}")
                self._discard_session()
                return False

            return True

        except Exception as e:
            self.logger.error(f"Error checking session: {e}")
            self._reset()
            return False

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        if not self.is_authenticated():
            return None
        return dict(self.current_user)

    def restore_session(self) -> bool:
        """
        Restore in-memory state from the persisted session

        Returns:
            True when a valid session for an active user was adopted
        """
        try:
            session = self.storage.get_session()
            if session is None:
                self._discard_session()
                return False

            if session.is_expired():
                self.logger.info(f"Stored session expired for {session.email}")
                self._discard_session()
                return False

            user = self.storage.get_user(session.email)
            if user is None or not user.is_active or user.id != session.user_id:
                self.logger.warning(f"Stored session refers to an unavailable account: {session.email}")
                self._discard_session()
                return False

            self.current_user = user.to_public_dict()
            self.session_token = session.token
            self.logger.info(f"Session restored for user: {user.username}")
            return True

        except Exception as e:
            self.logger.error(f"Error restoring session: {e}")
            self._discard_session()
            return False

    def validate_session(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Validate a session token against the persisted session

        Returns:
            User projection if valid, None otherwise
        """
        if not token:
            return None

        try:
            session = self.storage.get_session()
            if session is None or session.token != token:
                return None

            if session.is_expired():
                self._discard_session()
                return None

            return session.to_user_dict()
        except Exception as e:
            self.logger.error(f"Error validating session: {e}")
            return None

    def change_password(self, current_password: str, new_password: str) -> bool:
        """
        Rotate the signed-in user's password. Raises on every failure.
        """
        if not self.is_authenticated():
            raise NotAuthenticatedError()

        if not current_password or not new_password:
            raise AuthenticationError("Current password and new password are required")

        strength_error = check_password_strength(
            new_password, self.config.password_min_length, self.config.password_symbols
        )
        if strength_error:
            raise AuthenticationError(f"New password is too weak: {strength_error}")

        user = self.storage.get_user(self.current_user["email"])
        if user is None:
            raise AuthenticationError("User not found")

        try:
            verified = self.hasher.verify_password(
                current_password, bytes.fromhex(user.salt), bytes.fromhex(user.password_hash)
            )
        except ValueError:
            verified = False

        if not verified:
            log_auth_event(self.logger, "password_change_failed", email=user.email)
            raise AuthenticationError("Current password is incorrect")

        new_salt = self.hasher.generate_salt()
        user.password_hash = self.hasher.hash_password(new_password, new_salt).hex()
        user.salt = new_salt.hex()
        user.updated_at = utc_now().isoformat()
        self.storage.save_user(user)

        log_auth_event(self.logger, "password_changed", email=user.email)
        return True

    def validate_email(self, email: str) -> bool:
        return _validate_email(email)

    def validate_password(self, password: str) -> PasswordValidation:
        return _validate_password(password, self.config.password_min_length, self.config.password_symbols)

    def register_user(self, user_data: Optional[Dict[str, Any]]) -> Result:
        """Signup taking a form dict with email, password and optional username"""
        if not user_data:
            return Result.fail("User data is required")
        return self.signup(user_data.get("email"), user_data.get("password"), user_data.get("username"))

    def login_user(self, email: str, password: str) -> Result:
        return self.login(email, password)

    def logout_user(self) -> Result:
        return self.logout()

    def clear_auth_data(self):
        """Logout and remove every auth-related key from the key-value store"""
        self.logout()
        for key in ("authToken", "refreshToken"):
            try:
                self.storage.kv_store.remove_item(key)
            except Exception as e:
                self.logger.warning(f"Could not remove {key}: {e}")
