"""
Demo authentication backends.

SimpleAuthService and PrototypeAuthService implement the same AuthProvider
interface as AuthService with deliberately weaker rules, so the UI can be
demonstrated without real credentials. Never select them in production.
"""

import hashlib
import json
import uuid
from typing import Any, Dict, List, Optional

from config.app_config import AppConfig
from services.auth_service.auth_manager import AuthService
from services.auth_service.models import utc_now
from services.auth_service.provider import AuthProvider
from services.auth_service.validators import validate_email
from services.result import ErrorKind, Result
from utils.logging_config import get_logger


class SimpleAuthService(AuthProvider):
    """
    In-memory user map mirrored into the key-value store; the signed-in
    user is kept in the session store.
    Passwords are stored as unsalted SHA-256 digests.
    """

    name = "simple"
    USERS_KEY = "simpleAuth_users"
    SESSION_KEY = "simpleAuth_session"
    MIN_PASSWORD_LENGTH = 6

    def __init__(self, kv_store, session_store=None):
        self.kv_store = kv_store
        self.session_store = session_store if session_store is not None else kv_store
        self.logger = get_logger(__name__)
        self.users: Dict[str, Dict[str, Any]] = {}
        self.current_user: Optional[Dict[str, Any]] = None
        self.is_initialized = False

    def init(self):
        """Load users and any saved session on first use"""
        if self.is_initialized:
            return

        saved_users = self.kv_store.get_item(self.USERS_KEY)
        if saved_users:
            try:
                self.users = dict(json.loads(saved_users))
            except (ValueError, TypeError):
                self.logger.warning("Ignoring unreadable simple-auth user map")

        saved_session = self.session_store.get_item(self.SESSION_KEY)
        if saved_session:
            try:
                self.current_user = json.loads(saved_session)
            except ValueError:
                self.current_user = None

        self.is_initialized = True

    @staticmethod
    def _digest(password: str) -> str:
        return hashlib.sha256(password.encode("utf-8")).hexdigest()

    def _save_users(self):
        self.kv_store.set_item(self.USERS_KEY, json.dumps(self.users))

    def _adopt(self, user: Dict[str, Any]):
        self.current_user = {k: v for k, v in user.items() if k != "password"}
        self.session_store.set_item(self.SESSION_KEY, json.dumps(self.current_user))

    def signup(self, email: str, password: str, username: Optional[str] = None) -> Result:
        self.init()

        if not validate_email(email):
            return Result.fail("Invalid email address")

        if not password or len(password) < self.MIN_PASSWORD_LENGTH:
            return Result.fail(f"Password must be at least {self.MIN_PASSWORD_LENGTH} characters")

        if email in self.users:
            return Result.fail("User already exists", ErrorKind.CONFLICT)

        user = {
            "id": f"user_{uuid.uuid4().hex[:12]}",
            "email": email,
            "username": username or email.split("@")[0],
            "password": self._digest(password),
            "created_at": utc_now().isoformat()
        }
        self.users[email] = user
        self._save_users()
        self._adopt(user)

        return Result.ok(user=dict(self.current_user), message="Account created successfully!")

    def login(self, email: str, password: str, remember_me: bool = False) -> Result:
        self.init()

        if not validate_email(email):
            return Result.fail("Invalid email address")

        user = self.users.get(email)
        if user is None:
            return Result.fail("User not found", ErrorKind.AUTHENTICATION)

        if user["password"] != self._digest(password or ""):
            return Result.fail("Invalid password", ErrorKind.AUTHENTICATION)

        self._adopt(user)
        return Result.ok(user=dict(self.current_user), message="Login successful!")

    def logout(self) -> Result:
        self.current_user = None
        self.session_store.remove_item(self.SESSION_KEY)
        return Result.ok(message="Logged out successfully!")

    def is_authenticated(self) -> bool:
        self.init()
        return self.current_user is not None

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        self.init()
        return self.current_user

    def get_all_users(self) -> List[Dict[str, Any]]:
        """Users without password digests (debugging aid)"""
        self.init()
        return [
            {k: user[k] for k in ("id", "email", "username", "created_at")}
            for user in self.users.values()
        ]


class PrototypeAuthService(AuthProvider):
    """
    Fake authentication for UI prototyping. Any well-formed credentials
    succeed and produce a throwaway user.
    """

    name = "prototype"
    USER_KEY = "prototypeAuth_user"
    MIN_PASSWORD_LENGTH = 6

    def __init__(self, kv_store):
        self.kv_store = kv_store
        self.current_user: Optional[Dict[str, Any]] = None
        self.is_initialized = False

    def init(self):
        if not self.is_initialized:
            fake_user = self.kv_store.get_item(self.USER_KEY)
            if fake_user:
                try:
                    self.current_user = json.loads(fake_user)
                except ValueError:
                    self.current_user = None
            self.is_initialized = True

    def validate_signup(self, email: str, password: str, confirm_password: Optional[str] = None) -> List[str]:
        errors = []

        if not email or not email.strip():
            errors.append("Email is required")
        elif not validate_email(email):
            errors.append("Please enter a valid email address")

        if not password or not password.strip():
            errors.append("Password is required")
        elif len(password) < self.MIN_PASSWORD_LENGTH:
            errors.append(f"Password must be at least {self.MIN_PASSWORD_LENGTH} characters long")

        if confirm_password is not None:
            if not confirm_password.strip():
                errors.append("Please confirm your password")
            elif password != confirm_password:
                errors.append("Passwords do not match")

        return errors

    def validate_login(self, email: str, password: str) -> List[str]:
        errors = []

        if not email or not email.strip():
            errors.append("Email is required")
        elif not validate_email(email):
            errors.append("Please enter a valid email address")

        if not password or not password.strip():
            errors.append("Password is required")

        return errors

    def _adopt(self, user: Dict[str, Any]):
        self.current_user = user
        self.kv_store.set_item(self.USER_KEY, json.dumps(user))

    def signup(self, email: str, password: str, username: Optional[str] = None,
               confirm_password: Optional[str] = None) -> Result:
        errors = self.validate_signup(email, password, confirm_password)
        if errors:
            result = Result.fail(errors[0])
            result.extra["errors"] = errors
            return result

        user = {
            "id": f"user_{uuid.uuid4().hex[:12]}",
            "email": email,
            "username": username or email.split("@")[0],
            "created_at": utc_now().isoformat()
        }
        self._adopt(user)
        return Result.ok(user=dict(user), message="Account created successfully!")

    def login(self, email: str, password: str, remember_me: bool = False) -> Result:
        errors = self.validate_login(email, password)
        if errors:
            result = Result.fail(errors[0])
            result.extra["errors"] = errors
            return result

        user = {
            "id": "user_demo_123",
            "email": email,
            "username": email.split("@")[0],
            "last_login_at": utc_now().isoformat()
        }
        self._adopt(user)
        return Result.ok(user=dict(user), message="Login successful!")

    def logout(self) -> Result:
        self.current_user = None
        self.kv_store.remove_item(self.USER_KEY)
        return Result.ok(message="Logged out successfully!")

    def is_authenticated(self) -> bool:
        self.init()
        return self.current_user is not None

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        self.init()
        return self.current_user

    def auto_login_demo(self) -> Dict[str, Any]:
        """Sign in as the shared demo user"""
        demo_user = {
            "id": "demo_user",
            "email": "demo@prototype.com",
            "username": "Demo User",
            "created_at": utc_now().isoformat()
        }
        self._adopt(demo_user)
        return demo_user

    def clear_all_data(self):
        self.current_user = None
        self.kv_store.remove_item(self.USER_KEY)


def create_auth_service(config: AppConfig, storage) -> AuthProvider:
    """
    Build the auth backend named by config.auth.backend

    Args:
        config: Application configuration
        storage: StorageService shared with the product service

    Returns:
        AuthProvider implementation
    """
    backend = config.auth.backend
    if backend == "pbkdf2":
        return AuthService(storage, config=config.auth)
    if backend == "simple":
        return SimpleAuthService(storage.kv_store, storage.session_store)
    if backend == "prototype":
        return PrototypeAuthService(storage.session_store)
    raise ValueError(f"Unknown auth backend: {backend}")
