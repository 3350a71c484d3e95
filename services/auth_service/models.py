"""
User and session data models for the authentication service.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now() -> datetime:
    """Timezone-aware current time used for every stored timestamp"""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC"""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class User:
    """User data model"""
    id: str
    username: str
    email: str
    password_hash: str  # hex encoded PBKDF2 output
    salt: str  # hex encoded
    created_at: str = field(default_factory=lambda: utc_now().isoformat())
    is_active: bool = True
    last_login_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_public_dict(self) -> Dict[str, Any]:
        """Projection handed to callers, without credential material"""
        data = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }
        if self.last_login_at:
            data["last_login_at"] = self.last_login_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=data["id"],
            username=data.get("username") or data["email"].split("@")[0],
            email=data["email"],
            password_hash=data.get("password_hash", ""),
            salt=data.get("salt", ""),
            created_at=data.get("created_at") or utc_now().isoformat(),
            is_active=bool(data.get("is_active", True)),
            last_login_at=data.get("last_login_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Session:
    """User session data model"""
    user_id: str
    email: str
    username: str
    token: str
    expires_at: str
    created_at: str = field(default_factory=lambda: utc_now().isoformat())
    remember_me: bool = False

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return now > parse_timestamp(self.expires_at)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_user_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "is_active": True,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        return cls(
            user_id=data["user_id"],
            email=data["email"],
            username=data["username"],
            token=data["token"],
            expires_at=data["expires_at"],
            created_at=data.get("created_at") or utc_now().isoformat(),
            remember_me=bool(data.get("remember_me", False)),
        )
