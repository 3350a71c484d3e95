"""
Result object returned by mutating service operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Failure categories carried by a failed Result"""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"


@dataclass
class Result:
    """
    Outcome of a service call.

    Successful results carry whichever payload the operation produces
    (user, token, product, deleted_count). Failed results carry a
    user-facing message and an ErrorKind.
    """
    success: bool
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    product: Optional[Any] = None
    deleted_count: Optional[int] = None
    message: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **payload) -> 'Result':
        return cls(success=True, **payload)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.VALIDATION) -> 'Result':
        return cls(success=False, error=error, kind=kind)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict view with unset payload fields dropped"""
        data: Dict[str, Any] = {"success": self.success}
        if self.error is not None:
            data["error"] = self.error
        if self.kind is not None:
            data["kind"] = self.kind.value
        for key in ("user", "token", "message", "deleted_count"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.product is not None:
            data["product"] = self.product.to_dict() if hasattr(self.product, "to_dict") else self.product
        data.update(self.extra)
        return data
