"""
Capability interface shared by every authentication backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from services.result import Result


class AuthProvider(ABC):
    """
    What the UI and the product service need from an auth backend.
    """

    name: str = "base"

    @abstractmethod
    def signup(self, email: str, password: str, username: Optional[str] = None) -> Result:
        ...

    @abstractmethod
    def login(self, email: str, password: str, remember_me: bool = False) -> Result:
        ...

    @abstractmethod
    def logout(self) -> Result:
        ...

    @abstractmethod
    def is_authenticated(self) -> bool:
        ...

    @abstractmethod
    def get_current_user(self) -> Optional[Dict[str, Any]]:
        ...

    def restore_session(self) -> bool:
        """Rebuild in-memory state from persisted state; backends without one report False"""
        return self.is_authenticated()
