"""Local credential cache record."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class LocalCredentials:
    """Previously entered secrets cached on this machine.

    These are convenience inputs only. Every value is re-verified through the
    same paths as an interactive prompt before it is trusted.
    """

    admin_password: Optional[str] = None
    user_password: Optional[str] = None
    username: Optional[str] = None
    master_key: Optional[str] = None
    is_admin: bool = False

    @property
    def is_empty(self) -> bool:
        """True when nothing is cached."""
        return not any(
            (self.admin_password, self.user_password, self.username, self.master_key)
        ) and not self.is_admin

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "admin_password": self.admin_password,
            "user_password": self.user_password,
            "username": self.username,
            "master_key": self.master_key,
            "is_admin": self.is_admin,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocalCredentials":
        """Create from dictionary."""
        return cls(
            admin_password=data.get("admin_password"),
            user_password=data.get("user_password"),
            username=data.get("username"),
            master_key=data.get("master_key"),
            is_admin=bool(data.get("is_admin", False)),
        )
