"""User and group models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from .timestamps import format_timestamp, parse_timestamp, utc_now


@dataclass
class User:
    """A project member.

    The password hash only authenticates the user. It is never used to derive
    an encryption key.
    """

    username: str
    password_hash: str
    salt: str
    email: Optional[str] = None
    is_admin: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    last_access: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "password_hash": self.password_hash,
            "salt": self.salt,
            "created_at": format_timestamp(self.created_at),
            "last_access": format_timestamp(self.last_access),
            "is_admin": self.is_admin,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create from dictionary."""
        return cls(
            id=data.get("id") or str(uuid4()),
            username=data["username"],
            email=data.get("email"),
            password_hash=data["password_hash"],
            salt=data.get("salt", ""),
            created_at=parse_timestamp(data.get("created_at")) or utc_now(),
            last_access=parse_timestamp(data.get("last_access")),
            is_admin=bool(data.get("is_admin", False)),
        )


@dataclass
class Group:
    """A named set of usernames. Member order is irrelevant."""

    name: str
    description: Optional[str] = None
    members: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utc_now)

    def has_member(self, username: str) -> bool:
        """Check membership."""
        return username in self.members

    def add_member(self, username: str) -> bool:
        """Add a member. Returns False if already present."""
        if username in self.members:
            return False
        self.members.append(username)
        return True

    def remove_member(self, username: str) -> bool:
        """Remove a member. Returns False if not present."""
        if username not in self.members:
            return False
        self.members.remove(username)
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "members": list(self.members),
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Group":
        """Create from dictionary. Duplicate members are collapsed."""
        members: list[str] = []
        for member in data.get("members") or []:
            if member not in members:
                members.append(member)
        return cls(
            id=data.get("id") or str(uuid4()),
            name=data["name"],
            description=data.get("description"),
            members=members,
            created_at=parse_timestamp(data.get("created_at")) or utc_now(),
        )
