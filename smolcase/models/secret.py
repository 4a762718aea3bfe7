"""Secret metadata and secret value models.

Metadata lives in the private config. Values live in a second, separately
encrypted collection. The two are correlated by key.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from .timestamps import format_timestamp, parse_timestamp, utc_now


@dataclass
class Permissions:
    """Per-secret allow-list. Both lists empty means any authenticated user."""

    users: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)

    @property
    def is_unrestricted(self) -> bool:
        """True when no user or group restriction is set."""
        return not self.users and not self.groups

    def describe(self) -> str:
        """Human readable summary for listings."""
        if self.is_unrestricted:
            return "all users"
        parts = []
        if self.users:
            parts.append(f"users: {', '.join(self.users)}")
        if self.groups:
            parts.append(f"groups: {', '.join(self.groups)}")
        return ", ".join(parts)

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to dictionary for JSON serialization."""
        return {"users": list(self.users), "groups": list(self.groups)}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Permissions":
        """Create from dictionary."""
        data = data or {}
        return cls(
            users=list(data.get("users") or []),
            groups=list(data.get("groups") or []),
        )


@dataclass
class SecretMeta:
    """Everything about a secret except its value."""

    key: str
    created_by: str = "admin"
    permissions: Permissions = field(default_factory=Permissions)
    is_file: bool = False
    file_path: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "key": self.key,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "created_by": self.created_by,
            "permissions": self.permissions.to_dict(),
            "is_file": self.is_file,
            "file_path": self.file_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretMeta":
        """Create from dictionary."""
        created_at = parse_timestamp(data.get("created_at")) or utc_now()
        return cls(
            id=data.get("id") or str(uuid4()),
            key=data["key"],
            created_at=created_at,
            updated_at=parse_timestamp(data.get("updated_at")) or created_at,
            created_by=data.get("created_by", "admin"),
            permissions=Permissions.from_dict(data.get("permissions")),
            is_file=bool(data.get("is_file", False)),
            file_path=data.get("file_path"),
        )


@dataclass
class SecretValue:
    """A secret's plaintext. File secrets hold Base64 file bytes."""

    key: str
    value: str
    is_file: bool = False

    @property
    def content(self) -> bytes:
        """Raw bytes: decoded file content or the UTF-8 text value."""
        if self.is_file:
            return base64.b64decode(self.value)
        return self.value.encode("utf-8")

    @classmethod
    def from_file_bytes(cls, key: str, content: bytes) -> "SecretValue":
        """Wrap file content as a file secret value."""
        return cls(key=key, value=base64.b64encode(content).decode("ascii"), is_file=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"key": self.key, "value": self.value, "is_file": self.is_file}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretValue":
        """Create from dictionary."""
        return cls(
            key=data["key"],
            value=data.get("value", ""),
            is_file=bool(data.get("is_file", False)),
        )


@dataclass
class SecretValues:
    """The collection stored inside the inner encrypted envelope."""

    secrets: list[SecretValue] = field(default_factory=list)

    def get(self, key: str) -> Optional[SecretValue]:
        """Find a value by key."""
        for secret in self.secrets:
            if secret.key == key:
                return secret
        return None

    def upsert(self, value: SecretValue) -> bool:
        """Insert or replace by key. Returns True if an entry was replaced."""
        for index, secret in enumerate(self.secrets):
            if secret.key == value.key:
                self.secrets[index] = value
                return True
        self.secrets.append(value)
        return False

    def remove(self, key: str) -> bool:
        """Remove by key. Returns True if something was removed."""
        before = len(self.secrets)
        self.secrets = [s for s in self.secrets if s.key != key]
        return len(self.secrets) != before

    def __len__(self) -> int:
        return len(self.secrets)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"secrets": [s.to_dict() for s in self.secrets]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretValues":
        """Create from dictionary."""
        return cls(secrets=[SecretValue.from_dict(s) for s in data.get("secrets") or []])
