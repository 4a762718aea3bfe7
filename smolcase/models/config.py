"""Two-tier project configuration.

PublicConfig is what sits on disk in .smolcase.yml: project metadata, two
independent password hashes and one envelope. Decrypting that envelope with
the master key yields a PrivateConfig, which only ever exists in memory.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .envelope import EncryptedEnvelope
from .identity import Group, User
from .secret import SecretMeta
from .timestamps import format_timestamp, parse_timestamp, utc_now

CONFIG_VERSION = "1.0.0"


@dataclass
class PublicConfig:
    """Plaintext part of the project configuration."""

    project_name: str
    admin_key_hash: str
    master_key_hash: str
    version: str = CONFIG_VERSION
    created_at: datetime = field(default_factory=utc_now)
    encrypted_data: EncryptedEnvelope = field(default_factory=EncryptedEnvelope)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "version": self.version,
            "project_name": self.project_name,
            "created_at": format_timestamp(self.created_at),
            "admin_key_hash": self.admin_key_hash,
            "master_key_hash": self.master_key_hash,
            "encrypted_data": self.encrypted_data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublicConfig":
        """Create from dictionary.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong shape
        """
        for name in ("admin_key_hash", "master_key_hash"):
            if not isinstance(data[name], str):
                raise ValueError(f"{name} must be a string")

        return cls(
            version=str(data.get("version", CONFIG_VERSION)),
            project_name=str(data["project_name"]),
            created_at=parse_timestamp(data.get("created_at")) or utc_now(),
            admin_key_hash=data["admin_key_hash"],
            master_key_hash=data["master_key_hash"],
            encrypted_data=EncryptedEnvelope.from_dict(data.get("encrypted_data")),
        )


@dataclass
class PrivateConfig:
    """Decrypted project state: users, groups, secret metadata, secret values envelope."""

    users: dict[str, User] = field(default_factory=dict)
    groups: dict[str, Group] = field(default_factory=dict)
    secrets: dict[str, SecretMeta] = field(default_factory=dict)
    encrypted_secrets: EncryptedEnvelope = field(default_factory=EncryptedEnvelope)

    def get_user(self, username: str) -> Optional[User]:
        """Look up a user by name."""
        return self.users.get(username)

    @property
    def admins(self) -> list[User]:
        """Users flagged as admin."""
        return [u for u in self.users.values() if u.is_admin]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "users": {name: user.to_dict() for name, user in self.users.items()},
            "groups": {name: group.to_dict() for name, group in self.groups.items()},
            "secrets": {key: meta.to_dict() for key, meta in self.secrets.items()},
            "encrypted_secrets": self.encrypted_secrets.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrivateConfig":
        """Create from dictionary."""
        return cls(
            users={name: User.from_dict(u) for name, u in (data.get("users") or {}).items()},
            groups={name: Group.from_dict(g) for name, g in (data.get("groups") or {}).items()},
            secrets={key: SecretMeta.from_dict(s) for key, s in (data.get("secrets") or {}).items()},
            encrypted_secrets=EncryptedEnvelope.from_dict(data.get("encrypted_secrets")),
        )
