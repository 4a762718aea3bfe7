"""Encrypted envelope model."""

from dataclasses import dataclass
from typing import Any


@dataclass
class EncryptedEnvelope:
    """
    Output of one authenticated-encryption operation.

    Attributes:
        salt: Base64 KDF salt
        data: Base64 nonce + ciphertext + tag

    An envelope is either fully empty (nothing encrypted yet) or has both
    fields set. Anything else is corruption.
    """

    salt: str = ""
    data: str = ""

    @property
    def is_empty(self) -> bool:
        """True for the bootstrap state with nothing encrypted yet."""
        return not self.salt and not self.data

    @property
    def is_valid(self) -> bool:
        """False when exactly one of the two fields is set."""
        return bool(self.salt) == bool(self.data)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"salt": self.salt, "data": self.data}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "EncryptedEnvelope":
        """Create from dictionary. A missing mapping means an empty envelope."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("Encrypted data must be a mapping with 'salt' and 'data'")
        salt = data.get("salt") or ""
        payload = data.get("data") or ""
        if not isinstance(salt, str) or not isinstance(payload, str):
            raise ValueError("Encrypted data fields must be strings")
        return cls(salt=salt, data=payload)
