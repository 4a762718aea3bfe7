"""Data models for smolcase."""

from .config import CONFIG_VERSION, PrivateConfig, PublicConfig
from .credentials import LocalCredentials
from .envelope import EncryptedEnvelope
from .identity import Group, User
from .secret import Permissions, SecretMeta, SecretValue, SecretValues
from .timestamps import utc_now

__all__ = [
    "CONFIG_VERSION",
    # Configuration tiers
    "PublicConfig",
    "PrivateConfig",
    "EncryptedEnvelope",
    # Identity
    "User",
    "Group",
    # Secrets
    "Permissions",
    "SecretMeta",
    "SecretValue",
    "SecretValues",
    # Local cache
    "LocalCredentials",
    "utc_now",
]
