"""smolcase - Encrypted, file-based secrets for small teams."""

__version__ = "0.1.0"

from .models import PrivateConfig, PublicConfig, SecretMeta, User, Group
from .vault import ProjectContext, VaultManager

__all__ = [
    "__version__",
    "PublicConfig",
    "PrivateConfig",
    "SecretMeta",
    "User",
    "Group",
    "ProjectContext",
    "VaultManager",
]
