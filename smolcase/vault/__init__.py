"""Encrypted secret store for smolcase.

A project keeps everything in one file, .smolcase.yml: a plaintext header
with two password hashes, and an envelope holding the encrypted private
config (users, groups, secret metadata), which in turn holds a second
envelope with the secret values.

Usage:
    from smolcase.vault import ProjectContext, VaultManager

    ctx = ProjectContext.from_environment()
    vm = VaultManager(ctx)
    vm.initialize("my-app", "alice", admin_password, master_key)
    vm.add_secret(admin_password, master_key, "API_KEY", "sk-123")
    print(vm.get_secret(master_key, alice_password, "API_KEY").value)
"""

# Exceptions
from .exceptions import (
    AccessDeniedError,
    CorruptConfigError,
    DecryptError,
    GitError,
    GroupExistsError,
    GroupNotFoundError,
    InvalidAdminPasswordError,
    InvalidMasterKeyError,
    InvalidUserPasswordError,
    NotAProjectError,
    ProjectExistsError,
    SecretNotFoundError,
    SecretValueNotFoundError,
    SmolcaseError,
    UnsupportedFormatError,
    UserExistsError,
    UserNotFoundError,
)

# Configuration
from .config import (
    VaultConfig,
    get_vault_config,
    set_vault_config,
)
from .context import (
    IdentityInputs,
    ProjectContext,
)

# Primitives
from .crypto import (
    decrypt,
    derive_key,
    encrypt,
    generate_password,
    hash_password,
    verify_password,
)

# Storage, access control, local cache
from .store import ConfigStore
from .access import (
    authenticate_user,
    can_read,
    filter_readable,
    verify_named_user,
)
from .credentials import CredentialCache

# Vault operations
from .vault_manager import (
    VaultManager,
    get_vault_manager,
    is_smolcase_project,
)

__all__ = [
    # Exceptions
    "SmolcaseError",
    "NotAProjectError",
    "ProjectExistsError",
    "CorruptConfigError",
    "InvalidAdminPasswordError",
    "InvalidMasterKeyError",
    "InvalidUserPasswordError",
    "DecryptError",
    "SecretNotFoundError",
    "SecretValueNotFoundError",
    "AccessDeniedError",
    "UnsupportedFormatError",
    "UserExistsError",
    "UserNotFoundError",
    "GroupExistsError",
    "GroupNotFoundError",
    "GitError",
    # Configuration
    "VaultConfig",
    "get_vault_config",
    "set_vault_config",
    "IdentityInputs",
    "ProjectContext",
    # Primitives
    "hash_password",
    "verify_password",
    "derive_key",
    "encrypt",
    "decrypt",
    "generate_password",
    # Storage
    "ConfigStore",
    "CredentialCache",
    # Access control
    "can_read",
    "filter_readable",
    "authenticate_user",
    "verify_named_user",
    # Vault manager
    "VaultManager",
    "get_vault_manager",
    "is_smolcase_project",
]
