"""Vault configuration for the smolcase secret store."""

from dataclasses import dataclass


@dataclass
class VaultConfig:
    """Configuration for key derivation, encryption and on-disk layout."""

    # Argon2id cost. Envelopes do not record these, so they must stay fixed
    # for the lifetime of a project.
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536  # KiB
    argon2_parallelism: int = 4

    key_size: int = 32  # 256 bits for AES-256
    salt_size: int = 16
    nonce_size: int = 12  # 96 bits for AES-GCM

    # File naming, relative to the project root
    config_file: str = ".smolcase.yml"
    config_dir: str = ".smolcase"
    credentials_file: str = "credentials.json"

    # Password policy
    min_password_length: int = 8
    generated_password_length: int = 16


# Global configuration instance
_config: VaultConfig | None = None


def get_vault_config() -> VaultConfig:
    """Get the global vault configuration."""
    global _config
    if _config is None:
        _config = VaultConfig()
    return _config


def set_vault_config(config: VaultConfig | None) -> None:
    """Set the global vault configuration (None restores defaults)."""
    global _config
    _config = config
