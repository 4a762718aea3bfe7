"""Configuration store for the two-tier project config.

On disk (.smolcase.yml, YAML):
    version, project_name, created_at   - plaintext metadata
    admin_key_hash, master_key_hash     - Argon2id hashes, authentication only
    encrypted_data: {salt, data}        - PrivateConfig, encrypted with the master key

Inside PrivateConfig, encrypted_secrets is a second envelope holding the
secret values, also encrypted with the master key but under its own salt and
nonce. Reading a value therefore takes two decryptions.
"""

import json
from typing import Any

import yaml

from ..models import EncryptedEnvelope, PrivateConfig, PublicConfig, SecretValues
from ..utils.fileio import atomic_write_text
from ..utils.logging import get_logger
from .context import ProjectContext
from .crypto import decrypt, encrypt, verify_password
from .exceptions import (
    CorruptConfigError,
    InvalidAdminPasswordError,
    InvalidMasterKeyError,
    NotAProjectError,
)

logger = get_logger(__name__)


def _to_json_bytes(data: dict[str, Any]) -> bytes:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _from_json_bytes(raw: bytes, what: str) -> dict[str, Any]:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptConfigError(f"Invalid {what}: {e}") from e
    if not isinstance(data, dict):
        raise CorruptConfigError(f"Invalid {what}: expected a mapping")
    return data


class ConfigStore:
    """
    Loads and saves a project's configuration.

    Usage:
        store = ConfigStore(ctx)
        public = store.load_public()
        store.verify_admin(public, admin_password)
        public, private = store.load_full(master_key)
        ...
        store.save(public, private, master_key)
    """

    def __init__(self, ctx: ProjectContext):
        """
        Initialize the store for a project.

        Args:
            ctx: Project context (root directory, identity, vault config)
        """
        self.ctx = ctx
        self.config = ctx.config

    @property
    def path(self):
        """Path to .smolcase.yml."""
        return self.ctx.config_path

    def exists(self) -> bool:
        """Check if the project has been initialized."""
        return self.path.exists()

    def load_public(self) -> PublicConfig:
        """
        Read the public config without decrypting anything.

        Raises:
            NotAProjectError: If the config file does not exist
            CorruptConfigError: If it is not a valid config
        """
        if not self.exists():
            raise NotAProjectError(str(self.ctx.project_root))

        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise CorruptConfigError(f"Invalid config file: {e}") from e

        if not isinstance(data, dict):
            raise CorruptConfigError("Invalid config file: expected a mapping")

        try:
            public = PublicConfig.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptConfigError(f"Invalid config file: {e}") from e

        if not public.encrypted_data.is_valid:
            raise CorruptConfigError("Invalid config file: half-populated encrypted_data")

        return public

    def verify_admin(self, public: PublicConfig, admin_password: str) -> None:
        """
        Check the admin password against admin_key_hash.

        Raises:
            InvalidAdminPasswordError: If it does not match
        """
        if not verify_password(admin_password, public.admin_key_hash):
            raise InvalidAdminPasswordError()

    def verify_master(self, public: PublicConfig, master_key: str) -> None:
        """
        Check the master key against master_key_hash.

        Raises:
            InvalidMasterKeyError: If it does not match
        """
        if not verify_password(master_key, public.master_key_hash):
            raise InvalidMasterKeyError()

    def load_full(self, master_key: str) -> tuple[PublicConfig, PrivateConfig]:
        """
        Load the public config and decrypt the private config.

        An empty envelope yields an empty PrivateConfig.

        Raises:
            NotAProjectError, CorruptConfigError: From load_public()
            InvalidMasterKeyError: If the master key does not match its hash
            DecryptError: If the envelope does not decrypt
        """
        public = self.load_public()
        self.verify_master(public, master_key)

        if public.encrypted_data.is_empty:
            logger.debug("Private config is empty, starting from scratch")
            return public, PrivateConfig()

        raw = decrypt(public.encrypted_data, master_key, self.config)
        data = _from_json_bytes(raw, "private config")
        try:
            private = PrivateConfig.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptConfigError(f"Invalid private config: {e}") from e

        if not private.encrypted_secrets.is_valid:
            raise CorruptConfigError("Invalid private config: half-populated encrypted_secrets")

        logger.debug(
            "Loaded private config: %d users, %d groups, %d secrets",
            len(private.users), len(private.groups), len(private.secrets),
        )
        return public, private

    def save(self, public: PublicConfig, private: PrivateConfig, master_key: str) -> PublicConfig:
        """
        Encrypt the private config and write the whole file atomically.

        The private config is encrypted fresh on every call. public is only
        updated after the file has been replaced.

        Returns:
            The public config as written
        """
        envelope = encrypt(_to_json_bytes(private.to_dict()), master_key, self.config)

        data = public.to_dict()
        data["encrypted_data"] = envelope.to_dict()
        content = yaml.safe_dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )

        atomic_write_text(self.path, content)
        public.encrypted_data = envelope

        logger.info("Saved configuration to %s", self.path)
        return public

    def load_secret_values(self, private: PrivateConfig, master_key: str) -> SecretValues:
        """
        Decrypt the inner secret-values envelope.

        Raises:
            DecryptError: If the envelope does not decrypt
            CorruptConfigError: If the decrypted payload is malformed
        """
        if private.encrypted_secrets.is_empty:
            return SecretValues()

        raw = decrypt(private.encrypted_secrets, master_key, self.config)
        data = _from_json_bytes(raw, "secret values")
        try:
            return SecretValues.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptConfigError(f"Invalid secret values: {e}") from e

    def store_secret_values(
        self,
        private: PrivateConfig,
        values: SecretValues,
        master_key: str,
    ) -> EncryptedEnvelope:
        """
        Re-encrypt the secret values into private.encrypted_secrets.

        Nothing is written to disk; call save() afterwards.
        """
        private.encrypted_secrets = encrypt(_to_json_bytes(values.to_dict()), master_key, self.config)
        return private.encrypted_secrets
