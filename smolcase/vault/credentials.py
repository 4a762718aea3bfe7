"""Local credential cache.

Caches previously entered passwords and the master key so commands do not
prompt every time. The record is encrypted with a key derived from
"smolcase-<os user>-<hostname>".

This is obfuscation, not a security boundary. Anyone who can run code as the
same OS user on this machine can rebuild that password and read the cache.
Cached values are never treated as proof of identity: callers feed them into
the same verification paths used for interactive prompts.
"""

import json

from ..models import EncryptedEnvelope, LocalCredentials
from ..utils.fileio import atomic_write_text
from ..utils.logging import get_logger
from .context import ProjectContext
from .crypto import decrypt, encrypt
from .exceptions import CorruptConfigError

logger = get_logger(__name__)


class CredentialCache:
    """Reads and writes .smolcase/credentials.json for one project."""

    def __init__(self, ctx: ProjectContext):
        """
        Initialize the cache.

        Args:
            ctx: Project context supplying the path and the machine identity
        """
        self.ctx = ctx

    @property
    def path(self):
        """Path to the cache file."""
        return self.ctx.credentials_path

    def _system_password(self) -> str:
        identity = self.ctx.identity
        return f"smolcase-{identity.username}-{identity.hostname}"

    def exists(self) -> bool:
        """Check if anything is cached."""
        return self.path.exists()

    def load(self) -> LocalCredentials:
        """
        Load cached credentials.

        Returns:
            LocalCredentials; an empty record if there is no cache file

        Raises:
            DecryptError: If the cache was written for another user or machine
            CorruptConfigError: If the cache file is not valid
        """
        if not self.path.exists():
            return LocalCredentials()

        try:
            envelope = EncryptedEnvelope.from_dict(json.loads(self.path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValueError) as e:
            raise CorruptConfigError(f"Invalid credential cache: {e}") from e

        raw = decrypt(envelope, self._system_password(), self.ctx.config)
        try:
            return LocalCredentials.from_dict(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, AttributeError) as e:
            raise CorruptConfigError(f"Invalid credential cache: {e}") from e

    def save(self, credentials: LocalCredentials) -> None:
        """Encrypt and write credentials, replacing any existing cache."""
        payload = json.dumps(credentials.to_dict()).encode("utf-8")
        envelope = encrypt(payload, self._system_password(), self.ctx.config)

        self.ctx.ensure_config_dir()
        atomic_write_text(self.path, json.dumps(envelope.to_dict(), indent=2), mode=0o600)
        logger.info("Saved local credentials to %s", self.path)

    def clear(self) -> bool:
        """
        Delete the cache file.

        Returns:
            True if a cache was removed, False if none existed
        """
        if self.path.exists():
            self.path.unlink()
            logger.info("Cleared local credentials")
            return True
        return False
