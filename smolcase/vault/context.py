"""Explicit execution context for core operations.

Storage and crypto code never look at the working directory, environment
variables or hostname. The CLI resolves those once and passes a
ProjectContext down.
"""

import os
import socket
from dataclasses import dataclass, field
from pathlib import Path

from .config import VaultConfig, get_vault_config


@dataclass(frozen=True)
class IdentityInputs:
    """Machine identity used to derive the local credential cache key."""

    username: str
    hostname: str

    @classmethod
    def from_environment(cls) -> "IdentityInputs":
        """Read the OS user and hostname of the current process."""
        username = os.getenv("USER") or os.getenv("USERNAME") or "default"
        try:
            hostname = socket.gethostname() or "localhost"
        except OSError:
            hostname = "localhost"
        return cls(username=username, hostname=hostname)


@dataclass
class ProjectContext:
    """Where a project lives and who is running against it."""

    project_root: Path
    identity: IdentityInputs
    config: VaultConfig = field(default_factory=get_vault_config)

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root).resolve()

    @property
    def config_path(self) -> Path:
        """Path to the public config file."""
        return self.project_root / self.config.config_file

    @property
    def config_dir(self) -> Path:
        """Path to the local, uncommitted state directory."""
        return self.project_root / self.config.config_dir

    @property
    def credentials_path(self) -> Path:
        """Path to the encrypted credential cache."""
        return self.config_dir / self.config.credentials_file

    @classmethod
    def from_environment(cls, project_root: Path | None = None) -> "ProjectContext":
        """Build a context for the current process (CLI use only)."""
        return cls(
            project_root=Path(project_root) if project_root else Path.cwd(),
            identity=IdentityInputs.from_environment(),
            config=get_vault_config(),
        )

    def ensure_config_dir(self) -> Path:
        """Create the local state directory with a .gitignore that ignores all of it."""
        config_dir = self.config_dir
        config_dir.mkdir(parents=True, exist_ok=True)
        gitignore = config_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text("*\n", encoding="utf-8")
        return config_dir
