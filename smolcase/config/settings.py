"""Configuration settings for smolcase."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Settings:
    """Main settings container, read by the CLI only."""

    # Project location (None = current directory)
    project_dir: Optional[Path] = None

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        settings = cls()

        if project_dir := os.getenv("SMOLCASE_PROJECT_DIR"):
            settings.project_dir = Path(project_dir)

        if log_level := os.getenv("SMOLCASE_LOG_LEVEL") or os.getenv("LOG_LEVEL"):
            settings.log_level = log_level

        if log_file := os.getenv("SMOLCASE_LOG_FILE"):
            settings.log_file = Path(log_file)

        return settings


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Set the global settings instance (None re-reads the environment)."""
    global _settings
    _settings = settings
