"""Shared pytest fixtures for smolcase tests."""

from pathlib import Path
from typing import Generator

import pytest

ADMIN_USERNAME = "alice"
ADMIN_PASSWORD = "admin-pass-123"
MASTER_KEY = "supersecret123"


@pytest.fixture(autouse=True)
def fast_vault_config() -> Generator:
    """Use cheap Argon2 parameters so every test does not pay full KDF cost."""
    from smolcase.vault import VaultConfig, set_vault_config

    config = VaultConfig(
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
    )
    set_vault_config(config)
    yield config
    set_vault_config(None)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch) -> Generator:
    """Keep environment-driven CLI settings out of the tests."""
    from smolcase.config.settings import configure

    for name in ("SMOLCASE_PROJECT_DIR", "SMOLCASE_LOG_LEVEL", "SMOLCASE_LOG_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    configure(None)
    yield
    configure(None)


@pytest.fixture
def identity():
    """Fixed machine identity for the credential cache."""
    from smolcase.vault import IdentityInputs

    return IdentityInputs(username="tester", hostname="testhost")


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty directory for a project."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def ctx(project_dir: Path, identity, fast_vault_config):
    """Project context rooted in the temporary project directory."""
    from smolcase.vault import ProjectContext

    return ProjectContext(project_root=project_dir, identity=identity, config=fast_vault_config)


@pytest.fixture
def manager(ctx):
    """VaultManager for an uninitialized project."""
    from smolcase.vault import VaultManager

    return VaultManager(ctx)


@pytest.fixture
def initialized(manager):
    """VaultManager for a project with admin 'alice' and no secrets."""
    manager.initialize("test-project", ADMIN_USERNAME, ADMIN_PASSWORD, MASTER_KEY)
    return manager


@pytest.fixture
def with_bob(initialized):
    """Initialized project plus regular user 'bob'; yields (manager, bob_password)."""
    _, password = initialized.add_user(ADMIN_PASSWORD, MASTER_KEY, "bob", "bob@example.com")
    return initialized, password
