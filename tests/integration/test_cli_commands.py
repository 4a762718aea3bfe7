"""Integration tests for CLI commands."""

import json
import re
import shutil
import subprocess
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from smolcase.cli.main import app

runner = CliRunner()

ADMIN_PASSWORD = "admin-pass-123"
MASTER_KEY = "supersecret123"
ADMIN_LOGIN = f"{ADMIN_PASSWORD}\n{MASTER_KEY}\n"
USER_LOGIN = f"{MASTER_KEY}\n{ADMIN_PASSWORD}\n"


def invoke(project: Path, *args: str, input: str | None = None):
    """Run the CLI against a project directory."""
    return runner.invoke(app, ["--project-dir", str(project), *args], input=input)


@pytest.fixture
def project(project_dir: Path) -> Path:
    """Initialized project with admin 'alice'."""
    result = invoke(
        project_dir,
        "init", "--name", "demo",
        input=f"alice\n\n{ADMIN_PASSWORD}\n{MASTER_KEY}\n",
    )
    assert result.exit_code == 0, result.output
    return project_dir


@pytest.fixture
def configured(project: Path) -> Path:
    """Project with cached admin and user credentials."""
    result = invoke(
        project,
        "configure",
        input=f"y\n{ADMIN_PASSWORD}\n{MASTER_KEY}\ny\nalice\n{ADMIN_PASSWORD}\n",
    )
    assert result.exit_code == 0, result.output
    return project


class TestInitCommand:
    """Tests for the init command."""

    def test_init_creates_config(self, project: Path):
        """init writes .smolcase.yml and the local directory."""
        assert (project / ".smolcase.yml").exists()
        assert (project / ".smolcase" / ".gitignore").exists()

    def test_init_twice_fails(self, project: Path):
        result = invoke(project, "init", "--name", "again")

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_short_password(self, project_dir: Path):
        result = invoke(project_dir, "init", "--name", "demo", input=f"alice\n\nshort\n{MASTER_KEY}\n")

        assert result.exit_code == 1
        assert "at least 8 characters" in result.output
        assert not (project_dir / ".smolcase.yml").exists()

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_init_with_git(self, project_dir: Path):
        """--git creates a repository and commits the config."""
        result = invoke(
            project_dir,
            "init", "--name", "demo", "--git",
            input=f"alice\n\n{ADMIN_PASSWORD}\n{MASTER_KEY}\n",
        )

        assert result.exit_code == 0, result.output
        log = subprocess.run(
            ["git", "log", "--name-only", "--format=%s"],
            cwd=project_dir, capture_output=True, text=True, check=True,
        )
        assert "Initial smolcase setup" in log.stdout
        assert ".smolcase.yml" in log.stdout


class TestSecretCommands:
    """Tests for add, get, list and remove with prompted credentials."""

    def test_add_and_get(self, project: Path):
        result = invoke(project, "add", "API_KEY", "sk-123", "--yes", input=ADMIN_LOGIN)
        assert result.exit_code == 0, result.output
        assert "API_KEY" in result.output

        result = invoke(project, "get", "API_KEY", input=USER_LOGIN)
        assert result.exit_code == 0, result.output
        assert "sk-123" in result.output

    def test_add_prompts_for_value(self, project: Path):
        result = invoke(project, "add", "TOKEN", "--yes", input=ADMIN_LOGIN + "prompted-value\n")
        assert result.exit_code == 0, result.output

        result = invoke(project, "get", "TOKEN", input=USER_LOGIN)
        assert "prompted-value" in result.output

    def test_add_unrestricted_can_be_declined(self, project: Path):
        result = invoke(project, "add", "API_KEY", "sk-123", input=ADMIN_LOGIN + "n\n")

        assert result.exit_code == 0
        result = invoke(project, "get", "API_KEY", input=USER_LOGIN)
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_add_file(self, project: Path, tmp_path: Path):
        source = tmp_path / "service.json"
        source.write_text('{"type": "service_account"}')
        target = tmp_path / "restored.json"

        result = invoke(project, "add", str(source), "--yes", input=ADMIN_LOGIN)
        assert result.exit_code == 0, result.output

        result = invoke(project, "get", "service.json", "--output", str(target), input=USER_LOGIN)
        assert result.exit_code == 0, result.output
        assert target.read_bytes() == source.read_bytes()

    def test_wrong_admin_password(self, project: Path):
        result = invoke(project, "add", "API_KEY", "sk-123", "--yes", input=f"wrong-admin\n{MASTER_KEY}\n")

        assert result.exit_code == 1
        assert "Invalid admin password" in result.output

    def test_wrong_master_key(self, project: Path):
        result = invoke(project, "get", "API_KEY", input=f"wrong-master\n{ADMIN_PASSWORD}\n")

        assert result.exit_code == 1
        assert "Invalid master key" in result.output

    def test_list_and_remove(self, project: Path):
        invoke(project, "add", "API_KEY", "sk-123", "--yes", input=ADMIN_LOGIN)

        result = invoke(project, "list", input=USER_LOGIN)
        assert result.exit_code == 0, result.output
        assert "API_KEY" in result.output

        result = invoke(project, "remove", "API_KEY", "--yes", input=ADMIN_LOGIN)
        assert result.exit_code == 0, result.output

        result = invoke(project, "list", input=USER_LOGIN)
        assert "No secrets available" in result.output

    def test_not_a_project(self, project_dir: Path):
        result = invoke(project_dir, "get", "API_KEY")

        assert result.exit_code == 1
        assert "Not a smolcase project" in result.output


class TestCredentialCache:
    """Tests for configure, logout and cached logins."""

    def test_cached_credentials_skip_prompts(self, configured: Path):
        result = invoke(configured, "add", "API_KEY", "sk-123", "--yes")
        assert result.exit_code == 0, result.output

        result = invoke(configured, "get", "API_KEY")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "sk-123"

    def test_configure_rejects_bad_user(self, project: Path):
        result = invoke(project, "configure", input=f"n\nalice\nwrong-password\n{MASTER_KEY}\n")

        assert result.exit_code == 1
        assert "Invalid username or password" in result.output
        assert not (project / ".smolcase" / "credentials.json").exists()

    def test_logout(self, configured: Path):
        result = invoke(configured, "logout")
        assert result.exit_code == 0
        assert "removed" in result.output
        assert not (configured / ".smolcase" / "credentials.json").exists()

        result = invoke(configured, "logout")
        assert "No cached credentials" in result.output

    def test_status(self, configured: Path):
        invoke(configured, "add", "API_KEY", "sk-123", "--yes")

        result = invoke(configured, "status")

        assert result.exit_code == 0, result.output
        assert "demo" in result.output
        assert "API_KEY" in result.output


class TestUserAndGroupCommands:
    """Tests for user and group sub-commands."""

    def test_user_lifecycle(self, configured: Path):
        result = invoke(configured, "user", "add", "bob", "--email", "bob@example.com")
        assert result.exit_code == 0, result.output
        match = re.search(r"Password for bob: (\w+)", result.output)
        assert match, result.output
        bob_password = match.group(1)

        invoke(configured, "add", "DB_PASS", "hunter2", "--groups", "ops")
        invoke(configured, "group", "create", "ops", "--description", "Operations")

        assert invoke(configured, "logout").exit_code == 0
        result = invoke(configured, "get", "DB_PASS", input=f"{MASTER_KEY}\n{bob_password}\n")
        assert result.exit_code == 1
        assert "Access denied" in result.output

        invoke(configured, "group", "add-user", "ops", "bob", input=ADMIN_LOGIN)
        result = invoke(configured, "get", "DB_PASS", input=f"{MASTER_KEY}\n{bob_password}\n")
        assert result.exit_code == 0, result.output
        assert "hunter2" in result.output

    def test_user_list_and_remove(self, configured: Path):
        invoke(configured, "user", "add", "bob")

        result = invoke(configured, "user", "list")
        assert result.exit_code == 0
        assert "alice" in result.output
        assert "bob" in result.output

        result = invoke(configured, "user", "remove", "bob", "--yes")
        assert result.exit_code == 0, result.output

        result = invoke(configured, "user", "remove", "alice", "--yes")
        assert result.exit_code == 1
        assert "Cannot remove admin user" in result.output

    def test_user_reset(self, configured: Path):
        invoke(configured, "user", "add", "bob")

        result = invoke(configured, "user", "reset", "bob")

        assert result.exit_code == 0, result.output
        assert re.search(r"Password for bob: \w{16}", result.output)

    def test_group_list_and_delete(self, configured: Path):
        invoke(configured, "group", "create", "ops")

        result = invoke(configured, "group", "list")
        assert "ops" in result.output

        result = invoke(configured, "group", "delete", "ops", "--yes")
        assert result.exit_code == 0, result.output

        result = invoke(configured, "group", "delete", "ops", "--yes")
        assert result.exit_code == 1
        assert "not found" in result.output


class TestExchangeCommands:
    """Tests for export, import, run and apply."""

    def test_export_and_import(self, configured: Path, tmp_path: Path):
        env_file = tmp_path / "input.env"
        env_file.write_text("# seeded\nAPI_KEY=sk-123\nexport DB_URL=\"pg://db/app\"\n")

        result = invoke(configured, "import", str(env_file), "--yes")
        assert result.exit_code == 0, result.output
        assert "Imported 2 secrets" in result.output

        out = tmp_path / "secrets.json"
        result = invoke(configured, "export", "--format", "json", "--output", str(out))
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text()) == {"API_KEY": "sk-123", "DB_URL": "pg://db/app"}

        out = tmp_path / "out.env"
        invoke(configured, "export", "--output", str(out))
        assert out.read_text() == "API_KEY=sk-123\nDB_URL=pg://db/app\n"

    def test_export_unknown_format(self, configured: Path):
        result = invoke(configured, "export", "--format", "toml")

        assert result.exit_code == 1
        assert "Unsupported format" in result.output

    def test_run_injects_environment(self, configured: Path, monkeypatch):
        """Secrets override inherited variables and the child's exit code is returned."""
        monkeypatch.setenv("API_KEY", "inherited")
        invoke(configured, "add", "API_KEY", "sk-123", "--yes")

        check = "import os, sys; sys.exit(0 if os.environ.get('API_KEY') == 'sk-123' else 3)"
        result = invoke(configured, "run", "--", sys.executable, "-c", check)
        assert result.exit_code == 0, result.output

        result = invoke(configured, "run", "--", sys.executable, "-c", "import sys; sys.exit(7)")
        assert result.exit_code == 7

    def test_run_without_command(self, configured: Path):
        result = invoke(configured, "run")

        assert result.exit_code == 1
        assert "No command given" in result.output

    def test_apply(self, configured: Path, tmp_path: Path):
        invoke(configured, "add", "API_KEY", "sk-123", "--yes")
        template = tmp_path / "app.conf.tmpl"
        template.write_text("key={{API_KEY}}\nother={{UNKNOWN}}\n")
        out = tmp_path / "app.conf"

        result = invoke(configured, "apply", str(template), "--output", str(out))

        assert result.exit_code == 0, result.output
        assert out.read_text() == "key=sk-123\nother={{MISSING:UNKNOWN}}\n"
        assert "UNKNOWN" in result.output


class TestMiscCommands:
    """Tests for setup, sync and version."""

    def test_setup_local_path(self, project: Path, tmp_path: Path, monkeypatch):
        """setup --repo PATH verifies the login and caches it for that project."""
        other = tmp_path / "elsewhere"
        other.mkdir()
        monkeypatch.chdir(other)

        result = invoke(
            other,
            "setup", "--repo", str(project),
            input=f"alice\n{ADMIN_PASSWORD}\n{MASTER_KEY}\ny\n",
        )

        assert result.exit_code == 0, result.output
        assert "Logged in as 'alice'" in result.output
        assert (project / ".smolcase" / "credentials.json").exists()

    def test_sync_outside_git(self, configured: Path):
        if shutil.which("git") is not None:
            completed = subprocess.run(
                ["git", "rev-parse", "--is-inside-work-tree"],
                cwd=configured, capture_output=True, text=True,
            )
            if completed.stdout.strip() == "true":
                pytest.skip("temporary directory is inside a git work tree")

        result = invoke(configured, "sync")

        assert result.exit_code == 1
        assert "Not a git repository" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "smolcase v" in result.output
