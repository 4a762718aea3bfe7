"""smolcase CLI - Encrypted secrets that live in your git repository."""

import os
import subprocess
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from .. import __version__
from ..config.settings import get_settings
from ..formats import normalize_format, parse_secrets, render_secrets
from ..git import add_and_commit, clone_repo, init_repo, is_git_repo, repo_name_from_url
from ..models import LocalCredentials
from ..templates import apply_template
from ..utils.logging import console, setup_logging
from ..vault import CredentialCache, ProjectContext, VaultManager
from ..vault.exceptions import DecryptError, InvalidMasterKeyError, InvalidUserPasswordError
from . import ui
from .groups import group_app
from .users import user_app

app = typer.Typer(
    name="smolcase",
    help="Encrypted secrets that live in your git repository.",
    no_args_is_help=True,
)
app.add_typer(user_app, name="user")
app.add_typer(group_app, name="group")


@app.callback()
def main_callback(
    ctx: typer.Context,
    project_dir: Optional[Path] = typer.Option(
        None,
        "--project-dir", "-C",
        help="Project directory (default: current directory)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
):
    """smolcase - encrypted, file-based secrets for small teams."""
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
    )
    ctx.obj = ProjectContext.from_environment(project_dir or settings.project_dir)


def _open(ctx: typer.Context) -> tuple[ProjectContext, VaultManager, LocalCredentials]:
    """Project, manager and cached credentials; fails if there is no project."""
    project: ProjectContext = ctx.obj
    vm = VaultManager(project)
    vm.store.load_public()
    return project, vm, ui.load_cached_credentials(project)


@app.command()
def init(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Project name"),
    git: bool = typer.Option(False, "--git", help="Initialize a git repository and commit"),
):
    """
    Create a new smolcase project in the current directory.

    Prompts for the admin account and the master key. Share the master key
    with your team through a separate channel.
    """
    project: ProjectContext = ctx.obj
    with ui.cli_errors():
        vm = VaultManager(project)
        if vm.is_initialized:
            ui.error("smolcase project already exists in this directory")
            raise typer.Exit(1)

        ui.header("Initializing smolcase project")
        project_name = name or ui.prompt_text("Project name", default=project.project_root.name)
        admin_username = ui.prompt_text("Admin username")
        admin_email = ui.prompt_optional("Admin email (optional)")
        admin_password = ui.prompt_secret("Admin password")
        master_key = ui.prompt_secret("Master decryption key")

        vm.initialize(project_name, admin_username, admin_password, master_key, admin_email)
        ui.success(f"Project '{project_name}' initialized")

        if git:
            if not is_git_repo(project.project_root):
                init_repo(project.project_root)
                ui.success("Git repository initialized")
            if add_and_commit(project.project_root, "Initial smolcase setup"):
                ui.success("Committed .smolcase.yml")

    console.print("\n[bold]Next steps:[/bold]")
    console.print("  1. Share the master key with your team through a secure channel")
    console.print("  2. Add users: [cyan]smolcase user add <username>[/cyan]")
    console.print("  3. Add secrets: [cyan]smolcase add <KEY> <value>[/cyan]")
    console.print("  4. Commit .smolcase.yml to git")


@app.command()
def configure(ctx: typer.Context):
    """Verify and cache your credentials on this machine."""
    with ui.cli_errors():
        project, vm, _ = _open(ctx)
        public = vm.store.load_public()
        ui.header(f"Configuring credentials for '{public.project_name}'")

        creds = LocalCredentials()
        if ui.confirm("Are you an admin for this project?"):
            admin_password = ui.prompt_secret("Admin password")
            vm.store.verify_admin(public, admin_password)
            master_key = ui.prompt_secret("Master decryption key")
            vm.store.verify_master(public, master_key)
            creds.admin_password = admin_password
            creds.master_key = master_key
            creds.is_admin = True

            if ui.confirm("Also cache user credentials?"):
                username = ui.prompt_text("Username")
                password = ui.prompt_secret("Your password")
                try:
                    vm.verify_user(master_key, username, password)
                except InvalidUserPasswordError:
                    ui.warning("User credentials invalid, caching admin credentials only")
                else:
                    creds.username = username
                    creds.user_password = password
        else:
            username = ui.prompt_text("Username")
            password = ui.prompt_secret("Your password")
            master_key = ui.prompt_secret("Master decryption key")
            vm.store.verify_master(public, master_key)
            vm.verify_user(master_key, username, password)
            creds.username = username
            creds.user_password = password
            creds.master_key = master_key

        CredentialCache(project).save(creds)
    ui.success("Credentials cached")


@app.command()
def logout(ctx: typer.Context):
    """Remove cached credentials from this machine."""
    with ui.cli_errors():
        removed = CredentialCache(ctx.obj).clear()
    if removed:
        ui.success("Cached credentials removed")
    else:
        ui.info("No cached credentials found")


@app.command()
def add(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Secret name, or path to a file"),
    value: Optional[str] = typer.Argument(None, help="Secret value (prompted when omitted)"),
    users: Optional[str] = typer.Option(None, "--users", "-u", help="Comma separated users allowed to read"),
    groups: Optional[str] = typer.Option(None, "--groups", "-g", help="Comma separated groups allowed to read"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask before adding an unrestricted secret"),
):
    """Add or update a secret (admin only). A KEY naming a file stores the file."""
    with ui.cli_errors():
        _, vm, creds = _open(ctx)
        admin_password = ui.admin_password(creds)
        master_key = ui.master_key(creds)

        user_list = ui.split_csv(users)
        group_list = ui.split_csv(groups)
        file_path = Path(key)
        is_file = value is None and file_path.is_file()

        if not is_file and value is None:
            value = ui.prompt_secret("Secret value")

        if not user_list and not group_list and not yes:
            ui.info("No permissions given; every user will be able to read this secret")
            if not ui.confirm("Continue?", default=True):
                raise typer.Exit(0)

        created_by = creds.username or "admin"
        if is_file:
            meta = vm.add_file(admin_password, master_key, file_path, user_list, group_list, created_by)
        else:
            meta = vm.add_secret(
                admin_password, master_key, key, value, user_list, group_list, created_by
            )
    ui.success(f"Secret '{meta.key}' saved (access: {meta.permissions.describe()})")


@app.command()
def remove(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Secret name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Remove a secret (admin only)."""
    with ui.cli_errors():
        _, vm, creds = _open(ctx)
        if not yes and not ui.confirm(f"Remove secret '{key}'?"):
            raise typer.Exit(0)
        vm.remove_secret(ui.admin_password(creds), ui.master_key(creds), key)
    ui.success(f"Secret '{key}' removed")


@app.command("list")
def list_secrets(ctx: typer.Context):
    """List the secrets you can read."""
    with ui.cli_errors():
        _, vm, creds = _open(ctx)
        secrets = vm.list_secrets(ui.master_key(creds), ui.user_password(creds), creds.username)

    if not secrets:
        ui.info("No secrets available to you")
        return

    table = Table(title="Secrets")
    table.add_column("Key", style="cyan")
    table.add_column("Type")
    table.add_column("Access")
    table.add_column("Updated", style="dim")
    for meta in secrets:
        table.add_row(
            meta.key,
            "file" if meta.is_file else "text",
            meta.permissions.describe(),
            meta.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Secret name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the value to a file"),
):
    """Print a secret value."""
    with ui.cli_errors():
        _, vm, creds = _open(ctx)
        secret = vm.get_secret(ui.master_key(creds), ui.user_password(creds), key, creds.username)
        if output is not None:
            output.write_bytes(secret.content)
            ui.success(f"Wrote '{key}' to {output}")
            return

    if secret.is_file:
        typer.echo(secret.content.decode("utf-8", errors="replace"), nl=False)
    else:
        typer.echo(secret.value)


@app.command()
def export(
    ctx: typer.Context,
    fmt: str = typer.Option("env", "--format", "-f", help="env, json or yaml"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
):
    """Export the text secrets you can read."""
    with ui.cli_errors():
        fmt = normalize_format(fmt)
        _, vm, creds = _open(ctx)
        pairs = vm.export_secrets(ui.master_key(creds), ui.user_password(creds), creds.username)
        content = render_secrets(pairs, fmt)

        if output is not None:
            output.write_text(content if content.endswith("\n") else content + "\n", encoding="utf-8")
            ui.success(f"Exported {len(pairs)} secrets to {output}")
            return

    typer.echo(content)


@app.command("import")
def import_secrets(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File to import"),
    fmt: str = typer.Option("env", "--format", "-f", help="env, json or yaml"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Import secrets from an env, json or yaml file (admin only)."""
    with ui.cli_errors():
        _, vm, creds = _open(ctx)
        pairs = parse_secrets(file.read_text(encoding="utf-8"), fmt)
        if not pairs:
            ui.warning(f"No secrets found in {file}")
            return

        ui.info(f"Found {len(pairs)} secrets: {', '.join(pairs)}")
        if not yes and not ui.confirm("Import these secrets?", default=True):
            raise typer.Exit(0)

        count = vm.import_secrets(
            ui.admin_password(creds),
            ui.master_key(creds),
            pairs,
            created_by=creds.username or "admin",
        )
    ui.success(f"Imported {count} secrets")


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run(
    ctx: typer.Context,
    command: Optional[List[str]] = typer.Argument(None, help="Command to run, after --"),
):
    """
    Run a command with your secrets in its environment.

    Example: smolcase run -- npm start
    """
    if not command:
        ui.error("No command given. Usage: smolcase run -- <command> [args...]")
        raise typer.Exit(1)

    with ui.cli_errors():
        _, vm, creds = _open(ctx)
        pairs = vm.export_secrets(ui.master_key(creds), ui.user_password(creds), creds.username)

    env = dict(os.environ)
    env.update(pairs)
    try:
        result = subprocess.run(command, env=env)
    except OSError as e:
        ui.error(f"Failed to execute '{command[0]}': {e.strerror or e}")
        raise typer.Exit(127)
    raise typer.Exit(result.returncode)


@app.command()
def apply(
    ctx: typer.Context,
    template: Path = typer.Argument(..., help="Template file with {{SECRET_NAME}} placeholders"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
):
    """Fill a template with the secrets you can read."""
    with ui.cli_errors():
        text = template.read_text(encoding="utf-8")
        _, vm, creds = _open(ctx)
        pairs = vm.export_secrets(ui.master_key(creds), ui.user_password(creds), creds.username)
        result = apply_template(text, dict(pairs))

        for name in result.missing:
            ui.warning(f"No readable secret for placeholder '{name}'")

        if output is not None:
            output.write_text(result.content, encoding="utf-8")
            ui.success(f"Wrote {output} ({len(result.substituted)} substitutions)")
            return

    typer.echo(result.content, nl=False)


@app.command()
def setup(
    ctx: typer.Context,
    repo: Optional[str] = typer.Option(None, "--repo", "-r", help="Git URL to clone, or a local project path"),
):
    """Join an existing project: verify your login and cache it."""
    project: ProjectContext = ctx.obj
    with ui.cli_errors():
        if repo:
            if "://" in repo or repo.startswith("git@"):
                target = Path.cwd() / repo_name_from_url(repo)
                ui.info(f"Cloning {repo}")
                clone_repo(repo, target)
            else:
                target = Path(repo)
            project = ProjectContext(
                project_root=target,
                identity=project.identity,
                config=project.config,
            )

        vm = VaultManager(project)
        public = vm.store.load_public()
        ui.header(f"Joining '{public.project_name}'")

        username = ui.prompt_text("Username")
        password = ui.prompt_secret("Your password")
        master_key = ui.prompt_secret("Master decryption key")
        vm.store.verify_master(public, master_key)
        user = vm.verify_user(master_key, username, password)
        ui.success(f"Logged in as '{user.username}'")

        if ui.confirm("Cache these credentials on this machine?", default=True):
            CredentialCache(project).save(
                LocalCredentials(username=username, user_password=password, master_key=master_key)
            )
            ui.success("Credentials cached")


@app.command()
def sync(ctx: typer.Context):
    """Commit .smolcase.yml to git (admin only)."""
    with ui.cli_errors():
        project, vm, creds = _open(ctx)
        public = vm.store.load_public()
        vm.store.verify_admin(public, ui.admin_password(creds))

        if not is_git_repo(project.project_root):
            ui.warning("Not a git repository. Run 'git init' first.")
            raise typer.Exit(1)

        if add_and_commit(project.project_root, "Update smolcase configuration"):
            ui.success("Committed .smolcase.yml")
        else:
            ui.info("Nothing to commit")


@app.command()
def status(ctx: typer.Context):
    """Show project status."""
    with ui.cli_errors():
        project, vm, creds = _open(ctx)
        info = vm.status()
        if creds.master_key:
            try:
                info = vm.status(creds.master_key)
            except (InvalidMasterKeyError, DecryptError):
                ui.warning("Cached master key no longer opens this project")

    table = Table(title=f"smolcase: {info['project_name']}", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Version", info["version"])
    table.add_row("Created", info["created_at"].strftime("%Y-%m-%d %H:%M"))
    table.add_row("Git repository", "yes" if is_git_repo(project.project_root) else "no")

    if creds.is_empty:
        table.add_row("Credentials", "not cached (run 'smolcase configure')")
    else:
        role = "admin" if creds.is_admin else "user"
        table.add_row("Credentials", f"{creds.username or '-'} ({role})")

    if info["unlocked"]:
        table.add_row("Users", f"{info['users']} ({info['admins']} admin, {info['members']} member)")
        table.add_row("Groups", str(info["groups"]))
        table.add_row("Secrets", str(info["secrets"]))
    console.print(table)

    if info.get("recent_secrets"):
        console.print("\n[bold]Recently updated:[/bold]")
        for meta in info["recent_secrets"]:
            console.print(f"  {meta.key} [dim]{meta.updated_at.strftime('%Y-%m-%d %H:%M')}[/dim]")


@app.command()
def version():
    """Show version information."""
    console.print(f"smolcase v{__version__}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
