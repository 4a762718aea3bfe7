"""Console output, prompts and credential lookup for the CLI."""

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich.markup import escape

from ..models import LocalCredentials
from ..utils.logging import console, err_console, get_logger
from ..vault import CredentialCache, ProjectContext, VaultManager
from ..vault.exceptions import CorruptConfigError, DecryptError, SmolcaseError

logger = get_logger(__name__)


def success(message: str) -> None:
    """Print a success line."""
    err_console.print(f"[green]✓[/green] {escape(message)}", highlight=False)


def info(message: str) -> None:
    """Print an informational line."""
    err_console.print(f"[blue]ℹ[/blue] {escape(message)}", highlight=False)


def warning(message: str) -> None:
    """Print a warning line."""
    err_console.print(f"[yellow]⚠ {escape(message)}[/yellow]", highlight=False)


def error(message: str) -> None:
    """Print an error line."""
    err_console.print(f"[red]Error: {escape(message)}[/red]", highlight=False)


def header(title: str) -> None:
    """Print a section header."""
    console.print(f"\n[bold cyan]{escape(title)}[/bold cyan]")


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn domain and I/O errors into an error line and exit code 1."""
    try:
        yield
    except (SmolcaseError, ValueError) as e:
        error(str(e))
        raise typer.Exit(1)
    except OSError as e:
        error(f"{e.strerror or e}: {e.filename}" if e.filename else str(e))
        raise typer.Exit(1)


def split_csv(value: Optional[str]) -> list[str]:
    """Split a comma separated option into trimmed, non-empty names."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def prompt_secret(label: str) -> str:
    """Prompt without echoing input."""
    return typer.prompt(label, hide_input=True)


def prompt_text(label: str, default: Optional[str] = None) -> str:
    """Prompt for a required value."""
    return typer.prompt(label, default=default)


def prompt_optional(label: str) -> Optional[str]:
    """Prompt for a value that may be left blank."""
    value = typer.prompt(label, default="", show_default=False)
    return value or None


def confirm(label: str, default: bool = False) -> bool:
    """Ask a yes/no question."""
    return typer.confirm(label, default=default)


def load_cached_credentials(ctx: ProjectContext) -> LocalCredentials:
    """
    Load the local credential cache.

    A cache that cannot be read (written on another machine, or damaged) is
    reported and ignored; the user is prompted instead.
    """
    try:
        return CredentialCache(ctx).load()
    except (DecryptError, CorruptConfigError) as e:
        logger.debug("Unreadable credential cache: %s", e)
        warning("Ignoring unreadable credential cache. Run 'smolcase logout' to remove it.")
        return LocalCredentials()


def admin_password(creds: LocalCredentials) -> str:
    """Cached admin password, or prompt."""
    if creds.admin_password:
        return creds.admin_password
    return prompt_secret("Admin password")


def master_key(creds: LocalCredentials) -> str:
    """Cached master key, or prompt."""
    if creds.master_key:
        return creds.master_key
    return prompt_secret("Master decryption key")


def user_password(creds: LocalCredentials) -> str:
    """Cached user password, or prompt."""
    if creds.user_password:
        return creds.user_password
    return prompt_secret("Your password")


def admin_session(ctx: typer.Context) -> tuple[VaultManager, str, str]:
    """Manager plus admin password and master key, cached or prompted."""
    vm = VaultManager(ctx.obj)
    vm.store.load_public()
    creds = load_cached_credentials(ctx.obj)
    return vm, admin_password(creds), master_key(creds)
