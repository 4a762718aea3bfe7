"""`smolcase user` commands."""

from typing import Optional

import typer
from rich.table import Table

from ..utils.logging import console
from . import ui

user_app = typer.Typer(help="Manage users (admin only).", no_args_is_help=True)


def _show_password(username: str, password: str) -> None:
    console.print(f"\nPassword for [cyan]{username}[/cyan]: [bold]{password}[/bold]")
    console.print("[dim]Share it securely; it will not be shown again.[/dim]")


@user_app.command("add")
def add_user(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Username"),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Email address"),
    password: bool = typer.Option(
        False,
        "--password", "-p",
        help="Prompt for a password instead of generating one",
    ),
):
    """Add a user with a generated password."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        chosen = ui.prompt_secret(f"Password for {username}") if password else None
        user, new_password = vm.add_user(admin_password, master_key, username, email, chosen)

    ui.success(f"User '{user.username}' added")
    if chosen is None:
        _show_password(user.username, new_password)


@user_app.command("remove")
def remove_user(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Username"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Remove a user and take them out of every group."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        if not yes and not ui.confirm(f"Remove user '{username}'?"):
            raise typer.Exit(0)
        vm.remove_user(admin_password, master_key, username)
    ui.success(f"User '{username}' removed")


@user_app.command("list")
def list_users(ctx: typer.Context):
    """List users."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        users = vm.list_users(admin_password, master_key)

    table = Table(title="Users")
    table.add_column("Username", style="cyan")
    table.add_column("Email")
    table.add_column("Role")
    table.add_column("Created", style="dim")
    for user in users:
        table.add_row(
            user.username,
            user.email or "-",
            "admin" if user.is_admin else "member",
            user.created_at.strftime("%Y-%m-%d"),
        )
    console.print(table)


@user_app.command("reset")
def reset_password(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Username"),
    password: bool = typer.Option(
        False,
        "--password", "-p",
        help="Prompt for the new password instead of generating one",
    ),
):
    """Reset a user's password."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        chosen = ui.prompt_secret(f"New password for {username}") if password else None
        new_password = vm.reset_user_password(admin_password, master_key, username, chosen)

    ui.success(f"Password reset for '{username}'")
    if chosen is None:
        _show_password(username, new_password)
