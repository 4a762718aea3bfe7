"""`smolcase group` commands."""

from typing import List, Optional

import typer
from rich.table import Table

from ..utils.logging import console
from . import ui

group_app = typer.Typer(help="Manage groups (admin only).", no_args_is_help=True)


@group_app.command("create")
def create_group(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Group name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Group description"),
):
    """Create an empty group."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        vm.create_group(admin_password, master_key, name, description)
    ui.success(f"Group '{name}' created")


@group_app.command("delete")
def delete_group(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Group name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a group."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        if not yes and not ui.confirm(f"Delete group '{name}'?"):
            raise typer.Exit(0)
        vm.delete_group(admin_password, master_key, name)
    ui.success(f"Group '{name}' deleted")


@group_app.command("list")
def list_groups(ctx: typer.Context):
    """List groups and their members."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        groups = vm.list_groups(admin_password, master_key)

    if not groups:
        ui.info("No groups defined")
        return

    table = Table(title="Groups")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Members")
    for group in groups:
        table.add_row(group.name, group.description or "-", ", ".join(group.members) or "-")
    console.print(table)


@group_app.command("add-user")
def add_members(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Group name"),
    usernames: List[str] = typer.Argument(..., help="Users to add"),
):
    """Add users to a group."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        added, skipped = vm.add_group_members(admin_password, master_key, name, usernames)

    if added:
        ui.success(f"Added {', '.join(added)} to '{name}'")
    if skipped:
        ui.warning(f"Skipped (unknown or already a member): {', '.join(skipped)}")


@group_app.command("remove-user")
def remove_members(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Group name"),
    usernames: List[str] = typer.Argument(..., help="Users to remove"),
):
    """Remove users from a group."""
    with ui.cli_errors():
        vm, admin_password, master_key = ui.admin_session(ctx)
        removed, skipped = vm.remove_group_members(admin_password, master_key, name, usernames)

    if removed:
        ui.success(f"Removed {', '.join(removed)} from '{name}'")
    if skipped:
        ui.warning(f"Skipped (not a member): {', '.join(skipped)}")
