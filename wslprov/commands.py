"""
CLI command implementations.

Contains the handlers behind the wslprov Click commands. Handlers print
progress and turn ProvisionError into an error message and exit status 1.
"""

import sys

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from wslprov.config import Settings
from wslprov.exceptions import ProvisionError
from wslprov.instances import (
    create_instance,
    list_instance_ids,
    remove_all_instances,
    remove_instance,
)
from wslprov.utils import console
from wslprov.wsl import WslManager


def _fail(error: ProvisionError) -> None:
    console.print(f"\n[red]Error:[/] {escape(str(error))}", highlight=False)
    sys.exit(1)


def create_cmd(
    settings: Settings,
    wsl: WslManager,
    release: str | None,
    version: str | None,
    force: bool,
    no_update: bool,
    root_only: bool,
    additional_ppa: str | None,
    no_shell: bool
) -> None:
    """Create a new Ubuntu instance."""
    release = release or settings.default_release
    console.print(Panel.fit(
        f"[bold blue]Creating Ubuntu {release} instance[/]",
        border_style="blue"
    ))

    try:
        create_instance(
            settings,
            wsl,
            release=release,
            version=version,
            force=force,
            no_update=no_update,
            root_only=root_only,
            additional_ppa=additional_ppa,
            no_shell=no_shell,
        )
    except ProvisionError as e:
        _fail(e)


def remove_cmd(
    settings: Settings,
    wsl: WslManager,
    instance_id: str,
    force: bool
) -> None:
    """
    Remove a single instance.

    Args:
        settings: Resolved settings
        wsl: Command interface
        instance_id: Id of the instance (name without prefix)
        force: Skip confirmation prompt
    """
    console.print(Panel.fit(
        "[bold red]Removing instance[/]",
        border_style="red"
    ))

    if not force:
        name = settings.instance_name(instance_id)
        if not click.confirm(f"Are you sure you want to remove {name}?"):
            console.print("[yellow]Aborted[/]")
            return

    try:
        remove_instance(settings, wsl, instance_id)
    except ProvisionError as e:
        _fail(e)


def remove_all_cmd(
    settings: Settings,
    wsl: WslManager,
    force: bool,
    keep_going: bool
) -> None:
    """
    Remove every instance created by wslprov.

    Args:
        settings: Resolved settings
        wsl: Command interface
        force: Skip confirmation prompt
        keep_going: Continue past failed removals
    """
    console.print(Panel.fit(
        "[bold red]Removing all instances[/]",
        border_style="red"
    ))

    ids = list_instance_ids(settings)
    if not ids:
        console.print(f"[yellow]No instances found in {settings.instance_dir}[/]", highlight=False)
        return

    console.print(f"\n[dim]Found {len(ids)} instance(s) to remove:[/]")
    for instance_id in ids:
        console.print(f"  - {settings.instance_name(instance_id)}", highlight=False)
    console.print()

    if not force:
        if not click.confirm(f"Are you sure you want to remove ALL {len(ids)} instance(s)?"):
            console.print("[yellow]Aborted[/]")
            return

    try:
        removed = remove_all_instances(settings, wsl, keep_going=keep_going)
    except ProvisionError as e:
        _fail(e)
        return

    console.print(f"\n[green]✓ All {len(removed)} instance(s) have been removed![/]")


def list_cmd(settings: Settings, wsl: WslManager) -> None:
    """Show instances created by wslprov."""
    ids = list_instance_ids(settings)
    if not ids:
        console.print(f"[yellow]No instances found in {settings.instance_dir}[/]", highlight=False)
        return

    registered = set(wsl.list_instances())

    table = Table(title="wslprov Instances")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Registered", justify="center")
    table.add_column("Location", style="dim")

    for instance_id in ids:
        name = settings.instance_name(instance_id)
        status = "[green]✓[/]" if name in registered else "[red]✗[/]"
        table.add_row(instance_id, name, status, str(settings.instance_path(instance_id)))

    console.print(table)
    console.print("[dim]✓ = Registered with wsl, ✗ = Storage only[/]")
