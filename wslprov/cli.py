"""
CLI setup and entry point.

Defines the Click command group and registers all commands.
"""

from pathlib import Path

import click

from wslprov import __version__
from wslprov.commands import create_cmd, list_cmd, remove_all_cmd, remove_cmd
from wslprov.config import SUPPORTED_VERSIONS, load_settings
from wslprov.utils import set_echo_commands
from wslprov.wsl import WslManager


@click.group()
@click.version_option(version=__version__, prog_name="wslprov")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to config.yaml (default: ~/.wslprov/config.yaml)"
)
@click.option(
    "--debug",
    is_flag=True,
    help="Print every external command before running it"
)
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, debug: bool):
    """
    wslprov - Ubuntu WSL instance provisioning tool.

    Creates disposable Ubuntu instances from cloud root filesystem
    images and removes them again.
    """
    set_echo_commands(debug)
    ctx.obj = {
        "settings": load_settings(config_file),
        "wsl": WslManager(),
    }


@cli.command()
@click.option(
    "--release", "-r",
    help="Ubuntu release code name (default: focal)"
)
@click.option(
    "--version", "-v",
    "wsl_version",
    type=click.Choice(SUPPORTED_VERSIONS),
    help="WSL version to import the instance with (default: 2)"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Download the root filesystem even if it is cached"
)
@click.option(
    "--no-update",
    is_flag=True,
    help="Skip apt-get update and full-upgrade"
)
@click.option(
    "--root-only",
    is_flag=True,
    help="Do not create a user matching the current user"
)
@click.option(
    "--additional-ppa", "-p",
    help="Comma-separated repositories to add (e.g., 'deadsnakes/ppa,git-core/ppa')"
)
@click.option(
    "--no-shell",
    is_flag=True,
    help="Do not open a shell in the new instance"
)
@click.pass_obj
def create(
    obj: dict,
    release: str | None,
    wsl_version: str | None,
    force: bool,
    no_update: bool,
    root_only: bool,
    additional_ppa: str | None,
    no_shell: bool
):
    """Create and provision a new Ubuntu instance."""
    create_cmd(
        obj["settings"],
        obj["wsl"],
        release,
        wsl_version,
        force,
        no_update,
        root_only,
        additional_ppa,
        no_shell,
    )


@cli.command()
@click.argument("instance_id", required=True)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Don't ask for confirmation"
)
@click.pass_obj
def remove(obj: dict, instance_id: str, force: bool):
    """Terminate, unregister and delete an instance."""
    remove_cmd(obj["settings"], obj["wsl"], instance_id, force)


@cli.command("remove-all")
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Don't ask for confirmation"
)
@click.option(
    "--keep-going",
    is_flag=True,
    help="Continue with the remaining instances when one removal fails"
)
@click.pass_obj
def remove_all(obj: dict, force: bool, keep_going: bool):
    """Remove all instances created by wslprov."""
    remove_all_cmd(obj["settings"], obj["wsl"], force, keep_going)


@cli.command("list")
@click.pass_obj
def list_instances(obj: dict):
    """List instances created by wslprov."""
    list_cmd(obj["settings"], obj["wsl"])
