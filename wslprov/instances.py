"""
Instance lifecycle operations.

Creates, lists and removes the WSL instances managed by wslprov. All
paths and host details come from Settings and every wsl interaction goes
through a WslManager, so these functions never read the environment
directly.
"""

import os
import random
import shlex
import shutil
import stat
import sys
from collections.abc import Callable
from pathlib import Path

from wslprov.config import SUPPORTED_VERSIONS, Settings, normalize_arch
from wslprov.exceptions import InstanceNotFoundError, ProvisionError
from wslprov.images import check_release_arch, download_file, ensure_image
from wslprov.names import generate_instance_id
from wslprov.utils import console
from wslprov.wsl import WslManager

ROOT_USER = "root"


def parse_ppa_list(additional_ppa: str | None) -> list[str]:
    """
    Split a comma-separated repository list.

    Bare "owner/archive" entries are expanded to "ppa:owner/archive".
    """
    if not additional_ppa:
        return []

    ppas = []
    for entry in additional_ppa.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" not in entry:
            entry = f"ppa:{entry}"
        ppas.append(entry)
    return ppas


def _update_packages(wsl: WslManager, name: str) -> None:
    console.print("[cyan]Updating packages...[/]")
    wsl.run(name, ["apt-get", "update"], user=ROOT_USER)
    wsl.run(
        name,
        ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "full-upgrade", "-y"],
        user=ROOT_USER,
    )


def _create_user(
    wsl: WslManager,
    name: str,
    username: str,
    groups: tuple[str, ...]
) -> None:
    """Create a passwordless sudo user inside the instance."""
    console.print(f"[cyan]Creating user {username}...[/]", highlight=False)
    # sudo's includedir ignores file names containing a dot
    sudoers_file = f"/etc/sudoers.d/{username.replace('.', '_')}"
    sudoers_line = f"{username} ALL=(ALL) NOPASSWD:ALL"

    # Windows account names are often capitalised or dotted
    wsl.run(
        name,
        ["adduser", "--force-badname", "--disabled-password", "--gecos", "", username],
        user=ROOT_USER,
    )
    wsl.run(name, ["passwd", "-d", username], user=ROOT_USER)
    wsl.run(
        name,
        [
            "sh", "-c",
            f"echo {shlex.quote(sudoers_line)} > {shlex.quote(sudoers_file)}"
            f" && chmod 0440 {shlex.quote(sudoers_file)}",
        ],
        user=ROOT_USER,
    )
    wsl.run(name, ["usermod", "-aG", ",".join(groups), username], user=ROOT_USER)


def _add_repository(wsl: WslManager, name: str, ppa: str) -> None:
    console.print(f"[cyan]Adding repository {ppa}...[/]", highlight=False)
    wsl.run(name, ["add-apt-repository", "-y", ppa], user=ROOT_USER)
    _update_packages(wsl, name)


def create_instance(
    settings: Settings,
    wsl: WslManager,
    release: str | None = None,
    version: str | None = None,
    force: bool = False,
    no_update: bool = False,
    root_only: bool = False,
    additional_ppa: str | None = None,
    no_shell: bool = False,
    rng: random.Random | None = None,
    fetch: Callable[[str, Path], None] = download_file
) -> str:
    """
    Create and provision a new Ubuntu instance.

    Steps run in order and the first failure aborts the whole operation;
    nothing created before the failure is cleaned up.

    Args:
        settings: Resolved settings (paths, prefix, host user and arch)
        wsl: Command interface used for every wsl call
        release: Ubuntu release code name (default from settings)
        version: WSL version, "1" or "2" (default from settings)
        force: Download the root filesystem even if it is cached
        no_update: Skip apt-get update/full-upgrade
        root_only: Do not create a user matching the host user
        additional_ppa: Comma-separated repositories to add
        no_shell: Do not open an interactive shell when done
        rng: Random source for the instance id
        fetch: Callable used to download the root filesystem

    Returns:
        The generated instance id
    """
    release = release or settings.default_release
    version = version or settings.default_version
    if version not in SUPPORTED_VERSIONS:
        raise ProvisionError(
            f"Unsupported WSL version '{version}'. Supported: {', '.join(SUPPORTED_VERSIONS)}"
        )

    arch = normalize_arch(settings.machine)
    check_release_arch(release, arch)

    settings.cache_dir.mkdir(parents=True, exist_ok=True)
    settings.instance_dir.mkdir(parents=True, exist_ok=True)

    image = ensure_image(settings, release, arch, force=force, fetch=fetch)

    instance_id = generate_instance_id(wsl.list_instances(), settings.name_prefix, rng)
    name = settings.instance_name(instance_id)
    install_dir = settings.instance_path(instance_id)

    console.print(f"[cyan]Importing {name} (WSL {version})...[/]", highlight=False)
    wsl.import_instance(name, install_dir, image, version)
    console.print(f"  [green]✓[/] {name} imported")

    if not no_update:
        _update_packages(wsl, name)

    login_user = ROOT_USER
    if not root_only:
        _create_user(wsl, name, settings.username, settings.user_groups)
        login_user = settings.username

    for ppa in parse_ppa_list(additional_ppa):
        _add_repository(wsl, name, ppa)

    console.print(f"\n[green]✓ Instance {instance_id} ready[/]", highlight=False)

    if not no_shell:
        console.print(f"[dim]Starting shell in {name} as {login_user}...[/]")
        wsl.shell(name, user=login_user)

    return instance_id


def list_instance_ids(settings: Settings) -> list[str]:
    """
    Get ids of all instances with a storage directory.

    Returns:
        Sorted list of instance ids (directory names without the prefix)
    """
    if not settings.instance_dir.is_dir():
        return []

    prefix = settings.name_prefix
    ids = []
    for entry in settings.instance_dir.iterdir():
        if entry.is_dir() and entry.name.startswith(prefix) and len(entry.name) > len(prefix):
            ids.append(entry.name[len(prefix):])
    return sorted(ids)


def _make_writable_and_retry(func, path, _exc) -> None:
    os.chmod(path, stat.S_IRWXU)
    func(path)


def force_rmtree(path: Path) -> None:
    """Recursively delete path, clearing read-only flags as needed."""
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_make_writable_and_retry)
    else:
        shutil.rmtree(path, onerror=_make_writable_and_retry)


def remove_instance(settings: Settings, wsl: WslManager, instance_id: str) -> None:
    """
    Terminate, unregister and delete an instance.

    Raises:
        InstanceNotFoundError: If no storage directory exists for the id
    """
    install_dir = settings.instance_path(instance_id)
    if not install_dir.is_dir():
        raise InstanceNotFoundError(f"Instance not found: {instance_id}")

    name = settings.instance_name(instance_id)
    console.print(f"[cyan]Removing {name}...[/]", highlight=False)

    console.print("  [dim]Terminating instance...[/]")
    wsl.terminate(name)

    console.print("  [dim]Unregistering instance...[/]")
    wsl.unregister(name)

    console.print("  [dim]Deleting storage...[/]")
    force_rmtree(install_dir)

    console.print(f"  [green]✓[/] {name} removed", highlight=False)


def remove_all_instances(
    settings: Settings,
    wsl: WslManager,
    keep_going: bool = False
) -> list[str]:
    """
    Remove every instance found under the instance directory.

    Args:
        settings: Resolved settings
        wsl: Command interface used for every wsl call
        keep_going: Continue after a failed removal and report all
            failures at the end instead of stopping at the first one

    Returns:
        Ids of the removed instances
    """
    removed = []
    failed = []
    for instance_id in list_instance_ids(settings):
        if not keep_going:
            remove_instance(settings, wsl, instance_id)
            removed.append(instance_id)
            continue

        try:
            remove_instance(settings, wsl, instance_id)
        except ProvisionError as e:
            console.print(f"  [red]✗[/] {instance_id}: {e}", highlight=False)
            failed.append(instance_id)
        else:
            removed.append(instance_id)

    if failed:
        raise ProvisionError(f"Failed to remove instance(s): {', '.join(failed)}")
    return removed
