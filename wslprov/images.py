"""
Root filesystem image cache.

Handles release/architecture validation, cache path resolution and
downloading Ubuntu WSL root filesystem archives on demand.
"""

from collections.abc import Callable
from pathlib import Path

import requests
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from wslprov.config import UNSUPPORTED_RELEASE_ARCHES, Settings
from wslprov.exceptions import DownloadError, UnsupportedReleaseArchitectureError
from wslprov.utils import console

CHUNK_SIZE = 1024 * 256
DOWNLOAD_TIMEOUT = 60


def check_release_arch(release: str, arch: str) -> None:
    """
    Reject release/architecture pairs that have no published image.

    Raises:
        UnsupportedReleaseArchitectureError: For a known-incompatible pair
    """
    if (release, arch) in UNSUPPORTED_RELEASE_ARCHES:
        raise UnsupportedReleaseArchitectureError(
            f"Release '{release}' does not provide a WSL image for {arch}"
        )


def get_image_filename(release: str, arch: str) -> str:
    return f"{release}-server-cloudimg-{arch}-wsl.rootfs.tar.gz"


def get_image_path(settings: Settings, release: str, arch: str) -> Path:
    """
    Get the cache path of the root filesystem archive for a release.

    Args:
        settings: Resolved settings holding the cache directory
        release: Ubuntu release code name (e.g., "focal", "jammy")
        arch: Image architecture ("amd64" or "arm64")

    Returns:
        Path object for the cached archive
    """
    return settings.cache_dir / release / get_image_filename(release, arch)


def get_image_url(settings: Settings, release: str, arch: str) -> str:
    return settings.image_url.format(release=release, arch=arch)


def download_file(url: str, destination: Path) -> None:
    """
    Download a file with a progress bar, replacing destination.

    The archive is written next to destination and moved into place once
    complete, so an interrupted transfer never leaves a truncated image.

    Raises:
        DownloadError: On HTTP, transport or file write errors
    """
    partial = destination.with_name(destination.name + ".part")
    try:
        with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length", 0)) or None
            with open(partial, "wb") as f, Progress(
                TextColumn("[cyan]{task.description}"),
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                TimeRemainingColumn(),
                console=console,
            ) as progress:
                task = progress.add_task(destination.name, total=total)
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
                    progress.update(task, advance=len(chunk))
        partial.replace(destination)
    except (requests.RequestException, OSError) as e:
        partial.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e
    except BaseException:
        partial.unlink(missing_ok=True)
        raise


def ensure_image(
    settings: Settings,
    release: str,
    arch: str,
    force: bool = False,
    fetch: Callable[[str, Path], None] = download_file
) -> Path:
    """
    Return the cached archive for release/arch, downloading it if needed.

    Args:
        settings: Resolved settings holding the cache directory and URL template
        release: Ubuntu release code name
        arch: Image architecture
        force: Download again even when the archive is already cached
        fetch: Callable performing the transfer (url, destination)

    Returns:
        Path of the cached archive
    """
    check_release_arch(release, arch)
    image_path = get_image_path(settings, release, arch)
    image_path.parent.mkdir(parents=True, exist_ok=True)

    if image_path.exists() and not force:
        console.print(f"[dim]Using cached image {image_path}[/]", highlight=False)
        return image_path

    url = get_image_url(settings, release, arch)
    console.print(f"[cyan]Downloading {release} ({arch}) root filesystem...[/]")
    console.print(f"[dim]{url}[/]", highlight=False)
    fetch(url, image_path)
    console.print(f"  [green]✓[/] Saved to {image_path}", highlight=False)
    return image_path
