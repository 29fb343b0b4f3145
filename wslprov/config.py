"""
Configuration management for wslprov.

Handles loading the optional config.yaml and resolving it, together with
the host environment, into a Settings object that is passed explicitly
to the image cache and instance operations.
"""

import getpass
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from wslprov.exceptions import UnsupportedArchitectureError

# Default paths
BASE_DIR = Path.home() / ".wslprov"
CONFIG_FILE = BASE_DIR / "config.yaml"

DEFAULT_RELEASE = "focal"
DEFAULT_VERSION = "2"
SUPPORTED_VERSIONS = ("1", "2")
DEFAULT_NAME_PREFIX = "ubuntu-"
DEFAULT_IMAGE_URL = (
    "https://cloud-images.ubuntu.com/{release}/current/"
    "{release}-server-cloudimg-{arch}-wsl.rootfs.tar.gz"
)
DEFAULT_USER_GROUPS = (
    "adm", "dialout", "cdrom", "floppy", "sudo",
    "audio", "dip", "video", "plugdev", "netdev",
)

SUPPORTED_ARCHES = ("amd64", "arm64")
ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# Releases that never shipped a WSL root filesystem for an architecture
UNSUPPORTED_RELEASE_ARCHES = {("xenial", "arm64")}


def load_config(config_file: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from config.yaml.
    
    Args:
        config_file: Path to the YAML file (default: ~/.wslprov/config.yaml)
    
    Returns:
        Dictionary containing configuration, or empty dict if file doesn't exist
    """
    config_file = config_file or CONFIG_FILE
    if config_file.exists():
        with open(config_file) as f:
            return yaml.safe_load(f) or {}
    return {}


def normalize_arch(machine: str) -> str:
    """
    Map a host processor architecture onto an Ubuntu image architecture.
    
    Raises:
        UnsupportedArchitectureError: If the architecture has no WSL image
    """
    arch = ARCH_ALIASES.get(machine.strip().lower())
    if arch not in SUPPORTED_ARCHES:
        supported = ", ".join(SUPPORTED_ARCHES)
        raise UnsupportedArchitectureError(
            f"Unsupported architecture '{machine}'. Supported: {supported}"
        )
    return arch


@dataclass(frozen=True)
class Settings:
    """Resolved paths, naming and host details for one invocation."""

    cache_dir: Path
    instance_dir: Path
    name_prefix: str
    default_release: str
    default_version: str
    image_url: str
    user_groups: tuple[str, ...]
    username: str
    machine: str

    def instance_name(self, instance_id: str) -> str:
        return f"{self.name_prefix}{instance_id}"

    def instance_path(self, instance_id: str) -> Path:
        return self.instance_dir / self.instance_name(instance_id)


def load_settings(
    config_file: Path | None = None,
    username: str | None = None,
    machine: str | None = None,
) -> Settings:
    """
    Build Settings from config.yaml, built-in defaults and the host.
    
    Args:
        config_file: Optional path to an alternative config.yaml
        username: Override for the invoking user's name
        machine: Override for the host processor architecture
    
    Returns:
        Settings instance
    """
    config = load_config(config_file)
    paths_config = config.get("paths") or {}
    instances_config = config.get("instances") or {}
    images_config = config.get("images") or {}
    user_config = config.get("user") or {}

    cache_dir = Path(paths_config.get("cache_dir", BASE_DIR / "cache")).expanduser()
    instance_dir = Path(
        paths_config.get("instance_dir", BASE_DIR / "instances")
    ).expanduser()

    groups = user_config.get("groups", DEFAULT_USER_GROUPS)
    if isinstance(groups, str):
        groups = [g.strip() for g in groups.split(",") if g.strip()]

    return Settings(
        cache_dir=cache_dir,
        instance_dir=instance_dir,
        name_prefix=instances_config.get("name_prefix", DEFAULT_NAME_PREFIX),
        default_release=instances_config.get("default_release", DEFAULT_RELEASE),
        default_version=str(instances_config.get("default_version", DEFAULT_VERSION)),
        image_url=images_config.get("url_template", DEFAULT_IMAGE_URL),
        user_groups=tuple(groups),
        username=username or getpass.getuser(),
        machine=machine or platform.machine(),
    )
