"""
wslprov - Ubuntu WSL provisioning tool

This package provides tools for creating and removing Ubuntu instances
in the Windows Subsystem for Linux from cloud root filesystem images.
"""

__version__ = "0.1.0"

from wslprov.config import Settings, load_config, load_settings
from wslprov.images import ensure_image, get_image_path
from wslprov.instances import (
    create_instance,
    list_instance_ids,
    remove_all_instances,
    remove_instance,
)
from wslprov.names import generate_instance_id
from wslprov.wsl import WslManager

__all__ = [
    "__version__",
    "Settings",
    "load_config",
    "load_settings",
    "ensure_image",
    "get_image_path",
    "create_instance",
    "list_instance_ids",
    "remove_all_instances",
    "remove_instance",
    "generate_instance_id",
    "WslManager",
]
