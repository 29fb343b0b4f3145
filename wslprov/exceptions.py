"""Exceptions raised by wslprov operations."""


class ProvisionError(RuntimeError):
    """Raised on unrecoverable configuration or runtime errors."""


class UnsupportedArchitectureError(ProvisionError):
    """The host processor architecture has no WSL root filesystem."""


class UnsupportedReleaseArchitectureError(ProvisionError):
    """The release does not ship an image for the host architecture."""


class InstanceNotFoundError(ProvisionError):
    """No instance storage directory exists for the given id."""


class DownloadError(ProvisionError):
    """A root filesystem archive could not be downloaded."""


class CommandError(ProvisionError):
    """An external command exited with a non-zero status."""

    def __init__(self, cmd: list[str], returncode: int):
        self.cmd = cmd
        self.returncode = returncode
        super().__init__(
            f"Command failed with exit status {returncode}: {' '.join(cmd)}"
        )
