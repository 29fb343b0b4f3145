"""Shared test fixtures: resolved settings and fake wsl/download collaborators."""

from __future__ import annotations

from pathlib import Path

import pytest

from wslprov.config import DEFAULT_IMAGE_URL, DEFAULT_USER_GROUPS, Settings
from wslprov.exceptions import CommandError

UPDATE_ARGS = ("apt-get", "update")
UPGRADE_ARGS = ("env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "full-upgrade", "-y")


class FakeWsl:
    """Records every call a WslManager would have made."""

    def __init__(self, instances=None, fail_terminate=()):
        self.calls = []
        self.instances = list(instances or [])
        self.fail_terminate = set(fail_terminate)

    def import_instance(self, name, install_dir, image, version):
        self.calls.append(("import", name, install_dir, image, version))
        install_dir.mkdir(parents=True, exist_ok=True)
        self.instances.append(name)

    def run(self, name, args, user=None):
        self.calls.append(("run", name, tuple(args), user))
        return 0

    def terminate(self, name):
        self.calls.append(("terminate", name))
        if name in self.fail_terminate:
            raise CommandError(["wsl", "--terminate", name], 1)

    def unregister(self, name):
        self.calls.append(("unregister", name))
        if name in self.instances:
            self.instances.remove(name)

    def list_instances(self):
        self.calls.append(("list",))
        return list(self.instances)

    def shell(self, name, user=None):
        self.calls.append(("shell", name, user))
        return 0

    def run_args(self):
        return [call[2] for call in self.calls if call[0] == "run"]

    def kinds(self):
        return [call[0] for call in self.calls]


class FakeFetch:
    """Stand-in for download_file that writes a small archive."""

    def __init__(self, payload: bytes = b"rootfs"):
        self.payload = payload
        self.calls = []

    def __call__(self, url: str, destination: Path) -> None:
        self.calls.append((url, destination))
        destination.write_bytes(self.payload)


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        cache_dir=tmp_path / "cache",
        instance_dir=tmp_path / "instances",
        name_prefix="ubuntu-",
        default_release="focal",
        default_version="2",
        image_url=DEFAULT_IMAGE_URL,
        user_groups=DEFAULT_USER_GROUPS,
        username="alice",
        machine="x86_64",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def fake_wsl() -> FakeWsl:
    return FakeWsl()


@pytest.fixture
def fake_fetch() -> FakeFetch:
    return FakeFetch()


@pytest.fixture
def make_instance_dir(settings):
    """Create storage directories as if instances had been imported."""

    def _make(*ids: str) -> list[Path]:
        paths = []
        for instance_id in ids:
            path = settings.instance_path(instance_id)
            path.mkdir(parents=True)
            (path / "ext4.vhdx").write_bytes(b"disk")
            paths.append(path)
        return paths

    return _make
