"""
Wrapper around the wsl command-line manager.

Every interaction with the Windows Subsystem for Linux goes through
WslManager so that instance operations can be exercised with a fake.
"""

import os
from pathlib import Path

from wslprov.utils import run_command

WSL_EXECUTABLE = "wsl"


class WslManager:
    """Thin command interface over wsl.exe."""

    def __init__(self, executable: str = WSL_EXECUTABLE):
        self.executable = executable
        # wsl.exe writes UTF-16 to pipes unless told otherwise
        self._env = dict(os.environ, WSL_UTF8="1")

    def import_instance(
        self,
        name: str,
        install_dir: Path,
        image: Path,
        version: str
    ) -> None:
        """Register a new instance from a root filesystem archive."""
        run_command(
            [
                self.executable, "--import", name, str(install_dir), str(image),
                "--version", version,
            ],
            capture=False,
            env=self._env,
        )

    def run(
        self,
        name: str,
        args: list[str],
        user: str | None = None
    ) -> int:
        """
        Execute a command inside an instance and wait for it.

        Output is streamed to the terminal so failures show the
        command's own diagnostics.

        Returns:
            Exit status of the command (non-zero raises CommandError)
        """
        cmd = [self.executable, "-d", name]
        if user:
            cmd += ["-u", user]
        cmd += ["--", *args]
        return run_command(cmd, capture=False, env=self._env).returncode

    def terminate(self, name: str) -> None:
        run_command([self.executable, "--terminate", name], env=self._env)

    def unregister(self, name: str) -> None:
        run_command([self.executable, "--unregister", name], env=self._env)

    def list_instances(self) -> list[str]:
        """
        Get names of all registered instances.

        Returns:
            List of instance names, empty when none are registered
        """
        result = run_command(
            [self.executable, "--list", "--quiet"],
            check=False,
            env=self._env,
        )
        # wsl exits non-zero when no distributions are installed
        if result.returncode != 0:
            return []

        names = []
        for line in result.stdout.replace("\x00", "").splitlines():
            line = line.strip()
            if line:
                names.append(line)
        return names

    def shell(self, name: str, user: str | None = None) -> int:
        """Attach the current terminal to an interactive shell."""
        cmd = [self.executable, "-d", name]
        if user:
            cmd += ["-u", user]
        return run_command(cmd, capture=False, check=False, env=self._env).returncode
