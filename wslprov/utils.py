"""
Utility functions for running external commands.

Provides a wrapper around subprocess for executing wsl and other
system commands with consistent output and error handling.
"""

import subprocess

from rich.console import Console

from wslprov.exceptions import CommandError, ProvisionError

console = Console()

# Toggled by the --debug CLI flag
ECHO_COMMANDS = False


def set_echo_commands(enabled: bool) -> None:
    global ECHO_COMMANDS
    ECHO_COMMANDS = enabled


def run_command(
    cmd: list[str],
    capture: bool = True,
    check: bool = True,
    **kwargs
) -> subprocess.CompletedProcess:
    """
    Run a command and return the result.
    
    Args:
        cmd: Command and arguments as a list
        capture: Whether to capture stdout/stderr
        check: Whether to raise CommandError on non-zero exit
        **kwargs: Additional arguments to pass to subprocess.run
    
    Returns:
        CompletedProcess object with command results
    
    Raises:
        CommandError: If check=True and the command fails
    """
    if ECHO_COMMANDS:
        console.print(f"[dim]$ {' '.join(cmd)}[/]", highlight=False)

    try:
        return subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            check=check,
            **kwargs
        )
    except subprocess.CalledProcessError as e:
        if capture:
            console.print(f"[red]Command failed:[/] {' '.join(cmd)}", highlight=False)
            if e.stdout:
                console.print(f"[dim]stdout:[/] {e.stdout}", highlight=False)
            if e.stderr:
                console.print(f"[dim]stderr:[/] {e.stderr}", highlight=False)
        raise CommandError(cmd, e.returncode) from e
    except FileNotFoundError as e:
        raise ProvisionError(f"Command not found: {cmd[0]}") from e
