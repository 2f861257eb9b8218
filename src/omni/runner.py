"""External command execution.

Two modes: ``run`` hands the terminal to the child (package managers,
sudo prompts, fastfetch) and ``capture`` collects stdout for parsing and
previews. Neither imposes a timeout unless the caller asks for one.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Sequence

from .errors import CommandFailed

logger = logging.getLogger(__name__)

# Exit codes used when the command never produced one
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass
class CommandResult:
    """Outcome of one external command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


class Runner:
    """Spawns external tools on behalf of handlers."""

    def run(
        self,
        args: Sequence[str],
        *,
        check: bool = True,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run a command attached to the terminal.

        Args:
            args: Command and arguments.
            check: Raise CommandFailed on a non-zero exit.
            cwd: Working directory for the child.

        Returns:
            CommandResult (stdout is not captured).

        Raises:
            CommandFailed: If check is set and the command fails or is missing.
        """
        cmd = list(args)
        logger.debug("run: %s", cmd)
        try:
            completed = subprocess.run(cmd, cwd=cwd)
            result = CommandResult(cmd, completed.returncode)
        except FileNotFoundError:
            result = CommandResult(cmd, EXIT_NOT_FOUND, stderr=f"Command not found: {cmd[0]}")
        except OSError as e:
            result = CommandResult(cmd, EXIT_NOT_FOUND, stderr=str(e))

        logger.debug("exit %s: %s", result.returncode, cmd)
        if check and not result.ok:
            raise CommandFailed(cmd, result.returncode, result.stderr)
        return result

    def shell(self, script: str, *, check: bool = True, cwd: str | None = None) -> CommandResult:
        """Run a POSIX shell snippet attached to the terminal."""
        return self.run(["sh", "-c", script], check=check, cwd=cwd)

    def capture(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        input: str | None = None,
    ) -> CommandResult:
        """Run a command and capture its output. Never raises.

        Args:
            args: Command and arguments.
            timeout: Optional limit in seconds (previews only).
            input: Text fed to stdin.

        Returns:
            CommandResult; a missing binary reports exit 127, a timeout 124.
        """
        cmd = list(args)
        logger.debug("capture: %s", cmd)
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                input=input,
            )
            return CommandResult(cmd, completed.returncode, completed.stdout, completed.stderr)
        except subprocess.TimeoutExpired:
            return CommandResult(cmd, EXIT_TIMEOUT, stderr=f"Command timed out after {timeout}s")
        except FileNotFoundError:
            return CommandResult(cmd, EXIT_NOT_FOUND, stderr=f"Command not found: {cmd[0]}")
        except OSError as e:
            return CommandResult(cmd, EXIT_NOT_FOUND, stderr=str(e))
