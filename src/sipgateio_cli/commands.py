"""Running external commands (gcloud, git) and reading their output."""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    stdout: str


class CommandRunner:
    """Run a command line and return its stdout.

    ``timeout`` is passed to subprocess; None blocks until the command exits.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(
        self,
        command_line: str,
        cwd: Optional[Union[str, Path]] = None,
        capture: bool = True,
    ) -> CommandResult:
        try:
            args = shlex.split(command_line)
        except ValueError as e:
            raise CommandError(command_line, None, f"could not parse command line: {e}") from e
        logger.debug("Running %s", command_line)
        try:
            result = subprocess.run(
                args,
                check=True,
                capture_output=capture,
                text=True,
                cwd=cwd,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            raise CommandError(command_line, e.returncode, e.stderr or "") from e
        except FileNotFoundError as e:
            raise CommandError(command_line, None, f"{args[0]} not found") from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(command_line, None, f"timed out after {self.timeout}s") from e
        return CommandResult(stdout=result.stdout or "")


def join_command(*args) -> str:
    """Join arguments into a command line, quoting each one for the shell."""
    return shlex.join(str(arg) for arg in args)


def output_lines(result: CommandResult) -> list[str]:
    """Non-empty, stripped lines of a command's stdout."""
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]
