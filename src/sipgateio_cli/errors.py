"""Exception types raised by the sipgate.io CLI."""

from pathlib import Path
from typing import Optional


class SipgateioCliError(Exception):
    """Base class for all errors the CLI reports to the user."""


class TemplateParseError(SipgateioCliError):
    """A template line is neither a comment, an assignment nor blank."""

    def __init__(self, line_number: int, line: str):
        self.line_number = line_number
        self.line = line
        super().__init__(f"Malformed declaration on line {line_number}: {line!r}")


class ConfigLoadError(SipgateioCliError):
    """The configuration file is missing, unreadable or malformed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not load config from {path}: {reason}")


class ValidationError(SipgateioCliError):
    """A configured value is not part of the authoritative list."""

    def __init__(self, key: str, value: Optional[str]):
        self.key = key
        self.value = value
        super().__init__(f"Invalid {key}={value} in config.")


class CommandError(SipgateioCliError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: str, returncode: Optional[int] = None, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed: {command}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class CatalogFetchError(SipgateioCliError):
    """The remote example catalog or a template could not be fetched."""


class WizardAborted(SipgateioCliError):
    """The configuration wizard gave up after too many declined attempts."""
