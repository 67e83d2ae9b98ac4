"""Exceptions raised by pid-port."""

from typing import Any, Sequence


class PidPortError(Exception):
    """Base class for all pid-port errors."""


class InvalidArgumentError(PidPortError, TypeError):
    """Raised when a port, pid, or host argument is rejected before any command runs."""

    def __init__(self, message: str, value: Any = None):
        self.value = value
        super().__init__(message)


class PortNotFoundError(PidPortError, LookupError):
    """Raised when no socket row survives port and host filtering."""

    def __init__(self, message: str, port: int, host_filter: Any = None):
        self.port = port
        self.host_filter = host_filter
        super().__init__(message)


class CommandExecutionError(PidPortError):
    """Raised when an enumeration command is missing, times out, or exits non-zero."""

    def __init__(self, command: Sequence[str], returncode: int | None = None, detail: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.detail = detail
        message = f"Command failed: {' '.join(self.command)}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        if detail:
            message += f": {detail}"
        super().__init__(message)
