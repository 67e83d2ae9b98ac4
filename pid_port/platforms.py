"""Per-OS socket enumeration adapters."""

import asyncio
import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pid_port.fallback import LsofFallback, PrivilegeFallback
from pid_port.models import Listing
from pid_port.runner import CommandRunner

logger = logging.getLogger(__name__)


class ColumnLayoutDetector(ABC):
    """Picks the PID column for tools whose layout varies by version."""

    @abstractmethod
    def detect(self, text: str) -> int:
        """Return the PID column index for this output."""
        pass


@dataclass
class MarkerColumnDetector(ColumnLayoutDetector):
    """Detect the layout from a marker substring in the header line.

    Header labels contain spaces, so the header cannot be tokenized;
    presence of the marker fingerprints the tool version instead.
    """

    marker: str = "rxbytes"
    marked_column: int = 10
    default_column: int = 8

    def detect(self, text: str) -> int:
        header = self.header_line(text)
        return self.marked_column if self.marker in header else self.default_column

    @staticmethod
    def header_line(text: str) -> str:
        lines = text.splitlines()
        for line in lines:
            if line.lstrip().startswith("Proto"):
                return line
        return lines[1] if len(lines) > 1 else ""


class PlatformAdapter(ABC):
    """Runs the enumeration command(s) of one OS family."""

    name: str = ""
    address_column: int = 0
    pid_column: int = 0

    def __init__(self, fallback: PrivilegeFallback | None = None) -> None:
        self.fallback = fallback

    @abstractmethod
    async def list_sockets(self, runner: CommandRunner) -> Listing:
        """Enumerate sockets and return raw text plus its columns."""
        pass


class MacOSAdapter(PlatformAdapter):
    """netstat -anv, run once for TCP and once for UDP."""

    name = "darwin"
    address_column = 3

    def __init__(
        self,
        fallback: PrivilegeFallback | None = None,
        detector: ColumnLayoutDetector | None = None,
    ) -> None:
        super().__init__(fallback=fallback if fallback is not None else LsofFallback())
        self.detector = detector or MarkerColumnDetector()

    async def list_sockets(self, runner: CommandRunner) -> Listing:
        tcp, udp = await asyncio.gather(
            runner.run("netstat", ["-anv", "-p", "tcp"]),
            runner.run("netstat", ["-anv", "-p", "udp"]),
        )
        pid_column = self.detector.detect(tcp)
        logger.debug(f"netstat layout detected: pid column {pid_column}")
        return Listing(
            text="\n".join([tcp, udp]),
            address_column=self.address_column,
            pid_column=pid_column,
        )


class LinuxAdapter(PlatformAdapter):
    """ss -tunlp, TCP and UDP listeners in one run."""

    name = "linux"
    address_column = 4
    pid_column = 6

    def __init__(self, fallback: PrivilegeFallback | None = None) -> None:
        super().__init__(fallback=fallback if fallback is not None else LsofFallback())

    async def list_sockets(self, runner: CommandRunner) -> Listing:
        text = await runner.run("ss", ["-tunlp"])
        return Listing(text=text, address_column=self.address_column, pid_column=self.pid_column)


class WindowsAdapter(PlatformAdapter):
    """netstat -ano, every connection with its owning PID."""

    name = "win32"
    address_column = 1
    pid_column = 4

    async def list_sockets(self, runner: CommandRunner) -> Listing:
        text = await runner.run("netstat", ["-ano"])
        return Listing(text=text, address_column=self.address_column, pid_column=self.pid_column)


def select_adapter(platform: str | None = None) -> PlatformAdapter:
    """Pick the adapter for a sys.platform value (defaults to the running OS)."""
    platform = platform or sys.platform
    if platform == "darwin":
        return MacOSAdapter()
    if platform.startswith("linux"):
        return LinuxAdapter()
    return WindowsAdapter()
