"""Runs the OS socket enumeration binaries."""

import asyncio
import logging
import time
from typing import Sequence

from pid_port.config import settings
from pid_port.errors import CommandExecutionError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Execute a binary and return its stdout, failing on non-zero exit."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout or settings.command_timeout

    async def run(self, executable: str, args: Sequence[str] = ()) -> str:
        """Run executable with args and return decoded stdout."""
        command = [executable, *args]
        command_str = " ".join(command)
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise CommandExecutionError(command, detail=f"executable not found: {executable}") from e
        except OSError as e:
            raise CommandExecutionError(command, detail=str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise CommandExecutionError(command, detail=f"timed out after {self.timeout}s") from e
        except asyncio.CancelledError:
            process.kill()
            raise

        duration_ms = (time.monotonic() - started) * 1000
        logger.debug(
            f"Ran {command_str}",
            extra={"command": command_str, "returncode": process.returncode, "duration_ms": duration_ms},
        )

        if process.returncode != 0:
            stderr_str = (stderr or b"").decode("utf-8", errors="replace").strip()
            raise CommandExecutionError(command, returncode=process.returncode, detail=stderr_str)

        return (stdout or b"").decode("utf-8", errors="replace")
