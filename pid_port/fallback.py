"""Secondary PID lookup for listeners whose owner the primary tool hides."""

import logging
from abc import ABC, abstractmethod

from pid_port.errors import CommandExecutionError
from pid_port.parsing import parse_pid
from pid_port.runner import CommandRunner

logger = logging.getLogger(__name__)


class PrivilegeFallback(ABC):
    """Resolve a port's PID through an independent enumeration path."""

    @abstractmethod
    async def lookup(self, runner: CommandRunner, port: int, host: str | None = None) -> int | None:
        """Return the PID, or None when this path cannot tell either.

        host narrows the lookup to one local address; None means any.
        """
        pass

    async def find_pid(self, runner: CommandRunner, port: int, host: str | None = None) -> int | None:
        """Run lookup() once, absorbing command failures.

        A failing fallback never replaces the primary result.
        """
        try:
            pid = await self.lookup(runner, port, host)
        except CommandExecutionError as e:
            logger.debug(f"Privilege fallback unavailable: {e}", extra={"port": port})
            return None
        logger.debug(f"Privilege fallback resolved pid={pid}", extra={"port": port})
        return pid


def lsof_address(port: int, host: str | None = None) -> str:
    """Build the address part of an lsof -i selector, e.g. "@[::1]:631"."""
    if not host:
        return f":{port}"
    host = host.split("%", 1)[0]
    if ":" in host:
        host = f"[{host}]"
    return f"@{host}:{port}"


class LsofFallback(PrivilegeFallback):
    """lsof -t prints bare PIDs, one per line.

    A bare ``-i :PORT`` also matches clients connected to the port, so
    TCP is restricted to LISTEN sockets. UDP has no listen state; it is
    queried only after TCP found nothing.
    """

    executable = "lsof"

    def queries(self, port: int, host: str | None = None) -> list[list[str]]:
        address = lsof_address(port, host)
        return [
            ["-n", "-P", "-t", f"-iTCP{address}", "-sTCP:LISTEN"],
            ["-n", "-P", "-t", f"-iUDP{address}"],
        ]

    async def lookup(self, runner: CommandRunner, port: int, host: str | None = None) -> int | None:
        queries = self.queries(port, host)
        failures: list[CommandExecutionError] = []
        for args in queries:
            try:
                stdout = await runner.run(self.executable, args)
            except CommandExecutionError as e:
                # lsof exits 1 when nothing matches
                failures.append(e)
                continue
            for line in stdout.splitlines():
                pid = parse_pid(line.strip())
                if pid is not None:
                    return pid
        if len(failures) == len(queries):
            raise failures[-1]
        return None
