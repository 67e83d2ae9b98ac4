"""Port <-> PID resolution over one socket table snapshot per call."""

import logging
from typing import Any, Iterable

from pid_port.config import settings
from pid_port.errors import InvalidArgumentError, PortNotFoundError
from pid_port.hosts import FilterKind, HostFilter, sort_by_host
from pid_port.models import Binding, PortTable, SocketEntry
from pid_port.parsing import build_table, iter_entries
from pid_port.platforms import PlatformAdapter, select_adapter
from pid_port.runner import CommandRunner

logger = logging.getLogger(__name__)

MIN_PORT = 1
MAX_PORT = 65535

_MULTI_TYPES = (list, tuple, set, frozenset)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_valid_port(value: Any) -> bool:
    return _is_integer(value) and MIN_PORT <= value <= MAX_PORT


def validate_port(port: Any) -> int:
    """Validate a port passed on its own."""
    if not _is_valid_port(port):
        raise InvalidArgumentError(f"Expected a TCP/UDP port between {MIN_PORT} and {MAX_PORT}, got {port}", port)
    return port


def validate_listed_port(port: Any) -> int:
    """Validate one port of a multi-port request."""
    if not _is_valid_port(port):
        raise InvalidArgumentError(
            f"Expected port to be an integer between {MIN_PORT} and {MAX_PORT}, got {port}", port
        )
    return port


def validate_host(host: Any) -> str | None:
    if host is not None and not isinstance(host, str):
        raise InvalidArgumentError(f"Expected host to be a string, got {type(host).__name__}", host)
    return host


def validate_pid(pid: Any) -> int:
    if not _is_integer(pid):
        raise InvalidArgumentError(f"Expected an integer, got {type(pid).__name__}", pid)
    return pid


class Resolver:
    """Resolves ports to owning PIDs and back.

    Every public call validates its arguments first, then takes exactly one
    fresh snapshot of the OS socket table. Nothing is cached across calls,
    so concurrent calls may see different snapshots; multi-port and
    multi-pid variants share one snapshot per call.

    Usage:
        resolver = Resolver()
        pid = await resolver.port_to_pid(8080)
        ports = await resolver.pid_to_ports(pid)
    """

    def __init__(
        self,
        adapter: PlatformAdapter | None = None,
        runner: CommandRunner | None = None,
        privilege_fallback: bool | None = None,
    ) -> None:
        self.adapter = adapter or select_adapter(settings.platform)
        self.runner = runner or CommandRunner()
        self.privilege_fallback = (
            settings.privilege_fallback if privilege_fallback is None else privilege_fallback
        )

    async def snapshot(self) -> PortTable:
        """Enumerate sockets once and parse them into a table."""
        listing = await self.adapter.list_sockets(self.runner)
        table = build_table(listing)
        logger.debug(f"Parsed {len(table)} socket rows via {self.adapter.name}")
        return table

    # === port -> pid ===

    async def port_to_pid(self, port: int | Iterable[int], host: str | None = None) -> Any:
        """Get the PID listening on a port.

        Passing a list, tuple or set of ports resolves all of them against
        one snapshot and returns a dict, see ports_to_pids().

        Returns None when a listener exists but its owner stays hidden even
        after the privilege fallback.

        Raises:
            InvalidArgumentError: port or host is invalid
            PortNotFoundError: nothing listens on the port for this host filter
            CommandExecutionError: the enumeration command failed
        """
        if isinstance(port, _MULTI_TYPES):
            return await self.ports_to_pids(port, host)

        validate_port(port)
        validate_host(host)
        host_filter = HostFilter.classify(host)

        table = await self.snapshot()
        return await self._resolve_port(table, port, host_filter)

    async def ports_to_pids(self, ports: Iterable[int], host: str | None = None) -> dict[int, int | None]:
        """Resolve several ports against a single snapshot.

        The first port that is not found fails the whole call.
        """
        ports = list(ports)
        for port in ports:
            validate_listed_port(port)
        validate_host(host)
        host_filter = HostFilter.classify(host)

        table = await self.snapshot()
        result: dict[int, int | None] = {}
        for port in ports:
            result[port] = await self._resolve_port(table, port, host_filter)
        return result

    async def _resolve_port(self, table: PortTable, port: int, host_filter: HostFilter) -> int | None:
        matches = self._matching_entries(table, port, host_filter)
        if not matches:
            raise PortNotFoundError(
                f"Could not find a process that uses port `{port}`{host_filter.describe()}",
                port=port,
                host_filter=host_filter,
            )

        winner = matches[0]
        if winner.pid is not None:
            return winner.pid
        # lsof is scoped to the hidden row's address unless the query spans all interfaces
        host = None if host_filter.kind is FilterKind.ALL_INTERFACES else winner.host
        return await self._fallback_pid(port, host)

    async def _fallback_pid(self, port: int, host: str | None = None) -> int | None:
        fallback = self.adapter.fallback
        if not self.privilege_fallback or fallback is None:
            return None
        logger.debug("Listener found but its PID is hidden, trying fallback", extra={"port": port})
        return await fallback.find_pid(self.runner, port, host)

    @staticmethod
    def _matching_entries(table: PortTable, port: int, host_filter: HostFilter) -> list[SocketEntry]:
        entries = [entry for entry in iter_entries(table) if entry.port == port]
        return sort_by_host(host_filter.apply(entries))

    # === pid -> ports ===

    async def pid_to_ports(self, pid: int | Iterable[int]) -> Any:
        """Get every port a process owns, on every interface.

        Passing a list, tuple or set of PIDs returns a dict, see pids_to_ports().
        """
        if isinstance(pid, _MULTI_TYPES):
            return await self.pids_to_ports(pid)

        validate_pid(pid)
        table = await self.snapshot()
        return self._ports_of(list(iter_entries(table)), pid)

    async def pids_to_ports(self, pids: Iterable[int]) -> dict[int, set[int]]:
        """Map each PID to its ports from one shared snapshot."""
        pids = list(pids)
        for pid in pids:
            validate_pid(pid)

        table = await self.snapshot()
        entries = list(iter_entries(table))
        return {pid: self._ports_of(entries, pid) for pid in pids}

    @staticmethod
    def _ports_of(entries: list[SocketEntry], pid: int) -> set[int]:
        return {entry.port for entry in entries if entry.pid == pid and entry.port is not None}

    # === tables ===

    async def all_ports_with_pid(self, host: str | None = None) -> dict[int, int]:
        """Map every visible port to its PID.

        One owner per port: when several rows share a port the first in
        binding order wins. Rows without a parseable port or PID are skipped.
        """
        validate_host(host)
        host_filter = HostFilter.classify(host)

        table = await self.snapshot()
        result: dict[int, int] = {}
        for entry in sort_by_host(host_filter.apply(iter_entries(table))):
            if entry.port is None or entry.pid is None:
                continue
            result.setdefault(entry.port, entry.pid)
        return dict(sorted(result.items()))

    async def port_bindings(self, port: int, host: str | None = None) -> list[Binding]:
        """List every (host, pid) pair bound to a port, deduplicated and sorted."""
        validate_port(port)
        validate_host(host)
        host_filter = HostFilter.classify(host)

        table = await self.snapshot()
        matches = self._matching_entries(table, port, host_filter)
        if not matches:
            raise PortNotFoundError(
                f"Could not find any processes using port `{port}`{host_filter.describe()}",
                port=port,
                host_filter=host_filter,
            )

        # TCP and UDP rows of the same socket collapse here
        unique = {Binding(host=entry.host, pid=entry.pid) for entry in matches}
        return sort_by_host(unique)
