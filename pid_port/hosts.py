"""Host normalization, host filters and deterministic binding order."""

from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Iterable, TypeVar

from pid_port.models import Binding, SocketEntry

LOCALHOST_V4 = "127.0.0.1"
LOCALHOST_V6 = "::1"
WILDCARD_HOST = "*"

LOCALHOST_HOSTS = frozenset({LOCALHOST_V4, LOCALHOST_V6})

# Requested hosts meaning "every interface", matched before normalization
ALL_INTERFACE_REQUESTS = frozenset({"*", "0.0.0.0", "::"})

_HOST_ALIASES = {
    "localhost": LOCALHOST_V4,
    "::ffff:127.0.0.1": LOCALHOST_V4,
    "::": WILDCARD_HOST,
}

T = TypeVar("T", SocketEntry, Binding)


def normalize_host(host: str) -> str:
    """Canonicalize a host spelling.

    Strips one pair of IPv6 brackets, then maps localhost and the
    IPv4-mapped loopback to 127.0.0.1 and "::" to the wildcard marker.
    Idempotent.
    """
    if len(host) >= 2 and host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return _HOST_ALIASES.get(host, host)


class FilterKind(str, Enum):
    """Which interfaces a query looks at."""

    ALL_INTERFACES = "all_interfaces"
    LOCALHOST_ONLY = "localhost_only"
    SPECIFIC_HOST = "specific_host"


@dataclass(frozen=True)
class HostFilter:
    """Host policy of a single query."""

    kind: FilterKind
    host: str | None = None

    @classmethod
    def classify(cls, requested: str | None = None) -> "HostFilter":
        """Build a filter from the caller's host argument.

        No host means localhost only, so unfiltered enumeration of sockets
        owned by other users or containers is always opt-in.
        """
        if requested is None:
            return cls(FilterKind.LOCALHOST_ONLY)
        if requested in ALL_INTERFACE_REQUESTS:
            return cls(FilterKind.ALL_INTERFACES)
        return cls(FilterKind.SPECIFIC_HOST, normalize_host(requested))

    def matches(self, host: str) -> bool:
        """Exact string comparison on normalized hosts, never pattern matching."""
        if self.kind is FilterKind.ALL_INTERFACES:
            return True
        if self.kind is FilterKind.LOCALHOST_ONLY:
            return host in LOCALHOST_HOSTS
        return host == self.host

    def apply(self, entries: Iterable[T]) -> list[T]:
        """Keep the entries whose host passes this filter."""
        return [entry for entry in entries if self.matches(entry.host)]

    def describe(self) -> str:
        """Qualifier appended to not-found messages."""
        if self.kind is FilterKind.LOCALHOST_ONLY:
            return " on localhost"
        if self.kind is FilterKind.SPECIFIC_HOST:
            return f" on host `{self.host}`"
        return ""


def compare_hosts(a: str, b: str) -> int:
    """127.0.0.1 sorts before ::1, everything else lexicographically."""
    if a == LOCALHOST_V4 and b == LOCALHOST_V6:
        return -1
    if a == LOCALHOST_V6 and b == LOCALHOST_V4:
        return 1
    return (a > b) - (a < b)


def _compare(a: SocketEntry | Binding, b: SocketEntry | Binding) -> int:
    result = compare_hosts(a.host, b.host)
    if result:
        return result
    # Same host: lowest known pid first, unknown pids last
    if a.pid == b.pid:
        return 0
    if a.pid is None:
        return 1
    if b.pid is None:
        return -1
    return (a.pid > b.pid) - (a.pid < b.pid)


def sort_by_host(entries: Iterable[T]) -> list[T]:
    """Order entries so the same table always yields the same winner."""
    return sorted(entries, key=cmp_to_key(_compare))
