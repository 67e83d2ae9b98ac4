"""Module-level functions bound to a default resolver for this OS."""

from functools import lru_cache
from typing import Any, Iterable

from pid_port.models import Binding
from pid_port.resolver import Resolver


@lru_cache(maxsize=1)
def get_resolver() -> Resolver:
    """The process-wide resolver; platform is detected once."""
    return Resolver()


async def port_to_pid(port: int | Iterable[int], host: str | None = None) -> Any:
    """Get the PID of the process listening on a port (or a dict for several ports)."""
    return await get_resolver().port_to_pid(port, host)


async def pid_to_ports(pid: int | Iterable[int]) -> Any:
    """Get the ports owned by a PID (or a dict for several PIDs)."""
    return await get_resolver().pid_to_ports(pid)


async def all_ports_with_pid(host: str | None = None) -> dict[int, int]:
    """Get every port with its PID, localhost only unless host is given."""
    return await get_resolver().all_ports_with_pid(host)


async def port_bindings(port: int, host: str | None = None) -> list[Binding]:
    """Get every (host, pid) binding of a port."""
    return await get_resolver().port_bindings(port, host)
