"""pid-port - find the process that owns a port, and the ports a process owns."""

from pid_port.api import (
    all_ports_with_pid,
    get_resolver,
    pid_to_ports,
    port_bindings,
    port_to_pid,
)
from pid_port.errors import (
    CommandExecutionError,
    InvalidArgumentError,
    PidPortError,
    PortNotFoundError,
)
from pid_port.hosts import FilterKind, HostFilter, normalize_host
from pid_port.models import Binding
from pid_port.resolver import Resolver

__all__ = [
    "all_ports_with_pid",
    "get_resolver",
    "pid_to_ports",
    "port_bindings",
    "port_to_pid",
    "CommandExecutionError",
    "InvalidArgumentError",
    "PidPortError",
    "PortNotFoundError",
    "FilterKind",
    "HostFilter",
    "normalize_host",
    "Binding",
    "Resolver",
]
