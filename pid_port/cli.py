#!/usr/bin/env python3
"""Command-line interface for pid-port.

Commands:
    port PORT [PORT ...] [--host HOST]   PID listening on each port
    pid PID [PID ...]                    Ports owned by each process
    all [--host HOST]                    Every port with its PID
    bindings PORT [--host HOST]          Every (host, pid) bound to a port

Usage:
    pid-port port 8080
    pid-port --json pid 1337
    pid-port all --host '*'
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pid_port.config import settings
from pid_port.errors import PidPortError
from pid_port.logging_config import setup_logging
from pid_port.resolver import Resolver

logger = logging.getLogger(__name__)


def _emit(data: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(data, indent=2, sort_keys=True))
        return

    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, list):
                value = " ".join(str(v) for v in value) or "-"
            print(f"{key}\t{'-' if value is None else value}")
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                print(f"{item['host']}\t{'-' if item['pid'] is None else item['pid']}")
            else:
                print(item)
    else:
        print("-" if data is None else data)


async def cmd_port(resolver: Resolver, args: argparse.Namespace) -> Any:
    """Resolve one or more ports."""
    if len(args.ports) == 1:
        return await resolver.port_to_pid(args.ports[0], args.host)
    pids = await resolver.ports_to_pids(args.ports, args.host)
    return {str(port): pid for port, pid in pids.items()}


async def cmd_pid(resolver: Resolver, args: argparse.Namespace) -> Any:
    """List ports owned by one or more processes."""
    if len(args.pids) == 1:
        return sorted(await resolver.pid_to_ports(args.pids[0]))
    ports = await resolver.pids_to_ports(args.pids)
    return {str(pid): sorted(owned) for pid, owned in ports.items()}


async def cmd_all(resolver: Resolver, args: argparse.Namespace) -> Any:
    """List every port with its PID."""
    return {str(port): pid for port, pid in (await resolver.all_ports_with_pid(args.host)).items()}


async def cmd_bindings(resolver: Resolver, args: argparse.Namespace) -> Any:
    """List all bindings of a port."""
    return [binding.model_dump() for binding in await resolver.port_bindings(args.port, args.host)]


COMMANDS = {
    "port": cmd_port,
    "pid": cmd_pid,
    "all": cmd_all,
    "bindings": cmd_bindings,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pid-port",
        description="Find the process that owns a port, and the ports a process owns",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--debug", action="store_true", help="Log commands and parsing details")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    port_parser = subparsers.add_parser("port", help="Get the PID listening on a port")
    port_parser.add_argument("ports", type=int, nargs="+", help="Port number(s)")
    port_parser.add_argument("--host", help="Host to match ('*' for all interfaces, default: localhost)")

    pid_parser = subparsers.add_parser("pid", help="Get the ports owned by a process")
    pid_parser.add_argument("pids", type=int, nargs="+", help="Process ID(s)")

    all_parser = subparsers.add_parser("all", help="List all ports with their PID")
    all_parser.add_argument("--host", help="Host to match ('*' for all interfaces, default: localhost)")

    bindings_parser = subparsers.add_parser("bindings", help="List every binding of a port")
    bindings_parser.add_argument("port", type=int, help="Port number")
    bindings_parser.add_argument("--host", help="Host to match ('*' for all interfaces, default: localhost)")

    return parser


def main(argv: list[str] | None = None, resolver: Resolver | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(debug=args.debug or settings.debug, json_logs=settings.json_logs)

    try:
        result = asyncio.run(COMMANDS[args.command](resolver or Resolver(), args))
    except PidPortError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _emit(result, args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
