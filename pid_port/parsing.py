"""Parsers for netstat/ss output: table rows, addresses and PID columns."""

import re
from typing import Iterator

from pid_port.hosts import normalize_host
from pid_port.models import Address, Listing, PortTable, SocketEntry, SocketRow

PROTOCOL_PATTERN = re.compile(r"^\s*(tcp|udp)", re.IGNORECASE)
TOKEN_PATTERN = re.compile(r"\S+")

# Greedy host group so IPv6 hosts keep every colon but the last separator.
# macOS netstat uses "host.port", everything else "host:port".
ADDRESS_PATTERN = re.compile(r"^(?P<host>.*)[.:](?P<port>\d+)$")

# Tried in order, first match wins.
PID_PATTERNS = (
    # ss: users:(("python3",pid=4242,fd=3))
    re.compile(r"pid=(?P<pid>\d+)"),
    # macOS netstat: "4242" or "python3:4242"
    re.compile(r'(?:^|",)(?:[^\s:",]+:)?(?P<pid>\d+)'),
    # Windows netstat
    re.compile(r"^(?P<pid>\d+)$"),
)


def is_socket_line(line: str) -> bool:
    """True for lines describing a TCP or UDP socket."""
    return PROTOCOL_PATTERN.match(line) is not None


def parse_table(text: str) -> list[SocketRow]:
    """Split raw output into tokenized rows, keeping only tcp/udp lines.

    Short or truncated rows are kept as-is; missing columns read as None
    through SocketRow.get() instead of failing the whole parse.
    """
    rows = []
    for line in text.splitlines():
        if not is_socket_line(line):
            continue
        rows.append(SocketRow(tokens=tuple(TOKEN_PATTERN.findall(line))))
    return rows


def parse_address(token: str) -> Address:
    """Split a "host:port" or "host.port" token into normalized host and port.

    Tokens without a trailing numeric port ("*:*", "*.*") keep the whole
    token as host and report no port.
    """
    match = ADDRESS_PATTERN.match(token)
    if not match:
        return Address(host=normalize_host(token), port=None)
    return Address(host=normalize_host(match.group("host")), port=int(match.group("port")))


def parse_pid(token: str | None) -> int | None:
    """Extract the owning PID from a PID column token.

    Returns None for blank or dashed columns, which is what the tools print
    when the caller may not see another user's process.
    """
    if not isinstance(token, str) or not token:
        return None

    for pattern in PID_PATTERNS:
        match = pattern.search(token)
        if match:
            return int(match.group("pid"))
    return None


def build_table(listing: Listing) -> PortTable:
    """Parse an adapter listing into a PortTable snapshot."""
    return PortTable(
        rows=parse_table(listing.text),
        address_column=listing.address_column,
        pid_column=listing.pid_column,
    )


def iter_entries(table: PortTable) -> Iterator[SocketEntry]:
    """Yield one SocketEntry per row that has an address column."""
    for row in table.rows:
        token = row.get(table.address_column)
        if token is None:
            continue
        address = parse_address(token)
        yield SocketEntry(
            host=address.host,
            port=address.port,
            pid=parse_pid(row.get(table.pid_column)),
        )
