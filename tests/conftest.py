"""Pytest fixtures: canned enumeration output and a fake command runner."""

from typing import Sequence

import pytest

from pid_port.errors import CommandExecutionError
from pid_port.platforms import LinuxAdapter, MacOSAdapter, WindowsAdapter
from pid_port.resolver import Resolver


SS_OUTPUT = """\
Netid State  Recv-Q Send-Q   Local Address:Port   Peer Address:Port Process
udp   UNCONN 0      0       127.0.0.53%lo:53          0.0.0.0:*     users:(("systemd-resolve",pid=612,fd=13))
tcp   LISTEN 0      128         127.0.0.1:9001        0.0.0.0:*     users:(("python3",pid=4242,fd=3))
tcp   LISTEN 0      128           0.0.0.0:9002        0.0.0.0:*     users:(("python3",pid=4242,fd=4))
tcp   LISTEN 0      128             [::1]:9003           [::]:*     users:(("node",pid=5151,fd=20))
tcp   LISTEN 0      128         127.0.0.1:9003        0.0.0.0:*     users:(("node",pid=5151,fd=19))
udp   UNCONN 0      0           127.0.0.1:9003        0.0.0.0:*     users:(("node",pid=5151,fd=21))
tcp   LISTEN 0      4096        127.0.0.1:631         0.0.0.0:*
tcp   LISTEN 0      128   [::ffff:127.0.0.1]:9004           *:*     users:(("java",pid=7000,fd=30))
tcp   LISTEN 0      128              [::]:9005           [::]:*     users:(("nginx",pid=800,fd=6))
tcp   LISTEN 0      128       192.168.1.5:9006        0.0.0.0:*     users:(("api",pid=9100,fd=5))
tcp   LISTEN 0      128          10.0.0.7:9006        0.0.0.0:*     users:(("worker",pid=9200,fd=5))
tcp   LISTEN 0      128         127x0x0x1:9007        0.0.0.0:*     users:(("odd",pid=31,fd=3))
"""

NETSTAT_MACOS_TCP = """\
Active Internet connections (including servers)
Proto Recv-Q Send-Q  Local Address          Foreign Address        (state)          rxbytes      txbytes  rhiwat  shiwat    pid   epid state  options
tcp4       0      0  127.0.0.1.9001         *.*                    LISTEN                 0            0  131072  131072   4242      0 0x0100 0x00000006
tcp6       0      0  ::1.9001               *.*                    LISTEN                 0            0  131072  131072   4242      0 0x0100 0x00000006
tcp46      0      0  *.9002                 *.*                    LISTEN                 0            0  131072  131072   python3:4242      0 0x0100 0x00000006
tcp4       0      0  127.0.0.1.631          *.*                    LISTEN                 0            0  131072  131072   -      0 0x0100 0x00000006
"""

NETSTAT_MACOS_TCP_LEGACY = """\
Active Internet connections (including servers)
Proto Recv-Q Send-Q  Local Address          Foreign Address        (state)      rhiwat  shiwat    pid   epid  state    options
tcp4       0      0  127.0.0.1.9001         *.*                    LISTEN       131072  131072   4242      0 0x0080 0x00000006
tcp46      0      0  *.9002                 *.*                    LISTEN       131072  131072   4242      0 0x0080 0x00000006
"""

NETSTAT_MACOS_UDP = """\
Active Internet connections (including servers)
Proto Recv-Q Send-Q  Local Address          Foreign Address        (state)      rhiwat  shiwat    pid   epid  state    options
"""

NETSTAT_WINDOWS = """\

Active Connections

  Proto  Local Address          Foreign Address        State           PID
  TCP    0.0.0.0:135            0.0.0.0:0              LISTENING       1044
  TCP    127.0.0.1:9001         0.0.0.0:0              LISTENING       4242
  TCP    [::]:9002              [::]:0                 LISTENING       4242
  TCP    [::1]:9001             [::]:0                 LISTENING       4242
  UDP    0.0.0.0:5353           *:*                                    2388
"""

SS_COMMAND = ("ss", "-tunlp")
MACOS_TCP_COMMAND = ("netstat", "-anv", "-p", "tcp")
MACOS_UDP_COMMAND = ("netstat", "-anv", "-p", "udp")
WINDOWS_COMMAND = ("netstat", "-ano")


def lsof_command(port: int, host: str | None = None, protocol: str = "TCP") -> tuple[str, ...]:
    address = f"@{host}:{port}" if host else f":{port}"
    if protocol == "TCP":
        return ("lsof", "-n", "-P", "-t", f"-iTCP{address}", "-sTCP:LISTEN")
    return ("lsof", "-n", "-P", "-t", f"-i{protocol}{address}")


class FakeRunner:
    """Stands in for CommandRunner, answering from canned output."""

    def __init__(self, outputs: dict[tuple[str, ...], str | Exception] | None = None) -> None:
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[str, ...]] = []

    async def run(self, executable: str, args: Sequence[str] = ()) -> str:
        command = (executable, *args)
        self.calls.append(command)
        result = self.outputs.get(command)
        if result is None:
            raise CommandExecutionError(list(command), returncode=1, detail="no canned output")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def linux_runner():
    return FakeRunner({SS_COMMAND: SS_OUTPUT})


@pytest.fixture
def linux_resolver(linux_runner):
    return Resolver(adapter=LinuxAdapter(), runner=linux_runner, privilege_fallback=True)


@pytest.fixture
def macos_runner():
    return FakeRunner({MACOS_TCP_COMMAND: NETSTAT_MACOS_TCP, MACOS_UDP_COMMAND: NETSTAT_MACOS_UDP})


@pytest.fixture
def macos_resolver(macos_runner):
    return Resolver(adapter=MacOSAdapter(), runner=macos_runner, privilege_fallback=True)


@pytest.fixture
def windows_runner():
    return FakeRunner({WINDOWS_COMMAND: NETSTAT_WINDOWS})


@pytest.fixture
def windows_resolver(windows_runner):
    return Resolver(adapter=WindowsAdapter(), runner=windows_runner, privilege_fallback=True)
