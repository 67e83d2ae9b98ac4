"""Tests for the lsof privilege fallback."""

import pytest

from pid_port.errors import CommandExecutionError
from pid_port.fallback import LsofFallback, lsof_address
from tests.conftest import FakeRunner, lsof_command


@pytest.mark.asyncio
async def test_reads_first_pid():
    runner = FakeRunner({lsof_command(631): "1234\n5678\n"})
    assert await LsofFallback().find_pid(runner, 631) == 1234
    assert runner.calls == [lsof_command(631)]


@pytest.mark.asyncio
async def test_tcp_query_selects_listeners_only():
    """A connected client shares the port number; only LISTEN sockets count."""
    runner = FakeRunner({lsof_command(631): "4321\n"})
    await LsofFallback().find_pid(runner, 631)
    assert runner.calls == [("lsof", "-n", "-P", "-t", "-iTCP:631", "-sTCP:LISTEN")]


@pytest.mark.asyncio
async def test_udp_queried_when_no_tcp_listener():
    """lsof exits 1 for the TCP query, the UDP socket still resolves."""
    runner = FakeRunner({lsof_command(53, protocol="UDP"): "612\n"})
    assert await LsofFallback().find_pid(runner, 53) == 612
    assert runner.calls == [
        ("lsof", "-n", "-P", "-t", "-iTCP:53", "-sTCP:LISTEN"),
        ("lsof", "-n", "-P", "-t", "-iUDP:53"),
    ]


@pytest.mark.asyncio
async def test_udp_queried_after_empty_tcp_output():
    runner = FakeRunner({lsof_command(53): "", lsof_command(53, protocol="UDP"): "612\n"})
    assert await LsofFallback().find_pid(runner, 53) == 612


@pytest.mark.asyncio
async def test_host_scopes_both_queries():
    runner = FakeRunner()
    assert await LsofFallback().find_pid(runner, 631, "127.0.0.1") is None
    assert runner.calls == [
        ("lsof", "-n", "-P", "-t", "-iTCP@127.0.0.1:631", "-sTCP:LISTEN"),
        ("lsof", "-n", "-P", "-t", "-iUDP@127.0.0.1:631"),
    ]


@pytest.mark.asyncio
async def test_skips_blank_lines():
    runner = FakeRunner({lsof_command(631): "\n  \n99\n"})
    assert await LsofFallback().find_pid(runner, 631) == 99


@pytest.mark.asyncio
async def test_empty_output_is_none():
    runner = FakeRunner({lsof_command(631): "", lsof_command(631, protocol="UDP"): ""})
    assert await LsofFallback().find_pid(runner, 631) is None


@pytest.mark.asyncio
async def test_command_failure_is_absorbed():
    """lsof exits 1 when nothing matches; that is not an error for the caller."""
    runner = FakeRunner({lsof_command(631): CommandExecutionError(["lsof"], returncode=1)})
    assert await LsofFallback().find_pid(runner, 631) is None


@pytest.mark.asyncio
async def test_lookup_raises_when_every_query_fails():
    with pytest.raises(CommandExecutionError):
        await LsofFallback().lookup(FakeRunner(), 631)


@pytest.mark.asyncio
async def test_lookup_partial_failure_is_none():
    runner = FakeRunner({lsof_command(631, protocol="UDP"): ""})
    assert await LsofFallback().lookup(runner, 631) is None


class TestLsofAddress:
    """Tests for lsof -i address formatting."""

    def test_any_host(self):
        assert lsof_address(631) == ":631"
        assert lsof_address(631, "") == ":631"

    def test_ipv4(self):
        assert lsof_address(631, "127.0.0.1") == "@127.0.0.1:631"

    def test_ipv6_is_bracketed(self):
        assert lsof_address(9003, "::1") == "@[::1]:9003"

    def test_zone_is_dropped(self):
        assert lsof_address(53, "127.0.0.53%lo") == "@127.0.0.53:53"
