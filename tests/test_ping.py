import asyncio

import pytest

from latency_monitor import ping
from latency_monitor.ping import PING_RTT_RE, Outcome, probe

LINUX_REPLY = (
    "PING 1.1.1.1 (1.1.1.1) 56(84) bytes of data.\n"
    "64 bytes from 1.1.1.1: icmp_seq=1 ttl=57 time=14.3 ms\n"
)
LOSS_REPLY = "1 packets transmitted, 0 received, 100% packet loss, time 0ms\n"


class FakeProc:
    def __init__(self, returncode, output, delay=0.0):
        self.returncode = returncode
        self.output = output
        self.delay = delay
        self.killed = False
        self.reaped = False

    async def communicate(self):
        await asyncio.sleep(self.delay)
        return self.output.encode(), b""

    def kill(self):
        self.killed = True

    async def wait(self):
        self.reaped = True
        return -9


def fake_exec(proc, argv_seen=None):
    async def create_subprocess_exec(*argv, **kwargs):
        if argv_seen is not None:
            argv_seen.extend(argv)
        return proc

    return create_subprocess_exec


def test_rtt_regex():
    assert PING_RTT_RE.search(LINUX_REPLY).group(1) == "14.3"
    assert PING_RTT_RE.search("time<1ms").group(1) == "1"


@pytest.mark.asyncio
async def test_probe_parses_reply(monkeypatch):
    argv = []
    monkeypatch.setattr(
        ping.asyncio, "create_subprocess_exec", fake_exec(FakeProc(0, LINUX_REPLY), argv)
    )
    outcome = await probe("1.1.1.1", 1.5)
    assert outcome == Outcome.success(14.3)
    assert argv == ["ping", "-n", "-c", "1", "-w", "2", "1.1.1.1"]


@pytest.mark.asyncio
async def test_probe_nonzero_exit_is_failed(monkeypatch):
    monkeypatch.setattr(
        ping.asyncio, "create_subprocess_exec", fake_exec(FakeProc(1, LOSS_REPLY))
    )
    assert await probe("192.0.2.1", 1) == Outcome.failed()


@pytest.mark.asyncio
async def test_probe_without_rtt_uses_elapsed_time(monkeypatch):
    monkeypatch.setattr(
        ping.asyncio, "create_subprocess_exec", fake_exec(FakeProc(0, "reply\n"))
    )
    outcome = await probe("1.1.1.1", 1)
    assert outcome.ok
    assert outcome.latency_ms > 0


@pytest.mark.asyncio
async def test_ping_timeout_kills_process(monkeypatch):
    proc = FakeProc(0, LINUX_REPLY, delay=5.0)
    monkeypatch.setattr(ping.asyncio, "create_subprocess_exec", fake_exec(proc))
    assert await probe("1.1.1.1", 0.05) == Outcome.failed()
    assert proc.killed
    assert proc.reaped


@pytest.mark.asyncio
async def test_cancelled_ping_kills_process(monkeypatch):
    proc = FakeProc(0, LINUX_REPLY, delay=5.0)
    monkeypatch.setattr(ping.asyncio, "create_subprocess_exec", fake_exec(proc))
    task = asyncio.create_task(probe("1.1.1.1", 2.0))
    await asyncio.sleep(0.05)
    assert not proc.killed
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert proc.killed
    assert proc.reaped
