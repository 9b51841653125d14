from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Optional, Protocol

PING_RTT_RE = re.compile(r"time[=<]([0-9]*\.?[0-9]+) ?ms")

# Smallest latency reported when ping rounds a reply down to zero
MIN_LATENCY_MS = 0.001

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """Result of one probe: a latency in milliseconds, or ``None`` on failure.

    Timeouts, DNS failures, unreachable hosts and a broken ``ping`` binary all
    collapse into the same failed value.
    """

    latency_ms: Optional[float] = None

    @classmethod
    def success(cls, latency_ms: float) -> "Outcome":
        if latency_ms <= 0:
            raise ValueError(f"latency must be positive, got {latency_ms!r}")
        return cls(latency_ms)

    @classmethod
    def failed(cls) -> "Outcome":
        return cls(None)

    @property
    def ok(self) -> bool:
        return self.latency_ms is not None

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        if self.ok:
            return f"Outcome.success({self.latency_ms})"
        return "Outcome.failed()"


class MeasurementSource(Protocol):
    def __call__(self, address: str, timeout: float) -> Awaitable[Outcome]: ...


async def probe(address: str, timeout: float) -> Outcome:
    """Ping an address once using the system 'ping' command (Linux-focused).

    Uses: ping -n -c 1 -w {timeout} address
    Returns the RTT if a reply arrived, otherwise a failed outcome. OSError
    from spawning ping (binary missing, permission denied) is left to the
    caller.
    """
    # -c 1 : send one packet
    # -n   : numeric output (avoid DNS reverse lookups slowing us)
    # -w timeout : total deadline seconds, whole seconds only
    started = time.monotonic()
    proc = await asyncio.create_subprocess_exec(
        "ping",
        "-n",
        "-c",
        "1",
        "-w",
        str(max(1, math.ceil(timeout))),
        address,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        out_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(proc)
        logger.debug("ping %s timed out after %.1fs", address, timeout)
        return Outcome.failed()
    except asyncio.CancelledError:
        await _kill(proc)
        raise
    elapsed_ms = (time.monotonic() - started) * 1000.0

    if proc.returncode != 0:
        logger.debug("ping %s exited with %s", address, proc.returncode)
        return Outcome.failed()

    stdout = out_bytes[0].decode(errors="replace")
    match = PING_RTT_RE.search(stdout)
    rtt_ms = float(match.group(1)) if match else elapsed_ms
    return Outcome.success(max(rtt_ms, MIN_LATENCY_MS))


async def _kill(proc: asyncio.subprocess.Process) -> None:
    """Kill the ping child and reap it so no zombie is left behind."""
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()
