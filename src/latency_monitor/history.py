from __future__ import annotations

import math
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, Iterator, Optional, Tuple

from .endpoints import Endpoint
from .ping import Outcome


@dataclass(frozen=True)
class Sample:
    timestamp: float  # monotonic seconds at probe completion
    outcome: Outcome


@dataclass(frozen=True)
class HistorySnapshot:
    samples: Tuple[Sample, ...]  # in-window only, oldest first
    latest: Optional[Sample]  # newest ever appended, even if outside the window


class History:
    """Time-windowed samples for one endpoint, oldest first.

    One sampler appends, the renderer reads. Every operation holds the lock
    only for the single structural change or copy it performs.
    """

    def __init__(self, window: float):
        if window <= 0:
            raise ValueError("window must be positive")
        self._window = window
        self._samples: Deque[Sample] = deque()
        self._latest: Optional[Sample] = None
        self._lock = threading.Lock()

    @property
    def window(self) -> float:
        return self._window

    def capacity(self, interval: float) -> int:
        """Nominal number of samples the window holds at ``interval``."""
        return math.ceil(self._window / interval)

    def append(self, sample: Sample):
        with self._lock:
            self._samples.append(sample)
            self._latest = sample
            self._prune_locked(sample.timestamp)

    def prune(self, now: float) -> int:
        with self._lock:
            return self._prune_locked(now)

    def _prune_locked(self, now: float) -> int:
        cutoff = now - self._window
        removed = 0
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()
            removed += 1
        return removed

    def snapshot(self, now: float) -> Tuple[Sample, ...]:
        return self.view(now).samples

    def view(self, now: float) -> HistorySnapshot:
        """In-window samples and the latest sample, read under one lock."""
        cutoff = now - self._window
        with self._lock:
            samples = tuple(self._samples)
            latest = self._latest
        # Pruning is lazy; skip anything that fell out of the window since.
        start = 0
        while start < len(samples) and samples[start].timestamp < cutoff:
            start += 1
        return HistorySnapshot(samples[start:], latest)

    def latest(self) -> Optional[Sample]:
        with self._lock:
            return self._latest

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)


class HistoryStore:
    """One History per endpoint address, built once at startup."""

    def __init__(self, endpoints: Iterable[Endpoint], window: float):
        self._histories: Dict[str, History] = {}
        for endpoint in endpoints:
            self._histories[endpoint.address] = History(window)

    def history(self, address: str) -> History:
        return self._histories[address]

    def __iter__(self) -> Iterator[str]:
        return iter(self._histories)

    def __len__(self) -> int:
        return len(self._histories)

    def snapshot(self, now: float) -> Dict[str, HistorySnapshot]:
        return {
            address: history.view(now)
            for address, history in self._histories.items()
        }
