from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from . import config
from .endpoints import Endpoint
from .history import HistorySnapshot, HistoryStore, Sample
from .quality import Tier, classify

Graph = Tuple[Optional[Tier], ...]
EMPTY = HistorySnapshot((), None)


@dataclass(frozen=True)
class EndpointRecord:
    name: str
    address: str
    tier: Optional[Tier]  # None: no samples yet
    latency_ms: Optional[float]
    age: Optional[float]
    stale: bool
    graph: Graph
    loss_pct: Optional[float]


@dataclass(frozen=True)
class Frame:
    now: float
    window: float
    records: Tuple[EndpointRecord, ...]


def is_stale(age: float, stale_after: float = config.STALE_AFTER_SECONDS) -> bool:
    return age > stale_after


def bucketize(
    samples: Sequence[Sample], now: float, window: float, width: int
) -> Graph:
    """Divide ``[now - window, now]`` into ``width`` equal buckets, oldest first.

    Each bucket takes the tier of the newest sample that falls in it; empty
    buckets are None. Samples are expected in timestamp order.
    """
    start = now - window
    bucket_width = window / width
    buckets: List[Optional[Tier]] = [None] * width
    for sample in samples:
        if sample.timestamp < start:
            continue
        index = min(int(math.floor((sample.timestamp - start) / bucket_width)), width - 1)
        buckets[index] = classify(sample.outcome)
    return tuple(buckets)


def loss_pct(samples: Sequence[Sample]) -> Optional[float]:
    if not samples:
        return None
    failures = sum(1 for s in samples if not s.outcome.ok)
    return failures / len(samples) * 100.0


def build_record(
    endpoint: Endpoint,
    history: HistorySnapshot,
    now: float,
    window: float,
    width: int,
    stale_after: float,
) -> EndpointRecord:
    """Current state comes from the latest sample, the graph from the window."""
    samples = history.samples
    graph = bucketize(samples, now, window, width)
    latest = history.latest
    if latest is None:
        return EndpointRecord(
            endpoint.name, endpoint.address, None, None, None, False, graph, None
        )
    age = max(0.0, now - latest.timestamp)
    return EndpointRecord(
        name=endpoint.name,
        address=endpoint.address,
        tier=classify(latest.outcome),
        latency_ms=latest.outcome.latency_ms,
        age=age,
        stale=is_stale(age, stale_after),
        graph=graph,
        loss_pct=loss_pct(samples),
    )


class Renderer:
    """Turns a point-in-time snapshot of the HistoryStore into a Frame."""

    def __init__(
        self,
        endpoints: Sequence[Endpoint],
        store: HistoryStore,
        width: int = config.GRAPH_WIDTH,
        window: float = config.HISTORY_WINDOW_SECONDS,
        stale_after: float = config.STALE_AFTER_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.endpoints = list(endpoints)
        self.store = store
        self.width = width
        self.window = window
        self.stale_after = stale_after
        self.clock = clock

    def build(self, now: Optional[float] = None) -> Frame:
        if now is None:
            now = self.clock()
        snapshot = self.store.snapshot(now)
        return self.compose(snapshot, now)

    def compose(
        self, snapshot: Mapping[str, HistorySnapshot], now: float
    ) -> Frame:
        records = tuple(
            build_record(
                endpoint,
                snapshot.get(endpoint.address, EMPTY),
                now,
                self.window,
                self.width,
                self.stale_after,
            )
            for endpoint in self.endpoints
        )
        return Frame(now, self.window, records)
