from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional

from . import config
from .config import MonitorConfig
from .endpoints import Endpoint
from .history import History, HistoryStore, Sample
from .ping import MeasurementSource, Outcome
from .quality import Tier, classify

logger = logging.getLogger(__name__)


class Sampler:
    """Probes one endpoint on a fixed interval and appends to its History."""

    def __init__(
        self,
        endpoint: Endpoint,
        history: History,
        source: MeasurementSource,
        interval: float = config.SAMPLE_INTERVAL_SECONDS,
        timeout: float = config.PROBE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.endpoint = endpoint
        self.history = history
        self.source = source
        self.interval = interval
        self.timeout = timeout
        self.clock = clock
        self._last_tier: Optional[Tier] = None
        self._source_error_logged = False

    async def sample_once(self) -> Sample:
        outcome = await self._measure()
        sample = Sample(self.clock(), outcome)
        self.history.append(sample)
        self._note_tier(classify(outcome))
        return sample

    async def _measure(self) -> Outcome:
        try:
            return await asyncio.wait_for(
                self.source(self.endpoint.address, self.timeout),
                timeout=self.timeout + config.PROBE_GRACE_SECONDS,
            )
        except asyncio.TimeoutError:
            return Outcome.failed()
        except Exception:
            # Environment failures (ping missing, permission denied) repeat on
            # every probe; report the first one only.
            if not self._source_error_logged:
                self._source_error_logged = True
                logger.warning(
                    "probe of %s (%s) failed to run",
                    self.endpoint.name,
                    self.endpoint.address,
                    exc_info=True,
                )
            return Outcome.failed()

    def _note_tier(self, tier: Tier):
        previous, self._last_tier = self._last_tier, tier
        if previous is tier:
            return
        if tier is Tier.TIMEOUT:
            logger.warning("%s (%s) timing out", self.endpoint.name, self.endpoint.address)
        elif previous is not None:
            logger.info(
                "%s (%s) %s -> %s",
                self.endpoint.name,
                self.endpoint.address,
                previous.value,
                tier.value,
            )

    async def run(self, stop_event: asyncio.Event):
        """Sample until ``stop_event`` is set; the interval counts from each iteration start."""
        loop = asyncio.get_running_loop()
        while not stop_event.is_set():
            start = loop.time()
            await self.sample_once()
            remaining = self.interval - (loop.time() - start)
            if remaining <= 0:
                await asyncio.sleep(0)
                continue
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                pass


def start_samplers(
    store: HistoryStore,
    source: MeasurementSource,
    cfg: MonitorConfig,
    stop_event: asyncio.Event,
) -> List["asyncio.Task[None]"]:
    tasks = []
    for endpoint in cfg.endpoints:
        sampler = Sampler(
            endpoint,
            store.history(endpoint.address),
            source,
            interval=cfg.interval,
            timeout=cfg.probe_timeout,
        )
        tasks.append(
            asyncio.create_task(
                sampler.run(stop_event), name=f"sampler:{endpoint.address}"
            )
        )
    return tasks
