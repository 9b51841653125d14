from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import List, Optional

from rich.console import Console
from rich.live import Live

from . import config
from .config import ConfigurationError, MonitorConfig
from .endpoints import build_registry
from .frame import Frame, Renderer
from .history import HistoryStore
from .keys import QuitKeys
from .logs import configure_logging
from .ping import MeasurementSource, probe
from .sampler import start_samplers
from .ui import build_view, format_duration

console = Console()
logger = logging.getLogger(__name__)


async def ui_loop(
    renderer: Renderer,
    stop_event: asyncio.Event,
    refresh_interval: float = config.UI_REFRESH_INTERVAL,
    live_console: Optional[Console] = None,
):
    """Redraws the dashboard every ``refresh_interval`` until stopped."""
    with Live(
        build_view(renderer.build()),
        console=live_console or console,
        auto_refresh=False,
        screen=False,
    ) as live:
        while not stop_event.is_set():
            live.update(build_view(renderer.build()), refresh=True)
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=refresh_interval)


def install_signal_handlers(
    loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event
):
    def _signal_handler():
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:  # Windows
            signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(_signal_handler))


async def shutdown(tasks: List["asyncio.Task[None]"]):
    # In-flight probes are abandoned, nothing is persisted.
    for t in tasks:
        t.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def main_async(
    cfg: MonitorConfig,
    source: MeasurementSource = probe,
    stop_event: Optional[asyncio.Event] = None,
    live_console: Optional[Console] = None,
) -> Frame:
    """Run samplers and the dashboard until stopped; return the final frame."""
    cfg.validate()
    stop_event = stop_event or asyncio.Event()
    store = HistoryStore(cfg.endpoints, cfg.window)
    renderer = Renderer(
        cfg.endpoints,
        store,
        width=cfg.graph_width,
        window=cfg.window,
        stale_after=cfg.stale_after,
    )

    loop = asyncio.get_running_loop()
    install_signal_handlers(loop, stop_event)
    capacity = store.history(cfg.endpoints[0].address).capacity(cfg.interval)
    logger.info(
        "monitoring %d endpoints every %.1fs, keeping %s (about %d samples each)",
        len(cfg.endpoints),
        cfg.interval,
        format_duration(cfg.window),
        capacity,
    )

    tasks = start_samplers(store, source, cfg, stop_event)
    with QuitKeys(loop, stop_event):
        tasks.append(
            asyncio.create_task(
                ui_loop(renderer, stop_event, cfg.refresh_interval, live_console),
                name="ui",
            )
        )
        try:
            await stop_event.wait()
        finally:
            await shutdown(tasks)

    logger.info("monitoring stopped")
    return renderer.build()


def print_summary(frame: Frame):
    console.print("\nSummary:")
    for record in frame.records:
        if record.tier is None:
            console.print(f"{record.name} ({record.address}): no data")
            continue
        loss = "-" if record.loss_pct is None else f"{record.loss_pct:.1f}%"
        console.print(
            f"{record.name} ({record.address}): last={record.tier.value} "
            f"loss={loss} over {format_duration(frame.window)}"
        )


def parse_args(argv: Optional[List[str]] = None) -> MonitorConfig:
    parser = argparse.ArgumentParser(
        prog="latency-monitor",
        description="Live terminal dashboard of round-trip latency to a set of endpoints.",
    )
    parser.add_argument(
        "--endpoint",
        action="append",
        metavar="NAME=ADDRESS",
        help="endpoint to monitor (repeatable, replaces the default list)",
    )
    parser.add_argument("--interval", type=float, default=config.SAMPLE_INTERVAL_SECONDS)
    parser.add_argument("--window", type=float, default=config.HISTORY_WINDOW_SECONDS)
    parser.add_argument("--width", type=int, default=config.GRAPH_WIDTH)
    parser.add_argument("--timeout", type=float, default=config.PROBE_TIMEOUT_SECONDS)
    parser.add_argument("--refresh", type=float, default=config.UI_REFRESH_INTERVAL)
    parser.add_argument("--stale-after", type=float, default=config.STALE_AFTER_SECONDS)
    parser.add_argument("--log-file", default=config.LOG_FILE)
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    args = parser.parse_args(argv)

    cfg = MonitorConfig(
        interval=args.interval,
        window=args.window,
        graph_width=args.width,
        probe_timeout=args.timeout,
        refresh_interval=args.refresh,
        stale_after=args.stale_after,
        log_file=args.log_file or None,
        log_level=args.log_level,
    )
    if args.endpoint:
        cfg.endpoints = build_registry(args.endpoint)
    return cfg


def main(argv: Optional[List[str]] = None) -> int:
    cfg = parse_args(argv)
    try:
        cfg.validate()
    except ConfigurationError as exc:
        console.print(f"[red]configuration error:[/red] {exc}")
        return 2

    configure_logging(cfg.log_file, cfg.log_level)
    try:
        frame = asyncio.run(main_async(cfg))
    except KeyboardInterrupt:
        return 0
    print_summary(frame)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
