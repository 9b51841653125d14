from __future__ import annotations

from typing import Optional

from rich import box
from rich.table import Table
from rich.text import Text

from .frame import EndpointRecord, Frame, Graph
from .quality import Tier, legend

TIER_STYLES = {
    Tier.GOOD: ("●", "green"),
    Tier.FAIR: ("◐", "yellow"),
    Tier.POOR: ("◑", "red"),
    Tier.TIMEOUT: ("○", "dark_red"),
}
NO_DATA = ("·", "grey37")


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    elif seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    else:
        return f"{seconds / 86400:.1f}d"


def glyph(tier: Optional[Tier]) -> Text:
    symbol, style = TIER_STYLES.get(tier, NO_DATA)
    return Text(symbol, style=style)


def render_graph(graph: Graph) -> Text:
    text = Text()
    for tier in graph:
        text.append_text(glyph(tier))
    return text


def latency_cell(record: EndpointRecord) -> Text:
    if record.tier is None:
        return Text("no data", style=NO_DATA[1])
    if record.latency_ms is None:
        return Text("TIMEOUT", style=TIER_STYLES[Tier.TIMEOUT][1])
    return Text(f"{record.latency_ms:.0f}ms", style=TIER_STYLES[record.tier][1])


def age_cell(record: EndpointRecord) -> Text:
    if record.age is None:
        return Text("-")
    if record.stale:
        return Text(f"{format_duration(record.age)} ago", style="bold grey50")
    return Text(format_duration(record.age), style="grey50")


def legend_text() -> Text:
    text = Text("Legend: ")
    for tier, label in legend():
        text.append_text(glyph(tier))
        text.append(f" {label}  ")
    text.append_text(Text(NO_DATA[0], style=NO_DATA[1]))
    text.append(" No data")
    return text


def build_view(frame: Frame) -> Table:
    table = Table(
        title="Latency Monitor",
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
        caption_justify="left",
    )
    table.add_column("", no_wrap=True)
    table.add_column("Endpoint", style="bold", no_wrap=True)
    table.add_column("Latency", justify="right", no_wrap=True)
    table.add_column("Age", justify="right", no_wrap=True)
    table.add_column("Loss %", justify="right", no_wrap=True)
    table.add_column(f"Last {format_duration(frame.window)}", no_wrap=True)

    for record in frame.records:
        loss = "-" if record.loss_pct is None else f"{record.loss_pct:.0f}"
        table.add_row(
            glyph(record.tier),
            record.name,
            latency_cell(record),
            age_cell(record),
            loss,
            render_graph(record.graph),
        )

    caption = legend_text()
    caption.append("\nPress 'q' to quit")
    table.caption = caption
    return table
