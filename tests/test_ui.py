import io

from rich.console import Console

from latency_monitor.endpoints import Endpoint
from latency_monitor.frame import Renderer
from latency_monitor.history import HistoryStore, Sample
from latency_monitor.ping import Outcome
from latency_monitor.quality import Tier
from latency_monitor.ui import build_view, format_duration, render_graph

ENDPOINTS = [Endpoint("Google DNS", "8.8.8.8"), Endpoint("GitHub", "github.com")]


def render_text(renderable, width=160):
    console = Console(file=io.StringIO(), width=width, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


def test_format_duration():
    assert format_duration(5) == "5s"
    assert format_duration(600) == "10.0m"
    assert format_duration(7200) == "2.0h"
    assert format_duration(2 * 86400) == "2.0d"


def test_render_graph_glyphs():
    graph = (None, Tier.GOOD, Tier.FAIR, Tier.POOR, Tier.TIMEOUT)
    text = render_graph(graph)
    assert text.plain == "·●◐◑○"


def test_view_shows_every_endpoint_state():
    store = HistoryStore(ENDPOINTS, 600)
    store.history("8.8.8.8").append(Sample(90.0, Outcome.failed()))
    frame = Renderer(ENDPOINTS, store, width=20, window=600).build(now=100.0)
    output = render_text(build_view(frame))
    assert "Google DNS" in output
    assert "TIMEOUT" in output
    assert "10s ago" in output
    assert "GitHub" in output
    assert "no data" in output
    assert "Legend:" in output
    assert "Last 10.0m" in output


def test_view_shows_latency():
    store = HistoryStore(ENDPOINTS, 600)
    store.history("github.com").append(Sample(99.0, Outcome.success(42.4)))
    frame = Renderer(ENDPOINTS, store, width=20, window=600).build(now=100.0)
    output = render_text(build_view(frame))
    assert "42ms" in output
