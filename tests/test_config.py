import logging
import logging.handlers

import pytest

from latency_monitor import config
from latency_monitor.config import ConfigurationError, MonitorConfig
from latency_monitor.endpoints import DEFAULT_ENDPOINTS, Endpoint, parse_endpoint
from latency_monitor.logs import configure_logging
from latency_monitor.main import main, parse_args


def test_defaults_are_valid():
    cfg = MonitorConfig().validate()
    assert cfg.endpoints == list(DEFAULT_ENDPOINTS)
    assert cfg.interval == 1.0
    assert cfg.window == 600.0
    assert cfg.graph_width == 60
    assert cfg.probe_timeout * 1000 > config.TIMEOUT_TIER_MS


@pytest.mark.parametrize(
    "overrides",
    [
        {"endpoints": []},
        {"endpoints": [Endpoint("a", "1.1.1.1"), Endpoint("b", "1.1.1.1")]},
        {"endpoints": [Endpoint("", "1.1.1.1")]},
        {"endpoints": [Endpoint("a", " ")]},
        {"interval": 0},
        {"interval": -1.0},
        {"window": 0},
        {"graph_width": 0},
        {"probe_timeout": 0.5},
        {"refresh_interval": 0},
        {"stale_after": -5},
    ],
)
def test_invalid_configuration(overrides):
    with pytest.raises(ConfigurationError):
        MonitorConfig(**overrides).validate()


def test_parse_endpoint():
    assert parse_endpoint("Home=192.168.1.1") == Endpoint("Home", "192.168.1.1")
    assert parse_endpoint("example.com") == Endpoint("example.com", "example.com")
    assert parse_endpoint(" Gw = 10.0.0.1 ") == Endpoint("Gw", "10.0.0.1")


def test_parse_args():
    cfg = parse_args(
        [
            "--endpoint",
            "Gateway=192.168.1.1",
            "--endpoint",
            "1.1.1.1",
            "--interval",
            "2",
            "--width",
            "40",
            "--log-file",
            "",
        ]
    )
    assert cfg.endpoints == [
        Endpoint("Gateway", "192.168.1.1"),
        Endpoint("1.1.1.1", "1.1.1.1"),
    ]
    assert cfg.interval == 2.0
    assert cfg.graph_width == 40
    assert cfg.window == config.HISTORY_WINDOW_SECONDS
    assert cfg.log_file is None


def test_main_rejects_bad_configuration():
    assert main(["--interval", "0"]) == 2
    assert main(["--endpoint", "a=1.1.1.1", "--endpoint", "b=1.1.1.1"]) == 2


def test_configure_logging_writes_rotating_file(tmp_path):
    path = tmp_path / "monitor.log"
    try:
        logger = configure_logging(str(path), "debug")
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0], logging.handlers.RotatingFileHandler)
        logging.getLogger("latency_monitor.sampler").warning("X timing out")
        logger.handlers[0].flush()
        assert "WARNING latency_monitor.sampler | X timing out" in path.read_text()
    finally:
        configure_logging(None)
    assert isinstance(logging.getLogger("latency_monitor").handlers[0], logging.NullHandler)
