from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .endpoints import DEFAULT_ENDPOINTS, Endpoint

# Sampling settings
SAMPLE_INTERVAL_SECONDS = 1.0  # how often each endpoint is probed
PROBE_TIMEOUT_SECONDS = 2.0  # must stay above the 500ms Timeout tier
PROBE_GRACE_SECONDS = 0.5  # slack on top of the probe timeout for process overhead

# History retention
HISTORY_WINDOW_SECONDS = 10 * 60.0

# Rendering
GRAPH_WIDTH = 60
UI_REFRESH_INTERVAL = 0.5
STALE_AFTER_SECONDS = 5.0

# Logging
LOG_FILE = "latency_monitor.log"
LOG_LEVEL = "INFO"
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3

# Classification threshold the probe timeout has to exceed
TIMEOUT_TIER_MS = 500


class ConfigurationError(ValueError):
    """Invalid monitor settings, detected before any sampler starts."""


@dataclass
class MonitorConfig:
    endpoints: List[Endpoint] = field(
        default_factory=lambda: list(DEFAULT_ENDPOINTS)
    )
    interval: float = SAMPLE_INTERVAL_SECONDS
    window: float = HISTORY_WINDOW_SECONDS
    graph_width: int = GRAPH_WIDTH
    probe_timeout: float = PROBE_TIMEOUT_SECONDS
    refresh_interval: float = UI_REFRESH_INTERVAL
    stale_after: float = STALE_AFTER_SECONDS
    log_file: Optional[str] = LOG_FILE
    log_level: str = LOG_LEVEL

    def validate(self) -> "MonitorConfig":
        """Raise ConfigurationError on the first invalid value, else return self."""
        if not self.endpoints:
            raise ConfigurationError("at least one endpoint is required")

        seen = set()
        for endpoint in self.endpoints:
            if not endpoint.name.strip():
                raise ConfigurationError(
                    f"endpoint {endpoint.address!r} has an empty name"
                )
            if not endpoint.address.strip():
                raise ConfigurationError(
                    f"endpoint {endpoint.name!r} has an empty address"
                )
            if endpoint.address in seen:
                raise ConfigurationError(
                    f"duplicate endpoint address {endpoint.address!r}"
                )
            seen.add(endpoint.address)

        for name in (
            "interval",
            "window",
            "probe_timeout",
            "refresh_interval",
            "stale_after",
        ):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if self.graph_width <= 0:
            raise ConfigurationError("graph_width must be positive")
        if self.probe_timeout * 1000 <= TIMEOUT_TIER_MS:
            raise ConfigurationError(
                f"probe_timeout must exceed the {TIMEOUT_TIER_MS}ms timeout tier"
            )
        return self
