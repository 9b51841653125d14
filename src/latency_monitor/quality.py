from __future__ import annotations

import enum
from typing import List, Tuple

from .ping import Outcome

# Latency classification thresholds (ms), lower bound inclusive for each band
GOOD_BELOW_MS = 50
FAIR_BELOW_MS = 150
POOR_BELOW_MS = 500


class Tier(enum.Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    TIMEOUT = "timeout"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Tier.GOOD: f"Good (<{GOOD_BELOW_MS}ms)",
    Tier.FAIR: f"Fair ({GOOD_BELOW_MS}-{FAIR_BELOW_MS}ms)",
    Tier.POOR: f"Poor ({FAIR_BELOW_MS}-{POOR_BELOW_MS}ms)",
    Tier.TIMEOUT: f"Timeout (>={POOR_BELOW_MS}ms)",
}


def classify(outcome: Outcome) -> Tier:
    """Map a probe outcome to its quality tier."""
    if outcome.latency_ms is None:
        return Tier.TIMEOUT
    if outcome.latency_ms < GOOD_BELOW_MS:
        return Tier.GOOD
    if outcome.latency_ms < FAIR_BELOW_MS:
        return Tier.FAIR
    if outcome.latency_ms < POOR_BELOW_MS:
        return Tier.POOR
    return Tier.TIMEOUT


def legend() -> List[Tuple[Tier, str]]:
    return [(tier, tier.label) for tier in Tier]
