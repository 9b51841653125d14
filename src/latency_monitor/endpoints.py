from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple


@dataclass(frozen=True)
class Endpoint:
    name: str
    address: str


# Predefined endpoint list (display name, hostname or IP)
DEFAULT_ENDPOINTS: Tuple[Endpoint, ...] = (
    Endpoint("Google DNS", "8.8.8.8"),
    Endpoint("Cloudflare DNS", "1.1.1.1"),
    Endpoint("Google", "google.com"),
    Endpoint("GitHub", "github.com"),
    Endpoint("Stack Overflow", "stackoverflow.com"),
)


def parse_endpoint(value: str) -> Endpoint:
    """Parse ``NAME=ADDRESS`` (or a bare address, used as its own name)."""
    if "=" in value:
        name, address = value.split("=", 1)
    else:
        name = address = value
    return Endpoint(name.strip(), address.strip())


def build_registry(values: Iterable[str]) -> List[Endpoint]:
    return [parse_endpoint(v) for v in values]
