"""
Frigate config schema versions.

Frigate's config.yml layout moved between releases: which input carries
which role, whether birdseye/go2rtc are configured per camera, and how
recording retention is nested. Each release we target gets a profile.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .errors import UnreadableInput


@dataclass(frozen=True)
class SchemaProfile:
    version: str
    # roles per stream; a stream with no roles is not emitted
    high_roles: Tuple[str, ...]
    low_roles: Tuple[str, ...]
    birdseye: bool
    go2rtc: bool
    # "review": record.alerts / record.detections, "events": record.events
    retention_layout: str


PROFILES: Dict[str, SchemaProfile] = {
    "0.12": SchemaProfile(
        version="0.12",
        high_roles=("record",),
        low_roles=("detect",),
        birdseye=False,
        go2rtc=False,
        retention_layout="events",
    ),
    "0.14": SchemaProfile(
        version="0.14",
        high_roles=("detect", "record"),
        low_roles=(),
        birdseye=True,
        go2rtc=True,
        retention_layout="review",
    ),
}

DEFAULT_PROFILE = PROFILES["0.14"]


def get_profile(version: str) -> SchemaProfile:
    try:
        return PROFILES[version]
    except KeyError:
        raise UnreadableInput(f"unknown Frigate schema version {version!r}; known: {sorted(PROFILES)}") from None
