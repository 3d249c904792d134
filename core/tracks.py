"""
core.tracks
Upgrade track catalogue (names, baselines, base costs).

Kept in core so balancing lives in one place, but UI can still display labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


INSTANCE_COUNT = "instance_count"
AUTO_CLICKER = "auto_clicker"
COIN_MULTIPLIER = "coin_multiplier"
SPEED_BURST = "speed_burst"


@dataclass(frozen=True)
class TrackSpec:
    key: str
    wire_key: str            # key used in persisted snapshots
    label: str
    desc: str
    base_level: int
    base_cost: int
    legacy_keys: Tuple[str, ...] = ()


DEFAULT_TRACKS: Dict[str, TrackSpec] = {
    INSTANCE_COUNT: TrackSpec(
        key=INSTANCE_COUNT,
        wire_key="instanceCount",
        label="Multi-Instance",
        desc="More numbers generated per click.",
        base_level=1,
        base_cost=25,
        legacy_keys=("multiInstance",),
    ),
    AUTO_CLICKER: TrackSpec(
        key=AUTO_CLICKER,
        wire_key="autoClicker",
        label="Auto-Clicker",
        desc="Generates numbers on its own while switched on.",
        base_level=0,
        base_cost=100,
    ),
    COIN_MULTIPLIER: TrackSpec(
        key=COIN_MULTIPLIER,
        wire_key="coinMultiplier",
        label="Coin Multiplier",
        desc="Each level adds 0.1x to every reward.",
        base_level=1,
        base_cost=50,
    ),
    SPEED_BURST: TrackSpec(
        key=SPEED_BURST,
        wire_key="speedBurst",
        label="Speed Burst",
        desc="Paid flurry of rapid single-number clicks.",
        base_level=1,
        base_cost=75,
    ),
}

TRACK_ORDER: Tuple[str, ...] = (INSTANCE_COUNT, AUTO_CLICKER, COIN_MULTIPLIER, SPEED_BURST)


def get_track_spec(track: str) -> TrackSpec:
    spec = DEFAULT_TRACKS.get(track)
    if spec is None:
        raise ValueError(f"Unknown upgrade track: {track}")
    return spec
