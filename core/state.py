"""
core.state
Core domain data models (UI/storage independent).
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from .effects import next_cost
from .tracks import AUTO_CLICKER, COIN_MULTIPLIER, DEFAULT_TRACKS, INSTANCE_COUNT, SPEED_BURST, TRACK_ORDER, get_track_spec


_NON_DIGITS_RE = re.compile(r"[^0-9]")

NO_RANGE: Tuple[int, int] = (0, -1)


def now_ms() -> int:
    return int(time.time() * 1000)


def sanitize_target(raw: Any) -> str:
    """Keep digits only. Anything else is dropped before it reaches state."""
    return _NON_DIGITS_RE.sub("", str(raw or ""))


def range_for_target(target: str) -> Tuple[int, int]:
    """Inclusive draw range for a target; NO_RANGE when the target is unset."""
    if not target:
        return NO_RANGE
    return 0, 10 ** len(target) - 1


class InsufficientFunds(ValueError):
    def __init__(self, track: str, cost: int, coins: int) -> None:
        super().__init__(f"{track}: need {cost} coins, have {coins}")
        self.track = track
        self.cost = cost
        self.coins = coins


@dataclass(frozen=True)
class Upgrade:
    level: int
    cost: int

    def bumped(self) -> "Upgrade":
        return Upgrade(level=self.level + 1, cost=next_cost(self.cost))

    def to_dict(self) -> Dict[str, int]:
        return {"level": int(self.level), "cost": int(self.cost)}


def baseline_upgrade(track: str) -> Upgrade:
    spec = get_track_spec(track)
    return Upgrade(level=spec.base_level, cost=spec.base_cost)


@dataclass(frozen=True)
class UpgradeLedger:
    """The four independently priced upgrade tracks."""

    instance_count: Upgrade = field(default_factory=lambda: baseline_upgrade(INSTANCE_COUNT))
    auto_clicker: Upgrade = field(default_factory=lambda: baseline_upgrade(AUTO_CLICKER))
    coin_multiplier: Upgrade = field(default_factory=lambda: baseline_upgrade(COIN_MULTIPLIER))
    speed_burst: Upgrade = field(default_factory=lambda: baseline_upgrade(SPEED_BURST))

    def get(self, track: str) -> Upgrade:
        get_track_spec(track)
        return getattr(self, track)

    def with_upgrade(self, track: str, upgrade: Upgrade) -> "UpgradeLedger":
        get_track_spec(track)
        return replace(self, **{track: upgrade})

    def purchase(self, track: str, coins: int) -> "UpgradeLedger":
        """Return the ledger with `track` bumped one level.

        Raises InsufficientFunds when `coins` does not cover the current cost.
        """
        current = self.get(track)
        if coins < current.cost:
            raise InsufficientFunds(track, current.cost, coins)
        return self.with_upgrade(track, current.bumped())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {DEFAULT_TRACKS[k].wire_key: self.get(k).to_dict() for k in TRACK_ORDER}


@dataclass(frozen=True)
class RollOutcome:
    number: int
    is_match: bool
    reward: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": int(self.number),
            "isMatch": bool(self.is_match),
            "reward": int(self.reward),
            "timestamp": int(self.timestamp),
        }


@dataclass(frozen=True)
class RollBatch:
    """All draws from one click, one auto tick, or one burst draw."""

    id: str
    rolls: List[RollOutcome]
    total_coins: int
    hits: int
    instance_count_at_time: int
    is_auto: bool = False
    timestamp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "rolls": [r.to_dict() for r in self.rolls],
            "totalCoins": int(self.total_coins),
            "hits": int(self.hits),
            "instanceCountAtTime": int(self.instance_count_at_time),
            "isAuto": bool(self.is_auto),
            "timestamp": int(self.timestamp),
        }


@dataclass(frozen=True)
class Statistics:
    """Lifetime counters. They only ever go up; start_time is fixed at first start."""

    start_time: int
    manual_clicks: int = 0
    auto_clicks: int = 0
    total_coins_earned: int = 0
    upgrades_purchased: int = 0
    total_hits: int = 0
    total_numbers_generated: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "startTime": int(self.start_time),
            "manualClicks": int(self.manual_clicks),
            "autoClicks": int(self.auto_clicks),
            "totalCoinsEarned": int(self.total_coins_earned),
            "upgradesPurchased": int(self.upgrades_purchased),
            "totalHits": int(self.total_hits),
            "totalNumbersGenerated": int(self.total_numbers_generated),
        }


@dataclass(frozen=True)
class GameState:
    """Whole game aggregate.

    Transitions in engine.pipeline never mutate a GameState; they return a new one.
    The draw range is not stored: it is re-derived from `target` on every read.
    """

    coins: int
    target: str
    upgrades: UpgradeLedger
    history: List[RollBatch]
    stats: Statistics

    @property
    def has_target(self) -> bool:
        return bool(self.target) and self.target.isdigit()

    @property
    def target_length(self) -> int:
        return len(self.target) if self.has_target else 0

    @property
    def target_value(self) -> Optional[int]:
        return int(self.target) if self.has_target else None

    @property
    def draw_range(self) -> Tuple[int, int]:
        return range_for_target(self.target if self.has_target else "")

    def to_dict(self) -> Dict[str, Any]:
        """Persisted snapshot shape."""
        return {
            "coins": int(self.coins),
            "target": str(self.target),
            "rollHistory": [b.to_dict() for b in self.history],
            "upgrades": self.upgrades.to_dict(),
            "stats": self.stats.to_dict(),
        }


def default_start_state(start_time: Optional[int] = None) -> GameState:
    """Baseline start state.

    Keep it in core so headless tests and UI share the same baseline.
    """
    return GameState(
        coins=0,
        target="",
        upgrades=UpgradeLedger(),
        history=[],
        stats=Statistics(start_time=now_ms() if start_time is None else int(start_time)),
    )
