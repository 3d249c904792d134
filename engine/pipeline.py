"""engine.pipeline

Core transitions (headless).

Responsibilities:
- DrawRound: N draws against the target, scored via the reward model
- Apply a round to a GameState (coins, stats, capped history)
- Target changes, burst debit, upgrade purchases

Every transition is pure: (state, ...) -> (new_state, log). A rejected
transition returns the very same state object and a log with ok=False.
This layer is UI-agnostic and lock-free; engine.session serializes calls.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from core.effects import burst_cost, burst_size, effective_reward
from core.rng import DrawFn, secure_draw
from core.state import (
    GameState,
    InsufficientFunds,
    RollBatch,
    RollOutcome,
    now_ms,
    sanitize_target,
)
from core.tracks import get_track_spec

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAP = 20
DEFAULT_BURST_SPACING_MS = 50

REJECT_NO_TARGET = "no_target"
REJECT_INSUFFICIENT_FUNDS = "insufficient_funds"
REJECT_AUTO_DISABLED = "auto_disabled"


def _rejected(reason: str, **extra: Any) -> Dict[str, Any]:
    return {"ok": False, "reason": reason, **extra}


def draw_round(
    *,
    draw_range: Tuple[int, int],
    target_value: int,
    instance_count: int,
    coin_multiplier_level: int,
    target_length: int,
    is_auto: bool,
    draw: DrawFn = secure_draw,
    timestamp: Optional[int] = None,
) -> RollBatch:
    """Run `instance_count` independent draws and score them."""
    lo, hi = draw_range
    ts = now_ms() if timestamp is None else int(timestamp)
    reward_per_hit = effective_reward(target_length, coin_multiplier_level)

    rolls: List[RollOutcome] = []
    for _ in range(instance_count):
        number = draw(lo, hi)
        is_match = number == target_value
        rolls.append(
            RollOutcome(
                number=int(number),
                is_match=is_match,
                reward=reward_per_hit if is_match else 0,
                timestamp=ts,
            )
        )

    return RollBatch(
        id=uuid.uuid4().hex,
        rolls=rolls,
        total_coins=sum(r.reward for r in rolls),
        hits=sum(1 for r in rolls if r.is_match),
        instance_count_at_time=int(instance_count),
        is_auto=bool(is_auto),
        timestamp=ts,
    )


def push_history(history: List[RollBatch], batch: RollBatch, cap: int = DEFAULT_HISTORY_CAP) -> List[RollBatch]:
    """Most-recent-first; the oldest entries fall off past `cap`."""
    return [batch, *history][:cap]


def set_target(state: GameState, raw: Any) -> Tuple[GameState, Dict[str, Any]]:
    """Replace the target with the digits of `raw`. Coins/upgrades/history/stats are kept."""
    target = sanitize_target(raw)
    new_state = state if target == state.target else replace(state, target=target)
    lo, hi = new_state.draw_range
    return new_state, {"ok": True, "target": target, "range": [lo, hi]}


def apply_roll(
    state: GameState,
    *,
    is_auto: bool,
    draw: DrawFn = secure_draw,
    history_cap: int = DEFAULT_HISTORY_CAP,
) -> Tuple[GameState, Dict[str, Any]]:
    """One click's worth of draws, credited and recorded in a single step."""
    if not state.has_target:
        return state, _rejected(REJECT_NO_TARGET)

    batch = draw_round(
        draw_range=state.draw_range,
        target_value=int(state.target_value or 0),
        instance_count=state.upgrades.instance_count.level,
        coin_multiplier_level=state.upgrades.coin_multiplier.level,
        target_length=state.target_length,
        is_auto=is_auto,
        draw=draw,
    )

    s = state.stats
    stats = replace(
        s,
        manual_clicks=s.manual_clicks + (0 if is_auto else 1),
        auto_clicks=s.auto_clicks + (1 if is_auto else 0),
        total_coins_earned=s.total_coins_earned + batch.total_coins,
        total_hits=s.total_hits + batch.hits,
        total_numbers_generated=s.total_numbers_generated + batch.instance_count_at_time,
    )

    new_state = replace(
        state,
        coins=state.coins + batch.total_coins,
        history=push_history(list(state.history), batch, history_cap),
        stats=stats,
    )
    logger.debug("roll auto=%s draws=%d hits=%d coins=%d", is_auto, len(batch.rolls), batch.hits, batch.total_coins)

    log: Dict[str, Any] = {
        "ok": True,
        "kind": "auto" if is_auto else "manual",
        "batch": batch.to_dict(),
        "coins_before": int(state.coins),
        "coins_after": int(new_state.coins),
    }
    return new_state, log


def manual_roll(state: GameState, **kwargs: Any) -> Tuple[GameState, Dict[str, Any]]:
    return apply_roll(state, is_auto=False, **kwargs)


def auto_roll(state: GameState, **kwargs: Any) -> Tuple[GameState, Dict[str, Any]]:
    return apply_roll(state, is_auto=True, **kwargs)


def begin_burst(state: GameState, *, spacing_ms: int = DEFAULT_BURST_SPACING_MS) -> Tuple[GameState, Dict[str, Any]]:
    """Pay for a burst up front.

    The draws themselves are not performed here: the log lists the offsets at
    which the caller must run manual rolls. Each of those rolls reads whatever
    target and upgrades are current when it fires.
    """
    if not state.has_target:
        return state, _rejected(REJECT_NO_TARGET)

    cost = burst_cost(state.target_length)
    if state.coins < cost:
        return state, _rejected(REJECT_INSUFFICIENT_FUNDS, cost=cost, coins=int(state.coins))

    size = burst_size(state.upgrades.speed_burst.level)
    new_state = replace(state, coins=state.coins - cost)
    logger.info("speed burst: paid %d coins for %d draws", cost, size)

    return new_state, {
        "ok": True,
        "cost": cost,
        "burst_size": size,
        "offsets_ms": [i * spacing_ms for i in range(size)],
    }


def purchase_upgrade(state: GameState, track: str) -> Tuple[GameState, Dict[str, Any]]:
    """Buy one level of `track`. Unknown tracks raise ValueError."""
    spec = get_track_spec(track)
    before = state.upgrades.get(track)
    try:
        upgrades = state.upgrades.purchase(track, state.coins)
    except InsufficientFunds as e:
        return state, _rejected(REJECT_INSUFFICIENT_FUNDS, track=track, cost=e.cost, coins=e.coins)

    new_state = replace(
        state,
        coins=state.coins - before.cost,
        upgrades=upgrades,
        stats=replace(state.stats, upgrades_purchased=state.stats.upgrades_purchased + 1),
    )
    after = upgrades.get(track)
    logger.info("upgrade %s -> level %d (paid %d, next %d)", spec.label, after.level, before.cost, after.cost)

    return new_state, {
        "ok": True,
        "track": track,
        "paid": int(before.cost),
        "level": int(after.level),
        "next_cost": int(after.cost),
    }
