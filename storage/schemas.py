"""storage.schemas

Snapshot contract: the single record written after every transition.

    { coins, target, rollHistory[<=20], upgrades{instanceCount, autoClicker,
      coinMultiplier, speedBurst}, stats }

Loading is forgiving: each bad field falls back to its default, bad history
entries are skipped, and a stored target is re-sanitized. Older saves are
upgraded on the fly:
- upgrades.multiInstance (legacy) -> instanceCount
- batch.instances (legacy) -> instanceCountAtTime
- numeric batch ids -> strings
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from core.state import (
    GameState,
    RollBatch,
    RollOutcome,
    Statistics,
    Upgrade,
    UpgradeLedger,
    baseline_upgrade,
    now_ms,
    sanitize_target,
)
from core.tracks import DEFAULT_TRACKS, TRACK_ORDER

SNAPSHOT_KEYS = ("coins", "target", "rollHistory", "upgrades", "stats")

_STAT_FIELDS = {
    "manualClicks": "manual_clicks",
    "autoClicks": "auto_clicks",
    "totalCoinsEarned": "total_coins_earned",
    "upgradesPurchased": "upgrades_purchased",
    "totalHits": "total_hits",
    "totalNumbersGenerated": "total_numbers_generated",
}


def _as_int(x: Any, default: int = 0) -> int:
    if isinstance(x, (bool, int)):
        return int(x)
    try:
        return int(x)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(x))
    except (TypeError, ValueError, OverflowError):
        return int(default)


def _non_negative(x: Any, default: int = 0) -> int:
    return max(0, _as_int(x, default))


def _as_mapping(x: Any) -> Mapping[str, Any]:
    return x if isinstance(x, Mapping) else {}


def normalize_upgrade(obj: Any, *, track: str) -> Upgrade:
    base = baseline_upgrade(track)
    d = _as_mapping(obj)
    if not d:
        return base
    return Upgrade(
        level=max(base.level, _as_int(d.get("level"), base.level)),
        cost=_non_negative(d.get("cost"), base.cost),
    )


def ledger_from_snapshot(obj: Any) -> UpgradeLedger:
    d = _as_mapping(obj)
    fields: Dict[str, Upgrade] = {}
    for track in TRACK_ORDER:
        spec = DEFAULT_TRACKS[track]
        raw = d.get(spec.wire_key)
        if raw is None:
            raw = next((d[k] for k in spec.legacy_keys if k in d), None)
        fields[track] = normalize_upgrade(raw, track=track)
    return UpgradeLedger(**fields)


def outcome_from_snapshot(obj: Any, *, default_ts: int) -> Optional[RollOutcome]:
    d = _as_mapping(obj)
    if "number" not in d:
        return None
    is_match = bool(d.get("isMatch", False))
    return RollOutcome(
        number=_non_negative(d.get("number")),
        is_match=is_match,
        reward=_non_negative(d.get("reward")) if is_match else 0,
        timestamp=_as_int(d.get("timestamp"), default_ts),
    )


def batch_from_snapshot(obj: Any) -> Optional[RollBatch]:
    d = _as_mapping(obj)
    raw_rolls = d.get("rolls")
    if not isinstance(raw_rolls, list):
        return None

    raw_id = d.get("id")
    ts = _as_int(d.get("timestamp"), _as_int(raw_id, 0))
    rolls: List[RollOutcome] = []
    for item in raw_rolls:
        r = outcome_from_snapshot(item, default_ts=ts)
        if r is not None:
            rolls.append(r)

    count = d.get("instanceCountAtTime", d.get("instances"))
    return RollBatch(
        id=str(raw_id if raw_id is not None else ts),
        rolls=rolls,
        total_coins=sum(r.reward for r in rolls),
        hits=sum(1 for r in rolls if r.is_match),
        instance_count_at_time=_non_negative(count, len(rolls)),
        is_auto=bool(d.get("isAuto", False)),
        timestamp=ts,
    )


def history_from_snapshot(obj: Any, *, cap: int = 20) -> List[RollBatch]:
    if not isinstance(obj, list):
        return []
    out: List[RollBatch] = []
    for item in obj:
        b = batch_from_snapshot(item)
        if b is not None:
            out.append(b)
    return out[:cap]


def stats_from_snapshot(obj: Any, *, start_time: int) -> Statistics:
    d = _as_mapping(obj)
    counters = {attr: _non_negative(d.get(key)) for key, attr in _STAT_FIELDS.items()}
    st = _as_int(d.get("startTime"), 0)
    return Statistics(start_time=st if st > 0 else int(start_time), **counters)


def state_from_snapshot(data: Mapping[str, Any], *, history_cap: int = 20, start_time: Optional[int] = None) -> GameState:
    """Build a GameState from a (possibly partial or legacy) snapshot mapping."""
    fallback_start = now_ms() if start_time is None else int(start_time)
    return GameState(
        coins=_non_negative(data.get("coins")),
        target=sanitize_target(data.get("target")),
        upgrades=ledger_from_snapshot(data.get("upgrades")),
        history=history_from_snapshot(data.get("rollHistory"), cap=history_cap),
        stats=stats_from_snapshot(data.get("stats"), start_time=fallback_start),
    )


def looks_like_snapshot(data: Mapping[str, Any]) -> bool:
    """At least one known key; anything else is treated as malformed."""
    return any(k in data for k in SNAPSHOT_KEYS)


def unwrap_export(data: Mapping[str, Any]) -> Mapping[str, Any]:
    """Accept both a bare snapshot and an export ({"meta": ..., "snapshot": ...})."""
    inner = data.get("snapshot")
    if isinstance(inner, Mapping):
        return inner
    return data
