"""
core.views
Read-only figures derived from GameState. Computed on read, never stored.
"""

from __future__ import annotations

from typing import List, Optional

from .state import GameState, RollBatch, now_ms


def hit_rate(state: GameState) -> float:
    """Percentage of generated numbers that matched (0 before the first draw)."""
    total = state.stats.total_numbers_generated
    if total == 0:
        return 0.0
    return state.stats.total_hits / total * 100


def total_clicks(state: GameState) -> int:
    return state.stats.manual_clicks + state.stats.auto_clicks


def best_hit_streak(history: List[RollBatch]) -> int:
    """Best run of consecutive batches with hits, summing their hits.

    Walks from the most recent batch; any batch without hits closes the run.
    """
    streaks = [0]
    for batch in history:
        if batch.hits > 0:
            streaks[-1] += batch.hits
        else:
            streaks.append(0)
    return max(streaks)


def largest_reward(history: List[RollBatch]) -> int:
    return max((r.reward for b in history for r in b.rolls), default=0)


def elapsed_seconds(state: GameState, now: Optional[int] = None) -> int:
    now = now_ms() if now is None else int(now)
    return max(0, (now - state.stats.start_time) // 1000)


def format_time_played(seconds: int) -> str:
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_number(number: int, target: str) -> str:
    """Zero-pad a drawn number to the target's width (7 -> "007" for a 3-digit target)."""
    if not target:
        return str(number)
    return str(number).zfill(len(target))
