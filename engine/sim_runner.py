"""engine.sim_runner

Headless runner for quick balance/sanity checks.

Uses a seeded draw so the same seed always gives the same run, and a tiny
greedy buyer that purchases the cheapest affordable upgrade after each click.
No timers: auto-clicker ticks are simulated as extra rolls between clicks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.effects import auto_rate_per_second
from core.rng import seeded_draw
from core.state import GameState, default_start_state
from core.tracks import TRACK_ORDER
from core.views import best_hit_streak, hit_rate, largest_reward

from .config import EngineConfig
from .pipeline import apply_roll, purchase_upgrade, set_target


@dataclass
class GreedyBuyer:
    """Buys the cheapest upgrade it can afford (ties broken by track order)."""

    def pick(self, state: GameState) -> Optional[str]:
        affordable = [t for t in TRACK_ORDER if state.upgrades.get(t).cost <= state.coins]
        if not affordable:
            return None
        return min(affordable, key=lambda t: (state.upgrades.get(t).cost, TRACK_ORDER.index(t)))


def run_headless_sim(
    *,
    target: str = "7",
    clicks: int = 500,
    seconds_per_click: float = 0.5,
    base_seed: int = 123,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    """Run a deterministic simulation and return summary."""
    cfg = config or EngineConfig()
    draw = seeded_draw("headless", target, base_seed=base_seed)
    buyer = GreedyBuyer()

    state, _ = set_target(default_start_state(start_time=0), target)
    logs: List[Dict[str, Any]] = []
    auto_credit = 0.0

    for _ in range(clicks):
        state, log = apply_roll(state, is_auto=False, draw=draw, history_cap=cfg.history_cap)
        logs.append(log)

        # auto-clicker owned => it is assumed switched on
        auto_credit += auto_rate_per_second(state.upgrades.auto_clicker.level) * seconds_per_click
        while auto_credit >= 1.0:
            auto_credit -= 1.0
            state, log = apply_roll(state, is_auto=True, draw=draw, history_cap=cfg.history_cap)
            logs.append(log)

        track = buyer.pick(state)
        if track is not None:
            state, log = purchase_upgrade(state, track)
            logs.append(log)

    return {
        "clicks": clicks,
        "final": state,
        "logs": logs,
        "hit_rate": hit_rate(state),
        "best_hit_streak": best_hit_streak(state.history),
        "largest_reward": largest_reward(state.history),
    }
