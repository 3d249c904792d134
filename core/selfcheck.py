"""
core.selfcheck
Minimal "it runs" proof for the economy core.

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

from dataclasses import asdict

from .effects import base_reward, burst_cost, burst_size, effective_reward, next_cost
from .rng import seeded_draw
from .state import default_start_state, range_for_target
from .tracks import TRACK_ORDER
from .views import best_hit_streak, largest_reward


def run_draw_smoke() -> None:
    draw = seeded_draw("selfcheck", base_seed=42)

    for length in range(1, 8):
        lo, hi = range_for_target("9" * length)
        for _ in range(2_000):
            n = draw(lo, hi)
            assert lo <= n <= hi, (length, n)
        assert effective_reward(length, 0) == base_reward(length)
        assert burst_cost(length) >= 20

    ledger = default_start_state(start_time=0).upgrades
    for track in TRACK_ORDER:
        u = ledger.get(track)
        for _ in range(10):
            bumped = u.bumped()
            assert bumped.cost == next_cost(u.cost) > u.cost
            u = bumped

    assert burst_size(1) == 8
    assert best_hit_streak([]) == 0 and largest_reward([]) == 0

    print("OK: core draw/reward/upgrade smoke test passed.")
    print("Baseline ledger:", asdict(ledger))


if __name__ == "__main__":
    run_draw_smoke()
