from __future__ import annotations

from dataclasses import replace

from core.state import default_start_state
from engine.sim_runner import GreedyBuyer, run_headless_sim


def test_headless_sim_is_deterministic():
    a = run_headless_sim(clicks=200, base_seed=5)
    b = run_headless_sim(clicks=200, base_seed=5)
    # batch ids and timestamps differ run to run; the economy must not
    for key in ("coins", "upgrades", "stats"):
        assert getattr(a["final"], key) == getattr(b["final"], key)
    numbers = lambda out: [r.number for batch in out["final"].history for r in batch.rolls]
    assert numbers(a) == numbers(b)


def test_headless_sim_keeps_invariants():
    out = run_headless_sim(clicks=300)
    state = out["final"]
    s = state.stats
    assert state.coins >= 0
    assert len(state.history) <= 20
    assert s.manual_clicks == 300
    assert s.total_hits <= s.total_numbers_generated
    assert s.upgrades_purchased == sum(1 for log in out["logs"] if log.get("ok") and log.get("track"))
    assert 0 <= out["hit_rate"] <= 100
    # a 1-digit target hits often enough to afford something in 300 clicks
    assert s.upgrades_purchased > 0


def test_greedy_buyer_picks_cheapest_affordable():
    state = default_start_state(start_time=0)
    buyer = GreedyBuyer()
    assert buyer.pick(state) is None
    assert buyer.pick(replace(state, coins=60)) == "instance_count"
