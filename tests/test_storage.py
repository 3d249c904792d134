from __future__ import annotations

import json
from dataclasses import replace

import pytest

from core.state import RollBatch, RollOutcome, Upgrade, default_start_state
from core.tracks import AUTO_CLICKER, COIN_MULTIPLIER, INSTANCE_COUNT, SPEED_BURST
from storage.parsing import must_parse_json, try_parse_json
from storage.providers import JsonFileStore, MemoryStore, state_from_text
from storage.schemas import state_from_snapshot


LEGACY_SAVE = {
    "coins": 57,
    "target": "42",
    "rollHistory": [
        {
            "id": 1700000000123,
            "rolls": [
                {"number": 42, "isMatch": True, "reward": 11, "timestamp": 1700000000123},
                {"number": 3, "isMatch": False, "reward": 0, "timestamp": 1700000000123},
            ],
            "totalCoins": 11,
            "hits": 1,
            "instances": 2,
        },
        {"id": 1700000000001, "rolls": [], "totalCoins": 0, "hits": 0, "instances": 2, "isAuto": True},
        "garbage",
    ],
    "upgrades": {
        "multiInstance": {"level": 2, "cost": 52},
        "autoClicker": {"level": 1, "cost": 210},
        "coinMultiplier": {"level": 1, "cost": 50},
        "speedBurst": {"level": 1, "cost": 75},
    },
    "stats": {
        "startTime": 1699999999000,
        "manualClicks": 1,
        "autoClicks": 1,
        "totalCoinsEarned": 11,
        "upgradesPurchased": 2,
        "totalHits": 1,
        "totalNumbersGenerated": 4,
    },
}


def test_absent_or_blank_snapshot_gives_defaults():
    for raw in (None, "", "   "):
        state = state_from_text(raw, start_time=99)
        assert state == default_start_state(start_time=99)


@pytest.mark.parametrize("raw", ["not json at all", "[1, 2, 3]", '{"unrelated": true}', "{{{"])
def test_malformed_snapshot_gives_defaults(raw):
    state = state_from_text(raw, start_time=99)
    assert state == default_start_state(start_time=99)


def test_legacy_save_is_upgraded():
    state = state_from_text(json.dumps(LEGACY_SAVE))
    assert state.coins == 57
    assert state.target == "42"
    assert state.upgrades.get(INSTANCE_COUNT) == Upgrade(2, 52)
    assert state.upgrades.get(AUTO_CLICKER) == Upgrade(1, 210)
    assert len(state.history) == 2
    first = state.history[0]
    assert first.id == "1700000000123"
    assert first.instance_count_at_time == 2
    assert first.hits == 1 and first.total_coins == 11
    assert first.timestamp == 1700000000123
    assert state.history[1].is_auto is True
    assert state.stats.start_time == 1699999999000
    assert state.stats.total_numbers_generated == 4


def test_partial_snapshot_fills_defaults():
    state = state_from_snapshot({"coins": "12", "target": "4-2", "upgrades": {"speedBurst": "bad"}}, start_time=7)
    assert state.coins == 12
    assert state.target == "42"
    assert state.upgrades.get(SPEED_BURST) == Upgrade(1, 75)
    assert state.upgrades.get(COIN_MULTIPLIER) == Upgrade(1, 50)
    assert state.stats.start_time == 7
    assert state.history == []


def test_negative_values_are_clamped():
    state = state_from_snapshot({"coins": -5, "upgrades": {"instanceCount": {"level": 0, "cost": -1}}})
    assert state.coins == 0
    assert state.upgrades.get(INSTANCE_COUNT).level == 1
    assert state.upgrades.get(INSTANCE_COUNT).cost == 0


def test_history_is_capped_on_load():
    batch = {"id": "x", "rolls": [{"number": 1, "isMatch": False, "reward": 0}], "instanceCountAtTime": 1}
    state = state_from_snapshot({"rollHistory": [batch] * 30}, history_cap=20)
    assert len(state.history) == 20


def test_export_wrapper_is_unwrapped():
    raw = json.dumps({"meta": {"app": "RNG Simulator"}, "snapshot": {"coins": 9, "target": "1"}})
    state = state_from_text(raw)
    assert state.coins == 9


def test_trailing_commas_are_tolerated():
    res = try_parse_json('{"coins": 3, "target": "5",}')
    assert res.data == {"coins": 3, "target": "5"}
    with pytest.raises(ValueError):
        must_parse_json("nope")


def _sample_state():
    state = default_start_state(start_time=1_000)
    batch = RollBatch(
        id="abc",
        rolls=[RollOutcome(number=5, is_match=True, reward=2, timestamp=2_000)],
        total_coins=2,
        hits=1,
        instance_count_at_time=1,
        timestamp=2_000,
    )
    return replace(state, coins=2, target="5", history=[batch])


def test_json_file_store_round_trip(tmp_path):
    store = JsonFileStore(tmp_path / "nested" / "state.json")
    assert store.status().note == "no snapshot yet"
    assert store.load() is not None

    state = _sample_state()
    store.save(state)
    assert store.status().note == "snapshot present"
    assert store.load() == state
    assert list((tmp_path / "nested").glob("*.tmp")) == []

    store.clear()
    assert not store.path.exists()
    store.clear()


def test_json_file_store_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{ this is not json", encoding="utf-8")
    state = JsonFileStore(path).load()
    assert state.coins == 0
    assert state.target == ""


def test_memory_store_keeps_every_save():
    store = MemoryStore()
    store.save(_sample_state())
    store.save(default_start_state(start_time=1))
    assert len(store.saves) == 2
    assert store.load().coins == 0


def test_huge_balances_load_exactly():
    coins = 11 * 10 ** 398
    state = state_from_text(json.dumps({"coins": coins, "target": "7" * 400, "stats": {"totalCoinsEarned": coins}}))
    assert state.coins == coins
    assert state.stats.total_coins_earned == coins
    assert state.target_length == 400
