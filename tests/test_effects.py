from __future__ import annotations

import pytest

from core.effects import (
    auto_interval_seconds,
    auto_rate_per_second,
    base_reward,
    burst_cost,
    burst_size,
    chance_denominator,
    effective_reward,
    next_cost,
)


def test_base_reward_table():
    assert [base_reward(n) for n in range(1, 6)] == [2, 10, 50, 200, 800]


@pytest.mark.parametrize("length,expected", [(6, 100_000), (7, 1_000_000), (10, 1_000_000_000)])
def test_base_reward_beyond_table(length, expected):
    assert base_reward(length) == expected


def test_base_reward_without_target():
    assert base_reward(0) == 0


def test_effective_reward():
    assert effective_reward(2, 0) == 10
    assert effective_reward(2, 1) == 11
    assert effective_reward(2, 3) == 13
    assert effective_reward(1, 1) == 2  # floor(2.2)
    assert effective_reward(4, 5) == 300


@pytest.mark.parametrize("cost", [1, 25, 50, 75, 100, 52, 12345])
def test_next_cost_grows(cost):
    assert next_cost(cost) == int(cost * 2.1)
    assert next_cost(cost) > cost


def test_next_cost_baselines():
    assert next_cost(25) == 52
    assert next_cost(100) == 210
    assert next_cost(50) == 105
    assert next_cost(75) == 157


def test_auto_clicker_rate():
    assert auto_interval_seconds(0) is None
    assert auto_interval_seconds(1) == pytest.approx(1 / 0.3)
    assert auto_interval_seconds(2) == pytest.approx(1 / 0.6)
    assert auto_rate_per_second(3) == pytest.approx(0.9)


def test_burst_size_and_cost():
    assert burst_size(1) == 8
    assert burst_size(2) == 11
    assert burst_size(4) == 17
    assert burst_cost(1) == 20
    assert burst_cost(2) == 20
    assert burst_cost(4) == 40
    assert burst_cost(5) == 160
    assert burst_cost(6) == 20_000


def test_chance_denominator():
    assert chance_denominator(2) == 100
    assert chance_denominator(0) == 0


def test_long_target_rewards_stay_exact():
    assert base_reward(400) == 10 ** 399
    assert effective_reward(400, 1) == 11 * 10 ** 398
    assert burst_cost(400) == 2 * 10 ** 398
