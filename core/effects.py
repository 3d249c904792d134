"""
core.effects
Economy rules:
- base / effective reward per target length
- upgrade cost growth
- auto-clicker rate, burst size and burst price
"""

from __future__ import annotations

import math
from typing import Dict, Optional


# target length -> coins per hit (before multiplier)
BASE_REWARDS: Dict[int, int] = {
    1: 2,     # 0-9
    2: 10,    # 0-99
    3: 50,    # 0-999
    4: 200,   # 0-9999
    5: 800,   # 0-99999
}

COST_GROWTH = 2.1
MULTIPLIER_STEP = 0.1
AUTO_CLICKS_PER_LEVEL = 0.3
BURST_BASE_SIZE = 8
BURST_SIZE_PER_LEVEL = 3
BURST_MIN_COST = 20
BURST_COST_DIVISOR = 5  # 20% of the base reward


def base_reward(target_length: int) -> int:
    if target_length < 1:
        return 0
    if target_length in BASE_REWARDS:
        return BASE_REWARDS[target_length]
    # floor(10^L * 0.1) in integer arithmetic; long targets overflow a float
    return 10 ** (target_length - 1)


def coin_multiplier(level: int) -> float:
    """Level 1 = 1.1x, level 2 = 1.2x, ..."""
    return 1 + level * MULTIPLIER_STEP


def effective_reward(target_length: int, coin_multiplier_level: int) -> int:
    # floor(base * (1 + level/10)) kept integral
    return base_reward(target_length) * (10 + coin_multiplier_level) // 10


def next_cost(cost: int) -> int:
    return int(math.floor(cost * COST_GROWTH))


def auto_rate_per_second(level: int) -> float:
    return max(0, level) * AUTO_CLICKS_PER_LEVEL


def auto_interval_seconds(level: int) -> Optional[float]:
    """Seconds between automatic clicks; None while the auto-clicker is not owned."""
    if level <= 0:
        return None
    return 1.0 / (level * AUTO_CLICKS_PER_LEVEL)


def burst_size(level: int) -> int:
    return BURST_BASE_SIZE + (level - 1) * BURST_SIZE_PER_LEVEL


def burst_cost(target_length: int) -> int:
    return max(BURST_MIN_COST, base_reward(target_length) // BURST_COST_DIVISOR)


def chance_denominator(target_length: int) -> int:
    """N in "1 in N" odds for a single draw."""
    if target_length < 1:
        return 0
    return 10 ** target_length
