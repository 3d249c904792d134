"""
core.rng
Uniform integer draws.

Gameplay uses `secure_draw`, backed by the OS CSPRNG (`secrets`).
Headless runs and self-checks use `seeded_draw`, which applies the same
scaling to a repeatable stream that does NOT rely on Python's built-in hash().
"""

from __future__ import annotations

import hashlib
import json
import random
import secrets
from typing import Any, Callable

DrawFn = Callable[[int, int], int]


def scale_u32(value: int, lo: int, hi: int) -> int:
    """Map a 32-bit unsigned value onto [lo, hi] inclusive.

    Same floor as int(value / 2**32 * width) + lo, done in integers so very
    wide ranges (long targets) cannot overflow a float.
    """
    if hi < lo:
        raise ValueError(f"empty draw range [{lo}, {hi}]")
    return lo + (value * (hi - lo + 1) >> 32)


def secure_draw(lo: int, hi: int) -> int:
    """Return a uniformly distributed integer in [lo, hi] from a crypto-strong source."""
    return scale_u32(secrets.randbits(32), lo, hi)


def stable_int_seed(*parts: Any, salt: str = "rng-simulator") -> int:
    """Return a stable 32-bit integer seed derived from arbitrary inputs.

    Uses SHA-256 over a canonical JSON representation of `parts`, so the same
    inputs give the same seed across processes/platforms.
    """
    payload = json.dumps(parts, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    h = hashlib.sha256((salt + "|" + payload).encode("utf-8")).digest()
    return int.from_bytes(h[:4], "big", signed=False)


def rng_from(*parts: Any, base_seed: int) -> random.Random:
    """Create a Random instance from (base_seed + parts)."""
    seed = stable_int_seed(base_seed, *parts)
    return random.Random(seed)


def seeded_draw(*parts: Any, base_seed: int) -> DrawFn:
    """Deterministic draw function for headless runs (NOT for gameplay)."""
    rng = rng_from("draw", *parts, base_seed=base_seed)

    def draw(lo: int, hi: int) -> int:
        return scale_u32(rng.getrandbits(32), lo, hi)

    return draw
