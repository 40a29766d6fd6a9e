from __future__ import annotations

import random
import time
from typing import Callable, Optional


Clock = Callable[[], float]


def wall_clock() -> float:
    """Seconds since the epoch."""
    return time.time()


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def resolve_rng(rng: Optional[random.Random], seed: Optional[int]) -> random.Random:
    # An explicit generator wins over a seed so callers can share one stream.
    if rng is not None:
        return rng
    return random.Random(seed)
