"""Interval fuzzing.

Spreads long intervals a little so cards learned together do not stay
clustered on the same day. Randomness is seeded from the review itself,
so identical inputs always produce the same interval.
"""

import random
from datetime import datetime

from mneme.domain.constants import FUZZ_MIN_INTERVAL, FUZZ_RANGES


def fuzz_range(interval: float, maximum_interval: int) -> tuple[int, int]:
    """Inclusive (min, max) days an interval may be fuzzed to."""
    delta = 1.0
    for start, end, factor in FUZZ_RANGES:
        delta += factor * max(min(interval, end) - start, 0.0)

    min_ivl = max(2, int(round(interval - delta)))
    max_ivl = min(int(round(interval + delta)), maximum_interval)
    min_ivl = min(min_ivl, max_ivl)
    return min_ivl, max_ivl


def fuzz_seed(review_time: datetime, reps: int, difficulty: float, stability: float) -> str:
    return f"{review_time.isoformat()}_{reps}_{difficulty * stability!r}"


def fuzz_interval(interval: int, maximum_interval: int, seed: str) -> int:
    """Return a deterministic fuzzed interval for the given seed."""
    if interval < FUZZ_MIN_INTERVAL:
        return interval

    min_ivl, max_ivl = fuzz_range(interval, maximum_interval)
    rng = random.Random(seed)
    fuzzed = rng.randint(min_ivl, max_ivl)
    return min(max(fuzzed, 1), maximum_interval)
