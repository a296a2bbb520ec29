"""Centralized constants for the mneme scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

from datetime import timedelta

# ---------- FSRS weights ----------
# FSRS-6 weights tuned for language learning (w0-w20).
DEFAULT_WEIGHTS: tuple[float, ...] = (
    0.212,
    1.2931,
    2.3065,
    8.2956,
    6.4133,
    0.8334,
    3.0194,
    0.001,
    1.8722,
    0.1666,
    0.796,
    1.4835,
    0.0614,
    0.2629,
    1.6483,
    0.6014,
    1.8729,
    0.5425,
    0.0912,
    0.0658,
    0.1542,
)
FSRS6_WEIGHT_COUNT = 21
FSRS5_WEIGHT_COUNT = 19
# Appended to an FSRS-5 vector: no stability damping on same-day reviews, FSRS-5 decay.
FSRS5_MIGRATION_TAIL: tuple[float, ...] = (0.0, 0.5)

# ---------- Domain bounds ----------
STABILITY_MIN = 0.001
STABILITY_MAX = 36500.0
DIFFICULTY_MIN = 1.0
DIFFICULTY_MAX = 10.0

# ---------- Scheduling defaults ----------
DEFAULT_DESIRED_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500  # ~100 years
DEFAULT_LEARNING_STEPS: tuple[timedelta, ...] = (timedelta(minutes=1), timedelta(minutes=10))
DEFAULT_RELEARNING_STEPS: tuple[timedelta, ...] = (timedelta(minutes=10),)

# ---------- Fuzz ----------
# (start, end, factor) in days
FUZZ_RANGES: tuple[tuple[float, float, float], ...] = (
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.1),
    (20.0, float("inf"), 0.05),
)
FUZZ_MIN_INTERVAL = 2.5

# ---------- Time ----------
SECONDS_PER_DAY = 86400.0

# ---------- Weak card detection ----------
WEAK_STABILITY_THRESHOLD = 7.0
WEAK_LAPSE_THRESHOLD = 1
WEAK_RETRIEVABILITY_THRESHOLD = 0.7
