from dataclasses import replace

import pytest

from mneme.application.scheduler import Scheduler
from mneme.application.scheduler.fuzz import fuzz_interval, fuzz_range, fuzz_seed
from mneme.domain.models import Rating
from mneme.domain.parameters import SchedulerParameters


@pytest.mark.parametrize(
    "interval, expected",
    [
        (10, (8, 12)),
        (100, (93, 107)),
    ],
)
def test_fuzz_range(interval, expected):
    assert fuzz_range(interval, 36500) == expected


def test_fuzz_range_respects_maximum_interval():
    low, high = fuzz_range(100, 50)
    assert high == 50
    assert low <= high


def test_short_intervals_are_not_fuzzed():
    assert fuzz_interval(1, 36500, "seed") == 1
    assert fuzz_interval(2, 36500, "seed") == 2


def test_fuzz_is_deterministic_for_a_seed():
    assert fuzz_interval(30, 36500, "abc") == fuzz_interval(30, 36500, "abc")


def test_fuzz_stays_in_range():
    low, high = fuzz_range(60, 36500)
    for i in range(50):
        assert low <= fuzz_interval(60, 36500, f"seed-{i}") <= high


def test_fuzz_seed_depends_on_review(t0):
    assert fuzz_seed(t0, 3, 5.0, 10.0) == fuzz_seed(t0, 3, 5.0, 10.0)
    assert fuzz_seed(t0, 3, 5.0, 10.0) != fuzz_seed(t0, 4, 5.0, 10.0)


def test_fuzzed_scheduler_is_deterministic(review_card, t0):
    scheduler = Scheduler(SchedulerParameters(enable_fuzzing=True))
    first = scheduler.review(review_card, Rating.GOOD, t0)
    second = scheduler.review(review_card, Rating.GOOD, t0)
    assert first == second


def test_fuzzed_scheduler_keeps_ratings_ordered(review_card, t0):
    scheduler = Scheduler(SchedulerParameters(enable_fuzzing=True))
    card = replace(review_card, stability=60.0)
    hard = scheduler.review(card, Rating.HARD, t0).scheduled_days
    good = scheduler.review(card, Rating.GOOD, t0).scheduled_days
    easy = scheduler.review(card, Rating.EASY, t0).scheduled_days
    assert hard <= good < easy
