import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from mneme.domain.errors import InvalidRatingError
from mneme.domain.models import MemoryState, Rating, State
from mneme.domain.parameters import SchedulerParameters


# --- Rating ---


@pytest.mark.parametrize(
    "value, expected",
    [
        (Rating.GOOD, Rating.GOOD),
        (1, Rating.AGAIN),
        (4, Rating.EASY),
        ("hard", Rating.HARD),
        ("Easy", Rating.EASY),
        (" AGAIN ", Rating.AGAIN),
        ("3", Rating.GOOD),
    ],
)
def test_rating_coerce_accepts_known_values(value, expected):
    assert Rating.coerce(value) is expected


@pytest.mark.parametrize("value", [0, 5, -1, "meh", "", None, 2.0, True])
def test_rating_coerce_rejects_unknown_values(value):
    with pytest.raises(InvalidRatingError) as exc:
        Rating.coerce(value)
    assert exc.value.value == value


def test_invalid_rating_is_value_error():
    with pytest.raises(ValueError):
        Rating.coerce(7)


def test_rating_integer_convention():
    assert [int(r) for r in Rating] == [1, 2, 3, 4]


# --- MemoryState ---


def test_memory_state_defaults_to_new():
    due = datetime(2026, 1, 1, tzinfo=timezone.utc)
    card = MemoryState(due=due)
    assert card.state == State.NEW
    assert card.is_new
    assert not card.is_learning
    assert card.reps == 0
    assert card.lapses == 0
    assert card.last_review is None
    assert card.stability == 0.0
    assert card.difficulty == 0.0


def test_memory_state_is_immutable():
    card = MemoryState(due=datetime(2026, 1, 1, tzinfo=timezone.utc))
    with pytest.raises(dataclasses.FrozenInstanceError):
        card.reps = 3


def test_is_learning_covers_relearning():
    due = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert MemoryState(due=due, state=State.LEARNING).is_learning
    assert MemoryState(due=due, state=State.RELEARNING).is_learning
    assert not MemoryState(due=due, state=State.REVIEW).is_learning


# --- Parameters (as value objects) ---


def test_parameters_are_hashable_and_comparable():
    a = SchedulerParameters()
    b = SchedulerParameters()
    assert a == b
    assert hash(a) == hash(b)
    assert SchedulerParameters(learning_steps=[timedelta(minutes=5)]) != a
