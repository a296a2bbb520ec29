"""
Domain models for FSRS scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

from .errors import InvalidRatingError


class Rating(IntEnum):
    """Recall-quality feedback given after attempting a card."""

    AGAIN = 1  # Forgot
    HARD = 2  # Recalled with serious effort
    GOOD = 3  # Recalled after hesitation
    EASY = 4  # Instant recall

    @classmethod
    def coerce(cls, value: "Rating | int | str") -> "Rating":
        """
        Convert a caller-supplied rating into a Rating.

        Accepts a Rating, an integer 1-4 or a case-insensitive name.
        Raises InvalidRatingError for anything else.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidRatingError(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidRatingError(value) from None
        if isinstance(value, str):
            key = value.strip().upper()
            if key.isdigit():
                return cls.coerce(int(key))
            try:
                return cls[key]
            except KeyError:
                raise InvalidRatingError(value) from None
        raise InvalidRatingError(value)


class State(IntEnum):
    """Learning phase of a card."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


@dataclass(frozen=True)
class MemoryState:
    """
    Everything the scheduler knows about one card's learning history.

    Attributes:
        due: When the card should next be shown.
        stability: Days for retrievability to fall from 100% to 90%.
        difficulty: Intrinsic hardness on the 1-10 scale (0 while New).
        elapsed_days: Whole days between the last two reviews.
        scheduled_days: Interval assigned at the last review.
        learning_steps: Index into the active (re)learning step table.
        reps: Total number of reviews.
        lapses: Number of times a Review card was forgotten.
        state: Current learning phase.
        last_review: Timestamp of the last review, None while New.
    """

    due: datetime
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    learning_steps: int = 0
    reps: int = 0
    lapses: int = 0
    state: State = State.NEW
    last_review: datetime | None = None

    @property
    def is_new(self) -> bool:
        return self.state == State.NEW

    @property
    def is_learning(self) -> bool:
        return self.state in (State.LEARNING, State.RELEARNING)


@dataclass(frozen=True)
class ReviewLog:
    """
    A single review as it happened.

    `state` and `due` describe the card before the review; `stability` and
    `difficulty` the memory state after it.
    """

    rating: Rating
    state: State
    due: datetime
    stability: float
    difficulty: float
    elapsed_days: int
    last_elapsed_days: int
    scheduled_days: int
    learning_steps: int
    review: datetime


@dataclass(frozen=True)
class ReviewOutcome:
    """Updated card plus the log entry describing the review."""

    card: MemoryState
    log: ReviewLog
