"""mneme: FSRS spaced-repetition scheduling core."""

from mneme.application.scheduler import Scheduler
from mneme.domain import (
    InvalidParametersError,
    InvalidRatingError,
    MemoryState,
    MnemeError,
    Rating,
    ReviewLog,
    ReviewOutcome,
    SchedulerParameters,
    State,
)

__version__ = "0.1.0"

__all__ = [
    "Scheduler",
    "SchedulerParameters",
    "MemoryState",
    "Rating",
    "State",
    "ReviewLog",
    "ReviewOutcome",
    "MnemeError",
    "InvalidRatingError",
    "InvalidParametersError",
]
