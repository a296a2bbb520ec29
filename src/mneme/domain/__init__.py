# Domain Package
from .errors import InvalidParametersError, InvalidRatingError, MnemeError
from .models import MemoryState, Rating, ReviewLog, ReviewOutcome, State
from .parameters import SchedulerParameters, migrate_weights

__all__ = [
    "MemoryState",
    "Rating",
    "ReviewLog",
    "ReviewOutcome",
    "State",
    "SchedulerParameters",
    "migrate_weights",
    "MnemeError",
    "InvalidRatingError",
    "InvalidParametersError",
]
