"""
Scheduler parameters.

Immutable configuration bound once to a Scheduler. Several parameter sets
may coexist (one per deck or learner).
"""

import math
from dataclasses import dataclass, field
from datetime import timedelta

from .constants import (
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS,
    DEFAULT_WEIGHTS,
    FSRS5_MIGRATION_TAIL,
    FSRS5_WEIGHT_COUNT,
    FSRS6_WEIGHT_COUNT,
)
from .errors import InvalidParametersError


def migrate_weights(weights: "tuple[float, ...] | list[float]") -> tuple[float, ...]:
    """
    Normalize a weight vector to the 21-value FSRS-6 layout.

    A 19-value FSRS-5 vector is extended with a zero same-day stability
    exponent and the FSRS-5 decay, which reproduces FSRS-5 behaviour.
    """
    values = tuple(float(w) for w in weights)
    if len(values) == FSRS5_WEIGHT_COUNT:
        values = values + FSRS5_MIGRATION_TAIL
    if len(values) != FSRS6_WEIGHT_COUNT:
        raise InvalidParametersError(
            f"Expected {FSRS5_WEIGHT_COUNT} or {FSRS6_WEIGHT_COUNT} weights, got {len(values)}"
        )
    if not all(math.isfinite(w) for w in values):
        raise InvalidParametersError("Weights must be finite numbers")
    return values


@dataclass(frozen=True)
class SchedulerParameters:
    """
    FSRS model parameters and scheduling policy.

    Attributes:
        weights: FSRS-6 weight vector (w0-w20). FSRS-5 vectors are migrated.
        desired_retention: Target probability of recall at the due date.
        maximum_interval: Longest interval ever scheduled, in days.
        learning_steps: Short intervals for new cards before graduation.
        relearning_steps: Short intervals for lapsed cards.
        enable_fuzzing: Spread long intervals to avoid review clustering.
        enable_short_term: Use step tables and same-day stability updates.
    """

    weights: tuple[float, ...] = DEFAULT_WEIGHTS
    desired_retention: float = DEFAULT_DESIRED_RETENTION
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    learning_steps: tuple[timedelta, ...] = field(default=DEFAULT_LEARNING_STEPS)
    relearning_steps: tuple[timedelta, ...] = field(default=DEFAULT_RELEARNING_STEPS)
    enable_fuzzing: bool = False
    enable_short_term: bool = True

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "weights", migrate_weights(self.weights))
        object.__setattr__(self, "learning_steps", tuple(self.learning_steps))
        object.__setattr__(self, "relearning_steps", tuple(self.relearning_steps))

        if self.weights[20] <= 0:
            raise InvalidParametersError("Decay weight w20 must be positive")
        if not 0.0 < self.desired_retention < 1.0:
            raise InvalidParametersError(
                f"desired_retention must be in (0, 1), got {self.desired_retention}"
            )
        if self.maximum_interval < 1:
            raise InvalidParametersError(
                f"maximum_interval must be at least 1 day, got {self.maximum_interval}"
            )
        for step in self.learning_steps + self.relearning_steps:
            if step <= timedelta(0):
                raise InvalidParametersError(f"Step durations must be positive, got {step}")

        # The forgetting curve and interval formula must stay finite for these values
        try:
            factor = self.factor
            retention_term = self.desired_retention ** (1.0 / self.decay) - 1.0
        except (OverflowError, ZeroDivisionError):
            factor = retention_term = math.inf
        if not (0.0 < factor < math.inf and 0.0 < retention_term < math.inf):
            raise InvalidParametersError(
                f"desired_retention={self.desired_retention} with decay {self.decay} "
                "gives a non-finite interval"
            )

    @property
    def decay(self) -> float:
        """Exponent of the power-law forgetting curve (negative)."""
        return -self.weights[20]

    @property
    def factor(self) -> float:
        """Scale chosen so that R(t=S) == 0.9."""
        return 0.9 ** (1.0 / self.decay) - 1.0

    def steps_for(self, relearning: bool) -> tuple[timedelta, ...]:
        """Active step table; empty when short-term scheduling is disabled."""
        if not self.enable_short_term:
            return ()
        return self.relearning_steps if relearning else self.learning_steps
