"""
Metrics calculator for deriving insights from card memory-states.

This is a pure computation module with no I/O.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from mneme.application.scheduler.service import Scheduler, days_between
from mneme.domain.models import MemoryState, State


@dataclass
class EnrichedStats:
    """
    Card memory-state enriched with computed metrics.
    """

    # Card state
    card_id: str
    state: State
    stability: float
    difficulty: float
    reps: int
    lapses: int
    scheduled_days: int
    due: datetime

    # Computed metrics
    current_retrievability: float | None
    lapse_rate: float | None  # lapses / reps
    days_overdue: int | None  # Negative if not yet due


class MetricsCalculator:
    """
    Computes derived metrics from raw MemoryState objects.

    Stateless and side-effect free.
    """

    def __init__(self, scheduler: Scheduler | None = None):
        self._scheduler = scheduler or Scheduler()

    def enrich(self, card_id: str, card: MemoryState, now: datetime) -> EnrichedStats:
        """
        Enrich a card's memory-state with computed metrics.
        """
        return EnrichedStats(
            card_id=card_id,
            state=card.state,
            stability=card.stability,
            difficulty=card.difficulty,
            reps=card.reps,
            lapses=card.lapses,
            scheduled_days=card.scheduled_days,
            due=card.due,
            current_retrievability=self._compute_retrievability(card, now),
            lapse_rate=self._compute_lapse_rate(card),
            days_overdue=self._compute_days_overdue(card, now),
        )

    def _compute_retrievability(self, card: MemoryState, now: datetime) -> float | None:
        """
        Current recall probability from the power-law forgetting curve.
        """
        if card.state == State.NEW or card.last_review is None:
            return None
        return self._scheduler.retrievability(card, now)

    def _compute_lapse_rate(self, card: MemoryState) -> float | None:
        """
        Compute lapse rate as lapses / total reviews.
        """
        if card.reps == 0:
            return None
        return card.lapses / card.reps

    def _compute_days_overdue(self, card: MemoryState, now: datetime) -> int | None:
        """
        Whole days past the due date (negative if not yet due).
        """
        if card.state == State.NEW:
            return None
        return math.floor(days_between(now, card.due))
