"""
Deck Stats Service — Application layer orchestrator.

Selects due cards and summarizes a deck's memory-states. Works on
in-memory mappings of card id -> MemoryState; loading them is the
caller's concern.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from mneme.application.scheduler.service import Scheduler, days_between
from mneme.domain.constants import (
    WEAK_LAPSE_THRESHOLD,
    WEAK_RETRIEVABILITY_THRESHOLD,
    WEAK_STABILITY_THRESHOLD,
)
from mneme.domain.models import MemoryState, State

from .metrics_calculator import EnrichedStats, MetricsCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeckStats:
    """Card counts for one deck at a point in time."""

    total: int
    new: int
    learning: int  # Learning + Relearning
    review: int
    due: int
    overdue: int  # Review cards strictly past due


def is_due(card: MemoryState, now: datetime) -> bool:
    return days_between(now, card.due) >= 0


class DeckStatsService:
    """
    Application service for due-card selection and deck statistics.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            scheduler: Scheduler used for retrievability; default parameters if omitted.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._scheduler = scheduler or Scheduler()
        self._calc = calculator or MetricsCalculator(self._scheduler)

    def due_cards(
        self,
        cards: Mapping[str, MemoryState],
        now: datetime,
        limit: int | None = None,
    ) -> list[str]:
        """
        Ids of cards due at `now`, earliest due first.

        Args:
            cards: Card id -> memory-state.
            now: Reference time.
            limit: Optional maximum number of ids to return.
        """
        due = [(card_id, card) for card_id, card in cards.items() if is_due(card, now)]
        due.sort(key=lambda item: days_between(item[1].due, now))
        ids = [card_id for card_id, _ in due]
        return ids[:limit] if limit else ids

    def deck_stats(self, cards: Mapping[str, MemoryState], now: datetime) -> DeckStats:
        """Count cards per learning phase plus due and overdue totals."""
        states = list(cards.values())
        return DeckStats(
            total=len(states),
            new=sum(1 for c in states if c.state == State.NEW),
            learning=sum(1 for c in states if c.is_learning),
            review=sum(1 for c in states if c.state == State.REVIEW),
            due=sum(1 for c in states if is_due(c, now)),
            overdue=sum(
                1 for c in states if c.state == State.REVIEW and days_between(now, c.due) > 0
            ),
        )

    def get_enriched_stats(
        self, cards: Mapping[str, MemoryState], now: datetime
    ) -> list[EnrichedStats]:
        """
        Enrich every card with computed metrics.
        """
        return [self._calc.enrich(card_id, card, now) for card_id, card in cards.items()]

    def get_weak_cards(
        self,
        cards: Mapping[str, MemoryState],
        now: datetime,
        stability_threshold: float = WEAK_STABILITY_THRESHOLD,
        lapse_threshold: int = WEAK_LAPSE_THRESHOLD,
        retrievability_threshold: float = WEAK_RETRIEVABILITY_THRESHOLD,
    ) -> list[EnrichedStats]:
        """
        Identify reviewed cards that are "weak" based on configurable thresholds.

        A card is weak if:
        - stability < threshold, OR
        - lapses >= threshold, OR
        - retrievability < threshold

        New cards are never weak.
        """
        weak = []

        for card in self.get_enriched_stats(cards, now):
            if card.state == State.NEW:
                continue

            is_weak = False

            # Low stability
            if card.stability < stability_threshold:
                is_weak = True

            # Has lapses
            if card.lapses >= lapse_threshold:
                is_weak = True

            # Low retrievability
            if (
                card.current_retrievability is not None
                and card.current_retrievability < retrievability_threshold
            ):
                is_weak = True

            if is_weak:
                weak.append(card)

        logger.debug("Weak cards: %d/%d", len(weak), len(cards))
        return weak
