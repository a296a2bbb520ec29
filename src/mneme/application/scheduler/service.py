"""
FSRS Scheduler — Application layer entry point.

Takes a card's memory-state and a rating and returns the next memory-state.
Pure and synchronous: the only shared object is the immutable parameter
set, so calls for any cards may run in parallel without locking.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from mneme.domain.constants import SECONDS_PER_DAY
from mneme.domain.models import MemoryState, Rating, ReviewLog, ReviewOutcome, State
from mneme.domain.parameters import SchedulerParameters

from .fuzz import fuzz_interval, fuzz_seed
from .memory_model import MemoryModel, clamp_difficulty, clamp_stability

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def days_between(later: datetime, earlier: datetime) -> float:
    """Fractional days from `earlier` to `later`. Naive datetimes are read as UTC."""
    if (later.tzinfo is None) != (earlier.tzinfo is None):
        if later.tzinfo is None:
            later = later.replace(tzinfo=timezone.utc)
        else:
            earlier = earlier.replace(tzinfo=timezone.utc)
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


@dataclass(frozen=True)
class _Transition:
    state: State
    learning_steps: int
    scheduled_days: int
    delay: timedelta
    lapsed: bool = False


class Scheduler:
    """
    FSRS scheduler with short-term (re)learning steps.

    Parameters are bound once at construction and never mutated, so
    schedulers with different parameter sets can coexist.
    """

    def __init__(self, parameters: SchedulerParameters | None = None):
        self.params = parameters or SchedulerParameters()
        self.model = MemoryModel(self.params)

    def create_initial_state(self, now: datetime | None = None) -> MemoryState:
        """Fresh New card, due immediately."""
        return MemoryState(due=now or utcnow())

    def retrievability(self, state: MemoryState, now: datetime | None = None) -> float:
        """Current probability of recall; 0.0 for cards never reviewed."""
        if state.state == State.NEW or state.last_review is None:
            return 0.0
        elapsed = max(0, math.floor(days_between(now or utcnow(), state.last_review)))
        return self.model.retrievability(elapsed, state.stability)

    def review(
        self,
        state: MemoryState,
        rating: Rating | int | str,
        now: datetime | None = None,
    ) -> MemoryState:
        """
        Apply one review and return the updated memory-state.

        Raises:
            InvalidRatingError: If rating is not Again/Hard/Good/Easy.
        """
        return self.review_with_log(state, rating, now).card

    def review_with_log(
        self,
        state: MemoryState,
        rating: Rating | int | str,
        now: datetime | None = None,
    ) -> ReviewOutcome:
        """
        Apply one review and return the updated card together with its log.

        Steps:
        1. Normalize malformed input and compute elapsed whole days
        2. Update stability and difficulty
        3. Choose the next state, step index and interval
        4. Set due date, counters and last review
        """
        rating = Rating.coerce(rating)
        now = now or utcnow()

        card = self._normalize(state)
        elapsed_days = self._elapsed_days(card, now)

        if card.state == State.NEW:
            stability = self.model.initial_stability(rating)
            difficulty = self.model.initial_difficulty(rating)
        else:
            stability = self.model.next_stability(
                card.stability, card.difficulty, elapsed_days, rating
            )
            difficulty = self.model.next_difficulty(card.difficulty, rating)

        if card.state == State.REVIEW:
            transition = self._review_transition(card, rating, stability, elapsed_days, now)
        else:
            transition = self._learning_transition(card, rating, stability, now)

        updated = replace(
            card,
            due=now + transition.delay,
            stability=stability,
            difficulty=difficulty,
            elapsed_days=elapsed_days,
            scheduled_days=transition.scheduled_days,
            learning_steps=transition.learning_steps,
            reps=card.reps + 1,
            lapses=card.lapses + (1 if transition.lapsed else 0),
            state=transition.state,
            last_review=now,
        )

        logger.debug(
            "Review %s: %s -> %s (S=%.4f D=%.4f interval=%sd due=%s)",
            rating.name,
            card.state.name,
            updated.state.name,
            updated.stability,
            updated.difficulty,
            updated.scheduled_days,
            updated.due.isoformat(),
        )

        log = ReviewLog(
            rating=rating,
            state=state.state,
            due=state.due,
            stability=updated.stability,
            difficulty=updated.difficulty,
            elapsed_days=elapsed_days,
            last_elapsed_days=card.elapsed_days,
            scheduled_days=updated.scheduled_days,
            learning_steps=updated.learning_steps,
            review=now,
        )
        return ReviewOutcome(card=updated, log=log)

    def preview(
        self, state: MemoryState, now: datetime | None = None
    ) -> dict[Rating, ReviewOutcome]:
        """
        Outcomes for every rating against the same input.
        Useful for showing the user what each button would do.
        """
        now = now or utcnow()
        return {rating: self.review_with_log(state, rating, now) for rating in Rating}

    # ------------------------------------------------------------------
    # Input normalization
    # ------------------------------------------------------------------

    def _normalize(self, state: MemoryState) -> MemoryState:
        changes: dict[str, object] = {}

        for name in ("elapsed_days", "scheduled_days", "reps", "lapses"):
            if getattr(state, name) < 0:
                changes[name] = 0

        if state.state != State.NEW:
            stability = clamp_stability(state.stability)
            if stability != state.stability:
                changes["stability"] = stability
            difficulty = clamp_difficulty(state.difficulty)
            if difficulty != state.difficulty:
                changes["difficulty"] = difficulty

        steps = self.params.steps_for(relearning=state.state == State.RELEARNING)
        step = min(max(state.learning_steps, 0), len(steps))
        if step != state.learning_steps:
            changes["learning_steps"] = step

        if not changes:
            return state

        logger.warning("Clamped out-of-domain memory state fields: %s", sorted(changes))
        return replace(state, **changes)

    def _elapsed_days(self, card: MemoryState, now: datetime) -> int:
        if card.last_review is None:
            return 0
        days = days_between(now, card.last_review)
        if days < 0:
            logger.warning(
                "Review time %s precedes last review %s; treating elapsed days as 0",
                now.isoformat(),
                card.last_review.isoformat(),
            )
            return 0
        return math.floor(days)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _learning_transition(
        self,
        card: MemoryState,
        rating: Rating,
        stability: float,
        now: datetime,
    ) -> _Transition:
        relearning = card.state == State.RELEARNING
        steps = self.params.steps_for(relearning)
        step = 0 if card.state == State.NEW else card.learning_steps
        next_state = State.RELEARNING if relearning else State.LEARNING

        if not steps or (step >= len(steps) and rating != Rating.AGAIN):
            return self._graduate(card, stability, now)

        if rating == Rating.AGAIN:
            return self._step(next_state, 0, steps[0])

        if rating == Rating.HARD and not relearning:
            return self._step(next_state, step, self._hard_delay(steps, step))

        if rating == Rating.EASY or step + 1 >= len(steps):
            return self._graduate(card, stability, now)

        return self._step(next_state, step + 1, steps[step + 1])

    def _review_transition(
        self,
        card: MemoryState,
        rating: Rating,
        stability: float,
        elapsed_days: int,
        now: datetime,
    ) -> _Transition:
        if rating == Rating.AGAIN:
            steps = self.params.steps_for(relearning=True)
            if steps:
                return replace(self._step(State.RELEARNING, 0, steps[0]), lapsed=True)
            return replace(self._graduate(card, stability, now), lapsed=True)

        interval = self._ordered_intervals(card, elapsed_days, now)[rating]
        return _Transition(
            state=State.REVIEW,
            learning_steps=0,
            scheduled_days=interval,
            delay=timedelta(days=interval),
        )

    def _ordered_intervals(
        self, card: MemoryState, elapsed_days: int, now: datetime
    ) -> dict[Rating, int]:
        """
        Hard/Good/Easy intervals for a Review card, forced into order so a
        better rating never yields a shorter interval.
        """
        hard, good, easy = (
            self._interval(
                card,
                self.model.next_stability(card.stability, card.difficulty, elapsed_days, r),
                now,
            )
            for r in (Rating.HARD, Rating.GOOD, Rating.EASY)
        )
        hard = min(hard, good)
        good = max(good, hard + 1)
        easy = max(easy, good + 1)

        cap = self.params.maximum_interval
        return {
            Rating.HARD: min(hard, cap),
            Rating.GOOD: min(good, cap),
            Rating.EASY: min(easy, cap),
        }

    def _graduate(self, card: MemoryState, stability: float, now: datetime) -> _Transition:
        interval = self._interval(card, stability, now)
        return _Transition(
            state=State.REVIEW,
            learning_steps=0,
            scheduled_days=interval,
            delay=timedelta(days=interval),
        )

    def _interval(self, card: MemoryState, stability: float, now: datetime) -> int:
        interval = self.model.next_interval(stability)
        if self.params.enable_fuzzing:
            seed = fuzz_seed(now, card.reps, card.difficulty, card.stability)
            interval = fuzz_interval(interval, self.params.maximum_interval, seed)
        return interval

    @staticmethod
    def _step(state: State, step: int, delay: timedelta) -> _Transition:
        return _Transition(
            state=state,
            learning_steps=step,
            scheduled_days=delay.days,
            delay=delay,
        )

    @staticmethod
    def _hard_delay(steps: tuple[timedelta, ...], step: int) -> timedelta:
        if step == 0 and len(steps) == 1:
            return steps[0] * 1.5
        if step == 0:
            return (steps[0] + steps[1]) / 2
        return steps[step]
