"""
FSRS-6 memory model: retrievability, stability and difficulty updates.

This is a pure computation module with no I/O.

Key concepts:
- Stability (S): days for retrievability to decay from 100% to 90%
- Difficulty (D): inherent hardness of the item (1-10)
- Retrievability (R): probability of recall after t days, R = (1 + F*t/S)^-w20
"""

import math

from mneme.domain.constants import (
    DIFFICULTY_MAX,
    DIFFICULTY_MIN,
    STABILITY_MAX,
    STABILITY_MIN,
)
from mneme.domain.models import Rating
from mneme.domain.parameters import SchedulerParameters


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_stability(stability: float) -> float:
    if math.isnan(stability):
        return STABILITY_MIN
    return clamp(stability, STABILITY_MIN, STABILITY_MAX)


def clamp_difficulty(difficulty: float) -> float:
    if math.isnan(difficulty):
        return DIFFICULTY_MIN
    return clamp(difficulty, DIFFICULTY_MIN, DIFFICULTY_MAX)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class MemoryModel:
    """
    FSRS-6 formulas bound to one parameter set.

    Stateless and side-effect free.
    """

    def __init__(self, parameters: SchedulerParameters):
        self.params = parameters
        self.w = parameters.weights

    def retrievability(self, elapsed_days: float, stability: float) -> float:
        """
        Probability of recall after `elapsed_days` at the given stability.

        Equals 1.0 at t=0 and 0.9 at t=S; strictly decreasing in t.
        """
        if elapsed_days <= 0:
            return 1.0
        stability = clamp_stability(stability)
        return (1.0 + self.params.factor * elapsed_days / stability) ** self.params.decay

    def initial_stability(self, rating: Rating) -> float:
        """S0(G) = w[G-1]"""
        return clamp_stability(self.w[rating - 1])

    def initial_difficulty(self, rating: Rating, clamped: bool = True) -> float:
        """D0(G) = w4 - e^(w5 * (G - 1)) + 1"""
        difficulty = self.w[4] - math.exp(self.w[5] * (rating - 1)) + 1.0
        return clamp_difficulty(difficulty) if clamped else difficulty

    def next_difficulty(self, difficulty: float, rating: Rating) -> float:
        """
        Shift difficulty by a rating-dependent delta, damped near the top of
        the scale, then mean-revert toward the initial Easy difficulty.
        """
        delta = -self.w[6] * (rating - 3)
        damped = difficulty + delta * (DIFFICULTY_MAX - difficulty) / 9.0
        target = self.initial_difficulty(Rating.EASY, clamped=False)
        reverted = self.w[7] * target + (1.0 - self.w[7]) * damped
        return clamp_difficulty(reverted)

    def next_recall_stability(
        self,
        stability: float,
        difficulty: float,
        retrievability: float,
        rating: Rating,
    ) -> float:
        """
        Stability after a successful recall:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1) * HP * EB)

        Growth shrinks as S grows and as R at review time approaches 1.
        """
        hard_penalty = self.w[15] if rating == Rating.HARD else 1.0
        easy_bonus = self.w[16] if rating == Rating.EASY else 1.0

        growth = (
            math.exp(self.w[8])
            * (11.0 - difficulty)
            * stability ** -self.w[9]
            * (math.exp(self.w[10] * (1.0 - retrievability)) - 1.0)
            * hard_penalty
            * easy_bonus
        )
        return clamp_stability(stability * (1.0 + growth))

    def next_forget_stability(
        self,
        stability: float,
        difficulty: float,
        retrievability: float,
    ) -> float:
        """
        Stability after a lapse. The long-term estimate is capped by the
        short-term floor S / e^(w17 * w18), so it never exceeds S.
        """
        long_term = (
            self.w[11]
            * difficulty ** -self.w[12]
            * ((stability + 1.0) ** self.w[13] - 1.0)
            * math.exp(self.w[14] * (1.0 - retrievability))
        )
        if self.params.enable_short_term:
            short_term = stability / math.exp(self.w[17] * self.w[18])
        else:
            short_term = stability
        return clamp_stability(min(long_term, short_term))

    def next_short_term_stability(self, stability: float, rating: Rating) -> float:
        """
        Stability after a same-day review:
        S' = S * e^(w17 * (G - 3 + w18)) * S^-w19
        """
        increase = math.exp(self.w[17] * (rating - 3 + self.w[18])) * stability ** -self.w[19]
        if rating in (Rating.GOOD, Rating.EASY):
            increase = max(increase, 1.0)
        return clamp_stability(stability * increase)

    def next_stability(
        self,
        stability: float,
        difficulty: float,
        elapsed_days: int,
        rating: Rating,
    ) -> float:
        """Dispatch to the same-day, lapse or recall update."""
        if elapsed_days < 1 and self.params.enable_short_term:
            return self.next_short_term_stability(stability, rating)

        retrievability = self.retrievability(elapsed_days, stability)
        if rating == Rating.AGAIN:
            return self.next_forget_stability(stability, difficulty, retrievability)
        return self.next_recall_stability(stability, difficulty, retrievability, rating)

    def next_interval(self, stability: float) -> int:
        """
        Days until retrievability falls to the desired retention, rounded
        half-up and clamped to [1, maximum_interval].
        """
        raw = (stability / self.params.factor) * (
            self.params.desired_retention ** (1.0 / self.params.decay) - 1.0
        )
        if not math.isfinite(raw):
            return self.params.maximum_interval
        return int(clamp(round_half_up(raw), 1, self.params.maximum_interval))
