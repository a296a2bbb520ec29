from dataclasses import replace
from datetime import timedelta

import pytest

from mneme.application.stats.metrics_calculator import MetricsCalculator
from mneme.application.stats.service import DeckStats, DeckStatsService, is_due
from mneme.domain.models import MemoryState, State


@pytest.fixture
def calculator(scheduler):
    return MetricsCalculator(scheduler)


@pytest.fixture
def service(scheduler):
    return DeckStatsService(scheduler)


@pytest.fixture
def deck(t0, review_card):
    return {
        "fresh": MemoryState(due=t0 - timedelta(hours=1)),
        "learning": MemoryState(
            due=t0 + timedelta(minutes=5),
            stability=2.3,
            difficulty=5.0,
            learning_steps=1,
            reps=1,
            state=State.LEARNING,
            last_review=t0 - timedelta(minutes=5),
        ),
        "overdue": replace(review_card, due=t0 - timedelta(days=3)),
        "due-now": review_card,
        "later": replace(review_card, due=t0 + timedelta(days=4)),
    }


# --- MetricsCalculator ---


def test_metrics_calculator_retrievability(calculator, review_card, t0):
    # Ten days after the last review with S=10, recall probability is 90%
    enriched = calculator.enrich("c1", review_card, t0)

    assert enriched.current_retrievability == pytest.approx(0.9)
    assert enriched.stability == 10.0
    assert enriched.difficulty == 5.0
    assert enriched.card_id == "c1"


def test_metrics_calculator_lapse_rate(calculator, review_card, t0):
    enriched = calculator.enrich("c1", review_card, t0)
    assert enriched.lapse_rate == pytest.approx(1 / 6)


def test_metrics_calculator_days_overdue(calculator, review_card, t0):
    enriched = calculator.enrich("c1", review_card, t0 + timedelta(days=2, hours=3))
    assert enriched.days_overdue == 2

    early = calculator.enrich("c1", review_card, t0 - timedelta(days=1))
    assert early.days_overdue == -1


def test_metrics_calculator_new_card(calculator, t0):
    enriched = calculator.enrich("c1", MemoryState(due=t0), t0)
    assert enriched.current_retrievability is None
    assert enriched.lapse_rate is None
    assert enriched.days_overdue is None


# --- Due selection ---


def test_is_due(review_card, t0):
    assert is_due(review_card, t0)
    assert is_due(review_card, t0 + timedelta(seconds=1))
    assert not is_due(review_card, t0 - timedelta(seconds=1))


def test_due_cards_sorted_by_due(service, deck, t0):
    assert service.due_cards(deck, t0) == ["overdue", "fresh", "due-now"]


def test_due_cards_limit(service, deck, t0):
    assert service.due_cards(deck, t0, limit=2) == ["overdue", "fresh"]


def test_due_cards_empty_deck(service, t0):
    assert service.due_cards({}, t0) == []


# --- Deck stats ---


def test_deck_stats(service, deck, t0):
    stats = service.deck_stats(deck, t0)
    assert stats == DeckStats(total=5, new=1, learning=1, review=3, due=3, overdue=1)


def test_deck_stats_empty(service, t0):
    assert service.deck_stats({}, t0) == DeckStats(0, 0, 0, 0, 0, 0)


# --- Weak cards ---


def test_get_weak_cards(service, t0, review_card):
    cards = {
        "solid": review_card,
        "fragile": MemoryState(
            due=t0,
            stability=2.0,
            difficulty=6.0,
            reps=3,
            state=State.REVIEW,
            last_review=t0 - timedelta(days=1),
        ),
        "new": MemoryState(due=t0),
    }
    weak = service.get_weak_cards(cards, t0, lapse_threshold=5)

    assert [c.card_id for c in weak] == ["fragile"]


def test_get_weak_cards_by_lapses(service, t0, review_card):
    weak = service.get_weak_cards({"c1": review_card}, t0)
    assert [c.card_id for c in weak] == ["c1"]


def test_get_weak_cards_by_retrievability(service, t0, review_card):
    cards = {"c1": review_card}
    later = t0 + timedelta(days=200)
    weak = service.get_weak_cards(cards, later, lapse_threshold=5)
    assert len(weak) == 1
    assert weak[0].current_retrievability < 0.7


def test_get_enriched_stats(service, deck, t0):
    enriched = service.get_enriched_stats(deck, t0)
    assert [e.card_id for e in enriched] == list(deck)
