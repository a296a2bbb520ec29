"""
Card Record Adapter — maps memory-states to the persisted flashcard record.

Records use the application's storage layout: camelCase keys, the state as
an upper-case string and ISO-8601 timestamps. Deck files hold a mapping of
card id -> record and may be YAML or JSON.
"""

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from mneme.domain.models import MemoryState, State

logger = logging.getLogger(__name__)

STATE_TO_STORAGE = {
    State.NEW: "NEW",
    State.LEARNING: "LEARNING",
    State.REVIEW: "REVIEW",
    State.RELEARNING: "RELEARNING",
}
STORAGE_TO_STATE = {v: k for k, v in STATE_TO_STORAGE.items()}

_INT_FIELDS = {
    "elapsedDays": "elapsed_days",
    "scheduledDays": "scheduled_days",
    "learningSteps": "learning_steps",
    "reps": "reps",
    "lapses": "lapses",
}
_FLOAT_FIELDS = {"stability": "stability", "difficulty": "difficulty"}


def _parse_timestamp(key: str, value: Any) -> datetime:
    # YAML loads unquoted ISO timestamps as datetime already
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    raise ValueError(f"Field '{key}' is not an ISO-8601 timestamp: {value!r}")


def state_from_storage(value: Any) -> State:
    """Storage string -> State. Unknown values fall back to NEW."""
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return State(value)
        except ValueError:
            pass
    elif isinstance(value, str) and value.upper() in STORAGE_TO_STATE:
        return STORAGE_TO_STATE[value.upper()]

    logger.warning("Unknown card state %r; treating as NEW", value)
    return State.NEW


def to_record(card: MemoryState) -> dict[str, Any]:
    """Serialize a memory-state into a storage record."""
    return {
        "due": card.due.isoformat(),
        "stability": card.stability,
        "difficulty": card.difficulty,
        "elapsedDays": card.elapsed_days,
        "scheduledDays": card.scheduled_days,
        "learningSteps": card.learning_steps,
        "reps": card.reps,
        "lapses": card.lapses,
        "state": STATE_TO_STORAGE[card.state],
        "lastReview": card.last_review.isoformat() if card.last_review else None,
    }


def from_record(record: Mapping[str, Any]) -> MemoryState:
    """
    Deserialize a storage record into a memory-state.

    Missing counters default to zero; a missing or malformed `due` raises
    ValueError naming the field.
    """
    if "due" not in record or record["due"] is None:
        raise ValueError("Field 'due' is required")

    kwargs: dict[str, Any] = {"due": _parse_timestamp("due", record["due"])}

    for key, attr in _FLOAT_FIELDS.items():
        value = record.get(key)
        if value is None:
            continue
        try:
            kwargs[attr] = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Field '{key}' must be a number: {value!r}") from None

    for key, attr in _INT_FIELDS.items():
        value = record.get(key)
        if value is None:
            continue
        try:
            kwargs[attr] = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Field '{key}' must be an integer: {value!r}") from None

    kwargs["state"] = state_from_storage(record.get("state", "NEW"))

    last_review = record.get("lastReview")
    if last_review is not None:
        kwargs["last_review"] = _parse_timestamp("lastReview", last_review)

    return MemoryState(**kwargs)


def load_deck(path: Path) -> dict[str, MemoryState]:
    """
    Load a deck file (YAML or JSON) mapping card ids to records.
    An empty or missing file yields an empty deck.
    """
    if not path.exists():
        return {}

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of card id -> record")

    deck: dict[str, MemoryState] = {}
    for card_id, record in data.items():
        if not isinstance(record, dict):
            raise ValueError(f"{path}: card '{card_id}' is not a mapping")
        try:
            deck[str(card_id)] = from_record(record)
        except ValueError as e:
            raise ValueError(f"{path}: card '{card_id}': {e}") from e
    return deck


def dump_deck(path: Path, deck: Mapping[str, MemoryState]) -> None:
    """Write a deck file. `.json` files are written as JSON, anything else as YAML."""
    records = {card_id: to_record(card) for card_id, card in deck.items()}
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() == ".json":
        text = json.dumps(records, indent=2)
    else:
        text = yaml.safe_dump(records, sort_keys=False, allow_unicode=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote %d cards to %s", len(records), path)
