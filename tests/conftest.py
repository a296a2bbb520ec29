import os
from datetime import datetime, timedelta, timezone

import pytest

from mneme.application.scheduler import Scheduler
from mneme.domain.models import MemoryState, State
from mneme.domain.parameters import SchedulerParameters


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Points HOME at a temp dir and drops MNEME_* env vars to isolate config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in [k for k in os.environ if k.startswith("MNEME_")]:
        monkeypatch.delenv(key)
    return home


@pytest.fixture
def t0():
    return datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def params():
    return SchedulerParameters()


@pytest.fixture
def scheduler(params):
    return Scheduler(params)


@pytest.fixture
def review_card(t0):
    """A Review-state card last seen 10 days before t0 (stability 10, difficulty 5)."""
    return MemoryState(
        due=t0,
        stability=10.0,
        difficulty=5.0,
        elapsed_days=8,
        scheduled_days=10,
        learning_steps=0,
        reps=6,
        lapses=1,
        state=State.REVIEW,
        last_review=t0 - timedelta(days=10),
    )
