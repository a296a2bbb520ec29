from datetime import timedelta

import pytest
from pydantic import ValidationError

from mneme.application.config import SchedulerConfig, config_files, resolve_config
from mneme.domain.constants import DEFAULT_WEIGHTS
from mneme.domain.parameters import SchedulerParameters


def test_config_defaults():
    config = SchedulerConfig()
    assert config.weights == list(DEFAULT_WEIGHTS)
    assert config.desired_retention == 0.9
    assert config.maximum_interval == 36500
    assert config.learning_steps == [1.0, 10.0]
    assert config.relearning_steps == [10.0]
    assert config.enable_fuzzing is False
    assert config.enable_short_term is True


def test_config_defaults_match_parameter_defaults():
    assert SchedulerConfig().to_parameters() == SchedulerParameters()


def test_config_env_override(monkeypatch):
    monkeypatch.setenv("MNEME_DESIRED_RETENTION", "0.85")
    monkeypatch.setenv("MNEME_ENABLE_FUZZING", "true")
    monkeypatch.setenv("MNEME_LEARNING_STEPS", "[5, 30]")

    config = SchedulerConfig()

    assert config.desired_retention == 0.85
    assert config.enable_fuzzing is True
    assert config.learning_steps == [5.0, 30.0]


def test_config_toml_file(isolated_home):
    path = isolated_home / ".config" / "mneme" / "config.toml"
    path.parent.mkdir(parents=True)
    path.write_text("desired_retention = 0.8\nmaximum_interval = 365\n")

    assert config_files()[0] == path
    config = SchedulerConfig()

    assert config.desired_retention == 0.8
    assert config.maximum_interval == 365


def test_env_beats_toml_file(isolated_home, monkeypatch):
    path = isolated_home / ".mneme.toml"
    path.write_text("maximum_interval = 365\n")
    monkeypatch.setenv("MNEME_MAXIMUM_INTERVAL", "100")

    assert SchedulerConfig().maximum_interval == 100


def test_config_migrates_fsrs5_weights():
    config = SchedulerConfig(weights=[0.5] * 19)
    assert len(config.weights) == 21
    assert config.weights[19:] == [0.0, 0.5]


@pytest.mark.parametrize(
    "overrides",
    [
        {"weights": [1.0] * 20},
        {"desired_retention": 0.5},
        {"desired_retention": 0.995},
        {"maximum_interval": 0},
        {"learning_steps": [1.0, -10.0]},
    ],
)
def test_config_rejects_invalid_values(overrides):
    with pytest.raises(ValidationError):
        SchedulerConfig(**overrides)


def test_to_parameters():
    config = SchedulerConfig(
        desired_retention=0.95,
        learning_steps=[2.0],
        relearning_steps=[],
        enable_short_term=True,
    )
    params = config.to_parameters()

    assert isinstance(params, SchedulerParameters)
    assert params.desired_retention == 0.95
    assert params.learning_steps == (timedelta(minutes=2),)
    assert params.relearning_steps == ()


def test_resolve_config_ignores_unset_overrides(monkeypatch):
    monkeypatch.setenv("MNEME_MAXIMUM_INTERVAL", "200")
    config = resolve_config({"maximum_interval": None, "desired_retention": 0.8})
    assert config.maximum_interval == 200
    assert config.desired_retention == 0.8
