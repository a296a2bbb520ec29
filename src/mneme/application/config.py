import logging
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mneme.domain.constants import (
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS,
    DEFAULT_WEIGHTS,
)
from mneme.domain.errors import InvalidParametersError
from mneme.domain.parameters import SchedulerParameters, migrate_weights

logger = logging.getLogger(__name__)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/mneme/config.toml",
        Path.home() / ".mneme.toml",
    ]


def _minutes(steps: tuple[timedelta, ...]) -> list[float]:
    return [step.total_seconds() / 60.0 for step in steps]


class SchedulerConfig(BaseSettings):
    """
    Scheduler configuration.
    Supports loading from:
    1. Environment variables (MNEME_*)
    2. Config file (~/.config/mneme/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="MNEME_",
        extra="ignore",
    )

    # Model
    weights: list[float] = Field(default_factory=lambda: list(DEFAULT_WEIGHTS))
    desired_retention: float = Field(default=DEFAULT_DESIRED_RETENTION, ge=0.7, le=0.99)
    maximum_interval: int = Field(default=DEFAULT_MAXIMUM_INTERVAL, ge=1)

    # Short-term steps, in minutes
    learning_steps: list[float] = Field(
        default_factory=lambda: _minutes(DEFAULT_LEARNING_STEPS)
    )
    relearning_steps: list[float] = Field(
        default_factory=lambda: _minutes(DEFAULT_RELEARNING_STEPS)
    )

    # Flags
    enable_fuzzing: bool = False
    enable_short_term: bool = True

    verbose: int = 0

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Init settings (CLI overrides) win, then env, then the first config file found
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v: list[float]) -> list[float]:
        try:
            return list(migrate_weights(v))
        except InvalidParametersError as e:
            raise ValueError(str(e)) from None

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def check_steps(cls, v: list[float]) -> list[float]:
        if any(minutes <= 0 for minutes in v):
            raise ValueError("step durations must be positive minutes")
        return v

    def to_parameters(self) -> SchedulerParameters:
        """Freeze this configuration into immutable scheduler parameters."""
        return SchedulerParameters(
            weights=tuple(self.weights),
            desired_retention=self.desired_retention,
            maximum_interval=self.maximum_interval,
            learning_steps=tuple(timedelta(minutes=m) for m in self.learning_steps),
            relearning_steps=tuple(timedelta(minutes=m) for m in self.relearning_steps),
            enable_fuzzing=self.enable_fuzzing,
            enable_short_term=self.enable_short_term,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> SchedulerConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in SchedulerConfig
    2. ~/.config/mneme/config.toml (if exists)
    3. Environment variables (MNEME_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    config = SchedulerConfig(**overrides)
    logger.info(
        "Resolved scheduler config: retention=%s maximum_interval=%s fuzzing=%s short_term=%s",
        config.desired_retention,
        config.maximum_interval,
        config.enable_fuzzing,
        config.enable_short_term,
    )
    return config
