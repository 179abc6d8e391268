"""Engine configuration."""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Development mode: human-readable logs instead of JSON lines
    dev_mode: bool = True

    # Logging
    log_level: str = "info"

    # Overrides every catalog default severity (None = per-category values)
    default_severity: float | None = None

    # Spatial subsystem
    spatial_default_level: Literal["beginner", "intermediate", "advanced"] = "advanced"
    preserve_semantics: bool = True
    metrics_history_limit: int = 1000
    zone_history_limit: int = 100

    # Seed for the engine's random source (None = system entropy)
    random_seed: int | None = None

    @model_validator(mode="after")
    def _validate_ranges(self) -> "Settings":
        if self.default_severity is not None and not 0.0 <= self.default_severity <= 1.0:
            raise ValueError("DEFAULT_SEVERITY must be between 0 and 1")
        if self.metrics_history_limit < 1 or self.zone_history_limit < 1:
            raise ValueError("History limits must be positive")
        return self


settings = Settings()
