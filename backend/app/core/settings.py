from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TRANSPORT_FEES = {
    "日暮里": 900,
    "蓮沼": 1500,
    "オンライン": 0,
}


class Settings(BaseSettings):
    """Runtime configuration, read from ``TUTORING_*`` environment variables."""

    app_name: str = "Tutoring Rules"
    api_version: str = "1.0.0"
    environment: str = "development"
    database_url: str = "sqlite:///./tutoring.db"
    log_level: str = "INFO"
    hourly_rate: int = Field(default=3500, ge=0)
    # JSON object in the environment, e.g. TUTORING_TRANSPORT_FEES='{"日暮里": 900}'
    transport_fees: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_TRANSPORT_FEES))
    # Exposes /debug/clock so the reference date can be moved for testing.
    debug_clock_enabled: Optional[bool] = None

    model_config = SettingsConfigDict(
        env_prefix="TUTORING_",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _default_debug_clock(self) -> "Settings":
        if self.debug_clock_enabled is None:
            self.debug_clock_enabled = self.environment != "production"
        return self


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
