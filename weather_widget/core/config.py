from __future__ import annotations

from pathlib import Path

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from weather_widget.models.weather import UnitSystem


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    weather_api_key: str = Field(min_length=1)
    weather_base_url: AnyHttpUrl = Field(default="https://api.openweathermap.org/data/2.5")
    weather_timeout_seconds: float = Field(default=10.0, ge=1.0, le=30.0)
    request_deadline_seconds: float = Field(default=15.0, gt=0.0, le=120.0)

    default_city: str = Field(default="Kauniainen", max_length=128)
    default_units: UnitSystem = Field(default=UnitSystem.METRIC)
    cache_ttl_seconds: int = Field(default=30 * 60, ge=0, le=60 * 60 * 24)
    history_limit: int = Field(default=5, ge=1, le=50)
    favorites_limit: int = Field(default=10, ge=1, le=100)

    # Unset keeps the local store in memory for the lifetime of the process.
    store_path: Path | None = Field(default=None)
    initialize_on_startup: bool = Field(default=True)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
