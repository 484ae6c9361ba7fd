from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    # Default validation options, overridable per validator and per call
    VALIDATION_ABORT_EARLY: bool = False
    VALIDATION_ALLOW_UNKNOWN: bool = True
    VALIDATION_STRIP_UNKNOWN: bool = True

    # Warn when a property gets a second type-defining annotation
    WARN_ON_TYPE_OVERRIDE: bool = True

    model_config = SettingsConfigDict(
        env_prefix="FLEET_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
