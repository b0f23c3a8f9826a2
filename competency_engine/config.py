"""Application configuration with validation."""
from typing import Literal, Optional
from functools import lru_cache
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Competency Assessment Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Persistence
    REPOSITORY_BACKEND: Literal["memory", "snowflake"] = "memory"

    # Snowflake
    SNOWFLAKE_ACCOUNT: Optional[str] = None
    SNOWFLAKE_USER: Optional[str] = None
    SNOWFLAKE_PASSWORD: Optional[SecretStr] = None
    SNOWFLAKE_DATABASE: Optional[str] = None
    SNOWFLAKE_SCHEMA: Optional[str] = None
    SNOWFLAKE_WAREHOUSE: Optional[str] = None
    SNOWFLAKE_ROLE: Optional[str] = None

    # Redis (completed results only; results are immutable)
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL_RESULTS: int = Field(default=3600, ge=1)  # 1 hour

    # Question source (competency service)
    QUESTION_SOURCE_URL: Optional[str] = None
    QUESTION_SOURCE_TIMEOUT: float = Field(default=5.0, gt=0, le=60)

    # Scoring
    DEFAULT_SCORING_SYSTEM: str = "weighted_likert"
    SCORE_DECIMAL_PLACES: int = Field(default=2, ge=0, le=6)

    @model_validator(mode="after")
    def validate_snowflake_settings(self):
        """Snowflake backend needs credentials."""
        if self.REPOSITORY_BACKEND == "snowflake":
            missing = [
                name for name in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"Snowflake backend requires: {', '.join(missing)}")
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production runs without debug."""
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
