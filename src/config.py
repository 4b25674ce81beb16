from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("OFF", "CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging settings; OFF keeps stderr quiet for automated consumers
    log_level: str = "OFF"
    log_format: str = "%(levelname)s %(name)s: %(message)s"

    # Output settings
    decimal_precision: int = Field(default=4, ge=0, le=18)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def logging_enabled(self) -> bool:
        return self.log_level != "OFF"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
