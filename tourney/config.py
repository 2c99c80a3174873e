"""Application configuration."""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_env: str = "development"
    log_level: str = "INFO"
    json_logs: bool = False

    # Seating
    default_table_seats: int = Field(
        default=9,
        ge=2,
        description="Seat capacity of newly created tables",
    )

    # Payouts
    payout_ratio: float = Field(
        default=0.4,
        gt=0,
        le=1,
        description="Share of entrants paid (rounded up)",
    )

    # Clock
    tick_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between clock ticks driven by ClockTicker",
    )

    # 기본 토너먼트 설정 (configure() 호출 전 기본값)
    buy_in: int = Field(default=0, ge=0)
    starting_chips: int = Field(default=0, ge=0)
    rebuy_amount: int = Field(default=0, ge=0)
    rebuy_chips: int = Field(default=0, ge=0)
    max_rebuy_level: int = Field(default=0, ge=0)
    addon_amount: int = Field(default=0, ge=0)
    addon_chips: int = Field(default=0, ge=0)
    max_addon_level: int = Field(default=0, ge=0)
    break_interval: int = Field(
        default=0,
        ge=0,
        description="Levels between breaks (0 disables breaks)",
    )
    break_duration_minutes: int = Field(default=0, ge=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = {
        "env_prefix": "TOURNEY_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
