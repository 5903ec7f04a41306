"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MARKETGAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "marketgame"
    app_env: Literal["development", "staging", "production"] = "development"

    # Data source
    data_dir: Path = Path("data")
    game_id: str = "MREtest"

    # Game rules
    initial_capital: float = 100000.0

    # Analytics
    bump_target_points: int = 60
    drawdown_reversal_threshold_pct: float = 5.0

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("initial_capital")
    @classmethod
    def validate_initial_capital(cls, v: float) -> float:
        """Starting capital is the denominator of every return figure."""
        if v <= 0:
            raise ValueError("initial_capital must be positive")
        return v

    @field_validator("bump_target_points")
    @classmethod
    def validate_bump_target_points(cls, v: int) -> int:
        """Validate the rank series downsampling target."""
        if v <= 0:
            raise ValueError("bump_target_points must be positive")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def leaderboard_path(self) -> Path:
        return self.data_dir / f"Rankings - {self.game_id}.csv"

    def performance_path(self, player_name: str) -> Path:
        return self.data_dir / f"Portfolio Performance - {player_name}.csv"

    def holdings_path(self, player_name: str) -> Path:
        return self.data_dir / f"Holdings - {player_name}.csv"

    def transactions_path(self, player_name: str) -> Path:
        return self.data_dir / f"Portfolio Transactions - {player_name}.csv"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
