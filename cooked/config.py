"""Application settings via pydantic-settings. Loads from environment and .env file."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service configuration.

    Every value can be overridden with a ``COOKED_``-prefixed environment
    variable, e.g. ``COOKED_LOAD_TIMEOUT=90``.
    """

    # Sleeper
    sleeper_api_url: str = "https://api.sleeper.app/v1"
    sleeper_cdn_url: str = "https://sleepercdn.com"

    # HTTP
    request_timeout: float = 15.0
    connect_timeout: float = 5.0
    load_timeout: float = 60.0  # Whole league load, all seasons
    cors_origins: List[str] = [
        "http://localhost:3000",  # Next.js development server
        "http://127.0.0.1:3000",
    ]

    # Aggregation bounds
    matchup_weeks: int = 17
    transaction_rounds: int = 16

    # Records
    in_season_week_cutoff: int = 10
    full_season_week_cutoff: int = 18
    records_limit: int = 10
    recent_trades_limit: int = 10

    # Player directory cache, disabled unless a path is given
    player_cache_path: Optional[str] = None
    player_cache_ttl_seconds: int = 86400

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "COOKED_", "env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
