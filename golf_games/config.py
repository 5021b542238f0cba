from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_path: str = ".golf_games.sqlite3"
    putting_baseline_url: Optional[str] = None
    long_game_baseline_url: Optional[str] = None
    http_timeout_seconds: float = 20.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="GOLF_GAMES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
