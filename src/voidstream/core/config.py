"""Application configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        "env_prefix": "VOIDSTREAM_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }

    # Backend credentials use no prefix to match provider conventions
    supabase_url: str = Field(default="", validation_alias="SUPABASE_URL")
    supabase_anon_key: str = Field(default="", validation_alias="SUPABASE_ANON_KEY")
    posts_table: str = "posts"

    # Paths
    data_dir: Path = Path("./data")

    # Logging
    log_level: str = "INFO"

    # Posts
    max_post_length: int = 500
    post_ttl_hours: int = 24

    # Remote calls
    retry_attempts: int = 3
    retry_delay_seconds: float = 1.0
    request_timeout_seconds: float = 10.0

    # Countdown
    countdown_interval_seconds: float = 1.0
    expiry_fade_seconds: float = 2.0

    # Live updates
    realtime_debounce_seconds: float = 0.5
    realtime_poll_seconds: float = 5.0
    # Re-fetch cadence when no live subscription could be established
    fallback_refresh_seconds: float = 30.0

    # Recovery loop after a failed fetch
    fetch_recovery_seconds: float = 3.0

    # UI
    notice_lifetime_seconds: float = 5.0

    @property
    def is_configured(self) -> bool:
        return bool(self.supabase_url.strip() and self.supabase_anon_key.strip())

    @property
    def rest_url(self) -> str:
        return self.supabase_url.rstrip("/") + "/rest/v1"

    @property
    def app_log_path(self) -> Path:
        return self.data_dir / "logs" / "voidstream.log"

    @property
    def history_path(self) -> Path:
        return self.data_dir / "logs" / ".board_history"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
