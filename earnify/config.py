"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # App
    app_name: str = "Earnify API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:5173"
    enable_jobs: bool = True

    # Clock
    timezone: str = "UTC"
    tick_interval_seconds: float = 1.0
    rollover_check_minute: int = 0

    # Storage
    storage_backend: str = "file"
    storage_dir: str = "./data"
    storage_key: str = "earnify_data"

    # Rewards
    recharge_cost: int = 28

    # Performance tuning
    slow_request_log_threshold_ms: int = 0

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
