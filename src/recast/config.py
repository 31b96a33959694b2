"""Configuration loading from environment variables with validation."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Anchor all paths to the project root (two levels up from src/recast/)
_PROJECT_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RECAST_",
        case_sensitive=False,
    )

    # Credentials (loaded separately, no prefix)
    anthropic_api_key: str = ""
    fal_key: str = ""
    scraper_url: str = ""

    # Strict mode aborts on any failed stage instead of using sample data
    strict: bool = False

    # Text generation
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096
    temperature: float = 0.7

    # Image generation
    image_model: str = "fal-ai/flux/dev"
    image_size: str = "landscape_16_9"
    image_steps: int = 30
    image_guidance: float = 7.5
    image_poll_interval: float = 1.0
    image_queue_timeout: float = 300.0

    # Outbound HTTP
    http_timeout: float = 60.0
    sample_delay: float = 0.0

    # Storage paths (absolute, anchored to the project root).
    # results_dir defaults to <data_dir>/results.
    data_dir: Path = _PROJECT_DIR / "data"
    results_dir: Path | None = None

    # Progress sessions
    progress_ttl_seconds: int = 1800
    progress_cleanup_interval: int = 300

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 3001
    rate_limit_window: int = 900
    rate_limit_max: int = 100
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _default_results_dir(self) -> Settings:
        if self.results_dir is None:
            self.results_dir = self.data_dir / "results"
        return self

    @property
    def scraper_configured(self) -> bool:
        return bool(self.scraper_url) and "example" not in self.scraper_url

    @property
    def mode(self) -> str:
        return "strict" if self.strict else "permissive"


def get_settings() -> Settings:
    """Load settings from environment and .env file."""
    # Load .env from the project root regardless of cwd
    load_dotenv(_PROJECT_DIR / ".env")
    return Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        fal_key=os.getenv("FAL_KEY", ""),
        scraper_url=os.getenv("SCRAPER_WEBHOOK_URL", ""),
    )
