"""
Centralized configuration using pydantic-settings.

How it works:
- Reads environment variables automatically (e.g., JOBS env var → Settings.JOBS)
- Falls back to defaults defined here if env vars are not set
- Can also read from a .env file in the project root

The CLI (worker/main.py) builds a fresh Settings(**overrides) from its flags,
so a bad flag fails exactly like a bad env var: before any job is created.
"""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Workload ────────────────────────────────────────────────
    JOBS: int = Field(default=12, ge=0)          # jobs seeded per run
    MAX_RETRIES: int = Field(default=2, ge=0)    # retry cap copied onto every job
    MEAN_MS: int = 300                           # service time mean (normal distribution)
    STDDEV_MS: int = Field(default=100, gt=0)    # service time standard deviation
    SEED: Optional[int] = None                   # fix the random source for reproducible runs

    # ── Retry ───────────────────────────────────────────────────
    BACKOFF_BASE_MS: int = Field(default=100, gt=0)  # 100, 200, 400, 800 ... ms

    # ── Storage ─────────────────────────────────────────────────
    DB_PATH: str = "dispatcher.db"

    # ── App ─────────────────────────────────────────────────────
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    @property
    def log_level(self) -> int:
        """LOG_LEVEL as a logging constant; case-insensitive, unknown names fall back to INFO."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO

    @property
    def database_url(self) -> str:
        """Async connection string for FastAPI (uses aiosqlite driver)."""
        return f"sqlite+aiosqlite:///{self.DB_PATH}"

    @property
    def sync_database_url(self) -> str:
        """Sync connection string for the recorder."""
        return f"sqlite:///{self.DB_PATH}"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import this everywhere
settings = Settings()
