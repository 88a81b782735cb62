"""
Mejoras Tracker — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # Security
    ALLOWED_USER_IDS: list[int] = []

    # SQLite key-value file holding both JSON collections
    DATABASE_PATH: str = "data/mejoras.db"
    TEMPLATES_KEY: str = "mejoras"
    INSTANCES_KEY: str = "tasks"

    # Day boundaries and time limits are evaluated in this zone
    TIMEZONE: str = "America/La_Paz"

    # Expiry tick
    TICK_INTERVAL_SECONDS: int = 60

    # Seed two example mejoras when the template list is empty
    SEED_DEFAULT_MEJORAS: bool = True

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("TICK_INTERVAL_SECONDS", mode="before")
    @classmethod
    def parse_interval(cls, v: str | int) -> int:
        interval = int(v)
        if interval < 1:
            raise ValueError("TICK_INTERVAL_SECONDS must be positive")
        return interval

    @field_validator("SEED_DEFAULT_MEJORAS", mode="before")
    @classmethod
    def parse_flag(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in ("1", "true", "yes", "on")


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/mejoras.db"),
        TEMPLATES_KEY=os.getenv("TEMPLATES_KEY", "mejoras"),
        INSTANCES_KEY=os.getenv("INSTANCES_KEY", "tasks"),
        TIMEZONE=os.getenv("TIMEZONE", "America/La_Paz"),
        TICK_INTERVAL_SECONDS=os.getenv("TICK_INTERVAL_SECONDS", "60"),
        SEED_DEFAULT_MEJORAS=os.getenv("SEED_DEFAULT_MEJORAS", "true"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
