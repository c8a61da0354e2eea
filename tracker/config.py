"""
Application configuration read from the environment (and a local .env file).
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Final, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _list(name: str) -> frozenset[str]:
    return frozenset(s.strip() for s in os.getenv(name, "").split(",") if s.strip())


class Config:
    STORE_URL: Final[str] = os.getenv("STORE_URL", "")
    STORE_KEY: Final[str] = os.getenv("STORE_KEY", "")
    STORE_TIMEOUT: Final[float] = float(os.getenv("STORE_TIMEOUT", "10"))
    STORE_RETRIES: Final[int] = int(os.getenv("STORE_RETRIES", "3"))
    SEED_PATH: Final[Path] = Path(os.getenv("SEED_PATH", "data/seed.json"))
    DEFAULT_BUDGET: Final[Decimal] = Decimal(os.getenv("DEFAULT_BUDGET", "50000"))
    CURRENCY: Final[str] = os.getenv("CURRENCY", "$")
    TIMEZONE: Final[str] = os.getenv("TIMEZONE", "")
    REQUIRE_APPROVAL: Final[bool] = _flag("REQUIRE_APPROVAL")
    APPROVED_USERS: Final[frozenset[str]] = _list("APPROVED_USERS")
    LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        if cls.STORE_URL and not cls.STORE_KEY:
            raise ValueError("STORE_URL is set but STORE_KEY is missing")
        if cls.STORE_TIMEOUT <= 0:
            raise ValueError("STORE_TIMEOUT must be positive")
        if cls.DEFAULT_BUDGET <= 0:
            raise ValueError("DEFAULT_BUDGET must be positive")
        cls.tz()

    @classmethod
    def tz(cls) -> Optional[ZoneInfo]:
        """Zone used for day/month bucketing; None means the platform's local zone."""
        if not cls.TIMEZONE:
            return None
        try:
            return ZoneInfo(cls.TIMEZONE)
        except ZoneInfoNotFoundError as e:
            raise ValueError(f"Unknown TIMEZONE {cls.TIMEZONE!r}") from e
