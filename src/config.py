"""Configuration management from environment variables."""
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
REPORTS_DIR = DATA_DIR / "reports"
SALES_DB = Path(os.getenv("SALES_DB_PATH", str(DATA_DIR / "sales.db")))

# Ensure directories exist
DATA_DIR.mkdir(exist_ok=True)


class Config:
    """Application configuration."""

    # Dump format
    DUMP_ANCHOR: str = os.getenv("DUMP_ANCHOR", "ManuGuildHelper_SavedData")

    # Trading week boundary (weekday: 0=Monday .. 6=Sunday)
    TRADING_WEEK_WEEKDAY: int = int(os.getenv("TRADING_WEEK_WEEKDAY", "1"))
    TRADING_WEEK_HOUR: int = int(os.getenv("TRADING_WEEK_HOUR", "14"))
    TRADING_WEEK_MINUTE: int = int(os.getenv("TRADING_WEEK_MINUTE", "0"))
    TRADING_WEEK_TZ: str = os.getenv("TRADING_WEEK_TZ", "UTC")

    # Import
    IMPORT_MAX_RETRIES: int = int(os.getenv("IMPORT_MAX_RETRIES", "3"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API Security
    API_KEY: str | None = os.getenv("API_KEY")
    # Directory /import may read dumps from; path imports are refused when unset
    API_IMPORT_DIR: str | None = os.getenv("API_IMPORT_DIR")

    @classmethod
    def validate(cls) -> None:
        """Validate trading week and import settings."""
        errors = []
        if not 0 <= cls.TRADING_WEEK_WEEKDAY <= 6:
            errors.append("TRADING_WEEK_WEEKDAY must be between 0 and 6")
        if not 0 <= cls.TRADING_WEEK_HOUR <= 23:
            errors.append("TRADING_WEEK_HOUR must be between 0 and 23")
        if not 0 <= cls.TRADING_WEEK_MINUTE <= 59:
            errors.append("TRADING_WEEK_MINUTE must be between 0 and 59")
        try:
            ZoneInfo(cls.TRADING_WEEK_TZ)
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(f"TRADING_WEEK_TZ is not a known time zone: {cls.TRADING_WEEK_TZ}")
        if cls.IMPORT_MAX_RETRIES < 1:
            errors.append("IMPORT_MAX_RETRIES must be at least 1")
        if not cls.DUMP_ANCHOR:
            errors.append("DUMP_ANCHOR is required")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
