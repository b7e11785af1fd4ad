"""Configuration management"""
import os
from pathlib import Path
from dotenv import load_dotenv
import pytz

from habitquest.exceptions import ConfigurationError

load_dotenv()

# Persistence keys (must stay stable across sessions)
STATS_KEY: str = os.getenv("HABITQUEST_STATS_KEY", "userGamificationStats")
HISTORY_KEY: str = os.getenv("HABITQUEST_HISTORY_KEY", "habitCompletionHistory")

# Completion history is FIFO-trimmed to this many entries
HISTORY_LIMIT: int = int(os.getenv("HABITQUEST_HISTORY_LIMIT", "100"))

# Upper bound on the backward walk of the streak calculators
STREAK_LOOKBACK_DAYS: int = int(os.getenv("HABITQUEST_STREAK_LOOKBACK_DAYS", "3650"))

# Trailing window used for perfect days
PERFECT_DAYS_WINDOW: int = int(os.getenv("HABITQUEST_PERFECT_DAYS_WINDOW", "7"))

# Storage
# - 'memory': process-local dict (tests, server-side sessions)
# - 'file': one JSON document per key under DATA_PATH
# - 'redis': REDIS_URL
STORAGE_BACKEND: str = os.getenv("HABITQUEST_STORAGE_BACKEND", "file")
DATA_PATH: Path = Path(os.getenv("HABITQUEST_DATA_PATH", "./data"))
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# IANA timezone that defines "today" and the hour of naive timestamps
TIMEZONE: str = os.getenv("HABITQUEST_TIMEZONE", "UTC")

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

VALID_BACKENDS = ("memory", "file", "redis")


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if STORAGE_BACKEND not in VALID_BACKENDS:
        raise ConfigurationError(
            f"Unknown storage backend: '{STORAGE_BACKEND}'. "
            f"Must be one of: {', '.join(VALID_BACKENDS)}",
            config_key="HABITQUEST_STORAGE_BACKEND",
        )
    if HISTORY_LIMIT <= 0:
        raise ConfigurationError(
            "HABITQUEST_HISTORY_LIMIT must be positive",
            config_key="HABITQUEST_HISTORY_LIMIT",
        )
    if STREAK_LOOKBACK_DAYS <= 0:
        raise ConfigurationError(
            "HABITQUEST_STREAK_LOOKBACK_DAYS must be positive",
            config_key="HABITQUEST_STREAK_LOOKBACK_DAYS",
        )
    if PERFECT_DAYS_WINDOW <= 0:
        raise ConfigurationError(
            "HABITQUEST_PERFECT_DAYS_WINDOW must be positive",
            config_key="HABITQUEST_PERFECT_DAYS_WINDOW",
        )
    try:
        pytz.timezone(TIMEZONE)
    except pytz.exceptions.UnknownTimeZoneError:
        raise ConfigurationError(
            f"Invalid timezone: '{TIMEZONE}'. Use IANA timezone (e.g., 'Europe/Stockholm')",
            config_key="HABITQUEST_TIMEZONE",
        )
