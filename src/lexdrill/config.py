"""Configuration settings for the scheduler and its stores."""
import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

# Scheduling rules
REVIEW_INTERVALS = [1, 3, 7]  # days until next review, indexed by streak - 1
NEVER_CORRECT_DATE = date(2000, 1, 1)  # last_correct for words never answered correctly


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///lexdrill.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class SchedulerSettings:
    """Session selection and repetition settings."""
    session_size: int = int(os.getenv("SESSION_SIZE", "20"))
    wrong_ratio: float = float(os.getenv("WRONG_RATIO", "0.4"))
    new_ratio: float = float(os.getenv("NEW_RATIO", "0.4"))
    stale_after_days: int = int(os.getenv("STALE_AFTER_DAYS", "7"))
    review_intervals: list[int] = field(default_factory=lambda: list(REVIEW_INTERVALS))
    never_correct_date: date = NEVER_CORRECT_DATE


@dataclass
class MetricsSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_scheduler_settings() -> SchedulerSettings:
    """Get scheduler settings."""
    return SchedulerSettings()


def get_metrics_settings() -> MetricsSettings:
    """Get metrics settings."""
    return MetricsSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    scheduler: SchedulerSettings = field(default_factory=get_scheduler_settings)
    metrics: MetricsSettings = field(default_factory=get_metrics_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        scheduler = self.scheduler

        if scheduler.session_size < 1:
            raise ValueError("SESSION_SIZE must be positive")

        for name, ratio in (("WRONG_RATIO", scheduler.wrong_ratio), ("NEW_RATIO", scheduler.new_ratio)):
            if ratio < 0 or ratio > 1:
                raise ValueError(f"{name} must be between 0 and 1")

        if scheduler.wrong_ratio + scheduler.new_ratio > 1:
            raise ValueError("WRONG_RATIO + NEW_RATIO cannot exceed 1")

        if scheduler.stale_after_days < 0:
            raise ValueError("STALE_AFTER_DAYS cannot be negative")

        intervals = scheduler.review_intervals
        if not intervals:
            raise ValueError("review_intervals cannot be empty")
        if any(later <= earlier for earlier, later in zip(intervals, intervals[1:])):
            raise ValueError("review_intervals must be strictly increasing")


# Create global settings instance
settings = Settings()
settings.validate()
