"""Configuration settings for the scheduler."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))

# Learning settings
MIN_POOL_SIZE = 20  # new + queued words a learner should always have
REVIEW_WINDOW_DAYS = 7  # learned words come back after this many days
FREE_DAILY_LIMIT = 5


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///lexiloop.db"))
    echo: bool = field(default_factory=lambda: os.getenv("DATABASE_ECHO", "false").lower() == "true")


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
class LearningSettings:
    """Word scheduling settings."""
    min_pool_size: int = int(os.getenv("MIN_POOL_SIZE", str(MIN_POOL_SIZE)))
    lesson_size: int = int(os.getenv("LESSON_SIZE", "7"))
    practice_size: int = int(os.getenv("PRACTICE_SIZE", "10"))
    flashcard_size: int = int(os.getenv("FLASHCARD_SIZE", "20"))
    quiz_size: int = int(os.getenv("QUIZ_SIZE", "20"))
    review_window_days: int = int(os.getenv("REVIEW_WINDOW_DAYS", str(REVIEW_WINDOW_DAYS)))
    populate_limit: int = int(os.getenv("POPULATE_LIMIT", "50"))
    free_daily_limit: int = int(os.getenv("FREE_DAILY_LIMIT", str(FREE_DAILY_LIMIT)))


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("MONITORING_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("MONITORING_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if self.learning.min_pool_size < 1:
            raise ValueError("MIN_POOL_SIZE must be positive")

        for name in ("lesson_size", "practice_size", "flashcard_size", "quiz_size"):
            if getattr(self.learning, name) < 1:
                raise ValueError(f"{name.upper()} must be positive")

        if self.learning.review_window_days < 0:
            raise ValueError("REVIEW_WINDOW_DAYS cannot be negative")

        if self.learning.free_daily_limit < 0:
            raise ValueError("FREE_DAILY_LIMIT cannot be negative")


# Create global settings instance
settings = Settings()
settings.validate()
