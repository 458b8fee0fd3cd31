"""Configuration settings for the puzzle engine."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from bwordible.services.calendar_service import is_valid_date_key

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))

# Puzzle schedule defaults
DEFAULT_TIME_ZONE = "America/New_York"
DEFAULT_START_DATE = "2026-03-01"
DEFAULT_BASE_SEED = "bwordible-v1"
DEFAULT_STORAGE_KEY = "bwordible-state-v2"
CALENDAR_WINDOW_DAYS = 35


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    answers_file: str = os.getenv("ANSWERS_FILE", "answers.json")
    guesses_file: str = os.getenv("GUESSES_FILE", "allowed_guesses.json")

    @property
    def answers_path(self) -> Path:
        return self.data_dir / self.answers_file

    @property
    def guesses_path(self) -> Path:
        return self.data_dir / self.guesses_file


@dataclass
class PuzzleSettings:
    """Daily schedule settings."""
    time_zone: str = os.getenv("TIME_ZONE", DEFAULT_TIME_ZONE)
    start_date: str = os.getenv("START_DATE", DEFAULT_START_DATE)
    base_seed: str = os.getenv("BASE_SEED", DEFAULT_BASE_SEED)
    storage_key: str = os.getenv("STORAGE_KEY", DEFAULT_STORAGE_KEY)
    calendar_window_days: int = int(os.getenv("CALENDAR_WINDOW_DAYS", str(CALENDAR_WINDOW_DAYS)))


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///bwordible.db")
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
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_puzzle_settings() -> PuzzleSettings:
    """Get puzzle settings."""
    return PuzzleSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    puzzle: PuzzleSettings = field(default_factory=get_puzzle_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not is_valid_date_key(self.puzzle.start_date):
            raise ValueError(f"START_DATE must be a real YYYY-MM-DD date, got {self.puzzle.start_date!r}")

        try:
            ZoneInfo(self.puzzle.time_zone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown TIME_ZONE: {self.puzzle.time_zone!r}") from e

        if not self.puzzle.base_seed:
            raise ValueError("BASE_SEED must not be empty")

        if not self.puzzle.storage_key:
            raise ValueError("STORAGE_KEY must not be empty")

        if self.puzzle.calendar_window_days < 1:
            raise ValueError("CALENDAR_WINDOW_DAYS must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
