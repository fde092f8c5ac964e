"""
Configuration management for GrumbleJar.

Loads settings from environment variables.
"""

import logging
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration."""

    # Database
    database_path: str = "data/grumblejar.db"

    # Undo window for the most recent tap or deletion
    undo_window_seconds: float = 4.0

    # Timezone used to group history by calendar day
    timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            database_path=os.getenv("GRUMBLEJAR_DB_PATH", "data/grumblejar.db"),
            undo_window_seconds=float(os.getenv("UNDO_WINDOW_SECONDS", "4.0")),
            timezone=os.getenv("TIMEZONE", "UTC"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def timezone_is_valid(self) -> bool:
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return False
        return True

    @property
    def tz(self) -> ZoneInfo:
        """
        Timezone object for the configured zone name.

        Falls back to UTC if the name is unknown.
        """
        if not self.timezone_is_valid:
            logger.warning(f"Unknown timezone {self.timezone!r}, using UTC")
            return ZoneInfo("UTC")
        return ZoneInfo(self.timezone)

    def configure_logging(self) -> None:
        """Configure root logging for scripts."""
        logging.basicConfig(
            level=getattr(logging, self.log_level, logging.INFO),
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def get_summary(self) -> str:
        """Get a summary of current settings."""
        return f"""Database: {self.database_path}
Undo Window: {self.undo_window_seconds:g}s
Timezone: {self.timezone}
Log Level: {self.log_level}
"""
