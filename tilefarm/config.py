"""
Tilefarm Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Config:
    """Application configuration loaded from environment variables."""

    # Persistence
    SAVE_DIR: Path = Path(os.getenv("TILEFARM_SAVE_DIR", "saves"))
    SAVE_KEY: str = os.getenv("TILEFARM_SAVE_KEY", "farming-game-save")
    SAVE_RETRY_ATTEMPTS: int = int(os.getenv("TILEFARM_SAVE_RETRIES", "3"))

    # Scheduling (milliseconds)
    AUTOSAVE_INTERVAL_MS: int = int(os.getenv("TILEFARM_AUTOSAVE_MS", "30000"))
    GROWTH_REFRESH_MS: int = int(os.getenv("TILEFARM_GROWTH_REFRESH_MS", "1000"))

    # World
    STARTING_COINS: int = int(os.getenv("TILEFARM_STARTING_COINS", "300"))
    AREA_SIZE: int = int(os.getenv("TILEFARM_AREA_SIZE", "12"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for unusable values."""
        if cls.AUTOSAVE_INTERVAL_MS <= 0:
            raise ValueError("TILEFARM_AUTOSAVE_MS must be a positive number of milliseconds")

        if cls.GROWTH_REFRESH_MS < 0:
            raise ValueError("TILEFARM_GROWTH_REFRESH_MS cannot be negative")

        if cls.AREA_SIZE <= 0:
            raise ValueError("TILEFARM_AREA_SIZE must be >= 1")

        if cls.STARTING_COINS < 0:
            raise ValueError("TILEFARM_STARTING_COINS cannot be negative")

        if cls.SAVE_RETRY_ATTEMPTS < 1:
            raise ValueError("TILEFARM_SAVE_RETRIES must be >= 1")

        if cls.LOG_LEVEL.upper() not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Tilefarm Configuration:",
            f"  Save Dir: {cls.SAVE_DIR}",
            f"  Save Key: {cls.SAVE_KEY}",
            f"  Auto-save: every {cls.AUTOSAVE_INTERVAL_MS}ms",
            f"  Growth Refresh: {cls.GROWTH_REFRESH_MS}ms",
            f"  Starting Coins: {cls.STARTING_COINS}",
            f"  Area Size: {cls.AREA_SIZE}x{cls.AREA_SIZE} tiles",
            f"  Log Level: {cls.LOG_LEVEL}",
        ]
        return "\n".join(lines)
