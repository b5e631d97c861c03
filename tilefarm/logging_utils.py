"""Logging utilities for Tilefarm sessions.

Provides color-coded output to distinguish growth ticks, persistence
outcomes and player-facing failures.
"""

import os
from enum import Enum

from .config import Config


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Growth and other clock-driven updates
    YELLOW = "\033[93m"    # Warnings (version mismatch, dropped saves)
    RED = "\033[91m"       # Errors
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_WARNING = "[!]"
LOG_TAG_ERROR = "[x]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"

_QUIET_LEVELS = {"WARNING", "ERROR", "CRITICAL"}
_ERRORS_ONLY = {"ERROR", "CRITICAL"}


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if TILEFARM_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("TILEFARM_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def _level() -> str:
    return (Config.LOG_LEVEL or "INFO").upper()


def _verbose() -> bool:
    return _level() not in _QUIET_LEVELS


def log_growth(message: str) -> None:
    """Log a clock-driven update (blue)."""
    if _verbose():
        print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_warning(message: str) -> None:
    """Log a non-fatal warning (yellow)."""
    if _level() in _ERRORS_ONLY:
        return
    print(colored(f"{LOG_TAG_WARNING} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error (red). Always printed."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    if _verbose():
        print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    if _verbose():
        print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))
