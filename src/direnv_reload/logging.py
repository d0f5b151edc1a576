"""Centralized logging for direnv-reload.

Four verbosity levels:
- QUIET (0): Warnings + errors
- NORMAL (1): Info + warnings + errors
- VERBOSE (2): Detailed info
- DEBUG (3): Everything including internal state

Usage:
    from direnv_reload.logging import get_logger, set_verbosity

    logger = get_logger(__name__)
    set_verbosity(2)  # VERBOSE

    logger.verbose("Touching .envrc")
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TextIO

from direnv_reload.config import LoggingPolicy


class VerbosityLevel(IntEnum):
    """Verbosity levels for direnv-reload."""

    QUIET = 0  # Warnings + errors
    NORMAL = 1  # Info + warnings + errors
    VERBOSE = 2  # Detailed info
    DEBUG = 3  # Everything


LEVEL_BY_NAME = {
    "quiet": VerbosityLevel.QUIET,
    "normal": VerbosityLevel.NORMAL,
    "verbose": VerbosityLevel.VERBOSE,
    "debug": VerbosityLevel.DEBUG,
}

# A successful reload prints nothing by default.
_VERBOSITY: VerbosityLevel = VerbosityLevel.QUIET

_USE_COLORS: bool = True


def set_verbosity(level: int | VerbosityLevel) -> None:
    """Set global verbosity level.

    Args:
        level: Verbosity level (0-3 or VerbosityLevel enum)
    """
    global _VERBOSITY

    if isinstance(level, int):
        level = VerbosityLevel(level)

    _VERBOSITY = level


def get_verbosity() -> VerbosityLevel:
    """Get current verbosity level."""
    return _VERBOSITY


def apply_logging_policy(policy: LoggingPolicy) -> None:
    """Apply a resolved LoggingPolicy to the global logger state."""
    set_verbosity(LEVEL_BY_NAME[policy.level_name])
    set_colors(policy.color)


def set_colors(enabled: bool) -> None:
    """Enable or disable colored output.

    Args:
        enabled: Whether to use colors
    """
    global _USE_COLORS
    _USE_COLORS = enabled


class ReloadLogger:
    """Logger with verbosity support."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "VERBOSE": "\033[34m",  # Blue
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "RESET": "\033[0m",
    }

    def __init__(self, name: str):
        self.name = name

    def _should_log(self, level: VerbosityLevel) -> bool:
        return level <= _VERBOSITY

    def _format_message(self, level: str, message: str, stream: TextIO) -> str:
        if _USE_COLORS and stream.isatty():
            color = self.COLORS.get(level, "")
            reset = self.COLORS["RESET"]
            return f"{color}[{level.lower()}]{reset} {message}"
        return f"[{level.lower()}] {message}"

    def _log(self, level: VerbosityLevel, level_name: str, message: str) -> None:
        """Print a message if the current verbosity allows it.

        Args:
            level: Required verbosity level
            level_name: Level name for display
            message: Message to log
        """
        if not self._should_log(level):
            return

        stream = sys.stderr if level_name in {"ERROR", "WARNING"} else sys.stdout
        print(self._format_message(level_name, message, stream), file=stream)

    def debug(self, message: str) -> None:
        """Log debug message (verbosity >= DEBUG)."""
        self._log(VerbosityLevel.DEBUG, "DEBUG", message)

    def verbose(self, message: str) -> None:
        """Log verbose message (verbosity >= VERBOSE)."""
        self._log(VerbosityLevel.VERBOSE, "VERBOSE", message)

    def info(self, message: str) -> None:
        """Log info message (verbosity >= NORMAL)."""
        self._log(VerbosityLevel.NORMAL, "INFO", message)

    def warning(self, message: str) -> None:
        """Log warning message (verbosity >= QUIET)."""
        self._log(VerbosityLevel.QUIET, "WARNING", message)

    def error(self, message: str) -> None:
        """Log error message (always shown)."""
        self._log(VerbosityLevel.QUIET, "ERROR", message)


_LOGGERS: dict[str, ReloadLogger] = {}


def get_logger(name: str = __name__) -> ReloadLogger:
    """Get logger instance for module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    if name not in _LOGGERS:
        _LOGGERS[name] = ReloadLogger(name)

    return _LOGGERS[name]
