"""Error handling with friendly messages."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class ReloadError(Exception):
    """Base exception for all direnv-reload errors."""

    exit_code: int = 1

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ConfigError(ReloadError):
    """Configuration error."""

    exit_code = 2


class ProjectDirMissingError(ReloadError):
    """Project directory does not exist; nothing may be rebuilt or touched."""

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir
        super().__init__(
            "Cannot find source directory; Did you move it?",
            'use "direnv reload" manually and then try again',
        )

    def diagnostic_lines(self) -> tuple[str, str, str]:
        return (
            "Cannot find source directory; Did you move it?",
            f'(Looking for "{self.project_dir}")',
            'Cannot force reload with this script - use "direnv reload" manually and then try again',
        )


class CommandFailedError(ReloadError):
    """External command exited non-zero or could not be started."""

    def __init__(self, argv: Sequence[str], returncode: int, detail: str = "") -> None:
        self.argv = tuple(argv)
        self.returncode = returncode
        if returncode > 0:
            self.exit_code = returncode
        elif returncode < 0:
            # Killed by signal N: report 128+N like a POSIX shell.
            self.exit_code = 128 - returncode
        else:
            self.exit_code = 1
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class ConfigKeyNotFound(ConfigError):
    """No config source provides the key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Config key '{key}' not found in any source")
