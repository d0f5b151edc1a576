from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class CommandResult(Protocol):
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult: ...


class FileOps(Protocol):
    def is_dir(self, path: Path) -> bool: ...
    def touch(self, path: Path) -> None: ...
    def times_ns(self, path: Path) -> tuple[int, int]: ...
    def set_times_ns(self, path: Path, times: tuple[int, int]) -> None: ...
    def glob(self, directory: Path, pattern: str) -> list[Path]: ...


class EventSink(Protocol):
    def emit(self, event: str) -> None: ...


@dataclass(frozen=True)
class Deps:
    runner: CommandRunner
    fs: FileOps
    events: EventSink


@dataclass
class SubprocessResult:
    returncode: int
    stdout: str
    stderr: str


class SubprocessRunner:
    """Run commands with the child's output passed through to the terminal.

    Extra ``env`` entries are layered over the current process environment for
    the child only.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> SubprocessResult:
        child_env = None
        if env:
            child_env = dict(os.environ)
            child_env.update(env)
        p = subprocess.run(
            list(argv),
            cwd=str(cwd) if cwd is not None else None,
            env=child_env,
            check=False,
        )
        return SubprocessResult(returncode=p.returncode, stdout="", stderr="")


class OSFileOps:
    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def touch(self, path: Path) -> None:
        path.touch(exist_ok=True)

    def times_ns(self, path: Path) -> tuple[int, int]:
        st = path.stat()
        return st.st_atime_ns, st.st_mtime_ns

    def set_times_ns(self, path: Path, times: tuple[int, int]) -> None:
        os.utime(path, ns=times)

    def glob(self, directory: Path, pattern: str) -> list[Path]:
        if not directory.is_dir():
            return []
        # Shell globs skip dotfiles unless the pattern itself starts with a dot.
        hidden_ok = pattern.startswith(".")
        return sorted(
            p for p in directory.glob(pattern) if p.is_file() and (hidden_ok or not p.name.startswith("."))
        )


class ListEventSink:
    def __init__(self) -> None:
        self.events: list[str] = []

    def emit(self, event: str) -> None:
        self.events.append(event)


def default_deps() -> Deps:
    return Deps(runner=SubprocessRunner(), fs=OSFileOps(), events=ListEventSink())
