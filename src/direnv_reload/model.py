from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from direnv_reload.errors import ReloadError


class Phase(str, Enum):
    PREFLIGHT = "preflight"
    REBUILD = "rebuild"
    TOUCH_ENVRC = "touch_envrc"
    SYNC_PROFILES = "sync_profiles"


PHASES: tuple[Phase, ...] = (
    Phase.PREFLIGHT,
    Phase.REBUILD,
    Phase.TOUCH_ENVRC,
    Phase.SYNC_PROFILES,
)


@dataclass(frozen=True)
class CLIArgs:
    """Normalized CLI inputs; None means the option was not given."""

    project_dir: str | None
    config_path: str | None
    direnv_executable: str | None
    verbosity: str | None
    plan_only: bool = False
    show_config: bool = False


@dataclass(frozen=True)
class ReloadSettings:
    project_dir: Path
    direnv_executable: str
    force_env: str
    noop_command: tuple[str, ...]
    trigger_name: str
    cache_dir_name: str
    profile_glob: str
    verbosity: str

    @property
    def trigger_file(self) -> Path:
        return self.project_dir / self.trigger_name

    @property
    def cache_dir(self) -> Path:
        return self.project_dir / self.cache_dir_name


@dataclass(frozen=True)
class ExecutionPlan:
    settings: ReloadSettings
    config_sources: tuple[str, ...]
    phases: tuple[Phase, ...]


@dataclass(frozen=True)
class PhaseResult:
    phase: Phase
    ok: bool
    detail: str = ""


class PhaseFailed(ReloadError):
    def __init__(self, phase: Phase, cause: ReloadError) -> None:
        super().__init__(str(cause))
        self.phase = phase
        self.cause = cause
        self.exit_code = cause.exit_code


@dataclass(frozen=True)
class RunResult:
    ok: bool
    exit_code: int
    phase_results: tuple[PhaseResult, ...]
    events: tuple[str, ...]
    error: ReloadError | None = None
