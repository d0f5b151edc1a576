from __future__ import annotations

from direnv_reload.deps import Deps, default_deps
from direnv_reload.direnv import force_rebuild
from direnv_reload.errors import ProjectDirMissingError, ReloadError
from direnv_reload.logging import get_logger
from direnv_reload.model import ExecutionPlan, Phase, PhaseFailed, PhaseResult, RunResult
from direnv_reload.timestamps import sync_profiles, touch_trigger

logger = get_logger(__name__)


def execute_plan(plan: ExecutionPlan, deps: Deps | None = None) -> RunResult:
    """Run the plan's phases in order, stopping at the first failure.

    Failures never raise out of here; they are recorded in the RunResult
    together with the exit code the process should terminate with.
    """
    deps = deps or default_deps()
    settings = plan.settings
    phase_results: list[PhaseResult] = []
    reference: tuple[int, int] | None = None

    deps.events.emit(f"run_start project_dir={settings.project_dir}")
    logger.debug(f"Phases: {','.join(p.value for p in plan.phases)}")

    exit_code = 0
    error: ReloadError | None = None
    try:
        for phase in plan.phases:
            deps.events.emit(f"phase_start:{phase.value}")
            logger.debug(f"PHASE_START {phase.value}")

            try:
                if phase == Phase.PREFLIGHT:
                    if not deps.fs.is_dir(settings.project_dir):
                        raise ProjectDirMissingError(settings.project_dir)
                    detail = str(settings.project_dir)

                elif phase == Phase.REBUILD:
                    force_rebuild(settings, deps)
                    detail = ""

                elif phase == Phase.TOUCH_ENVRC:
                    reference = touch_trigger(settings, deps.fs)
                    detail = f"mtime_ns={reference[1]}"

                elif phase == Phase.SYNC_PROFILES:
                    assert reference is not None
                    synced = sync_profiles(settings, deps.fs, reference)
                    detail = ",".join(p.name for p in synced)

                else:
                    raise ReloadError(f"unknown phase: {phase}")

            except ReloadError as e:
                phase_results.append(PhaseResult(phase=phase, ok=False, detail=e.message))
                deps.events.emit(f"phase_end:{phase.value}:ok=0")
                raise PhaseFailed(phase, e) from e
            except OSError as e:
                msg = f"{e.strerror or e}: {e.filename}" if e.filename else str(e)
                phase_results.append(PhaseResult(phase=phase, ok=False, detail=msg))
                deps.events.emit(f"phase_end:{phase.value}:ok=0")
                raise PhaseFailed(phase, ReloadError(msg)) from e

            phase_results.append(PhaseResult(phase=phase, ok=True, detail=detail))
            deps.events.emit(f"phase_end:{phase.value}:ok=1")
            logger.debug(f"PHASE_END {phase.value} ok=True")

    except PhaseFailed as e:
        exit_code = e.exit_code
        error = e.cause
        logger.debug(f"PHASE_END {e.phase.value} ok=False exit_code={exit_code}")

    ok = exit_code == 0
    deps.events.emit(f"run_end ok={ok}")
    return RunResult(
        ok=ok,
        exit_code=exit_code,
        phase_results=tuple(phase_results),
        events=tuple(getattr(deps.events, "events", [])),
        error=error,
    )
