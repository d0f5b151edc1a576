"""Forced direnv cache rebuild."""

from __future__ import annotations

from direnv_reload.deps import Deps
from direnv_reload.errors import CommandFailedError
from direnv_reload.logging import get_logger
from direnv_reload.model import ReloadSettings

logger = get_logger(__name__)

# Exit statuses a POSIX shell reports for a command that cannot be run.
COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127


def rebuild_argv(settings: ReloadSettings) -> list[str]:
    return [settings.direnv_executable, "exec", str(settings.project_dir), *settings.noop_command]


def force_rebuild(settings: ReloadSettings, deps: Deps) -> None:
    """Run a no-op command inside the project's environment with a forced reload.

    The force flag is only set for the child process. A non-zero exit raises
    CommandFailedError carrying the tool's return code.
    """
    argv = rebuild_argv(settings)
    env = {settings.force_env: "1"}
    logger.verbose(f"Forcing cache rebuild: {settings.force_env}=1 {' '.join(argv)}")

    try:
        res = deps.runner.run(argv, cwd=settings.project_dir, env=env)
    except PermissionError as e:
        raise CommandFailedError(argv, COMMAND_NOT_EXECUTABLE, detail=str(e)) from e
    except OSError as e:
        raise CommandFailedError(argv, COMMAND_NOT_FOUND, detail=str(e)) from e

    if res.returncode != 0:
        raise CommandFailedError(argv, res.returncode, detail=res.stderr.strip() or res.stdout.strip())

    logger.debug(f"Rebuild finished: returncode={res.returncode}")
