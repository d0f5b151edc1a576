from __future__ import annotations

import os
from pathlib import Path

import pytest

from direnv_reload.direnv import COMMAND_NOT_EXECUTABLE, COMMAND_NOT_FOUND, force_rebuild, rebuild_argv
from direnv_reload.errors import CommandFailedError


def test_rebuild_argv(make_plan, project_dir: Path) -> None:
    settings = make_plan(project_dir).settings
    assert rebuild_argv(settings) == ["direnv", "exec", str(project_dir), "true"]


def test_force_flag_is_only_passed_to_child(
    make_plan, project_dir: Path, fake_deps, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("_nix_direnv_force_reload", raising=False)
    settings = make_plan(project_dir).settings

    force_rebuild(settings, fake_deps)

    (call,) = fake_deps.runner.calls
    assert call.argv == ["direnv", "exec", str(project_dir), "true"]
    assert call.env == {"_nix_direnv_force_reload": "1"}
    assert "_nix_direnv_force_reload" not in os.environ


def test_custom_executable_and_force_env(make_plan, project_dir: Path, fake_deps, tmp_path: Path) -> None:
    cfg = tmp_path / "c.yaml"
    cfg.write_text("direnv:\n  force_env: FORCE_IT\n  noop_command: [':']\n", encoding="utf-8")
    settings = make_plan(project_dir, config_path=str(cfg), direnv_executable="/opt/direnv").settings

    force_rebuild(settings, fake_deps)

    (call,) = fake_deps.runner.calls
    assert call.argv == ["/opt/direnv", "exec", str(project_dir), ":"]
    assert call.env == {"FORCE_IT": "1"}


def test_nonzero_exit_raises_with_returncode(make_plan, project_dir: Path, fake_deps) -> None:
    fake_deps.runner.returncode = 4
    fake_deps.runner.stderr = "direnv: error .envrc is blocked"
    settings = make_plan(project_dir).settings

    with pytest.raises(CommandFailedError) as exc:
        force_rebuild(settings, fake_deps)

    assert exc.value.exit_code == 4
    assert "blocked" in str(exc.value)


def test_missing_executable_reports_127(make_plan, project_dir: Path, fake_deps) -> None:
    fake_deps.runner.raise_exc = FileNotFoundError(2, "No such file or directory", "direnv")
    settings = make_plan(project_dir).settings

    with pytest.raises(CommandFailedError) as exc:
        force_rebuild(settings, fake_deps)

    assert exc.value.exit_code == COMMAND_NOT_FOUND


def test_non_executable_reports_126(make_plan, project_dir: Path, fake_deps) -> None:
    fake_deps.runner.raise_exc = PermissionError(13, "Permission denied", "direnv")
    settings = make_plan(project_dir).settings

    with pytest.raises(CommandFailedError) as exc:
        force_rebuild(settings, fake_deps)

    assert exc.value.exit_code == COMMAND_NOT_EXECUTABLE
