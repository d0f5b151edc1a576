"""Pytest configuration and fixtures."""

from __future__ import annotations

import importlib.util
import os
import sys
from pathlib import Path

import pytest

# Add src to path (for 'direnv_reload.*' imports without installing)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))

from direnv_reload.deps import Deps, ListEventSink, OSFileOps  # noqa: E402
from direnv_reload.logging import VerbosityLevel, set_colors, set_verbosity  # noqa: E402

OLD_NS = 1_600_000_000 * 10**9


def _load_fakes() -> type[object]:
    """Load fakes by path so tests/ never becomes an importable package."""

    p = Path(__file__).resolve().parent / "fakes" / "fake_command_runner.py"
    spec = importlib.util.spec_from_file_location("_direnv_reload_test_fakes", p)
    assert spec and spec.loader
    mod = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = mod
    spec.loader.exec_module(mod)
    return mod.FakeCommandRunner


FakeCommandRunner = _load_fakes()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Logger verbosity and colors are process-global."""
    set_verbosity(VerbosityLevel.QUIET)
    set_colors(False)
    yield
    set_verbosity(VerbosityLevel.QUIET)
    set_colors(True)


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own config and environment out of the resolver."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("DIRENV_RELOAD_"):
            monkeypatch.delenv(key)


@pytest.fixture()
def project_dir(tmp_path: Path) -> Path:
    """A direnv project with an old .envrc and two cached profile scripts."""
    root = tmp_path / "project"
    cache = root / ".direnv"
    cache.mkdir(parents=True)
    (root / ".envrc").write_text("use flake\n", encoding="utf-8")
    (cache / "flake-profile-a1b2.rc").write_text("export A=1\n", encoding="utf-8")
    (cache / "nix-profile-c3d4.rc").write_text("export B=2\n", encoding="utf-8")
    (cache / "flake-inputs").mkdir()

    for p in (root / ".envrc", *cache.glob("*.rc")):
        os.utime(p, ns=(OLD_NS, OLD_NS))
    return root


@pytest.fixture()
def fake_runner():
    return FakeCommandRunner()


@pytest.fixture()
def fake_deps(fake_runner) -> Deps:
    return Deps(runner=fake_runner, fs=OSFileOps(), events=ListEventSink())


@pytest.fixture()
def make_cli():
    from direnv_reload.model import CLIArgs

    def _make(project_dir: Path | str | None = None, **kwargs) -> CLIArgs:
        fields = {
            "project_dir": str(project_dir) if project_dir is not None else None,
            "config_path": None,
            "direnv_executable": None,
            "verbosity": None,
        }
        fields.update(kwargs)
        return CLIArgs(**fields)

    return _make


@pytest.fixture()
def make_plan(make_cli):
    from direnv_reload.plan import build_plan

    def _make(project_dir: Path | str, **kwargs):
        return build_plan(make_cli(project_dir, **kwargs))

    return _make
