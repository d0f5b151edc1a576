from __future__ import annotations

import os
from pathlib import Path

from direnv_reload.deps import OSFileOps
from direnv_reload.timestamps import sync_profiles, touch_trigger


def _mtime_ns(p: Path) -> int:
    return p.stat().st_mtime_ns


def test_touch_trigger_moves_mtime_forward(make_plan, project_dir: Path) -> None:
    settings = make_plan(project_dir).settings
    before = _mtime_ns(settings.trigger_file)

    atime, mtime = touch_trigger(settings, OSFileOps())

    assert mtime > before
    assert mtime == _mtime_ns(settings.trigger_file)
    assert atime == settings.trigger_file.stat().st_atime_ns


def test_touch_trigger_creates_missing_file(make_plan, project_dir: Path) -> None:
    settings = make_plan(project_dir).settings
    settings.trigger_file.unlink()

    touch_trigger(settings, OSFileOps())

    assert settings.trigger_file.is_file()
    assert settings.trigger_file.read_text() == ""


def test_sync_profiles_copies_reference_times_exactly(make_plan, project_dir: Path) -> None:
    settings = make_plan(project_dir).settings
    reference = (1_700_000_000_123_456_789, 1_700_000_000_987_654_321)

    synced = sync_profiles(settings, OSFileOps(), reference)

    assert [p.name for p in synced] == ["flake-profile-a1b2.rc", "nix-profile-c3d4.rc"]
    for p in synced:
        st = p.stat()
        assert (st.st_atime_ns, st.st_mtime_ns) == reference


def test_sync_profiles_ignores_non_matching_entries(make_plan, project_dir: Path) -> None:
    settings = make_plan(project_dir).settings
    other = project_dir / ".direnv" / "flake-profile-a1b2"
    other.write_text("not an rc\n", encoding="utf-8")
    os.utime(other, ns=(1, 1))

    sync_profiles(settings, OSFileOps(), (5_000_000_000, 5_000_000_000))

    assert _mtime_ns(other) == 1
    assert _mtime_ns(project_dir / ".direnv" / "flake-inputs") != 5_000_000_000


def test_sync_profiles_without_cache_dir_is_noop(make_plan, tmp_path: Path) -> None:
    root = tmp_path / "bare"
    root.mkdir()
    settings = make_plan(root).settings

    assert sync_profiles(settings, OSFileOps(), (1, 1)) == ()
    assert not (root / ".direnv").exists()


def test_sync_profiles_skips_dotfiles_like_the_shell(make_plan, project_dir: Path) -> None:
    settings = make_plan(project_dir).settings
    hidden = project_dir / ".direnv" / ".hidden.rc"
    hidden.write_text("", encoding="utf-8")
    os.utime(hidden, ns=(1, 1))

    synced = sync_profiles(settings, OSFileOps(), (5_000_000_000, 5_000_000_000))

    assert hidden not in synced
    assert _mtime_ns(hidden) == 1


def test_dot_pattern_matches_hidden_files(project_dir: Path) -> None:
    hidden = project_dir / ".direnv" / ".hidden.rc"
    hidden.write_text("", encoding="utf-8")

    assert OSFileOps().glob(project_dir / ".direnv", ".*.rc") == [hidden]
