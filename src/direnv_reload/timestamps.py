"""Timestamp reconciliation for the trigger file and cached profile scripts."""

from __future__ import annotations

from pathlib import Path

from direnv_reload.deps import FileOps
from direnv_reload.logging import get_logger
from direnv_reload.model import ReloadSettings

logger = get_logger(__name__)


def touch_trigger(settings: ReloadSettings, fs: FileOps) -> tuple[int, int]:
    """Set the trigger file's times to now and return (atime_ns, mtime_ns) as stored."""
    trigger = settings.trigger_file
    fs.touch(trigger)
    times = fs.times_ns(trigger)
    logger.verbose(f"Touched {trigger} mtime_ns={times[1]}")
    return times


def sync_profiles(settings: ReloadSettings, fs: FileOps, reference: tuple[int, int]) -> tuple[Path, ...]:
    """Copy the reference times onto every cached profile script.

    Times come from the trigger file, never from the clock, so the profiles
    and the trigger compare equal.
    """
    profiles = fs.glob(settings.cache_dir, settings.profile_glob)
    if not profiles:
        logger.verbose(f"No profile scripts matching {settings.profile_glob} in {settings.cache_dir}")
        return ()

    for path in profiles:
        fs.set_times_ns(path, reference)
        logger.debug(f"Synced {path}")

    return tuple(profiles)
