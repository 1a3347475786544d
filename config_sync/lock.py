"""Single-instance guard for sync runs on one machine.

Mutual exclusion comes from an OS advisory lock on ``.sync.lock`` (released by
the kernel if the holder dies). A ``.sync.pid`` marker next to it records who
holds the lock and since when, so ``status`` and error messages can say so.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

from filelock import FileLock, Timeout

from config_sync.errors import LockHeldError
from config_sync.paths import SyncPaths

logger = logging.getLogger(__name__)

STALE_LOCK_SECONDS = 3600


@dataclass(frozen=True)
class LockMarker:
    pid: int
    started: float

    def age(self, now: float | None = None) -> float:
        return (now if now is not None else time.time()) - self.started


def read_marker(paths: SyncPaths) -> LockMarker | None:
    """Parse ``<pid> <epoch-seconds>`` from the marker, if present and well formed."""
    try:
        parts = paths.pid_file.read_text(encoding="utf-8").split()
    except FileNotFoundError:
        return None
    try:
        pid = int(parts[0])
        started = float(parts[1]) if len(parts) > 1 else paths.pid_file.stat().st_mtime
    except (IndexError, ValueError):
        return None
    return LockMarker(pid=pid, started=started)


def lock_is_held(paths: SyncPaths) -> bool:
    """Probe the OS lock without keeping it."""
    lock = FileLock(str(paths.lock_file), timeout=0)
    try:
        lock.acquire()
    except Timeout:
        return True
    lock.release()
    return False


class SyncLock:
    """Context manager holding the sync lock for the duration of a run."""

    def __init__(self, paths: SyncPaths, stale_after: float = STALE_LOCK_SECONDS) -> None:
        self.paths = paths
        self.stale_after = stale_after
        self._lock = FileLock(str(paths.lock_file), timeout=0)

    @property
    def is_locked(self) -> bool:
        return self._lock.is_locked

    def acquire(self) -> None:
        try:
            self._lock.acquire()
        except Timeout:
            marker = read_marker(self.paths)
            holder = f" (PID {marker.pid})" if marker else ""
            if marker and marker.age() > self.stale_after:
                logger.warning(
                    "Lock held for over %d minutes by PID %d",
                    self.stale_after // 60,
                    marker.pid,
                )
            raise LockHeldError(
                f"Sync already in progress{holder}\n"
                f"If this is incorrect, make sure no claude-sync process is running"
            ) from None

        marker = read_marker(self.paths)
        if marker is not None:
            # Nobody holds the lock, so the marker outlived a crashed run
            if marker.age() > self.stale_after:
                logger.warning("Removing stale lock marker (older than 1 hour)")
            else:
                logger.info("Removing lock marker left by PID %d", marker.pid)
        self.paths.pid_file.write_text(f"{os.getpid()} {time.time():.0f}\n", encoding="utf-8")
        logger.debug("Acquired %s", self.paths.lock_file)

    def release(self) -> None:
        if not self._lock.is_locked:
            return
        self.paths.pid_file.unlink(missing_ok=True)
        self._lock.release()
        logger.debug("Released %s", self.paths.lock_file)

    def __enter__(self) -> "SyncLock":
        self.acquire()
        return self

    def __exit__(self, *exc) -> None:
        self.release()
