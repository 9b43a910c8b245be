"""Named locks that serialize Helm operations per repository name."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from loguru import logger


@dataclass
class _NamedLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class RepositoryLocks:
    """Process-wide registry of one lock per repository name.

    ``helm repo add/update/remove`` mutate state shared by every request in
    the process, so two deployments using the same repository name must not
    interleave. Locks are keyed by name only (not by user).

    An entry lives only while a deployment holds or waits for it, so the
    registry does not grow with the number of distinct names seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _NamedLock] = {}

    def _checkout(self, name: str) -> _NamedLock:
        with self._guard:
            entry = self._locks.get(name)
            if entry is None:
                entry = _NamedLock()
                self._locks[name] = entry
            entry.users += 1
            return entry

    def _release(self, name: str, entry: _NamedLock) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[name]

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        """Hold the lock for ``name`` for the duration of the block."""
        entry = self._checkout(name)
        try:
            if not entry.lock.acquire(blocking=False):
                logger.info(f"Waiting for another deployment using repository '{name}'")
                entry.lock.acquire()
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._release(name, entry)

    def is_locked(self, name: str) -> bool:
        """Check if a deployment currently holds the lock for ``name``."""
        with self._guard:
            entry = self._locks.get(name)
        return entry is not None and entry.lock.locked()

    def active_count(self) -> int:
        """Number of repository names currently held or waited on."""
        with self._guard:
            return len(self._locks)
