"""Unit tests for per-repository locks."""

import threading
import time

from src.app.core.services import RepositoryLocks


class TestRepositoryLocks:
    def test_registry_is_empty_after_hold_exits(self):
        locks = RepositoryLocks()

        for i in range(1000):
            with locks.hold(f"repo{i}"):
                assert locks.active_count() == 1

        assert locks.active_count() == 0

    def test_entry_kept_while_another_deployment_waits(self):
        locks = RepositoryLocks()
        waiting = threading.Event()
        done = threading.Event()

        def worker() -> None:
            waiting.set()
            with locks.hold("bitnami"):
                pass
            done.set()

        with locks.hold("bitnami"):
            thread = threading.Thread(target=worker)
            thread.start()
            waiting.wait(timeout=1)
            time.sleep(0.05)
            assert locks.active_count() == 1
            assert locks.is_locked("bitnami")

        thread.join(timeout=1)
        assert done.is_set()
        assert locks.active_count() == 0

    def test_hold_marks_name_as_locked(self):
        locks = RepositoryLocks()

        with locks.hold("bitnami"):
            assert locks.is_locked("bitnami")
            assert not locks.is_locked("jetstack")

        assert not locks.is_locked("bitnami")
        assert locks.active_count() == 0

    def test_released_after_exception(self):
        locks = RepositoryLocks()
        try:
            with locks.hold("bitnami"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert not locks.is_locked("bitnami")
        assert locks.active_count() == 0

    def test_serializes_holders_of_the_same_name(self):
        locks = RepositoryLocks()
        events: list[str] = []

        def worker(label: str) -> None:
            with locks.hold("bitnami"):
                events.append(f"{label}-start")
                time.sleep(0.05)
                events.append(f"{label}-end")

        threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Each critical section completes before the next one starts.
        assert events[0].split("-")[0] == events[1].split("-")[0]
        assert events[2].split("-")[0] == events[3].split("-")[0]
