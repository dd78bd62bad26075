"""
Unit tests for the worker thread pool.
"""

import threading

import pytest

from staticserver.core import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(min_workers=2, max_workers=3, queue_size=2, idle_timeout=0.1)
    pool.start()
    yield pool
    pool.shutdown(wait=False)


class TestThreadPool:
    def test_runs_tasks(self, pool):
        done = threading.Event()
        results = []

        def task(value):
            results.append(value)
            done.set()

        assert pool.submit(task, args=(42,))
        assert done.wait(5)
        assert results == [42]

    def test_failing_task_does_not_kill_worker(self, pool):
        done = threading.Event()

        def broken():
            raise RuntimeError("boom")

        pool.submit(broken)
        pool.submit(done.set)

        assert done.wait(5)
        assert pool.active_workers >= 2

    def test_full_queue_rejects_without_blocking(self, pool):
        release = threading.Event()

        def hold():
            release.wait(5)

        # occupy every worker (scales up to max_workers), then fill the queue
        accepted = 0
        for _ in range(10):
            if not pool.submit(hold, block=False):
                break
            accepted += 1

        assert accepted < 10
        assert pool.submit(hold, block=False) is False

        release.set()

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool().submit(lambda: None)

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            ThreadPool(min_workers=4, max_workers=2)

    def test_shutdown_waits_for_queued_tasks(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=10, idle_timeout=0.1)
        pool.start()
        results = []

        for i in range(5):
            pool.submit(results.append, args=(i,))
        pool.shutdown(wait=True, timeout=5)

        assert sorted(results) == [0, 1, 2, 3, 4]

    def test_stats(self, pool):
        stats = pool.stats

        assert stats["workers"]["min"] == 2
        assert stats["workers"]["max"] == 3
        assert stats["queue"]["max"] == 2
