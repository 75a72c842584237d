"""
Unit tests for the worker thread pool.
"""

import threading
import time

import pytest

from webdemo.core.thread_pool import Task, ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(min_workers=2, max_workers=4, max_queue=10)
    pool.start()
    yield pool
    pool.shutdown(wait=False)


class TestThreadPool:
    """Tests for ThreadPool class."""

    def test_start_creates_min_workers(self, pool):
        assert pool.worker_count == 2
        assert pool.is_running

    def test_submit_runs_task(self, pool):
        """Test that submitted work runs with its arguments."""
        done = threading.Event()
        results = []

        def work(a, b=0):
            results.append(a + b)
            done.set()

        assert pool.submit(work, args=(1,), kwargs={"b": 2}) is True
        assert done.wait(timeout=5.0)
        assert results == [3]

    def test_failing_task_does_not_kill_worker(self):
        """Test that an exception is contained to its task."""
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        done = threading.Event()

        def boom():
            raise RuntimeError("boom")

        try:
            pool.submit(boom)
            pool.submit(done.set)

            assert done.wait(timeout=5.0)
            assert pool.worker_count == 1
        finally:
            pool.shutdown(wait=True, timeout=5.0)

    def test_full_queue_rejects(self):
        """Test submit(block=False) on a full queue."""
        pool = ThreadPool(min_workers=1, max_workers=1, max_queue=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5.0)

        try:
            pool.submit(blocker)
            assert started.wait(timeout=5.0)
            assert pool.submit(lambda: None, block=False) is True   # fills the queue
            assert pool.submit(lambda: None, block=False) is False
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_scales_up_when_busy(self):
        """Test that a worker is added while all are busy and work waits."""
        pool = ThreadPool(min_workers=1, max_workers=3, max_queue=10)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5.0)

        try:
            pool.submit(blocker)
            assert started.wait(timeout=5.0)
            pool.submit(lambda: None)
            assert 1 < pool.worker_count <= 3
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_submit_requires_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool().submit(lambda: None)

    def test_submit_after_shutdown(self):
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        pool.shutdown()
        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)

    def test_shutdown_waits_for_tasks(self):
        """Test that queued work finishes before shutdown returns."""
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        results = []

        for i in range(5):
            pool.submit(lambda i=i: (time.sleep(0.01), results.append(i)))

        pool.shutdown(wait=True)

        assert sorted(results) == [0, 1, 2, 3, 4]
        assert pool.worker_count == 0

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            ThreadPool(min_workers=0)
        with pytest.raises(ValueError):
            ThreadPool(min_workers=4, max_workers=2)


class TestTask:
    """Tests for queued tasks."""

    def test_long_queued_task_still_runs(self):
        """Test that a task waiting behind a slow one is run, not dropped."""
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        started = threading.Event()
        done = threading.Event()

        def slow():
            started.set()
            time.sleep(0.5)

        try:
            pool.submit(slow)
            assert started.wait(timeout=5.0)
            pool.submit(done.set)

            assert done.wait(timeout=5.0)
        finally:
            pool.shutdown(wait=True, timeout=5.0)

    def test_submitted_at(self):
        before = time.time()
        assert Task(func=lambda: None).submitted_at >= before
