"""
=============================================================================
WORKER THREAD POOL
=============================================================================

Accepted connections are queued here and served by a fixed-but-growable
set of worker threads, so a slow client never blocks the accept loop.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           ThreadPool                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   submit(func, args)  ──►  [Task] [Task] [Task] ...   (queue.Queue) │
    │                                   │                                  │
    │                                   │ get()                            │
    │                                   ▼                                  │
    │          ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌──────────┐        │
    │          │ Worker 0 │ │ Worker 1 │ │ Worker 2 │ │ Worker 3 │  ...   │
    │          └──────────┘ └──────────┘ └──────────┘ └──────────┘        │
    │                                                                      │
    │   min_workers start with the pool. One more is added per submit()   │
    │   while every worker is busy and work is waiting, up to max_workers.│
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A full queue makes submit(block=False) return False; HTTPServer answers
that connection with 503 Service Unavailable.

Shutdown uses poison pills: one None per worker. A worker that pulls None
leaves its loop.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any, List
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred call: func(*args, **kwargs).

    Every queued task runs, however long it waited in the queue.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Pulls tasks off the shared queue and runs them until it gets None.

    An exception from a task is logged; the worker keeps going.
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int, idle_timeout: float = 1.0):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s "
                f"(queued {start_time - task.submitted_at:.3f}s)"
            )

        except Exception as e:
            logger.exception(f"Worker {self.worker_id} task failed: {e}")

        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class ThreadPool:
    """
    Thread pool for serving connections.

        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        if not pool.submit(handle, args=(conn,), block=False):
            ...  # queue full
        pool.shutdown(wait=True)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        max_queue: int = 100,
        idle_timeout: float = 1.0,
    ):
        """
        Args:
            min_workers: Workers started by start().
            max_workers: Upper bound when scaling up under load.
            max_queue: Tasks that may wait before submit() refuses more.
            idle_timeout: How often an idle worker checks for shutdown.
        """
        if min_workers < 1 or max_workers < min_workers:
            raise ValueError("need 1 <= min_workers <= max_workers")

        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue = max_queue
        self.idle_timeout = idle_timeout

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=max_queue)
        self._workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        """Start min_workers threads. Does nothing if already started."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")
        self._shutdown = False
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()
        self._started = True

    def _add_worker(self) -> Worker:
        # caller holds self._lock
        worker = Worker(self._task_queue, self._next_worker_id, self.idle_timeout)
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = True,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue func(*args, **kwargs) for a worker.

        Returns:
            True if queued, False if the queue is full (block=False or
            queue_timeout elapsed).

        Raises:
            RuntimeError: The pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            if self.busy_workers == len(self._workers) and self._task_queue.qsize() > 0:
                logger.debug(f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers")
                self._add_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish first.
            timeout: Longest wait for the queue to drain, None for no limit.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = None if timeout is None else time.time() + timeout
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Shutdown timeout, abandoning queued tasks")
                    break
                time.sleep(0.05)

        for worker in self._workers:
            worker.shutdown()
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                pass  # worker sees the shutdown flag instead

        for worker in self._workers:
            worker.join(timeout=2.0)

        self._workers.clear()
        self._started = False
        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)
