"""
=============================================================================
THREAD POOL
=============================================================================

A fixed-floor, bounded-ceiling pool of worker threads pulling connection
tasks from a shared queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   accept loop ──submit()──► [ task queue (bounded) ]                │
    │                                     │                                │
    │                     ┌───────────────┼───────────────┐                │
    │                     ▼               ▼               ▼                │
    │                 Worker-0        Worker-1   ...  Worker-N             │
    │                 (idle)          (busy: streaming clip.mp4)           │
    └─────────────────────────────────────────────────────────────────────┘

    min_workers   started up front, always running
    max_workers   ceiling; a worker is added when all are busy and
                  tasks are waiting
    queue_size    bound on waiting connections; submit(block=False)
                  returns False when full so the server can answer 503

A media response can hold a worker for as long as the client keeps
reading, so the ceiling matters more here than for short API calls.

Workers exit on a None "poison pill" put on the queue by shutdown().

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
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
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        timeout: Seconds the task may wait in the queue before it is
                 dropped unexecuted.
        submitted_at: Time the task was queued.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    timeout: Optional[float] = None
    submitted_at: float = field(default_factory=time.time)

    @property
    def waited(self) -> float:
        return time.time() - self.submitted_at


class Worker(threading.Thread):
    """
    Worker thread: get task, run it, repeat until a poison pill arrives.

    Exceptions raised by a task are logged and counted; they never end
    the worker.
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int, idle_timeout: float = 60.0):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

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
            if task.timeout and task.waited > task.timeout:
                logger.warning(
                    f"Task dropped after waiting {task.waited:.2f}s in queue "
                    f"(timeout {task.timeout}s)"
                )
                self.tasks_failed += 1
                return

            task.func(*task.args, **task.kwargs)

            logger.debug(f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s")
            self.tasks_completed += 1

        except Exception as e:
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
            self.tasks_failed += 1

        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class ThreadPool:
    """
    Thread pool for connection handling.

        pool = ThreadPool(min_workers=4, max_workers=16, queue_size=100)
        pool.start()

        if not pool.submit(handle_connection, args=(conn,), block=False):
            reject(conn)  # queue full

        pool.shutdown(wait=True)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 60.0
    ):
        """
        Args:
            min_workers: Workers created by start() and kept running.
            max_workers: Upper bound on workers under load.
            queue_size: Maximum number of waiting tasks.
            idle_timeout: Seconds an idle worker waits before re-checking
                          for shutdown.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)

        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")

        self._shutdown = False
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()

        self._started = True

    def _add_worker(self) -> Worker:
        # Caller holds self._lock
        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout
        )
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        timeout: Optional[float] = None,
        block: bool = True,
        queue_timeout: Optional[float] = None
    ) -> bool:
        """
        Queue a task for execution.

        Args:
            func: The function to execute.
            args: Positional arguments for the function.
            kwargs: Keyword arguments for the function.
            timeout: Maximum time the task may wait in the queue.
            block: Whether to wait for space if the queue is full.
            queue_timeout: How long to wait for space when blocking.

        Returns:
            True if the task was queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {}, timeout=timeout)

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            logger.warning(f"Task queue full ({self.max_queue_size}), rejecting task")
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        """Add a worker if every worker is busy and tasks are waiting."""
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return

            busy_count = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            if busy_count == len(self._workers) and self._task_queue.qsize() > 0:
                logger.debug(f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers")
                self._add_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop all workers.

        Args:
            wait: Let queued tasks finish before stopping workers.
            timeout: Maximum seconds to wait for the queue to drain.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = time.time() + timeout if timeout else None
            while not self._task_queue.empty():
                if deadline and time.time() > deadline:
                    logger.warning("Shutdown timeout, abandoning queued tasks")
                    break
                time.sleep(0.1)

        with self._lock:
            workers = list(self._workers)

        for _ in workers:
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                break  # Workers still see the shutdown flag

        for worker in workers:
            worker.shutdown()
            worker.join(timeout=2.0)

        with self._lock:
            self._workers.clear()
        self._started = False

        logger.info("Thread pool shutdown complete")

    # ─────────────────────────────────────────────────────────────────────
    # Monitoring
    # ─────────────────────────────────────────────────────────────────────

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def pending_tasks(self) -> int:
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "min": self.min_workers,
                "max": self.max_workers,
            },
            "queue": {
                "pending": self.pending_tasks,
                "max": self.max_queue_size,
            },
            "tasks": {
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
