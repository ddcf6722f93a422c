"""A fixed-size pool of worker threads fed from a bounded task queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable

log = logging.getLogger(__name__)


class ThreadPool:
    """Runs queued callables on a fixed number of worker threads."""

    MAX_QUEUE_SIZE = 5000

    def __init__(self, thread_count: int) -> None:
        if thread_count <= 0:
            raise ValueError("thread_count must be greater than 0.")
        self._tasks: deque[Callable[[], object]] = deque()
        self._running = True
        self._active = 0
        self._active_lock = threading.Lock()
        self._condition = threading.Condition()
        self._workers = [
            threading.Thread(target=self._worker_loop, name=f"pool-worker-{n}", daemon=True)
            for n in range(thread_count)
        ]
        for worker in self._workers:
            worker.start()

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _worker_loop(self) -> None:
        while True:
            with self._condition:
                self._condition.wait_for(lambda: not self._running or self._tasks)
                if not self._tasks:
                    return
                task = self._tasks.popleft()

            with self._active_lock:
                self._active += 1
            try:
                task()
            except Exception:
                log.exception("Exception in thread pool task")
            finally:
                with self._active_lock:
                    self._active -= 1

    def enqueue(self, task: Callable[[], object]) -> bool:
        """Queue a task; False if the pool is shut down or the queue is full."""
        with self._condition:
            if not self._running or len(self._tasks) >= self.MAX_QUEUE_SIZE:
                return False
            self._tasks.append(task)
            self._condition.notify()
        return True

    @property
    def task_count(self) -> int:
        """Number of tasks waiting in the queue."""
        with self._condition:
            return len(self._tasks)

    @property
    def active_thread_count(self) -> int:
        """Number of workers currently running a task."""
        with self._active_lock:
            return self._active

    def shutdown(self) -> None:
        """Stop accepting tasks, let queued ones finish and join the workers."""
        with self._condition:
            self._running = False
            self._condition.notify_all()
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current and worker.is_alive():
                worker.join()