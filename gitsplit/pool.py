"""
Bounded worker pool for gitsplit.

Every remote owns one pool: fetch and push tasks are fired concurrently and
joined later with ``wait()``. A failing task never cancels the others; its
exception is collected and reported by submission order, so the first error
of a cycle does not depend on thread scheduling.

Example:
    pool = WorkerPool(size=4)
    pool.push(lambda: fetch("origin"))
    pool.push(lambda: fetch("target"))
    results = pool.wait()
    if results.first_error():
        raise results.first_error()
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

DEFAULT_POOL_SIZE = 10


@dataclass
class TaskOutcome:
    """Value or error of one task."""
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class PoolResults:
    """Outcomes of one push/wait cycle, in submission order."""
    outcomes: List[TaskOutcome] = field(default_factory=list)

    def first_error(self) -> Optional[BaseException]:
        for outcome in self.outcomes:
            if outcome.error is not None:
                return outcome.error
        return None

    def values(self) -> List[Any]:
        return [o.value for o in self.outcomes if not o.failed]

    def __len__(self) -> int:
        return len(self.outcomes)


class WorkerPool:
    """
    Runs at most ``size`` tasks at a time.

    The pool is reusable: each ``wait()`` closes a cycle and returns the
    outcomes of the tasks pushed since the previous one.
    """

    def __init__(self, size: int = DEFAULT_POOL_SIZE, name: str = "gitsplit"):
        if size < 1:
            raise ValueError(f"Pool size must be positive, got {size}")
        self.size = size
        self.name = name
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: List[Future] = []
        self._last = PoolResults()

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.size, thread_name_prefix=self.name)
        return self._executor

    def push(self, task: Callable[[], Any]) -> None:
        """Queue a task. Never blocks; errors surface in wait()."""
        with self._lock:
            self._pending.append(self._get_executor().submit(task))

    def wait(self) -> PoolResults:
        """Block until every task pushed so far has completed."""
        with self._lock:
            futures, self._pending = self._pending, []

        wait(futures)
        results = PoolResults(outcomes=[
            TaskOutcome(error=f.exception()) if f.exception() is not None
            else TaskOutcome(value=f.result())
            for f in futures
        ])
        self._last = results
        return results

    def first_error(self) -> Optional[BaseException]:
        """First error, by submission order, of the last completed cycle."""
        return self._last.first_error()

    def close(self) -> None:
        """Wait for outstanding tasks and release the worker threads."""
        self.wait()
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
