"""
Worker Pool

Thread pool for parsing many booking documents at once.

Each task is isolated: an exception in one task becomes a FAILED TaskResult
for that task and never affects the others. Results are handed back in the
order the items were given, not the order they finished in.
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor, Future, as_completed
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Optional, List, Dict, Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


class TaskStatus(Enum):
    """Status of a task."""

    COMPLETED = auto()
    FAILED = auto()


@dataclass
class TaskResult:
    """
    Result of task execution.
    """
    task_id: str
    status: TaskStatus
    result: Any = None
    error: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    worker_id: Optional[str] = None

    @property
    def duration(self) -> float:
        """Execution duration in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'task_id': self.task_id,
            'status': self.status.name,
            'error': self.error,
            'duration': round(self.duration, 3),
            'worker_id': self.worker_id,
        }


@dataclass
class WorkerConfig:
    """Configuration for worker pool."""

    num_workers: int = 4
    thread_name_prefix: str = 'parser'

    # Called once per finished task, from the worker thread
    on_task_complete: Optional[Callable[[TaskResult], None]] = None


class WorkerPool:
    """
    Thread pool for parallel document parsing.

    Usage:
        with WorkerPool(WorkerConfig(num_workers=4)) as pool:
            results = pool.map(parser.parse, pdf_paths)

        for r in results:
            print(r.status, r.result)
    """

    def __init__(self, config: Optional[WorkerConfig] = None):
        """
        Initialize worker pool.

        Args:
            config: Worker configuration
        """
        self.config = config or WorkerConfig()
        if self.config.num_workers < 1:
            raise ValueError("num_workers must be at least 1")

        self._executor = ThreadPoolExecutor(
            max_workers=self.config.num_workers,
            thread_name_prefix=self.config.thread_name_prefix,
        )

        self._tasks_submitted = 0
        self._tasks_completed = 0
        self._tasks_failed = 0
        self._lock = threading.Lock()
        self._shutdown = False

        logger.info(f"Worker pool initialized with {self.config.num_workers} threads")

    def submit(self, func: Callable[..., R], *args, **kwargs) -> Future:
        """
        Submit a task for execution.

        Returns:
            Future resolving to a TaskResult
        """
        if self._shutdown:
            raise RuntimeError("Pool is shut down")

        task_id = str(uuid.uuid4())
        with self._lock:
            self._tasks_submitted += 1

        future = self._executor.submit(self._execute_task, task_id, func, args, kwargs)
        future.add_done_callback(self._on_complete)
        return future

    def _execute_task(self, task_id: str, func: Callable, args: tuple, kwargs: dict) -> TaskResult:
        """Run one task, turning any exception into a FAILED result."""
        start_time = datetime.now()
        worker_id = threading.current_thread().name

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.warning(f"Task {task_id} failed: {e}")
            return TaskResult(
                task_id=task_id,
                status=TaskStatus.FAILED,
                error=f"{type(e).__name__}: {e}",
                start_time=start_time,
                end_time=datetime.now(),
                worker_id=worker_id,
            )

        return TaskResult(
            task_id=task_id,
            status=TaskStatus.COMPLETED,
            result=result,
            start_time=start_time,
            end_time=datetime.now(),
            worker_id=worker_id,
        )

    def _on_complete(self, future: Future) -> None:
        """Update counters and fire the completion callback."""
        result: TaskResult = future.result()

        with self._lock:
            if result.success:
                self._tasks_completed += 1
            else:
                self._tasks_failed += 1

        if self.config.on_task_complete:
            try:
                self.config.on_task_complete(result)
            except Exception as e:
                logger.error(f"Error in completion callback: {e}")

    def map(
        self,
        func: Callable[[T], R],
        items: List[T],
        timeout: Optional[float] = None,
    ) -> List[TaskResult]:
        """
        Apply func to every item in parallel.

        Args:
            func: Function to apply
            items: Items to process
            timeout: Total timeout for all items

        Returns:
            One TaskResult per item, in input order
        """
        futures = {self.submit(func, item): idx for idx, item in enumerate(items)}

        results: List[Optional[TaskResult]] = [None] * len(items)
        for future in as_completed(futures, timeout=timeout):
            results[futures[future]] = future.result()

        return results

    def get_statistics(self) -> Dict[str, Any]:
        """Get pool statistics."""
        with self._lock:
            return {
                'num_workers': self.config.num_workers,
                'tasks_submitted': self._tasks_submitted,
                'tasks_completed': self._tasks_completed,
                'tasks_failed': self._tasks_failed,
                'success_rate': (
                    self._tasks_completed / self._tasks_submitted
                    if self._tasks_submitted > 0 else 0.0
                ),
            }

    def shutdown(self, wait: bool = True) -> None:
        """
        Shutdown the worker pool.

        Args:
            wait: Whether to wait for pending tasks
        """
        self._shutdown = True
        self._executor.shutdown(wait=wait)
        logger.info("Worker pool shut down")

    def __enter__(self) -> 'WorkerPool':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()


def process_in_parallel(
    func: Callable[[T], R],
    items: List[T],
    num_workers: int = 4,
) -> List[TaskResult]:
    """
    Convenience function for parallel processing.

    Returns:
        One TaskResult per item, in input order
    """
    with WorkerPool(WorkerConfig(num_workers=num_workers)) as pool:
        return pool.map(func, items)
