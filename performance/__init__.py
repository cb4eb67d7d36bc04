"""
Performance and Scale

Bounded thread pool for batch parsing with per-document failure isolation.
"""

from .worker_pool import (
    WorkerPool,
    WorkerConfig,
    TaskResult,
    TaskStatus,
    process_in_parallel,
)

__all__ = [
    'WorkerPool',
    'WorkerConfig',
    'TaskResult',
    'TaskStatus',
    'process_in_parallel',
]
