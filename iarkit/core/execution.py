"""
Bounded execution of build operations.

The executors in iarkit do not own threads. They hand their work to a
BuildOperationExecutor that is created once per build and shared by every
compile, assemble, link and archive step, so the number of external tool
processes running at the same time never exceeds the number of worker slots.

Usage:
    from iarkit.core.execution import BuildOperationExecutor

    executor = BuildOperationExecutor(max_workers=4)
    executor.run_all([lambda: compile_one(a), lambda: compile_one(b)])
    executor.shutdown()
"""

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for_futures
from typing import Callable, Iterable, List, Optional

from iarkit.core.exceptions import BuildOperationFailures

logger = logging.getLogger(__name__)


def default_max_workers() -> int:
    """Number of worker slots used when none is configured."""
    return os.cpu_count() or 1


class BuildOperationExecutor:
    """
    Shared, bounded facility that runs build operations.

    Attributes:
        max_workers: Maximum number of operations running at once
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Initialize executor.

        Args:
            max_workers: Number of worker slots (default: CPU count)
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers or default_max_workers()
        self._pool = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="iarkit-worker"
        )

    def run_all(self, operations: Iterable[Callable[[], None]]) -> None:
        """
        Run operations and block until every one of them has finished.

        All operations run to completion even if some fail. A single failure
        is re-raised as is; several failures are reported together.

        Args:
            operations: Callables to run

        Raises:
            BuildOperationFailures: If more than one operation failed
        """
        futures: List[Future] = [self._pool.submit(op) for op in operations]
        if not futures:
            return

        wait_for_futures(futures)
        failures = [f.exception() for f in futures if f.exception() is not None]
        if not failures:
            return
        if len(failures) == 1:
            raise failures[0]
        logger.debug(f"{len(failures)} of {len(futures)} build operations failed")
        raise BuildOperationFailures(failures)

    def shutdown(self, wait: bool = True) -> None:
        """Release the worker threads."""
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "BuildOperationExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
