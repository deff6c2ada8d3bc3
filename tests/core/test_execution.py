"""
Unit tests for the shared build operation executor.
"""

import threading
import time

import pytest

from iarkit.core.exceptions import BuildOperationFailures, ToolExecutionError
from iarkit.core.execution import BuildOperationExecutor, default_max_workers


class TestBuildOperationExecutor:
    """Test BuildOperationExecutor."""

    def test_default_worker_count(self):
        """Test that the default uses the CPU count."""
        with BuildOperationExecutor() as executor:
            assert executor.max_workers == default_max_workers()

    def test_rejects_zero_workers(self):
        """Test that a non-positive worker count is rejected."""
        with pytest.raises(ValueError, match="at least 1"):
            BuildOperationExecutor(max_workers=0)

    def test_runs_all_operations(self, executor):
        """Test that every operation runs before run_all returns."""
        done = []
        lock = threading.Lock()

        def op(i):
            time.sleep(0.01)
            with lock:
                done.append(i)

        executor.run_all([lambda i=i: op(i) for i in range(10)])

        assert sorted(done) == list(range(10))

    def test_empty_queue(self, executor):
        """Test that an empty queue returns immediately."""
        executor.run_all([])

    def test_bounded_concurrency(self):
        """Test that no more than max_workers operations run at once."""
        running = 0
        peak = 0
        lock = threading.Lock()

        def op():
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.02)
            with lock:
                running -= 1

        with BuildOperationExecutor(max_workers=2) as executor:
            executor.run_all([op for _ in range(8)])

        assert peak <= 2

    def test_single_failure_is_reraised(self, executor):
        """Test that one failure propagates unchanged after all operations finish."""
        done = []

        def fail():
            raise ToolExecutionError("compiling a.c", 2, "a.c(1): error")

        with pytest.raises(ToolExecutionError) as exc_info:
            executor.run_all([fail, lambda: done.append(1), lambda: done.append(2)])

        assert exc_info.value.returncode == 2
        assert sorted(done) == [1, 2]

    def test_multiple_failures_are_collected(self, executor):
        """Test that several failures are reported together."""

        def fail(name):
            raise ToolExecutionError(name, 1)

        with pytest.raises(BuildOperationFailures) as exc_info:
            executor.run_all([lambda: fail("compiling a.c"), lambda: fail("compiling b.c")])

        assert len(exc_info.value.failures) == 2
        assert "2 build operations failed" in str(exc_info.value)
