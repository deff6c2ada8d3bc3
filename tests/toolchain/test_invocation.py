"""
Unit tests for running tool invocations.
"""

import os
import subprocess
from unittest.mock import patch

import pytest

from tests.fixtures.toolchains import posix_only, read_calls, write_tool
from iarkit.core.exceptions import ToolExecutionError
from iarkit.toolchain.invocation import (
    CommandLineToolContext,
    CommandLineToolInvocationWorker,
    Invocation,
)


class TestCommandLineToolContext:
    """Test CommandLineToolContext."""

    def test_apply_args_appends(self):
        """Test that tool args follow the generated ones."""
        context = CommandLineToolContext(args=("--cpu=Cortex-M4",))
        assert context.apply_args(["-DA"]) == ["-DA", "--cpu=Cortex-M4"]

    def test_process_environment(self, tmp_path, monkeypatch):
        """Test environment overrides and the PATH prefix."""
        monkeypatch.setenv("PATH", "/usr/bin")
        context = CommandLineToolContext(
            path=(tmp_path,), environment={"CYGWIN": "nodosfilewarning"}
        )

        env = context.process_environment()

        assert env["CYGWIN"] == "nodosfilewarning"
        assert env["PATH"].split(os.pathsep)[0] == str(tmp_path)
        assert env["PATH"].endswith("/usr/bin")


class TestCommandLineToolInvocationWorker:
    """Test CommandLineToolInvocationWorker."""

    def test_non_zero_exit(self, tmp_path):
        """Test that a failing tool raises with its output."""
        with patch(
            "iarkit.toolchain.invocation.subprocess.run",
            return_value=subprocess.CompletedProcess(
                [], 2, stdout="main.c(3) : Error[Pe020]: identifier \"x\" is undefined\n", stderr=""
            ),
        ):
            worker = CommandLineToolInvocationWorker("C compiler", tmp_path / "iccarm")
            with pytest.raises(ToolExecutionError) as exc_info:
                worker.execute(
                    Invocation("compiling main.c", tmp_path, ["main.c"]),
                    CommandLineToolContext(),
                )

        assert exc_info.value.display_name == "compiling main.c"
        assert exc_info.value.returncode == 2
        assert "Error[Pe020]" in exc_info.value.output
        assert "compiling main.c failed with exit code 2" in str(exc_info.value)

    def test_cannot_start(self, tmp_path):
        """Test that a missing executable raises ToolExecutionError."""
        worker = CommandLineToolInvocationWorker("C compiler", tmp_path / "missing")

        with pytest.raises(ToolExecutionError) as exc_info:
            worker.execute(Invocation("compiling a.c", tmp_path, []), CommandLineToolContext())

        assert exc_info.value.returncode == -1

    @posix_only
    def test_runs_in_working_directory(self, tmp_path):
        """Test a real run of a fake tool."""
        bin_dir = tmp_path / "bin"
        tool = write_tool(bin_dir, "iccarm")
        work = tmp_path / "work"
        work.mkdir()

        CommandLineToolInvocationWorker("C compiler", tool).execute(
            Invocation("compiling a.c", work, ["a.c", "-o", "a.o"], work / "a.o"),
            CommandLineToolContext(),
        )

        assert read_calls(bin_dir) == [(str(work), ["a.c", "-o", "a.o"])]
        assert (work / "a.o").exists()

    @posix_only
    def test_real_failure(self, tmp_path):
        """Test a real failing run."""
        tool = write_tool(tmp_path / "bin", "iccarm", exit_code=3)

        with pytest.raises(ToolExecutionError) as exc_info:
            CommandLineToolInvocationWorker("C compiler", tool).execute(
                Invocation("compiling a.c", tmp_path, ["a.c"]), CommandLineToolContext()
            )

        assert exc_info.value.returncode == 3
