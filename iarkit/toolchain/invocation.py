"""
Running a tool executable.

An Invocation describes one run of a tool; the CommandLineToolInvocationWorker
turns it into a process with the tool's context (search path, environment,
extra arguments) applied.
"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from iarkit.core.exceptions import ToolExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invocation:
    """
    One run of a tool.

    Attributes:
        display_name: Description used in logs and failures ('compiling main.c')
        working_directory: Directory the tool runs in
        args: Arguments, excluding the executable
        output_target: File the invocation produces, if any
    """

    display_name: str
    working_directory: Path
    args: List[str]
    output_target: Optional[Path] = None


@dataclass(frozen=True)
class CommandLineToolContext:
    """
    Settings shared by every invocation of one tool.

    Attributes:
        path: Directories prepended to PATH
        environment: Environment variables set for the tool
        args: Arguments appended to every generated argument list
    """

    path: Sequence[Path] = field(default_factory=tuple)
    environment: Dict[str, str] = field(default_factory=dict)
    args: Sequence[str] = field(default_factory=tuple)

    def apply_args(self, args: List[str]) -> List[str]:
        return list(args) + list(self.args)

    def process_environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.environment)
        if self.path:
            env["PATH"] = os.pathsep.join(
                [str(p) for p in self.path] + [env.get("PATH", "")]
            )
        return env


class CommandLineToolInvocationWorker:
    """
    Runs invocations of one tool executable.

    Attributes:
        name: Tool name used in logs
        executable: Path to the tool
    """

    def __init__(self, name: str, executable: Path):
        self.name = name
        self.executable = Path(executable)

    def execute(self, invocation: Invocation, context: CommandLineToolContext) -> str:
        """
        Run an invocation and wait for it to finish.

        Args:
            invocation: What to run
            context: Tool settings

        Returns:
            Combined standard output and standard error of the tool

        Raises:
            ToolExecutionError: If the tool cannot be started or exits non-zero
        """
        command = [str(self.executable)] + list(invocation.args)
        logger.debug(
            f"{invocation.display_name}: {' '.join(command)} (in {invocation.working_directory})"
        )

        try:
            result = subprocess.run(
                command,
                cwd=str(invocation.working_directory),
                env=context.process_environment(),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ToolExecutionError(invocation.display_name, -1, str(e)) from e

        output = result.stdout + result.stderr
        if result.returncode != 0:
            raise ToolExecutionError(invocation.display_name, result.returncode, output)

        if output.strip():
            logger.debug(f"{self.name} output:\n{output.rstrip()}")
        return output
