"""
Executors for the IAR compiler, assembler, linker and archiver.

An executor turns a spec into invocations and hands them to the shared
BuildOperationExecutor, blocking until they have all finished. Failures
of the external tool propagate as ToolExecutionError.

Example:
    compiler = provider.new_compiler(ToolRole.C_COMPILER)
    result = compiler.execute(CompileSpec(
        source_files=[Path("src/main.c")],
        object_file_dir=Path("build/obj"),
        temp_dir=Path("build/tmp/compileC"),
    ))
"""

import functools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from iarkit.core.exceptions import StaleOutputError
from iarkit.core.execution import BuildOperationExecutor
from iarkit.toolchain.args import (
    OBJECT_FILE_EXTENSION,
    CompileSpec,
    LinkerSpec,
    StaticLibraryArchiverSpec,
    absolute,
    archiver_working_dir,
    object_file_for,
    source_args,
    transform_args,
)
from iarkit.toolchain.invocation import (
    CommandLineToolContext,
    CommandLineToolInvocationWorker,
    Invocation,
)
from iarkit.toolchain.metadata import CompilerVersion
from iarkit.toolchain.options_file import IarOptionsFileArgsWriter
from iarkit.toolchain.tools import ToolRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkResult:
    """Outcome of an executor run."""

    did_work: bool


@dataclass(frozen=True)
class CompilerVersionInfo:
    """
    Identity of the compiler behind an executor.

    Attributes:
        type: Compiler type identifier ('iar')
        vendor: Vendor sign-on line
        version: Compiler version
    """

    type: str
    vendor: str
    version: CompilerVersion


class AbstractCompiler:
    """
    Common behaviour of all tool executors.

    Subclasses decide how a spec is split into invocations.
    """

    def __init__(
        self,
        role: ToolRole,
        build_operation_executor: BuildOperationExecutor,
        worker: CommandLineToolInvocationWorker,
        context: CommandLineToolContext,
        use_command_file: bool,
    ):
        self.role = role
        self.build_operation_executor = build_operation_executor
        self.worker = worker
        self.context = context
        self.use_command_file = use_command_file

    def execute(self, spec) -> WorkResult:
        args = self.get_arguments(spec)
        invocations = self.new_invocations(spec, args)
        self.run_invocations(invocations)
        return WorkResult(did_work=bool(invocations))

    def get_arguments(self, spec) -> List[str]:
        """Generic arguments for a spec, rewritten to an options file if enabled."""
        args = self.context.apply_args(transform_args(self.role, spec))
        if self.use_command_file:
            args = IarOptionsFileArgsWriter(spec.temp_dir).rewrite(args)
        return args

    def new_invocations(self, spec, args: List[str]) -> List[Invocation]:
        raise NotImplementedError

    def run_invocations(self, invocations: List[Invocation]) -> None:
        self.build_operation_executor.run_all(
            [functools.partial(self._run, invocation) for invocation in invocations]
        )

    def _run(self, invocation: Invocation) -> None:
        if invocation.output_target is not None:
            invocation.output_target.parent.mkdir(parents=True, exist_ok=True)
        self.worker.execute(invocation, self.context)


class NativeCompiler(AbstractCompiler):
    """Compiles (or assembles) each source file with its own invocation."""

    def __init__(self, *args, object_file_extension: str = OBJECT_FILE_EXTENSION, **kwargs):
        super().__init__(*args, **kwargs)
        self.object_file_extension = object_file_extension

    def new_invocations(self, spec: CompileSpec, args: List[str]) -> List[Invocation]:
        invocations = []
        for source_file in spec.source_files:
            object_file = object_file_for(
                source_file, spec.object_file_dir, self.object_file_extension
            )
            invocations.append(
                Invocation(
                    display_name=f"compiling {source_file.name}",
                    working_directory=object_file.parent,
                    args=args + source_args(source_file, object_file),
                    output_target=object_file,
                )
            )
        return invocations


class Linker(AbstractCompiler):
    """Links object files into an executable image."""

    def new_invocations(self, spec: LinkerSpec, args: List[str]) -> List[Invocation]:
        output_file = Path(absolute(spec.output_file))
        return [
            Invocation(
                display_name=f"linking {output_file.name}",
                working_directory=output_file.parent,
                args=args,
                output_target=output_file,
            )
        ]


class StaticArchiver(AbstractCompiler):
    """
    Archives object files into a static library.

    An existing library is deleted first so objects from a previous build
    cannot linger in the archive. The archiver runs from the directory
    containing all the inputs and refers to them by relative path.
    """

    def __init__(
        self,
        role: ToolRole,
        build_operation_executor: BuildOperationExecutor,
        worker: CommandLineToolInvocationWorker,
        context: CommandLineToolContext,
    ):
        super().__init__(
            role, build_operation_executor, worker, context, use_command_file=False
        )

    def execute(self, spec: StaticLibraryArchiverSpec) -> WorkResult:
        self.delete_previous_output(spec)
        return super().execute(spec)

    @staticmethod
    def delete_previous_output(spec: StaticLibraryArchiverSpec) -> None:
        output_file = Path(spec.output_file)
        if not output_file.is_file():
            return
        try:
            output_file.unlink()
        except OSError as e:
            raise StaleOutputError(
                "Create static archive failed: could not delete previous archive "
                f"'{output_file}'",
                output_file,
            ) from e
        logger.debug(f"Deleted previous archive {output_file}")

    def new_invocations(
        self, spec: StaticLibraryArchiverSpec, args: List[str]
    ) -> List[Invocation]:
        return [
            Invocation(
                display_name=f"archiving {spec.output_file.name}",
                working_directory=archiver_working_dir(spec),
                args=args,
                output_target=spec.output_file,
            )
        ]


class OutputCleaningCompiler:
    """Removes the objects of deleted sources before compiling."""

    def __init__(self, delegate: AbstractCompiler, object_file_extension: str = OBJECT_FILE_EXTENSION):
        self.delegate = delegate
        self.object_file_extension = object_file_extension

    def execute(self, spec: CompileSpec) -> WorkResult:
        did_remove = self.remove_stale_objects(spec)
        if not spec.source_files:
            return WorkResult(did_work=did_remove)
        result = self.delegate.execute(spec)
        return WorkResult(did_work=result.did_work or did_remove)

    def remove_stale_objects(self, spec: CompileSpec) -> bool:
        removed = False
        for source_file in spec.removed_source_files:
            object_file = object_file_for(
                source_file, spec.object_file_dir, self.object_file_extension
            )
            if not object_file.is_file():
                continue
            try:
                object_file.unlink()
            except OSError as e:
                raise StaleOutputError(
                    f"Could not delete stale object file '{object_file}'", object_file
                ) from e
            logger.debug(f"Removed stale object {object_file}")
            removed = True
        return removed


class VersionAwareCompiler:
    """An executor that knows which compiler version it runs."""

    def __init__(self, delegate, version: CompilerVersionInfo):
        self.delegate = delegate
        self.version = version

    def execute(self, spec) -> WorkResult:
        return self.delegate.execute(spec)
