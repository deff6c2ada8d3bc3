"""
Platform tool providers.

A provider hands out the tool executors for one target platform. Selecting
a platform always yields a provider: a working IarPlatformToolProvider, or a
stand-in that explains why the platform cannot be built for.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from iarkit.core.exceptions import (
    ToolchainUnavailableError,
    ToolchainUnsupportedError,
)
from iarkit.core.execution import BuildOperationExecutor
from iarkit.toolchain.args import OBJECT_FILE_EXTENSION
from iarkit.toolchain.compilers import (
    CompilerVersionInfo,
    Linker,
    NativeCompiler,
    OutputCleaningCompiler,
    StaticArchiver,
    VersionAwareCompiler,
)
from iarkit.toolchain.invocation import (
    CommandLineToolContext,
    CommandLineToolInvocationWorker,
)
from iarkit.toolchain.metadata import IarMetadata, IarMetadataProvider
from iarkit.toolchain.results import ComponentNotFound, SearchResult
from iarkit.toolchain.search import ToolSearchPath, ToolSearchResult
from iarkit.toolchain.tools import PlatformToolChain, ToolConfiguration, ToolRole

logger = logging.getLogger(__name__)


class SystemLibraries:
    """System include directories, libraries and macros implied by a tool."""

    def __init__(self):
        self.include_dirs: List[Path] = []
        self.library_dirs: List[Path] = []
        self.preprocessor_macros: Dict[str, str] = {}


class PlatformToolProvider:
    """Base class for per-platform tool providers."""

    def __init__(self, operating_system: str):
        self.operating_system = operating_system

    @property
    def is_available(self) -> bool:
        return True

    @property
    def is_supported(self) -> bool:
        return True

    def explain(self) -> str:
        return ""

    @property
    def object_file_extension(self) -> str:
        return OBJECT_FILE_EXTENSION

    def get_executable_name(self, name: str) -> str:
        return f"{name}.out"

    def get_static_library_name(self, name: str) -> str:
        return f"{name}.a"

    def locate_tool(self, role: ToolRole) -> SearchResult:
        raise NotImplementedError

    def new_compiler(self, role: ToolRole) -> Any:
        raise NotImplementedError

    def get_compiler_metadata(self, role: ToolRole) -> Optional[IarMetadata]:
        raise NotImplementedError

    def get_system_libraries(self, role: ToolRole) -> SystemLibraries:
        return SystemLibraries()


class UnavailablePlatformToolProvider(PlatformToolProvider):
    """Stand-in for a platform whose tools are missing or not IAR tools."""

    def __init__(self, operating_system: str, failure: SearchResult):
        super().__init__(operating_system)
        self.failure = failure

    @property
    def is_available(self) -> bool:
        return False

    def explain(self) -> str:
        return self.failure.explain()

    def locate_tool(self, role: ToolRole) -> SearchResult:
        return self.failure

    def new_compiler(self, role: ToolRole) -> Any:
        raise ToolchainUnavailableError(self.failure.explain())

    def get_compiler_metadata(self, role: ToolRole) -> Optional[IarMetadata]:
        raise ToolchainUnavailableError(self.failure.explain())


class UnsupportedPlatformToolProvider(PlatformToolProvider):
    """Stand-in for a platform or language the toolchain cannot handle at all."""

    def __init__(self, operating_system: str, message: str):
        super().__init__(operating_system)
        self.message = message

    @property
    def is_available(self) -> bool:
        return False

    @property
    def is_supported(self) -> bool:
        return False

    def explain(self) -> str:
        return self.message

    def locate_tool(self, role: ToolRole) -> SearchResult:
        raise ToolchainUnsupportedError(self.message)

    def new_compiler(self, role: ToolRole) -> Any:
        raise ToolchainUnsupportedError(self.message)

    def get_compiler_metadata(self, role: ToolRole) -> Optional[IarMetadata]:
        raise ToolchainUnsupportedError(self.message)


class IarPlatformToolProvider(PlatformToolProvider):
    """
    Provides IAR tool executors for one target platform.

    Executors are created on first request and reused afterwards.
    """

    def __init__(
        self,
        build_operation_executor: BuildOperationExecutor,
        operating_system: str,
        tool_search_path: ToolSearchPath,
        tools: PlatformToolChain,
        metadata_provider: IarMetadataProvider,
        environment: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(operating_system)
        self.build_operation_executor = build_operation_executor
        self.tool_search_path = tool_search_path
        self.tools = tools
        self.metadata_provider = metadata_provider
        self.environment = dict(environment or {})
        self._compilers: Dict[ToolRole, Any] = {}
        self._lock = threading.Lock()

    @property
    def use_command_file(self) -> bool:
        return self.tools.use_command_file

    def locate_tool(self, role: ToolRole) -> SearchResult:
        tool = self.tools.get_tool(role)
        if tool is None:
            return ComponentNotFound(f"Tool {role.tool_name} is not available")
        return self.tool_search_path.locate(role, tool.executable)

    def new_compiler(self, role: ToolRole) -> Any:
        """
        Get the executor for a tool role.

        Raises:
            ToolchainUnavailableError: If the tool is not configured or not found
        """
        compiler = self._compilers.get(role)
        if compiler is not None:
            return compiler
        with self._lock:
            compiler = self._compilers.get(role)
            if compiler is None:
                compiler = self._create_compiler(role)
                self._compilers[role] = compiler
        return compiler

    def _create_compiler(self, role: ToolRole) -> Any:
        tool = self._required_tool(role)
        worker = self._command_line_tool(tool)
        context = self._context(tool)

        if role in (ToolRole.C_COMPILER, ToolRole.CPP_COMPILER):
            compiler = NativeCompiler(
                role,
                self.build_operation_executor,
                worker,
                context,
                use_command_file=self.use_command_file,
                object_file_extension=self.object_file_extension,
            )
            cleaning = OutputCleaningCompiler(compiler, self.object_file_extension)
            return VersionAwareCompiler(cleaning, self._version_info(role))
        if role is ToolRole.ASSEMBLER:
            # iasmarm is always invoked without an options file
            return NativeCompiler(
                role,
                self.build_operation_executor,
                worker,
                context,
                use_command_file=False,
                object_file_extension=self.object_file_extension,
            )
        if role is ToolRole.LINKER:
            linker = Linker(
                role,
                self.build_operation_executor,
                worker,
                context,
                use_command_file=self.use_command_file,
            )
            return VersionAwareCompiler(linker, self._version_info(role))
        return StaticArchiver(role, self.build_operation_executor, worker, context)

    def _required_tool(self, role: ToolRole) -> ToolConfiguration:
        tool = self.tools.get_tool(role)
        if tool is None:
            raise ToolchainUnavailableError(f"Tool {role.tool_name} is not available")
        return tool

    def _command_line_tool(self, tool: ToolConfiguration) -> CommandLineToolInvocationWorker:
        result = self.tool_search_path.locate(tool.role, tool.executable)
        if not result.is_available:
            raise ToolchainUnavailableError(result.explain())
        return CommandLineToolInvocationWorker(tool.role.tool_name, result.tool)

    def _context(self, tool: ToolConfiguration) -> CommandLineToolContext:
        return CommandLineToolContext(
            path=tuple(self.tool_search_path.search_path),
            environment=dict(self.environment),
            args=tuple(tool.args),
        )

    def _version_info(self, role: ToolRole) -> CompilerVersionInfo:
        metadata = self.get_compiler_metadata(role)
        return CompilerVersionInfo(
            type=self.metadata_provider.compiler_type.identifier,
            vendor=metadata.vendor,
            version=metadata.version,
        )

    def _metadata_result(self, role: ToolRole) -> SearchResult[IarMetadata]:
        tool = self.tools.get_tool(role)
        if tool is None:
            return ComponentNotFound(f"Tool {role.tool_name} is not available")
        located: ToolSearchResult = self.tool_search_path.locate(role, tool.executable)
        if not located.is_available:
            return located
        return self.metadata_provider.get_compiler_metadata(
            located.tool,
            tool.probe_args,
            search_path=self.tool_search_path.search_path,
            environment=self.environment,
        )

    def get_compiler_metadata(self, role: ToolRole) -> IarMetadata:
        """
        Metadata of the tool implementing a role.

        Raises:
            ToolchainUnavailableError: If the tool cannot be identified
        """
        result = self._metadata_result(role)
        if not result.is_available:
            raise ToolchainUnavailableError(result.explain())
        return result.component
