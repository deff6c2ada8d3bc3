"""
IAR toolchain support for iarkit.

This module provides functionality for:
- Locating IAR tools on a search path
- Probing tools for their version and target architecture
- Building IAR command lines, with options file support
- Running compile, assemble, link and archive steps
- Selecting tools per target platform and source language
"""

from iarkit.toolchain.args import (
    AssembleSpec,
    CompileSpec,
    LinkerSpec,
    SourceLanguage,
    StaticLibraryArchiverSpec,
    transform_args,
)
from iarkit.toolchain.cache import SingleFlightCache
from iarkit.toolchain.compilers import (
    CompilerVersionInfo,
    Linker,
    NativeCompiler,
    OutputCleaningCompiler,
    StaticArchiver,
    VersionAwareCompiler,
    WorkResult,
)
from iarkit.toolchain.iar import IarToolChain, NativeLanguage
from iarkit.toolchain.invocation import (
    CommandLineToolContext,
    CommandLineToolInvocationWorker,
    Invocation,
)
from iarkit.toolchain.metadata import (
    CompilerVersion,
    IarMetadata,
    IarMetadataProvider,
    parse_compiler_output,
)
from iarkit.toolchain.options_file import IarOptionsFileArgsWriter
from iarkit.toolchain.providers import (
    IarPlatformToolProvider,
    PlatformToolProvider,
    UnavailablePlatformToolProvider,
    UnsupportedPlatformToolProvider,
)
from iarkit.toolchain.results import ToolChainAvailability
from iarkit.toolchain.search import ToolSearchPath, ToolSearchResult
from iarkit.toolchain.tools import (
    PlatformToolChain,
    TargetPlatformConfiguration,
    ToolConfiguration,
    ToolOverride,
    ToolRole,
)

__all__ = [
    # Selection
    "IarToolChain",
    "NativeLanguage",
    "PlatformToolProvider",
    "IarPlatformToolProvider",
    "UnavailablePlatformToolProvider",
    "UnsupportedPlatformToolProvider",
    "SingleFlightCache",
    # Tools
    "ToolRole",
    "ToolConfiguration",
    "ToolOverride",
    "PlatformToolChain",
    "TargetPlatformConfiguration",
    "ToolSearchPath",
    "ToolSearchResult",
    "ToolChainAvailability",
    # Metadata
    "CompilerVersion",
    "IarMetadata",
    "IarMetadataProvider",
    "parse_compiler_output",
    # Arguments
    "SourceLanguage",
    "CompileSpec",
    "AssembleSpec",
    "LinkerSpec",
    "StaticLibraryArchiverSpec",
    "transform_args",
    "IarOptionsFileArgsWriter",
    # Execution
    "Invocation",
    "CommandLineToolContext",
    "CommandLineToolInvocationWorker",
    "NativeCompiler",
    "Linker",
    "StaticArchiver",
    "OutputCleaningCompiler",
    "VersionAwareCompiler",
    "CompilerVersionInfo",
    "WorkResult",
]
