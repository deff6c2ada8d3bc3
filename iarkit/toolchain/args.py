"""
Command line construction for the IAR tools.

Every tool role has a pure transform from a spec to an ordered list of
arguments. Compilers and the assembler share one backbone:

    common flags -> language flag -> user args -> <source> -o <object>

The generic part (everything before the source) is computed once per spec
by ``transform_args``; the per-file part by ``source_args``. Paths are
made absolute against the current directory, as the tools run elsewhere.
Nothing here touches the filesystem.
"""

import hashlib
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from iarkit.toolchain.tools import ToolRole

OBJECT_FILE_EXTENSION = ".o"


class SourceLanguage(Enum):
    """Languages the IAR compiler and assembler accept."""

    C = "c"
    CPP = "c++"
    ASSEMBLY = "asm"


# The C++ driver is the same executable as the C one; only this flag differs.
LANGUAGE_FLAGS: Dict[SourceLanguage, List[str]] = {
    SourceLanguage.C: [],
    SourceLanguage.CPP: ["--c++"],
    SourceLanguage.ASSEMBLY: [],
}


@dataclass
class CompileSpec:
    """
    Request to compile (or assemble) a set of source files.

    Attributes:
        source_files: Files to compile, one invocation each
        object_file_dir: Root directory for object files
        temp_dir: Scratch directory for this step (options file)
        include_roots: Include directories, in search order
        macros: Preprocessor definitions; None values define without a value
        args: Extra arguments supplied by the build
        removed_source_files: Sources removed since the last build
        debuggable: Emit debug information
        optimized: Optimize for speed
    """

    source_files: List[Path]
    object_file_dir: Path
    temp_dir: Path
    include_roots: List[Path] = field(default_factory=list)
    macros: Dict[str, Optional[str]] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)
    removed_source_files: List[Path] = field(default_factory=list)
    debuggable: bool = False
    optimized: bool = False


@dataclass
class AssembleSpec(CompileSpec):
    """Request to assemble a set of assembly sources."""

    pass


@dataclass
class LinkerSpec:
    """
    Request to link object files into an executable.

    Attributes:
        object_files: Object files to link, in order
        output_file: Executable to produce
        temp_dir: Scratch directory for this step (options file)
        libraries: Static libraries to link against, in order
        linker_config: ILINK configuration (.icf) file
        args: Extra arguments supplied by the build
    """

    object_files: List[Path]
    output_file: Path
    temp_dir: Path
    libraries: List[Path] = field(default_factory=list)
    linker_config: Optional[Path] = None
    args: List[str] = field(default_factory=list)


@dataclass
class StaticLibraryArchiverSpec:
    """
    Request to archive object files into a static library.

    Attributes:
        object_files: Object files to archive
        output_file: Library to produce
        temp_dir: Scratch directory for this step
        args: Extra arguments supplied by the build
    """

    object_files: List[Path]
    output_file: Path
    temp_dir: Path
    args: List[str] = field(default_factory=list)


def macro_args(macros: Mapping[str, Optional[str]]) -> List[str]:
    args = []
    for name, value in macros.items():
        args.append(f"-D{name}" if value is None else f"-D{name}={value}")
    return args


def absolute(path) -> str:
    """Absolute path string, as passed to tools running in another directory."""
    return os.path.abspath(str(path))


def include_args(include_roots: Sequence[Path]) -> List[str]:
    return [f"-I{absolute(root)}" for root in include_roots]


def _compile_args(spec: CompileSpec, language: SourceLanguage) -> List[str]:
    args = macro_args(spec.macros) + include_args(spec.include_roots)
    if spec.debuggable:
        args.append("--debug")
    if spec.optimized:
        args.append("-Oh")
    args.extend(LANGUAGE_FLAGS[language])
    args.extend(spec.args)
    return args


def compile_c_args(spec: CompileSpec) -> List[str]:
    return _compile_args(spec, SourceLanguage.C)


def compile_cpp_args(spec: CompileSpec) -> List[str]:
    return _compile_args(spec, SourceLanguage.CPP)


def assemble_args(spec: CompileSpec) -> List[str]:
    args = macro_args(spec.macros) + include_args(spec.include_roots)
    args.extend(spec.args)
    return args


def link_args(spec: LinkerSpec) -> List[str]:
    args = list(spec.args)
    args.extend(absolute(f) for f in spec.object_files)
    args.extend(absolute(lib) for lib in spec.libraries)
    if spec.linker_config is not None:
        args.extend(["--config", absolute(spec.linker_config)])
    args.extend(["-o", absolute(spec.output_file)])
    return args


def common_path(files: Sequence[Path]) -> Path:
    """
    Deepest directory containing all the given files.

    Raises:
        ValueError: If no files are given
    """
    if not files:
        raise ValueError("Cannot compute the common directory of no files")
    parents = [os.path.abspath(os.path.dirname(str(f))) for f in files]
    return Path(os.path.commonpath(parents))


def archiver_working_dir(spec: StaticLibraryArchiverSpec) -> Path:
    """Directory the archiver runs in: the common ancestor of all inputs."""
    if not spec.object_files:
        return Path(absolute(spec.output_file)).parent
    return common_path(spec.object_files)


def archive_args(spec: StaticLibraryArchiverSpec) -> List[str]:
    args = ["--create"]
    args.extend(spec.args)
    work_dir = archiver_working_dir(spec)
    for object_file in spec.object_files:
        args.append(os.path.relpath(absolute(object_file), str(work_dir)))
    args.extend(["-o", absolute(spec.output_file)])
    return args


ARGS_TRANSFORMERS: Dict[ToolRole, Callable] = {
    ToolRole.C_COMPILER: compile_c_args,
    ToolRole.CPP_COMPILER: compile_cpp_args,
    ToolRole.ASSEMBLER: assemble_args,
    ToolRole.LINKER: link_args,
    ToolRole.STATIC_LIB_ARCHIVER: archive_args,
}


def transform_args(role: ToolRole, spec) -> List[str]:
    """
    Build the generic arguments of a tool invocation.

    Args:
        role: Tool role the arguments are for
        spec: CompileSpec, AssembleSpec, LinkerSpec or StaticLibraryArchiverSpec

    Returns:
        Ordered argument list
    """
    return ARGS_TRANSFORMERS[role](spec)


def source_args(source_file: Path, object_file: Path) -> List[str]:
    """Per-file arguments appended to a compile or assemble invocation."""
    return [absolute(source_file), "-o", absolute(object_file)]


def object_file_for(
    source_file: Path, object_file_dir: Path, extension: str = OBJECT_FILE_EXTENSION
) -> Path:
    """
    Object file produced for a source file.

    Sources with the same name in different directories get distinct
    objects: the object lives in a subdirectory named after a hash of the
    source's directory.
    """
    source_dir = os.path.dirname(absolute(source_file))
    digest = hashlib.md5(source_dir.encode("utf-8")).hexdigest()[:16]
    return Path(absolute(object_file_dir)) / digest / f"{source_file.stem}{extension}"
