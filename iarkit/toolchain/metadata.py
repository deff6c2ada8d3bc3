"""
IAR compiler metadata probing.

Runs a located tool with '--version' and scrapes the sign-on line, which
every IAR tool prints in the form:

    IAR ANSI C/C++ Compiler V7.50.1.10123/W32 for ARM
    IAR ELF Linker V9.40.1.364/W64 for ARM

The version and the architecture are extracted from the first line that
matches. Output without such a line means the executable is not an IAR tool.
"""

import functools
import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from packaging.version import InvalidVersion, Version

from iarkit.core.exceptions import BrokenResultError
from iarkit.core.platform import Architecture, architecture_for_input
from iarkit.toolchain.cache import SingleFlightCache
from iarkit.toolchain.results import (
    BrokenResult,
    ComponentFound,
    ComponentNotFound,
    SearchResult,
)

logger = logging.getLogger(__name__)

SIGN_ON_PATTERN = re.compile(
    r"IAR\s+(?P<product>.+?)\s+V(?P<version>\S+)\s+for\s+(?P<architecture>.+?)\s*"
)

# Numeric version core followed by an optional vendor suffix such as '/W32'
_VERSION_CORE = re.compile(r"[vV]?(?P<core>\d+(?:\.\d+)*)(?P<suffix>[/\-_\s].*)?")


@dataclass(frozen=True)
class CompilerType:
    """Identifies a family of compilers."""

    identifier: str
    description: str


IAR_COMPILER_TYPE = CompilerType(identifier="iar", description="IAR Embedded Workbench")


@functools.total_ordering
class CompilerVersion:
    """
    Version of a compiler as reported by its sign-on line.

    Only the numeric components take part in comparisons. Missing trailing
    components are not padded, so '7.50' sorts before '7.50.0'.

    Example:
        >>> v = CompilerVersion.parse("7.50.1.10123/W32")
        >>> str(v)
        '7.50.1.10123'
        >>> v > CompilerVersion.parse("7.49.0.0")
        True
    """

    def __init__(self, components: Tuple[int, ...], qualifier: str = "", source: str = ""):
        self.components = tuple(components)
        self.qualifier = qualifier
        self.source = source

    @classmethod
    def parse(cls, text: str) -> "CompilerVersion":
        """
        Parse a vendor version string.

        Args:
            text: Version text, e.g. '7.50.1.10123/W32' or 'V9.40.1'

        Returns:
            Parsed version, or UNKNOWN if no numeric version could be found
        """
        text = text.strip()
        match = _VERSION_CORE.fullmatch(text)
        if not match:
            logger.debug(f"Unrecognized version format: {text!r}")
            return cls((), source=text)

        try:
            release = Version(match.group("core")).release
        except InvalidVersion:
            logger.debug(f"Invalid version: {text!r}")
            return cls((), source=text)

        suffix = (match.group("suffix") or "").strip().lstrip("/-_")
        return cls(release, qualifier=suffix, source=text)

    @property
    def is_known(self) -> bool:
        return bool(self.components)

    @property
    def major(self) -> int:
        return self.components[0] if self.components else 0

    @property
    def minor(self) -> int:
        return self.components[1] if len(self.components) > 1 else 0

    @property
    def micro(self) -> int:
        return self.components[2] if len(self.components) > 2 else 0

    def __eq__(self, other) -> bool:
        if not isinstance(other, CompilerVersion):
            return NotImplemented
        return self.components == other.components

    def __lt__(self, other: "CompilerVersion") -> bool:
        if not isinstance(other, CompilerVersion):
            return NotImplemented
        return self.components < other.components

    def __hash__(self) -> int:
        return hash(self.components)

    def __str__(self) -> str:
        if not self.components:
            return "unknown"
        return ".".join(str(c) for c in self.components)

    def __repr__(self) -> str:
        return f"CompilerVersion({self.source!r})"


CompilerVersion.UNKNOWN = CompilerVersion(())


@dataclass(frozen=True)
class IarMetadata:
    """
    Identity of an IAR tool.

    Attributes:
        vendor: Complete sign-on line
        version: Tool version
        default_architecture: Architecture the tool targets
    """

    vendor: str
    version: CompilerVersion
    default_architecture: Architecture

    def __str__(self) -> str:
        return f"{self.version} for {self.default_architecture}"


def parse_compiler_output(stdout: str, stderr: str, file: Path) -> IarMetadata:
    """
    Extract IAR metadata from probe output.

    Args:
        stdout: Standard output of the probe
        stderr: Standard error of the probe
        file: Probed executable, used in diagnostics

    Returns:
        IarMetadata from the first matching line

    Raises:
        BrokenResultError: If no line matches the IAR sign-on pattern
    """
    for line in (stdout + "\n" + stderr).splitlines():
        line = line.strip()
        match = SIGN_ON_PATTERN.fullmatch(line)
        if not match:
            continue

        version = CompilerVersion.parse(match.group("version"))
        architecture = architecture_for_input(match.group("architecture"))
        if not architecture.is_known:
            logger.warning(
                f"{file.name} targets unrecognized architecture '{architecture.name}'"
            )
        return IarMetadata(vendor=line, version=version, default_architecture=architecture)

    raise BrokenResultError(
        f"Could not determine {IAR_COMPILER_TYPE.description} metadata: "
        f"{file.name} produced unexpected output.",
        tool_name=file.name,
    )


class IarMetadataProvider:
    """
    Probes IAR tools for their metadata.

    Each distinct (executable, arguments) probe is run at most once for the
    lifetime of the provider; later requests return the cached result.
    """

    DEFAULT_ARGS = ("--version",)

    def __init__(self):
        self._cache: SingleFlightCache = SingleFlightCache()

    @property
    def compiler_type(self) -> CompilerType:
        return IAR_COMPILER_TYPE

    def compiler_args(self, extra_args: Iterable[str] = ()) -> List[str]:
        return list(self.DEFAULT_ARGS) + list(extra_args)

    def get_compiler_metadata(
        self,
        executable: Path,
        args: Sequence[str] = (),
        search_path: Sequence[Path] = (),
        environment: Optional[Mapping[str, str]] = None,
    ) -> SearchResult[IarMetadata]:
        """
        Get metadata for a tool, probing it if necessary.

        Args:
            executable: Path to the tool
            args: Extra probe arguments, passed after '--version'
            search_path: Directories prepended to PATH for the probe
            environment: Extra environment variables for the probe

        Returns:
            ComponentFound with IarMetadata, BrokenResult if the output was not
            recognized, or ComponentNotFound if the tool could not be run
        """
        key = (str(executable), tuple(args))
        return self._cache.get_or_create(
            key,
            lambda: self._probe(
                executable, self.compiler_args(args), search_path, environment
            ),
        )

    def _probe(
        self,
        executable: Path,
        args: List[str],
        search_path: Sequence[Path],
        environment: Optional[Mapping[str, str]],
    ) -> SearchResult[IarMetadata]:
        command = [str(executable)] + args
        logger.debug(f"Probing {IAR_COMPILER_TYPE.description}: {' '.join(command)}")

        env = dict(os.environ)
        if environment:
            env.update(environment)
        if search_path:
            env["PATH"] = os.pathsep.join(
                [str(p) for p in search_path] + [env.get("PATH", "")]
            )

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                env=env,
                check=False,
            )
        except OSError as e:
            logger.debug(f"Could not run {executable}: {e}")
            return ComponentNotFound(
                f"Could not determine {IAR_COMPILER_TYPE.description} metadata: "
                f"failed to execute {executable.name} {' '.join(args)}."
            )

        if result.returncode != 0:
            logger.debug(
                f"{executable} {' '.join(args)} returned {result.returncode}: "
                f"{(result.stdout + result.stderr)[:200]}"
            )
            return ComponentNotFound(
                f"Could not determine {IAR_COMPILER_TYPE.description} metadata: "
                f"failed to execute {executable.name} {' '.join(args)}."
            )

        try:
            metadata = parse_compiler_output(result.stdout, result.stderr, executable)
        except BrokenResultError as e:
            logger.debug(f"Unexpected probe output: {result.stdout[:200]!r}")
            return BrokenResult(str(e))

        logger.debug(f"{executable.name} identified as {metadata.vendor}")
        return ComponentFound(metadata)
