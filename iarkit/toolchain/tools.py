"""
Tool roles and per-platform tool configuration.

A toolchain is configured as a sequence of plain data steps applied to a
fresh PlatformToolChain for every target platform:

    default tools -> matching target configuration -> global overrides

Each step is a ToolOverride (or the built-in defaults), so the resulting
tool set can be inspected and tested without running any callbacks.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from iarkit.core.exceptions import ToolchainError
from iarkit.core.platform import NativePlatform

logger = logging.getLogger(__name__)


class ToolRole(Enum):
    """The closed set of tools a native toolchain provides."""

    C_COMPILER = "c_compiler"
    CPP_COMPILER = "cpp_compiler"
    ASSEMBLER = "assembler"
    LINKER = "linker"
    STATIC_LIB_ARCHIVER = "static_lib_archiver"

    @property
    def tool_name(self) -> str:
        """Human readable tool name used in diagnostics."""
        return _TOOL_NAMES[self]

    @classmethod
    def from_key(cls, key: str) -> "ToolRole":
        """
        Look up a role by its configuration key (e.g. 'c_compiler').

        Raises:
            ValueError: If the key does not name a role
        """
        try:
            return cls(key.lower())
        except ValueError:
            valid = ", ".join(role.value for role in cls)
            raise ValueError(f"Unknown tool '{key}'. Must be one of: {valid}") from None


_TOOL_NAMES = {
    ToolRole.C_COMPILER: "C compiler",
    ToolRole.CPP_COMPILER: "C++ compiler",
    ToolRole.ASSEMBLER: "Assembler",
    ToolRole.LINKER: "Linker",
    ToolRole.STATIC_LIB_ARCHIVER: "Static library archiver",
}

COMPILER_ROLES = (ToolRole.C_COMPILER, ToolRole.CPP_COMPILER)

# Registration order matters: availability probing walks tools in this order.
DEFAULT_TOOLS: Tuple[Tuple[ToolRole, str], ...] = (
    (ToolRole.C_COMPILER, "iccarm"),
    (ToolRole.CPP_COMPILER, "iccarm"),
    (ToolRole.LINKER, "ilinkarm"),
    (ToolRole.STATIC_LIB_ARCHIVER, "iarchive"),
    (ToolRole.ASSEMBLER, "iasmarm"),
)


class ToolConfiguration:
    """
    Configuration of one tool: which executable implements a role.

    The role is fixed at construction. The other attributes can be changed
    until the owning PlatformToolChain is finalized.

    Attributes:
        role: Tool role (read-only)
        executable: Executable name or path
        probe_args: Extra arguments passed when probing the tool's identity
        args: Extra arguments appended to every invocation of the tool
    """

    def __init__(
        self,
        role: ToolRole,
        executable: str,
        probe_args: Sequence[str] = (),
        args: Sequence[str] = (),
    ):
        self._role = role
        self._executable = executable
        self._probe_args = list(probe_args)
        self._args = list(args)
        self._finalized = False

    @property
    def role(self) -> ToolRole:
        return self._role

    @property
    def executable(self) -> str:
        return self._executable

    @executable.setter
    def executable(self, value: str) -> None:
        self._check_mutable()
        self._executable = value

    @property
    def probe_args(self) -> List[str]:
        return list(self._probe_args)

    @probe_args.setter
    def probe_args(self, value: Sequence[str]) -> None:
        self._check_mutable()
        self._probe_args = list(value)

    @property
    def args(self) -> List[str]:
        return list(self._args)

    @args.setter
    def args(self, value: Sequence[str]) -> None:
        self._check_mutable()
        self._args = list(value)

    def finalize(self) -> None:
        self._finalized = True

    def _check_mutable(self) -> None:
        if self._finalized:
            raise ToolchainError(
                f"Cannot change {self._role.tool_name} configuration after the "
                "toolchain has been resolved for a platform"
            )

    def __repr__(self) -> str:
        return (
            f"ToolConfiguration(role={self._role.name}, executable={self._executable!r})"
        )


@dataclass(frozen=True)
class ToolOverride:
    """
    A configuration step that adds or changes one tool.

    Fields left as None keep the current value of an existing tool.

    Attributes:
        role: Tool role to change
        executable: Replacement executable name
        probe_args: Replacement probe arguments
        args: Replacement invocation arguments
    """

    role: ToolRole
    executable: Optional[str] = None
    probe_args: Optional[Tuple[str, ...]] = None
    args: Optional[Tuple[str, ...]] = None

    def apply(self, toolchain: "PlatformToolChain") -> None:
        tool = toolchain.get_tool(self.role)
        if tool is None:
            if self.executable is None:
                raise ToolchainError(
                    f"Cannot add {self.role.tool_name} without an executable"
                )
            toolchain.add(
                ToolConfiguration(
                    self.role,
                    self.executable,
                    probe_args=self.probe_args or (),
                    args=self.args or (),
                )
            )
            return

        if self.executable is not None:
            tool.executable = self.executable
        if self.probe_args is not None:
            tool.probe_args = self.probe_args
        if self.args is not None:
            tool.args = self.args


class PlatformToolChain:
    """
    The tool set used for one target platform.

    Tools are kept in registration order; at most one tool per role.
    """

    def __init__(self, platform: NativePlatform, use_command_file: bool = True):
        self.platform = platform
        self.use_command_file = use_command_file
        self._tools: Dict[ToolRole, ToolConfiguration] = {}
        self._finalized = False

    def add(self, tool: ToolConfiguration) -> None:
        """Register a tool, replacing any tool already registered for its role."""
        if self._finalized:
            raise ToolchainError(
                f"Cannot add tools for {self.platform.display_name} after it has been resolved"
            )
        self._tools[tool.role] = tool

    def get_tool(self, role: ToolRole) -> Optional[ToolConfiguration]:
        return self._tools.get(role)

    @property
    def tools(self) -> List[ToolConfiguration]:
        return list(self._tools.values())

    @property
    def compilers(self) -> List[ToolConfiguration]:
        return [tool for tool in self._tools.values() if tool.role in COMPILER_ROLES]

    def finalize(self) -> None:
        """Freeze the tool set; no further changes are accepted."""
        self._finalized = True
        for tool in self._tools.values():
            tool.finalize()


def add_default_tools(toolchain: PlatformToolChain) -> None:
    """Register the stock IAR for ARM executables."""
    for role, executable in DEFAULT_TOOLS:
        toolchain.add(ToolConfiguration(role, executable))


def apply_overrides(
    toolchain: PlatformToolChain, overrides: Iterable[ToolOverride]
) -> None:
    for override in overrides:
        override.apply(toolchain)


@dataclass(frozen=True)
class TargetPlatformConfiguration:
    """
    Configuration applied to platforms whose name is listed.

    Attributes:
        platform_names: Names of the platforms this configuration matches
        overrides: Tool overrides applied to matching platforms
        use_command_file: Override for options file usage, if set
    """

    platform_names: FrozenSet[str]
    overrides: Tuple[ToolOverride, ...] = field(default_factory=tuple)
    use_command_file: Optional[bool] = None

    def supports_platform(self, platform: NativePlatform) -> bool:
        return platform.name in self.platform_names

    def apply(self, toolchain: PlatformToolChain) -> None:
        if self.use_command_file is not None:
            toolchain.use_command_file = self.use_command_file
        apply_overrides(toolchain, self.overrides)
