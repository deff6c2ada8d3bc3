"""
Locating tool executables.

The search path is the list of directories configured on the toolchain,
followed by the host PATH. Lookups are never cached so a changed
filesystem is always seen.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Union

from iarkit.toolchain.results import SearchResult
from iarkit.toolchain.tools import ToolRole

logger = logging.getLogger(__name__)


class ToolSearchResult(SearchResult[Path]):
    """
    Result of locating a tool executable.

    Attributes:
        role: Tool role that was searched for
        executable: Executable name that was searched for
        tool: Path to the executable, or None if not found
        searched: Directories that were searched (empty entry means PATH)
    """

    def __init__(
        self,
        role: ToolRole,
        executable: str,
        tool: Optional[Path],
        searched: Iterable[Path] = (),
    ):
        self.role = role
        self.executable = executable
        self.tool = tool
        self.searched = list(searched)

    @property
    def is_available(self) -> bool:
        return self.tool is not None

    @property
    def component(self) -> Optional[Path]:
        return self.tool

    def explain(self) -> str:
        if self.tool is not None:
            return ""
        lines = [f"Could not find {self.role.tool_name} '{self.executable}'. Searched in:"]
        lines.extend(f"  - {directory}" for directory in self.searched)
        lines.append("  - PATH")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ToolSearchResult({self.role.name}, {self.executable!r}, {self.tool!r})"


class ToolSearchPath:
    """
    Ordered list of directories to look for tools in.

    Example:
        >>> search = ToolSearchPath(["/opt/iar/arm/bin"])
        >>> result = search.locate(ToolRole.C_COMPILER, "iccarm")
        >>> result.is_available
        True
    """

    def __init__(self, path: Iterable[Union[str, Path]] = ()):
        self._path: List[Path] = []
        self.path(*path)

    def path(self, *entries: Union[str, Path]) -> None:
        """Append directories to the search path."""
        for entry in entries:
            self._path.append(Path(entry).expanduser())

    @property
    def search_path(self) -> List[Path]:
        return list(self._path)

    def locate(self, role: ToolRole, executable: str) -> ToolSearchResult:
        """
        Locate an executable for a tool role.

        Absolute or relative paths are checked directly. Bare names are
        looked up in the configured directories first, then on the host PATH.

        Args:
            role: Tool role, used for diagnostics
            executable: Executable name or path

        Returns:
            ToolSearchResult; not finding the tool is not an error
        """
        candidate = Path(executable)
        if candidate.parent != Path("."):
            found = shutil.which(str(candidate))
            return ToolSearchResult(
                role, executable, Path(found) if found else None, [candidate.parent]
            )

        for directory in self._path:
            found = shutil.which(executable, path=str(directory))
            if found:
                logger.debug(f"Found {role.tool_name} '{executable}' at {found}")
                return ToolSearchResult(role, executable, Path(found), self._path)

        found = shutil.which(executable, path=os.environ.get("PATH", os.defpath))
        if found:
            logger.debug(f"Found {role.tool_name} '{executable}' on PATH at {found}")
            return ToolSearchResult(role, executable, Path(found), self._path)

        logger.debug(f"{role.tool_name} '{executable}' not found")
        return ToolSearchResult(role, executable, None, self._path)
