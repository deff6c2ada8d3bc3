"""Reusable toolchain fixtures for testing.

This module provides pytest fixtures that create fake IAR installations for
testing tool discovery, probing and invocation without the real IAR tools.

Every fake tool is a POSIX shell script that:
- prints its sign-on banner for '--version'
- otherwise appends "<cwd>|<args>" to calls.log next to itself and creates
  the file named after '-o', so callers can see what was run
"""

import sys
from pathlib import Path
from typing import Dict

import pytest

COMPILER_BANNER = "IAR ANSI C/C++ Compiler V9.40.1.364/W64 for ARM"
ASSEMBLER_BANNER = "IAR Assembler V9.40.1.364/W64 for ARM"
LINKER_BANNER = "IAR ELF Linker V9.40.1.364/W64 for ARM"
ARCHIVER_BANNER = "IAR Archive Tool V9.40.1.364/W64 for ARM"

IAR_BANNERS: Dict[str, str] = {
    "iccarm": COMPILER_BANNER,
    "iasmarm": ASSEMBLER_BANNER,
    "ilinkarm": LINKER_BANNER,
    "iarchive": ARCHIVER_BANNER,
}

_TOOL_SCRIPT = """#!/bin/sh
if [ "$1" = "--version" ]; then
  echo "{banner}"
  echo "Copyright 1999-2023 IAR Systems AB."
  exit {version_exit}
fi
echo "$PWD|$*" >> "${{0%/*}}/calls.log"
out=""
while [ $# -gt 0 ]; do
  if [ "$1" = "-o" ]; then
    shift
    out="$1"
  fi
  shift
done
if [ -n "$out" ]; then
  : > "$out"
fi
exit {exit_code}
"""

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="fake tools are POSIX shell scripts"
)


def write_tool(
    bin_dir: Path,
    name: str,
    banner: str = COMPILER_BANNER,
    exit_code: int = 0,
    version_exit: int = 0,
) -> Path:
    """
    Create a fake tool executable.

    Args:
        bin_dir: Directory to create the tool in
        name: Executable name
        banner: Line printed for '--version'
        exit_code: Exit status of a normal invocation
        version_exit: Exit status of '--version'

    Returns:
        Path to the created tool
    """
    bin_dir.mkdir(parents=True, exist_ok=True)
    tool = bin_dir / name
    tool.write_text(
        _TOOL_SCRIPT.format(banner=banner, exit_code=exit_code, version_exit=version_exit)
    )
    tool.chmod(0o755)
    return tool


def read_calls(bin_dir: Path):
    """Calls recorded by the fake tools in bin_dir as (cwd, args) pairs."""
    log = bin_dir / "calls.log"
    if not log.exists():
        return []
    calls = []
    for line in log.read_text().splitlines():
        cwd, _, args = line.partition("|")
        calls.append((cwd, args.split()))
    return calls


@pytest.fixture
def mock_iar_toolchain(tmp_path) -> Path:
    """
    Create a fake IAR for ARM installation.

    Creates bin/iccarm, bin/iasmarm, bin/ilinkarm and bin/iarchive.

    Returns:
        Path to the bin directory

    Example:
        def test_locate(mock_iar_toolchain):
            search = ToolSearchPath([mock_iar_toolchain])
            assert search.locate(ToolRole.C_COMPILER, "iccarm").is_available
    """
    bin_dir = tmp_path / "iar" / "arm" / "bin"
    for name, banner in IAR_BANNERS.items():
        write_tool(bin_dir, name, banner)
    return bin_dir


@pytest.fixture
def mock_gcc_toolchain(tmp_path) -> Path:
    """
    Create an installation whose 'iccarm' is not an IAR tool.

    Returns:
        Path to the bin directory
    """
    bin_dir = tmp_path / "gcc" / "bin"
    for name in IAR_BANNERS:
        write_tool(bin_dir, name, banner="gcc (GCC) 13.2.0")
    return bin_dir


@pytest.fixture
def empty_path(tmp_path, monkeypatch) -> Path:
    """Point the host PATH at an empty directory so no tool is found by accident."""
    empty = tmp_path / "empty-path"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return empty
