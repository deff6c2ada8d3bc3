"""
Unit tests for IAR metadata probing.
"""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from tests.fixtures.toolchains import COMPILER_BANNER, posix_only, write_tool
from iarkit.core.exceptions import BrokenResultError
from iarkit.toolchain.metadata import (
    IAR_COMPILER_TYPE,
    CompilerVersion,
    IarMetadataProvider,
    parse_compiler_output,
)
from iarkit.toolchain.results import BrokenResult


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


class TestCompilerVersion:
    """Test CompilerVersion parsing and ordering."""

    def test_parse_strips_vendor_suffix(self):
        """Test that '/W32' style suffixes are not part of the version."""
        version = CompilerVersion.parse("7.50.1.10123/W32")
        assert version.components == (7, 50, 1, 10123)
        assert version.qualifier == "W32"
        assert str(version) == "7.50.1.10123"
        assert (version.major, version.minor, version.micro) == (7, 50, 1)

    def test_parse_leading_v(self):
        """Test that a leading V is ignored."""
        assert CompilerVersion.parse("V9.40.1").components == (9, 40, 1)

    def test_ordering(self):
        """Test numeric ordering of versions."""
        assert CompilerVersion.parse("7.50.1.10123/W32") > CompilerVersion.parse("7.49.0.0")
        assert CompilerVersion.parse("9.10") > CompilerVersion.parse("9.9")
        assert CompilerVersion.parse("7.50") < CompilerVersion.parse("7.50.0")

    def test_suffix_does_not_affect_equality(self):
        """Test that versions differing only in suffix are equal."""
        assert CompilerVersion.parse("9.40.1/W32") == CompilerVersion.parse("9.40.1/W64")
        assert hash(CompilerVersion.parse("9.40.1/W32")) == hash(CompilerVersion.parse("9.40.1"))

    def test_unparseable_is_unknown(self):
        """Test that garbage gives an unknown version sorting first."""
        version = CompilerVersion.parse("beta")
        assert not version.is_known
        assert version == CompilerVersion.UNKNOWN
        assert str(version) == "unknown"
        assert version < CompilerVersion.parse("0.1")


class TestParseCompilerOutput:
    """Test sign-on line parsing."""

    def test_compiler_banner(self):
        """Test a typical compiler sign-on."""
        metadata = parse_compiler_output(
            "IAR ANSI C/C++ Compiler V7.50.1.10123/W32 for ARM\n"
            "Copyright 1999-2015 IAR Systems AB.\n",
            "",
            Path("/opt/iar/bin/iccarm"),
        )

        assert metadata.vendor == "IAR ANSI C/C++ Compiler V7.50.1.10123/W32 for ARM"
        assert metadata.version == CompilerVersion.parse("7.50.1.10123")
        assert metadata.default_architecture.name == "ARM"
        assert metadata.default_architecture.canonical == "arm"

    def test_banner_on_stderr(self):
        """Test that stderr is scanned after stdout."""
        metadata = parse_compiler_output(
            "", "   IAR ELF Linker V9.40.1.364/W64 for ARM   \n", Path("ilinkarm")
        )
        assert str(metadata.version) == "9.40.1.364"

    def test_first_matching_line_wins(self):
        """Test that the first sign-on line is used."""
        metadata = parse_compiler_output(
            "IAR Assembler V8.10.1 for RX\nIAR Assembler V9.0 for ARM\n", "", Path("iasmrx")
        )
        assert metadata.default_architecture.canonical == "rx"

    def test_unknown_architecture_is_kept(self, caplog):
        """Test that an unrecognized architecture is not an error."""
        metadata = parse_compiler_output(
            "IAR C/C++ Compiler V3.11.1 for Z80\n", "", Path("iccz80")
        )

        assert metadata.default_architecture.name == "Z80"
        assert not metadata.default_architecture.is_known
        assert "unrecognized architecture" in caplog.text

    def test_unexpected_output(self):
        """Test that output without a sign-on line is broken."""
        with pytest.raises(BrokenResultError) as exc_info:
            parse_compiler_output("gcc (GCC) 13.2.0\n", "", Path("/usr/bin/iccarm"))

        assert str(exc_info.value) == (
            "Could not determine IAR Embedded Workbench metadata: "
            "iccarm produced unexpected output."
        )
        assert exc_info.value.tool_name == "iccarm"


class TestIarMetadataProvider:
    """Test IarMetadataProvider probing and caching."""

    def test_compiler_type(self):
        """Test the compiler type identity."""
        provider = IarMetadataProvider()
        assert provider.compiler_type is IAR_COMPILER_TYPE
        assert provider.compiler_type.identifier == "iar"

    def test_probe_arguments(self):
        """Test that probe args follow '--version'."""
        with patch(
            "iarkit.toolchain.metadata.subprocess.run",
            return_value=completed(stdout=COMPILER_BANNER),
        ) as mock_run:
            IarMetadataProvider().get_compiler_metadata(
                Path("/opt/iar/bin/iccarm"), ["--cpu=Cortex-M4"]
            )

        command = mock_run.call_args[0][0]
        assert command == ["/opt/iar/bin/iccarm", "--version", "--cpu=Cortex-M4"]

    def test_probe_runs_once_per_tool(self):
        """Test that repeated requests reuse the first probe."""
        provider = IarMetadataProvider()
        with patch(
            "iarkit.toolchain.metadata.subprocess.run",
            return_value=completed(stdout=COMPILER_BANNER),
        ) as mock_run:
            first = provider.get_compiler_metadata(Path("/opt/iar/bin/iccarm"))
            second = provider.get_compiler_metadata(Path("/opt/iar/bin/iccarm"))

        assert mock_run.call_count == 1
        assert first is second
        assert first.is_available

    def test_different_args_probe_separately(self):
        """Test that the cache key includes the probe arguments."""
        provider = IarMetadataProvider()
        with patch(
            "iarkit.toolchain.metadata.subprocess.run",
            return_value=completed(stdout=COMPILER_BANNER),
        ) as mock_run:
            provider.get_compiler_metadata(Path("iccarm"))
            provider.get_compiler_metadata(Path("iccarm"), ["--cpu=Cortex-M0"])

        assert mock_run.call_count == 2

    def test_search_path_and_environment(self, tmp_path):
        """Test that the probe sees the search path and extra environment."""
        with patch(
            "iarkit.toolchain.metadata.subprocess.run",
            return_value=completed(stdout=COMPILER_BANNER),
        ) as mock_run:
            IarMetadataProvider().get_compiler_metadata(
                Path("iccarm"),
                search_path=[tmp_path],
                environment={"CYGWIN": "nodosfilewarning"},
            )

        env = mock_run.call_args[1]["env"]
        assert env["PATH"].startswith(str(tmp_path))
        assert env["CYGWIN"] == "nodosfilewarning"

    def test_launch_failure(self):
        """Test that a tool that cannot be started is not found."""
        with patch(
            "iarkit.toolchain.metadata.subprocess.run",
            side_effect=FileNotFoundError("no such file"),
        ):
            result = IarMetadataProvider().get_compiler_metadata(Path("/missing/iccarm"))

        assert not result.is_available
        assert "failed to execute iccarm --version" in result.explain()

    def test_non_zero_exit(self):
        """Test that a failing probe is not found."""
        with patch(
            "iarkit.toolchain.metadata.subprocess.run",
            return_value=completed(stdout=COMPILER_BANNER, returncode=1),
        ):
            result = IarMetadataProvider().get_compiler_metadata(Path("iccarm"))

        assert not result.is_available
        assert "failed to execute" in result.explain()

    def test_unexpected_output_is_broken(self):
        """Test that a non-IAR tool gives a broken result."""
        with patch(
            "iarkit.toolchain.metadata.subprocess.run",
            return_value=completed(stdout="gcc (GCC) 13.2.0"),
        ):
            result = IarMetadataProvider().get_compiler_metadata(Path("iccarm"))

        assert isinstance(result, BrokenResult)
        assert "produced unexpected output" in result.explain()

    @posix_only
    def test_probe_real_process(self, tmp_path):
        """Test probing a fake tool end to end."""
        tool = write_tool(tmp_path / "bin", "iccarm", "IAR ANSI C/C++ Compiler V8.50.9.278/W32 for ARM")

        result = IarMetadataProvider().get_compiler_metadata(tool)

        assert result.is_available
        assert str(result.component.version) == "8.50.9.278"
        assert result.component.default_architecture.canonical == "arm"
