"""
Centralized exception hierarchy for iarkit.

This module defines all custom exceptions used across the codebase
so callers can tell selection problems, environment problems and
tool failures apart.
"""

from pathlib import Path
from typing import List, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class IarKitError(Exception):
    """Base exception for all iarkit errors."""

    pass


# ============================================================================
# Toolchain-related Exceptions
# ============================================================================


class ToolchainError(IarKitError):
    """Base exception for toolchain selection and configuration errors."""

    pass


class ToolchainUnavailableError(ToolchainError):
    """Raised when a tool is requested from a platform whose toolchain is unavailable."""

    pass


class ToolchainUnsupportedError(ToolchainError):
    """Raised when a tool is requested for an unsupported platform or language."""

    pass


class BrokenResultError(ToolchainError):
    """Raised when a located tool produced output that could not be parsed."""

    def __init__(self, message: str, tool_name: Optional[str] = None):
        self.tool_name = tool_name
        super().__init__(message)


# ============================================================================
# Environment Exceptions
# ============================================================================


class OptionsFileError(IarKitError):
    """Raised when an options file cannot be written."""

    def __init__(self, path: Path, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Could not write options file '{path}'."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class StaleOutputError(IarKitError):
    """Raised when a previous output could not be removed before a tool runs."""

    def __init__(self, message: str, path: Path):
        self.path = path
        super().__init__(message)


# ============================================================================
# Execution Exceptions
# ============================================================================


class ToolExecutionError(IarKitError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(self, display_name: str, returncode: int, output: str = ""):
        self.display_name = display_name
        self.returncode = returncode
        self.output = output
        msg = f"{display_name} failed with exit code {returncode}"
        if output:
            msg += f"\n{output.rstrip()}"
        super().__init__(msg)


class BuildOperationFailures(IarKitError):
    """Raised when more than one queued build operation failed."""

    def __init__(self, failures: List[BaseException]):
        self.failures = list(failures)
        super().__init__(
            f"{len(self.failures)} build operations failed:\n"
            + "\n".join(f"  - {failure}" for failure in self.failures)
        )


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(IarKitError):
    """Configuration parsing or validation error."""

    pass
