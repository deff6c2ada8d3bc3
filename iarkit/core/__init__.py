"""
Core building blocks for iarkit: exceptions, platform model and the
shared build operation executor.
"""

from iarkit.core.exceptions import (
    BrokenResultError,
    BuildOperationFailures,
    ConfigError,
    IarKitError,
    OptionsFileError,
    StaleOutputError,
    ToolchainError,
    ToolchainUnavailableError,
    ToolchainUnsupportedError,
    ToolExecutionError,
)
from iarkit.core.execution import BuildOperationExecutor
from iarkit.core.platform import Architecture, NativePlatform, architecture_for_input

__all__ = [
    "Architecture",
    "BrokenResultError",
    "BuildOperationExecutor",
    "BuildOperationFailures",
    "ConfigError",
    "IarKitError",
    "NativePlatform",
    "OptionsFileError",
    "StaleOutputError",
    "ToolExecutionError",
    "ToolchainError",
    "ToolchainUnavailableError",
    "ToolchainUnsupportedError",
    "architecture_for_input",
]
