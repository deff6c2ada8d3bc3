"""Configuration module for iarkit.

This module provides YAML configuration parsing and validation for iar.yaml.
"""

from iarkit.config.parser import (
    IarKitConfig,
    TargetConfig,
    ToolchainSection,
    ToolConfig,
    create_toolchain,
    parse_config,
)
from iarkit.core.exceptions import ConfigError

__all__ = [
    "IarKitConfig",
    "TargetConfig",
    "ToolchainSection",
    "ToolConfig",
    "ConfigError",
    "parse_config",
    "create_toolchain",
]
