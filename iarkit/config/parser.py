"""YAML configuration parser for iarkit.

This module provides parsing and validation for iar.yaml configuration files
and turns a parsed configuration into a configured IarToolChain.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from iarkit.core.exceptions import ConfigError
from iarkit.core.execution import BuildOperationExecutor
from iarkit.toolchain.iar import DEFAULT_ENVIRONMENT, DEFAULT_NAME, IarToolChain
from iarkit.toolchain.tools import ToolOverride, ToolRole

logger = logging.getLogger(__name__)


@dataclass
class ToolConfig:
    """Configuration for a single tool role."""

    role: ToolRole
    executable: Optional[str] = None
    probe_args: Optional[List[str]] = None
    args: Optional[List[str]] = None

    def to_override(self) -> ToolOverride:
        return ToolOverride(
            role=self.role,
            executable=self.executable,
            probe_args=tuple(self.probe_args) if self.probe_args is not None else None,
            args=tuple(self.args) if self.args is not None else None,
        )


@dataclass
class TargetConfig:
    """Configuration for a group of target platforms."""

    platforms: List[str]
    use_command_file: Optional[bool] = None
    tools: List[ToolConfig] = field(default_factory=list)


@dataclass
class ToolchainSection:
    """The 'toolchain' section."""

    name: str = DEFAULT_NAME
    path: List[str] = field(default_factory=list)
    environment: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ENVIRONMENT))
    use_command_file: bool = True
    max_workers: Optional[int] = None
    tools: List[ToolConfig] = field(default_factory=list)  # applied to every platform
    targets: List[TargetConfig] = field(default_factory=list)  # in registration order


@dataclass
class IarKitConfig:
    """Complete iarkit configuration."""

    version: int
    toolchain: ToolchainSection = field(default_factory=ToolchainSection)


def parse_config(config_path: Path) -> IarKitConfig:
    """
    Parse iar.yaml configuration file.

    Args:
        config_path: Path to iar.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping")

    config = _parse_and_validate(data)
    logger.debug(f"Loaded configuration from {config_path}")
    return config


def _parse_and_validate(data: dict) -> IarKitConfig:
    """Parse and validate configuration data."""
    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    toolchain_data = data.get("toolchain") or {}
    if not isinstance(toolchain_data, dict):
        raise ConfigError("toolchain must be a mapping")

    return IarKitConfig(
        version=data["version"],
        toolchain=_parse_toolchain(toolchain_data),
    )


def _parse_toolchain(data: dict) -> ToolchainSection:
    """Parse the toolchain section."""
    path = data.get("path", [])
    if isinstance(path, str):
        path = [path]
    if not isinstance(path, list):
        raise ConfigError("toolchain.path must be a list of directories")

    environment = data.get("environment", dict(DEFAULT_ENVIRONMENT))
    if not isinstance(environment, dict):
        raise ConfigError("toolchain.environment must be a dictionary")

    use_command_file = data.get("use_command_file", True)
    if not isinstance(use_command_file, bool):
        raise ConfigError("toolchain.use_command_file must be true or false")

    max_workers = data.get("max_workers")
    if max_workers is not None and (
        isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1
    ):
        raise ConfigError(f"toolchain.max_workers must be a positive integer, got {max_workers!r}")

    targets_data = data.get("targets", [])
    if not isinstance(targets_data, list):
        raise ConfigError("toolchain.targets must be a list")

    return ToolchainSection(
        name=str(data.get("name", DEFAULT_NAME)),
        path=[str(entry) for entry in path],
        environment={str(k): str(v) for k, v in environment.items()},
        use_command_file=use_command_file,
        max_workers=max_workers,
        tools=_parse_tools(data.get("tools", {}), "toolchain.tools"),
        targets=[
            _parse_target(target_data, f"toolchain.targets[{i}]")
            for i, target_data in enumerate(targets_data)
        ],
    )


def _parse_tools(data: dict, where: str) -> List[ToolConfig]:
    """Parse a role -> tool settings mapping."""
    if not data:
        return []
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be a mapping of tool names")

    tools = []
    for key, tool_data in data.items():
        try:
            role = ToolRole.from_key(str(key))
        except ValueError as e:
            raise ConfigError(f"{where}: {e}") from e

        if isinstance(tool_data, str):
            tool_data = {"executable": tool_data}
        if not isinstance(tool_data, dict):
            raise ConfigError(f"{where}.{key} must be a mapping or an executable name")

        for list_field in ("probe_args", "args"):
            value = tool_data.get(list_field)
            if value is not None and not isinstance(value, list):
                raise ConfigError(f"{where}.{key}.{list_field} must be a list")

        executable = tool_data.get("executable")
        tools.append(
            ToolConfig(
                role=role,
                executable=str(executable) if executable is not None else None,
                probe_args=_str_list(tool_data.get("probe_args")),
                args=_str_list(tool_data.get("args")),
            )
        )
    return tools


def _parse_target(data: dict, where: str) -> TargetConfig:
    """Parse one entry of toolchain.targets."""
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be a mapping")

    platforms = data.get("platforms")
    if isinstance(platforms, str):
        platforms = [platforms]
    if not platforms or not isinstance(platforms, list):
        raise ConfigError(f"{where} must specify 'platforms'")

    use_command_file = data.get("use_command_file")
    if use_command_file is not None and not isinstance(use_command_file, bool):
        raise ConfigError(f"{where}.use_command_file must be true or false")

    return TargetConfig(
        platforms=[str(p) for p in platforms],
        use_command_file=use_command_file,
        tools=_parse_tools(data.get("tools", {}), f"{where}.tools"),
    )


def _str_list(value: Optional[list]) -> Optional[List[str]]:
    if value is None:
        return None
    return [str(v) for v in value]


def create_toolchain(config: IarKitConfig) -> IarToolChain:
    """
    Build a configured IarToolChain from a parsed configuration.

    Targets are registered in file order, so a later entry naming the same
    platform as an earlier one wins.

    Args:
        config: Parsed configuration

    Returns:
        Configured toolchain
    """
    section = config.toolchain
    toolchain = IarToolChain(
        name=section.name,
        build_operation_executor=BuildOperationExecutor(section.max_workers),
        environment=section.environment,
        use_command_file=section.use_command_file,
    )
    toolchain.path(*section.path)

    for target in section.targets:
        toolchain.target(
            target.platforms,
            *(tool.to_override() for tool in target.tools),
            use_command_file=target.use_command_file,
        )

    toolchain.each_platform(*(tool.to_override() for tool in section.tools))
    return toolchain
