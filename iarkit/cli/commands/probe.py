"""
Probe command: select the IAR tools for a platform and report the outcome.

Exit code is 0 when the toolchain is available for the platform and
language, 1 otherwise.
"""

import logging
from pathlib import Path

from iarkit.config.parser import IarKitConfig, create_toolchain, parse_config
from iarkit.core.exceptions import ConfigError
from iarkit.core.platform import NativePlatform
from iarkit.toolchain.iar import IarToolChain, NativeLanguage
from iarkit.toolchain.tools import ToolRole

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "iar.yaml"


def load_toolchain(config_path) -> IarToolChain:
    """
    Create the toolchain from a configuration file.

    Without an explicit path, ./iar.yaml is used if it exists; otherwise the
    toolchain has no targets configured.
    """
    if config_path is None:
        default = Path.cwd() / DEFAULT_CONFIG_FILE
        if not default.exists():
            logger.debug(f"No {DEFAULT_CONFIG_FILE} found, using an unconfigured toolchain")
            return create_toolchain(IarKitConfig(version=1))
        config_path = default
    return create_toolchain(parse_config(Path(config_path)))


def run(args) -> int:
    """
    Run the probe command.

    Args:
        args: Parsed arguments (config, platform, language)

    Returns:
        Exit code
    """
    try:
        toolchain = load_toolchain(args.config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    platform = NativePlatform(args.platform)
    language = NativeLanguage.from_name(args.language)

    try:
        provider = toolchain.select(platform, language)

        if not provider.is_available:
            print(f"{toolchain.display_name} is not available for {platform.display_name}:")
            print(f"  {provider.explain()}")
            return 1

        print(f"{toolchain.display_name} is available for {platform.display_name}")
        for role in ToolRole:
            located = provider.locate_tool(role)
            if located.is_available:
                print(f"  {role.tool_name:<25} {located.component}")
            else:
                print(f"  {role.tool_name:<25} (not found)")

        for role in (ToolRole.C_COMPILER, ToolRole.CPP_COMPILER):
            if not provider.locate_tool(role).is_available:
                continue
            metadata = provider.get_compiler_metadata(role)
            print(f"  {role.tool_name} version: {metadata.version}")
            print(f"  {role.tool_name} target:  {metadata.default_architecture}")
        return 0
    finally:
        toolchain.close()
