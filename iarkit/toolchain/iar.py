"""
The IAR toolchain.

IarToolChain ties together the search path, the per-platform configuration
and the metadata probe, and answers ``select(platform, language)`` with a
PlatformToolProvider.

Usage:
    from iarkit.core.platform import NativePlatform
    from iarkit.toolchain.iar import IarToolChain, NativeLanguage
    from iarkit.toolchain.tools import ToolOverride, ToolRole

    toolchain = IarToolChain()
    toolchain.path("/opt/iar/arm/bin")
    toolchain.target("stm32f4")
    toolchain.target("nrf52", ToolOverride(ToolRole.LINKER, executable="ilinkarm_nrf"))

    provider = toolchain.select(NativePlatform("stm32f4"), NativeLanguage.CPP)
    if provider.is_available:
        compiler = provider.new_compiler(ToolRole.CPP_COMPILER)
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from iarkit.core.execution import BuildOperationExecutor
from iarkit.core.platform import NativePlatform
from iarkit.toolchain.cache import SingleFlightCache
from iarkit.toolchain.metadata import IarMetadataProvider
from iarkit.toolchain.providers import (
    IarPlatformToolProvider,
    PlatformToolProvider,
    UnavailablePlatformToolProvider,
    UnsupportedPlatformToolProvider,
)
from iarkit.toolchain.results import ToolChainAvailability
from iarkit.toolchain.search import ToolSearchPath
from iarkit.toolchain.tools import (
    PlatformToolChain,
    TargetPlatformConfiguration,
    ToolOverride,
    ToolRole,
    add_default_tools,
    apply_overrides,
)

logger = logging.getLogger(__name__)

DEFAULT_NAME = "iar"

# Silences the DOS path warning when the tools run under a Cygwin shell.
DEFAULT_ENVIRONMENT = {"CYGWIN": "nodosfilewarning"}


class NativeLanguage(Enum):
    """Source languages a toolchain can be selected for."""

    CPP = "C++"
    SWIFT = "Swift"
    ANY = "native language"

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "NativeLanguage":
        """Look up a language by its enum name, case-insensitively ('cpp', 'any')."""
        try:
            return cls[name.upper()]
        except KeyError:
            valid = ", ".join(language.name.lower() for language in cls)
            raise ValueError(f"Unknown language '{name}'. Must be one of: {valid}") from None


class IarToolChain:
    """
    IAR Embedded Workbench toolchain.

    Platform configurations are matched newest first: a later ``target()``
    call for a platform name overrides an earlier one.

    Attributes:
        name: Toolchain name
        environment: Environment variables set for every tool run and probe
    """

    type_name = "IAR ANSI C/C++ Toolchain"

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        tool_search_path: Optional[ToolSearchPath] = None,
        metadata_provider: Optional[IarMetadataProvider] = None,
        build_operation_executor: Optional[BuildOperationExecutor] = None,
        environment: Optional[Mapping[str, str]] = None,
        use_command_file: bool = True,
    ):
        self.name = name
        self.tool_search_path = tool_search_path or ToolSearchPath()
        self.metadata_provider = metadata_provider or IarMetadataProvider()
        self._build_operation_executor = build_operation_executor
        self.environment: Dict[str, str] = dict(
            DEFAULT_ENVIRONMENT if environment is None else environment
        )
        self.use_command_file = use_command_file
        self._platform_configs: List[TargetPlatformConfiguration] = []
        self._global_overrides: List[ToolOverride] = []
        self._providers: SingleFlightCache = SingleFlightCache()

    @property
    def display_name(self) -> str:
        return f"Tool chain '{self.name}' ({self.type_name})"

    @property
    def build_operation_executor(self) -> BuildOperationExecutor:
        if self._build_operation_executor is None:
            self._build_operation_executor = BuildOperationExecutor()
        return self._build_operation_executor

    def close(self) -> None:
        """Shut down the build operation executor, if one was created."""
        if self._build_operation_executor is not None:
            self._build_operation_executor.shutdown()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def search_path(self) -> List[Path]:
        return self.tool_search_path.search_path

    def path(self, *entries: Union[str, Path]) -> None:
        """Add directories to search for the tools in."""
        self.tool_search_path.path(*entries)

    def target(
        self,
        platform_names: Union[str, Iterable[str]],
        *overrides: ToolOverride,
        use_command_file: Optional[bool] = None,
    ) -> TargetPlatformConfiguration:
        """
        Declare platforms this toolchain can build for.

        The configuration is inserted ahead of all earlier ones, so it takes
        priority over them for the platform names it lists.

        Args:
            platform_names: Platform name or names
            *overrides: Tool overrides for these platforms
            use_command_file: Options file setting for these platforms

        Returns:
            The registered configuration
        """
        if isinstance(platform_names, str):
            platform_names = [platform_names]
        config = TargetPlatformConfiguration(
            platform_names=frozenset(platform_names),
            overrides=tuple(overrides),
            use_command_file=use_command_file,
        )
        self._platform_configs.insert(0, config)
        logger.debug(f"{self.name}: added target {sorted(config.platform_names)}")
        return config

    def set_targets(self, *platform_names: str) -> None:
        """Replace all platform configurations with plain targets."""
        self._platform_configs.clear()
        for platform_name in platform_names:
            self.target(platform_name)

    def each_platform(self, *overrides: ToolOverride) -> None:
        """Add tool overrides applied to every platform, after the platform's own."""
        self._global_overrides.extend(overrides)

    @property
    def platform_configurations(self) -> List[TargetPlatformConfiguration]:
        return list(self._platform_configs)

    def get_platform_configuration(
        self, platform: NativePlatform
    ) -> Optional[TargetPlatformConfiguration]:
        for config in self._platform_configs:
            if config.supports_platform(platform):
                return config
        return None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(
        self,
        platform: NativePlatform,
        language: NativeLanguage = NativeLanguage.ANY,
    ) -> PlatformToolProvider:
        """
        Select the tools for a source language and target platform.

        Args:
            platform: Target platform
            language: Source language (default: any native language)

        Returns:
            A provider; check ``is_available`` and ``explain()`` before use
        """
        provider = self.get_provider_for_platform(platform)

        if language is NativeLanguage.CPP:
            if not provider.is_supported:
                return provider
            cpp_compiler = provider.locate_tool(ToolRole.CPP_COMPILER)
            if cpp_compiler.is_available:
                return provider
            return UnavailablePlatformToolProvider(platform.operating_system, cpp_compiler)

        if language is NativeLanguage.ANY:
            if not provider.is_supported:
                return provider
            c_compiler = provider.locate_tool(ToolRole.C_COMPILER)
            if c_compiler.is_available:
                return provider
            compiler = provider.locate_tool(ToolRole.CPP_COMPILER)
            if compiler.is_available:
                return provider
            return UnavailablePlatformToolProvider(platform.operating_system, c_compiler)

        return UnsupportedPlatformToolProvider(
            platform.operating_system,
            f"Don't know how to compile language {language.display_name}.",
        )

    def get_provider_for_platform(self, platform: NativePlatform) -> PlatformToolProvider:
        """The cached provider for a platform, created on first use."""
        return self._providers.get_or_create(
            platform, lambda: self._create_platform_tool_provider(platform)
        )

    def _create_platform_tool_provider(self, platform: NativePlatform) -> PlatformToolProvider:
        config = self.get_platform_configuration(platform)
        if config is None:
            return UnsupportedPlatformToolProvider(
                platform.operating_system,
                f"Don't know how to build for {platform.display_name}.",
            )

        tools = PlatformToolChain(platform, use_command_file=self.use_command_file)
        add_default_tools(tools)
        config.apply(tools)
        apply_overrides(tools, self._global_overrides)
        tools.finalize()

        availability = ToolChainAvailability()
        self.init_tools(tools, availability)
        if not availability.is_available:
            logger.debug(
                f"{self.name}: {platform.display_name} unavailable: {availability.explain()}"
            )
            return UnavailablePlatformToolProvider(platform.operating_system, availability)

        return IarPlatformToolProvider(
            self.build_operation_executor,
            platform.operating_system,
            self.tool_search_path,
            tools,
            self.metadata_provider,
            environment=self.environment,
        )

    def init_tools(self, tools: PlatformToolChain, availability: ToolChainAvailability) -> None:
        """
        Check that the installed tools are IAR tools.

        Only the first tool found is probed; if it is an IAR tool the rest of
        the installation is assumed to be as well.
        """
        for tool in tools.tools:
            located = self.tool_search_path.locate(tool.role, tool.executable)
            if not located.is_available:
                continue

            metadata = self.metadata_provider.get_compiler_metadata(
                located.tool,
                tool.probe_args,
                search_path=self.search_path,
                environment=self.environment,
            )
            availability.must_be_available(metadata)
            if not metadata.is_available:
                return

            logger.info(
                f"Found {tool.role.tool_name} {located.tool} with version "
                f"{metadata.component.version} for {tools.platform.display_name}"
            )
            break
