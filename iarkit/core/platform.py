"""
Target platform model for iarkit.

This module describes the platforms a toolchain can be asked to build for
and maps free-form architecture names (as printed by the IAR tools) onto
canonical architecture identifiers.

Usage:
    from iarkit.core.platform import NativePlatform, architecture_for_input

    platform = NativePlatform("stm32f4", architecture=architecture_for_input("ARM"))
    print(platform.display_name)          # platform 'stm32f4'
    print(platform.architecture.canonical)  # arm
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

UNKNOWN_ARCHITECTURE = "unknown"

# Canonical name -> accepted aliases (lower case)
KNOWN_ARCHITECTURES: Dict[str, Tuple[str, ...]] = {
    "arm": ("arm", "arm32", "armv7", "arm-v7", "cortex-m", "thumb"),
    "aarch64": ("aarch64", "arm64", "armv8", "arm-v8"),
    "x86": ("x86", "i386", "i686", "ia-32"),
    "x86-64": ("x86-64", "x86_64", "amd64", "x64"),
    "riscv": ("riscv", "risc-v", "riscv32", "rv32"),
    "rx": ("rx",),
    "rl78": ("rl78",),
    "avr": ("avr",),
    "msp430": ("msp430",),
    "8051": ("8051",),
    "stm8": ("stm8",),
    "rh850": ("rh850", "v850"),
}


@dataclass(frozen=True)
class Architecture:
    """
    A target CPU architecture.

    Attributes:
        name: Architecture name as it was given (e.g. 'ARM')
        canonical: Canonical identifier ('arm', 'riscv', ...) or 'unknown'
    """

    name: str
    canonical: str = UNKNOWN_ARCHITECTURE

    @property
    def is_known(self) -> bool:
        return self.canonical != UNKNOWN_ARCHITECTURE

    def __str__(self) -> str:
        return self.name


def architecture_for_input(token: str) -> Architecture:
    """
    Map a free-text architecture token to an Architecture.

    Lookup is case-insensitive. Unrecognized tokens are not an error; they
    produce an architecture whose canonical identifier is 'unknown'.

    Args:
        token: Architecture text, e.g. 'ARM' or 'RISC-V'

    Returns:
        Architecture instance

    Example:
        >>> architecture_for_input("ARM").canonical
        'arm'
        >>> architecture_for_input("Z80").is_known
        False
    """
    name = token.strip()
    lookup = name.lower()
    for canonical, aliases in KNOWN_ARCHITECTURES.items():
        if lookup in aliases:
            return Architecture(name=name, canonical=canonical)

    logger.debug(f"Unrecognized architecture '{name}'")
    return Architecture(name=name)


@dataclass(frozen=True)
class NativePlatform:
    """
    A platform that native binaries are built for.

    Two platforms with the same attributes are the same platform; toolchains
    key their per-platform state on this value.

    Attributes:
        name: Platform name used to match target configurations
        operating_system: Target operating system ('none' for bare metal)
        architecture: Target architecture, if known
    """

    name: str
    operating_system: str = "none"
    architecture: Optional[Architecture] = field(default=None)

    @property
    def display_name(self) -> str:
        return f"platform '{self.name}'"

    def __str__(self) -> str:
        return self.display_name
