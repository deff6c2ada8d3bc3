"""
Unit tests for the target platform model.
"""

import pytest

from iarkit.core.platform import (
    UNKNOWN_ARCHITECTURE,
    Architecture,
    NativePlatform,
    architecture_for_input,
)


class TestArchitectureForInput:
    """Test mapping of free-text architecture names."""

    @pytest.mark.parametrize(
        "token,canonical",
        [
            ("ARM", "arm"),
            ("arm", "arm"),
            ("RISC-V", "riscv"),
            ("RX", "rx"),
            ("MSP430", "msp430"),
            ("x86_64", "x86-64"),
            ("V850", "rh850"),
        ],
    )
    def test_known_architectures(self, token, canonical):
        """Test that known names map to their canonical identifier."""
        arch = architecture_for_input(token)
        assert arch.canonical == canonical
        assert arch.is_known

    def test_keeps_original_name(self):
        """Test that the name is kept as printed by the tool."""
        arch = architecture_for_input(" ARM ")
        assert arch.name == "ARM"
        assert str(arch) == "ARM"

    def test_unknown_architecture_is_not_an_error(self):
        """Test that unknown names give an unknown architecture."""
        arch = architecture_for_input("Z80")
        assert arch.name == "Z80"
        assert arch.canonical == UNKNOWN_ARCHITECTURE
        assert not arch.is_known


class TestNativePlatform:
    """Test NativePlatform."""

    def test_display_name(self):
        """Test display name format."""
        assert NativePlatform("stm32f4").display_name == "platform 'stm32f4'"

    def test_defaults_to_bare_metal(self):
        """Test default operating system."""
        platform = NativePlatform("stm32f4")
        assert platform.operating_system == "none"
        assert platform.architecture is None

    def test_equal_platforms_are_interchangeable(self):
        """Test value equality and hashing."""
        a = NativePlatform("nrf52", architecture=Architecture("ARM", "arm"))
        b = NativePlatform("nrf52", architecture=Architecture("ARM", "arm"))
        assert a == b
        assert len({a, b}) == 1

    def test_different_names_differ(self):
        """Test that platforms with different names are different."""
        assert NativePlatform("nrf52") != NativePlatform("stm32f4")
