"""Test fixtures for iarkit tests.

This package provides reusable pytest fixtures for testing iarkit components.

- toolchains: Fake IAR installations made of small shell scripts

Import fixtures in your tests using:
    from tests.fixtures.toolchains import mock_iar_toolchain
"""

__all__ = [
    "toolchains",
]
