"""
Pytest configuration and shared fixtures for iarkit tests.
"""

import logging
from pathlib import Path

import pytest

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.toolchains import (
    empty_path,
    mock_gcc_toolchain,
    mock_iar_toolchain,
)
from iarkit.core.execution import BuildOperationExecutor
from iarkit.core.platform import NativePlatform


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    """Create temporary directory for test."""
    return tmp_path


@pytest.fixture
def executor():
    """Shared build operation executor, shut down after the test."""
    build_executor = BuildOperationExecutor(max_workers=4)
    yield build_executor
    build_executor.shutdown()


@pytest.fixture
def stm32_platform() -> NativePlatform:
    """A bare metal ARM target platform."""
    return NativePlatform("stm32f4")


@pytest.fixture
def sample_config_yaml(temp_dir: Path, mock_iar_toolchain: Path) -> Path:
    """Create sample iar.yaml pointing at the fake IAR installation."""
    config_content = f"""version: 1
toolchain:
  name: iar
  path:
    - {mock_iar_toolchain}
  max_workers: 2
  targets:
    - platforms: [stm32f4, nrf52]
    - platforms: [stm32f4]
      use_command_file: false
      tools:
        linker:
          args: [--semihosting]
"""
    config_file = temp_dir / "iar.yaml"
    config_file.write_text(config_content)
    return config_file


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo logging.basicConfig(force=True) done by CLI tests."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
