"""
iarkit - IAR Embedded Workbench toolchain adapter.

Locates the IAR compiler, assembler, linker and archiver for a target
platform, identifies them from their sign-on banner and runs them with the
command lines the IAR tools expect.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("iarkit")
except PackageNotFoundError:
    __version__ = "0.1.0"
