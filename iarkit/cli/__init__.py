"""
iarkit CLI module.

This module provides the command-line interface for iarkit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
