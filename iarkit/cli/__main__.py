"""
Entry point for running the iarkit CLI as a module.

Usage: python -m iarkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
