"""
Entry point for running iarkit as a module.

Usage: python -m iarkit probe --platform NAME [options]
"""

from iarkit.cli.parser import main

if __name__ == "__main__":
    main()
