"""CLI command modules. Each module exposes run(args) -> int."""
