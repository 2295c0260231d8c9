"""
Command implementations for the dockerkit CLI.

Each module exposes ``run(args) -> int``.
"""
