"""
CLI module for rekindle.

Provides the command-line interface using Click.
"""

from rekindle.cli.main import cli, main

__all__ = ["main", "cli"]
