"""
Command-line interface for repopacker.

- repopack.py: Main CLI entry point
"""

from __future__ import annotations

from .repopack import RepoPackCLI, create_cli, main

__all__ = [
    "RepoPackCLI",
    "create_cli",
    "main",
]
