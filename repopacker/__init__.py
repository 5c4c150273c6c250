"""
repopacker - pack a repository into a single document for LLM consumption.

Collects files from a local directory or a GitHub repository, filters them
with ordered .gitignore-style rules, and serializes the survivors with a
rendered file tree and token statistics.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Core engine exports
from .packer.patterns import PatternKind, PatternRule, PatternSet, PatternSetBuilder
from .packer.matcher import PathMatcher, is_ignored
from .packer.tree import FileTree, TreeNode, build_tree, render_tree
from .packer.types import FileEntry, PackOptions, PackResult, PackStats
from .packer.assembler import DocumentAssembler
from .packer.tokenizer import TokenEstimator, Tokenizer, TokenizerType, estimate_tokens

# Sources and errors
from .sources import EntrySource, GitHubReference, GitHubSource, LocalDirectorySource
from .utils.error_handling import (
    EntryError,
    InvalidSourceReference,
    PackRepoError,
    RemoteResourceNotFound,
    TransientFetchFailure,
    UnreadableEntry,
)

# High-level API for easier usage
from .config_manager import ConfigManager
from .library import RepositoryPacker, build_pattern_set

__all__ = [
    # High-level API (recommended for most users)
    "RepositoryPacker",
    "build_pattern_set",
    "ConfigManager",

    # Engine
    "PatternKind",
    "PatternRule",
    "PatternSet",
    "PatternSetBuilder",
    "PathMatcher",
    "is_ignored",
    "FileTree",
    "TreeNode",
    "build_tree",
    "render_tree",
    "FileEntry",
    "PackOptions",
    "PackResult",
    "PackStats",
    "DocumentAssembler",
    "TokenEstimator",
    "Tokenizer",
    "TokenizerType",
    "estimate_tokens",

    # Sources
    "EntrySource",
    "GitHubReference",
    "GitHubSource",
    "LocalDirectorySource",

    # Errors
    "PackRepoError",
    "InvalidSourceReference",
    "RemoteResourceNotFound",
    "EntryError",
    "UnreadableEntry",
    "TransientFetchFailure",
]
