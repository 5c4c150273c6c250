"""Repository packing engine: patterns, matching, tree and document assembly."""

from __future__ import annotations

from .patterns import (
    PatternKind,
    PatternRule,
    PatternSet,
    PatternSetBuilder,
    parse_ignore_text,
    parse_user_text,
)
from .matcher import PathMatcher, is_ignored, rule_matches
from .tree import FileTree, TreeNode, build_tree, render_tree
from .types import FileEntry, PackOptions, PackResult, PackStats
from .assembler import DocumentAssembler, assemble

__all__ = [
    "PatternKind",
    "PatternRule",
    "PatternSet",
    "PatternSetBuilder",
    "parse_ignore_text",
    "parse_user_text",
    "PathMatcher",
    "is_ignored",
    "rule_matches",
    "FileTree",
    "TreeNode",
    "build_tree",
    "render_tree",
    "FileEntry",
    "PackOptions",
    "PackResult",
    "PackStats",
    "DocumentAssembler",
    "assemble",
]
