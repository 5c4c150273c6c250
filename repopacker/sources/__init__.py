"""Entry sources: local directories and GitHub repositories."""

from __future__ import annotations

from .base import EntrySource, guess_media_kind
from .local import LocalDirectorySource
from .github import CachedFetcher, GitHubReference, GitHubSource

__all__ = [
    "EntrySource",
    "guess_media_kind",
    "LocalDirectorySource",
    "CachedFetcher",
    "GitHubReference",
    "GitHubSource",
]
