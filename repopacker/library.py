"""
repopacker main library interface.

Provides a small API for packing a repository into a single document that
can be handed to a language model:

    >>> packer = RepositoryPacker()
    >>> result = packer.pack_directory('/path/to/repo')
    >>> print(result.stats.file_count, result.stats.estimated_token_count)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .constants import GITIGNORE_FILENAME, REPOMIXIGNORE_FILENAME
from .packer.assembler import DocumentAssembler
from .packer.patterns import PatternSet, PatternSetBuilder
from .packer.tokenizer import TokenEstimator
from .packer.types import FileEntry, PackOptions, PackResult
from .sources.base import EntrySource
from .sources.github import DEFAULT_BATCH_SIZE, GitHubSource
from .sources.local import LocalDirectorySource
from .utils.error_handling import PackRepoError


logger = logging.getLogger(__name__)


def build_pattern_set(
    options: PackOptions,
    gitignore: Optional[str] = None,
    repomixignore: Optional[str] = None,
) -> PatternSet:
    """
    Merge every enabled pattern source into one ordered rule set.

    Args:
        options: Run options (which sources are enabled, preset, user patterns)
        gitignore: .gitignore text, if the repository has one
        repomixignore: .repomixignore text, if the repository has one

    Returns:
        PatternSet in precedence order
    """
    builder = PatternSetBuilder()
    if options.use_default_patterns:
        builder.add_defaults()
    if options.use_gitignore:
        builder.add_gitignore(gitignore)
    if options.use_repomixignore:
        builder.add_repomixignore(repomixignore)
    if options.preset:
        builder.add_preset(options.preset)
    builder.add_user_patterns(options.ignore_patterns)
    return builder.build()


class RepositoryPacker:
    """
    Main interface for repository packing functionality.

    Wires sources, pattern sets and the document assembler together.
    """

    def __init__(self, estimator: Optional[TokenEstimator] = None):
        self.estimator = estimator

    def pack_entries(
        self,
        entries: Iterable[FileEntry],
        options: Optional[PackOptions] = None,
        gitignore: Optional[str] = None,
        repomixignore: Optional[str] = None,
    ) -> PackResult:
        """Pack already-loaded entries."""
        options = options or PackOptions()
        rules = build_pattern_set(options, gitignore, repomixignore)
        return DocumentAssembler(options, self.estimator).assemble(entries, rules)

    def pack_source(self, source: EntrySource, options: Optional[PackOptions] = None) -> PackResult:
        """
        Pack everything a source provides.

        Raises:
            PackRepoError: If the source cannot be listed at all
        """
        options = options or PackOptions()

        gitignore = source.read_ignore_file(GITIGNORE_FILENAME) if options.use_gitignore else None
        repomixignore = (
            source.read_ignore_file(REPOMIXIGNORE_FILENAME) if options.use_repomixignore else None
        )
        rules = build_pattern_set(options, gitignore, repomixignore)

        paths = source.list_paths(rules)
        logger.info(f"Packing {source.description}: {len(paths)} candidate files")
        entries = source.collect(paths, rules)

        summary = source.error_handler.get_error_summary()
        if summary['total_errors']:
            logger.warning(f"{summary['total_errors']} files could not be read and were skipped")

        return DocumentAssembler(options, self.estimator).assemble(entries, rules)

    def pack_directory(
        self,
        path: Union[str, Path],
        options: Optional[PackOptions] = None,
        prune_ignored_dirs: bool = False,
    ) -> PackResult:
        source = LocalDirectorySource(path, prune_ignored_dirs=prune_ignored_dirs)
        return self.pack_source(source, options)

    def pack_github(
        self,
        url: str,
        options: Optional[PackOptions] = None,
        token: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> PackResult:
        """
        Pack a GitHub repository.

        Raises:
            InvalidSourceReference: If the URL cannot be parsed
            RemoteResourceNotFound: If the repository or branch does not exist
        """
        source = GitHubSource(url, token=token, batch_size=batch_size)
        return self.pack_source(source, options)


__all__ = [
    "RepositoryPacker",
    "PackRepoError",
    "build_pattern_set",
]
