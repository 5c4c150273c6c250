"""
Document assembly: filtering, statistics, tree and serialization.

A single sequential pass over the entries. The only state is the run-scoped
accumulators, so assembling the same inputs twice gives the same result.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from .matcher import RuleLike, is_ignored
from .packfmt import PackDocumentWriter
from .patterns import PatternSet
from .tokenizer import TokenEstimator, get_default_estimator
from .tree import build_tree, render_tree
from .types import FileEntry, PackOptions, PackResult, PackStats


logger = logging.getLogger(__name__)


class DocumentAssembler:
    """
    Builds a :class:`PackResult` from finalized file entries.

    Entries are dropped (and counted as ignored) when the rules ignore their
    path, when the source could not read them, or when they look binary and
    binary detection is enabled.
    """

    def __init__(
        self,
        options: Optional[PackOptions] = None,
        estimator: Optional[TokenEstimator] = None,
    ):
        self.options = options or PackOptions()
        self.estimator = estimator or get_default_estimator()

    def assemble(
        self,
        entries: Iterable[FileEntry],
        rules: Union[PatternSet, Iterable[RuleLike]],
    ) -> PackResult:
        """
        Filter entries and serialize the survivors.

        Args:
            entries: Complete list of candidate files from a source
            rules: Ignore rules in precedence order

        Returns:
            PackResult with the document, stats and tree of kept files
        """
        if not isinstance(rules, PatternSet):
            rules = PatternSet.from_patterns(rules)

        kept: List[FileEntry] = []
        char_count = 0
        token_count = 0
        ignored_count = 0

        for entry in entries:
            reason = self._drop_reason(entry, rules)
            if reason:
                ignored_count += 1
                logger.debug(f"Skipping {entry.path}: {reason}")
                continue

            kept.append(entry)
            char_count += len(entry.content)
            token_count += self.estimator.estimate(entry.content)

        stats = PackStats(
            file_count=len(kept),
            char_count=char_count,
            estimated_token_count=token_count,
            ignored_count=ignored_count,
        )

        tree = build_tree(entry.path for entry in kept)

        # Document body is always by full path; the tree has its own ordering
        kept.sort(key=lambda entry: entry.path)

        writer = PackDocumentWriter(self.options.prepend_prompt)
        if self.options.include_file_tree:
            writer.add_tree(render_tree(tree, folders_first=self.options.folders_first))
        for entry in kept:
            writer.add_file(entry.path, self._prepare_content(entry))

        logger.info(
            f"Packed {stats.file_count} files ({stats.char_count} chars, "
            f"~{stats.estimated_token_count} tokens), ignored {stats.ignored_count}"
        )

        return PackResult(
            document=writer.finish(),
            stats=stats,
            tree=tree,
            files=[entry.path for entry in kept],
        )

    def _drop_reason(self, entry: FileEntry, rules: PatternSet) -> Optional[str]:
        if is_ignored(entry.path, rules):
            return "matched ignore pattern"
        if not entry.is_readable:
            return "unreadable"
        if self.options.detect_binary and entry.looks_binary():
            return "binary content"
        return None

    def _prepare_content(self, entry: FileEntry) -> str:
        # TODO: strip comments when options.remove_comments is set; passthrough for now
        return entry.content


def assemble(
    entries: Iterable[FileEntry],
    rules: Union[PatternSet, Iterable[RuleLike]],
    options: Optional[PackOptions] = None,
) -> PackResult:
    """Functional shortcut for ``DocumentAssembler(options).assemble``."""
    return DocumentAssembler(options).assemble(entries, rules)
