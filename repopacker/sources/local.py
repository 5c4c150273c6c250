"""Local directory source."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from ..packer.matcher import rule_matches
from ..packer.patterns import PatternSet
from ..utils.error_handling import PackRepoError, UnreadableEntry
from .base import EntrySource


logger = logging.getLogger(__name__)


class LocalDirectorySource(EntrySource):
    """
    Reads files from a directory on disk.

    With ``prune_ignored_dirs`` set, ignored directories are skipped during
    the walk, so their files are not counted as ignored. Pruning only
    happens when the rules contain no negation, since a later ``!`` rule
    could re-include files below an ignored directory. Extension rules
    (``*.ext``) never prune: they can match a directory name such as
    ``pkg.egg-info`` without matching the files inside it.
    """

    def __init__(
        self,
        root: Union[str, Path],
        encoding: str = "utf-8",
        prune_ignored_dirs: bool = False,
    ):
        super().__init__()
        self.root = Path(root).resolve()
        self.encoding = encoding
        self.prune_ignored_dirs = prune_ignored_dirs
        if not self.root.is_dir():
            raise PackRepoError(f"Repository path does not exist or is not a directory: {self.root}")

    @property
    def description(self) -> str:
        return str(self.root)

    def list_paths(self, rules: Optional[PatternSet] = None) -> List[str]:
        prune = self.prune_ignored_dirs and rules is not None and not rules.has_negations
        paths: List[str] = []

        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            rel_dir = "" if rel_dir == "." else rel_dir

            dirnames.sort()
            if prune:
                dirnames[:] = [
                    d for d in dirnames
                    if not _covers_subtree(f"{rel_dir}/{d}" if rel_dir else d, rules)
                ]

            for name in sorted(filenames):
                paths.append(f"{rel_dir}/{name}" if rel_dir else name)

        logger.debug(f"Found {len(paths)} files under {self.root}")
        return paths

    def read_text(self, path: str) -> str:
        file_path = self.root / path
        try:
            with open(file_path, "r", encoding=self.encoding, newline="") as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise UnreadableEntry(path, f"not valid {self.encoding} text") from e
        except OSError as e:
            raise UnreadableEntry(path, e.strerror or str(e)) from e

    def read_ignore_file(self, name: str) -> Optional[str]:
        ignore_path = self.root / name
        if not ignore_path.is_file():
            return None
        try:
            return self.read_text(name)
        except UnreadableEntry as e:
            logger.warning(f"Could not read {name}: {e.reason}")
            return None


def _covers_subtree(dir_path: str, rules: PatternSet) -> bool:
    """True if some rule that matches ``dir_path`` also matches every path below it."""
    return any(
        not rule.negated
        and not rule.is_inert
        and not rule.pattern.startswith("*.")
        and rule_matches(dir_path, rule)
        for rule in rules
    )
