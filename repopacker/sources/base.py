"""Base interface for entry sources.

A source lists candidate paths, reads file bodies and ignore files, and
turns paths into finalized :class:`FileEntry` objects for the assembler.
"""

from __future__ import annotations

import logging
import mimetypes
import posixpath
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..packer.matcher import PathMatcher
from ..packer.patterns import PatternSet
from ..packer.types import FileEntry
from ..utils.error_handling import ErrorHandler


logger = logging.getLogger(__name__)


# Source extensions that system MIME tables map to media types (".ts" is MPEG-TS video)
_TEXT_MEDIA_OVERRIDES = {
    ".ts": "text/x-typescript",
    ".mts": "text/x-typescript",
    ".cts": "text/x-typescript",
    ".tsx": "text/x-typescript",
}


def guess_media_kind(path: str) -> Optional[str]:
    """Best-effort MIME type from the file name."""
    _, ext = posixpath.splitext(path)
    if ext.lower() in _TEXT_MEDIA_OVERRIDES:
        return _TEXT_MEDIA_OVERRIDES[ext.lower()]
    media_kind, _ = mimetypes.guess_type(path, strict=False)
    return media_kind


class EntrySource(ABC):
    """Supplies file paths and contents to the packer."""

    def __init__(self):
        self.error_handler = ErrorHandler(self.__class__.__name__)

    @abstractmethod
    def list_paths(self, rules: Optional[PatternSet] = None) -> List[str]:
        """
        List candidate file paths (forward slashes, relative to the root).

        Args:
            rules: Optional rules a source may use to skip obviously
                ignored subtrees; the assembler still makes the final call
        """

    @abstractmethod
    def read_text(self, path: str) -> str:
        """
        Read one file as text.

        Raises:
            EntryError: If this single file cannot be read
        """

    @abstractmethod
    def read_ignore_file(self, name: str) -> Optional[str]:
        """Read a root-level ignore file, or None if it does not exist."""

    def collect(self, paths: Iterable[str], rules: Optional[PatternSet] = None) -> List[FileEntry]:
        """
        Turn paths into entries, in order.

        Paths already ignored by ``rules`` are not read. Per-file read
        failures produce entries with ``content=None``.
        """
        matcher = PathMatcher(rules) if rules is not None else None
        entries = []
        for path in paths:
            if matcher is not None and matcher.is_ignored(path):
                entries.append(FileEntry(path=path, content=None, media_kind=guess_media_kind(path)))
                continue
            entries.append(self._load_entry(path))
        return entries

    def _load_entry(self, path: str) -> FileEntry:
        content = self.error_handler.read_entry(path, self.read_text)
        return FileEntry(path=path, content=content, media_kind=guess_media_kind(path))

    @property
    def description(self) -> str:
        return self.__class__.__name__
