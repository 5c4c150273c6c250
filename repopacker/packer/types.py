"""Common types shared by the packer, the sources and the CLI.

Kept in one module so sources can build entries without importing the
assembler.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ..constants import TOKEN_LIMIT_DANGER, TOKEN_LIMIT_WARNING
from .tokenizer import estimate_tokens
from .tree import FileTree


BINARY_MEDIA_PREFIXES = ("image/", "video/", "audio/")


@dataclass(frozen=True)
class FileEntry:
    """
    One candidate file handed to the packer.

    ``content`` is None when the source could not read the file; such
    entries are counted as ignored rather than aborting the run.
    """
    path: str
    content: Optional[str]
    media_kind: Optional[str] = None

    @property
    def is_readable(self) -> bool:
        return self.content is not None

    @property
    def char_count(self) -> int:
        return len(self.content) if self.content is not None else 0

    @property
    def estimated_token_count(self) -> int:
        return estimate_tokens(self.content) if self.content is not None else 0

    def looks_binary(self) -> bool:
        """Declared media type is image/video/audio, or the text has a NUL byte."""
        if self.media_kind and self.media_kind.startswith(BINARY_MEDIA_PREFIXES):
            return True
        return self.content is not None and "\0" in self.content


@dataclass
class PackOptions:
    """Options for a single packing run."""
    ignore_patterns: List[str] = field(default_factory=list)
    prepend_prompt: Optional[str] = None
    include_file_tree: bool = True
    folders_first: bool = True
    use_gitignore: bool = True
    use_repomixignore: bool = True
    use_default_patterns: bool = True
    preset: Optional[str] = None
    detect_binary: bool = True
    # Accepted for compatibility; file contents are passed through unchanged
    remove_comments: bool = False


@dataclass(frozen=True)
class PackStats:
    """Totals for one packing run."""
    file_count: int = 0
    char_count: int = 0
    estimated_token_count: int = 0
    ignored_count: int = 0

    @property
    def token_level(self) -> str:
        if self.estimated_token_count > TOKEN_LIMIT_DANGER:
            return "danger"
        if self.estimated_token_count > TOKEN_LIMIT_WARNING:
            return "warning"
        return "ok"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["token_level"] = self.token_level
        return data


@dataclass
class PackResult:
    """Output of a packing run: the document, its stats and the file tree."""
    document: str
    stats: PackStats
    tree: FileTree
    files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "files": list(self.files),
            "tree": self.tree.to_dict(),
        }
