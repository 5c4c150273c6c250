"""Pack format for structured repository output."""

from .base import (
    PackDocumentWriter,
    PackFormatError,
    escape_cdata,
    unescape_cdata,
    format_file_record,
    parse_document,
    extract_tree,
)

__all__ = [
    "PackDocumentWriter",
    "PackFormatError",
    "escape_cdata",
    "unescape_cdata",
    "format_file_record",
    "parse_document",
    "extract_tree",
]
