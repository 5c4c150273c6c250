"""Pack format for the serialized repository document.

Layout::

    <optional prompt>

    <repository_context>
    <file_tree>
    ...rendered tree...
    </file_tree>
    <file path="src/main.py">
    <![CDATA[
    ...file content...
    ]]>
    </file>
    </repository_context>

File bodies live in CDATA sections. A literal ``]]>`` inside a body is
split across two CDATA sections, which an XML reader (or
:func:`parse_document`) joins back into the original text.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple


ROOT_TAG = "repository_context"
TREE_TAG = "file_tree"
FILE_TAG = "file"

CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"
CDATA_SPLIT = "]]]]><![CDATA[>"
# Section boundary inserted by escape_cdata; every "]]>" in escaped text starts one
_CDATA_BOUNDARY = CDATA_CLOSE + CDATA_OPEN

_ATTR_ESCAPES = (("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"), ('"', "&quot;"))

_FILE_RECORD = re.compile(
    r'<file path="(?P<path>[^"]*)">\n<!\[CDATA\[\n(?P<body>.*?)\n\]\]>\n</file>\n',
    re.DOTALL,
)
_TREE_BLOCK = re.compile(r"<file_tree>\n(?P<tree>.*?)\n</file_tree>\n", re.DOTALL)
_ROOT_OPEN = re.compile(
    rf"<{ROOT_TAG}>\n(?=<{TREE_TAG}>\n|<{FILE_TAG} path=\"|</{ROOT_TAG}>)"
)


class PackFormatError(ValueError):
    """Raised when a document does not follow the pack layout."""


def escape_cdata(text: str) -> str:
    """Split every ``]]>`` so it cannot terminate the enclosing CDATA section."""
    return text.replace(CDATA_CLOSE, CDATA_SPLIT)


def unescape_cdata(text: str) -> str:
    """Join split CDATA sections back together, as an XML reader would."""
    return text.replace(_CDATA_BOUNDARY, "")


def escape_attribute(value: str) -> str:
    for raw, entity in _ATTR_ESCAPES:
        value = value.replace(raw, entity)
    return value


def unescape_attribute(value: str) -> str:
    # Reverse order so "&amp;lt;" decodes to "&lt;" and not "<"
    for raw, entity in reversed(_ATTR_ESCAPES):
        value = value.replace(entity, raw)
    return value


def format_file_record(path: str, content: str) -> str:
    """Format one file record including its trailing newline."""
    return (
        f'<{FILE_TAG} path="{escape_attribute(path)}">\n'
        f"{CDATA_OPEN}\n{escape_cdata(content)}\n{CDATA_CLOSE}\n"
        f"</{FILE_TAG}>\n"
    )


class PackDocumentWriter:
    """Incrementally builds a pack document."""

    def __init__(self, prompt: Optional[str] = None):
        self._parts: List[str] = []
        if prompt:
            self._parts.append(f"{prompt}\n\n")
        self._parts.append(f"<{ROOT_TAG}>\n")
        self._closed = False

    def add_tree(self, rendered_tree: str):
        self._parts.append(f"<{TREE_TAG}>\n{rendered_tree}\n</{TREE_TAG}>\n")

    def add_file(self, path: str, content: str):
        self._parts.append(format_file_record(path, content))

    def finish(self) -> str:
        if not self._closed:
            self._parts.append(f"</{ROOT_TAG}>")
            self._closed = True
        return "".join(self._parts)


def parse_document(document: str, prompt: Optional[str] = None) -> List[Tuple[str, str]]:
    """
    Read file records back out of a pack document.

    Args:
        document: Pack document text
        prompt: The prompt the document was written with, if known; parsing
            then starts exactly after it

    Returns:
        (path, content) pairs in document order, with content un-escaped

    Raises:
        PackFormatError: If the root element is missing
    """
    body = _root_body(document, prompt)
    return [
        (unescape_attribute(match.group("path")), unescape_cdata(match.group("body")))
        for match in _FILE_RECORD.finditer(body)
    ]


def extract_tree(document: str, prompt: Optional[str] = None) -> Optional[str]:
    """Return the rendered tree block, or None if the document has none."""
    match = _TREE_BLOCK.search(_root_body(document, prompt))
    return match.group("tree") if match else None


def _root_body(document: str, prompt: Optional[str] = None) -> str:
    start = 0
    if prompt:
        header = f"{prompt}\n\n"
        if not document.startswith(header):
            raise PackFormatError("Document does not start with the given prompt")
        start = len(header)

    # A prompt may quote the root tag; the real one is immediately followed by pack content
    opening = _ROOT_OPEN.search(document, start)
    end = document.rfind(f"</{ROOT_TAG}>")
    if opening is None or end < opening.end():
        raise PackFormatError(f"Document has no <{ROOT_TAG}> element")
    return document[opening.end():end]
