"""
Directory tree reconstruction and rendering.

Flat forward-slash paths are folded into an arena: every node lives in one
table keyed by its full path, and directory nodes hold an ordered list of
child keys instead of child objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


@dataclass
class TreeNode:
    """A file or directory in the packed tree."""
    name: str
    path: str
    is_directory: bool
    children: List[str] = field(default_factory=list)


class FileTree:
    """Arena of :class:`TreeNode` keyed by full path."""

    def __init__(self):
        self.nodes: Dict[str, TreeNode] = {}
        self.root_keys: List[str] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, path: str) -> bool:
        return path in self.nodes

    def get(self, path: str) -> Optional[TreeNode]:
        return self.nodes.get(path)

    @property
    def roots(self) -> List[TreeNode]:
        return [self.nodes[key] for key in self.root_keys]

    def children_of(self, node: TreeNode) -> List[TreeNode]:
        return [self.nodes[key] for key in node.children]

    def to_dict(self) -> List[Dict[str, Any]]:
        """Serialize to nested JSON-compatible dictionaries."""
        return [self._serialize(node) for node in self.roots]

    def _serialize(self, node: TreeNode) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": node.name,
            "path": node.path,
            "is_directory": node.is_directory,
        }
        if node.is_directory:
            result["children"] = [self._serialize(child) for child in self.children_of(node)]
        return result


def build_tree(paths: Iterable[str]) -> FileTree:
    """
    Build a tree from flat file paths.

    Siblings keep first-seen order. Paths must be unique and consistent:
    a prefix seen as a file must not reappear as a directory (or vice versa).
    """
    tree = FileTree()

    for file_path in paths:
        parts = file_path.split("/")
        level = tree.root_keys
        current_path = ""

        for i, part in enumerate(parts):
            is_file = i == len(parts) - 1
            current_path = f"{current_path}/{part}" if current_path else part

            existing = next((key for key in level if tree.nodes[key].name == part), None)
            if existing is None:
                tree.nodes[current_path] = TreeNode(
                    name=part,
                    path=current_path,
                    is_directory=not is_file,
                )
                level.append(current_path)
                existing = current_path

            level = tree.nodes[existing].children

    return tree


def sort_siblings(nodes: Iterable[TreeNode], folders_first: bool = True) -> List[TreeNode]:
    """Order siblings by kind, then by case-sensitive name."""
    kind_rank = (lambda n: 0 if n.is_directory else 1) if folders_first else \
        (lambda n: 1 if n.is_directory else 0)
    return sorted(nodes, key=lambda n: (kind_rank(n), n.name))


def render_tree(
    tree: FileTree,
    folders_first: bool = True,
    prefix: str = "",
    nodes: Optional[List[TreeNode]] = None,
) -> str:
    """Render the tree as ``├──``/``└──`` lines joined by newlines."""
    lines: List[str] = []
    _render_level(tree, tree.roots if nodes is None else nodes, prefix, folders_first, lines)
    return "\n".join(lines)


def _render_level(
    tree: FileTree,
    nodes: List[TreeNode],
    prefix: str,
    folders_first: bool,
    lines: List[str],
):
    ordered = sort_siblings(nodes, folders_first)
    for i, node in enumerate(ordered):
        is_last = i == len(ordered) - 1
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{node.name}")
        if node.children:
            _render_level(
                tree,
                tree.children_of(node),
                prefix + (SPACE if is_last else PIPE),
                folders_first,
                lines,
            )
