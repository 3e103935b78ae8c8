"""Nested directory structure folded from a flat list of tree entries.

A DirectoryNode owns its children keyed by segment name; a FileNode is a
leaf carrying the entry's size, path and sha. The root is an unnamed
directory. No back-references are kept.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

DIR_TYPE = "dir"
FILE_TYPE = "file"


@dataclass(frozen=True, kw_only=True)
class FileNode:
    name: str
    size: int
    path: str
    sha: str

    @property
    def type(self) -> str:
        return FILE_TYPE


@dataclass(kw_only=True)
class DirectoryNode:
    name: str = ""
    children: dict[str, TreeNode] = field(default_factory=dict)

    @property
    def type(self) -> str:
        return DIR_TYPE

    def sorted_children(self) -> list[TreeNode]:
        """Directories before files, then alphabetical by name."""
        return sorted(
            self.children.values(),
            key=lambda node: (not isinstance(node, DirectoryNode), node.name),
        )

    def iter_files(self) -> Iterator[FileNode]:
        for child in self.children.values():
            if isinstance(child, DirectoryNode):
                yield from child.iter_files()
            else:
                yield child


TreeNode = DirectoryNode | FileNode


def render_tree(root: DirectoryNode, indent: str = "  ") -> str:
    """Indented text listing of the tree, in render order."""
    lines: list[str] = []

    def walk(node: DirectoryNode, depth: int) -> None:
        for child in node.sorted_children():
            if isinstance(child, DirectoryNode):
                lines.append(f"{indent * depth}{child.name}/")
                walk(child, depth + 1)
            else:
                lines.append(f"{indent * depth}{child.name}")

    walk(root, 0)
    return "\n".join(lines)
