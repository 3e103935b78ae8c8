from collections.abc import Iterable

from repo_digest.core.domain.repository import DirectoryNode, FileEntry, FileNode


class DirectoryTreeBuilder:
    """Folds a flat list of tree entries into a nested DirectoryNode."""

    def build(self, files: Iterable[FileEntry]) -> DirectoryNode:
        root = DirectoryNode()
        for entry in files:
            *directories, filename = entry.path.split("/")
            current = self._descend(root, directories)
            current.children[filename] = FileNode(
                name=filename,
                size=entry.size,
                path=entry.path,
                sha=entry.sha,
            )
        return root

    @staticmethod
    def _descend(root: DirectoryNode, segments: list[str]) -> DirectoryNode:
        current = root
        for segment in segments:
            child = current.children.get(segment)
            if not isinstance(child, DirectoryNode):
                child = DirectoryNode(name=segment)
                current.children[segment] = child
            current = child
        return current
