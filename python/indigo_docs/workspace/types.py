"""
Tree node type returned by the workspace scanner.
"""

from dataclasses import dataclass
from typing import Any, Optional

# Scan roots are depth 0; nothing deeper than this is ever returned
MAX_DEPTH = 15


@dataclass(frozen=True)
class TreeNode:
    """
    A directory or Markdown file in the scanned document tree.

    Directory nodes carry the number of Markdown files in their whole subtree
    and their children (directories first, then files, each group sorted by
    name). File nodes are leaves with an optional title.
    """

    name: str
    path: str
    is_directory: bool
    depth: int
    title: Optional[str] = None
    children: tuple["TreeNode", ...] = ()
    file_count: int = 0
    modified: Optional[int] = None

    def iter_nodes(self):
        """Yield this node and all its descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON shape used by clients."""
        return {
            "name": self.name,
            "path": self.path,
            "isDirectory": self.is_directory,
            "title": self.title,
            "children": [child.to_dict() for child in self.children],
            "depth": self.depth,
            "fileCount": self.file_count,
            "modified": self.modified,
        }
