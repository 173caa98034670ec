"""
Recursive document tree scanner.

Builds a tree of directories and Markdown files below each scope directory:
- excluded names (see exclusion.py) are skipped
- non-Markdown files are invisible
- directories without any Markdown file in their subtree are pruned
- no node (directory or file) deeper than MAX_DEPTH is returned, which also
  bounds symlink cycles

Scanning is synchronous and keeps no state between calls. Per-entry I/O errors
(permission denied, broken symlink, entry removed mid-scan) skip the entry.
"""

import logging
import os
import stat
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from ..documents import extract_title, modified_seconds
from ..exclusion import is_excluded, is_markdown
from .discovery import expand_scope
from .types import MAX_DEPTH, TreeNode

logger = logging.getLogger("indigo_docs.workspace")


def _list_entries(directory: Path) -> Optional[list[os.DirEntry]]:
    """List a directory sorted directories-first, then by raw name."""
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        logger.debug(f"Cannot read directory {directory}: {e}")
        return None

    def sort_key(entry: os.DirEntry) -> tuple[bool, str]:
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        return (not is_dir, entry.name)

    entries.sort(key=sort_key)
    return entries


def _file_node(path: Path, name: str, depth: int) -> TreeNode:
    return TreeNode(
        name=name,
        path=str(path),
        is_directory=False,
        depth=depth,
        title=extract_title(path),
        modified=modified_seconds(path),
    )


def scan_directory(
    root: Union[str, Path], depth: int = 0, max_depth: int = MAX_DEPTH
) -> Optional[TreeNode]:
    """
    Scan a directory into a filtered tree of directories and Markdown files.

    The directory is read through its canonical path (symlinks are followed),
    but the returned node reports the path the caller passed in.

    Args:
        root: Directory to scan
        depth: Depth of root in the overall tree (0 for scope roots)
        max_depth: Deepest level that may be returned

    Returns:
        Directory node (possibly with file_count == 0), or None if depth
        exceeds max_depth or the directory cannot be read
    """
    if depth > max_depth:
        return None

    root = Path(root)
    try:
        canonical = root.resolve()
    except (OSError, RuntimeError):
        canonical = root

    entries = _list_entries(canonical)
    if entries is None:
        return None

    children: list[TreeNode] = []
    file_count = 0

    for entry in entries:
        name = entry.name
        if is_excluded(name):
            continue

        # Children are addressed through the caller's path, not the canonical one
        entry_path = root / name
        try:
            # Follow symlinks: the target decides file vs directory
            entry_stat = os.stat(entry_path)
        except OSError:
            continue

        if stat.S_ISDIR(entry_stat.st_mode):
            child = scan_directory(entry_path, depth + 1, max_depth)
            if child is not None and child.file_count > 0:
                file_count += child.file_count
                children.append(child)
        elif stat.S_ISREG(entry_stat.st_mode) and is_markdown(name) and depth < max_depth:
            file_count += 1
            children.append(_file_node(entry_path, name, depth + 1))

    return TreeNode(
        name=root.name or str(root),
        path=str(root),
        is_directory=True,
        depth=depth,
        children=tuple(children),
        file_count=file_count,
        modified=modified_seconds(root),
    )


def scan_scopes(
    hq_path: Union[str, Path], scopes: Iterable[Union[str, Sequence[str]]]
) -> list[TreeNode]:
    """
    Scan every scope below the HQ root into a flat list of tree roots.

    Args:
        hq_path: HQ root directory
        scopes: Scope patterns (``/``-separated, ``*`` wildcard segment)

    Returns:
        One root node per matched scope directory that contains at least one
        Markdown file, in scope order then expansion order

    Raises:
        ValueError: If hq_path is not a directory
    """
    hq = Path(hq_path)
    if not hq.is_dir():
        raise ValueError(f"HQ path is not a directory: {hq_path}")

    results: list[TreeNode] = []

    for scope in scopes:
        for scope_path in expand_scope(hq, scope):
            node = _scan_scope_path(scope_path)
            if node is not None and node.file_count > 0:
                results.append(node)

    logger.debug(
        f"Scanned {hq}: {len(results)} roots, {sum(r.file_count for r in results)} files"
    )
    return results


def _scan_scope_path(scope_path: Path) -> Optional[TreeNode]:
    """Scan one expanded scope path, retrying through its canonical path."""
    if scope_path.is_dir():
        return scan_directory(scope_path, 0, MAX_DEPTH)

    # Not directly a directory: maybe a symlink whose target is one
    try:
        canonical = scope_path.resolve(strict=True)
    except (OSError, RuntimeError):
        return None
    if not canonical.is_dir():
        return None

    node = scan_directory(canonical, 0, MAX_DEPTH)
    if node is None:
        return None
    # Keep the addressable location, not the resolved one
    return replace(node, path=str(scope_path))
