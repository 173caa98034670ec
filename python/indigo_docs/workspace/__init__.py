"""
HQ workspace scanning: scope expansion and the Markdown document tree.

Typical usage:
--------------
    from indigo_docs.workspace import scan_scopes

    roots = scan_scopes("/path/to/hq", ["knowledge/public", "companies/*/knowledge"])
    for root in roots:
        print(root.path, root.file_count)
"""

from .discovery import expand_scope, parse_scope, resolve_scope_directories
from .scanner import scan_directory, scan_scopes
from .scopes import (
    DEFAULT_SCOPES,
    ScanScope,
    count_total_files,
    default_enabled_scopes,
    find_node_by_path,
    get_scope,
    group_tree_by_tier,
    patterns_for_scopes,
)
from .types import MAX_DEPTH, TreeNode

__all__ = [
    "DEFAULT_SCOPES",
    "MAX_DEPTH",
    "ScanScope",
    "TreeNode",
    "count_total_files",
    "default_enabled_scopes",
    "expand_scope",
    "find_node_by_path",
    "get_scope",
    "group_tree_by_tier",
    "parse_scope",
    "patterns_for_scopes",
    "resolve_scope_directories",
    "scan_directory",
    "scan_scopes",
]
