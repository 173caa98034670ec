"""
Indigo Docs tool wrappers - thin delegating functions for FastMCP.

These are the tool implementations FastMCP calls. They resolve defaults from
the config store, delegate to the workspace/watcher/external modules, and
convert results to plain JSON-friendly data. Errors are raised as ValueError
or RuntimeError with a human-readable message; FastMCP reports them to the
client as tool errors.
"""

from pathlib import Path
from typing import Any, Literal, Optional

from . import server_state
from .documents import get_file_metadata as get_file_metadata_impl
from .external import git, qmd
from .workspace import (
    DEFAULT_SCOPES,
    count_total_files,
    find_node_by_path,
    get_scope,
    group_tree_by_tier,
    patterns_for_scopes,
    scan_scopes,
)


def _resolve_hq(hq_path: Optional[str]) -> str:
    hq = hq_path or server_state.get_config_store().hq_folder()
    if not hq:
        raise ValueError("No HQ folder connected. Pass hq_path or connect a folder first.")
    return hq


def _resolve_scopes(scopes: Optional[list[str]]) -> list[str]:
    if scopes is not None:
        return scopes
    return patterns_for_scopes(server_state.get_config_store().effective_scopes())


def scan_hq_directory(
    hq_path: Optional[str] = None,
    scopes: Optional[list[str]] = None,
    group_by_tier: bool = False,
) -> list[dict[str, Any]]:
    """
    Scan the HQ folder for Markdown files within the given scopes.

    Args:
        hq_path: Absolute HQ folder path (default: the connected folder)
        scopes: Scope patterns relative to the HQ folder, e.g. "knowledge/public"
                or "companies/*/knowledge" (default: the enabled scopes)
        group_by_tier: Group the trees into hq/company/tools tiers

    Returns:
        One tree per matched scope directory with at least one Markdown file,
        or with group_by_tier, groups like
        {"tier": "hq", "label": "HQ Knowledge", "fileCount": 3, "roots": [...]}
    """
    hq = _resolve_hq(hq_path)
    roots = scan_scopes(hq, _resolve_scopes(scopes))
    if not group_by_tier:
        return [root.to_dict() for root in roots]

    # Explicit patterns may come from any known scope
    if scopes is None:
        scope_ids = server_state.get_config_store().effective_scopes()
    else:
        scope_ids = [scope.id for scope in DEFAULT_SCOPES]

    return [
        {
            "tier": group.tier,
            "label": group.label,
            "fileCount": count_total_files(group.roots),
            "roots": [root.to_dict() for root in group.roots],
        }
        for group in group_tree_by_tier(roots, scope_ids, hq)
    ]


def find_document(
    file_path: str,
    hq_path: Optional[str] = None,
    scopes: Optional[list[str]] = None,
) -> dict[str, Any]:
    """
    Look up one file or directory in the scanned document tree.

    Args:
        file_path: Absolute path of the node
        hq_path: Absolute HQ folder path (default: the connected folder)
        scopes: Scope patterns (default: the enabled scopes)

    Returns:
        The node and its subtree

    Raises:
        ValueError: If the path is not part of the tree
    """
    roots = scan_scopes(_resolve_hq(hq_path), _resolve_scopes(scopes))
    node = find_node_by_path(roots, file_path)
    if node is None:
        raise ValueError(f"Not in the document tree: {file_path}")
    return node.to_dict()


def list_scopes() -> list[dict[str, Any]]:
    """List the known scopes and whether each one is enabled."""
    enabled = set(server_state.get_config_store().effective_scopes())
    return [
        {
            "id": scope.id,
            "label": scope.label,
            "pattern": scope.pattern,
            "tier": scope.tier,
            "enabled": scope.id in enabled,
        }
        for scope in DEFAULT_SCOPES
    ]


def set_enabled_scopes(scope_ids: list[str]) -> list[str]:
    """
    Choose which scopes are scanned and watched by default.

    Args:
        scope_ids: Scope ids as listed by list_scopes

    Returns:
        The enabled scope ids, as saved

    Raises:
        ValueError: If an id is unknown (nothing is saved then)
    """
    unknown = [scope_id for scope_id in scope_ids if get_scope(scope_id) is None]
    if unknown:
        raise ValueError(f"Unknown scope id(s): {', '.join(unknown)}")
    config = server_state.get_config_store().set_enabled_scopes(scope_ids)
    return list(config.enabled_scopes)


def start_watching(
    hq_path: Optional[str] = None,
    scopes: Optional[list[str]] = None,
) -> str:
    """
    Start watching the scope directories for changes (replaces any active watch).

    Changes are debounced (500ms) and can be fetched with recent_changes.

    Args:
        hq_path: Absolute HQ folder path (default: the connected folder)
        scopes: Scope patterns (default: the enabled scopes)

    Returns:
        Summary of what is being watched
    """
    directories = server_state.change_watcher.start(
        _resolve_hq(hq_path), _resolve_scopes(scopes), server_state.record_change
    )
    return f"Watching {len(directories)} directories"


def stop_watching() -> str:
    """Stop the active watcher (no-op when not watching)."""
    server_state.change_watcher.stop()
    return "Watcher stopped"


def recent_changes(limit: Optional[int] = None) -> list[dict[str, str]]:
    """
    Fetch and clear the change events collected since the last call.

    Args:
        limit: Max events to return (default: all)

    Returns:
        Events like {"path": "/hq/knowledge/public/a.md", "kind": "modify"}
    """
    return [event.to_dict() for event in server_state.drain_changes(limit)]


def get_file_metadata(file_path: str) -> dict[str, Any]:
    """Word count, reading time, size, mtime, and symlink info for one file."""
    return get_file_metadata_impl(file_path).to_dict()


def get_git_commit_date(file_path: str) -> Optional[str]:
    """ISO 8601 date of the last commit touching a file (None if untracked)."""
    return git.get_git_commit_date(file_path)


def check_qmd_available() -> bool:
    """Check whether the qmd search tool is installed."""
    return qmd.check_qmd_available()


def qmd_search(
    query: str,
    mode: Literal["keyword", "semantic", "hybrid"] = "hybrid",
    collection: Optional[str] = None,
    limit: Optional[int] = None,
) -> dict[str, Any]:
    """
    Search documents with qmd.

    Args:
        query: Search text
        mode: "keyword", "semantic" or "hybrid"
        collection: qmd collection to search ("all" or empty = every collection)
        limit: Max results (default: 10)

    Returns:
        {"results": [...], "total": n, "error": message-or-null}
    """
    return qmd.qmd_search(query, mode=mode, collection=collection, limit=limit).to_dict()


def list_qmd_collections() -> list[str]:
    """List the qmd collections available for scoping searches."""
    return qmd.list_qmd_collections()


def connect_hq_folder(folder: str) -> dict[str, Any]:
    """
    Connect an HQ folder and remember it for later calls.

    Raises:
        ValueError: If folder is not a directory
    """
    if not Path(folder).is_dir():
        raise ValueError(f"HQ path is not a directory: {folder}")
    config = server_state.get_config_store().connect_folder(folder)
    return {"hqFolderPath": config.hq_folder_path, "recentFolders": config.recent_folders}


def disconnect_hq_folder() -> dict[str, Any]:
    """Forget the connected HQ folder (recent folders are kept)."""
    config = server_state.get_config_store().disconnect()
    return {"hqFolderPath": config.hq_folder_path, "recentFolders": config.recent_folders}
