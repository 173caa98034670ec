"""
Scope registry and helpers over scanned trees.

Scopes are named patterns relative to the HQ root. Clients enable scopes by
id; the scanner and watcher only ever see the resolved patterns.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, Literal, Optional

from .discovery import WILDCARD, parse_scope
from .types import TreeNode

Tier = Literal["hq", "company", "tools"]

TIER_ORDER: tuple[Tier, ...] = ("hq", "company", "tools")

TIER_LABELS: dict[str, str] = {
    "hq": "HQ Knowledge",
    "company": "Company Knowledge",
    "tools": "Tools",
}


@dataclass(frozen=True)
class ScanScope:
    """A named, toggleable scope pattern."""

    id: str
    label: str
    pattern: str
    default_enabled: bool
    tier: Tier


DEFAULT_SCOPES: tuple[ScanScope, ...] = (
    ScanScope("knowledge-public", "Knowledge (Public)", "knowledge/public", True, "hq"),
    ScanScope("knowledge-private", "Knowledge (Private)", "knowledge/private", True, "hq"),
    ScanScope("company-knowledge", "Company Knowledge", "companies/*/knowledge", True, "company"),
    ScanScope("workers", "Workers", "workers", False, "tools"),
    ScanScope("commands", "Commands", ".claude/commands", False, "tools"),
    ScanScope("projects", "Projects", "projects", False, "tools"),
)

_SCOPES_BY_ID = {scope.id: scope for scope in DEFAULT_SCOPES}


def get_scope(scope_id: str) -> Optional[ScanScope]:
    return _SCOPES_BY_ID.get(scope_id)


def default_enabled_scopes() -> list[str]:
    """Return the ids of scopes enabled out of the box."""
    return [scope.id for scope in DEFAULT_SCOPES if scope.default_enabled]


def patterns_for_scopes(scope_ids: Iterable[str]) -> list[str]:
    """Resolve scope ids to patterns, silently skipping unknown ids."""
    return [
        _SCOPES_BY_ID[scope_id].pattern
        for scope_id in scope_ids
        if scope_id in _SCOPES_BY_ID
    ]


def count_total_files(roots: Iterable[TreeNode]) -> int:
    """Count Markdown files across all tree roots."""
    return sum(root.file_count for root in roots)


def find_node_by_path(roots: Iterable[TreeNode], target_path: str) -> Optional[TreeNode]:
    """Find a node anywhere in the trees by its absolute path."""
    for root in roots:
        for node in root.iter_nodes():
            if node.path == target_path:
                return node
    return None


def _pattern_regex(pattern: str) -> re.Pattern:
    segments = parse_scope(pattern)
    parts = ["[^/]+" if s == WILDCARD else re.escape(s) for s in segments]
    return re.compile("^" + "/".join(parts) + "$")


def _relative_to_hq(path: str, hq_path: str) -> Optional[str]:
    try:
        return PurePosixPath(path).relative_to(PurePosixPath(hq_path)).as_posix()
    except ValueError:
        return None


@dataclass
class TierGroup:
    """Tree roots belonging to one tier."""

    tier: Tier
    label: str
    roots: list[TreeNode]


def group_tree_by_tier(
    roots: Iterable[TreeNode], enabled_scope_ids: Iterable[str], hq_path: str
) -> list[TierGroup]:
    """
    Group tree roots under the tier of the scope they came from.

    Each root path (relative to the HQ root) is matched against the enabled
    scope patterns; unmatched roots fall back to the "hq" tier. Tiers without
    roots are omitted, and the rest come back in hq, company, tools order.

    Args:
        roots: Scan results
        enabled_scope_ids: Scope ids that produced the roots
        hq_path: HQ root directory

    Returns:
        Non-empty tier groups
    """
    enabled = [_SCOPES_BY_ID[i] for i in enabled_scope_ids if i in _SCOPES_BY_ID]
    matchers = [(_pattern_regex(scope.pattern), scope.tier) for scope in enabled]

    tier_map: dict[str, list[TreeNode]] = {}
    for root in roots:
        relative = _relative_to_hq(root.path, hq_path)
        matched_tier = "hq"
        if relative is not None:
            for regex, tier in matchers:
                if regex.match(relative):
                    matched_tier = tier
                    break
        tier_map.setdefault(matched_tier, []).append(root)

    return [
        TierGroup(tier=tier, label=TIER_LABELS[tier], roots=tier_map[tier])
        for tier in TIER_ORDER
        if tier_map.get(tier)
    ]
