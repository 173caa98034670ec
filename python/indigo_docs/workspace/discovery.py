"""
Scope expansion: turn relative scope patterns into concrete directories.

A scope is a ``/``-separated path relative to the HQ root, e.g.
``knowledge/public`` or ``companies/*/knowledge``. A segment equal to ``*``
matches every non-excluded subdirectory (or symlink) at that level.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Sequence, Union

from ..exclusion import is_excluded

logger = logging.getLogger("indigo_docs.workspace")

WILDCARD = "*"

ScopePattern = tuple[str, ...]


def parse_scope(scope: Union[str, Sequence[str]]) -> ScopePattern:
    """
    Split a scope string into its path segments.

    Empty segments (leading, trailing, or doubled slashes) are dropped.
    Already-split sequences are passed through as a tuple.
    """
    if isinstance(scope, str):
        return tuple(part for part in scope.split("/") if part)
    return tuple(scope)


def _is_directory(path: Path) -> bool:
    """Directory test that follows symlinks and never raises."""
    try:
        if path.is_dir():
            return True
        return path.resolve(strict=True).is_dir()
    except (OSError, RuntimeError):
        # RuntimeError: symlink loop on older Pythons
        return False


def expand_scope(hq_root: Path, scope: Union[str, Sequence[str]]) -> list[Path]:
    """
    Expand one scope pattern into candidate directories.

    Without a wildcard the single joined path is returned as-is (existence is
    the caller's concern). With one wildcard the prefix directory is listed;
    entries that are directories or symlinks and not excluded get the rest of
    the pattern appended, and only results that resolve to a directory are
    kept. Order follows the directory listing.

    Args:
        hq_root: HQ root directory
        scope: Scope string or pre-split segments

    Returns:
        List of candidate directories (empty if the prefix is unreadable or the
        pattern has more than one wildcard)
    """
    segments = parse_scope(scope)
    wildcards = [i for i, segment in enumerate(segments) if segment == WILDCARD]

    if not wildcards:
        return [hq_root.joinpath(*segments)]

    if len(wildcards) > 1:
        logger.warning(f"Scope '{'/'.join(segments)}' has more than one wildcard, skipping")
        return []

    position = wildcards[0]
    prefix_path = hq_root.joinpath(*segments[:position])
    suffix = segments[position + 1:]

    try:
        with os.scandir(prefix_path) as it:
            entries = list(it)
    except OSError as e:
        logger.debug(f"Cannot list scope prefix {prefix_path}: {e}")
        return []

    expanded = []
    for entry in entries:
        try:
            if not (entry.is_dir(follow_symlinks=False) or entry.is_symlink()):
                continue
        except OSError:
            continue
        if is_excluded(entry.name):
            continue

        candidate = Path(entry.path).joinpath(*suffix)
        if _is_directory(candidate):
            expanded.append(candidate)

    return expanded


def resolve_scope_directories(
    hq_root: Path, scopes: Iterable[Union[str, Sequence[str]]]
) -> list[Path]:
    """
    Expand every scope and keep the candidates that are directories.

    Symlinked candidates are kept under their original (unresolved) path.
    Used for watching; scanning applies the same rule inline.

    Args:
        hq_root: HQ root directory
        scopes: Scope patterns in caller order

    Returns:
        Concrete directories, in scope order then expansion order
    """
    directories = []
    for scope in scopes:
        for candidate in expand_scope(hq_root, scope):
            if _is_directory(candidate):
                directories.append(candidate)
    return directories
