"""
Exclusion policy shared by scanning, scope expansion, and watching.

A single name-based predicate decides whether a path segment is skipped.
The tree scanner, the wildcard expander, and the change watcher all call into
this module, so what shows up in a scan is exactly what can produce a watch
event.
"""

from pathlib import PurePath
from typing import Iterable, Union

# ═══════════════════════════════════════════════════════════════════════════════
# Excluded names
# ═══════════════════════════════════════════════════════════════════════════════
# Matched against a single path segment (exact, case-sensitive).
# Anything starting with "." is excluded as well, see is_excluded().

EXCLUDED_NAMES = frozenset(
    {
        # Package managers and dependencies
        "node_modules",
        # Version control
        ".git",
        # Build and output directories
        "dist",
        ".next",  # Next.js
        ".turbo",  # Turborepo
        ".vercel",
        "target",  # Rust
        # macOS and Windows system files
        ".DS_Store",
        "thumbs.db",
    }
)

# Only files with this suffix are part of the document tree
MARKDOWN_EXTENSION = ".md"


def is_excluded(name: str) -> bool:
    """
    Check if a single path segment is excluded.

    Args:
        name: File or directory base name (not a full path)

    Returns:
        True if the name is on the denylist or is a dotfile/dot-directory
    """
    return name in EXCLUDED_NAMES or name.startswith(".")


def is_markdown(name: Union[str, PurePath]) -> bool:
    """Check if a file name or path names a Markdown document."""
    return str(name).endswith(MARKDOWN_EXTENSION)


def _relative_parts(path: PurePath, roots: list[PurePath]) -> tuple[str, ...]:
    """Return the segments of path below the first root that contains it."""
    for root in roots:
        try:
            return path.relative_to(root).parts
        except ValueError:
            continue
    # Not under any root: check every segment except the anchor
    return path.parts[1:] if path.anchor else path.parts


def is_excluded_path(
    path: Union[str, PurePath], roots: Iterable[Union[str, PurePath]] = ()
) -> bool:
    """
    Check if any segment of a path is excluded.

    When the path lies inside one of ``roots``, only the segments below that
    root are checked. Watched roots come from scope expansion and may be dotted
    themselves (e.g. ``.claude/commands``), which must not hide their content.

    Args:
        path: Absolute path of a changed file or directory
        roots: Watched directories the path may live under

    Returns:
        True if the path should never be reported
    """
    path = PurePath(path)
    parts = _relative_parts(path, [PurePath(r) for r in roots])
    return any(is_excluded(part) for part in parts)
