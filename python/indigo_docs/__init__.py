"""
Indigo Docs - Markdown workspace indexing for an HQ folder.

Scans the scoped subtrees of an HQ folder into a tree of directories and
Markdown files, and watches those subtrees for debounced changes.
"""

__version__ = "0.1.0"

# DO NOT import the server here - it configures logging and builds the
# FastMCP app on import. Library users import indigo_docs.workspace or
# indigo_docs.watcher directly.

__all__ = ["__version__"]
