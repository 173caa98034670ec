"""External command-line collaborators (qmd search, git history)."""

from .git import get_git_commit_date
from .qmd import (
    QmdSearchResponse,
    QmdSearchResult,
    check_qmd_available,
    list_qmd_collections,
    qmd_search,
)

__all__ = [
    "QmdSearchResponse",
    "QmdSearchResult",
    "check_qmd_available",
    "get_git_commit_date",
    "list_qmd_collections",
    "qmd_search",
]
