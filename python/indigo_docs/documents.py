"""
Per-document helpers: title extraction, timestamps, and file metadata.

These are the small single-file operations the tree scanner and the tool
surface need. None of them look at more than one file.
"""

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("indigo_docs.documents")

# Title heuristic only looks at the head of a document
TITLE_SCAN_LINES = 50
TITLE_PREFIX = "# "

# Words per minute used for the reading time estimate
WORDS_PER_MINUTE = 200


def extract_title(path: Union[str, Path]) -> Optional[str]:
    """
    Extract a document title from the first ``# `` heading.

    Only the first 50 lines are read. Lines are stripped before matching, so
    indented headings count. Unreadable files have no title.

    Args:
        path: Path to a Markdown file

    Returns:
        Heading text, or None if no non-empty heading was found
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f):
                if line_number >= TITLE_SCAN_LINES:
                    break
                trimmed = line.strip()
                if trimmed.startswith(TITLE_PREFIX):
                    title = trimmed[len(TITLE_PREFIX):].strip()
                    if title:
                        return title
    except OSError:
        return None
    return None


def modified_seconds(path: Union[str, Path]) -> Optional[int]:
    """Return the mtime of path in whole seconds since epoch, or None."""
    try:
        mtime = os.stat(path).st_mtime
    except OSError:
        return None
    if mtime < 0:
        return None
    return int(mtime)


@dataclass
class FileMetadata:
    """Metadata shown alongside a single document."""

    word_count: int
    reading_time_minutes: int
    file_size: int
    modified: Optional[int]
    file_path: str
    symlink_target: Optional[str] = None
    source_repo_name: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to the camelCase shape used by clients."""
        data = asdict(self)
        return {
            "wordCount": data["word_count"],
            "readingTimeMinutes": data["reading_time_minutes"],
            "fileSize": data["file_size"],
            "modified": data["modified"],
            "filePath": data["file_path"],
            "symlinkTarget": data["symlink_target"],
            "sourceRepoName": data["source_repo_name"],
        }


def extract_repo_name(resolved_path: str) -> Optional[str]:
    """
    Extract a repository name from a resolved symlink target.

    Looks for ``/repos/<public|private>/<name>/`` anywhere in the path.

    Args:
        resolved_path: Canonical path a symlink points to

    Returns:
        Repository name, or None if the path has no such pattern
    """
    for part in resolved_path.split("/repos/")[1:]:
        segments = part.split("/")
        if len(segments) >= 2 and segments[1]:
            return segments[1]
    return None


def _symlink_info(path: Path, file_path: str) -> tuple[Optional[str], Optional[str]]:
    """Return (symlink_target, source_repo_name) for a file."""
    if path.is_symlink():
        try:
            target = str(path.resolve(strict=True))
        except OSError:
            target = os.readlink(path)
        return target, extract_repo_name(target)

    # An ancestor directory may be the symlink
    try:
        canonical = str(path.resolve(strict=True))
    except OSError:
        return None, None
    if canonical != file_path:
        return canonical, extract_repo_name(canonical)
    return None, None


def get_file_metadata(file_path: str) -> FileMetadata:
    """
    Compute metadata for one document.

    Args:
        file_path: Absolute path of the file

    Returns:
        FileMetadata with word count, reading time, size, mtime, symlink info

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file cannot be read
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    content = path.read_text(encoding="utf-8", errors="replace")
    word_count = len(content.split())
    stat = path.stat()

    symlink_target, source_repo_name = _symlink_info(path, file_path)
    if symlink_target:
        logger.debug(f"{file_path} resolves to {symlink_target}")

    return FileMetadata(
        word_count=word_count,
        reading_time_minutes=max(1, word_count // WORDS_PER_MINUTE),
        file_size=stat.st_size,
        modified=int(stat.st_mtime) if stat.st_mtime >= 0 else None,
        file_path=file_path,
        symlink_target=symlink_target,
        source_repo_name=source_repo_name,
    )
