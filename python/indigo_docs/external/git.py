"""
Last-commit dates from git.

A missing git binary, a file outside any repository, or an untracked file all
mean "no date" rather than an error.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger("indigo_docs.external")

GIT_TIMEOUT_SECONDS = 5.0


def get_git_commit_date(file_path: str) -> Optional[str]:
    """
    Return the ISO 8601 committer date of the last commit touching a file.

    Runs ``git log -1 --format=%cI -- <file>`` in the file's directory.

    Args:
        file_path: Absolute path of the file

    Returns:
        Commit date string, or None if git is unavailable or the file has no
        history

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    work_dir = path.parent

    try:
        proc = subprocess.run(
            ["git", "log", "-1", "--format=%cI", "--", file_path],
            cwd=str(work_dir),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"git log unavailable for {file_path}: {e}")
        return None

    if proc.returncode != 0:
        return None

    date = proc.stdout.strip()
    return date or None
