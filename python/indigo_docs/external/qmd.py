"""
Search through the external ``qmd`` indexer.

qmd is a command-line Markdown search tool. We shell out to it and parse its
JSON output. Every failure mode (binary missing, non-zero exit, unparsable
output) degrades to an empty result carrying an error message.
"""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger("indigo_docs.external")

QMD_BINARY = "qmd"
QMD_TIMEOUT_SECONDS = 30.0

# Search mode -> qmd subcommand (anything unknown is treated as hybrid)
_MODE_SUBCOMMANDS = {
    "keyword": "search",
    "semantic": "vsearch",
    "hybrid": "query",
}


@dataclass
class QmdSearchResult:
    """A single search hit."""

    doc_id: str = ""
    score: float = 0.0
    title: str = ""
    file_path: str = ""
    snippet: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "QmdSearchResult":
        """Build from one qmd JSON record (camelCase keys, ``file`` alias)."""
        score = data.get("score", 0.0)
        try:
            score = float(score)
        except (TypeError, ValueError):
            score = 0.0
        return cls(
            doc_id=str(data.get("docId", data.get("doc_id", "")) or ""),
            score=score,
            title=str(data.get("title", "") or ""),
            file_path=str(data.get("filePath", data.get("file", "")) or ""),
            snippet=str(data.get("snippet", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "docId": self.doc_id,
            "score": self.score,
            "title": self.title,
            "filePath": self.file_path,
            "snippet": self.snippet,
        }


@dataclass
class QmdSearchResponse:
    """Search results plus an optional error message."""

    results: list[QmdSearchResult] = field(default_factory=list)
    total: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "error": self.error,
        }


def _run_qmd(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        [QMD_BINARY, *args],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
        timeout=QMD_TIMEOUT_SECONDS,
    )


def _error_message(e: Exception) -> str:
    if isinstance(e, FileNotFoundError):
        return "qmd not found in PATH. Install qmd for search functionality."
    return f"Failed to execute qmd: {e}"


def check_qmd_available() -> bool:
    """Check if qmd is installed and runs."""
    try:
        proc = _run_qmd(["--version"])
    except (OSError, subprocess.SubprocessError):
        return False
    return proc.returncode == 0


def parse_search_output(stdout: str) -> list[QmdSearchResult]:
    """
    Parse qmd JSON output.

    Accepts a JSON array of records, or newline-delimited JSON records (lines
    that fail to parse are skipped).

    Raises:
        ValueError: If nothing in the output can be parsed
    """
    try:
        data = json.loads(stdout)
    except json.JSONDecodeError:
        data = None

    if isinstance(data, list):
        return [QmdSearchResult.from_json(item) for item in data if isinstance(item, dict)]

    results = []
    lines = [line for line in stdout.splitlines() if line.strip()]
    for line in lines:
        try:
            item = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(item, dict):
            results.append(QmdSearchResult.from_json(item))

    if lines and not results:
        raise ValueError("qmd returned unparsable output")
    return results


def qmd_search(
    query: str,
    mode: str = "hybrid",
    collection: Optional[str] = None,
    limit: Optional[int] = None,
) -> QmdSearchResponse:
    """
    Run a qmd search.

    Args:
        query: Search text (blank queries return no results)
        mode: "keyword" (qmd search), "semantic" (qmd vsearch) or "hybrid"
              (qmd query); unknown modes fall back to hybrid
        collection: Optional collection to scope the search ("all" = no scope)
        limit: Max results (default: 10)

    Returns:
        QmdSearchResponse; ``error`` is set when qmd could not produce results
    """
    if not query.strip():
        return QmdSearchResponse()

    subcommand = _MODE_SUBCOMMANDS.get(mode, "query")
    n = limit if limit is not None else 10

    args = [subcommand, query, "--json", "-n", str(n)]
    if collection and collection != "all":
        args.extend(["-c", collection])

    try:
        proc = _run_qmd(args)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"qmd search failed: {e}")
        return QmdSearchResponse(error=_error_message(e))

    if proc.returncode != 0:
        return QmdSearchResponse(error=f"qmd error: {proc.stderr.strip()}")

    try:
        results = parse_search_output(proc.stdout)
    except ValueError as e:
        logger.warning(f"{e}: {proc.stdout[:200]!r}")
        return QmdSearchResponse(error=str(e))

    return QmdSearchResponse(results=results, total=len(results))


def list_qmd_collections() -> list[str]:
    """
    List qmd collections (one per output line).

    Returns an empty list if qmd fails.

    Raises:
        RuntimeError: If qmd cannot be executed at all
    """
    try:
        proc = _run_qmd(["collection", "list"])
    except (OSError, subprocess.SubprocessError) as e:
        raise RuntimeError(_error_message(e)) from e

    if proc.returncode != 0:
        return []

    return [line.strip() for line in proc.stdout.splitlines() if line.strip()]
