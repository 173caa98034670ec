"""
Test the qmd and git command-line collaborators.

subprocess.run is replaced with a fake so no external binary is needed.
"""

import json
import subprocess

import pytest

from indigo_docs.external import git, qmd


class FakeRun:
    """Stand-in for subprocess.run that records calls."""

    def __init__(self, returncode=0, stdout="", stderr="", raises=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.raises = raises
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append((list(args), kwargs))
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)

    @property
    def args(self):
        return self.calls[-1][0]


@pytest.fixture
def fake_run(monkeypatch):
    def install(**kwargs):
        fake = FakeRun(**kwargs)
        monkeypatch.setattr(subprocess, "run", fake)
        return fake

    return install


# ============================================================================
# QMD SEARCH
# ============================================================================


RESULTS = [
    {"docId": "d1", "score": 0.9, "title": "Setup", "filePath": "/hq/setup.md", "snippet": "install"},
    {"doc_id": "d2", "score": "0.5", "title": "Deploy", "file": "/hq/deploy.md"},
]


@pytest.mark.parametrize(
    "mode,subcommand",
    [("keyword", "search"), ("semantic", "vsearch"), ("hybrid", "query"), ("other", "query")],
)
def test_qmd_mode_selects_subcommand(fake_run, mode, subcommand):
    fake = fake_run(stdout="[]")

    qmd.qmd_search("setup", mode=mode)

    assert fake.args[:2] == ["qmd", subcommand]


def test_qmd_search_builds_arguments(fake_run):
    fake = fake_run(stdout="[]")

    qmd.qmd_search("deploy steps", collection="handbook", limit=5)

    assert fake.args == ["qmd", "query", "deploy steps", "--json", "-n", "5", "-c", "handbook"]


@pytest.mark.parametrize("collection", [None, "", "all"])
def test_qmd_search_without_collection_scope(fake_run, collection):
    fake = fake_run(stdout="[]")

    qmd.qmd_search("x", collection=collection)

    assert "-c" not in fake.args
    assert fake.args[-2:] == ["-n", "10"]


def test_qmd_search_parses_json_array(fake_run):
    fake_run(stdout=json.dumps(RESULTS))

    response = qmd.qmd_search("setup")

    assert response.error is None
    assert response.total == 2
    assert [r.doc_id for r in response.results] == ["d1", "d2"]
    assert response.results[1].score == 0.5
    assert response.results[1].file_path == "/hq/deploy.md"
    assert response.results[1].snippet == ""


def test_qmd_search_parses_ndjson(fake_run):
    fake_run(stdout="\n".join(json.dumps(r) for r in RESULTS) + "\n")

    response = qmd.qmd_search("setup")

    assert response.total == 2
    assert response.results[0].title == "Setup"


def test_qmd_blank_query_skips_qmd(fake_run):
    fake = fake_run(stdout="[]")

    response = qmd.qmd_search("   ")

    assert response.to_dict() == {"results": [], "total": 0, "error": None}
    assert fake.calls == []


def test_qmd_missing_binary(fake_run):
    fake_run(raises=FileNotFoundError("qmd"))

    response = qmd.qmd_search("setup")

    assert response.results == []
    assert response.total == 0
    assert "not found in PATH" in response.error


def test_qmd_nonzero_exit(fake_run):
    fake_run(returncode=1, stderr="index missing\n")

    response = qmd.qmd_search("setup")

    assert response.error == "qmd error: index missing"
    assert response.results == []


def test_qmd_unparsable_output(fake_run):
    fake_run(stdout="this is not json\n")

    response = qmd.qmd_search("setup")

    assert response.error == "qmd returned unparsable output"
    assert response.total == 0


def test_qmd_response_to_dict(fake_run):
    fake_run(stdout=json.dumps(RESULTS[:1]))

    data = qmd.qmd_search("setup").to_dict()

    assert data["results"][0] == {
        "docId": "d1",
        "score": 0.9,
        "title": "Setup",
        "filePath": "/hq/setup.md",
        "snippet": "install",
    }


def test_check_qmd_available(fake_run):
    fake_run(returncode=0, stdout="qmd 1.2.0")
    assert qmd.check_qmd_available() is True

    fake_run(returncode=1)
    assert qmd.check_qmd_available() is False

    fake_run(raises=FileNotFoundError("qmd"))
    assert qmd.check_qmd_available() is False


def test_list_qmd_collections(fake_run):
    fake = fake_run(stdout="handbook\n\n  ops  \n")

    assert qmd.list_qmd_collections() == ["handbook", "ops"]
    assert fake.args == ["qmd", "collection", "list"]


def test_list_qmd_collections_failures(fake_run):
    fake_run(returncode=2, stdout="handbook\n")
    assert qmd.list_qmd_collections() == []

    fake_run(raises=FileNotFoundError("qmd"))
    with pytest.raises(RuntimeError, match="not found in PATH"):
        qmd.list_qmd_collections()


# ============================================================================
# GIT COMMIT DATE
# ============================================================================


@pytest.fixture
def doc(tmp_path):
    path = tmp_path / "repo" / "doc.md"
    path.parent.mkdir()
    path.write_text("# Doc\n")
    return path


def test_git_commit_date(fake_run, doc):
    fake = fake_run(stdout="2025-01-15T10:30:00+01:00\n")

    assert git.get_git_commit_date(str(doc)) == "2025-01-15T10:30:00+01:00"
    assert fake.args == ["git", "log", "-1", "--format=%cI", "--", str(doc)]
    assert fake.calls[-1][1]["cwd"] == str(doc.parent)


def test_git_untracked_file(fake_run, doc):
    fake_run(stdout="")
    assert git.get_git_commit_date(str(doc)) is None


def test_git_not_a_repository(fake_run, doc):
    fake_run(returncode=128, stdout="")
    assert git.get_git_commit_date(str(doc)) is None


def test_git_missing_binary(fake_run, doc):
    fake_run(raises=FileNotFoundError("git"))
    assert git.get_git_commit_date(str(doc)) is None


def test_git_timeout(fake_run, doc):
    fake_run(raises=subprocess.TimeoutExpired(["git"], 5))
    assert git.get_git_commit_date(str(doc)) is None


def test_git_missing_file(fake_run, tmp_path):
    fake = fake_run(stdout="2025-01-15T10:30:00+01:00\n")

    with pytest.raises(FileNotFoundError, match="File not found"):
        git.get_git_commit_date(str(tmp_path / "missing.md"))
    assert fake.calls == []
