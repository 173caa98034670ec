"""
Pytest configuration and fixtures for Indigo Docs tests.

Specialized fixtures are organized in the fixtures/ directory:
- fixtures.hq: HQ folder layouts for scanning and scope tests
- fixtures.watcher: ChangeWatcher and event collection fixtures
"""

import os
import tempfile

import pytest

# Keep logs and config of the server module out of the real home directory.
# Must be set before indigo_docs.server is imported by any test.
os.environ.setdefault("INDIGO_DATA_DIR", tempfile.mkdtemp(prefix="indigo_docs_test_"))

# Load fixture modules
pytest_plugins = [
    "tests.fixtures.hq",
    "tests.fixtures.watcher",
]


@pytest.fixture
def sample_markdown():
    """Sample Markdown document with a front heading."""
    return """# Onboarding Guide

Welcome to the team. This guide covers the first week.

## Day one

Set up your laptop and read the handbook.
"""
