"""Shared test fixtures and utilities."""

import pytest

from svcs.context import RepoContext
from svcs.engine import SnapshotEngine
from svcs.identity import set_author


@pytest.fixture(autouse=True)
def no_author_env(monkeypatch):
    """Keep a developer's SVCS_AUTHOR out of the tests."""
    monkeypatch.delenv("SVCS_AUTHOR", raising=False)


@pytest.fixture
def ctx(tmp_path, monkeypatch):
    """Create an initialized repository and chdir into it."""
    monkeypatch.chdir(tmp_path)
    return RepoContext.init(tmp_path)


@pytest.fixture
def engine(ctx):
    """Snapshot engine with author 'alice' configured."""
    set_author(ctx, "alice")
    return SnapshotEngine(ctx)


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture to write files relative to tmp_path."""
    def _write(path: str, content="test content"):
        file_path = tmp_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            file_path.write_bytes(content)
        else:
            file_path.write_text(content)
        return file_path
    return _write
