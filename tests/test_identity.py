"""Tests for the author identity store."""

import pytest

from svcs.engine import SnapshotEngine
from svcs.errors import IdentityMissingError, ValidationError
from svcs.identity import read_author, require_author, set_author, validate_author


def test_unset_author(ctx):
    assert read_author(ctx) is None
    with pytest.raises(IdentityMissingError):
        require_author(ctx)


def test_set_and_read(ctx):
    set_author(ctx, "alice")

    assert read_author(ctx) == "alice"
    assert ctx.config_path.read_text() == "alice\n"


def test_set_overwrites(ctx):
    set_author(ctx, "alice")
    set_author(ctx, "bob")

    assert require_author(ctx) == "bob"


def test_env_overrides_file(ctx, monkeypatch):
    set_author(ctx, "alice")
    monkeypatch.setenv("SVCS_AUTHOR", "carol")

    assert read_author(ctx) == "carol"


def test_reads_first_line_only(ctx):
    ctx.config_path.write_text("dave\nignored\n")

    assert read_author(ctx) == "dave"


@pytest.mark.parametrize("bad", ["", "   ", "two words", "tab\there"])
def test_invalid_names(bad):
    with pytest.raises(ValidationError):
        validate_author(bad)


def test_invalid_name_not_stored(ctx):
    with pytest.raises(ValidationError):
        set_author(ctx, "two words")
    assert not ctx.config_path.exists()


def test_hand_edited_name_with_whitespace_rejected(ctx):
    ctx.config_path.write_text("John Doe\n")

    with pytest.raises(ValidationError):
        read_author(ctx)


def test_commit_refuses_unloggable_author(ctx, write_file):
    ctx.config_path.write_text("John Doe\n")
    write_file("a.txt", "hello")
    engine = SnapshotEngine(ctx)
    engine.staging.add("a.txt")

    with pytest.raises(ValidationError):
        engine.commit("first")

    assert not ctx.log_path.exists()
    assert engine.staging.list() == ["a.txt"]
