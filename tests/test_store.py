"""Tests for the content-addressed commit store."""

import os
import stat
from unittest.mock import patch

import pytest

from svcs.errors import NotFoundError, StorageFailure, ValidationError
from svcs.hashing import compute_snapshot_digest
from svcs.store import CommitStore


@pytest.fixture
def store(ctx):
    return CommitStore(ctx)


@pytest.fixture
def snapshot(ctx, write_file):
    """Two files and their snapshot digest."""
    write_file("a.txt", "hello")
    write_file("src/main.py", "print('hi')")
    paths = ["a.txt", "src/main.py"]
    return compute_snapshot_digest(paths, ctx.root), paths


class TestSave:
    """Test storing snapshots."""

    def test_exists_false_before_save(self, store, snapshot):
        digest, _ = snapshot
        assert not store.exists(digest)

    def test_exists_invalid_digest(self, store):
        assert not store.exists("not-a-digest")
        assert not store.exists("../../etc")

    def test_save_copies_tree(self, ctx, store, snapshot):
        digest, paths = snapshot

        container = store.save(digest, paths)

        assert store.exists(digest)
        assert container == ctx.commits_dir / digest
        assert (container / "a.txt").read_bytes() == b"hello"
        assert (container / "src" / "main.py").read_bytes() == b"print('hi')"

    def test_save_writes_ordered_manifest(self, ctx, store, snapshot):
        digest, paths = snapshot
        store.save(digest, list(reversed(paths)))

        assert (ctx.commits_dir / f"{digest}.files").read_text() == "src/main.py\na.txt\n"
        assert store.files(digest) == ["src/main.py", "a.txt"]

    def test_stored_files_read_only(self, store, snapshot):
        digest, paths = snapshot
        container = store.save(digest, paths)

        mode = stat.S_IMODE((container / "a.txt").stat().st_mode)
        assert mode == 0o444

    def test_stored_bytes_survive_working_tree_changes(self, store, snapshot, write_file):
        digest, paths = snapshot
        store.save(digest, paths)

        write_file("a.txt", "changed")

        assert store.read(digest, "a.txt") == b"hello"

    def test_save_existing_container_is_kept(self, store, snapshot, write_file):
        digest, paths = snapshot
        store.save(digest, paths)
        write_file("a.txt", "changed")

        store.save(digest, paths)

        assert store.read(digest, "a.txt") == b"hello"

    def test_unreadable_source_fails_without_container(self, ctx, store, write_file):
        write_file("a.txt", "hello")
        digest = compute_snapshot_digest(["a.txt"], ctx.root)
        (ctx.root / "a.txt").unlink()

        with pytest.raises(StorageFailure):
            store.save(digest, ["a.txt"])

        assert not store.exists(digest)
        assert not list(ctx.commits_dir.glob(".cas-*"))

    def test_failed_promotion_leaves_no_container(self, ctx, store, snapshot):
        digest, paths = snapshot

        with patch("svcs.store.os.replace", side_effect=OSError("Simulated rename failure")):
            with pytest.raises(StorageFailure, match="Simulated rename failure"):
                store.save(digest, paths)

        assert not store.exists(digest)
        assert not list(ctx.commits_dir.glob(".cas-*"))


class TestRead:
    """Test reading stored content."""

    def test_read_exact_bytes(self, ctx, store, write_file):
        data = b"\x00\x01binary\r\n\xff"
        write_file("blob.bin", data)
        digest = compute_snapshot_digest(["blob.bin"], ctx.root)
        store.save(digest, ["blob.bin"])

        assert store.read(digest, "blob.bin") == data

    def test_read_unknown_digest(self, store):
        with pytest.raises(NotFoundError):
            store.read("0" * 64, "a.txt")

    def test_read_unknown_path(self, store, snapshot):
        digest, paths = snapshot
        store.save(digest, paths)

        with pytest.raises(NotFoundError, match="other.txt"):
            store.read(digest, "other.txt")

    def test_read_rejects_traversal(self, store, snapshot):
        digest, paths = snapshot
        store.save(digest, paths)

        with pytest.raises(ValidationError):
            store.read(digest, "../../log.txt")


class TestListing:
    """Test enumerating stored snapshots."""

    def test_digests(self, store, snapshot, ctx, write_file):
        digest, paths = snapshot
        write_file("b.txt", "other")
        other = compute_snapshot_digest(["b.txt"], ctx.root)

        store.save(digest, paths)
        store.save(other, ["b.txt"])

        assert store.digests() == sorted([digest, other])

    def test_digests_ignores_lock_and_manifest_files(self, store, snapshot):
        digest, paths = snapshot
        store.save(digest, paths)

        assert store.digests() == [digest]

    def test_files_without_manifest_falls_back_to_walk(self, ctx, store, snapshot):
        digest, paths = snapshot
        store.save(digest, paths)
        (ctx.commits_dir / f"{digest}.files").unlink()

        assert store.files(digest) == ["a.txt", "src/main.py"]

    def test_compute_stored_digest(self, store, snapshot):
        digest, paths = snapshot
        store.save(digest, paths)

        assert store.compute_stored_digest(digest) == digest

    def test_compute_stored_digest_detects_corruption(self, store, snapshot):
        digest, paths = snapshot
        container = store.save(digest, paths)
        target = container / "a.txt"
        os.chmod(target, 0o644)
        target.write_text("tampered")

        assert store.compute_stored_digest(digest) != digest

    @pytest.mark.parametrize("name", ["a\x0cb.txt", "a\x1eb.txt", "a b.txt", "a\rb.txt"])
    def test_manifest_splits_on_newline_only(self, ctx, store, write_file, name):
        write_file(name, "hello")
        digest = compute_snapshot_digest([name], ctx.root)

        store.save(digest, [name])

        assert store.files(digest) == [name]
        assert store.read(digest, name) == b"hello"
