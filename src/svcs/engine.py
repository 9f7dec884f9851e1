"""Snapshot engine: commit, restore, history and verification.

Commit order is stage -> hash -> store -> log -> clear stage. The log entry
is written only after the snapshot is fully stored, so an interrupted commit
can leave an unlogged snapshot in the store but never a log entry without
its snapshot. The next commit of the same content adopts such an orphan.
"""

import logging
from typing import List, Optional

from .commit_log import CommitLog
from .context import RepoContext
from .core import Commit, CommitResult, CommitStatus, RestoreResult, VerifyResult
from .errors import (
    CommitNotFoundError,
    DigestMismatchError,
    NotFoundError,
    StorageFailure,
    ValidationError,
)
from .hashing import compute_snapshot_digest
from .identity import require_author
from .staging import StagingIndex
from .store import CommitStore
from .utils import atomic_write_bytes, short_hash

logger = logging.getLogger(__name__)


def validate_message(message: Optional[str]) -> str:
    """Check a commit message fits on one log line.

    Raises:
        ValidationError: If the message is missing or spans several lines
    """
    if message is None or not message.strip():
        raise ValidationError("Message was not passed.")
    if "\n" in message or "\r" in message:
        raise ValidationError("Commit message must be a single line")
    return message


class SnapshotEngine:
    """Owns the staging index, commit store and commit log of one repository."""

    def __init__(self, ctx: RepoContext):
        self.ctx = ctx
        self.staging = StagingIndex(ctx)
        self.store = CommitStore(ctx)
        self.log = CommitLog(ctx, self.store)

    def commit(self, message: str, author: Optional[str] = None) -> CommitResult:
        """Snapshot the staged files.

        Args:
            message: Single-line commit message
            author: Author name; read from the identity store when omitted

        Returns:
            CommitResult; NOTHING_TO_COMMIT when staging is empty or the same
            content is already committed

        Raises:
            ValidationError: If the message is missing or malformed
            IdentityMissingError: If no author is configured
            StorageFailure: If a staged file can't be read or stored
        """
        message = validate_message(message)

        files = self.staging.list()
        if not files:
            return CommitResult(status=CommitStatus.NOTHING_TO_COMMIT)

        if author is None:
            author = require_author(self.ctx)

        digest = compute_snapshot_digest(files, self.ctx.root)
        commit = Commit(hash=digest, author=author, message=message, files=tuple(files))

        if self.store.exists(digest):
            if self.log.find(digest) is not None:
                logger.debug("Snapshot %s already committed", short_hash(digest))
                return CommitResult(status=CommitStatus.NOTHING_TO_COMMIT)

            logger.warning("Adopting unlogged snapshot %s", short_hash(digest))
            self.log.append(commit)
            self.staging.clear()
            return CommitResult(status=CommitStatus.RECOVERED, commit=commit)

        self.store.save(digest, files)
        self.log.append(commit)
        self.staging.clear()
        logger.info("Committed %s (%d files)", short_hash(digest), len(files))
        return CommitResult(status=CommitStatus.COMMITTED, commit=commit)

    def restore(self, ref: str) -> RestoreResult:
        """Overwrite working-tree files with a commit's stored content.

        Files not part of the commit are left alone.

        Args:
            ref: Full commit hash or unique prefix

        Raises:
            ValidationError: If ``ref`` is missing, too short or ambiguous
            CommitNotFoundError: If no logged commit matches
            DigestMismatchError: If the stored copy no longer matches its hash
            StorageFailure: If stored content can't be read or written back
        """
        commit = self.log.resolve(ref)
        if commit is None:
            raise CommitNotFoundError(ref)
        if not self.store.exists(commit.hash):
            raise NotFoundError(commit.hash)

        # Check the whole snapshot before touching the working tree
        actual = self.store.compute_stored_digest(commit.hash)
        if actual != commit.hash:
            raise DigestMismatchError(commit.hash, actual)

        restored = []
        for rel_path in commit.files:
            data = self.store.read(commit.hash, rel_path)
            target = self.ctx.absolute(rel_path)
            try:
                atomic_write_bytes(target, data)
            except OSError as e:
                raise StorageFailure(f"Cannot restore {rel_path}: {e}") from e
            restored.append(rel_path)
            logger.debug("Restored %s from %s", rel_path, short_hash(commit.hash))

        return RestoreResult(commit=commit, restored=restored)

    def history(self) -> List[Commit]:
        """Logged commits, most recent first."""
        return self.log.all()

    def verify(self) -> VerifyResult:
        """Re-hash every logged snapshot and look for unlogged ones."""
        result = VerifyResult()
        logged = set()

        for commit in self.log.all():
            if commit.hash in logged:
                continue
            logged.add(commit.hash)
            result.checked += 1

            if not self.store.exists(commit.hash):
                result.missing.append(commit.hash)
                continue
            try:
                actual = self.store.compute_stored_digest(commit.hash)
            except StorageFailure as e:
                logger.warning("Cannot re-hash %s: %s", short_hash(commit.hash), e)
                result.missing.append(commit.hash)
                continue
            if actual != commit.hash:
                result.mismatched[commit.hash] = actual

        result.orphaned = [d for d in self.store.digests() if d not in logged]
        return result
