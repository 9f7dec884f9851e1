"""Append-only commit history (stored in .svcs/log.txt).

One line per commit, oldest first:

    <hash> <author> <message>

The message is the remainder of the line. Lines are never rewritten.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from .constants import MIN_HASH_PREFIX
from .context import RepoContext
from .core import Commit
from .errors import NotFoundError, StorageFailure, ValidationError
from .store import CommitStore

logger = logging.getLogger(__name__)


class CommitLog:
    """Chronological record of committed snapshots.

    When a store is given, commits read back from the log carry the file
    list recorded for their snapshot.
    """

    def __init__(self, ctx: RepoContext, store: Optional[CommitStore] = None):
        self.ctx = ctx
        self.store = store

    @property
    def path(self) -> Path:
        return self.ctx.log_path

    def append(self, commit: Commit) -> None:
        """Durably add ``commit`` after the last entry."""
        if "\n" in commit.message or "\r" in commit.message:
            raise ValidationError("Commit message must be a single line")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a") as f:
                f.write(commit.to_log_line() + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StorageFailure(f"Cannot append to commit log: {e}") from e
        logger.debug("Logged commit %s", commit.hash[:12])

    def _read(self) -> List[Commit]:
        """All commits in storage (chronological) order."""
        if not self.path.exists():
            return []

        commits = []
        with self.path.open() as f:
            for line in f:
                if line.strip():
                    commits.append(self._hydrate(Commit.from_log_line(line)))
        return commits

    def _hydrate(self, commit: Commit) -> Commit:
        if self.store is None:
            return commit
        try:
            files = self.store.files(commit.hash)
        except (NotFoundError, ValidationError):
            return commit
        return commit.model_copy(update={"files": tuple(files)})

    def all(self) -> List[Commit]:
        """Commits for display, most recent first."""
        commits = self._read()
        commits.reverse()
        return commits

    def find(self, hash: str) -> Optional[Commit]:
        """First commit (chronologically) whose hash equals ``hash``, else None."""
        for commit in self._read():
            if commit.hash == hash:
                return commit
        return None

    def resolve(self, ref: str) -> Optional[Commit]:
        """Find a commit by full hash or unique prefix.

        Raises:
            ValidationError: If ``ref`` is too short or matches several commits
        """
        ref = (ref or "").strip().lower()
        if not ref:
            raise ValidationError("Commit id was not passed.")

        exact = self.find(ref)
        if exact is not None:
            return exact

        if len(ref) < MIN_HASH_PREFIX:
            raise ValidationError(f"Commit id must be at least {MIN_HASH_PREFIX} characters: {ref}")

        matches = {}
        for commit in self._read():
            if commit.hash.startswith(ref):
                matches.setdefault(commit.hash, commit)
        if len(matches) > 1:
            raise ValidationError(f"Commit id {ref} is ambiguous ({len(matches)} matches)")
        return next(iter(matches.values()), None)

    def __len__(self) -> int:
        return len(self._read())
