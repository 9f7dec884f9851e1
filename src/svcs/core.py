"""Core data models for svcs."""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .errors import StorageFailure


# ============= Staging =============

class StagedFiles(BaseModel):
    """Staged file list (stored in .svcs/index.txt).

    An order-preserving set: ``files`` keeps insertion order, which is the
    hash input order, and a membership index keeps entries unique. All paths
    are POSIX strings.
    """

    files: List[str] = Field(default_factory=list)
    _index: set = PrivateAttr(default_factory=set)

    def model_post_init(self, __context) -> None:
        unique: List[str] = []
        seen = set()
        for p in self.files:
            if p not in seen:
                seen.add(p)
                unique.append(p)
        self.files = unique
        self._index = seen

    def add(self, path) -> bool:
        """Append a path if not already staged. Returns True if added."""
        if isinstance(path, Path):
            path = path.as_posix()
        if path in self._index:
            return False
        self._index.add(path)
        self.files.append(path)
        return True

    def __contains__(self, path) -> bool:
        if isinstance(path, Path):
            path = path.as_posix()
        return path in self._index

    def __len__(self) -> int:
        return len(self.files)

    def __bool__(self) -> bool:
        return bool(self.files)


# ============= History =============

class Commit(BaseModel):
    """One committed snapshot. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    hash: str
    author: str
    message: str
    files: Tuple[str, ...] = ()

    def to_log_line(self) -> str:
        """Serialize as ``<hash> <author> <message>``."""
        return f"{self.hash} {self.author} {self.message}"

    @classmethod
    def from_log_line(cls, line: str) -> "Commit":
        """Parse one log line. The message is the remainder of the line."""
        parts = line.rstrip("\n").split(" ", 2)
        if len(parts) < 2:
            raise StorageFailure(f"Malformed log line: {line!r}")
        message = parts[2] if len(parts) == 3 else ""
        return cls(hash=parts[0], author=parts[1], message=message)


# ============= Results =============

class CommitStatus(str, Enum):
    """Outcome of a commit attempt."""

    COMMITTED = "committed"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    RECOVERED = "recovered"  # orphaned snapshot adopted into the log


class CommitResult(BaseModel):
    """Result of a commit operation."""

    status: CommitStatus
    commit: Optional[Commit] = None

    def summary(self) -> str:
        """Get human-readable summary."""
        if self.status == CommitStatus.NOTHING_TO_COMMIT:
            return "Nothing to commit."
        if self.status == CommitStatus.RECOVERED:
            return f"Changes are committed (recovered snapshot {self.commit.hash})."
        return f"Changes are committed: {self.commit.hash}"


class RestoreResult(BaseModel):
    """Result of a restore operation."""

    commit: Commit
    restored: List[str] = Field(default_factory=list)

    def summary(self) -> str:
        """Get human-readable summary."""
        return f"Switched to commit {self.commit.hash}. Restored {len(self.restored)} files."


class VerifyResult(BaseModel):
    """Result of verifying the store against the log."""

    checked: int = 0
    mismatched: Dict[str, str] = Field(default_factory=dict)  # expected -> actual
    missing: List[str] = Field(default_factory=list)
    orphaned: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.mismatched or self.missing)

    def summary(self) -> str:
        """Get human-readable summary."""
        parts = [f"Checked {self.checked} commits"]
        if self.mismatched:
            parts.append(f"{len(self.mismatched)} corrupted")
        if self.missing:
            parts.append(f"{len(self.missing)} missing from store")
        if self.orphaned:
            parts.append(f"{len(self.orphaned)} unlogged snapshots")
        return ", ".join(parts)
