"""Hashing utilities for deterministic snapshot digests.

A snapshot digest is one SHA-256 accumulator fed with every staged file's
bytes, in staging order. There are no separators between files and paths
are not hashed, so a single staged file hashes exactly like
``sha256(content)``.
"""

import hashlib
import re
from pathlib import Path
from typing import Iterable

from .errors import StorageFailure, ValidationError

CHUNK_SIZE = 8192

_HEX64 = re.compile(r"^[0-9a-f]{64}$")


def compute_snapshot_digest(paths: Iterable[str], root: Path) -> str:
    """Compute the digest of a staged file set.

    Order-sensitive: the same files staged in a different order give a
    different digest.

    Args:
        paths: Repo-relative paths, in staging order
        root: Repository root the paths are relative to

    Returns:
        64-character lowercase hex SHA-256 digest

    Raises:
        StorageFailure: If any file cannot be read (no partial digest)
    """
    sha256 = hashlib.sha256()
    for rel_path in paths:
        try:
            with (root / rel_path).open("rb") as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    sha256.update(chunk)
        except OSError as e:
            raise StorageFailure(f"Cannot read {rel_path}: {e}") from e
    return sha256.hexdigest()


def validate_digest(digest: str) -> str:
    """Validate a snapshot digest before it is used as a path component.

    Raises:
        ValidationError: If digest is not 64 lowercase hex chars
    """
    if not _HEX64.fullmatch(digest or ""):
        raise ValidationError(f"Invalid snapshot digest (must be 64 hex chars): {digest!r}")
    return digest


def is_valid_digest(digest: str) -> bool:
    """Check digest format without raising."""
    return bool(_HEX64.fullmatch(digest or ""))


__all__ = [
    "compute_snapshot_digest",
    "validate_digest",
    "is_valid_digest",
]
