"""Content-addressed commit store.

Each snapshot lives in one container keyed by its digest:

    .svcs/commits/<digest>/<relative path>    byte-exact file copies
    .svcs/commits/<digest>.files              staged paths, in order

Technical Considerations:
- A container is assembled in a temp directory next to its final location
  and promoted with a single rename, so it is either complete or absent
- Stored files are made read-only (0o444) once copied
- Promotion takes a per-digest portalocker lock; lock files persist
- Digests are validated before being used as path components
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, List

import portalocker

from .constants import MANIFEST_SUFFIX
from .context import RepoContext
from .errors import NotFoundError, StorageFailure, ValidationError
from .hashing import compute_snapshot_digest, is_valid_digest, validate_digest
from .utils import atomic_write_text, fsync_dir

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 300


class CommitStore:
    """Maps a snapshot digest to a full copy of the staged file tree."""

    def __init__(self, ctx: RepoContext):
        self.ctx = ctx
        self.root = ctx.commits_dir

    def container_for(self, digest: str) -> Path:
        """Directory holding the snapshot for ``digest``."""
        return self.root / validate_digest(digest)

    def manifest_for(self, digest: str) -> Path:
        """Ordered path list stored next to the container."""
        return self.root / f"{validate_digest(digest)}{MANIFEST_SUFFIX}"

    def exists(self, digest: str) -> bool:
        """Check whether a snapshot for ``digest`` has been stored."""
        if not is_valid_digest(digest):
            return False
        return (self.root / digest).is_dir()

    def save(self, digest: str, paths: Iterable[str]) -> Path:
        """Copy the current content of ``paths`` into the container for ``digest``.

        Callers only save digests that don't exist yet. If another process
        promoted the same digest first, its container is kept.

        Args:
            digest: Snapshot digest computed over ``paths``
            paths: Repo-relative paths, in staging order

        Returns:
            Path to the container

        Raises:
            StorageFailure: If a source can't be read or a copy can't be written
        """
        paths = list(paths)
        container = self.container_for(digest)

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            lock_path = self.root / f".{digest}.lock"
            with portalocker.Lock(str(lock_path), "w", timeout=LOCK_TIMEOUT):
                if container.is_dir():
                    return container

                staging_dir = Path(tempfile.mkdtemp(prefix=".cas-", dir=str(self.root)))
                try:
                    for rel_path in paths:
                        src = self.ctx.absolute(rel_path)
                        dst = staging_dir / rel_path
                        dst.parent.mkdir(parents=True, exist_ok=True)
                        shutil.copyfile(src, dst)
                        os.chmod(dst, 0o444)

                    atomic_write_text(
                        self.manifest_for(digest),
                        "".join(f"{p}\n" for p in paths),
                    )
                    os.replace(str(staging_dir), str(container))
                    fsync_dir(self.root)
                except BaseException:
                    shutil.rmtree(staging_dir, ignore_errors=True)
                    raise
        except (OSError, portalocker.LockException) as e:
            raise StorageFailure(f"Cannot store snapshot {digest[:12]}: {e}") from e

        logger.debug("Stored snapshot %s (%d files)", digest[:12], len(paths))
        return container

    def read(self, digest: str, path: str) -> bytes:
        """Return the exact bytes stored for ``path`` under ``digest``.

        Raises:
            NotFoundError: If no such entry exists
            StorageFailure: If the stored copy can't be read
        """
        if not self.exists(digest):
            raise NotFoundError(digest)
        if not path or path.startswith("/") or ".." in path.split("/"):
            raise ValidationError(f"Unsafe path: {path!r}")

        stored = self.container_for(digest) / path
        if not stored.is_file():
            raise NotFoundError(digest, path)
        try:
            return stored.read_bytes()
        except OSError as e:
            raise StorageFailure(f"Cannot read stored {path}: {e}") from e

    def files(self, digest: str) -> List[str]:
        """Stored paths for ``digest`` in their recorded order.

        Falls back to a sorted walk of the container if the manifest is gone.
        """
        if not self.exists(digest):
            raise NotFoundError(digest)

        manifest = self.manifest_for(digest)
        if manifest.exists():
            # Only "\n" separates entries; other line breaks are legal in names
            text = manifest.read_bytes().decode("utf-8")
            return [line for line in text.split("\n") if line]

        container = self.container_for(digest)
        logger.warning("Manifest missing for %s, listing container", digest[:12])
        return sorted(
            p.relative_to(container).as_posix()
            for p in container.rglob("*")
            if p.is_file()
        )

    def digests(self) -> List[str]:
        """Every digest with a stored container."""
        if not self.root.exists():
            return []
        return sorted(
            entry.name for entry in self.root.iterdir()
            if entry.is_dir() and is_valid_digest(entry.name)
        )

    def compute_stored_digest(self, digest: str) -> str:
        """Recompute the digest of a stored snapshot from its copies."""
        return compute_snapshot_digest(self.files(digest), self.container_for(digest))

