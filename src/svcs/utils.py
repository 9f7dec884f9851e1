"""Utility functions for svcs."""

import os
import stat
import tempfile
from pathlib import Path


def fsync_dir(path: Path) -> None:
    """Fsync a directory so a rename inside it is durable.

    Best-effort: Windows and some filesystems don't support directory fsync.
    """
    try:
        flags = os.O_RDONLY
        if hasattr(os, "O_DIRECTORY"):
            flags |= os.O_DIRECTORY

        dirfd = os.open(str(path), flags)
        try:
            os.fsync(dirfd)
        finally:
            os.close(dirfd)
    except OSError:
        pass


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomically write bytes to file with crash safety.

    1. Writes to a temp file in the same directory and fsyncs it
    2. Renames it over the target (appears all-at-once)
    3. Fsyncs the parent directory so the rename is durable

    Args:
        path: Target file path
        data: Content to write
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="wb",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.tmp-",
    ) as f:
        tmp = Path(f.name)

    try:
        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        # Keep the target's mode; mkstemp creates 0o600
        try:
            mode = stat.S_IMODE(path.stat().st_mode)
        except FileNotFoundError:
            mode = 0o644
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    fsync_dir(path.parent)


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write UTF-8 text to file."""
    atomic_write_bytes(path, text.encode("utf-8"))


def humanize_size(size: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def short_hash(digest: str) -> str:
    """Abbreviated digest for display."""
    return digest[:12]
