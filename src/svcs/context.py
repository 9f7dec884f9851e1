"""Repository context for managing paths and repository discovery."""

import os
from pathlib import Path
from typing import Optional, Union

from .constants import COMMITS_DIR, CONFIG_FILE, INDEX_FILE, LOG_FILE, SVCS_DIR
from .errors import NotInRepositoryError, ValidationError


class RepoContext:
    """Manages repository root discovery and path resolution.

    Every component takes a context instead of reading module-level paths,
    so tests can point a repository at any temporary directory.
    """

    def __init__(self, start_path: Optional[Path] = None):
        """Initialize context by finding the repository root.

        Args:
            start_path: Path to start searching for the repository root
        """
        start = Path(start_path) if start_path else Path.cwd()
        root = self._find_root(start)
        if not root:
            raise NotInRepositoryError(str(start))
        self.root = root

    @classmethod
    def is_initialized(cls, path: Optional[Path] = None) -> bool:
        """Check if a specific directory is initialized (without traversing up)."""
        target = path or Path.cwd()
        return (target / SVCS_DIR).is_dir()

    @classmethod
    def init(cls, path: Optional[Path] = None) -> "RepoContext":
        """Initialize a new repository at the given path."""
        target = Path(path) if path else Path.cwd()
        (target / SVCS_DIR / COMMITS_DIR).mkdir(parents=True, exist_ok=True)
        return cls(target)

    def _find_root(self, start: Path) -> Optional[Path]:
        """Walk up directory tree to find repository root."""
        current = start.resolve()

        while current != current.parent:
            if (current / SVCS_DIR).is_dir():
                return current
            current = current.parent

        if (current / SVCS_DIR).is_dir():
            return current
        return None

    def to_repo_relative(self, path: Union[str, Path]) -> str:
        """Convert a user-supplied path to a repo-relative POSIX string.

        Relative paths are taken from the current working directory. A
        symlink is recorded under its own name, not its target's.

        Raises:
            ValidationError: If the path (or what it links to) is outside the
                repository or inside the storage directory
        """
        p = Path(path)
        lexical = Path(os.path.abspath(p if p.is_absolute() else Path.cwd() / p))
        # Resolve directories only; the last component keeps the caller's name
        recorded = lexical.parent.resolve() / lexical.name
        rel = self._inside_repo(recorded, path)

        if not rel.parts:
            raise ValidationError(f"Path {path} is the repository root")
        self._inside_repo(recorded.resolve(), path)
        return rel.as_posix()

    def _inside_repo(self, absolute: Path, path: Union[str, Path]) -> Path:
        try:
            rel = absolute.relative_to(self.root)
        except ValueError:
            raise ValidationError(f"Path {path} is outside repository")
        if rel.parts and rel.parts[0] == SVCS_DIR:
            raise ValidationError(f"Path {path} is inside {SVCS_DIR}")
        return rel

    def absolute(self, repo_path: Union[str, Path]) -> Path:
        """Get absolute path from a repo-relative path.

        Raises:
            ValidationError: If the path is absolute or escapes the root
        """
        rel = str(repo_path)
        if not rel.strip():
            raise ValidationError("Unsafe path: empty path")
        if rel.startswith(("/", "\\")) or ".." in rel.replace("\\", "/").split("/"):
            raise ValidationError(f"Unsafe path: {rel}")

        target = (self.root / rel).resolve()
        try:
            target.relative_to(self.root)
        except ValueError:
            raise ValidationError(f"Path escapes repository root: {rel}")
        return self.root / rel

    @property
    def storage_dir(self) -> Path:
        """Get the repository storage directory."""
        return self.root / SVCS_DIR

    @property
    def config_path(self) -> Path:
        """Get path to the identity file."""
        return self.storage_dir / CONFIG_FILE

    @property
    def index_path(self) -> Path:
        """Get path to the staging file."""
        return self.storage_dir / INDEX_FILE

    @property
    def log_path(self) -> Path:
        """Get path to the commit log."""
        return self.storage_dir / LOG_FILE

    @property
    def commits_dir(self) -> Path:
        """Get the content store directory."""
        return self.storage_dir / COMMITS_DIR
