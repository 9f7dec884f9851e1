"""Staging index: the ordered list of files marked for the next commit."""

import logging
from pathlib import Path
from typing import List, Union

from .context import RepoContext
from .core import StagedFiles
from .errors import StorageFailure, ValidationError
from .utils import atomic_write_text

logger = logging.getLogger(__name__)


class StagingIndex:
    """Persists staged paths in .svcs/index.txt, one per line."""

    def __init__(self, ctx: RepoContext):
        self.ctx = ctx

    @property
    def path(self) -> Path:
        return self.ctx.index_path

    def load(self) -> StagedFiles:
        """Load staged files (empty if the index file doesn't exist)."""
        if not self.path.exists():
            return StagedFiles()

        text = self.path.read_bytes().decode("utf-8")
        return StagedFiles(files=[line for line in text.split("\n") if line.strip()])

    def save(self, staged: StagedFiles) -> None:
        """Save staged files atomically."""
        text = "".join(f"{p}\n" for p in staged.files)
        try:
            atomic_write_text(self.path, text)
        except OSError as e:
            raise StorageFailure(f"Cannot write staging index: {e}") from e

    def add(self, path: Union[str, Path]) -> bool:
        """Stage a file.

        Args:
            path: File path, absolute or relative to the working directory

        Returns:
            True if newly staged, False if it was already staged

        Raises:
            ValidationError: If the file doesn't exist, isn't a regular
                file, or lies outside the repository
        """
        rel_path = self.ctx.to_repo_relative(path)
        abs_path = self.ctx.absolute(rel_path)

        if not abs_path.exists():
            raise ValidationError(f"File not found: {path}")
        if not abs_path.is_file():
            raise ValidationError(f"'{path}' is not a file.")
        try:
            with abs_path.open("rb"):
                pass
        except OSError:
            raise ValidationError(f"Can't read '{path}'.")

        staged = self.load()
        if not staged.add(rel_path):
            return False
        self.save(staged)
        logger.debug("Staged %s", rel_path)
        return True

    def list(self) -> List[str]:
        """Current staged paths in staging order."""
        return list(self.load().files)

    def clear(self) -> None:
        """Empty the staging index. Safe to call when it doesn't exist."""
        if not self.path.exists():
            return
        try:
            self.path.write_text("")
        except OSError as e:
            raise StorageFailure(f"Cannot clear staging index: {e}") from e
