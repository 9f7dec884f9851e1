"""Author identity for commits.

A single-line file (.svcs/config.txt), similar to .python-version.
SVCS_AUTHOR overrides it when set.
"""
import os
from typing import Optional

from .constants import AUTHOR_ENV_VAR
from .context import RepoContext
from .errors import IdentityMissingError, ValidationError
from .utils import atomic_write_text


def validate_author(name: str) -> str:
    """Check an author name can be stored in a log line.

    The log is space-separated, so names may not contain whitespace.

    Raises:
        ValidationError: If the name is empty or contains whitespace
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Author name must not be empty")
    if any(ch.isspace() for ch in name):
        raise ValidationError(f"Author name must not contain whitespace: {name!r}")
    return name


def set_author(ctx: RepoContext, name: str) -> str:
    """Store the author name for this repository."""
    name = validate_author(name)
    atomic_write_text(ctx.config_path, name + "\n")
    return name


def read_author(ctx: RepoContext) -> Optional[str]:
    """Read the configured author, or None if unset.

    Resolution order: SVCS_AUTHOR > .svcs/config.txt.
    """
    env_author = os.environ.get(AUTHOR_ENV_VAR, "").strip()
    if env_author:
        return validate_author(env_author)

    if not ctx.config_path.exists():
        return None
    first_line = ctx.config_path.read_text().split("\n", 1)[0].strip()
    if not first_line:
        return None
    return validate_author(first_line)


def require_author(ctx: RepoContext) -> str:
    """Read the configured author.

    Raises:
        IdentityMissingError: If no author is configured
    """
    name = read_author(ctx)
    if not name:
        raise IdentityMissingError()
    return name
