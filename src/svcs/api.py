"""Stable command API for svcs.

Each command returns a CommandReport instead of raising, so callers (the CLI,
scripts, tests) get a status string and a success flag for every outcome.
Only svcs errors are turned into reports; anything else propagates.
"""

from pathlib import Path
from typing import List, Optional, Union

from .context import RepoContext
from .core import Commit
from .engine import SnapshotEngine
from .errors import SvcsError
from .identity import read_author, set_author
from .service_types import AddResult, CommandReport

PathLike = Union[str, Path]


def _engine(path: Optional[PathLike]) -> SnapshotEngine:
    return SnapshotEngine(RepoContext(Path(path) if path else None))


def format_commit(commit: Commit) -> List[str]:
    """Log entry lines for one commit."""
    return [
        f"commit {commit.hash}",
        f"Author: {commit.author}",
        commit.message,
    ]


def init(path: Optional[PathLike] = None) -> CommandReport:
    """Create an empty repository at ``path`` (default: current directory)."""
    target = Path(path) if path else Path.cwd()
    if RepoContext.is_initialized(target):
        return CommandReport(ok=False, message=f"Repository already initialized in {target}")
    ctx = RepoContext.init(target)
    return CommandReport(ok=True, message=f"Initialized empty svcs repository in {ctx.storage_dir}")


def config(name: Optional[str] = None, path: Optional[PathLike] = None) -> CommandReport:
    """Set (when ``name`` is given) and show the author name."""
    try:
        ctx = RepoContext(Path(path) if path else None)
        if name is not None:
            set_author(ctx, name)
        author = read_author(ctx)
    except SvcsError as e:
        return CommandReport(ok=False, message=str(e))

    if not author:
        return CommandReport(ok=False, message="Please, tell me who you are.")
    return CommandReport(ok=True, message=f"The username is {author}.")


def add_files(paths: List[PathLike], path: Optional[PathLike] = None) -> AddResult:
    """Stage several files, collecting per-file outcomes.

    Relative file paths are taken from ``path`` when it is given, otherwise
    from the current working directory.
    """
    engine = _engine(path)
    base = Path(path).resolve() if path else None
    result = AddResult()
    for p in paths:
        if base is not None and not Path(p).is_absolute():
            p = base / p
        try:
            rel_path = engine.ctx.to_repo_relative(p)
            if engine.staging.add(p):
                result.added.append(rel_path)
            else:
                result.already_staged.append(rel_path)
        except SvcsError as e:
            result.failed.append(str(e))
    return result


def add(file: PathLike, path: Optional[PathLike] = None) -> CommandReport:
    """Stage one file."""
    try:
        result = add_files([file], path)
    except SvcsError as e:
        return CommandReport(ok=False, message=str(e))

    if result.failed:
        return CommandReport(ok=False, message=result.failed[0])
    if result.already_staged:
        return CommandReport(ok=True, message=f"The file '{result.already_staged[0]}' is already tracked.")
    return CommandReport(ok=True, message=f"The file '{result.added[0]}' is tracked.")


def staged(path: Optional[PathLike] = None) -> CommandReport:
    """List staged files."""
    try:
        files = _engine(path).staging.list()
    except SvcsError as e:
        return CommandReport(ok=False, message=str(e))

    if not files:
        return CommandReport(ok=True, message="Add a file to the index.")
    return CommandReport(ok=True, message="Tracked files:", lines=files)


def commit(message: Optional[str], path: Optional[PathLike] = None) -> CommandReport:
    """Commit the staged files with the configured author."""
    try:
        result = _engine(path).commit(message)
    except SvcsError as e:
        return CommandReport(ok=False, message=str(e))

    return CommandReport(ok=True, message=result.summary())


def log(path: Optional[PathLike] = None) -> CommandReport:
    """Show commit history, most recent first."""
    try:
        commits = _engine(path).history()
    except SvcsError as e:
        return CommandReport(ok=False, message=str(e))

    if not commits:
        return CommandReport(ok=True, message="No commits yet.")

    lines = []
    for i, c in enumerate(commits):
        if i:
            lines.append("")
        lines.extend(format_commit(c))
    return CommandReport(ok=True, message=f"{len(commits)} commits", lines=lines)


def checkout(ref: Optional[str], path: Optional[PathLike] = None) -> CommandReport:
    """Restore the working-tree files of a commit."""
    if not ref:
        return CommandReport(ok=False, message="Commit id was not passed.")
    try:
        result = _engine(path).restore(ref)
    except SvcsError as e:
        return CommandReport(ok=False, message=str(e))
    return CommandReport(ok=True, message=result.summary(), lines=result.restored)


def verify(path: Optional[PathLike] = None) -> CommandReport:
    """Re-hash stored snapshots and report corruption or unlogged snapshots."""
    try:
        result = _engine(path).verify()
    except SvcsError as e:
        return CommandReport(ok=False, message=str(e))

    lines = [f"corrupted: {expected}" for expected in result.mismatched]
    lines += [f"missing: {digest}" for digest in result.missing]
    lines += [f"unlogged: {digest}" for digest in result.orphaned]
    return CommandReport(ok=result.ok, message=result.summary(), lines=lines)
