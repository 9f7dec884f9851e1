"""CLI for svcs."""

import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from .constants import DEBUG_ENV_VAR, SVCS_DIR
from .context import RepoContext
from .core import CommitStatus
from .engine import SnapshotEngine
from .errors import StateError, StorageFailure, SvcsError, ValidationError
from .identity import read_author, set_author
from .utils import humanize_size, short_hash


app = typer.Typer(help="""\
Simple version control: stage files, commit snapshots of them,
show history and check out an earlier snapshot.""")

console = Console()


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for every command."""
    level = logging.DEBUG if verbose or os.environ.get(DEBUG_ENV_VAR) else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def require_repo_context() -> RepoContext:
    """Ensure repository is initialized and return context.

    Raises:
        typer.Exit: If not in a repository
    """
    try:
        return RepoContext()
    except StateError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        console.print()
        console.print("To initialize a new repository, run:")
        console.print("  [cyan]svcs init[/cyan]")
        raise typer.Exit(1)


def fail(e: SvcsError) -> None:
    """Print an error and exit non-zero."""
    if isinstance(e, StorageFailure):
        console.print(f"[red]error:[/red] {escape(str(e))}")
    elif isinstance(e, ValidationError):
        console.print(f"[red]✗[/red] {escape(str(e))}")
    else:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
    raise typer.Exit(1)


@app.command()
def init(
    path: Optional[str] = typer.Argument(None, help="Directory to initialize (default: current directory)"),
):
    """Initialize a repository."""
    target = Path(path).resolve() if path else Path.cwd()
    if RepoContext.is_initialized(target):
        console.print(f"[red]error:[/red] Repository already initialized in `{escape(str(target))}` ({SVCS_DIR} exists)")
        raise typer.Exit(1)

    target.mkdir(parents=True, exist_ok=True)
    ctx = RepoContext.init(target)
    console.print(f"[green]✓[/green] Initialized empty repository in {escape(str(ctx.storage_dir))}")


@app.command()
def config(
    name: Optional[str] = typer.Argument(None, help="Author name to set"),
):
    """Get and set a username."""
    ctx = require_repo_context()
    try:
        if name is not None:
            set_author(ctx, name)
        author = read_author(ctx)
    except SvcsError as e:
        fail(e)

    if not author:
        console.print("Please, tell me who you are.")
        raise typer.Exit(1)
    console.print(f"The username is {escape(author)}.")


@app.command()
def add(
    files: Optional[List[Path]] = typer.Argument(None, help="Files to stage"),
):
    """Add a file to the index.

    Without arguments, lists the staged files.

    Examples:
        svcs add notes.txt
        svcs add src/main.py README.md
        svcs add
    """
    ctx = require_repo_context()
    engine = SnapshotEngine(ctx)

    if not files:
        staged = engine.staging.list()
        if not staged:
            console.print("Add a file to the index.")
            return
        console.print("Tracked files:")
        for rel_path in staged:
            abs_path = ctx.absolute(rel_path)
            size = abs_path.stat().st_size if abs_path.exists() else 0
            console.print(f"  {escape(rel_path)} [dim]({humanize_size(size)})[/dim]")
        return

    failed = False
    for file in files:
        try:
            rel_path = ctx.to_repo_relative(file)
            if engine.staging.add(file):
                console.print(f"[green]+[/green] The file '{escape(rel_path)}' is tracked.")
            else:
                console.print(f"[dim]The file '{escape(rel_path)}' is already tracked.[/dim]")
        except SvcsError as e:
            console.print(f"[red]✗[/red] {escape(str(e))}")
            failed = True

    if failed:
        raise typer.Exit(1)


@app.command()
def commit(
    message: Optional[str] = typer.Argument(None, help="Commit message"),
):
    """Save changes."""
    ctx = require_repo_context()
    if not message:
        console.print("Message was not passed.")
        raise typer.Exit(1)

    try:
        result = SnapshotEngine(ctx).commit(message)
    except SvcsError as e:
        fail(e)

    if result.status == CommitStatus.NOTHING_TO_COMMIT:
        console.print("Nothing to commit.")
        return
    console.print(f"[green]✓[/green] {result.summary()}")


@app.command()
def log():
    """Show commit logs."""
    ctx = require_repo_context()
    try:
        commits = SnapshotEngine(ctx).history()
    except SvcsError as e:
        fail(e)

    if not commits:
        console.print("No commits yet.")
        return

    for i, c in enumerate(commits):
        if i:
            console.print()
        console.print(f"[yellow]commit {c.hash}[/yellow]", highlight=False)
        console.print(f"Author: {c.author}", highlight=False, markup=False)
        console.print(c.message, highlight=False, markup=False)


@app.command()
def checkout(
    commit_id: Optional[str] = typer.Argument(None, help="Commit hash or unique prefix"),
):
    """Restore files from a commit."""
    ctx = require_repo_context()
    if not commit_id:
        console.print("Commit id was not passed.")
        raise typer.Exit(1)

    try:
        result = SnapshotEngine(ctx).restore(commit_id)
    except SvcsError as e:
        fail(e)

    console.print(f"[green]✓[/green] Switched to commit {result.commit.hash}.", highlight=False)
    for rel_path in result.restored:
        console.print(f"  [green]↺[/green] {escape(rel_path)}")


@app.command()
def verify():
    """Check stored snapshots against their hashes."""
    ctx = require_repo_context()
    try:
        result = SnapshotEngine(ctx).verify()
    except SvcsError as e:
        fail(e)

    for expected, actual in result.mismatched.items():
        console.print(f"[red]✗[/red] {short_hash(expected)} corrupted (now hashes to {short_hash(actual)})")
    for digest in result.missing:
        console.print(f"[red]✗[/red] {short_hash(digest)} missing from store")
    for digest in result.orphaned:
        console.print(f"[yellow]⚠[/yellow] {short_hash(digest)} stored but never logged")

    if not result.ok:
        console.print(f"[red]{result.summary()}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {result.summary()}")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
