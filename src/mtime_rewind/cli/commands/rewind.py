"""Command module for rewinding modification times."""

import posixpath
from pathlib import Path
from typing import Dict, Iterable, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

from mtime_rewind.cli.app import app, version_callback
from mtime_rewind.config import config
from mtime_rewind.service import RewindService, RunReport
from mtime_rewind.utils import setup_logging
from mtime_rewind.utils.file_utils import FileError

console = Console()


def add_files_to_tree(
    tree: Tree, paths: Iterable[str], style: str, notes: Optional[Dict[str, str]] = None
):
    """Add files to tree, one branch per parent directory."""
    by_dir: Dict[str, list] = {}
    for path in sorted(paths):
        dir_name, file_name = posixpath.split(path)
        by_dir.setdefault(dir_name, []).append((file_name, path))

    # files directly under the root come first, without a branch
    for dir_name, files in sorted(by_dir.items()):
        branch = tree.add(f"[bold]{escape(dir_name)}/[/bold]") if dir_name else tree
        for file_name, full_path in files:
            label = f"[{style}]{escape(file_name)}[/{style}]"
            if notes and full_path in notes:
                label += f" ({escape(notes[full_path])})"
            branch.add(label)


def display_summary(report: RunReport):
    """Display a one-line summary of the run."""
    result = report.reconcile
    rewound = len(report.apply.rewound)
    verb = "Would rewind" if report.dry_run else "Rewound"

    parts = [f"[cyan]{verb} {rewound}[/cyan]"]
    if result.adopted_new:
        parts.append(f"[green]{len(result.adopted_new)} new[/green]")
    if result.adopted_changed:
        parts.append(f"[yellow]{len(result.adopted_changed)} modified[/yellow]")
    parts.append(f"{len(result.unchanged)} unchanged")
    if report.failed_count:
        parts.append(f"[red]{report.failed_count} failed[/red]")

    console.print(", ".join(parts))
    if not report.dry_run:
        console.print(f"State saved to {report.state_path}")


def display_detailed_results(report: RunReport):
    """Display per-file results as a tree."""
    result = report.reconcile
    title = "Dry run" if report.dry_run else "Rewind results"
    tree = Tree(f"[bold]{title}[/bold]: {report.root}")

    if result.rewinds:
        branch = tree.add("[cyan]Rewound[/cyan]")
        add_files_to_tree(branch, [a.path for a in result.rewinds], "cyan")
    if result.adopted_new:
        branch = tree.add("[green]New[/green]")
        notes = {a.path: a.fingerprint.short for a in result.adopted_new}
        add_files_to_tree(branch, notes, "green", notes)
    if result.adopted_changed:
        branch = tree.add("[yellow]Modified[/yellow]")
        notes = {a.path: a.fingerprint.short for a in result.adopted_changed}
        add_files_to_tree(branch, notes, "yellow", notes)
    if result.removed:
        branch = tree.add("[dim]Removed[/dim]")
        add_files_to_tree(branch, result.removed, "dim")

    failures = {**report.read_errors, **report.apply.failed}
    if failures:
        branch = tree.add("[red]Failed[/red]")
        add_files_to_tree(branch, failures, "red", failures)

    console.print(Panel(tree, expand=False))


@app.command()
def rewind(
    root: Path = typer.Argument(..., help="Directory whose files are tracked."),
    dry: bool = typer.Option(
        False,
        "--dry",
        help="Do not edit any mtime, only list the changes that would be made.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed per-file results and debug logging.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Rewind the mtime of files whose contents did not change since the last run."""
    setup_logging(level="DEBUG" if verbose else config.log_level, log_file=config.log_file)

    try:
        report = RewindService(config).run(root, dry_run=dry)
    except FileError as e:
        logger.error(str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if verbose:
        display_detailed_results(report)
    display_summary(report)
    logger.info("Done")
