import typer


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import mtime_rewind

        typer.echo(f"mtime-rewind version: {mtime_rewind.__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="mtime-rewind",
    help="Rewind the mtime of files whose content did not change since the last run.",
    add_completion=False,
)
