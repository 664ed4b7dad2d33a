"""CLI interface for sitecontent."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from sitecontent.config import SiteContentConfig, load_config, merge_cli_overrides
from sitecontent.errors import ContentFormatError
from sitecontent.models import SaveEvent, SiteContent
from sitecontent.store import ContentPersistence

app = typer.Typer(
    name="sitecontent",
    help="Load, save and sync the site content document.",
)

console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from sitecontent import __version__

        console.print(f"sitecontent {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .sitecontent.toml file."),
    ] = None,
    cache_dir: Annotated[
        Optional[Path],
        typer.Option("--cache-dir", help="Directory for the local cache."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Site content persistence - database with a local cache fallback."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(
        config, cache_dir=str(cache_dir) if cache_dir is not None else None
    )


def _store(ctx: typer.Context) -> ContentPersistence:
    config: SiteContentConfig = ctx.obj
    return ContentPersistence.from_config(config)


def _report(event: SaveEvent) -> None:
    if event.success:
        console.print("[green]Saved to database and local cache.[/green]")
    elif event.saved_to_local:
        console.print("[yellow]Database unavailable - saved to local cache only.[/yellow]")
    else:
        console.print(f"[red]Save failed:[/red] {event.error or 'database unavailable'}")


def _save_and_report(store: ContentPersistence, content: SiteContent) -> None:
    """Save immediately, print the outcome, exit 1 unless the database took it."""
    events: list[SaveEvent] = []
    store.notifier.subscribe(events.append)
    with store:
        store.save(content, immediate=True)

    for event in events:
        _report(event)
    if not events or not events[-1].success:
        raise typer.Exit(1)


@app.command("load")
def load_cmd(ctx: typer.Context) -> None:
    """Load content (database, then local cache, then default) and print it."""
    with _store(ctx) as store:
        content = store.load()
    typer.echo(content.to_json(indent=2))


@app.command("load-local")
def load_local_cmd(ctx: typer.Context) -> None:
    """Print content from the local cache only."""
    with _store(ctx) as store:
        typer.echo(store.load_sync().to_json(indent=2))


@app.command("save")
def save_cmd(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="JSON file with the content document.")],
) -> None:
    """Save a content document to the database and local cache."""
    store = _store(ctx)
    try:
        content = store.import_content(file.read_text(encoding="utf-8"))
    except (OSError, ContentFormatError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    _save_and_report(store, content)


@app.command("reset")
def reset_cmd(ctx: typer.Context) -> None:
    """Clear the local cache. The database is not touched."""
    with _store(ctx) as store:
        store.reset()
    console.print("Local cache cleared.")


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to this file instead of stdout."),
    ] = None,
) -> None:
    """Export the locally cached content as JSON."""
    with _store(ctx) as store:
        text = store.export_content()
    if output is None:
        typer.echo(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    console.print(f"Exported to {output}")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Previously exported JSON file.")],
    save: Annotated[
        bool,
        typer.Option("--save", help="Save the imported content right away."),
    ] = False,
) -> None:
    """Validate an exported JSON file, optionally saving it."""
    store = _store(ctx)
    try:
        content = store.import_content(file.read_text(encoding="utf-8"))
    except (OSError, ContentFormatError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    console.print(f"Imported {len(content.blocks)} block(s) from {file}")
    if not save:
        return

    _save_and_report(store, content)


@app.command("sync")
def sync_cmd(ctx: typer.Context) -> None:
    """Push the local cache to the database."""
    with _store(ctx) as store:
        ok = store.force_sync_with_database()
    if not ok:
        console.print("[red]Sync with database failed.[/red]")
        raise typer.Exit(1)
    console.print("[green]Database synced from local cache.[/green]")


@app.command("pull")
def pull_cmd(ctx: typer.Context) -> None:
    """Overwrite the local cache with the database copy and print it."""
    with _store(ctx) as store:
        content = store.load_from_database_and_overwrite()
    typer.echo(content.to_json(indent=2))


@app.command("check")
def check_cmd(ctx: typer.Context) -> None:
    """Check whether the database is reachable."""
    with _store(ctx) as store:
        ok = store.check_database_connection()
    if not ok:
        console.print("[red]Database unavailable.[/red]")
        raise typer.Exit(1)
    console.print("[green]Database reachable.[/green]")


@app.command("status")
def status_cmd(ctx: typer.Context) -> None:
    """Show the state of both data sources."""
    with _store(ctx) as store:
        status = store.get_data_sources_status()

    def _mark(flag: bool) -> str:
        return "[green]yes[/green]" if flag else "[red]no[/red]"

    console.print(f"Database reachable:  {_mark(status.database)}")
    console.print(f"Database has data:   {_mark(status.has_database_data)}")
    console.print(f"Local cache usable:  {_mark(status.local_storage)}")
    console.print(f"Local cache has data: {_mark(status.has_local_data)}")


if __name__ == "__main__":
    app()
