"""Command-line interface for VocaSync using Typer.

Features:
- `sync` synthesizes and aligns changed documents of the content collection.
- `check` validates the API key and configuration.
- `status` shows the normalized status of one remote job.
- `annotate` wraps spoken words of rendered HTML in timing spans.
"""

from __future__ import annotations

import asyncio
import pathlib
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from vocasync import __version__
from vocasync.alignment.cache import AlignmentCache
from vocasync.alignment.html import annotate_html
from vocasync.api.client import VocaSyncClient, create_client
from vocasync.config import load_config
from vocasync.errors import VocaSyncError
from vocasync.jobs.poller import JobStatusPoller
from vocasync.sync.audio_map import get_entry, load_audio_map
from vocasync.sync.orchestrator import SyncSummary, check_config, sync_collection
from vocasync.utils.constant import CLASS_PREFIX
from vocasync.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)
console = Console()

_LEVEL_STYLES = {
    "info": "cyan",
    "success": "green",
    "warn": "yellow",
    "error": "red",
}


def version_callback(value: bool) -> None:
    """Show the application's version and exit.

    Args:
        value: When True, print the version and exit.

    Raises:
        typer.Exit: Always raised after printing when value is True.

    """
    if value:
        print(f"vocasync version: {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="vocasync",
    help="Synthesize narrated audio for your content and highlight spoken words.",
    add_completion=False,
)

ConfigOption = Annotated[
    pathlib.Path | None,
    typer.Option("--config", "-c", help="Path to vocasync.toml.", dir_okay=False),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]
QuietOption = Annotated[bool, typer.Option("--quiet", "-q", help="Only log errors.")]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show the application's version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Print help when invoked without a subcommand.

    Args:
        ctx: Typer context.
        version: Whether to print version and exit.

    Raises:
        typer.Exit: Raised to terminate after displaying help or version.

    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _print(message: str, level: str = "info") -> None:
    console.print(message, style=_LEVEL_STYLES.get(level, "cyan"), markup=False)


def _fail(exc: Exception) -> typer.Exit:
    _print(str(exc), "error")
    return typer.Exit(code=1)


def _display_summary(summary: SyncSummary) -> None:  # pragma: no cover - formatting helper
    table = Table(title="Sync Results", show_header=True, header_style="bold magenta")
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Status", style="green")
    table.add_column("Details", style="yellow")
    for result in summary.results:
        details = result.error or result.project_uuid or ""
        style = "red" if result.status == "error" else None
        table.add_row(result.slug, result.status, details, style=style)
    console.print(table)


@app.command()
def sync(
    only: Annotated[
        str | None, typer.Option("--only", help="Only process the document with this slug.")
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", help="Reprocess documents even if unchanged.")
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Preview changes without API calls.")
    ] = False,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Synthesize and align content whose text changed since the last run."""
    configure_logging(verbose=verbose, quiet=quiet)
    try:
        config = load_config(config_path)
        client = create_client()
    except VocaSyncError as exc:
        raise _fail(exc) from exc

    async def _run() -> SyncSummary:
        async with client:
            return await sync_collection(
                config,
                client,
                only=only,
                force=force,
                dry_run=dry_run,
                on_progress=_print,
            )

    _print("Starting sync...")
    try:
        summary = asyncio.run(_run())
    except VocaSyncError as exc:
        raise _fail(exc) from exc

    if summary.results:
        _display_summary(summary)
    _print(
        f"Sync complete: {summary.synced} synced, {summary.unchanged} unchanged, "
        f"{summary.errors} errors",
        "warn" if summary.errors else "success",
    )
    if summary.errors:
        raise typer.Exit(code=1)


@app.command()
def check(
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Validate configuration, API key and content collection."""
    configure_logging(verbose=verbose)
    try:
        config = load_config(config_path)
        client = create_client()
    except VocaSyncError as exc:
        raise _fail(exc) from exc

    async def _run():
        async with client:
            return await check_config(config, client)

    _print("Checking configuration...")
    result = asyncio.run(_run())
    _print(result.message, "success" if result.valid else "error")
    if not result.valid:
        raise typer.Exit(code=1)


@app.command()
def status(
    job_id: Annotated[str, typer.Argument(help="Remote project UUID.")],
    verbose: VerboseOption = False,
) -> None:
    """Show the synthesis and alignment status of a remote job."""
    configure_logging(verbose=verbose)
    try:
        client = create_client()
    except VocaSyncError as exc:
        raise _fail(exc) from exc

    async def _run():
        async with client:
            return await JobStatusPoller(client).poll(job_id)

    _print(f"Checking status for {job_id}...")
    try:
        view = asyncio.run(_run())
    except VocaSyncError as exc:
        raise _fail(exc) from exc

    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Project", view.job_id)
    table.add_row("Name", view.name)
    table.add_row("Synthesis", view.primary_status.value)
    table.add_row("Alignment", view.alignment_status.value if view.alignment_status else "N/A")
    if view.primary_error:
        table.add_row("Synthesis error", view.primary_error)
    if view.alignment_error:
        table.add_row("Alignment error", view.alignment_error)
    if view.audio_ref:
        table.add_row("Audio", view.audio_ref)
    if view.alignment_ref:
        table.add_row("Alignment URL", view.alignment_ref)
    console.print(table)


async def _annotate_files(
    client: VocaSyncClient,
    audio_map_path: pathlib.Path,
    html_files: list[pathlib.Path],
    slug: str | None,
    output_dir: pathlib.Path,
    class_prefix: str,
) -> list[pathlib.Path]:
    audio_map = load_audio_map(audio_map_path)
    cache = AlignmentCache(client.fetch_alignment_for)
    written: list[pathlib.Path] = []
    output_dir.mkdir(parents=True, exist_ok=True)

    for html_file in html_files:
        doc_slug = slug or html_file.stem
        html = html_file.read_text(encoding="utf-8")
        entry = get_entry(audio_map, doc_slug)
        words = await cache.get_track(entry.project_uuid) if entry else None
        if words:
            html = annotate_html(html, words, class_prefix=class_prefix)
        else:
            _print(f"{doc_slug} - no alignment available, leaving text unannotated", "warn")
        target = output_dir / html_file.name
        target.write_text(html, encoding="utf-8")
        written.append(target)

    logger.debug(f"Fetched {cache.fetch_count} alignment tracks for {len(html_files)} files")
    return written


@app.command()
def annotate(
    html_files: Annotated[
        list[pathlib.Path],
        typer.Argument(help="Rendered HTML file(s); the file stem is the slug.", exists=True),
    ],
    slug: Annotated[
        str | None, typer.Option("--slug", help="Slug to use instead of the file stem.")
    ] = None,
    output_dir: Annotated[
        pathlib.Path,
        typer.Option("--output-dir", "-o", help="Directory for annotated files.", file_okay=False),
    ] = pathlib.Path("./annotated"),
    class_prefix: Annotated[
        str, typer.Option("--class-prefix", help="CSS class prefix for word spans.")
    ] = CLASS_PREFIX,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Wrap narrated words of rendered HTML in timing-tagged spans."""
    configure_logging(verbose=verbose)
    try:
        config = load_config(config_path)
        client = create_client()
    except VocaSyncError as exc:
        raise _fail(exc) from exc

    async def _run() -> list[pathlib.Path]:
        async with client:
            return await _annotate_files(
                client,
                config.output.audio_map_path,
                html_files,
                slug,
                output_dir,
                class_prefix,
            )

    for path in asyncio.run(_run()):
        _print(f"Wrote {path}", "success")


if __name__ == "__main__":  # pragma: no cover
    app()
