"""Command-line interface for inkwell.

Commands:
- check: Validate every content file and report failures
- list: List documents, newest first
- show: Show one document's metadata (and optionally its body)
- tags: Show the tag or category index
- index: Write a JSON listing index for the site generator
- info: Show the effective configuration
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inkwell.config.loader import get_default_config_path, load_config
from inkwell.config.schema import AppConfig
from inkwell.core.errors import ContentError, NotFound
from inkwell.core.registry import DocumentFilter
from inkwell.entities import Document
from inkwell.observability.logging import configure_from_config, get_logger
from inkwell.pipelines.ingestion import IngestionPipeline, IngestionReport

app = typer.Typer(
    name="inkwell",
    help="Front-matter ingestion and content index for Markdown sites",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

PathArgument = typer.Argument(None, help="Content directory (defaults to config content_dir)")
ConfigOption = typer.Option(None, "--config", "-c", help="Config file path")
ProfileOption = typer.Option(
    None, "--profile", "-P", envvar="INKWELL_PROFILE", help="Config profile to apply, e.g. preview or ci"
)
FailFastOption = typer.Option(False, "--fail-fast", help="Stop at the first file that fails to parse")


def document_summary(document: Document, words_per_minute: int = 200) -> dict[str, Any]:
    """JSON-ready view of a document's metadata, without the body."""
    metadata = document.metadata
    return {
        "source_identifier": document.source_identifier,
        "slug": document.slug,
        "title": metadata.title,
        "date": metadata.date.isoformat(),
        "lastmod": metadata.lastmod.isoformat() if metadata.lastmod else None,
        "draft": metadata.draft,
        "tags": list(metadata.tags),
        "categories": list(metadata.categories),
        "author": metadata.author,
        "description": metadata.description,
        "showToc": metadata.show_toc,
        "TocOpen": metadata.toc_open,
        "cover": metadata.cover.model_dump(exclude_none=True) if metadata.cover else None,
        "word_count": document.word_count,
        "reading_time": document.reading_time(words_per_minute),
        "extra": dict(metadata.extra),
    }


async def _ingest(path: Optional[Path], config: AppConfig, fail_fast: bool) -> IngestionReport:
    """Run an ingestion pass, exiting with status 1 on a fail-fast error."""
    root = path or config.content_dir
    pipeline = IngestionPipeline(config)
    try:
        return await pipeline.ingest(root, fail_fast=True if fail_fast else None)
    except ContentError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _warn_failures(report: IngestionReport) -> None:
    if report.failures:
        console.print(
            f"[yellow]Skipped {len(report.failures)} file(s) that failed to parse; "
            f"run 'inkwell check' for details[/yellow]"
        )


@app.command()
def check(
    path: Optional[Path] = PathArgument,
    config_file: Optional[Path] = ConfigOption,
    profile: Optional[str] = ProfileOption,
    fail_fast: bool = FailFastOption,
):
    """Parse every content file and report failures."""
    asyncio.run(_check_async(path, config_file, profile, fail_fast))


async def _check_async(
    path: Optional[Path],
    config_file: Optional[Path],
    profile: Optional[str],
    fail_fast: bool,
):
    """Async implementation of check command."""
    config = _load_config(config_file, profile)
    report = await _ingest(path, config, fail_fast)

    drafts = sum(1 for document in report.registry if document.draft)
    console.print(
        f"[cyan]Parsed {report.document_count} of {report.total_files} file(s) "
        f"({drafts} draft(s))[/cyan]"
    )

    if report.ok:
        console.print("[green]✓ All content files are valid[/green]")
        return

    table = Table(title="Failed Files")
    table.add_column("File", style="cyan")
    table.add_column("Error", style="red")
    table.add_column("Message")
    for failure in report.failures:
        table.add_row(escape(failure.source_identifier), failure.error, escape(failure.message))
    console.print(table)
    raise typer.Exit(1)


@app.command("list")
def list_documents(
    path: Optional[Path] = PathArgument,
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only documents with this tag"),
    category: Optional[str] = typer.Option(None, "--category", help="Only documents in this category"),
    author: Optional[str] = typer.Option(None, "--author", help="Only documents by this author"),
    drafts: bool = typer.Option(False, "--drafts", help="Include drafts"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum number of documents"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
    config_file: Optional[Path] = ConfigOption,
    profile: Optional[str] = ProfileOption,
    fail_fast: bool = FailFastOption,
):
    """List documents, newest first."""
    asyncio.run(
        _list_async(
            path, tag, category, author, drafts, limit, json_output, config_file, profile, fail_fast
        )
    )


async def _list_async(
    path: Optional[Path],
    tag: Optional[str],
    category: Optional[str],
    author: Optional[str],
    drafts: bool,
    limit: Optional[int],
    json_output: bool,
    config_file: Optional[Path],
    profile: Optional[str],
    fail_fast: bool,
):
    """Async implementation of list command."""
    config = _load_config(config_file, profile)
    report = await _ingest(path, config, fail_fast)

    document_filter = DocumentFilter(
        include_drafts=drafts or config.listing.include_drafts,
        tag=tag,
        category=category,
        author=author,
    )
    documents = list(report.registry.list(document_filter))
    if limit is not None:
        documents = documents[:limit]

    if json_output:
        wpm = config.listing.words_per_minute
        typer.echo(json.dumps([document_summary(doc, wpm) for doc in documents], indent=2, ensure_ascii=False))
        return

    _warn_failures(report)
    if not documents:
        console.print("[yellow]No documents found[/yellow]")
        return

    table = Table(title=f"Documents ({len(documents)})")
    table.add_column("Date", style="green", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Tags", style="magenta")
    table.add_column("File", style="cyan")
    for document in documents:
        title = escape(document.title)
        if document.draft:
            title += " [dim](draft)[/dim]"
        table.add_row(
            document.date.isoformat(),
            title,
            escape(", ".join(document.tags)),
            escape(document.source_identifier),
        )
    console.print(table)


@app.command()
def show(
    identifier: str = typer.Argument(..., help="Source identifier, e.g. posts/docker-tips.md"),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Content directory"),
    body: bool = typer.Option(False, "--body", help="Also print the Markdown body"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
    config_file: Optional[Path] = ConfigOption,
    profile: Optional[str] = ProfileOption,
):
    """Show a single document."""
    asyncio.run(_show_async(identifier, path, body, json_output, config_file, profile))


async def _show_async(
    identifier: str,
    path: Optional[Path],
    body: bool,
    json_output: bool,
    config_file: Optional[Path],
    profile: Optional[str],
):
    """Async implementation of show command."""
    config = _load_config(config_file, profile)
    report = await _ingest(path, config, fail_fast=False)

    try:
        document = report.registry.get(identifier)
    except NotFound:
        failed = next((f for f in report.failures if f.source_identifier == identifier), None)
        if failed:
            console.print(f"[red]{escape(identifier)} failed to parse: {failed.error}: {escape(failed.message)}[/red]")
        else:
            console.print(f"[red]Document not found: {escape(identifier)}[/red]")
        raise typer.Exit(1)

    summary = document_summary(document, config.listing.words_per_minute)
    if json_output:
        if body:
            summary["body"] = document.body
        typer.echo(json.dumps(summary, indent=2, ensure_ascii=False))
        return

    table = Table(title=escape(document.title), show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in summary.items():
        if value in (None, [], {}):
            continue
        if isinstance(value, (list, dict)):
            value = json.dumps(value, ensure_ascii=False)
        table.add_row(key, escape(str(value)))
    console.print(table)

    if body:
        console.print()
        console.print(document.body, markup=False, highlight=False)


@app.command()
def tags(
    path: Optional[Path] = PathArgument,
    categories: bool = typer.Option(False, "--categories", help="Show categories instead of tags"),
    drafts: bool = typer.Option(False, "--drafts", help="Count drafts too"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
    config_file: Optional[Path] = ConfigOption,
    profile: Optional[str] = ProfileOption,
):
    """Show the tag (or category) index with document counts."""
    asyncio.run(_tags_async(path, categories, drafts, json_output, config_file, profile))


async def _tags_async(
    path: Optional[Path],
    categories: bool,
    drafts: bool,
    json_output: bool,
    config_file: Optional[Path],
    profile: Optional[str],
):
    """Async implementation of tags command."""
    config = _load_config(config_file, profile)
    report = await _ingest(path, config, fail_fast=False)

    name = "categories" if categories else "tags"
    index = report.registry.taxonomy(name, include_drafts=drafts or config.listing.include_drafts)

    if json_output:
        typer.echo(json.dumps({term: len(docs) for term, docs in index.items()}, indent=2, ensure_ascii=False))
        return

    _warn_failures(report)
    if not index:
        console.print(f"[yellow]No {name} found[/yellow]")
        return

    table = Table(title=name.capitalize())
    table.add_column("Term", style="magenta")
    table.add_column("Documents", justify="right", style="green")
    for term, docs in index.items():
        table.add_row(escape(term), str(len(docs)))
    console.print(table)


@app.command()
def index(
    path: Optional[Path] = PathArgument,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the index to this file"),
    config_file: Optional[Path] = ConfigOption,
    profile: Optional[str] = ProfileOption,
    fail_fast: bool = FailFastOption,
):
    """Write a JSON index of published documents and their taxonomies."""
    asyncio.run(_index_async(path, output, config_file, profile, fail_fast))


async def _index_async(
    path: Optional[Path],
    output: Optional[Path],
    config_file: Optional[Path],
    profile: Optional[str],
    fail_fast: bool,
):
    """Async implementation of index command."""
    config = _load_config(config_file, profile)
    report = await _ingest(path, config, fail_fast)
    registry = report.registry
    include_drafts = config.listing.include_drafts
    wpm = config.listing.words_per_minute

    payload = {
        "documents": [
            document_summary(doc, wpm)
            for doc in registry.list(DocumentFilter(include_drafts=include_drafts))
        ],
        "tags": {
            term: [doc.source_identifier for doc in docs]
            for term, docs in registry.taxonomy("tags", include_drafts).items()
        },
        "categories": {
            term: [doc.source_identifier for doc in docs]
            for term, docs in registry.taxonomy("categories", include_drafts).items()
        },
        "failures": [
            {"source_identifier": f.source_identifier, "error": f.error, "message": f.message}
            for f in report.failures
        ],
    }
    text = json.dumps(payload, indent=2, ensure_ascii=False)

    if output is None:
        typer.echo(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    logger.info("index_written", path=str(output), document_count=len(payload["documents"]))
    console.print(f"[green]✓ Wrote {len(payload['documents'])} document(s) to {output}[/green]")
    _warn_failures(report)


@app.command()
def info(
    config_file: Optional[Path] = ConfigOption,
    profile: Optional[str] = ProfileOption,
):
    """Show the effective configuration."""
    config = _load_config(config_file, profile)

    table = Table(title="Inkwell Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Profile", profile or "(none)")
    table.add_row("Content Directory", str(config.content_dir))
    table.add_row("Extensions", ", ".join(config.ingestion.extensions))
    table.add_row("Recursive", str(config.ingestion.recursive))
    table.add_row("Fail Fast", str(config.ingestion.fail_fast))
    table.add_row("Max Workers", str(config.ingestion.max_workers))
    table.add_row("Encoding", config.ingestion.encoding)
    table.add_row("Include Drafts", str(config.listing.include_drafts))
    table.add_row("Words Per Minute", str(config.listing.words_per_minute))
    table.add_row("Log Level", config.logging.level.value)

    console.print(table)


def _load_config(config_file: Optional[Path], profile: Optional[str] = None) -> AppConfig:
    """Load configuration and setup logging."""
    if config_file is None:
        config_file = get_default_config_path()

    config = load_config(config_file, profile=profile)
    configure_from_config(config.logging)

    return config


if __name__ == "__main__":
    app()
