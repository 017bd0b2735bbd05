"""
Command-line interface for linkcard.

Uses Typer to expose the scraping operations: preview metadata, article
extraction, link checks, platform classification and record-file sweeps.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from .config import AppConfig, load_config
from .core.platforms import classify_platform, should_extract_article
from .errors import LinkcardError
from .linkcheck import sweep_links
from .logging_utils import setup_logging
from .runner import JsonRecordStore, RecordStatus, scrape_records, sweep_records
from .scraper import extract_article, scrape_metadata

app = typer.Typer(add_completion=False)
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
LogFormatOption = typer.Option(None, "--log-format", help="Log file format: jsonl or plain.")
LogFileOption = typer.Option(None, "--log-file/--no-log-file", help="Enable or disable file logging.")


def _load(
    config: Path | None,
    log_level: str | None,
    log_format: str | None,
    log_file: bool | None,
    log_dir: Path | None = None,
) -> AppConfig:
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file
    setup_logging(cfg.logging, log_dir or Path.cwd())
    return cfg


def _fail(exc: LinkcardError) -> NoReturn:
    console.print(f"[bold red]Error[/bold red]: {exc}")
    raise typer.Exit(code=1)


@app.command()
def metadata(
    url: str = typer.Argument(..., help="URL to preview."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    log_format: str | None = LogFormatOption,
    log_file: bool | None = LogFileOption,
):
    """Scrape link preview metadata and print it as JSON."""
    cfg = _load(config, log_level, log_format, log_file)
    try:
        result = asyncio.run(scrape_metadata(url, cfg))
    except LinkcardError as exc:
        _fail(exc)
    console.print_json(data=result.to_dict())


@app.command()
def article(
    url: str = typer.Argument(..., help="Article URL."),
    text: bool = typer.Option(False, "--text", help="Print plain text instead of JSON."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    log_format: str | None = LogFormatOption,
    log_file: bool | None = LogFileOption,
):
    """Extract the readable article body."""
    cfg = _load(config, log_level, log_format, log_file)
    try:
        result = asyncio.run(extract_article(url, cfg))
    except LinkcardError as exc:
        _fail(exc)
    if text:
        console.print(result.text_content or "")
        return
    console.print_json(data=result.to_dict())


@app.command()
def check(
    urls: list[str] = typer.Argument(..., help="URLs to check."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    log_format: str | None = LogFormatOption,
    log_file: bool | None = LogFileOption,
):
    """Check link health, one URL at a time."""
    cfg = _load(config, log_level, log_format, log_file)
    summary = asyncio.run(sweep_links(urls, cfg))

    table = Table("URL", "Status", "Redirect")
    for url, result in summary.results:
        table.add_row(url, result.status.value, result.redirect_url or "")
    console.print(table)
    console.print(
        "[bold]Link summary[/bold]: "
        f"checked={summary.checked}, broken={summary.broken}, "
        f"redirected={summary.redirected}, errors={summary.errors}"
    )


@app.command()
def classify(url: str = typer.Argument(..., help="URL to classify.")):
    """Print the platform and whether article extraction applies."""
    console.print(f"platform={classify_platform(url).value} article={should_extract_article(url)}")


@app.command()
def sweep(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="JSON record file."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    log_format: str | None = LogFormatOption,
    log_file: bool | None = LogFileOption,
):
    """Re-check due links in a JSON record file and write the results back."""
    cfg = _load(config, log_level, log_format, log_file, log_dir=input.parent)
    store = JsonRecordStore(input)
    stats = asyncio.run(sweep_records(store, cfg))
    console.print(
        "[bold]Sweep summary[/bold]: "
        f"checked={stats.checked}, broken={stats.broken}, redirected={stats.redirected}"
    )


@app.command()
def scrape(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="JSON record file."),
    articles: bool = typer.Option(True, "--articles/--no-articles", help="Also extract article content."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    log_format: str | None = LogFormatOption,
    log_file: bool | None = LogFileOption,
):
    """Scrape metadata for every PENDING record in a JSON record file."""
    cfg = _load(config, log_level, log_format, log_file, log_dir=input.parent)
    store = JsonRecordStore(input)
    pending = [
        str(record["id"])
        for record in store.records()
        if record.get("status", RecordStatus.PENDING.value) == RecordStatus.PENDING.value and record.get("url")
    ]
    stats = asyncio.run(scrape_records(store, pending, cfg, with_articles=articles))
    console.print(
        "[bold]Scrape summary[/bold]: "
        f"total={stats.total}, ready={stats.ready}, errors={stats.errors}, articles={stats.articles}"
    )


if __name__ == "__main__":
    app()
