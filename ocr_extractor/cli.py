"""
CLI Interface
=============
Command-line interface for the OCR extractor.

Usage:
    python -m ocr_extractor extract <path> [options]
    python -m ocr_extractor batch <directory> [options]
    python -m ocr_extractor info <path>
    python -m ocr_extractor languages
"""

from __future__ import annotations

import json
import os
import sys
import threading
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from . import __version__
from .config import ExtractionOptions, WhitespacePolicy, configure_logging
from .coordinator import CancelToken, ExtractionCoordinator
from .document import open_document
from .engines.factory import EngineName
from .errors import DocumentError, PageExtractionError
from .languages import SUPPORTED_LANGUAGES
from .models import ExtractionReport, ProgressEvent
from .native_text import extract_native
from .summary import summarize

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="ocr-extractor")
def cli():
    """OCR Extractor — page text from native and scanned documents."""
    pass


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--language", "-l",
    default=None,
    help="Recognition language code, e.g. eng, vie, eng+fra (default: eng)",
)
@click.option(
    "--scale",
    default=None,
    type=float,
    help="Render scale for OCR, 0.5-4.0 (default: 2.0)",
)
@click.option(
    "--force-ocr",
    is_flag=True,
    default=False,
    help="Recognize every page even if it has embedded text",
)
@click.option(
    "--concurrency", "-j",
    default=None,
    type=int,
    help="Number of parallel page workers (default: CPU count)",
)
@click.option(
    "--engine",
    default=None,
    type=click.Choice([e.value for e in EngineName]),
    help="Recognition backend",
)
@click.option(
    "--whitespace",
    default=WhitespacePolicy.RECOGNIZE.value,
    type=click.Choice([p.value for p in WhitespacePolicy]),
    help="Treatment of whitespace-only native text",
)
@click.option(
    "--output", "-o",
    default=None,
    help="Write the JSON report to this file",
)
@click.option(
    "--text-output",
    default=None,
    help="Write the combined plain text to this file",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only the JSON report to stdout (for programmatic use)",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
def extract(
    path: str,
    language: Optional[str],
    scale: Optional[float],
    force_ocr: bool,
    concurrency: Optional[int],
    engine: Optional[str],
    whitespace: str,
    output: Optional[str],
    text_output: Optional[str],
    json_output: bool,
    log_level: str,
    log_file: Optional[str],
):
    """Extract text from every page of a PDF or image file."""

    if json_output:
        # Keep stdout clean for JSON mode
        log_level = "ERROR"
    configure_logging(log_level, log_file)

    try:
        options = ExtractionOptions.from_env(
            language=language,
            scale=scale,
            force_ocr=force_ocr or None,
            concurrency=concurrency,
            engine=engine,
            whitespace_policy=whitespace,
        )
    except ValueError as e:
        console.print(f"[red]Invalid options:[/] {e}")
        sys.exit(1)

    try:
        if json_output:
            report = _run_extraction(path, options)
        else:
            console.print()
            console.print(
                Panel.fit(
                    f"[bold cyan]OCR Extractor v{__version__}[/]\n"
                    f"[dim]Extracting: {os.path.basename(path)} "
                    f"({options.language}, {options.engine.value})[/]",
                    border_style="cyan",
                )
            )
            console.print()

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=console,
            ) as progress:
                task = progress.add_task("Opening document...", total=None)

                def on_progress(event: ProgressEvent):
                    progress.update(
                        task,
                        total=event.total,
                        completed=event.completed,
                        description=f"Finished page {event.page_index}",
                    )

                report = _run_extraction(path, options, on_progress)

    except DocumentError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/] {e}")
        if log_level == "DEBUG":
            console.print_exception()
        sys.exit(1)

    data = _report_payload(report)
    if output:
        _save_json(data, Path(output))
    if text_output:
        Path(text_output).parent.mkdir(parents=True, exist_ok=True)
        Path(text_output).write_text(report.full_text, encoding="utf-8")

    if json_output:
        print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
    else:
        _display_report(report)
        if output:
            console.print(f"[dim]Report saved to: {output}[/]")
        if text_output:
            console.print(f"[dim]Text saved to: {text_output}[/]")


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--output", "-o", default="output", help="Output directory")
@click.option("--language", "-l", default=None, help="Recognition language code")
@click.option("--force-ocr", is_flag=True, default=False, help="Recognize every page")
@click.option("--concurrency", "-j", default=None, type=int, help="Page workers per document")
@click.option("--log-level", default="WARNING", help="Logging level")
def batch(
    directory: str,
    output: str,
    language: Optional[str],
    force_ocr: bool,
    concurrency: Optional[int],
    log_level: str,
):
    """Extract every PDF in a directory into JSON reports."""

    configure_logging(log_level)
    pdf_files = sorted(Path(directory).glob("*.pdf"))

    if not pdf_files:
        console.print(f"[yellow]No PDF files found in: {directory}[/]")
        return

    try:
        options = ExtractionOptions.from_env(
            language=language,
            force_ocr=force_ocr or None,
            concurrency=concurrency,
        )
    except ValueError as e:
        console.print(f"[red]Invalid options:[/] {e}")
        sys.exit(1)

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Batch OCR Extractor[/]\n"
            f"[dim]Found {len(pdf_files)} PDFs in: {directory}[/]",
            border_style="cyan",
        )
    )
    console.print()

    output_dir = Path(output)
    coordinator = ExtractionCoordinator()
    results = []
    errors = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Processing PDFs...", total=len(pdf_files))

        for pdf_file in pdf_files:
            progress.update(task, description=f"Extracting: {pdf_file.name}")
            try:
                report = coordinator.extract(pdf_file, options)
                _save_json(_report_payload(report), output_dir / f"{pdf_file.stem}_ocr.json")
                results.append((pdf_file.name, report))
            except DocumentError as e:
                errors.append((pdf_file.name, str(e)))
            progress.advance(task)

    _display_batch_summary(results, errors)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def info(path: str):
    """Display document information and which pages carry embedded text."""

    try:
        doc = open_document(path)
    except DocumentError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    with doc:
        native_pages = 0
        unreadable_pages = 0
        for page_index in range(1, doc.page_count + 1):
            try:
                if extract_native(doc, page_index).strip():
                    native_pages += 1
            except PageExtractionError:
                unreadable_pages += 1
        metadata = doc.metadata

    console.print()
    table = Table(title="Document Information", border_style="cyan")
    table.add_column("Property", style="bold")
    table.add_column("Value")

    table.add_row("File", os.path.basename(path))
    table.add_row("Pages", str(doc.page_count))
    table.add_row(
        "File Size",
        f"{os.path.getsize(path) / 1024 / 1024:.2f} MB",
    )

    for key in ["title", "author", "subject", "creator", "producer"]:
        val = metadata.get(key, "")
        if val:
            table.add_row(key.title(), val)

    table.add_row("Pages With Embedded Text", str(native_pages))
    table.add_row(
        "Pages Needing OCR",
        str(doc.page_count - native_pages - unreadable_pages),
    )
    if unreadable_pages:
        table.add_row("Unreadable Pages", f"[red]{unreadable_pages}[/]")

    console.print(table)
    console.print()


@cli.command()
def languages():
    """List supported recognition languages."""

    table = Table(title="Supported Languages", border_style="cyan")
    table.add_column("Code", style="bold")
    table.add_column("Language")
    for code, name in SUPPORTED_LANGUAGES.items():
        table.add_row(code, name)
    console.print(table)


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _run_extraction(path: str, options: ExtractionOptions, on_progress=None) -> ExtractionReport:
    """
    Run the coordinator on a background thread so Ctrl-C can request a
    cooperative cancel instead of killing pages mid-recognition.
    """
    cancel = CancelToken()
    outcome: dict = {}

    def target():
        try:
            outcome["report"] = ExtractionCoordinator().extract(
                path, options, on_progress=on_progress, cancel=cancel
            )
        except Exception as e:
            outcome["error"] = e

    thread = threading.Thread(target=target, daemon=True, name="ocr-extract")
    thread.start()
    try:
        while thread.is_alive():
            thread.join(0.2)
    except KeyboardInterrupt:
        console.print("[yellow]Cancelling, waiting for pages in flight...[/]")
        cancel.cancel()
        thread.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["report"]


def _report_payload(report: ExtractionReport) -> dict:
    data = report.model_dump(mode="json")
    data["summary"] = summarize(report).model_dump(mode="json")
    return data


def _save_json(data: dict, filepath: Path):
    """Save a dict to JSON file."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)


def _format_confidence(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.1%}"


def _display_report(report: ExtractionReport):
    """Display per-page results and the summary as rich tables."""
    console.print()

    table = Table(title="Pages", border_style="cyan")
    table.add_column("Page", justify="right", style="bold")
    table.add_column("Source")
    table.add_column("Chars", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Status", justify="center")

    for result in report.results:
        if result.error is not None:
            status = f"[red]✗ {result.error.kind.value}[/]"
            source = f"[dim]{result.error.stage.value}[/]"
        else:
            status = "[green]✓[/]"
            source = result.source.value
        table.add_row(
            str(result.page_index),
            source,
            str(len(result.text)),
            _format_confidence(result.confidence),
            status,
        )
    console.print(table)
    console.print()

    summary = summarize(report)
    stats = Table(title="Summary", border_style="green")
    stats.add_column("Metric", style="bold")
    stats.add_column("Value", justify="right")
    stats.add_row(
        "Pages Extracted",
        f"{summary.total_pages - summary.failed_pages} of {summary.total_pages} "
        f"({summary.success_rate}%)",
    )
    stats.add_row("Native Pages", str(summary.native_pages))
    stats.add_row("Recognized Pages", str(summary.recognized_pages))
    stats.add_row("Failed Pages", str(summary.failed_pages))
    if summary.cancelled_pages:
        stats.add_row("Cancelled Pages", f"[yellow]{summary.cancelled_pages}[/]")
    stats.add_row("Average Confidence", _format_confidence(summary.average_confidence))
    stats.add_row("Low Confidence Pages", str(len(summary.low_confidence_pages)))
    console.print(stats)
    console.print()


def _display_batch_summary(results, errors):
    """Display batch processing summary."""
    console.print()

    table = Table(title="Batch Processing Summary", border_style="cyan")
    table.add_column("PDF", style="bold")
    table.add_column("Pages", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Avg Confidence", justify="right")
    table.add_column("Status", justify="center")

    total_pages = 0
    total_failed = 0

    for name, report in results:
        total_pages += report.total_pages
        total_failed += report.failed_pages
        status = "[green]✓[/]" if report.failed_pages == 0 else "[yellow]⚠[/]"
        table.add_row(
            name,
            str(report.total_pages),
            str(report.failed_pages),
            _format_confidence(report.average_confidence),
            status,
        )

    for name, error in errors:
        table.add_row(name, "-", "-", "-", "[red]✗ FAILED[/]")

    console.print(table)
    console.print()
    console.print(
        f"[bold]Total:[/] {total_pages} pages from {len(results)} documents, "
        f"{total_failed} failed pages, {len(errors)} unreadable documents"
    )
    console.print()


if __name__ == "__main__":
    cli()
