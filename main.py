"""
Booking Confirmation Parser - Main Entry Point

Command line interface over the reservation parsing pipeline.

Architecture Overview:
┌─────────────┐
│  PDF File   │
└──────┬──────┘
       │
       ▼
┌──────────────────────────────────────────────────────────────┐
│                    TEXT ACQUISITION                           │
│        pdfplumber (primary)  ──►  PyMuPDF (fallback)          │
└─────────────────────────┬────────────────────────────────────┘
                          │ page texts
                          ▼
┌──────────────────────────────────────────────────────────────┐
│                      PARSING LAYER                            │
│  ┌─────────────┐  ┌──────────────┐  ┌────────────────┐       │
│  │ Normalizers │──│ Field Mapper │──│ Reservation    │       │
│  │             │  │              │  │ Validator      │       │
│  └─────────────┘  └──────────────┘  └────────────────┘       │
└─────────────────────────┬────────────────────────────────────┘
                          │
                          ▼
         Success / PartialSuccess / Failure (+ error code)
"""

import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import click
from loguru import logger
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.table import Table

from pipeline import (
    DEFAULT_CONFIG_PATH,
    BatchParseReport,
    ParserConfig,
    ParseStatus,
    ReservationParser,
)


# Configure logging
def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Configure loguru logging."""
    # Remove default handler
    logger.remove()

    # Console logging
    log_level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=log_level,
        colorize=True
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


def _parse_business_date(ctx, param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD")


def collect_pdfs(input_path: Path, pattern: str = "*.pdf") -> List[Path]:
    """A single file, or every PDF directly inside a directory, sorted by name."""
    if input_path.is_file():
        return [input_path]
    return sorted(p for p in input_path.glob(pattern) if p.is_file())


def print_summary(report: BatchParseReport, console: Console):
    """Print a summary table of parse outcomes."""
    table = Table(title="Parse Summary")

    table.add_column("File", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Guest")
    table.add_column("Booking #")
    table.add_column("Dates")
    table.add_column("Total", justify="right")
    table.add_column("Notes")

    for outcome in report.outcomes:
        # Truncate filename if too long
        filename = Path(outcome.source).name
        if len(filename) > 30:
            filename = filename[:27] + "..."

        if outcome.status == ParseStatus.FAILURE:
            table.add_row(
                filename, "[red]✗ failed", "", "", "", "",
                f"{outcome.code.value}: {outcome.message}",
            )
            continue

        data = outcome.data
        status = "[green]✓" if outcome.status == ParseStatus.SUCCESS else "[yellow]~ partial"
        dates = ""
        if data.check_in or data.check_out:
            dates = f"{data.check_in or '?'} → {data.check_out or '?'}"
        total = ""
        if data.total_price is not None:
            total = f"{data.total_price} {data.currency_code or ''}".strip()

        table.add_row(
            filename,
            status,
            data.guest_name or "",
            data.booking_number or "",
            dates,
            total,
            "; ".join(f.message for f in outcome.findings),
        )

    console.print()
    console.print(table)

    console.print()
    console.print(f"[bold]Total:[/] {report.total} files")
    console.print(f"[bold green]Successful:[/] {report.succeeded}")
    console.print(f"[bold yellow]Partial:[/] {report.partial}")
    console.print(f"[bold red]Failed:[/] {report.failed}")


def print_single(outcome, console: Console):
    """Print the fields of one parsed document."""
    if outcome.status == ParseStatus.FAILURE:
        console.print(f"[red]✗ {outcome.code.value}[/] at {outcome.failing_step.value}: {outcome.message}")
        for finding in outcome.findings:
            console.print(f"  {finding}")
        return

    label = "[green]✓ Parsed[/]" if outcome.status == ParseStatus.SUCCESS else "[yellow]~ Partially parsed[/]"
    console.print(label)
    console.print("\n[bold]Extracted Fields:[/]")
    for name, value in outcome.data.to_dict().items():
        if value is not None:
            console.print(f"  {name}: {value}")

    if outcome.findings:
        console.print("\n[bold]Warnings:[/]")
        for finding in outcome.findings:
            console.print(f"  {finding}")


# CLI Interface
@click.command()
@click.option(
    '--input', '-i',
    'input_path',
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help='Input PDF file or directory'
)
@click.option(
    '--nights',
    type=click.IntRange(min=0),
    default=None,
    help='Expected number of nights (single file only)'
)
@click.option(
    '--business-date',
    callback=_parse_business_date,
    default=None,
    help='Reference date for the plausibility check (YYYY-MM-DD)'
)
@click.option(
    '--workers',
    type=click.IntRange(min=1),
    default=None,
    help='Parallel workers for directories'
)
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Path to parser.yaml configuration file'
)
@click.option(
    '--json-report',
    type=click.Path(path_type=Path),
    default=None,
    help='Write detailed JSON report'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Write logs to file'
)
def main(
    input_path: Path,
    nights: Optional[int],
    business_date: Optional[date],
    workers: Optional[int],
    config_path: Optional[Path],
    json_report: Optional[Path],
    verbose: bool,
    log_file: Optional[Path]
):
    """
    Booking Extract - Parse hotel booking confirmation PDFs.

    Examples:

        # Parse a single confirmation, checking a 3-night stay
        booking-extract -i booking.pdf --nights 3

        # Parse a directory with 8 workers and save a JSON report
        booking-extract -i ./bookings/ --workers 8 --json-report report.json
    """
    # Setup logging
    setup_logging(verbose=verbose, log_file=log_file)

    console = Console()
    console.print("[bold blue]Booking Confirmation Parser[/]")
    console.print()

    # Determine config
    try:
        if config_path is None and DEFAULT_CONFIG_PATH.exists():
            config_path = DEFAULT_CONFIG_PATH
        config = ParserConfig.from_yaml(config_path) if config_path else ParserConfig()
        parser = ReservationParser(config=config)
    except Exception as e:
        console.print(f"[bold red]Initialization failed: {e}[/]")
        raise SystemExit(1)

    pdf_files = collect_pdfs(input_path)
    if not pdf_files:
        console.print(f"[yellow]No PDF files found in {input_path}[/]")
        raise SystemExit(1)

    try:
        if input_path.is_file():
            console.print(f"Processing: {input_path.name}")
            outcome = parser.parse(input_path, nights=nights, business_date=business_date)
            report = BatchParseReport(outcomes=[outcome])
            print_single(outcome, console)
        else:
            if nights is not None:
                console.print("[yellow]--nights applies to single files only; ignoring[/]")

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
                console=console
            ) as progress:
                task = progress.add_task("Parsing PDFs...", total=len(pdf_files))
                report = parser.parse_batch(
                    pdf_files,
                    business_date=business_date,
                    max_workers=workers,
                    progress_callback=lambda outcome: progress.advance(task),
                )

            print_summary(report, console)

        # Write JSON report if requested
        if json_report:
            with open(json_report, 'w', encoding='utf-8') as f:
                json.dump(report.to_dict(), f, indent=2, default=str, ensure_ascii=False)
            console.print(f"Report written to: {json_report}")

    except KeyboardInterrupt:
        console.print("\n[yellow]Processing interrupted[/]")
        raise SystemExit(1)

    if report.failed == report.total:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
