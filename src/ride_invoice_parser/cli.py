#!/usr/bin/env python3
"""
Ride Invoice Parser CLI
Converts ride invoice PDFs into Excel workbooks grouped by licence plate.
"""

import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import ConverterConfig
from .converter import InvoiceConverter, default_output_name
from .exceptions import ConversionError
from .models import InvoiceRecord
from .workbook_builder import plate_key

logger = logging.getLogger(__name__)

console = Console()


def setup_logging(level: str = "INFO", verbose: bool = False):
    """Configure root logging for command line use."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger().setLevel(logging.DEBUG if verbose else level)


def summary_table(records: List[InvoiceRecord]) -> Table:
    """Rows and gross total per licence plate."""
    table = Table(title="Rides per licence plate")
    table.add_column("License plate", style="cyan")
    table.add_column("Rows", justify="right")
    table.add_column("Total", justify="right", style="green")

    counts = Counter(plate_key(r) for r in records)
    totals = Counter()
    for record in records:
        try:
            totals[plate_key(record)] += float(record.total)
        except ValueError:
            continue

    for plate, count in counts.items():
        table.add_row(plate, str(count), f"{totals[plate]:,.2f}")
    table.add_row("[bold]All Data[/bold]", str(len(records)), f"{sum(totals.values()):,.2f}")
    return table


@click.group()
@click.option('--env-file', type=click.Path(dir_okay=False), default=None,
              help='Read settings from this .env file')
@click.pass_context
def cli(ctx: click.Context, env_file: Optional[str]):
    """Convert ride invoice PDFs into Excel workbooks."""
    ctx.obj = ConverterConfig.from_env(env_file)


@cli.command()
@click.argument('pdf_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output .xlsx path')
@click.option('--json', 'as_json', is_flag=True, help='Print extracted rows as JSON instead of a summary')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_obj
def convert(config: ConverterConfig, pdf_path: str, output: Optional[str], as_json: bool, verbose: bool):
    """Convert PDF_PATH into an Excel workbook."""
    setup_logging(config.log_level, verbose)
    converter = InvoiceConverter(config)

    try:
        records = converter.extract_records_from_pdf(Path(pdf_path).read_bytes())
        content = converter.workbook_builder.build(records)
    except ConversionError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        sys.exit(1)

    output_path = Path(output) if output else Path.cwd() / default_output_name()
    output_path.write_bytes(content)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
    else:
        console.print(summary_table(records))
    console.print(f"[green]💾 Workbook saved to: {output_path}[/green]")


@cli.command()
@click.argument('pdf_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_obj
def rows(config: ConverterConfig, pdf_path: str, verbose: bool):
    """Show the reassembled row strings of each table page."""
    setup_logging(config.log_level, verbose)
    converter = InvoiceConverter(config)

    try:
        pages = converter.extract_rows(Path(pdf_path).read_bytes())
    except ConversionError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        sys.exit(1)

    for page_number, page_rows in enumerate(pages, start=2):
        body = "\n".join(page_rows) if page_rows else "[dim]no rows[/dim]"
        console.print(Panel(body, title=f"Page {page_number}", border_style="blue"))


@cli.command()
@click.option('--host', default=None, help='Bind address (default from config)')
@click.option('--port', type=int, default=None, help='Port (default from config)')
@click.pass_obj
def serve(config: ConverterConfig, host: Optional[str], port: Optional[int]):
    """Run the HTTP upload API."""
    import uvicorn

    from .api import create_app

    setup_logging(config.log_level)
    uvicorn.run(create_app(config), host=host or config.host, port=port or config.port)


if __name__ == '__main__':
    cli()
