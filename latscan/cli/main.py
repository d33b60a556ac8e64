"""
latscan CLI.

Commands:
- analyze: Percentiles of response times across a log directory
- config: init | validate | dump
- version
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..config import LatscanConfig, load_config, generate_default_config
from ..core.analysis import LatencyAnalyzer
from ..core.errors import ErrorCode, ScanError
from ..core.report import PercentileReport, ReportStatus


app = typer.Typer(
    name="latscan",
    help="Response-time percentiles for access logs",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    text = "text"
    json = "json"


def parse_percentile_list(text: str) -> List[int]:
    """
    Parse "90,95,99" into [90, 95, 99].

    Raises:
        ValueError: On a non-integer entry, a value outside [0, 100],
            or an empty list.
    """
    percentiles = []
    for item in text.split(','):
        item = item.strip()
        if not item:
            continue
        try:
            value = int(item)
        except ValueError:
            raise ValueError(f"Invalid input for percentile list: {item}")
        if not 0 <= value <= 100:
            raise ValueError(f"Percentile out of range [0, 100]: {value}")
        percentiles.append(value)

    if not percentiles:
        raise ValueError("Percentile list should have at least one value")
    return percentiles


def _setup_logging(verbose: bool, debug: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _print_summary(report: PercentileReport) -> None:
    """Print summary table."""
    table = Table(title="Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Files", f"{report.files_scanned}")
    table.add_row("Failed files", f"{report.files_failed}")
    table.add_row("Samples", f"{report.total_samples:,}")
    table.add_row("Rejected lines", f"{report.lines_rejected:,}")
    for est in report.sorted_estimates():
        table.add_row(f"P{est.percentile:g}", f"{est.latency} {report.unit}")
    table.add_row("Duration", f"{report.duration_seconds:.2f}s")

    err_console.print(table)


@app.command()
def analyze(
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Directory of log files"),
    percentile_list: Optional[str] = typer.Option(
        None, "--percentile-list",
        help="Comma separated percentiles of READ API response time, e.g. 90,95,99",
    ),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
    format: OutputFormat = typer.Option(OutputFormat.text, "-f", "--format"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file"),
    quiet: bool = typer.Option(False, "-q", "--quiet"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log progress"),
    debug: bool = typer.Option(False, "--debug", help="Log everything"),
):
    """Estimate response-time percentiles across every *.log file in a directory."""
    _setup_logging(verbose, debug)

    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise typer.Exit(1)

    errors = cfg.validate()
    if errors:
        error = ScanError(code=ErrorCode.E3001_INVALID_CONFIG, context={'errors': errors})
        err_console.print(f"[red]{escape(error.message)}[/]")
        raise typer.Exit(1)

    percentiles = None
    if percentile_list is not None:
        try:
            percentiles = parse_percentile_list(percentile_list)
        except ValueError as e:
            error = ScanError(code=ErrorCode.E3002_INVALID_PERCENTILE, context={'reason': str(e)})
            err_console.print(f"[red]{escape(error.message)}[/]")
            raise typer.Exit(1)

    directory = path if path is not None else Path(cfg.scan.path)
    if not quiet:
        err_console.print(f"[bold blue]latscan v{__version__}[/]")
        err_console.print(f"Scanning: {directory}")

    analyzer = LatencyAnalyzer(cfg)
    try:
        report = analyzer.analyze_directory(directory, percentiles)
    except (OSError, ValueError) as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    if format == OutputFormat.json:
        output_text = report.to_json(indent=2)
    else:
        output_text = '\n'.join(report.format_lines())

    if output:
        output.write_text(output_text + '\n')
        if not quiet:
            err_console.print(f"[green]Written to:[/] {output}")
    else:
        typer.echo(output_text)

    for error in report.errors:
        color = "red" if error.severity == 'error' else "yellow"
        err_console.print(f"[{color}]{error.code.value}[/] {escape(error.message)}")

    if not quiet:
        _print_summary(report)

    if report.files_scanned == 0 or report.status == ReportStatus.ERROR:
        raise typer.Exit(1)


@app.command("config")
def config_cmd(
    action: str = typer.Argument(..., help="Action: init|validate|dump"),
    path: Optional[Path] = typer.Argument(None, help="Config file path"),
):
    """Configuration management."""
    if action == "init":
        typer.echo(generate_default_config())

    elif action == "validate":
        if not path:
            console.print("[red]Path required for validate[/]")
            raise typer.Exit(1)
        try:
            cfg = LatscanConfig.load(path)
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        errors = cfg.validate()
        if errors:
            console.print("[red]Invalid configuration:[/]")
            for e in errors:
                console.print(f"  - {e}")
            raise typer.Exit(1)
        console.print(f"[green]Valid:[/] {path}")

    elif action == "dump":
        try:
            cfg = load_config(path)
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        typer.echo(cfg.to_yaml())

    else:
        console.print(f"[red]Unknown action:[/] {action}")
        console.print("Valid actions: init, validate, dump")
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold blue]latscan v{__version__}[/]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
