"""sigcheck CLI entry point."""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import timedelta
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from sigcheck import __app_name__, __version__
from sigcheck.config import DEFAULT_FILE_TYPES, DEFAULT_ORACLE, DEFAULT_RECURSIVE
from sigcheck.core.cancellation import CancellationToken
from sigcheck.core.orchestrator import run_scan
from sigcheck.logging_config import setup_logging
from sigcheck.models import ScanParameters, ScanProgress, ScanResult
from sigcheck.oracles import OracleLoadError, OracleUnavailableError, SignatureOracle, load_oracle
from sigcheck.utils import format_elapsed, printable_path, validate_path

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App & Console
# ---------------------------------------------------------------------------

app = typer.Typer(
    name=__app_name__,
    help="🔏 sigcheck: find unsigned executables in a directory tree.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

EXIT_CANCELLED: int = 130

# ---------------------------------------------------------------------------
# Version callback
# ---------------------------------------------------------------------------


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


@app.callback()
def main(
    version: Optional[bool] = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-v",
        help="Show the application version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Classify files as digitally signed or unsigned."""


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def scan(
    path: str = typer.Argument(
        ...,
        help="Directory to scan.",
    ),
    file_types: str = typer.Option(
        ",".join(DEFAULT_FILE_TYPES),
        "--types",
        "-t",
        help="Comma-separated file extensions to check, without the dot.",
    ),
    recursive: bool = typer.Option(
        DEFAULT_RECURSIVE,
        "--recursive/--no-recursive",
        help="Include subdirectories.",
    ),
    oracle_ref: str = typer.Option(
        DEFAULT_ORACLE,
        "--oracle",
        help="Signature verifier as 'module:attr'.",
    ),
    timeout: Optional[float] = typer.Option(  # noqa: UP007
        None,
        "--timeout",
        min=0,
        help="Cancel the scan after this many seconds.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON instead of Rich tables.",
    ),
    fail_on_unsigned: bool = typer.Option(
        False,
        "--fail-on-unsigned",
        help="Exit with code 1 if any unsigned file is found.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging on stderr.",
    ),
) -> None:
    """Check the digital signatures of files in a directory."""

    setup_logging(verbose)

    # --- Validate input ---
    try:
        target = validate_path(path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        _print_error(str(exc), output_json)
        raise typer.Exit(code=1)

    parameters = ScanParameters.from_text(target, file_types, recursive=recursive)
    if not parameters.extensions:
        _print_error("Please specify file types to check", output_json)
        raise typer.Exit(code=1)

    try:
        oracle = load_oracle(oracle_ref)
    except (OracleLoadError, OracleUnavailableError) as exc:
        _print_error(str(exc), output_json)
        raise typer.Exit(code=1)

    if not output_json:
        console.print(
            Panel(
                "[bold green]sigcheck initialized[/bold green]",
                title="🔏 sigcheck",
                subtitle=f"v{__version__}",
                border_style="cyan",
            )
        )
        console.print(f"[dim]Target:[/dim] {_shown(str(target))}")
        console.print(
            f"[dim]Types:[/dim]  {', '.join(sorted(parameters.extensions))}"
            f"  [dim]Recursive:[/dim] {parameters.recursive}\n"
        )

    # --- Run scan ---
    started = time.monotonic()
    result = _run_scan_in_worker(
        parameters,
        oracle,
        timeout=timeout,
        show_progress=not output_json,
    )
    elapsed = timedelta(seconds=time.monotonic() - started)

    # --- Output ---
    if output_json:
        _print_json(result, elapsed)
    else:
        _print_rich(result, elapsed)

    # --- Exit code ---
    if result.failed:
        raise typer.Exit(code=1)
    if result.cancelled:
        raise typer.Exit(code=EXIT_CANCELLED)
    if fail_on_unsigned and result.unsigned_files:
        if not output_json:
            console.print(
                f"\n[bold red]✗ Check failed:[/bold red] "
                f"{len(result.unsigned_files)} unsigned file(s) found."
            )
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Scan execution
# ---------------------------------------------------------------------------


def _run_scan_in_worker(
    parameters: ScanParameters,
    oracle: SignatureOracle,
    *,
    timeout: Optional[float],  # noqa: UP007
    show_progress: bool,
) -> ScanResult:
    """Run the scan on a worker thread so Ctrl-C and timeouts can cancel it."""
    token = CancellationToken()

    progress_bar = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("[green]✔ {task.fields[signed]}[/green] [red]✗ {task.fields[unsigned]}[/red]"),
        TimeElapsedColumn(),
        TextColumn("[dim]{task.fields[current]}"),
        console=console,
        transient=True,
        disable=not show_progress,
    )
    task_id = progress_bar.add_task("Scanning…", total=None, signed=0, unsigned=0, current="")

    def _on_progress(update: ScanProgress) -> None:
        progress_bar.update(
            task_id,
            total=update.total_candidates,
            completed=update.processed,
            signed=update.signed_so_far,
            unsigned=update.unsigned_so_far,
            current=_shown(update.current_file),
        )

    with progress_bar, ThreadPoolExecutor(max_workers=1, thread_name_prefix="sigcheck-scan") as pool:
        future = pool.submit(run_scan, parameters, oracle, _on_progress, token)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.info("Timed out after %ss, cancelling scan", timeout)
            token.cancel()
            return future.result()
        except KeyboardInterrupt:
            token.cancel()
            return future.result()


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _shown(text: str) -> str:
    """Prepare a path or message that may hold a path for Rich output."""
    return escape(printable_path(text))


def _print_error(message: str, output_json: bool) -> None:
    """Report an input error, on stderr when stdout carries JSON."""
    target = err_console if output_json else console
    target.print(f"[bold red]✗[/bold red] {_shown(message)}")


def _status_line(result: ScanResult, elapsed: timedelta) -> str:
    """Summarise the terminal state of *result* in one line."""
    took = format_elapsed(elapsed)
    signed = len(result.signed_files)
    unsigned = len(result.unsigned_files)

    if result.cancelled:
        return f"[yellow]⚠ Scan was cancelled[/yellow] (Time elapsed: {took})"
    if result.failed:
        return f"[bold red]✗ {_shown(result.message)}[/bold red] (Time elapsed: {took})"
    if unsigned == 0 and signed > 0:
        return (
            f"[bold green]✔ Excellent! All {signed} files have valid "
            f"digital signatures[/bold green] (Time: {took})"
        )
    if unsigned > 0:
        return (
            f"[yellow]⚠ Found {unsigned} unsigned files out of "
            f"{result.total_files_checked} total files[/yellow] (Time: {took})"
        )
    if result.total_files_checked == 0:
        return f"[blue]ℹ {_shown(result.message)}[/blue] (Time: {took})"
    return f"{_shown(result.message)} (Time: {took})"


def _print_json(result: ScanResult, elapsed: timedelta) -> None:
    """Print scan results as structured JSON."""
    data = result.to_dict()
    data["elapsed_seconds"] = round(elapsed.total_seconds(), 3)
    print(json.dumps(data, indent=2))


def _print_rich(result: ScanResult, elapsed: timedelta) -> None:
    """Render scan results using Rich tables and panels.

    A cancelled or failed scan shows only its summary; the partial lists
    stay available through ``--json``.
    """
    if result.cancelled or result.failed:
        _print_summary(result, elapsed)
        return
    if result.signed_files:
        _print_files_table("✔ Signed Files", result.signed_files, "green")
    if result.unsigned_files:
        _print_files_table("✗ Unsigned Files", result.unsigned_files, "red")
    _print_summary(result, elapsed)


def _print_files_table(title: str, files: list[str], color: str) -> None:
    """Render a list of file paths as a Rich table."""
    table = Table(
        title=title,
        title_style=f"bold {color}",
        header_style="bold magenta",
    )
    table.add_column("#", style="dim", width=5)
    table.add_column("File", style="cyan", overflow="fold")

    for idx, file_path in enumerate(files, start=1):
        table.add_row(str(idx), _shown(file_path))

    console.print(table)
    console.print()


def _print_summary(result: ScanResult, elapsed: timedelta) -> None:
    """Print a scan summary with signed/unsigned breakdown."""
    summary_lines = [
        f"[bold]Candidates:[/bold]    {result.total_candidates}",
        f"[bold]Files checked:[/bold] {result.total_files_checked}",
        "",
        f"[bold green]Signed:[/bold green]   {len(result.signed_files)}",
        f"[bold red]Unsigned:[/bold red] {len(result.unsigned_files)}",
    ]
    if result.skipped_directories:
        summary_lines.append(
            f"[dim]Skipped directories:[/dim] {result.skipped_directories}"
        )
    summary_lines += ["", _status_line(result, elapsed)]

    console.print(
        Panel(
            "\n".join(summary_lines),
            title="📊 Scan Summary",
            border_style="cyan",
        )
    )
