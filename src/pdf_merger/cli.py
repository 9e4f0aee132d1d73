"""``pdf-merger`` command line interface."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import MergerConfig, default_config_path, load_merger_config
from .errors import MergerConfigError, MergerError, ProcessFailureError
from .merger import Merger

app = typer.Typer(
    name="pdf-merger",
    help="Merge PDF documents with Ghostscript.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_path: Optional[Path]) -> MergerConfig:
    try:
        return load_merger_config(config_path)
    except MergerConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _report_failure(exc: MergerError) -> None:
    if isinstance(exc, ProcessFailureError):
        err_console.print(
            f"[red]Error:[/red] merge command exited with status {exc.exit_code}"
        )
        err_console.print(f"[dim]command:[/dim] {escape(exc.command_line)}", highlight=False)
        if exc.stderr:
            err_console.print(exc.stderr.rstrip(), markup=False, highlight=False)
        return
    err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)


@app.command()
def merge(
    inputs: List[Path] = typer.Argument(
        ...,
        help="Input PDF files, merged in the order given",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output PDF file (omit to write the merged PDF to stdout)",
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Replace the output file if it already exists",
    ),
    binary: Optional[str] = typer.Option(
        None,
        "--binary",
        help="Ghostscript executable (overrides configuration)",
    ),
    temporary_folder: Optional[Path] = typer.Option(
        None,
        "--temporary-folder",
        help="Directory for intermediate files (overrides configuration)",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Configuration file (default: .pdf-merger/config.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Merge INPUTS into a single PDF."""
    _configure_logging(verbose)
    config = _load_config(config_path)

    merger = Merger(
        binary or config.binary,
        temporary_folder or config.temporary_folder,
    )
    with merger:
        try:
            if output is None:
                data = merger.get_output(inputs, overwrite=overwrite)
                stream = typer.get_binary_stream("stdout")
                stream.write(data)
                stream.flush()
                return
            merger.merge(output, inputs, overwrite=overwrite)
        except MergerError as exc:
            _report_failure(exc)
            raise typer.Exit(1) from exc

    size = output.stat().st_size
    console.print(
        f"[green]✓[/green] Merged {len(inputs)} file(s) into {escape(str(output))} ({size} bytes)",
        highlight=False,
    )


@app.command("config")
def show_config(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Configuration file (default: .pdf-merger/config.yaml)",
    ),
) -> None:
    """Display the resolved merger configuration."""
    path = config_path or default_config_path()
    config = _load_config(path)

    table = Table(title="PDF Merger Configuration", show_lines=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="bold")
    table.add_column("Origin", style="magenta")

    folder = (
        escape(str(config.temporary_folder))
        if config.temporary_folder is not None
        else "[dim](system temp directory)[/dim]"
    )
    table.add_row("binary", escape(config.binary), config.origins["binary"])
    table.add_row("temporary_folder", folder, config.origins["temporary_folder"])

    console.print(table)
    console.print(f"[dim]Config file: {escape(str(path))}{'' if path.exists() else ' (not found)'}[/dim]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
