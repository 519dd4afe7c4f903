"""Command-line interface: extract knowledge documents for a Java source tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from javafacts import config
from javafacts.errors import OutputWriteError
from javafacts.project import ProjectParser

console = Console()


def _extract(
    root: Path = typer.Argument(..., help="Root directory (or single .java file) to scan."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Destination JSON file for the extracted documents.",
    ),
    workers: int = typer.Option(
        config.MAX_WORKERS,
        "--workers",
        "-w",
        min=1,
        help="Number of files extracted in parallel.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress at INFO level."),
) -> None:
    """Extract one document per top-level type and write them as a JSON array."""

    logging.basicConfig(
        level=logging.INFO if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not root.exists():
        console.print(f"[red]Path not found:[/red] {root}")
        raise typer.Exit(code=1)

    parser = ProjectParser(root.resolve(), max_workers=workers)
    documents = sorted(parser.parse(), key=lambda d: d["FilePath"])

    target = output or config.OUTPUT_PATH
    try:
        parser.write_output(target, documents)
    except OutputWriteError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Documents written to[/green] {target}")

    table = Table(title="Extraction Summary")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Types", str(len(documents)))
    table.add_row("Methods", str(sum(len(d["methodList"]) for d in documents)))
    table.add_row("Endpoints", str(sum(len(d["Endpoints"]) for d in documents)))
    table.add_row("Database Operations", str(sum(len(d["DatabaseOperations"]) for d in documents)))
    table.add_row("Errors", str(len(parser.errors)))
    console.print(table)

    if parser.errors:
        console.print("[yellow]Files skipped during extraction:[/yellow]")
        for err in parser.errors:
            console.print(f" - {escape(err['file'])}: {escape(err['error'])}")


def app() -> None:
    """Entry point used by the console script."""

    typer.run(_extract)


if __name__ == "__main__":  # pragma: no cover
    app()
