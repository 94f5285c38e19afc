"""Additional CLI commands for Kindle."""

import ast
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from kindle.cli.main import app

console = Console()


@app.command()
def scan(
    root: Path = typer.Option(
        Path("."),
        "--root",
        "-r",
        help="Project root to scan",
    ),
    base: str | None = typer.Option(
        None,
        "--base",
        "-b",
        help="Only list classes that name this base class",
    ),
) -> None:
    """
    List the classes defined in the project's Python sources.
    """
    from kindle.igniter.models import Igniter
    from kindle.igniter.scanner import find_all_matching_modules

    def matches(name: str, node: ast.ClassDef) -> bool:
        if base is None:
            return True
        return any(ast.unparse(b).split(".")[-1] == base for b in node.bases)

    igniter = Igniter(root=root.resolve())
    names = find_all_matching_modules(igniter, matches, scan_all=True)

    if not names:
        console.print("[yellow]No matching classes found[/yellow]")
        return

    for name in names:
        console.print(name, markup=False, highlight=False, soft_wrap=True)


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help="Show current configuration",
    ),
) -> None:
    """
    View Kindle configuration.
    """
    if not show:
        console.print("Use --show to view configuration")
        return

    from kindle.core.config import get_settings

    settings = get_settings()

    table = Table(title="Current Configuration")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("Log Level", settings.kindle_log_level)
    table.add_row("Debug Mode", str(settings.kindle_debug))
    table.add_row("Log Dir", settings.kindle_log_dir or "-")
    table.add_row("Extension Group", settings.kindle_extension_group)
    table.add_row("Extensions", ", ".join(settings.kindle_extensions) or "-")
    table.add_row("Task Group", settings.kindle_task_group)
    table.add_row("Source Globs", ", ".join(settings.kindle_source_globs))
    table.add_row("Scan Workers", str(settings.kindle_scan_workers))
    table.add_row("Compile Workers", str(settings.kindle_compile_workers))

    console.print(table)
