"""Main CLI entry point using Typer."""

import json
from pathlib import Path

import typer
from rich.console import Console

from kindle import __version__
from kindle.core.config import get_settings
from kindle.core.errors import SetupFailedError
from kindle.core.logging import configure_logging

app = typer.Typer(
    name="kindle",
    help="Kindle - extension setup and code-modification tooling",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Kindle[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Kindle - set up every extension of a project and report what failed.
    """
    configure_logging(get_settings())


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def setup(
    ctx: typer.Context,
    root: Path = typer.Option(
        Path("."),
        "--root",
        "-r",
        help="Project root to compile",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print failure records as JSON instead of failure blocks",
    ),
) -> None:
    """
    Run all setup tasks for every extension in the project.

    Extra arguments are passed to each extension's setup hook. Use
    --extensions module:attr,... to choose extensions explicitly.

    Example:
        kindle setup --extensions app.audit:Audit --seed
    """
    from kindle.setup.models import SetupFailed
    from kindle.setup.runner import run, run_with_failure_record

    argv = list(ctx.args)

    if as_json:
        result = run_with_failure_record(argv, root=root.resolve(), out=error_console)
        if isinstance(result, SetupFailed):
            console.print_json(json.dumps([r.to_dict() for r in result.records]))
            raise typer.Exit(code=1)
        console.print_json("[]")
        return

    try:
        run(argv, root=root.resolve())
    except SetupFailedError as e:
        error_console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1) from None

    console.print("[green]Setup complete[/green]")

