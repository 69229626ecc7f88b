"""
FILE: taskman/cli/main.py
PURPOSE: Typer-based CLI for one-shot task management commands
EXPORTS:
  - app (Typer application)
  - console, error_console (Rich consoles for stdout/stderr)
  - fail(error) - Print an error and exit 1
  - main() (entry point)
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - taskman.logging_setup (setup_logging)
  - taskman.cli.commands (command modules, registered on import)
  - taskman.repl (interactive mode)
NOTES:
  - Commands accept full task IDs or any unique prefix
  - Listing commands support --json and --raw flags
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
  - Running `taskman` with no command starts the REPL
"""

import sys

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from rich.console import Console

from .. import __version__
from ..core.exceptions import TaskmanError
from ..logging_setup import setup_logging

# Typer app setup
app = typer.Typer(
    name="taskman",
    help="Hierarchical task tracker with recurring due dates",
    add_completion=False,
)

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)


def fail(error: TaskmanError) -> None:
    """Report a TaskmanError the same way for every command and exit with code 1."""
    error_console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def default_command(ctx: typer.Context):
    """
    Default callback - launches REPL when no command is specified.

    If a subcommand is invoked, this does nothing.
    """
    if ctx.invoked_subcommand is None:
        from ..repl import main as repl_main
        try:
            repl_main()
        except TaskmanError as e:
            fail(e)


# Import command modules to register commands with app
from .commands import (  # noqa: E402
    # System commands
    version,
    help,
    repl,
    # Task commands
    add,
    ls,
    show,
    rename,
    done,
    due,
    category,
    repeat,
    log,
    mv,
    rm,
    archive,
    note,
)


def main():
    """Main entry point for CLI."""
    setup_logging()
    app()
