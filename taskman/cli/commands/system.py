"""
FILE: taskman/cli/commands/system.py
PURPOSE: System commands (version, help, repl)
"""

import typer

# Import shared objects from main module
# These will be available after main.py imports this module
from ..main import app, console, fail, __version__
from ...core.exceptions import TaskmanError


@app.command()
def version():
    """Show Taskman version."""
    console.print(f"Taskman v{__version__}")


@app.command()
def help():
    """Show available commands and usage."""
    console.print("\n[bold cyan]Taskman[/bold cyan] - Hierarchical task tracker with recurring due dates\n")
    console.print(f"[dim]Version {__version__}[/dim]\n")

    console.print("[bold]Usage:[/bold]")
    console.print("  taskman \\[command] \\[options]")
    console.print("  taskman                   [dim]# Launch interactive REPL (default)[/dim]\n")

    console.print("[bold]Commands:[/bold]")

    commands = [
        ("add", "Create a new task", 'taskman add "Name" [--under ID] [--due TEXT]'),
        ("ls", "List tasks", "taskman ls [--view outline|today|habits] [--all]"),
        ("show", "View full task details", "taskman show <id>"),
        ("rename", "Rename a task", 'taskman rename <id> "New name"'),
        ("done", "Complete a task and its subtasks", "taskman done <id>"),
        ("due", "Set or clear a due date", "taskman due <id> \\[text] [--clear]"),
        ("category", "Categorize a task and its subtasks", "taskman category <id> <name>"),
        ("repeat", "Make a top-level task repeat", "taskman repeat <id> [--off]"),
        ("log", "Log minutes worked", "taskman log <id> <minutes>"),
        ("mv", "Move a task", "taskman mv <id> <anchor> [--above|--below|--into]"),
        ("rm", "Delete a task and its subtasks", "taskman rm <id> [--yes]"),
        ("archive", "Hide a task from listings", "taskman archive <id> [--undo]"),
        ("note", "Attach a note", 'taskman note <id> "Text"'),
        ("repl", "Launch interactive REPL", "taskman repl"),
        ("version", "Show version", "taskman version"),
        ("help", "Show this help message", "taskman help"),
    ]

    for cmd, desc, example in commands:
        console.print(f"  [green]{cmd:9}[/green] {desc}")
        console.print(f"            [dim]{example}[/dim]\n")

    console.print("[bold]Task IDs:[/bold]")
    console.print("  Any unique prefix works: [cyan]taskman done ab[/cyan] completes ab12cd34\n")

    console.print("[bold]Due dates:[/bold]")
    console.print("  today, tomorrow, yesterday      [dim]# keywords[/dim]")
    console.print("  mon .. sun                      [dim]# next weekday[/dim]")
    console.print("  3, +3, in 2 weeks, 1d ago       [dim]# relative[/dim]")
    console.print("  20/04, 20/04/27, 5 jan          [dim]# absolute[/dim]")
    console.print("  21st, 1st jan                   [dim]# every month / every year[/dim]\n")

    console.print("[bold]Global Options:[/bold]")
    console.print("  [yellow]--json[/yellow]    Output as JSON (for scripting)")
    console.print("  [yellow]--raw[/yellow]     Plain text output (no colors)")
    console.print("  [yellow]--help[/yellow]    Show detailed help for a command\n")


@app.command()
def repl():
    """
    Launch interactive REPL mode.

    The REPL provides:
    - Command history (up/down arrows)
    - Autocomplete for commands and task IDs (Tab key)
    - All task management commands
    - Exit with Ctrl+D or type 'exit'

    Example:
        taskman repl
    """
    # Import here to avoid loading REPL dependencies for one-shot commands
    from ...repl import main as repl_main

    try:
        repl_main()
    except TaskmanError as e:
        fail(e)
