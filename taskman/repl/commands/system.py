"""
FILE: taskman/repl/commands/system.py
PURPOSE: System command handlers for REPL
"""

from rich.markup import escape
from rich.table import Table

from ..main import console
from ..parser import ParseResult


def handle_help_command(result: ParseResult) -> None:
    """
    Handle 'help' command - show available commands.

    Args:
        result: Parsed command (unused)
    """
    table = Table(title="Commands", show_header=True, header_style="bold cyan", box=None)
    table.add_column("Command", style="green", no_wrap=True)
    table.add_column("Description")

    commands = [
        ("add <name> [--under ID] [--due TEXT]", "Create a task"),
        ("ls [--view outline|today|habits] [--all]", "Show the outline"),
        ("today / habits", "Due today or overdue / repeating tasks"),
        ("show <id>", "Full task details"),
        ("rename <id> <name>", "Rename a task"),
        ("done <id> [<id> ...]", "Complete tasks and their subtasks"),
        ("due <id> [date] [--clear]", "Set a due date (prompts with preview without a date)"),
        ("category <id> [name]", "Categorize a task and its subtasks"),
        ("repeat <id> [--off]", "Make a top-level task repeat"),
        ("log <id> <minutes>", "Log minutes worked"),
        ("mv <id> <anchor> [--above|--below|--into]", "Move a task ('root' = top level)"),
        ("rm <id> [--yes]", "Delete a task and its subtasks"),
        ("archive <id> [--undo]", "Hide a task from listings"),
        ("note <id> <text>", "Attach a note"),
        ("fold <id> / unfold <id>", "Collapse or expand subtasks in the outline"),
        ("clear", "Clear the screen"),
        ("exit", "Leave (or Ctrl+D)"),
    ]
    for usage, description in commands:
        table.add_row(escape(usage), description)

    console.print(table)
    console.print("\n[dim]Task IDs can be shortened to any unique prefix. Tab completes IDs and commands.[/dim]")


def handle_clear_command(result: ParseResult) -> None:
    """Handle 'clear' command - clear the screen."""
    console.clear()
