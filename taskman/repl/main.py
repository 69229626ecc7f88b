"""
FILE: taskman/repl/main.py
PURPOSE: Interactive REPL for task management with prompt-toolkit
EXPORTS:
  - main() - Entry point for REPL mode
  - run_repl() - Main REPL loop
  - execute_command(result) -> bool
DEPENDENCIES:
  - prompt_toolkit (REPL interface, history, completion)
  - rich (formatted output)
  - taskman.core.service (business logic)
  - taskman.repl.parser (command parsing)
  - taskman.repl.completer (autocomplete)
NOTES:
  - Uses prompt_toolkit for readline-like features
  - Command history automatic with PromptSession
  - Bottom toolbar shows open/due/done counts and rotating tips
  - Ctrl+D or "exit"/"quit" to exit
  - Calls service layer directly (not CLI layer)
  - Without a TTY (pipes, tests) falls back to plain input()
"""

import logging
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

from ..core import service
from ..core.exceptions import TaskmanError
from .completer import create_completer
from .parser import ParseResult, parse_command

logger = logging.getLogger(__name__)

# Rich console for formatted output
console = Console()

PROMPT = "taskman> "

# Rotating tips for bottom toolbar
_TOOLBAR_TIPS = [
    "Tip: 'due <id>' without a date opens a prompt with a live preview",
    "Tip: IDs can be shortened to any unique prefix",
    "Tip: 'mv <id> <anchor> --above' reorders, '--into' nests",
    "Tip: 'repeat <id>' then 'due <id> mon' makes a weekly habit",
    "Tip: Press Ctrl+D or type 'exit' to quit",
    "Tip: Type 'help' to see all available commands",
]
_tip_index = 0


def get_bottom_toolbar() -> HTML:
    """
    Create bottom toolbar showing task counts and the current tip.

    Returns:
        HTML formatted toolbar with stats and tips
    """
    tip = _TOOLBAR_TIPS[_tip_index % len(_TOOLBAR_TIPS)]
    try:
        counts = service.task_counts()
    except TaskmanError as e:
        logger.warning("Toolbar could not load tasks: %s", e)
        return HTML(f"<style bg='#444444' fg='#ffffff'> Taskman | {tip} </style>")

    stats = f"{counts['open']} open | {counts['due']} due today | {counts['done']} done"
    return HTML(f"<style bg='#444444' fg='#ffffff'> {stats} | {tip} </style>")


# Import command handlers from command modules
from .commands import (  # noqa: E402
    handle_add_command,
    handle_ls_command,
    handle_today_command,
    handle_habits_command,
    handle_show_command,
    handle_rename_command,
    handle_done_command,
    handle_due_command,
    handle_category_command,
    handle_repeat_command,
    handle_log_command,
    handle_mv_command,
    handle_rm_command,
    handle_archive_command,
    handle_note_command,
    handle_fold_command,
    handle_unfold_command,
    handle_help_command,
    handle_clear_command,
)


def execute_command(result: ParseResult) -> bool:
    """
    Execute a parsed command.

    Args:
        result: Parsed command from parser

    Returns:
        True to continue REPL loop, False to exit
    """
    command = result.command.lower()

    if command in ("exit", "quit"):
        console.print("[dim]Goodbye![/dim]")
        return False

    # Just Enter pressed
    if not command:
        return True

    handlers = {
        "add": handle_add_command,
        "ls": handle_ls_command,
        "today": handle_today_command,
        "habits": handle_habits_command,
        "show": handle_show_command,
        "rename": handle_rename_command,
        "done": handle_done_command,
        "due": handle_due_command,
        "category": handle_category_command,
        "repeat": handle_repeat_command,
        "log": handle_log_command,
        "mv": handle_mv_command,
        "rm": handle_rm_command,
        "archive": handle_archive_command,
        "note": handle_note_command,
        "fold": handle_fold_command,
        "unfold": handle_unfold_command,
        "help": handle_help_command,
        "clear": handle_clear_command,
    }

    handler = handlers.get(command)
    if handler:
        handler(result)
    else:
        console.print(f"[red]Unknown command:[/red] {command}")
        console.print("[dim]Type 'help' for available commands[/dim]")
    console.print()

    return True


def run_repl() -> None:
    """
    Main REPL loop.

    Exits on:
    - Ctrl+D (EOFError)
    - "exit" or "quit" commands
    """
    global _tip_index

    session = None
    if sys.stdin.isatty() and sys.stdout.isatty():
        session = PromptSession(
            history=InMemoryHistory(),
            completer=create_completer(),
            complete_while_typing=True,
            bottom_toolbar=get_bottom_toolbar,
        )

    console.print("[bold cyan]Taskman REPL[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if session is None:
        console.print("[dim](Running in simple mode - no autocomplete)[/dim]")
    console.print()

    while True:
        try:
            if session is None:
                user_input = input(PROMPT)
            else:
                user_input = session.prompt(HTML("<b>taskman&gt; </b>"))

            if not execute_command(parse_command(user_input)):
                break

            _tip_index += 1

        except KeyboardInterrupt:
            console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
            continue
        except EOFError:
            console.print()
            console.print("[dim]Goodbye![/dim]")
            break


def main() -> None:
    """
    Entry point for REPL mode.

    Called when user runs: taskman repl (or just taskman)
    """
    logger.info("Starting REPL")
    run_repl()
