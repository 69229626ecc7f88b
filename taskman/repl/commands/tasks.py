"""
FILE: taskman/repl/commands/tasks.py
PURPOSE: Task command handlers for REPL
"""

from rich.markup import escape

from ..main import console
from ..parser import ParseResult
from ..dateprompt import prompt_due_date
from ...core import service
from ...core.constants import VIEW_HABITS, VIEW_OUTLINE, VIEW_TODAY
from ...core.exceptions import TaskmanError
from ...core.models import Position
from ...formatting import TaskFormatter, format_due, format_duration


def ask_confirmation(message: str) -> bool:
    """Ask user for confirmation (y/n)."""
    response = input(f"{message} (y/n): ").strip().lower()
    return response in ("y", "yes")


def _usage(message: str, usage: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    console.print(f"[dim]Usage: {escape(usage)}[/dim]")


def _error(error: TaskmanError) -> None:
    console.print(f"[red]Error:[/red] {error}")


def handle_add_command(result: ParseResult) -> None:
    """
    Handle 'add' command - create new task.

    Usage:
        add Buy groceries
        add "Proofread chapter" --under ab12 --due fri
    """
    if not result.args:
        _usage("Task name required", "add <name> [--under ID] [--due TEXT]")
        return

    # Join all args as the name (in case they didn't use quotes)
    name = " ".join(result.args)
    under = result.flags.get("under")
    due_text = result.flags.get("due")

    try:
        task = service.create_task(
            name,
            parent_ref=under if isinstance(under, str) else None,
            due_text=due_text if isinstance(due_text, str) else None,
        )
    except TaskmanError as e:
        _error(e)
        return

    due = format_due(task.due)
    suffix = f" [dim](due {due})[/dim]" if due else ""
    console.print(f"[green]✓ Created task [bold]{task.id}[/bold]:[/green] {task.name}{suffix}")


def _show_view(view: str, include_all: bool) -> None:
    try:
        result = service.list_view(view, include_all=include_all)
    except TaskmanError as e:
        _error(e)
        return

    if view == VIEW_OUTLINE:
        if not result.children:
            console.print("[dim]No tasks yet. Try: add \"Something to do\"[/dim]")
            return
        console.print(TaskFormatter.create_tree(result))
        return

    if not result:
        console.print("[dim]Nothing here[/dim]")
        return
    if view == VIEW_TODAY:
        console.print(TaskFormatter.create_table(result, title="Due today"))
    else:
        console.print(TaskFormatter.create_table(result, title="Habits", show_history=True))


def handle_ls_command(result: ParseResult) -> None:
    """
    Handle 'ls' command - show the outline (or another view with --view).

    Usage:
        ls
        ls --all
        ls --view today
    """
    view = result.flags.get("view", VIEW_OUTLINE)
    if not isinstance(view, str):
        _usage("--view needs a value", "ls [--view outline|today|habits] [--all]")
        return
    _show_view(view, bool(result.flags.get("all", False)))


def handle_today_command(result: ParseResult) -> None:
    """Handle 'today' command - tasks due today or overdue."""
    _show_view(VIEW_TODAY, bool(result.flags.get("all", False)))


def handle_habits_command(result: ParseResult) -> None:
    """Handle 'habits' command - repeating tasks."""
    _show_view(VIEW_HABITS, bool(result.flags.get("all", False)))


def handle_show_command(result: ParseResult) -> None:
    """
    Handle 'show' command - full task details.

    Usage:
        show ab12
    """
    if not result.args:
        _usage("Task ID required", "show <id>")
        return

    try:
        task = service.get_task(result.args[0])
    except TaskmanError as e:
        _error(e)
        return

    console.print(TaskFormatter.create_detail(task))
    if task.children:
        console.print()
        console.print(TaskFormatter.create_tree(task))


def handle_rename_command(result: ParseResult) -> None:
    """
    Handle 'rename' command.

    Usage:
        rename ab12 New name
    """
    if len(result.args) < 2:
        _usage("Task ID and new name required", "rename <id> <name>")
        return

    try:
        task = service.rename_task(result.args[0], " ".join(result.args[1:]))
    except TaskmanError as e:
        _error(e)
        return
    console.print(f"[blue]✎[/blue] Renamed task {task.id}: {task.name}")


def handle_done_command(result: ParseResult) -> None:
    """
    Handle 'done' command - complete one or more tasks.

    Usage:
        done ab12
        done ab12 cd34
    """
    if not result.args:
        _usage("Task ID required", "done <id> [<id> ...]")
        return

    for task_ref in result.args:
        try:
            task = service.complete_task(task_ref)
        except TaskmanError as e:
            _error(e)
            continue
        if task.info.repeats:
            console.print(f"[green]✓[/green] Completed: {task.name} [dim](next due {format_due(task.due) or 'never'})[/dim]")
        else:
            console.print(f"[green]✓[/green] Completed: {task.name}")


def handle_due_command(result: ParseResult) -> None:
    """
    Handle 'due' command - set or clear a due date.

    Without a date, opens a prompt that previews the date while typing.

    Usage:
        due ab12 tomorrow
        due ab12 in 2 weeks
        due ab12 --clear
        due ab12
    """
    if not result.args:
        _usage("Task ID required", "due <id> [date] [--clear]")
        return

    task_ref = result.args[0]
    try:
        if result.flags.get("clear"):
            task = service.clear_due(task_ref)
            console.print(f"[green]✓[/green] Cleared due date of {task.name}")
            return

        text = " ".join(result.args[1:])
        if not text:
            current = service.get_task(task_ref)
            default = current.info.due_rules[0].to_text() if current.info.due_rules else ""
            text = prompt_due_date(f"due ({current.name}): ", default=default)
            if text is None:
                console.print("[dim]Cancelled[/dim]")
                return

        task = service.set_due_from_text(task_ref, text)
    except TaskmanError as e:
        _error(e)
        return

    rule = task.info.due_rules[0]
    when = task.due.strftime("%a %d %b %Y") if task.due else "never"
    console.print(f"[green]✓[/green] {task.name} due {rule.to_text()} [dim]({when})[/dim]")


def handle_category_command(result: ParseResult) -> None:
    """
    Handle 'category' command.

    Usage:
        category ab12 work
        category ab12         (clears the category)
    """
    if not result.args:
        _usage("Task ID required", "category <id> [name]")
        return

    try:
        task = service.set_category(result.args[0], " ".join(result.args[1:]))
    except TaskmanError as e:
        _error(e)
        return
    label = f"#{task.info.category}" if task.info.category else "no category"
    console.print(f"[green]✓[/green] {task.name} is now {label}")


def handle_repeat_command(result: ParseResult) -> None:
    """
    Handle 'repeat' command.

    Usage:
        repeat ab12
        repeat ab12 --off
    """
    if not result.args:
        _usage("Task ID required", "repeat <id> [--off]")
        return

    try:
        task = service.set_repeats(result.args[0], not result.flags.get("off", False))
    except TaskmanError as e:
        _error(e)
        return
    state = "repeats" if task.info.repeats else "no longer repeats"
    console.print(f"[green]✓[/green] {task.name} {state}")


def handle_log_command(result: ParseResult) -> None:
    """
    Handle 'log' command.

    Usage:
        log ab12 25
    """
    if len(result.args) < 2:
        _usage("Task ID and minutes required", "log <id> <minutes>")
        return

    try:
        minutes = int(result.args[1])
    except ValueError:
        _usage(f"Invalid number of minutes: {result.args[1]}", "log <id> <minutes>")
        return

    try:
        task = service.log_time(result.args[0], minutes)
    except TaskmanError as e:
        _error(e)
        return
    total = format_duration(task.info.time_logged())
    console.print(f"[green]✓[/green] Logged {minutes}m on {task.name} [dim](total {total})[/dim]")


def handle_mv_command(result: ParseResult) -> None:
    """
    Handle 'mv' command.

    Usage:
        mv ab12 cd34           (into cd34)
        mv ab12 cd34 --above
        mv ab12 root           (back to top level)
    """
    if len(result.args) < 2:
        _usage("Task ID and anchor required", "mv <id> <anchor> [--above|--below|--into]")
        return

    positions = [p for p in Position if result.flags.get(p.value)]
    if len(positions) > 1:
        console.print("[red]Error:[/red] Use only one of --above, --below, --into")
        return
    position = positions[0] if positions else Position.INTO

    try:
        task = service.move_task(result.args[0], result.args[1], position)
    except TaskmanError as e:
        _error(e)
        return
    console.print(f"[blue]→[/blue] Moved {task.name} {position.value} {result.args[1]}")


def handle_rm_command(result: ParseResult) -> None:
    """
    Handle 'rm' command - delete a task and its subtasks.

    Usage:
        rm ab12
        rm ab12 -y
    """
    if not result.args:
        _usage("Task ID required", "rm <id> [--yes]")
        return

    try:
        task = service.get_task(result.args[0])
        subtasks = sum(1 for _ in task.walk()) - 1
        if subtasks and not result.flags.get("yes"):
            if not ask_confirmation(f"Delete {task.name} and {subtasks} subtask(s)?"):
                console.print("[yellow]Cancelled[/yellow]")
                return
        count = service.delete_task(task.id)
    except TaskmanError as e:
        _error(e)
        return
    console.print(f"[red]✗[/red] Deleted {task.name} [dim]({count} task(s))[/dim]")


def handle_archive_command(result: ParseResult) -> None:
    """
    Handle 'archive' command.

    Usage:
        archive ab12
        archive ab12 --undo
    """
    if not result.args:
        _usage("Task ID required", "archive <id> [--undo]")
        return

    try:
        task = service.set_archived(result.args[0], not result.flags.get("undo", False))
    except TaskmanError as e:
        _error(e)
        return
    state = "Archived" if task.info.archived else "Restored"
    console.print(f"[green]✓[/green] {state} {task.name}")


def handle_note_command(result: ParseResult) -> None:
    """
    Handle 'note' command.

    Usage:
        note ab12 Ask Sam about the budget
    """
    if not result.args:
        _usage("Task ID required", "note <id> <text>")
        return

    try:
        task = service.set_notes(result.args[0], " ".join(result.args[1:]))
    except TaskmanError as e:
        _error(e)
        return
    console.print(f"[green]✓[/green] Updated notes of {task.name}")


def _set_folded(result: ParseResult, folded: bool) -> None:
    if not result.args:
        _usage("Task ID required", f"{result.command} <id>")
        return

    try:
        task = service.set_folded(result.args[0], folded)
    except TaskmanError as e:
        _error(e)
        return
    state = "Folded" if folded else "Unfolded"
    console.print(f"[green]✓[/green] {state} {task.name}")


def handle_fold_command(result: ParseResult) -> None:
    """Handle 'fold' command - hide a task's subtasks in the outline."""
    _set_folded(result, True)


def handle_unfold_command(result: ParseResult) -> None:
    """Handle 'unfold' command - show a task's subtasks again."""
    _set_folded(result, False)
