"""
FILE: taskman/cli/commands/tasks.py
PURPOSE: Task commands (add, ls, show, rename, done, due, category, repeat, log, mv, rm, archive, note)
"""

import json
from typing import Optional

import typer

from ..main import app, console, error_console, fail
from ...core import service
from ...core.constants import DEFAULT_VIEW, ROOT_ID, VIEW_HABITS, VIEW_OUTLINE, VIEW_TODAY
from ...core.exceptions import TaskmanError
from ...core.models import Position
from ...formatting import TaskFormatter, format_due, format_duration


@app.command()
def add(
    name: str = typer.Argument(..., help="Task name"),
    under: Optional[str] = typer.Option(None, "--under", "-u", help="Parent task ID"),
    due_text: Optional[str] = typer.Option(None, "--due", "-d", help="Due date, e.g. 'tomorrow', 'fri', '1st jan'"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new task.

    Example:
        taskman add "Write documentation"
        taskman add "Proofread" --under ab12 --due "in 3 days"
    """
    try:
        task = service.create_task(name, parent_ref=under, due_text=due_text)
    except TaskmanError as e:
        fail(e)

    if json_output:
        console.print(json.dumps(TaskFormatter.to_json_dict(task), indent=2))
    elif raw:
        console.print(f"{task.id}: {task.name}")
    else:
        due = format_due(task.due)
        suffix = f" [dim](due {due})[/dim]" if due else ""
        console.print(f"[green]✓ Created task [bold]{task.id}[/bold]:[/green] {task.name}{suffix}")


@app.command()
def ls(
    view: str = typer.Option(DEFAULT_VIEW, "--view", "-v", help="outline, today or habits"),
    include_all: bool = typer.Option(False, "--all", "-a", help="Include done and archived tasks"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List tasks as an outline, or the today/habits views.

    Example:
        taskman ls
        taskman ls --view today
        taskman ls --all --json
    """
    try:
        result = service.list_view(view, include_all=include_all)
    except TaskmanError as e:
        fail(e)

    if view == VIEW_OUTLINE:
        views = [task for task in result.walk() if task.id != ROOT_ID]
    else:
        views = result

    if json_output:
        console.print(TaskFormatter.to_json_array(views))
        return
    if raw:
        for line in TaskFormatter.to_raw_lines(views):
            console.print(line, markup=False, highlight=False)
        return

    if not views:
        console.print("[dim]No tasks found[/dim]")
        return

    if view == VIEW_OUTLINE:
        console.print(TaskFormatter.create_tree(result))
    elif view == VIEW_TODAY:
        console.print(TaskFormatter.create_table(views, title="Due today"))
    elif view == VIEW_HABITS:
        console.print(TaskFormatter.create_table(views, title="Habits", show_history=True))
    console.print(f"\n[dim]Total: {len(views)} task(s)[/dim]")


@app.command()
def show(
    task_id: str = typer.Argument(..., help="Task ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    View full task details, including subtasks.

    Example:
        taskman show ab12
    """
    try:
        task = service.get_task(task_id)
    except TaskmanError as e:
        fail(e)

    if json_output:
        console.print(json.dumps(TaskFormatter.to_json_dict(task), indent=2))
        return

    console.print(TaskFormatter.create_detail(task))
    if task.children:
        console.print()
        console.print(TaskFormatter.create_tree(task))


@app.command()
def rename(
    task_id: str = typer.Argument(..., help="Task ID"),
    name: str = typer.Argument(..., help="New task name"),
):
    """
    Rename a task.

    Example:
        taskman rename ab12 "Updated name"
    """
    try:
        task = service.rename_task(task_id, name)
    except TaskmanError as e:
        fail(e)
    console.print(f"[blue]✎[/blue] Renamed task {task.id}: {task.name}")


@app.command()
def done(
    task_id: str = typer.Argument(..., help="Task ID to complete"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Complete a task and all of its subtasks.

    A parent whose subtasks are now all done is completed too. Repeating
    tasks can only be completed once due, and come back with a new due date.

    Example:
        taskman done ab12
    """
    try:
        task = service.complete_task(task_id)
    except TaskmanError as e:
        fail(e)

    if json_output:
        console.print(json.dumps(TaskFormatter.to_json_dict(task), indent=2))
    elif task.info.repeats:
        console.print(f"[green]✓[/green] Completed: {task.name} [dim](next due {format_due(task.due) or 'never'})[/dim]")
    else:
        console.print(f"[green]✓[/green] Completed: {task.name}")


@app.command()
def due(
    task_id: str = typer.Argument(..., help="Task ID"),
    text: Optional[str] = typer.Argument(None, help="Due date text (prompted for when omitted)"),
    clear: bool = typer.Option(False, "--clear", help="Remove the due date"),
):
    """
    Set or clear a task's due date.

    Accepted formats: today, tomorrow, mon..sun, 3, +3, in 2 weeks, 1d ago,
    20/04, 5 jan, 1st jan (every year), 21st (every month).

    Example:
        taskman due ab12 tomorrow
        taskman due ab12 "1st jan"
        taskman due ab12 --clear
        taskman due ab12            # interactive prompt with preview
    """
    try:
        if clear:
            task = service.clear_due(task_id)
            console.print(f"[green]✓[/green] Cleared due date of {task.name}")
            return

        if text is None:
            from ...repl.dateprompt import prompt_due_date

            current = service.get_task(task_id)
            text = prompt_due_date(f"Due date for '{current.name}': ")
            if text is None:
                console.print("[yellow]Cancelled[/yellow]")
                return

        task = service.set_due_from_text(task_id, text)
    except TaskmanError as e:
        fail(e)

    rule = task.info.due_rules[0]
    when = task.due.strftime("%a %d %b %Y") if task.due else "never"
    console.print(f"[green]✓[/green] {task.name} due {rule.to_text()} [dim]({when})[/dim]")


@app.command()
def category(
    task_id: str = typer.Argument(..., help="Task ID"),
    name: str = typer.Argument(..., help="Category name (empty string clears it)"),
):
    """
    Set the category of a task and all of its subtasks.

    Example:
        taskman category ab12 work
    """
    try:
        task = service.set_category(task_id, name)
    except TaskmanError as e:
        fail(e)
    label = f"#{task.info.category}" if task.info.category else "no category"
    console.print(f"[green]✓[/green] {task.name} is now {label}")


@app.command()
def repeat(
    task_id: str = typer.Argument(..., help="Top-level task ID"),
    off: bool = typer.Option(False, "--off", help="Stop repeating"),
):
    """
    Make a top-level task repeat (a habit), or stop it repeating.

    Example:
        taskman repeat ab12
        taskman due ab12 mon
    """
    try:
        task = service.set_repeats(task_id, not off)
    except TaskmanError as e:
        fail(e)
    state = "repeats" if task.info.repeats else "no longer repeats"
    console.print(f"[green]✓[/green] {task.name} {state}")


@app.command()
def log(
    task_id: str = typer.Argument(..., help="Task ID (leaf tasks only)"),
    minutes: int = typer.Argument(..., help="Minutes worked, ending now"),
):
    """
    Log time spent on a task.

    Example:
        taskman log ab12 25
    """
    try:
        task = service.log_time(task_id, minutes)
    except TaskmanError as e:
        fail(e)
    total = format_duration(task.info.time_logged())
    console.print(f"[green]✓[/green] Logged {minutes}m on {task.name} [dim](total {total})[/dim]")


@app.command()
def mv(
    task_id: str = typer.Argument(..., help="Task ID to move"),
    anchor: str = typer.Argument(..., help="Anchor task ID ('root' for top level)"),
    above: bool = typer.Option(False, "--above", help="Place right above the anchor"),
    below: bool = typer.Option(False, "--below", help="Place right below the anchor"),
    into: bool = typer.Option(False, "--into", help="Make it the anchor's last subtask (default)"),
):
    """
    Move a task (with its subtasks) relative to another task.

    Example:
        taskman mv ab12 cd34            # into cd34
        taskman mv ab12 cd34 --above
        taskman mv ab12 root            # back to top level
    """
    chosen = [flag for flag, on in ((Position.ABOVE, above), (Position.BELOW, below), (Position.INTO, into)) if on]
    if len(chosen) > 1:
        error_console.print("[red]Error:[/red] Use only one of --above, --below, --into")
        raise typer.Exit(1)
    position = chosen[0] if chosen else Position.INTO

    try:
        task = service.move_task(task_id, anchor, position)
    except TaskmanError as e:
        fail(e)
    console.print(f"[blue]→[/blue] Moved {task.name} {position.value} {anchor}")


@app.command()
def rm(
    task_id: str = typer.Argument(..., help="Task ID to delete"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
):
    """
    Delete a task and all of its subtasks permanently.

    Confirms first when the task has subtasks (use -y to skip).

    Example:
        taskman rm ab12
        taskman rm ab12 --yes
    """
    try:
        task = service.get_task(task_id)
        subtasks = sum(1 for _ in task.walk()) - 1
        if subtasks and not yes:
            console.print(f"[yellow]{task.name} has {subtasks} subtask(s) that will be deleted too[/yellow]")
            if not typer.confirm("Continue?", default=False):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)
        count = service.delete_task(task.id)
    except TaskmanError as e:
        fail(e)
    console.print(f"[red]✗[/red] Deleted {task.name} [dim]({count} task(s))[/dim]")


@app.command()
def archive(
    task_id: str = typer.Argument(..., help="Task ID"),
    undo: bool = typer.Option(False, "--undo", help="Restore an archived task"),
):
    """
    Hide a task (and its subtasks) from default listings.

    Example:
        taskman archive ab12
        taskman ls --all
        taskman archive ab12 --undo
    """
    try:
        task = service.set_archived(task_id, not undo)
    except TaskmanError as e:
        fail(e)
    state = "Archived" if task.info.archived else "Restored"
    console.print(f"[green]✓[/green] {state} {task.name}")


@app.command()
def note(
    task_id: str = typer.Argument(..., help="Task ID"),
    text: str = typer.Argument(..., help="Note text (empty string clears it)"),
):
    """
    Attach a note to a task.

    Example:
        taskman note ab12 "Ask Sam about the budget"
    """
    try:
        task = service.set_notes(task_id, text)
    except TaskmanError as e:
        fail(e)
    console.print(f"[green]✓[/green] Updated notes of {task.name}")
