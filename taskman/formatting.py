"""
FILE: taskman/formatting.py
PURPOSE: Shared formatting utilities for CLI and REPL output
EXPORTS:
  - TaskFormatter: Class for formatting task views
  - days_until(due, now) -> int
  - format_due(due, now) -> str
  - due_style(due, now) -> str
  - format_duration(delta) -> str
  - format_rules(rules) -> str
DEPENDENCIES:
  - rich (tree, table and text rendering)
  - json (for JSON serialization)
  - taskman.core.models (TaskView)
  - taskman.core.constants (DUE_URGENT_DAYS, DUE_SOON_DAYS, ROOT_ID)
NOTES:
  - Centralized formatting logic for consistency
  - Used by both CLI and REPL
  - Due dates are shown relative to the start of today: overdue, today,
    1 day, N days, N weeks (under a month), N months
"""

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .core.constants import DUE_SOON_DAYS, DUE_URGENT_DAYS, ROOT_ID
from .core.models import TaskView
from .core.recurrence import start_of_day


def days_until(due: datetime, now: Optional[datetime] = None) -> int:
    """Whole days between the start of today and due (negative when overdue)."""
    today = start_of_day(now or datetime.now())
    return (due - today) // timedelta(days=1)


def format_due(due: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Human-readable distance to a due date.

    Examples:
        >>> format_due(None)
        ""
        >>> format_due(datetime(2026, 1, 3), now=datetime(2026, 1, 1, 15))
        "2 days"
    """
    if due is None:
        return ""

    days = days_until(due, now)
    if days < 0:
        return "overdue"
    if days == 0:
        return "today"
    if days == 1:
        return "1 day"
    if days < 14:
        return f"{days} days"
    if days < 31:
        return f"{days // 7} weeks"
    months = days // 31
    return f"{months} month{'s' if months > 1 else ''}"


def due_style(due: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Rich style for a due date: red when due today or overdue, fading as it gets further."""
    if due is None:
        return "dim"
    days = days_until(due, now)
    if days < 1:
        return "bold red"
    if days < DUE_URGENT_DAYS:
        return "dark_orange"
    if days < DUE_SOON_DAYS:
        return "yellow"
    return "dim"


def format_duration(delta: timedelta) -> str:
    """Format tracked time as "1h 05m" (or "12m" below an hour)."""
    minutes = int(delta.total_seconds() // 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def format_rules(rules) -> str:
    """Comma-separated text of due rules ("-" when there are none)."""
    return ", ".join(rule.to_text() for rule in rules) or "-"


class TaskFormatter:
    """Centralized task display formatting."""

    @staticmethod
    def label(view: TaskView, now: Optional[datetime] = None) -> Text:
        """
        One-line label: status icon, name, due date, category and ID.

        Args:
            view: Task to label
            now: Reference for relative due dates

        Returns:
            Rich Text ready to print or put in a tree node
        """
        text = Text()
        if view.done:
            text.append("✓ ", style="green")
            text.append(view.name, style="dim strike")
        else:
            text.append("↻ " if view.info.repeats else "• ", style="bold" if view.info.repeats else "dim")
            text.append(view.name, style="bold")

        due = format_due(view.due, now) if not view.done else ""
        if due:
            text.append(" • ", style="dim")
            text.append(due, style=due_style(view.due, now))
        if view.info.category:
            text.append(f" #{view.info.category}", style="magenta")
        if view.info.archived:
            text.append(" [archived]", style="dim")
        text.append(f"  {view.id}", style="cyan dim")
        return text

    @staticmethod
    def create_tree(root: TaskView, now: Optional[datetime] = None, title: str = "Tasks") -> Tree:
        """
        Rich tree of a task and its subtree.

        Folded tasks show a child count instead of their children.
        """
        label = Text(title, style="bold cyan") if root.id == ROOT_ID else TaskFormatter.label(root, now)
        tree = Tree(label, guide_style="dim")
        TaskFormatter._add_children(tree, root, now)
        return tree

    @staticmethod
    def _add_children(branch: Tree, view: TaskView, now: Optional[datetime]) -> None:
        for child in view.children:
            label = TaskFormatter.label(child, now)
            if child.info.folded and child.children:
                label.append(f"  (+{len(child.children)})", style="dim")
                branch.add(label)
                continue
            TaskFormatter._add_children(branch.add(label), child, now)

    @staticmethod
    def create_table(
        views: List[TaskView],
        title: str = "Tasks",
        now: Optional[datetime] = None,
        show_history: bool = False,
    ) -> Table:
        """
        Create Rich table for a flat list of tasks.

        Args:
            views: Tasks to display
            title: Table title
            now: Reference for relative due dates
            show_history: Add a column with the last completion (for habits)

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Due", no_wrap=True)
        table.add_column("Category", style="magenta")
        if show_history:
            table.add_column("Last done", style="green", no_wrap=True)
            table.add_column("Streak", justify="right")

        for view in views:
            row = [
                view.id,
                view.name,
                Text(format_due(view.due, now) or "-", style=due_style(view.due, now)),
                view.info.category or "-",
            ]
            if show_history:
                last = view.info.last_completed
                row.append(last.strftime("%d/%m/%Y") if last else "-")
                row.append(str(len(view.info.completion_history)))
            table.add_row(*row)

        return table

    @staticmethod
    def create_detail(view: TaskView, now: Optional[datetime] = None) -> Table:
        """Two-column key/value table for a single task."""
        info = view.info
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")

        table.add_row("ID", view.id)
        table.add_row("Name", info.name)
        table.add_row("Status", "[green]done[/green]" if view.done else "open")
        table.add_row("Category", info.category or "-")
        table.add_row("Repeats", "yes" if info.repeats else "no")
        table.add_row("Rules", format_rules(info.due_rules))
        table.add_row(
            "Due",
            Text(
                view.due.strftime("%a %d %b %Y") + f" ({format_due(view.due, now)})" if view.due else "-",
                style=due_style(view.due, now),
            ),
        )
        table.add_row("Created", info.created.strftime("%d/%m/%Y %H:%M"))
        if info.completion_history:
            table.add_row(
                "Completed",
                ", ".join(at.strftime("%d/%m/%Y") for at in info.completion_history[-5:]),
            )
        if info.logs:
            table.add_row("Time logged", format_duration(info.time_logged()))
        if view.children:
            done = sum(1 for child in view.children if child.done)
            table.add_row("Subtasks", f"{done}/{len(view.children)} done")
        if info.archived:
            table.add_row("Archived", "yes")
        if info.notes:
            table.add_row("Notes", info.notes)
        return table

    @staticmethod
    def to_json_dict(view: TaskView) -> Dict[str, Any]:
        """
        Convert a task (without its subtree) to a JSON-serializable dict.

        Adds the computed fields (done, effective due, parent, child IDs) to
        the stored data.
        """
        data = view.info.to_dict()
        data.update(
            {
                "id": view.id,
                "parent": view.parent_id,
                "children": [child.id for child in view.children],
                "done": view.done,
                "due": view.due.isoformat() if view.due else None,
            }
        )
        return data

    @staticmethod
    def to_json_array(views: List[TaskView]) -> str:
        return json.dumps([TaskFormatter.to_json_dict(view) for view in views], indent=2)

    @staticmethod
    def to_raw_lines(views: List[TaskView], now: Optional[datetime] = None) -> List[str]:
        """
        Plain text lines, one per task, indented two spaces per tree level.

        Args:
            views: Tasks in display order
            now: Reference for relative due dates

        Returns:
            Lines like "ab12cd34: [✓] Buy milk (today)"
        """
        lines = []
        depth = {}
        for view in views:
            level = depth.get(view.parent_id, -1) + 1
            depth[view.id] = level
            marker = "✓" if view.done else " "
            due = format_due(view.due, now) if not view.done else ""
            suffix = f" ({due})" if due else ""
            lines.append(f"{'  ' * level}{view.id}: [{marker}] {view.name}{suffix}")
        return lines
