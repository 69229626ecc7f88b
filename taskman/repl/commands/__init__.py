"""
FILE: taskman/repl/commands/__init__.py
PURPOSE: REPL command handler modules
"""

# Export all command handlers for easy importing
from .tasks import (
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
)
from .system import (
    handle_help_command,
    handle_clear_command,
)

__all__ = [
    "handle_add_command",
    "handle_ls_command",
    "handle_today_command",
    "handle_habits_command",
    "handle_show_command",
    "handle_rename_command",
    "handle_done_command",
    "handle_due_command",
    "handle_category_command",
    "handle_repeat_command",
    "handle_log_command",
    "handle_mv_command",
    "handle_rm_command",
    "handle_archive_command",
    "handle_note_command",
    "handle_fold_command",
    "handle_unfold_command",
    "handle_help_command",
    "handle_clear_command",
]
