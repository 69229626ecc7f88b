"""
FILE: taskman/repl/completer.py
PURPOSE: Autocomplete logic for REPL commands and arguments
EXPORTS:
  - TaskmanCompleter (Completer for command/arg completion)
  - create_completer() -> TaskmanCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
  - taskman.core.service (for dynamic task ID completion)
NOTES:
  - Suggests command names when at start of line
  - Suggests task IDs (with names as meta) for commands expecting IDs,
    for the anchor of mv (plus "root") and after --under
  - Suggests view names after --view
  - Suggests common date phrases after "due <id>"
  - Suggests flags when the current word starts with "--"
  - Case-insensitive matching
"""

from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core.constants import ROOT_ID, VALID_VIEWS


class TaskmanCompleter(Completer):
    """
    Custom completer for the Taskman REPL.

    Provides context-aware autocomplete:
    - Command names at start of input
    - Task IDs where a command expects one
    - Flags and flag values
    """

    COMMANDS = [
        "add", "ls", "today", "habits", "show", "rename", "done", "due",
        "category", "repeat", "log", "mv", "rm", "archive", "note",
        "fold", "unfold", "help", "clear", "exit", "quit",
    ]

    # Commands whose first argument is a task ID
    ID_FIRST_COMMANDS = {
        "show", "rename", "done", "due", "category", "repeat", "log", "mv",
        "rm", "archive", "note", "fold", "unfold",
    }

    COMMAND_FLAGS = {
        "add": ["--under", "--due"],
        "ls": ["--view", "--all"],
        "today": ["--all"],
        "habits": ["--all"],
        "due": ["--clear"],
        "repeat": ["--off"],
        "mv": ["--above", "--below", "--into"],
        "rm": ["--yes"],
        "archive": ["--undo"],
    }

    DATE_SUGGESTIONS = [
        "today", "tomorrow", "monday", "tuesday", "wednesday", "thursday",
        "friday", "saturday", "sunday", "in 1 week", "in 2 weeks", "1st",
    ]

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on current input.

        Args:
            document: Current document with cursor position
            complete_event: Event that triggered completion

        Yields:
            Completion objects for matching suggestions
        """
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.split()
        starting_new_word = text_before_cursor.endswith(" ")

        # Typing the command itself
        if not words or (not starting_new_word and len(words) == 1):
            yield from self._complete_commands(words[0] if words else "")
            return

        command = words[0].lower()
        word = "" if starting_new_word else words[-1]
        previous = words[-1] if starting_new_word else words[-2]

        if word.startswith("--"):
            yield from self._complete_flags(command, word)
            return

        if previous == "--view":
            yield from self._complete_values(VALID_VIEWS, word, "view")
            return
        if previous == "--under":
            yield from self._complete_task_ids(word)
            return

        position = self._positional_index(words, starting_new_word)
        if command in self.ID_FIRST_COMMANDS and position == 0:
            yield from self._complete_task_ids(word)
        elif command == "mv" and position == 1:
            yield from self._complete_task_ids(word, include_root=True)
        elif command == "due" and position == 1:
            yield from self._complete_values(self.DATE_SUGGESTIONS, word, "due date")

    @staticmethod
    def _positional_index(words: List[str], starting_new_word: bool) -> int:
        """Index of the positional argument under the cursor (flags and their values skipped)."""
        from .parser import BOOLEAN_FLAGS

        done = words[1:] if starting_new_word else words[1:-1]
        index = 0
        skip_value = False
        for token in done:
            if skip_value:
                skip_value = False
            elif token.startswith("-"):
                skip_value = token.startswith("--") and token[2:] not in BOOLEAN_FLAGS
            else:
                index += 1
        return index

    def _complete_commands(self, word: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for command in self.COMMANDS:
            if command.startswith(word_lower):
                yield Completion(
                    command,
                    start_position=-len(word),
                    display=command,
                    display_meta=self._get_command_description(command),
                )

    def _complete_flags(self, command: str, word: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for flag in self.COMMAND_FLAGS.get(command, []):
            if flag.startswith(word_lower):
                yield Completion(flag, start_position=-len(word), display=flag)

    @staticmethod
    def _complete_values(values: Iterable[str], word: str, meta: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for value in values:
            if value.startswith(word_lower):
                # Quote multi-word values so the parser keeps them together
                text = f'"{value}"' if " " in value else value
                yield Completion(text, start_position=-len(word), display=value, display_meta=meta)

    def _complete_task_ids(self, word: str, include_root: bool = False) -> Iterable[Completion]:
        """
        Complete task IDs with the task name as label.
        """
        from ..core import service
        from ..core.exceptions import TaskmanError

        if include_root and ROOT_ID.startswith(word):
            yield Completion(ROOT_ID, start_position=-len(word), display=ROOT_ID, display_meta="top level")

        try:
            tasks = service.all_tasks()
        except TaskmanError:
            return

        for task in tasks[:200]:  # cap for responsiveness
            if task.id.startswith(word):
                name = task.name.strip()
                display_name = name if len(name) <= 40 else name[:37] + "..."
                meta = f"{display_name} ✓" if task.done else display_name
                yield Completion(
                    task.id,
                    start_position=-len(word),
                    display=task.id,
                    display_meta=meta,
                )

    @staticmethod
    def _get_command_description(command: str) -> str:
        """Get description for a command (shown in autocomplete menu)."""
        descriptions = {
            "add": "Create a new task",
            "ls": "Show the task outline",
            "today": "Tasks due today or overdue",
            "habits": "Repeating tasks",
            "show": "View full task details",
            "rename": "Rename a task",
            "done": "Complete a task",
            "due": "Set a due date",
            "category": "Categorize a task and its subtasks",
            "repeat": "Make a top-level task repeat",
            "log": "Log minutes worked",
            "mv": "Move a task",
            "rm": "Delete a task",
            "archive": "Hide a task from listings",
            "note": "Attach a note",
            "fold": "Collapse subtasks in the outline",
            "unfold": "Expand subtasks in the outline",
            "help": "Show available commands",
            "clear": "Clear the screen",
            "exit": "Exit REPL",
            "quit": "Exit REPL",
        }
        return descriptions.get(command, "")


def create_completer() -> TaskmanCompleter:
    """
    Create and return a TaskmanCompleter instance.

    Usage:
        completer = create_completer()
        session = PromptSession(completer=completer)
    """
    return TaskmanCompleter()
