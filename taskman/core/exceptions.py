"""
FILE: taskman/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - TaskmanError (base exception)
  - TaskNotFoundError
  - AlreadyExistsError
  - ParentNotFoundError
  - AnchorNotFoundError
  - AmbiguousIdError
  - InvariantViolationError
  - ParseFailureError
  - InvalidInputError
  - StoreLoadError
  - StoreSaveError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from TaskmanError for easy catching
  - Exceptions include context (IDs, text) for helpful error messages
  - Store and service layers raise these, UI layers catch and display
"""


class TaskmanError(Exception):
    """Base exception for all Taskman errors."""
    pass


class TaskNotFoundError(TaskmanError):
    """Task with given ID doesn't exist."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class AlreadyExistsError(TaskmanError):
    """A task with the given ID already exists (the root ID is always taken)."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} already exists")


class ParentNotFoundError(TaskmanError):
    """The parent of a task taking part in a move cannot be resolved."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Parent of task {task_id} not found")


class AnchorNotFoundError(TaskmanError):
    """Anchor task of a move doesn't exist."""

    def __init__(self, anchor_id: str):
        self.anchor_id = anchor_id
        super().__init__(f"Anchor task {anchor_id} not found")


class AmbiguousIdError(TaskmanError):
    """An ID prefix matches more than one task."""

    def __init__(self, prefix: str, matches):
        self.prefix = prefix
        self.matches = sorted(matches)
        super().__init__(
            f"ID '{prefix}' is ambiguous, matches: {', '.join(self.matches)}"
        )


class InvariantViolationError(TaskmanError):
    """Operation would break a tree invariant or a task rule."""

    def __init__(self, message: str):
        super().__init__(message)


class ParseFailureError(TaskmanError):
    """Date text matches no known format."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Could not parse date '{text}'")


class InvalidInputError(TaskmanError):
    """Input validation failed."""

    def __init__(self, message: str):
        super().__init__(message)


class StoreLoadError(TaskmanError):
    """Task file could not be read or is malformed."""

    def __init__(self, message: str):
        super().__init__(message)


class StoreSaveError(TaskmanError):
    """Task file could not be written."""

    def __init__(self, message: str):
        super().__init__(message)
