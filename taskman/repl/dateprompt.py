"""
FILE: taskman/repl/dateprompt.py
PURPOSE: Interactive due date prompt that re-parses the input on every keystroke
EXPORTS:
  - DueDateValidator (prompt_toolkit Validator)
  - preview_due(text, now) -> str
  - prompt_due_date(message, default, now) -> str | None
DEPENDENCIES:
  - prompt_toolkit (prompt, validation, bottom toolbar)
  - taskman.core.dateparse (try_parse_date)
NOTES:
  - The bottom toolbar shows ✓ and the resolved date while the text parses,
    ✗ while it doesn't, nothing while the input is empty
  - Enter is refused while the text doesn't parse (validate_while_typing)
  - Empty input, Ctrl+C and Ctrl+D all cancel and return None
"""

import html
from datetime import datetime
from typing import Optional

from prompt_toolkit import prompt
from prompt_toolkit.application.current import get_app
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.validation import ValidationError, Validator

from ..core.dateparse import try_parse_date


class DueDateValidator(Validator):
    """Accept empty input (cancel) or text parse_date() understands."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now

    def validate(self, document: Document) -> None:
        text = document.text.strip()
        if not text:
            return
        if try_parse_date(text, self.now or datetime.now()) is None:
            raise ValidationError(
                message=f"Can't read '{text}' as a date",
                cursor_position=len(document.text),
            )


def preview_due(text: str, now: Optional[datetime] = None) -> str:
    """
    One-line preview of what a due date text resolves to.

    Args:
        text: Current prompt input
        now: Reference instant (defaults to datetime.now())

    Returns:
        "" for empty input, "✗" when it doesn't parse, otherwise
        "✓ <rule> → <date>" (or "✓ no due date" for a zero offset)

    Examples:
        >>> preview_due("tomorrow", now=datetime(2026, 3, 2, 9))
        "✓ in 1 day → Tue 03 Mar 2026"
    """
    text = text.strip()
    if not text:
        return ""

    now = now or datetime.now()
    rule = try_parse_date(text, now)
    if rule is None:
        return "✗"

    due = rule.next(now)
    if due is None:
        return "✓ no due date"
    return f"✓ {rule.to_text()} → {due.strftime('%a %d %b %Y')}"


def _toolbar(now: Optional[datetime]):
    def render() -> HTML:
        preview = preview_due(get_app().current_buffer.text, now)
        color = "#ff5047" if preview.startswith("✗") else "#73f59f"
        return HTML(f"<style fg='{color}'> {html.escape(preview)} </style>")
    return render


def prompt_due_date(
    message: str = "due: ",
    default: str = "",
    now: Optional[datetime] = None,
) -> Optional[str]:
    """
    Ask for a due date, previewing the parsed result while typing.

    Args:
        message: Prompt text
        default: Pre-filled input (e.g. the current rule's text)
        now: Reference instant for the preview

    Returns:
        The accepted text (guaranteed to parse), or None if cancelled
    """
    try:
        text = prompt(
            message,
            default=default,
            validator=DueDateValidator(now),
            validate_while_typing=True,
            bottom_toolbar=_toolbar(now),
        )
    except (KeyboardInterrupt, EOFError):
        return None

    text = text.strip()
    return text or None
