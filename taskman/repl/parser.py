"""
FILE: taskman/repl/parser.py
PURPOSE: Parse user input into commands and arguments for REPL
EXPORTS:
  - ParseResult (dataclass for parsed commands)
  - parse_command(input_str) -> ParseResult
  - BOOLEAN_FLAGS (flags that never take a value)
DEPENDENCIES:
  - shlex (for shell-like parsing with quotes)
  - dataclasses (for ParseResult)
NOTES:
  - Handles quoted strings: add "task with spaces"
  - Boolean flags (--all, --above, ...) never swallow the next token, so
    "mv ab --above cd" works; other flags take the next token as value
  - -y is an alias for --yes
  - Case-insensitive command names
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Union

BOOLEAN_FLAGS = frozenset(
    {"all", "json", "raw", "yes", "clear", "off", "undo", "above", "below", "into"}
)

SHORT_FLAGS = {"-y": "yes", "-a": "all"}


@dataclass
class ParseResult:
    """
    Result of parsing a REPL command.

    Attributes:
        command: The command name (e.g., "add", "ls", "done")
        args: Positional arguments (e.g., ["task name", "ab12"])
        flags: Flag arguments as dict (e.g., {"view": "today", "all": True})
        raw_input: Original input string
    """
    command: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, Union[str, bool]] = field(default_factory=dict)
    raw_input: str = ""


def parse_command(input_str: str) -> ParseResult:
    """
    Parse REPL input into command, args, and flags.

    Examples:
        >>> parse_command('add "Buy milk" --due tomorrow')
        ParseResult(command="add", args=["Buy milk"], flags={"due": "tomorrow"})

        >>> parse_command("mv ab12 --above cd34")
        ParseResult(command="mv", args=["ab12", "cd34"], flags={"above": True})

    Args:
        input_str: Raw user input from REPL prompt

    Returns:
        ParseResult with command, args, and flags extracted

    Notes:
        - Unclosed quotes fall back to whitespace splitting
        - A value flag at the end of input becomes True
        - Empty input returns command="" with no args/flags
    """
    input_str = input_str.strip()
    if not input_str:
        return ParseResult(command="", raw_input=input_str)

    try:
        tokens = shlex.split(input_str)
    except ValueError:
        tokens = input_str.split()

    if not tokens:
        return ParseResult(command="", raw_input=input_str)

    command = tokens[0].lower()
    args = []
    flags = {}

    rest = iter(tokens[1:])
    for token in rest:
        if token in SHORT_FLAGS:
            flags[SHORT_FLAGS[token]] = True
        elif token.startswith("--") and len(token) > 2:
            name = token[2:].lower()
            if name in BOOLEAN_FLAGS:
                flags[name] = True
            else:
                flags[name] = next(rest, True)
        else:
            args.append(token)

    return ParseResult(command=command, args=args, flags=flags, raw_input=input_str)
