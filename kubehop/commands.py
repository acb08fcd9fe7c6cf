"""Command-line routing: default sub-commands, alias arguments and version output."""

from __future__ import annotations

import platform
import sys
from typing import Iterable, Sequence

SET_CONTEXT_COMMAND = "set-context"
SET_PREVIOUS_CONTEXT_COMMAND = "set-previous-context"
SET_LAST_CONTEXT_COMMAND = "set-last-context"
PREVIOUS_CONTEXT_SHORTCUT = "-"
LAST_CONTEXT_SHORTCUT = "."

ALIAS_FORMAT_MESSAGE = "please provide the alias in the form ALIAS=CONTEXT_NAME"

KNOWN_COMMANDS = frozenset(
    {
        "set-context",
        "list-contexts",
        "ls",
        "clean",
        "namespace",
        "ns",
        "hooks",
        "history",
        "h",
        "set-previous-context",
        "set-last-context",
        "alias",
        "version",
        "gardener",
    }
)

# Flags that take no value; every other long flag written without "=" consumes the next argument.
_VALUELESS_FLAGS = frozenset({"debug", "no-index", "show-preview", "run-immediately", "help", "version"})
_VALUELESS_SHORT_FLAGS = frozenset({"h", "v"})


class UsageError(Exception):
    """Raised when a command is called with malformed arguments."""


def parse_alias_argument(args: Sequence[str]) -> tuple[str, str]:
    """Split the single ``ALIAS=CONTEXT_NAME`` argument into alias and context name."""
    if len(args) != 1 or "=" not in args[0]:
        raise UsageError(ALIAS_FORMAT_MESSAGE)
    parts = args[0].split("=")
    if len(parts) != 2:
        raise UsageError(ALIAS_FORMAT_MESSAGE)
    alias, context = parts
    return alias, context


def _first_command_word(argv: Sequence[str]) -> str | None:
    """Return the first argument that is neither a flag nor a flag's value."""
    remaining = list(argv)
    while remaining:
        arg = remaining.pop(0)
        if arg == "--":
            return None
        if arg.startswith("--"):
            if "=" not in arg and arg[2:] not in _VALUELESS_FLAGS and remaining:
                remaining.pop(0)
            continue
        if arg.startswith("-"):
            if (
                "=" not in arg
                and len(arg) == 2
                and arg[1:] not in _VALUELESS_SHORT_FLAGS
                and remaining
            ):
                remaining.pop(0)
            continue
        if arg:
            return arg
    return None


def resolve_command(
    argv: Sequence[str], known_commands: Iterable[str] | None = None
) -> list[str]:
    """Return the arguments to run, routing bare context names and shortcuts.

    An argument that names no known command is taken as a context name for
    ``set-context``; ``-`` switches to the previous and ``.`` to the last context.
    """
    commands = KNOWN_COMMANDS if known_commands is None else frozenset(known_commands)
    args = list(argv)
    if not args:
        return args

    resolved = args
    word = _first_command_word(args)
    if word is not None and word not in commands:
        resolved = [SET_CONTEXT_COMMAND, *args]

    if args[0] == PREVIOUS_CONTEXT_SHORTCUT:
        resolved = [SET_PREVIOUS_CONTEXT_COMMAND, *args]

    if args[0] == LAST_CONTEXT_SHORTCUT:
        resolved = [SET_LAST_CONTEXT_COMMAND, *args]

    return resolved


def version_text(version: str, build_date: str) -> str:
    """Render the version information shown by the ``version`` command."""
    return (
        "Switch:\n"
        f"\t\tversion     : {version}\n"
        f"\t\tbuild date  : {build_date}\n"
        f"\t\tpython      : {platform.python_version()}\n"
        f"\t\timplementation : {platform.python_implementation()}\n"
        f"\t\tplatform    : {sys.platform}/{platform.machine()}\n"
    )