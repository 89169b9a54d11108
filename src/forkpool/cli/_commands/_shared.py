# pyright: reportExplicitAny=false
"""Helpers shared by the run and check commands.

Exit codes, JSON rendering of command output and the stderr error path all
live here so both commands fail the same way.
"""

from enum import IntEnum
from typing import Any, Literal, Never

import orjson
from rich.console import Console
from rich.markup import escape

# Command output before rendering; Any matches what orjson accepts
FormattableData = dict[str, Any]

OutputFormat = Literal["text", "json"]

__all__ = [
    "ExitCode",
    "FormattableData",
    "OutputFormat",
    "exit_with_error",
    "format_json",
    "get_error_console",
    "print_json",
]


class ExitCode(IntEnum):
    """Process exit statuses of the forkpool command.

    Clean pool termination and a successful check both exit with SUCCESS.
    """

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    INTERNAL_ERROR = 5


def format_json(data: FormattableData, *, indent: bool = True) -> str:
    """Serialize command output with orjson.

    Callables and paths have no JSON form, so they are rendered with ``str``.

    Args:
        data: Command output.
        indent: Pretty-print with two-space indentation.

    Returns:
        The JSON document.
    """
    options = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, default=str, option=options).decode("utf-8")


def print_json(data: FormattableData, console: Console) -> None:
    """Write command output as JSON, untouched by rich markup or wrapping."""
    console.print(format_json(data), markup=False, highlight=False, soft_wrap=True)


def get_error_console() -> Console:
    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Report a failure on stderr and exit.

    Args:
        message: Failure description. Square brackets in it are printed
            literally.
        code: Exit status.
        console: Console to print to. Defaults to a new stderr console.

    Raises:
        SystemExit: Always, with ``code``.
    """
    console = console or get_error_console()
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    raise SystemExit(code)
