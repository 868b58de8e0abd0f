"""Rich consoles and the ``bl.*`` theme.

Results are rendered into a StringIO-backed console and returned as a
string, so ``format_result`` stays a pure ``ServiceResult -> str`` step.
Notifications go straight to a stream console (stderr by default). Rich
drops colour on its own when the target is not a terminal.
"""

from __future__ import annotations

import sys
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.theme import Theme

if TYPE_CHECKING:
    from typing import TextIO

DEFAULT_WIDTH = 120


class BufferedConsole(Console):
    """A console whose output is kept in memory for :func:`get_output`."""


BACKLINK_THEME = Theme(
    {
        # status
        "bl.ok": "bold green",
        "bl.error": "bold red",
        "bl.warning": "bold yellow",
        "bl.info": "cyan",
        "bl.op": "bold cyan",
        "bl.key": "dim",
        # locations
        "bl.path": "bold blue",
        "bl.line": "magenta",
        # link parts
        "bl.target": "yellow",
        "bl.display": "bold",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> BufferedConsole:
    """A buffered console for rendering one result; read it back with :func:`get_output`."""
    return BufferedConsole(
        file=StringIO(),
        theme=BACKLINK_THEME,
        no_color=no_color,
        highlight=False,
        width=width or DEFAULT_WIDTH,
    )


def create_stream_console(file: TextIO | None = None) -> Console:
    """A console writing through to *file* (stderr when omitted), lines never wrapped."""
    return Console(
        file=file or sys.stderr,
        theme=BACKLINK_THEME,
        highlight=False,
        soft_wrap=True,
    )


def get_output(console: Console) -> str:
    """Everything printed so far to a console from :func:`create_console`."""
    if not isinstance(console, BufferedConsole):
        raise TypeError("console was not created by create_console()")
    buffer = console.file
    assert isinstance(buffer, StringIO)
    return buffer.getvalue()
