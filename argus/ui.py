"""
Terminal UI capability backed by rich.

RichUi is what middleware, handlers and faults talk to when they want to show
something to the user:
- colors: a Colors painter (or None when color is off) producing ANSI text;
- box(text, title=None, stderr=False): a rounded panel around text;
- table(rows, head=...): a table of mappings, one column per key; nested
  mappings and lists are shown as compact JSON.

Painted strings carry ANSI escapes; box() parses them back with
Text.from_ansi, so widths are always measured without the escapes.
"""
import json
from collections.abc import Mapping, Sequence

from rich.box import ROUNDED
from rich.color import ColorSystem
from rich.console import Console
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .faults import TableHeaderMismatchError
from .utils import *


class Colors:
    """
    ANSI painter: every method wraps text in the escapes of one style.
    """

    def _paint(self, style, text):
        return Style.parse(style).render(str(text), color_system=ColorSystem.STANDARD)

    def bold(self, text, /):
        return self._paint("bold", text)

    def dim(self, text, /):
        return self._paint("dim", text)

    def red(self, text, /):
        return self._paint("red", text)

    def green(self, text, /):
        return self._paint("green", text)

    def yellow(self, text, /):
        return self._paint("yellow", text)

    def blue(self, text, /):
        return self._paint("blue", text)

    def magenta(self, text, /):
        return self._paint("magenta", text)

    def cyan(self, text, /):
        return self._paint("cyan", text)


class RichUi:
    """
    UI capability writing to two rich consoles (stdout and stderr).

    Parameters
    - console: standard output console (Console() when Unset).
    - stderr: error console (Console(stderr=True) when Unset).
    - colorful: expose a Colors painter through .colors.
    """
    console = mirror("console")
    stderr = mirror("stderr")

    def __init__(self, console=Unset, stderr=Unset, /, *, colorful=True):
        if not isinstance(console, Console | Unset):
            raise TypeError("ui 'console' must be a rich console")
        if not isinstance(stderr, Console | Unset):
            raise TypeError("ui 'stderr' must be a rich console")
        self._console = console if console is not Unset else Console()
        self._stderr = stderr if stderr is not Unset else Console(stderr=True)
        self._colors = Colors() if colorful else None

    @property
    def colors(self):
        return self._colors

    def box(self, text, /, title=None, *, stderr=False):
        """
        Print text inside a rounded panel, titled when a title is given.
        """
        console = self._stderr if stderr else self._console
        console.print(Panel(
            Text.from_ansi(str(text)),
            title=Text.from_ansi(title) if title is not None else None,
            title_align="left",
            box=ROUNDED,
            expand=False,
        ))

    def table(self, rows, /, *, head=Unset):
        """
        Print a sequence of mappings as a table, one column per key of the
        first row. head overrides the column titles; an empty head counts as
        no head. With no rows, head alone is printed as an empty table.

        Raises
        - TableHeaderMismatchError: head and columns differ in length.
        """
        if not isinstance(rows, Sequence) or not all(isinstance(row, Mapping) for row in rows):
            raise TypeError("table() argument must be a sequence of mappings")

        columns = list(rows[0]) if rows else []
        head = list(coalesce(head, None) or columns)
        if columns and len(head) != len(columns):
            raise TableHeaderMismatchError(
                "Header count does not match number of columns.",
                details=f"Expected {len(columns)} header(s) but received {len(head)}.",
                hint="Provide one header per column or omit the headers.",
            )
        if not head:
            return

        table = Table(box=ROUNDED, header_style="bold" if self._colors else "")
        for title in head:
            table.add_column(Text(str(title)))
        for row in rows:
            table.add_row(*(Text(_cell(row.get(column))) for column in columns))
        self._console.print(table)


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping) or isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        try:
            return json.dumps(value, separators=(",", ":"), default=str)
        except ValueError:  # circular reference
            return str(value)
    return str(value)


__all__ = (
    "Colors",
    "RichUi",
)
