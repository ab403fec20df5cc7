"""
Console-capture harness for exercising programs in tests.

    harness = Harness(program)
    result = await harness.execute(["install", "left-pad", "--dev"])
    assert result.exit_code == 0
    assert "left-pad" in result.stdout

Each execute() call builds fresh in-memory rich consoles, passes them (and a
RichUi over them) into the parse call, and returns what was written to each.
Exceptions that escape the parse call are reported on the captured stderr with
exit code 1. SystemExit is reported through its code: None is 0, an integer is
kept, anything else is written to stderr and becomes 1.
"""
import io
import traceback
from typing import NamedTuple

from rich.console import Console

from .ui import RichUi


class Result(NamedTuple):
    stdout: str
    stderr: str
    exit_code: int


class Harness:
    """
    Runs a Builder or Command with captured output.

    Parameters
    - program: anything exposing an async parse(tokens, ui=, stdout=, stderr=).
    - width: console width used for rendering (keeps boxes stable).
    """

    def __init__(self, program, /, *, width=120):
        if not callable(getattr(program, "parse", None)):
            raise TypeError("harness program must provide a parse() method")
        self._program = program
        self._width = width

    def _console(self, file):
        return Console(file=file, width=self._width, color_system=None, force_terminal=False, highlight=False)

    async def execute(self, tokens, /):
        stdout, stderr = io.StringIO(), io.StringIO()
        consoles = self._console(stdout), self._console(stderr)
        try:
            exit_code = await self._program.parse(
                list(tokens),
                ui=RichUi(*consoles, colorful=False),
                stdout=consoles[0],
                stderr=consoles[1],
            )
        except SystemExit as termination:
            match termination.code:
                case None:
                    exit_code = 0
                case int(code):
                    exit_code = code
                case code:
                    stderr.write(f"{code}\n")
                    exit_code = 1
        except Exception as exception:
            stderr.write("".join(traceback.format_exception(exception)))
            exit_code = 1
        return Result(stdout.getvalue(), stderr.getvalue(), exit_code)


__all__ = (
    "Result",
    "Harness",
)
