"""
Dispatcher: resolve the target command of one parse call and run it.

Per call, starting at the node parse() was called on, with delegated=False:

1. "--help" present and no token outside "--" options: help for the root
   (for the current node once delegation happened). Exit status 0.
2. First token is not an option and the node has children: match it against
   child names and aliases and continue in the child (delegated=True), or
   fail with InvalidSubcommandError listing the child names.
3. "--help" anywhere in the remaining tokens: help for the current node (0).
4. Node with children, no handler, and nothing selected (no tokens or an
   option first): help for the current node, exit status 1.
5. Parse the tokens for the node; run the middleware chain and the handler
   when the node has one. Exit status 0.

Taxonomy faults raised on the way are printed (boxed through the UI, plain
text on the error console without one) and the call returns 1. Too many
positionals render the node's help and return 1. Every other exception
propagates unchanged.
"""
import difflib
import logging as logmod

from rich.box import ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .arguments import PREFIX
from .faults import CommandException, InvalidSubcommandError, TooManyArgumentsError
from .helper import render
from .middleware import Context, execute
from .parsing import parse
from .ui import RichUi
from .utils import *

logging = logmod.getLogger(__name__)

HELP = "--help"


def _invalid(command, token):
    names = list(command.children)
    hint = "Run with --help to list sub-commands."
    if matches := difflib.get_close_matches(token, names, n=1):
        hint = f"Did you mean '{matches[0]}'? " + hint
    return InvalidSubcommandError(
        f"Invalid sub-command '{token}'.",
        details=f"Available: {", ".join(names)}" if names else "No sub-commands available.",
        hint=hint,
        token=token,
        path=command.route,
    )


class Dispatcher:
    """
    Runs parse calls against compiled commands.

    Parameters
    - ui: UI capability; Unset builds a RichUi over the two consoles, None
      selects plain-text fault output.
    - stdout / stderr: rich consoles for help and plain-text faults.
    - colorful: style help output and enable ui colors.
    - fancy: wrap help output in a panel.
    """
    ui = mirror("ui")
    stdout = mirror("stdout")
    stderr = mirror("stderr")

    def __init__(self, *, ui=Unset, stdout=Unset, stderr=Unset, colorful=False, fancy=False):
        if not isinstance(stdout, Console | Unset):
            raise TypeError("dispatcher 'stdout' must be a rich console")
        if not isinstance(stderr, Console | Unset):
            raise TypeError("dispatcher 'stderr' must be a rich console")
        self._stdout = stdout if stdout is not Unset else Console()
        self._stderr = stderr if stderr is not Unset else Console(stderr=True)
        self._ui = RichUi(self._stdout, self._stderr, colorful=colorful) if ui is Unset else ui
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    async def dispatch(self, command, tokens, /):
        """
        Run one parse call and return its exit status.
        """
        try:
            return await self._route(command, list(tokens), delegated=False)
        except CommandException as fault:
            logging.debug("fault %s: %s", fault.label, fault.message)
            fault.print(self._ui, console=self._stderr)
            return 1
        except TooManyArgumentsError as exception:
            logging.debug("%s for %r", exception, exception.command)
            self.help(exception.command)
            return 1

    async def _route(self, command, tokens, /, *, delegated):
        logging.debug("routing %r with %r (delegated=%s)", command, tokens, delegated)

        if HELP in tokens and all(token.startswith(PREFIX) for token in tokens):
            self.help(command if delegated else command.root)
            return 0

        if tokens and not tokens[0].startswith(PREFIX) and command.children:
            try:
                child = command.lookup(tokens[0])
            except KeyError:
                raise _invalid(command, tokens[0]) from None
            return await self._route(child, tokens[1:], delegated=True)

        if HELP in tokens:
            self.help(command)
            return 0

        if command.children and command.handler is None and (not tokens or tokens[0].startswith(PREFIX)):
            self.help(command)
            return 1

        args, options = parse(tokens, command)
        if command.handler is None:
            logging.debug("%r has no handler, results discarded", command)
            return 0

        await execute(command, Context(args, options, command.route, self._ui))
        return 0

    def help(self, command, /):
        """
        Print the help screen of a command on the standard output console.
        """
        renderable = render(command, colorful=self._colorful)
        if self._fancy:
            renderable = Panel(
                renderable,
                title=Text(f"[ {" ".join(command.route).upper()} HELP ]", "bold" if self._colorful else ""),
                title_align="left",
                box=ROUNDED,
            )
        self._stdout.print(renderable, highlight=False, soft_wrap=not self._fancy)


__all__ = (
    "Dispatcher",
)
