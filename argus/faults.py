"""
Argus faults (errors) and rendering.

Scope
- FaultCode: canonical, stable identifiers for every user-facing error. Codes
  are grouped by domain and normalized to "E_<NAME>" labels.
- CommandException: base type that carries message, details and hint and knows
  how to render itself (plain text, through a UI capability, or via rich).
- Taxonomy kinds: MissingArgumentError, UnknownOptionError,
  MissingOptionValueError, InvalidSubcommandError, ConfigurationError,
  TableHeaderMismatchError.
- Outside the taxonomy: TooManyArgumentsError (answered with help) and
  MiddlewareError (a programming error in a middleware stage).
- isfault(): recognize taxonomy errors and fault-like objects.

Integration
- The parser and the dispatcher raise faults; the dispatcher catches every
  CommandException at its boundary and calls fault.print(ui, console=...).
- Anything that is not a CommandException propagates to the caller.
"""
import inspect
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, coalesce

stderr = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - parsing (1110x / 1111x)
      • MISSING_ARGUMENT, UNKNOWN_OPTION, MISSING_OPTION_VALUE
    - routing (1112x)
      • INVALID_SUBCOMMAND
    - configuration (1310x)
      • CONFIGURATION_ERROR
    - rendering (1410x)
      • TABLE_HEADER_MISMATCH

    normalize() turns a code into its printable label ("E_MISSING_ARGUMENT").
    the host application may remap labels through a __codes__ mapping in __main__.
    """
    # --- parsing errors (11xxx) ---
    MISSING_ARGUMENT      = 11101
    UNKNOWN_OPTION        = 11111
    MISSING_OPTION_VALUE  = 11112

    # --- routing errors (11xxx) ---
    INVALID_SUBCOMMAND    = 11121

    # --- configuration errors (13xxx) ---
    CONFIGURATION_ERROR   = 13101

    # --- rendering errors (14xxx) ---
    TABLE_HEADER_MISMATCH = 14101

    def normalize(self):
        """
        return the printable label for this code.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, "E_" + self.name))


class CommandException(Exception):
    """
    structured, user-facing error.

    fields
    - message: one-line summary (required, positional).
    - code: a FaultCode (defaults to the class level __code__) or any string
      label for host-defined errors.
    - details: optional longer explanation.
    - hint: optional actionable suggestion.
    - options: any other context (command path, token, ...), read-only.

    rendering
    - format(ui=None) -> str: "<code> <message>", details, "Hint: <hint>".
      colors are applied through ui.colors when the ui provides them.
    - print(ui=None, console=...) -> None: boxed under an "Error" title when a
      ui is given, plain "Error:" block on the error console otherwise.
    - __rich__: renderable for rich consoles (styled when colorful=True).
    """
    __code__ = Unset

    def __init__(self, message, /, *, code=Unset, details=Unset, hint=Unset, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        if (code := coalesce(code, type(self).__code__)) is Unset:
            raise TypeError(f"{type(self).__name__}() requires a 'code'")
        if not isinstance(code, FaultCode | str):
            raise TypeError(f"{type(self).__name__}() 'code' must be a fault-code or a string")
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = coalesce(details)
        self.hint = coalesce(hint)
        self.options = MappingProxyType(options)

    @property
    def label(self):
        if isinstance(self.code, FaultCode):
            return self.code.normalize()
        return self.code

    def format(self, ui=None):
        colors = getattr(ui, "colors", None)

        def paint(color, fragment):
            return getattr(colors, color)(fragment) if colors else fragment

        lines = [f"{paint("red", self.label)} {self.message}"]
        if self.details:
            lines.append(self.details)
        if self.hint:
            lines.append(paint("cyan", "Hint:") + " " + self.hint)
        return "\n".join(lines)

    def print(self, ui=None, *, console=Unset):
        text = self.format(ui)
        if ui is None:
            coalesce(console, stderr).print(
                "Error:\n" + text,
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
            return
        colors = getattr(ui, "colors", None)
        title = colors.bold("Error") if colors else "Error"
        if _accepts_stderr(ui.box):
            ui.box(text, title, stderr=True)
        else:
            ui.box(text, title)

    def __rich__(self):
        styles = defaultdict(str, {
            "code": "bold #FF4DA6",  # friendly pinky fault code
            "message": "#C8C8D0",  # soft light gray message
            "details": "dim",
            "hint-label": "bold #00E5FF",  # neon cyan label
            "hint": "italic #9CE19C",  # gentle green hint text
        })
        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        renders = [Text.assemble((self.label, styler("code")), " ", (self.message, styler("message")))]
        if self.details:
            renders.append(Text(self.details, styler("details")))
        if self.hint:
            renders.append(Text.assemble(("Hint:", styler("hint-label")), " ", (self.hint, styler("hint"))))
        return Group(*renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{
            "code": self.code,
            "details": self.details,
            "hint": self.hint,
            **self.options,
            **overrides,
        })


class MissingArgumentError(CommandException):
    __code__ = FaultCode.MISSING_ARGUMENT


class UnknownOptionError(CommandException):
    __code__ = FaultCode.UNKNOWN_OPTION


class MissingOptionValueError(CommandException):
    __code__ = FaultCode.MISSING_OPTION_VALUE


class InvalidSubcommandError(CommandException):
    __code__ = FaultCode.INVALID_SUBCOMMAND


class ConfigurationError(CommandException):
    __code__ = FaultCode.CONFIGURATION_ERROR


class TableHeaderMismatchError(CommandException):
    __code__ = FaultCode.TABLE_HEADER_MISMATCH


class TooManyArgumentsError(Exception):
    """
    more positional tokens than the matched command declares.

    not part of the fault taxonomy: the dispatcher answers it by rendering the
    command's help (exit status 1) instead of an error box.
    """

    def __init__(self, command, /, *, expected, actual):
        super().__init__(f"too many arguments: expected {expected}, got {actual}")
        self.command = command
        self.expected = expected
        self.actual = actual


class MiddlewareError(RuntimeError):
    """
    a middleware stage misused its continuation (e.g., called next() twice).
    """


def _accepts_stderr(box, /):
    # UIs written to box(text, title) get their faults on the default stream
    try:
        parameters = inspect.signature(box).parameters.values()
    except (TypeError, ValueError):
        return True
    return any(
        parameter.name == "stderr" and parameter.kind is not parameter.POSITIONAL_ONLY
        or parameter.kind is parameter.VAR_KEYWORD
        for parameter in parameters
    )


def isfault(object, /):
    """
    true for taxonomy errors and for fault-like objects exposing a 'code'
    attribute and a callable 'format'.
    """
    if isinstance(object, CommandException):
        return True
    return hasattr(object, "code") and callable(getattr(object, "format", None))


__all__ = (
    "FaultCode",
    "CommandException",
    "MissingArgumentError",
    "UnknownOptionError",
    "MissingOptionValueError",
    "InvalidSubcommandError",
    "ConfigurationError",
    "TableHeaderMismatchError",
    "TooManyArgumentsError",
    "MiddlewareError",
    "isfault",
)
