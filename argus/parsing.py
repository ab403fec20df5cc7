"""
Token parser for a single, already matched command.

parse(tokens, command) scans the tokens once, left to right:
- a token starting with "--" must be one of the command's own flags;
- any other token fills the next unfilled positional, or overflows.

Results
- args: positional name -> raw string.
- options: flag without "--" -> bool | str | int | float. Boolean flags are
  always present (default False); value options only when given or declared
  with a default.

Failures
- UnknownOptionError, MissingOptionValueError, MissingArgumentError (taxonomy).
- TooManyArgumentsError when positional tokens overflow (answered with help).
"""
import difflib
from collections import deque

from .arguments import PREFIX, Flag, Option
from .faults import (
    MissingArgumentError,
    MissingOptionValueError,
    TooManyArgumentsError,
    UnknownOptionError,
)

_BOOLEANS = {"true": True, "false": False}


def _unknown(command, token):
    hint = "Remove the option or check the valid options with --help."
    if matches := difflib.get_close_matches(token, [*command.switches, "--help"], n=1):
        hint = f"Did you mean '{matches[0]}'? " + hint
    return UnknownOptionError(
        f"Unknown option {token}.",
        details=f"The option '{token}' is not recognized for this command.",
        hint=hint,
        token=token,
        path=command.route,
    )


def _missing_value(command, argument):
    return MissingOptionValueError(
        f"Missing value for option {argument.flag}.",
        details=f"Expected a value for '{argument.flag}' in place of <{argument.metavar}>.",
        hint=f'Provide a value after {argument.flag}, e.g., "{argument.flag} <{argument.metavar}>".',
        token=argument.flag,
        path=command.route,
    )


def _invalid_number(command, argument, value):
    return MissingOptionValueError(
        f"Invalid value for option {argument.flag}.",
        details=f"Expected a number for <{argument.metavar}> but received '{value}'.",
        hint=f'Provide a numeric value, e.g., "{argument.flag} 42".',
        token=argument.flag,
        path=command.route,
    )


def _missing_argument(command, argument):
    return MissingArgumentError(
        f"Missing required argument {argument.label}.",
        details=f"The positional argument {argument.label} is required but was not provided.",
        hint=f"Provide the {argument.label} value or run with --help to see usage.",
        token=argument.name,
        path=command.route,
    )


def parse(tokens, command, /):
    """
    Parse tokens against the positionals and options of one command.

    Returns
    - (args, options) as plain dicts.

    Raises
    - UnknownOptionError: a "--" token that the command does not declare.
    - MissingOptionValueError: a value option without a usable value, or a
      "number" option whose value does not parse.
    - MissingArgumentError: the first positional (declaration order) left unfilled.
    - TooManyArgumentsError: more positional tokens than declared.
    """
    switches = command.switches
    args = {}
    options = {}

    for argument in switches.values():
        match argument:
            case Flag():
                options[argument.key] = argument.initial
            case Option() if argument.default is not None:
                options[argument.key] = argument.default

    pending = deque(command.cardinals)
    overflow = []
    tokens = deque(tokens)

    while tokens:
        token = tokens.popleft()

        if not token.startswith(PREFIX):
            if pending:
                args[pending.popleft().name] = token
            else:
                overflow.append(token)
            continue

        try:
            argument = switches[token]
        except KeyError:
            raise _unknown(command, token) from None

        match argument:
            case Flag():
                if tokens and tokens[0] in _BOOLEANS:
                    options[argument.key] = _BOOLEANS[tokens.popleft()]
                else:
                    options[argument.key] = True
            case Option():
                if not tokens or tokens[0].startswith(PREFIX):
                    raise _missing_value(command, argument)
                value = tokens.popleft()
                try:
                    options[argument.key] = argument.convert(value)
                except ValueError:
                    raise _invalid_number(command, argument, value) from None

    if pending:
        raise _missing_argument(command, pending[0])

    if overflow:
        expected = len(command.cardinals)
        raise TooManyArgumentsError(command, expected=expected, actual=expected + len(overflow))

    return args, options


__all__ = (
    "parse",
)
