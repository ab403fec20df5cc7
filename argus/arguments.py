r"""
Argus argument definitions.

Overview
- Definitions (a tagged union, matched structurally by the parser)
  • Cardinal: positional argument, consumed in declaration order.
  • Flag: boolean option ("--verbose"), implicit default False.
  • Option: value-bearing option ("--config <file>") typed as "string" or "number".

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    the fields declared in __introspectable__ via read-only properties.

Metadata (sanitized on construction)
- Shared
  • descr: Unset | str (short help), non-empty when provided.
- Cardinal
  • name: "<file>" or "file"; angle brackets are stripped.
- Flag / Option
  • flag: must match r"--[^\W_][^\s<>=]*"; the result key is the flag without "--".
  • Option accepts a composite flag ("--config <file>") that carries its metavar.
  • Option type: "string" (default) or "number"; default must match the type.

Quick example:
    >>> Cardinal("<file>", "Input file").name
    'file'
    >>> Option("--config <file>").metavar
    'file'
    >>> Flag("--verbose").key
    'verbose'
"""
import functools
import math
import operator
import re

from .utils import *

PREFIX = "--"

_NAME = re.compile(r"[^\s<>]+")
_FLAG = re.compile(r"--[^\W_][^\s<>=]*")
_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_TYPES = ("string", "number")


class ArgumentType(type):
    """
    Metaclass that turns definition classes into introspectable records.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(flag='--config', metavar='file', type='string', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the shared 'descr' field.

    Raises
    - TypeError: if 'descr' is not a string or Unset.
    - ValueError: if 'descr' is a string but empty after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

    metadata["descr"] = coalesce(descr)


def _sanitize_placeholder(cls, field, value, /):
    """
    Internal: validate a "<name>" / "name" placeholder and strip the brackets.
    """
    if not isinstance(value, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    value = value.strip()
    if value.startswith("<") and value.endswith(">"):
        value = value[1:-1]
    if not _NAME.fullmatch(value):
        raise ValueError(f"{cls.__typename__} {field!r} must be a non-empty name without whitespace")
    return value


def _sanitize_flag(cls, metadata, /):
    """
    Internal: validate the 'flag' field of named definitions.

    Accepted forms
    - "--name" for every named definition.
    - "--name <value>" for Option only, in which case the placeholder is moved
      into metadata["metavar"] (it must agree with an explicit metavar).
    """
    if not isinstance(flag := metadata["flag"], str):
        raise TypeError(f"{cls.__typename__} 'flag' must be a string")

    match flag.split():
        case [flag]:
            pass
        case [flag, placeholder] if "metavar" in metadata:
            placeholder = _sanitize_placeholder(cls, "metavar", placeholder)
            if metadata["metavar"] is not Unset:
                if _sanitize_placeholder(cls, "metavar", metadata["metavar"]) != placeholder:
                    raise ValueError(f"{cls.__typename__} 'metavar' conflicts with the placeholder of {flag!r}")
            metadata["metavar"] = placeholder
        case _:
            raise ValueError(f"{cls.__typename__} 'flag' must be a single {PREFIX}name, got {flag!r}")

    if not _FLAG.fullmatch(flag):
        raise ValueError(f"{cls.__typename__} 'flag' must look like '{PREFIX}name', got {flag!r}")
    metadata["flag"] = flag


def _number(text, /):
    """
    Decimal conversion for "number" options: integers stay int, anything else
    goes through float. Only ASCII decimal notation is accepted; text that is
    not, or that overflows to infinity, raises ValueError.
    """
    if not _DECIMAL.fullmatch(text := text.strip()):
        raise ValueError(f"could not convert string to number: {text!r}")
    try:
        return int(text)
    except ValueError:
        pass
    if not math.isfinite(value := float(text)):
        raise ValueError(f"could not convert string to number: {text!r}")
    return value


class Cardinal(metaclass=ArgumentType):
    """
    Positional argument definition.

    Cardinals are consumed strictly in declaration order against the non-flag
    tokens of the matched command. Every cardinal is required.
    """

    __introspectable__ = (
        "name",
        "descr",
    )

    def __new__(cls, name, /, descr=Unset):
        metadata = {
            "name": _sanitize_placeholder(cls, "name", name),
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)

        if metadata["name"].startswith(PREFIX):
            raise ValueError(f"{cls.__typename__} 'name' cannot start with {PREFIX!r}")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def label(self):
        return f"<{self._name}>"


class Flag(metaclass=ArgumentType):
    """
    Boolean option definition.

    Presence sets the option to True; an immediately following literal "true"
    or "false" is consumed as an explicit value. When absent the option keeps
    its default (False unless declared).
    """

    __introspectable__ = (
        "flag",
        "descr",
        "default",
    )

    def __new__(cls, flag, /, descr=Unset, default=Unset):
        metadata = {
            "flag": flag,
            "descr": descr,
            "default": default,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_flag(cls, metadata)

        if not isinstance(default, bool | Unset):
            raise TypeError(f"{cls.__typename__} 'default' must be a boolean")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self

    @property
    def key(self):
        return self._flag.removeprefix(PREFIX)

    @property
    def label(self):
        return self._flag

    @property
    def initial(self):
        """
        Value seeded into the results before scanning.
        """
        return bool(self._default)


class Option(metaclass=ArgumentType):
    """
    Value-bearing option definition.

    The token after the flag is the raw value; "number" options convert it
    with decimal parsing (see convert()). Only declared defaults are seeded.
    """

    __introspectable__ = (
        "flag",
        "metavar",
        "type",
        "default",
        "descr",
    )

    def __new__(cls, flag, /, descr=Unset, default=Unset, metavar=Unset, type=Unset):
        metadata = {
            "flag": flag,
            "metavar": metavar,
            "type": type,
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_flag(cls, metadata)

        if (metavar := metadata["metavar"]) is not Unset:
            metadata["metavar"] = _sanitize_placeholder(cls, "metavar", metavar)
        else:
            metadata["metavar"] = "value"

        if not isinstance(type, str | Unset):
            raise TypeError(f"{cls.__typename__} 'type' must be a string")
        elif (type := coalesce(type, "string")) not in _TYPES:
            raise ValueError(f"{cls.__typename__} 'type' must be one of {", ".join(map(repr, _TYPES))}")
        metadata["type"] = type

        match type, default:
            case _, UnsetType():
                pass
            case "string", str():
                pass
            case "number", int() | float() if not isinstance(default, bool):
                if isinstance(default, float) and math.isnan(default):
                    raise ValueError(f"{cls.__typename__} 'default' cannot be NaN")
            case _:
                raise TypeError(f"{cls.__typename__} 'default' must be a {type}")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self

    @property
    def key(self):
        return self._flag.removeprefix(PREFIX)

    @property
    def label(self):
        return f"{self._flag} <{self._metavar}>"

    def convert(self, value, /):
        """
        Convert a raw token according to the declared type.

        Raises
        - ValueError: the token is not a number (for "number" options).
        """
        if self._type == "number":
            return _number(value)
        return value


__all__ = (
    "PREFIX",
    "ArgumentType",
    "Cardinal",
    "Flag",
    "Option",
)
