"""
Argus command layer: declare, compile, and run CLI command trees.

What this module provides
- Builder: the mutable configuration surface. Every call except command()
  returns the builder itself so declarations chain:
  • argument(name, descr)                       → positional
  • option(flag, descr, default=, metavar=, type=) → boolean or value option
  • command(name, descr, aliases=)              → child builder (sub-command)
  • use(middleware)                             → middleware stage
  • action(handler)                             → handler
  • compile()                                   → frozen Command tree
  • parse(tokens)                               → run (async), exit status

- Command: the compiled, immutable node the dispatcher and parser walk. A
  compiled tree can be shared by any number of concurrent parse calls.

- Factories and helpers:
  • cli(name, descr): create the root builder (the program).
  • invoke(program, prompt): shell adapter, reads sys.argv[1:] when no prompt
    is given, runs one parse call to completion and returns the exit status.

Quick start
    from argus import cli, invoke

    program = cli("app", "Package manager")
    program.command("install", "Install packages", aliases=("i", "add")) \\
        .argument("<package>", "Package to install") \\
        .option("--dev", "Save as dev dependency") \\
        .action(lambda context: print(context.args["package"], context.options["dev"]))

    if __name__ == "__main__":
        raise SystemExit(invoke(program))

Design notes
- Sibling names and aliases are unique at configuration time; conflicts raise
  ConfigurationError before the child is attached.
- Options belong to the node that declares them (no inheritance); middleware is
  inherited root to leaf at execution time.
- Runtime flags (colorful/fancy) are inherited from the parent unless overridden.
"""
import asyncio
import builtins
import logging as logmod
import re
import shlex
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .arguments import PREFIX, Cardinal, Flag, Option
from .dispatch import Dispatcher
from .faults import ConfigurationError
from .utils import *

logging = logmod.getLogger(__name__)

_NAME = re.compile(r"\S+")


def _sanitize_name(cls, field, name, /):
    """
    Internal: validate a command name or alias.

    Raises
    - TypeError: when the name is not a string.
    - ValueError: when it is empty, contains whitespace or starts with "--".
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    if not _NAME.fullmatch(name):
        raise ValueError(f"{cls.__typename__} {field!r} must be a non-empty word, got {name!r}")
    if name.startswith(PREFIX):
        raise ValueError(f"{cls.__typename__} {field!r} cannot start with {PREFIX!r}")
    return name


def _attach_to_parent(self, parent):
    """
    Register a builder under its parent, enforcing unique names and aliases.

    Every proposed alias is checked against the sibling names and the sibling
    aliases; the name itself is checked the same way. Nothing is inserted when
    a conflict is found.

    Raises
    - ConfigurationError naming the command that already owns the name.
    """
    hint = "Choose a different name or alias for the sub-command."
    for sibling in parent._children.values():
        for alias in self._aliases:
            if alias == sibling._name:
                raise ConfigurationError(
                    f"Alias '{alias}' conflicts with existing command '{sibling._name}'",
                    hint=hint,
                )
            if alias in sibling._aliases:
                raise ConfigurationError(
                    f"Alias '{alias}' conflicts with existing alias for command '{sibling._name}'",
                    hint=hint,
                )
        if self._name == sibling._name:
            raise ConfigurationError(f"Command '{self._name}' is already registered", hint=hint)
        if self._name in sibling._aliases:
            raise ConfigurationError(
                f"Command '{self._name}' conflicts with existing alias for command '{sibling._name}'",
                hint=hint,
            )
    parent._children[self._name] = self


class Builder:
    """
    Mutable declaration of one command node.

    Builders are created by cli() (the root) and Builder.command() (children).
    They own their positionals, options, children, middleware and handler
    until compile() freezes the whole tree into Command nodes.
    """
    __typename__ = "command"

    name = mirror("name")
    descr = mirror("descr")
    aliases = mirror("aliases")
    parent = mirror("parent")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    @property
    def root(self):
        """
        Return the topmost builder (the program).
        """
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Return the builders from the root to this one as a tuple.
        """
        path = [builder := self]
        while builder._parent:
            path.append(builder := builder._parent)
        return tuple(reversed(path))

    def __init__(self, name, /, descr=Unset, *, parent=Unset, aliases=(), colorful=Unset, fancy=Unset):
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{self.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{self.__typename__} 'descr' cannot be empty")

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError(f"{self.__typename__} 'aliases' must be an iterable of strings")
        aliases = tuple(_sanitize_name(self, "aliases", alias) for alias in aliases)
        if len(set(aliases)) != len(aliases):
            raise ValueError(f"{self.__typename__} 'aliases' cannot contain duplicates")

        if not isinstance(parent, Builder | Unset):
            raise TypeError(f"{self.__typename__} 'parent' must be a command builder")

        self._name = _sanitize_name(self, "name", name)
        self._descr = coalesce(descr)
        self._aliases = aliases
        self._parent = coalesce(parent)
        self._colorful = bool(coalesce(colorful, getattr(self._parent, "_colorful", False)))
        self._fancy = bool(coalesce(fancy, getattr(self._parent, "_fancy", False)))
        self._cardinals = []
        self._switches = {}
        self._children = {}
        self._middlewares = []
        self._handler = None

        if self._name in self._aliases:
            raise ConfigurationError(f"Alias '{self._name}' conflicts with existing command '{self._name}'")
        if self._parent is not None:
            _attach_to_parent(self, self._parent)

    def __repr__(self):
        return f"<{type(self).__name__} {" ".join(builder._name for builder in self.path)!r}>"

    def argument(self, name, /, descr=Unset):
        """
        Append a positional argument ("<file>" or "file").
        """
        self._cardinals.append(Cardinal(name, descr))
        return self

    def option(self, flag, /, descr=Unset, *, default=Unset, metavar=Unset, type=Unset):
        """
        Declare an option on this command.

        Kind selection
        - value option: the flag carries a placeholder ("--config <file>"), or
          a metavar, a type, or a non-boolean default is given.
        - boolean flag: everything else.

        Raises
        - TypeError / ValueError: invalid definition, "--help" (reserved), or a
          flag that is already declared on this command.
        """
        if not isinstance(flag, str):
            raise TypeError(f"{self.__typename__} 'flag' must be a string")

        if len(flag.split()) > 1 or metavar is not Unset or type is not Unset or not isinstance(default, bool | Unset):
            argument = Option(flag, descr=descr, default=default, metavar=metavar, type=type)
        else:
            argument = Flag(flag, descr=descr, default=default)

        if argument.flag == "--help":
            raise ValueError(f"{self.__typename__} option '--help' is reserved")
        if argument.flag in self._switches:
            raise ValueError(f"{self.__typename__} option {argument.flag!r} is already in use")
        self._switches[argument.flag] = argument
        return self

    def command(self, name, /, descr=Unset, *, aliases=(), colorful=Unset, fancy=Unset):
        """
        Create a sub-command and return its builder (not self).

        Raises
        - ConfigurationError: the name or an alias collides with a sibling.
        """
        return Builder(name, descr, parent=self, aliases=aliases, colorful=colorful, fancy=fancy)

    def use(self, middleware, /):
        """
        Append a middleware stage: middleware(context, next).
        """
        if not builtins.callable(middleware):
            raise TypeError(f"{self.__typename__} middleware must be callable")
        self._middlewares.append(middleware)
        return self

    def action(self, handler, /):
        """
        Attach the handler: handler(context). Replaces a previous one.
        """
        if not builtins.callable(handler):
            raise TypeError(f"{self.__typename__} handler must be callable")
        self._handler = handler
        return self

    def compile(self):
        """
        Freeze the whole tree (from the root) and return the Command that
        corresponds to this builder.
        """
        command = Command(self.root)
        for builder in self.path[1:]:
            command = command.children[builder._name]
        logging.debug("compiled %r", command)
        return command

    async def parse(self, tokens, /, *, ui=Unset, stdout=Unset, stderr=Unset):
        """
        Compile and run one parse call; returns the exit status.
        """
        return await self.compile().parse(tokens, ui=ui, stdout=stdout, stderr=stderr)


class Command:
    """
    Compiled, immutable command node.

    Identity is the command path (names from the root). Every collection is
    exposed read-only: cardinals and middlewares as tuples, switches (flag to
    definition) and children (name to Command) as mapping proxies.
    """
    __typename__ = "command"

    __introspectable__ = (
        "name",
        "descr",
        "aliases",
        "cardinals",
        "switches",
        "children",
        "middlewares",
        "handler",
        "parent",
        "colorful",
        "fancy",
    )

    name = mirror("name")
    descr = mirror("descr")
    aliases = mirror("aliases")
    cardinals = mirror("cardinals")
    switches = mirror("switches")
    children = mirror("children")
    middlewares = mirror("middlewares")
    handler = mirror("handler")
    parent = mirror("parent")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    @property
    def root(self):
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Return the commands from the root to this one as a tuple.
        """
        path = [command := self]
        while command._parent:
            path.append(command := command._parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        Return the command path as names ("app", "build").
        """
        return tuple(command._name for command in self.path)

    def __new__(cls, builder, /, parent=None):
        if not isinstance(builder, Builder):
            raise TypeError(f"{cls.__typename__} source must be a command builder")
        self = super().__new__(cls)
        self._name = builder._name
        self._descr = builder._descr
        self._aliases = builder._aliases
        self._cardinals = tuple(builder._cardinals)
        self._switches = MappingProxyType(dict(builder._switches))
        self._middlewares = tuple(builder._middlewares)
        self._handler = builder._handler
        self._parent = parent
        self._colorful = builder._colorful
        self._fancy = builder._fancy
        self._children = MappingProxyType({
            name: cls(child, self) for name, child in builder._children.items()
        })
        return self

    def __repr__(self):
        return f"<{type(self).__name__} {" ".join(self.route)!r}>"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def lookup(self, token, /):
        """
        Resolve a sub-command by name or alias.

        Raises
        - KeyError: no child owns the token.
        """
        for name, child in self._children.items():
            if token == name or token in child._aliases:
                return child
        raise KeyError(token)

    async def parse(self, tokens, /, *, ui=Unset, stdout=Unset, stderr=Unset):
        """
        Run one parse call against this node; returns the exit status.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError(f"{type(self).__typename__} tokens must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError(f"{type(self).__typename__} tokens must be an iterable of strings")
        dispatcher = Dispatcher(ui=ui, stdout=stdout, stderr=stderr, colorful=self._colorful, fancy=self._fancy)
        return await dispatcher.dispatch(self, tokens)


def cli(name, /, descr=Unset, *, colorful=Unset, fancy=Unset):
    """
    Create the root builder of a program.

    Parameters
    - name: program name, shown in usage and help.
    - descr: program description.
    - colorful / fancy: runtime flags inherited by every sub-command.
    """
    return Builder(name, descr, colorful=colorful, fancy=fancy)


def invoke(object, prompt=Unset, /, **options):
    """
    Shell adapter: run a program with a token stream and return its exit status.

    Parameters
    - object: a Builder or a Command.
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string; will be split via shlex.split.
      • Iterable[str]: pre-tokenized sequence.
    - options: forwarded to parse() (ui, stdout, stderr).

    Raises
    - TypeError: when object is not a Builder/Command or prompt has the wrong shape.
    """
    if not isinstance(object, Builder | Command):
        raise TypeError("invoke() first argument must be a command or a command builder")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() argument must be a string or an iterable of strings")

    logging.debug("invoking %r with %r", object, tokens)
    return asyncio.run(object.parse(tokens, **options))


__all__ = (
    "Builder",
    "Command",
    "cli",
    "invoke",
)
