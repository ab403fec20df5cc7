"""
Help rendering for compiled commands.

render(command) builds a rich Text:

    app build
    Build the project

    Usage: app build <command> <target> [--prod] [--config <file>]

    Commands:
      watch, w  Rebuild on change

    Arguments:
      <target>  Build target

    Options:
      --prod           Production build (default: false)
      --config <file>  Config file
      --help           Show help

Sections only appear when they have entries, except Options which always
lists --help. Labels are padded per section from their plain length, so the
columns line up whether or not styles are applied.
"""
from collections import defaultdict

from rich.text import Text

from .arguments import Flag, Option

styles = defaultdict(str, {
    "title": "bold #E6E6F0",  # near-white command path
    "descr": "#C8C8D0",  # soft light gray description
    "section": "bold #FF4DA6",  # friendly pinky section titles
    "usage": "bold #E6E6F0",
    "command": "#00E5FF",  # neon cyan sub-commands
    "alias": "#00E5FF dim",
    "cardinal": "#FFB400",  # amber positionals
    "switch": "#9CE19C",  # gentle green options
    "metavar": "italic #9CE19C",
    "default": "dim",
})


def _literal(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render(command, /, *, colorful=False):
    """
    Render the help screen of a command.

    Parameters
    - command: a compiled Command.
    - colorful: apply the style palette (plain Text otherwise).

    Returns
    - rich.text.Text
    """
    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        return Text(str(fragment), styler(style))

    def section(title, rows):
        width = max(len(label) for label, _ in rows)
        lines = [Text(), text(title + ":", "section")]
        for label, descr in rows:
            line = Text.assemble("  ", label)
            if descr:
                line.append(" " * (width - len(label) + 2))
                line.append_text(descr)
            lines.append(line)
        return lines

    def switch(argument):
        match argument:
            case Option():
                return Text.assemble(text(argument.flag, "switch"), " ", text(f"<{argument.metavar}>", "metavar"))
            case Flag():
                return text(argument.flag, "switch")

    def described(descr, default=None):
        body = text(descr or "", "descr")
        if default is not None:
            if body:
                body.append(" ")
            body.append_text(text(f"(default: {_literal(default)})", "default"))
        return body

    route = " ".join(command.route)
    lines = [text(route, "title")]
    if command.descr:
        lines.append(text(command.descr, "descr"))

    usage = Text.assemble(text("Usage:", "usage"), " ", text(route, "title"))
    if command.children:
        usage.append_text(Text.assemble(" ", text("<command>", "command")))
    for argument in command.cardinals:
        usage.append_text(Text.assemble(" ", text(argument.label, "cardinal")))
    for argument in command.switches.values():
        usage.append_text(Text.assemble(" [", switch(argument), "]"))
    lines.extend((Text(), usage))

    if command.children:
        lines.extend(section("Commands", [
            (
                Text(", ").join([text(child.name, "command"), *(text(alias, "alias") for alias in child.aliases)]),
                described(child.descr),
            )
            for child in command.children.values()
        ]))

    if command.cardinals:
        lines.extend(section("Arguments", [
            (text(argument.label, "cardinal"), described(argument.descr))
            for argument in command.cardinals
        ]))

    lines.extend(section("Options", [
        *(
            (switch(argument), described(argument.descr, argument.default))
            for argument in command.switches.values()
        ),
        (text("--help", "switch"), described("Show help")),
    ]))

    return Text("\n").join(lines)


__all__ = (
    "render",
)
