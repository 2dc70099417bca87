"""
Argtree help formatter.

render(command) builds a rich renderable describing one command node;
show(command, console=Unset) prints it. The resolver never calls into this
module; invoke() does, when the built-in help flag is present.

Layout
- usage line: the route from the root, then either the handler's custom usage
  (usage() capability) or a synthesized list of options plus a command slot;
- details paragraph (falls back to the short description);
- commands/subcommands table, registration order, hidden nodes left out;
- one section per option group label with the visible declarations.

Palette keys
- usage-label, program-name, usage-section, description-section
- children-title, children-table, children, children-description, hint
- group-label, option-name, flag-name, metavar, choice, argument-description
- panel-title

Customization
- A mapping named __styles__ in __main__ overrides palette entries.
- colorful=False on the node strips styling; fancy=True wraps output in a panel.
"""
import re

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import Option
from .capabilities import customized
from .utils import Palette, Unset, coalesce


def render(command, /):
    """
    Return a rich renderable with the help of command.
    """
    paint = Palette({
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",
        "children-title": "bold #FFFFFF",
        "children-table": "#4B5563",
        "children": "bold #36C5F0",
        "children-description": "#9CA3AF",
        "hint": "bold #22C55E",
        "group-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "metavar": "bold #FFD600",
        "choice": "bold #FF4D94",
        "argument-description": "#9CA3AF",
        "panel-title": "bold #FF4D94",
    }, colorful=command.colorful)

    attributes = {id(spec): attribute for attribute, spec in command.group.arguments.items()}

    def names(spec):
        key = "option-name" if isinstance(spec, Option) else "flag-name"
        ordered = sorted(spec.names, key=lambda name: (name.startswith("--"), len(name)))
        return Text(" | ").join(paint(name, key) for name in ordered)

    def metavar(spec):
        if spec.choices:
            return Text.assemble("{", Text(",").join(paint(repr(choice), "choice") for choice in spec.choices), "}")
        if spec.metavar:
            return paint(spec.metavar, "metavar")
        slot = re.sub(r"_+", "-", attributes[id(spec)].strip("_").lower())
        return Text.assemble("<", paint(slot, "metavar"), ">")

    def signature(spec):
        if isinstance(spec, Option):
            return Text.assemble(names(spec), " ", metavar(spec))
        return names(spec)

    route = " ".join(step.name for step in command.path)
    sections = {}
    for label, specs in command.group.sections().items():
        if visible := [spec for spec in specs if not spec.hidden]:
            sections[label] = visible
    children = [child for child in command.children if not child.hidden]

    usage = Text.assemble(paint("usage", "usage-label"), ": ", paint(route, "program-name"))
    if customized(command.handler):
        usage.append(" ").append(paint(command.handler.usage(), "usage-section"))
    else:
        for specs in sections.values():
            for spec in specs:
                usage.append(" ").append(Text.assemble("[", signature(spec), "]"))
        if children:
            slot = "<subcommand>" if command.parent else "<command>"
            usage.append(" ").append(paint(f"[{slot}]" if command.executable else slot, "usage-section"))
    renders = [usage]

    if about := command.details or command.descr:
        renders.append(Text("\n").append(paint(about, "description-section")))

    if children:
        title = "subcommands" if command.parent else "commands"
        table = Table(
            "name", "help",
            title=paint(title, "children-title"),
            box=ROUNDED,
            style=paint["children-table"],
            header_style=paint["children-title"],
        )
        for child in children:
            if child.descr:
                summary = paint(child.descr, "children-description")
            else:
                summary = Text.assemble(
                    paint("no description", "children-description"),
                    " — ",
                    paint(f"run '{route} {child.name} --help' for details", "hint"),
                )
            table.add_row(paint(child.name, "children"), summary)
        renders += [Text(""), table]

    for label, specs in sections.items():
        grid = Table.grid(padding=(0, 2))
        grid.add_column(no_wrap=True)
        grid.add_column()
        for spec in specs:
            grid.add_row(Text("  ").append(signature(spec)), paint(spec.descr, "argument-description"))
        renders += [Text(""), paint(label, "group-label").append(":"), grid]

    renderable = Group(*renders)
    if command.fancy:
        title = Text.assemble("[ ", f"{route} HELP".upper(), " ]", style=paint["panel-title"])
        renderable = Panel(renderable, title=title, title_align="left")
    return renderable


def show(command, /, console=Unset):
    """
    Print the help of command on console (a stdout Console by default).
    """
    coalesce(console, Console()).print(render(command))


__all__ = (
    "render",
    "show",
)
