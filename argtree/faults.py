"""
Argtree faults: what happens when resolution selects nothing runnable.

Scope
- FaultCode: stable numeric identifiers for resolution misses.
- CommandException: base type carrying a message plus context options and able to
  render itself with rich (see __rich__).
- UnselectedCommandError and its two flavors:
  • UnknownCommandError: a bare word was offered as a command name and no child
    of the node matched it.
  • MissingCommandError: tokens ran out (or the next token was an option) on a
    node that has nothing to execute.
- getdoc(): optional description lookup for a code from the host application.

A handler's own failure is never turned into one of these: exceptions raised by
execute() reach the caller unchanged, so “nothing selected” and “the selected
command failed” can be told apart with a plain except clause.

Context options (all optional)
- command: node where resolution stopped (used for the program name, the route
  and the colorful/fancy flags).
- code, title, hint, docs, candidate, suggestions.

Host configuration (read from __main__)
- __styles__: palette overrides for rendering.
- __codes__: {FaultCode: label} to replace numeric codes.
- __docs__: {FaultCode: text} returned by getdoc().
- __prog__: program name shown in the header.
"""
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Palette, Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes for resolution misses.

    the 1110x range is reserved for routing; commands are top-level names,
    subcommands are names below another command.
    """
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SUBCOMMAND          = 11102
    MISSING_COMMAND             = 11103
    MISSING_SUBCOMMAND          = 11104

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ overrides the numeric id; otherwise the
        numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def command(self):
        return self.options.get("command")

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def suggestions(self):
        return tuple(self.options.get("suggestions", ()))

    def __rich__(self):
        command = self.command
        paint = Palette({
            "fault-program": "bold #FF4D94",
            "fault-code": "bold #FFD600",
            "fault-title": "bold #00E6FF",
            "fault-message": "#E5E7EB",
            "fault-hint": "italic #22C55E",
        }, colorful=getattr(command, "colorful", False))

        fallback = command.root.name if command is not None else type(self).__name__
        program = getattr(__import__("__main__"), "__prog__", fallback)
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"
        title = str(self.options.get("title", "error")).title()

        header = Text.assemble(
            "[ ", paint(program, "fault-program"),
            " — ", paint(code, "fault-code"),
            " | ", paint(title, "fault-title"), " ]",
        )
        body = [paint(self.message, "fault-message")]
        if self.hint:
            body.append(Text.assemble(" → ", paint(self.hint, "fault-hint")))

        if getattr(command, "fancy", False):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)


class UnselectedCommandError(CommandException): ...
class UnknownCommandError(UnselectedCommandError): ...
class MissingCommandError(UnselectedCommandError): ...


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; missing entries yield None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "CommandException",
    "UnselectedCommandError",
    "UnknownCommandError",
    "MissingCommandError",
    "getdoc",
)
