"""
Handler capabilities.

A command node wraps an opaque handler object. The handler may provide, or not:

- execution: execute(args) is called once, on the deepest command reached by
  resolution, with the tokens left unconsumed. Its return value is handed back
  to the caller untouched, and whatever it raises propagates untouched.
- custom usage: usage() returns a one-line usage string that replaces the
  synthesized one in help output.

A handler with neither is a pure grouping node (a namespace for subcommands).

The two queries below are the only places capabilities are tested; the
Protocols exist for type checkers and for isinstance() checks in user code.
"""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Executable(Protocol):
    def execute(self, args: list[str], /) -> Any: ...


@runtime_checkable
class CustomUsage(Protocol):
    def usage(self) -> str: ...


def executable(handler, /):
    """
    Return True when handler exposes a callable execute attribute.
    """
    return hasattr(handler, "execute") and callable(handler.execute)


def customized(handler, /):
    """
    Return True when handler exposes a callable usage attribute.
    """
    return hasattr(handler, "usage") and callable(handler.usage)


__all__ = (
    "Executable",
    "CustomUsage",
    "executable",
    "customized",
)
