"""
Argtree command layer: build command trees and run them.

What this module provides
- Command: one node of the command hierarchy.
  • Pairs a name with an owned option Group and an opaque handler object.
  • Keeps its children in registration order; names are unique among siblings.
  • Records which child the latest resolution pass went through (active).
  • Forwards option lookups to its group.
- Factories and helpers:
  • command(...): create a root node (with the built-in -h/--help flag).
  • Command.register(...): create and attach a child node.
  • @Command.command(...): decorator form of register for handler classes.
  • invoke(object, prompt): resolve and run a prompt against a tree.

Quick start
    from argtree import command, invoke, Option

    class Serve:
        '''Run the development server.'''
        port = Option("-p", "--port", type=int, default=8080)

        def execute(self, args):
            print("serving with", args)

    root = command("tool")
    root.register("serve", "Run the development server.", None, Serve())
    invoke(root, "serve --port 8080")   # prints: serving with ['--port', '8080']

Design notes
- The group is composed, never inherited: a node exposes descr/details/lookup
  by forwarding to it.
- active is stored as an index into children, so the only owner of a child is
  its parent's children list. resolve() clears it on the whole subtree before
  walking, and reset() does the same on demand.
- Registration is all-or-nothing: the handler is scanned and the name checked
  before the node is attached, so a failure leaves the parent untouched.
"""
import inspect
import logging
import os.path
import re
import shlex
import sys
from collections.abc import Iterable

from .arguments import Flag
from .capabilities import executable
from .groups import Group
from .help import show
from .resolver import resolve
from .utils import *

logger = logging.getLogger(__name__)


def _process_name(cls, name):
    """
    Validate a command name.

    A name is matched against bare-word tokens verbatim, so it must be a
    non-empty string without whitespace that does not start with '-'.
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' cannot start with '-'")
    elif re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace")
    return name


def _attach_to_parent(self, parent):
    """
    Append self to the parent's children, enforcing unique sibling names.
    """
    if not parent:
        return

    if parent.find(self.name) is not None:
        typeof = "subcommand" if parent.parent else "command"
        raise ValueError(f"{type(self).__typename__} {typeof} name {self.name!r} is already in use")

    parent._children.append(self)


def _wants_help(command, builtin, tokens):
    """
    Tell whether tokens ask for the built-in help of command.

    Only -h/--help before a '--' terminator count, and only when command does
    not declare that name itself (its own declaration shadows the built-in).
    """
    for token in tokens:
        if token == "--":
            return False
        if token in ("-h", "--help") and command.lookup(token) in (None, builtin):
            return True
    return False


class Command(metaclass=IntrospectableType):
    """
    One node of a command tree.

    Structure
    - name: token matched against bare words during resolution.
    - group: owned Group with the handler's declarations; created with the node.
    - children: child nodes in registration order (a fresh list on every access).
    - parent: owning node, or None for a root.
    - handler: the object given at registration; consulted for the execute()
      and usage() capabilities.

    Resolution state
    - active: child selected by the most recent resolution pass, or None.
    - chain: this node followed by the active child, its active child, and so on.

    Notes
    - A node cannot be re-parented; children are created by register().
    - Nodes are not safe for concurrent resolution passes; see clone().
    """

    __introspectable__ = (
        "name",
        "group",
        "parent",
        "children",
        "hidden",
        "builtin",
        "colorful",
        "fancy",
    )

    __displayable__ = (
        "name",
        "descr",
        "hidden",
        "children",
    )

    def __init__(
            self,
            name=Unset,
            descr=Unset,
            details=Unset,
            handler=None,
            /,
            parent=Unset,
            *,
            hidden=False,
            help=False,
            colorful=Unset,
            fancy=Unset
    ):
        """
        Build a node, scan its handler and attach it to parent.

        Parameters
        - name: str; a root defaults to the basename of sys.argv[0].
        - descr, details: short and long descriptions (str | Text | Unset).
        - handler: any object, None included.
        - parent: Command | Unset.
        - hidden: leave this node out of its parent's command list.
        - help: give this (root) node the built-in -h/--help flag, unless the
          handler already declares one of those names.
        - colorful, fancy: rendering flags; inherited from parent when Unset.

        Raises
        - TypeError/ValueError for an invalid parent or name, for malformed
          declarations found while scanning the handler, or for a name already
          used by a sibling. Nothing is attached in any of these cases.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a command")
        if help and parent:
            raise ValueError(f"{type(self).__typename__} only a root can carry the built-in help flag")
        if name is Unset:
            if parent:
                raise TypeError(f"{type(self).__typename__} 'name' is required for a subcommand")
            name = os.path.basename(sys.argv[0]) or "command"

        name = _process_name(type(self), name)

        group = Group(descr, details)
        group.scan(handler)

        builtin = False
        if help and "help" not in group.arguments and not any(map(group.lookup, ("-h", "--help"))):
            group.add("help", Flag("-h", "--help", descr="show this help message and exit"))
            builtin = True

        self._name = name
        self._group = group
        self._handler = handler
        self._parent = coalesce(parent)
        self._children = []
        self._active = None
        self._hidden = bool(hidden)
        self._builtin = builtin
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))

        _attach_to_parent(self, parent)
        logger.debug("registered %r", " ".join(step.name for step in self.path))

    @property
    def handler(self):
        return self._handler

    @property
    def descr(self):
        return self._group.descr

    @property
    def details(self):
        return self._group.details

    @property
    def executable(self):
        return executable(self._handler)

    @property
    def active(self):
        """
        The child selected by the latest resolution pass, or None.
        """
        return None if self._active is None else self._children[self._active]

    @property
    def chain(self):
        """
        This node and its active descendants, top-down.
        """
        chain = [node := self]
        while (node := node.active) is not None:
            chain.append(node)
        return tuple(chain)

    @property
    def root(self):
        """
        Return the topmost command of this hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from the root down to this command.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    def register(self, name, descr=Unset, details=Unset, handler=None, /, *, hidden=False):
        """
        Create a child command wrapping handler and append it to children.

        The handler's declarations are scanned first; a scan failure or a
        name already used by a sibling raises and leaves children unchanged.

        Returns
        - the new Command.
        """
        return type(self)(name, descr, details, handler, self, hidden=hidden)

    def command(self, name=Unset, descr=Unset, details=Unset, /, *, hidden=False):
        """
        Decorator registering a handler class (or object) as a child command.

        A class is instantiated without arguments. Defaults derive from it:
        the name is the lowercased class name, descr the first line of its
        docstring and details the whole docstring.

        Returns
        - the new Command (the decorated name is bound to the node).
        """
        def wrapper(source, /):
            handler = source() if isinstance(source, type) else source
            klass = source if isinstance(source, type) else type(source)
            doc = inspect.getdoc(klass) if klass.__doc__ else None
            return self.register(
                coalesce(name, klass.__name__.lower()),
                coalesce(descr, doc.splitlines()[0] if doc else Unset),
                coalesce(details, doc or Unset),
                handler,
                hidden=hidden,
            )

        return rename(wrapper, "command")

    def find(self, name, /):
        """
        Return the first child named name, or None. Never touches active.
        """
        for child in self._children:
            if child.name == name:
                return child
        return None

    def lookup(self, name, /):
        """
        Return the option or flag this command declares under name, or None.
        """
        return self._group.lookup(name)

    def activate(self, child, /):
        """
        Mark child as the active child of this node.

        Raises
        - ValueError when child is not one of this node's children.
        """
        for index, candidate in enumerate(self._children):
            if candidate is child:
                self._active = index
                return child
        raise ValueError(f"{type(self).__typename__} {getattr(child, 'name', child)!r} is not a child of {self.name!r}")

    def reset(self):
        """
        Clear the resolution state of this node and its whole subtree.
        """
        pending = [self]
        while pending:
            node = pending.pop()
            node._active = None
            pending.extend(node._children)

    def clone(self):
        """
        Return an independent copy of the subtree rooted here.

        Names, descriptions and flags are copied, every node gets its own
        group copy, handlers are shared, and resolution state starts cleared.
        A clone of a non-root node is a new root.
        """
        def copy(node, parent):
            clone = object.__new__(type(node))
            clone._name = node._name
            clone._group = node._group.clone()
            clone._handler = node._handler
            clone._parent = parent
            clone._children = []
            clone._active = None
            clone._hidden = node._hidden
            clone._builtin = node._builtin
            clone._colorful = node._colorful
            clone._fancy = node._fancy
            for child in node._children:
                clone._children.append(copy(child, clone))
            return clone

        return copy(self, None)

    def __invoke__(self, prompt=Unset):
        """
        Resolve prompt against this tree and run the selected command.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string, split with shlex.split.
          • Iterable[str]: pre-tokenized sequence, used as-is.

        Behavior
        - When this node carries the built-in help flag and -h/--help appears
          among the unconsumed tokens (before '--'), the help of the deepest
          resolved command is printed and None is returned, unless that command
          declares the name itself.
        - Otherwise the deepest command executes and its result is returned.

        Raises
        - TypeError for an invalid prompt.
        - UnselectedCommandError when the deepest command cannot execute.
        - anything the handler raises.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        resolution = resolve(self, tokens)

        if self.builtin and _wants_help(resolution.deepest, self.lookup("--help"), resolution.remaining):
            show(resolution.deepest)
            return None

        return resolution.execute()


def command(name=Unset, descr=Unset, details=Unset, handler=None, /, *, help=True, colorful=Unset, fancy=Unset):
    """
    Create the root of a command tree.

    Parameters
    - name: program name; defaults to the basename of sys.argv[0].
    - descr, details: short and long descriptions shown in help.
    - handler: object for the root itself (its options, and optionally the
      execute()/usage() capabilities); None for a pure namespace.
    - help: install the built-in -h/--help flag on the root.
    - colorful, fancy: rendering flags inherited by every registered child.

    Returns
    - Command
    """
    return Command(name, descr, details, handler, help=help, colorful=colorful, fancy=fancy)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for command trees and bare handlers.

    Parameters
    - object: a Command (anything providing __invoke__), or a handler with the
      execute() capability, which is wrapped into a root command first.
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of strings.

    Returns
    - the result of the selected handler's execute(), or None when help was shown.

    Raises
    - TypeError when object can be neither invoked nor executed.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if executable(object):
        return invoke(command(Unset, Unset, Unset, object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ or execute methods") from None


__all__ = (
    "Command",
    "command",
    "invoke",
)
