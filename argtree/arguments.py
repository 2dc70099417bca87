r"""
Argtree option declarations.

Overview
- Option[_T]: named, value-bearing option with one or more aliases (-p/--port).
- Flag: named, presence-only switch (-v/--verbose).

A handler declares its options as class attributes holding these specs; the
option-group collaborator (argtree.groups.Group) collects them when the handler
is registered as a command. The specs only carry metadata: parsing values,
applying defaults and enforcing `required`/`choices` belong to the code that
consumes the metadata, not to this module.

Metadata (sanitized on construction)
- names: one or more shell-style names, r"--?[^\W\d_](-?[^\W_]+)*", no duplicates.
- group: label of the help section; defaults to the pluralized typename
  ("options", "flags").
- descr: short help text or None.
- hidden: suppresses the spec from help.
- Option only: metavar, type (callable converter), default, choices, required.

Example
    >>> from argtree.arguments import Option, Flag
    >>> class Serve:
    ...     port = Option("-p", "--port", type=int, default=8080)
    ...     verbose = Flag("-v", "--verbose")
"""
import builtins
import re
from collections.abc import Iterable, Set

from rich.text import Text

from .utils import *


_OPTION_NAME = re.compile(r"--?[^\W\d_](-?[^\W_]+)*")


def _clean_text(cls, field, value, /, *, rich=False):
    """
    Trim a free-text field; Unset passes through.

    rich=True also admits a rich Text, which is kept as given.
    """
    kinds = str | Text | Unset if rich else str | Unset
    if not isinstance(value, kinds):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    if isinstance(value, str):
        if not value.strip():
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
        return value.strip()
    return value


def _sanitize_metadata(cls, metadata, /):
    """
    Normalize the fields every spec shares.

    'group' falls back to the pluralized typename ("options", "flags"),
    'descr' to None.
    """
    group = _clean_text(cls, "group", metadata["group"])
    metadata["group"] = coalesce(group, pluralize(cls.__typename__.replace("-", " ")))
    metadata["descr"] = coalesce(_clean_text(cls, "descr", metadata["descr"], rich=True))


def _sanitize_names(cls, metadata, /):
    """
    Freeze the aliases as a tuple, in the order they were given.

    "-x", "-long", "--long" and "--long-name" are all accepted and letters
    may be unicode; underscores, leading digits and repeats are not.
    """
    if not (raw := metadata["names"]):
        raise TypeError(f"{cls.__typename__} needs at least one name")
    if not all(isinstance(name, str) for name in raw):
        raise TypeError(f"{cls.__typename__} names must be strings")

    names = tuple(name.strip() for name in raw)
    for name in names:
        if not _OPTION_NAME.fullmatch(name):
            raise ValueError(f"{cls.__typename__} name {name!r} is not a valid option name")
    if len(set(names)) != len(names):
        raise ValueError(f"{cls.__typename__} names must be distinct")
    metadata["names"] = names


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Check the value-bearing fields of an Option.

    choices stay as given when they form a Set; any other iterable is frozen
    to a duplicate-free tuple. Help prints either the metavar or the choices,
    so declaring both is refused.
    """
    metadata["metavar"] = coalesce(_clean_text(cls, "metavar", metadata["metavar"]))

    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    choices = metadata["choices"]
    if isinstance(choices, str) or not isinstance(choices, Iterable):
        raise TypeError(f"{cls.__typename__} 'choices' must be a collection of values")
    if not isinstance(choices, Set):
        choices = tuple(choices)
        if any(choice in choices[:index] for index, choice in enumerate(choices)):
            raise ValueError(f"{cls.__typename__} 'choices' must be distinct")
    metadata["choices"] = choices

    if metadata["metavar"] is not None and metadata["choices"]:
        raise TypeError(f"{cls.__typename__} takes a 'metavar' or 'choices', not both")


class Option[_T](metaclass=IntrospectableType):
    """
    Named, value-bearing option declaration.

    Properties
    - Every name in __introspectable__ is a read-only attribute mirroring the
      sanitized metadata.
    """

    __introspectable__ = (
        "names",
        "metavar",
        "type",
        "default",
        "choices",
        "required",
        "group",
        "descr",
        "hidden",
    )

    __displayable__ = (
        "names",
        "metavar",
        "default",
        "choices",
        "required",
        "group",
    )

    def __init__(
            self,
            *names,
            metavar=Unset,
            type=str,
            default=None,
            choices=(),
            required=False,
            group=Unset,
            descr=Unset,
            hidden=False
    ):
        metadata = {
            "names": names,
            "metavar": metavar,
            "type": type,
            "default": default,
            "choices": choices,
            "required": bool(required),
            "group": group,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_names(builtins.type(self), metadata)
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_parametric_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def __option__(self):
        """
        Introspection hook: identify this spec as an Option.
        """
        return self


class Flag(metaclass=IntrospectableType):
    """
    Named, presence-only switch declaration.
    """

    __introspectable__ = (
        "names",
        "group",
        "descr",
        "hidden",
    )

    def __init__(self, *names, group=Unset, descr=Unset, hidden=False):
        metadata = {
            "names": names,
            "group": group,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_names(type(self), metadata)
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def __flag__(self):
        """
        Introspection hook: identify this spec as a Flag.
        """
        return self


__all__ = (
    "Option",
    "Flag",
)
