"""
Argtree utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the declaration, command and help layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None.
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] are preserved.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers are
    handed out as fresh copies so callers cannot mutate node state through them.

- pluralize(text)
  • Tiny English pluralizer for default group labels ("option" → "options").

- IntrospectableType
  • Metaclass shared by specs, groups and command nodes: derives __typename__,
    publishes __introspectable__ names through mirror(), and gives every class a
    stable __repr__/__rich_repr__.

- Palette
  • Style lookup for rich output: built-in defaults, overridden by a
    __styles__ mapping in __main__, all blanked when colors are off.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import builtins
import functools
import operator
import re
from collections import defaultdict
from collections.abc import Sequence, Mapping, Set
from typing import final

from rich.text import Text


@final
class UnsetType:
    """
    Sentinel type for “not provided”.

    Used where None is a meaningful user value (a handler may legitimately be
    None, for example) and the API still has to tell “omitted” apart.

    Characteristics
    - Boolean-false, repr "Unset", one instance per process, sealed.
    - Usable in isinstance() unions: isinstance(value, str | Unset).
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


Unset = UnsetType()
"""
Singleton for “not provided”; materialize with coalesce(value, default).
"""


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values (None, 0, "", []) are never treated as “unset”.
    """
    return default if object is Unset else object


def _relabel(target, name):
    if not builtins.callable(target):
        raise TypeError(f"rename() target must be callable, not {type(target).__name__}")
    try:
        target.__name__ = target.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError("rename() target does not accept a new name") from None
    return target


def rename(*parameters):
    """
    Give a callable a new __name__ and __qualname__.

    rename(callable, name) relabels in place and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    if not 1 <= len(parameters) <= 2:
        raise TypeError(f"rename() takes 1 or 2 arguments ({len(parameters)} given)")
    if not isinstance(name := parameters[-1], str):
        raise TypeError("rename() name must be a string")
    if len(parameters) == 2:
        return _relabel(parameters[0], name)
    return functools.partial(_relabel, name=name)


def _immortalize(object):
    """
    Hand out a detached copy of object.

    Containers are rebuilt recursively (sequences as lists, mappings as dicts,
    sets as sets; strings are left alone). Unset reads as None.
    """
    match object:
        case str():
            return object
        case Sequence():
            return [_immortalize(item) for item in object]
        case Mapping():
            return {key: _immortalize(value) for key, value in object.items()}
        case Set():
            return {_immortalize(item) for item in object}
        case _:
            return coalesce(object)


def mirror(name, /):
    """
    Build a read-only property reading self._{name} through _immortalize.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(rename(getter, name))


@functools.cache
def pluralize(text, /):
    """
    Pluralize the last word of text, preserving the rest of the phrase.

    Only the regular English rules plus a couple of irregulars are covered;
    the helper labels option groups, nothing more.

    Examples
    - pluralize("option")         -> "options"
    - pluralize("switch")         -> "switches"
    - pluralize("command entry")  -> "command entries"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")

    if not (match := re.search(r"(\S+)(\s*)$", text)):
        return text

    head, last, trail = text[:match.start(1)], match.group(1), match.group(2)
    lower = last.lower()

    irregulars = {
        "person": "people",
        "child": "children",
        "index": "indices",
        "alias": "aliases",
    }
    if lower in irregulars:
        plural = irregulars[lower]
    elif lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if last.isupper():
        plural = plural.upper()
    elif last[:1].isupper():
        plural = plural[:1].upper() + plural[1:]

    return head + plural + trail


class IntrospectableType(type):
    """
    Metaclass for the library's introspectable objects.

    Responsibilities
    - __typename__: class name split on camel-case humps with hyphens and
      lowercased ("Command" → "command"), used as the prefix of every
      validation message raised on behalf of the class.
    - One mirror() property per name listed in the class' __introspectable__.
    - __repr__ and __rich_repr__ built from __displayable__ when set, otherwise
      from __introspectable__.

    Notes
    - Names listed in __displayable__ must not lead back up the tree (a child
      printing its parent would recurse forever).
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Palette:
    """
    Named styles for one rendering pass.

    palette[key] is the style string for key ("" when colors are off or the key
    is unknown); palette(fragment, key) wraps fragment into a Text with it.
    A fragment that already is a Text keeps its own styling when colors are on.
    """

    def __init__(self, defaults, /, *, colorful=True):
        self._styles = defaultdict(str, dict(defaults) | getattr(__import__("__main__"), "__styles__", {}))
        self._colorful = bool(colorful)

    def __getitem__(self, key, /):
        return self._styles[key] if self._colorful else ""

    def __call__(self, fragment, key="", /):
        if not fragment:
            return Text("")
        if not self._colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment.copy()
        return Text(str(fragment), self[key])


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",

    # Types
    "UnsetType",
    "IntrospectableType",
    "Palette",

    # Constants
    "Unset",
)
