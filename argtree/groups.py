"""
Argtree option groups: the declarations owned by one command node.

What this module provides
- Group: holds a command's short/long description and the option metadata
  collected from its handler.
  • scan(handler): walk the handler's type (MRO, then declaration order) and
    collect every Option/Flag declared as a class attribute.
  • lookup(name): find the spec declared under any alias.
  • add(attribute, spec): declare one more spec (used for the built-in help flag).
  • sections(): specs bucketed by their group label, for help rendering.

Declaration rules
- A class attribute is a declaration when its value is an Option or a Flag, or
  any object exposing exactly one of the __option__()/__flag__() hooks.
- Dunder attributes and classes are never declarations.
- A subclass attribute overrides the attribute of the same name in a base class.
- An option name may be claimed by one spec only.

Errors
- TypeError: a hook returns the wrong kind of spec, or an object exposes both hooks.
- ValueError: two declarations claim the same option name.
A failed scan leaves the group exactly as it was.
"""
import builtins

from rich.text import Text

from .arguments import Option, Flag
from .utils import *


def _declarations(handler):
    """
    Yield (attribute, value) pairs declared on type(handler), bases first.
    """
    declarations = {}
    for klass in reversed(builtins.type(handler).__mro__):
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name.startswith("__") and name.endswith("__"):
                continue
            declarations[name] = value
    yield from declarations.items()


def _resolve_argument(cls, attribute, value):
    """
    Return the spec declared by value, or Unset when value declares nothing.
    """
    if isinstance(value, builtins.type):
        return Unset

    hooks = (
        hasattr(value, "__option__") and callable(value.__option__),
        hasattr(value, "__flag__") and callable(value.__flag__),
    )
    if not any(hooks):
        return Unset
    if all(hooks):
        raise TypeError(f"{cls.__typename__} attribute {attribute!r} must declare either an option or a flag")

    if hooks[0]:
        if not isinstance(option := value.__option__(), Option):
            raise TypeError(f"{cls.__typename__} attribute {attribute!r} __option__() non-option returned")
        return option

    if not isinstance(flag := value.__flag__(), Flag):
        raise TypeError(f"{cls.__typename__} attribute {attribute!r} __flag__() non-flag returned")
    return flag


def _claim(cls, options, spec):
    """
    Fan the spec's aliases out into options, rejecting names already in use.
    """
    for name in spec.names:
        if name in options:
            raise ValueError(f"{cls.__typename__} name {name!r} is already in use")
        options[name] = spec


class Group(metaclass=IntrospectableType):
    """
    The declared options of one command node.

    A group is created empty by its command node, filled once by scan() and
    never replaced. The node forwards lookups to it.
    """

    __introspectable__ = (
        "descr",
        "details",
        "options",
        "arguments",
    )

    __displayable__ = (
        "descr",
        "arguments",
    )

    def __init__(self, descr=Unset, details=Unset, /):
        for name, object in (("descr", descr), ("details", details)):
            if object is None:
                object = Unset
            if not isinstance(object, str | Text | Unset):
                raise TypeError(f"{type(self).__typename__} {name!r} must be a string")
            elif isinstance(object, str) and not (object := object.strip()):
                raise ValueError(f"{type(self).__typename__} {name!r} cannot be empty")
            setattr(self, "_" + name, coalesce(object))

        self._options = {}
        self._arguments = {}

    def scan(self, handler, /):
        """
        Collect the declarations of handler into this group.

        Work happens on copies that replace the live mappings only once every
        declaration has been accepted.
        """
        options = dict(self._options)
        arguments = dict(self._arguments)

        for attribute, value in _declarations(handler):
            if (spec := _resolve_argument(type(self), attribute, value)) is Unset:
                continue
            if attribute in arguments:
                raise ValueError(f"{type(self).__typename__} attribute {attribute!r} is already declared")
            _claim(type(self), options, spec)
            arguments[attribute] = spec

        self._options = options
        self._arguments = arguments

    def add(self, attribute, spec, /):
        """
        Declare spec under attribute, with the same rules as scan().
        """
        if not isinstance(attribute, str):
            raise TypeError(f"{type(self).__typename__} attribute must be a string")
        if not isinstance(spec, Option | Flag):
            raise TypeError(f"{type(self).__typename__} spec must be an option or a flag")
        if attribute in self._arguments:
            raise ValueError(f"{type(self).__typename__} attribute {attribute!r} is already declared")

        options = dict(self._options)
        _claim(type(self), options, spec)
        self._options = options
        self._arguments[attribute] = spec
        return spec

    def lookup(self, name, /):
        """
        Return the spec declared under the alias name, or None.
        """
        return self._options.get(name)

    def sections(self):
        """
        Return {label: [spec, ...]} in declaration order, one entry per spec.
        """
        sections = {}
        for spec in self._arguments.values():
            sections.setdefault(spec.group, []).append(spec)
        return sections

    def clone(self):
        """
        Return a new group with the same descriptions and declarations.
        """
        group = type(self)(*(Unset if value is None else value for value in (self._descr, self._details)))
        group._options = dict(self._options)
        group._arguments = dict(self._arguments)
        return group


__all__ = (
    "Group",
)
