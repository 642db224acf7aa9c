r"""
argpack option descriptors and runtime argument bindings.

Overview
- Arity: declared cardinality of an option (ZERO, ZERO_OR_ONE, EXACTLY_ONE,
  ZERO_OR_MORE, ONE_OR_MORE). Each member knows its minimum/maximum and how to
  describe itself in diagnostics. Arity.coerce also understands the nargs
  shorthands 0, "?", 1, "*" and "+".
- Option: immutable, caller-declared descriptor.
  • Named: a long name ("--output") and/or a short name ("-o").
  • Positional: no names at all; bound by declaration order.
  • Optional converter ('type') turning raw text into a domain value.
- Argument: per-parse binding of one Option to the values encountered on the
  input, in encounter order. Created by the parser, owned by the Pack.

Introspection & representation
- ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
  fields declared in __introspectable__ as read-only properties (see mirror()).

Validation highlights
- Long names must match r"--[^\W\d_](-?[^\W_]+)*" (unicode letters allowed).
- Short names must match r"-[^\W_]" (a single letter or digit) so they can be
  bundled ("-abc").
- At most one long and one short name per option; duplicates are rejected.
- descr must be a non-empty string when provided; type must be callable.

Example
    >>> Option("--name", "-n", arity=Arity.EXACTLY_ONE).preferred
    '--name'
    >>> Option(arity="+").positional
    True
"""
import builtins
import functools
import operator
import re
from enum import Enum

from rich.text import Text

from .utils import *


class Arity(Enum):
    """
    declared cardinality: (minimum, maximum) values, maximum None = unbounded.
    """
    ZERO = (0, 0)
    ZERO_OR_ONE = (0, 1)
    EXACTLY_ONE = (1, 1)
    ZERO_OR_MORE = (0, None)
    ONE_OR_MORE = (1, None)

    @property
    def minimum(self):
        return self.value[0]

    @property
    def maximum(self):
        return self.value[1]

    def accepts(self, count, /):
        """
        True when an argument already holding 'count' values may take another.
        """
        return self.maximum is None or count < self.maximum

    def admits(self, count, /):
        """
        True when 'count' collected values satisfy this arity.
        """
        return count >= self.minimum and (self.maximum is None or count <= self.maximum)

    def describe(self):
        return {
            Arity.ZERO: "no values",
            Arity.ZERO_OR_ONE: "at most one value",
            Arity.EXACTLY_ONE: "exactly one value",
            Arity.ZERO_OR_MORE: "any number of values",
            Arity.ONE_OR_MORE: "at least one value",
        }[self]

    @classmethod
    def coerce(cls, object, /):
        """
        Accept an Arity member or one of the nargs shorthands 0, "?", 1, "*", "+".
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, bool) or not isinstance(object, int | str):
            raise TypeError("arity must be an Arity member, 0, 1, '?', '*' or '+'")
        try:
            return {
                0: cls.ZERO,
                "?": cls.ZERO_OR_ONE,
                1: cls.EXACTLY_ONE,
                "*": cls.ZERO_OR_MORE,
                "+": cls.ONE_OR_MORE,
            }[object]
        except KeyError:
            raise ValueError("arity must be an Arity member, 0, 1, '?', '*' or '+'") from None


class ArgumentType(type):
    """
    Metaclass that turns descriptors into introspectable, read-only records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_{name}" (see mirror()), unless the class defines it itself.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in declaration-time error messages.
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
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: split declared names into 'long' and 'short'.

    Rules
    - zero names: positional option (both stay None).
    - "--word" forms are long names, "-c" forms are short names.
    - at most one of each; duplicates and other spellings are rejected.
    """
    metadata["long"] = metadata["short"] = None

    for name in metadata.pop("names"):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            kind = "long"
        elif re.fullmatch(r"-[^\W_]", name):
            kind = "short"
        else:
            raise ValueError(f"{cls.__typename__} name {name!r} must look like '--name' or '-n'")

        if metadata[kind] is not None:
            if metadata[kind] == name:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            raise ValueError(f"{cls.__typename__} can have only one {kind} name")
        metadata[kind] = name


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate descr, arity and type, applying defaults.

    - descr: Unset | str | Text, non-empty after trimming; Unset becomes None.
    - arity: coerced through Arity.coerce; defaults to ZERO for named options
      (presence-only switches) and EXACTLY_ONE for positionals.
    - type: Unset or a callable converter; Unset becomes None (raw text is kept).
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    positional = metadata["long"] is None and metadata["short"] is None
    metadata["arity"] = Arity.coerce(coalesce(metadata["arity"], Arity.EXACTLY_ONE if positional else Arity.ZERO))

    if metadata["type"] is not Unset and not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")
    metadata["type"] = coalesce(metadata["type"])


class Option(metaclass=ArgumentType):
    """
    Immutable option descriptor.

    An Option declares how tokens bind to it: by name (long "--output" or short
    "-o") or, when it has no names, by position among the other positionals of
    the same command. Its arity bounds how many values it collects and its
    optional converter ('type') turns each raw value into a domain object.
    A converter signals rejection by raising any exception.
    """

    __introspectable__ = (
        "long",
        "short",
        "descr",
        "arity",
        "type",
    )

    def __init__(self, *names, descr=Unset, arity=Unset, type=Unset):
        metadata = {
            "names": names,
            "descr": descr,
            "arity": arity,
            "type": type,
        }
        _sanitize_names(builtins.type(self), metadata)
        _sanitize_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def names(self):
        """
        Declared names, long first; empty for positionals.
        """
        return tuple(name for name in (self._long, self._short) if name is not None)

    @property
    def positional(self):
        return not self.names

    @property
    def preferred(self):
        """
        Name used in diagnostics: the long name when present, else the short one.
        """
        return self._long or self._short


class Argument(metaclass=ArgumentType):
    """
    Runtime binding of one Option to its parsed values.

    Values are kept in input encounter order. Only the parser appends to an
    argument; the public 'values' property hands out copies.
    """

    __introspectable__ = (
        "option",
        "values",
    )

    def __init__(self, option, /):
        if not isinstance(option, Option):
            raise TypeError(f"{type(self).__typename__} 'option' must be an option")
        self._option = option
        self._values = []

    @property
    def values(self):
        """
        Shallow copy of the bound values; converted objects come back as-is.
        """
        return list(self._values)

    @property
    def count(self):
        return len(self._values)

    @property
    def value(self):
        """
        First value, or None when nothing was bound.
        """
        return self._values[0] if self._values else None

    def accepts(self):
        """
        True while the option's arity allows one more value.
        """
        return self._option.arity.accepts(len(self._values))

    def _append(self, value, /):
        self._values.append(value)


__all__ = (
    "Arity",
    "Option",
    "Argument",
)

# Remove the internal metaclass from the module namespace (not part of the public API).
del ArgumentType
