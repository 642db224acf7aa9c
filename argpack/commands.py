"""
argpack command layer: declare the static command tree the parser reads.

What this module provides
- Command: a node of the caller-owned tree with
  • a name (matched exactly against subcommand tokens),
  • an optional description and handler (opaque to the parser),
  • ordered option descriptors (named and positional),
  • ordered child commands.
- command(...): build a Command from a handler function, or return a decorator
  that does so (name from __name__, description from the docstring).

Core ideas
- The tree is declared once and read-only while parsing; the same tree can be
  parsed any number of times.
- Declaration mistakes are programming errors and raise immediately
  (TypeError for wrong shapes, ValueError for clashing names); user input
  problems never raise, they become diagnostics on the Pack.
- The tree is a tree, not a DAG: a command can be attached to one parent only.

Quick start
    from argpack import Arity, Option, command, run

    @command
    def tool(pack):
        "Render a template."
        print(pack.argument("--name").value)

    tool.add_option(Option("--name", "-n", arity=Arity.EXACTLY_ONE))
    tool.add_option(Option("--verbose", "-v"))

    @tool.command
    def clean(pack):
        "Remove generated files."

    if __name__ == "__main__":
        raise SystemExit(run(tool))
"""
import functools
import inspect
import operator
import re

from rich.text import Text

from .arguments import Option
from .utils import *


class CommandType(type):
    """
    Metaclass exposing __introspectable__ names as read-only properties and
    giving commands a stable __repr__/__rich_repr__ (see argpack.arguments).
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


def _sanitize_strings(cls, metadata):
    """
    Normalize the scalar string fields (name, descr).

    - name must be a non-empty string after trimming and contain no whitespace,
      since it is matched against a single token.
    - descr is Unset | str | Text; non-empty when given; Unset becomes None.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif any(character.isspace() for character in name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if metadata["handler"] is not Unset and not callable(metadata["handler"]):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")
    metadata["handler"] = coalesce(metadata["handler"])


class Command(metaclass=CommandType):
    """
    Node of the static command tree.

    Responsibilities
    - Introspection: name, descr, handler, options, children and parent are
      read-only properties (containers are handed out as copies).
    - Composition: add_option/add_subcommand append in declaration order;
      positional options bind in that order.
    - Lookup helpers used by the parser: child(name), option(name) and
      positionals.
    - Teardown: release() drops every owned option and subcommand once.

    Notes
    - The handler is never called by the parser. The run driver calls it with
      the Pack when a parse finished without errors.
    """

    __introspectable__ = (
        "name",
        "descr",
        "handler",
        "options",
        "children",
        "parent",
    )

    __displayable__ = (
        "name",
        "descr",
        "options",
        "children",
    )

    def __init__(self, name, /, descr=Unset, handler=Unset, *, parent=Unset):
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a command")

        metadata = {
            "name": name,
            "descr": descr,
            "handler": handler,
        }
        _sanitize_strings(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._options = []
        self._children = []
        self._parent = None
        self._released = False

        if parent:
            parent.add_subcommand(self)

    @property
    def root(self):
        """
        Topmost command of the hierarchy this command belongs to.
        """
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Ancestry from root to this command (root first).
        """
        path = [command := self]
        while command._parent:
            path.append(command := command._parent)
        return tuple(reversed(path))

    @property
    def positionals(self):
        """
        Positional options in declaration order.
        """
        return tuple(option for option in self._options if option.positional)

    def add_option(self, option, /):
        """
        Append an option descriptor; names must be unique within the command.

        Returns the option so declarations can be kept in a variable.
        """
        if not isinstance(option, Option):
            raise TypeError(f"{type(self).__typename__} option must be an option")
        if any(option is declared for declared in self._options):
            raise ValueError(f"{type(self).__typename__} option is already declared")
        for name in option.names:
            if self.option(name) is not None:
                raise ValueError(f"{type(self).__typename__} option name {name!r} is already in use")
        self._options.append(option)
        return option

    def add_subcommand(self, command, /):
        """
        Attach a child command; names must be unique among siblings.

        Returns the child.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} subcommand must be a command")
        if command._parent is not None:
            raise ValueError(f"{type(self).__typename__} {command.name!r} is already attached to a parent")
        if command is self or command in self.path:
            raise ValueError(f"{type(self).__typename__} cannot be attached under itself")
        if self.child(command.name) is not None:
            typeof = "subcommand" if self._parent else "command"
            raise ValueError(f"{type(self).__typename__} {typeof} name {command.name!r} is already in use")
        command._parent = self
        self._children.append(command)
        return command

    def command(self, source=Unset, /, **kwargs):
        """
        Create a subcommand under this command (direct or decorator form).

        Thin wrapper around the module-level command(...) that injects
        parent=self, so callers never pass it explicitly.
        """
        return command(source, parent=self, **kwargs)

    def child(self, name, /):
        """
        Child command with exactly this name, or None.
        """
        for child in self._children:
            if child._name == name:
                return child
        return None

    def option(self, name, /):
        """
        Named option declared with this long or short name, or None.
        """
        for option in self._options:
            if name in option.names:
                return option
        return None

    def release(self):
        """
        Recursively release owned options and subcommands exactly once.

        Later calls are no-ops. The command keeps its name and description so
        it can still be displayed, but it no longer has options or children.
        """
        if self._released:
            return
        self._released = True
        for child in self._children:
            child.release()
            child._parent = None
        self._children.clear()
        self._options.clear()


def command(source=Unset, /, **kwargs):
    """
    Create a Command from a handler or return a decorator that does.

    Invocation modes
    - Direct:    cmd = command(handler, descr=..., parent=...)
    - Decorator: @command(name="x") above a function

    Defaults
    - name: the handler's __name__ with underscores turned into dashes.
    - descr: the handler's docstring (first paragraph of inspect.getdoc).

    Parameters
    - **kwargs: forwarded to Command (parent); 'name' and 'descr' override
      the defaults above.
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        options = dict(kwargs)
        name = options.pop("name", Unset)
        descr = options.pop("descr", Unset)
        if name is Unset:
            name = getattr(source, "__name__", Unset)
            if not isinstance(name, str):
                raise TypeError("@command() callable must have a __name__ or an explicit 'name'")
            name = name.replace("_", "-")
        if descr is Unset and (docstring := inspect.getdoc(source)):
            descr = docstring.split("\n\n")[0]
        return Command(name, descr, source, **options)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "command",
)

# Remove the internal metaclass from the module namespace (not part of the public API).
del CommandType
