"""
argpack result pack: what a parse produced.

A Pack holds
- program: argv[0] (None when the argument vector was empty),
- command: the resolved, possibly nested, command,
- arguments: one Argument per matched option, in creation order,
- errors: ordered diagnostics (ParseError objects, never raised),
- warnings: ordered ConversionWarning objects.

An empty 'errors' list is the only success signal. A pack with some bound
arguments and some errors is a valid partial result.

Lifetime
- Produced fresh by every parse() call and owned by the caller.
- release() (or leaving a `with` block) drops every value, argument and
  diagnostic exactly once; later calls are no-ops.

Lookups
- get_argument(pack, name): bound argument by long or short name.
- get_positional(pack, index): bound positional by 0-based declared position.
- get_value(pack, name, default=None): first value of a named argument.
- has_option(pack, name): whether a named option was matched at all.
"""
from .arguments import Argument


class Pack:
    """
    Aggregate parse result (see module docstring).
    """

    def __init__(self, program, command, /):
        self._program = program
        self._command = command
        self._arguments = []
        self._errors = []
        self._warnings = []
        self._released = False

    def __repr__(self):
        return "pack(program=%r, command=%r, arguments=%r, errors=%r)" % (
            self._program, getattr(self._command, "name", None), self._arguments, [str(error) for error in self._errors]
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.release()

    @property
    def program(self):
        return self._program

    @property
    def command(self):
        return self._command

    @property
    def arguments(self):
        return tuple(self._arguments)

    @property
    def errors(self):
        return tuple(self._errors)

    @property
    def warnings(self):
        return tuple(self._warnings)

    @property
    def released(self):
        return self._released

    def argument(self, name, /):
        """
        Bound argument whose option is declared with 'name', or None.
        """
        if not isinstance(name, str):
            raise TypeError("pack argument name must be a string")
        for argument in self._arguments:
            if name in argument.option.names:
                return argument
        return None

    def positional(self, index, /):
        """
        Bound argument of the index-th (0-based) positional of the resolved command, or None.
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError("pack positional index must be an integer")
        if self._command is None or not 0 <= index < len(positionals := self._command.positionals):
            return None
        for argument in self._arguments:
            if argument.option is positionals[index]:
                return argument
        return None

    def release(self):
        """
        Drop every value, argument and diagnostic; safe to call more than once.
        """
        if self._released:
            return
        self._released = True
        for argument in self._arguments:
            argument._values.clear()
        self._arguments.clear()
        self._errors.clear()
        self._warnings.clear()

    def _argument(self, option, /):
        """
        Get-or-create the argument bound to 'option' (parser use only).
        """
        for argument in self._arguments:
            if argument.option is option:
                return argument
        self._arguments.append(argument := Argument(option))
        return argument


def get_argument(pack, name, /):
    return pack.argument(name)


def get_positional(pack, index, /):
    return pack.positional(index)


def get_value(pack, name, default=None, /):
    """
    First value bound to the named option, or 'default' when it was not
    matched or collected no value.
    """
    if (argument := pack.argument(name)) is None or not argument.count:
        return default
    return argument.value


def has_option(pack, name, /):
    return pack.argument(name) is not None


__all__ = (
    "Pack",
    "get_argument",
    "get_positional",
    "get_value",
    "has_option",
)
