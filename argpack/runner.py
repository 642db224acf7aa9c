"""
argpack run driver: parse, report, dispatch.

run(root, argv) is the thin collaborator around parse():
- argv defaults to sys.argv; a single string is split with shlex.split and
  the root command's name is used as the program name.
- warnings are printed first (they never stop execution).
- when the pack carries errors, they are printed together as one ParseExit
  and 1 is returned; the handler is not called.
- otherwise the resolved command's handler is called with the pack; its
  result becomes the exit status (0 for None or when there is no handler).

Everything is printed on a stderr rich console.
"""
import copy
import shlex
import sys

from rich.console import Console

from .faults import ParseExit
from .parser import parse
from .tokens import DEFAULT_SYNTAX
from .utils import Unset

console = Console(stderr=True)


def report(pack, /, *, fancy=False, colorful=True):
    """
    Print a pack's warnings, then its errors (if any) as a single ParseExit.

    Returns True when errors were printed.
    """
    prog = pack.program
    for warning in pack.warnings:
        console.print(copy.replace(warning, prog=prog, fancy=fancy, colorful=colorful, width=console.width))
    if not pack.errors:
        return False
    console.print(ParseExit(pack.errors, prog=prog, fancy=fancy, colorful=colorful, width=console.width))
    return True


def run(root, argv=Unset, /, *, syntax=DEFAULT_SYNTAX, fancy=False, colorful=True):
    """
    Parse 'argv' against 'root', report diagnostics and call the handler.

    Parameters
    - argv:
      • Unset: sys.argv (program name first).
      • str: shell-like string of arguments; split with shlex.split.
      • Iterable[str]: full argument vector, program name first.

    Returns the process exit status.
    """
    if argv is Unset:
        argv = sys.argv
    elif isinstance(argv, str):
        argv = [root.name, *shlex.split(argv)]

    with parse(argv, root, syntax=syntax) as pack:
        if report(pack, fancy=fancy, colorful=colorful):
            return 1
        if pack.command.handler is None:
            return 0
        result = pack.command.handler(pack)
        return 0 if result is None else int(result)


__all__ = (
    "report",
    "run",
)
