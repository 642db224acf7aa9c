"""
argpack faults (diagnostics and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing
  problem a parse can surface. Codes are grouped by domain so logs and
  searches stay predictable.
- ParseError: base type for diagnostics. Diagnostics are exception objects
  that the parser records on Pack.errors instead of raising; callers inspect
  the list (partial success is valid) and may raise them if they wish.
- ConversionWarning: non-fatal notes emitted by a caller's converter,
  recorded on Pack.warnings.
- ParseExit: an ExceptionGroup bundling a pack's errors for the driver.

Rendering
- Every fault knows how to render itself with rich (`__rich__`): a header with
  program name, fault code and title, the message, and a hint arrow.
- Render-time options (prog, colorful, fancy, ratio) are merged with
  copy.replace(fault, **options) so recorded diagnostics stay immutable.
- Hosts may customize the palette with a __styles__ mapping, the code labels
  with __codes__ and the program name with __prog__, all read from __main__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - structural (2100x)
      • EMPTY_ARGUMENTS
    - matching (2101x)
      • UNKNOWN_OPTION, UNEXPECTED_ARGUMENT
    - values (2102x)
      • MISSING_VALUE, MALFORMED_QUOTING, CONVERSION_FAILED
    - sources (2103x)
      • RESPONSE_FILE
    - validation (2104x)
      • ARITY_MISMATCH
    - warnings (2200x)
      • CONVERSION_WARNING

    normalize() lets the host remap codes to friendlier labels while the
    numeric values stay stable.
    """
    # --- structural errors ---
    EMPTY_ARGUMENTS     = 21001

    # --- matching errors ---
    UNKNOWN_OPTION      = 21011
    UNEXPECTED_ARGUMENT = 21012

    # --- value errors ---
    MISSING_VALUE       = 21021
    MALFORMED_QUOTING   = 21022
    CONVERSION_FAILED   = 21023

    # --- source errors ---
    RESPONSE_FILE       = 21031

    # --- validation errors ---
    ARITY_MISMATCH      = 21041

    # --- warnings ---
    CONVERSION_WARNING  = 22001

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _header(fault, title, styler, text):
    prog = fault.options.get("prog") or getattr(__import__("__main__"), "__prog__", "")
    parts = ["[ "]
    if prog:
        parts += [text(prog, styler("prog-name")), " — "]
    if "code" in fault.options:
        parts += [text(fault.options["code"].normalize(), styler("code")), " | "]
    parts += [text(title.title(), styler("title")), " ]"]
    return Text.assemble(*parts)


def _render(fault, defaults):
    """
    shared rich rendering for errors and warnings.

    plain mode (colorful=False) keeps the text unstyled; fancy mode wraps the
    body in a panel whose width follows the optional 'ratio' option.
    """
    styles = _palette(defaults)
    colorful = fault.options.get("colorful", True)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    header = _header(fault, fault.options.get("title", "problem"), styler, text)
    message = text(fault.message, styler("message"))
    body = [message]
    if hint := fault.options.get("hint"):
        body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if fault.options.get("fancy", False):
        width = None
        if "ratio" in fault.options and "width" in fault.options:
            width = int(fault.options["width"] * fault.options["ratio"])
        return Panel(Group(*body), title=header, title_align="left", width=width)

    return Group(header, *body)


class ParseError(Exception):
    """
    base diagnostic recorded by the parser.

    attributes
    - message: the lowercased, position-first sentence shown to users.
    - options: read-only mapping with at least 'code' and 'title'; usually
      'hint' and 'position' (1-based token ordinal), plus context such as
      'input' (the token text) or 'option' (the Option involved).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def position(self):
        return self.options.get("position")

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyArgumentsError(ParseError): ...
class UnknownOptionError(ParseError): ...
class UnexpectedArgumentError(ParseError): ...
class MissingValueError(ParseError): ...
class MalformedQuotingError(ParseError): ...
class ConversionError(ParseError): ...
class ResponseFileError(ParseError): ...
class ArityError(ParseError): ...


class ConversionWarning(Warning):
    """
    warning raised by a caller's converter while a value was being parsed.

    the original warning object is kept under options['warning'].
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseExit(ExceptionGroup[ParseError]):
    """
    every error of a failed parse, bundled for the run driver.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })
        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), style if colorful else "")

        prog = self.options.get("prog") or getattr(__import__("__main__"), "__prog__", "")
        header = Text.assemble("[ ", text(prog, styler("prog-name")), " — " * bool(prog), text(self.message.title(), styler("title")), " ]")

        renders = [
            exception.__replace__(**{**self.options, "ratio": 2 / 3}) for exception in self.exceptions
        ]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


__all__ = (
    "FaultCode",
    "ParseError",
    "EmptyArgumentsError",
    "UnknownOptionError",
    "UnexpectedArgumentError",
    "MissingValueError",
    "MalformedQuotingError",
    "ConversionError",
    "ResponseFileError",
    "ArityError",
    "ConversionWarning",
    "ParseExit",
)
