r"""
argpack tokenizer: one token stream out of argv and response files.

Sources
- The argument vector is the bottom of the logical source. Its entries were
  already split by the invoking shell, so each entry is one raw token.
- A raw token starting with the sigil ("@path") names a response file. The
  file is read fully into memory and pushed as a Frame on an explicit stack;
  tokens are then pulled from the top frame until it is exhausted and popped.
  Nesting is limited only by memory since no recursion is involved.
- Inside a frame, a raw token is a maximal run of non-whitespace characters,
  except that whitespace between a matching pair of quotes does not end the
  run. An unterminated quote runs to the end of the frame.

Value delimiters
- For a raw token that starts with an option prefix, the first "=" or ":"
  outside quotes splits it: the name part is returned with delimited=True and
  the rest is held back and returned by the next call with attached=True.
  The held-back part is returned even when empty ("--name=").
- Detection can be switched off (splitting=False) once the parser has seen the
  escape token, after which every token is a plain value.

Quoting
- Token.text is the raw text without one surrounding pair of matching quotes;
  Token.raw keeps the quotes so the parser can report malformed quoting when
  the token is used as a value.

Failures
- Unreadable response files are reported through the 'report' callback as
  ResponseFileError and an empty frame is pushed so push/pop stays balanced.
- A response file already open on the stack (directly or through other
  files) is reported the same way and not expanded again.

Example
    >>> tokenizer = Tokenizer(["--name=value", "-v"])
    >>> [(token.text, token.delimited, token.attached) for token in tokenizer]
    [('--name', True, False), ('value', False, True), ('-v', False, False)]
"""
import os.path
from collections import deque
from collections.abc import Iterable
from typing import NamedTuple

from .faults import FaultCode, ResponseFileError
from .utils import Unset, coalesce, ordinal


class Syntax(NamedTuple):
    """
    Token grammar understood by the tokenizer and the parser.

    - long_prefix / short_prefix: prefixes of declared long and short names.
    - alternate_prefixes: extra prefixes ("/name", "/n") resolved against the
      declared long and short names; they also allow bundling.
    - delimiters: characters attaching a value to an option name.
    - quotes: characters that open and close a quoted span.
    - sigil: prefix introducing a response file; None disables expansion.
    - escape: token switching the rest of the input to positional values.
    """
    long_prefix: str = "--"
    short_prefix: str = "-"
    alternate_prefixes: tuple[str, ...] = ("/",)
    delimiters: str = "=:"
    quotes: str = "\"'"
    sigil: str | None = "@"
    escape: str = "--"

    @property
    def prefixes(self):
        """
        Every option prefix, longest first.
        """
        return tuple(sorted({self.long_prefix, self.short_prefix, *self.alternate_prefixes}, key=len, reverse=True))

    def prefix(self, text, /):
        """
        Longest option prefix of 'text' followed by at least one character, or None.
        """
        for prefix in self.prefixes:
            if text.startswith(prefix) and len(text) > len(prefix):
                return prefix
        return None


DEFAULT_SYNTAX = Syntax()


class Token(NamedTuple):
    """
    One lexical token.

    - text: token without one surrounding pair of matching quotes.
    - raw: token as read.
    - delimited: the raw token ended at a value delimiter; an attached value follows.
    - attached: this token is the value held back after a delimited token.
    - position: 1-based ordinal of the raw read that produced the token.
    - origin: response-file path, or None for argv entries.
    """
    text: str
    raw: str
    delimited: bool = False
    attached: bool = False
    position: int = 0
    origin: str | None = None


def unquote(text, /, quotes=DEFAULT_SYNTAX.quotes):
    """
    Remove one surrounding pair of matching quotes, if present.
    """
    if len(text) >= 2 and text[0] in quotes and text[-1] == text[0]:
        return text[1:-1]
    return text


def malformed(text, /, quotes=DEFAULT_SYNTAX.quotes):
    """
    True when 'text' opens a quote it does not close with the same character.

    '""' is well formed (an empty value); '"', '"abc' and '"abc\'' are not.
    """
    return bool(text) and text[0] in quotes and (len(text) < 2 or text[-1] != text[0])


class Frame:
    """
    In-memory buffer of one response file with a read cursor.
    """
    __slots__ = ("text", "cursor", "origin")

    def __init__(self, text, origin, /):
        self.text = text
        self.cursor = 0
        self.origin = origin

    @property
    def exhausted(self):
        return self.cursor >= len(self.text)

    def read(self, quotes=DEFAULT_SYNTAX.quotes):
        """
        Next raw token of the buffer, or None once only whitespace remains.
        """
        text, cursor, length = self.text, self.cursor, len(self.text)

        while cursor < length and text[cursor].isspace():
            cursor += 1
        if cursor >= length:
            self.cursor = cursor
            return None

        start = cursor
        quote = None
        while cursor < length:
            character = text[cursor]
            if quote:
                if character == quote:
                    quote = None
            elif character in quotes:
                quote = character
            elif character.isspace():
                break
            cursor += 1

        self.cursor = cursor
        return text[start:cursor]


class Tokenizer:
    """
    Pull-based token source over argv entries and a stack of response files.

    Parameters
    - arguments: Iterable[str], the argument vector without the program name.
    - syntax: Syntax, token grammar (defaults to DEFAULT_SYNTAX).
    - report: callable receiving ParseError objects (response-file failures).
      Defaults to collecting them on the tokenizer's 'faults' list.

    Contract
    - next_token() returns a Token or None once argv and every frame are
      exhausted; at that point depth is zero.
    - iterating the tokenizer yields the same tokens.
    """

    def __init__(self, arguments, /, *, syntax=DEFAULT_SYNTAX, report=Unset):
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError("tokenizer arguments must be an iterable of strings")
        self._arguments = deque(arguments)
        if not all(isinstance(argument, str) for argument in self._arguments):
            raise TypeError("tokenizer arguments must be an iterable of strings")
        self._syntax = syntax
        self._stack = []
        self._remainder = None
        self._position = 0
        self.faults = []
        self._report = coalesce(report, self.faults.append)
        self.splitting = True

    @property
    def depth(self):
        """
        Current response-file nesting depth.
        """
        return len(self._stack)

    @property
    def position(self):
        """
        Ordinal of the last raw read (0 before the first one).
        """
        return self._position

    def __iter__(self):
        while (token := self.next_token()) is not None:
            yield token

    def next_token(self):
        if self._remainder is not None:
            raw, origin = self._remainder
            self._remainder = None
            return Token(unquote(raw, self._syntax.quotes), raw, False, True, self._position, origin)

        while True:
            if self._stack:
                frame = self._stack[-1]
                if (raw := frame.read(self._syntax.quotes)) is None:
                    self._stack.pop()
                    continue
                origin = frame.origin
            elif self._arguments:
                raw = self._arguments.popleft()
                origin = None
            else:
                return None

            self._position += 1

            if self._syntax.sigil and raw.startswith(self._syntax.sigil):
                self._include(raw[len(self._syntax.sigil):], origin)
                continue

            name, value = self._split(raw)
            if value is not None:
                self._remainder = (value, origin)
                return Token(unquote(name, self._syntax.quotes), name, True, False, self._position, origin)
            return Token(unquote(raw, self._syntax.quotes), raw, False, False, self._position, origin)

    def _split(self, raw):
        """
        (name, value) at the first unquoted delimiter of an option-like token,
        else (raw, None).
        """
        if not self.splitting or self._syntax.prefix(raw) is None:
            return raw, None

        quote = None
        for index, character in enumerate(raw):
            if quote:
                if character == quote:
                    quote = None
            elif character in self._syntax.quotes:
                quote = character
            elif character in self._syntax.delimiters:
                return raw[:index], raw[index + 1:]
        return raw, None

    def _include(self, path, origin):
        """
        Push the content of a response file (or an empty frame on failure).
        """
        path = unquote(path, self._syntax.quotes)
        if any(os.path.realpath(frame.origin) == os.path.realpath(path) for frame in self._stack):
            self._report(ResponseFileError(
                "response file '%s' includes itself" % path,
                title="recursive response file",
                code=FaultCode.RESPONSE_FILE,
                position=self._position,
                input=path,
                origin=origin,
                hint="remove the reference at %s position of response file %r" % (ordinal(self._position), origin),
            ))
            return
        try:
            with open(path, encoding="utf-8") as stream:
                text = stream.read()
        except (OSError, UnicodeDecodeError) as exception:
            where = "response file %r" % origin if origin else "the command line"
            self._report(ResponseFileError(
                "failed to read response file '%s'" % path,
                title="unreadable response file",
                code=FaultCode.RESPONSE_FILE,
                position=self._position,
                input=path,
                origin=origin,
                hint="check the path referenced at %s position of %s" % (ordinal(self._position), where),
                exception=exception,
            ))
            text = ""
        self._stack.append(Frame(text, path))


__all__ = (
    "Syntax",
    "DEFAULT_SYNTAX",
    "Token",
    "Frame",
    "Tokenizer",
    "unquote",
    "malformed",
)
