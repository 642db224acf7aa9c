"""
argpack parser: classify tokens, bind values, validate arities.

Phases
- setup
  • a fresh Pack (program name = argv[0]) rooted at the given command.
  • a Tokenizer over argv[1:]; its response-file failures land on pack.errors
    in the order they happen.
- loop (matching), one token at a time, first rule that applies wins:
  1. delimited token ("--name" of "--name=value"): bind it as an option name
     (full name or bundle) and expect its attached value next.
  2. attached value: consumed whole as the pending option's value.
  3. escape token "--": options and subcommands are off for good.
  4. subcommand name of the active command (only before anything else).
  5. option-looking token: full-name match, then all-or-nothing bundling.
  6. the previously selected argument still takes values: append.
  7. the next positional below its arity ceiling takes it.
  8. nothing matched: unknown option / unexpected argument.
- post-parse
  • every option of the resolved command is checked against its arity.

Control strategy
- Nothing a user types makes parse() raise: every problem is appended to
  pack.errors and the next token is processed. A RuntimeError means the
  parser itself broke an internal invariant.
- Parses may run on separate threads. Converters run under a module lock
  while their warnings are captured, so no parse sees another one's warnings.

Messages
- Position-first and lowercased: "unknown option '--nmae' at second position".
- Hints suggest the closest declared names (difflib) when there is one.
"""
import difflib
import threading
import warnings
from collections.abc import Iterable

from .faults import *
from .packs import Pack
from .tokens import DEFAULT_SYNTAX, Tokenizer, malformed
from .utils import *

# warnings.catch_warnings swaps process-wide state; captures never overlap.
_capture = threading.RLock()


class Parser:
    """
    Single-use matcher state for one parse of one command tree.

    State carried across tokens
    - subcommands: subcommand names may still be matched.
    - options: option syntax is still recognized (off after the escape token).
    - pending: Unset when no attached value is expected; otherwise the
      Argument waiting for it, or None when its name did not resolve (the
      value is then dropped, the unknown name was already reported).
    - selected: the argument the previous token bound to, which may keep
      taking values (rule 6).
    """

    def __init__(self, root, /, *, syntax=DEFAULT_SYNTAX):
        if not hasattr(root, "child") or not hasattr(root, "positionals"):
            raise TypeError("parser root must be a command")
        self._root = root
        self._syntax = syntax
        self._pack = None
        self._tokenizer = None
        self._command = root
        self._subcommands = True
        self._options = True
        self._pending = Unset
        self._selected = None

    def parse(self, argv, /):
        if self._pack is not None:
            raise RuntimeError("parser instances are single-use")
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        argv = list(argv)

        if not argv:
            self._pack = Pack(None, self._root)
            self._report(EmptyArgumentsError(
                "empty argument vector, expected at least the program name",
                title="empty arguments",
                code=FaultCode.EMPTY_ARGUMENTS,
                position=0,
                hint="pass the full argument vector, program name first (e.g., sys.argv)",
            ))
            return self._pack

        self._pack = Pack(argv[0], self._root)
        self._tokenizer = Tokenizer(argv[1:], syntax=self._syntax, report=self._report)

        for token in self._tokenizer:
            self._consume(token)

        if self._pending is not Unset or self._tokenizer.depth:
            raise RuntimeError("token stream ended in the middle of a value")

        self._validate()
        return self._pack

    def _report(self, fault):
        self._pack._errors.append(fault)

    def _route(self):
        return " ".join(command.name for command in self._command.path)

    def _label(self, option):
        if option.positional:
            return "positional argument #%d" % (self._command.positionals.index(option) + 1)
        return "option %r" % option.preferred

    def _consume(self, token):
        # 1. name part of "--name=value"
        if token.delimited:
            if self._pending is not Unset:
                raise RuntimeError("two delimited tokens in a row")
            self._subcommands = False
            self._selected = None
            if (argument := self._match(token.text)) is None:
                self._unknown(token)
            self._pending = argument
            return

        # 2. the attached value that follows it
        if self._pending is not Unset:
            if not token.attached:
                raise RuntimeError("attached value expected after a delimited token")
            argument, self._pending = self._pending, Unset
            if argument is None:
                return
            if not token.raw:
                name = argument.option.preferred
                if argument.option.arity.maximum == 0:
                    hint = "%r takes no values; drop the delimiter and pass %s alone" % (name, name)
                else:
                    hint = "add a value after the delimiter (for example: %s=<value>), or quote an empty one" % name
                self._report(MissingValueError(
                    "missing value for option %r at %s position" % (name, ordinal(token.position)),
                    title="missing value",
                    code=FaultCode.MISSING_VALUE,
                    position=token.position,
                    input=token.raw,
                    option=argument.option,
                    hint=hint,
                ))
                return
            self._accept(argument, token)
            return

        # 3. "--" switches everything after it to plain values
        if self._options and token.raw == self._syntax.escape:
            self._options = False
            self._subcommands = False
            self._selected = None
            self._tokenizer.splitting = False
            return

        # 4. subcommands, only as the leading tokens
        if self._subcommands:
            if (child := self._command.child(token.text)) is not None:
                self._command = child
                self._selected = None
                return
            self._subcommands = False

        # 5. named options and bundles
        optionlike = self._options and token.raw == token.text and self._syntax.prefix(token.text) is not None
        if optionlike and (argument := self._match(token.text)) is not None:
            self._selected = argument
            return

        # 6. the previous argument keeps taking values
        if self._selected is not None and self._selected.accepts():
            self._accept(self._selected, token)
            return

        # 7. next positional with room left
        if (argument := self._positional()) is not None:
            self._selected = argument
            self._accept(argument, token)
            return

        # 8. nothing took it
        if optionlike:
            self._unknown(token)
        else:
            self._unexpected(token)

    def _match(self, text):
        """
        Resolve an option name or a bundle of short names to the argument that
        may receive a following value; None when nothing resolves.
        """
        syntax = self._syntax
        if (prefix := syntax.prefix(text)) is None:
            return None
        body = text[len(prefix):]

        # full name
        if prefix in syntax.alternate_prefixes:
            candidates = (syntax.long_prefix + body, syntax.short_prefix + body)
        else:
            candidates = (text,)
        for candidate in candidates:
            if (option := self._command.option(candidate)) is not None:
                return self._pack._argument(option)

        # bundle, never behind the long prefix
        if prefix == syntax.long_prefix or len(body) < 2:
            return None
        options = []
        for character in body:
            if (option := self._command.option(syntax.short_prefix + character)) is None:
                return None
            options.append(option)
        if any(option.arity.minimum for option in options[:-1]):
            return None

        for option in options:
            argument = self._pack._argument(option)
        return argument

    def _positional(self):
        """
        Argument of the first positional (declared order) still below its
        arity ceiling, created on demand; None when all are used up.
        """
        for option in self._command.positionals:
            count = next((argument.count for argument in self._pack._arguments if argument.option is option), 0)
            if option.arity.accepts(count):
                return self._pack._argument(option)
        return None

    def _accept(self, argument, token):
        """
        Value phase: check quoting, convert, append or report.
        """
        option = argument.option

        if malformed(token.raw, self._syntax.quotes):
            self._report(MalformedQuotingError(
                "malformed quoting in value %s for %s at %s position" % (token.raw, self._label(option), ordinal(token.position)),
                title="malformed quoting",
                code=FaultCode.MALFORMED_QUOTING,
                position=token.position,
                input=token.raw,
                option=option,
                hint="close the quote with the same character that opens it",
            ))
            return

        if option.type is None:
            argument._append(token.text)
            return

        typename = getattr(option.type, "__name__", "value")
        where = self._label(option)
        try:
            with _capture, warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                value = option.type(token.text)
        except Exception as exception:
            self._report(ConversionError(
                "invalid value %r for %s at %s position: %s" % (token.text, where, ordinal(token.position), exception),
                title="conversion error",
                code=FaultCode.CONVERSION_FAILED,
                position=token.position,
                input=token.text,
                option=option,
                hint="use a valid %s; run '%s --help' to see examples" % (typename, self._route()),
                exception=exception,
            ))
            return

        for warning in caught:
            self._pack._warnings.append(ConversionWarning(
                "value %r for %s at %s position raised a conversion warning: %s" % (
                    token.text, where, ordinal(token.position), warning.message
                ),
                title="conversion warning",
                code=FaultCode.CONVERSION_WARNING,
                position=token.position,
                input=token.text,
                option=option,
                hint="check the value format; expected %s" % typename,
                warning=warning.message,
            ))
        argument._append(value)

    def _unknown(self, token):
        names = [name for option in self._command.options for name in option.names]
        suggestions = difflib.get_close_matches(token.text, names, 5)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], self._route())
        except IndexError:
            hint = "try '%s --help' to see all available options" % self._route()
        self._report(UnknownOptionError(
            "unknown option %r at %s position" % (token.text, ordinal(token.position)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            position=token.position,
            input=token.text,
            suggestions=suggestions,
            hint=hint,
        ))

    def _unexpected(self, token):
        hint = "remove this extra value or run '%s --help' to see the expected usage" % self._route()
        if self._command.children and not self._pack._arguments:
            suggestions = difflib.get_close_matches(token.text, [child.name for child in self._command.children], 5)
            if suggestions:
                hint = "did you mean the %r subcommand? subcommands must come first" % suggestions[0]
        self._report(UnexpectedArgumentError(
            "unexpected argument %r at %s position" % (token.text, ordinal(token.position)),
            title="unexpected argument",
            code=FaultCode.UNEXPECTED_ARGUMENT,
            position=token.position,
            input=token.text,
            hint=hint,
        ))

    def _validate(self):
        """
        Arity check of every option of the resolved command, declared order.
        """
        for option in self._command.options:
            argument = next((argument for argument in self._pack._arguments if argument.option is option), None)
            count = argument.count if argument is not None else 0
            if option.arity.admits(count):
                continue
            self._report(ArityError(
                "%s expects %s, but got %d" % (self._label(option), option.arity.describe(), count),
                title="wrong number of values",
                code=FaultCode.ARITY_MISMATCH,
                option=option,
                count=count,
                hint="run '%s --help' to see the expected usage" % self._route(),
            ))


def parse(argv, root, /, *, syntax=DEFAULT_SYNTAX):
    """
    Parse an argument vector (program name first) against a command tree.

    Never raises on malformed input: problems are diagnostics on the returned
    Pack's 'errors'. Raises TypeError only for wrong argument types.
    """
    return Parser(root, syntax=syntax).parse(argv)


__all__ = (
    "Parser",
    "parse",
)
