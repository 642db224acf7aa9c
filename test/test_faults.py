"""
Faults module behavioral tests (codes, copies, rendering).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering goes to an in-memory rich Console without colors.
"""

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argpack import (
    ArityError,
    ConversionWarning,
    FaultCode,
    ParseError,
    ParseExit,
    UnknownOptionError,
)


def _render(renderable, width=100):
    console = Console(file=io.StringIO(), width=width, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestFaultCode(TestCase):
    """Behavioral tests for FaultCode."""

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.EMPTY_ARGUMENTS, 21001)
        self.assertEqual(FaultCode.UNKNOWN_OPTION, 21011)
        self.assertEqual(FaultCode.ARITY_MISMATCH, 21041)

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "21011")


class TestParseError(TestCase):
    """Behavioral tests for diagnostic objects."""

    def testHierarchy(self):
        self.assertTrue(issubclass(UnknownOptionError, ParseError))
        self.assertTrue(issubclass(ParseError, Exception))

    def testMessageAndOptions(self):
        error = UnknownOptionError("unknown option '--x' at first position", code=FaultCode.UNKNOWN_OPTION, position=1)
        self.assertEqual(str(error), "unknown option '--x' at first position")
        self.assertEqual(error.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(error.position, 1)
        with self.assertRaises(TypeError):
            error.options["position"] = 2

    def testReplaceKeepsTypeAndMessage(self):
        error = ArityError("option '--x' expects no values, but got 1", code=FaultCode.ARITY_MISMATCH)
        replaced = copy.replace(error, prog="tool")
        self.assertIsInstance(replaced, ArityError)
        self.assertEqual(replaced.message, error.message)
        self.assertEqual(replaced.options["prog"], "tool")
        self.assertNotIn("prog", error.options)

    def testRender(self):
        error = UnknownOptionError(
            "unknown option '--x' at first position",
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            hint="try 'tool --help'",
            prog="tool",
        )
        output = _render(error)
        self.assertIn("tool", output)
        self.assertIn("21011", output)
        self.assertIn("Unknown Option", output)
        self.assertIn("unknown option '--x' at first position", output)
        self.assertIn("try 'tool --help'", output)

    def testRenderPlainFancy(self):
        error = ArityError("too few", title="arity", code=FaultCode.ARITY_MISMATCH, colorful=False, fancy=True)
        self.assertIn("too few", _render(error))


class TestConversionWarning(TestCase):
    """Behavioral tests for converter warnings."""

    def testIsWarning(self):
        warning = ConversionWarning("careful", code=FaultCode.CONVERSION_WARNING)
        self.assertIsInstance(warning, Warning)
        self.assertEqual(str(warning), "careful")
        self.assertIn("22001", _render(warning))


class TestParseExit(TestCase):
    """Behavioral tests for the grouped exit."""

    def testGroupsErrors(self):
        errors = (
            UnknownOptionError("first problem", code=FaultCode.UNKNOWN_OPTION),
            ArityError("second problem", code=FaultCode.ARITY_MISMATCH),
        )
        group = ParseExit(errors, prog="tool")
        self.assertIsInstance(group, ExceptionGroup)
        self.assertEqual(group.exceptions, errors)
        output = _render(group)
        self.assertIn("first problem", output)
        self.assertIn("second problem", output)
        self.assertIn("Bad Exit", output)


if __name__ == "__main__":
    unittest.main()
