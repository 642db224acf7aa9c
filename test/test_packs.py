"""
Packs module behavioral tests (lookups and teardown).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from argpack import Arity, Command, Option, get_argument, get_positional, get_value, has_option, parse


def _tool():
    tool = Command("tool")
    tool.add_option(Option("--output", "-o", arity=Arity.ZERO_OR_ONE))
    tool.add_option(Option("--quiet", "-q"))
    tool.add_option(Option(arity="*"))
    return tool


class TestPackLookups(TestCase):
    """Behavioral tests for lookups on a parsed pack."""

    def testArgumentByEitherName(self):
        pack = parse(["tool", "-o", "out.txt"], _tool())
        self.assertIs(get_argument(pack, "--output"), get_argument(pack, "-o"))
        self.assertIsNone(get_argument(pack, "--quiet"))
        self.assertIsNone(get_argument(pack, "--missing"))

    def testGetValueDefaults(self):
        pack = parse(["tool", "-q", "--output"], _tool())
        self.assertEqual(pack.errors, ())
        self.assertIsNone(get_value(pack, "--output"))
        self.assertEqual(get_value(pack, "--output", "stdout"), "stdout")
        self.assertEqual(get_value(pack, "--unknown", 7), 7)

    def testHasOption(self):
        pack = parse(["tool", "-q"], _tool())
        self.assertTrue(has_option(pack, "--quiet"))
        self.assertFalse(has_option(pack, "--output"))

    def testPositionalLookup(self):
        pack = parse(["tool", "a", "b"], _tool())
        self.assertEqual(get_positional(pack, 0).values, ["a", "b"])
        self.assertIsNone(get_positional(pack, 1))
        self.assertIsNone(get_positional(pack, -1))

    def testPositionalNotYetBound(self):
        pack = parse(["tool"], _tool())
        self.assertIsNone(get_positional(pack, 0))

    def testPositionalIndexMustBeInteger(self):
        pack = parse(["tool"], _tool())
        with self.assertRaises(TypeError):
            get_positional(pack, "0")
        with self.assertRaises(TypeError):
            get_positional(pack, True)

    def testNameMustBeString(self):
        pack = parse(["tool"], _tool())
        with self.assertRaises(TypeError):
            get_argument(pack, 0)

    def testArgumentsKeepCreationOrder(self):
        pack = parse(["tool", "x", "-q", "-o"], _tool())
        self.assertEqual([argument.option.preferred for argument in pack.arguments], [None, "--quiet", "--output"])

    def testViewsAreCopies(self):
        pack = parse([], _tool())
        errors = pack.errors
        self.assertIsInstance(errors, tuple)
        self.assertEqual(len(pack.errors), 1)


class TestPackRelease(TestCase):
    """Behavioral tests for Pack.release()."""

    def testReleaseClearsEverythingOnce(self):
        pack = parse(["tool", "-o", "x", "--bogus"], _tool())
        argument = pack.argument("-o")
        self.assertFalse(pack.released)

        pack.release()
        self.assertTrue(pack.released)
        self.assertEqual(pack.arguments, ())
        self.assertEqual(pack.errors, ())
        self.assertEqual(argument.values, [])

        pack.release()
        self.assertTrue(pack.released)

    def testContextManagerReleases(self):
        with parse(["tool", "-q"], _tool()) as pack:
            self.assertTrue(has_option(pack, "-q"))
        self.assertTrue(pack.released)
        self.assertFalse(has_option(pack, "-q"))

    def testReleaseLeavesTreeIntact(self):
        tool = _tool()
        with parse(["tool", "-q"], tool):
            pass
        self.assertEqual(len(tool.options), 3)
        pack = parse(["tool", "-q"], tool)
        self.assertTrue(has_option(pack, "--quiet"))


if __name__ == "__main__":
    unittest.main()
