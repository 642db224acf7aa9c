"""
Runner behavioral tests (dispatch, exit status, reporting).

Conventions
- Test method names follow CamelCase per project convention.
- The module console is swapped for an in-memory one.
"""

import io
import unittest
import warnings
from unittest import TestCase, mock

from rich.console import Console

from argpack import Arity, Command, Option, command, run
from argpack import runner


class TestRun(TestCase):
    """Behavioral tests for run()."""

    def setUp(self):
        self.console = Console(file=io.StringIO(), width=100, color_system=None)
        patcher = mock.patch.object(runner, "console", self.console)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.received = []

        @command
        def tool(pack):
            """Do things."""
            self.received.append(pack.argument("--name").value)

        tool.add_option(Option("--name", "-n", arity=Arity.EXACTLY_ONE))

        @tool.command
        def status(pack):
            return 3

        self.tool = tool

    def output(self):
        return self.console.file.getvalue()

    def testHandlerReceivesPack(self):
        self.assertEqual(run(self.tool, ["tool", "--name", "x"]), 0)
        self.assertEqual(self.received, ["x"])
        self.assertEqual(self.output(), "")

    def testStringArgvIsShellSplit(self):
        self.assertEqual(run(self.tool, "--name 'a b'"), 0)
        self.assertEqual(self.received, ["a b"])

    def testSubcommandResultIsExitStatus(self):
        self.assertEqual(run(self.tool, ["tool", "status"]), 3)

    def testErrorsSkipHandler(self):
        self.assertEqual(run(self.tool, ["tool", "--nmae", "x"]), 1)
        self.assertEqual(self.received, [])
        output = self.output()
        self.assertIn("unknown option '--nmae' at first position", output)
        self.assertIn("did you mean '--name'?", output)

    def testEmptyArgvFails(self):
        self.assertEqual(run(self.tool, []), 1)
        self.assertIn("empty argument vector", self.output())

    def testNoHandler(self):
        self.assertEqual(run(Command("bare"), ["bare"]), 0)

    def testWarningsAreReported(self):
        def noisy(text):
            warnings.warn("odd value", UserWarning)
            return text

        @command
        def tool(pack):
            pass

        tool.add_option(Option("--value", arity=1, type=noisy))
        self.assertEqual(run(tool, ["tool", "--value=x"]), 0)
        self.assertIn("odd value", self.output())

    def testDefaultsToSysArgv(self):
        with mock.patch("sys.argv", ["tool", "-n", "y"]):
            self.assertEqual(run(self.tool), 0)
        self.assertEqual(self.received, ["y"])


if __name__ == "__main__":
    unittest.main()
