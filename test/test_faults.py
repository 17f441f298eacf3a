"""
Fault tests (codes, exit codes, rendering, context options).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import unittest
from unittest import TestCase

from rich.console import Console

from bosun import (
    FaultCode,
    CommandException,
    GrammarError,
    UnknownCommandError,
    MissingArgumentError,
    ResolutionError,
    HandlerError,
)


class FaultTest(TestCase):

    def testTaxonomy(self):
        self.assertTrue(issubclass(UnknownCommandError, ResolutionError))
        self.assertTrue(issubclass(GrammarError, CommandException))
        self.assertFalse(issubclass(HandlerError, ResolutionError))

    def testExitCodes(self):
        self.assertEqual(GrammarError("bad").exit_code, 2)
        self.assertEqual(MissingArgumentError("missing").exit_code, 2)
        self.assertEqual(HandlerError("failed").exit_code, 1)

    def testCodesAreStable(self):
        self.assertEqual(UnknownCommandError.code, FaultCode.UNKNOWN_COMMAND)
        self.assertEqual(int(FaultCode.HANDLER_FAILURE), 21301)

    def testOptionsAreReadOnly(self):
        fault = UnknownCommandError("unknown command 'x'", input="x", suggestion=None)
        self.assertEqual(fault.input, "x")
        with self.assertRaises(TypeError):
            fault.options["input"] = "y"

    def testHandlerErrorChainsOriginal(self):
        original = ValueError("boom")
        fault = HandlerError("action failed", phase="action", command="build", original=original)
        self.assertIs(fault.__cause__, original)
        self.assertEqual(fault.phase, "action")

    def testPlainRender(self):
        fault = UnknownCommandError("unknown command 'x'", hint="run --help")
        self.assertEqual(fault.render(prog="tool"), "tool: error: unknown command 'x'\n → run --help")
        self.assertEqual(str(fault), "unknown command 'x'")

    def testRichRender(self):
        console = Console(width=100, color_system=None)
        with console.capture() as capture:
            console.print(UnknownCommandError("unknown command 'x'", prog="tool", colorful=False))
        text = capture.get()
        self.assertIn("tool", text)
        self.assertIn("21201", text)
        self.assertIn("Unknown Command", text)

    def testReplaceMergesOptions(self):
        fault = GrammarError("bad flag", source="--x")
        changed = copy.replace(fault, hint="use --name", source="--y")
        self.assertEqual(changed.source, "--y")
        self.assertEqual(changed.hint, "use --name")
        self.assertEqual(fault.source, "--x")


if __name__ == '__main__':
    unittest.main()
