"""
Fault model tests (taxonomy, rendering, trigger semantics).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is captured with rich's Console.capture().
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from rich.console import Console

from shuttle import faults
from shuttle.faults import (
    BackendNotFoundError,
    DiscoveryError,
    DuplicatedSwitchError,
    FaultCode,
    FlagConflictError,
    ShuttleException,
    UnknownCommandError,
    UnknownSwitchError,
    trigger,
)


class TestTaxonomy(TestCase):
    """Every fault also derives from the closest builtin."""

    def testBuiltinBases(self):
        for fault, base in (
                (DiscoveryError, LookupError),
                (FlagConflictError, RuntimeError),
                (UnknownCommandError, LookupError),
                (UnknownSwitchError, ValueError),
                (DuplicatedSwitchError, ValueError),
                (BackendNotFoundError, OSError),
        ):
            self.assertTrue(issubclass(fault, ShuttleException))
            self.assertTrue(issubclass(fault, base))

    def testCodesAreStable(self):
        self.assertEqual(DiscoveryError.code, FaultCode.MISSING_COMMAND_LIST)
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11101")

    def testMessageAndOptions(self):
        fault = UnknownCommandError("unknown command 'strat'", suggestions=["start"])
        self.assertEqual(str(fault), "unknown command 'strat'")
        self.assertEqual(fault.options["suggestions"], ["start"])
        with self.assertRaises(TypeError):
            fault.options["hint"] = "x"

    def testEmptyMessage(self):
        self.assertEqual(str(ShuttleException()), "")


class TestTrigger(TestCase):
    """Raise outside shell mode, render and exit inside it."""

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownSwitchError) as context:
            trigger(UnknownSwitchError("unknown option or flag '--x'"), hint="try --help")
        self.assertEqual(context.exception.options["hint"], "try --help")

    def testExitsInShell(self):
        with self.assertRaises(SystemExit) as context:
            trigger(DiscoveryError("no command list found"), shell=True)
        self.assertEqual(context.exception.code, 1)

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testReplaceKeepsCause(self):
        fault = FlagConflictError("conflict", command="logs")
        fault.__cause__ = KeyError("quiet")
        replaced = copy.replace(fault, hint="rename it")
        self.assertIsInstance(replaced.__cause__, KeyError)
        self.assertEqual(replaced.options["command"], "logs")
        self.assertEqual(replaced.options["hint"], "rename it")

    def testExports(self):
        self.assertEqual(faults.__all__[-2:], ("FaultCode", "trigger"))
        self.assertFalse(hasattr(faults, "getdoc"))


class TestRendering(TestCase):
    """Rich rendering of faults."""

    def render(self, fault):
        console = Console(width=100, no_color=True)
        with console.capture() as capture:
            console.print(fault)
        return capture.get()

    def testHeaderMessageAndHint(self):
        output = self.render(UnknownCommandError(
            "unknown command 'strat'",
            prog="wrap",
            colorful=False,
            hint="did you mean 'start'?",
        ))
        self.assertIn("wrap", output)
        self.assertIn("11101", output)
        self.assertIn("Unknown Command", output)
        self.assertIn("unknown command 'strat'", output)
        self.assertIn("did you mean 'start'?", output)

    def testFancyPanel(self):
        output = self.render(BackendNotFoundError("backend executable 'ddev' was not found", fancy=True))
        self.assertIn("backend executable 'ddev' was not found", output)
        self.assertIn("Backend Not Found", output)


if __name__ == "__main__":
    unittest.main()
