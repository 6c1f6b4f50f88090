"""
Reserved-option registry tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from shuttle.arguments import FlagSpec
from shuttle.reserved import BUILTINS, ReservedOptions


class TestReservedOptions(TestCase):
    """Collision detection against the console's own options."""

    def testBuiltinSets(self):
        reserved = ReservedOptions()
        self.assertEqual(reserved.long, frozenset({"help", "quiet", "verbose", "ansi", "no-ansi"}))
        self.assertEqual(reserved.short, frozenset({"h", "q", "v"}))

    def testVersionNotReserved(self):
        reserved = ReservedOptions()
        self.assertNotIn("version", reserved)
        self.assertIsNone(reserved.conflicts(FlagSpec("version", "V")))

    def testLongConflict(self):
        self.assertEqual(ReservedOptions().conflicts(FlagSpec("quiet")), "--quiet")

    def testShortConflict(self):
        self.assertEqual(ReservedOptions().conflicts(FlagSpec("verbatim", "v")), "-v")

    def testNoConflict(self):
        self.assertIsNone(ReservedOptions().conflicts(FlagSpec("all", "a")))

    def testContainsLongNamesOnly(self):
        reserved = ReservedOptions()
        self.assertIn("quiet", reserved)
        self.assertIn("QUIET", reserved)
        self.assertNotIn("q", reserved)
        self.assertNotIn(None, reserved)

    def testCustomOptions(self):
        reserved = ReservedOptions((FlagSpec("env", "e"),))
        self.assertEqual(reserved.conflicts(FlagSpec("exclude", "e")), "-e")
        self.assertEqual(len(BUILTINS), 5)

    def testRejectsNonFlagSpecs(self):
        with self.assertRaises(TypeError):
            ReservedOptions(("help",))


if __name__ == "__main__":
    unittest.main()
