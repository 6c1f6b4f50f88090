"""
Configuration and logging tests.

Conventions
- Test method names follow CamelCase per project convention.
- The environment is replaced with unittest.mock.patch.dict for each case.
"""

from __future__ import annotations

import logging
import os
import unittest
from unittest import TestCase
from unittest.mock import patch

from pydantic import ValidationError
from rich.logging import RichHandler

from shuttle import logs
from shuttle.config import Settings


def environ(**variables):
    return patch.dict(os.environ, variables, clear=True)


class TestSettings(TestCase):
    """Validation and environment overrides."""

    def testDefaults(self):
        with environ():
            settings = Settings()
        self.assertEqual(
            (settings.backend, settings.prog, settings.mode, settings.timeout, settings.loglevel, settings.colorful),
            ("ddev", "shuttle", "auto", 30.0, "WARNING", True),
        )

    def testEnvironment(self):
        with environ(
            SHUTTLE_BACKEND="backendtool",
            SHUTTLE_PROG="wrap",
            SHUTTLE_MODE="TEXT",
            SHUTTLE_TIMEOUT="5",
            SHUTTLE_LOG_LEVEL="debug",
            NO_COLOR="1",
        ):
            settings = Settings()
        self.assertEqual(settings.backend, "backendtool")
        self.assertEqual(settings.prog, "wrap")
        self.assertEqual(settings.mode, "text")
        self.assertEqual(settings.timeout, 5.0)
        self.assertEqual(settings.loglevel, "DEBUG")
        self.assertFalse(settings.colorful)

    def testEmptyNoColorKeepsColors(self):
        with environ(NO_COLOR=""):
            self.assertTrue(Settings().colorful)

    def testUnrelatedVariablesIgnored(self):
        with environ(SHUTTLE_UNKNOWN="x"):
            self.assertEqual(Settings().loglevel, "WARNING")

    def testTimeoutDisabled(self):
        for raw in ("", "none", "0"):
            with environ(SHUTTLE_TIMEOUT=raw):
                self.assertIsNone(Settings().timeout)
        self.assertIsNone(Settings(timeout=None).timeout)

    def testKeywordsWin(self):
        with environ(SHUTTLE_PROG="wrap", NO_COLOR="1"):
            settings = Settings(prog="other", colorful=True)
        self.assertEqual(settings.prog, "other")
        self.assertTrue(settings.colorful)

    def testInvalidValues(self):
        for overrides in (
                {"mode": "xml"},
                {"backend": " "},
                {"prog": 3},
                {"timeout": -1},
                {"timeout": float("inf")},
                {"timeout": True},
                {"loglevel": "chatty"},
        ):
            with self.subTest(**overrides), environ():
                with self.assertRaises(ValidationError):
                    Settings(**overrides)
        with environ(SHUTTLE_TIMEOUT="soon"):
            with self.assertRaises(ValueError):
                Settings()

    def testReadOnly(self):
        with environ():
            settings = Settings()
        with self.assertRaises(ValidationError):
            settings.backend = "other"


class TestLogs(TestCase):
    """The rich logging handler on the package logger."""

    def testLevelNames(self):
        self.assertEqual(logs.level("debug"), logging.DEBUG)
        with self.assertRaises(ValueError):
            logs.level("loud")

    def testConfigureIsIdempotent(self):
        logger = logs.configure("DEBUG")
        logs.configure("ERROR")
        handlers = [handler for handler in logger.handlers if isinstance(handler, RichHandler)]
        self.assertEqual(len(handlers), 1)
        self.assertEqual(logger.level, logging.ERROR)
        self.assertFalse(logger.propagate)
        self.assertIs(logging.getLogger("shuttle.console").parent, logger)


if __name__ == "__main__":
    unittest.main()
