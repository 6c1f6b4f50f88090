"""
Hosting console behavioral tests (dispatch, token rules, built-ins, faults).

Scope
- Validate token resolution: inline values, bare flags, value-taking flags, "--".
- Validate unknown/duplicated option faults and unknown commands.
- Validate built-ins: version, listing, help, completion, reserved switches.
- Validate shell mode (render and exit 1) vs library mode (raise).

Conventions
- Test method names follow CamelCase per project convention.
- Output goes to io.StringIO streams; colors are disabled for stable text.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from shuttle.config import Settings
from shuttle.console import Console, versionless
from shuttle.faults import DuplicatedSwitchError, UnknownCommandError, UnknownSwitchError
from shuttle.void import void
from stubs import structured_backend, text_backend


def console(backend, *, shell=False):
    stdout, stderr = io.StringIO(), io.StringIO()
    host = Console(Settings(colorful=False), backend=backend, shell=shell, stdout=stdout, stderr=stderr)
    return host, stdout, stderr


class TestVersionless(TestCase):
    """The pure --version filter."""

    def testKeptWithoutCommand(self):
        self.assertEqual(versionless(None, {"version": True}), {"version": True})

    def testKeptForHelp(self):
        self.assertEqual(versionless("help", {"version": True}), {"version": True})

    def testDroppedForOtherCommands(self):
        self.assertEqual(versionless("start", {"version": True, "quiet": True}), {"quiet": True})


class TestDispatch(TestCase):
    """argv → backend tokens."""

    def testInlineValuesAndBareFlags(self):
        backend = structured_backend(responses={("start", "proj", "--profiles=web,db", "--all"): "ok\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["start", "proj", "--profiles=web,db", "-a"]), 0)
        self.assertEqual(stdout.getvalue(), "ok\n")
        self.assertEqual(host.current.name, "start")

    def testShortInlineValue(self):
        backend = structured_backend(responses={("start", "--skip-confirmation=yes"): "ok\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["start", "-y=yes"]), 0)

    def testValuedFlagConsumesNextToken(self):
        backend = text_backend(responses={("stop", "--snapshot-name=nightly"): "Stopped.\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["stop", "--snapshot-name", "nightly"]), 0)
        self.assertEqual(stdout.getvalue(), "Stopped.\n")

    def testDoubleDashEndsOptions(self):
        backend = structured_backend(responses={("start", "--all", "--not-an-option"): "ok\n"})
        host, _, _ = console(backend)
        self.assertEqual(host.run(["start", "--", "--all", "--not-an-option"]), 0)

    def testReservedSwitchesNotForwarded(self):
        backend = structured_backend(tty=True, responses={("start", "--all"): "ok\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["-v", "start", "--all", "-q"]), 0)
        self.assertEqual(backend.calls[-1], (("ddev", "start", "--all"), True))
        self.assertEqual(stdout.getvalue(), "ok\n")

    def testBackendFailureIsExitOne(self):
        backend = structured_backend(responses={("start",): (1, "", "Error: no project\n")})
        host, _, stderr = console(backend)
        self.assertEqual(host.run(["start"]), 1)
        self.assertEqual(stderr.getvalue(), "Error: no project\n")

    def testAliasDispatch(self):
        backend = text_backend(responses={("stop",): "Stopped.\n"})
        host, _, _ = console(backend)
        host.run(["help", "stop"])
        self.assertEqual(host.run(["rm"]), 0)

    def testShortcutDispatch(self):
        backend = structured_backend(responses={("exec", "drush", "cr", "--uri=x"): "done\n"})
        host, stdout, _ = console(backend)
        host.shortcut("drush", "Run drush", "exec", ["drush"])
        self.assertEqual(host.run(["drush", "cr", "--uri=x"]), 0)
        self.assertEqual(stdout.getvalue(), "done\n")


class TestFaults(TestCase):
    """User errors in library and shell mode."""

    def testUnknownOptionSuggests(self):
        host, _, _ = console(structured_backend())
        with self.assertRaises(UnknownSwitchError) as context:
            host.run(["start", "--al"])
        self.assertIn("--all", context.exception.options["suggestions"])
        self.assertIn("second position", str(context.exception))

    def testDuplicatedOption(self):
        host, _, _ = console(structured_backend())
        with self.assertRaises(DuplicatedSwitchError):
            host.run(["start", "--all", "-a"])

    def testUnknownCommand(self):
        host, _, _ = console(structured_backend())
        with self.assertRaises(UnknownCommandError):
            host.run(["strat"])

    def testOnlyBuiltinsBeforeCommand(self):
        host, _, _ = console(structured_backend())
        with self.assertRaises(UnknownSwitchError):
            host.run(["--all", "start"])

    def testShellModeExitsWithOne(self):
        host, stdout, _ = console(structured_backend(), shell=True)
        for argv in (["strat"], ["start", "--version"]):
            with self.assertRaises(SystemExit) as context:
                host.run(argv)
            self.assertEqual(context.exception.code, 1)
        self.assertEqual(stdout.getvalue(), "")


class TestBuiltins(TestCase):
    """Version, listing, help and completion."""

    def testVersion(self):
        backend = structured_backend(responses={("-v",): "ddev version v1.23.4\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["--version"]), 0)
        self.assertEqual(stdout.getvalue().strip(), "shuttle (ddev version v1.23.4)")

    def testVersionUnknownWhenBackendFails(self):
        host, stdout, _ = console(structured_backend())
        host.run(["help", "-V"])
        self.assertEqual(stdout.getvalue().strip(), "shuttle (UNKNOWN)")

    def testVersionRejectedAfterCommand(self):
        backend = structured_backend(responses={("start",): "ok\n"})
        host, stdout, _ = console(backend)
        for argv in (["start", "--version"], ["start", "-V"]):
            with self.assertRaises(UnknownSwitchError) as context:
                host.run(argv)
            self.assertEqual(context.exception.options["command"], "start")
            self.assertIn("second position", str(context.exception))
        self.assertEqual(backend.count("start"), 0)
        self.assertEqual(stdout.getvalue(), "")

    def testVersionRejectedBeforeCommand(self):
        backend = structured_backend(responses={("start",): "ok\n"})
        host, _, _ = console(backend)
        with self.assertRaises(UnknownSwitchError) as context:
            host.run(["-V", "start"])
        self.assertIn("first position", str(context.exception))
        self.assertEqual(backend.count("start"), 0)

    def testListingWithoutCommand(self):
        host, stdout, _ = console(structured_backend())
        self.assertEqual(host.run([]), 0)
        output = stdout.getvalue()
        for name in ("start", "stop", "describe", "--no-ansi"):
            self.assertIn(name, output)

    def testListCommands(self):
        host, stdout, _ = console(text_backend())
        self.assertEqual(host.run(["list-commands"]), 0)
        self.assertIn("Stop and remove the containers", stdout.getvalue())

    def testHelpRendersSchema(self):
        host, stdout, _ = console(structured_backend())
        self.assertEqual(host.run(["help", "start"]), 0)
        output = stdout.getvalue()
        self.assertIn("shuttle start [projectname ...] [flags]", output)
        self.assertIn("shuttle start --all", output)
        self.assertIn("--skip-confirmation", output)
        self.assertIn("--json-output", output)

    def testCommandHelpFlag(self):
        backend = text_backend()
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["stop", "-h"]), 0)
        self.assertIn("aliases", stdout.getvalue())
        self.assertEqual(backend.count("stop"), 0)

    def testHelpForSubcommandChain(self):
        backend = structured_backend(responses={("start", "web", "-h"): "Usage:\n  ddev start web [flags]\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["help", "start", "web"]), 0)
        self.assertEqual(stdout.getvalue(), "Usage:\n  shuttle start web [flags]\n")
        self.assertEqual(backend.count("help", "start", "--json-output"), 0)

    def testHelpFlagForSubcommandChain(self):
        backend = structured_backend(responses={("start", "web", "-h"): "Usage:\n  ddev start web [flags]\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["start", "web", "-h"]), 0)
        self.assertEqual(stdout.getvalue(), "Usage:\n  shuttle start web [flags]\n")

    def testHelpForUnknownSubcommandFails(self):
        host, stdout, stderr = console(structured_backend())
        self.assertEqual(host.run(["help", "start", "nope"]), 1)
        self.assertEqual(stdout.getvalue(), "")
        self.assertIn("unknown command", stderr.getvalue())

    def testCompletion(self):
        backend = structured_backend(responses={("__complete", "start", "my"): "my-project\n:4\n"})
        host, stdout, _ = console(backend)
        self.assertEqual(host.run(["_complete", "start", "my"]), 0)
        self.assertEqual(stdout.getvalue(), "my-project\n")

    def testCompletionForUnknownCommandIsSilent(self):
        host, stdout, _ = console(structured_backend())
        self.assertEqual(host.run(["_complete", "nope", ""]), 0)
        self.assertEqual(stdout.getvalue(), "")

    def testOptionsStartVoid(self):
        host, _, _ = console(structured_backend())
        invocation = host._resolve(host.find("start").schema, ["-a"])
        self.assertIs(invocation.options["profiles"], void)
        self.assertIs(invocation.options["all"], True)

    def testOptionsKeepTypedOrder(self):
        host, _, _ = console(structured_backend())
        invocation = host._resolve(host.find("start").schema, ["--profiles=web", "-y", "-a"])
        self.assertEqual(list(invocation.options)[:3], ["profiles", "skip-confirmation", "all"])
        self.assertIs(invocation.options["json-output"], void)


if __name__ == "__main__":
    unittest.main()
