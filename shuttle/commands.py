"""
Shuttle command layer: wrapper commands backed by backend subcommands.

What this module provides
- CommandSchema: the full, immutable description of one wrapper command (help text,
  usage lines, aliases, flags, the catch-all positional).
- PassThroughCommand: owns one backend subcommand. It is created from the catalog
  listing with only a name and a description, and synthesizes its schema lazily,
  once, from the backend's own introspection.
- ShortcutCommand: a wrapper-only command that runs a fixed backend command line
  (e.g. "exec drush") followed by whatever the user passes.
- execute(): the shared execution strategy (interactive vs captured).

Synthesis rules (PassThroughCommand.ensure_initialized)
- help: the long description, plus an "Examples:" block where every
  "<backend> <name>" is rewritten to "<prog> <name>".
- aliases: the backend's aliases minus the command's own name.
- usages: the backend's usage lines without their leading "<backend> <name>",
  which the console prints itself.
- flags: the hardcoded --json-output/-j plus every backend flag except help/-h.
  A flag that collides with a reserved console option raises FlagConflictError:
  it means the wrapper needs a code change, so it is never skipped quietly.
- one catch-all positional ("arguments", zero or more values) whose completion
  is forwarded to the backend's "__complete" protocol.

Execution
- interactive when a terminal is available and --quiet was not given (the child
  owns the terminal, no timeout);
- captured otherwise: stdout is written on success, stderr on failure.
- exit status: backend success → 0, backend failure → 1.
"""
import logging
import sys
import threading

from .arguments import FlagSpec, Cardinal
from .faults import FlagConflictError
from .passthrough import translate
from .reserved import ReservedOptions
from .utils import Unset, coalesce, mirror

logger = logging.getLogger(__name__)

JSON_OUTPUT = FlagSpec("json-output", "j", "If true, user-oriented output will be in JSON format.")

COMPLETE = "__complete"


class CommandSchema:
    """
    Immutable schema of one wrapper command.

    Properties (read-only views)
    - name, descr, help, examples: strings ("" when the backend has nothing).
    - usages: tuple of usage lines, already stripped of the backend prefix.
    - aliases: frozenset of alternative names.
    - flags: tuple of FlagSpec in registration order.
    - cardinal: the catch-all positional (Cardinal).
    - lenient: whether undeclared long options are accepted and forwarded as-is.
    """
    __slots__ = (
        "_name", "_descr", "_help", "_usages", "_aliases", "_flags", "_cardinal", "_examples", "_lenient", "_index"
    )

    name = mirror("name")
    descr = mirror("descr")
    help = mirror("help")
    usages = mirror("usages")
    aliases = mirror("aliases")
    flags = mirror("flags")
    cardinal = mirror("cardinal")
    examples = mirror("examples")
    lenient = mirror("lenient")

    def __init__(
            self,
            name,
            descr="",
            help="",
            usages=(),
            aliases=(),
            flags=(),
            cardinal=Unset,
            examples="",
            *,
            lenient=False,
    ):
        self._name = name
        self._descr = descr or ""
        self._help = help or ""
        self._usages = tuple(usages)
        self._aliases = frozenset(aliases)
        self._flags = tuple(flags)
        self._cardinal = coalesce(cardinal, Cardinal("arguments"))
        self._examples = examples or ""
        self._lenient = bool(lenient)

        self._index = {}
        for flag in self._flags:
            for spelling in flag.names:
                self._index.setdefault(spelling, flag)

    @property
    def accepts_arguments(self):
        # The backend validates positionals itself.
        return True

    def flag(self, spelling, /):
        """
        look up a flag by one of its spellings ("--all", "-a"); None when unknown.
        """
        return self._index.get(spelling)

    def spellings(self):
        return tuple(self._index)

    def __rich_repr__(self):
        yield "name", self.name
        yield "descr", self.descr
        yield "usages", self.usages
        yield "aliases", sorted(self.aliases)
        yield "flags", self.flags

    def __repr__(self):
        return f"command-schema(name={self.name!r}, flags={[flag.long for flag in self.flags]!r})"


def execute(backend, command, tokens, /, *, quiet=False, args=(), stdout=Unset, stderr=Unset):
    """
    run `<backend> <command> [args...] [tokens...]` and map the result to 0/1.

    captured output goes to `stdout`/`stderr` (default: sys.stdout/sys.stderr,
    resolved at call time) verbatim, so the backend's own vocabulary reaches
    the user unchanged.
    """
    argv = [*args, *tokens]
    if not quiet and backend.interactive_supported():
        return 0 if backend.run_interactive(command, argv) else 1

    outcome = backend.run_captured(command, argv, timeout=None)
    if outcome.succeeded:
        coalesce(stdout, sys.stdout).write(outcome.stdout)
    else:
        coalesce(stderr, sys.stderr).write(outcome.stderr)
    return 0 if outcome.succeeded else 1


class PassThroughCommand:
    """
    A backend subcommand exposed as a wrapper command.

    Lifecycle
    - created by the catalog with name + descr only; `initialized` is False;
    - ensure_initialized() queries the backend once (under a lock, so concurrent
      completion requests still cause a single introspection) and builds the
      schema; later calls return the cached schema;
    - schema, help, aliases, usages and flags all go through ensure_initialized().
    """

    def __init__(self, name, descr="", /, *, source, reserved=Unset, prog="shuttle"):
        if not isinstance(name, str) or not name.strip():
            raise TypeError("pass-through command name must be a non-empty string")
        self.name = name.strip()
        self.descr = descr or ""
        self.source = source
        self.reserved = coalesce(reserved, ReservedOptions())
        self.prog = prog
        self._schema = Unset
        self._lock = threading.Lock()

    @property
    def backend(self):
        return self.source.backend

    @property
    def initialized(self):
        return self._schema is not Unset

    def ensure_initialized(self):
        if self._schema is not Unset:
            return self._schema
        with self._lock:
            if self._schema is Unset:
                logger.debug("synthesizing schema for %r", self.name)
                self._schema = self._synthesize()
        return self._schema

    @property
    def schema(self):
        return self.ensure_initialized()

    @property
    def help(self):
        return self.ensure_initialized().help

    @property
    def aliases(self):
        return self.ensure_initialized().aliases

    @property
    def usages(self):
        return self.ensure_initialized().usages

    @property
    def flags(self):
        return self.ensure_initialized().flags

    def _synthesize(self):
        introspected = self.source.describe(self.name)
        prefix = f"{self.backend.executable} {self.name}"

        help = introspected.long
        if introspected.examples:
            examples = introspected.examples.replace(prefix, f"{self.prog} {self.name}")
            help = f"{help}\n\nExamples:\n{examples}".strip()

        aliases = [alias for alias in introspected.aliases if alias != self.name]

        usages = []
        for usage in introspected.usage:
            if usage.startswith(prefix):
                usage = usage[len(prefix):]
            if usage := usage.strip():
                usages.append(usage)

        flags = {JSON_OUTPUT.long: JSON_OUTPUT}
        for flag in introspected.flags:
            # The console provides its own help flag.
            if flag.long == "help" or flag.short == "h":
                continue
            if spelling := self.reserved.conflicts(flag):
                raise FlagConflictError(
                    f"conflict between the reserved console option {spelling!r} "
                    f"and the '--{flag.long}' option of command {self.name!r}",
                    hint="rename or drop the reserved console option; backend flags are passed through verbatim",
                    command=self.name,
                    flag=flag,
                )
            flags[flag.long] = flag

        return CommandSchema(
            self.name,
            descr=self.descr,
            help=help,
            usages=usages,
            aliases=aliases,
            flags=flags.values(),
            cardinal=Cardinal(
                "arguments",
                f"Arguments to be passed through to the {self.backend.executable} command, if any",
                completer=self.complete,
            ),
            examples=introspected.examples,
        )

    def complete(self, partial="", /):
        """
        forward a partial token to the backend's completion protocol.

        returns the candidate lines, dropping blank lines and protocol directives
        (lines starting with ":").
        """
        outcome = self.backend.run_captured(COMPLETE, [self.name, partial], timeout=self.source.timeout)
        if not outcome.succeeded:
            logger.debug("completion for %r failed: %s", self.name, outcome.stderr.strip())
            return []
        return [line for line in outcome.stdout.splitlines() if line.strip() and not line.startswith(":")]

    def execute(self, invocation, /, *, quiet=False, stdout=Unset, stderr=Unset):
        tokens = translate(invocation, self.reserved)
        logger.debug("passing %r through to %s %s", tokens, self.backend.executable, self.name)
        return execute(self.backend, self.name, tokens, quiet=quiet, stdout=stdout, stderr=stderr)

    def __repr__(self):
        return f"pass-through-command(name={self.name!r}, initialized={self.initialized!r})"


class ShortcutCommand:
    """
    A wrapper-only command mapped onto a fixed backend command line.

    Example
    - ShortcutCommand("drush", "Run drush in the web container", "exec", ["drush"], ...)
      makes `<prog> drush cr --yes` run `<backend> exec drush cr --yes`.

    Flags declared on the shortcut get help entries and short spellings; any other
    long option is accepted inline (--name[=value]) and passed through unless
    reserved.
    """

    def __init__(self, name, descr, command, args=(), /, *, backend, reserved=Unset, flags=()):
        if not isinstance(name, str) or not name.strip():
            raise TypeError("shortcut command name must be a non-empty string")
        if not isinstance(command, str) or not command.strip():
            raise TypeError("shortcut backend command must be a non-empty string")
        self.name = name.strip()
        self.descr = descr or ""
        self.command = command.strip()
        self.args = tuple(args)
        self.backend = backend
        self.reserved = coalesce(reserved, ReservedOptions())

        for flag in flags:
            if spelling := self.reserved.conflicts(flag):
                raise FlagConflictError(
                    f"conflict between the reserved console option {spelling!r} "
                    f"and the '--{flag.long}' option of shortcut {self.name!r}",
                    command=self.name,
                    flag=flag,
                )

        self.schema = CommandSchema(
            self.name,
            descr=self.descr,
            help=self.descr,
            usages=[" ".join((self.command, *self.args, "[arguments ...]"))],
            flags=flags,
            cardinal=Cardinal("arguments", f"Arguments appended to '{backend.executable} {self.command}'"),
            lenient=True,
        )

    initialized = True
    aliases = frozenset()

    def ensure_initialized(self):
        return self.schema

    def complete(self, partial="", /):
        return []

    def execute(self, invocation, /, *, quiet=False, stdout=Unset, stderr=Unset):
        tokens = translate(invocation, self.reserved)
        return execute(self.backend, self.command, tokens, quiet=quiet, args=self.args, stdout=stdout, stderr=stderr)

    def __repr__(self):
        return f"shortcut-command(name={self.name!r}, command={self.command!r}, args={list(self.args)!r})"


__all__ = (
    "JSON_OUTPUT",
    "CommandSchema",
    "PassThroughCommand",
    "ShortcutCommand",
    "execute",
)
