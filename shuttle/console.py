"""
Shuttle hosting console: argv in, exit status out.

Flow of Console.run(argv)
1. reserved switches (--verbose, --quiet, --ansi, ...) are collected first, so
   logging and colors are set up before the backend is ever queried;
2. the first non-option token names the command; built-in commands are
   "help", "list-commands" and "_complete", then shortcuts, then the catalog;
3. the remaining tokens are resolved against the command's synthesized schema
   into an Invocation, which the command translates and executes.

Token rules
- "--" ends option parsing; every later token is a positional.
- "--name=value" / "-x=value" set a value; bare "--name" / "-x" set True.
- a flag the backend documents as value-taking consumes the next token unless
  it looks like an option.
- unknown options raise UnknownSwitchError (with close matches); an option
  given twice raises DuplicatedSwitchError.
- "--version" / "-V" only apply with no command or with "help"; next to any
  other command they raise UnknownSwitchError unless the command declares them.
- options reach the backend in the order they were typed.

Help
- "help <command>" and "<command> -h" render the synthesized schema;
- "help <command> <sub> ..." and "<command> <sub> ... -h" hand the sub-command
  chain to the backend ("<backend> <command> <sub> ... -h") and print its help.

Faults
- shell=True (the console script): faults are rendered with rich on stderr and
  the process exits with status 1.
- shell=False (library use, tests): faults propagate as exceptions.
"""
import difflib
import logging
import re
import sys
from collections import defaultdict, deque

from rich.box import ROUNDED
from rich.console import Console as Terminal, Group
from rich.table import Table
from rich.text import Text

from . import logs
from .arguments import FlagSpec
from .catalog import CommandCatalog
from .commands import PassThroughCommand, ShortcutCommand
from .config import Settings
from .faults import ShuttleException, UnknownSwitchError, DuplicatedSwitchError, trigger
from .introspection import source_for
from .invoker import Backend
from .passthrough import Invocation
from .reserved import BUILTINS, ReservedOptions
from .utils import Unset, coalesce, ordinal
from .void import void

logger = logging.getLogger(__name__)

VERSION = FlagSpec("version", "V", "Display this application version")

HELP = "help"
LIST = "list-commands"
COMPLETE = "_complete"

_SWITCH = re.compile(r"(?P<input>--?[^\W\d_][\w-]*)(?:=(?P<value>.*))?", re.DOTALL)


def versionless(command, switches, /):
    """
    drop --version from the built-in switches unless it can apply.

    the version view exists only with no command or with "help"; everywhere else
    "--version" is left to the command, which rejects it unless it declares one.
    """
    if command is None or command == HELP:
        return dict(switches)
    return {name: value for name, value in switches.items() if name != VERSION.long}


def _switchlike(token):
    return token != "--" and _SWITCH.fullmatch(token) is not None


def _chain(tokens):
    """
    the leading positionals of a command line: a sub-command chain ("auth ssh").
    """
    chain = []
    for token in tokens:
        if token == "--" or _switchlike(token):
            break
        chain.append(token)
    return chain


class Console:
    """
    Host application for the wrapper.

    Parameters
    - settings: Settings (defaults to Settings()).
    - backend, source: optional overrides of the Backend and introspection source
      built from the settings (tests inject scripted ones).
    - shell: render faults and exit instead of raising.
    - stdout, stderr: streams for rendered output and for captured backend output.

    Fields
    - catalog: the CommandCatalog of backend commands.
    - shortcuts: wrapper-only commands registered with shortcut().
    - current: the command most recently dispatched by run(), None before that.
    """

    def __init__(self, settings=Unset, /, *, backend=Unset, source=Unset, shell=False, stdout=Unset, stderr=Unset):
        self.settings = coalesce(settings, Settings())
        self.backend = coalesce(backend, Backend(self.settings.backend, timeout=self.settings.timeout))
        self.source = coalesce(source, source_for(self.settings.mode, self.backend, timeout=self.settings.timeout))
        self.reserved = ReservedOptions(BUILTINS)
        self.catalog = CommandCatalog(self.source, reserved=self.reserved, prog=self.settings.prog)
        self.shortcuts = {}
        self.shell = shell
        self.colorful = self.settings.colorful
        self.stdout = stdout
        self.stderr = stderr
        self.current = None

        self.switches = {}
        for flag in (*BUILTINS, VERSION):
            for spelling in flag.names:
                self.switches[spelling] = flag

    @property
    def prog(self):
        return self.settings.prog

    def shortcut(self, name, descr, command, args=(), /, *, flags=()):
        """
        register a wrapper-only command running `<backend> <command> <args...>`.

        returns the ShortcutCommand.
        """
        shortcut = ShortcutCommand(name, descr, command, args, backend=self.backend, reserved=self.reserved, flags=flags)
        self.shortcuts[shortcut.name] = shortcut
        return shortcut

    def find(self, name, /):
        """
        resolve a command name: shortcuts first, then the backend catalog.
        """
        if name in self.shortcuts:
            return self.shortcuts[name]
        return self.catalog.resolve(name)

    def terminal(self):
        return Terminal(
            file=coalesce(self.stdout, sys.stdout),
            no_color=not self.colorful,
            highlight=False,
            soft_wrap=False,
        )

    def run(self, argv=Unset, /):
        """
        run one command line (without the program name); returns the exit status.

        in shell mode a fault never returns: it is rendered on stderr and the
        process exits with status 1 (SystemExit). otherwise it propagates.
        """
        tokens = list(coalesce(argv, sys.argv[1:]))
        try:
            return self._run(tokens)
        except ShuttleException as fault:
            if not self.shell:
                raise
            trigger(fault, shell=True, prog=self.prog, colorful=self.colorful)

    def _run(self, tokens):
        switches = self._prescan(tokens)

        if "no-ansi" in switches:
            self.colorful = False
        elif "ansi" in switches:
            self.colorful = True
        logs.configure("DEBUG" if "verbose" in switches else self.settings.loglevel, colorful=self.colorful)

        command, index, version = None, 0, None
        while index < len(tokens):
            token = tokens[index]
            index += 1
            if token == "--":
                if index < len(tokens):
                    command = tokens[index]
                    index += 1
                break
            if not _switchlike(token):
                command = token
                break
            if self._builtin(token, index) is VERSION:
                version = version or (token, index)

        if version and command not in (None, HELP):
            raise self._version_fault(version[0], version[1], command)

        rest = tokens[index:]
        switches = versionless(command, switches)
        logger.debug("command=%r, switches=%r, rest=%r", command, sorted(switches), rest)

        if VERSION.long in switches:
            self.terminal().print(Text(f"{self.prog} ({self.backend.version()})"))
            return 0

        if command is None or command == LIST:
            self._lister()
            return 0

        if command == HELP:
            positionals = [token for token in rest if not _switchlike(token)]
            if not positionals:
                self._lister()
                return 0
            return self._help(self.find(positionals[0]), positionals[1:])

        if command == COMPLETE:
            return self._complete(rest)

        self.current = self.find(command)
        if HELP in switches:
            return self._help(self.current, _chain(rest))

        invocation = self._resolve(self.current.schema, rest, offset=index)
        logger.debug("dispatching %r with %r", self.current.name, invocation)
        return self.current.execute(
            invocation,
            quiet="quiet" in switches,
            stdout=self.stdout,
            stderr=self.stderr,
        )

    def _prescan(self, tokens):
        """
        collect the built-in switches given anywhere before "--".
        """
        switches = {}
        for token in tokens:
            if token == "--":
                break
            if (match := _SWITCH.fullmatch(token)) and (flag := self.switches.get(match["input"])):
                switches[flag.long] = True
        return switches

    def _builtin(self, token, index):
        """
        validate an option given before the command; only built-ins are allowed there.
        """
        input = _SWITCH.fullmatch(token)["input"]
        if input in self.switches:
            return self.switches[input]
        suggestions = difflib.get_close_matches(input, self.switches.keys(), 5)
        try:
            hint = "did you mean %r? options of a command go after its name" % suggestions[0]
        except IndexError:
            hint = "options of a command go after its name; try '%s help <command>'" % self.prog
        raise UnknownSwitchError(
            "unknown option or flag %r at %s position" % (input, ordinal(index)),
            input=input,
            suggestions=suggestions,
            hint=hint,
        )

    def _resolve(self, schema, tokens, /, *, offset=0):
        """
        resolve the tokens after the command name into an Invocation.

        options keep the order they were typed in; flags that were not given follow
        as `void`. reserved spellings unknown to the schema belong to the console
        and are skipped; --version is rejected unless the command declares it.
        """
        options = {}
        arguments = []
        queue = deque(tokens)
        position = offset

        while queue:
            token = queue.popleft()
            position += 1

            if token == "--":
                arguments.extend(queue)
                break

            if not (match := _SWITCH.fullmatch(token)):
                arguments.append(token)
                continue

            input, value = match["input"], match["value"]

            if flag := schema.flag(input):
                name = flag.long
                if value is None and flag.valued and queue and not _switchlike(queue[0]):
                    value = queue.popleft()
                    position += 1
            elif input in self.switches and input not in VERSION.names:
                continue
            elif schema.lenient and input.startswith("--"):
                name = input[2:].lower()
            elif input in VERSION.names:
                raise self._version_fault(input, position, schema.name)
            else:
                console = [spelling for spelling in self.switches if spelling not in VERSION.names]
                spellings = (*schema.spellings(), *console)
                suggestions = difflib.get_close_matches(input, spellings, 5)
                try:
                    hint = "did you mean %r? you can also run '%s %s --help' to see all options" % (
                        suggestions[0], self.prog, schema.name
                    )
                except IndexError:
                    hint = "try '%s %s --help' to see all available options" % (self.prog, schema.name)
                raise UnknownSwitchError(
                    "unknown option or flag %r at %s position" % (input, ordinal(position)),
                    input=input,
                    command=schema.name,
                    suggestions=suggestions,
                    hint=hint,
                )

            if options.get(name, void) is not void:
                raise DuplicatedSwitchError(
                    "option %r given more than once (again at %s position)" % (input, ordinal(position)),
                    input=input,
                    command=schema.name,
                    hint="keep a single '%s' on the command line" % input,
                )
            options[name] = True if value is None else value

        for flag in schema.flags:
            options.setdefault(flag.long, void)
        return Invocation({schema.cardinal.name: arguments}, options)

    def _version_fault(self, input, position, command):
        return UnknownSwitchError(
            "unknown option or flag %r at %s position" % (input, ordinal(position)),
            input=input,
            command=command,
            suggestions=[],
            hint="'%s' shows the wrapper version only without a command; try '%s --version'" % (input, self.prog),
        )

    def _help(self, command, chain=(), /):
        """
        show the help of a command, or the backend's own help for a sub-command
        chain of a pass-through command ("help auth ssh" → "<backend> auth ssh -h").
        """
        if not chain or not isinstance(command, PassThroughCommand):
            self._helper(command)
            return 0
        outcome = self.backend.run_captured(command.name, [*chain, "-h"], timeout=self.settings.timeout)
        prefix = f"{self.backend.executable} {command.name}"
        if outcome.succeeded:
            coalesce(self.stdout, sys.stdout).write(outcome.stdout.replace(prefix, f"{self.prog} {command.name}"))
        else:
            coalesce(self.stderr, sys.stderr).write(outcome.stderr)
        return 0 if outcome.succeeded else 1

    def _complete(self, tokens):
        if not tokens:
            return 0
        name, partial = tokens[0], tokens[1] if len(tokens) > 1 else ""
        try:
            command = self.find(name)
        except ShuttleException as fault:
            logger.debug("no completion for %r: %s", name, fault)
            return 0
        stream = coalesce(self.stdout, sys.stdout)
        for candidate in command.schema.cardinal.complete(partial):
            stream.write(candidate + "\n")
        return 0

    def _palette(self):
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "group-label": "bold #FFFFFF",
            "argument-description": "#9CA3AF",
            "option-name": "bold #00E6FF",
            "flag-name": "bold #22C55E",
            "metavar": "bold #FFD600",
            "children-title": "bold #FFFFFF",
            "children-table": "#4B5563",
            "children": "bold #36C5F0",
            "children-description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styler(style))

        return text, styler

    def _group(self, console, label, rows, text):
        """
        render "label:" followed by (names, description) rows with a hanging indent.
        """
        width = console.width
        padding = 2
        indent = 24

        group = Text()
        group.append(text(label, "group-label")).append(":\n")
        for names, descr in rows:
            section = Text(" " * padding) + names
            if descr:
                if len(section) >= indent:
                    section.append("\n").append(" " * indent)
                else:
                    section.append(" " * (indent - len(section)))
                wrapped = text(descr, "argument-description").wrap(console, width - indent)
                for number, line in enumerate(wrapped):
                    if number:
                        section.append("\n").append(" " * indent)
                    section.append(line)
            group.append(section).append("\n")
        return group

    def _names(self, flag, text):
        style = "option-name" if flag.valued else "flag-name"
        names = Text(" | ").join(text(name, style) for name in reversed(flag.names))
        if flag.valued:
            names.append(" ").append(text(f"<{flag.long}>", "metavar"))
        return names

    def _helper(self, command):
        """
        render the help of one command: usage lines, aliases, description, options.
        """
        console = self.terminal()
        text, styler = self._palette()
        schema = command.schema
        renders = []

        usage = Text()
        usage.append(text("usage", "usage-label")).append(": ")
        head = Text.assemble(text(self.prog, "program-name"), " ", text(schema.name, "program-name"))
        lines = schema.usages or (f"[options] {schema.cardinal.metavar}",)
        for number, line in enumerate(lines):
            if number:
                usage.append("\n").append(" " * len("usage: "))
            usage.append(head).append(" ").append(text(line, "usage-section"))
        renders.append(usage.append("\n"))

        if schema.aliases:
            aliases = Text()
            aliases.append(text("aliases", "usage-label")).append(": ")
            aliases.append(Text(", ").join(text(alias, "children") for alias in sorted(schema.aliases)))
            renders.append(aliases.append("\n"))

        if descr := schema.help or schema.descr:
            renders.append(text(descr, "description-section").append("\n"))

        renders.append(self._group(
            console,
            "arguments",
            [(text(schema.cardinal.metavar, "metavar"), schema.cardinal.descr)],
            text,
        ))
        if schema.flags:
            renders.append(self._group(
                console,
                "options",
                [(self._names(flag, text), flag.descr) for flag in schema.flags],
                text,
            ))
        renders.append(self._group(
            console,
            "global options",
            [(self._names(flag, text), flag.descr) for flag in BUILTINS],
            text,
        ))

        renders[-1].rstrip()
        console.print(Group(*renders))

    def _lister(self):
        """
        render the command listing: usage, commands table, global options.
        """
        console = self.terminal()
        text, styler = self._palette()
        renders = []

        usage = Text()
        usage.append(text("usage", "usage-label")).append(": ")
        usage.append(text(self.prog, "program-name")).append(" ")
        usage.append(text("<command> [options] [arguments ...]", "usage-section"))
        renders.append(usage.append("\n"))

        table = Table(
            "name", "help",
            title=text("commands", "children-title"),
            box=ROUNDED,
            style=styler("children-table"),
            header_style=styler("children-title"),
        )
        for name, descr in (
                *((shortcut.name, shortcut.descr) for shortcut in self.shortcuts.values()),
                *((summary.name, summary.descr) for summary in self.catalog.summaries() if summary.name not in self.shortcuts),
        ):
            table.add_row(text(name, "children"), text(descr or "no description", "children-description"))
        renders.append(table)

        group = self._group(
            console,
            "global options",
            [(self._names(flag, text), flag.descr) for flag in (VERSION, *BUILTINS)],
            text,
        )
        renders.append(Text("\n") + group)
        renders[-1].rstrip()
        console.print(Group(*renders))

    def __repr__(self):
        return f"console(prog={self.prog!r}, backend={self.backend!r}, shell={self.shell!r})"


__all__ = (
    "VERSION",
    "Console",
    "versionless",
)
