"""
Command catalog: the backend's subcommands, discovered once per process.

The catalog asks its introspection source for the command list the first time
any lookup needs it, then keeps one uninitialized PassThroughCommand per name.
Schemas are not synthesized here: a command only introspects itself when it is
actually used (help, completion, execution).
"""
import difflib
import logging
import threading

from .commands import PassThroughCommand
from .faults import UnknownCommandError
from .introspection import CommandSummary
from .reserved import ReservedOptions
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class CommandCatalog:
    """
    Lazily loaded registry of pass-through commands.

    - names() / has(name) / resolve(name) / summaries() load the list on first use.
    - find(name) also matches the aliases of commands that are already
      initialized; it never forces introspection of every command.
    - the first listing of a duplicated name wins.
    """

    def __init__(self, source, /, *, reserved=Unset, prog="shuttle"):
        self.source = source
        self.reserved = coalesce(reserved, ReservedOptions())
        self.prog = prog
        self._commands = Unset
        self._lock = threading.Lock()

    @property
    def backend(self):
        return self.source.backend

    @property
    def loaded(self):
        return self._commands is not Unset

    def _load(self):
        if self._commands is not Unset:
            return self._commands
        with self._lock:
            if self._commands is Unset:
                commands = {}
                for summary in self.source.commands():
                    if summary.name in commands:
                        logger.debug("ignoring duplicated listing of %r", summary.name)
                        continue
                    commands[summary.name] = PassThroughCommand(
                        summary.name,
                        summary.descr,
                        source=self.source,
                        reserved=self.reserved,
                        prog=self.prog,
                    )
                logger.debug("discovered %d commands from %s", len(commands), self.backend.executable)
                self._commands = commands
        return self._commands

    def summaries(self):
        return [CommandSummary(command.name, command.descr) for command in self._load().values()]

    def names(self):
        return frozenset(self._load())

    def has(self, name, /):
        return name in self._load()

    def find(self, name, /):
        """
        return the command for a name or an alias of an initialized command; None otherwise.
        """
        commands = self._load()
        if name in commands:
            return commands[name]
        for command in commands.values():
            if command.initialized and name in command.aliases:
                return command
        return None

    def resolve(self, name, /):
        if (command := self.find(name)) is not None:
            return command

        suggestions = difflib.get_close_matches(name, self._load().keys(), 5)
        try:
            hint = "did you mean %r? you can also run '%s list-commands' to see all commands" % (
                suggestions[0],
                self.prog,
            )
        except IndexError:
            hint = "try '%s list-commands' to see all available commands" % self.prog
        raise UnknownCommandError(
            "unknown command %r" % name,
            input=name,
            suggestions=suggestions,
            hint=hint,
        )

    def __iter__(self):
        return iter(self._load().values())

    def __len__(self):
        return len(self._load())

    def __contains__(self, name):
        return self.has(name)

    def __repr__(self):
        return f"command-catalog(source={self.source!r}, loaded={self.loaded!r})"


__all__ = (
    "CommandSummary",
    "CommandCatalog",
)
