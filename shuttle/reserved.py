"""
Reserved-option registry.

The console consumes a handful of options itself (help, quiet, verbosity, color
control). Backend flags must never reuse those spellings: the console would
swallow them and the backend would never see them. The registry is computed once
from the console's built-in options and is read-only afterwards, so it can be
shared by every synthesizer without synchronization.

`--version/-V` is deliberately absent: the console only honors it with no command
or with `help` (see console.versionless), which leaves backend commands free to
define their own `--version`.
"""
from .arguments import FlagSpec

BUILTINS = (
    FlagSpec("help", "h", "Display help for the given command"),
    FlagSpec("quiet", "q", "Capture backend output instead of attaching it to the terminal"),
    FlagSpec("verbose", "v", "Show the wrapper's debug log on stderr"),
    FlagSpec("ansi", descr="Force colored output"),
    FlagSpec("no-ansi", descr="Disable colored output"),
)


class ReservedOptions:
    """
    Frozen sets of long and short identifiers owned by the console.

    Usage
    - "quiet" in reserved        → True (long names, without dashes)
    - reserved.conflicts(flag)   → the clashing spelling ("--quiet" / "-q") or None
    """
    __slots__ = ("_long", "_short")

    def __init__(self, options=BUILTINS, /):
        long = set()
        short = set()
        for option in options:
            if not isinstance(option, FlagSpec):
                raise TypeError("reserved options must be flag-specs")
            long.add(option.long)
            if option.short:
                short.add(option.short)
        self._long = frozenset(long)
        self._short = frozenset(short)

    @property
    def long(self):
        return self._long

    @property
    def short(self):
        return self._short

    def conflicts(self, flag, /):
        """
        return the reserved spelling a backend flag collides with, or None.
        """
        if flag.long in self._long:
            return "--" + flag.long
        if flag.short and flag.short in self._short:
            return "-" + flag.short
        return None

    def __contains__(self, name):
        return isinstance(name, str) and name.lower() in self._long

    def __repr__(self):
        return f"reserved-options(long={sorted(self._long)!r}, short={sorted(self._short)!r})"


__all__ = (
    "BUILTINS",
    "ReservedOptions",
)
