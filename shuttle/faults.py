"""
Shuttle faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every wrapper-level issue,
  grouped by domain so logs and searches stay predictable.
- ShuttleException: base type carrying a message + options that knows how to render
  itself with rich (header, message, hint), optionally inside a panel.
- trigger(): central entry point to surface any fault (raise outside shell mode,
  print-and-exit inside it).

Taxonomy
- discovery (1210x): the backend produced no usable command list. Fatal; the hint
  points at the introspection invocation to re-run by hand.
- integration (1220x): a backend flag collides with a wrapper-reserved option.
  Fatal; the wrapper needs a code change, so it is never silently dropped.
- routing (1110x): unknown command. Recoverable user error.
- switches (1111x): unknown or duplicated option. Recoverable user error.
- execution (1310x): the backend executable cannot be launched.

Backend failures (non-zero exit) are not faults: the backend's own stderr is relayed
verbatim and only the exit code changes.

Integration
- Each concrete fault also derives from the closest builtin (LookupError,
  RuntimeError, ValueError, OSError) so callers can catch it idiomatically.
- The host application can provide __prog__, __styles__ and __codes__ in __main__
  to restyle the rendering.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the wrapper (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND
    - switches (1111x): UNKNOWN_SWITCH, DUPLICATED_SWITCH
    - discovery (1210x): MISSING_COMMAND_LIST
    - integration (1220x): RESERVED_FLAG_CONFLICT
    - execution (1310x): BACKEND_NOT_FOUND
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101

    # --- switch errors ---
    UNKNOWN_SWITCH              = 11112
    DUPLICATED_SWITCH           = 11115

    # --- discovery errors ---
    MISSING_COMMAND_LIST        = 12101

    # --- integration errors ---
    RESERVED_FLAG_CONFLICT      = 12201

    # --- execution errors ---
    BACKEND_NOT_FOUND           = 13101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to override
        numeric ids with friendlier labels; otherwise the numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ShuttleException(Exception):
    """
    base fault: a lowercased, one-sentence message plus rendering options.

    options (all optional)
    - title, code, hint: shown in the header / footer.
    - prog: program name for the header (falls back to __main__.__prog__, then "shuttle").
    - colorful, fancy: rendering switches.
    - shell: when true, trigger() prints and exits instead of raising.
    Anything else is kept as context (e.g., command, flag, suggestions).
    """
    code = Unset
    title = "fault"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(self.options.get("prog", getattr(main, "__prog__", "shuttle")), styler("prog-name"))
        code = self.options.get("code", self.code)
        title = self.options.get("title", self.title)

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "-", styler("code")),
            " | ",
            text(title.title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left")
        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class DiscoveryError(ShuttleException, LookupError):
    code = FaultCode.MISSING_COMMAND_LIST
    title = "no command list found"


class FlagConflictError(ShuttleException, RuntimeError):
    code = FaultCode.RESERVED_FLAG_CONFLICT
    title = "reserved option conflict"


class UnknownCommandError(ShuttleException, LookupError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class UnknownSwitchError(ShuttleException, ValueError):
    code = FaultCode.UNKNOWN_SWITCH
    title = "unknown option or flag"


class DuplicatedSwitchError(ShuttleException, ValueError):
    code = FaultCode.DUPLICATED_SWITCH
    title = "duplicated option"


class BackendNotFoundError(ShuttleException, OSError):
    code = FaultCode.BACKEND_NOT_FOUND
    title = "backend not found"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ShuttleException).
    - options are merged into the fault via copy.replace(...) before triggering.
    - in shell mode, rendering happens via the rich console and the process exits
      with status 1; otherwise, the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "ShuttleException",
    "DiscoveryError",
    "FlagConflictError",
    "UnknownCommandError",
    "UnknownSwitchError",
    "DuplicatedSwitchError",
    "BackendNotFoundError",
    "FaultCode",
    "trigger",
)
