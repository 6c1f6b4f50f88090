r"""
Shuttle argument specifications.

Overview
- FlagSpec: a named option discovered from the backend (e.g., -a/--all). Every
  synthesized option is optionally-valued and defaults to `void`, so the console
  can tell "not given" from "given without a value" from "given with a value".
- Cardinal: the single catch-all positional every pass-through command receives.
  It accepts zero or more values and, optionally, a completion callback.

Metadata (sanitized on construction)
- FlagSpec
  • long: str, lowercased, must match r"[^\W_][\w-]*" (no leading dashes).
  • short: None | single alphanumeric character (no leading dash).
  • descr: Unset | str (trimmed; becomes None when omitted or blank).
  • valued: bool, whether the backend documents a value type for the flag.
- Cardinal
  • name: str, non-empty; the key under which values appear in an Invocation.
  • descr: Unset | str.
  • nargs: "*" (zero or more, the only arity a pass-through can promise) or "+".
  • completer: Unset | Callable[[str], Iterable[str]].

Validation highlights
- FlagSpec names are rejected when empty, dash-prefixed or not shell-style.
- Short names are single characters; "h" is legal here (the synthesizer decides
  whether to skip it).
"""
import re

from rich.text import Text

from .utils import Unset, coalesce, mirror
from .void import void


def _sanitize_descr(cls, descr, /):
    """
    descriptions are optional; blank strings collapse to None instead of failing,
    since they come from a foreign tool's help output.
    """
    if not isinstance(descr, str | Text | Unset | None):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    if isinstance(descr, str):
        descr = descr.strip() or None
    return coalesce(descr)


def _sanitize_names(cls, long, short, /):
    if not isinstance(long, str):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    elif not (long := long.strip().lower()):
        raise ValueError(f"{cls.__typename__} 'long' cannot be empty")
    elif not re.fullmatch(r"[^\W_][\w-]*", long):
        raise ValueError(f"{cls.__typename__} 'long' must be a shell-style option name without dashes")

    if short is None or short == "":
        return long, None
    if not isinstance(short, str):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif not re.fullmatch(r"[^\W_]", short := short.strip()):
        raise ValueError(f"{cls.__typename__} 'short' must be a single alphanumeric character")
    return long, short


class FlagSpec:
    """
    A backend flag as it is registered on a wrapper command.

    Properties
    - long, short, descr, valued: sanitized metadata (read-only).
    - default: always `void`; the console replaces it with True or a string when
      the flag appears on the command line.
    - names: ("--long", "-s") spellings accepted by the console.
    """
    __typename__ = "flag-spec"
    __slots__ = ("_long", "_short", "_descr", "_valued")

    long = mirror("long")
    short = mirror("short")
    descr = mirror("descr")
    valued = mirror("valued")

    def __init__(self, long, short=None, descr=Unset, *, valued=False):
        self._long, self._short = _sanitize_names(type(self), long, short)
        self._descr = _sanitize_descr(type(self), descr)
        self._valued = bool(valued)

    @property
    def default(self):
        return void

    @property
    def names(self):
        return ("--" + self.long,) + (("-" + self.short,) if self.short else ())

    def __eq__(self, other):
        if not isinstance(other, FlagSpec):
            return NotImplemented
        return (self.long, self.short, self.descr, self.valued) == (other.long, other.short, other.descr, other.valued)

    def __hash__(self):
        return hash((self.long, self.short))

    def __rich_repr__(self):
        yield "long", self.long
        yield "short", self.short
        yield "descr", self.descr
        yield "valued", self.valued

    def __repr__(self):
        return f"{self.__typename__}({', '.join(f'{name}={value!r}' for name, value in self.__rich_repr__())})"


class Cardinal:
    """
    Catch-all positional specification.

    Pass-through commands cannot know statically whether the backend expects
    sub-subcommands or free arguments, so they accept an unbounded, ordered list
    and let the backend validate it.
    """
    __typename__ = "cardinal"
    __slots__ = ("_name", "_descr", "_nargs", "_completer")

    name = mirror("name")
    descr = mirror("descr")
    nargs = mirror("nargs")

    def __init__(self, name, descr=Unset, *, nargs="*", completer=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{self.__typename__} 'name' cannot be empty")
        if nargs not in ("*", "+"):
            raise ValueError(f"{self.__typename__} 'nargs' must be one of '*' or '+'")
        if completer is not Unset and not callable(completer):
            raise TypeError(f"{self.__typename__} 'completer' must be callable")

        self._name = name
        self._descr = _sanitize_descr(type(self), descr)
        self._nargs = nargs
        self._completer = completer

    @property
    def metavar(self):
        return f"[<{self.name}> ...]" if self.nargs == "*" else f"<{self.name}> [<{self.name}> ...]"

    def complete(self, partial, /):
        """
        return completion candidates for a partial value; empty without a completer.
        """
        if self._completer is Unset:
            return []
        return list(self._completer(partial))

    def __rich_repr__(self):
        yield "name", self.name
        yield "descr", self.descr
        yield "nargs", self.nargs

    def __repr__(self):
        return f"{self.__typename__}({', '.join(f'{name}={value!r}' for name, value in self.__rich_repr__())})"


__all__ = (
    "FlagSpec",
    "Cardinal",
)
