"""
Introspection parser: turns a backend's self-description into plain records.

Two interchangeable sources implement the same capability:

- StructuredSource: asks the backend for JSON (`<backend> help [name] --json-output`).
  Listing documents carry `Commands`, `AdditionalHelpCommands` and
  `AdditionalCommands` arrays of {Name, Description}; a single command carries
  {LongDescription, Example, Aliases, Usage, Flags: [{Name, Shorthand, Usage}]}.
- TextSource: scrapes the human help (`<backend> help`, `<backend> <name> -h`):
  an "Available Commands:" listing, and per command "Usage:", "Aliases:",
  "Flags:" and "Examples:" sections, each running to the next blank line.

FallbackSource tries structured first and falls back to text, remembering which
one produced the command list so per-command introspection uses the same mode.

Failure semantics
- A missing or empty command list is fatal (DiscoveryError): without it the
  wrapper has no commands at all.
- Per-command sections are optional: a missing or malformed section yields an
  empty field, since plenty of backend commands take no flags or have no aliases.
"""
import logging
import re
import textwrap
from collections import namedtuple

from .arguments import FlagSpec
from .faults import DiscoveryError
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

CommandSummary = namedtuple("CommandSummary", ("name", "descr"))
CommandSummary.__doc__ = "one backend subcommand as listed by the backend (name, descr)"

CommandHelp = namedtuple(
    "CommandHelp",
    ("long", "usage", "aliases", "flags", "examples"),
    defaults=("", (), (), (), ""),
)
CommandHelp.__doc__ = "raw per-command introspection, before any wrapper-specific rewriting"

LISTINGS = ("Commands", "AdditionalHelpCommands", "AdditionalCommands")

_COMMAND_LINE = re.compile(r"^[ \t]*(?P<name>[\w-]+)[ \t]+(?P<descr>\S.*?)\s*$")
_FLAG_LINE = re.compile(
    r"^\s*(?:-(?P<short>[^\W_]),\s+)?"
    r"--(?P<long>[^\W_][\w-]*)"
    r"(?: (?P<kind>[a-zA-Z][\w.\[\]]*)(?=\s{2,}\S))?"
    r"(?:\s+(?P<descr>\S.*?))?\s*$"
)


def _discovery_error(backend, invocation):
    return DiscoveryError(
        f"no command list found - run '{backend} {invocation}' and confirm it outputs correctly",
        hint=f"the wrapper discovers its commands from '{backend} {invocation}'",
        backend=backend,
    )


def section(text, header, /):
    """
    return the lines under a header line (exact match, trailing blanks ignored)
    up to the next blank line or the end of the output; [] when absent.
    """
    lines = text.splitlines()
    for index, line in enumerate(lines):
        if line.rstrip() == header:
            break
    else:
        return []

    body = []
    for line in lines[index + 1:]:
        if not line.strip():
            break
        body.append(line)
    return body


def parse_command_list(text, /):
    """
    extract (name, descr) pairs from an "Available Commands:" section.

    returns None when the section is missing, [] when it has no usable lines.
    """
    lines = section(text, "Available Commands:")
    if not lines:
        return None
    summaries = []
    for line in lines:
        if match := _COMMAND_LINE.match(line):
            summaries.append(CommandSummary(match["name"], match["descr"].strip()))
    return summaries


def parse_flags(lines, /):
    """
    parse "[-x, ]--long[ type]  description" lines into FlagSpecs.

    a type word counts only when a description follows it after two or more
    spaces, so "--all Everything" stays a presence flag. lines that do not match
    are skipped; the first definition of a long name wins.
    """
    flags = {}
    for line in lines:
        if not (match := _FLAG_LINE.match(line)):
            continue
        try:
            flag = FlagSpec(match["long"], match["short"], match["descr"], valued=bool(match["kind"]))
        except ValueError:
            logger.debug("skipping unparseable flag line %r", line)
            continue
        flags.setdefault(flag.long, flag)
    return tuple(flags.values())


def parse_command_help(text, /):
    """
    parse the human help of one command into a CommandHelp.
    """
    lines = text.splitlines()
    headers = ("Usage:", "Aliases:", "Examples:", "Flags:", "Global Flags:", "Available Commands:")

    description = []
    for line in lines:
        if line.rstrip() in headers:
            break
        description.append(line)

    aliases = ",".join(section(text, "Aliases:"))

    return CommandHelp(
        long="\n".join(description).strip(),
        usage=tuple(line.strip() for line in section(text, "Usage:") if line.strip()),
        aliases=tuple(alias.strip() for alias in aliases.split(",") if alias.strip()),
        flags=parse_flags(section(text, "Flags:")),
        examples=textwrap.dedent("\n".join(section(text, "Examples:"))).strip(),
    )


def parse_structured_help(document, /):
    """
    read a structured single-command document into a CommandHelp.

    unexpected shapes (missing keys, null arrays, non-string values) leave the
    corresponding field empty.
    """
    if not isinstance(document, dict):
        return CommandHelp()

    def string(key):
        return value if isinstance(value := document.get(key), str) else ""

    usage = string("Usage")
    aliases = document.get("Aliases")

    flags = {}
    for entry in document.get("Flags") or ():
        if not isinstance(entry, dict) or not isinstance(entry.get("Name"), str):
            continue
        try:
            flag = FlagSpec(
                entry["Name"],
                entry.get("Shorthand") or None,
                entry.get("Usage") if isinstance(entry.get("Usage"), str) else Unset,
            )
        except (TypeError, ValueError):
            logger.debug("skipping malformed flag entry %r", entry)
            continue
        flags.setdefault(flag.long, flag)

    return CommandHelp(
        long=string("LongDescription").strip(),
        usage=tuple(line.strip() for line in usage.splitlines() if line.strip()),
        aliases=tuple(alias for alias in aliases if isinstance(alias, str)) if isinstance(aliases, list) else (),
        flags=tuple(flags.values()),
        examples=string("Example").strip(),
    )


class IntrospectionSource:
    """
    capability shared by every introspection mode.

    - commands() -> list[CommandSummary]   (raises DiscoveryError when empty)
    - describe(name) -> CommandHelp        (never raises for malformed sections)
    """
    mode = "abstract"

    def __init__(self, backend, /, *, timeout=Unset):
        self.backend = backend
        self.timeout = timeout

    def commands(self):
        raise NotImplementedError

    def describe(self, name, /):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__.lower()}(mode={self.mode!r}, backend={self.backend!r})"


class StructuredSource(IntrospectionSource):
    mode = "structured"

    def commands(self):
        document = self.backend.run_structured("help", timeout=self.timeout)
        if not isinstance(document, dict):
            raise _discovery_error(self.backend.executable, "help --json-output")

        summaries = []
        for listing in LISTINGS:
            for entry in document.get(listing) or ():
                if isinstance(entry, dict) and isinstance(name := entry.get("Name"), str) and name.strip():
                    descr = entry.get("Description")
                    summaries.append(CommandSummary(name.strip(), descr.strip() if isinstance(descr, str) else ""))

        if not summaries:
            raise _discovery_error(self.backend.executable, "help --json-output")
        return summaries

    def describe(self, name, /):
        return parse_structured_help(self.backend.run_structured("help", [name], timeout=self.timeout))


class TextSource(IntrospectionSource):
    mode = "text"

    def commands(self):
        summaries = parse_command_list(self.backend.run_text("help", timeout=self.timeout))
        if not summaries:
            raise _discovery_error(self.backend.executable, "help")
        return summaries

    def describe(self, name, /):
        return parse_command_help(self.backend.run_text(name, ["-h"], timeout=self.timeout))


class FallbackSource(IntrospectionSource):
    """
    structured introspection first, text scraping when the backend has no JSON.

    `chosen` records the source that produced the command list; describe() keeps
    using it so a command's schema is read in the same mode as the catalog.
    """
    mode = "auto"

    def __init__(self, backend, /, *, timeout=Unset):
        super().__init__(backend, timeout=timeout)
        self.structured = StructuredSource(backend, timeout=timeout)
        self.text = TextSource(backend, timeout=timeout)
        self.chosen = Unset

    def commands(self):
        try:
            summaries = self.structured.commands()
        except DiscoveryError:
            logger.info("no structured command list from %s, falling back to help text", self.backend.executable)
            summaries = self.text.commands()
            self.chosen = self.text
        else:
            self.chosen = self.structured
        return summaries

    def describe(self, name, /):
        return coalesce(self.chosen, self.structured).describe(name)


def source_for(mode, backend, /, *, timeout=Unset):
    """
    build the introspection source for a settings mode ("auto", "structured", "text").
    """
    try:
        factory = {"auto": FallbackSource, "structured": StructuredSource, "text": TextSource}[mode]
    except KeyError:
        raise ValueError(f"unknown introspection mode {mode!r}") from None
    return factory(backend, timeout=timeout)


__all__ = (
    "CommandSummary",
    "CommandHelp",
    "LISTINGS",
    "section",
    "parse_command_list",
    "parse_flags",
    "parse_command_help",
    "parse_structured_help",
    "IntrospectionSource",
    "StructuredSource",
    "TextSource",
    "FallbackSource",
    "source_for",
)
