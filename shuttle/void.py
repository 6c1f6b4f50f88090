"""
Sentinel for options that were left at their "no value" default.

This module exposes a single instance: `void`. Every option synthesized from a
backend's introspection defaults to it, which lets the pass-through layer tell
three situations apart:

- `void`          → the option was not given at all (never forwarded),
- `True`          → the option was given without a value (forwarded as `--name`),
- any string      → the option was given with a value (forwarded as `--name=value`).

An ordinary False/None default would be ambiguous here: "--flag" alone is a
meaningful request to the backend, distinct from not passing the flag.

Notes
- `void` is a cached singleton (per-process); copies and pickles keep identity.
- It is falsy, prints as "(void)" and renders with colors in Rich, so it reads
  naturally in option tables as "no default".
"""
import functools

from rich.text import Text

void = type("void-type", (), {
    "__module__": __name__,
    "__slots__": (),
    "__rich__": lambda self: Text.assemble(("(", "yellow"), ("void", "red"), (")", "yellow")),
    "__repr__": lambda self: "(void)",
    "__bool__": lambda self: False,
    "__copy__": lambda self: self,
    "__deepcopy__": lambda self, memo: self,
    "__reduce__": lambda self: "void",
    "__doc__": "option default meaning 'not given' (distinct from True, '' and None)",
    "__new__": functools.cache(lambda cls: super(type, cls).__new__(cls)),
})()


__all__ = ("void",)
