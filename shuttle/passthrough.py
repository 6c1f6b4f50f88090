"""
Pass-through translation: a parsed invocation back into backend tokens.

Invocation keeps what the console parsed for one command execution:
- positionals: ordered mapping name → str | list[str] (parse order is preserved;
  the backend may read successive positionals as a sub-command chain);
- options: ordered mapping long name → value | True | void.

translate() applies, in order:
1. positionals in their original order, except the console's own dispatch token
   (a positional named "command"), which never reaches the backend;
2. list-valued positionals flattened in place;
3. options in invocation order, skipping `void` (not given) and reserved names;
   True, False, None and "" become a bare "--name"; any other value (strings,
   numbers, ...) becomes "--name=value".
"""
from collections.abc import Mapping

from .utils import Unset, coalesce
from .void import void

DISPATCH = "command"


class Invocation:
    """
    Parsed user input for one command execution (never retained afterwards).
    """
    __slots__ = ("positionals", "options")

    def __init__(self, positionals=Unset, options=Unset):
        positionals = coalesce(positionals, {})
        options = coalesce(options, {})
        if not isinstance(positionals, Mapping) or not isinstance(options, Mapping):
            raise TypeError("invocation positionals and options must be mappings")
        self.positionals = dict(positionals)
        self.options = dict(options)

    @classmethod
    def of(cls, arguments=(), /, **options):
        """
        shorthand for the common case: one catch-all positional plus options.

        option keywords use underscores where the long name has dashes.
        """
        return cls(
            {"arguments": list(arguments)},
            {name.replace("_", "-"): value for name, value in options.items()},
        )

    def given(self, name, /):
        """
        whether an option was actually supplied (its value is not `void`).
        """
        return self.options.get(name, void) is not void

    def __eq__(self, other):
        if not isinstance(other, Invocation):
            return NotImplemented
        return (self.positionals, list(self.options.items())) == (other.positionals, list(other.options.items()))

    __hash__ = None

    def __repr__(self):
        return f"invocation(positionals={self.positionals!r}, options={self.options!r})"


def translate(invocation, reserved=frozenset(), /):
    """
    flatten an Invocation into the token list handed to the backend.

    `reserved` is anything supporting `in` over long names (a ReservedOptions or
    a plain set).
    """
    tokens = []

    for name, value in invocation.positionals.items():
        if name == DISPATCH:
            continue
        if isinstance(value, list | tuple):
            tokens.extend(map(str, value))
        elif value is not None and value is not void:
            tokens.append(str(value))

    for name, value in invocation.options.items():
        if value is void or name in reserved:
            continue
        if value is True or value is False or value is None or value == "":
            tokens.append(f"--{name}")
        else:
            tokens.append(f"--{name}={value}")

    return tokens


__all__ = (
    "DISPATCH",
    "Invocation",
    "translate",
)
