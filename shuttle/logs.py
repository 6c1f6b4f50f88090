"""
Logging setup for the wrapper.

Every module logs through `logging.getLogger(__name__)`, so the whole package hangs
under the "shuttle" logger. configure() attaches a single rich handler writing to
stderr; the backend's own stdout is never mixed with wrapper diagnostics.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER = "shuttle"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def level(name, /):
    """
    translate a level name ("debug", "WARNING", ...) into its numeric value.
    """
    if not isinstance(name, str):
        raise TypeError("level() argument must be a string")
    try:
        return _LEVELS[name.strip().upper()]
    except KeyError:
        raise ValueError(f"unknown log level {name!r}") from None


def configure(loglevel="WARNING", /, *, colorful=True):
    """
    install (once) the rich handler on the package logger and set its level.

    calling it again only updates the level, so the console can lower it after
    parsing --verbose without stacking handlers.
    """
    logger = logging.getLogger(LOGGER)
    logger.setLevel(level(loglevel) if isinstance(loglevel, str) else loglevel)

    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True, no_color=not colorful),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    return logger


__all__ = (
    "LOGGER",
    "level",
    "configure",
)
