"""
Console script entry point: `shuttle [command] [options] [arguments ...]`.

Settings come from the environment (see shuttle.config); faults are rendered on
stderr and mapped to exit status 1.
"""
import sys

from .config import Settings
from .console import Console


def main(argv=None, /):
    settings = Settings()
    console = Console(settings, shell=True)
    return console.run(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    sys.exit(main())
