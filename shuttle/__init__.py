__title__ = 'shuttle'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .arguments import *
from .catalog import *
from .commands import *
from .config import *
from .console import *
from .faults import *
from .introspection import *
from .invoker import *
from .passthrough import *
from .reserved import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the arguments
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the catalog (CommandSummary is re-exported by introspection too)
__all__ += tuple(name for name in catalog.__all__ if name not in introspection.__all__)  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the configuration
__all__ += config.__all__  # type: ignore[attr-defined]
# Load the exposed API of the console
__all__ += console.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the introspection
__all__ += introspection.__all__  # type: ignore[attr-defined]
# Load the exposed API of the invoker
__all__ += invoker.__all__  # type: ignore[attr-defined]
# Load the exposed API of the pass-through translator
__all__ += passthrough.__all__  # type: ignore[attr-defined]
# Load the exposed API of the reserved options
__all__ += reserved.__all__  # type: ignore[attr-defined]
