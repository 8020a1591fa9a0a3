__title__ = 'clif'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .faults import *
from .flags import *
from .flagtypes import *
from .commands import *
from .parser import *
from .router import *
from .help import *

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

# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the flag definitions
__all__ += flags.__all__  # type: ignore[attr-defined]
# Load the exposed API of the built-in converters
__all__ += flagtypes.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the disambiguator
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the router
__all__ += router.__all__  # type: ignore[attr-defined]
# Load the exposed API of the help text
__all__ += help.__all__  # type: ignore[attr-defined]
