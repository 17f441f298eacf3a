__title__ = 'bosun'
__license__ = 'MIT'
__version__ = "0.1.0"

import logging

from .application import *
from .cache import *
from .commands import *
from .faults import *
from .grammar import *
from .helper import *
from .pipeline import *
from .resolver import *
from .switches import *

# Library logging stays silent until configure_logging() is called.
logging.getLogger(__name__).addHandler(logging.NullHandler())

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
))

version_info = VersionInfo(0, 1, 0, "final", 0)

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
)

# Load the exposed API of the application facade
__all__ += application.__all__  # type: ignore[attr-defined]
# Load the exposed API of the metadata cache
__all__ += cache.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command registry
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the grammar
__all__ += grammar.__all__  # type: ignore[attr-defined]
# Load the exposed API of the help formatter
__all__ += helper.__all__  # type: ignore[attr-defined]
# Load the exposed API of the pipeline
__all__ += pipeline.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolver
__all__ += resolver.__all__  # type: ignore[attr-defined]
# Load the exposed API of the global switches
__all__ += switches.__all__  # type: ignore[attr-defined]
