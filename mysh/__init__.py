"""
mysh: an embeddable command shell.

Layers, from the input line to the printed result
- tokenizer: line → words (POSIX-like quoting).
- arguments: words → typed argument values.
- commands:  Command objects and the Registry of one shell level.
- shell:     dispatch, namespaces and the single-shot / interactive loop.
- readers:   where interactive lines come from.
- faults / traces: declared errors and the record of undeclared ones.
"""
__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'mysh'
__author__ = 'mysh developers'
__license__ = 'MIT'
# Placeholder, kept in sync with pyproject.toml.
__version__ = "0.0.0"

from .arguments import *
from .commands import *
from .faults import *
from .readers import *
from .shell import *
from .tokenizer import *
from .traces import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", ("major", "minor", "micro"))

version_info = VersionInfo(*map(int, __version__.split(".")))

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Public API of every layer, innermost first.
__all__ += tokenizer.__all__  # type: ignore[attr-defined]
__all__ += arguments.__all__  # type: ignore[attr-defined]
__all__ += commands.__all__  # type: ignore[attr-defined]
__all__ += shell.__all__  # type: ignore[attr-defined]
__all__ += readers.__all__  # type: ignore[attr-defined]
__all__ += faults.__all__  # type: ignore[attr-defined]
__all__ += traces.__all__  # type: ignore[attr-defined]
