"""
mysh utilities (small helpers shared by every layer).

Overview
- UnsetType / Unset
  • Singleton sentinel for "no value at all", kept apart from None because None is a
    legitimate result (an optional argument that was not given, a command returning nothing).
  • Falsy, printable as "Unset", survives copy/deepcopy/pickle with its identity.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving None/0/""/[].

- rename(name)
  • Give generated callables a stable __name__/__qualname__ for clean tracebacks.

- freeze(object)
  • Shallow read-only snapshot of a container (tuple / MappingProxyType / frozenset).

- mirror(name)
  • Read-only property over a private "_name" attribute (containers are frozen).

- palette(defaults, colorful=True)
  • Style resolver shared by the rich renderers; the host may override any entry with a
    __styles__ mapping in __main__, and colorful=False drops every style.
"""
import functools
import threading
from collections import defaultdict
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    type of the Unset sentinel (one instance per process).

    notes
    - instantiating the type again returns the same object.
    - copies and unpickled objects resolve to the module-level instance.
    """
    __slots__ = ()
    __lock = threading.Lock()
    __instance = None

    def __new__(cls):
        with cls.__lock:
            if cls.__instance is None:
                cls.__instance = super().__new__(cls)
        return cls.__instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        # Pickled by reference to the module attribute, so loads() yields the singleton.
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    return `default` when `object` is Unset, otherwise `object` unchanged.

    falsy values other than Unset (None, 0, "", []) are returned as they are.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    decorator that sets __name__ and __qualname__ of a callable to `name`.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = name
        function.__qualname__ = name
        return function

    return decorator


def freeze(object, /):
    """
    shallow, read-only snapshot of a container.

    - Sequence (not str) → tuple
    - Mapping            → MappingProxyType over a copy
    - Set                → frozenset
    - anything else      → returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    read-only property publishing the backing attribute "_{name}" through freeze().

        class Entry:
            help = mirror("help")   # reads self._help
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return freeze(getattr(self, "_" + name))

    return property(getter)


def palette(defaults, /, colorful=True):
    """
    build a style resolver for rich renderers.

    parameters
    - defaults: Mapping[str, str]
      palette keys to rich style strings.
    - colorful: bool
      when False every key resolves to "" (plain output).

    returns
    - Callable[[str], str]: key → style; unknown keys resolve to "".

    the host application can override entries by defining __styles__ in __main__.
    """
    styles = defaultdict(str, dict(defaults) | getattr(__import__("__main__"), "__styles__", {}))

    @rename("styler")
    def styler(key, /):
        return styles[key] if colorful else ""

    return styler


@functools.cache
def kebab(name, /):
    """
    spell a python identifier the way it appears on the command line (dry_run → dry-run).
    """
    return name.strip("_").replace("_", "-")


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "freeze",
    "mirror",
    "palette",
    "kebab",
)
