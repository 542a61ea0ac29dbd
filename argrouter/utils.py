"""
Argrouter utilities.

Small helpers shared by the shapes, binding, routing and faults layers.

- Unset: the "not given" sentinel, for parameters where None is a real value.
- coalesce(value, default): swap Unset for a default, keep everything else.
- rename(): give generated callables a readable __name__/__qualname__.
- mirror("attr"): read-only property over self._attr; containers come back frozen.
- ordinal(n): "first", "second", ... "tenth", then "11th", "21st", "22nd", ...

    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(0, "fallback")
    0
    >>> ordinal(3), ordinal(23)
    ('third', '23rd')
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    type of the Unset sentinel.

    there is one instance per process: UnsetType() always returns it, and copying
    or unpickling it gives it back. it is falsy, prints as "Unset" and cannot be
    subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return type(self), ()

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    return default when object is Unset, otherwise object itself (None, 0 and "" included).
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    set __name__ and __qualname__ of a callable.

    rename(callable, name) renames in place and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("rename() name must be a string")
        return _renamer(name)
    if len(parameters) != 2:
        raise TypeError("rename() expects 1 or 2 arguments, got %d" % len(parameters))

    callable, name = parameters
    if not builtins.callable(callable):
        raise TypeError("rename() target must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() name must be a string")
    try:
        callable.__name__ = callable.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError("cannot rename %r" % (callable,)) from None
    return callable


def _renamer(name):
    def decorator(callable):
        return rename(callable, name)

    decorator.__name__ = decorator.__qualname__ = "rename"
    return decorator


def _freeze(object):
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    return object


def mirror(name, /):
    """
    read-only property exposing self._<name>.

    lists and other sequences are returned as tuples, mappings as mapping proxies
    and sets as frozensets; anything else is returned unchanged.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() name must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


def ordinal(number, /):
    """
    ordinal label of a 1-based position.
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)
