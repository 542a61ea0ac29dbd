r"""
Argrouter payload shapes.

Overview
- Payloads are plain dataclasses. An options payload holds named, optional values
  (each field keyed by an option name); an arguments payload holds required,
  positional values bound in declaration order.
- describe(type) reflects over a payload dataclass once (cached per type) and returns
  a Shape: an ordered collection of Field(name, semantic, binding, annotation).

Semantic types
- str → STRING, int → INTEGER, float → FLOAT, bool → BOOLEAN (exact types only;
  bool is not an int here).
- Any other annotation is UNSUPPORTED. This never fails at describe time; the binder
  reports it the first time a value is bound into that field.

Binding kinds
- Named(key): option fields. The key comes from field metadata {"option": key}
  (see option()), or defaults to the field name.
- Positional(index): argument fields, 0-based in declaration order.

Quick example:
    >>> from dataclasses import dataclass
    >>> from argrouter.shapes import option, describe
    >>> @dataclass
    ... class Options:
    ...     retries: int = option("retries", default=3)
    ...     verbose: bool = False
    ...
    >>> [field.binding for field in describe(Options)]
    [Named(key='retries'), Named(key='verbose')]
"""
import builtins
import dataclasses
import functools
import typing
from enum import Enum
from typing import NamedTuple

from .utils import Unset, mirror


class SemanticType(Enum):
    """
    conversion target of a raw token.
    """
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    UNSUPPORTED = "unsupported"


# Annotations may still be strings when hints cannot be resolved.
_SEMANTICS = {
    str: SemanticType.STRING,
    int: SemanticType.INTEGER,
    float: SemanticType.FLOAT,
    bool: SemanticType.BOOLEAN,
    "str": SemanticType.STRING,
    "int": SemanticType.INTEGER,
    "float": SemanticType.FLOAT,
    "bool": SemanticType.BOOLEAN,
}


class Named(NamedTuple):
    key: str


class Positional(NamedTuple):
    index: int


class Field(NamedTuple):
    name: str
    semantic: SemanticType
    binding: Named | Positional
    annotation: typing.Any


class Shape:
    """
    reflected description of one payload dataclass.

    - iteration yields fields in declaration order; len() is the field count.
    - lookup(key) resolves an option key to its field (None when unknown).
    - options maps each option key of a named shape to its field (empty for positional shapes).
    """
    __slots__ = ("_type", "_fields", "_options")

    type = mirror("type")
    fields = mirror("fields")
    options = mirror("options")

    def __init__(self, type, fields, /):
        self._type = type
        self._fields = tuple(fields)
        self._options = {}
        for field in self._fields:
            if isinstance(field.binding, Named):
                # first declaration of a key wins
                self._options.setdefault(field.binding.key, field)

    def lookup(self, key, /):
        return self._options.get(key)

    def __iter__(self):
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    def __repr__(self):
        return "shape(%s, fields=%r)" % (self._type.__qualname__, self._fields)

    def __rich_repr__(self):
        yield "type", self._type
        yield "fields", self._fields


def _hints(type):
    try:
        return typing.get_type_hints(type)
    except NameError:
        # unresolved forward references: fall back to the raw annotations
        return {}


def _semantic(annotation):
    try:
        return _SEMANTICS.get(annotation, SemanticType.UNSUPPORTED)
    except TypeError:
        # unhashable annotation, e.g. Literal[[1]]
        return SemanticType.UNSUPPORTED


def describe(payload, /, *, positional=False):
    """
    build (once per payload type) the Shape of a dataclass.

    parameters
    - payload: dataclass type (instances are accepted and reduced to their type).
    - positional: when True, fields are bound by ordinal; otherwise by option key.

    only fields taking part in __init__ are described; the rest are never bound.

    raises
    - TypeError when the payload is not a dataclass.
    """
    if not dataclasses.is_dataclass(payload):
        raise TypeError("payload %r must be a dataclass" % (payload,))
    if not isinstance(payload, builtins.type):
        payload = builtins.type(payload)
    return _describe(payload, bool(positional))


@functools.cache
def _describe(type, positional, /):
    hints = _hints(type)
    fields = []
    for field in dataclasses.fields(type):
        if not field.init:
            continue
        annotation = hints.get(field.name, field.type)
        semantic = _semantic(annotation)
        if positional:
            binding = Positional(len(fields))
        else:
            binding = Named(field.metadata.get("option", field.name))
        fields.append(Field(field.name, semantic, binding, annotation))
    return Shape(type, fields)


def option(key, /, *, default=Unset, default_factory=Unset, metadata=Unset, **options):
    """
    declare an options field bound to the '-<key>' option token.

    a thin wrapper over dataclasses.field(); extra keyword options are forwarded.

    example
        retries: int = option("retries", default=3)   # -retries 5
    """
    if not isinstance(key, str):
        raise TypeError("option() key must be a string")
    if default is not Unset:
        options["default"] = default
    if default_factory is not Unset:
        options["default_factory"] = default_factory
    return dataclasses.field(metadata={**(metadata or {}), "option": key}, **options)


@dataclasses.dataclass(frozen=True)
class Empty:
    """
    payload with no fields: no options accepted, no positional arguments expected.
    """


__all__ = (
    "SemanticType",
    "Named",
    "Positional",
    "Field",
    "Shape",
    "Empty",
    "describe",
    "option",
)
