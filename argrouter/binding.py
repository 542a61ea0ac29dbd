"""
Argrouter argument binder: turn the tokens left after a route's literal prefix
into an options payload and an arguments payload.

Phases
- scan: a two-state scanner (awaiting key / awaiting value) collects '-key value'
  pairs until the first token that does not start with '-'. That token and the
  rest become the positional remainder. '-h' while awaiting a key stops everything
  and asks for help.
- bind_options: each collected key is looked up in the options shape, converted,
  and applied on a deep copy of the route's default options (dataclasses.replace).
- bind_arguments: the remainder must have exactly one token per positional field;
  tokens are converted left to right in declaration order.

Conversion (convert)
- STRING   identity
- INTEGER  base-10, optional sign, signed 64-bit range
- FLOAT    decimal literal (plus inf/nan spellings), finite text must stay finite
- BOOLEAN  'true' / 'false', case-insensitive

Every failure is raised as a ParseError subclass (see argrouter.faults) without a
command label; the router attaches the label when it reports the outcome.

Positions
- 'offset' is the number of tokens consumed before the slice being bound (the
  literal prefix), so faults can report the 1-based position in the full input.
"""
import copy
import dataclasses
import difflib
import math
import re
from typing import NamedTuple

from .faults import *
from .shapes import SemanticType, describe
from .utils import Unset, ordinal

MARKER = "-"
HELP = "-h"

INTEGER_MIN = -(2 ** 63)
INTEGER_MAX = 2 ** 63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


class Scan(NamedTuple):
    help: bool
    pairs: dict[str, str]
    remainder: tuple[str, ...]


def scan(tokens, /, *, offset=0):
    r"""
    split a token slice into option pairs and the positional remainder.

    returns
    - Scan(help=True, ...) as soon as '-h' is seen while awaiting a key.
    - Scan(help=False, pairs, remainder) otherwise. when a key repeats, the later
      value wins.

    raises
    - MissingOptionValueError when the input ends right after a key.
    """
    tokens = tuple(tokens)
    pairs = {}
    key = Unset
    start = Unset

    for index, token in enumerate(tokens):
        if key is Unset:
            if not token.startswith(MARKER):
                return Scan(False, pairs, tokens[index:])
            if token == HELP:
                return Scan(True, pairs, ())
            key = token.removeprefix(MARKER)
            start = offset + index + 1
        else:
            pairs[key] = token
            key = Unset

    if key is not Unset:
        raise MissingOptionValueError(
            "option %r given no value" % key,
            input=key,
            index=start,
            hint="pass a value right after the option at %s position (for example: -%s <value>)" % (ordinal(start), key),
            docs=getdoc(FaultCode.OPTION_VALUE_REQUIRED),
        )
    return Scan(False, pairs, ())


def _to_string(raw):
    return raw


def _to_integer(raw):
    if not _INTEGER.fullmatch(raw):
        raise ValueError("invalid syntax")
    value = int(raw)
    if not INTEGER_MIN <= value <= INTEGER_MAX:
        raise ValueError("value out of range")
    return value


def _to_float(raw):
    if not _FLOAT.fullmatch(raw):
        raise ValueError("invalid syntax")
    value = float(raw)
    if math.isinf(value) and "inf" not in raw.lower():
        raise ValueError("value out of range")
    return value


def _to_boolean(raw):
    try:
        return {"true": True, "false": False}[raw.lower()]
    except KeyError:
        raise ValueError("invalid syntax") from None


_CONVERTERS = {
    SemanticType.STRING: _to_string,
    SemanticType.INTEGER: _to_integer,
    SemanticType.FLOAT: _to_float,
    SemanticType.BOOLEAN: _to_boolean,
}


def convert(raw, semantic, /, *, annotation=Unset, subject=Unset, index=Unset):
    """
    convert one raw token into the python value of a semantic type.

    parameters
    - raw: str, the token as typed.
    - semantic: SemanticType of the destination field.
    - annotation: the field annotation, used to name unsupported types.
    - subject / index: option key or field name, and 1-based position, for messages.

    raises
    - UnsupportedTypeError for SemanticType.UNSUPPORTED.
    - UncastableValueError when the token does not parse.
    """
    try:
        converter = _CONVERTERS[semantic]
    except KeyError:
        name = getattr(annotation, "__name__", None) or str(annotation if annotation is not Unset else semantic.value)
        raise UnsupportedTypeError(
            "unsupported type: %s" % name,
            input=subject,
            index=index,
            annotation=annotation,
            hint="annotate %r as str, int, float or bool" % subject if subject else "use str, int, float or bool fields",
            docs=getdoc(FaultCode.UNSUPPORTED_TYPE),
        ) from None

    try:
        return converter(raw)
    except ValueError as exception:
        fault = UncastableValueError(
            "failed to parse %r as %s: %s" % (raw, semantic.value, exception),
            input=subject,
            value=raw,
            index=index,
            semantic=semantic,
            hint="give %r a valid %s value" % (subject, semantic.value) if subject else "give a valid %s value" % semantic.value,
            docs=getdoc(FaultCode.UNCASTABLE_VALUE),
        )
        raise fault from exception


def bind_options(defaults, pairs, /, *, positions=Unset):
    """
    apply option pairs on top of a default options payload.

    the defaults instance is never shared: a new payload is built from a deep copy
    with dataclasses.replace(), so unsupplied options keep their default values and
    handlers mutating the payload never reach later dispatches.

    raises
    - UnknownOptionError for a key the options shape does not declare.
    - UnsupportedTypeError / UncastableValueError from convert().
    """
    shape = describe(defaults)
    positions = positions or {}
    changes = {}

    for key, raw in pairs.items():
        field = shape.lookup(key)
        if field is None:
            suggestions = difflib.get_close_matches(key, shape.options.keys(), 3)
            try:
                hint = "did you mean '-%s'? run with -h to see the command help" % suggestions[0]
            except IndexError:
                hint = "remove it or run with -h to see the command help"
            raise UnknownOptionError(
                "invalid option %r" % key,
                input=key,
                index=positions.get(key),
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_OPTION),
            )
        changes[field.name] = convert(
            raw,
            field.semantic,
            annotation=field.annotation,
            subject=key,
            index=positions.get(key),
        )

    return dataclasses.replace(copy.deepcopy(defaults), **changes)


def bind_arguments(type, tokens, /, *, offset=0):
    """
    build a positional payload of the given dataclass type from the remainder.

    raises
    - ArgumentCountError when the token count differs from the field count.
    - UnsupportedTypeError / UncastableValueError from convert().
    """
    shape = describe(type, positional=True)
    tokens = tuple(tokens)

    if len(tokens) != len(shape):
        names = ", ".join(field.name for field in shape) or "no arguments"
        raise ArgumentCountError(
            "expected %d args but got %d" % (len(shape), len(tokens)),
            expected=len(shape),
            got=len(tokens),
            leftover=tokens[len(shape):],
            hint="pass exactly %d positional value%s (%s)" % (len(shape), "s" * (len(shape) != 1), names),
            docs=getdoc(FaultCode.ARGUMENT_COUNT),
        )

    values = {}
    for field, token in zip(shape, tokens):
        values[field.name] = convert(
            token,
            field.semantic,
            annotation=field.annotation,
            subject=field.name,
            index=offset + field.binding.index + 1,
        )
    return type(**values)


def bind(route, tokens, help, /, *, offset=0):
    """
    run every binding phase for one matched route.

    parameters
    - route: the matched Route (its options default, arguments type and help text).
    - tokens: tokens after the route's literal prefix.
    - help: help collaborator, called with route.help when '-h' is seen.
    - offset: length of the literal prefix (for positions in messages).

    returns
    - (options, arguments) once everything is bound.
    - None when help was requested; nothing else was processed.
    """
    tokens = tuple(tokens)
    result = scan(tokens, offset=offset)
    if result.help:
        help(route.help)
        return None

    # 1-based position of each option key in the full input (last occurrence)
    positions = {}
    consumed = len(tokens) - len(result.remainder)
    for index in range(0, consumed, 2):
        positions[tokens[index].removeprefix(MARKER)] = offset + index + 1

    options = bind_options(route.options, result.pairs, positions=positions)
    arguments = bind_arguments(route.arguments, result.remainder, offset=offset + consumed)
    return options, arguments


__all__ = (
    "MARKER",
    "HELP",
    "Scan",
    "scan",
    "convert",
    "bind_options",
    "bind_arguments",
    "bind",
)
