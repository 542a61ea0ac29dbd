"""
Argrouter faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing failures.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- RouterFault: base type that carries message + options and knows how to render itself
  in a friendly, lowercased, and actionable way.
- Categories
  • NoMatchingCommandError: no route's literal prefix matched the input.
  • ParseError (and subclasses): a route matched but its tokens could not be bound.
  • HandlerError: the bound handler itself raised.
- trigger(): entry point for embedders to surface a fault (raise, or print and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The dispatch core never prints, logs or exits. Faults travel inside an Outcome;
  the embedding application decides whether to trigger() them.
- Faults raised deep in the binder carry no route label; the router attaches it with
  copy.replace(fault, label=...) before reporting.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the router (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - options (1111x)
      • UNKNOWN_OPTION, OPTION_VALUE_REQUIRED
    - arguments and values (1112x)
      • ARGUMENT_COUNT, UNCASTABLE_VALUE, UNSUPPORTED_TYPE
    - delegated (1113x)
      • HANDLER_ERROR

    the numbers never change once published; normalize() turns them into the
    string shown to users.
    """
    # --- routing (1110x) ---
    UNKNOWN_COMMAND       = 11101

    # --- options (1111x) ---
    UNKNOWN_OPTION        = 11112
    OPTION_VALUE_REQUIRED = 11117

    # --- arguments and values (1112x) ---
    ARGUMENT_COUNT        = 11125
    UNCASTABLE_VALUE      = 11126
    UNSUPPORTED_TYPE      = 11127

    # --- handler (1113x) ---
    HANDLER_ERROR         = 11131

    def normalize(self):
        """
        display string of this code: __main__.__codes__[code] when the host maps it,
        the decimal value otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class RouterFault(Exception):
    """
    base class of every failure the router reports.

    carries
    - message: one-sentence, lowercased description of what went wrong.
    - options: read-only mapping of context (title, code, hint, label, input, ...).
      class-level `code` and `title` act as defaults for the matching options.
    """
    code = Unset
    title = "router fault"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | UnsetType):
            raise TypeError("fault message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": type(self).code, "title": type(self).title} | options)

    @property
    def label(self):
        """
        label of the matched command, when the fault happened after matching.
        """
        return self.options.get("label")

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return str(self.message) if self.message is not Unset else self.title

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        prog = getattr(main, "__prog__", self.options.get("prog", "argrouter"))
        code = self.options["code"]

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "", "code"),
            " | ",
            text(str(self.options["title"]).title(), "error-title"),
            " ]"
        )
        message = text(str(self), "error-message")
        renders = [message]
        if self.hint:
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


class NoMatchingCommandError(RouterFault):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class ParseError(RouterFault):
    """
    a route matched, but its remaining tokens could not be bound.

    str() prefixes the message with the command label once the router attached it.
    """
    title = "parse failure"

    def __str__(self):
        if self.label is None:
            return super().__str__()
        return "failed to parse arguments for command %r: %s" % (self.label, super().__str__())


class MissingOptionValueError(ParseError):
    code = FaultCode.OPTION_VALUE_REQUIRED
    title = "option value required"


class UnknownOptionError(ParseError):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"


class ArgumentCountError(ParseError):
    code = FaultCode.ARGUMENT_COUNT
    title = "wrong number of arguments"


class UncastableValueError(ParseError):
    code = FaultCode.UNCASTABLE_VALUE
    title = "invalid value"


class UnsupportedTypeError(ParseError):
    """
    a payload field is annotated with a type the binder cannot convert into.

    raised lazily, the first time such a field is bound.
    """
    code = FaultCode.UNSUPPORTED_TYPE
    title = "unsupported type"


class HandlerError(RouterFault):
    """
    the handler of a matched route raised; the original exception is the __cause__.
    """
    code = FaultCode.HANDLER_ERROR
    title = "command failed"

    def __str__(self):
        if self.label is None:
            return super().__str__()
        return "failed to run command %r: %s" % (self.label, super().__str__())


def trigger(fault, /, **options):
    """
    raise a fault, or print it and exit when it runs in shell mode.

    the options (shell, fancy, colorful, prog, hint, ...) are merged into a copy of
    the fault first; the fault passed in is left as it is.
    """
    if not callable(getattr(fault, "__trigger__", None)) or not callable(getattr(fault, "__replace__", None)):
        raise TypeError("trigger() expects a router fault, got %r" % (fault,))
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation registered by the host for a code in __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() expects a FaultCode, got %r" % (code,))
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "RouterFault",
    "NoMatchingCommandError",
    "ParseError",
    "MissingOptionValueError",
    "UnknownOptionError",
    "ArgumentCountError",
    "UncastableValueError",
    "UnsupportedTypeError",
    "HandlerError",
    "trigger",
    "getdoc",
)
