"""
Argrouter routing layer: register literal-token routes and dispatch argv-like
token vectors to typed handlers.

What this module provides
- Router: an ordered table of routes.
  • register(route, handler, options, help) / @router.route(...): add a route.
  • dispatch(tokens): pick the most specific route, bind its payloads, call the handler.
  • run(): dispatch the process arguments (through the injected argv collaborator).
- Route: one registered route (literal tokens, default options, arguments type,
  help text, handler). Read-only once built.
- Outcome: the structured result of a dispatch.
- nohelp / printhelp: the two stock help collaborators.

Precedence
- Routes are kept sorted by descending literal-token count. Routes with the same
  count keep their registration order, so dispatching is deterministic.
- The first route whose literal prefix matches wins exclusively: when binding its
  arguments fails, no shorter route is tried.

Quick start
    from dataclasses import dataclass
    from argrouter import Router, option, printhelp, trigger

    @dataclass
    class CopyOptions:
        retries: int = option("retries", default=1)

    @dataclass
    class CopyArguments:
        source: str
        target: str

    router = Router(help=printhelp)

    @router.route("files copy", help="copy SOURCE to TARGET")
    def copy(options: CopyOptions, arguments: CopyArguments):
        ...

    outcome = router.dispatch(["files", "copy", "-retries", "3", "a.txt", "b.txt"])
    if not outcome.ok:
        trigger(outcome.error, shell=True)

Concurrency
- Registration must be finished before the first dispatch; the table is only read
  while dispatching and nothing guards concurrent registration.
"""
import bisect
import copy
import difflib
import functools
import inspect
import operator
import sys
import typing
from collections.abc import Iterable
from dataclasses import dataclass
from inspect import Parameter
from typing import Any

from rich.console import Console

from .binding import bind
from .faults import *
from .shapes import Empty, describe
from .utils import *

stdout = Console(highlight=False, emoji=False, soft_wrap=True)


def nohelp(text, /):
    """
    help collaborator that discards the help text.
    """


def printhelp(text, /):
    """
    help collaborator that prints the help text on standard output, verbatim.
    """
    stdout.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


def sysargv():
    """
    default process-argument collaborator: the command line minus the program name.
    """
    return sys.argv[1:]


@dataclass(frozen=True, slots=True)
class Outcome:
    """
    structured result of Router.dispatch().

    exactly one of these holds
    - not matched: matched is False and error is a NoMatchingCommandError.
    - parse failure: error is a ParseError (the handler was not called).
    - handler failure: error is a HandlerError (its __cause__ is what the handler raised).
    - success: error is None. helped tells whether '-h' short-circuited the handler;
      otherwise result holds what the handler returned.

    unpacking yields (label, error), mirroring a (command, error) return pair.
    """
    matched: bool
    label: str = ""
    error: RouterFault | None = None
    helped: bool = False
    result: Any = None

    @property
    def ok(self):
        return self.error is None

    @property
    def parse_error(self):
        return self.error if isinstance(self.error, ParseError) else None

    @property
    def handler_error(self):
        return self.error if isinstance(self.error, HandlerError) else None

    def __iter__(self):
        yield self.label
        yield self.error


class Route:
    """
    one registered route.

    fields (read-only)
    - tokens: literal prefix, whitespace-split from the registered string.
    - label: tokens joined by one space (the command name used in messages).
    - options: default options payload (a dataclass instance, never mutated).
    - arguments: positional payload type (a dataclass type).
    - help: static help text handed to the help collaborator on '-h'.
    - handler: callable(options, arguments).
    """
    __slots__ = ("_tokens", "_options", "_arguments", "_help", "_handler")

    tokens = mirror("tokens")
    options = mirror("options")
    arguments = mirror("arguments")
    help = mirror("help")
    handler = mirror("handler")

    def __init__(self, tokens, options, arguments, help, handler, /):
        self._tokens = tuple(tokens)
        self._options = options
        self._arguments = arguments
        self._help = help
        self._handler = handler

    @property
    def label(self):
        return " ".join(self._tokens)

    def match(self, tokens, /):
        """
        tell whether the literal prefix matches the leading tokens (exact, case-sensitive).
        """
        if len(tokens) < len(self._tokens):
            return False
        return all(map(operator.eq, self._tokens, tokens))

    def __repr__(self):
        return "route(%s)" % ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))

    def __rich_repr__(self):
        yield "label", self.label
        yield "options", self._options
        yield "arguments", self._arguments
        yield "help", self._help


def _annotations(handler):
    """
    annotations of the first two positional parameters of a handler (Unset when absent).
    """
    parameters = [
        parameter for parameter in inspect.signature(handler).parameters.values()
        if parameter.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(parameters) < 2:
        raise TypeError("route handler must accept (options, arguments)")
    try:
        hints = typing.get_type_hints(handler)
    except NameError:
        hints = {}
    return tuple(hints.get(parameter.name, Unset) for parameter in parameters[:2])


class Router:
    """
    ordered route table and dispatcher.

    parameters
    - help: help collaborator called with a route's help text on '-h' (default: nohelp).
    - argv: process-argument collaborator used by run() (default: sys.argv[1:]).
    """

    routes = mirror("routes")

    def __init__(self, help=nohelp, argv=Unset):
        if not callable(help):
            raise TypeError("Router() help must be callable")
        argv = coalesce(argv, sysargv)
        if not callable(argv):
            raise TypeError("Router() argv must be callable")
        self._routes = []
        self._help = help
        self._argv = argv

    def register(self, route, handler, options=Unset, help="", *, arguments=Unset):
        """
        add a route and return it.

        parameters
        - route: str, whitespace-separated literal tokens (e.g. "files copy").
        - handler: callable(options, arguments).
        - options: default options payload (dataclass instance, or a dataclass type
          to instantiate). when omitted, the annotation of the handler's first
          parameter is instantiated with no arguments.
        - help: static help text.
        - arguments: positional payload type. when omitted, the annotation of the
          handler's second parameter is used.

        unannotated parameters stand for Empty payloads. field types are not checked
        here; an unsupported one fails the first time it is bound.

        raises
        - TypeError for a non-string route, a non-callable handler or a payload that
          is not a dataclass.
        """
        if not isinstance(route, str):
            raise TypeError("register() route must be a string")
        if not callable(handler):
            raise TypeError("register() handler must be callable")
        if not isinstance(help, str):
            raise TypeError("register() help must be a string")

        if options is Unset or arguments is Unset:
            annotations = _annotations(handler)
            options = coalesce(options, coalesce(annotations[0], Empty))
            arguments = coalesce(arguments, coalesce(annotations[1], Empty))

        describe(options)
        describe(arguments, positional=True)
        if isinstance(options, type):
            options = options()
        if not isinstance(arguments, type):
            arguments = type(arguments)

        route = Route(route.split(), options, arguments, help, handler)
        # after every route of the same or greater length
        index = bisect.bisect_right(self._routes, -len(route.tokens), key=lambda x: -len(x.tokens))
        self._routes.insert(index, route)
        return route

    def route(self, route, options=Unset, help="", *, arguments=Unset):
        """
        decorator form of register(); the decorated handler is returned unchanged.
        """
        @rename("route")
        def wrapper(handler, /):
            self.register(route, handler, options, help, arguments=arguments)
            return handler

        return wrapper

    def dispatch(self, tokens, /):
        """
        dispatch a token vector to the most specific matching route.

        returns an Outcome; nothing is raised for user input errors.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("dispatch() argument must be an iterable of strings")
        tokens = tuple(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("dispatch() argument must be an iterable of strings")

        for route in self._routes:
            if not route.match(tokens):
                continue
            return self._invoke(route, tokens)

        suggestions = difflib.get_close_matches(" ".join(tokens), [route.label for route in self._routes], 3)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "known commands: %s" % (", ".join(repr(route.label) for route in self._routes) or "none")
        return Outcome(False, error=NoMatchingCommandError(
            "could not find matching command for the arguments %r" % list(tokens),
            input=tokens,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_COMMAND),
        ))

    def _invoke(self, route, tokens):
        offset = len(route.tokens)
        try:
            bound = bind(route, tokens[offset:], self._help, offset=offset)
        except ParseError as fault:
            return Outcome(True, route.label, copy.replace(fault, label=route.label))

        if bound is None:
            return Outcome(True, route.label, helped=True)

        options, arguments = bound
        try:
            result = route.handler(options, arguments)
        except Exception as exception:
            fault = HandlerError(
                str(exception) or type(exception).__name__,
                label=route.label,
                exception=exception,
                hint="the command itself failed; its arguments were parsed correctly",
                docs=getdoc(FaultCode.HANDLER_ERROR),
            )
            fault.__cause__ = exception
            return Outcome(True, route.label, fault)
        return Outcome(True, route.label, result=result)

    def run(self):
        """
        dispatch the process arguments provided by the argv collaborator.
        """
        return self.dispatch(self._argv())

    def __iter__(self):
        return iter(tuple(self._routes))

    def __len__(self):
        return len(self._routes)

    def __repr__(self):
        return "router(routes=%r)" % (tuple(route.label for route in self._routes),)

    def __rich_repr__(self):
        yield "routes", tuple(self._routes)
        yield "help", self._help


__all__ = (
    "Outcome",
    "Route",
    "Router",
    "nohelp",
    "printhelp",
    "sysargv",
)
