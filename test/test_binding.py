"""
Binder behavioral tests (option scan, coercion, option and positional binding).

Scope
- Validate the two-state option scanner: pairs, remainder, help, missing values.
- Validate coercion per semantic type, including range and syntax failures.
- Validate bind_options/bind_arguments against dataclass payloads.
- Validate bind() end-to-end for a route-like object.

Conventions
- Test method names follow CamelCase per project convention.
"""
import math
import unittest
from dataclasses import dataclass
from types import SimpleNamespace
from unittest import TestCase

from argrouter.binding import *
from argrouter.faults import (
    MissingOptionValueError,
    UnknownOptionError,
    ArgumentCountError,
    UncastableValueError,
    UnsupportedTypeError,
)
from argrouter.shapes import SemanticType, Empty, option


@dataclass
class Options:
    count: int = option("count", default=1)
    name: str = option("name", default="anonymous")
    ratio: float = 0.5
    tags: tuple = option("tags", default=())


@dataclass
class Arguments:
    source: str
    times: int
    enabled: bool


class TestScan(TestCase):
    """Behavioral tests for the option scanner."""

    def testPairsAndRemainder(self):
        result = scan(["-a", "1", "-b", "2", "x", "y"])
        self.assertFalse(result.help)
        self.assertEqual(result.pairs, {"a": "1", "b": "2"})
        self.assertEqual(result.remainder, ("x", "y"))

    def testEmpty(self):
        self.assertEqual(scan([]), Scan(False, {}, ()))

    def testOnlyPositionals(self):
        result = scan(["x", "-y", "z"])
        self.assertEqual(result.pairs, {})
        self.assertEqual(result.remainder, ("x", "-y", "z"))

    def testOnlyOptions(self):
        result = scan(["-a", "1"])
        self.assertEqual(result.pairs, {"a": "1"})
        self.assertEqual(result.remainder, ())

    def testOnlyOneMarkerIsStripped(self):
        self.assertEqual(scan(["--long", "v"]).pairs, {"-long": "v"})

    def testValueMayLookLikeAnOption(self):
        result = scan(["-a", "-b", "x"])
        self.assertEqual(result.pairs, {"a": "-b"})
        self.assertEqual(result.remainder, ("x",))

    def testLaterValueWins(self):
        self.assertEqual(scan(["-a", "1", "-a", "2"]).pairs, {"a": "2"})

    def testHelpWhileAwaitingKey(self):
        result = scan(["-a", "1", "-h", "-b"])
        self.assertTrue(result.help)
        self.assertEqual(result.remainder, ())

    def testHelpAsValue(self):
        result = scan(["-a", "-h"])
        self.assertFalse(result.help)
        self.assertEqual(result.pairs, {"a": "-h"})

    def testHelpAmongPositionalsIsIgnored(self):
        result = scan(["x", "-h"])
        self.assertFalse(result.help)
        self.assertEqual(result.remainder, ("x", "-h"))

    def testMissingValue(self):
        with self.assertRaises(MissingOptionValueError) as context:
            scan(["-a", "1", "-b"], offset=2)
        self.assertEqual(str(context.exception), "option 'b' given no value")
        self.assertEqual(context.exception.options["input"], "b")
        self.assertEqual(context.exception.options["index"], 5)
        self.assertIn("fifth", context.exception.hint)

    def testMarkers(self):
        self.assertEqual(MARKER, "-")
        self.assertEqual(HELP, "-h")


class TestConvert(TestCase):
    """Behavioral tests for coercion into semantic types."""

    def testString(self):
        self.assertEqual(convert(" any thing ", SemanticType.STRING), " any thing ")

    def testInteger(self):
        for raw, expected in (("0", 0), ("-72", -72), ("+5", 5), ("007", 7)):
            with self.subTest(raw=raw):
                self.assertEqual(convert(raw, SemanticType.INTEGER), expected)

    def testIntegerBounds(self):
        self.assertEqual(convert("9223372036854775807", SemanticType.INTEGER), 2 ** 63 - 1)
        self.assertEqual(convert("-9223372036854775808", SemanticType.INTEGER), -(2 ** 63))
        with self.assertRaises(UncastableValueError) as context:
            convert("9223372036854775808", SemanticType.INTEGER)
        self.assertIn("value out of range", str(context.exception))

    def testIntegerRejectsMalformed(self):
        for raw in ("", "a", "1.0", "1_000", " 1", "1 ", "0x10", "--1", "١"):
            with self.subTest(raw=raw), self.assertRaises(UncastableValueError):
                convert(raw, SemanticType.INTEGER)

    def testFloat(self):
        for raw, expected in (("-5.3", -5.3), ("1e3", 1000.0), (".5", 0.5), ("3.", 3.0), ("+2", 2.0)):
            with self.subTest(raw=raw):
                self.assertEqual(convert(raw, SemanticType.FLOAT), expected)

    def testFloatSpecialValues(self):
        self.assertEqual(convert("inf", SemanticType.FLOAT), math.inf)
        self.assertEqual(convert("-Infinity", SemanticType.FLOAT), -math.inf)
        self.assertTrue(math.isnan(convert("NaN", SemanticType.FLOAT)))

    def testFloatRejectsMalformed(self):
        for raw in ("", "abc", "1_0", " 1.0", "1.0.0", "e5", "1e"):
            with self.subTest(raw=raw), self.assertRaises(UncastableValueError):
                convert(raw, SemanticType.FLOAT)

    def testFloatOverflow(self):
        with self.assertRaises(UncastableValueError) as context:
            convert("1e400", SemanticType.FLOAT)
        self.assertIn("value out of range", str(context.exception))

    def testBoolean(self):
        for raw, expected in (("true", True), ("TRUE", True), ("False", False), ("fAlSe", False)):
            with self.subTest(raw=raw):
                self.assertIs(convert(raw, SemanticType.BOOLEAN), expected)

    def testBooleanRejectsEverythingElse(self):
        for raw in ("1", "0", "t", "f", "yes", "no", "", " true"):
            with self.subTest(raw=raw), self.assertRaises(UncastableValueError):
                convert(raw, SemanticType.BOOLEAN)

    def testUncastableMessage(self):
        with self.assertRaises(UncastableValueError) as context:
            convert("abc", SemanticType.INTEGER, subject="count", index=3)
        fault = context.exception
        self.assertEqual(str(fault), "failed to parse 'abc' as integer: invalid syntax")
        self.assertEqual(fault.options["input"], "count")
        self.assertEqual(fault.options["value"], "abc")
        self.assertEqual(fault.options["index"], 3)
        self.assertIsInstance(fault.__cause__, ValueError)

    def testUnsupported(self):
        with self.assertRaises(UnsupportedTypeError) as context:
            convert("x", SemanticType.UNSUPPORTED, annotation=tuple, subject="tags")
        self.assertEqual(str(context.exception), "unsupported type: tuple")


class TestBindOptions(TestCase):
    """Behavioral tests for option binding."""

    def testAppliesPairs(self):
        options = bind_options(Options(), {"count": "3", "ratio": "0.25"})
        self.assertEqual(options, Options(count=3, ratio=0.25))

    def testKeepsDefaults(self):
        defaults = Options(count=7, name="set")
        options = bind_options(defaults, {"ratio": "1"})
        self.assertEqual(options, Options(count=7, name="set", ratio=1.0))
        self.assertEqual(defaults, Options(count=7, name="set"))
        self.assertIsNot(options, defaults)

    def testUnknownKey(self):
        with self.assertRaises(UnknownOptionError) as context:
            bind_options(Options(), {"cuont": "3"}, positions={"cuont": 2})
        fault = context.exception
        self.assertEqual(str(fault), "invalid option 'cuont'")
        self.assertEqual(fault.options["index"], 2)
        self.assertEqual(fault.options["suggestions"][0], "count")
        self.assertIn("-count", fault.hint)

    def testKeysAreCaseSensitive(self):
        with self.assertRaises(UnknownOptionError):
            bind_options(Options(), {"Count": "1"})

    def testUnsupportedOnlyWhenSupplied(self):
        self.assertEqual(bind_options(Options(), {}), Options())
        with self.assertRaises(UnsupportedTypeError):
            bind_options(Options(), {"tags": "a"})

    def testEmptyOptions(self):
        self.assertEqual(bind_options(Empty(), {}), Empty())


class TestBindArguments(TestCase):
    """Behavioral tests for positional binding."""

    def testBindsInDeclarationOrder(self):
        self.assertEqual(bind_arguments(Arguments, ["a", "-3", "TRUE"]), Arguments("a", -3, True))

    def testCountMismatch(self):
        for tokens in ([], ["a"], ["a", "1"], ["a", "1", "true", "x"]):
            with self.subTest(tokens=tokens), self.assertRaises(ArgumentCountError) as context:
                bind_arguments(Arguments, tokens)
            self.assertEqual(str(context.exception), "expected 3 args but got %d" % len(tokens))
            self.assertEqual(context.exception.options["expected"], 3)
            self.assertEqual(context.exception.options["got"], len(tokens))

    def testConversionFailureNamesField(self):
        with self.assertRaises(UncastableValueError) as context:
            bind_arguments(Arguments, ["a", "x", "true"], offset=2)
        self.assertEqual(context.exception.options["input"], "times")
        self.assertEqual(context.exception.options["index"], 4)

    def testEmptyArguments(self):
        self.assertEqual(bind_arguments(Empty, []), Empty())
        with self.assertRaises(ArgumentCountError) as context:
            bind_arguments(Empty, ["x"])
        self.assertEqual(str(context.exception), "expected 0 args but got 1")


class TestBind(TestCase):
    """Behavioral tests for the whole binding pipeline."""

    def setUp(self):
        self.route = SimpleNamespace(options=Options(), arguments=Arguments, help="usage")
        self.texts = []

    def testBindsBoth(self):
        options, arguments = bind(self.route, ["-count", "2", "-name", "x", "src", "4", "false"], self.texts.append)
        self.assertEqual(options, Options(count=2, name="x"))
        self.assertEqual(arguments, Arguments("src", 4, False))
        self.assertEqual(self.texts, [])

    def testHelp(self):
        self.assertIsNone(bind(self.route, ["-count", "2", "-h"], self.texts.append))
        self.assertEqual(self.texts, ["usage"])

    def testOptionPositions(self):
        with self.assertRaises(UncastableValueError) as context:
            bind(self.route, ["-name", "x", "-count", "two", "src", "4", "false"], self.texts.append, offset=2)
        self.assertEqual(context.exception.options["index"], 5)

    def testArgumentPositions(self):
        with self.assertRaises(UncastableValueError) as context:
            bind(self.route, ["-count", "2", "src", "four", "false"], self.texts.append, offset=1)
        self.assertEqual(context.exception.options["index"], 5)

    def testOptionsAreBoundBeforeArguments(self):
        with self.assertRaises(UnknownOptionError):
            bind(self.route, ["-nope", "1", "too", "few"], self.texts.append)


if __name__ == "__main__":
    unittest.main()
