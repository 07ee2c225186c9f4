# python
"""
Results module behavioral tests (validity, lookup, rendering, finalize).

Scope
- Validate validity and the derived fields of a ParseResult.
- Validate get() lookups by name, short name and alias.
- Validate str() rendering back to a command line.
- Validate finalize() in strict and permissive mode.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (CommandParser, ParseResult, ParseExit).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from cmdtree import CommandParser, ParseResult, ParseExit, command, flag, argument
from cmdtree.faults import OptionWordCountError, ExcessArgumentsError


def build(**config):
    parser = CommandParser(prefix="!", **config)

    @parser.command
    def user(*options):
        pass

    @user.command(options=[
        argument("name", required=True, minwords=1, maxwords=2),
        flag("admin", "a", type=bool),
        flag("tag", "t", aliases=["label"], maxwords=3, default="none"),
        flag(shortname="q", shortprefix="+", type=bool),
    ])
    def add(*options):
        pass

    return parser


class TestParseResult(TestCase):
    """Behavioral tests for ParseResult."""

    def testEmptyResultIsInvalid(self):
        result = ParseResult("hello")
        self.assertFalse(result.valid)
        self.assertFalse(result)
        self.assertEqual(result.name, "")
        self.assertIsNone(result.callback)
        self.assertEqual(result.options, [])
        self.assertEqual(str(result), "")

    def testDerivedFields(self):
        result = build().parse("!user add bob --tag red")
        self.assertTrue(result)
        self.assertEqual(result.name, "user")
        self.assertEqual(result.path.last.name, "add")
        self.assertEqual(result.prefix, "!")
        self.assertEqual([option.name for option in result.flags], ["tag"])
        self.assertEqual([option.name for option in result.arguments], ["name"])

    def testGetByNameShortNameAndAlias(self):
        result = build().parse("!user add bob -t red blue")
        self.assertEqual(result.get("tag"), "red blue")
        self.assertEqual(result.get("t"), "red blue")
        self.assertEqual(result.get("label"), "red blue")
        self.assertEqual(result.get("name"), "bob")

    def testGetFallsBackToDefault(self):
        result = build().parse("!user add bob")
        self.assertIsNone(result.get("admin"))
        self.assertEqual(result.get("admin", False), False)
        self.assertEqual(result.get(""), None)

    def testRendering(self):
        result = build().parse('!user add "bob smith" --tag red -a +q')
        self.assertEqual(str(result), '!user add "bob smith" --tag red --admin +q')

    def testRenderingUsesParserFlagPrefix(self):
        result = build(fullprefix="/").parse("!user add bob /admin")
        self.assertEqual(str(result), "!user add bob /admin")

    def testFinalizeReturnsSelfWithoutFaults(self):
        result = build().parse("!user add bob")
        self.assertIs(result.finalize(), result)

    def testFinalizeRaisesCollectedFaults(self):
        result = build(strict=False).parse("!user add")
        with self.assertRaises(ParseExit) as context:
            result.finalize()
        [fault] = context.exception.exceptions
        self.assertIsInstance(fault, OptionWordCountError)

    def testFaultsAreAccumulated(self):
        parser = build(strict=False)

        @parser.command(options=[argument("id", required=True, minwords=1, pattern=r"^\d+$")])
        def show(*options):
            pass

        result = parser.parse("!show x y z")
        self.assertEqual(len(result.faults), 2)
        self.assertIsInstance(result.faults[1], ExcessArgumentsError)
        self.assertEqual(result.leftover, ("y", "z"))

    def testRejectsBadFields(self):
        with self.assertRaises(TypeError):
            ParseResult(42)
        with self.assertRaises(TypeError):
            ParseResult("x", ["user"])

    def testCallbackIsThreadedThrough(self):
        @command
        def ping(*options):
            return "pong"

        result = CommandParser([ping]).parse("ping")
        self.assertEqual(result.callback(*result.options), "pong")


if __name__ == '__main__':
    unittest.main()
