# python
"""
Options module behavioral tests (schemas, sanitization, values, casting).

Scope
- Validate construction rules of flags and positional arguments.
- Validate runtime values: setvalue(), getvalue(), defaults and casting.
- Validate that clones never share runtime state with their schema.
- Validate flag spellings (prefixes, suffixes, aliases, case folding).

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Option, flag, argument, DataType, OptionKind).
"""

from __future__ import annotations

import math
import re
import unittest
from unittest import TestCase

from cmdtree import Option, OptionKind, DataType, flag, argument


class TestOptionSchema(TestCase):
    """Construction and sanitization of option schemas."""

    def testFactoriesSetKind(self):
        self.assertIs(flag("tag").kind, OptionKind.FLAG)
        self.assertIs(argument("name").kind, OptionKind.ARGUMENT)
        self.assertTrue(flag("tag").isflag)
        self.assertFalse(argument("name").isflag)

    def testMaxWordsRaisedToMinWords(self):
        option = argument("name", minwords=3, maxwords=1)
        self.assertEqual(option.maxwords, 3)

    def testMaxWordsMayBeUnbounded(self):
        self.assertEqual(flag("tag", maxwords=math.inf).maxwords, math.inf)

    def testNegativeBoundsRejected(self):
        with self.assertRaises(ValueError):
            argument("name", minwords=-1)
        with self.assertRaises(ValueError):
            argument("name", minlength=-1)

    def testNonIntegerBoundsRejected(self):
        with self.assertRaises(TypeError):
            argument("name", minwords="1")
        with self.assertRaises(TypeError):
            argument("name", maxwords=True)

    def testMinLengthAboveMaxLengthRejected(self):
        with self.assertRaises(ValueError):
            argument("name", minlength=5, maxlength=2)

    def testArgumentNeedsName(self):
        with self.assertRaises(ValueError):
            Option("", OptionKind.ARGUMENT)

    def testFlagNeedsNameOrShortName(self):
        with self.assertRaises(ValueError):
            flag()
        self.assertEqual(flag(shortname="v").shortname, "v")

    def testNamesRejectWhitespace(self):
        with self.assertRaises(ValueError):
            flag("dry run")

    def testDuplicateAliasesRejected(self):
        with self.assertRaises(ValueError):
            flag("tag", aliases=["label", "label"])

    def testDuplicateChoicesRejected(self):
        with self.assertRaises(ValueError):
            argument("mode", choices=["a", "b", "a"])

    def testArgumentRejectsPrefixes(self):
        with self.assertRaises(ValueError):
            argument("name", prefix="--")

    def testTypeAcceptsBuiltinsAndValues(self):
        self.assertIs(argument("n", type=int).type, DataType.INTEGER)
        self.assertIs(argument("n", type="float").type, DataType.FLOAT)
        self.assertIs(argument("n", type=DataType.BOOLEAN).type, DataType.BOOLEAN)
        with self.assertRaises(ValueError):
            argument("n", type=list)

    def testPatternIsCompiled(self):
        option = argument("id", pattern=r"^\d+$")
        self.assertIsInstance(option.pattern, re.Pattern)
        with self.assertRaises(ValueError):
            argument("id", pattern="(")

    def testContainerFieldsAreCopies(self):
        option = flag("tag", aliases=["label"])
        aliases = option.aliases
        aliases.append("mark")
        self.assertEqual(option.aliases, ["label"])

    def testFieldsAreReadOnly(self):
        option = flag("tag")
        with self.assertRaises(AttributeError):
            option.name = "other"


class TestOptionValues(TestCase):
    """Runtime values, casting and cloning."""

    def testFreshOptionIsUnbound(self):
        option = argument("name")
        self.assertFalse(option.bound)
        self.assertIsNone(option.getvalue())
        self.assertEqual(option.length, 0)
        self.assertEqual(option.words, 0)

    def testStringValueIsTokenized(self):
        option = argument("name")
        option.setvalue('"john doe" jr')
        self.assertEqual(option.raw, ["john doe", "jr"])
        self.assertEqual(option.getvalue(), "john doe jr")
        self.assertEqual(option.words, 2)
        self.assertEqual(option.length, len("john doe jr"))
        self.assertEqual(str(option), '"john doe" jr')

    def testWordsAreBoundVerbatim(self):
        option = argument("name")
        option.setvalue(["a b", "c"])
        self.assertEqual(list(option.keys()), ["a b", "c"])
        self.assertEqual(option.words, 2)

    def testNoneClearsValue(self):
        option = argument("name")
        option.setvalue("x")
        option.setvalue(None)
        self.assertFalse(option.bound)
        self.assertEqual(option.raw, [])

    def testUnsupportedValueRejected(self):
        with self.assertRaises(TypeError):
            argument("name").setvalue(object())

    def testIntegerCastFallsBackToZero(self):
        option = argument("count", type=int)
        option.setvalue("abc")
        self.assertEqual(option.getvalue(), 0)
        option.setvalue("12px")
        self.assertEqual(option.getvalue(), 12)

    def testFloatCastFallsBackToZero(self):
        option = argument("ratio", type=float)
        option.setvalue("nope")
        self.assertEqual(option.getvalue(), 0.0)
        option.setvalue("2.5")
        self.assertEqual(option.getvalue(), 2.5)

    def testFloatCastIgnoresInfinityWords(self):
        option = argument("ratio", type=float)
        for word in ("inf", "-Infinity", "nan"):
            option.setvalue(word)
            self.assertEqual(option.getvalue(), 0.0)
        option.setvalue("1.5e2x")
        self.assertEqual(option.getvalue(), 150.0)

    def testBooleanCastIsTruthiness(self):
        option = flag("debug", type=bool)
        option.setvalue(True)
        self.assertIs(option.getvalue(), True)
        option.setvalue("")
        self.assertIs(option.getvalue(), False)

    def testDefaultIsCast(self):
        option = argument("count", type=int, default="7")
        self.assertEqual(option.getdefault(), 7)
        self.assertEqual(option.getvalueordefault(), 7)
        option.setvalue("3")
        self.assertEqual(option.getvalueordefault(), 3)

    def testStringDefaultOfNoneIsEmpty(self):
        self.assertEqual(argument("name", default=None).getdefault(), "")

    def testCloneHasNoRuntimeState(self):
        schema = argument("name", minwords=1, required=True)
        schema.setvalue("bob")
        clone = schema.clone()
        self.assertFalse(clone.bound)
        self.assertEqual(clone.minwords, 1)
        self.assertTrue(clone.required)

    def testCloneIsIsolated(self):
        schema = argument("name")
        clone = schema.clone()
        clone.setvalue("bob")
        self.assertFalse(schema.bound)
        self.assertIsNot(clone, schema)


class TestOptionSpellings(TestCase):
    """Exact token spellings selecting a flag."""

    def testDefaultPrefixesApply(self):
        option = flag("tag", "t")
        self.assertEqual(option.spellings("--", "-"), {"--tag", "-t"})

    def testOwnPrefixOverridesParserPrefix(self):
        option = flag("tag", "t", prefix="+", shortprefix="/")
        self.assertEqual(option.spellings("--", "-"), {"+tag", "/t"})

    def testAliasesAndSuffixes(self):
        option = flag("tag", aliases=["label"], prefixaliases=["++"], suffix=":")
        self.assertEqual(
            option.spellings("--", "-"),
            {"--tag:", "--label:", "++tag:", "++label:"},
        )

    def testCaseInsensitiveSpellingsAreFolded(self):
        option = flag("Tag")
        self.assertEqual(option.spellings("--", casesensitive=False), {"--tag"})

    def testArgumentsHaveNoSpellings(self):
        self.assertEqual(argument("name").spellings("--", "-"), frozenset())


if __name__ == '__main__':
    unittest.main()
