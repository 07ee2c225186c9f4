# python
"""
Resolver behavioral tests (command tree walking and routing faults).

Scope
- Validate resolution depth and token consumption.
- Validate prefix stripping, aliases and case sensitivity.
- Validate unknown/missing command faults in strict and permissive mode.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (resolve, Command, faults).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from cmdtree import Command, command, flag, argument, resolve, hasprefix
from cmdtree.faults import (
    FaultCode,
    UnknownCommandError,
    UnknownSubcommandError,
    MissingCommandError,
)


def ping(*options):
    pass


def tree():
    add = Command("add", ping, aliases=["new"])
    remove = Command("remove", ping)
    user = Command("user", ping, aliases=["u"], subcommands=[add, remove])
    group = Command("role", subcommands=[Command("grant", ping)])
    poke = Command("poke", ping, options=[argument("target", maxwords=1)], subcommands=[Command("all", ping)])
    return {"user": user, "role": group, "poke": poke, "ping": Command("ping", ping)}


def decorated():
    @command
    def user(*options):
        """Manage users."""

    @user.command
    def add(*options):
        pass

    @command(options=[flag("verbose", "v", type=bool), flag("tag", separator="=")])
    def role(*options):
        pass

    @role.command
    def grant(*options):
        pass

    return [user, role]


class TestHasPrefix(TestCase):
    """Behavioral tests for the command prefix check."""

    def testPrefixRules(self):
        self.assertTrue(hasprefix("!user", "!"))
        self.assertFalse(hasprefix("!!user", "!"))
        self.assertFalse(hasprefix("!", "!"))
        self.assertFalse(hasprefix("user", "!"))
        self.assertTrue(hasprefix("user", ""))
        self.assertFalse(hasprefix("", ""))


class TestResolve(TestCase):
    """Behavioral tests for resolve()."""

    def testResolvesNestedPath(self):
        tokens = ["user", "add", "bob"]
        path = resolve(tokens, tree())
        self.assertEqual(path.levels, 2)
        self.assertEqual(path.first.name, "user")
        self.assertEqual(path.last.name, "add")
        self.assertEqual(tokens, ["bob"])

    def testResolvedNodesAreClones(self):
        commands = tree()
        path = resolve(["user", "add"], commands)
        self.assertIsNot(path.first, commands["user"])

    def testAliasesAndCaseInsensitivity(self):
        tokens = ["U", "NEW"]
        path = resolve(tokens, tree())
        self.assertEqual(str(path), "user add")
        self.assertEqual(tokens, [])

    def testCaseSensitiveRejectsOtherCase(self):
        with self.assertRaises(UnknownCommandError):
            resolve(["USER"], tree(), casesensitive=True)

    def testPrefixIsStripped(self):
        tokens = ["!user", "!add", "bob"]
        path = resolve(tokens, tree(), prefix="!")
        self.assertEqual(str(path), "user add")

    def testPrefixedRequiresPrefix(self):
        tokens = ["user", "add"]
        path = resolve(tokens, tree(), prefix="!", prefixed=True)
        self.assertEqual(path.levels, 0)
        self.assertEqual(tokens, ["user", "add"])

    def testUnmatchedTokenBelowRootIsLeft(self):
        tokens = ["poke", "bob"]
        path = resolve(tokens, tree())
        self.assertEqual(path.levels, 1)
        self.assertEqual(tokens, ["bob"])

    def testArgumentMakesSubcommandOptional(self):
        path = resolve(["poke"], tree())
        self.assertEqual(str(path), "poke")
        self.assertEqual(str(resolve(["poke", "all"], tree())), "poke all")

    def testUnknownRootCommandRaises(self):
        with self.assertRaises(UnknownCommandError) as context:
            resolve(["usr"], tree())
        self.assertEqual(context.exception.code, FaultCode.UNKNOWN_COMMAND)
        self.assertIn("user", context.exception.options["suggestions"])

    def testMissingRootCommandRaises(self):
        with self.assertRaises(MissingCommandError):
            resolve([], tree())

    def testGroupRequiresSubcommand(self):
        with self.assertRaises(UnknownSubcommandError):
            resolve(["role", "revoke"], tree())
        with self.assertRaises(MissingCommandError):
            resolve(["role"], tree())

    def testDecoratedGroupRequiresSubcommand(self):
        with self.assertRaises(UnknownSubcommandError) as context:
            resolve(["user", "bob"], decorated())
        self.assertEqual(context.exception.code, FaultCode.UNKNOWN_SUBCOMMAND)
        self.assertEqual(context.exception.options["position"], 2)
        with self.assertRaises(MissingCommandError):
            resolve(["user"], decorated())

    def testDecoratedGroupCollectsFaults(self):
        faults = []
        tokens = ["user", "bob"]
        path = resolve(tokens, decorated(), faults=faults)
        self.assertEqual(path.levels, 1)
        self.assertEqual(tokens, ["bob"])
        self.assertIsInstance(faults[0], UnknownSubcommandError)

    def testFlagSpellingIsLeftUnderGroup(self):
        for line in (["role", "--verbose"], ["role", "-V"], ["role", "--tag=red"]):
            tokens = list(line)
            path = resolve(tokens, decorated())
            self.assertEqual(path.levels, 1)
            self.assertEqual(tokens, line[1:])

    def testFlagSpellingFollowsParserConfiguration(self):
        tokens = ["role", "+v"]
        resolve(tokens, decorated(), shortprefix="+")
        self.assertEqual(tokens, ["+v"])
        with self.assertRaises(UnknownSubcommandError):
            resolve(["role", "+v"], decorated())
        with self.assertRaises(MissingCommandError):
            resolve(["role"], decorated())

    def testUnknownSubcommandIsAnUnknownCommand(self):
        self.assertTrue(issubclass(UnknownSubcommandError, UnknownCommandError))

    def testPermissiveModeCollectsFaults(self):
        faults = []
        tokens = ["nope", "x"]
        path = resolve(tokens, tree(), faults=faults)
        self.assertEqual(path.levels, 0)
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], UnknownCommandError)
        self.assertEqual(tokens, ["nope", "x"])

    def testRejectsImmutableTokens(self):
        with self.assertRaises(TypeError):
            resolve(("user",), tree())

    def testRejectsNonCommands(self):
        with self.assertRaises(TypeError):
            resolve(["user"], ["user"])


if __name__ == '__main__':
    unittest.main()
