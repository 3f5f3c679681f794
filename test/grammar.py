# python
"""
Grammar behavioral tests (tree structure and construction-time invariants).

Scope
- Validate tree-wide destination uniqueness (ancestors, node, descendants).
- Validate positional ordering rules, in both registration orders and through
  modifiers on already registered positionals.
- Validate sub-command naming and the trailing-positional conflict.
- Validate sealing once a parse has begun.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import sys
import unittest
from unittest import TestCase, mock

from argtree import (
    DataType,
    Grammar,
    GrammarError,
    Kind,
    MalformedNameError,
    OccupiedDestinationError,
    OccupiedNameError,
    PositionalOrderError,
    SealedGrammarError,
    SubCommandConflictError,
)


class TestDestinations(TestCase):
    """Behavioral tests for tree-wide destination uniqueness."""

    def setUp(self):
        self.grammar = Grammar("tool")

    def testDuplicateOnSameNode(self):
        self.grammar.positional("target", Kind.STRING)
        with self.assertRaises(OccupiedDestinationError):
            self.grammar.option("-t, --target", "target", Kind.STRING)

    def testChildCannotReuseAncestorDestination(self):
        self.grammar.option("-v", "verbose", Kind.BOOL)
        grandchild = self.grammar.sub_command("remote").sub_command("add")
        with self.assertRaises(OccupiedDestinationError):
            grandchild.option("--verbose", "verbose", Kind.BOOL)

    def testParentCannotReuseDescendantDestination(self):
        self.grammar.sub_command("remote").sub_command("add").positional("url", Kind.STRING)
        with self.assertRaises(OccupiedDestinationError):
            self.grammar.option("--url", "url", Kind.STRING)

    def testSiblingsMayShareDestination(self):
        add = self.grammar.sub_command("add")
        remove = self.grammar.sub_command("remove")
        add.positional("item", Kind.STRING)
        remove.positional("item", Kind.STRING)
        self.assertTrue(add.is_destination_occupied("item"))
        self.assertTrue(remove.is_destination_occupied("item"))

    def testIsDestinationOccupied(self):
        child = self.grammar.sub_command("child")
        child.positional("value", Kind.INT32)
        self.assertTrue(self.grammar.is_destination_occupied("value"))
        self.assertFalse(self.grammar.is_destination_occupied("other"))

    def testFailedRegistrationLeavesNodeUnchanged(self):
        self.grammar.positional("target", Kind.STRING)
        with self.assertRaises(GrammarError):
            self.grammar.positional("target", Kind.STRING)
        self.assertEqual(len(self.grammar.positionals), 1)


class TestPositionalOrder(TestCase):
    """Behavioral tests for the last-positional rules."""

    def setUp(self):
        self.grammar = Grammar("tool")

    def testNothingMayFollowOptionalPositional(self):
        self.grammar.positional("first", Kind.STRING, required=False)
        with self.assertRaises(PositionalOrderError):
            self.grammar.positional("second", Kind.STRING)

    def testNothingMayFollowArrayPositional(self):
        self.grammar.positional("files", DataType(Kind.PATH, array=True))
        with self.assertRaises(PositionalOrderError):
            self.grammar.positional("second", Kind.STRING)

    def testNothingMayFollowDefaultBearingPositional(self):
        self.grammar.positional("count", Kind.INT32, default="1")
        with self.assertRaises(PositionalOrderError):
            self.grammar.positional("second", Kind.STRING)
        self.assertEqual(len(self.grammar.positionals), 1)

    def testRequiredPositionalsMayStack(self):
        self.grammar.positional("source", Kind.PATH)
        self.grammar.positional("target", Kind.PATH).required(True)
        self.grammar.positional("rest", DataType(Kind.STRING, array=True)).required(False)
        self.assertEqual([p.name for p in self.grammar.positionals], ["SOURCE", "TARGET", "REST"])

    def testModifierOnEarlierPositionalRejected(self):
        first = self.grammar.positional("first", Kind.STRING)
        self.grammar.positional("second", Kind.STRING)
        with self.assertRaises(PositionalOrderError):
            first.required(False)
        with self.assertRaises(PositionalOrderError):
            first.default("x")
        self.assertTrue(first.is_required)
        self.assertEqual(first.default_values, ())

    def testModifierOnLastPositionalAccepted(self):
        self.grammar.positional("first", Kind.STRING)
        second = self.grammar.positional("second", Kind.STRING).default("x")
        self.assertEqual(second.default_values, ("x",))

    def testOptionsAreNotOrdered(self):
        self.grammar.option("-a", "a", DataType(Kind.STRING, array=True))
        self.grammar.option("-b", "b", Kind.STRING).required(False)
        self.grammar.option("-c", "c", Kind.STRING, default="c")
        self.assertEqual(len(self.grammar.options), 3)


class TestSubCommands(TestCase):
    """Behavioral tests for sub-command registration and tree navigation."""

    def setUp(self):
        self.grammar = Grammar("git", "the stupid content tracker")

    def testChildMetadata(self):
        remote = self.grammar.sub_command("remote", "manage remotes")
        add = remote.sub_command("add")
        self.assertEqual(remote.name, "remote")
        self.assertEqual(remote.descr, "manage remotes")
        self.assertIs(add.parent, remote)
        self.assertIs(add.root, self.grammar)
        self.assertEqual([step.name for step in add.path], ["git", "remote", "add"])
        self.assertIs(self.grammar.children["remote"], remote)
        self.assertIsNone(self.grammar.parent)

    def testDuplicateNameRejected(self):
        self.grammar.sub_command("add")
        with self.assertRaises(OccupiedNameError):
            self.grammar.sub_command("add")

    def testMalformedNamesRejected(self):
        for name in ("", "   ", "-x", "--add"):
            with self.subTest(name=name), self.assertRaises(MalformedNameError):
                self.grammar.sub_command(name)

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            self.grammar.sub_command(3)

    def testRequiredScalarPositionalMayPrecedeSubCommands(self):
        self.grammar.positional("output_file", Kind.PATH)
        self.grammar.sub_command("echo")
        self.assertIn("echo", self.grammar.children)

    def testTrailingPositionalBlocksSubCommands(self):
        for data_type, settings in (
            (DataType(Kind.STRING, array=True), {}),
            (Kind.STRING, {"required": False}),
            (Kind.STRING, {"default": "x"}),
        ):
            grammar = Grammar("tool")
            grammar.positional("last", data_type, **settings)
            with self.subTest(data_type=data_type, settings=settings), self.assertRaises(SubCommandConflictError):
                grammar.sub_command("child")

    def testSubCommandsBlockTrailingPositional(self):
        self.grammar.sub_command("child")
        with self.assertRaises(SubCommandConflictError):
            self.grammar.positional("files", DataType(Kind.PATH, array=True))
        with self.assertRaises(SubCommandConflictError):
            self.grammar.positional("name", Kind.STRING, default="x")
        self.assertEqual(self.grammar.positionals, ())

    def testSubCommandsBlockTrailingModifier(self):
        self.grammar.sub_command("child")
        positional = self.grammar.positional("name", Kind.STRING)
        with self.assertRaises(SubCommandConflictError):
            positional.required(False)
        self.assertTrue(positional.is_required)

    def testPresentationFlagsInherited(self):
        grammar = Grammar("tool", colorful=True)
        child = grammar.sub_command("child")
        self.assertTrue(child.colorful)
        self.assertFalse(child.fancy)

    def testParentKeywordRegistersChild(self):
        child = Grammar("remote", parent=self.grammar)
        self.assertIs(self.grammar.children["remote"], child)
        self.assertIs(child.parent, self.grammar)
        child.positional("url", Kind.STRING)
        with self.assertRaises(OccupiedDestinationError):
            self.grammar.option("-u, --url", "url", Kind.STRING)

    def testParentKeywordRejectsDuplicateName(self):
        self.grammar.sub_command("remote")
        with self.assertRaises(OccupiedNameError):
            Grammar("remote", parent=self.grammar)

    def testParentKeywordRespectsTrailingPositional(self):
        grammar = Grammar("tool")
        grammar.positional("files", DataType(Kind.PATH, array=True))
        with self.assertRaises(SubCommandConflictError):
            Grammar("child", parent=grammar)
        self.assertEqual(grammar.children, {})

    def testParentKeywordRejectsSealedTree(self):
        self.grammar.parse([])
        with self.assertRaises(SealedGrammarError):
            Grammar("late", parent=self.grammar)
        self.assertNotIn("late", self.grammar.children)

    def testParentMustBeGrammar(self):
        with self.assertRaises(TypeError):
            Grammar("child", parent="git")


class TestProgramName(TestCase):
    """Behavioral tests for the default root grammar name."""

    def testNameFromArgv(self):
        with mock.patch.object(sys, "argv", ["/usr/local/bin/tool", "-v"]):
            self.assertEqual(Grammar().name, "tool")

    def testInterpreterPlaceholdersFallBack(self):
        for argv in (["-c"], ["-m"], [""], []):
            with self.subTest(argv=argv), mock.patch.object(sys, "argv", argv):
                self.assertEqual(Grammar().name, "prog")

    def testExplicitDashedNameStillRejected(self):
        with self.assertRaises(MalformedNameError):
            Grammar("-c")


class TestDataTypes(TestCase):
    """Behavioral tests for data types given at registration."""

    def testUnknownKindRejected(self):
        grammar = Grammar("tool")
        with self.assertRaises(TypeError):
            grammar.positional("x", DataType("bogus"))
        with self.assertRaises(TypeError):
            grammar.option("-x", "x", DataType(Kind.INT32, array=1))
        self.assertEqual(grammar.positionals, ())
        self.assertEqual(grammar.options, ())



class TestSealing(TestCase):
    """Behavioral tests for sealing the tree once parsing began."""

    def setUp(self):
        self.grammar = Grammar("tool")
        self.option = self.grammar.option("-n", "number", Kind.INT32, default="1")
        self.child = self.grammar.sub_command("child")

    def testParseSeals(self):
        self.assertFalse(self.grammar.sealed)
        self.grammar.parse(["child"])
        self.assertTrue(self.grammar.sealed)
        self.assertTrue(self.child.sealed)

    def testRegistrationAfterParseRejected(self):
        self.grammar.parse(["child"])
        with self.assertRaises(SealedGrammarError):
            self.grammar.option("-m", "other", Kind.INT32)
        with self.assertRaises(SealedGrammarError):
            self.child.positional("value", Kind.STRING)
        with self.assertRaises(SealedGrammarError):
            self.grammar.sub_command("late")

    def testModifiersAfterParseRejected(self):
        self.grammar.parse(["child"])
        with self.assertRaises(SealedGrammarError):
            self.option.default("2")
        with self.assertRaises(SealedGrammarError):
            self.option.description("late")
        self.assertEqual(self.option.default_values, ("1",))

    def testParsingAChildSealsTheRoot(self):
        self.child.parse([])
        self.assertTrue(self.grammar.sealed)

    def testSealedGrammarIsReusable(self):
        first = self.grammar.parse(["-n", "5", "child"])
        second = self.grammar.parse(["-n", "5", "child"])
        self.assertEqual(first, second)


class TestParseInput(TestCase):
    """Behavioral tests for the accepted token containers."""

    def setUp(self):
        self.grammar = Grammar("tool")
        self.grammar.positional("words", DataType(Kind.STRING, array=True))

    def testStringRejected(self):
        with self.assertRaises(TypeError):
            self.grammar.parse("a b")

    def testNonStringTokensRejected(self):
        with self.assertRaises(TypeError):
            self.grammar.parse(["a", 1])

    def testAnyIterableAccepted(self):
        result = self.grammar.parse(token for token in ("a", "b"))
        self.assertEqual(result.get("words"), ["a", "b"])

    def testTokensAreCopied(self):
        tokens = ["a", "b"]
        self.grammar.parse(tokens)
        self.assertEqual(tokens, ["a", "b"])


if __name__ == "__main__":
    unittest.main()
