"""
Router module behavioral tests (multi-level routing).

Scope
- Validate descent through the tree, per-level namespaces and merging.
- Validate terminal extra-input handling and the context carried by faults.

Conventions
- Test method names follow CamelCase per project convention.
- Trees are built once per test case in setUp and never mutated.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clif import (
    Command,
    FlagDef,
    route,
    RouteResult,
    BoolConverter,
    StringConverter,
    StringListConverter,
    DuplicateFlagError,
    ExtraInputError,
    UnexpectedArgumentError,
    UnknownFlagError,
    FaultCode,
)


class TestRoute(TestCase):
    """Behavioral tests for route()."""

    def setUp(self):
        self.verbose = FlagDef("verbose", "v", converter=BoolConverter())
        self.force = FlagDef("force", converter=BoolConverter())
        self.region = FlagDef("region", converter=StringConverter(), accepts=True, restricted=True)
        self.tag = FlagDef("tag", converter=StringListConverter(), accepts=True)
        self.help = Command("help")
        self.now = Command("now", args=True, flags=(self.tag,))
        self.deploy = Command("deploy", "d", flags=(self.force, self.region), children=(self.now,), args=True)
        self.root = Command("app", flags=(self.verbose,), children=(self.help, self.deploy))

    def testEmptyInputResolvesToRoot(self):
        result = route(self.root, [])
        self.assertEqual(result, RouteResult(self.root, (), {}, ()))

    def testSelectsDeepestCommand(self):
        result = route(self.root, ["deploy", "now"])
        self.assertIs(result.command, self.now)
        self.assertEqual(result.path, (self.deploy, self.now))

    def testRootFlagsBeforeSubcommand(self):
        result = route(self.root, ["--verbose", "help"])
        self.assertIs(result.command, self.help)
        self.assertIs(result.flags["verbose"].value, True)

    def testAncestorFlagsAreOutOfReachAfterDescent(self):
        with self.assertRaises(UnknownFlagError) as context:
            route(self.root, ["help", "--verbose"])
        self.assertEqual(context.exception.path, (self.help,))

    def testDescendantFlagBeforeItsCommand(self):
        result = route(self.root, ["--force", "deploy"])
        self.assertIs(result.flags["force"].value, True)
        self.assertIs(result.command, self.deploy)

    def testRestrictedFlagOnlyAfterItsCommand(self):
        with self.assertRaises(UnknownFlagError):
            route(self.root, ["--region=eu", "deploy"])
        result = route(self.root, ["deploy", "--region=eu"])
        self.assertEqual(result.flags["region"].value, "eu")

    def testFlagsAndArgumentsMergeAcrossLevels(self):
        result = route(self.root, ["--v", "d", "one", "--force", "now", "two", "--tag=x"])
        self.assertEqual(set(result.flags), {"verbose", "force", "tag"})
        self.assertEqual(result.args, ("one", "two"))
        self.assertEqual(result.flags["verbose"].name, "v")

    def testRepeatableFlagAccumulatesWithinLevel(self):
        result = route(self.root, ["deploy", "now", "--tag", "foo", "--tag", "bar", "--tag", "baaz"])
        self.assertEqual(result.flags["tag"].value, ("foo", "bar", "baaz"))

    def testLaterLevelOverwritesByKey(self):
        result = route(self.root, ["--tag=a", "deploy", "now", "--tag=b"])
        self.assertEqual(result.flags["tag"].value, ("b",))

    def testResultFlagsAreReadOnly(self):
        result = route(self.root, ["--verbose"])
        with self.assertRaises(TypeError):
            result.flags["verbose"] = None  # type: ignore[index]

    def testExtraInputOnLeafWithoutArguments(self):
        with self.assertRaises(ExtraInputError) as context:
            route(self.root, ["help", "surplus"])
        fault = context.exception
        self.assertIsInstance(fault, UnexpectedArgumentError)
        self.assertEqual(fault.extra, ("surplus",))
        self.assertEqual(fault.path, (self.help,))
        self.assertIn("surplus", fault.message)
        self.assertIn("second position", fault.message)

    def testExtraInputCarriesFlagsOfEveryLevel(self):
        with self.assertRaises(ExtraInputError) as context:
            route(self.root, ["--verbose", "help", "surplus"])
        self.assertIs(context.exception.flags["verbose"].value, True)
        self.assertEqual(context.exception.args, ())

    def testExtraInputCarriesArgumentsOfEveryLevel(self):
        leaf = Command("leaf")
        root = Command("app", children=(Command("mid", args=True, children=(leaf,)),))
        with self.assertRaises(ExtraInputError) as context:
            route(root, ["mid", "a", "leaf", "b"])
        self.assertEqual(context.exception.args, ("a",))
        self.assertEqual(context.exception.extra, ("b",))
        self.assertEqual(context.exception.code, FaultCode.UNEXPECTED_ARGUMENT)

    def testRootRefusesArgumentsWhenNotAccepted(self):
        with self.assertRaises(UnexpectedArgumentError) as context:
            route(self.root, ["nothing"])
        self.assertEqual(context.exception.path, ())

    def testLooseChildUsesItsOwnSetting(self):
        raw = Command("raw", args=True, loose=True)
        root = Command("app", children=(raw,))
        self.assertEqual(route(root, ["raw", "--anything"]).args, ("--anything",))
        with self.assertRaises(UnknownFlagError):
            route(root, ["--anything", "raw"])

    def testDuplicateFlagsSurfaceFromRouting(self):
        clash = Command("clash", flags=(FlagDef("VERBOSE", converter=BoolConverter()),))
        root = Command("app", flags=(self.verbose,), children=(clash,))
        with self.assertRaises(DuplicateFlagError):
            route(root, [])

    def testDescentIsLogged(self):
        with self.assertLogs("clif.router", level="DEBUG") as logs:
            route(self.root, ["deploy", "now"])
        self.assertTrue(any("descending into 'now'" in line for line in logs.output))

    def testRoutingIsRepeatable(self):
        tokens = ["deploy", "--region=eu", "now", "x"]
        self.assertEqual(route(self.root, tokens), route(self.root, tokens))


if __name__ == "__main__":
    unittest.main()
