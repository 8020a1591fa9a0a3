"""
Help module behavioral tests (subcommand and flag listings).

Conventions
- Test method names follow CamelCase per project convention.
- Listings are compared word by word; column spacing is left to rich.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clif import (
    Command,
    FlagDef,
    BoolConverter,
    StringListConverter,
    subcommands_help,
    flags_help,
)


class TestHelp(TestCase):
    """Behavioral tests for subcommands_help() and flags_help()."""

    def setUp(self):
        self.command = Command(
            "deploy",
            flags=(
                FlagDef("force", "f", converter=BoolConverter(), descr="skip checks"),
                FlagDef("tag", converter=StringListConverter(), accepts=True),
            ),
            children=(
                Command("now", "n", descr="ship it"),
                Command("later"),
                Command("internal", hidden=True, descr="do not show"),
            ),
        )

    def testSubcommandsListsVisibleChildren(self):
        lines = subcommands_help(self.command).splitlines()
        self.assertEqual([line.split() for line in lines], [["now", "ship", "it"], ["later"]])

    def testFlagColumnsAreAligned(self):
        force, tag = flags_help(self.command).splitlines()
        self.assertEqual(force.index("<bool>"), tag.index("<[]string>"))

    def testFlagsListsNameTypeAndDescription(self):
        lines = flags_help(self.command).splitlines()
        self.assertEqual(
            [line.split() for line in lines],
            [["force", "<bool>", "skip", "checks"], ["tag", "<[]string>"]],
        )

    def testAliasesAreNotListed(self):
        self.assertNotIn(" n ", subcommands_help(self.command))
        self.assertNotIn(" f ", flags_help(self.command))

    def testEmptyListings(self):
        self.assertEqual(subcommands_help(Command("leaf")), "")
        self.assertEqual(flags_help(Command("leaf")), "")

    def testEndsWithNewline(self):
        self.assertTrue(flags_help(self.command).endswith("\n"))


if __name__ == "__main__":
    unittest.main()
