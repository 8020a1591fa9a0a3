"""
Faults module behavioral tests (codes, rendering, triggering).

Scope
- Validate stable fault codes and their normalization.
- Validate ordinal position labels.
- Validate trigger(): raising outside shell mode, printing (and exiting) inside.
- Validate __replace__ and the structured accessors.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is captured with a rich Console writing to io.StringIO.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from clif import (
    CommandException,
    ConversionError,
    ExtraInputError,
    UnknownFlagError,
    UnexpectedArgumentError,
    FaultCode,
    ordinal,
    trigger,
)


def unknown():
    return UnknownFlagError(
        "unexpected flag '--nope' at first position",
        title="unknown flag",
        code=FaultCode.UNKNOWN_FLAG,
        hint="check the spelling",
        input="nope",
        path=(),
    )


class TestFaultCode(TestCase):
    """Stable identifiers."""

    def testCodesAreStable(self):
        self.assertEqual(
            {code.name: code.value for code in FaultCode},
            {
                "MISSING_HANDLER": 11101,
                "UNKNOWN_FLAG": 11112,
                "UNEXPECTED_FLAG_VALUE": 11113,
                "DUPLICATE_FLAG": 11115,
                "UNEXPECTED_ARGUMENT": 11121,
                "CONVERSION_FAILED": 11131,
                "UNEXPECTED_PRIOR": 11132,
                "EXTRA_INPUT": 11141,
            },
        )

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.EXTRA_INPUT.normalize(), "11141")


class TestOrdinal(TestCase):
    """Position labels used in messages."""

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")
        self.assertEqual(ordinal(101), "101st")


class TestCommandException(TestCase):
    """Fault objects and their options."""

    def testMessageAndOptions(self):
        fault = unknown()
        self.assertEqual(str(fault), "unexpected flag '--nope' at first position")
        self.assertEqual(fault.input, "nope")
        self.assertEqual(fault.code, FaultCode.UNKNOWN_FLAG)
        self.assertEqual(fault.hint, "check the spelling")
        with self.assertRaises(TypeError):
            fault.options["input"] = "other"  # type: ignore[index]

    def testMissingContextReadsAsNone(self):
        self.assertIsNone(CommandException("boom").path)

    def testUnexpectedArgumentIsExtraInput(self):
        self.assertTrue(issubclass(UnexpectedArgumentError, ExtraInputError))

    def testReplaceMergesOptionsAndKeepsCause(self):
        cause = ValueError("bad")
        fault = ConversionError("invalid", input="n", value="x", typename="int", cause=cause)
        fault.__cause__ = cause
        replaced = fault.__replace__(colorful=True)
        self.assertIsInstance(replaced, ConversionError)
        self.assertIsNot(replaced, fault)
        self.assertEqual(replaced.message, "invalid")
        self.assertEqual(replaced.value, "x")
        self.assertTrue(replaced.options["colorful"])
        self.assertIs(replaced.__cause__, cause)


class TestTrigger(TestCase):
    """Surfacing faults."""

    def testRaisesOutsideShellMode(self):
        with self.assertRaises(UnknownFlagError) as context:
            trigger(unknown(), fancy=False)
        self.assertFalse(context.exception.options["fancy"])

    def testPrintsInDeferredShellMode(self):
        stream = io.StringIO()
        trigger(unknown(), shell=True, deferred=True, console=Console(file=stream, width=200))
        lines = stream.getvalue().splitlines()
        self.assertEqual(lines[0], "[ clif — 11112 | Unknown Flag ]")
        self.assertEqual(lines[1], "unexpected flag '--nope' at first position")
        self.assertIn("→ check the spelling", lines[2])

    def testToolNameIsUsedAsProgram(self):
        class Tool:
            name = "demo"

        stream = io.StringIO()
        trigger(unknown(), shell=True, deferred=True, tool=Tool(), console=Console(file=stream, width=200))
        self.assertTrue(stream.getvalue().startswith("[ demo — 11112"))

    def testExitsInShellMode(self):
        stream = io.StringIO()
        with self.assertRaises(SystemExit) as context:
            trigger(unknown(), shell=True, console=Console(file=stream, width=200))
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unexpected flag", stream.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
