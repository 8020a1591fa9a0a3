"""
clif faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every routing fault.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased and actionable way.
- Concrete faults raised by the namespace builder, the token disambiguator, the
  router and the converters.
- trigger(): central entry point to surface a fault (raise, or print in shell mode).
- ordinal(): position labels used by every message (“at third position”).

UX goals
- Position-first messages: input faults include the ordinal position of the
  offending token within the whole invocation.
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parser and router raise faults directly; nothing is swallowed or downgraded.
- Application.run() catches CommandException and calls trigger(fault, shell=True, ...)
  so the fault is rendered through rich on the error stream.
"""
import functools
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the router (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • MISSING_HANDLER
    - flags (1111x)
      • UNKNOWN_FLAG, UNEXPECTED_FLAG_VALUE, DUPLICATE_FLAG
    - positionals (1112x)
      • UNEXPECTED_ARGUMENT
    - delegated to converters (1113x)
      • CONVERSION_FAILED, UNEXPECTED_PRIOR
    - leftovers (1114x)
      • EXTRA_INPUT

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a
      string via normalize() so hosts can remap them if desired.
    """
    # --- routing errors (11xxx) ---
    MISSING_HANDLER         = 11101

    # --- flag errors (11xxx) ---
    UNKNOWN_FLAG            = 11112
    UNEXPECTED_FLAG_VALUE   = 11113
    DUPLICATE_FLAG          = 11115

    # --- positional errors (11xxx) ---
    UNEXPECTED_ARGUMENT     = 11121

    # --- delegated errors (11xxx) ---
    CONVERSION_FAILED       = 11131
    UNEXPECTED_PRIOR        = 11132

    # --- leftover errors (11xxx) ---
    EXTRA_INPUT             = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _context(name):
    """Read-only accessor for a structured option carried by a fault."""
    return property(lambda self: self.options.get(name), doc=f"fault context {name!r} (None when absent)")


class CommandException(Exception):
    """
    Base class of every fault raised while routing an invocation.

    A fault is a message plus a read-only `options` mapping. Options hold the
    presentation keys (title, code, hint) and the structured context needed to
    render a precise message without re-parsing (input, path, extra, ...).
    Runtime keys (tool, shell, fancy, colorful, deferred, console) are merged
    in by trigger() through __replace__.
    """
    code = _context("code")
    hint = _context("hint")
    path = _context("path")

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

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

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", getattr(tool, "name", "clif")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "?", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class UnknownFlagError(CommandException):
    """A `--name` token matched no flag visible at the active level."""
    input = _context("input")


class DuplicateFlagError(CommandException):
    """Two visible flag definitions share a lower-cased name or alias (tree bug)."""
    input = _context("input")


class UnexpectedFlagValueError(CommandException):
    """An inline `=value` was given to a flag that takes no value."""
    input = _context("input")
    value = _context("value")


class ExtraInputError(CommandException):
    """
    Input left over once the deepest matched command cannot consume it.

    Carries the matched command path, the flags and positional arguments bound
    before the fault, and the leftover tokens (`extra`).
    """
    flags = _context("flags")
    args = _context("args")
    extra = _context("extra")


class UnexpectedArgumentError(ExtraInputError):
    """A positional argument was given to a command that accepts none."""
    input = _context("input")


class ConversionError(CommandException):
    """A converter rejected the raw value of a flag."""
    input = _context("input")
    value = _context("value")
    typename = _context("typename")


class UnexpectedPriorError(CommandException):
    """A repeatable converter received a prior value of a foreign shape."""
    input = _context("input")
    expected = _context("expected")
    got = _context("got")


class MissingHandlerError(CommandException):
    """The resolved command has nothing to run."""
    tokens = _context("tokens")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via a rich console; otherwise the fault is raised.

    typical options
    - tool, shell, fancy, colorful, deferred, console.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "CommandException",
    "UnknownFlagError",
    "DuplicateFlagError",
    "UnexpectedFlagValueError",
    "ExtraInputError",
    "UnexpectedArgumentError",
    "ConversionError",
    "UnexpectedPriorError",
    "MissingHandlerError",
    "FaultCode",
    "trigger",
    "ordinal",
)
