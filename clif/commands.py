r"""
clif commands, application runner and handler protocol.

Overview
- Command: read-only node of the command tree (names, flag definitions,
  children, positional policy and the handler builder to run).
- Application: the root node; never accepts positional arguments and never
  lets unknown "--" tokens through. Application.run() is the process entry.
- Response: the streams a handler writes to, plus its exit code.
- Handler / HandlerBuilder: the two-step protocol used to run a command
  (build from the routed input, then handle).
- handler(): decorator adapting a plain function into a HandlerBuilder.

Metadata (sanitized on construction)
- name/aliases: non-empty strings without whitespace, unique within a command
  (case-insensitive).
- flags: iterable of FlagDef.
- children: iterable of Command, matched in declaration order.
- args: bool, whether positional arguments are accepted.
- loose: bool, whether unknown "--" tokens are kept as ordinary tokens.
- descr: Unset | str | Text (short help), non-empty when provided.
- hidden: bool (suppresses from help).
- handler: None or a HandlerBuilder.

Quick example:
    >>> from clif import Application, Command, handler
    >>> @handler
    >>> def greet(response, flags, args):
    ...     response.console.print("hello", *args)
    ...
    >>> app = Application(Command("greet", args=True, handler=greet), name="demo")
    >>> app.run(["greet", "world"])
    hello world
    0
"""
import functools
import logging
import os
import re
import shlex
import sys
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text

from .faults import *
from .flags import FlagDef
from .router import route
from .utils import *
from .utils import SpecType

logger = logging.getLogger(__name__)


@runtime_checkable
class Handler(Protocol):
    """Runs the business logic of a command."""

    def handle(self, response): ...


@runtime_checkable
class HandlerBuilder(Protocol):
    """
    Turns routed flags and arguments into a Handler.

    A builder may set response.code to a positive value to stop before the
    handler runs (for instance after reporting invalid input).
    """

    def build(self, flags, args, response): ...


class Response:
    """
    Output channels and exit code of a command run.

    - code: exit status, 0 unless a builder or handler sets it.
    - output/error: the underlying text streams.
    - console/errors: rich consoles bound to output and error.
    """

    def __init__(self, output, error, /, *, colorful=False):
        self.code = 0
        self.output = output
        self.error = error
        self.console = Console(file=output, highlight=False, soft_wrap=True, no_color=not colorful)
        self.errors = Console(file=error, highlight=False, soft_wrap=True, no_color=not colorful)

    def __repr__(self):
        return f"response(code={self.code!r})"


class CallbackHandler:
    """Handler produced by handler(): calls the callback with the routed input."""

    def __init__(self, callback, flags, args, /):
        self._callback = callback
        self._flags = flags
        self._args = args

    def handle(self, response):
        # an integer return value becomes the exit code
        if (code := self._callback(response, self._flags, self._args)) is not None:
            response.code = int(code)


class CallbackBuilder:
    """HandlerBuilder wrapping a plain callable(response, flags, args)."""

    def __init__(self, callback, /):
        functools.update_wrapper(self, callback)

    def build(self, flags, args, response):
        return CallbackHandler(self.__wrapped__, flags, args)

    def __call__(self, response, flags, args, /):
        return self.__wrapped__(response, flags, args)


def handler(callback, /):
    """
    Adapt `callback(response, flags, args)` into a HandlerBuilder.

    Usage
        @handler
        def serve(response, flags, args):
            ...
            return 0
    """
    if not callable(callback):
        raise TypeError("handler() argument must be callable")
    return CallbackBuilder(callback)


def _sanitize_names(cls, metadata, /):
    seen = set()
    for name in (metadata["name"], *metadata["aliases"]):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not name:
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.search(r"\s", name):
            raise ValueError(f"{cls.__typename__} names cannot contain whitespace (got {name!r})")
        elif name.lower() in seen:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates (got {name!r})")
        seen.add(name.lower())


def _sanitize_members(cls, metadata, /):
    if not isinstance(metadata["flags"], Iterable):
        raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of flag definitions")
    metadata["flags"] = tuple(metadata["flags"])
    if not all(isinstance(flag, FlagDef) for flag in metadata["flags"]):
        raise TypeError(f"{cls.__typename__} 'flags' must only contain flag definitions")

    if not isinstance(metadata["children"], Iterable):
        raise TypeError(f"{cls.__typename__} 'children' must be an iterable of commands")
    metadata["children"] = tuple(metadata["children"])
    if not all(isinstance(child, Command) for child in metadata["children"]):
        raise TypeError(f"{cls.__typename__} 'children' must only contain commands")

    if metadata["handler"] is not None and not isinstance(metadata["handler"], HandlerBuilder):
        raise TypeError(f"{cls.__typename__} 'handler' must provide a build() method")


def _sanitize_descr(cls, metadata, /):
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Command(metaclass=SpecType):
    """
    Read-only node of the command tree.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata (sequences as tuples).
    - names: the canonical name followed by every alias.
    """
    __introspectable__ = (
        "name",
        "aliases",
        "flags",
        "children",
        "args",
        "loose",
        "descr",
        "hidden",
        "handler",
    )
    __displayable__ = (
        "name",
        "aliases",
        "args",
        "loose",
        "hidden",
    )

    def __new__(
            cls,
            name,
            /,
            *aliases,
            flags=(),
            children=(),
            args=False,
            loose=False,
            descr=Unset,
            hidden=False,
            handler=None
    ):
        metadata = {
            "name": name,
            "aliases": aliases,
            "flags": flags,
            "children": children,
            "args": bool(args),
            "loose": bool(loose),
            "descr": descr,
            "hidden": bool(hidden),
            "handler": handler,
        }
        _sanitize_names(cls, metadata)
        _sanitize_members(cls, metadata)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        return (self._name,) + self._aliases


def _default_name():
    return "".join(os.path.basename(sys.argv[0]).split()) or "app"


class Application(Command):
    """
    Root of a command-line application.

    The root never accepts positional arguments and is never loose: anything
    that is not one of its flags must name a command. Global flags are given
    with `flags`; they are visible everywhere below unless restricted.

    Configuration
    - name: program name (defaults to the script name), shown in fault headers
      unless __main__ defines __prog__.
    - colorful: style fault messages and consoles.
    - fancy: render faults inside a panel.
    """
    __introspectable__ = Command.__introspectable__ + ("colorful", "fancy")
    __displayable__ = ("name", "colorful", "fancy")

    def __new__(cls, *commands, flags=(), name=Unset, descr=Unset, colorful=False, fancy=False):
        self = super().__new__(cls, coalesce(name, _default_name()), flags=flags, children=commands, descr=descr)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        return self

    def run(self, tokens=Unset, /, *, output=Unset, error=Unset):
        """
        Route tokens, build the selected command's handler and run it.

        Parameters
        - tokens:
          • Unset: read sys.argv[1:].
          • str: shell-like string; split with shlex.split.
          • Iterable[str]: used as is (each element must be a string).
        - output/error: text streams (default sys.stdout / sys.stderr).

        Returns
        - int: 1 when routing failed or the command has no handler (the fault
          is rendered on `error`), otherwise the response code.
        """
        if tokens is Unset:
            tokens = sys.argv[1:]
        elif isinstance(tokens, str):
            tokens = shlex.split(tokens)
        elif isinstance(tokens, Iterable):
            tokens = list(tokens)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("run() argument must be a string or an iterable of strings")
        else:
            raise TypeError("run() argument must be a string or an iterable of strings")

        response = Response(coalesce(output, sys.stdout), coalesce(error, sys.stderr), colorful=self._colorful)

        try:
            result = route(self, tokens)
            if result.command.handler is None:
                raise MissingHandlerError(
                    f"invalid command: {shlex.join(tokens)}" if tokens else "no command given",
                    title="missing command",
                    code=FaultCode.MISSING_HANDLER,
                    hint=f"choose one of: {', '.join(child.name for child in result.command.children if not child.hidden)}"
                    if result.command.children else "this command cannot be run on its own",
                    path=result.path,
                    tokens=tuple(tokens),
                )
        except CommandException as fault:
            logger.debug("routing failed with %s", type(fault).__name__)
            trigger(
                fault,
                tool=self,
                shell=True,
                deferred=True,
                colorful=self._colorful,
                fancy=self._fancy,
                console=response.errors,
            )
            return 1

        built = result.command.handler.build(result.flags, result.args, response)
        if response.code > 0:
            return response.code
        built.handle(response)
        return response.code


__all__ = (
    # Types
    "Command",
    "Application",
    "Response",
    "Handler",
    "HandlerBuilder",

    # Functions
    "handler",
)
