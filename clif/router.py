"""
clif router.

route() drives the disambiguator down the command tree: it parses the root's
window, and while a child command matched it rebuilds the flag namespace with
that child active and parses the remaining tail, merging flags and positional
arguments level by level. There is no backtracking; a child chosen at one level
is final.
"""
import logging
from types import MappingProxyType
from typing import NamedTuple

from .faults import *
from .flags import namespace
from .parser import parse

logger = logging.getLogger(__name__)


class RouteResult(NamedTuple):
    """
    Outcome of routing a whole invocation.

    - command: deepest matched command (the root when nothing matched).
    - path: matched commands in order, root excluded.
    - flags: read-only merged mapping of canonical flag name → runtime value.
    - args: positional arguments of every level, concatenated.
    """
    command: object
    path: tuple
    flags: MappingProxyType
    args: tuple


def route(root, tokens, /):
    """
    Resolve `tokens` against the tree rooted at `root`.

    Raises
    - DuplicateFlagError when a level's namespace cannot be built.
    - UnknownFlagError, UnexpectedFlagValueError, UnexpectedArgumentError and
      converter faults from the disambiguator, unchanged except that
      UnexpectedArgumentError is completed with the flags and arguments bound
      by the levels above.
    - ExtraInputError when tokens remain once no child matches.
    """
    tokens = tuple(tokens)
    command, path, flags, args = root, (), {}, []

    result = _level(root, tokens, path, flags, args, 0)
    while True:
        flags.update(result.flags)
        args.extend(result.args)
        if result.child is None:
            break
        command = result.child
        path += (command,)
        logger.debug("descending into %r with %d token(s) left", command.name, len(result.tail))
        result = _level(command, result.tail, path, flags, args, len(tokens) - len(result.tail))

    if result.tail:
        raise ExtraInputError(
            f"unexpected extra input to {' '.join(node.name for node in (root, *path))!r}: {' '.join(result.tail)}",
            title="extra input",
            code=FaultCode.EXTRA_INPUT,
            hint="remove the trailing input",
            path=path,
            flags=MappingProxyType(flags),
            args=tuple(args),
            extra=result.tail,
        )

    logger.debug("routed to %r with %d flag(s) and %d argument(s)", command.name, len(flags), len(args))
    return RouteResult(command, path, MappingProxyType(flags), tuple(args))


def _level(command, tokens, path, flags, args, offset, /):
    try:
        return parse(command, tokens, namespace(command), loose=command.loose, path=path, offset=offset)
    except ExtraInputError as fault:
        raise fault.__replace__(
            flags=MappingProxyType(flags | dict(fault.flags)),
            args=tuple(args) + tuple(fault.args),
        ) from None


__all__ = (
    "RouteResult",
    "route",
)
