"""
clif token disambiguator.

parse() classifies every token of one command's window as a flag, a flag
value, the name of a child command or a positional argument. It stops at the
first child name and hands everything after it back as the tail, so the router
can continue one level deeper.

States
- scanning: no flag is waiting for a value.
- awaiting: a value-accepting flag was given without "=value" and the next
  token may become its value.

Rules per token (in order)
1. "--name[=value]" found in the namespace: close the open flag with an empty
   value, then bind now (no value accepted, or "=" given) or start awaiting.
   "=value" on a flag that takes none raises UnexpectedFlagValueError.
   Unknown names raise UnknownFlagError unless the command is loose, in which
   case the token continues verbatim through the rules below.
2. Child name or alias (case-insensitive, first match in declaration order):
   close the open flag with an empty value and stop.
3. Anything else:
   - command without positional arguments: value of the open flag, otherwise
     UnexpectedArgumentError;
   - command with positional arguments: positional argument, unless a flag is
     open and more tokens follow, in which case it is the flag's value. The
     very last token always goes to the positional arguments, leaving the open
     flag to be closed with an empty value.

Flags are bound under the definition's canonical name so that aliases and
repeated occurrences fold into the same prior value.
"""
import logging
from types import MappingProxyType
from typing import NamedTuple

from .faults import *

logger = logging.getLogger(__name__)


class ParseResult(NamedTuple):
    """Outcome of parsing one command's window."""
    child: object
    flags: MappingProxyType
    args: tuple
    tail: tuple


def _bind(flags, command, definition, name, value, /):
    flags[definition.name] = definition.converter.convert(command, name, value, flags.get(definition.name))
    logger.debug("bound flag %r (as %r) to %r", definition.name, name, value)


def _match(command, token, /):
    token = token.lower()
    for child in command.children:
        if any(token == name.lower() for name in child.names):
            return child
    return None


def parse(command, tokens, namespace, /, *, loose=False, path=(), offset=0):
    """
    Parse one level of input for `command`.

    Parameters
    - command: the active Command (its children and positional policy apply).
    - tokens: the window of tokens for this level.
    - namespace: flattened flag namespace built for this level.
    - loose: let unknown "--" tokens through verbatim instead of failing.
    - path: matched commands so far, recorded on faults.
    - offset: number of tokens consumed by the levels above, used to report
      positions relative to the whole invocation.

    Returns
    - ParseResult(child, flags, args, tail)

    Raises
    - UnknownFlagError, UnexpectedFlagValueError, UnexpectedArgumentError
    - whatever the converters raise (ConversionError, UnexpectedPriorError)
    """
    tokens = tuple(tokens)
    flags = {}
    args = []
    pending = None

    for position, token in enumerate(tokens):
        index = offset + position + 1

        if token.startswith("--"):
            name, separator, value = token[2:].partition("=")
            name = name.lower()
            if (definition := namespace.get(name)) is not None:
                if pending is not None:
                    _bind(flags, command, *pending, "")
                    pending = None
                if not definition.accepts and separator:
                    raise UnexpectedFlagValueError(
                        f"value {value!r} set at {ordinal(index)} position for flag '--{name}' that doesn't accept values",
                        title="unexpected value",
                        code=FaultCode.UNEXPECTED_FLAG_VALUE,
                        hint=f"drop '={value}' and pass '--{name}' alone",
                        input=name,
                        value=value,
                        path=path,
                    )
                if not definition.accepts or separator:
                    _bind(flags, command, definition, name, value)
                else:
                    pending = (definition, name)
                continue
            if not loose:
                raise UnknownFlagError(
                    f"unexpected flag '--{name}' at {ordinal(index)} position",
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_FLAG,
                    hint=f"check the spelling, or whether '--{name}' belongs to another command",
                    input=name,
                    path=path,
                )
            logger.debug("loose command %r keeps unknown token %r", command.name, token)

        if (child := _match(command, token)) is not None:
            if pending is not None:
                _bind(flags, command, *pending, "")
            logger.debug("matched command %r at position %d", child.name, index)
            return ParseResult(child, MappingProxyType(flags), tuple(args), tokens[position + 1:])

        if not command.args:
            if pending is None:
                raise UnexpectedArgumentError(
                    f"unexpected argument {token!r} at {ordinal(index)} position: '{command.name}' accepts no arguments",
                    title="unexpected argument",
                    code=FaultCode.UNEXPECTED_ARGUMENT,
                    hint="remove the argument, or check the spelling of the command name",
                    input=token,
                    path=path,
                    flags=MappingProxyType(flags),
                    args=tuple(args),
                    extra=tokens[position:],
                )
            _bind(flags, command, *pending, token)
            pending = None
        elif pending is None or position == len(tokens) - 1:
            args.append(token)
        else:
            _bind(flags, command, *pending, token)
            pending = None

    if pending is not None:
        _bind(flags, command, *pending, "")
    return ParseResult(None, MappingProxyType(flags), tuple(args), ())


__all__ = (
    "ParseResult",
    "parse",
)
