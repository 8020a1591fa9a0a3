r"""
clif flag definitions, runtime protocol and namespace builder.

Overview
- FlagDef: declarative, read-only definition of a `--name` flag attached to a
  Command (name, aliases, whether it takes a value, visibility, converter).
- Flag: narrow runtime protocol (name, raw, value) satisfied by every value a
  converter produces.
- Converter: abstract value-conversion protocol (convert + typename).
- namespace(): flattens the flags visible while a given command is active into
  a case-insensitive name → FlagDef mapping.

Visibility rules
- The active command contributes all of its own definitions.
- Every descendant contributes only its unrestricted definitions, so a flag for
  a subcommand may be typed before the subcommand name unless it is restricted.
- Ancestors contribute nothing: once routing has descended, flags of the
  levels above are out of reach.

Metadata (sanitized on construction)
- name/aliases: non-empty strings without whitespace or "=", not starting with
  "-" (the "--" marker is grammar, not part of the name). Aliases are unique
  within a definition, case-insensitively.
- accepts: bool, whether `--name=value` or `--name value` is allowed.
- restricted: bool, visible only while the owning command is active.
- converter: a Converter instance.
- descr: Unset | str | Text (short help), non-empty when provided.
"""
import abc
import logging
import re
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from rich.text import Text

from .faults import DuplicateFlagError, FaultCode
from .utils import *
from .utils import SpecType

logger = logging.getLogger(__name__)


@runtime_checkable
class Flag(Protocol):
    """
    Runtime value bound to a flag after conversion.

    - name: the lower-cased name the flag was invoked with (alias included).
    - raw: the string as typed by the user, empty when no value was given.
    - value: the typed payload.
    """

    @property
    def name(self): ...

    @property
    def raw(self): ...

    @property
    def value(self): ...


class Converter(abc.ABC):
    """
    Turns the raw string of a flag into a runtime Flag value.

    convert(command, name, value, prior, /)
    - command: the command being parsed when the flag was met (context).
    - name: the lower-cased name the flag was invoked with.
    - value: the raw string (empty when the flag was given without a value).
    - prior: the value already bound for this flag at the same level, or None.

    typename is the user-facing type tag shown by help ("bool", "[]int", ...).
    """
    typename = "value"

    @abc.abstractmethod
    def convert(self, command, name, value, prior, /):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


def _sanitize_name(cls, name, field, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {field} must be a string")
    if not name:
        raise ValueError(f"{cls.__typename__} {field} cannot be empty")
    if re.search(r"[\s=]", name):
        raise ValueError(f"{cls.__typename__} {field} cannot contain whitespace or '='")
    if name.startswith("-"):
        raise ValueError(f"{cls.__typename__} {field} must not start with '-' (got {name!r})")
    return name


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize FlagDef metadata in place.

    Raises
    - TypeError: wrong types for name, aliases, converter or descr.
    - ValueError: malformed or duplicated names, empty description.
    """
    seen = {_sanitize_name(cls, metadata["name"], "name").lower()}
    for alias in metadata["aliases"]:
        if _sanitize_name(cls, alias, "aliases").lower() in seen:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates (got {alias!r})")
        seen.add(alias.lower())

    if not isinstance(metadata["converter"], Converter):
        raise TypeError(f"{cls.__typename__} 'converter' must be a Converter instance")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class FlagDef(metaclass=SpecType):
    """
    Read-only definition of a `--name` flag.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata.
    - names: the canonical name followed by every alias.
    - typename: the converter's type tag.
    """
    __introspectable__ = (
        "name",
        "aliases",
        "accepts",
        "restricted",
        "converter",
        "descr",
    )

    def __new__(cls, name, /, *aliases, converter, accepts=False, restricted=False, descr=Unset):
        metadata = {
            "name": name,
            "aliases": aliases,
            "accepts": bool(accepts),
            "restricted": bool(restricted),
            "converter": converter,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        return (self._name,) + self._aliases

    @property
    def typename(self):
        return self._converter.typename


def _collect(mapping, command, active, path, /):
    path += (command,)
    for definition in command.flags:
        if definition.restricted and not active:
            continue
        for name in definition.names:
            if (key := name.lower()) in mapping:
                raise DuplicateFlagError(
                    f"flag '--{key}' is defined more than once under {' '.join(node.name for node in path)!r}",
                    title="duplicate flag",
                    code=FaultCode.DUPLICATE_FLAG,
                    hint="rename the flag or one of its aliases, or restrict it to its command",
                    input=key,
                    path=path,
                )
            mapping[key] = definition
    for child in command.children:
        _collect(mapping, child, False, path)


def namespace(command, /, *, active=True):
    """
    Build the flattened flag namespace seen while `command` is active.

    Keys are lower-cased names and aliases; values are FlagDef objects. A name
    claimed twice anywhere in the visible part of the tree raises
    DuplicateFlagError, since the flag could not be attributed unambiguously.

    Returns
    - MappingProxyType: read-only mapping, built fresh on every call.
    """
    mapping = {}
    _collect(mapping, command, active, ())
    logger.debug("namespace for %r holds %d flag name(s)", command.name, len(mapping))
    return MappingProxyType(mapping)


__all__ = (
    # Types
    "FlagDef",
    "Flag",
    "Converter",

    # Functions
    "namespace",
)
