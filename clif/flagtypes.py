"""
clif built-in converters and runtime flag values.

Runtime values
- BasicFlag(name, raw, value): a single typed value.
- ListFlag(name, raw, value): a repeatable flag; value is a tuple that grows by
  one item every time the flag is given at the same level, and raw is the
  canonical text of every item joined by ", ".

Scalar converters (closed set)
- BoolConverter       "bool"       no value means True; 1 t T TRUE true True 0 f F FALSE false False
- StringConverter     "string"     value is the raw text
- IntConverter        "int"        signed 64-bit, base 10
- UintConverter       "uint"       unsigned 64-bit, base 10
- FloatConverter      "float"      64-bit float, no surrounding whitespace
- TimeConverter       "timestamp"  RFC 3339 with offset, fractional seconds allowed
- DurationConverter   "duration"   "1h30m", "300ms", "-1.5h", "0"

Each scalar converter has a repeatable form (BoolListConverter, ...) whose
typename is prefixed with "[]".

Failure modes
- ConversionError wraps the ValueError/OverflowError raised while parsing.
- UnexpectedPriorError when a list converter receives a prior value it did not
  produce.
"""
import math
import re
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from .faults import ConversionError, UnexpectedPriorError, FaultCode
from .flags import Converter


class BasicFlag(NamedTuple):
    name: str
    raw: str
    value: object


class ListFlag(NamedTuple):
    name: str
    raw: str
    value: tuple


class ScalarConverter(Converter):
    """
    Base of the single-value converters.

    Subclasses implement parse(text) (raising ValueError or OverflowError on
    bad input) and format(value) (canonical text used by the list forms).
    """

    def parse(self, text, /):
        raise NotImplementedError

    def format(self, value, /):
        return str(value)

    def convert(self, command, name, value, prior, /):
        try:
            parsed = self.parse(value)
        except (ValueError, OverflowError) as error:
            raise ConversionError(
                f"invalid {self.typename} value {value!r} for flag '--{name}': {error}",
                title="invalid value",
                code=FaultCode.CONVERSION_FAILED,
                hint=f"pass a valid {self.typename} to '--{name}'",
                input=name,
                value=value,
                typename=self.typename,
                cause=error,
            ) from error
        return BasicFlag(name, value, parsed)


class BoolConverter(ScalarConverter):
    typename = "bool"

    def parse(self, text, /):
        if not text:
            return True
        if text in ("1", "t", "T", "TRUE", "true", "True"):
            return True
        if text in ("0", "f", "F", "FALSE", "false", "False"):
            return False
        raise ValueError("expected one of 1, t, true, 0, f, false")

    def format(self, value, /):
        return "true" if value else "false"


class StringConverter(ScalarConverter):
    typename = "string"

    def parse(self, text, /):
        return text

    def format(self, value, /):
        return value


class IntConverter(ScalarConverter):
    typename = "int"
    pattern = r"[+-]?[0-9]+"
    bounds = (-2 ** 63, 2 ** 63 - 1)

    def parse(self, text, /):
        if not re.fullmatch(self.pattern, text):
            raise ValueError("invalid syntax")
        if not self.bounds[0] <= (number := int(text)) <= self.bounds[1]:
            raise OverflowError("value out of range")
        return number


class UintConverter(IntConverter):
    typename = "uint"
    pattern = r"[0-9]+"
    bounds = (0, 2 ** 64 - 1)


class FloatConverter(ScalarConverter):
    typename = "float"

    def parse(self, text, /):
        if not text or text != text.strip() or "_" in text:
            raise ValueError("invalid syntax")
        if math.isinf(number := float(text)) and not re.fullmatch(r"[+-]?inf(inity)?", text, re.IGNORECASE):
            raise OverflowError("value out of range")
        return number

    def format(self, value, /):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        return repr(value).removesuffix(".0")


class TimeConverter(ScalarConverter):
    typename = "timestamp"
    pattern = re.compile(
        r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?(?:(Z)|([+-])(\d{2}):(\d{2}))"
    )

    def parse(self, text, /):
        if not (match := self.pattern.fullmatch(text)):
            raise ValueError("expected an RFC 3339 timestamp like 2006-01-02T15:04:05Z07:00")
        year, month, day, hour, minute, second, fraction, utc, sign, hours, minutes = match.groups()
        if utc:
            zone = timezone.utc
        else:
            if int(hours) > 23 or int(minutes) > 59:
                raise ValueError("timezone offset out of range")
            offset = timedelta(hours=int(hours), minutes=int(minutes))
            zone = timezone(-offset if sign == "-" else offset)
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second),
            int((fraction or "0").ljust(6, "0")[:6]),
            tzinfo=zone,
        )

    def format(self, value, /):
        text = value.strftime("%Y-%m-%dT%H:%M:%S")
        if value.microsecond:
            text += "." + f"{value.microsecond:06d}".rstrip("0")
        if not (offset := value.utcoffset()):
            return text + "Z"
        sign, offset = ("-", -offset) if offset < timedelta(0) else ("+", offset)
        return text + f"{sign}{offset.seconds // 3600:02d}:{offset.seconds // 60 % 60:02d}"


_DURATION_UNITS = {
    "ns": 1,
    "us": 10 ** 3,
    "µs": 10 ** 3,  # U+00B5 micro sign
    "μs": 10 ** 3,  # U+03BC greek mu
    "ms": 10 ** 6,
    "s": 10 ** 9,
    "m": 60 * 10 ** 9,
    "h": 3600 * 10 ** 9,
}


class DurationConverter(ScalarConverter):
    """
    Durations written as a signed sequence of decimal numbers with units.

    Valid units are "ns", "us" (or "µs"), "ms", "s", "m" and "h". The value is
    a timedelta, so anything finer than a microsecond is truncated.
    """
    typename = "duration"
    component = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]+)")

    def parse(self, text, /):
        sign, body = (text[0], text[1:]) if text[:1] in ("+", "-") else ("", text)
        if body == "0":
            return timedelta(0)
        if not body:
            raise ValueError("invalid duration")

        total = 0
        position = 0
        while position < len(body):
            if not (match := self.component.match(body, position)):
                raise ValueError("invalid duration")
            whole, fraction, unit = match.groups()
            if not whole and not fraction:
                raise ValueError("invalid duration")
            if unit not in _DURATION_UNITS:
                raise ValueError(f"unknown unit {unit!r} in duration")
            scale = _DURATION_UNITS[unit]
            total += int(whole or "0") * scale
            if fraction:
                total += int(fraction) * scale // 10 ** len(fraction)
            position = match.end()

        if total > 2 ** 63 - 1:
            raise OverflowError("duration out of range")
        return timedelta(microseconds=-(total // 1000) if sign == "-" else total // 1000)

    def format(self, value, /):
        micros = (value.days * 86400 + value.seconds) * 10 ** 6 + value.microseconds
        sign, micros = ("-", -micros) if micros < 0 else ("", micros)
        if not micros:
            return "0s"
        if micros < 1000:
            return f"{sign}{micros}µs"
        if micros < 10 ** 6:
            return f"{sign}{_decimal(micros, 3)}ms"
        hours, rest = divmod(micros, 3600 * 10 ** 6)
        minutes, rest = divmod(rest, 60 * 10 ** 6)
        seconds = f"{_decimal(rest, 6)}s"
        if hours:
            return f"{sign}{hours}h{minutes}m{seconds}"
        if minutes:
            return f"{sign}{minutes}m{seconds}"
        return sign + seconds


def _decimal(number, digits, /):
    whole, fraction = divmod(number, 10 ** digits)
    if not fraction:
        return str(whole)
    return f"{whole}." + f"{fraction:0{digits}d}".rstrip("0")


class ListConverter(Converter):
    """
    Repeatable form of a scalar converter.

    Every occurrence is converted by the item converter and appended to the
    prior ListFlag bound at the same level. The resulting name is the name of
    the latest occurrence.
    """
    item = StringConverter()

    @property
    def typename(self):
        return "[]" + self.item.typename

    def convert(self, command, name, value, prior, /):
        if prior is not None and not isinstance(prior, ListFlag):
            raise UnexpectedPriorError(
                f"expected prior value of flag '--{name}' to be {ListFlag.__name__}, got {type(prior).__name__}",
                title="unexpected prior",
                code=FaultCode.UNEXPECTED_PRIOR,
                hint="a repeatable flag must only receive values it produced itself",
                input=name,
                expected=ListFlag,
                got=type(prior),
            )
        items = (prior.value if prior is not None else ()) + (self.item.convert(command, name, value, None).value,)
        return ListFlag(name, ", ".join(map(self.item.format, items)), items)


class BoolListConverter(ListConverter):
    item = BoolConverter()


class StringListConverter(ListConverter):
    item = StringConverter()


class IntListConverter(ListConverter):
    item = IntConverter()


class UintListConverter(ListConverter):
    item = UintConverter()


class FloatListConverter(ListConverter):
    item = FloatConverter()


class TimeListConverter(ListConverter):
    item = TimeConverter()


class DurationListConverter(ListConverter):
    item = DurationConverter()


__all__ = (
    # Runtime values
    "BasicFlag",
    "ListFlag",

    # Scalar converters
    "BoolConverter",
    "StringConverter",
    "IntConverter",
    "UintConverter",
    "FloatConverter",
    "TimeConverter",
    "DurationConverter",

    # Repeatable converters
    "ListConverter",
    "BoolListConverter",
    "StringListConverter",
    "IntListConverter",
    "UintListConverter",
    "FloatListConverter",
    "TimeListConverter",
    "DurationListConverter",
)
