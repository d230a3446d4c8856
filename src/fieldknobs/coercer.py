"""Value coercion into semantic domains with predictable, consistent behavior.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Any, Callable

import numpy as np

from .domains import Domain, detect, is_container, type_name
from .settings import DEFAULT_SETTINGS, RFC3339, Settings

_UINT64_MODULUS = 2**64

_INT_TEXT = re.compile(r"[+-]?[0-9]+")
_UINT_TEXT = re.compile(r"[0-9]+")
_RFC3339_TEXT = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))",
    re.ASCII,
)

# strptime accepts unpadded fields; layouts built from these are zero-padded
_LAYOUT_FIELDS = {
    "%Y": "[0-9]{4}",
    "%m": "[0-9]{2}",
    "%d": "[0-9]{2}",
    "%H": "[0-9]{2}",
    "%M": "[0-9]{2}",
    "%S": "[0-9]{2}",
    "%%": "%",
}
_LAYOUT_DIRECTIVE = re.compile(r"%.")


@lru_cache(maxsize=64)
def layout_shape(layout: str) -> re.Pattern[str] | None:
    """Compile the exact text shape a strptime layout describes.

    Returns:
        Pattern to fullmatch against, or None when the layout uses a
        directive with no fixed width (only strptime is consulted then)
    """
    parts = []
    position = 0
    for directive in _LAYOUT_DIRECTIVE.finditer(layout):
        token = _LAYOUT_FIELDS.get(directive.group())
        if token is None:
            return None
        parts.append(re.escape(layout[position:directive.start()]))
        parts.append(token)
        position = directive.end()
    parts.append(re.escape(layout[position:]))
    return re.compile("".join(parts))


@dataclass(frozen=True)
class Coercion:
    """Outcome of a single coercion attempt.

    Attributes:
        value: The coerced value (or the original value on failure)
        valid: True when coercion succeeded
        absent: True when the input was an absent (None) reference
        error: Reason for the failure, if any
    """

    value: Any
    valid: bool
    absent: bool = False
    error: str | None = None

    def __bool__(self) -> bool:
        """Allow 'if coercion:' usage to check success."""
        return self.valid

    @classmethod
    def success(cls, value: Any) -> Coercion:
        return cls(value=value, valid=True)

    @classmethod
    def failure(cls, value: Any, error: str) -> Coercion:
        return cls(value=value, valid=False, error=error)

    @classmethod
    def missing(cls) -> Coercion:
        return cls(value=None, valid=False, absent=True, error="Value is absent")


def parse_rfc3339(text: str) -> datetime | None:
    """Parse an RFC3339 timestamp such as ``2014-01-01T10:00:00.5+02:00``.

    Returns:
        Timezone-aware datetime, or None if the text is not RFC3339
    """
    match = _RFC3339_TEXT.fullmatch(text)
    if not match:
        return None
    year, month, day, hour, minute, second, fraction, zulu, sign, off_h, off_m = match.groups()

    # datetime only keeps microseconds
    micros = int((fraction or "0")[:6].ljust(6, "0"))
    if zulu:
        tz = timezone.utc
    else:
        if int(off_h) > 23 or int(off_m) > 59:
            return None
        offset = timedelta(hours=int(off_h), minutes=int(off_m))
        tz = timezone(-offset if sign == "-" else offset)

    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second), micros,
            tzinfo=tz,
        )
    except ValueError:
        return None


def as_utc_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes so all timestamps are comparable."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Coercer:
    """Coerce opaque values into semantic domains.

    Always returns a :class:`Coercion`, never raises for values that do not
    fit a domain. Absent values (None) are reported separately from type
    mismatches so callers can decide whether to skip a rule or fail it.
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize the coercer.

        Args:
            settings: Engine settings (timestamp layouts); defaults if omitted
        """
        self.settings = settings or DEFAULT_SETTINGS
        self._handlers: dict[Domain, Callable[[Any], Coercion]] = {
            Domain.INTEGER: self.to_int,
            Domain.UNSIGNED_INTEGER: self.to_uint,
            Domain.FLOAT: self.to_float,
            Domain.TEXT: self.to_text,
            Domain.TIMESTAMP: self.to_timestamp,
            Domain.SEQUENCE: self.to_sequence,
        }

    def coerce(self, value: Any, domain: Domain) -> Coercion:
        """Coerce a value to the target domain.

        Args:
            value: Value to coerce
            domain: Target domain

        Returns:
            Coercion with the typed value or the failure reason
        """
        if value is None:
            return Coercion.missing()
        return self._handlers[domain](value)

    def to_int(self, value: Any) -> Coercion:
        """Coerce to a signed integer; floats truncate toward zero."""
        if value is None:
            return Coercion.missing()
        source = detect(value)
        if source in (Domain.INTEGER, Domain.UNSIGNED_INTEGER):
            return Coercion.success(int(value))
        if source == Domain.FLOAT:
            return self._truncate(value, Domain.INTEGER)
        if source == Domain.TEXT:
            if _INT_TEXT.fullmatch(value):
                return Coercion.success(int(value))
            return Coercion.failure(value, f"Cannot parse '{value}' as a base-10 integer")
        return self._mismatch(value, Domain.INTEGER)

    def to_uint(self, value: Any) -> Coercion:
        """Coerce to an unsigned integer.

        Negative values are reinterpreted as 64-bit two's complement rather
        than rejected.
        """
        if value is None:
            return Coercion.missing()
        source = detect(value)
        if source in (Domain.INTEGER, Domain.UNSIGNED_INTEGER):
            return Coercion.success(self._reinterpret_unsigned(int(value)))
        if source == Domain.FLOAT:
            result = self._truncate(value, Domain.UNSIGNED_INTEGER)
            if result:
                return Coercion.success(self._reinterpret_unsigned(result.value))
            return result
        if source == Domain.TEXT:
            if _UINT_TEXT.fullmatch(value):
                return Coercion.success(int(value))
            return Coercion.failure(
                value, f"Cannot parse '{value}' as a base-10 unsigned integer"
            )
        return self._mismatch(value, Domain.UNSIGNED_INTEGER)

    def to_float(self, value: Any) -> Coercion:
        """Coerce to a float."""
        if value is None:
            return Coercion.missing()
        source = detect(value)
        if source in (Domain.INTEGER, Domain.UNSIGNED_INTEGER, Domain.FLOAT):
            try:
                return Coercion.success(float(value))
            except OverflowError as e:
                return Coercion.failure(value, f"Cannot represent {value} as float: {e!s}")
        if source == Domain.TEXT:
            # float() is more lenient than plain ASCII decimal text
            if not value.isascii() or value != value.strip() or "_" in value:
                return Coercion.failure(value, f"Cannot parse '{value}' as a float")
            try:
                return Coercion.success(float(value))
            except ValueError:
                return Coercion.failure(value, f"Cannot parse '{value}' as a float")
        return self._mismatch(value, Domain.FLOAT)

    def to_text(self, value: Any) -> Coercion:
        """Coerce to text. Only strings qualify; nothing is stringified."""
        if value is None:
            return Coercion.missing()
        if detect(value) == Domain.TEXT:
            return Coercion.success(str(value))
        return self._mismatch(value, Domain.TEXT)

    def to_timestamp(self, value: Any) -> Coercion:
        """Coerce to a timezone-aware datetime.

        Native datetimes pass through (naive ones are taken as UTC), dates
        become midnight UTC and text is parsed with the configured layouts.
        """
        if value is None:
            return Coercion.missing()
        if isinstance(value, datetime):
            return Coercion.success(as_utc_aware(value))
        if isinstance(value, date):
            return Coercion.success(datetime.combine(value, time(), tzinfo=timezone.utc))
        if isinstance(value, np.datetime64):
            if np.isnat(value):
                return Coercion.failure(value, "Cannot use NaT as a timestamp")
            converted = value.astype("datetime64[us]").item()
            if not isinstance(converted, datetime):
                return Coercion.failure(value, f"Timestamp {value} is out of range")
            return Coercion.success(as_utc_aware(converted))
        if isinstance(value, str):
            parsed = self.parse_timestamp(value)
            if parsed is not None:
                return Coercion.success(parsed)
            return Coercion.failure(value, f"Cannot parse '{value}' as a timestamp")
        return self._mismatch(value, Domain.TIMESTAMP)

    def to_sequence(self, value: Any) -> Coercion:
        """Coerce a container to its element count."""
        if value is None:
            return Coercion.missing()
        if is_container(value):
            return Coercion.success(len(value))
        return self._mismatch(value, Domain.SEQUENCE)

    def parse_timestamp(self, text: str) -> datetime | None:
        """Parse text with the configured layouts, first match wins.

        Args:
            text: Text to parse

        Returns:
            Timezone-aware datetime, or None if no layout matches
        """
        for layout in self.settings.timestamp_layouts:
            if layout == RFC3339:
                parsed = parse_rfc3339(text)
                if parsed is not None:
                    return parsed
                continue
            shape = layout_shape(layout)
            if shape is not None and shape.fullmatch(text) is None:
                continue
            try:
                return as_utc_aware(datetime.strptime(text, layout))
            except ValueError:
                continue
        return None

    def _truncate(self, value: Any, domain: Domain) -> Coercion:
        if not math.isfinite(value):
            return Coercion.failure(
                value, f"Cannot represent {value} as {domain.value}"
            )
        return Coercion.success(int(value))

    def _reinterpret_unsigned(self, number: int) -> int:
        if number < 0:
            return number % _UINT64_MODULUS
        return number

    def _mismatch(self, value: Any, domain: Domain) -> Coercion:
        return Coercion.failure(
            value, f"Cannot coerce {type_name(value)} to {domain.value}"
        )
