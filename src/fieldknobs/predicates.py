"""Predicate implementations with a consistent, composable API.

Each predicate is an immutable object holding an already-coerced value and
its parameters. Calling it with a field name returns a :class:`FieldError`
on failure and ``None`` on success, which makes every predicate a valid
``Validator`` for :meth:`ValidationSession.add`:

    ```python
    session.add("age", Min(age, 18), Max(age, 130))
    ```

Predicates given a value outside their domain fail with ``invalid_type``
instead of raising.
"""

from __future__ import annotations

import re
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from datetime import datetime
from email.utils import parseaddr
from typing import Any, ClassVar

from email_validator import EmailNotValidError, validate_email

from .coercer import Coercer, parse_rfc3339
from .domains import Domain, detect, is_container, is_numeric, type_name
from .exceptions import ConfigurationError
from .result import FieldError

Validator = Callable[[str], "FieldError | None"]

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]+")
_PHONE = re.compile(r"\+?[0-9]+")
_ONLY_DIGITS = re.compile(r"[0-9]+")
_ISO8601_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

_timestamps = Coercer()


class Predicate(ABC):
    """Base class for all predicates."""

    tag: ClassVar[str]
    template: ClassVar[str]

    value: Any

    @abstractmethod
    def passes(self) -> bool:
        """Check the value against this predicate."""

    def accepts(self) -> bool:
        """Check that the value belongs to the domain this predicate compares."""
        return True

    def params(self) -> dict[str, Any]:
        """Parameters recorded on the error for programmatic consumers."""
        return {}

    def message(self, field: str) -> str:
        """Render the failure message for a field."""
        return self.template.format(field=field, **self.params())

    def __call__(self, field: str) -> FieldError | None:
        if not self.accepts():
            return FieldError(
                field,
                f"{field} has invalid type {type_name(self.value)}",
                "invalid_type",
                self.value,
                {"actual": type_name(self.value)},
            )
        if self.passes():
            return None
        return FieldError(field, self.message(field), self.tag, self.value, self.params())


class _NumericPredicate(Predicate):
    def accepts(self) -> bool:
        return is_numeric(self.value)


class _TextPredicate(Predicate):
    def accepts(self) -> bool:
        return detect(self.value) == Domain.TEXT


class _DatePredicate(Predicate):
    """Text bounds and values are parsed with ``coercer``, default layouts if unset."""

    coercer: Coercer | None
    _bounds: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        for name in self._bounds:
            bound = getattr(self, name)
            if self._moment(bound) is None:
                raise ConfigurationError(
                    f"Invalid {name} bound: {bound!r}",
                    context={"param": name, "value": bound},
                )

    def accepts(self) -> bool:
        return self._moment(self.value) is not None

    def _moment(self, value: Any) -> datetime | None:
        coerced = (self.coercer or _timestamps).to_timestamp(value)
        return coerced.value if coerced else None


@dataclass(frozen=True)
class Required(Predicate):
    """Value must be present and, if text, non-empty."""

    value: Any

    tag: ClassVar[str] = "required"
    template: ClassVar[str] = "{field} is required"

    def passes(self) -> bool:
        if self.value is None:
            return False
        if isinstance(self.value, str) and self.value == "":
            return False
        return True


@dataclass(frozen=True)
class Min(_NumericPredicate):
    """Number must be at least ``min`` (inclusive)."""

    value: Any
    min: Any

    tag: ClassVar[str] = "min"
    template: ClassVar[str] = "{field} must be at least {min}"

    def passes(self) -> bool:
        return self.value >= self.min

    def params(self) -> dict[str, Any]:
        return {"min": self.min}


@dataclass(frozen=True)
class Max(_NumericPredicate):
    """Number must be at most ``max`` (inclusive)."""

    value: Any
    max: Any

    tag: ClassVar[str] = "max"
    template: ClassVar[str] = "{field} must be at most {max}"

    def passes(self) -> bool:
        return self.value <= self.max

    def params(self) -> dict[str, Any]:
        return {"max": self.max}


@dataclass(frozen=True)
class Range(_NumericPredicate):
    """Number must be between ``min`` and ``max`` (inclusive)."""

    value: Any
    min: Any
    max: Any

    tag: ClassVar[str] = "range"
    template: ClassVar[str] = "{field} must be between {min} and {max}"

    def passes(self) -> bool:
        return self.min <= self.value <= self.max

    def params(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class MinLength(_TextPredicate):
    """Text must have at least ``min`` characters."""

    value: Any
    min: int

    tag: ClassVar[str] = "min_length"
    template: ClassVar[str] = "{field} must be at least {min} characters long"

    def passes(self) -> bool:
        return len(self.value) >= self.min

    def params(self) -> dict[str, Any]:
        return {"min": self.min}


@dataclass(frozen=True)
class MaxLength(_TextPredicate):
    """Text must have at most ``max`` characters."""

    value: Any
    max: int

    tag: ClassVar[str] = "max_length"
    template: ClassVar[str] = "{field} must be at most {max} characters long"

    def passes(self) -> bool:
        return len(self.value) <= self.max

    def params(self) -> dict[str, Any]:
        return {"max": self.max}


@dataclass(frozen=True)
class Length(_TextPredicate):
    """Text length must be between ``min`` and ``max`` characters."""

    value: Any
    min: int
    max: int

    tag: ClassVar[str] = "length"
    template: ClassVar[str] = "{field} must be between {min} and {max} characters long"

    def passes(self) -> bool:
        return self.min <= len(self.value) <= self.max

    def params(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True, init=False)
class OneOf(_TextPredicate):
    """Text must equal one of the allowed values. An empty allowlist never passes."""

    value: Any
    collection: tuple[str, ...]

    tag: ClassVar[str] = "one_of"
    template: ClassVar[str] = "{field} is not in the collection"

    def __init__(self, value: Any, *collection: str):
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "collection", tuple(collection))

    def passes(self) -> bool:
        return any(self.value == item for item in self.collection)

    def params(self) -> dict[str, Any]:
        return {"collection": list(self.collection)}


@dataclass(frozen=True)
class IsEmail(_TextPredicate):
    """Text must be a mailbox address, optionally with a display name."""

    value: Any

    tag: ClassVar[str] = "is_email"
    template: ClassVar[str] = "{field} is not a valid email address"

    def passes(self) -> bool:
        text = self.value.strip()
        _, address = parseaddr(text)
        if not address or "@" not in address:
            return False
        # parseaddr silently drops trailing garbage; require a full match
        if text != address and not text.endswith(f"<{address}>"):
            return False
        try:
            validate_email(address, check_deliverability=False, globally_deliverable=False)
        except EmailNotValidError:
            return False
        return True


@dataclass(frozen=True)
class IsAlphanumeric(_TextPredicate):
    """Text must be non-empty ASCII letters and digits."""

    value: Any

    tag: ClassVar[str] = "is_alphanumeric"
    template: ClassVar[str] = "{field} must be alphanumeric"

    def passes(self) -> bool:
        return _ALPHANUMERIC.fullmatch(self.value) is not None


@dataclass(frozen=True)
class IsISO8601(_TextPredicate):
    """Text must be a full RFC3339 timestamp."""

    value: Any

    tag: ClassVar[str] = "is_iso8601"
    template: ClassVar[str] = "{field} is not a valid ISO8601 date"

    def passes(self) -> bool:
        return parse_rfc3339(self.value) is not None


@dataclass(frozen=True)
class IsISO8601Date(_TextPredicate):
    """Text must be a calendar date in ``YYYY-MM-DD`` form."""

    value: Any

    tag: ClassVar[str] = "is_iso8601_date"
    template: ClassVar[str] = "{field} is not a valid ISO8601 date"

    def passes(self) -> bool:
        if _ISO8601_DATE.fullmatch(self.value) is None:
            return False
        try:
            datetime.strptime(self.value, "%Y-%m-%d")
        except ValueError:
            return False
        return True


@dataclass(frozen=True)
class IsPhone(_TextPredicate):
    """Text must be digits with an optional leading ``+``."""

    value: Any

    tag: ClassVar[str] = "is_phone"
    template: ClassVar[str] = "{field} is not a valid phone number"

    def passes(self) -> bool:
        return _PHONE.fullmatch(self.value) is not None


@dataclass(frozen=True)
class IsUUID(_TextPredicate):
    """Text must be a UUID of any version or variant."""

    value: Any

    tag: ClassVar[str] = "is_uuid"
    template: ClassVar[str] = "{field} is not a valid UUID"

    def passes(self) -> bool:
        try:
            uuid.UUID(self.value)
        except ValueError:
            return False
        return True


@dataclass(frozen=True)
class IsOnlyDigits(_TextPredicate):
    """Text must be non-empty ASCII digits with no sign."""

    value: Any

    tag: ClassVar[str] = "is_only_digits"
    template: ClassVar[str] = "{field} contains non-digit characters"

    def passes(self) -> bool:
        return _ONLY_DIGITS.fullmatch(self.value) is not None


@dataclass(frozen=True)
class MinDate(_DatePredicate):
    """Timestamp must not be before ``min_date``."""

    value: Any
    min_date: Any
    coercer: Coercer | None = dataclass_field(default=None, compare=False, repr=False)

    _bounds: ClassVar[tuple[str, ...]] = ("min_date",)
    tag: ClassVar[str] = "min_date"
    template: ClassVar[str] = "{field} is before {min_date}"

    def passes(self) -> bool:
        return self._moment(self.value) >= self._moment(self.min_date)

    def params(self) -> dict[str, Any]:
        return {"min_date": self.min_date}


@dataclass(frozen=True)
class MaxDate(_DatePredicate):
    """Timestamp must not be after ``max_date``."""

    value: Any
    max_date: Any
    coercer: Coercer | None = dataclass_field(default=None, compare=False, repr=False)

    _bounds: ClassVar[tuple[str, ...]] = ("max_date",)
    tag: ClassVar[str] = "max_date"
    template: ClassVar[str] = "{field} is after {max_date}"

    def passes(self) -> bool:
        return self._moment(self.value) <= self._moment(self.max_date)

    def params(self) -> dict[str, Any]:
        return {"max_date": self.max_date}


@dataclass(frozen=True)
class BetweenDate(_DatePredicate):
    """Timestamp must be between ``min_date`` and ``max_date`` (inclusive)."""

    value: Any
    min_date: Any
    max_date: Any
    coercer: Coercer | None = dataclass_field(default=None, compare=False, repr=False)

    _bounds: ClassVar[tuple[str, ...]] = ("min_date", "max_date")
    tag: ClassVar[str] = "between_date"
    template: ClassVar[str] = "{field} is not between {min_date} and {max_date}"

    def passes(self) -> bool:
        moment = self._moment(self.value)
        return self._moment(self.min_date) <= moment <= self._moment(self.max_date)

    def params(self) -> dict[str, Any]:
        return {"min_date": self.min_date, "max_date": self.max_date}


@dataclass(frozen=True)
class MinCount(Predicate):
    """Container must hold at least ``min_count`` elements."""

    value: Any
    min_count: int

    tag: ClassVar[str] = "min_count"
    template: ClassVar[str] = "{field} must have at least {min_count} items"

    def passes(self) -> bool:
        return is_container(self.value) and len(self.value) >= self.min_count

    def message(self, field: str) -> str:
        if not is_container(self.value):
            return f"{field} must be a list, set or mapping"
        return super().message(field)

    def params(self) -> dict[str, Any]:
        return {"min_count": self.min_count}


@dataclass(frozen=True)
class MaxCount(Predicate):
    """Container must hold at most ``max_count`` elements."""

    value: Any
    max_count: int

    tag: ClassVar[str] = "max_count"
    template: ClassVar[str] = "{field} must have at most {max_count} items"

    def passes(self) -> bool:
        return is_container(self.value) and len(self.value) <= self.max_count

    def message(self, field: str) -> str:
        if not is_container(self.value):
            return f"{field} must be a list, set or mapping"
        return super().message(field)

    def params(self) -> dict[str, Any]:
        return {"max_count": self.max_count}


@dataclass(frozen=True)
class Numeric(Predicate):
    """Value must be a number: an integer of any width or a float.

    Failing this check is a type failure, so it reports ``invalid_type``.
    """

    value: Any

    tag: ClassVar[str] = "invalid_type"
    template: ClassVar[str] = "{field} must be a number"

    def passes(self) -> bool:
        return is_numeric(self.value)

    def params(self) -> dict[str, Any]:
        return {"expected": "number", "actual": type_name(self.value)}


__all__ = [
    "Validator",
    "Predicate",
    "Required",
    "Min",
    "Max",
    "Range",
    "MinLength",
    "MaxLength",
    "Length",
    "OneOf",
    "IsEmail",
    "IsAlphanumeric",
    "IsISO8601",
    "IsISO8601Date",
    "IsPhone",
    "IsUUID",
    "IsOnlyDigits",
    "MinDate",
    "MaxDate",
    "BetweenDate",
    "MinCount",
    "MaxCount",
    "Numeric",
]
