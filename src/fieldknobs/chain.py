"""Fluent rule chain for validating a single field.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable

from .domains import Domain, type_name
from .exceptions import ConfigurationError
from .predicates import (
    BetweenDate,
    IsAlphanumeric,
    IsEmail,
    IsISO8601,
    IsISO8601Date,
    IsOnlyDigits,
    IsPhone,
    IsUUID,
    Length,
    Max,
    MaxCount,
    MaxDate,
    MaxLength,
    Min,
    MinCount,
    MinDate,
    MinLength,
    Numeric,
    OneOf,
    Range,
    Required,
)
from .result import FieldError

if TYPE_CHECKING:
    from .predicates import Validator
    from .session import ValidationSession

logger = logging.getLogger(__name__)


class RuleChain:
    """Chain of rules applied to one field's value.

    Each rule coerces the raw value into the domain it needs before
    comparing. Once the field has an error in the session (from this chain
    or any earlier one) every later rule is a no-op, so the first failure
    in call order is the one reported.

    Absent values (None) skip every rule except :meth:`required`. A value
    that cannot be coerced records a single ``invalid_type`` error
    (``invalid_time`` for timestamp rules).
    """

    def __init__(self, session: ValidationSession, field: str, value: Any):
        """Initialize the chain.

        Args:
            session: Session receiving the errors
            field: Field name
            value: Raw value to validate
        """
        self.session = session
        self.field = field
        self.value = value

    def required(self) -> RuleChain:
        """Value must be present and, if text, non-empty."""
        if self._failed():
            return self
        self.session.add(self.field, Required(self.value))
        return self

    # Numbers

    def min(self, min: int) -> RuleChain:
        """Integer value must be at least ``min``. Alias of :meth:`min_int`."""
        return self.min_int(min)

    def max(self, max: int) -> RuleChain:
        """Integer value must be at most ``max``. Alias of :meth:`max_int`."""
        return self.max_int(max)

    def range(self, min: int, max: int) -> RuleChain:
        """Integer value must be between ``min`` and ``max``. Alias of :meth:`range_int`."""
        return self.range_int(min, max)

    def min_int(self, min: int) -> RuleChain:
        return self._apply(Domain.INTEGER, lambda value: Min(value, min))

    def max_int(self, max: int) -> RuleChain:
        return self._apply(Domain.INTEGER, lambda value: Max(value, max))

    def range_int(self, min: int, max: int) -> RuleChain:
        return self._apply(Domain.INTEGER, lambda value: Range(value, min, max))

    def min_uint(self, min: int) -> RuleChain:
        return self._apply(Domain.UNSIGNED_INTEGER, lambda value: Min(value, min))

    def max_uint(self, max: int) -> RuleChain:
        return self._apply(Domain.UNSIGNED_INTEGER, lambda value: Max(value, max))

    def range_uint(self, min: int, max: int) -> RuleChain:
        return self._apply(Domain.UNSIGNED_INTEGER, lambda value: Range(value, min, max))

    def min_float(self, min: float) -> RuleChain:
        return self._apply(Domain.FLOAT, lambda value: Min(value, min))

    def max_float(self, max: float) -> RuleChain:
        return self._apply(Domain.FLOAT, lambda value: Max(value, max))

    def range_float(self, min: float, max: float) -> RuleChain:
        return self._apply(Domain.FLOAT, lambda value: Range(value, min, max))

    def numeric(self) -> RuleChain:
        """Value must be a number of any width."""
        if self._failed() or self.value is None:
            return self
        self.session.add(self.field, Numeric(self.value))
        return self

    # Text

    def min_length(self, min: int) -> RuleChain:
        return self._apply(Domain.TEXT, lambda value: MinLength(value, min))

    def max_length(self, max: int) -> RuleChain:
        return self._apply(Domain.TEXT, lambda value: MaxLength(value, max))

    def length(self, min: int, max: int) -> RuleChain:
        return self._apply(Domain.TEXT, lambda value: Length(value, min, max))

    def one_of(self, *values: str) -> RuleChain:
        """Text must equal one of ``values``."""
        return self._apply(Domain.TEXT, lambda value: OneOf(value, *values))

    def is_email(self) -> RuleChain:
        return self._apply(Domain.TEXT, IsEmail)

    def is_alphanumeric(self) -> RuleChain:
        return self._apply(Domain.TEXT, IsAlphanumeric)

    def is_iso8601(self) -> RuleChain:
        return self._apply(Domain.TEXT, IsISO8601)

    def is_iso8601_date(self) -> RuleChain:
        return self._apply(Domain.TEXT, IsISO8601Date)

    def is_phone(self) -> RuleChain:
        return self._apply(Domain.TEXT, IsPhone)

    def is_uuid(self) -> RuleChain:
        return self._apply(Domain.TEXT, IsUUID)

    def is_only_digits(self) -> RuleChain:
        return self._apply(Domain.TEXT, IsOnlyDigits)

    # Timestamps

    def min_date(self, min_date: Any) -> RuleChain:
        """Timestamp must not be before ``min_date``.

        Bounds may be datetimes, dates or text in any configured layout.
        """
        bound = self._bound("min_date", min_date)
        return self._apply(Domain.TIMESTAMP, lambda value: MinDate(value, bound))

    def max_date(self, max_date: Any) -> RuleChain:
        """Timestamp must not be after ``max_date``."""
        bound = self._bound("max_date", max_date)
        return self._apply(Domain.TIMESTAMP, lambda value: MaxDate(value, bound))

    def between_date(self, min_date: Any, max_date: Any) -> RuleChain:
        """Timestamp must be between ``min_date`` and ``max_date`` (inclusive)."""
        lower = self._bound("min_date", min_date)
        upper = self._bound("max_date", max_date)
        return self._apply(Domain.TIMESTAMP, lambda value: BetweenDate(value, lower, upper))

    # Containers

    def min_count(self, min: int) -> RuleChain:
        """Container must hold at least ``min`` elements."""
        return self._apply(Domain.SEQUENCE, lambda _: MinCount(self.value, min))

    def max_count(self, max: int) -> RuleChain:
        """Container must hold at most ``max`` elements."""
        return self._apply(Domain.SEQUENCE, lambda _: MaxCount(self.value, max))

    def custom(self, validator: Validator) -> RuleChain:
        """Register a caller-supplied validator unchanged."""
        if self._failed():
            return self
        self.session.add(self.field, validator)
        return self

    def _failed(self) -> bool:
        if self.session.has_error(self.field):
            logger.debug(f"Short-circuit on '{self.field}': already failed")
            return True
        return False

    def _apply(self, domain: Domain, build: Callable[[Any], Validator]) -> RuleChain:
        if self._failed():
            return self

        coerced = self.session.coercer.coerce(self.value, domain)
        if coerced.absent:
            logger.debug(f"Skipping {domain.value} rule on '{self.field}': value is absent")
            return self
        if not coerced:
            logger.debug(f"Coercion failed on '{self.field}': {coerced.error}")
            self.session.add(self.field, self._coercion_failure(domain))
            return self

        self.session.add(self.field, build(coerced.value))
        return self

    def _coercion_failure(self, domain: Domain) -> Validator:
        value = self.value
        if domain == Domain.TIMESTAMP:
            error = FieldError(
                self.field,
                f"{self.field} is not a valid time: {value}",
                "invalid_time",
                value,
                {"expected": domain.value, "actual": type_name(value)},
            )
        else:
            error = FieldError(
                self.field,
                f"{self.field} has invalid type: expected {domain.value}, got {type_name(value)}",
                "invalid_type",
                value,
                {"expected": domain.value, "actual": type_name(value)},
            )
        return lambda field: error

    def _bound(self, name: str, bound: Any) -> datetime:
        coerced = self.session.coercer.to_timestamp(bound)
        if not coerced:
            raise ConfigurationError(
                f"Invalid {name} bound for '{self.field}': {bound!r}",
                context={"field": self.field, "param": name, "value": bound},
            )
        return coerced.value
