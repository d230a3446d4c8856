"""Validation session: one authoritative error per field.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .chain import RuleChain
from .coercer import Coercer
from .exceptions import ConfigurationError, ValidationError
from .result import FieldError
from .settings import DEFAULT_SETTINGS, Settings

if TYPE_CHECKING:
    from .predicates import Validator

logger = logging.getLogger(__name__)


class _TemplateValues(dict):
    """Leaves unknown placeholders intact when rendering custom templates."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class ValidationSession:
    """Accumulates field errors for one validation run.

    The first error recorded for a field is authoritative: later validators
    for the same field, whether registered through :meth:`add` or through a
    :class:`RuleChain`, are not evaluated. Field order in the rendered result
    is the order in which fields first failed.

    Example:
        ```python
        session = ValidationSession()
        session.chain("name", data.get("name")).required().length(3, 20)
        session.chain("age", data.get("age")).min(13).max(120)
        session.add("email", IsEmail(data["email"]))

        error = session.result()
        if error is not None:
            return {"errors": error.to_dict()}
        ```
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize an empty session.

        Args:
            settings: Engine settings; defaults if omitted
        """
        self.settings = settings or DEFAULT_SETTINGS
        self.coercer = Coercer(self.settings)
        self._errors: dict[str, FieldError] = {}
        self._order: list[str] = []

    def chain(self, field: str, value: Any) -> RuleChain:
        """Start a rule chain for a field.

        Args:
            field: Field name
            value: Raw, uncoerced value

        Returns:
            RuleChain bound to this session
        """
        return RuleChain(self, field, value)

    def add(self, field: str, *validators: Validator) -> ValidationSession:
        """Evaluate validators for a field, keeping the first error.

        Does nothing if the field already has an error.

        Args:
            field: Field name
            *validators: Callables taking the field name and returning
                a FieldError or None

        Returns:
            Self for chaining
        """
        if self.has_error(field):
            logger.debug(f"Skipping {len(validators)} validator(s) for '{field}': already failed")
            return self

        for validator in validators:
            if not callable(validator):
                raise ConfigurationError(
                    f"Validator for '{field}' is not callable: {validator!r}",
                    context={"field": field, "validator": repr(validator)},
                )
            error = validator(field)
            if error is not None:
                self._record(field, error)
                break

        return self

    def has_error(self, field: str) -> bool:
        """Check if a field already has a recorded error."""
        return field in self._errors

    def error_for(self, field: str) -> FieldError | None:
        """Get the recorded error for a field, if any."""
        return self._errors.get(field)

    def result(self) -> ValidationError | None:
        """Snapshot the recorded errors.

        Returns:
            ValidationError with one entry per failed field, or None when
            nothing failed
        """
        if not self._errors:
            return None
        return ValidationError(self._errors, self._order)

    def raise_for_errors(self) -> None:
        """Raise the aggregate ValidationError if any field failed."""
        error = self.result()
        if error is not None:
            raise error

    def _record(self, field: str, error: FieldError) -> None:
        template = self.settings.message_for(error.tag)
        if template is not None:
            values = _TemplateValues(error.params)
            values["field"] = field
            try:
                message = template.format_map(values)
            except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid message template for tag '{error.tag}': {template!r}",
                    context={"tag": error.tag, "template": template},
                ) from e
            error = error.with_message(message)

        self._errors[field] = error
        self._order.append(field)
        logger.debug(f"Recorded {error.tag} error for '{field}': {error.message}")
