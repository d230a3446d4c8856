"""Exception hierarchy for fieldknobs.

Expected validation failures never raise: they are collected as
:class:`~fieldknobs.result.FieldError` values by a session. Exceptions are
reserved for the aggregate result (which callers may choose to raise) and for
programming mistakes such as malformed settings.

Example:
    ```python
    from fieldknobs import ValidationSession, ValidationError

    session = ValidationSession()
    session.chain("email", payload.get("email")).required().is_email()

    try:
        session.raise_for_errors()
    except ValidationError as e:
        logger.error(f"Rejected request: {e}")
        for name, error in e.entries().items():
            logger.debug(f"{name} -> {error.tag}")
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .result import FieldError


class FieldknobsError(Exception):
    """Base exception for all fieldknobs errors.

    Attributes:
        context: Dictionary containing contextual information about the error

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (field names, values, etc.)
    """

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(FieldknobsError):
    """Raised when settings or rule parameters are invalid.

    This signals a programming or deployment error (a malformed settings
    file, an unparseable date bound, a non-callable custom validator), never
    a failure of the data being validated.

    Example:
        ```python
        raise ConfigurationError(
            "Unknown settings key",
            context={"key": "layouts", "allowed": ["timestamp_layouts", "messages"]}
        )
        ```
    """

    pass


class ValidationError(FieldknobsError):
    """Aggregate result of a validation session.

    Holds exactly one :class:`FieldError` per field, in the order the fields
    first failed. Instances are only built for a non-empty mapping; a session
    with no failures returns ``None`` instead.
    """

    def __init__(self, errors: Mapping[str, FieldError], order: list[str] | None = None):
        names = list(order) if order is not None else list(errors)
        # Snapshot in first-seen order so later session mutation cannot leak in
        snapshot = {name: errors[name] for name in names}
        self._errors = MappingProxyType(snapshot)
        self._order = tuple(names)
        super().__init__(self.render(), context={"fields": list(self._order)})

    def entries(self) -> Mapping[str, FieldError] | None:
        """Get the field to error mapping, or None when there are no errors."""
        if self._errors:
            return self._errors
        return None

    @property
    def fields(self) -> tuple[str, ...]:
        """Field names in first-seen order."""
        return self._order

    def render(self) -> str:
        """Join ``"field: message"`` pairs in first-seen field order."""
        return ", ".join(str(self._errors[name]) for name in self._order)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Convert to a dictionary keyed by field name."""
        return {name: self._errors[name].to_dict() for name in self._order}

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, field: object) -> bool:
        return field in self._errors

    def __getitem__(self, field: str) -> FieldError:
        return self._errors[field]

    def __reduce__(self):
        return (self.__class__, (dict(self._errors), list(self._order)))

    def __repr__(self) -> str:
        return f"ValidationError({list(self._order)!r})"


__all__ = [
    "FieldknobsError",
    "ConfigurationError",
    "ValidationError",
]
