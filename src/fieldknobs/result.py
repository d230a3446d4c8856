"""Field error value type with consistent, predictable behavior.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class FieldError:
    """A single validation failure for one field.

    ``tag`` is a stable machine identifier (``"min_length"``, ``"invalid_type"``,
    ...) that does not change when the human-readable ``message`` does.
    ``params`` exposes the rule parameters (e.g. ``{"min": 5}``) for
    programmatic consumers and is read-only.
    """

    field: str
    message: str
    tag: str
    value: Any = None
    params: Mapping[str, Any] = dataclass_field(default_factory=dict)

    def __post_init__(self) -> None:
        # Copy so the caller's dict cannot mutate the error afterwards
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def param(self, key: str, default: Any = None) -> Any:
        """Get a single parameter.

        Args:
            key: Parameter name
            default: Value returned when the parameter is not set

        Returns:
            Parameter value or default
        """
        return self.params.get(key, default)

    def has_params(self) -> bool:
        """Check whether any parameters were recorded."""
        return len(self.params) > 0

    def with_message(self, message: str) -> FieldError:
        """Return a copy of this error carrying a different message."""
        return replace(self, message=message, params=dict(self.params))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "field": self.field,
            "message": self.message,
            "tag": self.tag,
            "value": self.value,
            "params": dict(self.params),
        }

    def __reduce__(self):
        # mappingproxy cannot be pickled; rebuild through the constructor
        return (
            self.__class__,
            (self.field, self.message, self.tag, self.value, dict(self.params)),
        )

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"
