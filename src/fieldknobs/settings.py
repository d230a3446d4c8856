"""Engine settings: timestamp layouts and message templates."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Union

import yaml  # type: ignore[import-untyped]

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "FIELDKNOBS_SETTINGS"

#: Layout token selecting the RFC3339 parser instead of a strptime format.
RFC3339 = "rfc3339"

DEFAULT_TIMESTAMP_LAYOUTS: tuple[str, ...] = (
    RFC3339,
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m/%d/%Y %H:%M:%S",
    "%m-%d-%Y %H:%M:%S",
)


@dataclass(frozen=True)
class Settings:
    """Immutable engine settings.

    Attributes:
        timestamp_layouts: Ordered layouts tried when parsing text into a
            timestamp. Each entry is a strptime format or the ``rfc3339`` token.
            The first layout that parses wins.
        messages: Per-tag message templates. Templates are formatted with
            ``field`` and the error's params, e.g. ``"{field} needs {min}+"``.
    """

    timestamp_layouts: tuple[str, ...] = DEFAULT_TIMESTAMP_LAYOUTS
    messages: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.timestamp_layouts, str) or not self.timestamp_layouts:
            raise ConfigurationError(
                "timestamp_layouts must be a non-empty list of layouts",
                context={"timestamp_layouts": self.timestamp_layouts},
            )
        object.__setattr__(self, "timestamp_layouts", tuple(self.timestamp_layouts))
        object.__setattr__(self, "messages", MappingProxyType(dict(self.messages)))

    def message_for(self, tag: str) -> str | None:
        """Get the configured template for a tag, if any."""
        return self.messages.get(tag)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Settings:
        """Create settings from a dictionary.

        Args:
            data: Dictionary with optional ``timestamp_layouts`` and ``messages``

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If the dictionary has unknown keys or bad values
        """
        data = dict(data or {})
        allowed = {"timestamp_layouts", "messages"}
        unknown = set(data) - allowed
        if unknown:
            raise ConfigurationError(
                f"Unknown settings keys: {', '.join(sorted(unknown))}",
                context={"unknown": sorted(unknown), "allowed": sorted(allowed)},
            )

        kwargs: dict[str, Any] = {}
        if "timestamp_layouts" in data:
            layouts = data["timestamp_layouts"]
            if not isinstance(layouts, (list, tuple)) or not all(
                isinstance(layout, str) for layout in layouts
            ):
                raise ConfigurationError(
                    "timestamp_layouts must be a list of strings",
                    context={"timestamp_layouts": layouts},
                )
            kwargs["timestamp_layouts"] = tuple(layouts)
        if "messages" in data:
            messages = data["messages"] or {}
            if not isinstance(messages, Mapping) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in messages.items()
            ):
                raise ConfigurationError(
                    "messages must map tags to template strings",
                    context={"messages": messages},
                )
            kwargs["messages"] = dict(messages)

        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> Settings:
        """Load settings from a YAML or JSON file.

        Args:
            path: Path to a ``.yaml``, ``.yml`` or ``.json`` file

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If the file is missing or cannot be parsed
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(
                f"Settings file not found: {path}", context={"path": str(path)}
            )

        suffix = path.suffix.lower()
        try:
            with open(path) as f:
                if suffix in [".yaml", ".yml"]:
                    data = yaml.safe_load(f) or {}
                elif suffix == ".json":
                    data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported settings file format: {suffix}",
                        context={"path": str(path)},
                    )
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot parse settings file {path}: {e}", context={"path": str(path)}
            ) from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Settings file {path} must contain a mapping",
                context={"path": str(path)},
            )

        logger.debug(f"Loaded settings from {path}")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from the file named by ``FIELDKNOBS_SETTINGS``.

        Returns:
            Settings from the file, or defaults when the variable is unset
        """
        path = os.environ.get(SETTINGS_ENV_VAR)
        if not path:
            return cls()
        return cls.from_file(path)

    def to_dict(self) -> dict[str, Any]:
        """Export settings as a dictionary."""
        return {
            "timestamp_layouts": list(self.timestamp_layouts),
            "messages": dict(self.messages),
        }


DEFAULT_SETTINGS = Settings()
