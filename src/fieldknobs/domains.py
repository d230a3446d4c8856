"""Semantic value domains and runtime domain detection.

Every rule operates on one of a closed set of domains. :func:`detect` maps an
arbitrary runtime value onto that set by inspecting its shape, so numpy
scalars of any width land in the same domain as the corresponding builtin.
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping, Sequence, Set
from datetime import date, datetime
from enum import Enum
from typing import Any

import numpy as np


class Domain(Enum):
    """Enumeration of the semantic domains a value can be coerced into.

    Attributes:
        INTEGER: Signed whole numbers (``int``, numpy signed integers)
        UNSIGNED_INTEGER: Non-negative whole numbers (numpy unsigned integers)
        FLOAT: Real numbers (``float``, numpy floats, ``Fraction``)
        TEXT: Strings
        TIMESTAMP: Points in time (``datetime``, ``date``, ``numpy.datetime64``)
        SEQUENCE: Containers with an element count (lists, sets, mappings, arrays)
    """

    INTEGER = "integer"
    UNSIGNED_INTEGER = "unsigned integer"
    FLOAT = "float"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    SEQUENCE = "sequence"


NUMERIC_DOMAINS = frozenset({Domain.INTEGER, Domain.UNSIGNED_INTEGER, Domain.FLOAT})

_TEXT_LIKE = (str, bytes, bytearray)


def is_container(value: Any) -> bool:
    """Check if a value is a container with an element count.

    Text and byte strings are sequences in Python but are not containers
    for validation purposes.
    """
    if isinstance(value, _TEXT_LIKE):
        return False
    if isinstance(value, np.ndarray):
        return value.ndim > 0
    return isinstance(value, (Sequence, Set, Mapping))


def detect(value: Any) -> Domain | None:
    """Determine the runtime domain of a value.

    Args:
        value: Any value

    Returns:
        The matching Domain, or None for absent or unsupported values
    """
    if value is None:
        return None
    # bool is an int subclass but is never treated as a number
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, np.unsignedinteger):
        return Domain.UNSIGNED_INTEGER
    if isinstance(value, numbers.Integral):
        return Domain.INTEGER
    if isinstance(value, numbers.Real):
        return Domain.FLOAT
    if isinstance(value, str):
        return Domain.TEXT
    if isinstance(value, (datetime, date, np.datetime64)):
        return Domain.TIMESTAMP
    if is_container(value):
        return Domain.SEQUENCE
    return None


def is_numeric(value: Any) -> bool:
    """Check if a value's runtime domain is one of the numeric domains."""
    return detect(value) in NUMERIC_DOMAINS


def type_name(value: Any) -> str:
    """Get a readable type name for error messages."""
    if value is None:
        return "None"
    return type(value).__name__
