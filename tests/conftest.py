"""Pytest configuration for fieldknobs tests."""

import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from fieldknobs import Coercer, ValidationSession  # noqa: E402


@pytest.fixture
def session():
    """Fresh validation session with default settings."""
    return ValidationSession()


@pytest.fixture
def coercer():
    """Coercer with default settings."""
    return Coercer()
