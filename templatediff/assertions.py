"""Assertion helpers for test suites."""

from __future__ import annotations

from typing import Any, Optional

from .exceptions import JsonMismatchError
from .functions import FunctionRegistry
from .matcher import JsonMatcher
from .models import MatchMode, MatcherConfig


def assert_exact_match(
    expected_json: str,
    actual_json: str,
    because: Optional[str] = None,
    registry: Optional[FunctionRegistry] = None,
    config: Optional[MatcherConfig] = None
) -> dict[str, Any]:
    """
    Assert that actual JSON matches the template exactly.

    Returns:
        The captured values

    Raises:
        JsonMismatchError: listing every difference found
    """
    return _assert(expected_json, actual_json, MatchMode.EXACT, because, registry, config)


def assert_subset_match(
    expected_json: str,
    actual_json: str,
    because: Optional[str] = None,
    registry: Optional[FunctionRegistry] = None,
    config: Optional[MatcherConfig] = None
) -> dict[str, Any]:
    """Assert that actual JSON contains the template as a subset."""
    return _assert(expected_json, actual_json, MatchMode.SUBSET, because, registry, config)


def _assert(expected_json, actual_json, mode, because, registry, config) -> dict[str, Any]:
    result = JsonMatcher(registry, config).match(expected_json, actual_json, mode)
    if not result.success:
        raise JsonMismatchError(result, because)
    return result.captures
