"""Structural comparison of an expected template against an actual document."""

from __future__ import annotations

import logging
from typing import Any

from .document import JsonKind, JsonPath, ROOT, kind_of, render
from .models import CapturePolicy, DiffType, Difference, MatchMode
from .tokens import capture_name

logger = logging.getLogger(__name__)

# Markers for object properties present on one side only
_MISSING = object()
_UNEXPECTED = object()


class StructuralComparator:
    """
    Compares a resolved template with an actual document.

    Handles:
    - Capture placeholders (any actual value accepted and recorded)
    - Kind checks (a type mismatch stops that branch only)
    - Exact mode (same key sets) and subset mode (extra actual keys allowed)
    - Positional arrays (a length mismatch stops that array only)

    With ``placeholders=False`` every expected string is a literal.

    Differences and captures accumulate on the instance; use one
    comparator per comparison.
    """

    def __init__(
        self,
        mode: MatchMode = MatchMode.EXACT,
        capture_policy: CapturePolicy = CapturePolicy.LAST_WINS,
        placeholders: bool = True
    ):
        self.mode = mode
        self.capture_policy = capture_policy
        self.placeholders = placeholders

        self.differences: list[Difference] = []
        self.captures: dict[str, Any] = {}

    def compare(self, expected: Any, actual: Any, path: JsonPath = ROOT) -> bool:
        """
        Compare two values and everything below them.

        Nested values are walked with an explicit stack, depth-first in
        document order, so nesting depth is not limited by the call stack.

        Args:
            expected: Template value (function calls already resolved)
            actual: Actual value
            path: Location of both values

        Returns:
            True if no difference was found below this point
        """
        found_before = len(self.differences)
        stack = [(expected, actual, path)]

        while stack:
            expected, actual, path = stack.pop()
            if expected is _UNEXPECTED:
                self._add_difference(
                    path=path,
                    kind=DiffType.UNEXPECTED_PROPERTY,
                    expected=None,
                    actual=render(actual),
                    message=f"Unexpected property '{path.segments[-1]}' found in actual JSON."
                )
                continue
            if actual is _MISSING:
                self._add_difference(
                    path=path,
                    kind=DiffType.MISSING_PROPERTY,
                    expected=render(expected),
                    actual=None,
                    message=f"Missing property '{path.segments[-1]}'."
                )
                continue
            stack.extend(reversed(self._compare_node(expected, actual, path)))

        return len(self.differences) == found_before

    def _compare_node(self, expected: Any, actual: Any, path: JsonPath) -> list:
        """Check one pair and return the child pairs still to compare."""
        if isinstance(expected, str):
            name = capture_name(expected) if self.placeholders else None
            if name is not None:
                self._capture(name, actual, path)
                return []

        expected_kind = kind_of(expected)
        actual_kind = kind_of(actual)

        if expected_kind is not actual_kind:
            self._add_difference(
                path=path,
                kind=DiffType.TYPE_MISMATCH,
                expected=render(expected),
                actual=render(actual),
                message=f"Type mismatch. Expected {expected_kind.value}, got {actual_kind.value}."
            )
            return []

        if expected_kind is JsonKind.OBJECT:
            return self._compare_objects(expected, actual, path)
        elif expected_kind is JsonKind.ARRAY:
            return self._compare_arrays(expected, actual, path)
        self._compare_scalars(expected, actual, path, expected_kind)
        return []

    def _compare_objects(self, expected: dict, actual: dict, path: JsonPath) -> list:
        # Missing properties are queued so they report in key order with the
        # differences found inside earlier properties
        children = [
            (expected_value, actual.get(key, _MISSING), path.child(key))
            for key, expected_value in expected.items()
        ]

        if self.mode is MatchMode.EXACT:
            for key, actual_value in actual.items():
                if key in expected:
                    continue
                children.append((_UNEXPECTED, actual_value, path.child(key)))

        return children

    def _compare_arrays(self, expected: list, actual: list, path: JsonPath) -> list:
        # Strictly positional in both modes
        if len(expected) != len(actual):
            self._add_difference(
                path=path,
                kind=DiffType.ARRAY_LENGTH_MISMATCH,
                expected=str(len(expected)),
                actual=str(len(actual)),
                message=f"Array length mismatch. Expected {len(expected)}, got {len(actual)}."
            )
            return []

        return [
            (expected_item, actual_item, path.index(i))
            for i, (expected_item, actual_item) in enumerate(zip(expected, actual))
        ]

    def _compare_scalars(
        self,
        expected: Any,
        actual: Any,
        path: JsonPath,
        kind: JsonKind
    ) -> bool:
        if kind is JsonKind.NULL:
            return True

        # int and Decimal compare by value, so 30 == 30.0
        if expected == actual:
            return True

        self._add_difference(
            path=path,
            kind=DiffType.VALUE_MISMATCH,
            expected=render(expected),
            actual=render(actual),
            message=f"Value mismatch. Expected {render(expected)}, got {render(actual)}."
        )
        return False

    def _capture(self, name: str, actual: Any, path: JsonPath):
        if name in self.captures:
            if self.capture_policy is CapturePolicy.FIRST_WINS:
                logger.debug("Capture %s at %s ignored, first value kept", name, path)
                return
            logger.debug("Capture %s at %s replaces earlier value", name, path)
        self.captures[name] = actual

    def _add_difference(
        self,
        path: JsonPath,
        kind: DiffType,
        expected: str | None,
        actual: str | None,
        message: str
    ):
        rendered_path = str(path)
        self.differences.append(Difference(
            path=rendered_path,
            kind=kind,
            expected=expected,
            actual=actual,
            message=f"{rendered_path}: {message}"
        ))
