"""Data models for the templatediff engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .document import render
from .exceptions import InvalidArgumentError


class DiffType(Enum):
    VALUE_MISMATCH = "VALUE_MISMATCH"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    MISSING_PROPERTY = "MISSING_PROPERTY"
    UNEXPECTED_PROPERTY = "UNEXPECTED_PROPERTY"
    ARRAY_LENGTH_MISMATCH = "ARRAY_LENGTH_MISMATCH"


class MatchMode(Enum):
    EXACT = "exact"
    SUBSET = "subset"


class CapturePolicy(Enum):
    LAST_WINS = "last"
    FIRST_WINS = "first"


@dataclass
class MatcherConfig:
    """Configuration for a JsonMatcher."""
    capture_policy: CapturePolicy = CapturePolicy.LAST_WINS
    wrap_unquoted_tokens: bool = True

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> MatcherConfig:
        """Build a config from a plain mapping, e.g. a suite file block."""
        if not data:
            return cls()
        config = cls()
        if "capture_policy" in data:
            try:
                config.capture_policy = CapturePolicy(str(data["capture_policy"]).lower())
            except ValueError as e:
                raise InvalidArgumentError(
                    f"Unknown capture policy '{data['capture_policy']}'", "capture_policy"
                ) from e
        if "wrap_unquoted_tokens" in data:
            config.wrap_unquoted_tokens = bool(data["wrap_unquoted_tokens"])
        return config


@dataclass
class Difference:
    """A single structural discrepancy found during comparison."""
    path: str
    kind: DiffType
    expected: Optional[str]
    actual: Optional[str]
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "kind": self.kind.value,
            "expected": self.expected,
            "actual": self.actual,
            "message": self.message,
        }


@dataclass
class MatchResult:
    """Outcome of one comparison: differences and captured values."""
    mode: MatchMode
    differences: list[Difference] = field(default_factory=list)
    captures: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.differences

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "mode": self.mode.value,
            "differences": [d.to_dict() for d in self.differences],
            "captures": {name: render(value) for name, value in self.captures.items()},
        }
