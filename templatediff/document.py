"""JSON document model: parsing, kinds, rendering and paths."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from .exceptions import InvalidArgumentError, ParseError


_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


class JsonKind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def parse(text: str | bytes, source: Optional[str] = None) -> Any:
    """
    Parse JSON text into plain Python values.

    Objects become dicts (key order preserved), arrays lists, numbers with a
    fraction or exponent Decimal, integers int (Decimal when too long for
    int). The caller owns the returned tree; nothing in the engine mutates it.

    Args:
        text: JSON text (str or UTF-8 bytes)
        source: Label used in error messages ('expected' or 'actual')

    Returns:
        The parsed value
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise ParseError(f"not valid UTF-8: {e.reason}", source) from e

    if not isinstance(text, str):
        raise InvalidArgumentError(
            f"{source or 'document'} must be JSON text, got {type(text).__name__}",
            source,
        )

    def reject_constant(name: str):
        raise ParseError(f"'{name}' is not a valid JSON value", source)

    try:
        return json.loads(
            text,
            parse_float=Decimal,
            parse_int=_parse_int,
            parse_constant=reject_constant,
        )
    except json.JSONDecodeError as e:
        raise ParseError(e.msg, source, e.lineno, e.colno) from e
    except RecursionError as e:
        raise ParseError("document is nested too deeply to parse", source) from e
    except ValueError as e:
        raise ParseError(str(e), source) from e


def _parse_int(text: str) -> int | Decimal:
    try:
        return int(text)
    except ValueError:
        # Longer than the interpreter's int conversion limit
        return Decimal(text)


def kind_of(value: Any) -> JsonKind:
    """Classify a parsed value."""
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise InvalidArgumentError(f"Not a JSON value: {type(value).__name__}")


def render(value: Any) -> str:
    """Render a parsed value back to compact JSON text."""
    parts = []
    # (is_text, item): text is emitted as-is, anything else is a value
    stack = [(False, value)]

    while stack:
        is_text, item = stack.pop()
        if is_text:
            parts.append(item)
            continue

        kind = kind_of(item)
        if kind is JsonKind.NULL:
            parts.append("null")
        elif kind is JsonKind.BOOLEAN:
            parts.append("true" if item else "false")
        elif kind is JsonKind.NUMBER:
            parts.append(str(item))
        elif kind is JsonKind.STRING:
            parts.append(json.dumps(item, ensure_ascii=False))
        elif kind is JsonKind.ARRAY:
            pending = [(True, "[")]
            for i, element in enumerate(item):
                if i:
                    pending.append((True, ","))
                pending.append((False, element))
            pending.append((True, "]"))
            stack.extend(reversed(pending))
        else:
            pending = [(True, "{")]
            for i, (key, element) in enumerate(item.items()):
                prefix = "," if i else ""
                pending.append((True, f"{prefix}{json.dumps(key, ensure_ascii=False)}:"))
                pending.append((False, element))
            pending.append((True, "}"))
            stack.extend(reversed(pending))

    return "".join(parts)


@dataclass(frozen=True)
class JsonPath:
    """Location inside a document: field names and array indexes from the root."""
    segments: tuple = ()

    def child(self, key: str) -> JsonPath:
        return JsonPath(self.segments + (key,))

    def index(self, position: int) -> JsonPath:
        return JsonPath(self.segments + (position,))

    def __str__(self) -> str:
        path = "$"
        for segment in self.segments:
            path = build_path(path, segment)
        return path


ROOT = JsonPath()


def build_path(parent_path: str, key: str | int) -> str:
    """Build a JSONPath from parent path and key."""
    if isinstance(key, int):
        return f"{parent_path}[{key}]"
    if _IDENTIFIER.match(key):
        return f"{parent_path}.{key}"
    escaped = key.replace("\\", "\\\\").replace("'", "\\'")
    return f"{parent_path}['{escaped}']"
