"""Placeholder lexer for expected documents.

Two placeholder forms are recognised, and only when they make up the whole
string value:

- ``[[NAME]]`` captures whatever the actual document holds at that position.
- ``{{NAME()}}`` is replaced by the result of a registered function before
  comparison.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


NAME_PATTERN = re.compile(r'[A-Za-z0-9_]+')
CAPTURE_PATTERN = re.compile(r'\[\[([A-Za-z0-9_]+)\]\]')
FUNCTION_PATTERN = re.compile(r'\{\{([A-Za-z0-9_]+)\(\)\}\}')

# Bare [[NAME]] that is also a valid nested JSON array is left alone.
_JSON_LITERALS = frozenset({"true", "false", "null"})
_JSON_NUMBER = re.compile(r'[0-9]+([eE][0-9]+)?')


class TokenType(Enum):
    CAPTURE = "capture"
    FUNCTION = "function"


@dataclass(frozen=True)
class Token:
    type: TokenType
    name: str


class ResolvedLiteral(str):
    """String produced by a function call; never re-scanned for placeholders."""
    __slots__ = ()


def scan(value: str) -> Optional[Token]:
    """Return the placeholder a string leaf consists of, or None."""
    if isinstance(value, ResolvedLiteral):
        return None

    match = CAPTURE_PATTERN.fullmatch(value)
    if match:
        return Token(TokenType.CAPTURE, match.group(1))

    match = FUNCTION_PATTERN.fullmatch(value)
    if match:
        return Token(TokenType.FUNCTION, match.group(1))

    return None


def capture_name(value: str) -> Optional[str]:
    token = scan(value)
    if token is not None and token.type is TokenType.CAPTURE:
        return token.name
    return None


def function_name(value: str) -> Optional[str]:
    token = scan(value)
    if token is not None and token.type is TokenType.FUNCTION:
        return token.name
    return None


def quote_bare_tokens(text: str) -> str:
    """
    Wrap capture placeholders written without quotes in double quotes.

    Lets templates say ``{"count": [[COUNT]]}`` for non-string values.
    String literals are copied untouched.

    Args:
        text: Expected JSON text

    Returns:
        Text with every bare placeholder quoted
    """
    parts = []
    start = 0
    i = 0
    in_string = False
    length = len(text)

    while i < length:
        char = text[i]

        if in_string:
            if char == '\\':
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
        elif char == '[':
            match = CAPTURE_PATTERN.match(text, i)
            if match and _is_quotable(match.group(1)):
                parts.append(text[start:i])
                parts.append(f'"{match.group(0)}"')
                i = match.end()
                start = i
                continue

        i += 1

    parts.append(text[start:])
    return "".join(parts)


def is_valid_name(name: str) -> bool:
    """True if ``name`` can appear inside a placeholder."""
    return isinstance(name, str) and NAME_PATTERN.fullmatch(name) is not None


def _is_quotable(name: str) -> bool:
    return _JSON_NUMBER.fullmatch(name) is None and name not in _JSON_LITERALS
