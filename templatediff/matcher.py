"""Main matching engine for templatediff."""

from __future__ import annotations

import logging
from typing import Optional

from .comparator import StructuralComparator
from .document import parse
from .functions import FunctionRegistry
from .models import MatchMode, MatchResult, MatcherConfig
from .preprocessor import FunctionResolver
from .tokens import quote_bare_tokens

logger = logging.getLogger(__name__)


class JsonMatcher:
    """
    Matches actual JSON text against an expected JSON template:

    1. Bare placeholder quoting (optional, expected text only)
    2. Parsing of both documents
    3. Function resolution: {{NAME()}} leaves become literals
    4. Structural comparison, collecting differences and [[NAME]] captures

    Parse and function errors abort the call; mismatches are returned in
    the MatchResult.
    """

    def __init__(
        self,
        registry: Optional[FunctionRegistry] = None,
        config: Optional[MatcherConfig] = None
    ):
        """
        Initialize the matcher.

        Args:
            registry: Functions available to {{NAME()}} (built-ins only if not provided)
            config: Matcher configuration (uses defaults if not provided)
        """
        self.registry = registry or FunctionRegistry()
        self.config = config or MatcherConfig()

    def exact_match(self, expected_json: str, actual_json: str) -> MatchResult:
        """Key sets and array lengths must match at every depth."""
        return self.match(expected_json, actual_json, MatchMode.EXACT)

    def subset_match(self, expected_json: str, actual_json: str) -> MatchResult:
        """Actual objects may carry extra keys; array lengths must still match."""
        return self.match(expected_json, actual_json, MatchMode.SUBSET)

    def match(self, expected_json: str, actual_json: str, mode: MatchMode) -> MatchResult:
        """
        Compare actual JSON text with an expected template.

        Args:
            expected_json: Template text, may contain placeholders
            actual_json: Document under test
            mode: MatchMode.EXACT or MatchMode.SUBSET

        Returns:
            MatchResult with every difference and capture

        Raises:
            ParseError: either document is not valid JSON
            FunctionNotFoundError: a placeholder names an unknown function
            FunctionExecutionError: a function failed
        """
        if self.config.wrap_unquoted_tokens and isinstance(expected_json, str):
            expected_json = quote_bare_tokens(expected_json)

        expected = parse(expected_json, "expected")
        actual = parse(actual_json, "actual")

        expected = FunctionResolver(self.registry).resolve(expected)

        comparator = StructuralComparator(mode, self.config.capture_policy)
        comparator.compare(expected, actual)

        result = MatchResult(
            mode=mode,
            differences=comparator.differences,
            captures=comparator.captures
        )
        logger.debug(
            "%s match: %d difference(s), %d capture(s)",
            mode.value, len(result.differences), len(result.captures)
        )
        return result


def exact_match(
    expected_json: str,
    actual_json: str,
    registry: Optional[FunctionRegistry] = None,
    config: Optional[MatcherConfig] = None
) -> MatchResult:
    """
    Convenience function for an exact match.

    Example:
        result = exact_match('{"id": "[[UID]]", "status": "ok"}',
                             '{"id": "42", "status": "ok"}')
        result.success        # True
        result.captures       # {'UID': '42'}
    """
    return JsonMatcher(registry, config).exact_match(expected_json, actual_json)


def subset_match(
    expected_json: str,
    actual_json: str,
    registry: Optional[FunctionRegistry] = None,
    config: Optional[MatcherConfig] = None
) -> MatchResult:
    """Convenience function for a subset match."""
    return JsonMatcher(registry, config).subset_match(expected_json, actual_json)
