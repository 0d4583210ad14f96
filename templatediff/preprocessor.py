"""Resolves {{NAME()}} placeholders in the expected document."""

from __future__ import annotations

import logging
from typing import Any

from .functions import FunctionRegistry
from .tokens import ResolvedLiteral, function_name

logger = logging.getLogger(__name__)


class FunctionResolver:
    """
    Replaces every function-call leaf of a parsed template with the
    function's result.

    Each occurrence runs its function once. Capture placeholders are left
    in place for the comparator. Lookup and execution errors propagate and
    abort the comparison.
    """

    def __init__(self, registry: FunctionRegistry):
        self.registry = registry
        self.resolved_count = 0

    def resolve(self, template: Any) -> Any:
        """
        Return a copy of the template with function calls substituted.

        Args:
            template: Parsed expected document (left unmodified)

        Returns:
            New tree; substituted strings are ResolvedLiteral instances
        """
        self.resolved_count = 0

        # Copies are built top-down: each entry says where its copy goes
        root = [None]
        stack = [(template, root, 0)]

        while stack:
            node, target, slot = stack.pop()

            if isinstance(node, dict):
                copy = dict.fromkeys(node)
                stack.extend((value, copy, key) for key, value in reversed(node.items()))
            elif isinstance(node, list):
                copy = [None] * len(node)
                stack.extend((item, copy, i) for i, item in reversed(list(enumerate(node))))
            elif isinstance(node, str):
                copy = self._resolve_string(node)
            else:
                copy = node

            target[slot] = copy

        if self.resolved_count:
            logger.debug("Resolved %d function placeholder(s)", self.resolved_count)
        return root[0]

    def _resolve_string(self, value: str) -> str:
        name = function_name(value)
        if name is None:
            return value
        self.resolved_count += 1
        return ResolvedLiteral(self.registry.execute(name))
