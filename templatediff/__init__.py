"""
templatediff - JSON template matching for test suites

Compares an actual JSON document with an expected template. Templates may
capture dynamic values with [[NAME]] and insert generated values with
{{NAME()}}; every structural difference is reported with its path.
"""

from .matcher import JsonMatcher, exact_match, subset_match
from .models import (
    MatcherConfig,
    MatchResult,
    MatchMode,
    Difference,
    DiffType,
    CapturePolicy,
)
from .functions import (
    FunctionRegistry,
    Clock,
    SystemClock,
    FixedClock,
)
from .document import parse, render, JsonKind, JsonPath
from .assertions import assert_exact_match, assert_subset_match
from .exceptions import (
    TemplateDiffError,
    ParseError,
    InvalidArgumentError,
    DuplicateFunctionError,
    FunctionNotFoundError,
    FunctionExecutionError,
    JsonMismatchError,
)
from .suite import (
    SuiteRunner,
    SuiteReport,
    CaseResult,
    run_suite,
)

__version__ = "1.0.0"
__all__ = [
    # Matching
    "JsonMatcher",
    "exact_match",
    "subset_match",
    "MatcherConfig",
    # Results
    "MatchResult",
    "MatchMode",
    "Difference",
    "DiffType",
    "CapturePolicy",
    # Functions
    "FunctionRegistry",
    "Clock",
    "SystemClock",
    "FixedClock",
    # Document model
    "parse",
    "render",
    "JsonKind",
    "JsonPath",
    # Assertions
    "assert_exact_match",
    "assert_subset_match",
    # Errors
    "TemplateDiffError",
    "ParseError",
    "InvalidArgumentError",
    "DuplicateFunctionError",
    "FunctionNotFoundError",
    "FunctionExecutionError",
    "JsonMismatchError",
    # Suites
    "SuiteRunner",
    "SuiteReport",
    "CaseResult",
    "run_suite",
]
