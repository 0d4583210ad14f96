"""Suite runner: checks a file of expected/actual cases."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from .comparator import StructuralComparator
from .document import parse, render
from .exceptions import InvalidArgumentError, TemplateDiffError
from .functions import FixedClock, FunctionRegistry
from .matcher import JsonMatcher
from .models import MatchMode, MatchResult, MatcherConfig

logger = logging.getLogger(__name__)

# {{NAME}} without parentheses refers to a value captured by an earlier case
VARIABLE_PATTERN = re.compile(r'\{\{([A-Za-z0-9_]+)\}\}')


@dataclass
class SuiteCase:
    """One expected/actual pair from a suite file."""
    name: str
    expected: str
    actual: str
    mode: MatchMode = MatchMode.EXACT
    expect_match: bool = True
    expect_captures: dict[str, Any] = field(default_factory=dict)
    expect_error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict, index: int) -> SuiteCase:
        if not isinstance(data, dict):
            raise InvalidArgumentError(f"Case {index + 1} must be a mapping", "cases")

        missing = [key for key in ("expected", "actual") if key not in data]
        if missing:
            raise InvalidArgumentError(
                f"Case {index + 1} is missing: {', '.join(missing)}", "cases"
            )

        try:
            mode = MatchMode(str(data.get("mode", "exact")).lower())
        except ValueError as e:
            raise InvalidArgumentError(
                f"Case {index + 1} has unknown mode '{data.get('mode')}'", "mode"
            ) from e

        return cls(
            name=str(data.get("name", f"case-{index + 1}")),
            expected=_as_json_text(data["expected"]),
            actual=_as_json_text(data["actual"]),
            mode=mode,
            expect_match=bool(data.get("expect_match", True)),
            expect_captures=dict(data.get("expect_captures") or {}),
            expect_error=data.get("expect_error"),
        )


@dataclass
class CaseResult:
    """Result of a single suite case."""
    name: str
    passed: bool
    result: Optional[MatchResult] = None
    error: Optional[str] = None
    failures: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "passed": self.passed,
        }
        if self.result is not None:
            data["result"] = self.result.to_dict()
        if self.error:
            data["error"] = self.error
        if self.failures:
            data["failures"] = self.failures
        return data


@dataclass
class SuiteReport:
    """Report across all cases of a suite."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    cases: list[CaseResult] = field(default_factory=list)
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')

    def add(self, case_result: CaseResult):
        self.cases.append(case_result)
        self.total += 1
        if case_result.passed:
            self.passed += 1
        else:
            self.failed += 1

    def to_dict(self) -> dict:
        pass_rate = f"{(self.passed / self.total * 100):.1f}%" if self.total > 0 else "0.0%"
        return {
            "timestamp": self.timestamp,
            "summary": {
                "total_cases": self.total,
                "passed": self.passed,
                "failed": self.failed,
                "pass_rate": pass_rate
            },
            "cases": [c.to_dict() for c in self.cases]
        }

    def print_summary(self):
        pass_rate = f"{(self.passed / self.total * 100):.1f}%" if self.total > 0 else "0.0%"
        print(f"\nSuite Results: {self.passed}/{self.total} passed ({pass_rate})")
        if self.failed > 0:
            print(f"  Failed: {self.failed}")
            for case in self.cases:
                if not case.passed:
                    print(f"  - {case.name}")


class SuiteRunner:
    """
    Runs the cases of a suite against one matcher.

    Suite layout (YAML, or JSON since JSON is valid YAML):

        clock: "2024-01-01T10:00:00Z"     # fixes NOW/UTCNOW
        functions: {TENANT: acme}         # constant {{TENANT()}} functions
        config: {capture_policy: first}
        cases:
          - name: create job
            mode: subset
            expected: '{"id": "[[JOB_ID]]"}'
            actual: '{"id": "17", "extra": true}'
            expect_captures: {JOB_ID: "17"}
          - name: fetch job
            expected: '{"id": "{{JOB_ID}}"}'
            actual: '{"id": "17"}'

    A registry passed in is used as-is; the clock and functions blocks only
    apply to the registry the runner builds itself.
    """

    def __init__(self, suite: dict, registry: Optional[FunctionRegistry] = None):
        if not isinstance(suite, dict):
            raise InvalidArgumentError("Suite must be a mapping", "suite")

        self.config = MatcherConfig.from_dict(suite.get("config"))

        if registry is None:
            registry = FunctionRegistry(clock=_build_clock(suite.get("clock")))
            for name, value in (suite.get("functions") or {}).items():
                registry.register(str(name), _constant(value))
        elif suite.get("clock") or suite.get("functions"):
            logger.debug("Suite clock/functions ignored, using the given registry")

        self.registry = registry
        self.matcher = JsonMatcher(self.registry, self.config)
        self.cases = [
            SuiteCase.from_dict(case, i) for i, case in enumerate(suite.get("cases") or [])
        ]
        self.variables: dict[str, Any] = {}

    @classmethod
    def from_file(cls, path: str | Path, registry: Optional[FunctionRegistry] = None) -> SuiteRunner:
        """Load a suite from a YAML or JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Suite file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        try:
            suite = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise InvalidArgumentError(f"Failed to parse suite file: {e}", "path") from e

        return cls(suite or {}, registry)

    def run_case(self, case: SuiteCase) -> CaseResult:
        """Run one case, then make its captures available to later cases."""
        expected = substitute_variables(case.expected, self.variables)
        actual = substitute_variables(case.actual, self.variables)

        try:
            result = self.matcher.match(expected, actual, case.mode)
        except TemplateDiffError as e:
            error = f"{type(e).__name__}: {e}"
            if case.expect_error == type(e).__name__:
                return CaseResult(case.name, True, error=error)
            return CaseResult(case.name, False, error=error)

        self.variables.update(result.captures)

        failures = []
        if case.expect_error:
            failures.append(f"Expected {case.expect_error}, but the comparison completed")

        if case.expect_match and not result.success:
            failures.extend(str(d) for d in result.differences)
        elif not case.expect_match and result.success:
            failures.append("Expected a mismatch, but the documents matched")

        failures.extend(self._check_captures(case, result))

        return CaseResult(case.name, not failures, result=result, failures=failures)

    def run(self, print_report: bool = True) -> SuiteReport:
        """
        Run all cases in order.

        Args:
            print_report: Whether to print per-case lines and the summary

        Returns:
            SuiteReport with all results
        """
        self.variables = {}
        report = SuiteReport()

        for case in self.cases:
            case_result = self.run_case(case)
            report.add(case_result)

            if print_report:
                print(f"{'PASS' if case_result.passed else 'FAIL'}: {case.name}")
                if case_result.error and not case_result.passed:
                    print(f"    {case_result.error}")
                for failure in case_result.failures:
                    print(f"    {failure}")

        logger.debug("Suite finished: %d/%d passed", report.passed, report.total)

        if print_report:
            report.print_summary()

        return report

    def _check_captures(self, case: SuiteCase, result: MatchResult) -> list[str]:
        failures = []
        for name, wanted in case.expect_captures.items():
            if name not in result.captures:
                failures.append(f"Capture '{name}' was not recorded")
                continue
            try:
                wanted_value = parse(json.dumps(wanted, default=_json_default), "expected capture")
            except (TemplateDiffError, TypeError, ValueError) as e:
                failures.append(f"Capture '{name}': cannot use expected value: {e}")
                continue

            # Expected capture values are literals: no captures, no functions
            check = StructuralComparator(MatchMode.EXACT, placeholders=False)
            check.compare(wanted_value, result.captures[name])
            for difference in check.differences:
                failures.append(f"Capture '{name}': {difference}")
        return failures


def substitute_variables(text: str, variables: dict[str, Any]) -> str:
    """
    Replace {{NAME}} with captured values.

    Strings are inserted as their escaped content (the placeholder is
    expected to sit inside quotes); other values as JSON text. Unknown
    names are left in place.
    """
    if not variables:
        return text

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        value = variables[name]
        if isinstance(value, str):
            return json.dumps(value, ensure_ascii=False)[1:-1]
        return render(value)

    return VARIABLE_PATTERN.sub(replace, text)


def run_suite(path: str | Path, print_report: bool = True) -> SuiteReport:
    """
    Run a suite file.

        from templatediff.suite import run_suite
        report = run_suite("suites/jobs.yaml")
    """
    return SuiteRunner.from_file(path).run(print_report=print_report)


def _as_json_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=_json_default)


def _json_default(value: Any) -> Any:
    # YAML turns unquoted timestamps into datetime objects
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _build_clock(value: Any) -> Optional[FixedClock]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return FixedClock(value)
    return FixedClock.parse(str(value))


def _constant(value: Any):
    text = value if isinstance(value, str) else json.dumps(value, default=_json_default)
    return lambda: text
