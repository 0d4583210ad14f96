"""Tests for assertion helpers, the suite runner and the command line."""

import json
import textwrap

import pytest
from templatediff import (
    FunctionNotFoundError,
    FunctionRegistry,
    InvalidArgumentError,
    JsonMismatchError,
    SuiteRunner,
    assert_exact_match,
    assert_subset_match,
    run_suite,
)
from templatediff.suite import substitute_variables

import run_suite as cli


class TestAssertions:
    """Test the assertion helpers."""

    def test_exact_match_returns_captures(self):
        captures = assert_exact_match('{"id": "[[ID]]"}', '{"id": "abc"}')

        assert captures == {"ID": "abc"}

    def test_subset_match_returns_captures(self):
        captures = assert_subset_match('{"id": "[[ID]]"}', '{"id": 5, "other": true}')

        assert captures == {"ID": 5}

    def test_failure_lists_every_difference(self):
        """Test that the error message reports all mismatches, not just the first."""
        with pytest.raises(JsonMismatchError) as exc_info:
            assert_exact_match('{"a": 1, "b": 2}', '{"a": 9, "b": 8, "c": 0}')

        message = str(exc_info.value)
        assert "found 3 mismatch(es)" in message
        assert "$.a: Value mismatch" in message
        assert "$.b: Value mismatch" in message
        assert "$.c: Unexpected property 'c'" in message
        assert len(exc_info.value.result.differences) == 3

    def test_failure_is_assertion_error(self):
        """Test that test runners see a plain assertion failure."""
        with pytest.raises(AssertionError):
            assert_subset_match('{"status": "running"}', '{"status": "done"}')

    def test_because(self):
        with pytest.raises(JsonMismatchError) as exc_info:
            assert_subset_match('{"a": 1}', '{"a": 2}', because="the job was queued")

        assert "contain the expected subset because the job was queued" in str(exc_info.value)

    def test_fatal_errors_propagate(self):
        """Test that function errors are not turned into assertion failures."""
        with pytest.raises(FunctionNotFoundError):
            assert_exact_match('"{{MISSING()}}"', '"x"')


class TestSubstituteVariables:
    """Test {{NAME}} substitution of earlier captures."""

    def test_string_value_escaped(self):
        text = substitute_variables('{"id": "{{ID}}"}', {"ID": 'say "hi"'})

        assert text == '{"id": "say \\"hi\\""}'

    def test_non_string_values(self):
        text = substitute_variables('{"n": {{N}}, "o": {{O}}}', {"N": 3, "O": {"a": None}})

        assert text == '{"n": 3, "o": {"a":null}}'

    def test_unknown_and_function_placeholders_untouched(self):
        text = substitute_variables('["{{OTHER}}", "{{GUID()}}"]', {"ID": "x"})

        assert text == '["{{OTHER}}", "{{GUID()}}"]'


class TestSuiteRunner:
    """Test running suites."""

    def test_cases_and_chaining(self):
        """Test subset cases, capture expectations and captured variables."""
        suite = {
            "clock": "2024-01-01T10:00:00Z",
            "functions": {"TENANT": "acme"},
            "cases": [
                {
                    "name": "create job",
                    "mode": "subset",
                    "expected": '{"id": "[[JOB_ID]]", "tenant": "{{TENANT()}}"}',
                    "actual": '{"id": "j-1", "tenant": "acme", "extra": 1}',
                    "expect_captures": {"JOB_ID": "j-1"},
                },
                {
                    "name": "fetch job",
                    "expected": '{"id": "{{JOB_ID}}", "at": "{{UTCNOW()}}"}',
                    "actual": '{"id": "j-1", "at": "2024-01-01T10:00:00.000Z"}',
                },
            ],
        }

        report = SuiteRunner(suite).run(print_report=False)

        assert report.total == 2
        assert report.passed == 2
        assert report.failed == 0

    def test_inline_structures(self):
        """Test that non-string case documents are serialised to JSON."""
        suite = {
            "cases": [{
                "expected": {"count": "[[COUNT]]", "items": [1, 2]},
                "actual": {"count": 2, "items": [1, 2]},
                "expect_captures": {"COUNT": 2},
            }]
        }

        report = SuiteRunner(suite).run(print_report=False)

        assert report.passed == 1
        assert report.cases[0].name == "case-1"

    def test_mismatch_fails_case(self):
        """Test that differences become case failures."""
        suite = {"cases": [{"name": "status", "expected": '{"s": "ok"}', "actual": '{"s": "bad"}'}]}

        report = SuiteRunner(suite).run(print_report=False)

        assert report.failed == 1
        assert report.cases[0].failures == ['$.s: Value mismatch. Expected "ok", got "bad".']

    def test_expected_mismatch(self):
        suite = {"cases": [
            {"name": "differs", "expected": '[1]', "actual": '[1, 2]', "expect_match": False},
            {"name": "same", "expected": '[1]', "actual": '[1]', "expect_match": False},
        ]}

        report = SuiteRunner(suite).run(print_report=False)

        assert [c.passed for c in report.cases] == [True, False]

    def test_capture_expectation_mismatch(self):
        suite = {"cases": [{
            "expected": '{"id": "[[ID]]"}',
            "actual": '{"id": "j-1"}',
            "expect_captures": {"ID": "j-2", "OTHER": 1},
        }]}

        report = SuiteRunner(suite).run(print_report=False)

        failures = report.cases[0].failures
        assert report.failed == 1
        assert failures[0].startswith("Capture 'ID': $: Value mismatch")
        assert failures[1] == "Capture 'OTHER' was not recorded"

    def test_expected_error(self):
        """Test that fatal errors fail a case unless the case expects them."""
        suite = {"cases": [
            {"name": "expects", "expected": '"{{NOPE()}}"', "actual": '"x"',
             "expect_error": "FunctionNotFoundError"},
            {"name": "unexpected", "expected": '"{{NOPE()}}"', "actual": '"x"'},
            {"name": "bad json", "expected": '{', "actual": '{}'},
        ]}

        report = SuiteRunner(suite).run(print_report=False)

        assert [c.passed for c in report.cases] == [True, False, False]
        assert report.cases[1].error.startswith("FunctionNotFoundError")
        assert report.cases[2].error.startswith("ParseError")

    def test_capture_policy_config(self):
        suite = {
            "config": {"capture_policy": "first"},
            "cases": [{
                "expected": '["[[X]]", "[[X]]"]',
                "actual": '[1, 2]',
                "expect_captures": {"X": 1},
            }],
        }

        assert SuiteRunner(suite).run(print_report=False).passed == 1

    def test_runs_start_without_earlier_captures(self):
        """Test that a second run does not see captures from the first."""
        suite = {"cases": [
            # The actual text escapes a brace, so only the expected side is substituted
            {"name": "literal", "expected": '"{{ID}}"', "actual": '"\\u007b{ID}}"'},
            {"name": "capture", "expected": '"[[ID]]"', "actual": '"j-1"'},
        ]}
        runner = SuiteRunner(suite)

        first = runner.run(print_report=False)
        second = runner.run(print_report=False)

        assert [c.passed for c in first.cases] == [True, True]
        assert [c.passed for c in second.cases] == [True, True]
        assert runner.variables == {"ID": "j-1"}

    def test_capture_expectations_are_literal(self):
        """Test that placeholder-shaped expectations are compared as plain strings."""
        suite = {"cases": [{
            "name": "literal captures",
            "expected": '{"id": "[[ID]]", "name": "[[NAME]]"}',
            "actual": '{"id": "{{TENANT()}}", "name": "abc"}',
            "expect_captures": {"ID": "{{TENANT()}}", "NAME": "[[OTHER]]"},
        }]}

        report = SuiteRunner(suite).run(print_report=False)

        assert report.failed == 1
        assert report.cases[0].error is None
        assert report.cases[0].failures == [
            'Capture \'NAME\': $: Value mismatch. Expected "[[OTHER]]", got "abc".'
        ]

    def test_given_registry_used_as_is(self):
        """Test that suite functions are not added to a caller's registry."""
        registry = FunctionRegistry(include_builtins=False)
        suite = {"functions": {"TENANT": "acme"}, "cases": []}

        runner = SuiteRunner(suite, registry)

        assert runner.registry is registry
        assert registry.registered_functions() == []

    def test_invalid_cases(self):
        with pytest.raises(InvalidArgumentError):
            SuiteRunner({"cases": [{"expected": "{}"}]})
        with pytest.raises(InvalidArgumentError):
            SuiteRunner({"cases": [{"expected": "{}", "actual": "{}", "mode": "fuzzy"}]})
        with pytest.raises(InvalidArgumentError):
            SuiteRunner(["not", "a", "mapping"])

    def test_report_to_dict(self):
        suite = {"cases": [
            {"name": "a", "expected": '1', "actual": '1'},
            {"name": "b", "expected": '1', "actual": '2'},
        ]}

        data = SuiteRunner(suite).run(print_report=False).to_dict()

        assert data["summary"] == {
            "total_cases": 2,
            "passed": 1,
            "failed": 1,
            "pass_rate": "50.0%",
        }
        assert data["cases"][0]["result"]["success"] is True
        assert data["cases"][1]["failures"] == ["$: Value mismatch. Expected 1, got 2."]

    def test_print_report(self, capsys):
        suite = {"cases": [{"name": "ok", "expected": '1', "actual": '1'}]}

        SuiteRunner(suite).run(print_report=True)

        output = capsys.readouterr().out
        assert "PASS: ok" in output
        assert "Suite Results: 1/1 passed (100.0%)" in output


SUITE_YAML = textwrap.dedent("""\
    clock: "2024-01-01T10:00:00Z"
    cases:
      - name: create job
        mode: subset
        expected: '{"id": "[[JOB_ID]]", "createdAt": "{{UTCNOW()}}"}'
        actual: '{"id": "17", "createdAt": "2024-01-01T10:00:00.000Z", "owner": "john"}'
        expect_captures:
          JOB_ID: "17"
      - name: fetch job
        expected:
          id: "{{JOB_ID}}"
          status: done
        actual:
          id: "17"
          status: done
""")


class TestSuiteFiles:
    """Test loading suites from disk and the command line."""

    def test_from_file(self, tmp_path):
        path = tmp_path / "suite.yaml"
        path.write_text(SUITE_YAML)

        report = run_suite(path, print_report=False)

        assert report.total == 2
        assert report.passed == 2

    def test_json_suite_file(self, tmp_path):
        path = tmp_path / "suite.json"
        path.write_text(json.dumps({"cases": [{"expected": '{"a": 1}', "actual": '{"a": 1}'}]}))

        assert SuiteRunner.from_file(path).run(print_report=False).passed == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SuiteRunner.from_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("cases: [unclosed")

        with pytest.raises(InvalidArgumentError):
            SuiteRunner.from_file(path)

    def test_cli_success_writes_report(self, tmp_path):
        suite_path = tmp_path / "suite.yaml"
        suite_path.write_text(SUITE_YAML)
        report_path = tmp_path / "report.json"

        exit_code = cli.main([str(suite_path), "-q", "-r", str(report_path)])

        assert exit_code == 0
        report = json.loads(report_path.read_text())
        assert report["summary"]["passed"] == 2

    def test_cli_failure_exit_code(self, tmp_path, capsys):
        suite_path = tmp_path / "suite.yaml"
        suite_path.write_text(textwrap.dedent("""\
            cases:
              - name: wrong status
                expected: '{"status": "done"}'
                actual: '{"status": "failed"}'
        """))

        exit_code = cli.main(["--suite", str(suite_path)])

        assert exit_code == 1
        output = capsys.readouterr().out
        assert "FAIL: wrong status" in output
        assert '$.status: Value mismatch. Expected "done", got "failed".' in output

    def test_cli_missing_suite(self, tmp_path, capsys):
        exit_code = cli.main([str(tmp_path / "nope.yaml")])

        assert exit_code == 1
        assert "Suite file not found" in capsys.readouterr().err
