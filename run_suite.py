#!/usr/bin/env python
"""Run a templatediff suite file from the command line."""

import argparse
import json
import logging
import sys
from pathlib import Path

from templatediff import SuiteRunner, TemplateDiffError


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Match actual JSON documents against expected templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_suite.py suites/jobs.yaml
  python run_suite.py suites/jobs.yaml -r report.json
  python run_suite.py --suite suites/jobs.yaml --report report.json --quiet
        """
    )

    parser.add_argument(
        "suite",
        nargs="?",
        help="Path to YAML/JSON suite file"
    )

    # Also support named arguments
    parser.add_argument("-s", "--suite", dest="suite_named", help="Path to suite file")
    parser.add_argument("-r", "--report", help="Path to output JSON report file")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress console output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    suite_path = args.suite or args.suite_named
    if not suite_path:
        parser.error("Suite path is required")

    if not Path(suite_path).exists():
        print(f"Error: Suite file not found: {suite_path}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"Suite: {suite_path}\n")

    try:
        runner = SuiteRunner.from_file(suite_path)
    except TemplateDiffError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report = runner.run(print_report=not args.quiet)

    if args.report:
        with open(args.report, 'w', encoding='utf-8') as f:
            json.dump(report.to_dict(), indent=2, fp=f)
        if not args.quiet:
            print(f"\nReport saved to: {args.report}")

    return 0 if report.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
