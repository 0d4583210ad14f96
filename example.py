"""Example usage of the templatediff matcher."""

import json

from templatediff import (
    FixedClock,
    FunctionRegistry,
    JsonMatcher,
    JsonMismatchError,
    assert_subset_match,
)

# Template for a job API response: the id is captured, the timestamp is
# produced by a function and every other field must match literally.
expected_job = """
{
    "id": "[[JOB_ID]]",
    "status": "complete",
    "createdAt": "{{UTCNOW()}}",
    "owner": {"name": "John", "tenant": "{{TENANT()}}"},
    "attempts": [[ATTEMPTS]],
    "tags": ["nightly", "[[SECOND_TAG]]"]
}
"""

actual_job = """
{
    "id": "f3b1c2d4",
    "status": "complete",
    "createdAt": "2024-01-01T10:00:00.000Z",
    "owner": {"name": "John", "tenant": "acme"},
    "attempts": 2,
    "tags": ["nightly", "backfill"]
}
"""


def build_matcher():
    registry = FunctionRegistry(clock=FixedClock.parse("2024-01-01T10:00:00Z"))
    registry.register("TENANT", lambda: "acme")
    return JsonMatcher(registry)


def main():
    print("=" * 60)
    print("templatediff - Example")
    print("=" * 60)

    matcher = build_matcher()
    result = matcher.exact_match(expected_job, actual_job)

    print(f"\nMatch: {result.success}")
    print(f"\nCaptures:")
    for name, value in result.captures.items():
        print(f"  {name}: {value!r}")

    print("\n" + "-" * 60)
    print("Full JSON Report:")
    print(json.dumps(result.to_dict(), indent=2))


def example_with_mismatch():
    """Example that demonstrates mismatches."""
    print("\n" + "=" * 60)
    print("Example with Mismatch")
    print("=" * 60)

    mismatched_job = """
    {
        "id": "f3b1c2d4",
        "status": "failed",
        "createdAt": "2024-01-01T10:00:00.000Z",
        "owner": {"name": "John", "tenant": "acme", "region": "eu"},
        "attempts": "2",
        "tags": ["nightly"]
    }
    """

    result = build_matcher().exact_match(expected_job, mismatched_job)

    print(f"\nMatch: {result.success}")
    print(f"Mismatches found: {len(result.differences)}")
    for difference in result.differences:
        print(f"  - [{difference.kind.value}] {difference.path}")
        print(f"    {difference.message}")


def example_with_assertion():
    """Subset assertion, as used from a test."""
    print("\n" + "=" * 60)
    print("Example with Subset Assertion")
    print("=" * 60)

    captures = assert_subset_match('{"id": "[[JOB_ID]]"}', actual_job)
    print(f"\nCaptured JOB_ID: {captures['JOB_ID']}")

    try:
        assert_subset_match('{"status": "running"}', actual_job, because="the job was just queued")
    except JsonMismatchError as e:
        print(f"\n{e}")


if __name__ == "__main__":
    main()
    example_with_mismatch()
    example_with_assertion()
