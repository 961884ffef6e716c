"""Runtime type checks for fixture lookups.

FixtureStore.get_fixture() and get_fixture_value() accept an optional
expectation: a class, a tuple of classes, or a predicate callable.
"""

from typing import Any

from vigil.contracts.views import TypeExpectation


def describe_expectation(expected: TypeExpectation) -> str:
    """Human-readable name of an expectation, for error messages."""
    if isinstance(expected, type):
        return expected.__name__
    if isinstance(expected, tuple):
        return " | ".join(describe_expectation(item) for item in expected)
    return getattr(expected, "__name__", repr(expected))


def matches_expectation(value: Any, expected: TypeExpectation) -> bool:
    """Check a value against a class, a tuple of classes, or a predicate.

    Raises:
        TypeError: If the expectation is none of those
    """
    if isinstance(expected, type):
        return isinstance(value, expected)
    if isinstance(expected, tuple):
        if not all(isinstance(item, type) for item in expected):
            raise TypeError(f"Invalid type expectation: {expected!r}")
        return isinstance(value, expected)
    if callable(expected):
        return bool(expected(value))
    raise TypeError(f"Invalid type expectation: {expected!r}")
