"""Assertion helpers built on the matchers.

Example:
    >>> assert_matches([1, 2, 3], [3, 1, 2])
    >>> expect([3, 1, 2]).to_match([1, 2, 3])
    >>> expect(actual_response).not_.to_match_response(error_response)
"""

from __future__ import annotations

from typing import Any

from respmatch.errors import MatchAssertionError
from respmatch.match import matches
from respmatch.response import matches_response


def assert_matches(expected: Any, actual: Any, description: str = "value") -> None:
    """Assert that ``actual`` structurally matches ``expected``.

    Raises:
        MatchAssertionError: If the values do not match.
    """
    if not matches(expected, actual):
        raise MatchAssertionError(
            f"Assertion failed: {description} did not match expected",
            actual=actual,
            expected=expected,
        )


def assert_response_matches(expected: Any, actual: Any, description: str = "response") -> None:
    """Assert that ``actual`` matches the ``expected`` HTTP response.

    Both responses have their bodies drained by this call.

    Raises:
        MatchAssertionError: If the responses do not match.
    """
    if not matches_response(expected, actual):
        raise MatchAssertionError(
            f"Assertion failed: {description} did not match expected response",
            actual=actual,
            expected=expected,
        )


class MatchExpectation:
    """Fluent wrapper around a value under test."""

    def __init__(self, value: Any, description: str = "value"):
        self._value = value
        self._description = description
        self._negated = False

    @property
    def not_(self) -> MatchExpectation:
        """Negate the following assertion."""
        self._negated = not self._negated
        return self

    def _assert(self, condition: bool, message: str, expected: Any) -> MatchExpectation:
        if self._negated:
            condition = not condition
            message = f"NOT {message}"
            self._negated = False

        if not condition:
            raise MatchAssertionError(
                f"Assertion failed: {self._description} {message}",
                actual=self._value,
                expected=expected,
            )
        return self

    def to_match(self, expected: Any) -> MatchExpectation:
        """Assert the wrapped value structurally matches ``expected``."""
        return self._assert(matches(expected, self._value), "to match expected", expected)

    def to_match_response(self, expected: Any) -> MatchExpectation:
        """Assert the wrapped response matches the ``expected`` response."""
        return self._assert(
            matches_response(expected, self._value),
            "to match expected response",
            expected,
        )


def expect(value: Any, description: str = "value") -> MatchExpectation:
    """Start a fluent match assertion on ``value``."""
    return MatchExpectation(value, description)
