"""respmatch - structural matching for values and HTTP responses.

Decide whether an actual value or response matches an expected one, under
rules looser than ``==``: sequences match regardless of order, records
match on their public fields, mappings match when the expected keys match,
and JSON response bodies are compared structurally.

Quick Start:
    from respmatch import matches, matches_response

    matches([1, 2, 2], [2, 1, 2])          # True
    matches({"a": 1}, {"a": 1, "b": 2})    # True
    matches_response(expected, actual)     # httpx.Response or ResponseSnapshot
"""

from __future__ import annotations

from respmatch.assertions import (
    MatchExpectation,
    assert_matches,
    assert_response_matches,
    expect,
)
from respmatch.config import MatchSettings, load_config
from respmatch.errors import (
    BodyReadError,
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    MatchAssertionError,
    RespMatchError,
    ResponseAdaptError,
)
from respmatch.match import Kind, StructuralMatcher, comparable_fields, kind_of, matches
from respmatch.response import (
    UNPARSEABLE,
    ResponseMatcher,
    ResponseSnapshot,
    matches_response,
    parse_json_body,
    snapshot_of,
)

__version__ = "0.1.0"

__all__ = [
    # Structural matching
    "matches",
    "StructuralMatcher",
    "Kind",
    "kind_of",
    "comparable_fields",
    # Response matching
    "matches_response",
    "ResponseMatcher",
    "ResponseSnapshot",
    "snapshot_of",
    "parse_json_body",
    "UNPARSEABLE",
    # Assertions
    "assert_matches",
    "assert_response_matches",
    "expect",
    "MatchExpectation",
    # Configuration
    "MatchSettings",
    "load_config",
    # Errors
    "RespMatchError",
    "ErrorCode",
    "ErrorContext",
    "ConfigValidationError",
    "ResponseAdaptError",
    "BodyReadError",
    "MatchAssertionError",
]
