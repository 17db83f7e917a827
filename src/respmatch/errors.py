"""Exception hierarchy for respmatch.

Matching itself never raises: every comparison ends in a boolean verdict.
The errors here cover the edges around a verdict:

- configuration that fails validation
- response objects that cannot be turned into a snapshot
- response bodies that cannot be drained
- assertion helpers that turn a ``False`` verdict into a test failure

All errors inherit from RespMatchError and carry:
- error_code: an ErrorCode for programmatic handling
- context: ErrorContext with the offending field/value
- cause: the underlying exception, if any
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Error codes, grouped by category.

    - E2xx: configuration errors
    - E3xx: response snapshot errors
    - E4xx: match assertion errors
    - E9xx: unknown/internal errors
    """

    INVALID_CONFIG = "E202"

    RESPONSE_ADAPT_FAILED = "E301"
    BODY_READ_FAILED = "E302"

    MATCH_FAILED = "E401"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 300:
            return "config"
        elif code_num < 400:
            return "response"
        elif code_num < 500:
            return "match"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context attached to an error.

    Attributes:
        field: Name of the setting or attribute involved.
        value: The offending value.
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    field: str | None = None
    value: Any = None
    extra: dict[str, Any] = dataclasses.field(default_factory=dict)
    timestamp: datetime = dataclasses.field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "field": self.field,
            "value": self.value,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}


class RespMatchError(Exception):
    """Base exception for all respmatch errors.

    Example:
        try:
            settings = load_config("respmatch.yaml")
        except RespMatchError as e:
            print(f"Error [{e.error_code.value}]: {e.message}")
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]
        if self.context.field:
            parts.append(f"field={self.context.field}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigValidationError(RespMatchError):
    """A matcher setting has an invalid value."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        context: ErrorContext | None = None,
        **kwargs: Any,
    ) -> None:
        context = context or ErrorContext()
        context.field = field
        context.value = value
        super().__init__(message=message, context=context, **kwargs)


class ResponseAdaptError(RespMatchError):
    """An object could not be turned into a ResponseSnapshot.

    Raised for operands that expose neither a status code and headers nor
    any readable body. This is a caller error, not a mismatch.
    """

    error_code = ErrorCode.RESPONSE_ADAPT_FAILED
    default_message = "Object does not look like an HTTP response"


class BodyReadError(RespMatchError):
    """A response body could not be drained, or was drained twice."""

    error_code = ErrorCode.BODY_READ_FAILED
    default_message = "Failed to read response body"


class MatchAssertionError(RespMatchError, AssertionError):
    """Raised by the assertion helpers when expected and actual do not match."""

    error_code = ErrorCode.MATCH_FAILED
    default_message = "Values did not match"

    def __init__(self, message: str | None = None, actual: Any = None, expected: Any = None):
        self.actual = actual
        self.expected = expected
        super().__init__(message=message)
