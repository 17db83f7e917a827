"""Matching of HTTP responses.

A response is reduced to a ResponseSnapshot: status code, header and
trailer multimaps, and a body that can be drained exactly once. Two
snapshots match when, in order:

1. the status codes are equal
2. the expected headers are a structural subset of the actual headers
3. both bodies drain (or both fail to drain, which counts as a match)
4. the expected trailers are a structural subset of the actual trailers
5. the bodies match: structurally if the expected body parses as JSON,
   byte for byte otherwise

Example:
    >>> import httpx
    >>> from respmatch.response import matches_response
    >>> expected = httpx.Response(200, content=b'{"a": [1, 2]}')
    >>> actual = httpx.Response(200, content=b'{"a": [2, 1]}')
    >>> matches_response(expected, actual)
    True
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from respmatch.config import MatchSettings
from respmatch.errors import BodyReadError, ResponseAdaptError
from respmatch.match import StructuralMatcher

logger = logging.getLogger(__name__)

Multimap = dict[str, list[str]]

# Failures a body reader may raise while draining.
READ_ERRORS: tuple[type[BaseException], ...] = (OSError, httpx.HTTPError, httpx.StreamError)

UNPARSEABLE = object()


def to_multimap(headers: Any) -> Multimap:
    """Normalize headers or trailers into a lower-cased name -> values multimap.

    Accepts httpx.Headers, any Mapping or object with ``items()`` (single
    string or list of strings per name), or an iterable of (name, value)
    pairs.
    """
    result: Multimap = {}
    if headers is None:
        return result

    if isinstance(headers, httpx.Headers):
        items: Iterable[tuple[str, Any]] = headers.multi_items()
    elif isinstance(headers, Mapping) or hasattr(headers, "items"):
        items = headers.items()
    else:
        items = headers

    for name, value in items:
        values = result.setdefault(str(name).lower(), [])
        if isinstance(value, (list, tuple)):
            values.extend(str(v) for v in value)
        else:
            values.append(str(value))
    return result


@dataclass
class ResponseSnapshot:
    """Read-only view of an HTTP response for matching.

    Attributes:
        status_code: HTTP status code.
        headers: Lower-cased header name -> list of values.
        trailers: Lower-cased trailer name -> list of values.
        reader: Callable returning the full body; invoked at most once.
    """

    status_code: int
    headers: Multimap = field(default_factory=dict)
    trailers: Multimap = field(default_factory=dict)
    reader: Callable[[], bytes] | None = field(default=None, repr=False)
    _consumed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_content(
        cls,
        status_code: int,
        content: bytes = b"",
        headers: Any = None,
        trailers: Any = None,
    ) -> ResponseSnapshot:
        """Build a snapshot around an in-memory body."""
        return cls(
            status_code=status_code,
            headers=to_multimap(headers),
            trailers=to_multimap(trailers),
            reader=lambda: content,
        )

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> ResponseSnapshot:
        """Build a snapshot from an httpx response; httpx exposes no trailers."""
        return cls(
            status_code=response.status_code,
            headers=to_multimap(response.headers),
            reader=lambda: _read_httpx(response),
        )

    def read_body(self) -> bytes:
        """Drain the body.

        Raises:
            BodyReadError: If the body was already drained or the reader failed.
        """
        if self._consumed:
            raise BodyReadError("Response body already consumed")
        self._consumed = True

        if self.reader is None:
            return b""
        try:
            return bytes(self.reader())
        except READ_ERRORS as e:
            raise BodyReadError(f"Failed to read response body: {e}", cause=e) from e


def _read_httpx(response: httpx.Response) -> bytes:
    try:
        return response.read()
    except RuntimeError as e:
        # Covers StreamConsumed/StreamClosed and async streams read synchronously.
        raise BodyReadError(f"Failed to read response body: {e}", cause=e) from e


def snapshot_of(response: Any, settings: MatchSettings | None = None) -> ResponseSnapshot:
    """Adapt a response-like object to a ResponseSnapshot.

    Supports ResponseSnapshot, httpx.Response, and duck-typed objects
    exposing ``status_code`` and ``headers`` plus a body as ``read()``,
    ``content`` or ``body``.

    Raises:
        ResponseAdaptError: If the object has no status code or headers.
    """
    if isinstance(response, ResponseSnapshot):
        return response
    if isinstance(response, httpx.Response):
        return ResponseSnapshot.from_httpx(response)

    if not hasattr(response, "status_code") or not hasattr(response, "headers"):
        raise ResponseAdaptError(
            f"Cannot match {type(response).__name__}: expected status_code and headers",
            response_type=type(response).__name__,
        )

    settings = settings or MatchSettings()
    return ResponseSnapshot(
        status_code=response.status_code,
        headers=to_multimap(response.headers),
        trailers=to_multimap(getattr(response, "trailers", None)),
        reader=_body_reader(response, settings.body_encoding),
    )


def _body_reader(response: Any, encoding: str) -> Callable[[], bytes] | None:
    read = getattr(response, "read", None)
    if callable(read):
        return lambda: _as_bytes(read(), encoding)
    for attr in ("content", "body"):
        if hasattr(response, attr):
            return lambda attr=attr: _as_bytes(getattr(response, attr), encoding)
    return None


def _as_bytes(data: Any, encoding: str) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        try:
            return data.encode(encoding)
        except UnicodeEncodeError as e:
            raise BodyReadError(f"Cannot encode response body as {encoding}: {e}", cause=e) from e
    return bytes(data)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"JSON constant {name} is not allowed")


def parse_json_body(raw: bytes, settings: MatchSettings | None = None) -> Any:
    """Parse a body as a generic JSON value.

    Returns:
        The decoded value, or UNPARSEABLE if the body is not valid JSON.
    """
    settings = settings or MatchSettings()
    kwargs: dict[str, Any] = {}
    if settings.json_numbers_as_float:
        kwargs["parse_int"] = float
    if not settings.allow_json_constants:
        kwargs["parse_constant"] = _reject_constant
    try:
        return json.loads(raw, **kwargs)
    except (ValueError, RecursionError):
        return UNPARSEABLE


class ResponseMatcher:
    """Compare two HTTP responses.

    Example:
        >>> matcher = ResponseMatcher()
        >>> matcher.matches(expected_response, actual_response)
        True
    """

    def __init__(
        self,
        settings: MatchSettings | None = None,
        matcher: StructuralMatcher | None = None,
    ) -> None:
        self.settings = settings or MatchSettings()
        self.matcher = matcher or StructuralMatcher()

    def matches(self, expected: Any, actual: Any) -> bool:
        """Return True if ``actual`` matches ``expected``."""
        expected_snap = snapshot_of(expected, self.settings)
        actual_snap = snapshot_of(actual, self.settings)

        if expected_snap.status_code != actual_snap.status_code:
            self._mismatch(
                "status code %s != %s", expected_snap.status_code, actual_snap.status_code
            )
            return False

        if not self.matcher.matches(expected_snap.headers, actual_snap.headers):
            self._mismatch("headers differ")
            return False

        expected_body, expected_error = self._drain(expected_snap, "expected")
        actual_body, actual_error = self._drain(actual_snap, "actual")
        if expected_error is not None or actual_error is not None:
            both_failed = expected_error is not None and actual_error is not None
            if not both_failed:
                self._mismatch("only one response body could be read")
            return both_failed

        if not self.matcher.matches(expected_snap.trailers, actual_snap.trailers):
            self._mismatch("trailers differ")
            return False

        return self._match_bodies(expected_body, actual_body)

    def _drain(self, snapshot: ResponseSnapshot, side: str) -> tuple[bytes, BodyReadError | None]:
        try:
            return snapshot.read_body(), None
        except BodyReadError as e:
            logger.log(self.settings.log_level, "Could not read %s body: %s", side, e)
            return b"", e

    def _match_bodies(self, expected_body: bytes, actual_body: bytes) -> bool:
        expected_value = parse_json_body(expected_body, self.settings)
        if expected_value is UNPARSEABLE:
            if expected_body != actual_body:
                self._mismatch("raw bodies differ")
                return False
            return True

        actual_value = parse_json_body(actual_body, self.settings)
        if actual_value is UNPARSEABLE:
            self._mismatch("expected a JSON body but actual body is not JSON")
            return False

        if not self.matcher.matches(expected_value, actual_value):
            self._mismatch("JSON bodies differ")
            return False
        return True

    def _mismatch(self, message: str, *args: Any) -> None:
        logger.log(self.settings.log_level, "Response mismatch: " + message, *args)


def matches_response(expected: Any, actual: Any) -> bool:
    """Determine whether two HTTP responses match.

    Args:
        expected: The reference response.
        actual: The response under test.

    Returns:
        True if the responses match.
    """
    return ResponseMatcher().matches(expected, actual)
