"""Structural matching of arbitrary values.

Two values match when they have the same shape and the same public
content. This is looser than ``==``:

- sequences match as multisets (order is ignored, duplicates are not)
- records match on their declared comparable fields only
- mappings match when every expected key matches; extra actual keys are ignored

Example:
    >>> from respmatch.match import matches
    >>> matches([1, 2, 2], [2, 1, 2])
    True
    >>> matches({"a": 1}, {"a": 1, "b": 2})
    True
    >>> matches(1, "1")
    False
"""

from __future__ import annotations

import dataclasses
import functools
import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Builtin types whose no-argument constructor yields their zero value.
ZERO_VALUE_TYPES = (bool, int, float, complex, str, bytes, list, tuple, dict, set, frozenset)


class Kind(Enum):
    """The shapes a value can take during matching."""

    NULL = "null"
    SEQUENCE = "sequence"
    RECORD = "record"
    MAPPING = "mapping"
    SCALAR = "scalar"


@functools.lru_cache(maxsize=1024)
def comparable_fields(cls: type) -> tuple[str, ...] | None:
    """Return the field names of ``cls`` that take part in matching.

    The set is declared, never discovered: an explicit
    ``__comparable_fields__`` attribute wins, then dataclass fields with
    ``compare=True``, then pydantic model fields, then named tuple fields.
    Names starting with an underscore are private and always dropped.

    Returns None when ``cls`` is not a record type.
    """
    declared = getattr(cls, "__comparable_fields__", None)
    if declared is not None:
        names: tuple[str, ...] = tuple(declared)
    elif dataclasses.is_dataclass(cls):
        names = tuple(f.name for f in dataclasses.fields(cls) if f.compare)
    elif issubclass(cls, BaseModel):
        names = tuple(cls.model_fields)
    elif issubclass(cls, tuple) and hasattr(cls, "_fields"):
        names = tuple(cls._fields)
    else:
        return None

    return tuple(name for name in names if not name.startswith("_"))


def kind_of(value: Any) -> Kind:
    """Classify a value for matching."""
    if value is None:
        return Kind.NULL
    if comparable_fields(type(value)) is not None:
        return Kind.RECORD
    if isinstance(value, (list, tuple)):
        return Kind.SEQUENCE
    if isinstance(value, Mapping):
        return Kind.MAPPING
    return Kind.SCALAR


def zero_value(value: Any) -> Any:
    """Return what a missing mapping key reads as when ``value`` is expected.

    Exact builtin types give their zero value; anything else gives None.
    """
    if type(value) in ZERO_VALUE_TYPES:
        return type(value)()
    return None


class StructuralMatcher:
    """Recursive, expected-driven structural matcher.

    The matcher keeps no state between calls, so one instance can be shared
    freely. Both operands must have the same runtime type at every position;
    a type mismatch anywhere is a non-match for that subtree, never an error.

    Example:
        >>> matcher = StructuralMatcher()
        >>> matcher.matches({"ids": [3, 1, 2]}, {"ids": [1, 2, 3], "extra": True})
        True
    """

    def __init__(self) -> None:
        self._handlers = {
            Kind.NULL: self._match_null,
            Kind.SEQUENCE: self._match_sequences,
            Kind.RECORD: self._match_records,
            Kind.MAPPING: self._match_mappings,
            Kind.SCALAR: self._match_scalars,
        }

    def matches(self, expected: Any, actual: Any) -> bool:
        """Return True if ``actual`` structurally matches ``expected``.

        Values nested deeper than the interpreter's recursion limit cannot
        be compared and never match.
        """
        try:
            return self._match(expected, actual)
        except RecursionError:
            logger.debug("Values nested too deeply to compare")
            return False

    def _match(self, expected: Any, actual: Any) -> bool:
        if type(expected) is not type(actual):
            return False
        return self._handlers[kind_of(expected)](expected, actual)

    def _match_null(self, expected: None, actual: None) -> bool:
        return True

    def _match_sequences(self, expected: Sequence[Any], actual: Sequence[Any]) -> bool:
        """Greedy first-fit multiset match.

        Each expected element consumes the first unused actual element that
        matches it, so multiplicities are preserved while order is not.
        """
        if len(expected) != len(actual):
            return False

        used: set[int] = set()
        for item in expected:
            for index, candidate in enumerate(actual):
                if index in used:
                    continue
                if self._match(item, candidate):
                    used.add(index)
                    break
            else:
                return False
        return True

    def _match_records(self, expected: Any, actual: Any) -> bool:
        for name in comparable_fields(type(expected)) or ():
            if not self._match(getattr(expected, name), getattr(actual, name)):
                return False
        return True

    def _match_mappings(self, expected: Mapping[Any, Any], actual: Mapping[Any, Any]) -> bool:
        # Only expected keys are visited; a key missing from actual reads as
        # the zero value of the expected value's type.
        for key, value in expected.items():
            if key in actual:
                candidate = actual[key]
            else:
                candidate = zero_value(value)
            if not self._match(value, candidate):
                return False
        return True

    def _match_scalars(self, expected: Any, actual: Any) -> bool:
        try:
            return bool(expected == actual)
        except (TypeError, ValueError):
            return False


_default_matcher = StructuralMatcher()


def matches(expected: Any, actual: Any) -> bool:
    """Determine whether two arbitrary values match.

    A mapping key missing from ``actual`` reads as the zero value of the
    expected value's type (``0``, ``""``, ``[]``, ``{}`` ...), or ``None``
    for any other type. ``{"a": 0}`` therefore matches ``{}``.

    Args:
        expected: The reference value; its keys and fields drive the traversal.
        actual: The value under test.

    Returns:
        True if ``actual`` structurally matches ``expected``.
    """
    return _default_matcher.matches(expected, actual)
