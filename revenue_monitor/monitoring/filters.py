"""
Composable filter clauses for listing queries.

A ``FilterBuilder`` accumulates SQLAlchemy predicates for whichever optional
parameters a caller supplied and applies them conjunctively to a base
``Select``. Values are always bound parameters; absent values add nothing.
"""

from datetime import date
from typing import Any, Callable, List, Optional, TypeVar

from sqlalchemy import and_
from sqlalchemy.sql import Select

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}

ParsedType = TypeVar("ParsedType")


class InvalidFilterValue(ValueError):
    """A query parameter that was supplied but cannot be read as its type."""

    def __init__(self, name: str, value: str, expected: str):
        super().__init__(f"{name}: expected {expected}, got {value!r}")
        self.name = name
        self.value = value


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class FilterBuilder:
    """Accumulates typed predicate clauses; the base query is never mutated."""

    def __init__(self):
        self._clauses: List[Any] = []

    @property
    def clauses(self) -> List[Any]:
        return list(self._clauses)

    def where(self, clause: Any) -> "FilterBuilder":
        """Add an unconditional clause."""
        self._clauses.append(clause)
        return self

    def equals(self, column: Any, value: Any) -> "FilterBuilder":
        if not _is_absent(value):
            self._clauses.append(column == value)
        return self

    def at_least(self, column: Any, value: Any) -> "FilterBuilder":
        if not _is_absent(value):
            self._clauses.append(column >= value)
        return self

    def at_most(self, column: Any, value: Any) -> "FilterBuilder":
        if not _is_absent(value):
            self._clauses.append(column <= value)
        return self

    def between(self, column: Any, lower: Any = None, upper: Any = None) -> "FilterBuilder":
        """Inclusive range; either bound may be omitted."""
        return self.at_least(column, lower).at_most(column, upper)

    def flag(self, column: Any, value: Optional[bool]) -> "FilterBuilder":
        if value is not None:
            self._clauses.append(column.is_(value))
        return self

    def apply(self, query: Select) -> Select:
        """Return ``query`` narrowed by every accumulated clause."""
        if not self._clauses:
            return query
        return query.where(and_(*self._clauses))


# ===== QUERY PARAMETER PARSING =====


def parse_flag(value: Optional[str]) -> Optional[bool]:
    """Interpret a query-string boolean; unrecognised values mean "no constraint"."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def parse_limit(value: Optional[str], default: Optional[int], maximum: int) -> Optional[int]:
    """Validate a ``limit`` query parameter.

    A positive integer is used as given, capped at ``maximum``. Missing,
    non-numeric, zero or negative values fall back to ``default``.
    """
    if value is None:
        return default
    try:
        limit = int(str(value).strip())
    except ValueError:
        return default
    if limit < 1:
        return default
    return min(limit, maximum)


def _parse_optional(
    value: Optional[str], name: str, convert: Callable[[str], ParsedType], expected: str
) -> Optional[ParsedType]:
    if _is_absent(value):
        return None
    try:
        return convert(value.strip())
    except ValueError:
        raise InvalidFilterValue(name, value, expected)


def parse_int(value: Optional[str], name: str) -> Optional[int]:
    """Integer filter value; blank means absent, anything else unparseable is an error."""
    return _parse_optional(value, name, int, "an integer")


def parse_float(value: Optional[str], name: str) -> Optional[float]:
    return _parse_optional(value, name, float, "a number")


def parse_date(value: Optional[str], name: str) -> Optional[date]:
    return _parse_optional(value, name, date.fromisoformat, "an ISO date (YYYY-MM-DD)")
