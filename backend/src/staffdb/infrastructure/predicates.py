"""
Conditional composition of SQL filter expressions.

Lets a query register any number of optional conditions, each driven by a
value that may be None, and fold the present ones into one WHERE clause:

    predicate = (
        PredicateBuilder()
        .add(date_filter.begin, lambda begin: User.birth_date >= begin)
        .add(date_filter.end, lambda end: User.birth_date <= end)
        .build_and()
    )

Conditions whose value is None are skipped. Values are not validated here;
an inconsistent combination simply matches nothing.
"""

import logging
from typing import Callable, TypeVar

from sqlalchemy import ColumnElement, and_, or_, true

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PredicateBuilder:
    """Accumulates boolean expressions for values that are present."""

    def __init__(self) -> None:
        self._conditions: list[ColumnElement[bool]] = []

    def add(self, value: T | None, condition: Callable[[T], ColumnElement[bool]]) -> "PredicateBuilder":
        """Register ``condition(value)`` unless ``value`` is None."""
        if value is not None:
            self._conditions.append(condition(value))
        return self

    def __len__(self) -> int:
        return len(self._conditions)

    def build_and(self) -> ColumnElement[bool]:
        """
        Conjunction of all registered conditions.

        With nothing registered the result is TRUE, so the query is not
        restricted at all.
        """
        logger.debug(f"Building AND predicate from {len(self._conditions)} condition(s)")
        if not self._conditions:
            return true()
        return and_(*self._conditions)

    def build_or(self) -> ColumnElement[bool]:
        """
        Disjunction of all registered conditions.

        Also TRUE when nothing was registered: absent filters never
        restrict a query, whichever way they are combined.
        """
        logger.debug(f"Building OR predicate from {len(self._conditions)} condition(s)")
        if not self._conditions:
            return true()
        return or_(*self._conditions)
