"""count_comparisons - compare a query's row count to a number without COUNT(*)."""

from __future__ import annotations

from count_comparisons.comparisons import (
    CountComparator,
    count_at_least,
    count_at_most,
    count_equals,
    count_greater_than,
    count_less_than,
)
from count_comparisons.errors import (
    CountComparisonError,
    InvalidArgumentError,
    InvalidSqlError,
)
from count_comparisons.query import Query

__version__ = "0.1.0"

__all__ = [
    "count_at_least",
    "count_at_most",
    "count_equals",
    "count_greater_than",
    "count_less_than",
    "CountComparator",
    "CountComparisonError",
    "InvalidArgumentError",
    "InvalidSqlError",
    "Query",
]
