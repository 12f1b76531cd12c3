"""Exception hierarchy for count comparisons."""

from __future__ import annotations

from numbers import Integral
from typing import Any


class CountComparisonError(Exception):
    """Base exception for this package."""


class InvalidArgumentError(CountComparisonError, TypeError):
    """Raised when a threshold or statement has an unsupported type."""


class InvalidSqlError(CountComparisonError, ValueError):
    """Raised when user supplied SQL is rejected before execution."""


def check_number_of_rows(number_of_rows: Any) -> int:
    """Return *number_of_rows* as an ``int`` or raise ``InvalidArgumentError``.

    ``bool`` is an ``int`` subclass in Python but is still rejected.
    """
    if isinstance(number_of_rows, bool) or not isinstance(number_of_rows, Integral):
        raise InvalidArgumentError(
            f"`number_of_rows` must be an int, got {number_of_rows!r}"
        )
    return int(number_of_rows)
