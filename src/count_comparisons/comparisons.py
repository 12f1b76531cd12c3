"""
Row count comparisons without ``COUNT(*)``.

Compare the number of rows a statement would return against a threshold by
probing for a row at a given offset instead of counting them all::

    from count_comparisons import count_greater_than

    with engine.connect() as conn:
        count_greater_than(conn, select(users).where(users.c.active), 10)

Every function issues at most one round trip, and none for thresholds whose
answer is known up front (e.g. "more than -1 rows"). Ordering of the input
statement is ignored; filters and joins are kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from count_comparisons.probes import (
    Probe,
    plan_at_least,
    plan_at_most,
    plan_equals,
    plan_greater_than,
    plan_less_than,
)
from count_comparisons.query import Statement

logger = logging.getLogger(__name__)

Bind = Union[Connection, Session, Engine]


def _scalar(bind: Bind, probe: Probe) -> Any:
    logger.debug("Running count probe: %s", probe.statement)
    if isinstance(bind, Engine):
        with bind.connect() as connection:
            return connection.scalar(probe.statement)
    return bind.scalar(probe.statement)


def run_probe(bind: Bind, probe: Probe) -> bool:
    if not probe.needs_round_trip:
        logger.debug("Count comparison answered without a query: %s", probe.answer)
        return probe.resolve()
    return probe.resolve(_scalar(bind, probe))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def count_greater_than(bind: Bind, statement: Statement, number_of_rows: int) -> bool:
    """Return True if *statement* yields more than *number_of_rows* rows.

    Raises:
        InvalidArgumentError: If ``number_of_rows`` is not an int.
    """
    return run_probe(bind, plan_greater_than(statement, number_of_rows))


def count_less_than(bind: Bind, statement: Statement, number_of_rows: int) -> bool:
    """Return True if *statement* yields fewer than *number_of_rows* rows."""
    return run_probe(bind, plan_less_than(statement, number_of_rows))


def count_equals(bind: Bind, statement: Statement, number_of_rows: int) -> bool:
    """Return True if *statement* yields exactly *number_of_rows* rows.

    For positive thresholds both existence checks are combined into a single
    ``SELECT EXISTS(...) AND NOT EXISTS(...)`` round trip.
    """
    return run_probe(bind, plan_equals(statement, number_of_rows))


def count_at_least(bind: Bind, statement: Statement, number_of_rows: int) -> bool:
    return run_probe(bind, plan_at_least(statement, number_of_rows))


def count_at_most(bind: Bind, statement: Statement, number_of_rows: int) -> bool:
    return run_probe(bind, plan_at_most(statement, number_of_rows))


@dataclass(frozen=True)
class CountComparator:
    """A statement bound to a connection, session or engine.

    >>> users = CountComparator(session, select(User).where(User.active))
    >>> users.at_least(3)
    """

    bind: Bind
    statement: Statement

    def greater_than(self, number_of_rows: int) -> bool:
        return count_greater_than(self.bind, self.statement, number_of_rows)

    def less_than(self, number_of_rows: int) -> bool:
        return count_less_than(self.bind, self.statement, number_of_rows)

    def equals(self, number_of_rows: int) -> bool:
        return count_equals(self.bind, self.statement, number_of_rows)

    def at_least(self, number_of_rows: int) -> bool:
        return count_at_least(self.bind, self.statement, number_of_rows)

    def at_most(self, number_of_rows: int) -> bool:
        return count_at_most(self.bind, self.statement, number_of_rows)
