"""
Planning of count comparisons.

Each ``plan_*`` function validates the threshold, then decides how the
comparison is answered: either with a constant (no round trip at all) or with
exactly one probe statement. Execution lives in ``comparisons`` (sync) and
``aio`` (async); both read the probe result through ``Probe.resolve``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, Optional

from sqlalchemy import and_, select
from sqlalchemy.sql.expression import Select

from count_comparisons.errors import check_number_of_rows
from count_comparisons.query import Query, Statement

# row: true iff the probe returned a row; scalar: truthiness of the value
ProbeKind = Literal["row", "scalar"]


@dataclass(frozen=True)
class Probe:
    statement: Optional[Select] = None
    kind: ProbeKind = "row"
    answer: Optional[bool] = None
    negated: bool = False

    @classmethod
    def constant(cls, answer: bool) -> Probe:
        return cls(answer=answer)

    @property
    def needs_round_trip(self) -> bool:
        return self.statement is not None

    def negate(self) -> Probe:
        if self.statement is None:
            return replace(self, answer=not self.answer)
        return replace(self, negated=not self.negated)

    def resolve(self, value: Any = None) -> bool:
        """Turn the scalar returned by the probe into the comparison result."""
        if self.statement is None:
            return bool(self.answer)
        if self.kind == "row":
            found = value is not None
        else:
            found = bool(value)
        return found != self.negated


def _exists_probe(query: Query, offset: int) -> Probe:
    probe = query.probe().with_limit(1)
    if offset > 0:
        probe = probe.with_offset(offset)
    return Probe(statement=probe.statement)


def plan_greater_than(statement: Statement, number_of_rows: int) -> Probe:
    number_of_rows = check_number_of_rows(number_of_rows)
    query = Query.of(statement)

    if number_of_rows < 0:
        return Probe.constant(True)
    # a row at offset n exists iff there are more than n rows
    return _exists_probe(query, number_of_rows)


def plan_less_than(statement: Statement, number_of_rows: int) -> Probe:
    number_of_rows = check_number_of_rows(number_of_rows)
    return plan_greater_than(statement, number_of_rows - 1).negate()


def plan_equals(statement: Statement, number_of_rows: int) -> Probe:
    number_of_rows = check_number_of_rows(number_of_rows)
    query = Query.of(statement)

    if number_of_rows < 0:
        return Probe.constant(False)
    if number_of_rows == 0:
        return _exists_probe(query, 0).negate()

    probe = query.probe()
    expr = and_(
        probe.with_offset(number_of_rows - 1).exists_predicate(),
        ~probe.with_offset(number_of_rows).exists_predicate(),
    )
    return Probe(statement=select(expr.label("v")), kind="scalar")


def plan_at_least(statement: Statement, number_of_rows: int) -> Probe:
    number_of_rows = check_number_of_rows(number_of_rows)
    return plan_less_than(statement, number_of_rows).negate()


def plan_at_most(statement: Statement, number_of_rows: int) -> Probe:
    number_of_rows = check_number_of_rows(number_of_rows)
    return plan_greater_than(statement, number_of_rows).negate()
