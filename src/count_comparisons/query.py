"""
Immutable query value used to derive count probes.

A ``Query`` wraps a SQLAlchemy selectable and is tagged as either a
structured ``Select`` or a raw SQL source (``text()``, a textual select or a
set operation such as ``UNION``). Raw sources cannot take a new projection,
offset or ordering directly, so they are wrapped as a derived table first.
Every derivation returns a new ``Query``; the wrapped statement is never
mutated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Union

from sqlalchemy import literal_column, select, text
from sqlalchemy.sql.expression import (
    ColumnElement,
    CompoundSelect,
    Exists,
    Select,
    TextClause,
    TextualSelect,
)
from sqlalchemy.sql.selectable import GenerativeSelect

from count_comparisons.errors import InvalidArgumentError

# Name given to the derived table when a source has to be wrapped
SUBQUERY_ALIAS = "t1"

# Projection used by every probe: ``SELECT 1 AS one``
LITERAL_ONE = literal_column("1").label("one")

# Same pattern text() uses to find ":name" bind parameters
_BIND_PARAM_RE = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")


def literal_text(sql: str) -> TextClause:
    """Build a ``text()`` clause that renders *sql* verbatim.

    Colons that ``text()`` would read as bind parameters (JSON literals or
    strings such as ``'a :x'``) are escaped; ``::`` casts are left alone.
    """
    return text(_BIND_PARAM_RE.sub(r"\\:\1", sql))


RawSource = Union[TextClause, TextualSelect, CompoundSelect]
Statement = Union[str, Select, RawSource, "Query"]


def _is_paginated(stmt: GenerativeSelect) -> bool:
    return (
        stmt._limit_clause is not None
        or stmt._offset_clause is not None
        or stmt._fetch_clause is not None
    )


@dataclass(frozen=True)
class Query:
    """A statement plus the structured / raw SQL tag."""

    statement: Union[Select, RawSource]
    raw_sql: bool = False

    @classmethod
    def of(cls, statement: Any) -> Query:
        """Coerce a statement, SQL string or ``Query`` into a ``Query``."""
        if isinstance(statement, Query):
            return statement
        if isinstance(statement, str):
            return cls(literal_text(statement), raw_sql=True)
        if isinstance(statement, Select):
            return cls(statement)
        if isinstance(statement, (TextClause, TextualSelect, CompoundSelect)):
            return cls(statement, raw_sql=True)
        raise InvalidArgumentError(
            f"Unsupported statement type for count comparison: "
            f"{type(statement).__name__}"
        )

    # ------------------------------------------------------------------
    # Source shape
    # ------------------------------------------------------------------

    def has_raw_sql_override(self) -> bool:
        return self.raw_sql

    def needs_wrapping(self) -> bool:
        """True when offset or re-projection cannot be applied in place.

        Besides raw SQL this covers selects whose own LIMIT/OFFSET would be
        replaced by the probe's, and DISTINCT / GROUP BY / HAVING selects
        whose row count changes once the projection is swapped.
        """
        if self.raw_sql:
            return True
        stmt = self.statement
        return bool(
            _is_paginated(stmt)
            or stmt._distinct
            or stmt._group_by_clauses
            or stmt._having_criteria
        )

    def wrap_as_subquery(self, alias: str = SUBQUERY_ALIAS) -> Query:
        """Return ``SELECT * FROM (<statement>) AS <alias>`` as a structured query."""
        stmt = self.statement
        if isinstance(stmt, GenerativeSelect) and not _is_paginated(stmt):
            # ordering only matters inside the subquery when it picks the rows
            stmt = stmt.order_by(None)
        if isinstance(stmt, TextClause):
            stmt = stmt.columns()
        derived = stmt.subquery(alias)
        return Query(select(literal_column("*")).select_from(derived))

    def normalized(self) -> Query:
        return self.wrap_as_subquery() if self.needs_wrapping() else self

    # ------------------------------------------------------------------
    # Derivations
    # ------------------------------------------------------------------

    def _select(self) -> Select:
        if self.raw_sql:
            raise InvalidArgumentError(
                "Raw SQL queries must be wrapped with wrap_as_subquery() "
                "before they can be derived from"
            )
        return self.statement

    def without_ordering(self) -> Query:
        return replace(self, statement=self._select().order_by(None))

    def with_projection(self, column: ColumnElement[Any]) -> Query:
        """Select only *column*, keeping the FROM list and joins of the query."""
        stmt = self._select().with_only_columns(column, maintain_column_froms=True)
        return replace(self, statement=stmt)

    def with_offset(self, offset: int) -> Query:
        return replace(self, statement=self._select().offset(offset))

    def with_limit(self, limit: int) -> Query:
        return replace(self, statement=self._select().limit(limit))

    def exists_predicate(self) -> Exists:
        return self._select().exists()

    def probe(self) -> Query:
        """Unordered ``SELECT 1 AS one`` form of the query, wrapped if needed."""
        return self.normalized().without_ordering().with_projection(LITERAL_ONE)
