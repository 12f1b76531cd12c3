# count_comparisons/cli/compare.py
"""
CLI command comparing the row count of a table or query to a number.

Prints ``true`` or ``false`` and exits with 0 / 1 accordingly, so the command
can be used directly in shell conditionals::

    count-comparisons compare gt 1000 --table events --where "kind = 'error'"

Negative thresholds must follow ``--`` so they are not read as options.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional

import typer
from sqlalchemy import literal_column, select, table
from sqlalchemy.exc import SQLAlchemyError

from count_comparisons.cli.sql_validation import (
    sqlglot_dialect,
    validate_read_only_sql,
    validate_where_clause,
)
from count_comparisons.cli.utils import setup_cli_logging
from count_comparisons.comparisons import (
    Bind,
    count_at_least,
    count_at_most,
    count_equals,
    count_greater_than,
    count_less_than,
)
from count_comparisons.db.engine import get_engine
from count_comparisons.errors import InvalidSqlError
from count_comparisons.query import Statement, literal_text

logger = logging.getLogger(__name__)

# Exit code for database failures (0 = true, 1 = false, 2 = usage error)
EXIT_DATABASE_ERROR = 3


class Operator(str, Enum):
    gt = "gt"
    lt = "lt"
    eq = "eq"
    ge = "ge"
    le = "le"


COMPARISONS: Dict[Operator, Callable[[Bind, Statement, int], bool]] = {
    Operator.gt: count_greater_than,
    Operator.lt: count_less_than,
    Operator.eq: count_equals,
    Operator.ge: count_at_least,
    Operator.le: count_at_most,
}


def build_statement(
    *,
    table_name: Optional[str] = None,
    schema: Optional[str] = None,
    sql: Optional[str] = None,
    where: Optional[str] = None,
    dialect: Optional[str] = None,
) -> Statement:
    """Build the statement to compare from CLI input.

    Raw SQL is returned as a string so it is treated as a raw SQL source.
    """
    if sql is not None:
        return validate_read_only_sql(sql, dialect=dialect)

    if table_name is None:
        raise InvalidSqlError("A table name or a SQL query is required")

    stmt = select(literal_column("*")).select_from(table(table_name, schema=schema))
    if where is not None:
        stmt = stmt.where(literal_text(validate_where_clause(where, dialect=dialect)))
    return stmt


def compare_cmd(
    operator: Operator = typer.Argument(
        ..., help="Comparison: gt, lt, eq, ge (at least) or le (at most)"
    ),
    number_of_rows: int = typer.Argument(..., help="Row count to compare against"),
    table_name: Optional[str] = typer.Option(
        None, "--table", "-t", help="Table to compare"
    ),
    schema: Optional[str] = typer.Option(None, "--schema", help="Schema of --table"),
    sql: Optional[str] = typer.Option(
        None, "--sql", help="Read-only SQL query to compare instead of a table"
    ),
    where: Optional[str] = typer.Option(
        None, "--where", "-w", help="Filter condition applied to --table"
    ),
    database_url: Optional[str] = typer.Option(
        None,
        "--database-url",
        help="SQLAlchemy database URL (defaults to COUNT_COMPARISONS_DATABASE_URL)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log probe SQL"),
) -> None:
    """Compare the row count of a table or query to NUMBER_OF_ROWS."""
    setup_cli_logging(verbose)

    if (table_name is None) == (sql is None):
        raise typer.BadParameter("Provide exactly one of --table or --sql")
    if where is not None and sql is not None:
        raise typer.BadParameter("--where can only be combined with --table")

    try:
        # unknown dialects and missing drivers surface here, before any query
        engine = get_engine(database_url)
    except (SQLAlchemyError, ImportError):
        logger.exception("Could not create an engine for the database URL")
        raise typer.Exit(code=EXIT_DATABASE_ERROR)

    try:
        statement = build_statement(
            table_name=table_name,
            schema=schema,
            sql=sql,
            where=where,
            dialect=sqlglot_dialect(engine.dialect.name),
        )
    except InvalidSqlError as exc:
        raise typer.BadParameter(str(exc)) from exc

    comparison = COMPARISONS[operator]
    try:
        with engine.connect() as connection:
            result = comparison(connection, statement, number_of_rows)
    except SQLAlchemyError:
        logger.exception("Count comparison failed")
        raise typer.Exit(code=EXIT_DATABASE_ERROR)

    logger.debug("%s %s: %s", operator.value, number_of_rows, result)
    typer.echo("true" if result else "false")
    raise typer.Exit(code=0 if result else 1)
