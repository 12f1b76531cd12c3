from __future__ import annotations

import logging
import re
from typing import Optional

import sqlglot
import sqlglot.errors
from sqlglot import exp

from count_comparisons.errors import InvalidSqlError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

# Allowed top-level query forms
_ALLOWED_ROOT_EXPRESSIONS = (
    exp.Select,
    exp.Union,
    exp.Intersect,
    exp.Except,
)

# Hard-disallowed statement types, anywhere in the tree
_DISALLOWED_EXPRESSIONS = (
    exp.Insert,
    exp.Update,
    exp.Delete,
    exp.Merge,
    exp.Create,
    exp.Drop,
    exp.Alter,
    exp.TruncateTable,
    exp.Command,  # catches EXEC, CALL, COPY, etc.
)

# SQLAlchemy dialect name -> sqlglot dialect name, where they differ
_SQLGLOT_DIALECTS = {
    "postgresql": "postgres",
    "mssql": "tsql",
    "sqlite": "sqlite",
    "mysql": "mysql",
    "mariadb": "mysql",
    "oracle": "oracle",
    "duckdb": "duckdb",
}

# Reject statement stacking
_SEMICOLON_RE = re.compile(r";")
_COMMENT_RE = re.compile(r"--|/\*")


def sqlglot_dialect(sqlalchemy_dialect: Optional[str]) -> Optional[str]:
    if sqlalchemy_dialect is None:
        return None
    return _SQLGLOT_DIALECTS.get(sqlalchemy_dialect)


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


def _invalid(message: str) -> InvalidSqlError:
    logger.warning("SQL validation error: %s", message)
    return InvalidSqlError(message)


def _parse(sql: str, dialect: Optional[str]) -> exp.Expression:
    if not sql or not sql.strip():
        raise _invalid("Empty SQL")

    if _SEMICOLON_RE.search(sql):
        raise _invalid("Multiple SQL statements are not allowed")

    if _COMMENT_RE.search(sql):
        raise _invalid("SQL comments are not allowed")

    try:
        ast = sqlglot.parse_one(sql, read=dialect)
    except sqlglot.errors.ParseError as exc:
        logger.debug("SQL parse error: %s", exc)
        raise _invalid(f"Invalid SQL syntax: {exc}") from exc

    if ast is None:
        raise _invalid("Empty SQL")
    return ast


def _reject_disallowed_nodes(ast: exp.Expression) -> None:
    for node in ast.walk():
        if isinstance(node, _DISALLOWED_EXPRESSIONS):
            raise _invalid(f"Disallowed SQL operation: {type(node).__name__}")


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def validate_read_only_sql(sql: str, dialect: Optional[str] = None) -> str:
    """
    Validate a raw SQL query before it is used as a comparison source.

    Guarantees:
    - a single statement, without comments
    - SELECT or set operation at the top level
    - no DML / DDL / commands anywhere in the tree
    """
    logger.debug("Validating raw SQL: %s", sql)
    ast = _parse(sql, dialect)

    if not isinstance(ast, _ALLOWED_ROOT_EXPRESSIONS):
        raise _invalid(
            f"Only SELECT statements are allowed (got {type(ast).__name__})"
        )
    _reject_disallowed_nodes(ast)
    return sql.strip()


def validate_where_clause(condition: str, dialect: Optional[str] = None) -> str:
    """
    Validate a boolean condition meant for a WHERE clause.

    The condition is parsed inside ``SELECT 1 WHERE ...``; anything that
    escapes the WHERE clause (ORDER BY, LIMIT, UNION, ...) is rejected.
    """
    logger.debug("Validating WHERE condition: %s", condition)
    if not condition or not condition.strip():
        raise _invalid("Empty WHERE condition")

    ast = _parse(f"SELECT 1 WHERE {condition}", dialect)

    if not isinstance(ast, exp.Select) or ast.args.get("where") is None:
        raise _invalid("WHERE condition must be a single boolean expression")

    extra = sorted(
        key
        for key, value in ast.args.items()
        if value and key not in ("expressions", "where")
    )
    if extra:
        raise _invalid(f"WHERE condition must not contain: {', '.join(extra)}")

    _reject_disallowed_nodes(ast)
    return condition.strip()
