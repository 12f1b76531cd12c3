# tests/test_query.py

import pytest
import sqlglot
from sqlglot import exp
from sqlalchemy import select, text, union_all

from count_comparisons.errors import InvalidArgumentError
from count_comparisons.query import LITERAL_ONE, SUBQUERY_ALIAS, Query


def parse(query: Query) -> exp.Expression:
    sql = str(query.statement.compile(compile_kwargs={"literal_binds": True}))
    return sqlglot.parse_one(sql)


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def test_of_select_is_structured(items):
    query = Query.of(select(items))
    assert query.has_raw_sql_override() is False


@pytest.mark.parametrize(
    "statement",
    [
        "SELECT 1 UNION SELECT 2",
        text("SELECT 1 UNION SELECT 2"),
        text("SELECT 1 AS x").columns(),
    ],
)
def test_of_raw_sql(statement):
    assert Query.of(statement).has_raw_sql_override() is True


@pytest.mark.parametrize(
    "sql, literal",
    [
        ("""SELECT '{"a":1}' AS s""", """'{"a":1}'"""),
        ("SELECT 'a :x' AS s", "'a :x'"),
        ("SELECT '1'::int AS s", "'1'::int"),
    ],
)
def test_of_sql_string_renders_colons_verbatim(sql, literal):
    compiled = Query.of(sql).statement.compile()

    assert compiled.params == {}
    assert literal in str(compiled)


def test_of_compound_select_is_raw(items):
    compound = union_all(select(items.c.value), select(items.c.value))
    assert Query.of(compound).has_raw_sql_override() is True


def test_of_query_returns_same_value(items):
    query = Query.of(select(items))
    assert Query.of(query) is query


@pytest.mark.parametrize("statement", [None, 42, object(), ["SELECT 1"]])
def test_of_rejects_unsupported_types(statement):
    with pytest.raises(InvalidArgumentError, match="Unsupported statement type"):
        Query.of(statement)


# ---------------------------------------------------------------------------
# Derivations
# ---------------------------------------------------------------------------


def test_derivations_do_not_mutate(items):
    original = select(items).order_by(items.c.value)
    query = Query.of(original)

    query.without_ordering().with_offset(3).with_limit(1)

    assert query.statement is original
    assert original._order_by_clauses
    assert original._offset_clause is None


def test_without_ordering(items):
    query = Query.of(select(items).order_by(items.c.value.desc()))
    assert parse(query).find(exp.Order) is not None
    assert parse(query.without_ordering()).find(exp.Order) is None


def test_with_projection_keeps_from_and_where(items):
    query = Query.of(select(items).where(items.c.value > 1))

    ast = parse(query.with_projection(LITERAL_ONE))

    assert [s.alias for s in ast.selects] == ["one"]
    assert ast.find(exp.Table).name == "items"
    assert ast.find(exp.Where) is not None


def test_with_projection_keeps_joins(items, labels):
    stmt = select(items).join(labels, labels.c.item_id == items.c.id)

    ast = parse(Query.of(stmt).with_projection(LITERAL_ONE))

    assert ast.find(exp.Join) is not None
    assert {t.name for t in ast.find_all(exp.Table)} == {"items", "labels"}


def test_raw_sql_cannot_be_derived_without_wrapping():
    query = Query.of("SELECT 1 UNION SELECT 2")
    with pytest.raises(InvalidArgumentError, match="wrap_as_subquery"):
        query.with_offset(1)


def test_wrap_as_subquery():
    wrapped = Query.of("SELECT 1 UNION SELECT 2").wrap_as_subquery()

    assert wrapped.has_raw_sql_override() is False
    subquery = parse(wrapped).find(exp.Subquery)
    assert subquery is not None
    assert subquery.alias == SUBQUERY_ALIAS
    assert subquery.find(exp.Union) is not None


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------


def test_probe_structured(items):
    query = Query.of(select(items).where(items.c.value > 1).order_by(items.c.id))

    ast = parse(query.probe())

    assert ast.sql() == "SELECT 1 AS one FROM items WHERE items.value > 1"


def test_probe_raw_sql_is_wrapped():
    ast = parse(Query.of("SELECT 1 UNION SELECT 2").probe())

    assert [s.alias for s in ast.selects] == ["one"]
    assert ast.find(exp.Subquery).alias == SUBQUERY_ALIAS


@pytest.mark.parametrize(
    "build",
    [
        lambda t: select(t).limit(10),
        lambda t: select(t).offset(2),
        lambda t: select(t.c.value).distinct(),
        lambda t: select(t.c.value).group_by(t.c.value),
        lambda t: select(t.c.value).having(t.c.value > 1),
    ],
)
def test_probe_wraps_selects_whose_shape_would_change(items, build):
    query = Query.of(build(items))

    assert query.needs_wrapping() is True
    assert parse(query.probe()).find(exp.Subquery).alias == SUBQUERY_ALIAS


def test_probe_wraps_fetch_first(items):
    query = Query.of(select(items).fetch(5))

    assert query.needs_wrapping() is True
    sql = str(query.probe().statement)
    assert "FETCH FIRST" in sql
    assert f"AS {SUBQUERY_ALIAS}" in sql


def test_wrapping_strips_ordering_of_unpaginated_select(items):
    query = Query.of(select(items.c.value).distinct().order_by(items.c.value))
    assert parse(query.probe()).find(exp.Order) is None


def test_wrapping_keeps_ordering_that_picks_rows(items):
    query = Query.of(select(items).order_by(items.c.value).limit(2))

    subquery = parse(query.probe()).find(exp.Subquery)

    assert subquery.this.find(exp.Order) is not None
    assert subquery.this.args["limit"] is not None


def test_plain_select_is_not_wrapped(items):
    query = Query.of(select(items).where(items.c.value == 2).order_by(items.c.id))
    assert query.needs_wrapping() is False
