# tests/conftest.py
import pytest
from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    event,
    insert,
)

from count_comparisons.db.engine import dispose_async_engines, get_async_engine

metadata = MetaData()

items_table = Table(
    "items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("value", Integer),
)

labels_table = Table(
    "labels",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("item_id", ForeignKey("items.id")),
    Column("name", String),
)


@pytest.fixture
def items():
    return items_table


@pytest.fixture
def labels():
    return labels_table


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'items.db'}"


@pytest.fixture
def engine(database_url):
    engine = create_engine(database_url)
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def connection(engine):
    with engine.connect() as conn:
        yield conn


@pytest.fixture
def statements(engine):
    """SQL statements sent to the database while the test runs."""
    recorded = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        recorded.append(statement)

    event.listen(engine, "before_cursor_execute", _record)
    yield recorded
    event.remove(engine, "before_cursor_execute", _record)


@pytest.fixture
def insert_items(engine):
    """Insert rows into ``items`` (committed), one per value, in order."""

    def _insert(*values):
        if not values:
            return
        with engine.begin() as conn:
            conn.execute(insert(items_table), [{"value": v} for v in values])

    return _insert


@pytest.fixture
async def async_engine(tmp_path):
    engine = get_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'items.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await dispose_async_engines()
