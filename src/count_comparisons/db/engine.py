# count_comparisons/db/engine.py
from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from count_comparisons.core.config import settings

_engines: Dict[str, Engine] = {}
_async_engines: Dict[str, AsyncEngine] = {}


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Return a process-wide engine for *database_url* (settings by default)."""
    url = database_url or settings.database_url
    engine = _engines.get(url)
    if engine is None:
        engine = create_engine(url, echo=settings.echo_sql)
        _engines[url] = engine
    return engine


def get_async_engine(database_url: Optional[str] = None) -> AsyncEngine:
    url = database_url or settings.database_url
    engine = _async_engines.get(url)
    if engine is None:
        engine = create_async_engine(url, echo=settings.echo_sql)
        _async_engines[url] = engine
    return engine


def dispose_engines() -> None:
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()


async def dispose_async_engines() -> None:
    for engine in _async_engines.values():
        await engine.dispose()
    _async_engines.clear()
