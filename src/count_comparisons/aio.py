"""Async counterparts of ``count_comparisons.comparisons``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession

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

AsyncBind = Union[AsyncConnection, AsyncSession, AsyncEngine]


async def _scalar(bind: AsyncBind, probe: Probe) -> Any:
    logger.debug("Running count probe: %s", probe.statement)
    if isinstance(bind, AsyncEngine):
        async with bind.connect() as connection:
            return await connection.scalar(probe.statement)
    return await bind.scalar(probe.statement)


async def run_probe(bind: AsyncBind, probe: Probe) -> bool:
    if not probe.needs_round_trip:
        logger.debug("Count comparison answered without a query: %s", probe.answer)
        return probe.resolve()
    return probe.resolve(await _scalar(bind, probe))


async def count_greater_than(
    bind: AsyncBind, statement: Statement, number_of_rows: int
) -> bool:
    return await run_probe(bind, plan_greater_than(statement, number_of_rows))


async def count_less_than(
    bind: AsyncBind, statement: Statement, number_of_rows: int
) -> bool:
    return await run_probe(bind, plan_less_than(statement, number_of_rows))


async def count_equals(
    bind: AsyncBind, statement: Statement, number_of_rows: int
) -> bool:
    return await run_probe(bind, plan_equals(statement, number_of_rows))


async def count_at_least(
    bind: AsyncBind, statement: Statement, number_of_rows: int
) -> bool:
    return await run_probe(bind, plan_at_least(statement, number_of_rows))


async def count_at_most(
    bind: AsyncBind, statement: Statement, number_of_rows: int
) -> bool:
    return await run_probe(bind, plan_at_most(statement, number_of_rows))


@dataclass(frozen=True)
class AsyncCountComparator:
    bind: AsyncBind
    statement: Statement

    async def greater_than(self, number_of_rows: int) -> bool:
        return await count_greater_than(self.bind, self.statement, number_of_rows)

    async def less_than(self, number_of_rows: int) -> bool:
        return await count_less_than(self.bind, self.statement, number_of_rows)

    async def equals(self, number_of_rows: int) -> bool:
        return await count_equals(self.bind, self.statement, number_of_rows)

    async def at_least(self, number_of_rows: int) -> bool:
        return await count_at_least(self.bind, self.statement, number_of_rows)

    async def at_most(self, number_of_rows: int) -> bool:
        return await count_at_most(self.bind, self.statement, number_of_rows)
