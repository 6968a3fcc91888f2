# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""PostgreSQL backend: psycopg 3 behind a bounded async connection pool."""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from .base import DbAdapter, Params, Row

# ":name" but not the "::" cast operator
_PLACEHOLDER = re.compile(r"(?<!:):(\w+)")


def to_pyformat(query: str) -> str:
    """Rewrite ``:name`` placeholders as psycopg's ``%(name)s``."""
    return _PLACEHOLDER.sub(r"%(\1)s", query)


class PostgresAdapter(DbAdapter):
    """Pooled PostgreSQL adapter for multi-worker deployments.

    At most ``pool_size`` connections are open at once. A statement that
    cannot get a connection within ``pool_timeout`` seconds fails with
    ``psycopg_pool.PoolTimeout``, which the store reports as
    ``StorageUnavailable``.
    """

    def __init__(self, dsn: str, pool_size: int = 10, pool_timeout: float = 30.0):
        try:
            import psycopg  # noqa: F401
            import psycopg_pool  # noqa: F401
        except ImportError as e:
            raise ImportError(
                "PostgreSQL support requires psycopg and psycopg-pool. "
                "Install with: pip install inquiry-service[postgresql]"
            ) from e
        self.dsn = dsn
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self._pool: Any = None

    async def connect(self) -> None:
        if self._pool is not None:
            return
        from psycopg.rows import dict_row
        from psycopg_pool import AsyncConnectionPool

        pool = AsyncConnectionPool(
            self.dsn,
            min_size=1,
            max_size=self.pool_size,
            timeout=self.pool_timeout,
            kwargs={"row_factory": dict_row},
            open=False,
        )
        await pool.open()
        self._pool = pool

    async def close(self) -> None:
        if self._pool is not None:
            pool, self._pool = self._pool, None
            await pool.close()

    @asynccontextmanager
    async def _cursor(self) -> AsyncIterator[Any]:
        if self._pool is None:
            raise RuntimeError("PostgresAdapter.connect() has not been awaited")
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                yield cur

    async def execute(self, query: str, params: Params | None = None) -> int:
        # the pooled connection commits when the block exits without error
        async with self._cursor() as cur:
            await cur.execute(to_pyformat(query), params or {})
            return cur.rowcount

    async def fetch_one(self, query: str, params: Params | None = None) -> Row | None:
        async with self._cursor() as cur:
            await cur.execute(to_pyformat(query), params or {})
            return await cur.fetchone()

    async def fetch_all(self, query: str, params: Params | None = None) -> list[Row]:
        async with self._cursor() as cur:
            await cur.execute(to_pyformat(query), params or {})
            return await cur.fetchall()

    async def execute_script(self, script: str) -> None:
        async with self._cursor() as cur:
            await cur.execute(script)
