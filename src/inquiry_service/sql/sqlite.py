# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQLite backend for development machines and single-host deployments."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from .base import DbAdapter, Params, Row


class SqliteAdapter(DbAdapter):
    """aiosqlite adapter with one short-lived connection per statement.

    Nothing is shared between coroutines, so concurrent submissions only
    contend on SQLite's own file lock; ``busy_timeout`` bounds that wait.

    Attributes:
        db_path: Database file. Its directory must already exist.
        busy_timeout: Seconds to wait for a locked database.
    """

    def __init__(self, db_path: str, busy_timeout: float = 30.0):
        if not db_path:
            raise ValueError("SQLite adapter requires a database path")
        self.db_path = db_path
        self.busy_timeout = busy_timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(self.db_path, timeout=self.busy_timeout) as db:
            db.row_factory = aiosqlite.Row
            yield db

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def execute(self, query: str, params: Params | None = None) -> int:
        async with self._session() as db:
            cursor = await db.execute(query, params or {})
            await db.commit()
            return cursor.rowcount

    async def fetch_one(self, query: str, params: Params | None = None) -> Row | None:
        async with self._session() as db:
            async with db.execute(query, params or {}) as cursor:
                row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, query: str, params: Params | None = None) -> list[Row]:
        async with self._session() as db:
            async with db.execute(query, params or {}) as cursor:
                rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def execute_script(self, script: str) -> None:
        async with self._session() as db:
            await db.executescript(script)
            await db.commit()
