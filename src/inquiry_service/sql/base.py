# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Backend-neutral contract the inquiry store talks to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Params = dict[str, Any]
Row = dict[str, Any]


class DbAdapter(ABC):
    """One storage backend behind the :class:`InquiryStore`.

    Statements are written once with ``:name`` placeholders and each adapter
    translates them for its driver. Every write commits before returning, so
    the store never sees a half-applied statement.

    Driver exceptions are not translated here; the store wraps them into
    ``StorageUnavailable``.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Acquire long-lived resources (a pool, for instance). Idempotent."""

    @abstractmethod
    async def close(self) -> None:
        """Release whatever :meth:`connect` acquired."""

    @abstractmethod
    async def execute(self, query: str, params: Params | None = None) -> int:
        """Run one write and return the driver's row count."""

    @abstractmethod
    async def fetch_one(self, query: str, params: Params | None = None) -> Row | None:
        """Return the first row keyed by column name, or None."""

    @abstractmethod
    async def fetch_all(self, query: str, params: Params | None = None) -> list[Row]:
        """Return every row keyed by column name."""

    @abstractmethod
    async def execute_script(self, script: str) -> None:
        """Run a multi-statement DDL script such as the table schema."""
