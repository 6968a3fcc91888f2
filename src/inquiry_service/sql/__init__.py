# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Storage backends for the inquiry store, selected by ``DATABASE_URL``.

Usage:
    adapter = create_adapter("/data/inquiries.db")                 # SQLite file
    adapter = create_adapter("sqlite:///data/inquiries.db")        # same file
    adapter = create_adapter("postgresql://user:pass@db/inquiries")

    await adapter.connect()
    row = await adapter.fetch_one("SELECT * FROM inquiries WHERE id = :id", {"id": inquiry_id})
    await adapter.close()
"""

from .base import DbAdapter
from .sqlite import SqliteAdapter

__all__ = [
    "DbAdapter",
    "SqliteAdapter",
    "create_adapter",
]

POSTGRES_SCHEMES = ("postgresql", "postgres")


def create_adapter(
    database_url: str,
    *,
    pool_size: int = 10,
    pool_timeout: float = 30.0,
) -> DbAdapter:
    """Pick the adapter for ``database_url``.

    Accepted forms:
        - ``/abs/path.db``, ``sqlite:/abs/path.db``, ``sqlite:///abs/path.db``
        - ``postgresql://...`` or the ``postgres://`` alias used by most
          hosting providers

    Args:
        database_url: Connection string.
        pool_size: Maximum open connections (PostgreSQL).
        pool_timeout: Seconds to wait for a pooled connection (PostgreSQL)
            or for a locked database file (SQLite).

    Raises:
        ValueError: For an unknown scheme or a string without one.
        ImportError: For PostgreSQL without the ``postgresql`` extra.
    """
    if database_url.startswith("/"):
        return SqliteAdapter(database_url, busy_timeout=pool_timeout)

    scheme, sep, rest = database_url.partition(":")
    if not sep:
        raise ValueError(
            f"Invalid DATABASE_URL '{database_url}': expected 'scheme:...' or an absolute path"
        )
    scheme = scheme.lower()

    if scheme == "sqlite":
        if rest.startswith("//"):
            rest = rest[2:]
        return SqliteAdapter(rest, busy_timeout=pool_timeout)

    if scheme in POSTGRES_SCHEMES:
        # psycopg is an optional extra
        from .postgresql import PostgresAdapter

        return PostgresAdapter(f"postgresql:{rest}", pool_size=pool_size, pool_timeout=pool_timeout)

    raise ValueError(f"Unsupported database scheme '{scheme}' (use sqlite or postgresql)")
