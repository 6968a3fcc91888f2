# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Durable storage of contact-form inquiries.

The store is the only component that assigns an inquiry's identity and
creation time. Records are written with a single INSERT, so a failed write
never leaves a partial row behind, and there is no update or delete path.

Example:
    Basic usage::

        store = InquiryStore.from_url("postgresql://user:pass@db/inquiries")
        await store.init_db()

        inquiry = await store.insert({
            "name": "Asha", "company": "Acme", "email": "asha@acme.test",
            "phone": "+91 98765 43210", "requirement": "Rooftop solar",
        })
        same = await store.get(inquiry.id)
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .errors import StorageUnavailable, ValidationError
from .logger import get_logger
from .models import Inquiry, InquiryDraft
from .sql import DbAdapter, create_adapter

SCHEMA = """
CREATE TABLE IF NOT EXISTS inquiries (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    company TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT NOT NULL,
    requirement TEXT NOT NULL,
    created_at TEXT NOT NULL
);
"""

_INSERT = """
    INSERT INTO inquiries (id, name, company, email, phone, requirement, created_at)
    VALUES (:id, :name, :company, :email, :phone, :requirement, :created_at)
"""

_SELECT_ONE = """
    SELECT id, name, company, email, phone, requirement, created_at
    FROM inquiries
    WHERE id = :id
"""

logger = get_logger("InquiryStore")


def coerce_draft(draft: InquiryDraft | Mapping[str, Any]) -> InquiryDraft:
    """Validate a mapping into an :class:`InquiryDraft`.

    Raises:
        ValidationError: Listing the offending field names.
    """
    if isinstance(draft, InquiryDraft):
        return draft
    try:
        return InquiryDraft.model_validate(dict(draft))
    except PydanticValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ValidationError(f"Invalid inquiry draft: {', '.join(fields)}", fields) from exc


class InquiryStore:
    """Async persistence of inquiries on top of a :class:`DbAdapter`.

    Any error raised by the adapter is reported as
    :class:`StorageUnavailable`; the driver exception is chained as
    ``__cause__``.

    Attributes:
        adapter: The database adapter used for every statement.
    """

    def __init__(self, adapter: DbAdapter):
        self.adapter = adapter

    @classmethod
    def from_url(cls, database_url: str, *, pool_size: int = 10, pool_timeout: float = 30.0) -> InquiryStore:
        """Build a store for a ``DATABASE_URL`` style connection string."""
        return cls(create_adapter(database_url, pool_size=pool_size, pool_timeout=pool_timeout))

    async def init_db(self) -> None:
        """Open the adapter and create the ``inquiries`` table if missing."""
        try:
            await self.adapter.connect()
            await self.adapter.execute_script(SCHEMA)
        except Exception as exc:
            logger.error("Cannot initialise inquiry storage: %s", exc)
            raise StorageUnavailable(f"Cannot initialise inquiry storage: {exc}") from exc

    async def close(self) -> None:
        await self.adapter.close()

    async def insert(self, draft: InquiryDraft | Mapping[str, Any]) -> Inquiry:
        """Persist a draft and return the stored record.

        Args:
            draft: An :class:`InquiryDraft` or a mapping with the same keys.

        Returns:
            The new :class:`Inquiry` with ``id`` and ``created_at`` set.

        Raises:
            ValidationError: If a field is missing or blank. No I/O happens.
            StorageUnavailable: If the database is unreachable or rejects
                the write.
        """
        valid = coerce_draft(draft)
        inquiry = Inquiry(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **valid.model_dump(),
        )
        params = inquiry.model_dump()
        params["created_at"] = inquiry.created_at.isoformat()

        try:
            rowcount = await self.adapter.execute(_INSERT, params)
        except Exception as exc:
            logger.error("Failed to store inquiry from %s: %s", inquiry.email, exc)
            raise StorageUnavailable(f"Failed to store inquiry: {exc}") from exc
        if rowcount != 1:
            logger.error("Inquiry write rejected (rowcount=%s)", rowcount)
            raise StorageUnavailable(f"Inquiry write rejected (rowcount={rowcount})")

        logger.info("Stored inquiry %s from %s (%s)", inquiry.id, inquiry.name, inquiry.company)
        return inquiry

    async def get(self, inquiry_id: str) -> Inquiry | None:
        """Fetch one inquiry by id, or None if it does not exist."""
        try:
            row = await self.adapter.fetch_one(_SELECT_ONE, {"id": inquiry_id})
        except Exception as exc:
            logger.error("Failed to read inquiry %s: %s", inquiry_id, exc)
            raise StorageUnavailable(f"Failed to read inquiry: {exc}") from exc
        if row is None:
            return None
        return self._decode_row(row)

    def _decode_row(self, row: dict[str, Any]) -> Inquiry:
        """Convert the ISO ``created_at`` column back into a datetime."""
        data = dict(row)
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            data["created_at"] = datetime.fromisoformat(created_at)
        return Inquiry.model_validate(data)


__all__ = ["InquiryStore", "SCHEMA", "coerce_draft"]
