# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Data models for the submission pipeline.

Models:
    - InquiryDraft: caller-supplied fields, before persistence
    - Inquiry: the immutable persisted record
    - DispatchResult: what the SMTP server accepted for one notification
    - SubmissionOutcome / SubmissionResult: what the orchestrator reports
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

DRAFT_FIELDS = ("name", "company", "email", "phone", "requirement")


class InquiryDraft(BaseModel):
    """Contact-form fields as submitted.

    Every field is required and must contain something other than
    whitespace. Email and phone syntax are not checked here.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, max_length=255, description="Full name of the person inquiring")]
    company: Annotated[str, Field(min_length=1, max_length=255, description="Company or organisation")]
    email: Annotated[str, Field(min_length=1, max_length=320, description="Contact email")]
    phone: Annotated[str, Field(min_length=1, max_length=64, description="Contact phone number")]
    requirement: Annotated[str, Field(min_length=1, description="Free-text requirement, may span lines")]

    @field_validator(*DRAFT_FIELDS)
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class Inquiry(BaseModel):
    """One persisted contact-form submission.

    ``id`` and ``created_at`` are assigned by the store. Instances are
    frozen: there is no update path.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    company: str
    email: str
    phone: str
    requirement: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class DispatchResult:
    """Recipients the SMTP server accepted and rejected for one message."""

    accepted: tuple[str, ...]
    rejected: tuple[str, ...]
    message_id: str


class SubmissionOutcome(str, Enum):
    """Final state of a submission.

    Attributes:
        SUCCESS: Stored and notified.
        PARTIAL_SUCCESS: Stored, but the notification did not go out.
        FAILURE: Nothing was stored.
    """

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"


@dataclass
class SubmissionResult:
    """What :meth:`SubmissionOrchestrator.submit` reports to its caller."""

    outcome: SubmissionOutcome
    inquiry: Inquiry | None = None
    dispatch: DispatchResult | None = None
    error: Exception | None = field(default=None)

    @property
    def stored(self) -> bool:
        return self.inquiry is not None

    @property
    def notified(self) -> bool:
        return self.outcome is SubmissionOutcome.SUCCESS

    @property
    def error_type(self) -> str | None:
        """Class name of the error, e.g. ``"TransportRejected"``."""
        return type(self.error).__name__ if self.error is not None else None


__all__ = [
    "DRAFT_FIELDS",
    "DispatchResult",
    "Inquiry",
    "InquiryDraft",
    "SubmissionOutcome",
    "SubmissionResult",
]
