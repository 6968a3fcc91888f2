# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Submission pipeline: store the inquiry, then notify the operator.

The two steps are independent units of work with no transaction between
them:

    Received -> Stored -> Notified | NotifiedFailed

- A storage failure abandons the submission (``FAILURE``); the dispatcher
  is not called.
- A notification failure after a successful insert is reported as
  ``PARTIAL_SUCCESS``; the stored inquiry is kept.
- Draft validation errors propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from .errors import NotConfigured, NotificationError, StorageUnavailable
from .logger import get_logger
from .models import DispatchResult, Inquiry, InquiryDraft, SubmissionOutcome, SubmissionResult
from .prometheus import SubmissionMetrics


class Store(Protocol):
    async def insert(self, draft: InquiryDraft | Mapping[str, Any]) -> Inquiry: ...


class Dispatcher(Protocol):
    async def send(self, inquiry: Inquiry) -> DispatchResult: ...


class SubmissionOrchestrator:
    """Run one submission through the store and the dispatcher.

    Attributes:
        store: Persists drafts; raises StorageUnavailable on failure.
        dispatcher: Sends notifications; raises NotificationError subclasses.
        metrics: Optional Prometheus collector.
    """

    def __init__(self, store: Store, dispatcher: Dispatcher, *, metrics: SubmissionMetrics | None = None):
        self.store = store
        self.dispatcher = dispatcher
        self.metrics = metrics
        self.logger = get_logger("SubmissionOrchestrator")

    async def submit(self, draft: InquiryDraft | Mapping[str, Any]) -> SubmissionResult:
        """Persist ``draft`` and notify about it.

        Args:
            draft: An :class:`InquiryDraft` or a mapping with the same keys.

        Returns:
            A :class:`SubmissionResult` whose ``outcome`` tells full success,
            partial success and total failure apart.

        Raises:
            ValidationError: If the draft is incomplete.
        """
        try:
            inquiry = await self.store.insert(draft)
        except StorageUnavailable as exc:
            self.logger.error("Submission abandoned, inquiry not stored: %s", exc)
            return self._finish(SubmissionResult(SubmissionOutcome.FAILURE, error=exc))

        try:
            dispatch = await self.dispatcher.send(inquiry)
        except NotificationError as exc:
            self.logger.warning("Inquiry %s stored but notification failed: %s", inquiry.id, exc)
            self._count_notification("not_configured" if isinstance(exc, NotConfigured) else "rejected")
            return self._finish(SubmissionResult(SubmissionOutcome.PARTIAL_SUCCESS, inquiry=inquiry, error=exc))

        self._count_notification("sent")
        self.logger.info("Inquiry %s stored and notified (message %s)", inquiry.id, dispatch.message_id)
        return self._finish(SubmissionResult(SubmissionOutcome.SUCCESS, inquiry=inquiry, dispatch=dispatch))

    def _count_notification(self, result: str) -> None:
        if self.metrics is not None:
            self.metrics.inc_notification(result)

    def _finish(self, result: SubmissionResult) -> SubmissionResult:
        if self.metrics is not None:
            self.metrics.inc_submission(result.outcome.value)
        return result


__all__ = ["SubmissionOrchestrator"]
