# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for the submission pipeline.

- ``ValidationError``: the draft is missing fields or has blank ones.
- ``StorageUnavailable``: the store could not complete a write or read.
  Fatal to a submission.
- ``NotConfigured``: the dispatcher is in degraded mode. The inquiry is
  still stored.
- ``TransportRejected``: the mail server refused the connection, the login
  or the message. The inquiry is still stored.
- ``ConfigError``: the service cannot be assembled from its configuration.
"""

from __future__ import annotations

from collections.abc import Sequence


class InquiryServiceError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(InquiryServiceError):
    """Raised when the configuration file or a required setting is invalid."""


class ValidationError(InquiryServiceError):
    """Raised when a draft does not carry every required non-empty field."""

    def __init__(self, message: str, fields: Sequence[str] = ()):
        super().__init__(message)
        self.fields = tuple(fields)


class StorageUnavailable(InquiryServiceError):
    """Raised when the data engine cannot be reached or rejects a write."""


class NotificationError(InquiryServiceError):
    """Base class for failures that leave a stored inquiry un-notified."""


class NotConfigured(NotificationError):
    """Raised by every send of a dispatcher built without full mail settings."""

    def __init__(self, missing: Sequence[str] = ()):
        self.missing = tuple(missing)
        detail = ", ".join(self.missing) if self.missing else "unknown"
        super().__init__(f"Email transport not configured (missing or invalid: {detail})")


class TransportRejected(NotificationError):
    """Raised when the SMTP server refuses the session or the message."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


__all__ = [
    "ConfigError",
    "InquiryServiceError",
    "NotConfigured",
    "NotificationError",
    "StorageUnavailable",
    "TransportRejected",
    "ValidationError",
]
