# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Email notification for newly stored inquiries.

The dispatcher checks the mail configuration once, when it is built. With a
complete configuration it owns one :class:`SmtpTransport` for the rest of the
process. With any required setting missing or invalid it is in *degraded
mode*: it is still constructed, but every :meth:`NotificationDispatcher.send` raises
:class:`NotConfigured` without touching the network.

Example:
    Sending a notification::

        dispatcher = NotificationDispatcher(settings.mail)
        if dispatcher.enabled:
            result = await dispatcher.send(inquiry)
            print(result.message_id, result.accepted, result.rejected)
"""

from __future__ import annotations

import asyncio
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Protocol

import aiosmtplib

from .config_loader import MailConfig
from .errors import NotConfigured, TransportRejected
from .logger import get_logger
from .models import DispatchResult, Inquiry
from .rendering import build_subject, format_submitted_at, render_html, render_text
from .transport import SmtpTransport


class Transport(Protocol):
    async def send(
        self, message: EmailMessage, *, sender: str, recipients: list[str]
    ) -> tuple[list[str], list[str]]: ...


class NotificationDispatcher:
    """Compose and send the operator notification for one inquiry.

    Attributes:
        config: The mail configuration this dispatcher was built with.
        missing: Names of the required settings that were absent.
        transport: The SMTP transport, or None in degraded mode.
    """

    def __init__(self, config: MailConfig, transport: Transport | None = None):
        """Validate ``config`` and prepare the transport.

        Never raises for missing or invalid settings; logs a warning and enters
        degraded mode instead.

        Args:
            config: Mail settings, usually from :func:`load_settings`.
            transport: Optional transport to use instead of building an
                :class:`SmtpTransport`. Ignored in degraded mode.
        """
        self.config = config
        self.logger = get_logger("NotificationDispatcher")
        missing = config.missing_options()
        invalid = config.invalid_options()
        self.missing = missing + invalid
        self.transport: Transport | None = None

        if missing:
            self.logger.warning(
                "Missing email settings: %s. Email notifications will be disabled.",
                ", ".join(missing),
            )
        if invalid:
            self.logger.warning(
                "Invalid email settings: %s. Email notifications will be disabled.",
                ", ".join(invalid),
            )
        if self.missing:
            return
        self.transport = transport or SmtpTransport.from_config(config)
        self.logger.info(
            "Email notifications enabled via %s:%s (admin=%s, cc=%s, tls=%s)",
            config.host,
            config.port,
            config.admin_email,
            ", ".join(config.cc_emails) or "none",
            "strict" if config.production else "relaxed",
        )

    @property
    def enabled(self) -> bool:
        return self.transport is not None

    @property
    def cc_recipients(self) -> list[str]:
        """CC addresses in configured order, without repeating the admin."""
        return [addr for addr in self.config.cc_emails if addr != self.config.admin_email]

    @property
    def recipients(self) -> list[str]:
        """Administrator address first, then every CC address."""
        if not self.config.admin_email:
            return []
        return [self.config.admin_email, *self.cc_recipients]

    def compose(self, inquiry: Inquiry) -> EmailMessage:
        """Build the multipart/alternative notification for ``inquiry``."""
        config = self.config
        submitted_at = format_submitted_at(inquiry.created_at, config.timezone)
        sender = config.user or ""

        msg = EmailMessage()
        msg["From"] = formataddr((config.from_name, sender))
        msg["To"] = config.admin_email or ""
        if cc := self.cc_recipients:
            msg["Cc"] = ", ".join(cc)
        msg["Subject"] = build_subject(inquiry)
        msg["Message-ID"] = make_msgid(domain=sender.rpartition("@")[2] or None)
        msg.set_content(render_text(inquiry, submitted_at=submitted_at, from_name=config.from_name))
        msg.add_alternative(
            render_html(inquiry, submitted_at=submitted_at, from_name=config.from_name),
            subtype="html",
        )
        return msg

    async def send(self, inquiry: Inquiry) -> DispatchResult:
        """Email the administrator (and CC list) about ``inquiry``.

        No retry is attempted; the caller decides what a failure means.

        Returns:
            Accepted and rejected recipients plus the ``Message-ID``.

        Raises:
            NotConfigured: In degraded mode. No network I/O happens.
            TransportRejected: If the server refuses the connection, the
                login or the message, or the message cannot be built.
        """
        if self.transport is None:
            self.logger.error("Cannot notify about inquiry %s: transport not configured", inquiry.id)
            raise NotConfigured(self.missing)

        recipients = self.recipients
        self.logger.info("Sending notification for inquiry %s to %s", inquiry.id, ", ".join(recipients))
        try:
            message = self.compose(inquiry)
            accepted, rejected = await self.transport.send(
                message, sender=self.config.user or "", recipients=recipients
            )
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as exc:
            self.logger.error("Failed to send notification for inquiry %s: %s", inquiry.id, exc)
            raise TransportRejected(f"Mail server rejected notification: {exc}", cause=exc) from exc
        except Exception as exc:
            # compose and transport errors of any kind surface as TransportRejected
            self.logger.exception("Unexpected error notifying about inquiry %s", inquiry.id)
            raise TransportRejected(f"Could not send notification: {exc!r}", cause=exc) from exc

        result = DispatchResult(
            accepted=tuple(accepted),
            rejected=tuple(rejected),
            message_id=message["Message-ID"],
        )
        if rejected:
            self.logger.warning("Notification %s rejected for: %s", result.message_id, ", ".join(rejected))
        self.logger.info("Notification %s accepted for: %s", result.message_id, ", ".join(accepted))
        return result


__all__ = ["NotificationDispatcher", "Transport"]
