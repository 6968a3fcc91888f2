# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP transport shared by every notification of the process.

The transport is built once from :class:`MailConfig` and holds only
immutable connection parameters and a TLS context. Each :meth:`send` opens
its own SMTP session, so concurrent sends never share a connection.

TLS policy:
- Port 465: implicit TLS from the first byte.
- Any other port: STARTTLS when the server advertises it, plain otherwise.
- TLS 1.2 is the minimum protocol version in every environment.
- Certificate and hostname checks are relaxed only outside production.

Example:
    Sending a prepared message::

        transport = SmtpTransport.from_config(mail_config)
        accepted, rejected = await transport.send(
            message,
            sender="notifications@example.com",
            recipients=["sales@example.com", "ops@example.com"],
        )
"""

from __future__ import annotations

import asyncio
import ssl
from collections.abc import Sequence
from email.message import EmailMessage

import aiosmtplib

from .config_loader import MailConfig
from .logger import get_logger

SECURE_SMTP_PORT = 465
MIN_TLS_VERSION = ssl.TLSVersion.TLSv1_2

logger = get_logger("SmtpTransport")


def build_tls_context(*, production: bool) -> ssl.SSLContext:
    """Create the TLS context used for implicit TLS and STARTTLS.

    Args:
        production: When False, certificate and hostname validation are
            disabled so that self-signed development relays work.

    Returns:
        An ``ssl.SSLContext`` that never negotiates below TLS 1.2.
    """
    context = ssl.create_default_context()
    context.minimum_version = MIN_TLS_VERSION
    if not production:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class SmtpTransport:
    """Connection parameters and TLS policy for one SMTP relay.

    Attributes:
        host: SMTP server hostname or IP address.
        port: SMTP server port.
        user: Login name, or None for no authentication.
        password: Login password, or None for no authentication.
        implicit_tls: True when the port selects implicit TLS.
        tls_context: SSL context shared by every session.
        timeout: Per-command timeout in seconds.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str | None = None,
        password: str | None = None,
        *,
        production: bool = False,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = int(port)
        self.user = user
        self.password = password
        self.implicit_tls = self.port == SECURE_SMTP_PORT
        self.tls_context = build_tls_context(production=production)
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: MailConfig) -> SmtpTransport:
        """Build a transport from a complete :class:`MailConfig`."""
        if not config.host or not config.port:
            raise ValueError("SMTP host and port are required to build a transport")
        return cls(
            config.host,
            config.port,
            config.user,
            config.password,
            production=config.production,
            timeout=config.timeout,
        )

    def _client(self) -> aiosmtplib.SMTP:
        """Create an unconnected SMTP client honouring the TLS policy."""
        if self.implicit_tls:
            # Direct TLS (implicit TLS) for port 465
            return aiosmtplib.SMTP(
                hostname=self.host,
                port=self.port,
                use_tls=True,
                start_tls=False,
                tls_context=self.tls_context,
                timeout=self.timeout,
            )
        # start_tls=None upgrades only when the server offers STARTTLS
        return aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            use_tls=False,
            start_tls=None,
            tls_context=self.tls_context,
            timeout=self.timeout,
        )

    async def send(
        self,
        message: EmailMessage,
        *,
        sender: str,
        recipients: Sequence[str],
    ) -> tuple[list[str], list[str]]:
        """Deliver one message in a fresh SMTP session.

        Args:
            message: The fully built message.
            sender: Envelope sender address.
            recipients: Envelope recipients, in order.

        Returns:
            Tuple of (accepted, rejected) recipient lists, in input order.

        Raises:
            aiosmtplib.SMTPException: If the server refuses the connection,
                the login, every recipient or the message data.
            OSError: On network failures.
            asyncio.TimeoutError: If the whole exchange takes too long.
        """
        smtp = self._client()

        async def _do_send() -> dict[str, aiosmtplib.SMTPResponse]:
            async with smtp:
                if self.user and self.password:
                    await smtp.login(self.user, self.password)
                errors, response = await smtp.send_message(
                    message, sender=sender, recipients=list(recipients)
                )
                logger.debug("SMTP server answered: %s", response)
                return errors

        # Bound the whole session, not just each command
        errors = await asyncio.wait_for(_do_send(), timeout=self.timeout + 5.0)
        accepted = [addr for addr in recipients if addr not in errors]
        rejected = [addr for addr in recipients if addr in errors]
        return accepted, rejected


__all__ = ["MIN_TLS_VERSION", "SECURE_SMTP_PORT", "SmtpTransport", "build_tls_context"]
