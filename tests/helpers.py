# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Helpers shared by the test modules: a capturing SMTP handler and addresses."""

from __future__ import annotations

import socket
from typing import Any

from aiosmtpd.smtp import AuthResult

SENDER = "notifications@urja.test"
ADMIN = "admin@urja.test"


def get_free_port() -> int:
    """Find a free port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        port = s.getsockname()[1]
    return port


class CapturingHandler:
    """SMTP handler that captures received messages."""

    def __init__(self):
        self.messages: list[dict[str, Any]] = []
        self.refused: set[str] = set()
        self.reject_data = False

    async def handle_RCPT(self, server, session, envelope, address, rcpt_options):
        """Handle RCPT TO command."""
        if address in self.refused:
            return "550 Mailbox not found"
        envelope.rcpt_tos.append(address)
        return "250 OK"

    async def handle_DATA(self, server, session, envelope):
        """Handle DATA command - capture the message."""
        if self.reject_data:
            return "554 Message rejected"
        self.messages.append({
            "session": session,
            "from": envelope.mail_from,
            "to": list(envelope.rcpt_tos),
            "data": envelope.content.decode("utf-8", errors="replace"),
        })
        return "250 Message accepted for delivery"


def accept_any_login(server, session, envelope, mechanism, auth_data):
    return AuthResult(success=True)
