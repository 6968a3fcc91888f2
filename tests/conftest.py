# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: a capturing SMTP server, mail settings and a SQLite store."""

from __future__ import annotations

import pytest
import pytest_asyncio
from aiosmtpd.controller import Controller

from inquiry_service.config_loader import MailConfig
from inquiry_service.store import InquiryStore

from .helpers import ADMIN, SENDER, CapturingHandler, accept_any_login, get_free_port

ENV_VARS = (
    "INQUIRY_CONFIG",
    "DATABASE_URL",
    "DATABASE_POOL_SIZE",
    "DATABASE_POOL_TIMEOUT",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_TIMEOUT",
    "ADMIN_EMAIL",
    "CC_EMAIL",
    "MAIL_FROM_NAME",
    "MAIL_TIMEZONE",
    "APP_ENV",
    "INQUIRY_HOST",
    "INQUIRY_PORT",
    "INQUIRY_API_TOKEN",
    "INQUIRY_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and config.ini out of every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("INQUIRY_CONFIG", str(tmp_path / "absent.ini"))


@pytest.fixture
def smtp_handler():
    """Create a fresh SMTP handler."""
    return CapturingHandler()


@pytest.fixture
def smtp_server(smtp_handler):
    """Start a fake SMTP server with AUTH enabled on a free port."""
    port = get_free_port()
    controller = Controller(
        smtp_handler,
        hostname="127.0.0.1",
        port=port,
        authenticator=accept_any_login,
        auth_require_tls=False,
    )
    controller.start()
    yield controller, port
    controller.stop()


@pytest.fixture
def mail_config(smtp_server) -> MailConfig:
    _controller, port = smtp_server
    return MailConfig(
        host="127.0.0.1",
        port=port,
        user=SENDER,
        password="app-password",
        admin_email=ADMIN,
        cc_emails=("a@x.com", "b@x.com", "c@x.com"),
        timeout=5.0,
    )


@pytest.fixture
def unreachable_mail_config() -> MailConfig:
    return MailConfig(
        host="127.0.0.1",
        port=get_free_port(),
        user=SENDER,
        password="app-password",
        admin_email=ADMIN,
        timeout=2.0,
    )


@pytest.fixture
def draft() -> dict[str, str]:
    return {
        "name": "Asha Rao",
        "company": "Acme Foods",
        "email": "asha@acme.test",
        "phone": "+91 98765 43210",
        "requirement": "Rooftop solar for two plants\n40 kW each\n\nNeed a site visit",
    }


@pytest_asyncio.fixture
async def store(tmp_path):
    s = InquiryStore.from_url(f"sqlite:{tmp_path / 'inquiries.db'}")
    await s.init_db()
    yield s
    await s.close()


@pytest.fixture
def broken_store(tmp_path) -> InquiryStore:
    """A store whose database file can never be opened."""
    return InquiryStore.from_url(str(tmp_path / "no-such-dir" / "inquiries.db"))
