import ssl
from email.message import EmailMessage

import pytest

from inquiry_service.config_loader import MailConfig
from inquiry_service.transport import MIN_TLS_VERSION, SmtpTransport, build_tls_context


class DummySMTP:
    refused: dict = {}

    def __init__(self, hostname, port, use_tls=False, start_tls=True, tls_context=None, timeout=None):
        self.hostname = hostname
        self.port = port
        self.use_tls = use_tls
        self.start_tls = start_tls
        self.tls_context = tls_context
        self.timeout = timeout
        self.login_credentials = None
        self.sent = []
        self.connected = False
        self.closed = False

    async def __aenter__(self):
        self.connected = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        return False

    async def login(self, user, password):
        self.login_credentials = (user, password)

    async def send_message(self, message, sender=None, recipients=None):
        self.sent.append({"message": message, "sender": sender, "recipients": recipients})
        return dict(self.refused), "250 OK"


@pytest.fixture
def patch_aiosmtplib(monkeypatch):
    created = []

    def factory(**kwargs):
        smtp = DummySMTP(**kwargs)
        created.append(smtp)
        return smtp

    monkeypatch.setattr("inquiry_service.transport.aiosmtplib.SMTP", factory)
    return created


def make_message():
    msg = EmailMessage()
    msg["Subject"] = "hello"
    msg.set_content("body")
    return msg


def test_tls_context_never_below_tls12():
    for production in (True, False):
        context = build_tls_context(production=production)
        assert context.minimum_version == MIN_TLS_VERSION == ssl.TLSVersion.TLSv1_2


def test_tls_context_strict_in_production():
    context = build_tls_context(production=True)
    assert context.check_hostname is True
    assert context.verify_mode == ssl.CERT_REQUIRED


def test_tls_context_relaxed_outside_production():
    context = build_tls_context(production=False)
    assert context.check_hostname is False
    assert context.verify_mode == ssl.CERT_NONE


@pytest.mark.asyncio
async def test_port_465_uses_implicit_tls(patch_aiosmtplib):
    transport = SmtpTransport("smtp.zoho.in", 465, "user@urja.test", "pw", production=True)
    await transport.send(make_message(), sender="user@urja.test", recipients=["admin@urja.test"])

    smtp = patch_aiosmtplib[0]
    assert transport.implicit_tls is True
    assert smtp.use_tls is True
    assert smtp.start_tls is False
    assert smtp.tls_context is transport.tls_context
    assert smtp.tls_context.verify_mode == ssl.CERT_REQUIRED


@pytest.mark.asyncio
async def test_other_ports_use_opportunistic_starttls(patch_aiosmtplib):
    transport = SmtpTransport("smtp.local", 587, "user@urja.test", "pw")
    await transport.send(make_message(), sender="user@urja.test", recipients=["admin@urja.test"])

    smtp = patch_aiosmtplib[0]
    assert transport.implicit_tls is False
    assert smtp.use_tls is False
    assert smtp.start_tls is None
    assert smtp.tls_context.minimum_version == ssl.TLSVersion.TLSv1_2


@pytest.mark.asyncio
async def test_send_logs_in_and_splits_recipients(monkeypatch, patch_aiosmtplib):
    monkeypatch.setattr(DummySMTP, "refused", {"gone@urja.test": (550, "no such user")})
    transport = SmtpTransport("smtp.local", 587, "user@urja.test", "pw")
    recipients = ["admin@urja.test", "gone@urja.test", "ops@urja.test"]

    accepted, rejected = await transport.send(make_message(), sender="user@urja.test", recipients=recipients)

    smtp = patch_aiosmtplib[0]
    assert smtp.login_credentials == ("user@urja.test", "pw")
    assert smtp.sent[0]["recipients"] == recipients
    assert smtp.sent[0]["sender"] == "user@urja.test"
    assert smtp.closed is True
    assert accepted == ["admin@urja.test", "ops@urja.test"]
    assert rejected == ["gone@urja.test"]


@pytest.mark.asyncio
async def test_send_without_credentials_skips_login(patch_aiosmtplib):
    transport = SmtpTransport("smtp.local", 25)
    await transport.send(make_message(), sender="noreply@urja.test", recipients=["admin@urja.test"])
    assert patch_aiosmtplib[0].login_credentials is None


@pytest.mark.asyncio
async def test_each_send_opens_its_own_session(patch_aiosmtplib):
    transport = SmtpTransport("smtp.local", 587, "user@urja.test", "pw")
    for _ in range(2):
        await transport.send(make_message(), sender="user@urja.test", recipients=["admin@urja.test"])

    assert len(patch_aiosmtplib) == 2
    assert patch_aiosmtplib[0] is not patch_aiosmtplib[1]


def test_from_config():
    config = MailConfig(host="smtp.zoho.in", port=465, user="u@urja.test", password="pw", timeout=3.0)
    transport = SmtpTransport.from_config(config)

    assert (transport.host, transport.port, transport.timeout) == ("smtp.zoho.in", 465, 3.0)
    assert transport.implicit_tls is True


def test_from_config_requires_host_and_port():
    with pytest.raises(ValueError):
        SmtpTransport.from_config(MailConfig(host="smtp.local"))
