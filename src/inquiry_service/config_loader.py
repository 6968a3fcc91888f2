# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for the inquiry service.

Settings are read once per process from an optional INI file, with
environment variables as fallbacks, and returned as frozen dataclasses that
are injected into the store, the dispatcher and the HTTP layer.

Environment variables:
    INQUIRY_CONFIG - Path to config.ini file (default: config.ini)
    DATABASE_URL - Storage connection string (required to serve)
    DATABASE_POOL_SIZE - Maximum PostgreSQL connections (default: 10)
    DATABASE_POOL_TIMEOUT - Seconds to wait for a pooled connection (default: 30)
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS - SMTP server and credentials
    SMTP_TIMEOUT - SMTP timeout in seconds (default: 10)
    ADMIN_EMAIL - Address that receives every notification
    CC_EMAIL - Optional comma-separated list of additional recipients
    MAIL_FROM_NAME - Sender display name (default: Urja Contact Form)
    MAIL_TIMEZONE - Time zone used to print submission times (default: Asia/Kolkata)
    APP_ENV - "production" enables strict certificate validation
    INQUIRY_HOST, INQUIRY_PORT - HTTP bind address (default: 0.0.0.0:8000)
    INQUIRY_API_TOKEN - Token protecting the admin endpoints
    INQUIRY_LOG_LEVEL - Logging level (default: INFO)

Example:
    Configuration file format (config.ini)::

        [database]
        url = postgresql://inquiries:secret@db/inquiries
        pool_size = 10

        [smtp]
        host = smtp.zoho.in
        port = 465
        user = notifications@example.com
        password = app-password

        [notify]
        admin_email = sales@example.com
        cc_email = ops@example.com, founder@example.com

        [server]
        environment = production
        api_token = change-me
"""

from __future__ import annotations

import configparser
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigError
from .logger import get_logger

CONFIG_ENV_VAR = "INQUIRY_CONFIG"
DEFAULT_CONFIG_FILE = "config.ini"

DEFAULT_FROM_NAME = "Urja Contact Form"
DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_SMTP_TIMEOUT = 10.0

MIN_PORT = 1
MAX_PORT = 65535

PRODUCTION_ENVIRONMENTS = {"production", "prod"}

logger = get_logger("ConfigLoader")


def parse_cc_list(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated address list.

    Entries are trimmed, empty ones are dropped and duplicates keep their
    first position.

    Example:
        >>> parse_cc_list("a@x.com, b@x.com ,, c@x.com")
        ('a@x.com', 'b@x.com', 'c@x.com')
    """
    if not value:
        return ()
    addresses: list[str] = []
    for part in value.split(","):
        address = part.strip()
        if address and address not in addresses:
            addresses.append(address)
    return tuple(addresses)


@dataclass(frozen=True)
class MailConfig:
    """Everything the notification dispatcher needs.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port. 465 selects implicit TLS.
        user: SMTP login, also used as the sender address.
        password: SMTP password.
        admin_email: Primary recipient of every notification.
        cc_emails: Additional recipients, already parsed.
        production: Enables certificate and hostname validation.
        from_name: Display name of the sender.
        timezone: IANA zone used to print the submission time.
        timeout: SMTP timeout in seconds.
    """

    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    admin_email: str | None = None
    cc_emails: tuple[str, ...] = ()
    production: bool = False
    from_name: str = DEFAULT_FROM_NAME
    timezone: str = DEFAULT_TIMEZONE
    timeout: float = DEFAULT_SMTP_TIMEOUT

    # attribute name -> environment variable reported when missing
    REQUIRED_OPTIONS = (
        ("host", "SMTP_HOST"),
        ("port", "SMTP_PORT"),
        ("user", "SMTP_USER"),
        ("password", "SMTP_PASS"),
        ("admin_email", "ADMIN_EMAIL"),
    )

    def missing_options(self) -> list[str]:
        """Return the names of the required settings that are absent."""
        return [env_name for attr, env_name in self.REQUIRED_OPTIONS if not getattr(self, attr)]

    def invalid_options(self) -> list[str]:
        """Return the names of the settings that are present but unusable.

        A port outside 1-65535 or a time zone unknown to ``zoneinfo`` would
        only fail once a notification is being sent.
        """
        invalid = []
        if self.port and not MIN_PORT <= self.port <= MAX_PORT:
            invalid.append("SMTP_PORT")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            invalid.append("MAIL_TIMEZONE")
        return invalid

    @property
    def is_complete(self) -> bool:
        return not self.missing_options() and not self.invalid_options()


@dataclass(frozen=True)
class ServiceConfig:
    """Top level configuration for one service process."""

    database_url: str | None = None
    pool_size: int = 10
    pool_timeout: float = 30.0
    mail: MailConfig = field(default_factory=MailConfig)
    http_host: str = "0.0.0.0"
    http_port: int = 8000
    api_token: str | None = None
    log_level: str = "INFO"

    def require_database_url(self) -> str:
        """Return ``database_url`` or raise if storage is not configured."""
        if not self.database_url:
            raise ConfigError("DATABASE_URL must be set. Did you forget to provision a database?")
        return self.database_url


def _read_ini(config_path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    if not config_path.exists():
        return parser
    try:
        parser.read(config_path)
    except configparser.Error as exc:
        raise ConfigError(f"Configuration file is invalid: {config_path}") from exc
    return parser


def load_settings(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServiceConfig:
    """Load configuration from an INI file with environment variables as fallbacks.

    Values from the file win over the environment. Blank values count as
    absent. Numbers that fail to parse are logged and ignored.

    Args:
        config_path: Explicit INI path. Defaults to ``$INQUIRY_CONFIG`` or
            ``config.ini``; a missing file is not an error.
        environ: Environment mapping, ``os.environ`` when omitted.

    Returns:
        The resolved :class:`ServiceConfig`.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    env = os.environ if environ is None else environ
    path = Path(config_path or env.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)
    parser = _read_ini(path)

    def get(section: str, option: str, env_name: str) -> str | None:
        if parser.has_option(section, option):
            value = parser.get(section, option)
        else:
            value = env.get(env_name)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def get_int(section: str, option: str, env_name: str, default: int | None = None) -> int | None:
        value = get(section, option, env_name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer for %s: %r, ignoring it", env_name, value)
            return default

    def get_float(section: str, option: str, env_name: str, default: float) -> float:
        value = get(section, option, env_name)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid number for %s: %r, using default %s", env_name, value, default)
            return default

    environment = (get("server", "environment", "APP_ENV") or "development").lower()

    mail = MailConfig(
        host=get("smtp", "host", "SMTP_HOST"),
        port=get_int("smtp", "port", "SMTP_PORT"),
        user=get("smtp", "user", "SMTP_USER"),
        password=get("smtp", "password", "SMTP_PASS"),
        admin_email=get("notify", "admin_email", "ADMIN_EMAIL"),
        cc_emails=parse_cc_list(get("notify", "cc_email", "CC_EMAIL")),
        production=environment in PRODUCTION_ENVIRONMENTS,
        from_name=get("notify", "from_name", "MAIL_FROM_NAME") or DEFAULT_FROM_NAME,
        timezone=get("notify", "timezone", "MAIL_TIMEZONE") or DEFAULT_TIMEZONE,
        timeout=get_float("smtp", "timeout", "SMTP_TIMEOUT", DEFAULT_SMTP_TIMEOUT),
    )

    database_url = get("database", "url", "DATABASE_URL")
    if database_url and database_url.startswith("~"):
        database_url = os.path.expanduser(database_url)

    return ServiceConfig(
        database_url=database_url,
        pool_size=get_int("database", "pool_size", "DATABASE_POOL_SIZE", 10) or 10,
        pool_timeout=get_float("database", "pool_timeout", "DATABASE_POOL_TIMEOUT", 30.0),
        mail=mail,
        http_host=get("server", "host", "INQUIRY_HOST") or "0.0.0.0",
        http_port=get_int("server", "port", "INQUIRY_PORT", 8000) or 8000,
        api_token=get("server", "api_token", "INQUIRY_API_TOKEN"),
        log_level=(get("logging", "level", "INQUIRY_LOG_LEVEL") or "INFO").upper(),
    )


__all__ = [
    "DEFAULT_FROM_NAME",
    "DEFAULT_TIMEZONE",
    "MailConfig",
    "ServiceConfig",
    "load_settings",
    "parse_cc_list",
]
